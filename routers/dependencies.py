import logging
import os

from fastapi import HTTPException, Request
from sqlalchemy.orm import Session

from models.dataset_models import Dataset
from services.excel_reader_service import load_dataset
from services.llm_service import LLMService
from services.session_service import DatasetStore, get_session

logger = logging.getLogger(__name__)


def get_dataset_store(request: Request) -> DatasetStore:
    return request.app.state.datasets


def get_llm_service(request: Request) -> LLMService:
    return request.app.state.llm


def load_session_dataset(session_id: str, db: Session, store: DatasetStore) -> Dataset:
    session = get_session(db, session_id)
    if not session:
        raise HTTPException(status_code=404, detail="Session not found.")

    dataset = store.get(session_id)
    if dataset is not None:
        return dataset

    # Session row outlived the process: reload the snapshot from the saved file
    if not os.path.exists(session.file_path):
        raise HTTPException(status_code=410, detail="Uploaded file is no longer available.")

    logger.info("Reloading dataset for session %s from %s", session_id, session.file_path)
    dataset, _ = load_dataset(session.file_path, session.sheet_name)
    store.put(session_id, dataset)
    return dataset
