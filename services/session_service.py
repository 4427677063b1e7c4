from collections import OrderedDict
from typing import Optional
import logging
import threading

from sqlalchemy.orm import Session

from config import MAX_CACHED_DATASETS
from database import SessionLocal
from models.dataset_models import Dataset
from models.session_db_model import SessionDB
from models.session_models import SessionData

logger = logging.getLogger(__name__)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_session(
    db: Session,
    session_id: str,
    file_path: str,
    file_name: str,
    sheet_name: str,
    n_rows: int,
    n_cols: int,
    meta: Optional[dict] = None,
) -> SessionData:
    session = SessionDB(
        session_id=session_id,
        file_path=file_path,
        file_name=file_name,
        sheet_name=sheet_name,
        n_rows=n_rows,
        n_cols=n_cols,
        meta=meta or {},
    )
    db.add(session)
    db.commit()
    db.refresh(session)
    logger.info("Created session %s for %s", session_id, file_name)
    return SessionData.model_validate(session)


def get_session(db: Session, session_id: str) -> Optional[SessionData]:
    session = db.query(SessionDB).filter(SessionDB.session_id == session_id).first()
    return SessionData.model_validate(session) if session else None


class DatasetStore:
    """
    Dataset snapshots per session. One instance is owned by the app and
    handed to routes explicitly; snapshots are replaced, never mutated.

    Holds at most `max_datasets` snapshots and evicts the least recently
    used one. Evicted sessions reload from their saved file on next use.
    """

    def __init__(self, max_datasets: Optional[int] = MAX_CACHED_DATASETS):
        self.max_datasets = max_datasets
        self._datasets: "OrderedDict[str, Dataset]" = OrderedDict()
        self._lock = threading.Lock()

    def put(self, session_id: str, dataset: Dataset) -> None:
        with self._lock:
            self._datasets[session_id] = dataset
            self._datasets.move_to_end(session_id)
            while self.max_datasets is not None and len(self._datasets) > self.max_datasets:
                evicted, _ = self._datasets.popitem(last=False)
                logger.info("Evicted dataset for session %s", evicted)

    def get(self, session_id: str) -> Optional[Dataset]:
        with self._lock:
            dataset = self._datasets.get(session_id)
            if dataset is not None:
                self._datasets.move_to_end(session_id)
            return dataset

    def drop(self, session_id: str) -> None:
        with self._lock:
            self._datasets.pop(session_id, None)

    def __contains__(self, session_id: str) -> bool:
        with self._lock:
            return session_id in self._datasets

    def __len__(self) -> int:
        with self._lock:
            return len(self._datasets)
