from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from models.common_models import (
    DataSummary,
    DigestRequest,
    PreviewRequest,
    QueryRequest,
    QueryResult,
    SummaryRequest,
)
from routers.dependencies import get_dataset_store, load_session_dataset
from services.preview_service import get_preview_rows
from services.query_engine import QueryEngine
from services.session_service import DatasetStore, get_db
from services.summary_service import generate_summary, render_digest

router = APIRouter(prefix="/data", tags=["data"])

@router.post("/preview")
def preview_data(
    req: PreviewRequest,
    db: Session = Depends(get_db),
    store: DatasetStore = Depends(get_dataset_store),
):
    dataset = load_session_dataset(req.session_id, db, store)
    return get_preview_rows(dataset, req.n_rows)

@router.post("/summary", response_model=DataSummary)
def summary_data(
    req: SummaryRequest,
    db: Session = Depends(get_db),
    store: DatasetStore = Depends(get_dataset_store),
):
    dataset = load_session_dataset(req.session_id, db, store)
    return generate_summary(dataset, sample_size=req.sample_size)

@router.post("/digest")
def digest_data(
    req: DigestRequest,
    db: Session = Depends(get_db),
    store: DatasetStore = Depends(get_dataset_store),
):
    dataset = load_session_dataset(req.session_id, db, store)
    return {"digest": render_digest(dataset)}

@router.post("/query", response_model=QueryResult)
def query_data(
    req: QueryRequest,
    db: Session = Depends(get_db),
    store: DatasetStore = Depends(get_dataset_store),
):
    dataset = load_session_dataset(req.session_id, db, store)
    return QueryEngine(dataset).execute(req.query_type, req.params)
