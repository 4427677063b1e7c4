import logging
import uuid
from fastapi import APIRouter, Depends, UploadFile, File, HTTPException
from sqlalchemy.orm import Session

from routers.dependencies import get_dataset_store
from services.excel_reader_service import load_dataset
from services.file_upload_service import save_uploaded_file
from services.session_service import DatasetStore, create_session, get_db

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/upload", tags=["upload"])

@router.post("/excel")
def upload_excel(
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    store: DatasetStore = Depends(get_dataset_store),
):
    try:
        file_path = save_uploaded_file(file)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    try:
        dataset, sheet_info = load_dataset(file_path)
    except (ValueError, KeyError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception("Failed to parse %s", file.filename)
        raise HTTPException(status_code=400, detail=f"Failed to parse file: {e}")

    session_id = uuid.uuid4().hex

    create_session(
        db,
        session_id=session_id,
        file_path=file_path,
        file_name=file.filename,
        sheet_name=sheet_info.sheet_name,
        n_rows=sheet_info.n_rows,
        n_cols=sheet_info.n_cols,
    )
    store.put(session_id, dataset)

    return {
        "session_id": session_id,
        "file_name": file.filename,
        "sheet": sheet_info.sheet_name,
        "n_rows": sheet_info.n_rows,
        "n_cols": sheet_info.n_cols,
        "columns": sheet_info.columns,
    }
