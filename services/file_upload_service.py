import logging
import os
import uuid
from fastapi import UploadFile

from config import UPLOAD_DIR

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = [".xlsx", ".xls", ".csv"]


def save_uploaded_file(file: UploadFile) -> str:
    """
    Save the uploaded spreadsheet under a fresh unique name.
    Uploads are never shared, even when two files have the same name.
    """
    ext = os.path.splitext(file.filename or "")[1].lower()
    if ext not in ALLOWED_EXTENSIONS:
        raise ValueError("Only spreadsheet files (.xlsx, .xls, .csv) are supported.")

    unique_name = f"{uuid.uuid4().hex}{ext}"
    file_path = os.path.join(UPLOAD_DIR, unique_name)

    with open(file_path, "wb") as f:
        f.write(file.file.read())

    logger.info("Saved upload %s as %s", file.filename, unique_name)
    return file_path
