from typing import Any, Optional, Tuple
import datetime as dt
import logging
import os

import numpy as np
import pandas as pd

from models.common_models import SheetInfo
from models.dataset_models import Dataset

logger = logging.getLogger(__name__)


def _to_scalar(value: Any) -> Any:
    """Convert a pandas cell into a plain Python scalar (number, str, bool or None)."""
    if value is None:
        return None
    if isinstance(value, (pd.Timestamp, dt.datetime, dt.date)):
        return None if pd.isna(value) else value.isoformat()
    if isinstance(value, np.generic):
        value = value.item()
    if isinstance(value, float) and np.isnan(value):
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, (bool, int, float)):
        return value
    return None if pd.isna(value) else str(value)


def read_frame(file_path: str, sheet_name: Optional[str] = None) -> Tuple[pd.DataFrame, str]:
    ext = os.path.splitext(file_path)[1].lower()
    if ext == ".csv":
        return pd.read_csv(file_path), "csv"

    xls = pd.ExcelFile(file_path)
    if not xls.sheet_names:
        raise ValueError("Uploaded file has no sheets.")
    # The first worksheet is the dataset unless one is named
    name = sheet_name or xls.sheet_names[0]
    if name not in xls.sheet_names:
        raise KeyError(f"Sheet '{name}' not found.")
    return xls.parse(name), name


def frame_to_dataset(df: pd.DataFrame) -> Dataset:
    # Rows with no cell at all are dropped
    df = df.dropna(how="all")
    columns = [str(c) for c in df.columns]
    records = (
        {col: _to_scalar(value) for col, value in zip(columns, row)}
        for row in df.itertuples(index=False, name=None)
    )
    return Dataset.from_records(records, columns=columns)


def load_dataset(file_path: str, sheet_name: Optional[str] = None) -> Tuple[Dataset, SheetInfo]:
    """
    Read a spreadsheet into an immutable Dataset snapshot.
    Returns the dataset plus metadata for the loaded sheet.
    """
    df, loaded_sheet = read_frame(file_path, sheet_name)
    dataset = frame_to_dataset(df)

    if not dataset.columns:
        raise ValueError("No columns found in the file.")
    if len(dataset) == 0:
        raise ValueError("No data rows found in the file.")

    logger.info(
        "Loaded %s (sheet %s): %d rows x %d cols",
        os.path.basename(file_path), loaded_sheet, len(dataset), len(dataset.columns),
    )
    return dataset, SheetInfo(
        sheet_name=loaded_sheet,
        n_rows=len(dataset),
        n_cols=len(dataset.columns),
        columns=list(dataset.columns),
    )
