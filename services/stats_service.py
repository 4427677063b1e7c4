from typing import Any, Dict, List
import logging
import warnings

import pandas as pd

from models.common_models import ColumnProfile, NumericStats
from models.dataset_models import Dataset
from .coercion import is_missing, stringify, to_number

logger = logging.getLogger(__name__)

BOOLEAN_TOKENS = {"true", "false", "0", "1", "yes", "no"}
MAX_SAMPLE_VALUES = 5


def _is_number_like(value: Any) -> bool:
    # Real booleans are left for the boolean check
    if isinstance(value, bool):
        return False
    return not pd.isna(to_number(value))


def _any_parses_as_date(values: List[Any]) -> bool:
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", category=UserWarning)
        parsed = pd.to_datetime(
            pd.Series([str(v) for v in values], dtype="object"),
            errors="coerce",
            format="mixed",
        )
    return bool(parsed.notna().any())


def infer_column_type(values: List[Any], distinct: List[Any]) -> str:
    """Order matters: numeric, then boolean, then date, else text."""
    if all(_is_number_like(v) for v in values):
        return "numeric"
    if all(stringify(v).lower() in BOOLEAN_TOKENS for v in distinct):
        return "boolean"
    if values and _any_parses_as_date(values):
        return "date"
    return "text"


def compute_numeric_stats(values: List[Any]) -> NumericStats:
    series = pd.Series([to_number(v) for v in values], dtype="float64")
    ordered = sorted(series.tolist())
    return NumericStats(
        min=float(series.min()),
        max=float(series.max()),
        mean=float(series.mean()),
        # upper-middle element for even counts, no averaging
        median=float(ordered[len(ordered) // 2]),
        std_dev=float(series.std(ddof=0)),
    )


def profile_column(dataset: Dataset, column: str) -> ColumnProfile:
    values = [v for v in dataset.column_values(column) if not is_missing(v)]
    distinct = list(dict.fromkeys(values))

    inferred = infer_column_type(values, distinct)

    profile = ColumnProfile(
        name=column,
        inferred_type=inferred,
        non_null_count=len(values),
        unique_count=len(distinct),
        sample_values=distinct[:MAX_SAMPLE_VALUES],
    )
    if inferred == "numeric" and values:
        profile.numeric_stats = compute_numeric_stats(values)
    return profile


def profile_dataset(dataset: Dataset) -> Dict[str, ColumnProfile]:
    profiles = {col: profile_column(dataset, col) for col in dataset.columns}
    logger.debug(
        "Profiled %d columns: %s",
        len(profiles),
        {name: p.inferred_type for name, p in profiles.items()},
    )
    return profiles
