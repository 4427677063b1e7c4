from typing import Optional
import json
import logging

from config import CONTEXT_SAMPLE_ROWS, DIGEST_MAX_COLUMNS, LARGE_DATASET_THRESHOLD
from models.common_models import DataSummary
from models.dataset_models import Dataset
from .coercion import stringify
from .stats_service import profile_column, profile_dataset

logger = logging.getLogger(__name__)

QUESTION_GUIDANCE = """IMPORTANT: For detailed analysis on large datasets, guide the user to ask specific questions like:
- "Show me top 10 records by [column]"
- "Filter data where [column] > [value]"
- "Group by [column] and count"
- "Sort by [column] desc"
- "Show statistics for [column]"

This approach allows precise analysis without sending every row."""


def generate_summary(dataset: Dataset, sample_size: int = 10) -> DataSummary:
    """Full profile of the dataset plus its first `sample_size` rows."""
    return DataSummary(
        total_rows=len(dataset),
        total_columns=len(dataset.columns),
        column_info=profile_dataset(dataset),
        sample_data=dataset.head(sample_size),
    )


def render_digest(dataset: Dataset, max_columns: Optional[int] = None) -> str:
    """
    Compact text digest used as model context instead of raw rows:
    the column list, then type / non-null / unique counts per column,
    with min / max / mean for numeric columns.
    """
    if max_columns is None:
        max_columns = DIGEST_MAX_COLUMNS

    lines = [f"Columns: {', '.join(dataset.columns)}"]

    for col in dataset.columns[:max_columns]:
        profile = profile_column(dataset, col)
        lines.append("")
        lines.append(f"{col}:")
        lines.append(f"  - Type: {profile.inferred_type}")
        lines.append(f"  - Non-null values: {profile.non_null_count}")
        lines.append(f"  - Unique values: {profile.unique_count}")

        stats = profile.numeric_stats
        if stats is not None:
            lines.append(f"  - Min: {stringify(stats.min)}")
            lines.append(f"  - Max: {stringify(stats.max)}")
            lines.append(f"  - Average: {stats.mean:.2f}")
        else:
            samples = ", ".join(stringify(v) for v in profile.sample_values[:3])
            lines.append(f"  - Sample values: {samples}")

    return "\n".join(lines)


def build_dataset_context(dataset: Dataset) -> str:
    if len(dataset) == 0:
        return f"Dataset context:\n- Total rows: 0\n- Columns: {', '.join(dataset.columns)}"

    if len(dataset) > LARGE_DATASET_THRESHOLD:
        logger.info("Dataset has %d rows, sending digest instead of rows", len(dataset))
        return (
            f"Large Dataset Summary ({len(dataset)} rows):\n"
            f"{render_digest(dataset)}\n\n"
            f"{QUESTION_GUIDANCE}"
        )

    sample = dataset.head(min(CONTEXT_SAMPLE_ROWS, len(dataset)))
    return (
        "Dataset context:\n"
        f"- Total rows: {len(dataset)}\n"
        f"- Columns: {', '.join(dataset.columns)}\n"
        f"- Sample rows: {json.dumps(sample, indent=2, default=str)}"
    )
