from typing import Any, Dict, List, Mapping, Optional, Sequence
import io
import base64
import logging
import math
import warnings

import pandas as pd
import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt
import seaborn as sns

from models.common_models import ChartConfig
from .coercion import to_number

warnings.filterwarnings("ignore", category=UserWarning)

logger = logging.getLogger(__name__)

# Pie slices cycle through this palette by position
CHART_COLORS = [
    "#4f46e5",
    "#0ea5e9",
    "#14b8a6",
    "#8884d8",
    "#82ca9d",
    "#ffc658",
    "#ff7300",
    "#00c49f",
]


def slice_colors(count: int) -> List[str]:
    return [CHART_COLORS[i % len(CHART_COLORS)] for i in range(count)]


def _number_or_zero(value: Any) -> float:
    number = to_number(value)
    return 0.0 if math.isnan(number) else number


def prepare_chart_data(config: ChartConfig, rows: Sequence[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    """
    Apply the chart's filters, then its aggregation.

    Filters are an AND of per-field equality. Any aggregation other than
    "none" groups by the x-axis value and reduces the y-axis per group.
    """
    data = [dict(row) for row in rows]

    for field, required in (config.filters or {}).items():
        data = [item for item in data if item.get(field) == required]

    if not config.aggregation or config.aggregation == "none":
        return data

    x, y = config.x_axis, config.y_axis
    groups: Dict[Any, List[Dict[str, Any]]] = {}
    for item in data:
        groups.setdefault(item.get(x), []).append(item)

    records = []
    for key, items in groups.items():
        if config.aggregation == "count":
            value = len(items)
        else:
            total = sum(_number_or_zero(item.get(y)) for item in items)
            value = total if config.aggregation == "sum" else total / len(items)
        records.append({x: key, y: value})
    return records


def render_chart(config: ChartConfig, data: Sequence[Mapping[str, Any]]) -> Optional[str]:
    """
    Draw prepared chart data and return a base64-encoded PNG string.
    Returns None if an error occurs.
    """
    x, y = config.x_axis, config.y_axis
    df = pd.DataFrame(list(data))

    if df.empty or x not in df.columns or y not in df.columns:
        logger.warning("Chart %r skipped: columns %s/%s not in prepared data", config.title, x, y)
        return None

    logger.debug("Rendering %s chart %r (x=%s, y=%s, %d points)", config.type, config.title, x, y, len(df))

    fig, ax = plt.subplots(figsize=(8, 5))

    try:
        if config.type == "bar":
            sns.barplot(data=df, x=x, y=y, ax=ax, color=CHART_COLORS[0], errorbar=None)

        elif config.type == "line":
            sns.lineplot(data=df, x=x, y=y, ax=ax, color=CHART_COLORS[0], errorbar=None)

        elif config.type == "scatter":
            sns.scatterplot(data=df, x=x, y=y, ax=ax, color=CHART_COLORS[0])

        elif config.type == "pie":
            values = [_number_or_zero(v) for v in df[y]]
            ax.pie(values, labels=[str(label) for label in df[x]], colors=slice_colors(len(values)), autopct="%1.1f%%")
            ax.axis("equal")

        ax.set_title(config.title)

        buffer = io.BytesIO()
        fig.tight_layout()
        fig.savefig(buffer, format="png")
        buffer.seek(0)
        return base64.b64encode(buffer.read()).decode("utf-8")

    except Exception:
        logger.exception("Chart rendering failed for %r", config.title)
        return None

    finally:
        plt.close(fig)
