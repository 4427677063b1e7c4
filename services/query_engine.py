from typing import Any, Callable, Dict, List, Mapping, Optional
import logging
import math
import numbers

import pandas as pd

from config import MAX_GROUP_ROWS, MAX_LISTING_ROWS
from models.common_models import QueryResult
from models.dataset_models import Dataset
from models.query_models import (
    PARAMS_BY_KIND,
    AggregateParams,
    CorrelationParams,
    FilterParams,
    GroupByParams,
    QueryKind,
    QueryParams,
    QuerySpec,
    SortParams,
    TopNParams,
)
from .coercion import stringify, to_number

logger = logging.getLogger(__name__)

# aggregate() output key per requested function
AGGREGATE_LABELS = {
    "count": "count",
    "sum": "sum",
    "avg": "average",
    "max": "maximum",
    "min": "minimum",
}


def _numeric_values(rows, column: str) -> pd.Series:
    values = pd.Series([to_number(row.get(column)) for row in rows], dtype="float64")
    return values.dropna()


def _reduce(values: pd.Series, function: str) -> Optional[float]:
    if function == "count":
        return int(values.count())
    if function == "sum":
        return float(values.sum())
    if values.empty:
        return None
    if function == "avg":
        return float(values.mean())
    if function == "max":
        return float(values.max())
    if function == "min":
        return float(values.min())
    return None


def _values_equal(stored: Any, given: Any) -> bool:
    """
    Explicit `equals` semantics: numeric comparison when both sides are
    numeric, otherwise exact comparison of the stored value's string form.
    """
    if stored is None or given is None:
        return False
    left, right = to_number(stored), to_number(given)
    if not math.isnan(left) and not math.isnan(right):
        return left == right
    return stringify(stored) == stringify(given)


def _sort_key(value: Any):
    # numbers (and booleans) before strings
    if isinstance(value, numbers.Number):
        return (0, float(value), "")
    return (1, 0.0, str(value))


class QueryEngine:
    """Runs structured queries against one immutable dataset snapshot."""

    def __init__(
        self,
        dataset: Dataset,
        listing_limit: Optional[int] = MAX_LISTING_ROWS,
        group_limit: Optional[int] = MAX_GROUP_ROWS,
    ):
        self.dataset = dataset
        self.listing_limit = listing_limit
        self.group_limit = group_limit
        self._handlers: Dict[QueryKind, Callable[[Any], QueryResult]] = {
            QueryKind.FILTER: self.filter,
            QueryKind.GROUP_BY: self.group_by,
            QueryKind.SORT: self.sort,
            QueryKind.AGGREGATE: self.aggregate,
            QueryKind.CORRELATION: self.correlation,
            QueryKind.TOP_N: self.top_n,
        }

    # ---------------- dispatch ----------------

    def execute(self, query_type: str, params: Optional[Mapping[str, Any]] = None) -> QueryResult:
        """Never raises: unknown kinds and bad params come back as empty results."""
        try:
            kind = QueryKind(query_type)
        except ValueError:
            logger.warning("Unknown query type: %r", query_type)
            return QueryResult(description="Unknown query type", rows=[])

        try:
            typed = PARAMS_BY_KIND[kind].model_validate(dict(params or {}))
        except (ValueError, TypeError) as e:
            logger.warning("Invalid parameters for %s: %s", kind.value, e)
            return QueryResult(description=f"Invalid parameters for {kind.value}", rows=[])

        return self._run(kind, typed)

    def execute_spec(self, spec: QuerySpec) -> QueryResult:
        return self._run(spec.kind, spec.params)

    def _run(self, kind: QueryKind, params: QueryParams) -> QueryResult:
        try:
            result = self._handlers[kind](params)
        except Exception:
            logger.exception("Query %s failed with params %s", kind.value, params)
            return QueryResult(description=f"Query {kind.value} failed", rows=[])
        logger.info("Executed %s query: %s (%d rows)", kind.value, result.description, len(result.rows))
        return result

    def _cap(self, rows: List[Dict[str, Any]], limit: Optional[int]) -> List[Dict[str, Any]]:
        return rows if limit is None else rows[:limit]

    # ---------------- operations ----------------

    def filter(self, params: FilterParams) -> QueryResult:
        column, operator, value = params.column, params.operator, params.value

        if operator == "equals":

            def keep(row):
                return _values_equal(row.get(column), value)
        elif operator in ("greater", "less"):
            threshold = to_number(value)

            def keep(row):
                number = to_number(row.get(column))
                if math.isnan(number) or math.isnan(threshold):
                    return False
                return number > threshold if operator == "greater" else number < threshold
        else:
            needle = stringify(value).lower() if value is not None else ""

            def keep(row):
                stored = row.get(column)
                return stored is not None and needle in stringify(stored).lower()

        matched = [dict(row) for row in self.dataset.rows if keep(row)]
        return QueryResult(
            description=f"Filtered {len(matched)} rows where {column} {operator} {value}",
            rows=self._cap(matched, self.listing_limit),
        )

    def _groups(self, column: str) -> Dict[Optional[str], List[Mapping[str, Any]]]:
        groups: Dict[Optional[str], List[Mapping[str, Any]]] = {}
        for row in self.dataset.rows:
            raw = row.get(column)
            # nulls share one group keyed by None
            key = None if raw is None else stringify(raw)
            groups.setdefault(key, []).append(row)
        return groups

    def _group_records(
        self, column: str, aggregate_column: Optional[str] = None, function: str = "count"
    ) -> List[Dict[str, Any]]:
        records = []
        for key, items in self._groups(column).items():
            record: Dict[str, Any] = {column: key, "count": len(items)}
            if aggregate_column and function != "count":
                values = _numeric_values(items, aggregate_column)
                record[f"{function}_{aggregate_column}"] = _reduce(values, function)
            records.append(record)
        return records

    def group_by(self, params: GroupByParams) -> QueryResult:
        records = self._group_records(
            params.column, params.aggregate_column, params.aggregate_function
        )

        description = f"Grouped by {params.column} with {params.aggregate_function}"
        if params.aggregate_column:
            description += f" of {params.aggregate_column}"
        return QueryResult(description=description, rows=self._cap(records, self.group_limit))

    def sort(self, params: SortParams) -> QueryResult:
        column, direction = params.column, params.direction

        present = [row for row in self.dataset.rows if row.get(column) is not None]
        missing = [row for row in self.dataset.rows if row.get(column) is None]
        ordered = sorted(
            present,
            key=lambda row: _sort_key(row[column]),
            reverse=(direction == "desc"),
        )

        rows = [dict(row) for row in ordered + missing]
        return QueryResult(
            description=f"Sorted by {column} in {direction}ending order",
            rows=self._cap(rows, self.listing_limit),
        )

    def aggregate(self, params: AggregateParams) -> QueryResult:
        values = _numeric_values(self.dataset.rows, params.column)

        result: Dict[str, Any] = {}
        for function in params.functions:
            result[AGGREGATE_LABELS[function]] = _reduce(values, function)

        return QueryResult(description=f"Aggregated statistics for {params.column}", rows=[result])

    def correlation(self, params: CorrelationParams) -> QueryResult:
        column1, column2 = params.column1, params.column2

        pairs = []
        for row in self.dataset.rows:
            x, y = to_number(row.get(column1)), to_number(row.get(column2))
            if not math.isnan(x) and not math.isnan(y):
                pairs.append((x, y))

        n = len(pairs)
        sum_x = sum(x for x, _ in pairs)
        sum_y = sum(y for _, y in pairs)
        sum_xy = sum(x * y for x, y in pairs)
        sum_x2 = sum(x * x for x, _ in pairs)
        sum_y2 = sum(y * y for _, y in pairs)

        numerator = n * sum_xy - sum_x * sum_y
        denominator_sq = (n * sum_x2 - sum_x ** 2) * (n * sum_y2 - sum_y ** 2)
        correlation = numerator / math.sqrt(denominator_sq) if denominator_sq > 0 else 0.0

        if n == 0:
            logger.info("No numeric pairs between %s and %s", column1, column2)

        return QueryResult(
            description=f"Correlation between {column1} and {column2}",
            rows=[
                {
                    "column1": column1,
                    "column2": column2,
                    "correlation": correlation,
                    "sampleSize": n,
                }
            ],
        )

    def top_n(self, params: TopNParams) -> QueryResult:
        sort_by = params.sort_by

        def rank(record):
            score = to_number(record.get(sort_by))
            # non-numeric scores sink to the end
            return (0, -score) if not math.isnan(score) else (1, 0.0)

        ranked = sorted(self._group_records(params.column), key=rank)
        return QueryResult(
            description=f"Top {params.n} values in {params.column}",
            rows=self._cap(ranked[: params.n], self.group_limit),
        )
