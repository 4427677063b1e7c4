"""
Maps a free-text question to a structured QuerySpec with a fixed,
ordered list of regex matchers. The first matcher that fires wins.
"""
from typing import Callable, List, Optional, Sequence
import logging
import re

from models.query_models import QueryKind, QuerySpec

logger = logging.getLogger(__name__)

# trailing punctuation; "." is kept so decimal values survive
_END = r"\s*[?!]*\s*$"
_END_COLUMN = r"\s*[?!.]*\s*$"

FILTER_RE = re.compile(r"\bwhere\s+(.+?)\s*(>|<|=|\bcontains\b)\s*(.+?)" + _END, re.I)
GROUP_BY_RE = re.compile(r"\bgroup(?:ed)?\s+by\s+(.+?)(?:\s+and\s+.*)?" + _END_COLUMN, re.I)
TOP_N_RE = re.compile(r"\btop\s+(\d+)\b(?:\s+\w+)*?\s+(?:by|in|of|for)\s+(.+?)" + _END_COLUMN, re.I)
SORT_RE = re.compile(
    r"\b(?:sort|order)(?:ed)?\b(?:\s+\w+){0,3}?\s+by\s+(.+?)(?:\s+(asc|desc)(?:ending)?)?" + _END_COLUMN, re.I
)
AGGREGATE_RE = re.compile(
    r"\b(?:statistics|stats|summary|aggregate)\s+(?:for|of|on)\s+(.+?)" + _END_COLUMN, re.I
)

OPERATORS = {">": "greater", "<": "less", "=": "equals"}
DEFAULT_AGGREGATES = ["count", "avg", "min", "max", "sum"]

Matcher = Callable[[str, Callable[[str], str]], Optional[QuerySpec]]


def _match_filter(text: str, resolve) -> Optional[QuerySpec]:
    m = FILTER_RE.search(text)
    if not m:
        return None
    column, symbol, value = m.groups()
    return QuerySpec.build(
        QueryKind.FILTER,
        column=resolve(column),
        operator=OPERATORS.get(symbol.lower(), "contains"),
        value=value.strip(),
    )


def _match_group_by(text: str, resolve) -> Optional[QuerySpec]:
    m = GROUP_BY_RE.search(text)
    if not m:
        return None
    return QuerySpec.build(QueryKind.GROUP_BY, column=resolve(m.group(1)))


def _match_top_n(text: str, resolve) -> Optional[QuerySpec]:
    m = TOP_N_RE.search(text)
    if not m:
        return None
    return QuerySpec.build(QueryKind.TOP_N, n=int(m.group(1)), column=resolve(m.group(2)))


def _match_sort(text: str, resolve) -> Optional[QuerySpec]:
    m = SORT_RE.search(text)
    if not m:
        return None
    column, direction = m.groups()
    return QuerySpec.build(QueryKind.SORT, column=resolve(column), direction=(direction or "asc").lower())


def _match_aggregate(text: str, resolve) -> Optional[QuerySpec]:
    m = AGGREGATE_RE.search(text)
    if not m:
        return None
    return QuerySpec.build(
        QueryKind.AGGREGATE, column=resolve(m.group(1)), functions=list(DEFAULT_AGGREGATES)
    )


MATCHERS: List[Matcher] = [
    _match_filter,
    _match_group_by,
    _match_top_n,
    _match_sort,
    _match_aggregate,
]


def _column_resolver(columns: Optional[Sequence[str]]) -> Callable[[str], str]:
    lookup = {c.lower(): c for c in columns or []}

    def resolve(name: str) -> str:
        name = name.strip().lower()
        return lookup.get(name, name)

    return resolve


def classify_question(text: str, columns: Optional[Sequence[str]] = None) -> Optional[QuerySpec]:
    """
    Return the structured query for `text`, or None when no pattern matches.

    Matching ignores case. Captured column names are lower-cased, or mapped
    back to the dataset's own spelling when `columns` is given; filter values
    keep the case they were typed in.
    """
    question = text.strip()
    resolve = _column_resolver(columns)

    for matcher in MATCHERS:
        spec = matcher(question, resolve)
        if spec is not None:
            logger.info("Classified question as %s: %s", spec.kind.value, spec.params_payload())
            return spec

    logger.debug("No structured query for: %r", text)
    return None
