from enum import Enum
from typing import Dict, List, Literal, Optional, Type, Union

from pydantic import BaseModel, ConfigDict, Field


class QueryKind(str, Enum):
    FILTER = "filter"
    GROUP_BY = "groupBy"
    SORT = "sort"
    AGGREGATE = "aggregate"
    CORRELATION = "correlation"
    TOP_N = "topN"


class QueryParams(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class FilterParams(QueryParams):
    column: str
    operator: Literal["equals", "greater", "less", "contains"]
    value: Union[str, float, int, bool, None] = None


class GroupByParams(QueryParams):
    column: str
    aggregate_column: Optional[str] = Field(default=None, alias="aggregateColumn")
    aggregate_function: Literal["count", "sum", "avg", "max", "min"] = Field(
        default="count", alias="aggregateFunction"
    )


class SortParams(QueryParams):
    column: str
    direction: Literal["asc", "desc"] = "asc"


class AggregateParams(QueryParams):
    column: str
    functions: List[Literal["count", "sum", "avg", "max", "min"]] = Field(
        default_factory=lambda: ["count", "avg", "min", "max", "sum"]
    )


class CorrelationParams(QueryParams):
    column1: str
    column2: str


class TopNParams(QueryParams):
    column: str
    n: int = Field(default=10, ge=0)
    # Records are ranked by group size unless told otherwise.
    sort_by: str = Field(default="count", alias="sortBy")


PARAMS_BY_KIND: Dict[QueryKind, Type[QueryParams]] = {
    QueryKind.FILTER: FilterParams,
    QueryKind.GROUP_BY: GroupByParams,
    QueryKind.SORT: SortParams,
    QueryKind.AGGREGATE: AggregateParams,
    QueryKind.CORRELATION: CorrelationParams,
    QueryKind.TOP_N: TopNParams,
}


class QuerySpec(BaseModel):
    """A structured analytical intent: the query kind plus its typed parameters."""

    kind: QueryKind
    params: Union[
        FilterParams,
        GroupByParams,
        SortParams,
        AggregateParams,
        CorrelationParams,
        TopNParams,
    ]

    @classmethod
    def build(cls, kind: QueryKind, **params) -> "QuerySpec":
        return cls(kind=kind, params=PARAMS_BY_KIND[kind](**params))

    def params_payload(self) -> dict:
        return self.params.model_dump(by_alias=True, exclude_none=True)
