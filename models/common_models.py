from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SheetInfo(BaseModel):
    sheet_name: str
    n_rows: int
    n_cols: int
    columns: List[str] = []

class PreviewRequest(BaseModel):
    session_id: str
    n_rows: int = 20

class SummaryRequest(BaseModel):
    session_id: str
    sample_size: int = 10

class DigestRequest(BaseModel):
    session_id: str

class QueryRequest(BaseModel):
    session_id: str
    query_type: str
    params: Dict[str, Any] = {}

class ChatRequest(BaseModel):
    session_id: str
    message: str
    context: Optional[str] = None
    # Explicit query; skips the classifier when given
    query_type: Optional[str] = None
    query_params: Optional[Dict[str, Any]] = None


class NumericStats(CamelModel):
    min: float
    max: float
    mean: float
    median: float
    std_dev: float

class ColumnProfile(CamelModel):
    name: str
    inferred_type: Literal["numeric", "boolean", "date", "text"]
    non_null_count: int
    unique_count: int
    sample_values: List[Any] = []
    numeric_stats: Optional[NumericStats] = None

class DataSummary(CamelModel):
    total_rows: int
    total_columns: int
    column_info: Dict[str, ColumnProfile]
    sample_data: List[Dict[str, Any]] = []


class QueryResult(BaseModel):
    description: str
    rows: List[Dict[str, Any]] = []


class ChartConfig(CamelModel):
    type: Literal["bar", "line", "scatter", "pie"]
    title: str = ""
    x_axis: str
    y_axis: str
    aggregation: Optional[Literal["count", "sum", "avg", "none"]] = None
    filters: Optional[Dict[str, Any]] = None


class ChatResponse(CamelModel):
    response: str
    chart_config: Optional[ChartConfig] = None
    chart_data: Optional[List[Dict[str, Any]]] = None
    chart_image_base64: Optional[str] = None
    query: Optional[Dict[str, Any]] = None
    query_result: Optional[QueryResult] = None
