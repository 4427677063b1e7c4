from typing import Dict, Any
from pydantic import BaseModel, ConfigDict

class SessionData(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    session_id: str
    file_path: str
    file_name: str
    sheet_name: str
    n_rows: int
    n_cols: int
    meta: Dict[str, Any] = {}
