from typing import Dict, Any
from models.dataset_models import Dataset

def get_preview_rows(dataset: Dataset, n_rows: int = 20) -> Dict[str, Any]:
    return {
        "columns": list(dataset.columns),
        "rows": dataset.head(n_rows),
    }
