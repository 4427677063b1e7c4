from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple


@dataclass(frozen=True)
class Dataset:
    """
    Immutable snapshot of one loaded sheet.

    Rows are read-only mappings that all share the header's key set;
    missing cells are stored as None.
    """

    columns: Tuple[str, ...]
    rows: Tuple[Mapping[str, Any], ...]

    @classmethod
    def from_records(
        cls, records: Iterable[Mapping[str, Any]], columns: Optional[Sequence[str]] = None
    ) -> "Dataset":
        records = list(records)
        if columns is None:
            # header order = first-seen key order across rows
            seen: Dict[str, None] = {}
            for record in records:
                for key in record:
                    seen.setdefault(key, None)
            columns = list(seen)

        header = tuple(str(c) for c in columns)
        rows = tuple(
            MappingProxyType({col: record.get(col) for col in header})
            for record in records
        )
        return cls(columns=header, rows=rows)

    def __len__(self) -> int:
        return len(self.rows)

    def column_values(self, column: str) -> List[Any]:
        return [row.get(column) for row in self.rows]

    def head(self, n: int) -> List[Dict[str, Any]]:
        return [dict(row) for row in self.rows[:n]]
