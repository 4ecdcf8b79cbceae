# sales_dashboard/services/models.py
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, model_validator


class JobHandle(BaseModel):
    """Snapshot of one backend query job; replaced by a fresh snapshot on every poll."""

    model_config = ConfigDict(frozen=True)

    job_id: str
    location: Optional[str] = None
    complete: bool
    headers: Optional[List[str]] = None
    rows: Optional[List[List[Any]]] = None


class QueryResult(BaseModel):
    """A header row plus positional data rows, in projection order."""

    headers: List[str]
    rows: List[List[Any]] = []

    @model_validator(mode="after")
    def check_row_widths(self) -> "QueryResult":
        width = len(self.headers)
        for index, row in enumerate(self.rows):
            if len(row) != width:
                raise ValueError(
                    f"row {index} has {len(row)} values, expected {width}"
                )
        return self

    @property
    def row_count(self) -> int:
        return len(self.rows)

    def as_grid(self) -> List[List[Any]]:
        """Header row followed by the data rows."""
        return [list(self.headers)] + [list(row) for row in self.rows]


class RefreshOutcome(BaseModel):
    report: str
    destination: str
    row_count: int
    elapsed_seconds: float
