# sales_dashboard/api/models/dashboard_models.py
from typing import List, Optional

from pydantic import BaseModel, Field


class MenuItem(BaseModel):
    label: Optional[str] = None
    action: Optional[str] = None
    separator: bool = False


class MenuResponse(BaseModel):
    title: str
    items: List[MenuItem]


class ReportInfo(BaseModel):
    name: str = Field(..., examples=["Revenue Trends"])
    destination: str = Field(..., examples=["Revenue Trends"])
    action: str = Field(..., examples=["populateRevenueTrends"])


class ReportListResponse(BaseModel):
    reports: List[ReportInfo]


class RefreshResult(BaseModel):
    report: str
    destination: str
    row_count: int
    elapsed_seconds: float


class RefreshResponse(BaseModel):
    action: str
    results: List[RefreshResult]
