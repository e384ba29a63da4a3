"""
Dashboard filter/aggregation schemas.
"""
from pydantic import BaseModel
from datetime import date
from typing import Any, Dict, List, Optional


class CategoryFilterRequest(BaseModel):
    dimension: str  # e.g. "origin_state", "destinationCity", "branch"
    value: str


class DashboardViewRequest(BaseModel):
    """Filter events replayed in order: date range first, then each click."""
    start: Optional[date] = None
    end: Optional[date] = None
    filters: List[CategoryFilterRequest] = []
    include_rows: bool = False


class DimensionCount(BaseModel):
    value: str
    count: int


class MetricSummary(BaseModel):
    total: float
    per_business_day: float
    per_shipment_day: float
    per_shipment: float


class TotalsResponse(BaseModel):
    shipments: int
    weight: float
    volumes: int
    invoice_value: float
    freight: float
    business_days: Optional[int] = None
    shipment_days: Optional[int] = None
    first_date: Optional[str] = None
    last_date: Optional[str] = None
    averages: Dict[str, MetricSummary] = {}


class DashboardViewResponse(BaseModel):
    status: str
    is_empty_result: bool
    stale: bool
    date_range: Optional[Dict[str, Optional[str]]] = None
    active_filters: List[CategoryFilterRequest] = []
    total_rows: int
    filtered_rows: int
    rows: Optional[List[Dict[str, Any]]] = None
    breakdowns: Dict[str, List[DimensionCount]]
    totals: TotalsResponse


class DimensionInfo(BaseModel):
    name: str
    field: str
    label: str
