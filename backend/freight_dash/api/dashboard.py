"""
Dashboard filtering and aggregation endpoints.
"""
from fastapi import APIRouter, Depends, HTTPException, status
from typing import List
import logging
from freight_dash.api.deps import get_settings, get_store
from freight_dash.db.database import Settings
from freight_dash.errors import StorageError
from freight_dash.schemas.dashboard import DashboardViewRequest, DashboardViewResponse, DimensionInfo
from freight_dash.services.dashboard import DashboardSession
from freight_dash.services.filter_engine import DIMENSION_LABELS, DIMENSIONS
from freight_dash.services.store import ShipmentStore

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/dimensions", response_model=List[DimensionInfo])
async def list_dimensions():
    """Dimensions available for breakdowns and drill-down filters."""
    return [
        {"name": name, "field": field_name, "label": DIMENSION_LABELS[name]}
        for name, field_name in DIMENSIONS.items()
    ]


@router.post("/view", response_model=DashboardViewResponse)
async def dashboard_view(
    request: DashboardViewRequest,
    store: ShipmentStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
):
    """Apply a date range and drill-down filters, return rows and aggregations."""
    try:
        rows = store.get_all()
    except StorageError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e)
        )

    session = DashboardSession(rows, debounce_delay=settings.filter_debounce_ms / 1000)
    try:
        if request.start or request.end:
            session.set_date_range(request.start, request.end)
        for category in request.filters:
            session.set_category_filter(category.dimension, category.value)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )

    view = await session.refresh()
    logger.info(
        "Dashboard view: %d of %d rows, filters=%s",
        view.filtered_rows,
        view.total_rows,
        view.active_filters,
    )
    return view.to_dict(include_rows=request.include_rows)
