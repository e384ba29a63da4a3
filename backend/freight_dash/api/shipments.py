"""
Shipment listing, search and diagnostics endpoints.
"""
from fastapi import APIRouter, Depends, HTTPException, Query, status
from typing import List, Optional
from freight_dash.api.deps import get_store
from freight_dash.errors import StorageError
from freight_dash.schemas.shipment import SchemaDescription, ShipmentResponse
from freight_dash.services.store import ShipmentStore

router = APIRouter()


@router.get("", response_model=List[ShipmentResponse])
async def list_shipments(store: ShipmentStore = Depends(get_store)):
    """List every shipment."""
    try:
        return store.get_all()
    except StorageError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e)
        )


@router.get("/search", response_model=List[ShipmentResponse])
async def search_shipments(
    date: Optional[str] = Query(None, description="Exact ISO date (YYYY-MM-DD)"),
    origin_city: Optional[str] = Query(None, description="Substring of the origin city"),
    origin_state: Optional[str] = None,
    destination_city: Optional[str] = Query(None, description="Substring of the destination city"),
    destination_state: Optional[str] = None,
    invoice_number: Optional[str] = Query(None, description="Substring of the invoice number"),
    store: ShipmentStore = Depends(get_store),
):
    """Search shipments; all given filters must match."""
    try:
        return store.search(
            date=date,
            origin_city=origin_city,
            origin_state=origin_state,
            destination_city=destination_city,
            destination_state=destination_state,
            invoice_number=invoice_number,
        )
    except StorageError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e)
        )


@router.get("/schema", response_model=SchemaDescription)
async def describe_schema(store: ShipmentStore = Depends(get_store)):
    """Describe the shipments table (diagnostics)."""
    return store.describe_schema()
