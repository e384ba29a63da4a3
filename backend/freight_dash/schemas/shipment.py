"""
Shipment schemas.
"""
from pydantic import BaseModel
from typing import List, Optional


class ShipmentResponse(BaseModel):
    id: int
    date: str
    origin_city: str
    origin_state: str
    origin_base: str
    invoice_number: str
    invoice_value: float = 0
    volume_count: int = 0
    real_weight: float = 0
    cubic_weight: float = 0
    destination_city: str = ""
    destination_state: str = ""
    destination_base: str = ""
    sector: str = ""
    freight_weight_cost: float = 0
    insurance_value: float = 0
    total_freight: float = 0

    class Config:
        from_attributes = True


class ColumnInfo(BaseModel):
    name: str
    type: str
    nullable: bool
    primary_key: bool


class SchemaDescription(BaseModel):
    table_exists: bool
    table: Optional[str] = None
    columns: List[ColumnInfo] = []
