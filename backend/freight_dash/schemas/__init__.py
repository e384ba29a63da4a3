from .shipment import ShipmentResponse, SchemaDescription, ColumnInfo
from .upload import ImportResponse, ImportFailureResponse, FieldUsed, MissingField, RowError, RowWarning
from .dashboard import (
    CategoryFilterRequest,
    DashboardViewRequest,
    DashboardViewResponse,
    DimensionInfo,
)

__all__ = [
    "ShipmentResponse",
    "SchemaDescription",
    "ColumnInfo",
    "ImportResponse",
    "ImportFailureResponse",
    "FieldUsed",
    "MissingField",
    "RowError",
    "RowWarning",
    "CategoryFilterRequest",
    "DashboardViewRequest",
    "DashboardViewResponse",
    "DimensionInfo",
]
