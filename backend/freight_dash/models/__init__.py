from .shipment import Shipment, REQUIRED_FIELDS

__all__ = [
    "Shipment",
    "REQUIRED_FIELDS",
]
