"""
Upload/import report schemas.
"""
from pydantic import BaseModel
from typing import Any, Dict, List, Optional


class FieldUsed(BaseModel):
    """Canonical field and the spreadsheet header it was read from."""
    field: str
    header: str


class MissingField(BaseModel):
    field: str
    accepted_headers: List[str]


class RowError(BaseModel):
    row: int
    reason: str
    data: Dict[str, Any]


class RowWarning(BaseModel):
    row: int
    field: str
    message: str


class ImportResponse(BaseModel):
    success: bool = True
    message: str
    inserted: int
    errors: Optional[List[RowError]] = None
    warnings: List[RowWarning] = []
    fields_used: List[FieldUsed]
    headers_found: List[str]


class ImportFailureResponse(BaseModel):
    success: bool = False
    message: str
    missing_fields: Optional[List[MissingField]] = None
    headers_found: Optional[List[str]] = None
    fields_used: Optional[List[FieldUsed]] = None
