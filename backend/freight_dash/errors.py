"""
Domain exceptions raised by the import and storage services.
"""
from typing import Iterable, List, Optional


class FreightDashError(Exception):
    """Base class for all freight dashboard errors."""


class SpreadsheetReadError(FreightDashError):
    """The uploaded spreadsheet is missing, unreadable, empty or unsupported."""


class MissingRequiredColumns(FreightDashError):
    """Required canonical fields have no matching header in the file."""

    def __init__(self, mapping):
        self.mapping = mapping
        missing = ", ".join(mapping.missing_required)
        super().__init__(f"Required columns missing from file: {missing}")


class MissingRequiredField(FreightDashError, ValueError):
    """A record is missing a value for one or more required fields."""

    def __init__(self, fields: Iterable[str], message: Optional[str] = None):
        self.fields: List[str] = list(fields)
        super().__init__(message or f"Required fields missing: {', '.join(self.fields)}")


class StorageError(FreightDashError):
    """Wraps a storage-level failure from the database layer."""
