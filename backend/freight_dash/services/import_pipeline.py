"""
Import pipeline: spreadsheet rows -> normalized shipment records -> row store.
"""
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from freight_dash.config.alias_loader import AliasTable, load_alias_table
from freight_dash.errors import MissingRequiredColumns, MissingRequiredField, StorageError
from freight_dash.services.field_mapper import FieldMapping, map_headers
from freight_dash.services.file_parser import read_spreadsheet
from freight_dash.services.normalizer import normalize_row
from freight_dash.services.store import ShipmentStore, missing_required_fields

logger = logging.getLogger(__name__)


@dataclass
class RowFailure:
    row_index: int  # 1-based data row number
    reason: str
    raw_row: Dict[str, Any]

    def to_dict(self) -> Dict[str, Any]:
        return {"row": self.row_index, "reason": self.reason, "data": self.raw_row}


@dataclass
class RowWarning:
    row_index: int
    field: str
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {"row": self.row_index, "field": self.field, "message": self.message}


@dataclass
class ImportReport:
    mapping: FieldMapping
    inserted: int = 0
    failures: List[RowFailure] = field(default_factory=list)
    warnings: List[RowWarning] = field(default_factory=list)
    inserted_ids: List[int] = field(default_factory=list)

    @property
    def total_rows(self) -> int:
        return self.inserted + len(self.failures)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": True,
            "message": f"{self.inserted} records inserted successfully.",
            "inserted": self.inserted,
            "errors": [f.to_dict() for f in self.failures] or None,
            "warnings": [w.to_dict() for w in self.warnings],
            "fields_used": self.mapping.fields_used(),
            "headers_found": self.mapping.headers_found,
        }


def import_rows(
    headers: Sequence[str],
    rows: Sequence[Dict[str, Any]],
    store: ShipmentStore,
    alias_table: Optional[AliasTable] = None,
) -> ImportReport:
    """
    Map, normalize and insert rows one by one.

    Missing required columns abort the whole import before any insert.
    Row-level problems are collected on the report and never abort the batch.
    """
    alias_table = alias_table or load_alias_table()
    mapping = map_headers(headers, alias_table)
    if not mapping.is_complete:
        raise MissingRequiredColumns(mapping)

    report = ImportReport(mapping=mapping)
    start = time.perf_counter()

    for position, raw_row in enumerate(rows, start=1):
        try:
            record, field_warnings = normalize_row(raw_row, mapping, alias_table)
        except Exception as e:
            logger.exception("Row %d could not be normalized", position)
            report.failures.append(RowFailure(position, f"Could not read row: {e}", dict(raw_row)))
            continue
        for field_name, message in field_warnings:
            report.warnings.append(RowWarning(position, field_name, message))

        missing = missing_required_fields(record)
        if missing:
            reason = f"Required fields missing in this row: {', '.join(missing)}"
            logger.warning("Row %d rejected: %s", position, reason)
            report.failures.append(RowFailure(position, reason, dict(raw_row)))
            continue

        try:
            new_id = store.insert_one(record)
        except (MissingRequiredField, StorageError) as e:
            logger.error("Row %d could not be inserted: %s", position, e)
            report.failures.append(RowFailure(position, str(e), dict(raw_row)))
            continue
        except Exception as e:
            logger.exception("Row %d failed during insert", position)
            report.failures.append(RowFailure(position, f"Insert failed: {e}", dict(raw_row)))
            continue

        report.inserted += 1
        report.inserted_ids.append(new_id)

    logger.info(
        "Import finished: %d inserted, %d failed, %d warnings in %.2fs",
        report.inserted,
        len(report.failures),
        len(report.warnings),
        time.perf_counter() - start,
    )
    return report


def import_spreadsheet(
    file_path: str,
    store: ShipmentStore,
    filename: Optional[str] = None,
    alias_table: Optional[AliasTable] = None,
) -> ImportReport:
    """Read a spreadsheet file and import its rows into the store."""
    headers, rows = read_spreadsheet(file_path, filename)
    return import_rows(headers, rows, store, alias_table)
