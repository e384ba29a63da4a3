"""
Data normalization service - converts raw spreadsheet cells to typed shipment values.
"""
import logging
import math
import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Mapping, Optional, Tuple

import numpy as np
import pandas as pd

from freight_dash.config.alias_loader import AliasTable, load_alias_table
from freight_dash.services.field_mapper import FieldMapping

logger = logging.getLogger(__name__)

# (value, warning message or None)
Normalized = Tuple[Any, Optional[str]]

EXCEL_EPOCH = pd.Timestamp("1899-12-30")
# Excel's last representable day (9999-12-31)
MAX_EXCEL_SERIAL = 2958465
# SQLite INTEGER is a signed 64-bit value
MAX_INTEGER = 2 ** 63 - 1

FIELD_DEFAULTS = {
    "string": "",
    "decimal": 0.0,
    "integer": 0,
    "date": "",
}


def is_missing(value: Any) -> bool:
    """True for None, blank strings and pandas NaN/NaT."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        # pd.isna returns arrays for list-likes
        return False


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float, Decimal, np.number)) and not isinstance(value, bool)


def normalize_text(value: Any) -> Normalized:
    if is_missing(value):
        return "", None
    if isinstance(value, float) and value.is_integer():
        # pandas reads all-numeric columns (e.g. NF) as float
        return str(int(value)), None
    if isinstance(value, (datetime, date)):
        return value.strftime("%Y-%m-%d"), None
    return str(value).strip(), None


def normalize_decimal(value: Any) -> Normalized:
    """
    Convert a cell to float.

    Handles spreadsheet formats like:
    - "1.234,56" (comma decimal, period thousands)
    - "R$ 1.234,56"
    - "(123,45)" for negatives
    """
    if is_missing(value):
        return 0.0, None
    if _is_number(value):
        try:
            number = float(value)
        except OverflowError:
            number = math.inf
        if not math.isfinite(number):
            return 0.0, f"could not convert '{value}' to a number, using 0"
        return number, None

    s = str(value).strip()
    negative = s.startswith("(") and s.endswith(")")
    s = re.sub(r"[^\d,.\-]", "", s)
    if "," in s:
        s = s.replace(".", "").replace(",", ".")
    elif s.count(".") > 1:
        s = s.replace(".", "")
    if negative and s and not s.startswith("-"):
        s = "-" + s
    try:
        number = float(Decimal(s))
    except (InvalidOperation, ValueError):
        number = None
    if number is None or not math.isfinite(number):
        return 0.0, f"could not convert '{value}' to a number, using 0"
    return number, None


def normalize_integer(value: Any) -> Normalized:
    if is_missing(value):
        return 0, None
    if _is_number(value):
        try:
            number = int(value)
        except (OverflowError, ValueError):
            # inf and NaN
            return 0, f"could not convert '{value}' to an integer, using 0"
    else:
        digits = re.sub(r"\D", "", str(value))
        try:
            number = int(digits)
        except ValueError:
            return 0, f"could not convert '{value}' to an integer, using 0"
    if abs(number) > MAX_INTEGER:
        return 0, f"'{value}' is out of range for an integer, using 0"
    return number, None


def _safe_date(year: int, month: int, day: int) -> Optional[date]:
    if year < 100:
        year += 2000
    try:
        return date(year, month, day)
    except ValueError:
        return None


def _split_ints(text: str, sep: str) -> Optional[List[int]]:
    parts = [p.strip() for p in text.split(sep)]
    if len(parts) != 3:
        return None
    try:
        return [int(p) for p in parts]
    except ValueError:
        return None


def parse_date_string(text: str) -> Optional[date]:
    """
    Parse a date string: DD/MM/YYYY when it has '/', YYYY-MM-DD when it has
    '-', anything else through pandas. Returns None if nothing fits.
    """
    s = text.strip()
    if not s:
        return None
    # drop a time component ("2023-12-25 08:30:00", "2023-12-25T08:30")
    day_part = re.split(r"[ T]", s, maxsplit=1)[0]

    if "/" in day_part:
        parts = _split_ints(day_part, "/")
        if parts:
            parsed = _safe_date(parts[2], parts[1], parts[0])
            if parsed:
                return parsed

    if "-" in day_part:
        parts = _split_ints(day_part, "-")
        if parts:
            if len(day_part.split("-")[0].strip()) == 4:
                parsed = _safe_date(parts[0], parts[1], parts[2])
            else:
                parsed = _safe_date(parts[2], parts[1], parts[0])
            if parsed:
                return parsed

    try:
        ts = pd.to_datetime(s, dayfirst=True)
    except (ValueError, TypeError, OverflowError):
        return None
    if pd.isna(ts):
        return None
    return ts.date()


def coerce_date(value: Any) -> Optional[date]:
    """Best-effort conversion of a cell to a date, None if it cannot be read."""
    if is_missing(value):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, np.datetime64):
        return pd.Timestamp(value).date()
    if _is_number(value):
        serial = float(value)
        if 0 < serial <= MAX_EXCEL_SERIAL:
            return (EXCEL_EPOCH + pd.to_timedelta(serial, unit="D")).date()
        return None
    return parse_date_string(str(value))


def normalize_date(value: Any, today: Optional[date] = None) -> Normalized:
    """
    Normalize to an ISO date string (date component only).

    Missing cells give "". Values that cannot be read fall back to today's
    date with a warning.
    """
    if is_missing(value):
        return "", None
    parsed = coerce_date(value)
    if parsed is not None:
        return parsed.isoformat(), None
    fallback = today or date.today()
    return fallback.isoformat(), f"could not read date '{value}', using {fallback.isoformat()}"


_NORMALIZERS = {
    "string": normalize_text,
    "decimal": normalize_decimal,
    "integer": normalize_integer,
    "date": normalize_date,
}


def normalize_value(field_type: str, value: Any) -> Normalized:
    try:
        normalizer = _NORMALIZERS[field_type]
    except KeyError:
        raise ValueError(f"Unknown field type: {field_type}")
    return normalizer(value)


def empty_record(alias_table: Optional[AliasTable] = None) -> Dict[str, Any]:
    alias_table = alias_table or load_alias_table()
    return {name: FIELD_DEFAULTS[spec.type] for name, spec in alias_table.fields.items()}


def normalize_row(
    row: Mapping[str, Any],
    mapping: FieldMapping,
    alias_table: Optional[AliasTable] = None,
) -> Tuple[Dict[str, Any], List[Tuple[str, str]]]:
    """
    Normalize a single spreadsheet row into a shipment record.

    Returns the record (every canonical field present, defaults filled in)
    and a list of (field, warning) pairs for values that had to be defaulted.
    """
    alias_table = alias_table or mapping.alias_table or load_alias_table()
    record = empty_record(alias_table)
    warnings: List[Tuple[str, str]] = []

    for canonical, header in mapping.matched.items():
        value, warning = normalize_value(alias_table.field_type(canonical), row.get(header))
        record[canonical] = value
        if warning:
            logger.warning("Field %s (column '%s'): %s", canonical, header, warning)
            warnings.append((canonical, warning))

    return record, warnings
