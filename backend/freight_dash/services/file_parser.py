"""
Spreadsheet reading services.
"""
import logging
from pathlib import Path
from typing import Any, Dict, List, Tuple

import pandas as pd

from freight_dash.errors import SpreadsheetReadError

logger = logging.getLogger(__name__)

EXCEL_ENGINES = {
    ".xlsx": "openpyxl",
    ".xls": "xlrd",
}
SUPPORTED_EXTENSIONS = tuple(EXCEL_ENGINES) + (".csv",)


def infer_file_type(filename: str) -> str:
    """Infer file type from extension."""
    ext = Path(filename).suffix.lower()
    if ext in EXCEL_ENGINES:
        return ext.lstrip(".")
    elif ext == ".csv":
        return "csv"
    else:
        raise SpreadsheetReadError(
            f"Unsupported file type '{ext or filename}': expected one of {', '.join(SUPPORTED_EXTENSIONS)}"
        )


def read_file(file_path: str, file_type: str) -> pd.DataFrame:
    """Read the first sheet of a spreadsheet into a DataFrame."""
    try:
        if file_type in ("xlsx", "xls"):
            df = pd.read_excel(file_path, sheet_name=0, engine=EXCEL_ENGINES["." + file_type])
        elif file_type == "csv":
            df = None
            # Try different encodings
            for encoding in ["utf-8", "latin-1", "cp1252"]:
                try:
                    df = pd.read_csv(file_path, encoding=encoding, dtype=str, sep=None, engine="python")
                    break
                except UnicodeDecodeError:
                    continue
            if df is None:
                raise SpreadsheetReadError("Could not decode CSV file")
        else:
            raise SpreadsheetReadError(f"Unsupported file type: {file_type}")
    except SpreadsheetReadError:
        raise
    except Exception as e:
        # pandas/openpyxl/xlrd raise a wide range of exceptions for corrupt files
        raise SpreadsheetReadError(f"Could not read spreadsheet: {e}") from e

    df = df.dropna(how="all")
    if df.empty:
        raise SpreadsheetReadError("File is empty or has no data rows")
    return df


def _clean_cell(value: Any) -> Any:
    try:
        if pd.isna(value):
            return None
    except (TypeError, ValueError):
        pass
    if isinstance(value, pd.Timestamp):
        return value.to_pydatetime()
    return value


def dataframe_to_rows(df: pd.DataFrame) -> Tuple[List[str], List[Dict[str, Any]]]:
    """Split a DataFrame into (headers, raw rows keyed by header)."""
    headers = [str(col) for col in df.columns]
    rows = [
        {header: _clean_cell(value) for header, value in zip(headers, values)}
        for values in df.itertuples(index=False, name=None)
    ]
    return headers, rows


def read_spreadsheet(file_path: str, filename: str = None) -> Tuple[List[str], List[Dict[str, Any]]]:
    """Read a spreadsheet file into headers and raw rows."""
    if not file_path or not Path(file_path).exists():
        raise SpreadsheetReadError("No file provided")
    file_type = infer_file_type(filename or file_path)
    df = read_file(file_path, file_type)
    headers, rows = dataframe_to_rows(df)
    logger.info(
        "Read %d rows from %s (headers: %s)",
        len(rows), filename or Path(file_path).name, headers,
    )
    return headers, rows
