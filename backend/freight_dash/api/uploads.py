"""
Spreadsheet upload API endpoint.
"""
from fastapi import APIRouter, Depends, status, UploadFile, File as FastAPIFile
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from typing import Optional
from pathlib import Path
import shutil
import tempfile
import time
import logging
from freight_dash.api.deps import get_settings
from freight_dash.db.database import Settings
from freight_dash.errors import MissingRequiredColumns, SpreadsheetReadError
from freight_dash.schemas.upload import ImportFailureResponse, ImportResponse
from freight_dash.services.file_parser import infer_file_type
from freight_dash.services.import_pipeline import import_spreadsheet
from freight_dash.services.store import ShipmentStore

router = APIRouter()
logger = logging.getLogger(__name__)


def _failure(status_code: int, message: str, **extra) -> JSONResponse:
    content = {"success": False, "message": message}
    content.update(extra)
    return JSONResponse(status_code=status_code, content=jsonable_encoder(content))


@router.post(
    "",
    response_model=ImportResponse,
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": ImportFailureResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ImportFailureResponse},
    },
)
async def upload_spreadsheet(
    file: Optional[UploadFile] = FastAPIFile(None),
    settings: Settings = Depends(get_settings),
):
    """Import a shipment spreadsheet (.xlsx/.xls) into the store."""
    if file is None or not file.filename:
        logger.error("Upload request without a file")
        return _failure(status.HTTP_400_BAD_REQUEST, "No file uploaded")

    try:
        infer_file_type(file.filename)
    except SpreadsheetReadError as e:
        return _failure(status.HTTP_400_BAD_REQUEST, str(e))

    upload_dir = Path(settings.upload_dir)
    upload_dir.mkdir(parents=True, exist_ok=True)
    suffix = Path(file.filename).suffix.lower()

    start = time.perf_counter()
    temp_path: Optional[Path] = None
    # one connection per import, always closed
    store = ShipmentStore(settings.database_url, echo=settings.sql_echo)
    try:
        with tempfile.NamedTemporaryFile(dir=upload_dir, suffix=suffix, delete=False) as buffer:
            shutil.copyfileobj(file.file, buffer)
            temp_path = Path(buffer.name)
        logger.info(
            "Received %s (%.1f KB)",
            file.filename,
            temp_path.stat().st_size / 1024,
        )

        store.connect()
        store.initialize_schema()
        report = import_spreadsheet(str(temp_path), store, filename=file.filename)
    except MissingRequiredColumns as e:
        mapping = e.mapping
        return _failure(
            status.HTTP_400_BAD_REQUEST,
            "Required columns missing from your file",
            missing_fields=mapping.missing_report(),
            headers_found=mapping.headers_found,
            fields_used=mapping.fields_used(),
        )
    except SpreadsheetReadError as e:
        return _failure(status.HTTP_400_BAD_REQUEST, str(e))
    except Exception as e:
        logger.exception("Error processing upload %s", file.filename)
        return _failure(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            f"Error processing file: {str(e)}",
        )
    finally:
        store.close()
        if temp_path is not None:
            temp_path.unlink(missing_ok=True)

    logger.info(
        "Imported %s: %d inserted, %d errors in %.2fs",
        file.filename,
        report.inserted,
        len(report.failures),
        time.perf_counter() - start,
    )
    return report.to_dict()
