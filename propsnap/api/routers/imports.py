"""Lead import endpoint: merge an uploaded archive into the live store."""

from typing import Optional

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import JSONResponse

from ..config import settings
from ..dependencies import get_system, require_admin
from ..exceptions import UploadTooLargeError
from propsnap.system import BackupSystem
from propsnap.backup.errors import ImportAbortedError
from propsnap._utils import logger

router = APIRouter(tags=["import"], dependencies=[Depends(require_admin)])


def _failure(error: str) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={"success": False, "message": "Import failed", "error": error},
    )


@router.post("/leads-import")
async def leads_import(
    zip_file: Optional[UploadFile] = File(None, alias="zipFile"),
    system: BackupSystem = Depends(get_system),
):
    """Merge the rows (and files) of an uploaded ZIP archive.

    Per-row problems are reported in the body of a 200 response; only an
    unreadable archive or a missing required file fails the request.
    """
    if zip_file is None:
        return _failure("No file provided")

    data = await zip_file.read(settings.max_upload_bytes + 1)
    if len(data) > settings.max_upload_bytes:
        raise UploadTooLargeError(settings.max_upload_bytes)
    logger.info(f"Received import archive {zip_file.filename} ({len(data):,} bytes)")

    try:
        result = await system.importer.import_archive(data)
    except ImportAbortedError as e:
        logger.error(f"Import failed: {e}")
        return _failure(str(e))

    return result.model_dump(exclude_none=True)
