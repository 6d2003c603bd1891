"""Backup system endpoint: one POST, the action field selects the operation."""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ..dependencies import get_system, require_admin
from ..exceptions import BackupNotFoundHTTPError, InvalidActionError, MissingBackupIdError
from ..models import BackupAction, BackupSystemRequest
from propsnap.system import BackupSystem
from propsnap.backup.errors import SnapshotNotFoundError
from propsnap._utils import logger

router = APIRouter(tags=["backup"], dependencies=[Depends(require_admin)])


def _require_id(body: BackupSystemRequest, action: BackupAction) -> str:
    if not body.backup_id:
        raise MissingBackupIdError(action.value)
    return body.backup_id


@router.post("/backup-system")
async def backup_system(
    body: BackupSystemRequest,
    system: BackupSystem = Depends(get_system),
):
    """Create, list, download or delete backups."""
    try:
        action = BackupAction(body.action)
    except ValueError:
        raise InvalidActionError()

    manager = system.manager

    if action is BackupAction.CREATE:
        result = await manager.create_backup(body.backup_type)
        if not result.success:
            return JSONResponse(status_code=500, content={"success": False, "error": result.error})
        return result.model_dump(exclude_none=True)

    if action is BackupAction.LIST:
        backups = await manager.list_backups()
        return {"backups": [snapshot.model_dump(mode="json") for snapshot in backups]}

    backup_id = _require_id(body, action)
    try:
        if action is BackupAction.DOWNLOAD:
            info = await manager.get_download_url(backup_id)
            return info.model_dump()

        await manager.delete_backup(backup_id)
    except SnapshotNotFoundError as e:
        logger.info(f"{action.value} for unknown backup {backup_id}: {e.reason}")
        raise BackupNotFoundHTTPError(e.reason)

    return {"success": True, "message": "Backup deleted successfully"}
