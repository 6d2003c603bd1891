"""Custom exceptions for FastAPI application."""

from fastapi import HTTPException
from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_401_UNAUTHORIZED,
    HTTP_404_NOT_FOUND,
    HTTP_413_REQUEST_ENTITY_TOO_LARGE,
)


class PropsnapHTTPError(HTTPException):
    """Base exception for propsnap API errors; rendered as {"error": detail}."""
    pass


class BackupNotFoundHTTPError(PropsnapHTTPError):
    def __init__(self, reason: str = "Backup not found"):
        super().__init__(HTTP_404_NOT_FOUND, reason)


class InvalidActionError(PropsnapHTTPError):
    def __init__(self):
        super().__init__(HTTP_400_BAD_REQUEST, "Invalid action")


class MissingBackupIdError(PropsnapHTTPError):
    def __init__(self, action: str):
        super().__init__(HTTP_400_BAD_REQUEST, f"backup_id is required for {action}")


class AuthorizationError(PropsnapHTTPError):
    def __init__(self, reason: str = "Unauthorized"):
        super().__init__(HTTP_401_UNAUTHORIZED, reason, headers={"WWW-Authenticate": "Bearer"})


class UploadTooLargeError(PropsnapHTTPError):
    def __init__(self, limit: int):
        super().__init__(HTTP_413_REQUEST_ENTITY_TOO_LARGE, f"Upload exceeds {limit:,} bytes")
