"""Dependency injection for FastAPI."""

import hmac
from typing import TYPE_CHECKING, Optional, Protocol

from fastapi import Header, Request

from .exceptions import AuthorizationError

if TYPE_CHECKING:
    from propsnap import BackupSystem


class TokenVerifier(Protocol):
    async def verify(self, token: str) -> bool:
        ...


class StaticTokenVerifier:
    """Accepts exactly one configured admin token, compared in constant time."""

    def __init__(self, token: str):
        if not token:
            raise ValueError("StaticTokenVerifier needs a non-empty token")
        self._token = token.encode("utf-8")

    async def verify(self, token: str) -> bool:
        return hmac.compare_digest(self._token, token.encode("utf-8"))


async def get_system(request: Request) -> "BackupSystem":
    """Get BackupSystem instance from app state."""
    return request.app.state.system


async def get_verifier(request: Request) -> Optional[TokenVerifier]:
    """Get the token verifier from app state; None means auth is disabled."""
    return getattr(request.app.state, "verifier", None)


async def require_admin(request: Request, authorization: Optional[str] = Header(None)) -> None:
    """Reject requests without a valid ``Authorization: Bearer <token>`` header."""
    verifier = await get_verifier(request)
    if verifier is None:
        return

    scheme, _, token = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise AuthorizationError("Missing bearer token")
    if not await verifier.verify(token.strip()):
        raise AuthorizationError("Invalid token")
