"""Health check endpoints."""

from typing import Dict

from fastapi import APIRouter, Depends, HTTPException

from ..dependencies import get_system
from ..models import HealthStatus
from propsnap.system import BackupSystem

router = APIRouter(prefix="/health", tags=["health"])


@router.get("", response_model=HealthStatus)
async def health_check(system: BackupSystem = Depends(get_system)) -> HealthStatus:
    """Reachability of the record store and the blob store."""
    checks = await system.check_health()
    record_ok = checks["record_store"]
    blob_ok = checks["blob_store"]

    if record_ok and blob_ok:
        status = "healthy"
    elif not record_ok and not blob_ok:
        status = "unhealthy"
    else:
        status = "degraded"

    return HealthStatus(status=status, record_store=record_ok, blob_store=blob_ok)


@router.get("/ready")
async def readiness_probe(system: BackupSystem = Depends(get_system)) -> Dict[str, str]:
    """Kubernetes readiness probe."""
    health = await health_check(system)
    if health.status != "healthy":
        raise HTTPException(status_code=503, detail="Service not ready")
    return {"status": "ready"}


@router.get("/live")
async def liveness_probe() -> Dict[str, str]:
    """Kubernetes liveness probe."""
    return {"status": "alive"}
