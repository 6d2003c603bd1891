"""FastAPI application for propsnap."""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import logging

from propsnap import BackupSystem, PropsnapConfig
from .config import settings
from .dependencies import StaticTokenVerifier
from .exceptions import PropsnapHTTPError
from .routers import backup, health, imports

# Configure propsnap logger with app-managed pattern
# This ensures INFO logs are visible regardless of uvicorn's logging config
import sys
import os

propsnap_logger = logging.getLogger("propsnap")
propsnap_logger.setLevel(logging.INFO)

# App-managed pattern: attach our own handler and don't propagate
propsnap_logger.propagate = False

# Clear any existing handlers to avoid duplicates
propsnap_logger.handlers.clear()

console_handler = logging.StreamHandler(sys.stdout)
console_handler.setLevel(logging.INFO)

formatter = logging.Formatter(
    '%(asctime)s - [%(name)s] - %(levelname)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)
console_handler.setFormatter(formatter)
propsnap_logger.addHandler(console_handler)

# Optional: Allow disabling app-managed logging via env var for production
if os.getenv("DISABLE_APP_LOGGING", "false").lower() == "true":
    propsnap_logger.handlers.clear()
    propsnap_logger.propagate = True  # Fall back to server-managed pattern

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage BackupSystem lifecycle."""
    logger.info("Initializing BackupSystem...")

    try:
        app.state.system = BackupSystem(config=PropsnapConfig.from_env())
        logger.info("BackupSystem initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize BackupSystem: {e}")
        raise

    if settings.admin_token:
        app.state.verifier = StaticTokenVerifier(settings.admin_token)
    else:
        app.state.verifier = None
        logger.warning("ADMIN_TOKEN not set - backup and import endpoints are unauthenticated")

    yield

    logger.info("Shutting down BackupSystem...")
    await app.state.system.close()


async def propsnap_error_handler(request: Request, exc: PropsnapHTTPError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=exc.headers)


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        lifespan=lifespan,
        docs_url=f"{settings.api_prefix}/docs",
        openapi_url=f"{settings.api_prefix}/openapi.json",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(PropsnapHTTPError, propsnap_error_handler)

    app.include_router(backup.router, prefix=settings.api_prefix)
    app.include_router(imports.router, prefix=settings.api_prefix)
    app.include_router(health.router, prefix=settings.api_prefix)

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "name": settings.api_title,
            "version": settings.api_version,
            "docs": f"{settings.api_prefix}/docs"
        }

    return app


# Create default app instance
app = create_app()
