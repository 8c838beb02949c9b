"""Main FastAPI application."""

import logging
import time
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api import files_router, folders_router
from .api.deps import get_filesystem
from .core.catalog import load_builtin_catalog
from .core.config import settings, ConfigurationError
from .core.logging_config import setup_logging
from .exceptions import PaletteFSException
from .middleware.exception_handler import palettefs_exception_handler
from .middleware.request_context import RequestContextMiddleware
from .repositories import build_store
from .services import VirtualFilesystem

# Setup logging first
setup_logging(log_level=settings.log_level, log_format=settings.log_format)
logger = logging.getLogger(__name__)

VERSION = "1.0.0"


def create_filesystem() -> VirtualFilesystem:
    """Build the single filesystem instance shared by every request."""
    store = build_store(settings)
    catalog = load_builtin_catalog(settings.catalog_path)
    return VirtualFilesystem.from_settings(store, catalog, settings)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown lifecycle for the PaletteFS API."""
    logger.info(f"Environment: {settings.environment.value}")
    try:
        settings.validate_production_config()
    except ConfigurationError as e:
        logger.critical(f"STARTUP BLOCKED: {e}")
        raise SystemExit(1) from e

    # Tests inject their own filesystem through dependency overrides.
    if getattr(app.state, "filesystem", None) is None:
        app.state.filesystem = create_filesystem()

    fs = app.state.filesystem
    logger.info(
        "Filesystem loaded | roots=%d | files=%d | next_id=%d",
        len(fs.list_root_folders()),
        fs.tree.file_count(),
        fs.persistence.next_id,
    )

    yield  # App runs here


app = FastAPI(
    title="PaletteFS API",
    description=(
        "Virtual filesystem for palettes, named-color lists and images. "
        "Built-in catalog content is read-only; user files are persisted in a "
        "key-value store and merged into the same folder tree."
    ),
    version=VERSION,
    license_info={"name": "MIT", "url": "https://opensource.org/licenses/MIT"},
    lifespan=lifespan,
)

# Middleware stack (outermost first; CORS wraps request context).
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins(),
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Content-Type"],
)
app.add_middleware(RequestContextMiddleware)

app.add_exception_handler(PaletteFSException, palettefs_exception_handler)

app.include_router(folders_router)
app.include_router(files_router)


@app.get("/")
def root():
    """Root endpoint."""
    return {
        "name": "PaletteFS API",
        "version": VERSION,
        "status": "running"
    }


_startup_time = time.monotonic()


@app.get("/health")
def health_check(fs: VirtualFilesystem = Depends(get_filesystem)):
    """Store status, uptime, and file count.

    Never raises; returns degraded status on store failure so load balancers
    can still probe without receiving 5xx.
    """
    store_status = "ok"
    try:
        fs.persistence.store.ping()
    except Exception as e:
        logger.warning("Store health probe failed: %s", e)
        store_status = "error"

    return {
        "status": "healthy" if store_status == "ok" else "degraded",
        "store": store_status,
        "uptime_seconds": round(time.monotonic() - _startup_time),
        "version": VERSION,
        "file_count": fs.tree.file_count(),
        "next_id": fs.persistence.next_id,
    }
