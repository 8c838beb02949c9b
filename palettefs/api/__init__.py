"""API routes."""

from .files import router as files_router
from .folders import router as folders_router

__all__ = [
    "files_router",
    "folders_router",
]
