"""Pydantic schemas for API validation."""

from .file import (
    ContentEncoding,
    FileSummary,
    FileResponse,
    FileCreate,
    FileUpdate,
)
from .folder import (
    FolderCreate,
    FolderNodeResponse,
)

__all__ = [
    "ContentEncoding",
    "FileSummary",
    "FileResponse",
    "FileCreate",
    "FileUpdate",
    "FolderCreate",
    "FolderNodeResponse",
]
