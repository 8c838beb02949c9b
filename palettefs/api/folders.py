"""Folder API: tree listing, single-folder lookup, and folder creation.

Empty folders are held in memory only. A folder outlives the next reload
once it contains a user file, because stored file paths recreate it.
"""

import logging
from fastapi import APIRouter, Depends, Query
from typing import List, Optional

from ..exceptions import FolderNotFoundError
from ..schemas.folder import FolderCreate, FolderNodeResponse
from ..services import VirtualFilesystem
from .deps import get_filesystem

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/folders", tags=["folders"])


@router.get("", response_model=List[FolderNodeResponse])
def list_root_folders(
    depth: Optional[int] = Query(None, ge=0, description="Child levels to include (omit for all)"),
    fs: VirtualFilesystem = Depends(get_filesystem),
):
    """Root folders with their subtrees."""
    return [FolderNodeResponse.from_node(folder, depth) for folder in fs.list_root_folders()]


@router.post("", response_model=FolderNodeResponse, status_code=201)
def create_folder(data: FolderCreate, fs: VirtualFilesystem = Depends(get_filesystem)):
    """Create a folder path. Idempotent: existing folders are returned unchanged."""
    folder = fs.get_folder(data.path, create_if_missing=True)
    if folder is None:
        raise FolderNotFoundError(data.path)
    logger.info("Folder ensured", extra={"folder_path": folder.get_full_path()})
    return FolderNodeResponse.from_node(folder, depth=1)


@router.get("/{folder_path:path}", response_model=FolderNodeResponse)
def get_folder(
    folder_path: str,
    depth: Optional[int] = Query(1, ge=0),
    fs: VirtualFilesystem = Depends(get_filesystem),
):
    folder = fs.get_folder(folder_path)
    if folder is None:
        raise FolderNotFoundError(folder_path)
    return FolderNodeResponse.from_node(folder, depth)
