"""Folder and tree schemas."""

from pydantic import BaseModel, field_validator
from typing import List, Optional

from .file import FileSummary, normalize_folder_path


class FolderCreate(BaseModel):
    """Request to create a folder path (missing ancestors included)."""
    path: str

    @field_validator('path')
    @classmethod
    def validate_path(cls, v: str) -> str:
        return normalize_folder_path(v)


class FolderNodeResponse(BaseModel):
    """One folder with its children and files."""
    name: str
    path: str
    is_root: bool = False
    file_count: int = 0
    recursive_file_count: int = 0
    children: List['FolderNodeResponse'] = []
    files: List[FileSummary] = []

    @classmethod
    def from_node(cls, folder, depth: Optional[int] = None) -> "FolderNodeResponse":
        """Serialize *folder*; *depth* limits how many child levels are included."""
        children = []
        if depth is None or depth > 0:
            next_depth = None if depth is None else depth - 1
            children = [cls.from_node(child, next_depth) for child in folder.children]
        return cls(
            name=folder.name,
            path=folder.get_full_path(),
            is_root=folder.parent is None,
            file_count=folder.get_file_count(),
            recursive_file_count=folder.get_file_count(recursive=True),
            children=children,
            files=[FileSummary.from_record(f) for f in folder.files],
        )
