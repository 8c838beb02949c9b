"""File record schemas."""

from enum import Enum
from pydantic import BaseModel, field_validator
from typing import Optional

from ..services.namespace_tree import UNCATEGORIZED_FOLDER


def normalize_folder_path(v: str) -> str:
    """Strip outer slashes and collapse repeated ones."""
    v = v.strip().strip('/')
    if not v:
        raise ValueError("Folder path cannot be empty")
    while '//' in v:
        v = v.replace('//', '/')
    return v


class ContentEncoding(str, Enum):
    """How request content should be stored."""
    TEXT = "text"
    BASE64 = "base64"


class FileSummary(BaseModel):
    """File listing entry (no content)."""
    id: int
    name: str
    folder_path: str = ""
    mime_type: str
    is_user_file: bool
    resource_locator: Optional[str] = None

    @classmethod
    def from_record(cls, record) -> "FileSummary":
        return cls(
            id=record.id,
            name=record.name,
            folder_path=record.folder_path,
            mime_type=record.mime_type,
            is_user_file=record.is_user_file,
            resource_locator=record.resource_locator,
        )


class FileResponse(FileSummary):
    """Full file record including content and its display category."""
    category: str
    content: str

    @classmethod
    def from_record(cls, record, category: str = UNCATEGORIZED_FOLDER) -> "FileResponse":
        summary = FileSummary.from_record(record)
        return cls(**summary.model_dump(), category=category, content=record.content)


class FileCreate(BaseModel):
    """Request to add a user file to an existing folder."""
    folder_path: str
    name: str
    content: str
    encoding: ContentEncoding = ContentEncoding.TEXT

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "folder_path": "Photos/Built In",
                    "name": "sunset.png",
                    "content": "iVBORw0KGgo=",
                    "encoding": "base64",
                }
            ]
        }
    }

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("File name cannot be empty")
        return v

    @field_validator('folder_path')
    @classmethod
    def validate_folder_path(cls, v: str) -> str:
        return normalize_folder_path(v)


class FileUpdate(BaseModel):
    """Rename, move, or rewrite a user file. Omitted fields are kept."""
    name: Optional[str] = None
    folder_path: Optional[str] = None
    content: Optional[str] = None

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("File name cannot be empty")
        return v

    @field_validator('folder_path')
    @classmethod
    def validate_folder_path(cls, v: Optional[str]) -> Optional[str]:
        return v if v is None else normalize_folder_path(v)
