"""File API endpoints.

Endpoints are thin; VirtualFilesystem owns persistence, id allocation and
tree rebuilds.
"""

import logging
from fastapi import APIRouter, Depends, Query

from ..exceptions import FileRecordNotFoundError, FolderNotFoundError, InvalidArgumentError
from ..models import FileRecord
from ..schemas.file import ContentEncoding, FileCreate, FileResponse, FileUpdate
from ..services import VirtualFilesystem
from .deps import get_filesystem

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/files", tags=["files"])


def _response(fs: VirtualFilesystem, record: FileRecord) -> FileResponse:
    return FileResponse.from_record(record, category=fs.get_category(record))


def _require_user_file(fs: VirtualFilesystem, file_id: int) -> FileRecord:
    if file_id < 1:
        raise InvalidArgumentError("Built-in files cannot be modified", field="id")
    record = fs.find_file_by_id(file_id)
    if record is None:
        raise FileRecordNotFoundError(file_id)
    return record


@router.get("", response_model=FileResponse)
def get_file(
    folder_path: str = Query(..., min_length=1),
    name: str = Query(..., min_length=1),
    fs: VirtualFilesystem = Depends(get_filesystem),
):
    """Look up a file by folder path and name. Built-in content is fetched on demand."""
    record = fs.get_file(name, folder_path)
    if record is None:
        raise FileRecordNotFoundError(f"{folder_path}/{name}")
    fs.load_content(record)
    return _response(fs, record)


@router.get("/{file_id}", response_model=FileResponse)
def get_file_by_id(file_id: int, fs: VirtualFilesystem = Depends(get_filesystem)):
    record = fs.find_file_by_id(file_id) or fs.load_file_by_id(file_id)
    if record is None:
        raise FileRecordNotFoundError(file_id)
    return _response(fs, record)


@router.post("", response_model=FileResponse, status_code=201)
def create_file(data: FileCreate, fs: VirtualFilesystem = Depends(get_filesystem)):
    """Add a user file to an existing folder."""
    if data.encoding == ContentEncoding.BASE64:
        record = fs.add_file_as_base64(data.folder_path, data.name, data.content)
    else:
        record = fs.add_file_as_text(data.folder_path, data.name, data.content)
    return _response(fs, record)


@router.put("/{file_id}", response_model=FileResponse)
def update_file(file_id: int, data: FileUpdate, fs: VirtualFilesystem = Depends(get_filesystem)):
    """Rename, move, or rewrite a user file, then rebuild the tree."""
    record = _require_user_file(fs, file_id)

    updated = FileRecord(
        name=data.name if data.name is not None else record.name,
        id=record.id,
        folder_path=record.folder_path,
        content=data.content if data.content is not None else record.content,
        loaded=True,
    )
    if data.folder_path is not None:
        target = fs.get_folder(data.folder_path)
        if target is None:
            raise FolderNotFoundError(data.folder_path)
        updated.folder_path = target.get_full_path()

    fs.save_file(updated)
    fs.reload()

    return _response(fs, fs.find_file_by_id(file_id) or updated)


@router.delete("/{file_id}")
def delete_file(file_id: int, fs: VirtualFilesystem = Depends(get_filesystem)):
    record = _require_user_file(fs, file_id)
    fs.delete_file(record)
    return {"deleted": file_id, "name": record.name}
