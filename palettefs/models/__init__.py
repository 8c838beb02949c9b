"""Namespace entities and the key-value table model."""

from .file_record import FileRecord, BUILTIN_ID
from .folder_node import FolderNode, PATH_SEPARATOR
from .kv_entry import KVEntry

__all__ = ["FileRecord", "BUILTIN_ID", "FolderNode", "PATH_SEPARATOR", "KVEntry"]
