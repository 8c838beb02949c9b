"""Filesystem services."""

from .namespace_tree import NamespaceTree, ByName, ByReference, folder_ref, UNCATEGORIZED_FOLDER
from .persistence_adapter import PersistenceAdapter
from .resource_loader import ResourceLoader
from .filesystem import VirtualFilesystem

__all__ = [
    "NamespaceTree",
    "ByName",
    "ByReference",
    "folder_ref",
    "UNCATEGORIZED_FOLDER",
    "PersistenceAdapter",
    "ResourceLoader",
    "VirtualFilesystem",
]
