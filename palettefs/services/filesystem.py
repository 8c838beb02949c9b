"""Virtual filesystem facade: the only component consumers talk to.

Composes a NamespaceTree with a PersistenceAdapter. Every mutation goes
through the adapter to the store and is followed by a full rebuild of the
tree (``reload``). The tree is never patched in place; with tens to low
hundreds of files a rebuild is cheap and the tree always matches exactly
what the store holds.

Public methods:
    get_file / get_folder / load_file_by_id        -- lookups, return None on miss
    list_root_folders / list_children / list_files -- presentation queries
    get_file_count / get_full_path / get_category
    add_file / add_file_as_text / add_file_as_base64
    save_file  -- overwrite only; call reload() after a rename or move
    delete_file
    load_content -- lazy fetch of built-in content
    reload
"""

import base64
import binascii
import logging
import threading
from typing import List, Optional, Union

from ..core.config import Settings
from ..exceptions import FolderNotFoundError, InvalidArgumentError
from ..models import FileRecord, FolderNode
from ..repositories.base import KeyValueStore
from .namespace_tree import (
    ByName,
    ByReference,
    FolderRef,
    NamespaceTree,
    UNCATEGORIZED_FOLDER,
    folder_ref,
)
from .persistence_adapter import CatalogFactory, PersistenceAdapter
from .resource_loader import ResourceLoader

logger = logging.getLogger(__name__)

FolderArg = Union[str, FolderNode, ByName, ByReference]


class VirtualFilesystem:
    """Built-in catalog merged with user files from a key-value store."""

    def __init__(
        self,
        store: KeyValueStore,
        catalog_factory: CatalogFactory,
        resource_loader: Optional[ResourceLoader] = None,
        adapter: Optional[PersistenceAdapter] = None,
    ):
        self.catalog_factory = catalog_factory
        self.resource_loader = resource_loader
        self.persistence = adapter or PersistenceAdapter(store)
        # Sync HTTP handlers run on a thread pool; mutations and rebuilds
        # must not interleave.
        self._lock = threading.RLock()
        self.tree = NamespaceTree()
        self.reload()

    @classmethod
    def from_settings(
        cls,
        store: KeyValueStore,
        catalog_factory: CatalogFactory,
        config: Settings,
    ) -> "VirtualFilesystem":
        adapter = PersistenceAdapter(
            store,
            metadata_key=config.metadata_key,
            file_key_prefix=config.file_key_prefix,
            id_allocation_retries=config.id_allocation_retries,
            recreate_missing_folders=config.recreate_missing_folders,
        )
        return cls(
            store,
            catalog_factory,
            resource_loader=ResourceLoader(config.resource_root),
            adapter=adapter,
        )

    def reload(self) -> None:
        """Rebuild the whole tree from the catalog and the store."""
        with self._lock:
            self.tree = self.persistence.reload(self.catalog_factory)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get_folder(
        self,
        name: Optional[FolderArg],
        parent: Optional[FolderNode] = None,
        create_if_missing: bool = False,
    ) -> Optional[FolderNode]:
        """Resolve a folder path, from the roots or from *parent*."""
        if name is None:
            logger.error("get_folder: name is None")
            return None
        if not create_if_missing:
            return self.tree.resolve(folder_ref(name), start=parent)
        with self._lock:
            return self.tree.resolve(folder_ref(name), create_if_missing=True, start=parent)

    def get_file(self, name: str, folder: Optional[FolderArg]) -> Optional[FileRecord]:
        """File *name* inside *folder*, or None if either is missing."""
        if folder is None:
            logger.error("get_file: folder is None")
            return None
        resolved = self.get_folder(folder)
        if resolved is None:
            logger.info("get_file: folder not found", extra={"folder": str(folder)})
            return None
        record = resolved.get_file(name)
        if record is None:
            logger.info(
                "get_file: file not found",
                extra={"file_name": name, "folder_path": resolved.get_full_path()},
            )
        return record

    def load_file_by_id(self, file_id: int) -> Optional[FileRecord]:
        """User file by id, straight from the store."""
        return self.persistence.load_file_by_id(file_id)

    def find_file_by_id(self, file_id: int) -> Optional[FileRecord]:
        """User file by id, from the live tree."""
        return self.tree.find_file_by_id(file_id)

    def list_root_folders(self) -> List[FolderNode]:
        return list(self.tree.roots)

    def list_children(self, folder: FolderNode) -> List[FolderNode]:
        return list(folder.children)

    def list_files(self, folder: FolderNode) -> List[FileRecord]:
        return list(folder.files)

    def get_file_count(self, folder_name: Optional[FolderArg], recursive: bool = False) -> int:
        """Number of files in a folder; 0 if the folder does not resolve."""
        if not folder_name:
            return 0
        folder = self.get_folder(folder_name)
        return folder.get_file_count(recursive) if folder else 0

    def get_full_path(self, folder: FolderNode) -> str:
        return folder.get_full_path()

    def get_category(self, file: FileRecord) -> str:
        """Immediate owning folder's name, or "Uncategorized" for root-level files."""
        folder = self.tree.locate_owning_folder(file)
        if folder is None or folder.parent is None:
            return UNCATEGORIZED_FOLDER
        return folder.name

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add_file(self, folder: FolderArg, record: FileRecord) -> FileRecord:
        """Persist *record* as a new user file in *folder* and reload.

        Returns the live record from the rebuilt tree.

        Raises:
            FolderNotFoundError: the folder does not resolve.
            InvalidArgumentError: the folder already holds a file of that name.
        """
        if not record.name:
            raise InvalidArgumentError("File name cannot be empty", field="name")
        with self._lock:
            target = self._require_folder(folder)
            if target.get_file(record.name) is not None:
                raise InvalidArgumentError(
                    f"'{target.get_full_path()}' already contains a file named '{record.name}'",
                    field="name",
                )
            self.persistence.persist_new_file(target.get_full_path(), record)
            self.reload()
            return self.tree.find_file_by_id(record.id) or record

    def add_file_as_text(self, folder: FolderArg, name: str, text: str) -> FileRecord:
        return self.add_file(folder, FileRecord(name=name, content=text))

    def add_file_as_base64(self, folder: FolderArg, name: str, data: Union[bytes, str]) -> FileRecord:
        """Add binary content, given raw bytes or an already-encoded string."""
        if isinstance(data, bytes):
            encoded = base64.b64encode(data).decode("ascii")
        else:
            try:
                base64.b64decode(data, validate=True)
            except (binascii.Error, ValueError) as e:
                raise InvalidArgumentError(f"Content is not valid base64: {e}", field="content") from e
            encoded = data
        return self.add_file(folder, FileRecord(name=name, content=encoded))

    def save_file(self, record: FileRecord) -> None:
        """Overwrite a user file's stored name, folder path and content.

        Does not reload; callers that changed the name or folder must call
        reload() for the tree to reflect it.
        """
        if not record.name:
            raise InvalidArgumentError("File name cannot be empty", field="name")
        with self._lock:
            owner = self.tree.resolve(record.folder_path) if record.folder_path else None
            if owner is not None:
                clash = owner.get_file(record.name)
                if clash is not None and clash.id != record.id:
                    raise InvalidArgumentError(
                        f"'{owner.get_full_path()}' already contains a file named '{record.name}'",
                        field="name",
                    )
            self.persistence.overwrite(record)

    def delete_file(self, record: FileRecord) -> None:
        """Erase a user file and reload. Built-in files are rejected."""
        if record.id is None or record.id < 1:
            raise InvalidArgumentError("This file cannot be deleted", field="id")
        with self._lock:
            self.persistence.erase(record)
            self.reload()

    def load_content(self, record: FileRecord) -> str:
        """Return *record*'s content, fetching built-in content on first use."""
        if record.loaded:
            return record.content
        if self.resource_loader is None:
            raise InvalidArgumentError(
                f"No resource root configured to load '{record.name}'", field="resource_locator"
            )
        record.content = self.resource_loader.fetch(record)
        record.loaded = True
        return record.content

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _require_folder(self, folder: FolderArg) -> FolderNode:
        ref: FolderRef = folder_ref(folder)
        resolved = self.tree.resolve(ref)
        if resolved is None:
            label = ref.path if isinstance(ref, ByName) else ref.folder.get_full_path()
            raise FolderNotFoundError(label)
        return resolved
