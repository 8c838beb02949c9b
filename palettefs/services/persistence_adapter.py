"""Persistence adapter: loads and saves user file records in a key-value store.

Store layout:
    <metadata_key>        -> {"nextId": <int>}
    <file_key_prefix><id> -> {"name": ..., "folderPath": ..., "content": ...}

Ids are handed out from ``nextId`` and never reused, so a deleted file's key
can never be taken by a later file. The counter is advanced with
compare-and-set *before* the record is written; a crash between the two
steps burns an id but can never hand the same id to two files.
"""

import json
import logging
from typing import Callable, List, Optional

from ..exceptions import (
    CorruptPersistedStateError,
    FileRecordNotFoundError,
    InvalidArgumentError,
    PersistenceError,
)
from ..models import FileRecord, FolderNode
from ..repositories.base import KeyValueStore
from .namespace_tree import NamespaceTree

logger = logging.getLogger(__name__)

CatalogFactory = Callable[[], List[FolderNode]]

DEFAULT_METADATA_KEY = "fileSystem"
DEFAULT_FILE_KEY_PREFIX = "file_"
FIRST_FILE_ID = 1


class PersistenceAdapter:
    """Counter tracking, record (de)serialization, and tree reconciliation."""

    def __init__(
        self,
        store: KeyValueStore,
        metadata_key: str = DEFAULT_METADATA_KEY,
        file_key_prefix: str = DEFAULT_FILE_KEY_PREFIX,
        id_allocation_retries: int = 5,
        recreate_missing_folders: bool = True,
    ):
        self.store = store
        self.metadata_key = metadata_key
        self.file_key_prefix = file_key_prefix
        self.id_allocation_retries = id_allocation_retries
        self.recreate_missing_folders = recreate_missing_folders
        self._next_id = FIRST_FILE_ID

    @property
    def next_id(self) -> int:
        return self._next_id

    def file_key(self, file_id: int) -> str:
        return f"{self.file_key_prefix}{file_id}"

    # ------------------------------------------------------------------
    # Metadata
    # ------------------------------------------------------------------

    def load_metadata(self) -> int:
        """Read the id counter from the store.

        A missing record means a fresh store. A record that does not parse is
        reset rather than allowed to fail the load. Either way the counter
        is raised above the highest id actually present, so ids written by
        a writer whose counter update was lost are still discovered.
        """
        raw = self.store.get(self.metadata_key)
        stored = FIRST_FILE_ID
        if raw is not None:
            try:
                stored = self._parse_metadata(raw)
            except CorruptPersistedStateError as e:
                logger.warning(
                    "Resetting corrupt filesystem metadata",
                    extra={"key": self.metadata_key, "reason": e.details.get("reason")},
                )

        highest = self._highest_stored_id()
        if highest >= stored:
            logger.warning(
                "Id counter behind stored records, advancing",
                extra={"stored_next_id": stored, "highest_id": highest},
            )
            stored = highest + 1

        self._next_id = stored
        return stored

    def _parse_metadata(self, raw: str) -> int:
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise CorruptPersistedStateError(self.metadata_key, f"invalid JSON: {e}") from e
        value = data.get("nextId") if isinstance(data, dict) else None
        if isinstance(value, bool) or not isinstance(value, int) or value < FIRST_FILE_ID:
            raise CorruptPersistedStateError(self.metadata_key, f"bad nextId: {value!r}")
        return value

    def _highest_stored_id(self) -> int:
        highest = 0
        prefix_len = len(self.file_key_prefix)
        for key in self.store.keys(self.file_key_prefix):
            suffix = key[prefix_len:]
            if suffix.isdigit():
                highest = max(highest, int(suffix))
        return highest

    def _allocate_id(self) -> int:
        """Advance the stored counter by one and return the id it guarded."""
        for attempt in range(self.id_allocation_retries):
            raw = self.store.get(self.metadata_key)
            try:
                stored = self._parse_metadata(raw) if raw is not None else FIRST_FILE_ID
            except CorruptPersistedStateError:
                stored = FIRST_FILE_ID
            candidate = max(stored, self._next_id)
            updated = json.dumps({"nextId": candidate + 1})
            if self.store.compare_and_set(self.metadata_key, raw, updated):
                self._next_id = candidate + 1
                return candidate
            logger.info(
                "Id counter changed concurrently, retrying",
                extra={"attempt": attempt + 1},
            )
        raise PersistenceError(
            f"Could not allocate a file id after {self.id_allocation_retries} attempts"
        )

    # ------------------------------------------------------------------
    # Records
    # ------------------------------------------------------------------

    def persist_new_file(self, folder_path: str, record: FileRecord) -> FileRecord:
        """Assign the next id to *record* and write it under *folder_path*."""
        if not folder_path:
            raise InvalidArgumentError("Folder path cannot be empty", field="folder_path")
        if record.is_user_file:
            raise InvalidArgumentError(
                f"File '{record.name}' is already persisted as #{record.id}", field="id"
            )

        record.id = self._allocate_id()
        record.folder_path = folder_path
        record.resource_locator = None
        record.loaded = True
        self._write(record)
        logger.info(
            "Persisted new file",
            extra={"file_id": record.id, "file_name": record.name, "folder_path": folder_path},
        )
        return record

    def overwrite(self, record: FileRecord) -> None:
        """Rewrite the stored blob for an existing id.

        Raises:
            FileRecordNotFoundError: the id was never allocated or was erased.
        """
        self._require_user_file(record, "saved")
        if self.store.get(self.file_key(record.id)) is None:
            raise FileRecordNotFoundError(record.id)
        self._write(record)
        logger.info("Saved file", extra={"file_id": record.id, "file_name": record.name})

    def erase(self, record: FileRecord) -> None:
        """Remove a user file. The id counter is left untouched."""
        self._require_user_file(record, "deleted")
        self.store.remove(self.file_key(record.id))
        logger.info("Erased file", extra={"file_id": record.id, "file_name": record.name})

    def load_file_by_id(self, file_id: int) -> Optional[FileRecord]:
        """Read one record straight from the store, or None."""
        if file_id is None or file_id < FIRST_FILE_ID:
            return None
        raw = self.store.get(self.file_key(file_id))
        if raw is None:
            return None
        try:
            return self._decode(file_id, raw)
        except CorruptPersistedStateError as e:
            logger.error(e.message, extra={"file_id": file_id})
            return None

    def _write(self, record: FileRecord) -> None:
        self.store.set(self.file_key(record.id), json.dumps(record.to_payload()))

    def _decode(self, file_id: int, raw: str) -> FileRecord:
        try:
            payload = json.loads(raw)
        except json.JSONDecodeError as e:
            raise CorruptPersistedStateError(self.file_key(file_id), f"invalid JSON: {e}") from e
        return FileRecord.from_payload(file_id, payload)

    @staticmethod
    def _require_user_file(record: FileRecord, action: str) -> None:
        if record.id is None or record.id < FIRST_FILE_ID:
            raise InvalidArgumentError(
                f"Built-in file '{record.name}' cannot be {action}", field="id"
            )

    # ------------------------------------------------------------------
    # Reconciliation
    # ------------------------------------------------------------------

    def reload(self, catalog_factory: CatalogFactory) -> NamespaceTree:
        """Build a fresh tree from the built-in catalog plus every stored record.

        Deleted ids are skipped silently. A record whose folder is not in the
        catalog gets that folder recreated (unless recreate_missing_folders is
        off); a record whose path cannot be resolved at all is attached to the
        first root folder. A record that cannot be decoded is logged and
        skipped; the rest of the load continues.
        """
        self.load_metadata()
        tree = NamespaceTree(catalog_factory())

        loaded = 0
        for file_id in range(FIRST_FILE_ID, self._next_id):
            raw = self.store.get(self.file_key(file_id))
            if raw is None:
                continue

            try:
                record = self._decode(file_id, raw)
            except CorruptPersistedStateError as e:
                logger.error(
                    "Skipping unreadable file record",
                    extra={"key": self.file_key(file_id), "reason": e.details.get("reason")},
                )
                continue

            folder = tree.resolve(record.folder_path) if record.folder_path else None
            if folder is None and self.recreate_missing_folders and record.folder_path:
                # Folders created by the user exist only through the paths
                # of the files stored in them.
                folder = tree.resolve(record.folder_path, create_if_missing=True)
                if folder is not None:
                    logger.info(
                        "Recreated folder outside the built-in catalog",
                        extra={"file_id": file_id, "folder_path": record.folder_path},
                    )
            if folder is None:
                folder = tree.first_root()
                logger.warning(
                    "Stored folder path does not resolve, attaching to first root",
                    extra={
                        "file_id": file_id,
                        "folder_path": record.folder_path,
                        "fallback": folder.name,
                    },
                )
                record.folder_path = folder.get_full_path()

            folder.add_file(record)
            loaded += 1

        tree.relink_parents()
        logger.debug("Reload complete", extra={"user_files": loaded, "next_id": self._next_id})
        return tree
