"""Folder node: an interior entity of the namespace.

``parent`` is a navigation aid only. Ownership flows downward through
``children``; the namespace recomputes every parent link after a rebuild
instead of patching them one at a time.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Union

from ..exceptions import InvalidArgumentError
from .file_record import BUILTIN_ID, FileRecord

PATH_SEPARATOR = "/"


@dataclass(eq=False)
class FolderNode:
    """A named container of file records and child folders."""

    name: str
    files: List[FileRecord] = field(default_factory=list)
    children: List["FolderNode"] = field(default_factory=list)
    parent: Optional["FolderNode"] = field(default=None, repr=False)

    def __post_init__(self):
        if not self.name or PATH_SEPARATOR in self.name:
            raise InvalidArgumentError(
                f"Folder name must be a non-empty segment without '/': {self.name!r}",
                field="name",
            )

    @property
    def is_root(self) -> bool:
        return self.parent is None

    def get_full_path(self) -> str:
        """Join this folder's name with every ancestor's, root first."""
        segments = [self.name]
        parent = self.parent
        while parent is not None:
            segments.append(parent.name)
            parent = parent.parent
        return PATH_SEPARATOR.join(reversed(segments))

    # -- Files ------------------------------------------------------------

    def get_file(self, name: str) -> Optional[FileRecord]:
        """First file with this name, in insertion order."""
        for f in self.files:
            if f.name == name:
                return f
        return None

    def get_file_by_id(self, file_id: int) -> Optional[FileRecord]:
        """User file with this id. Built-in records share id 0 and never match."""
        if file_id is None or file_id <= BUILTIN_ID:
            return None
        for f in self.files:
            if f.id == file_id:
                return f
        return None

    def contains_file(self, file: Union[FileRecord, str]) -> bool:
        """True if *file* lives directly in this folder.

        Strings are treated as names. Persisted records match by id,
        built-in records by name.
        """
        if isinstance(file, str):
            return self.get_file(file) is not None
        if file.is_user_file:
            return self.get_file_by_id(file.id) is not None
        return self.get_file(file.name) is not None

    def add_file(self, record: FileRecord) -> FileRecord:
        self.files.append(record)
        return record

    def get_file_count(self, recursive: bool = False) -> int:
        count = len(self.files)
        if recursive:
            for child in self.children:
                count += child.get_file_count(recursive=True)
        return count

    # -- Children ---------------------------------------------------------

    def get_child(self, name: str) -> Optional["FolderNode"]:
        for child in self.children:
            if child.name == name:
                return child
        return None

    def add_child(self, folder: "FolderNode") -> "FolderNode":
        """Attach *folder* below this one.

        Sibling names must be unique; lookups are first-match and a
        duplicate would be unreachable.
        """
        if self.get_child(folder.name) is not None:
            raise InvalidArgumentError(
                f"Folder '{self.get_full_path()}' already has a child named '{folder.name}'",
                field="name",
            )
        folder.parent = self
        self.children.append(folder)
        return folder
