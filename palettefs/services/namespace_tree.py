"""Namespace tree: the set of root folders and everything below them.

There is no implicit universal root. Every path starts with the name of one
of the root folders, e.g. ``"Named Colors/Modern"``.
"""

import logging
from collections import deque
from dataclasses import dataclass
from typing import List, Optional, Union

from ..models import FileRecord, FolderNode, PATH_SEPARATOR

logger = logging.getLogger(__name__)

UNCATEGORIZED_FOLDER = "Uncategorized"


@dataclass(frozen=True)
class ByName:
    """Folder addressed by slash-delimited path."""
    path: str


@dataclass(frozen=True)
class ByReference:
    """Folder addressed by an already-resolved node."""
    folder: FolderNode


FolderRef = Union[ByName, ByReference]


def folder_ref(value: Union[str, FolderNode, ByName, ByReference]) -> FolderRef:
    """Wrap a plain path or node at the call site."""
    if isinstance(value, (ByName, ByReference)):
        return value
    if isinstance(value, FolderNode):
        return ByReference(value)
    if isinstance(value, str):
        return ByName(value)
    raise TypeError(f"Expected a folder path or FolderNode, got {type(value).__name__}")


def split_path(path: str) -> List[str]:
    """Split a folder path into segments, ignoring leading/trailing/double slashes."""
    return [seg for seg in path.split(PATH_SEPARATOR) if seg]


class NamespaceTree:
    """Root folder list plus path resolution and parent-link maintenance."""

    def __init__(self, roots: Optional[List[FolderNode]] = None):
        self.roots: List[FolderNode] = list(roots or [])
        self.relink_parents()

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def resolve(
        self,
        path: Union[str, FolderRef, FolderNode, None],
        create_if_missing: bool = False,
        start: Optional[FolderNode] = None,
    ) -> Optional[FolderNode]:
        """Return the folder at *path*, or None when it does not exist.

        Walks from the root list, or from *start*'s children when given.
        Matching is exact and case-sensitive; the first sibling with a
        matching name wins. With *create_if_missing* every absent segment
        is created as an empty folder, so a whole multi-level path can be
        made in one call.

        A node reference is re-resolved from its full path so a stale node
        from before a reload still maps onto the live tree.
        """
        if isinstance(path, FolderNode):
            path = ByReference(path)
        if isinstance(path, ByReference):
            node = path.folder
            if node is None or not node.name:
                logger.error("resolve: folder reference has no name")
                return None
            path = node.get_full_path()
            start = None
        elif isinstance(path, ByName):
            path = path.path

        if not path or not isinstance(path, str):
            logger.error("resolve: path is empty")
            return None

        segments = split_path(path)
        if not segments:
            logger.error("resolve: path has no segments", extra={"path": path})
            return None

        siblings = start.children if start is not None else self.roots
        current = start
        for segment in segments:
            match = next((f for f in siblings if f.name == segment), None)
            if match is None:
                if not create_if_missing:
                    return None
                match = FolderNode(segment)
                if current is None:
                    self.roots.append(match)
                else:
                    current.add_child(match)
                logger.debug(
                    "Created folder",
                    extra={"folder_path": match.get_full_path()},
                )
            current = match
            siblings = match.children
        return current

    # ------------------------------------------------------------------
    # Traversal
    # ------------------------------------------------------------------

    def flatten(self) -> List[FolderNode]:
        """Every folder in the tree, breadth-first, roots first."""
        result: List[FolderNode] = []
        queue = deque(self.roots)
        while queue:
            folder = queue.popleft()
            result.append(folder)
            queue.extend(folder.children)
        return result

    def locate_owning_folder(self, file: FileRecord) -> Optional[FolderNode]:
        """First folder (breadth-first) whose files contain *file*."""
        for folder in self.flatten():
            if folder.contains_file(file):
                return folder
        return None

    def find_file_by_id(self, file_id: int) -> Optional[FileRecord]:
        for folder in self.flatten():
            record = folder.get_file_by_id(file_id)
            if record is not None:
                return record
        return None

    def relink_parents(self) -> None:
        """Recompute every parent link from actual tree membership."""
        stack = [(root, None) for root in self.roots]
        while stack:
            folder, parent = stack.pop()
            folder.parent = parent
            stack.extend((child, folder) for child in folder.children)

    def first_root(self) -> FolderNode:
        """Fallback target for files whose folder no longer exists."""
        if not self.roots:
            self.roots.append(FolderNode(UNCATEGORIZED_FOLDER))
        return self.roots[0]

    def file_count(self) -> int:
        return sum(len(folder.files) for folder in self.flatten())
