"""Built-in catalog loading.

The application ships a fixed set of palettes and images. Their layout is
described by a JSON fixture of ``{"path", "name", "resource"}`` entries;
``load_builtin_catalog`` turns that fixture into a factory that builds a
fresh folder tree on every call, since a reload must never share nodes with
the tree it replaces.
"""

import json
import logging
from pathlib import Path
from typing import Callable, Dict, List, Union

from ..models import FileRecord, FolderNode

logger = logging.getLogger(__name__)

CatalogEntry = Dict[str, str]


def read_catalog_entries(path: Union[str, Path]) -> List[CatalogEntry]:
    """Read and validate fixture entries.

    Returns an empty list (with a warning) when the fixture is missing or
    unreadable; entries missing a field are skipped individually.
    """
    fixture = Path(path)
    if not fixture.exists():
        logger.warning("No built-in catalog at %s", fixture)
        return []

    try:
        with open(fixture, encoding="utf-8") as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        logger.warning("Failed to read built-in catalog: %s", e)
        return []

    entries = []
    for item in data.get("files", []) if isinstance(data, dict) else []:
        if not isinstance(item, dict) or not all(
            isinstance(item.get(k), str) and item.get(k) for k in ("path", "name", "resource")
        ):
            logger.warning("Skipping malformed catalog entry: %r", item)
            continue
        entries.append({"path": item["path"], "name": item["name"], "resource": item["resource"]})
    return entries


def catalog_from_entries(entries: List[CatalogEntry]) -> Callable[[], List[FolderNode]]:
    """Factory building a new root-folder list from *entries* on each call.

    Folders appear in first-mention order, files in fixture order.
    """
    # Deferred: services imports models, and the tree builder lives there.
    from ..services.namespace_tree import NamespaceTree

    frozen = [dict(e) for e in entries]

    def factory() -> List[FolderNode]:
        tree = NamespaceTree()
        for entry in frozen:
            folder = tree.resolve(entry["path"], create_if_missing=True)
            if folder is None:
                logger.warning("Catalog entry has an empty path: %r", entry)
                continue
            folder.add_file(FileRecord(name=entry["name"], resource_locator=entry["resource"]))
        return tree.roots

    return factory


def load_builtin_catalog(path: Union[str, Path]) -> Callable[[], List[FolderNode]]:
    entries = read_catalog_entries(path)
    logger.info("Loaded built-in catalog", extra={"entries": len(entries), "catalog": str(path)})
    return catalog_from_entries(entries)
