"""Shared test fixtures for the PaletteFS test suite.

Every test gets a fresh in-memory key-value store and a small built-in
catalog, so no test depends on the bundled fixture or on a database file.
SQL store tests build their own in-memory SQLite engine.
"""

import os

# Keep the app off the on-disk database and out of JSON log mode before any
# package import reads the settings.
os.environ["STORE_BACKEND"] = "memory"
os.environ["LOG_FORMAT"] = "text"

import pytest
from fastapi.testclient import TestClient

from palettefs.core.catalog import catalog_from_entries
from palettefs.main import app
from palettefs.api.deps import get_filesystem
from palettefs.repositories import MemoryKeyValueStore
from palettefs.services import PersistenceAdapter, ResourceLoader, VirtualFilesystem

# Mirrors the shape of the shipped catalog: two levels of folders, with files
# only in the second level.
CATALOG_ENTRIES = [
    {"path": "Named Colors/Modern", "name": "Web Colors", "resource": "data/web-colors.json"},
    {"path": "Named Colors/Modern", "name": "Pantone", "resource": "data/pantone-colors.json"},
    {"path": "Named Colors/Classic Desktop Computers", "name": "Macintosh", "resource": "data/mac-colors.json"},
    {"path": "Custom Palettes/Video Game Consoles", "name": "Nintendo", "resource": "images/palette-nes.png"},
    {"path": "Photos/Built In", "name": "Parrots", "resource": "images/image-parrots2.avif"},
]


@pytest.fixture()
def catalog():
    return catalog_from_entries(CATALOG_ENTRIES)


@pytest.fixture()
def store():
    return MemoryKeyValueStore()


@pytest.fixture()
def resource_root(tmp_path):
    """Resource directory with one JSON palette and one binary image."""
    (tmp_path / "data").mkdir()
    (tmp_path / "images").mkdir()
    (tmp_path / "data" / "web-colors.json").write_text('[{"name": "Tomato", "hex": "#FF6347"}]')
    (tmp_path / "images" / "palette-nes.png").write_bytes(b"\x89PNG\r\n")
    return tmp_path


@pytest.fixture()
def fs(store, catalog, resource_root):
    """Filesystem over the memory store and test catalog."""
    return VirtualFilesystem(
        store,
        catalog,
        resource_loader=ResourceLoader(resource_root),
        adapter=PersistenceAdapter(store),
    )


@pytest.fixture()
def client(fs):
    """FastAPI TestClient with the filesystem dependency overridden."""
    app.state.filesystem = fs
    app.dependency_overrides[get_filesystem] = lambda: fs
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
    app.state.filesystem = None


def make_file(
    folder_path: str = "Photos/Built In",
    name: str = "sunset.png",
    content: str = "AAA=",
    encoding: str = "base64",
) -> dict:
    """Factory for file creation payloads."""
    return {
        "folder_path": folder_path,
        "name": name,
        "content": content,
        "encoding": encoding,
    }
