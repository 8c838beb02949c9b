"""Shared FastAPI dependencies."""

from fastapi import Request

from ..services import VirtualFilesystem


def get_filesystem(request: Request) -> VirtualFilesystem:
    """The application's filesystem, built once in the lifespan handler.

    Tests override this dependency to inject a filesystem over a memory store.
    """
    return request.app.state.filesystem
