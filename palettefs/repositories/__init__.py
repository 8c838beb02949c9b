"""Key-value store implementations."""

import logging
from typing import Optional

from sqlalchemy import Engine

from ..core.config import Settings, StoreBackend
from .base import KeyValueStore
from .memory_store import MemoryKeyValueStore
from .sql_store import SqlKeyValueStore

logger = logging.getLogger(__name__)


def build_store(config: Settings, engine: Optional[Engine] = None) -> KeyValueStore:
    """Create the store selected by ``config.store_backend``.

    For the sql backend the ``kv_entries`` table is created if missing.
    *engine* defaults to the module-level engine built from DATABASE_URL.
    """
    if config.store_backend == StoreBackend.MEMORY:
        logger.info("Using in-memory key-value store")
        return MemoryKeyValueStore()

    from ..database import Base, engine as default_engine, make_session_factory
    from ..models.kv_entry import KVEntry  # noqa: F401  registers the table

    bound = engine or default_engine
    Base.metadata.create_all(bound)
    logger.info("Using SQL key-value store", extra={"dialect": bound.dialect.name})
    return SqlKeyValueStore(make_session_factory(bound))


__all__ = [
    "KeyValueStore",
    "MemoryKeyValueStore",
    "SqlKeyValueStore",
    "build_store",
]
