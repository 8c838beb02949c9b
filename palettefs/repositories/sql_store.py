"""SQL-backed key-value store.

Each call runs in its own short session so the store can be shared by
every request thread. The counter update is a single conditional UPDATE
(or a primary-key-guarded INSERT), which makes compare_and_set atomic
across processes pointed at the same database.
"""

import logging
from typing import List, Optional

import sqlalchemy.exc
from sqlalchemy import text
from sqlalchemy.orm import Session, sessionmaker

from ..exceptions import PersistenceError
from ..models.kv_entry import KVEntry
from .base import KeyValueStore

logger = logging.getLogger(__name__)


class SqlKeyValueStore(KeyValueStore):
    """Key-value store persisted in the ``kv_entries`` table."""

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def _session(self) -> Session:
        return self._session_factory()

    def get(self, key: str) -> Optional[str]:
        db = self._session()
        try:
            entry = db.query(KVEntry).filter(KVEntry.key == key).first()
            return entry.value if entry else None
        except sqlalchemy.exc.SQLAlchemyError as e:
            raise PersistenceError(f"Failed to read key {key}", e) from e
        finally:
            db.close()

    def set(self, key: str, value: str) -> None:
        db = self._session()
        try:
            db.merge(KVEntry(key=key, value=value))
            db.commit()
        except sqlalchemy.exc.SQLAlchemyError as e:
            db.rollback()
            raise PersistenceError(f"Failed to write key {key}", e) from e
        finally:
            db.close()

    def remove(self, key: str) -> None:
        db = self._session()
        try:
            db.query(KVEntry).filter(KVEntry.key == key).delete(synchronize_session=False)
            db.commit()
        except sqlalchemy.exc.SQLAlchemyError as e:
            db.rollback()
            raise PersistenceError(f"Failed to remove key {key}", e) from e
        finally:
            db.close()

    def keys(self, prefix: str = "") -> List[str]:
        db = self._session()
        try:
            query = db.query(KVEntry.key)
            if prefix:
                # autoescape: "file_" must not treat "_" as a LIKE wildcard
                query = query.filter(KVEntry.key.startswith(prefix, autoescape=True))
            return [row[0] for row in query.order_by(KVEntry.key).all()]
        except sqlalchemy.exc.SQLAlchemyError as e:
            raise PersistenceError(f"Failed to list keys with prefix {prefix!r}", e) from e
        finally:
            db.close()

    def compare_and_set(self, key: str, expected: Optional[str], value: str) -> bool:
        db = self._session()
        try:
            if expected is None:
                db.add(KVEntry(key=key, value=value))
                db.commit()
                return True
            updated = (
                db.query(KVEntry)
                .filter(KVEntry.key == key, KVEntry.value == expected)
                .update({KVEntry.value: value}, synchronize_session=False)
            )
            db.commit()
            return updated == 1
        except sqlalchemy.exc.IntegrityError:
            # Another writer inserted the key first.
            db.rollback()
            logger.debug("compare_and_set lost insert race", extra={"key": key})
            return False
        except sqlalchemy.exc.SQLAlchemyError as e:
            db.rollback()
            raise PersistenceError(f"Failed to update key {key}", e) from e
        finally:
            db.close()

    def ping(self) -> bool:
        db = self._session()
        try:
            db.execute(text("SELECT 1"))
            return True
        finally:
            db.close()
