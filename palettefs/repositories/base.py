"""String key-value store contract.

The filesystem layer never talks to a concrete storage technology. It needs
four primitives (get, set, remove, enumerate-by-prefix) plus a
compare-and-set used to advance the id counter. Subclasses that can make
compare-and-set atomic (a conditional UPDATE, a Redis WATCH, ...) override
it; the default below is only safe for a single writer.
"""

from abc import ABC, abstractmethod
from typing import List, Optional


class KeyValueStore(ABC):
    """Synchronous string-to-string store."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the value for *key*, or None if absent."""
        ...

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Insert or replace the value for *key*."""
        ...

    @abstractmethod
    def remove(self, key: str) -> None:
        """Delete *key*. Removing a missing key is a no-op."""
        ...

    @abstractmethod
    def keys(self, prefix: str = "") -> List[str]:
        """Return every key starting with *prefix*, sorted."""
        ...

    def compare_and_set(self, key: str, expected: Optional[str], value: str) -> bool:
        """Write *value* only if the current value equals *expected*.

        ``expected=None`` means "only if the key is absent".

        Returns:
            True if the write happened, False if another writer got there first.
        """
        if self.get(key) != expected:
            return False
        self.set(key, value)
        return True

    def ping(self) -> bool:
        """Cheap reachability probe for health checks."""
        self.get("__ping__")
        return True
