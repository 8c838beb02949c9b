"""In-process dict-backed store for tests and throwaway sessions."""

import threading
from typing import Dict, List, Optional

from .base import KeyValueStore


class MemoryKeyValueStore(KeyValueStore):
    """Key-value store held in a dict. Contents vanish with the process."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._data[key] = value

    def remove(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def keys(self, prefix: str = "") -> List[str]:
        return sorted(k for k in list(self._data) if k.startswith(prefix))

    def compare_and_set(self, key: str, expected: Optional[str], value: str) -> bool:
        with self._lock:
            if self._data.get(key) != expected:
                return False
            self._data[key] = value
            return True

    def __len__(self) -> int:
        return len(self._data)
