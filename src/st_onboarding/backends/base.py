from abc import ABC, abstractmethod
from functools import partial
from typing import Callable, Dict, NamedTuple, Optional


class BoundKey(NamedTuple):
    """Write and delete operations for one key, resolved by :meth:`StorageBackend.bind`."""

    set: Callable[[str], None]
    delete: Callable[[], None]


class StorageBackend(ABC):
    """Key/value storage for serialized snapshots.

    Backends raise on failure (``StorageError`` or the client's own exception);
    callers that must stay interactive catch and log.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Stored value for *key*, or ``None`` if it is missing."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        ...

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove *key*. Deleting a missing key is not an error."""

    def bind(self, key: str) -> BoundKey:
        """
        Resolve *key* now and return operations that can run on any thread later.

        Backends whose storage location depends on the calling context (such as
        the current Streamlit session) must resolve it here, on the caller's thread.
        """

        return BoundKey(set=partial(self.set, key), delete=partial(self.delete, key))


class MemoryBackend(StorageBackend):
    """Dict-backed storage. Lives as long as the object; handy for tests."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._store: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._store.get(key)

    def set(self, key: str, value: str) -> None:
        self._store[key] = value

    def delete(self, key: str) -> None:
        self._store.pop(key, None)

    def __contains__(self, key: str) -> bool:
        return key in self._store
