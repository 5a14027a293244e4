from __future__ import annotations

import copy
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from threading import RLock
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from .settings import get_settings

Document = Dict[str, Any]


@dataclass(frozen=True)
class FindQuery:
    """
    Query parameters for finding documents in a collection.
    """
    # Equality match on each key; 'id' matches the document id
    selector: Mapping[str, Any] = field(default_factory=dict)
    # Field names, '-' prefix for descending; missing/None values sort first
    sort: Sequence[str] = ()


def parse_sort(sort: Sequence[str]) -> List[Tuple[str, bool]]:
    """Split ['sort', '-created_at'] into [('sort', False), ('created_at', True)]."""
    keys = []
    for s in sort:
        s = s.strip()
        reverse = s.startswith("-")
        keys.append((s[1:] if reverse else s, reverse))
    return keys


# PUBLIC_INTERFACE
class Collection(ABC):
    """Abstract contract for document storage backends. Documents never carry their id."""

    @abstractmethod
    def insert(self, doc_id: str, fields: Document) -> None:
        """Store a new document under ``doc_id``."""

    @abstractmethod
    def get(self, doc_id: str) -> Optional[Document]:
        """Return the document with ``id`` included, or None if not found."""

    @abstractmethod
    def replace(self, doc_id: str, fields: Document) -> bool:
        """Replace all fields of an existing document. Return False if not found."""

    @abstractmethod
    def delete(self, doc_id: str) -> bool:
        """Delete a document by id. Return True if deleted, False if not found."""

    @abstractmethod
    def find(self, query: Optional[FindQuery] = None) -> List[Document]:
        """
        Return documents (with ``id``) matching the selector, in the requested order.
        Ties, and the whole result when no sort is given, follow insertion order.
        """


class InMemoryCollection(Collection):
    """
    Thread-safe in-memory collection suitable for testing and default runtime.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._lock = RLock()
        self._items: dict[str, Document] = {}

    def insert(self, doc_id: str, fields: Document) -> None:
        with self._lock:
            if doc_id in self._items:
                raise KeyError(f"duplicate id {doc_id!r} in {self.name}")
            self._items[doc_id] = copy.deepcopy(fields)

    def get(self, doc_id: str) -> Optional[Document]:
        with self._lock:
            item = self._items.get(doc_id)
            return None if item is None else {"id": doc_id, **copy.deepcopy(item)}

    def replace(self, doc_id: str, fields: Document) -> bool:
        with self._lock:
            if doc_id not in self._items:
                return False
            self._items[doc_id] = copy.deepcopy(fields)
            return True

    def delete(self, doc_id: str) -> bool:
        with self._lock:
            return self._items.pop(doc_id, None) is not None

    def find(self, query: Optional[FindQuery] = None) -> List[Document]:
        q = query or FindQuery()
        with self._lock:
            items: Iterable[Document] = (
                {"id": doc_id, **doc} for doc_id, doc in self._items.items()
            )
            items = [d for d in items if all(d.get(k) == v for k, v in q.selector.items())]

            # Stable sorts applied from the last key to the first
            for name, reverse in reversed(parse_sort(q.sort)):
                items.sort(key=_null_first(name), reverse=reverse)

            return [copy.deepcopy(d) for d in items]


def _null_first(name: str) -> Callable[[Document], Tuple[int, Any]]:
    def key(doc: Document) -> Tuple[int, Any]:
        value = doc.get(name)
        return (0, 0) if value is None else (1, value)
    return key


# PUBLIC_INTERFACE
def get_collection_factory(
    backend: Optional[str] = None, sqlite_db_path: Optional[str] = None
) -> Callable[[str, Sequence[str]], Collection]:
    """
    Return a factory ``(name, indexed_fields) -> Collection`` for the configured backend.
    - memory: InMemoryCollection
    - sqlite: SQLiteCollection sharing one database file
    """
    settings = get_settings()
    backend = backend or settings.persistence_backend
    db_path = sqlite_db_path or settings.sqlite_db_path
    if backend == "sqlite":
        from .db import SQLiteCollection

        def sqlite_factory(name: str, indexes: Sequence[str] = ()) -> Collection:
            return SQLiteCollection(db_path, name, indexes)

        return sqlite_factory

    def memory_factory(name: str, indexes: Sequence[str] = ()) -> Collection:
        return InMemoryCollection(name)

    return memory_factory
