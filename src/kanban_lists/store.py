from __future__ import annotations

import logging
from dataclasses import dataclass, field
from threading import RLock
from typing import Any, Callable, Iterator, List, Mapping, Optional, Sequence, Type

import pydantic

from .errors import ValidationError
from .repositories import Collection, Document, FindQuery
from .schemas import DocumentSchema
from .utils import later_than, random_id, utcnow

logger = logging.getLogger(__name__)

# (acting user id, document) -> None
Hook = Callable[[Optional[str], Document], None]


@dataclass
class Hooks:
    """
    Lifecycle callbacks run by an EntityStore.

    - after_insert / after_update: run once the write is stored. A failing hook
      is logged and the write stays committed.
    - before_remove: run before the delete. A failing hook aborts the removal.
    """

    after_insert: List[Hook] = field(default_factory=list)
    after_update: List[Hook] = field(default_factory=list)
    before_remove: List[Hook] = field(default_factory=list)


class Cursor:
    """
    Lazy query result. Every iteration runs the query again against the store,
    so a cursor reflects writes made after it was created.
    """

    def __init__(
        self,
        backend: Collection,
        selector: Mapping[str, Any],
        sort: Sequence[str] = (),
        fields: Optional[Sequence[str]] = None,
    ) -> None:
        self._backend = backend
        self._query = FindQuery(selector=dict(selector), sort=tuple(sort))
        self._fields = tuple(fields) if fields is not None else None

    def __iter__(self) -> Iterator[Document]:
        for doc in self._backend.find(self._query):
            if self._fields is not None:
                doc = {k: doc[k] for k in ("id", *self._fields) if k in doc}
            yield doc

    def fetch(self) -> List[Document]:
        return list(self)

    def count(self) -> int:
        return len(self._backend.find(self._query))

    def first(self) -> Optional[Document]:
        return next(iter(self), None)


# PUBLIC_INTERFACE
class EntityStore:
    """
    A schema-validated collection of documents.

    Timestamps are maintained here rather than by callers:
    - insert always sets ``created_at`` to now and never stores ``updated_at``
    - update never touches ``created_at`` and sets ``updated_at`` strictly after
      the previous ``updated_at`` (or ``created_at``)
    """

    def __init__(
        self,
        name: str,
        backend: Collection,
        schema: Type[DocumentSchema],
        hooks: Optional[Hooks] = None,
    ) -> None:
        self.name = name
        self.schema = schema
        self.hooks = hooks or Hooks()
        self._backend = backend
        self._lock = RLock()

    def _validate(self, fields: Mapping[str, Any]) -> Document:
        try:
            model = self.schema.model_validate(fields)
        except pydantic.ValidationError as e:
            raise ValidationError(
                f"invalid {self.name} document",
                details=e.errors(include_url=False, include_context=False, include_input=False),
            ) from e
        return model.model_dump(exclude_none=True)

    def _run_after(self, hooks: Sequence[Hook], user_id: Optional[str], doc: Document) -> None:
        for hook in hooks:
            try:
                hook(user_id, dict(doc))
            except Exception:
                logger.exception("%s hook %s failed for %s", self.name, getattr(hook, "__name__", hook), doc["id"])

    def insert(self, doc: Mapping[str, Any], user_id: Optional[str] = None) -> str:
        """Validate and store a new document. Returns the new id."""
        fields = {k: v for k, v in doc.items() if k not in ("id", "updated_at")}
        fields["created_at"] = utcnow()
        stored = self._validate(fields)

        doc_id = random_id()
        self._backend.insert(doc_id, stored)
        logger.debug("inserted %s %s", self.name, doc_id)

        self._run_after(self.hooks.after_insert, user_id, {"id": doc_id, **stored})
        return doc_id

    def update(self, doc_id: str, changes: Mapping[str, Any], user_id: Optional[str] = None) -> Optional[Document]:
        """
        Apply ``changes`` to an existing document. Returns the updated document,
        or None if ``doc_id`` does not exist.
        """
        with self._lock:
            current = self._backend.get(doc_id)
            if current is None:
                return None
            current.pop("id")

            changes = {k: v for k, v in changes.items() if k not in ("id", "created_at", "updated_at")}
            for name in changes.keys() & self.schema.IMMUTABLE:
                if changes[name] != current.get(name):
                    raise ValidationError(f"{self.name}.{name} cannot be changed", details={"field": name})

            merged = {**current, **changes}
            merged["updated_at"] = later_than(current.get("updated_at") or current.get("created_at"))
            stored = self._validate(merged)
            if not self._backend.replace(doc_id, stored):
                return None
        logger.debug("updated %s %s (%s)", self.name, doc_id, ", ".join(sorted(changes)))

        updated = {"id": doc_id, **stored}
        self._run_after(self.hooks.after_update, user_id, updated)
        return updated

    def remove(self, doc_id: str, user_id: Optional[str] = None) -> bool:
        """Remove a document. Returns False if it does not exist."""
        with self._lock:
            doc = self._backend.get(doc_id)
            if doc is None:
                return False
            for hook in self.hooks.before_remove:
                hook(user_id, dict(doc))
            removed = self._backend.delete(doc_id)
        logger.debug("removed %s %s", self.name, doc_id)
        return removed

    def remove_where(self, selector: Mapping[str, Any], user_id: Optional[str] = None) -> int:
        """Remove every document matching ``selector``. Returns how many were removed."""
        return sum(1 for doc in self.find(selector).fetch() if self.remove(doc["id"], user_id))

    def find(
        self,
        selector: Optional[Mapping[str, Any]] = None,
        sort: Sequence[str] = (),
        fields: Optional[Sequence[str]] = None,
    ) -> Cursor:
        return Cursor(self._backend, selector or {}, sort, fields)

    def find_one(self, selector: Any) -> Optional[Document]:
        """Look up by id (a string) or by the first match of a selector."""
        if isinstance(selector, str):
            return self._backend.get(selector)
        return self.find(selector).first()

