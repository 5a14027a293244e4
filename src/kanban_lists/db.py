from __future__ import annotations

import json
import os
import re
import sqlite3
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Generator, List, Optional, Sequence

from .repositories import Collection, Document, FindQuery, parse_sort

_FIELD_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

# Stored as ISO8601 text, parsed back on read
_DATETIME_FIELDS = frozenset({"created_at", "updated_at", "due_at"})


def _field(name: str) -> str:
    if not _FIELD_RE.match(name):
        raise ValueError(f"invalid field name: {name!r}")
    return name


def _encode(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    raise TypeError(f"cannot store value of type {type(value).__name__}")


def _decode(body: str) -> Document:
    doc = json.loads(body)
    for key in doc.keys() & _DATETIME_FIELDS:
        if isinstance(doc[key], str):
            doc[key] = datetime.fromisoformat(doc[key])
    return doc


class SQLiteCollection(Collection):
    """
    Lightweight SQLite collection implementing the Collection interface.

    Each collection is one table of JSON bodies; ``seq`` keeps insertion order.
    """

    def __init__(self, db_path: str, name: str, indexes: Sequence[str] = ()) -> None:
        os.makedirs(os.path.dirname(db_path) or ".", exist_ok=True)
        self._db_path = db_path
        self._table = _field(name)
        self._init_db(indexes)

    @contextmanager
    def _conn(self) -> Generator[sqlite3.Connection, None, None]:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        finally:
            conn.close()

    def _init_db(self, indexes: Sequence[str]) -> None:
        with self._conn() as conn:
            conn.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {self._table} (
                    seq INTEGER PRIMARY KEY AUTOINCREMENT,
                    id TEXT NOT NULL UNIQUE,
                    body TEXT NOT NULL
                )
                """
            )
            for name in indexes:
                conn.execute(
                    f"CREATE INDEX IF NOT EXISTS idx_{self._table}_{_field(name)} "
                    f"ON {self._table}(json_extract(body, '$.{name}'))"
                )

    def _row_to_doc(self, row: sqlite3.Row) -> Document:
        return {"id": str(row["id"]), **_decode(row["body"])}

    def insert(self, doc_id: str, fields: Document) -> None:
        body = json.dumps(fields, default=_encode)
        with self._conn() as conn:
            try:
                conn.execute(f"INSERT INTO {self._table} (id, body) VALUES (?, ?)", (doc_id, body))
            except sqlite3.IntegrityError as e:
                raise KeyError(f"duplicate id {doc_id!r} in {self._table}") from e

    def get(self, doc_id: str) -> Optional[Document]:
        with self._conn() as conn:
            row = conn.execute(f"SELECT id, body FROM {self._table} WHERE id = ?", (doc_id,)).fetchone()
            return self._row_to_doc(row) if row else None

    def replace(self, doc_id: str, fields: Document) -> bool:
        body = json.dumps(fields, default=_encode)
        with self._conn() as conn:
            cur = conn.execute(f"UPDATE {self._table} SET body = ? WHERE id = ?", (body, doc_id))
            return cur.rowcount > 0

    def delete(self, doc_id: str) -> bool:
        with self._conn() as conn:
            cur = conn.execute(f"DELETE FROM {self._table} WHERE id = ?", (doc_id,))
            return cur.rowcount > 0

    def find(self, query: Optional[FindQuery] = None) -> List[Document]:
        q = query or FindQuery()
        clauses = []
        params: list = []

        for key, value in q.selector.items():
            column = "id" if key == "id" else f"json_extract(body, '$.{_field(key)}')"
            if value is None:
                clauses.append(f"{column} IS NULL")
                continue
            if isinstance(value, bool):
                value = 1 if value else 0
            elif isinstance(value, datetime):
                value = value.isoformat()
            elif not isinstance(value, (str, int, float)):
                raise TypeError(f"unsupported selector value for {key!r}: {type(value).__name__}")
            clauses.append(f"{column} = ?")
            params.append(value)

        where_sql = f"WHERE {' AND '.join(clauses)}" if clauses else ""

        order = [
            f"json_extract(body, '$.{_field(name)}') {'DESC' if reverse else 'ASC'}"
            for name, reverse in parse_sort(q.sort)
        ]
        order_sql = f"ORDER BY {', '.join([*order, 'seq ASC'])}"

        with self._conn() as conn:
            rows = conn.execute(
                f"SELECT id, body FROM {self._table} {where_sql} {order_sql}", params
            ).fetchall()
            return [self._row_to_doc(r) for r in rows]
