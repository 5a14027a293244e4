from __future__ import annotations

from functools import lru_cache
from typing import Optional

from .activities import ActivityRecorder
from .repositories import get_collection_factory
from .schemas import ActivityDocument, BoardDocument, CardDocument, ChecklistDocument, ListDocument
from .store import EntityStore


# PUBLIC_INTERFACE
class Database:
    """
    The set of stores the lists service reads and writes.

    Activity recording is wired here: the lists store runs the recorder's
    hooks on insert, update and remove.
    """

    def __init__(self, backend: Optional[str] = None, sqlite_db_path: Optional[str] = None) -> None:
        collection = get_collection_factory(backend, sqlite_db_path)

        self.boards = EntityStore("boards", collection("boards", ()), BoardDocument)
        self.activities = EntityStore(
            "activities", collection("activities", ("list_id", "board_id")), ActivityDocument
        )
        self.recorder = ActivityRecorder(self.activities)
        self.lists = EntityStore(
            "lists", collection("lists", ("board_id",)), ListDocument, self.recorder.list_hooks()
        )
        self.cards = EntityStore("cards", collection("cards", ("list_id",)), CardDocument)
        self.checklists = EntityStore("checklists", collection("checklists", ("card_id",)), ChecklistDocument)


# PUBLIC_INTERFACE
@lru_cache(maxsize=1)
def get_database() -> Database:
    """Return the process-wide Database built from settings."""
    return Database()
