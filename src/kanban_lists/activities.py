from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from .repositories import Document
from .store import EntityStore, Hooks

logger = logging.getLogger(__name__)


# PUBLIC_INTERFACE
class ActivityRecorder:
    """
    Appends audit records for list lifecycle events.

    - createList after a list is inserted
    - removeList (with the title) before a list is removed
    - archivedList after every update whose result is archived, including a
      save of a list that was already archived
    """

    def __init__(self, store: EntityStore) -> None:
        self.store = store

    def _record(self, user_id: Optional[str], activity_type: str, lst: Document, **extra: Any) -> str:
        record: Dict[str, Any] = {
            "user_id": user_id,
            "type": "list",
            "activity_type": activity_type,
            "board_id": lst["board_id"],
            "list_id": lst["id"],
            **extra,
        }
        activity_id = self.store.insert(record, user_id)
        logger.info("activity %s list=%s board=%s user=%s", activity_type, lst["id"], lst["board_id"], user_id)
        return activity_id

    def on_list_inserted(self, user_id: Optional[str], lst: Document) -> None:
        self._record(user_id, "createList", lst)

    def on_list_removing(self, user_id: Optional[str], lst: Document) -> None:
        self._record(user_id, "removeList", lst, title=lst["title"])

    def on_list_updated(self, user_id: Optional[str], lst: Document) -> None:
        if lst.get("archived"):
            self._record(user_id, "archivedList", lst)

    def list_hooks(self) -> Hooks:
        """Hooks to install on the lists store."""
        return Hooks(
            after_insert=[self.on_list_inserted],
            after_update=[self.on_list_updated],
            before_remove=[self.on_list_removing],
        )
