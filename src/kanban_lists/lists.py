from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence, cast

from .access import can_mutate_list, can_view_board
from .database import Database
from .errors import AuthenticationRequired, NotFound, PermissionDenied
from .models import BoardEntity, ListEntity
from .repositories import Document
from .store import Cursor

logger = logging.getLogger(__name__)

CARD_ORDER = ("sort",)


# PUBLIC_INTERFACE
class ListService:
    """
    Lists of a board: lookups, card views and the gated mutations.

    Every mutation checks ``can_mutate_list`` against the list's persisted
    board before writing. Title values are not checked beyond the stored
    schema (a required string).
    """

    def __init__(self, db: Database) -> None:
        self.db = db

    # -- lookups -----------------------------------------------------------

    def get(self, list_id: str) -> Optional[ListEntity]:
        return cast(Optional[ListEntity], self.db.lists.find_one(list_id))

    def find_for_board(
        self,
        board_id: str,
        include_archived: bool = False,
        fields: Optional[Sequence[str]] = None,
    ) -> List[Document]:
        selector: Dict[str, Any] = {"board_id": board_id}
        if not include_archived:
            selector["archived"] = False
        return self.db.lists.find(selector, fields=fields).fetch()

    def find_one_for_board(self, board_id: str, list_id: str) -> Optional[ListEntity]:
        """The active list matching both ids, or None."""
        doc = self.db.lists.find_one({"id": list_id, "board_id": board_id, "archived": False})
        return cast(Optional[ListEntity], doc)

    def board(self, lst: ListEntity) -> Optional[BoardEntity]:
        """The owning board, or None if it no longer exists."""
        return cast(Optional[BoardEntity], self.db.boards.find_one(lst["board_id"]))

    def cards(self, list_id: str) -> Cursor:
        """Active cards of the list, ascending by ``sort``. Re-queried on each iteration."""
        return self.db.cards.find({"list_id": list_id, "archived": False}, sort=CARD_ORDER)

    def all_cards(self, list_id: str) -> Cursor:
        """Every card of the list, archived ones included, in store order."""
        return self.db.cards.find({"list_id": list_id})

    # -- access ------------------------------------------------------------

    def require_board_access(self, user_id: Optional[str], board_id: str) -> BoardEntity:
        """Return the board if ``user_id`` may read it."""
        if not user_id:
            raise AuthenticationRequired("Not authenticated")
        board = self.db.boards.find_one(board_id)
        if board is None:
            raise NotFound("Board not found", code="error-board-doesNotExist")
        if not can_view_board(user_id, board):
            raise PermissionDenied("Not a member of this board", code="error-board-notAMember")
        return cast(BoardEntity, board)

    def _check_can_mutate(self, user_id: Optional[str], board_id: str) -> None:
        if not can_mutate_list(user_id, self.db.boards.find_one(board_id)):
            raise PermissionDenied("Not allowed to change lists of this board")

    def _existing(self, list_id: str) -> ListEntity:
        lst = self.get(list_id)
        if lst is None:
            raise NotFound("List not found", code="error-list-doesNotExist")
        return lst

    # -- mutations ---------------------------------------------------------

    def insert(self, user_id: Optional[str], board_id: str, title: str, sort: Optional[float] = None) -> str:
        """Create a list on ``board_id``. Returns the new list id."""
        if self.db.boards.find_one(board_id) is None:
            raise NotFound("Board not found", code="error-board-doesNotExist")
        self._check_can_mutate(user_id, board_id)
        doc: Dict[str, Any] = {"title": title, "board_id": board_id}
        if sort is not None:
            doc["sort"] = sort
        return self.db.lists.insert(doc, user_id)

    def _update(self, user_id: Optional[str], list_id: str, changes: Dict[str, Any]) -> ListEntity:
        lst = self._existing(list_id)
        self._check_can_mutate(user_id, lst["board_id"])
        updated = self.db.lists.update(list_id, changes, user_id)
        if updated is None:
            raise NotFound("List not found", code="error-list-doesNotExist")
        return cast(ListEntity, updated)

    def rename(self, user_id: Optional[str], list_id: str, title: str) -> ListEntity:
        return self._update(user_id, list_id, {"title": title})

    def archive(self, user_id: Optional[str], list_id: str) -> ListEntity:
        return self._update(user_id, list_id, {"archived": True})

    def restore(self, user_id: Optional[str], list_id: str) -> ListEntity:
        return self._update(user_id, list_id, {"archived": False})

    def remove(self, user_id: Optional[str], list_id: str) -> bool:
        """Remove a list. Returns False if there was nothing to remove."""
        lst = self.get(list_id)
        if lst is None:
            return False
        self._check_can_mutate(user_id, lst["board_id"])
        return self.db.lists.remove(list_id, user_id)

    def remove_for_board(self, user_id: Optional[str], board_id: str, list_id: str) -> bool:
        """Remove the list matching both ids; no match is not an error."""
        lst = self.db.lists.find_one({"id": list_id, "board_id": board_id})
        if lst is None:
            logger.info("no list %s on board %s to remove", list_id, board_id)
            return False
        return self.remove(user_id, list_id)
