"""
Deep copy of a list together with its active cards and their checklists.

Only the fields named below are carried over; ids, parent links and
timestamps are always regenerated. The copy is a sequence of independent
inserts: if one fails after the new list exists, whatever was written stays
and ``PartialFailure`` reports it.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from .access import can_mutate_list, is_board_member
from .database import Database
from .errors import NotFound, PartialFailure, PermissionDenied
from .lists import CARD_ORDER
from .utils import pick

logger = logging.getLogger(__name__)

LIST_FIELDS = ("title", "board_id", "archived", "sort")
CARD_FIELDS = (
    "title",
    "description",
    "board_id",
    "user_id",
    "sort",
    "archived",
    "label_ids",
    "member_ids",
    "due_at",
)
CHECKLIST_FIELDS = ("title", "sort")


# PUBLIC_INTERFACE
class ListCloner:
    def __init__(self, db: Database) -> None:
        self.db = db

    def clone(self, user_id: Optional[str], source_list_id: str) -> str:
        """
        Copy ``source_list_id`` onto the same board and return the new list id.

        Raises:
            NotFound: the source list or its board does not exist.
            PermissionDenied: the board is private and ``user_id`` is not a
                member, or ``user_id`` may not create lists on it.
            PartialFailure: an insert failed after the new list was created.
        """
        source = self.db.lists.find_one(source_list_id)
        if source is None:
            raise NotFound("List not found", code="error-list-doesNotExist")

        board = self.db.boards.find_one(source["board_id"])
        if board is None:
            raise NotFound("Board not found", code="error-board-doesNotExist")
        if board.get("permission") == "private" and not is_board_member(user_id, board):
            raise PermissionDenied("Not a member of this board", code="error-board-notAMember")
        if not can_mutate_list(user_id, board):
            raise PermissionDenied("Not allowed to change lists of this board")

        logger.info("cloning list %s on board %s for %s", source_list_id, source["board_id"], user_id)
        new_list_id = self.db.lists.insert(pick(source, LIST_FIELDS), user_id)

        card_ids: List[str] = []
        checklist_ids: List[str] = []
        try:
            cards = self.db.cards.find(
                {"list_id": source_list_id, "archived": False}, sort=CARD_ORDER
            ).fetch()
            for card in cards:
                new_card = pick(card, CARD_FIELDS)
                new_card["list_id"] = new_list_id
                new_card_id = self.db.cards.insert(new_card, user_id)
                card_ids.append(new_card_id)

                for checklist in self.db.checklists.find({"card_id": card["id"]}).fetch():
                    new_checklist = pick(checklist, CHECKLIST_FIELDS)
                    new_checklist["card_id"] = new_card_id
                    checklist_ids.append(self.db.checklists.insert(new_checklist, user_id))
        except Exception as e:
            logger.error(
                "clone of list %s stopped after %d cards and %d checklists: %s",
                source_list_id,
                len(card_ids),
                len(checklist_ids),
                e,
            )
            raise PartialFailure(
                f"Clone of list {source_list_id} did not complete",
                list_id=new_list_id,
                card_ids=card_ids,
                checklist_ids=checklist_ids,
            ) from e

        logger.info(
            "cloned list %s -> %s (%d cards, %d checklists)",
            source_list_id,
            new_list_id,
            len(card_ids),
            len(checklist_ids),
        )
        return new_list_id
