"""
Permission predicates over already-resolved board state.

Every function is pure: callers look the board up first and pass it in,
``None`` standing for a board that does not exist.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

Board = Optional[Mapping[str, Any]]


def _active_member(user_id: Optional[str], board: Board) -> Optional[Mapping[str, Any]]:
    if not user_id or board is None:
        return None
    for member in board.get("members", []):
        if member.get("user_id") == user_id and member.get("is_active", True):
            return member
    return None


# PUBLIC_INTERFACE
def is_board_member(user_id: Optional[str], board: Board) -> bool:
    """True when ``user_id`` is an active member of ``board``."""
    return _active_member(user_id, board) is not None


# PUBLIC_INTERFACE
def is_comment_only(user_id: Optional[str], board: Board) -> bool:
    member = _active_member(user_id, board)
    return bool(member and member.get("is_comment_only", False))


# PUBLIC_INTERFACE
def allow_is_board_member_non_comment(user_id: Optional[str], board: Board) -> bool:
    """True when ``user_id`` is an active member of ``board`` allowed to do more than comment."""
    return is_board_member(user_id, board) and not is_comment_only(user_id, board)


# PUBLIC_INTERFACE
def can_mutate_list(user_id: Optional[str], board: Board) -> bool:
    """
    Gate for inserting, updating and removing a list.

    ``board`` is the persisted board named by the list's ``board_id``.
    """
    return allow_is_board_member_non_comment(user_id, board)


# PUBLIC_INTERFACE
def can_view_board(user_id: Optional[str], board: Board) -> bool:
    """Public boards are readable by anyone; private boards by their active members."""
    if board is None:
        return False
    return board.get("permission") == "public" or is_board_member(user_id, board)
