from __future__ import annotations

from datetime import datetime
from typing import List, Optional, TypedDict

from typing_extensions import NotRequired


# PUBLIC_INTERFACE
class ListEntity(TypedDict):
    """
    A column of cards on a board, as stored.

    Fields:
    - id: Opaque 17 character identifier, assigned at insert
    - title: Required text
    - board_id: Owning board; fixed for the list's lifetime
    - archived: False on creation, toggled by archive/restore
    - sort: Optional ordering key among sibling lists (ties keep store order)
    - created_at: Set once at insert
    - updated_at: Set on every update, absent before the first one
    """

    id: str
    title: str
    board_id: str
    archived: bool
    sort: NotRequired[float]
    created_at: datetime
    updated_at: NotRequired[datetime]


class BoardMember(TypedDict):
    user_id: str
    is_active: bool
    is_admin: bool
    is_comment_only: bool


class BoardEntity(TypedDict):
    id: str
    title: str
    permission: str  # 'public' or 'private'
    members: List[BoardMember]
    archived: bool
    created_at: datetime
    updated_at: NotRequired[datetime]

