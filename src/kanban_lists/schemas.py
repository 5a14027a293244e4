from __future__ import annotations

from datetime import datetime
from typing import ClassVar, FrozenSet, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

# ---------------------------------------------------------------------------
# Stored document schemas. The entity store validates every insert and every
# merged update against one of these; unknown keys are dropped.
# ---------------------------------------------------------------------------


class DocumentSchema(BaseModel):
    """Base for stored documents. ``IMMUTABLE`` fields may not change after insert."""

    model_config = ConfigDict(extra="ignore")

    IMMUTABLE: ClassVar[FrozenSet[str]] = frozenset()

    created_at: datetime
    updated_at: Optional[datetime] = None


# PUBLIC_INTERFACE
class ListDocument(DocumentSchema):
    """Schema of a stored list."""

    IMMUTABLE: ClassVar[FrozenSet[str]] = frozenset({"board_id"})

    title: str
    board_id: str
    archived: bool = False
    sort: Optional[float] = None


class CardDocument(DocumentSchema):
    title: str
    board_id: str
    list_id: str
    archived: bool = False
    sort: Optional[float] = None
    description: Optional[str] = None
    user_id: Optional[str] = None
    label_ids: List[str] = Field(default_factory=list)
    member_ids: List[str] = Field(default_factory=list)
    due_at: Optional[datetime] = None


class ChecklistDocument(DocumentSchema):
    title: str
    card_id: str
    sort: Optional[float] = None


class BoardMemberDocument(BaseModel):
    model_config = ConfigDict(extra="ignore")

    user_id: str
    is_active: bool = True
    is_admin: bool = False
    is_comment_only: bool = False


class BoardDocument(DocumentSchema):
    title: str
    permission: Literal["public", "private"] = "private"
    members: List[BoardMemberDocument] = Field(default_factory=list)
    archived: bool = False


class ActivityDocument(DocumentSchema):
    IMMUTABLE: ClassVar[FrozenSet[str]] = frozenset(
        {"user_id", "type", "activity_type", "board_id", "list_id"}
    )

    user_id: Optional[str] = None
    type: str
    activity_type: str
    board_id: str
    list_id: str
    title: Optional[str] = None


# ---------------------------------------------------------------------------
# HTTP request/response models. Wire names follow the stored JSON shape
# ({_id, boardId, createdAt, ...}).
# ---------------------------------------------------------------------------


# PUBLIC_INTERFACE
class ListCreate(BaseModel):
    """
    Body for creating a list under a board.
    """

    model_config = ConfigDict(json_schema_extra={"example": {"title": "Backlog"}})

    title: str = Field(..., description="Title of the new list", min_length=1, max_length=200)

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        """
        Strip whitespace and enforce 1..200 length.
        """
        s = v.strip()
        if not (1 <= len(s) <= 200):
            raise ValueError("title length must be between 1 and 200 characters")
        return s


# PUBLIC_INTERFACE
class ListSummary(BaseModel):
    """Entry of the board's list index: id and title only."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., alias="_id", description="List id")
    title: str = Field(..., description="List title")


# PUBLIC_INTERFACE
class ListOut(BaseModel):
    """
    Full list document as returned by the API.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "_id": "Xq3nYbWm8cKz2TtRa",
                "title": "Backlog",
                "boardId": "b7Lk2PqRs9TfWx4Yz",
                "archived": False,
                "sort": 1.0,
                "createdAt": "2025-01-25T10:15:30.123456+00:00",
                "updatedAt": "2025-01-26T09:00:00.000001+00:00",
            }
        },
    )

    id: str = Field(..., alias="_id", description="List id")
    title: str = Field(..., description="List title")
    board_id: str = Field(..., alias="boardId", description="Owning board id")
    archived: bool = Field(..., description="Archived flag")
    sort: Optional[float] = Field(default=None, description="Ordering key among sibling lists")
    created_at: datetime = Field(..., alias="createdAt", description="Creation timestamp")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt", description="Last update timestamp")


# PUBLIC_INTERFACE
class IdResponse(BaseModel):
    """Response carrying the id of the affected list."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., alias="_id", description="List id")
