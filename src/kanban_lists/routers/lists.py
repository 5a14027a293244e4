from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends

from ..auth import current_user_id
from ..clone import ListCloner
from ..database import Database, get_database
from ..errors import AuthenticationRequired
from ..lists import ListService
from ..schemas import IdResponse, ListCreate, ListOut, ListSummary

router = APIRouter(tags=["lists"])


def _get_service(db: Database = Depends(get_database)) -> ListService:
    """
    Dependency wrapper building the list service over the configured database.
    """
    return ListService(db)


def _get_cloner(db: Database = Depends(get_database)) -> ListCloner:
    return ListCloner(db)


def _require_user(user_id: Optional[str]) -> str:
    if not user_id:
        raise AuthenticationRequired("Not authenticated")
    return user_id


# PUBLIC_INTERFACE
@router.get(
    "/api/boards/{board_id}/lists",
    response_model=List[ListSummary],
    summary="List Board Lists",
    description="Return the active lists of a board as [{_id, title}].",
    responses={
        200: {"description": "Lists retrieved"},
        401: {"description": "Not authenticated"},
        403: {"description": "Not a member of a private board"},
        404: {"description": "Board not found"},
    },
)
def get_board_lists(
    board_id: str,
    user_id: Optional[str] = Depends(current_user_id),
    service: ListService = Depends(_get_service),
) -> List[ListSummary]:
    """
    Active lists of a board, id and title only.
    """
    service.require_board_access(user_id, board_id)
    return [ListSummary.model_validate(doc) for doc in service.find_for_board(board_id, fields=("title",))]


# PUBLIC_INTERFACE
@router.get(
    "/api/boards/{board_id}/lists/{list_id}",
    response_model=Optional[ListOut],
    response_model_exclude_none=True,
    summary="Get List",
    description="Return the active list matching both ids, or null when there is none.",
    responses={
        200: {"description": "List document, or null"},
        401: {"description": "Not authenticated"},
        403: {"description": "Not a member of a private board"},
        404: {"description": "Board not found"},
    },
)
def get_board_list(
    board_id: str,
    list_id: str,
    user_id: Optional[str] = Depends(current_user_id),
    service: ListService = Depends(_get_service),
) -> Optional[ListOut]:
    service.require_board_access(user_id, board_id)
    doc = service.find_one_for_board(board_id, list_id)
    return ListOut.model_validate(doc) if doc else None


# PUBLIC_INTERFACE
@router.post(
    "/api/boards/{board_id}/lists",
    response_model=IdResponse,
    summary="Create List",
    description="Create a list with the given title on the board and return its id.",
    responses={
        200: {"description": "List created"},
        401: {"description": "Not authenticated"},
        403: {"description": "Not allowed to change lists of this board"},
    },
)
def create_board_list(
    board_id: str,
    payload: ListCreate,
    user_id: Optional[str] = Depends(current_user_id),
    service: ListService = Depends(_get_service),
) -> IdResponse:
    """
    Create a list. The acting user must be a non-comment-only member of the board.
    """
    new_id = service.insert(_require_user(user_id), board_id, payload.title)
    return IdResponse(id=new_id)


# PUBLIC_INTERFACE
@router.delete(
    "/api/boards/{board_id}/lists/{list_id}",
    response_model=IdResponse,
    summary="Delete List",
    description="Remove the list matching both ids. Answers with the id whether or not it existed.",
    responses={
        200: {"description": "List removed, or nothing to remove"},
        401: {"description": "Not authenticated"},
        403: {"description": "Not allowed to change lists of this board"},
    },
)
def delete_board_list(
    board_id: str,
    list_id: str,
    user_id: Optional[str] = Depends(current_user_id),
    service: ListService = Depends(_get_service),
) -> IdResponse:
    service.remove_for_board(_require_user(user_id), board_id, list_id)
    return IdResponse(id=list_id)


# PUBLIC_INTERFACE
@router.post(
    "/api/lists/{list_id}/clone",
    response_model=IdResponse,
    summary="Clone List",
    description=(
        "Copy a list with its active cards and their checklists onto the same board.\n\n"
        "Archived cards are not copied. Returns the id of the new list."
    ),
    responses={
        200: {"description": "List cloned"},
        401: {"description": "Not authenticated"},
        403: {"description": "Not a member of the board"},
        404: {"description": "List or board not found"},
        500: {"description": "Clone stopped partway; created ids are in the error detail"},
    },
)
def clone_list(
    list_id: str,
    user_id: Optional[str] = Depends(current_user_id),
    cloner: ListCloner = Depends(_get_cloner),
) -> IdResponse:
    new_id = cloner.clone(_require_user(user_id), list_id)
    return IdResponse(id=new_id)
