"""Domain errors and their JSON mapping."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class ListsError(Exception):
    """Base error carrying an HTTP status, a machine code and a message."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    code: str = "error"

    def __init__(self, message: str, code: Optional[str] = None, details: Optional[Any] = None) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        self.details = details

    def to_payload(self) -> Dict[str, Any]:
        return {"error": self.code, "message": self.message, "detail": self.details}


class NotFound(ListsError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "error-notFound"


class PermissionDenied(ListsError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "error-permissionDenied"


class AuthenticationRequired(ListsError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "error-notAuthenticated"


class ValidationError(ListsError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    code = "ValidationError"


class PartialFailure(ListsError):
    """
    A clone stopped after some documents were written.

    The documents already inserted stay in place; their ids are listed in
    ``details`` and the error that stopped the clone is the ``__cause__``.
    """

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "error-clonePartialFailure"

    def __init__(self, message: str, list_id: str, card_ids: List[str], checklist_ids: List[str]) -> None:
        super().__init__(
            message,
            details={"list_id": list_id, "card_ids": list(card_ids), "checklist_ids": list(checklist_ids)},
        )
        self.list_id = list_id
        self.card_ids = list(card_ids)
        self.checklist_ids = list(checklist_ids)


async def lists_error_handler(request: Request, exc: ListsError) -> JSONResponse:
    """
    Render a ListsError as:
        {"error": <code>, "message": <message>, "detail": <details or null>}
    """
    logger.warning("%s %s -> %s %s", request.method, request.url.path, exc.status_code, exc.code)
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())
