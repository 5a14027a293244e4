from __future__ import annotations

from typing import Callable, Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from .settings import get_settings

_security = HTTPBasic(auto_error=False)


# PUBLIC_INTERFACE
def get_user_id_dependency() -> Callable[..., Optional[str]]:
    """
    Return a FastAPI dependency callable resolving the acting user id.

    Behavior:
    - If settings.enable_basic_auth is False (default): the user id is read from
      the USER_ID_HEADER header ('X-User-Id' by default); None when absent.
    - If True: validates provided credentials against BASIC_AUTH_USERNAME/BASIC_AUTH_PASSWORD
      and the username becomes the user id. Missing or invalid credentials raise
      401 with WWW-Authenticate: Basic.

    Routes that require a user reject a None user id themselves, so read
    routes can still answer for public boards.
    """
    settings = get_settings()

    if not settings.enable_basic_auth:
        header = settings.user_id_header

        async def _from_header(request: Request) -> Optional[str]:
            """User id taken from the configured header."""
            value = request.headers.get(header)
            return (value.strip() or None) if value else None

        return _from_header

    expected_user: Optional[str] = settings.basic_auth_username
    expected_pass: Optional[str] = settings.basic_auth_password

    async def _enforce(creds: Optional[HTTPBasicCredentials] = Depends(_security)) -> Optional[str]:
        """
        Enforce HTTP Basic authentication when enabled.

        Raises:
            HTTPException(401) if credentials are missing or invalid.
        """
        if creds is None or creds.username is None or creds.password is None:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Not authenticated",
                headers={"WWW-Authenticate": "Basic"},
            )

        if expected_user is None or expected_pass is None:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Server authentication not configured",
                headers={"WWW-Authenticate": "Basic"},
            )

        if not (creds.username == expected_user and creds.password == expected_pass):
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid authentication credentials",
                headers={"WWW-Authenticate": "Basic"},
            )
        return creds.username

    return _enforce


current_user_id = get_user_id_dependency()
