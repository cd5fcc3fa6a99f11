"""FastAPI dependencies for authentication and database."""

from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from src.database import get_db
from src.errors import UnauthorizedError
from src.models.user import User
from src.services.auth import decode_access_token, get_user_by_id

ACCESS_TOKEN_COOKIE = "accessToken"  # noqa: S105
REFRESH_TOKEN_COOKIE = "refreshToken"  # noqa: S105

security = HTTPBearer(auto_error=False)


def get_current_user(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[Session, Depends(get_db)],
) -> User:
    """Get the current authenticated user from the access token.

    The token is read from the accessToken cookie, falling back to the
    Authorization bearer header.
    """
    token = request.cookies.get(ACCESS_TOKEN_COOKIE)
    if not token and credentials is not None:
        token = credentials.credentials

    if not token:
        raise UnauthorizedError("Unauthorized request")

    payload = decode_access_token(token)
    if payload is None:
        raise UnauthorizedError("Invalid access token")

    try:
        user_id = int(payload["sub"])
    except (TypeError, ValueError):
        raise UnauthorizedError("Invalid access token") from None

    user = get_user_by_id(db, user_id)
    if user is None:
        raise UnauthorizedError("Invalid access token")

    return user
