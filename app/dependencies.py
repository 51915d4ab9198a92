"""Authentication dependencies for FastAPI routes."""

from fastapi import Depends, HTTPException, Request, Response
from sqlalchemy.orm import Session

from app.config import get_settings
from app.database import get_db
from app.models.user import User
from app.services.account import get_account_service
from app.services.jwt import get_access_token_service

USER_ID_COOKIE_NAME = "user_id"
REMEMBER_COOKIE_NAME = "remember_token"


def get_current_user(
    request: Request,
    db: Session = Depends(get_db),
) -> User:
    """Resolve the user from a Bearer token, falling back to remember-me cookies. Raises 401 if neither works."""
    user = current_user_or_none(request, db)
    if not user:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return user


def current_user_or_none(request: Request, db: Session) -> User | None:
    """Same lookup as get_current_user but returns None instead of raising."""
    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.startswith("Bearer "):
        user = get_access_token_service().resolve(db, auth_header[7:])
        if user:
            return user

    user_id = request.cookies.get(USER_ID_COOKIE_NAME)
    token = request.cookies.get(REMEMBER_COOKIE_NAME)
    if user_id and token and user_id.isdigit():
        return get_account_service().user_from_remember_cookie(db, int(user_id), token)
    return None


def set_remember_cookies(response: Response, user: User, token: str) -> None:
    """Set the persistent remember-me cookie pair."""
    max_age = get_settings().REMEMBER_COOKIE_DAYS * 24 * 60 * 60
    for key, value in ((USER_ID_COOKIE_NAME, str(user.id)), (REMEMBER_COOKIE_NAME, token)):
        response.set_cookie(
            key=key,
            value=value,
            httponly=True,
            samesite="lax",
            secure=False,
            max_age=max_age,
        )


def clear_remember_cookies(response: Response) -> None:
    """Clear the remember-me cookies."""
    response.delete_cookie(key=USER_ID_COOKIE_NAME)
    response.delete_cookie(key=REMEMBER_COOKIE_NAME)
