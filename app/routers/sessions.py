"""Login and logout endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import clear_remember_cookies, get_current_user, set_remember_cookies
from app.models.user import User
from app.rate_limit import limiter
from app.schemas.account import LoginRequest, TokenResponse, UserResponse
from app.services.account import get_account_service
from app.services.jwt import get_access_token_service

router = APIRouter(prefix="/api/v1/sessions", tags=["Sessions"])


@router.post("", response_model=TokenResponse)
@limiter.limit("10/minute")
def login(request: Request, response: Response, body: LoginRequest, db: Session = Depends(get_db)) -> TokenResponse:
    """Authenticate and receive an access token, plus remember-me cookies when asked for."""
    result = get_account_service().authenticate(db, body.email, body.password, remember_me=body.remember_me)

    if not result.success:
        status_code = 403 if result.user else 401
        raise HTTPException(status_code=status_code, detail=result.error)

    user = result.user
    if result.remember_token:
        set_remember_cookies(response, user, result.remember_token)
    else:
        clear_remember_cookies(response)

    token = get_access_token_service().issue(user)
    return TokenResponse(token=token, user=UserResponse.model_validate(user))


@router.delete("")
def logout(
    response: Response,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    """Forget the remember digest and clear the cookies."""
    get_account_service().logout(db, user)
    clear_remember_cookies(response)
    return {"detail": "Logged out"}
