"""Password reset endpoints."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from app.database import get_db
from app.rate_limit import limiter
from app.schemas.account import PasswordResetRequest, PasswordResetUpdate, TokenResponse, UserResponse
from app.services.account import get_account_service
from app.services.jwt import get_access_token_service

logger = logging.getLogger("microblog")

router = APIRouter(prefix="/api/v1/password-resets", tags=["Password Resets"])


@router.post("")
@limiter.limit("3/minute")
def request_password_reset(request: Request, body: PasswordResetRequest, db: Session = Depends(get_db)) -> dict:
    """Mail password reset instructions. The response does not reveal whether the email is registered."""
    result = get_account_service().request_password_reset(db, body.email)
    if not result.success:
        logger.info("Password reset requested for unknown email")

    return {"message": "If an account exists with that email, password reset instructions have been sent."}


@router.patch("/{token}", response_model=TokenResponse)
@limiter.limit("5/minute")
def reset_password(
    request: Request,
    token: str,
    body: PasswordResetUpdate,
    db: Session = Depends(get_db),
) -> TokenResponse:
    """Set a new password with a valid reset token. Returns an access token for auto-login."""
    result = get_account_service().reset_password(
        db, body.email, token, body.password, body.password_confirmation
    )

    if not result.success:
        if result.errors:
            raise HTTPException(status_code=422, detail={"message": result.error, "errors": result.errors})
        raise HTTPException(status_code=400, detail=result.error)

    user = result.user
    access_token = get_access_token_service().issue(user)
    return TokenResponse(token=access_token, user=UserResponse.model_validate(user))
