"""Account activation endpoints."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from app.database import get_db
from app.rate_limit import limiter
from app.schemas.account import ActivationResendRequest, TokenResponse, UserResponse
from app.services.account import get_account_service
from app.services.jwt import get_access_token_service

logger = logging.getLogger("microblog")

router = APIRouter(prefix="/api/v1/account-activations", tags=["Account Activations"])


@router.post("")
@limiter.limit("3/minute")
def resend_activation(request: Request, body: ActivationResendRequest, db: Session = Depends(get_db)) -> dict:
    """Mail a new activation link. The response does not reveal whether the email is registered."""
    result = get_account_service().resend_activation(db, body.email)
    if not result.success:
        logger.info("Activation resend skipped: %s", result.error)

    return {"message": "If an inactive account exists with that email, a new activation link has been sent."}


@router.get("/{token}", response_model=TokenResponse)
def activate_account(token: str, email: str, db: Session = Depends(get_db)) -> TokenResponse:
    """Activate an account from the emailed link and log the user in."""
    result = get_account_service().activate(db, email, token)
    if not result.success:
        raise HTTPException(status_code=400, detail=result.error)

    user = result.user
    access_token = get_access_token_service().issue(user)
    return TokenResponse(token=access_token, user=UserResponse.model_validate(user))
