"""User API endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import clear_remember_cookies, get_current_user
from app.models.user import User
from app.rate_limit import limiter
from app.schemas.account import SignupRequest, UserResponse
from app.schemas.micropost import FeedResponse, MicropostResponse
from app.services.account import get_account_service

router = APIRouter(prefix="/api/v1/users", tags=["Users"])


@router.post("", response_model=UserResponse, status_code=201)
@limiter.limit("5/minute")
def signup(request: Request, body: SignupRequest, db: Session = Depends(get_db)) -> UserResponse:
    """Create an account. The activation link is mailed to the given address."""
    service = get_account_service()
    result = service.register(db, body.name, body.email, body.password, body.password_confirmation)

    if not result.success:
        raise HTTPException(status_code=422, detail={"message": result.error, "errors": result.errors})

    return UserResponse.model_validate(result.user)


@router.get("/{user_id}/feed", response_model=FeedResponse)
def user_feed(user_id: int, limit: int = 30, offset: int = 0, db: Session = Depends(get_db)) -> FeedResponse:
    """List a user's microposts, newest first. Unknown users have an empty feed."""
    user = db.get(User, user_id)
    if not user:
        return FeedResponse(items=[], total=0)

    query = user.feed(db)
    total = query.count()
    posts = query.offset(offset).limit(limit).all()
    return FeedResponse(items=[MicropostResponse.model_validate(p) for p in posts], total=total)


@router.delete("/me")
def delete_me(
    response: Response,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    """Delete the current account and all of its microposts."""
    get_account_service().delete_account(db, user.id)
    clear_remember_cookies(response)
    return {"detail": "Account deleted"}
