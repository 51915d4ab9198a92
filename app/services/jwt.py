"""Access tokens for the JSON API.

Tokens carry the user's ``session_version``. ``User.revoke_sessions`` bumps it on
logout and password reset, which turns every older token away even before
it expires.
"""

import logging
from datetime import datetime, timedelta

from jose import JWTError, jwt
from sqlalchemy.orm import Session

from app.config import Settings, get_settings
from app.models.user import User

logger = logging.getLogger("microblog")


class AccessTokenService:
    """Issues access tokens and resolves them back to users."""

    def __init__(self, settings: Settings | None = None) -> None:
        settings = settings or get_settings()
        self.secret_key = settings.JWT_SECRET_KEY
        self.algorithm = settings.JWT_ALGORITHM
        self.lifetime = timedelta(minutes=settings.JWT_EXPIRE_MINUTES)

    def issue(self, user: User, now: datetime | None = None) -> str:
        issued_at = now or datetime.utcnow()
        claims = {
            "sub": str(user.id),
            "email": user.email,
            "ver": user.session_version or 0,
            "iat": issued_at,
            "exp": issued_at + self.lifetime,
        }
        return jwt.encode(claims, self.secret_key, algorithm=self.algorithm)

    def resolve(self, db: Session, token: str) -> User | None:
        """Return the token's user, or None if the token is bad, expired or revoked."""
        try:
            claims = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
            user_id = int(claims["sub"])
        except (JWTError, KeyError, ValueError):
            return None

        user = db.get(User, user_id)
        if user is None:
            return None
        if claims.get("ver") != (user.session_version or 0):
            logger.info("Rejected revoked access token for user %s", user.id)
            return None
        return user


_access_token_service: AccessTokenService | None = None


def get_access_token_service() -> AccessTokenService:
    """Get singleton access token service instance."""
    global _access_token_service
    if _access_token_service is None:
        _access_token_service = AccessTokenService()
    return _access_token_service
