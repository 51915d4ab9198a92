"""Account service: signup, activation, login and password reset flows."""

import logging
from dataclasses import dataclass, field

from sqlalchemy.orm import Session

from app.models.user import TokenKind, User
from app.services.mailer import UserMailer, get_mailer

logger = logging.getLogger("microblog")


@dataclass
class AccountResult:
    """Result of an account operation."""

    success: bool
    error: str | None = None
    errors: dict[str, list[str]] = field(default_factory=dict)
    user: User | None = None
    remember_token: str | None = None


class AccountService:
    """Drives the account flows on top of the User model."""

    def __init__(self, mailer: UserMailer | None = None) -> None:
        self._mailer = mailer

    @property
    def mailer(self) -> UserMailer:
        return self._mailer or get_mailer()

    def find_by_email(self, db: Session, email: str) -> User | None:
        """Look up a user by email, ignoring case."""
        return db.query(User).filter(User.email == email.strip().lower()).first()

    def register(
        self,
        db: Session,
        name: str,
        email: str,
        password: str,
        password_confirmation: str | None = None,
    ) -> AccountResult:
        """Create an account and mail its activation link.

        A duplicate email caught by the database rather than by validation raises EmailTakenError.
        """
        user = User(name=name, email=email, password=password, password_confirmation=password_confirmation)
        if not user.save(db):
            return AccountResult(success=False, error="; ".join(user.full_messages), errors=user.errors)

        user.send_activation_email(self.mailer)
        logger.info("Registered user %s (%s), activation pending", user.id, user.email)
        return AccountResult(success=True, user=user)

    def activate(self, db: Session, email: str, token: str) -> AccountResult:
        """Activate an account from the emailed link."""
        user = self.find_by_email(db, email)
        if not user or user.activated or not user.authenticated(TokenKind.ACTIVATION, token):
            return AccountResult(success=False, error="Invalid activation link")

        user.activate(db)
        logger.info("Activated user %s", user.id)
        return AccountResult(success=True, user=user)

    def resend_activation(self, db: Session, email: str) -> AccountResult:
        """Issue a fresh activation token for an unactivated account and mail it."""
        user = self.find_by_email(db, email)
        if not user:
            return AccountResult(success=False, error="Email address not found")
        if user.activated:
            return AccountResult(success=False, error="Account already activated", user=user)

        user.reissue_activation_digest(db)
        user.send_activation_email(self.mailer)
        logger.info("Activation mail re-sent for user %s", user.id)
        return AccountResult(success=True, user=user)

    def authenticate(self, db: Session, email: str, password: str, remember_me: bool = False) -> AccountResult:
        """Check credentials. With remember_me a new remember token is issued, otherwise old ones are dropped."""
        user = self.find_by_email(db, email)
        if not user or not user.authenticate(password):
            return AccountResult(success=False, error="Invalid email/password combination")

        if not user.activated:
            return AccountResult(
                success=False,
                error="Account not activated. Check your email for the activation link.",
                user=user,
            )

        if remember_me:
            token = user.remember(db)
            return AccountResult(success=True, user=user, remember_token=token)

        user.forget(db)
        return AccountResult(success=True, user=user)

    def logout(self, db: Session, user: User) -> None:
        """Forget the remember digest and revoke every access token of the user."""
        user.revoke_sessions(db)
        logger.info("User %s logged out", user.id)

    def user_from_remember_cookie(self, db: Session, user_id: int, token: str) -> User | None:
        """Resolve the user behind a remember-me cookie pair."""
        user = db.get(User, user_id)
        if user and user.authenticated(TokenKind.REMEMBER, token):
            return user
        return None

    def request_password_reset(self, db: Session, email: str) -> AccountResult:
        """Issue a reset token and mail it.

        Unknown emails fail quietly; callers should not reveal whether the user was found.
        """
        user = self.find_by_email(db, email)
        if not user:
            return AccountResult(success=False, error="Email address not found")

        user.create_reset_digest(db)
        user.send_password_reset_email(self.mailer)
        logger.info("Password reset requested for user %s", user.id)
        return AccountResult(success=True, user=user)

    def reset_password(
        self,
        db: Session,
        email: str,
        token: str,
        password: str,
        password_confirmation: str | None = None,
    ) -> AccountResult:
        """Set a new password using a valid reset token."""
        user = self.find_by_email(db, email)
        if not user or not user.activated or not user.authenticated(TokenKind.RESET, token):
            return AccountResult(success=False, error="Invalid or expired reset link")

        if user.password_reset_expired():
            return AccountResult(success=False, error="Password reset has expired.")

        if not password:
            return AccountResult(
                success=False,
                error="Password can't be empty",
                errors={"password": ["can't be empty"]},
            )

        user.password = password
        user.password_confirmation = password_confirmation
        if not user.save(db):
            errors = user.errors
            user.password = None
            db.rollback()
            return AccountResult(success=False, error="; ".join(user.full_messages), errors=errors)

        user.update_attribute(db, "reset_digest", None)
        user.revoke_sessions(db)
        logger.info("Password reset completed for user %s", user.id)
        return AccountResult(success=True, user=user)

    def delete_account(self, db: Session, user_id: int) -> bool:
        """Delete a user and all of its microposts. Returns False if the user does not exist."""
        user = db.get(User, user_id)
        if not user:
            return False
        user.destroy(db)
        logger.info("Deleted user %s", user_id)
        return True


_account_service: AccountService | None = None


def get_account_service() -> AccountService:
    """Get singleton account service instance."""
    global _account_service
    if _account_service is None:
        _account_service = AccountService()
    return _account_service
