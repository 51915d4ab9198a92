"""User model with credential and token digests."""

import enum
import re
from datetime import datetime, timedelta

from sqlalchemy import Boolean, Column, DateTime, Index, Integer, String, func, inspect
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Query, Session, relationship

from app import security
from app.config import get_settings
from app.database import Base
from app.errors import EmailTakenError, RecordInvalid
from app.models.micropost import Micropost

NAME_MAX_LENGTH = 50
EMAIL_MAX_LENGTH = 255
PASSWORD_MIN_LENGTH = 6
PASSWORD_MAX_BYTES = 72  # bcrypt ignores anything past this
VALID_EMAIL_REGEX = re.compile(r"\A[\w+\-.]+@[a-z\d\-.]+\.[a-z]+\Z", re.IGNORECASE)


class TokenKind(str, enum.Enum):
    """Which digest a token is checked against."""

    REMEMBER = "remember"
    ACTIVATION = "activation"
    RESET = "reset"


class User(Base):
    """Application user."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(NAME_MAX_LENGTH), nullable=False)
    email = Column(String(EMAIL_MAX_LENGTH), nullable=False)
    password_digest = Column(String(255), nullable=False)
    remember_digest = Column(String(255), nullable=True)
    activation_digest = Column(String(255), nullable=True)
    activated = Column(Boolean, nullable=False, default=False)
    activated_at = Column(DateTime, nullable=True)
    reset_digest = Column(String(255), nullable=True)
    reset_sent_at = Column(DateTime, nullable=True)
    # Bumped to invalidate every access token issued so far.
    session_version = Column(Integer, nullable=False, default=0, server_default="0")
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    microposts = relationship(
        "Micropost",
        back_populates="user",
        cascade="all, delete-orphan",
        order_by="Micropost.created_at.desc()",
    )

    # In-memory only, never persisted.
    remember_token = None
    activation_token = None
    reset_token = None
    password_confirmation = None
    _password = None

    # Populated by validate().
    errors = None

    @staticmethod
    def digest(string: str, cost: int | None = None) -> str:
        """Return the bcrypt digest of the given string."""
        return security.digest(string, cost=cost)

    @staticmethod
    def new_token() -> str:
        """Return a random URL-safe token."""
        return security.new_token()

    # --- password ---

    @property
    def password(self) -> str | None:
        return self._password

    @password.setter
    def password(self, value: str | None) -> None:
        """Set the plaintext password and hash it. None leaves the digest untouched."""
        self._password = value
        if value and len(value.encode("utf-8")) <= PASSWORD_MAX_BYTES:
            self.password_digest = User.digest(value)

    def authenticate(self, password: str) -> "User | None":
        """Return self if the password matches the stored digest."""
        if not self.password_digest:
            return None
        return self if security.verify_digest(self.password_digest, password) else None

    # --- tokens ---

    def authenticated(self, kind: TokenKind | str, token: str) -> bool:
        """Check a plaintext token against the digest selected by kind."""
        digest = self._digest_for(TokenKind(kind))
        if digest is None:
            return False
        return security.verify_digest(digest, token)

    def _digest_for(self, kind: TokenKind) -> str | None:
        if kind is TokenKind.REMEMBER:
            return self.remember_digest
        if kind is TokenKind.ACTIVATION:
            return self.activation_digest
        return self.reset_digest

    def remember(self, db: Session) -> str:
        """Issue a remember token and persist its digest. Returns the plaintext token."""
        self.remember_token = User.new_token()
        self.update_attribute(db, "remember_digest", User.digest(self.remember_token))
        return self.remember_token

    def forget(self, db: Session) -> None:
        """Invalidate all remember-me sessions for this account."""
        self.remember_token = None
        self.update_attribute(db, "remember_digest", None)

    def revoke_sessions(self, db: Session) -> None:
        """Forget the remember digest and invalidate all outstanding access tokens."""
        self.remember_token = None
        self.update_columns(db, remember_digest=None, session_version=(self.session_version or 0) + 1)

    def reissue_activation_digest(self, db: Session) -> str:
        """Replace the activation digest of an unactivated account. Returns the new plaintext token."""
        if self.activated:
            raise ValueError("account is already activated")
        self._create_activation_digest()
        self.update_attribute(db, "activation_digest", self.activation_digest)
        return self.activation_token

    def activate(self, db: Session, now: datetime | None = None) -> None:
        """Mark the account as activated."""
        self.update_columns(db, activated=True, activated_at=now or datetime.utcnow())

    def send_activation_email(self, mailer) -> None:
        """Deliver the activation mail. The activation token must still be in memory."""
        if self.activation_token is None:
            raise ValueError("activation token is not available; it only exists in the request that created it")
        mailer.account_activation(self)

    def create_reset_digest(self, db: Session, now: datetime | None = None) -> str:
        """Issue a password reset token and persist its digest. Returns the plaintext token."""
        self.reset_token = User.new_token()
        self.update_columns(
            db,
            reset_digest=User.digest(self.reset_token),
            reset_sent_at=now or datetime.utcnow(),
        )
        return self.reset_token

    def send_password_reset_email(self, mailer) -> None:
        """Deliver the password reset mail. The reset token must still be in memory."""
        if self.reset_token is None:
            raise ValueError("reset token is not available; call create_reset_digest first")
        mailer.password_reset(self)

    def password_reset_expired(self, now: datetime | None = None) -> bool:
        """True if the reset was requested more than the allowed window ago."""
        if self.reset_sent_at is None:
            raise ValueError("no password reset has been requested")
        window = timedelta(hours=get_settings().PASSWORD_RESET_EXPIRE_HOURS)
        return self.reset_sent_at < (now or datetime.utcnow()) - window

    def _create_activation_digest(self) -> None:
        self.activation_token = User.new_token()
        self.activation_digest = User.digest(self.activation_token)

    # --- posts ---

    def feed(self, db: Session) -> Query:
        """Posts owned by this user, newest first."""
        return (
            db.query(Micropost)
            .filter(Micropost.user_id == self.id)
            .order_by(Micropost.created_at.desc(), Micropost.id.desc())
        )

    # --- persistence ---

    @property
    def new_record(self) -> bool:
        return not inspect(self).has_identity

    @property
    def full_messages(self) -> list[str]:
        """Validation errors as readable sentences."""
        return [
            f"{field.replace('_', ' ').capitalize()} {message}"
            for field, messages in (self.errors or {}).items()
            for message in messages
        ]

    def validate(self, db: Session) -> dict[str, list[str]]:
        """Normalize the email and check every validation rule.

        Stores and returns the violations keyed by field. An empty dict means valid.
        """
        if self.email is not None:
            self.email = self.email.strip().lower()

        errors: dict[str, list[str]] = {}

        def add(field: str, message: str) -> None:
            messages = errors.setdefault(field, [])
            if message not in messages:
                messages.append(message)

        if not (self.name or "").strip():
            add("name", "can't be blank")
        if self.name is not None and len(self.name) > NAME_MAX_LENGTH:
            add("name", f"is too long (maximum is {NAME_MAX_LENGTH} characters)")

        if not self.email:
            add("email", "can't be blank")
        else:
            if len(self.email) > EMAIL_MAX_LENGTH:
                add("email", f"is too long (maximum is {EMAIL_MAX_LENGTH} characters)")
            if not VALID_EMAIL_REGEX.match(self.email):
                add("email", "is invalid")
            elif self._email_taken(db):
                add("email", "has already been taken")

        if self.new_record and not self.password_digest:
            add("password", "can't be blank")
        if self._password is not None:
            if not self._password.strip():
                add("password", "can't be blank")
            elif len(self._password) < PASSWORD_MIN_LENGTH:
                add("password", f"is too short (minimum is {PASSWORD_MIN_LENGTH} characters)")
            if len(self._password.encode("utf-8")) > PASSWORD_MAX_BYTES:
                add("password", f"is too long (maximum is {PASSWORD_MAX_BYTES} bytes)")
            if self.password_confirmation is not None and self.password_confirmation != self._password:
                add("password_confirmation", "doesn't match Password")

        self.errors = errors
        return errors

    def _email_taken(self, db: Session) -> bool:
        query = db.query(User.id).filter(func.lower(User.email) == self.email.lower())
        if self.id is not None:
            query = query.filter(User.id != self.id)
        return query.first() is not None

    def save(self, db: Session) -> bool:
        """Normalize, validate, then insert or update.

        Returns False and leaves the store untouched if validation fails. The
        activation digest is generated right before the first insert.
        """
        creating = self.new_record
        if self.validate(db):
            return False

        if creating:
            self._create_activation_digest()
            db.add(self)
        try:
            db.commit()
        except IntegrityError as exc:
            db.rollback()
            if "email" in str(exc.orig).lower():
                raise EmailTakenError(self.email) from exc
            raise
        db.refresh(self)
        self._password = None
        self.password_confirmation = None
        return True

    def save_or_raise(self, db: Session) -> "User":
        """Like save() but raises RecordInvalid on validation failure."""
        if not self.save(db):
            raise RecordInvalid(self.errors)
        return self

    def update_attribute(self, db: Session, name: str, value) -> None:
        """Persist a single field without running validations."""
        self.update_columns(db, **{name: value})

    def update_columns(self, db: Session, **values) -> None:
        """Persist several fields in one update without running validations."""
        if self.new_record:
            raise ValueError("cannot update a record that has not been saved")
        for name, value in values.items():
            setattr(self, name, value)
        db.add(self)
        db.commit()

    def destroy(self, db: Session) -> None:
        """Delete the user and every micropost it owns."""
        db.delete(self)
        db.commit()


# Case-insensitive uniqueness at the store level.
Index("ix_users_email_lower", func.lower(User.email), unique=True)
