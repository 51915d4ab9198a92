"""Pytest configuration and fixtures."""

import os

# Settings are read at import time: cheap hashing and captured mail for the whole run.
os.environ["APP_ENV"] = "test"
os.environ["MAIL_BACKEND"] = "memory"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.database import Base, get_db  # noqa: E402
from app.models.micropost import Micropost  # noqa: E402, F401
from app.models.user import User  # noqa: E402
from app.services.mailer import get_mailer  # noqa: E402


@pytest.fixture(name="db_session")
def db_session_fixture():
    """Create an in-memory SQLite database for tests."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    testing_session_local = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = testing_session_local()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(name="mailer", autouse=True)
def mailer_fixture():
    """Memory mailer with an empty outbox."""
    mailer = get_mailer()
    mailer.outbox.clear()
    yield mailer
    mailer.outbox.clear()


@pytest.fixture(name="client")
def client_fixture(db_session: Session):
    """Create a test client with overridden DB dependency and disabled rate limiting."""
    from app.rate_limit import limiter
    from main import app

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    limiter.enabled = False
    with TestClient(app) as c:
        yield c
    limiter.enabled = True
    app.dependency_overrides.clear()


@pytest.fixture(name="make_user")
def make_user_fixture(db_session: Session):
    """Factory that saves a user, activated unless told otherwise."""

    def _make_user(
        name: str = "Michael Example",
        email: str = "michael@example.com",
        password: str = "password",
        activated: bool = True,
    ) -> User:
        user = User(name=name, email=email, password=password, password_confirmation=password)
        user.save_or_raise(db_session)
        if activated:
            user.activate(db_session)
        return user

    return _make_user


@pytest.fixture(name="user")
def user_fixture(make_user) -> User:
    """An activated user with password 'password'."""
    return make_user()
