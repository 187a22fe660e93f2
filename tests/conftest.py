import os

# Set testing environment variable before the application is imported
os.environ["TESTING"] = "1"
os.environ.setdefault("TEST_DATABASE_URL", "sqlite://")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from vaccine_scheduler.core.database import Base, init_db
from vaccine_scheduler.core.security import UserRole
from vaccine_scheduler.core.session import SessionState
from vaccine_scheduler.services.auth_service import AuthService

STRONG_PASSWORD = "Abcdef1!"

@pytest.fixture
def engine():
    # One shared in-memory connection so every session sees the same data
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()

@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)

@pytest.fixture
def db(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()

@pytest.fixture
def make_account(db):
    """Register an account and return a session logged in as it."""
    def _make(role: UserRole, username: str, password: str = STRONG_PASSWORD) -> SessionState:
        auth = AuthService(db)
        auth.register(role, username, password)
        return auth.login(SessionState(), role, username, password)
    return _make

@pytest.fixture
def patient(make_account):
    return make_account(UserRole.PATIENT, "pat")

@pytest.fixture
def caregiver(make_account):
    return make_account(UserRole.CAREGIVER, "carol")
