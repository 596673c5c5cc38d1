"""Pytest fixtures for testing"""

import pytest
from datetime import datetime, timedelta
from typing import Callable, Generator
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker, Session
from banking_gateway.api.main import create_app
from banking_gateway.config import settings
from banking_gateway.infrastructure.database.models import Base, User
from banking_gateway.infrastructure.database.session import build_engine, get_db
from banking_gateway.services.ledger_engine import LedgerEngine
from banking_gateway.services.session_authority import SessionAuthority
from banking_gateway.utils.date_utils import utcnow
from banking_gateway.utils.hashing import hash_secret

TEST_SECRET = "test-secret"
TEST_PASSWORD = "StrongPassw0rd!"


class FrozenClock:
    """Controllable clock for expiry tests"""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture(autouse=True)
def fast_hashing(monkeypatch):
    """bcrypt at minimum cost keeps the suite quick"""
    monkeypatch.setattr(settings, "bcrypt_rounds", 4)


@pytest.fixture
def session_factory(tmp_path) -> Generator[sessionmaker, None, None]:
    """Fresh SQLite database file per test"""
    engine = build_engine(f"sqlite:///{tmp_path / 'test.db'}")
    Base.metadata.create_all(bind=engine)
    try:
        yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def db(session_factory: sessionmaker) -> Generator[Session, None, None]:
    """Create test database and session"""
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(utcnow())


@pytest.fixture
def authority(db: Session, clock: FrozenClock) -> SessionAuthority:
    return SessionAuthority(db, secret=TEST_SECRET, clock=clock)


@pytest.fixture
def ledger(db: Session) -> LedgerEngine:
    return LedgerEngine(db)


@pytest.fixture
def make_user(db: Session) -> Callable[..., User]:
    """Insert a user directly, bypassing signup"""
    counter = {"n": 0}

    def _make_user(email: str | None = None, password: str = TEST_PASSWORD) -> User:
        counter["n"] += 1
        user = User(
            email=email or f"user{counter['n']}@mybank.com",
            password_hash=hash_secret(password, rounds=4),
            first_name="Test",
            last_name="User",
            phone_number="+16502530000",
            date_of_birth="1990-01-01",
            ssn_hash=hash_secret("123456789", rounds=4),
            address="1 Test St",
            city="Testville",
            state="CA",
            zip_code="12345",
        )
        db.add(user)
        db.commit()
        return user

    return _make_user


@pytest.fixture
def client(db: Session) -> TestClient:
    """Create FastAPI test client with test database"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)


@pytest.fixture
def signup_payload() -> dict:
    return {
        "email": "alice@mybank.com",
        "password": TEST_PASSWORD,
        "first_name": "Alice",
        "last_name": "Smith",
        "phone_number": "(650) 253-0000",
        "date_of_birth": "1990-01-01",
        "ssn": "123456789",
        "address": "1 Main St",
        "city": "Springfield",
        "state": "il",
        "zip_code": "62701",
    }
