import os

# Configure before the app (and its engine) is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["CHAT_PROVIDER"] = "gemini"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from connecto.main import app
from connecto.db.database import Base, get_db
from connecto.models.user import UserRole
from connecto.realtime.hub import ConnectionHub, get_hub
from connecto.services.companion import AuraCompanion, get_companion
from tests.helpers import FakeProvider, make_user

# Use in-memory SQLite for testing
TEST_DATABASE_URL = "sqlite:///:memory:"


@pytest.fixture
def session_factory():
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    # Create the tables
    Base.metadata.create_all(bind=engine)

    yield TestingSessionLocal

    # Drop all tables after test
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def hub():
    return ConnectionHub()


@pytest.fixture
def fake_provider():
    return FakeProvider()


@pytest.fixture
def client(session_factory, hub, fake_provider):
    # Dependency overrides
    def override_get_db():
        try:
            session = session_factory()
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_hub] = lambda: hub
    app.dependency_overrides[get_companion] = lambda: AuraCompanion(provider=fake_provider, timeout=1)

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()


@pytest.fixture
def admin(db):
    return make_user(db, "admin@example.com", role=UserRole.ADMIN)


@pytest.fixture
def therapist(db):
    return make_user(db, "therapist@example.com", role=UserRole.THERAPIST, referral_code="THE-abc123-0001")
