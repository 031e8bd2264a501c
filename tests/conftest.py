"""Shared fixtures: an in-memory database wired into the app."""

import os

# Must be set before storefront.config is imported
os.environ.setdefault("SF_DATABASE_URL", "sqlite://")
os.environ.setdefault("SF_BCRYPT_ROUNDS", "4")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine

import storefront.models  # noqa: F401  (registers tables)
from storefront.database import get_session
from storefront.main import app
from storefront.services.auth import AuthService
from storefront.services.credential_store import CredentialStore


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def store(session) -> CredentialStore:
    return CredentialStore(session)


@pytest.fixture
def auth_service(store) -> AuthService:
    return AuthService(store, issuer="Test Store")


@pytest.fixture
def client(engine):
    def _get_session():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = _get_session
    yield TestClient(app)
    app.dependency_overrides.clear()
