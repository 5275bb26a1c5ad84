"""
Test configuration and fixtures for the short link service.
This centralizes all test setup, making individual tests clean.
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from main import app
from shortlink_app.database.connection import Base, get_db
from shortlink_app.dependencies import get_geo_locator, get_link_enricher
from shortlink_app.enrichment.strategies import NullLinkEnricher
from shortlink_app.geo.strategies import NullGeoLocator
from shortlink_app.models import ShortLink
from shortlink_app.schemas.user import UserCreate
from shortlink_app.services.user_service import UserService

# Test database configuration
SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db_session():
    """
    Create a fresh database session for each test.
    This ensures tests are isolated and don't affect each other.
    """
    Base.metadata.create_all(bind=engine)

    db = TestingSessionLocal()

    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db_session):
    """
    Test client with the database overridden and no outbound HTTP
    (geolocation and enrichment replaced by their null strategies).
    """
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_geo_locator] = lambda: NullGeoLocator()
    app.dependency_overrides[get_link_enricher] = lambda: NullLinkEnricher()

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db_session):
    """Register a user, returning (user, api_token)."""
    def _make_user(email="owner@example.com", name="Owner"):
        return UserService(db_session).register(UserCreate(email=email, name=name))
    return _make_user


@pytest.fixture
def user_and_token(make_user):
    return make_user()


@pytest.fixture
def user(user_and_token):
    return user_and_token[0]


@pytest.fixture
def auth_headers(user_and_token):
    return {"Authorization": f"Bearer {user_and_token[1]}"}


@pytest.fixture
def make_link(db_session):
    """Insert a ShortLink row directly, bypassing code generation."""
    def _make_link(owner, short_code="abc123", original_url="https://example.com/", **fields):
        link = ShortLink(
            user_id=owner.id,
            short_code=short_code,
            original_url=original_url,
            **fields
        )
        db_session.add(link)
        db_session.commit()
        db_session.refresh(link)
        return link
    return _make_link
