"""
FastAPI dependencies for dependency injection.

This module provides singleton instances of the geolocation and enrichment
strategies, request-scoped services built on the database session, and the
bearer-token authentication dependency.

Tests override get_db, get_geo_locator and get_link_enricher through
app.dependency_overrides.
"""

from functools import lru_cache
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from shortlink_app.config import settings
from shortlink_app.database.connection import get_db
from shortlink_app.enrichment.factory import EnrichmentBackend, LinkEnricherFactory
from shortlink_app.enrichment.strategies import LinkEnricher
from shortlink_app.geo.factory import GeoBackend, GeoLocatorFactory
from shortlink_app.geo.strategies import GeoLocator
from shortlink_app.models.user import User
from shortlink_app.services.click_recorder import ClickRecorder
from shortlink_app.services.link_service import LinkService
from shortlink_app.services.metrics_service import MetricsService
from shortlink_app.services.user_service import UserService

bearer_scheme = HTTPBearer(auto_error=False)


@lru_cache()
def get_geo_locator() -> GeoLocator:
    """Geolocation strategy from settings (singleton)."""
    return GeoLocatorFactory.create(GeoBackend(settings.geo_backend))


@lru_cache()
def get_link_enricher() -> LinkEnricher:
    """Enrichment strategy from settings (singleton)."""
    return LinkEnricherFactory.create(EnrichmentBackend(settings.enrichment_backend))


def get_click_recorder(
    db: Session = Depends(get_db),
    geo_locator: GeoLocator = Depends(get_geo_locator)
) -> ClickRecorder:
    return ClickRecorder(db=db, geo_locator=geo_locator)


def get_link_service(
    db: Session = Depends(get_db),
    click_recorder: ClickRecorder = Depends(get_click_recorder),
    enricher: LinkEnricher = Depends(get_link_enricher)
) -> LinkService:
    """
    LinkService with all dependencies injected.

    Controllers depend on the service; the service depends on the session,
    the click recorder and the enricher.
    """
    return LinkService(db=db, click_recorder=click_recorder, enricher=enricher)


def get_metrics_service(db: Session = Depends(get_db)) -> MetricsService:
    return MetricsService(db=db)


def get_user_service(db: Session = Depends(get_db)) -> UserService:
    return UserService(db=db)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    user_service: UserService = Depends(get_user_service)
) -> User:
    """Resolve `Authorization: Bearer <token>` to a user, 401 otherwise."""
    user = user_service.get_by_token(credentials.credentials if credentials else None)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing or invalid API token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user
