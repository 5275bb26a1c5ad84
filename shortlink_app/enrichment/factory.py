"""
Factory for creating link enrichers.
"""

import logging
from enum import Enum
from typing import Optional
from .strategies import LinkEnricher, HttpLinkEnricher, NullLinkEnricher
from shortlink_app.config import settings

logger = logging.getLogger(__name__)


class EnrichmentBackend(Enum):
    """Available enrichment backends"""
    HTTP = "http"
    NULL = "null"


class LinkEnricherFactory:
    """Creates the configured LinkEnricher once and reuses it."""

    _instance: Optional[LinkEnricher] = None

    @classmethod
    def create(cls, backend: EnrichmentBackend) -> LinkEnricher:
        if cls._instance is not None:
            return cls._instance

        if backend == EnrichmentBackend.HTTP:
            cls._instance = HttpLinkEnricher(timeout=settings.enrichment_timeout)
        elif backend == EnrichmentBackend.NULL:
            cls._instance = NullLinkEnricher()
        else:
            raise ValueError(f"Unknown enrichment backend: {backend}")

        logger.info("Link enrichment backend initialized: %s", backend.value)
        return cls._instance

    @classmethod
    def clear_instance(cls):
        """Clear cached instance (for testing)"""
        cls._instance = None
