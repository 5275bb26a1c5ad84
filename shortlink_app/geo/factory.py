"""
Factory for creating geolocation lookups.
"""

import logging
from enum import Enum
from typing import Optional
from .strategies import GeoLocator, IpApiGeoLocator, NullGeoLocator
from shortlink_app.config import settings

logger = logging.getLogger(__name__)


class GeoBackend(Enum):
    """Available geolocation backends"""
    IP_API = "ip_api"
    NULL = "null"


class GeoLocatorFactory:
    """
    Creates the configured GeoLocator once and reuses it.

    Gets configuration from settings (not passed as parameters).
    """

    _instance: Optional[GeoLocator] = None

    @classmethod
    def create(cls, backend: GeoBackend) -> GeoLocator:
        if cls._instance is not None:
            return cls._instance

        if backend == GeoBackend.IP_API:
            cls._instance = IpApiGeoLocator(
                base_url=settings.geoip_api_url,
                timeout=settings.geoip_timeout
            )
        elif backend == GeoBackend.NULL:
            cls._instance = NullGeoLocator()
        else:
            raise ValueError(f"Unknown geolocation backend: {backend}")

        logger.info("Geolocation backend initialized: %s", backend.value)
        return cls._instance

    @classmethod
    def clear_instance(cls):
        """Clear cached instance (for testing)"""
        cls._instance = None
