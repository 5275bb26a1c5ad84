"""
IP geolocation strategies.

Lookups are best effort: every strategy returns None instead of raising,
so a slow or broken lookup service never costs a redirect.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional

import httpx

logger = logging.getLogger(__name__)


class GeoLocator(ABC):
    """Abstract base class for IP to country lookups"""

    @abstractmethod
    def country_code(self, ip_address: Optional[str]) -> Optional[str]:
        """
        Resolve an IP address to an ISO 3166-1 alpha-2 country code.

        Args:
            ip_address: Client address, may be None

        Returns:
            Two upper-case letters, or None when unknown
        """
        pass


class IpApiGeoLocator(GeoLocator):
    """
    Synchronous lookup against the ip-api.com JSON endpoint.

    Only the countryCode field is requested to keep the response tiny.
    """

    def __init__(
        self,
        base_url: str = "http://ip-api.com/json",
        timeout: float = 2.0,
        client: Optional[httpx.Client] = None
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.client = client or httpx.Client(timeout=timeout)

    def country_code(self, ip_address: Optional[str]) -> Optional[str]:
        if not ip_address:
            return None

        try:
            response = self.client.get(
                f"{self.base_url}/{ip_address}",
                params={"fields": "countryCode"},
            )
            response.raise_for_status()
            code = response.json().get("countryCode")
        except (httpx.HTTPError, ValueError) as e:
            logger.debug("Geolocation lookup failed for %s: %s", ip_address, e)
            return None

        if isinstance(code, str) and len(code) == 2 and code.isalpha():
            return code.upper()
        return None


class NullGeoLocator(GeoLocator):
    """No-op lookup (geolocation disabled)"""

    def country_code(self, ip_address: Optional[str]) -> Optional[str]:
        return None
