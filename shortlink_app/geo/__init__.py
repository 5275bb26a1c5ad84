"""
Geolocation module for click analytics.
Implements Strategy Pattern so the IP lookup service can be swapped or disabled.
"""

from .strategies import GeoLocator, IpApiGeoLocator, NullGeoLocator
from .factory import GeoLocatorFactory, GeoBackend

__all__ = [
    "GeoLocator",
    "IpApiGeoLocator",
    "NullGeoLocator",
    "GeoLocatorFactory",
    "GeoBackend",
]
