"""
Best-effort enrichment of newly created links (page title, reachability).
"""

from .strategies import LinkEnricher, HttpLinkEnricher, NullLinkEnricher
from .factory import LinkEnricherFactory, EnrichmentBackend

__all__ = [
    "LinkEnricher",
    "HttpLinkEnricher",
    "NullLinkEnricher",
    "LinkEnricherFactory",
    "EnrichmentBackend",
]
