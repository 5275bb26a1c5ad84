"""
Click analytics for the redirect path.

Everything here is derived from the request: the client IP (proxy headers
first), a coarse device class from the user agent, and a country from the
configured GeoLocator. One click_events row is written per redirect.
"""

import logging
import re
from typing import Mapping, Optional

from sqlalchemy.orm import Session

from shortlink_app.geo.strategies import GeoLocator
from shortlink_app.models.click_event import ClickEvent
from shortlink_app.models.short_link import ShortLink
from shortlink_app.network import parse_public_ip
from shortlink_app.schemas.click import VisitorInfo

logger = logging.getLogger(__name__)

# Checked in order; the first one carrying a public address wins
CLIENT_IP_HEADERS = (
    "cf-connecting-ip",       # Cloudflare
    "client-ip",              # Proxy
    "x-forwarded-for",        # Load balancer/proxy
    "x-forwarded",            # Proxy
    "x-cluster-client-ip",    # Cluster
    "forwarded-for",          # Proxy
    "forwarded",              # Proxy
)

DEVICE_MOBILE = "mobile"
DEVICE_TABLET = "tablet"
DEVICE_BOT = "bot"
DEVICE_DESKTOP = "desktop"
DEVICE_UNKNOWN = "unknown"

_MOBILE_RE = re.compile(r"mobile|android|iphone|ipad|phone|blackberry|opera mini|iemobile|wpdesktop")
_TABLET_RE = re.compile(r"tablet|ipad")
_BOT_RE = re.compile(r"bot|crawler|spider|scraper")

USER_AGENT_MAX_LENGTH = 512
REFERER_MAX_LENGTH = 2048


def get_client_ip(headers: Mapping[str, str], remote_addr: Optional[str] = None) -> Optional[str]:
    """
    Real client address behind proxies and CDNs.

    Args:
        headers: Request headers (any case)
        remote_addr: Peer address reported by the server

    Returns:
        The first public address found in CLIENT_IP_HEADERS, else remote_addr
    """
    lowered = {key.lower(): value for key, value in headers.items()}
    for header in CLIENT_IP_HEADERS:
        value = lowered.get(header)
        if not value:
            continue
        ip = parse_public_ip(value)
        if ip:
            return ip
    return remote_addr


def get_device_type(user_agent: Optional[str]) -> str:
    """Classify a user agent as mobile, tablet, bot or desktop."""
    if not user_agent:
        return DEVICE_UNKNOWN

    user_agent = user_agent.lower()

    if _MOBILE_RE.search(user_agent):
        # iPads and Android tablets also match the mobile pattern
        if _TABLET_RE.search(user_agent):
            return DEVICE_TABLET
        return DEVICE_MOBILE

    if _TABLET_RE.search(user_agent):
        return DEVICE_TABLET

    if _BOT_RE.search(user_agent):
        return DEVICE_BOT

    return DEVICE_DESKTOP


def _truncate(value: Optional[str], length: int) -> Optional[str]:
    if value is None:
        return None
    return value[:length]


class ClickRecorder:
    """Writes one ClickEvent per redirect."""

    def __init__(self, db: Session, geo_locator: GeoLocator):
        self.db = db
        self.geo_locator = geo_locator

    def build_event(self, link: ShortLink, visitor: VisitorInfo) -> ClickEvent:
        return ClickEvent(
            short_link_id=link.id,
            ip_address=visitor.ip_address,
            user_agent=_truncate(visitor.user_agent, USER_AGENT_MAX_LENGTH),
            referer=_truncate(visitor.referer, REFERER_MAX_LENGTH),
            country=self.geo_locator.country_code(visitor.ip_address),
            device_type=get_device_type(visitor.user_agent),
        )

    def record(self, link: ShortLink, visitor: VisitorInfo) -> ClickEvent:
        """
        Insert the click in its own transaction.

        Raises whatever the database raised, after rolling back; the caller
        decides whether a failed click matters.
        """
        event = self.build_event(link, visitor)
        try:
            self.db.add(event)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        return event
