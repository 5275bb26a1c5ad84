"""
Link enrichment strategies.

Neither check may block link creation: failures come back as None.
"""

import html
import logging
import re
from abc import ABC, abstractmethod
from typing import Optional

import httpx

from shortlink_app.network import is_public_target

logger = logging.getLogger(__name__)

TITLE_MAX_LENGTH = 255
TITLE_MAX_BYTES = 64 * 1024
_TITLE_RE = re.compile(r"<title[^>]*>(.*?)</title>", re.IGNORECASE | re.DOTALL)


class LinkEnricher(ABC):
    """Abstract base class for link enrichment"""

    @abstractmethod
    def check_reachable(self, url: str) -> Optional[bool]:
        """True/False when the target answered, None when the check itself failed"""
        pass

    @abstractmethod
    def fetch_title(self, url: str) -> Optional[str]:
        """Contents of the page's <title>, or None"""
        pass


class HttpLinkEnricher(LinkEnricher):
    """
    Fetches the target over HTTP with httpx.

    Internal targets (loopback, private ranges, local names) are never
    contacted, including as redirect hops. Title lookups stream the
    response and read at most max_bytes of an HTML body.
    """

    def __init__(
        self,
        timeout: float = 5.0,
        client: Optional[httpx.Client] = None,
        max_bytes: int = TITLE_MAX_BYTES
    ):
        self.max_bytes = max_bytes
        self.client = client or httpx.Client(
            timeout=timeout,
            follow_redirects=True,
            event_hooks={"request": [_reject_internal_target]},
        )

    def check_reachable(self, url: str) -> Optional[bool]:
        if not is_public_target(url):
            logger.debug("Skipping reachability check for internal target %s", url)
            return None
        try:
            response = self.client.head(url)
        except httpx.HTTPError as e:
            logger.debug("Reachability check failed for %s: %s", url, e)
            return None
        return response.status_code < 400

    def fetch_title(self, url: str) -> Optional[str]:
        if not is_public_target(url):
            logger.debug("Skipping title extraction for internal target %s", url)
            return None
        try:
            with self.client.stream("GET", url) as response:
                response.raise_for_status()
                content_type = response.headers.get("content-type", "")
                if "text/html" not in content_type.lower():
                    return None

                body = b""
                for chunk in response.iter_bytes():
                    body += chunk
                    if len(body) >= self.max_bytes:
                        break
                encoding = response.charset_encoding or "utf-8"
        except httpx.HTTPError as e:
            logger.debug("Title extraction failed for %s: %s", url, e)
            return None

        body = body[:self.max_bytes]
        try:
            document = body.decode(encoding, errors="replace")
        except LookupError:
            document = body.decode("utf-8", errors="replace")
        return extract_title(document)


class NullLinkEnricher(LinkEnricher):
    """No-op enrichment (no outbound requests)"""

    def check_reachable(self, url: str) -> Optional[bool]:
        return None

    def fetch_title(self, url: str) -> Optional[str]:
        return None


def extract_title(document: str) -> Optional[str]:
    match = _TITLE_RE.search(document or "")
    if not match:
        return None
    title = " ".join(html.unescape(match.group(1)).split())
    return title[:TITLE_MAX_LENGTH] or None


def _reject_internal_target(request: httpx.Request) -> None:
    if not is_public_target(str(request.url)):
        raise httpx.RequestError(f"Refusing internal target {request.url.host}", request=request)
