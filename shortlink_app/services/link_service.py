import logging
import re
from datetime import datetime
from typing import List, Optional

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from shortlink_app.enrichment.strategies import LinkEnricher
from shortlink_app.exceptions import (
    LinkNotFoundError,
    LinkPermissionError,
    ShortCodeValidationError,
)
from shortlink_app.models.click_event import ClickEvent
from shortlink_app.models.short_link import ShortLink
from shortlink_app.models.user import User, utcnow
from shortlink_app.schemas.click import ClickEventResponse, VisitorInfo
from shortlink_app.schemas.link import (
    DailyCount,
    LinkCreate,
    LinkListItem,
    LinkResponse,
    LinkStats,
    RefererCount,
)
from shortlink_app.services.click_recorder import ClickRecorder
from shortlink_app.services.short_code_factory import ShortCodeFactory

logger = logging.getLogger(__name__)

_CODE_RE = re.compile(r"^[A-Za-z0-9]+$")

RECENT_CLICKS_LIMIT = 10
TOP_REFERERS_LIMIT = 10


class LinkService:
    """
    Short link service with its collaborators injected.

    - db: request-scoped session, every query goes through it
    - click_recorder: writes analytics rows on redirect
    - enricher: optional title/reachability lookups on create
    """

    def __init__(
        self,
        db: Session,
        click_recorder: Optional[ClickRecorder] = None,
        enricher: Optional[LinkEnricher] = None
    ):
        self.db = db
        self.click_recorder = click_recorder
        self.enricher = enricher

    def create_link(self, user: User, data: LinkCreate) -> ShortLink:
        """
        Create a short link owned by user.

        The short code is validated (custom) or drawn (random) before
        anything is written, so a rejected code leaves no row behind.

        Raises:
            ShortCodeValidationError: custom code malformed, reserved or taken
        """
        original_url = str(data.original_url)

        strategy = ShortCodeFactory.create_strategy(data.custom_code)
        short_code = strategy.generate(self.db)

        title = data.title
        if self.enricher:
            reachable = self.enricher.check_reachable(original_url)
            if reachable is False:
                logger.warning("Target appears unreachable: %s", original_url)
            if not title:
                title = self.enricher.fetch_title(original_url)

        link = ShortLink(
            user_id=user.id,
            original_url=original_url,
            short_code=short_code,
            title=title,
            expires_at=data.expires_at,
        )
        self.db.add(link)
        try:
            self.db.commit()
        except IntegrityError:
            # Another request took the code between the check and the insert
            self.db.rollback()
            raise ShortCodeValidationError(f"Short code '{short_code}' is already taken")
        self.db.refresh(link)

        logger.info("Created short link %s for user %s", link.short_code, user.id)
        return link

    def list_links(self, user: User) -> List[LinkListItem]:
        """User's links, newest first, with the number of recorded click events."""
        clicks_count = func.count(ClickEvent.id)
        rows = (
            self.db.query(ShortLink, clicks_count)
            .outerjoin(ClickEvent, ClickEvent.short_link_id == ShortLink.id)
            .filter(ShortLink.user_id == user.id)
            .group_by(ShortLink.id)
            .order_by(ShortLink.created_at.desc(), ShortLink.id.desc())
            .all()
        )

        items = []
        for link, count in rows:
            item = LinkListItem.model_validate(link)
            item.clicks_count = count
            items.append(item)
        return items

    def get_owned_link(self, user: User, link_id: int) -> ShortLink:
        """
        Raises:
            LinkNotFoundError: no such link
            LinkPermissionError: link belongs to someone else
        """
        link = self.db.get(ShortLink, link_id)
        if link is None:
            raise LinkNotFoundError(f"Short link {link_id} not found")
        if link.user_id != user.id:
            raise LinkPermissionError(f"Short link {link_id} belongs to another user")
        return link

    def delete_link(self, user: User, link_id: int) -> None:
        """Hard delete; click events go with it."""
        link = self.get_owned_link(user, link_id)
        self.db.delete(link)
        self.db.commit()
        logger.info("Deleted short link %s", link_id)

    def get_link_stats(self, user: User, link_id: int) -> LinkStats:
        link = self.get_owned_link(user, link_id)

        day = func.date(ClickEvent.created_at)
        daily = (
            self.db.query(day, func.count(ClickEvent.id))
            .filter(ClickEvent.short_link_id == link.id)
            .group_by(day)
            .order_by(day)
            .all()
        )

        recent = (
            self.db.query(ClickEvent)
            .filter(ClickEvent.short_link_id == link.id)
            .order_by(ClickEvent.created_at.desc(), ClickEvent.id.desc())
            .limit(RECENT_CLICKS_LIMIT)
            .all()
        )

        referers = (
            self.db.query(ClickEvent.referer, func.count(ClickEvent.id).label("count"))
            .filter(ClickEvent.short_link_id == link.id, ClickEvent.referer.isnot(None))
            .group_by(ClickEvent.referer)
            .order_by(func.count(ClickEvent.id).desc())
            .limit(TOP_REFERERS_LIMIT)
            .all()
        )

        return LinkStats(
            url=LinkResponse.model_validate(link),
            clicks_over_time=[DailyCount(date=str(d), count=c) for d, c in daily],
            recent_clicks=[ClickEventResponse.model_validate(click) for click in recent],
            clicks_by_device=self._count_by(link.id, ClickEvent.device_type),
            clicks_by_country=self._count_by(link.id, ClickEvent.country),
            top_referers=[RefererCount(referer=r, count=c) for r, c in referers],
        )

    def _count_by(self, link_id: int, column) -> dict:
        rows = (
            self.db.query(column, func.count(ClickEvent.id))
            .filter(ClickEvent.short_link_id == link_id)
            .group_by(column)
            .all()
        )
        return {value or "unknown": count for value, count in rows}

    def find_active_by_code(self, short_code: str, now: Optional[datetime] = None) -> Optional[ShortLink]:
        """Exact match on code, active and not expired at now."""
        if not short_code or not _CODE_RE.match(short_code):
            return None

        now = now or utcnow()
        return self.db.query(ShortLink).filter(
            ShortLink.short_code == short_code,
            ShortLink.is_active.is_(True),
            or_(ShortLink.expires_at.is_(None), ShortLink.expires_at > now)
        ).first()

    def resolve_for_redirect(self, short_code: str, visitor: VisitorInfo) -> Optional[str]:
        """
        Target URL for a redirect, tracking the click on the way.

        Analytics failures are logged and swallowed: once the link is found,
        the caller always gets its original_url back.

        Returns:
            The stored original_url, or None if the code is unknown,
            inactive or expired
        """
        link = self.find_active_by_code(short_code)
        if link is None:
            return None

        link_id = link.id
        target = link.original_url

        if self.click_recorder:
            try:
                self.click_recorder.record(link, visitor)
            except Exception:
                logger.exception(
                    "Failed to track click for link %s (ip=%s, user_agent=%s)",
                    link_id, visitor.ip_address, visitor.user_agent
                )

        self._increment_clicks(link, link_id)
        return target

    def _increment_clicks(self, link: ShortLink, link_id: int) -> None:
        # Read-modify-write: concurrent redirects may drop increments
        try:
            link.click_count = (link.click_count or 0) + 1
            link.last_clicked_at = utcnow()
            self.db.commit()
        except Exception:
            self.db.rollback()
            logger.exception("Failed to increment click count for link %s", link_id)
