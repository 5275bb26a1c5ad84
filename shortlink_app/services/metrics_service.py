"""
Dashboard aggregates for one user.

All "calendar" boundaries (today, this week, the daily series) are UTC,
the zone timestamps are stored in.
"""

import math
from datetime import datetime, timedelta
from typing import List, Optional

from sqlalchemy import and_, case, func, or_
from sqlalchemy.orm import Session

from shortlink_app.config import settings
from shortlink_app.models.click_event import ClickEvent
from shortlink_app.models.short_link import ShortLink
from shortlink_app.models.user import User, utcnow
from shortlink_app.schemas.dashboard import DailyClicks, Dashboard, DashboardMetrics
from shortlink_app.schemas.link import LinkResponse


def start_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def click_through_rate(total_clicks: int, total_urls: int) -> float:
    """Average clicks per URL, 2 decimals; 0 when undefined."""
    if total_urls <= 0:
        return 0
    rate = total_clicks / total_urls
    if not math.isfinite(rate):
        return 0
    return round(rate, 2)


class MetricsService:
    """Grouped counts over a user's links and their click events."""

    def __init__(self, db: Session, now: Optional[datetime] = None):
        self.db = db
        self.now = now

    def _now(self) -> datetime:
        return self.now or utcnow()

    def get_key_metrics(self, user: User) -> DashboardMetrics:
        now = self._now()

        active = and_(
            ShortLink.is_active.is_(True),
            or_(ShortLink.expires_at.is_(None), ShortLink.expires_at > now)
        )
        total_urls, total_clicks, active_urls = (
            self.db.query(
                func.count(ShortLink.id),
                func.coalesce(func.sum(ShortLink.click_count), 0),
                func.count(case((active, 1))),
            )
            .filter(ShortLink.user_id == user.id)
            .one()
        )
        total_urls = int(total_urls or 0)
        total_clicks = int(total_clicks or 0)

        today = start_of_day(now)
        week_start = today - timedelta(days=today.weekday())
        clicks_today, clicks_this_week = (
            self.db.query(
                func.count(case((ClickEvent.created_at >= today, 1))),
                func.count(case((ClickEvent.created_at >= week_start, 1))),
            )
            .join(ShortLink, ClickEvent.short_link_id == ShortLink.id)
            .filter(ShortLink.user_id == user.id)
            .one()
        )

        return DashboardMetrics(
            total_urls=max(0, total_urls),
            total_clicks=max(0, total_clicks),
            click_through_rate=max(0, click_through_rate(total_clicks, total_urls)),
            active_urls=max(0, int(active_urls or 0)),
            clicks_today=max(0, int(clicks_today or 0)),
            clicks_this_week=max(0, int(clicks_this_week or 0)),
        )

    def get_daily_clicks(self, user: User, days: int = 30) -> List[DailyClicks]:
        """
        Click counts for the last `days` calendar days, oldest first.

        Always exactly `days` entries; the last one is today. Days without
        clicks are zero-filled.
        """
        today = start_of_day(self._now())
        window_start = today - timedelta(days=days - 1)

        day = func.date(ClickEvent.created_at)
        rows = (
            self.db.query(day, func.count(ClickEvent.id))
            .join(ShortLink, ClickEvent.short_link_id == ShortLink.id)
            .filter(ShortLink.user_id == user.id, ClickEvent.created_at >= window_start)
            .group_by(day)
            .all()
        )
        # SQLite returns 'YYYY-MM-DD' strings, PostgreSQL returns dates
        counts = {str(d): c for d, c in rows}

        series = []
        for offset in range(days - 1, -1, -1):
            moment = today - timedelta(days=offset)
            key = moment.strftime("%Y-%m-%d")
            series.append(DailyClicks(
                date=key,
                count=counts.get(key, 0),
                formatted_date=f"{moment:%b} {moment.day}",
            ))
        return series

    def get_recent_links(self, user: User, limit: int = 10) -> List[LinkResponse]:
        links = (
            self.db.query(ShortLink)
            .filter(ShortLink.user_id == user.id)
            .order_by(ShortLink.created_at.desc(), ShortLink.id.desc())
            .limit(limit)
            .all()
        )
        return [LinkResponse.model_validate(link) for link in links]

    def get_top_links(self, user: User, limit: int = 5) -> List[LinkResponse]:
        links = (
            self.db.query(ShortLink)
            .filter(ShortLink.user_id == user.id)
            .order_by(ShortLink.click_count.desc(), ShortLink.id)
            .limit(limit)
            .all()
        )
        return [LinkResponse.model_validate(link) for link in links]

    def get_dashboard(self, user: User) -> Dashboard:
        return Dashboard(
            metrics=self.get_key_metrics(user),
            recent_urls=self.get_recent_links(user, settings.recent_links_limit),
            top_urls=self.get_top_links(user, settings.top_links_limit),
            analytics_data=self.get_daily_clicks(user, settings.analytics_days),
        )
