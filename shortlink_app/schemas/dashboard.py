from pydantic import BaseModel
from typing import List
from shortlink_app.schemas.link import LinkResponse


class DashboardMetrics(BaseModel):
    total_urls: int = 0
    total_clicks: int = 0
    click_through_rate: float = 0
    active_urls: int = 0
    clicks_today: int = 0
    clicks_this_week: int = 0


class DailyClicks(BaseModel):
    date: str
    count: int
    formatted_date: str


class Dashboard(BaseModel):
    metrics: DashboardMetrics
    recent_urls: List[LinkResponse]
    top_urls: List[LinkResponse]
    analytics_data: List[DailyClicks]
