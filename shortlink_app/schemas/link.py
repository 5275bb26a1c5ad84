from pydantic import BaseModel, HttpUrl, Field, computed_field, ConfigDict, field_validator
from typing import Dict, List, Optional
from datetime import datetime, timezone
from shortlink_app.config import settings
from shortlink_app.schemas.click import ClickEventResponse

ORIGINAL_URL_MAX_LENGTH = 2048


def to_naive_utc(value: datetime) -> datetime:
    """Timestamps are stored naive UTC; aware input is converted, naive input is taken as UTC."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class LinkBase(BaseModel):
    original_url: HttpUrl = Field(..., description="The URL to be shortened")
    title: Optional[str] = Field(None, max_length=255)


class LinkCreate(LinkBase):
    custom_code: Optional[str] = Field(
        None,
        min_length=settings.custom_code_min_length,
        max_length=settings.custom_code_max_length,
        pattern=r"^[A-Za-z0-9]+$",
        description="Requested short code; generated when omitted"
    )
    expires_at: Optional[datetime] = Field(None, description="Link stops resolving after this moment")

    @field_validator("original_url")
    @classmethod
    def check_length(cls, value: HttpUrl) -> HttpUrl:
        if len(str(value)) > ORIGINAL_URL_MAX_LENGTH:
            raise ValueError(f"URL must be at most {ORIGINAL_URL_MAX_LENGTH} characters")
        return value

    @field_validator("expires_at")
    @classmethod
    def check_future(cls, value: Optional[datetime]) -> Optional[datetime]:
        if value is None:
            return value
        value = to_naive_utc(value)
        if value <= datetime.now(timezone.utc).replace(tzinfo=None):
            raise ValueError("Expiry must be in the future")
        return value


class LinkResponse(BaseModel):
    """Serializes a ShortLink row (from_attributes) plus the computed short_url"""
    id: int
    original_url: str
    short_code: str
    title: Optional[str] = None
    click_count: int
    last_clicked_at: Optional[datetime] = None
    is_active: bool
    expires_at: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    @computed_field
    @property
    def short_url(self) -> str:
        return f"{settings.base_url}/{self.short_code}"

    model_config = ConfigDict(from_attributes=True)


class LinkListItem(LinkResponse):
    clicks_count: int = Field(0, description="Recorded click events")


class DailyCount(BaseModel):
    date: str
    count: int


class RefererCount(BaseModel):
    referer: str
    count: int


class LinkStats(BaseModel):
    url: LinkResponse
    clicks_over_time: List[DailyCount]
    recent_clicks: List[ClickEventResponse]
    clicks_by_device: Dict[str, int]
    clicks_by_country: Dict[str, int]
    top_referers: List[RefererCount]
