from pydantic import BaseModel, Field, ConfigDict
from typing import Optional
from datetime import datetime


class VisitorInfo(BaseModel):
    """
    What a redirect request tells us about the visitor.

    Built by the redirect route from the request headers; the click
    recorder derives device class and country from it.
    """

    ip_address: Optional[str] = Field(None, description="Client IP address")
    user_agent: Optional[str] = Field(None, description="User agent string")
    referer: Optional[str] = Field(None, description="HTTP referer")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "ip_address": "81.2.69.160",
                "user_agent": "Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X) Mobile/15E148",
                "referer": "https://twitter.com",
            }
        }
    )


class ClickEventResponse(BaseModel):
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    referer: Optional[str] = None
    country: Optional[str] = None
    device_type: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
