from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Loading priority (highest to lowest):
    1. Environment variables
    2. .env file
    3. Default values below
    """

    # Environment
    environment: str = "development"
    debug: bool = True
    log_level: str = "INFO"

    # Application
    app_name: str = "Short Link Service"
    app_version: str = "1.0.0"

    # Database
    database_url: str = "sqlite:///./shortlinks.db"

    # Short links
    base_url: str = "http://127.0.0.1:8000"
    short_code_length: int = 6
    custom_code_min_length: int = 3
    custom_code_max_length: int = 20
    # Codes that would shadow application routes
    reserved_codes: List[str] = ["api", "docs", "redoc", "openapi", "health", "static"]

    # Geolocation lookup for click analytics
    geo_backend: str = "ip_api"  # Options: "ip_api", "null"
    geoip_api_url: str = "http://ip-api.com/json"
    geoip_timeout: float = 2.0

    # Title extraction / reachability check on link creation
    enrichment_backend: str = "http"  # Options: "http", "null"
    enrichment_timeout: float = 5.0

    # Dashboard
    recent_links_limit: int = 10
    top_links_limit: int = 5
    analytics_days: int = 30

    # Pydantic v2 configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


# Create settings instance
settings = Settings()
