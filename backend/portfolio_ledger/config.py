"""Configuration management for the application."""
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # API Configuration
    api_title: str = "Portfolio Ledger API"
    api_version: str = "1.0.0"
    api_prefix: str = "/api/v1"

    # CORS Configuration
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:3000"]

    # Portfolio API Configuration
    portfolio_api_base_url: str = "http://localhost:3000"
    portfolio_api_token: Optional[str] = None  # Sent as a Bearer token when set
    request_timeout_seconds: float = 10.0

    # Aggregation
    trade_fetch_limit: Optional[int] = None
    include_fund_units: bool = False
    default_currency: str = "VND"

    # Logging
    log_level: str = "INFO"


settings = Settings()
