"""
Application configuration and environment settings.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator
from typing import List, Union


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    APP_NAME: str = "TripLedger"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str = "sqlite:///./tripledger.db"
    DB_ECHO: bool = False

    # CORS
    CORS_ORIGINS: Union[List[str], str] = ["http://localhost:3000", "http://localhost:8080"]

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        """Parse CORS_ORIGINS from comma-separated string or list."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    # Settlement engine
    DEFAULT_BASE_CURRENCY: str = "EUR"  # Used when a trip or request omits one
    SETTLEMENT_EPSILON: int = 1  # Minor units; balances below this count as settled
    SHARE_SUM_TOLERANCE: int = 1  # Minor units of drift allowed between shares and total

    @field_validator("DEFAULT_BASE_CURRENCY")
    @classmethod
    def upper_base_currency(cls, v: str) -> str:
        return v.strip().upper()

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
    )


settings = Settings()
