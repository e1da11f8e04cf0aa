"""Application configuration."""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from sleep_insights_server.schemas.sleep import TimeWindow


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Allow extra env vars without error
    )

    # API
    api_host: str = Field(default="0.0.0.0", description="API host")
    api_port: int = Field(default=8000, description="API port")
    api_prefix: str = Field(default="/api/v1", description="API prefix")

    # Analysis
    default_window: TimeWindow = Field(
        default=TimeWindow.WEEK,
        description="Window used when a request does not name one",
    )

    # Remote advice service (narrative generation)
    advice_enabled: bool = Field(
        default=True,
        description="Call the remote advice service before falling back to local narrative",
    )
    advice_url: str | None = Field(
        default=None,
        description="Sleep advice endpoint (e.g., https://coach.example.com/analyze-sleep)",
    )
    advice_api_key: str | None = Field(
        default=None,
        description="Bearer token sent to the advice service",
    )
    advice_timeout_seconds: float = Field(
        default=5.0,
        gt=0,
        description="Advice request timeout (httpx default)",
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Log level",
    )

    def is_advice_configured(self) -> bool:
        """Check if the remote advice service can be called."""
        return self.advice_enabled and bool(self.advice_url)


# Global settings instance
settings = Settings()
