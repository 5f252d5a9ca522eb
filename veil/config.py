"""
Configuration management for the Veil client.

Loads settings from environment variables with validation.
"""

from typing import Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


API_URL_DEFAULT = "https://api.kovan.veil.market"
FEEDS_API_URL_DEFAULT = "https://api.index.veil.market"


class VeilSettings(BaseSettings):
    """
    Veil client settings.

    Loads from environment variables with VEIL_ prefix.
    """
    model_config = SettingsConfigDict(
        env_prefix="VEIL_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # API URLs
    api_url: str = Field(default=API_URL_DEFAULT, description="Trading API URL")
    feeds_api_url: str = Field(default=FEEDS_API_URL_DEFAULT, description="Data feeds API URL")

    # Timeouts
    request_timeout: float = Field(default=30.0, ge=1.0, description="Request timeout (seconds)")
    connect_timeout: float = Field(default=10.0, ge=1.0, description="Connection timeout (seconds)")

    # Session
    max_session_retries: int = Field(
        default=3, ge=0, le=10,
        description="Re-authentications allowed per call when the session expires"
    )

    # Connection pooling
    pool_connections: int = Field(default=10, ge=1, le=200,
                                  description="HTTP connection pool size")
    pool_maxsize: int = Field(default=20, ge=1, le=500,
                              description="Max connections per pool")

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_requests: bool = Field(default=False, description="Log all HTTP requests")

    # Metrics
    enable_metrics: bool = Field(default=False, description="Enable Prometheus metrics")
    metrics_port: Optional[int] = Field(
        default=None, ge=1024, le=65535,
        description="Serve metrics over HTTP on this port"
    )

    def __repr__(self) -> str:
        return (
            f"VeilSettings("
            f"api_url={self.api_url}, "
            f"feeds_api_url={self.feeds_api_url}, "
            f"max_session_retries={self.max_session_retries}"
            ")"
        )


def get_settings() -> VeilSettings:
    """
    Build settings from the environment.

    Returns:
        Validated settings instance
    """
    return VeilSettings()
