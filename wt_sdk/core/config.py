"""
Configuration management for the WeTransfer client.
Loads environment variables using Pydantic Settings.
"""

from pydantic import model_validator
from pydantic_settings import BaseSettings

DEFAULT_BASE_URL = "https://dev.wetransfer.com/v2/"


class Settings(BaseSettings):
    """Client settings loaded from environment variables."""

    # API
    WT_API_KEY: str = ""
    WT_BASE_URL: str = DEFAULT_BASE_URL  # Must end with a slash
    WT_USER_AGENT: str = "wt-sdk"
    WT_REQUEST_TIMEOUT: float = 30.0  # seconds

    # Uploads
    WT_ERROR_BODY_LIMIT: int = 512 * 1024  # Bytes of storage error body kept on failure
    WT_MAX_CONCURRENT_FILES: int = 1       # 1 uploads files one at a time

    # Application
    LOG_LEVEL: str = "INFO"

    @model_validator(mode="before")
    @classmethod
    def normalize_base_url(cls, values):
        """Make sure WT_BASE_URL ends with a trailing slash."""
        if not isinstance(values, dict):
            return values
        base_url = values.get("WT_BASE_URL")
        if isinstance(base_url, str) and base_url and not base_url.endswith("/"):
            values["WT_BASE_URL"] = base_url + "/"
        return values

    @model_validator(mode="after")
    def check_limits(self):
        """Reject limits that would stall uploads."""
        if self.WT_MAX_CONCURRENT_FILES < 1:
            raise ValueError("WT_MAX_CONCURRENT_FILES must be at least 1")
        if self.WT_ERROR_BODY_LIMIT < 0:
            raise ValueError("WT_ERROR_BODY_LIMIT must not be negative")
        return self

    class Config:
        env_file = ".env"
        case_sensitive = True


# Global settings instance
settings = Settings()
