"""Service configuration read from the environment (or a local ``.env``)."""

from typing import List

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/123.0.0.0 Safari/537.36"
)


class Settings(BaseSettings):
    """Recipe import settings; every field can be overridden by an env var of the same name."""

    # Service
    host: str = "0.0.0.0"
    port: int = 8080
    log_level: str = "INFO"

    # Fetching (URL imports only)
    http_timeout: int = 30  # seconds
    fetch_user_agent: str = DEFAULT_USER_AGENT

    # Input limits
    max_request_size: int = 10 * 1024 * 1024  # bytes
    max_document_chars: int = 2_000_000  # longer documents are truncated

    # Extraction
    default_servings: int = 4
    max_image_urls: int = 10
    min_image_dimension: int = 200  # px, unscoped <img> fallback only

    rate_limit_per_hour: int = 100
    cors_origins: str = "*"  # comma-separated, or "*"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def _upper_log_level(cls, value: str) -> str:
        return value.strip().upper()

    @property
    def cors_origins_list(self) -> List[str]:
        """Allowed CORS origins; ``["*"]`` when unrestricted."""
        origins = [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]
        return ["*"] if not origins or "*" in origins else origins


settings = Settings()
