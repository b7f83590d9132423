"""Configuration management for taskboard."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # SQLite Configuration
    sqlite_db_path: str = Field(default="./data/taskboard.db", description="Path to the SQLite task database")
    store_timeout_seconds: float = Field(
        default=5.0,
        gt=0,
        description="Maximum wait for the store lock before a request fails as a transient error",
    )

    # HTTP Server Configuration
    server_host: str = Field(default="0.0.0.0", description="Interface the API server binds to")  # noqa: S104
    server_port: int = Field(default=3001, description="Port the API server listens on")
    cors_allow_origins: list[str] = Field(default=["*"], description="Origins allowed by the CORS middleware")

    # Listing
    list_page_size: int = Field(default=5, ge=1, description="Number of tasks returned per list page")

    # Pydantic Logfire Configuration (optional)
    logfire_token: str | None = Field(default=None, description="Pydantic Logfire token for observability")
    environment: str = Field(default="development", description="Deployment environment name")


# Application Constants
class Constants:
    """Application-wide constants."""

    # Task fields
    TITLE_MAX_LENGTH: int = 100

    # HTTP Status Codes
    HTTP_BAD_REQUEST: int = 400
    HTTP_NOT_FOUND: int = 404
    HTTP_SERVER_ERROR: int = 500


def get_settings() -> Settings:
    """Get application settings (singleton pattern)."""
    return Settings()


# Global settings instance
settings = get_settings()
constants = Constants()
