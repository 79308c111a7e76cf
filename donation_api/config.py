"""Application configuration using Pydantic Settings."""

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# config.py lives in donation_api/, the project root is one level up
_CONFIG_DIR = Path(__file__).resolve().parent
_PROJECT_ROOT = _CONFIG_DIR.parent


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=str(_PROJECT_ROOT / ".env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Application
    app_name: str = Field(default="Donation Match", description="Application name")
    port: int = Field(default=3000, description="HTTP listen port", alias="PORT")
    log_level: str = Field(default="INFO", description="Root log level", alias="LOG_LEVEL")
    cors_origin: str = Field(
        default="http://localhost:8080",
        description="Single frontend origin allowed by CORS",
        alias="FRONTEND_ORIGIN",
    )

    # Security
    jwt_secret: str = Field(
        ...,
        description="Secret used to sign bearer tokens",
        alias="JWT_SECRET",
    )
    algorithm: str = Field(default="HS256", description="JWT algorithm", alias="JWT_ALGORITHM")
    token_ttl_seconds: int = Field(
        default=14400,
        description="Bearer token lifetime in seconds",
        alias="TOKEN_TTL_SECONDS",
    )

    # Database
    database_url: str = Field(
        ...,
        description="Relational database connection URL",
        alias="DATABASE_URL",
    )
    database_ssl: bool = Field(
        default=True,
        description="Require SSL on PostgreSQL connections",
        alias="DATABASE_SSL",
    )
    auto_migrate: bool = Field(
        default=False,
        description="Create missing tables on startup",
        alias="AUTO_MIGRATE",
    )

    # Geocoding
    geocode_api_key: str = Field(
        default="",
        description="Google Maps Geocoding API key",
        alias="GOOGLE_MAPS_API_KEY",
    )
    geocode_base_url: str = Field(
        default="https://maps.googleapis.com",
        description="Base URL of the geocoding provider",
        alias="GEOCODE_BASE_URL",
    )
    geocode_timeout: float | None = Field(
        default=None,
        description="Geocode request timeout in seconds; unset keeps the httpx default",
        alias="GEOCODE_TIMEOUT",
    )

    @field_validator("database_url", mode="before")
    @classmethod
    def validate_database_url(cls, v: str | None) -> str:
        """Validate and normalize database URL."""
        if v is None or v == "":
            raise ValueError("DATABASE_URL is required")
        return v.strip()

    @field_validator("jwt_secret", mode="before")
    @classmethod
    def validate_jwt_secret(cls, v: str | None) -> str:
        """Reject an empty signing secret."""
        if v is None or v == "":
            raise ValueError("JWT_SECRET is required")
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Normalize log level to upper case."""
        if isinstance(v, str):
            return v.upper().strip()
        return v

    @field_validator("cors_origin", mode="before")
    @classmethod
    def normalize_cors_origin(cls, v: str) -> str:
        """Strip whitespace and a trailing slash from the origin."""
        if isinstance(v, str):
            return v.strip().rstrip("/")
        return v


def get_settings() -> Settings:
    """Get application settings instance.

    Returns:
        Settings: Application settings instance

    Example:
        ```python
        from donation_api.config import get_settings

        settings = get_settings()
        print(settings.database_url)
        ```
    """
    return Settings()


# Global settings instance
settings = get_settings()
