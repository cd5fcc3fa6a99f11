"""Configuration management for the application."""

from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_ACCESS_SECRET = "change-me-access-secret"  # noqa: S105
DEFAULT_REFRESH_SECRET = "change-me-refresh-secret"  # noqa: S105


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database
    database_url: str = Field(default="sqlite:///./videotube.db")

    # JWT
    access_token_secret: str = Field(default=DEFAULT_ACCESS_SECRET)
    access_token_expiration_minutes: int = Field(default=15)
    refresh_token_secret: str = Field(default=DEFAULT_REFRESH_SECRET)
    refresh_token_expiration_days: int = Field(default=10)
    jwt_algorithm: str = Field(default="HS256")

    # Cookies
    cookie_secure: bool = Field(default=True)
    cookie_samesite: str = Field(default="lax")

    # Cloudinary media storage
    cloudinary_cloud_name: str | None = Field(default=None)
    cloudinary_api_key: str | None = Field(default=None)
    cloudinary_api_secret: str | None = Field(default=None)
    cloudinary_upload_url: str = Field(default="https://api.cloudinary.com/v1_1")
    upload_temp_dir: str = Field(default="./public/temp")

    # API
    cors_origins: list[str] = Field(default=["http://localhost:3000"])
    log_level: str = Field(default="INFO")
    environment: str = Field(default="development")

    @model_validator(mode="after")
    def validate_production_settings(self) -> "Settings":
        """Validate that production has secure settings."""
        if self.is_production:
            if self.access_token_secret == DEFAULT_ACCESS_SECRET:
                raise ValueError("ACCESS_TOKEN_SECRET must be changed in production")
            if self.refresh_token_secret == DEFAULT_REFRESH_SECRET:
                raise ValueError("REFRESH_TOKEN_SECRET must be changed in production")
            if self.access_token_secret == self.refresh_token_secret:
                raise ValueError("Access and refresh token secrets must differ")
            if not self.cookie_secure:
                raise ValueError("COOKIE_SECURE must be enabled in production")
        return self

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
