"""Application settings using Pydantic Settings for configuration management."""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, SecretStr, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    # Application
    app_name: str = "ChronoxAI Mail Automation"
    app_version: str = "0.1.0"
    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = False
    log_level: str = "INFO"

    # API Server
    api_host: str = "0.0.0.0"
    api_port: int = 3000

    # Google OAuth2
    google_client_id: str = ""
    google_client_secret: SecretStr = Field(default=SecretStr(""))
    google_redirect_uri: str = "http://localhost:3000/auth/google/callback"
    google_refresh_token: SecretStr | None = None
    google_token_uri: str = "https://oauth2.googleapis.com/token"
    google_auth_uri: str = "https://accounts.google.com/o/oauth2/auth"
    gmail_scopes: list[str] = Field(
        default_factory=lambda: [
            "https://mail.google.com/",
            "https://www.googleapis.com/auth/gmail.send",
            "https://www.googleapis.com/auth/gmail.readonly",
            "https://www.googleapis.com/auth/gmail.modify",
        ]
    )
    gmail_user_id: str = "me"

    # Push subscription (watch)
    pubsub_topic: str | None = None
    watch_label_ids: list[str] = Field(default_factory=lambda: ["INBOX"])
    watch_renew_hour: int = Field(default=0, ge=0, le=23)

    # Storage
    data_dir: Path = Path("data")

    @computed_field
    @property
    def notifications_file(self) -> Path:
        """Append-only notification ledger."""
        return self.data_dir / "notifications.json"

    @computed_field
    @property
    def email_dir(self) -> Path:
        """Flat archive of raw .eml files."""
        return self.data_dir / "emails"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
