"""Media server connectivity settings."""

from __future__ import annotations

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_MEDIA_SERVER_USERNAME = "MEDIAROOMAPP"
DEFAULT_MEDIA_SERVER_TIMEOUT_SECONDS = 10.0


class MediaServerSettings(BaseSettings):
    """Endpoint and credentials for the media server REST API."""

    model_config = SettingsConfigDict(
        env_prefix="",
        extra="ignore",
        case_sensitive=False,
        frozen=True,
        env_file=".env",
        env_file_encoding="utf-8",
        populate_by_name=True,
    )

    media_server_url: str | None = Field(default=None, alias="MEDIA_SERVER_URL")
    media_server_username: str = Field(
        default=DEFAULT_MEDIA_SERVER_USERNAME, alias="MEDIA_SERVER_USERNAME"
    )
    media_server_secret: SecretStr = Field(
        default_factory=lambda: SecretStr(""), alias="MEDIA_SERVER_SECRET"
    )
    timeout_seconds: float = Field(
        default=DEFAULT_MEDIA_SERVER_TIMEOUT_SECONDS,
        alias="MEDIA_SERVER_TIMEOUT_SECONDS",
        gt=0.0,
    )

    @property
    def media_server_secret_value(self) -> str:
        return self.media_server_secret.get_secret_value()

    def require_url(self) -> str:
        if not self.media_server_url:
            raise RuntimeError("MEDIA_SERVER_URL must be set")
        return self.media_server_url


__all__ = [
    "DEFAULT_MEDIA_SERVER_TIMEOUT_SECONDS",
    "DEFAULT_MEDIA_SERVER_USERNAME",
    "MediaServerSettings",
]
