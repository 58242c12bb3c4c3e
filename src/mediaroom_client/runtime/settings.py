"""Configuration resolved from the environment."""

from __future__ import annotations

import logging

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from mediaroom_client.config.media_server import MediaServerSettings
from mediaroom_client.config.observability import ObservabilitySettings


class Settings(BaseSettings):
    """Client configuration: media server endpoint plus logging flags."""

    model_config = SettingsConfigDict(
        env_prefix="",
        extra="ignore",
        case_sensitive=False,
        frozen=True,
    )

    media_server: MediaServerSettings = Field(default_factory=MediaServerSettings)
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)

    @classmethod
    def load(cls) -> Settings:
        instance = cls()
        logger = logging.getLogger("mediaroom_client.settings")
        logger.info("mediaroom client settings loaded: %r", instance)
        return instance


__all__ = ["Settings"]
