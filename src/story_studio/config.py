"""Application configuration."""

import os
from dataclasses import dataclass

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    openai_api_key: str
    openai_text_model: str = "gpt-4o"
    openai_image_model: str = "dall-e-3"
    openai_image_size: str = "1024x1024"
    openai_image_quality: str = "standard"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


@dataclass(frozen=True)
class ModelSettings:
    """Read-only model parameters shared by every generation stage."""

    text_model: str = "gpt-4o"
    image_model: str = "dall-e-3"
    image_size: str = "1024x1024"
    image_quality: str = "standard"

    @classmethod
    def from_settings(cls, settings: Settings) -> "ModelSettings":
        """Extract model parameters from application settings."""
        return cls(
            text_model=settings.openai_text_model,
            image_model=settings.openai_image_model,
            image_size=settings.openai_image_size,
            image_quality=settings.openai_image_quality,
        )
