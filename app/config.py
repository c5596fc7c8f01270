"""
Application configuration using Pydantic Settings.
"""

import os
from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings


def get_env_file() -> str:
    """Determine which env file to use based on environment."""
    env = os.getenv("APP_ENV", "development")
    if env == "production":
        return ".env.production"
    return ".env.development"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # App settings
    app_name: str = "Assistente Financeiro"
    version: str = "2.0.0"
    debug: bool = False
    log_level: str = "INFO"
    app_env: str = "development"

    # Server
    host: str = "0.0.0.0"
    port: int = 3000

    # Front-end: "rest" mounts the HTTP API only, "messaging" the WhatsApp
    # webhook only, "hybrid" both
    transport: Literal["rest", "messaging", "hybrid"] = "hybrid"

    # Gemini
    ai_enabled: bool = True
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.0-flash-exp"

    # WhatsApp Cloud API (Meta Graph)
    whatsapp_enabled: bool = True
    whatsapp_access_token: str = ""
    whatsapp_phone_number_id: str = ""
    whatsapp_verify_token: str = ""
    whatsapp_api_version: str = "v19.0"
    whatsapp_timeout: float = 25.0

    class Config:
        env_file = get_env_file()
        env_file_encoding = "utf-8"
        extra = "ignore"

    @property
    def rest_enabled(self) -> bool:
        return self.transport in ("rest", "hybrid")

    @property
    def messaging_enabled(self) -> bool:
        return self.whatsapp_enabled and self.transport in ("messaging", "hybrid")


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
