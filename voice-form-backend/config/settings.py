"""
Application Configuration Module

Centralizes all application settings using Pydantic Settings.
Environment variables are loaded from .env file automatically.

Usage:
    from config.settings import settings

    print(settings.OPENAI_MODEL)
    print(settings.DEBUG)
"""

from pydantic_settings import BaseSettings
from pydantic import Field, ConfigDict
from typing import Optional
from functools import lru_cache


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables or .env file.
    Variable names are case-insensitive.
    """

    # ==========================================================================
    # Voice Agent (chat-completion upstream)
    # ==========================================================================
    OPENAI_API_KEY: Optional[str] = Field(
        default=None,
        description="OpenAI API key used by the voice agent endpoint"
    )
    OPENAI_BASE_URL: Optional[str] = Field(
        default=None,
        description="Optional OpenAI-compatible base URL"
    )
    OPENAI_MODEL: str = Field(
        default="gpt-4o-mini",
        description="Chat-completion model that interprets transcripts"
    )
    OPENAI_TEMPERATURE: float = Field(
        default=0.3,
        description="Sampling temperature for transcript interpretation"
    )
    OPENAI_MAX_TOKENS: int = Field(
        default=150,
        description="Token cap for a single fill instruction"
    )
    VOICE_AGENT_URL: Optional[str] = Field(
        default=None,
        description="Remote voice agent endpoint; the in-process agent is used when unset"
    )

    # ==========================================================================
    # Redis Configuration (for rate limiting)
    # ==========================================================================
    REDIS_URL: Optional[str] = Field(
        default=None,
        description="Redis connection URL for rate limiting"
    )
    TRUST_PROXY_HEADERS: bool = Field(
        default=False,
        description="Key rate limits on X-Forwarded-For; enable only behind a reverse proxy"
    )

    # ==========================================================================
    # CORS Configuration
    # ==========================================================================
    CORS_ORIGINS: str = Field(
        default="http://localhost:5173,http://localhost:3000,http://localhost:5174",
        description="Allowed CORS origins (comma-separated)"
    )

    @property
    def cors_origins_list(self) -> list:
        """Get CORS origins as a list."""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    # ==========================================================================
    # Application Settings
    # ==========================================================================
    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode with verbose logging"
    )
    LOG_JSON: bool = Field(
        default=False,
        description="Emit JSON log lines instead of coloured console output"
    )
    APP_NAME: str = Field(
        default="Voice Form Filler",
        description="Application name for OpenAPI docs"
    )
    APP_VERSION: str = Field(
        default="1.0.0",
        description="Application version"
    )
    HOST: str = Field(
        default="0.0.0.0",
        description="Bind address for uvicorn"
    )
    PORT: int = Field(
        default=3001,
        description="Bind port for uvicorn"
    )
    SESSION_TTL_MINUTES: int = Field(
        default=30,
        description="Idle minutes before an uploaded form session is dropped"
    )

    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore extra env vars
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses LRU cache to ensure settings are only loaded once.

    Returns:
        Settings: Application settings instance
    """
    return Settings()


# Singleton instance for easy import
settings = get_settings()
