"""Configuration management using Pydantic Settings.

This module provides type-safe configuration management with automatic
environment variable loading and validation using Pydantic Settings v2.

The configuration is organized into logical groups:
- CredentialsConfig: Spotify client credentials
- MusicConfig: Default playlist and playlist/match cache tuning
- WeatherConfig: Weather cache tuning
- HttpConfig: Shared HTTP client settings
- LoggingConfig: Logging levels and files
"""

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class CredentialsConfig(BaseModel):
    """API credentials for the primary catalog provider."""

    spotify_client_id: str = ""
    spotify_client_secret: str = ""


class MusicConfig(BaseModel):
    """Playlist derivation settings."""

    default_playlist_id: str = ""

    # Deezer fan-out, at most this many searches in flight per playlist
    match_concurrency: int = 6

    # Cache sizing, TTL values in seconds
    token_ttl_seconds: float = 50 * 60
    match_cache_capacity: int = 256
    match_cache_ttl_seconds: float = 30 * 60
    playlist_cache_capacity: int = 4


class WeatherConfig(BaseModel):
    """Current weather cache settings."""

    cache_capacity: int = 64
    cache_ttl_seconds: float = 5 * 60


class HttpConfig(BaseModel):
    """Shared HTTP client configuration."""

    timeout_seconds: float = 10.0
    user_agent: str = "Deezify/0.1.0 (Playlist Preview Cache)"


class LoggingConfig(BaseModel):
    """Logging configuration for console and file output."""

    console_level: str = "INFO"
    file_level: str = "DEBUG"
    log_file: Path = Path("deezify.log")


class Settings(BaseSettings):
    """Main application settings with environment variable support.

    Environment variables can be set using flat naming or nested naming:
    - Flat: SPOTIFY_CLIENT_ID, SPOTIFY_PLAYLIST_ID, CONSOLE_LOG_LEVEL
    - Nested: CREDENTIALS__SPOTIFY_CLIENT_ID, MUSIC__DEFAULT_PLAYLIST_ID

    The .env file is automatically loaded for development convenience.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    credentials: CredentialsConfig = CredentialsConfig()
    music: MusicConfig = MusicConfig()
    weather: WeatherConfig = WeatherConfig()
    http: HttpConfig = HttpConfig()
    logging: LoggingConfig = LoggingConfig()

    @model_validator(mode="before")
    @classmethod
    def transform_flat_env_vars(cls, data: Any) -> Any:
        """Transform flat environment variables to nested structure.

        Handles the flat env vars used by deployments (SPOTIFY_PLAYLIST_ID) and
        maps them to the nested structure expected by the models
        (music.default_playlist_id).
        """
        if not isinstance(data, dict):
            return data

        mappings = {
            "credentials": {
                "spotify_client_id": "spotify_client_id",
                "spotify_client_secret": "spotify_client_secret",
            },
            "music": {
                "spotify_playlist_id": "default_playlist_id",
                "match_concurrency": "match_concurrency",
            },
            "logging": {
                "console_log_level": "console_level",
                "file_log_level": "file_level",
                "log_file": "log_file",
            },
        }

        # Undeclared flat names in the process environment never reach data
        transformed: dict[str, dict[str, Any]] = {}
        for section, section_mapping in mappings.items():
            for env_key, field_key in section_mapping.items():
                if env_key in data:
                    transformed.setdefault(section, {})[field_key] = data.pop(env_key)
                elif env_key.upper() in os.environ:
                    transformed.setdefault(section, {})[field_key] = os.environ[
                        env_key.upper()
                    ]

        for section, values in transformed.items():
            existing = data.get(section)
            if isinstance(existing, dict):
                data[section] = {**values, **existing}
            else:
                data[section] = values

        return data


# Singleton instance for application use
settings = Settings()
