"""Configuration management for the PlayTak TEI bridge.

This module provides centralized configuration with support for:
- Environment variables (primary)
- Sensible defaults for all settings
- Type validation via Pydantic
- Easy testing through config overrides

Environment Variables:
    PLAYTAK_SERVER_HOST: PlayTak server host (default: playtak.com)
    PLAYTAK_SERVER_PORT: PlayTak server port (default: 10000)
    PLAYTAK_CLIENT_NAME: Name sent with the Client command (default: playtak-tei)
    PLAYTAK_PING_INTERVAL: Seconds between keepalive pings (default: 30)
    PLAYTAK_LOG_LEVEL: Logging level (default: INFO)

Usage:
    from playtak_tei.config import get_config, Config

    config = get_config()
    config.setup_logging()

    # For testing, create a custom config
    test_config = Config(server_host="127.0.0.1", ping_interval=0.1)
"""

from __future__ import annotations

import logging
import sys
from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from playtak_tei.protocol import (
    DEFAULT_CLIENT_NAME,
    DEFAULT_HOST,
    DEFAULT_PING_INTERVAL,
    DEFAULT_PORT,
)


class Config(BaseSettings):
    """Bridge configuration with environment variable support.

    All settings can be overridden via environment variables prefixed with
    PLAYTAK_. For example, PLAYTAK_SERVER_PORT=10001 sets server_port.

    Attributes:
        server_host: PlayTak server host
        server_port: PlayTak server port
        client_name: Name announced to the server with the Client command
        ping_interval: Seconds between keepalive pings
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    model_config = SettingsConfigDict(
        env_prefix="PLAYTAK_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    server_host: str = Field(
        default=DEFAULT_HOST,
        description="PlayTak server host",
    )
    server_port: int = Field(
        default=DEFAULT_PORT,
        ge=1,
        le=65535,
        description="PlayTak server port",
    )
    client_name: str = Field(
        default=DEFAULT_CLIENT_NAME,
        min_length=1,
        description="Name announced with the Client command",
    )
    ping_interval: float = Field(
        default=DEFAULT_PING_INTERVAL,
        gt=0,
        description="Seconds between keepalive pings",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: Any) -> Any:
        """Normalize log level to uppercase."""
        if isinstance(v, str):
            return v.upper()
        return v

    def setup_logging(self) -> None:
        """Configure logging based on config settings.

        Logs go to stderr; stdout is used for seek listings.
        """
        logging.basicConfig(
            level=getattr(logging, self.log_level, logging.INFO),
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            stream=sys.stderr,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert config to dictionary for logging/debugging."""
        return {
            "server_host": self.server_host,
            "server_port": self.server_port,
            "client_name": self.client_name,
            "ping_interval": self.ping_interval,
            "log_level": self.log_level,
        }


# Module-level singleton instance
_config_instance: Config | None = None


def get_config() -> Config:
    """Get the singleton configuration instance.

    Creates the config on first call, caching it for subsequent calls.
    The config is loaded from environment variables and optional .env file.
    """
    global _config_instance
    if _config_instance is None:
        _config_instance = Config()
    return _config_instance


def set_config(config: Config) -> None:
    """Set the configuration instance (primarily for testing)."""
    global _config_instance
    _config_instance = config


def reset_config() -> None:
    """Reset the configuration singleton.

    Forces the next get_config() call to reload from environment.
    """
    global _config_instance
    _config_instance = None
