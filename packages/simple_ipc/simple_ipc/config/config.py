"""Centralized configuration management for SimpleIPC.

This module provides a centralized configuration system that supports:
- Environment variable overrides
- Default values with validation
- Type safety using Pydantic
- Hierarchical configuration structure
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from simple_ipc.infrastructure.logging import LogLevel


class PortConfig(BaseModel):
    """Port and address configuration."""

    host: str = Field(default="127.0.0.1", description="Loopback address to bind and post to")

    default_port: int = Field(
        default=13773,
        ge=0,
        le=65535,
        description="Listening port used when none is supplied (0 lets the OS choose)",
    )

    partner_offset: int = Field(
        default=1,
        ge=1,
        le=1000,
        description="Offset from the listening port used to derive the partner port",
    )


class HttpConfig(BaseModel):
    """HTTP transport configuration."""

    path: str = Field(default="/", description="Path that accepts message envelopes")

    max_connections: int = Field(
        default=100, ge=1, le=10_000, description="Connection pool size of an owned client"
    )

    max_keepalive_connections: int = Field(
        default=20, ge=0, le=10_000, description="Idle connections kept by an owned client"
    )

    @field_validator("path")
    @classmethod
    def validate_path(cls, v: str) -> str:
        """Ensure the envelope path is absolute."""
        if not v.startswith("/"):
            raise ValueError("path must start with '/'")
        return v


class TimeoutConfig(BaseModel):
    """Timeout-related configuration."""

    send_timeout: float = Field(
        default=5.0, gt=0, le=300, description="Timeout for one send round trip in seconds"
    )

    startup_timeout: float = Field(
        default=5.0, gt=0, le=60, description="Time allowed for the listener to start"
    )

    shutdown_timeout: float = Field(
        default=5.0, gt=0, le=60, description="Time allowed for the listener to drain"
    )


class ListenerLoggingConfig(BaseModel):
    """Logging settings handed to the listener's uvicorn server."""

    level: LogLevel = Field(default=LogLevel.INFO, description="Log level of the uvicorn server")

    access_log: bool = Field(default=False, description="Emit one uvicorn access line per request")


class IpcConfig(BaseSettings):
    """Main interface configuration.

    All configuration values can be overridden using environment variables
    with the prefix SIMPLE_IPC_ (e.g., SIMPLE_IPC_TIMEOUTS__SEND_TIMEOUT).
    """

    model_config = SettingsConfigDict(
        env_prefix="SIMPLE_IPC_",
        env_nested_delimiter="__",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    ports: PortConfig = Field(default_factory=PortConfig)
    http: HttpConfig = Field(default_factory=HttpConfig)
    timeouts: TimeoutConfig = Field(default_factory=TimeoutConfig)
    logging: ListenerLoggingConfig = Field(default_factory=ListenerLoggingConfig)

    def partner_url(self, partner_port: int) -> str:
        """Get the URL messages are posted to for a partner port."""
        return f"http://{self.ports.host}:{partner_port}{self.http.path}"


@lru_cache(maxsize=1)
def get_config() -> IpcConfig:
    """Get the singleton configuration instance.

    This function returns a cached configuration instance that reads from
    environment variables and configuration files.

    Returns:
        IpcConfig: The configuration instance
    """
    return IpcConfig()


def reload_config() -> IpcConfig:
    """Reload configuration from environment.

    This clears the cache and creates a new configuration instance.

    Returns:
        IpcConfig: The new configuration instance
    """
    get_config.cache_clear()
    return get_config()
