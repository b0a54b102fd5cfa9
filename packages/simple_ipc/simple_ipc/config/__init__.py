"""Configuration package for SimpleIPC."""

from .config import IpcConfig, get_config, reload_config

__all__ = ["IpcConfig", "get_config", "reload_config"]
