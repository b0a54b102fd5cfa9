"""HTTP API of the SimpleIPC listener."""

from __future__ import annotations

from .listener_api import HealthResponse, create_listener_app, create_listener_router

__all__ = ["HealthResponse", "create_listener_app", "create_listener_router"]
