"""Domain layer for SimpleIPC."""

from __future__ import annotations

from .messages import IpcMessage, message_type_of
from .ports import PortPair, requested_listen_port, resolve_ports

__all__ = [
    "IpcMessage",
    "PortPair",
    "message_type_of",
    "requested_listen_port",
    "resolve_ports",
]
