"""HTTP transport for SimpleIPC."""

from __future__ import annotations

from .server import HttpListener, bind_socket

__all__ = ["HttpListener", "bind_socket"]
