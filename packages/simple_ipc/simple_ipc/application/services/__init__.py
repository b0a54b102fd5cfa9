"""Application services for SimpleIPC."""

from __future__ import annotations

from .dispatcher import DispatchOutcome, DispatchResult, Dispatcher
from .handler_registry import HandlerRegistration, HandlerRegistry, MessageHandler

__all__ = [
    "DispatchOutcome",
    "DispatchResult",
    "Dispatcher",
    "HandlerRegistration",
    "HandlerRegistry",
    "MessageHandler",
]
