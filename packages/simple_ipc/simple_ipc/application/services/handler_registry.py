"""Handler registry application service."""

from __future__ import annotations

import threading
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from simple_ipc.domain.exceptions import DuplicateHandlerError
from simple_ipc.domain.messages import IpcMessage, message_type_of
from simple_ipc.infrastructure.logging import get_logger

logger = get_logger(__name__)

MessageHandler = Callable[[Any], None] | Callable[[Any], Awaitable[None]]


def _handler_name(handler: MessageHandler) -> str:
    return getattr(handler, "__qualname__", repr(handler))


@dataclass(frozen=True)
class HandlerRegistration:
    """A message class bound to the callback that receives it."""

    message_type: str
    message_cls: type[IpcMessage]
    handler: MessageHandler

    @property
    def handler_name(self) -> str:
        """Qualified name of the handler, for logs and errors."""
        return _handler_name(self.handler)


class HandlerRegistry:
    """Maps message discriminators to exactly one handler each.

    Writers replace the whole mapping under a lock and readers take the
    current mapping without locking, so the listener thread always sees
    either the old or the new registry and never a partial update.
    """

    def __init__(self) -> None:
        """Initialize an empty handler registry."""
        self._registrations: Mapping[str, HandlerRegistration] = MappingProxyType({})
        self._lock = threading.Lock()

    def register(
        self,
        message_cls: type[IpcMessage],
        handler: MessageHandler,
        *,
        replace: bool = False,
    ) -> HandlerRegistration:
        """Register a handler for a message class.

        Args:
            message_cls: Message class the handler accepts
            handler: Sync or async callable taking one message
            replace: Replace an existing handler instead of rejecting the call

        Returns:
            The new registration

        Raises:
            MessageTypeError: If the class declares no discriminator
            DuplicateHandlerError: If the type already has a handler and replace is False
        """
        if not callable(handler):
            raise TypeError(f"handler must be callable, got {type(handler).__name__}")

        message_type = message_type_of(message_cls)
        registration = HandlerRegistration(
            message_type=message_type, message_cls=message_cls, handler=handler
        )

        with self._lock:
            existing = self._registrations.get(message_type)
            if existing is not None and not replace:
                logger.warning(
                    "Duplicate handler registration rejected",
                    extra={
                        "message_type": message_type,
                        "existing_handler": existing.handler_name,
                    },
                )
                raise DuplicateHandlerError(message_type, existing.handler_name)

            updated = dict(self._registrations)
            updated[message_type] = registration
            self._registrations = MappingProxyType(updated)

        logger.debug(
            "Handler registered",
            extra={
                "message_type": message_type,
                "handler": registration.handler_name,
                "replaced": existing is not None,
            },
        )
        return registration

    def unregister(self, message_cls: type[IpcMessage]) -> bool:
        """Remove the handler for a message class.

        Returns:
            True if a handler was removed
        """
        message_type = message_type_of(message_cls)
        with self._lock:
            if message_type not in self._registrations:
                return False
            updated = dict(self._registrations)
            del updated[message_type]
            self._registrations = MappingProxyType(updated)

        logger.debug("Handler unregistered", extra={"message_type": message_type})
        return True

    def lookup(self, message_type: str) -> HandlerRegistration | None:
        """Find the registration for a discriminator."""
        return self._registrations.get(message_type)

    @property
    def message_types(self) -> list[str]:
        """Discriminators that currently have a handler."""
        return sorted(self._registrations)

    def __len__(self) -> int:
        return len(self._registrations)

    def __contains__(self, message_type: object) -> bool:
        return message_type in self._registrations
