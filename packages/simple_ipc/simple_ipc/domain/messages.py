"""Message type declarations.

Every message exchanged between two interfaces is a pydantic model that
declares a stable discriminator. The discriminator travels in the envelope
and is the only thing the receiving side uses to pick a handler.
"""

from __future__ import annotations

from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict

from simple_ipc.domain.exceptions import MessageTypeError


class IpcMessage(BaseModel):
    """Base class for messages sent through an IpcInterface.

    Subclasses must set ``message_type`` to a string that is unique among
    the message types a receiver registers::

        class Heartbeat(IpcMessage):
            message_type: ClassVar[str] = "heartbeat.v1"

            sequence: int
    """

    model_config = ConfigDict(extra="forbid")

    message_type: ClassVar[str] = ""


def message_type_of(message: type[IpcMessage] | IpcMessage | Any) -> str:
    """Return the discriminator declared by a message class or instance.

    Args:
        message: Message class or instance

    Returns:
        The declared discriminator

    Raises:
        MessageTypeError: If the class is not an IpcMessage or declares no tag
    """
    cls = message if isinstance(message, type) else type(message)
    if not issubclass(cls, IpcMessage):
        raise MessageTypeError(cls.__name__, "not a subclass of IpcMessage")

    tag = cls.__dict__.get("message_type", "")
    if not isinstance(tag, str) or not tag.strip():
        raise MessageTypeError(cls.__name__, "no message_type declared")
    return tag
