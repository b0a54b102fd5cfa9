"""SimpleIPC: paired HTTP interfaces for local inter-process messaging."""

from __future__ import annotations

from .config import IpcConfig, get_config, reload_config
from .domain.exceptions import (
    DeliveryError,
    DuplicateHandlerError,
    EnvelopeEncodeError,
    HandlerError,
    InterfaceClosedError,
    ListenerStartupError,
    MessageTypeError,
    PartnerUnavailableError,
    PayloadDecodeError,
    PortConfigurationError,
    SendTimeoutError,
    SimpleIPCError,
    TransportError,
)
from .domain.messages import IpcMessage, message_type_of
from .domain.ports import PortPair, resolve_ports
from .interface import IpcInterface
from .version import __version__

__all__ = [
    "DeliveryError",
    "DuplicateHandlerError",
    "EnvelopeEncodeError",
    "HandlerError",
    "InterfaceClosedError",
    "IpcConfig",
    "IpcInterface",
    "IpcMessage",
    "ListenerStartupError",
    "MessageTypeError",
    "PartnerUnavailableError",
    "PayloadDecodeError",
    "PortConfigurationError",
    "PortPair",
    "SendTimeoutError",
    "SimpleIPCError",
    "TransportError",
    "__version__",
    "get_config",
    "message_type_of",
    "reload_config",
    "resolve_ports",
]
