"""MessagePack envelope codec.

An envelope is a msgpack map with two keys: ``type`` holds the message
discriminator and ``payload`` holds the field map of the message model.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import msgpack
from pydantic import ValidationError as PydanticValidationError
from pydantic_core import PydanticSerializationError, to_jsonable_python

from simple_ipc.domain.exceptions import (
    EnvelopeDecodeError,
    EnvelopeEncodeError,
    PayloadDecodeError,
)
from simple_ipc.domain.messages import IpcMessage, message_type_of

CONTENT_TYPE = "application/msgpack"
TYPE_KEY = "type"
PAYLOAD_KEY = "payload"


@dataclass(frozen=True)
class Envelope:
    """Decoded envelope whose payload has not yet been bound to a model."""

    message_type: str
    payload: dict[str, Any]


def _pack_default(value: Any) -> Any:
    return to_jsonable_python(value)


def encode_message(message: IpcMessage) -> bytes:
    """Serialize a message into envelope bytes.

    Fields msgpack represents natively, such as ``bytes``, are packed as they
    are. Other values (datetimes, UUIDs, enums, sets) fall back to their JSON
    form, which pydantic validates back into the declared field type.

    Args:
        message: Message to serialize

    Returns:
        msgpack-encoded envelope

    Raises:
        MessageTypeError: If the message class declares no discriminator
        EnvelopeEncodeError: If a field value cannot be represented in msgpack
    """
    message_type = message_type_of(message)
    try:
        envelope = {
            TYPE_KEY: message_type,
            PAYLOAD_KEY: message.model_dump(mode="python"),
        }
        return msgpack.packb(envelope, use_bin_type=True, default=_pack_default)
    except (PydanticSerializationError, TypeError, ValueError, OverflowError) as e:
        raise EnvelopeEncodeError(message_type, str(e)) from e


def decode_envelope(body: bytes) -> Envelope:
    """Parse envelope bytes without touching the payload contents.

    Raises:
        EnvelopeDecodeError: If the body is not a well-formed envelope
    """
    if not body:
        raise EnvelopeDecodeError("empty body")

    try:
        data = msgpack.unpackb(body, raw=False, strict_map_key=False)
    except (ValueError, TypeError) as e:
        raise EnvelopeDecodeError(f"not a msgpack document ({e})") from e

    if not isinstance(data, dict):
        raise EnvelopeDecodeError(f"expected a map, got {type(data).__name__}")

    message_type = data.get(TYPE_KEY)
    if not isinstance(message_type, str) or not message_type:
        raise EnvelopeDecodeError(f"'{TYPE_KEY}' must be a non-empty string")

    payload = data.get(PAYLOAD_KEY)
    if not isinstance(payload, dict):
        raise EnvelopeDecodeError(f"'{PAYLOAD_KEY}' must be a map")

    return Envelope(message_type=message_type, payload=payload)


def decode_payload(envelope: Envelope, message_cls: type[IpcMessage]) -> IpcMessage:
    """Bind an envelope payload to the registered message class.

    Raises:
        PayloadDecodeError: If the payload does not validate against the class
    """
    try:
        return message_cls.model_validate(envelope.payload)
    except PydanticValidationError as e:
        raise PayloadDecodeError(envelope.message_type, str(e)) from e
