"""Envelope serialization for SimpleIPC."""

from __future__ import annotations

from .envelope import CONTENT_TYPE, Envelope, decode_envelope, decode_payload, encode_message

__all__ = ["CONTENT_TYPE", "Envelope", "decode_envelope", "decode_payload", "encode_message"]
