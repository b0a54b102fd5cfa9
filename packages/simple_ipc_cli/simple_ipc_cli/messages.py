"""Messages exchanged by the command line peer."""

from __future__ import annotations

import time
from typing import ClassVar

from pydantic import Field
from simple_ipc import IpcMessage


class Ping(IpcMessage):
    """A numbered text message stamped with its send time."""

    message_type: ClassVar[str] = "simple_ipc_cli.ping"

    sequence: int = Field(..., ge=0, description="Position of the message in its batch")
    text: str = Field(default="ping", description="Free-form text")
    sent_at: float = Field(default_factory=time.time, description="Sender wall clock time")
