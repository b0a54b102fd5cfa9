"""Shared test configuration and fixtures."""

from __future__ import annotations

import asyncio
import socket
import threading
from collections.abc import AsyncGenerator, Callable
from typing import Any

import pytest
import pytest_asyncio
from simple_ipc import IpcConfig, IpcInterface
from simple_ipc.config.config import PortConfig, TimeoutConfig


def _bind_free(port: int = 0) -> socket.socket | None:
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    try:
        sock.bind(("127.0.0.1", port))
    except OSError:
        sock.close()
        return None
    return sock


def find_free_ports(count: int = 2) -> list[int]:
    """Return distinct ports that were free at the time of the call."""
    socks = [_bind_free() for _ in range(count)]
    try:
        return [s.getsockname()[1] for s in socks if s is not None]
    finally:
        for s in socks:
            if s is not None:
                s.close()


def find_adjacent_free_port(offset: int = 1) -> int:
    """Return a port ``p`` such that ``p`` and ``p + offset`` were both free."""
    for _ in range(50):
        first = _bind_free()
        assert first is not None
        port = first.getsockname()[1]
        second = _bind_free(port + offset) if port + offset <= 65535 else None
        first.close()
        if second is not None:
            second.close()
            return port
    raise RuntimeError("no adjacent free ports found")


class Inbox:
    """Thread-safe collector for messages delivered on a listener thread."""

    def __init__(self) -> None:
        self.messages: list[Any] = []
        self._lock = threading.Lock()
        self._changed = threading.Condition(self._lock)

    def __call__(self, message: Any) -> None:
        with self._changed:
            self.messages.append(message)
            self._changed.notify_all()

    def _wait_sync(self, count: int, timeout: float) -> bool:
        with self._changed:
            return self._changed.wait_for(lambda: len(self.messages) >= count, timeout)

    async def wait_for(self, count: int = 1, timeout: float = 5.0) -> bool:
        """Wait until at least ``count`` messages arrived."""
        return await asyncio.to_thread(self._wait_sync, count, timeout)


@pytest.fixture
def ipc_config() -> IpcConfig:
    """Configuration with short timeouts and OS-assigned default ports."""
    return IpcConfig(
        ports=PortConfig(default_port=0),
        timeouts=TimeoutConfig(send_timeout=2.0, startup_timeout=5.0, shutdown_timeout=2.0),
    )


@pytest.fixture
def free_ports() -> Callable[[int], list[int]]:
    """Factory returning currently free ports."""
    return find_free_ports


@pytest.fixture
def adjacent_free_port() -> int:
    """A free port whose successor is free as well."""
    return find_adjacent_free_port()


@pytest.fixture
def inbox() -> Inbox:
    """A fresh message collector."""
    return Inbox()


@pytest_asyncio.fixture
async def interface_pair(
    ipc_config: IpcConfig,
) -> AsyncGenerator[tuple[IpcInterface, IpcInterface]]:
    """Two interfaces wired to each other."""
    port, partner_port = find_free_ports(2)
    first = IpcInterface(port, partner_port, config=ipc_config)
    second = IpcInterface(first.partner_port, first.port, config=ipc_config)
    try:
        yield first, second
    finally:
        await second.close()
        await first.close()
