"""Threaded uvicorn server hosting an interface's listener."""

from __future__ import annotations

import socket
import threading
import time

import uvicorn
from fastapi import FastAPI

from simple_ipc.domain.exceptions import ListenerStartupError
from simple_ipc.infrastructure.logging import get_logger

logger = get_logger(__name__)

_STARTUP_POLL_INTERVAL = 0.005


def bind_socket(host: str, port: int) -> socket.socket:
    """Bind a TCP socket on the loopback address.

    Args:
        host: Address to bind
        port: Port to bind, ``0`` for OS-assigned

    Returns:
        The bound, not yet listening socket

    Raises:
        ListenerStartupError: If the address cannot be bound
    """
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    try:
        sock.bind((host, port))
    except OSError as e:
        sock.close()
        raise ListenerStartupError(host, port, str(e)) from e
    return sock


class HttpListener:
    """Serves an ASGI app on a pre-bound socket from a background thread.

    The server runs its own event loop, so handlers invoked by the listener
    never share a loop with the code that sends messages.
    """

    def __init__(
        self,
        app: FastAPI,
        sock: socket.socket,
        *,
        startup_timeout: float = 5.0,
        shutdown_timeout: float = 5.0,
        access_log: bool = False,
        log_level: str = "warning",
    ) -> None:
        """Initialize the listener.

        Args:
            app: Application to serve
            sock: Bound socket, owned by the listener from now on
            startup_timeout: Seconds to wait for the server to report started
            shutdown_timeout: Seconds allowed for a graceful stop
            access_log: Emit one uvicorn access line per request
            log_level: Log level handed to uvicorn
        """
        self._sock = sock
        self._host, self._port = sock.getsockname()[:2]
        self._startup_timeout = startup_timeout
        self._shutdown_timeout = shutdown_timeout
        self._server = uvicorn.Server(
            uvicorn.Config(
                app,
                log_config=None,
                log_level=log_level,
                access_log=access_log,
                lifespan="on",
                timeout_graceful_shutdown=int(shutdown_timeout) or 1,
            )
        )
        self._thread: threading.Thread | None = None
        self._stopped = False

    @property
    def port(self) -> int:
        """Port the listener is bound to."""
        return self._port

    @property
    def is_running(self) -> bool:
        """Check if the server thread is serving requests."""
        return self._thread is not None and self._thread.is_alive() and self._server.started

    def start(self) -> None:
        """Start serving and block until the server accepts connections.

        Raises:
            ListenerStartupError: If the server does not start in time
        """
        if self._thread is not None:
            logger.warning("Listener already started", extra={"port": self._port})
            return

        self._thread = threading.Thread(
            target=self._server.run,
            kwargs={"sockets": [self._sock]},
            name=f"simple-ipc-listener-{self._port}",
            daemon=True,
        )
        self._thread.start()

        deadline = time.monotonic() + self._startup_timeout
        while not self._server.started:
            if not self._thread.is_alive():
                self._sock.close()
                raise ListenerStartupError(self._host, self._port, "server thread exited")
            if time.monotonic() > deadline:
                self.stop()
                raise ListenerStartupError(
                    self._host, self._port, f"not started after {self._startup_timeout}s"
                )
            time.sleep(_STARTUP_POLL_INTERVAL)

        logger.info("Listener started", extra={"host": self._host, "port": self._port})

    def stop(self) -> None:
        """Stop the server and release the socket. Safe to call more than once."""
        if self._stopped:
            return
        self._stopped = True

        self._server.should_exit = True
        if self._thread is not None:
            self._thread.join(timeout=self._shutdown_timeout + 1.0)
            if self._thread.is_alive():
                logger.warning(
                    "Listener thread did not exit in time",
                    extra={"port": self._port, "timeout": self._shutdown_timeout},
                )
        self._sock.close()
        logger.info("Listener stopped", extra={"port": self._port})
