"""Paired HTTP interface for local inter-process messaging."""

from __future__ import annotations

import asyncio
from types import TracebackType

import httpx

from simple_ipc.api import create_listener_app
from simple_ipc.application.services import Dispatcher, HandlerRegistry, MessageHandler
from simple_ipc.config import IpcConfig, get_config
from simple_ipc.domain.exceptions import (
    DeliveryError,
    InterfaceClosedError,
    PartnerUnavailableError,
    SendTimeoutError,
    TransportError,
)
from simple_ipc.domain.messages import IpcMessage, message_type_of
from simple_ipc.domain.ports import PortPair, requested_listen_port, resolve_ports
from simple_ipc.infrastructure.http import HttpListener, bind_socket
from simple_ipc.infrastructure.logging import get_logger
from simple_ipc.infrastructure.monitoring import MessageMetricsCollector
from simple_ipc.infrastructure.serialization import CONTENT_TYPE, encode_message

logger = get_logger(__name__)


class IpcInterface:
    """One side of a pair of processes exchanging typed messages over HTTP.

    The interface listens on ``port`` and posts to ``partner_port``. Its
    partner is created with the two ports swapped::

        a = IpcInterface()
        b = IpcInterface(a.partner_port, a.port)

    The listener is started during construction and keeps running until
    ``close()`` is awaited.

    Handlers are invoked from the listener thread. Synchronous handlers run
    there before the partner gets its response, so they must only touch
    thread-safe state (use ``loop.call_soon_threadsafe`` to reach a loop).
    Coroutine handlers run on the event loop that was running when the
    interface was created, so they may use that loop's queues and events
    directly. An interface created outside a running loop runs coroutine
    handlers on the listener's own loop instead.
    """

    def __init__(
        self,
        port: int | None = None,
        partner_port: int | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
        config: IpcConfig | None = None,
    ) -> None:
        """Bind the listening port and start the listener.

        Args:
            port: Port to listen on. None uses the configured default, 0 lets the OS choose
            partner_port: Port to post to. None derives it from the listening port
            http_client: Client used for sending. Not closed by the interface when supplied
            config: Configuration, defaults to the process-wide configuration

        Raises:
            PortConfigurationError: If the resolved ports are invalid
            ListenerStartupError: If the listener cannot be bound or started
        """
        self._config = config or get_config()
        host = self._config.ports.host

        sock = bind_socket(host, requested_listen_port(port, self._config.ports.default_port))
        try:
            self._ports = resolve_ports(
                sock.getsockname()[1],
                partner_port,
                partner_offset=self._config.ports.partner_offset,
            )
        except Exception:
            sock.close()
            raise

        self._registry = HandlerRegistry()
        self._metrics = MessageMetricsCollector(self._ports.port)
        try:
            handler_loop: asyncio.AbstractEventLoop | None = asyncio.get_running_loop()
        except RuntimeError:
            handler_loop = None
        self._dispatcher = Dispatcher(self._registry, self._metrics, handler_loop)
        self._listener = HttpListener(
            create_listener_app(
                self._dispatcher,
                self._ports,
                lambda: self._registry.message_types,
                path=self._config.http.path,
                drain_timeout=self._config.timeouts.shutdown_timeout,
            ),
            sock,
            startup_timeout=self._config.timeouts.startup_timeout,
            shutdown_timeout=self._config.timeouts.shutdown_timeout,
            access_log=self._config.logging.access_log,
            log_level=self._config.logging.level.value.lower(),
        )
        self._listener.start()

        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(
            timeout=self._config.timeouts.send_timeout,
            trust_env=False,
            limits=httpx.Limits(
                max_connections=self._config.http.max_connections,
                max_keepalive_connections=self._config.http.max_keepalive_connections,
            ),
        )
        self._url = self._config.partner_url(self._ports.partner_port)
        self._closed = False

        logger.info(
            "IPC interface started",
            extra={
                "port": self._ports.port,
                "partner_port": self._ports.partner_port,
                "owns_http_client": self._owns_client,
            },
        )

    @property
    def port(self) -> int:
        """Port this interface listens on."""
        return self._ports.port

    @property
    def partner_port(self) -> int:
        """Port this interface posts messages to."""
        return self._ports.partner_port

    @property
    def ports(self) -> PortPair:
        """Resolved port pair."""
        return self._ports

    @property
    def partner_url(self) -> str:
        """URL messages are posted to."""
        return self._url

    @property
    def registered_types(self) -> list[str]:
        """Message types that currently have a handler."""
        return self._registry.message_types

    @property
    def is_closed(self) -> bool:
        """Check if the interface has been closed."""
        return self._closed

    def on(
        self,
        message_cls: type[IpcMessage],
        handler: MessageHandler,
        *,
        replace: bool = False,
    ) -> None:
        """Register the handler for a message class.

        The handler applies to messages received after this call. It may be
        a plain function, called on the listener thread, or a coroutine
        function, run on the loop the interface was created on. Passing
        ``queue.put`` of an ``asyncio.Queue`` owned by that loop works.

        Args:
            message_cls: Message class to subscribe to
            handler: Callable receiving one decoded message
            replace: Replace an existing handler for the same type

        Raises:
            MessageTypeError: If the class declares no message_type
            DuplicateHandlerError: If the type already has a handler and replace is False
        """
        self._registry.register(message_cls, handler, replace=replace)

    def off(self, message_cls: type[IpcMessage]) -> bool:
        """Remove the handler for a message class.

        Returns:
            True if a handler was removed
        """
        return self._registry.unregister(message_cls)

    async def send_message(self, message: IpcMessage) -> None:
        """Post a message to the partner and wait for the HTTP response.

        Completion means the partner accepted the envelope and dispatch has
        started. It does not mean the partner's handler has finished.

        Args:
            message: Message to send

        Raises:
            InterfaceClosedError: If the interface has been closed
            MessageTypeError: If the message class declares no message_type
            PartnerUnavailableError: If nothing listens on the partner port
            SendTimeoutError: If the partner does not answer in time
            DeliveryError: If the partner answers with an error status
            TransportError: For any other transport failure
            EnvelopeEncodeError: If a field value cannot be packed
        """
        if self._closed:
            raise InterfaceClosedError("send message", self._ports.port)

        message_type = message_type_of(message)
        body = encode_message(message)
        timeout = self._config.timeouts.send_timeout

        with self._metrics.time_send(message_type):
            try:
                response = await self._http.post(
                    self._url,
                    content=body,
                    headers={"Content-Type": CONTENT_TYPE},
                    timeout=timeout,
                )
            except httpx.ConnectError as e:
                logger.warning(
                    "Partner is not listening",
                    extra={"url": self._url, "message_type": message_type},
                )
                raise PartnerUnavailableError(self._url, str(e)) from e
            except httpx.TimeoutException as e:
                logger.warning(
                    "Send timed out",
                    extra={"url": self._url, "message_type": message_type, "timeout": timeout},
                )
                raise SendTimeoutError(self._url, timeout) from e
            except httpx.TransportError as e:
                logger.error(
                    "Send failed",
                    exc_info=e,
                    extra={"url": self._url, "message_type": message_type},
                )
                raise TransportError(self._url, str(e)) from e

            if response.is_error:
                logger.error(
                    "Partner rejected message",
                    extra={
                        "url": self._url,
                        "message_type": message_type,
                        "status_code": response.status_code,
                    },
                )
                raise DeliveryError(self._url, response.status_code, response.text)

        logger.debug(
            "Message sent",
            extra={"url": self._url, "message_type": message_type, "payload_size": len(body)},
        )

    async def close(self) -> None:
        """Stop the listener and release owned resources. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True

        await asyncio.to_thread(self._listener.stop)
        if self._owns_client:
            await self._http.aclose()

        logger.info(
            "IPC interface closed",
            extra={"port": self._ports.port, "partner_port": self._ports.partner_port},
        )

    async def __aenter__(self) -> IpcInterface:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"IpcInterface(port={self.port}, partner_port={self.partner_port}, {state})"
