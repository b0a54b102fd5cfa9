"""Inbound envelope dispatch."""

from __future__ import annotations

import asyncio
import concurrent.futures
import inspect
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from simple_ipc.application.services.handler_registry import HandlerRegistry
from simple_ipc.domain.exceptions import HandlerError
from simple_ipc.infrastructure.logging import get_logger
from simple_ipc.infrastructure.monitoring import MessageMetricsCollector
from simple_ipc.infrastructure.serialization import decode_envelope, decode_payload

logger = get_logger(__name__)

PendingHandler = asyncio.Future[Any] | concurrent.futures.Future[Any]


class DispatchOutcome(str, Enum):
    """What happened to an inbound envelope."""

    DELIVERED = "delivered"
    UNHANDLED = "unhandled"


@dataclass(frozen=True)
class DispatchResult:
    """Result of dispatching one envelope."""

    outcome: DispatchOutcome
    message_type: str


async def _await(awaitable: Awaitable[Any]) -> Any:
    return await awaitable


class Dispatcher:
    """Routes decoded envelopes to the handler registered for their type.

    Synchronous handlers run to completion on the calling thread before
    ``dispatch`` returns. Handlers returning an awaitable are scheduled
    before ``dispatch`` returns: on ``handler_loop`` while that loop is
    running, otherwise on the loop of the calling thread. Their completion is
    tracked so the listener can drain them at shutdown.
    """

    def __init__(
        self,
        registry: HandlerRegistry,
        metrics: MessageMetricsCollector | None = None,
        handler_loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        """Initialize the dispatcher.

        Args:
            registry: Registry consulted for every envelope
            metrics: Optional metrics collector
            handler_loop: Loop that runs async handlers, usually the loop the
                owning interface was created on
        """
        self._registry = registry
        self._metrics = metrics
        self._handler_loop = handler_loop
        self._pending: set[PendingHandler] = set()

    @property
    def pending_count(self) -> int:
        """Number of scheduled async handlers that have not finished."""
        return len(self._pending)

    def dispatch(self, body: bytes) -> DispatchResult:
        """Decode an envelope body and invoke its handler.

        Args:
            body: Raw HTTP request body

        Returns:
            DispatchResult describing the outcome

        Raises:
            EnvelopeDecodeError: If the body is not an envelope
            PayloadDecodeError: If the payload does not fit the registered type
            HandlerError: If a synchronous handler raises
        """
        start = time.perf_counter()
        envelope = decode_envelope(body)
        registration = self._registry.lookup(envelope.message_type)

        if registration is None:
            logger.debug(
                "Dropping message with no registered handler",
                extra={"message_type": envelope.message_type},
            )
            return self._finish(envelope.message_type, DispatchOutcome.UNHANDLED, start)

        message = decode_payload(envelope, registration.message_cls)

        try:
            result = registration.handler(message)
        except Exception as e:
            logger.error(
                "Message handler raised",
                exc_info=e,
                extra={
                    "message_type": envelope.message_type,
                    "handler": registration.handler_name,
                },
            )
            raise HandlerError(envelope.message_type, str(e)) from e

        if inspect.isawaitable(result):
            self._schedule(result, envelope.message_type)

        return self._finish(envelope.message_type, DispatchOutcome.DELIVERED, start)

    async def drain(self, timeout: float) -> None:
        """Wait for scheduled async handlers, cancelling any still running at timeout."""
        if not self._pending:
            return

        pending = [
            handler if isinstance(handler, asyncio.Future) else asyncio.wrap_future(handler)
            for handler in list(self._pending)
        ]
        logger.info("Draining pending handlers", extra={"pending": len(pending)})
        _done, still_running = await asyncio.wait(pending, timeout=timeout)
        for task in still_running:
            task.cancel()
        if still_running:
            logger.warning(
                "Cancelled handlers still running at shutdown",
                extra={"cancelled": len(still_running)},
            )

    def _schedule(self, awaitable: Awaitable[Any], message_type: str) -> None:
        loop = self._handler_loop
        handler: PendingHandler
        if loop is not None and loop.is_running() and not loop.is_closed():
            coro = awaitable if asyncio.iscoroutine(awaitable) else _await(awaitable)
            handler = asyncio.run_coroutine_threadsafe(coro, loop)
        else:
            handler = asyncio.ensure_future(awaitable)
        self._pending.add(handler)
        handler.add_done_callback(self._make_done_callback(message_type))

    def _finish(self, message_type: str, outcome: DispatchOutcome, start: float) -> DispatchResult:
        if self._metrics is not None:
            self._metrics.record_dispatch(message_type, outcome.value, time.perf_counter() - start)
        return DispatchResult(outcome=outcome, message_type=message_type)

    def _make_done_callback(self, message_type: str) -> Callable[[PendingHandler], None]:
        def _on_done(handler: PendingHandler) -> None:
            self._pending.discard(handler)
            if handler.cancelled():
                return
            error = handler.exception()
            if error is not None:
                logger.error(
                    "Async message handler failed",
                    exc_info=error,
                    extra={"message_type": message_type},
                )

        return _on_done
