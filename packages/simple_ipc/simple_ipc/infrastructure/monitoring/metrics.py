"""Prometheus metrics for message sending and dispatch."""

from __future__ import annotations

import time
from collections.abc import Iterator
from contextlib import contextmanager

from prometheus_client import Counter, Histogram

from simple_ipc.infrastructure.logging import get_logger

logger = get_logger(__name__)

_LATENCY_BUCKETS = (0.0005, 0.001, 0.0025, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 5.0)

messages_sent_total = Counter(
    "simple_ipc_messages_sent_total",
    "Total number of messages accepted by the partner",
    ["message_type"],
)

send_failures_total = Counter(
    "simple_ipc_send_failures_total",
    "Total number of sends that failed",
    ["message_type", "failure_type"],
)

messages_received_total = Counter(
    "simple_ipc_messages_received_total",
    "Total number of inbound envelopes by outcome",
    ["message_type", "outcome"],
)

send_duration = Histogram(
    "simple_ipc_send_duration_seconds",
    "Round trip time of one send in seconds",
    ["message_type"],
    buckets=_LATENCY_BUCKETS,
)

dispatch_duration = Histogram(
    "simple_ipc_dispatch_duration_seconds",
    "Time from envelope receipt to handler invocation returning in seconds",
    ["message_type"],
    buckets=_LATENCY_BUCKETS,
)


class MessageMetricsCollector:
    """Records send and dispatch metrics for one interface."""

    def __init__(self, port: int) -> None:
        """Initialize metrics collector.

        Args:
            port: Listening port of the owning interface, used in log context
        """
        self.port = port

    @contextmanager
    def time_send(self, message_type: str) -> Iterator[None]:
        """Time a send and count it as sent or failed."""
        start = time.perf_counter()
        try:
            yield
        except Exception as e:
            send_failures_total.labels(
                message_type=message_type,
                failure_type=getattr(e, "error_code", type(e).__name__),
            ).inc()
            raise
        else:
            elapsed = time.perf_counter() - start
            messages_sent_total.labels(message_type=message_type).inc()
            send_duration.labels(message_type=message_type).observe(elapsed)

    def record_dispatch(self, message_type: str, outcome: str, duration: float) -> None:
        """Record one inbound envelope.

        Args:
            message_type: Discriminator carried by the envelope
            outcome: Dispatch outcome label
            duration: Seconds spent decoding and invoking
        """
        messages_received_total.labels(message_type=message_type, outcome=outcome).inc()
        dispatch_duration.labels(message_type=message_type).observe(duration)
        logger.debug(
            "Recorded dispatch metrics",
            extra={
                "port": self.port,
                "message_type": message_type,
                "outcome": outcome,
                "duration_ms": duration * 1000,
            },
        )
