"""Latency benchmarks for sending and receiving over loopback."""

from __future__ import annotations

import asyncio
import os
import threading
import time
from statistics import mean, median
from typing import ClassVar

import pytest
from simple_ipc import IpcInterface, IpcMessage
from simple_ipc.infrastructure.logging import get_logger

logger = get_logger(__name__)

ITERATIONS = int(os.environ.get("SIMPLE_IPC_BENCH_ITERATIONS", "2000"))
MAX_AVG_MS = float(os.environ.get("SIMPLE_IPC_BENCH_MAX_AVG_MS", "5.0"))


class BenchMessage(IpcMessage):
    message_type: ClassVar[str] = "bench.message"

    sequence: int = 0


def report(name: str, samples_ms: list[float]) -> float:
    average = mean(samples_ms)
    logger.info(
        f"{name}: avg={average:.3f}ms median={median(samples_ms):.3f}ms "
        f"max={max(samples_ms):.3f}ms over {len(samples_ms)} messages"
    )
    return average


@pytest.mark.performance
class TestLatency:
    """Average per-message latency under sustained sequential load."""

    @pytest.mark.asyncio
    async def test_send_average_latency(
        self, interface_pair: tuple[IpcInterface, IpcInterface]
    ) -> None:
        """Test the average send round trip stays under the bound."""
        first, second = interface_pair
        first.on(BenchMessage, lambda message: None)
        samples: list[float] = []

        for sequence in range(ITERATIONS):
            start = time.perf_counter()
            await second.send_message(BenchMessage(sequence=sequence))
            samples.append((time.perf_counter() - start) * 1000)

        average = report("send", samples)
        assert average <= MAX_AVG_MS, f"Expected <={MAX_AVG_MS}ms, got {average:.3f}ms"

    @pytest.mark.asyncio
    async def test_receive_average_latency(
        self, interface_pair: tuple[IpcInterface, IpcInterface]
    ) -> None:
        """Test the average time until the handler runs stays under the bound."""
        first, second = interface_pair
        received_at: dict[int, float] = {}
        lock = threading.Lock()

        def handler(message: BenchMessage) -> None:
            with lock:
                received_at[message.sequence] = time.perf_counter()

        first.on(BenchMessage, handler)
        samples: list[float] = []

        for sequence in range(ITERATIONS):
            start = time.perf_counter()
            await second.send_message(BenchMessage(sequence=sequence))
            while sequence not in received_at:
                await asyncio.sleep(0)
            samples.append((received_at[sequence] - start) * 1000)

        average = report("receive", samples)
        assert average <= MAX_AVG_MS, f"Expected <={MAX_AVG_MS}ms, got {average:.3f}ms"
