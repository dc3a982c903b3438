"""Background sampler that publishes memory usage to the metrics registry.

The sampler runs for the whole process lifetime, independently of request
traffic. Each iteration takes one measurement and performs one gauge write,
then sleeps for a fixed interval. A failed measurement skips the write and
never stops the loop; the sleep still happens so the schedule does not
drift.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Callable, Literal, Optional

import psutil

from cipher_service.core.config import DEFAULT_SAMPLE_INTERVAL
from cipher_service.core.metrics import MetricsRegistry
from cipher_service.core.request_context import background_context
from cipher_service.core.tasks import cancel_task, spawn_monitored

logger = logging.getLogger(__name__)

MemoryReader = Callable[[], int]
SAMPLE_ERRORS = (psutil.Error, OSError, ValueError)


def process_memory_reader() -> MemoryReader:
    """Return a reader for this process' resident set size in bytes."""

    process = psutil.Process()

    def _read() -> int:
        return int(process.memory_info().rss)

    return _read


def system_memory_reader() -> int:
    """Return used system memory in bytes."""

    return int(psutil.virtual_memory().used)


def build_memory_reader(source: Literal["process", "system"]) -> MemoryReader:
    if source == "system":
        return system_memory_reader
    return process_memory_reader()


class ResourceSampler:
    """Periodically write memory usage into ``memory_usage_bytes``."""

    def __init__(
        self,
        metrics: MetricsRegistry,
        *,
        interval: float = DEFAULT_SAMPLE_INTERVAL,
        reader: Optional[MemoryReader] = None,
    ) -> None:
        if interval <= 0:
            raise ValueError("Sampling interval must be positive")
        self._metrics = metrics
        self._interval = interval
        self._reader = reader or process_memory_reader()
        self._task: Optional[asyncio.Task] = None
        self._samples_taken = 0
        self._failures = 0

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def samples_taken(self) -> int:
        return self._samples_taken

    @property
    def failures(self) -> int:
        return self._failures

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def sample_once(self) -> Optional[int]:
        """Take one measurement; returns the bytes written or ``None`` if skipped."""

        try:
            value = self._reader()
        except SAMPLE_ERRORS as exc:
            self._failures += 1
            logger.warning("Memory sample skipped: %s", exc)
            return None
        if value < 0:
            self._failures += 1
            logger.warning("Memory sample skipped: negative reading %s", value)
            return None
        self._metrics.set_memory_usage(value)
        self._samples_taken += 1
        return value

    async def run(self) -> None:
        with background_context("sampler"):
            while True:
                try:
                    self.sample_once()
                except Exception:  # noqa: BLE001
                    self._failures += 1
                    logger.exception("Memory sample failed unexpectedly")
                await asyncio.sleep(self._interval)

    async def start(self) -> None:
        if self.is_running:
            return
        self._task = spawn_monitored(self.run(), name="resource-sampler", logger=logger)
        logger.info("Resource sampler started (interval=%ss)", self._interval)

    async def stop(self) -> None:
        if self._task is None:
            return
        task, self._task = self._task, None
        await cancel_task(task)
        logger.info("Resource sampler stopped after %s samples", self._samples_taken)
