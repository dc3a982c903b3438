"""Helpers for the service's long-lived asyncio tasks."""
from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Coroutine


def spawn_monitored(coro: Coroutine, *, name: str, logger: logging.Logger) -> asyncio.Task:
    """Start ``coro`` as a task and log it if it ever dies with an exception."""

    def _callback(finished: asyncio.Task) -> None:
        if finished.cancelled():
            return
        exc = finished.exception()
        if exc is not None:
            logger.error("Background task %s crashed: %s", name, exc, exc_info=exc)

    task = asyncio.create_task(coro, name=name)
    task.add_done_callback(_callback)
    return task


async def cancel_task(task: asyncio.Task | None) -> None:
    """Cancel a task and wait until it has finished unwinding."""

    if task is None or task.done():
        return
    task.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await task
