import asyncio
from unittest.mock import patch

import psutil
import pytest

from cipher_service.services import resource_sampler
from cipher_service.services.resource_sampler import (
    ResourceSampler,
    build_memory_reader,
    process_memory_reader,
    system_memory_reader,
)


class _StopLoop(Exception):
    """Raised by the fake sleep to break out of the perpetual loop."""


def _scripted_reader(values):
    """Reader returning (or raising) each scripted value in turn."""
    script = iter(values)

    def _read():
        value = next(script)
        if isinstance(value, BaseException):
            raise value
        return value

    return _read


def test_sample_once_writes_the_gauge(metrics):
    sampler = ResourceSampler(metrics, reader=lambda: 4096)

    assert sampler.sample_once() == 4096
    assert metrics.memory_usage == 4096
    assert sampler.samples_taken == 1


@pytest.mark.parametrize(
    "failure",
    [OSError("proc unavailable"), psutil.AccessDenied(pid=1), ValueError("bad stat"), -5],
)
def test_failed_read_keeps_previous_value(metrics, failure):
    sampler = ResourceSampler(metrics, reader=_scripted_reader([1000, failure, 3000]))

    sampler.sample_once()
    assert sampler.sample_once() is None
    assert metrics.memory_usage == 1000
    assert sampler.failures == 1

    sampler.sample_once()
    assert metrics.memory_usage == 3000
    assert sampler.samples_taken == 2


def test_loop_survives_an_unexpected_reader_error(metrics):
    calls = []

    def reader():
        calls.append(1)
        if len(calls) == 1:
            raise RuntimeError("bug")
        return 2048

    sampler = ResourceSampler(metrics, interval=0.01, reader=reader)

    async def scenario():
        await sampler.start()
        for _ in range(200):
            if sampler.samples_taken >= 5:
                break
            await asyncio.sleep(0.01)
        running = sampler.is_running
        await sampler.stop()
        return running

    assert asyncio.run(scenario()) is True
    assert sampler.samples_taken >= 5
    assert sampler.failures == 1
    assert metrics.memory_usage == 2048


def test_unexpected_error_still_sleeps_before_next_read(metrics):
    sleeps = []

    async def fake_sleep(delay):
        sleeps.append(delay)
        if len(sleeps) == 2:
            raise _StopLoop

    sampler = ResourceSampler(
        metrics,
        interval=10.0,
        reader=_scripted_reader([TypeError("odd reading"), 512]),
    )

    async def scenario():
        with patch.object(resource_sampler.asyncio, "sleep", fake_sleep):
            await sampler.run()

    with pytest.raises(_StopLoop):
        asyncio.run(scenario())

    assert sleeps == [10.0, 10.0]
    assert sampler.failures == 1
    assert metrics.memory_usage == 512


def test_interval_must_be_positive(metrics):
    with pytest.raises(ValueError):
        ResourceSampler(metrics, interval=0)


def test_loop_keeps_its_schedule_after_a_failed_read(metrics):
    observed_before_read = []
    script = iter([100, OSError("transient"), 300])

    def reader():
        observed_before_read.append(metrics.memory_usage)
        value = next(script)
        if isinstance(value, BaseException):
            raise value
        return value

    sleeps = []

    async def fake_sleep(delay):
        sleeps.append(delay)
        if len(sleeps) == 3:
            raise _StopLoop

    sampler = ResourceSampler(metrics, interval=10.0, reader=reader)

    async def scenario():
        with patch.object(resource_sampler.asyncio, "sleep", fake_sleep):
            await sampler.run()

    with pytest.raises(_StopLoop):
        asyncio.run(scenario())

    assert sleeps == [10.0, 10.0, 10.0]
    # The failed second read left 100 in place for the third read to see.
    assert observed_before_read == [0, 100, 100]
    assert metrics.memory_usage == 300
    assert sampler.samples_taken == 2
    assert sampler.failures == 1


def test_running_sampler_overwrites_gauge_every_interval(metrics):
    readings = iter(range(1, 1000))
    writes = []

    def reader():
        value = next(readings)
        writes.append(value)
        return value

    sampler = ResourceSampler(metrics, interval=0.01, reader=reader)

    async def scenario():
        await sampler.start()
        assert sampler.is_running
        for _ in range(200):
            if sampler.samples_taken >= 5:
                break
            await asyncio.sleep(0.01)
        await sampler.stop()

    asyncio.run(scenario())

    assert sampler.samples_taken >= 5
    assert not sampler.is_running
    assert metrics.memory_usage == writes[-1] >= 0


def test_start_is_idempotent_and_stop_cancels(metrics):
    sampler = ResourceSampler(metrics, interval=60.0, reader=lambda: 1)

    async def scenario():
        await sampler.start()
        first_task = sampler._task
        await sampler.start()
        assert sampler._task is first_task
        await asyncio.sleep(0)
        await sampler.stop()
        assert first_task.cancelled()
        await sampler.stop()

    asyncio.run(scenario())
    assert sampler.samples_taken == 1


def test_process_reader_reports_resident_bytes():
    assert process_memory_reader()() > 0


def test_system_reader_reports_used_bytes():
    assert system_memory_reader() > 0


def test_build_memory_reader_selects_source():
    assert build_memory_reader("system") is system_memory_reader
    assert build_memory_reader("process")() > 0
