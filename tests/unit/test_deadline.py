import asyncio
import time

import pytest

from resumind.errors import DeadlineExceeded
from resumind.services import deadline
from resumind.services.deadline import with_deadline


async def _after(seconds: float, value=None, exc: Exception | None = None):
    await asyncio.sleep(seconds)
    if exc is not None:
        raise exc
    return value


@pytest.mark.asyncio
async def test_returns_value_when_operation_wins():
    result = await with_deadline(_after(0.01, value="done"), 1000)
    assert result == "done"


@pytest.mark.asyncio
async def test_reraises_operation_error_when_it_settles_first():
    with pytest.raises(ValueError, match="boom"):
        await with_deadline(_after(0.01, exc=ValueError("boom")), 1000)


@pytest.mark.asyncio
async def test_times_out_within_budget():
    started = time.monotonic()
    with pytest.raises(DeadlineExceeded, match="Operation timed out"):
        await with_deadline(_after(0.5, value="late"), 50)
    assert time.monotonic() - started < 1


@pytest.mark.asyncio
async def test_timeout_is_a_timeout_error():
    with pytest.raises(TimeoutError):
        await with_deadline(_after(0.5), 10)


@pytest.mark.asyncio
async def test_custom_timeout_message():
    with pytest.raises(DeadlineExceeded, match="too slow"):
        await with_deadline(_after(0.5), 10, message="too slow")


@pytest.mark.asyncio
async def test_late_result_is_discarded_without_cancelling():
    side_effects = []

    async def slow():
        await asyncio.sleep(0.1)
        side_effects.append("ran")
        return "late"

    before = deadline.pending_abandoned()
    with pytest.raises(DeadlineExceeded):
        await with_deadline(slow(), 10)
    assert deadline.pending_abandoned() == before + 1

    await asyncio.sleep(0.2)
    assert side_effects == ["ran"]
    assert deadline.pending_abandoned() == before


@pytest.mark.asyncio
async def test_late_failure_is_retrieved():
    before = deadline.pending_abandoned()
    with pytest.raises(DeadlineExceeded):
        await with_deadline(_after(0.05, exc=RuntimeError("late failure")), 10)
    await asyncio.sleep(0.1)
    assert deadline.pending_abandoned() == before


@pytest.mark.asyncio
async def test_accepts_existing_task():
    task = asyncio.create_task(_after(0.01, value=7))
    assert await with_deadline(task, 1000) == 7
