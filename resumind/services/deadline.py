import asyncio
import logging
from collections.abc import Awaitable
from typing import TypeVar

from resumind.errors import DeadlineExceeded

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Operations that lost the race stay referenced here until they settle.
_abandoned: set[asyncio.Future] = set()


def _discard_late_outcome(task: asyncio.Future) -> None:
    _abandoned.discard(task)
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.debug("[deadline] late failure discarded | error=%s", exc)
    else:
        logger.debug("[deadline] late result discarded")


def pending_abandoned() -> int:
    """Number of abandoned operations that have not settled yet."""
    return len(_abandoned)


async def with_deadline(
    operation: Awaitable[T], ms: int, message: str = "Operation timed out"
) -> T:
    """
    Race an awaitable against a timer of `ms` milliseconds.
    Returns the operation's result (or re-raises its error) if it settles first,
    otherwise raises DeadlineExceeded. The slower operation is not cancelled;
    whatever it eventually produces is discarded.

    An abandoned operation stays referenced until it settles, so the operation
    must be bounded on its own (HttpAIFeedbackClient relies on its transport
    timeout, AI_REQUEST_TIMEOUT). One that never settles is held for the life
    of the event loop.
    """
    task = asyncio.ensure_future(operation)
    try:
        done, _ = await asyncio.wait({task}, timeout=ms / 1000)
    except asyncio.CancelledError:
        task.cancel()
        raise

    if task in done:
        return task.result()

    _abandoned.add(task)
    task.add_done_callback(_discard_late_outcome)
    logger.warning("[deadline] budget elapsed | ms=%d", ms)
    raise DeadlineExceeded(message)
