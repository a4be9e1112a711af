"""Generic wait and cleanup loops used by validation steps.

Both helpers accept plain or async callables, so they work with blocking
third-party API clients as well as async ones.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import Any, TypeVar

from .core.exceptions import CleanupError

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def _call(fn: Callable[..., Any], *args: Any) -> Any:
    result = fn(*args)
    if asyncio.iscoroutine(result):
        result = await result
    return result


async def poll_until(
    predicate: Callable[[T], bool],
    supplier: Callable[[], T | Awaitable[T]],
    timeout: float,
    interval: float,
) -> bool:
    """Poll ``supplier`` until ``predicate`` accepts its value.

    Supplier exceptions count as "not yet" and are retried on the next
    interval.

    Returns:
        True if the predicate was satisfied before the timeout.
    """
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout

    while True:
        try:
            if predicate(await _call(supplier)):
                return True
        except Exception as e:
            logger.debug(f"Poll attempt failed: {e}")

        if loop.time() + interval > deadline:
            return False
        await asyncio.sleep(interval)


async def purge_matching(
    find: Callable[[], Sequence[T] | Awaitable[Sequence[T]]],
    delete: Callable[[T], Any],
    what: str = "records",
    max_rounds: int = 10,
) -> int:
    """Delete everything ``find`` returns until nothing matches.

    Each round deletes a snapshot of the current matches and queries again,
    for at most ``max_rounds`` rounds.

    Returns:
        Number of deleted items.

    Raises:
        CleanupError: If matches remain after the last round.
    """
    deleted = 0
    for round_number in range(1, max_rounds + 1):
        matches = list(await _call(find))
        if not matches:
            return deleted

        logger.debug(f"Purge round {round_number}: deleting {len(matches)} {what}")
        for item in matches:
            await _call(delete, item)
            deleted += 1

    remaining = list(await _call(find))
    if remaining:
        raise CleanupError(what, max_rounds, len(remaining))
    return deleted
