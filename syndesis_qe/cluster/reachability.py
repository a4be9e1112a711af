"""Cluster reachability gate shared by one test session.

The session context replaces a process-wide "cluster reachable" flag: it is
created once per test session and handed to every wait that should
short-circuit after an outage was detected.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

import httpx

from ..core.exceptions import ClusterUnreachableError

logger = logging.getLogger(__name__)

Ping = Callable[[str], Awaitable[bool]]


@dataclass
class SessionContext:
    """Per-session cluster state.

    ``reachable`` is None until the first check. Once marked unreachable it
    stays unreachable for the rest of the session.
    """

    cluster_url: str
    reachable: bool | None = None

    def mark_reachable(self) -> None:
        if self.reachable is None:
            self.reachable = True

    def mark_unreachable(self) -> None:
        if self.reachable is not False:
            logger.error(f"Marking cluster {self.cluster_url} unreachable for this session")
        self.reachable = False


async def ping_cluster(url: str, timeout: float = 15.0, verify: bool = False) -> bool:
    """Return True if the URL answers with any HTTP response."""
    try:
        async with httpx.AsyncClient(timeout=timeout, verify=verify) as client:
            await client.get(url)
        return True
    except httpx.HTTPError as e:
        logger.debug(f"Ping of {url} failed: {e}")
        return False


async def wait_until_reachable(
    session: SessionContext,
    ping: Ping = ping_cluster,
    max_retries: int = 30,
    retry_delay: float = 45.0,
) -> None:
    """Ping the cluster until it answers or the retries run out.

    Args:
        session: Session context; updated with the result.
        ping: Async callable returning whether the URL is reachable.
        max_retries: Number of pings before giving up.
        retry_delay: Seconds to sleep between pings.

    Raises:
        ClusterUnreachableError: If a previous check in this session failed,
            or if no ping succeeded.
    """
    if session.reachable is False:
        raise ClusterUnreachableError(session.cluster_url)

    logger.info(f"Checking if cluster at {session.cluster_url} is reachable")
    for attempt in range(1, max_retries + 1):
        if await ping(session.cluster_url):
            logger.info(f"Cluster at {session.cluster_url} is reachable")
            session.mark_reachable()
            return

        if attempt < max_retries:
            logger.debug(
                f"Cluster at {session.cluster_url} was not reachable "
                f"(attempt {attempt}/{max_retries}), retrying in {retry_delay:g}s"
            )
            await asyncio.sleep(retry_delay)

    session.mark_unreachable()
    raise ClusterUnreachableError(session.cluster_url, attempts=max_retries)
