"""Parallel readiness polling with per-workload and global deadlines.

Each workload gets its own polling task; the tasks run in one task group
under a single global timeout, so nothing started by a wait outlives it.
"""

import asyncio
import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING

from ..cluster.reachability import SessionContext
from ..core.exceptions import ValidationError
from ..observability.logging import WorkloadLoggerAdapter
from .models import AggregateResult, OutcomeStatus, PollOutcome, ReplicaStatus, Workload

if TYPE_CHECKING:
    from ..cluster.client import ClusterClient

logger = logging.getLogger(__name__)

WorkloadKey = tuple[str, str]


class ReadinessCoordinator:
    """Waits for a set of workloads to reach their replica targets.

    Usage:
        coordinator = ReadinessCoordinator(client)
        result = await coordinator.wait(workloads, global_timeout=720)
        result.raise_for_status()
    """

    def __init__(self, client: "ClusterClient"):
        """Initialize coordinator.

        Args:
            client: Cluster client used read-only for replica status queries.
        """
        self.client = client

    async def wait(
        self,
        workloads: Iterable[Workload],
        global_timeout: float,
        session: SessionContext | None = None,
    ) -> AggregateResult:
        """Poll every workload concurrently and aggregate the outcomes.

        Per-workload failures never raise out of this method; they are
        reported in the returned result.

        Args:
            workloads: Workloads to wait for. Keys must be unique.
            global_timeout: Upper bound in seconds for the whole call.
            session: Optional session context; an unreachable cluster
                short-circuits every workload to ERRORED.

        Returns:
            AggregateResult with one outcome per workload, in input order.

        Raises:
            ValidationError: If the input violates the preconditions.
        """
        workloads = list(workloads)
        self._validate(workloads, global_timeout)

        loop = asyncio.get_running_loop()
        started = loop.time()
        outcomes: dict[WorkloadKey, PollOutcome] = {}
        ticks: dict[WorkloadKey, int] = {}

        if session is not None and session.reachable is False:
            logger.error(
                f"Cluster {session.cluster_url} marked unreachable, "
                f"not polling {len(workloads)} workloads"
            )
            for workload in workloads:
                self._record(
                    outcomes,
                    PollOutcome(
                        workload=workload,
                        status=OutcomeStatus.ERRORED,
                        reason="cluster marked unreachable for this session",
                    ),
                )
            return self._aggregate(workloads, outcomes, loop.time() - started)

        logger.info(
            f"Waiting for {len(workloads)} workloads "
            f"(global timeout: {global_timeout:g}s)"
        )

        try:
            async with asyncio.timeout(global_timeout):
                async with asyncio.TaskGroup() as group:
                    for workload in workloads:
                        group.create_task(
                            self._watch(workload, outcomes, ticks),
                            name=f"readiness:{workload.selector}",
                        )
        except TimeoutError:
            pending = [w.name for w in workloads if w.key not in outcomes]
            logger.warning(
                f"Global timeout of {global_timeout:g}s reached, "
                f"cancelled: {', '.join(pending)}"
            )

        elapsed = loop.time() - started
        for workload in workloads:
            if workload.key not in outcomes:
                self._record(
                    outcomes,
                    PollOutcome(
                        workload=workload,
                        status=OutcomeStatus.CANCELLED,
                        ticks=ticks.get(workload.key, 0),
                        elapsed=elapsed,
                        reason=f"global timeout of {global_timeout:g}s reached",
                    ),
                )

        return self._aggregate(workloads, outcomes, elapsed)

    async def _watch(
        self,
        workload: Workload,
        outcomes: dict[WorkloadKey, PollOutcome],
        ticks: dict[WorkloadKey, int],
    ) -> None:
        """Poll one workload until it succeeds, times out or errors."""
        log = WorkloadLoggerAdapter(logger, workload.selector)
        loop = asyncio.get_running_loop()
        started = loop.time()
        deadline = started + workload.timeout
        tick = 0

        while True:
            tick += 1
            ticks[workload.key] = tick
            error: Exception | None = None
            met = False

            try:
                budget = max(deadline - loop.time(), workload.interval)
                status = await self._query(workload, budget)
                met = workload.target.is_met(status)
            except Exception as e:
                error = e
                log.warning(f"Query failed on tick {tick}: {e}")
            else:
                if met:
                    log.info(f"Reached {workload.target} on tick {tick}")
                    self._record(
                        outcomes,
                        PollOutcome(
                            workload=workload,
                            status=OutcomeStatus.SUCCEEDED,
                            ticks=tick,
                            elapsed=loop.time() - started,
                        ),
                    )
                    return
                log.debug(f"Tick {tick}: {status} (want {workload.target})")

            # Ticks follow the schedule started + n * interval, not the drifting clock
            next_start = started + tick * workload.interval
            if next_start > deadline or loop.time() >= deadline:
                if error is not None:
                    outcome = PollOutcome(
                        workload=workload,
                        status=OutcomeStatus.ERRORED,
                        ticks=tick,
                        elapsed=loop.time() - started,
                        reason=str(error),
                        cause=error,
                    )
                else:
                    outcome = PollOutcome(
                        workload=workload,
                        status=OutcomeStatus.TIMED_OUT,
                        ticks=tick,
                        elapsed=loop.time() - started,
                        reason=(
                            f"{workload.target} not reached within "
                            f"{workload.timeout:g}s"
                        ),
                    )
                log.warning(f"Gave up after {tick} ticks: {outcome.reason}")
                self._record(outcomes, outcome)
                return

            await asyncio.sleep(max(next_start - loop.time(), 0))

    async def _query(self, workload: Workload, budget: float) -> ReplicaStatus:
        try:
            async with asyncio.timeout(budget):
                return await self.client.get_replica_status(
                    workload.label, workload.value
                )
        except TimeoutError as e:
            raise TimeoutError(f"status query did not answer within {budget:g}s") from e

    @staticmethod
    def _record(
        outcomes: dict[WorkloadKey, PollOutcome], outcome: PollOutcome
    ) -> None:
        key = outcome.workload.key
        if key in outcomes:
            raise RuntimeError(f"Outcome for {outcome.workload.selector} already recorded")
        outcomes[key] = outcome

    @staticmethod
    def _aggregate(
        workloads: list[Workload],
        outcomes: dict[WorkloadKey, PollOutcome],
        elapsed: float,
    ) -> AggregateResult:
        result = AggregateResult(
            outcomes=tuple(outcomes[w.key] for w in workloads),
            elapsed=elapsed,
        )
        if result.succeeded:
            logger.info(f"All workloads ready after {elapsed:.1f}s")
        else:
            logger.error(f"Readiness wait failed after {elapsed:.1f}s: {result.summary()}")
        return result

    @staticmethod
    def _validate(workloads: list[Workload], global_timeout: float) -> None:
        if not workloads:
            raise ValidationError("workloads", "at least one workload is required")
        if global_timeout <= 0:
            raise ValidationError("global_timeout", "must be positive")

        seen: set[WorkloadKey] = set()
        for workload in workloads:
            if workload.interval <= 0:
                raise ValidationError(
                    f"{workload.selector}.interval", "must be positive"
                )
            if workload.timeout <= 0:
                raise ValidationError(
                    f"{workload.selector}.timeout", "must be positive"
                )
            if workload.key in seen:
                raise ValidationError(workload.selector, "duplicate workload")
            seen.add(workload.key)
