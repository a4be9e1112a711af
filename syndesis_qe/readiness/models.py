"""Data model for readiness waits.

Workloads describe what to wait for, outcomes record how each wait ended,
and the aggregate folds them into one verdict.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..core.exceptions import ReadinessError


class ReplicaMode(Enum):
    """Which replica count a target is compared against."""

    READY = "ready"
    RUNNING = "running"


@dataclass(frozen=True)
class ReplicaStatus:
    """Observed replica counts for one label selector."""

    ready: int
    running: int

    def count(self, mode: ReplicaMode) -> int:
        return self.ready if mode is ReplicaMode.READY else self.running


@dataclass(frozen=True)
class ReplicaTarget:
    """Exactly ``count`` replicas in the given mode."""

    count: int
    mode: ReplicaMode = ReplicaMode.READY

    def __post_init__(self) -> None:
        if self.count < 0:
            raise ValueError("replica count must not be negative")

    def is_met(self, status: ReplicaStatus) -> bool:
        return status.count(self.mode) == self.count

    def __str__(self) -> str:
        return f"{self.count} {self.mode.value}"


@dataclass(frozen=True)
class Workload:
    """A horizontally scalable unit observed through a label selector."""

    label: str
    value: str
    target: ReplicaTarget
    interval: float
    timeout: float

    @property
    def key(self) -> tuple[str, str]:
        return (self.label, self.value)

    @property
    def name(self) -> str:
        return self.value

    @property
    def selector(self) -> str:
        return f"{self.label}={self.value}"


class OutcomeStatus(Enum):
    """Terminal state of a single workload wait."""

    SUCCEEDED = "succeeded"
    TIMED_OUT = "timed_out"
    ERRORED = "errored"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class PollOutcome:
    """Result of waiting for one workload. Never mutated once recorded."""

    workload: Workload
    status: OutcomeStatus
    ticks: int = 0
    elapsed: float = 0.0
    reason: str | None = None
    cause: BaseException | None = field(default=None, compare=False, repr=False)

    @property
    def succeeded(self) -> bool:
        return self.status is OutcomeStatus.SUCCEEDED

    def to_dict(self) -> dict[str, Any]:
        return {
            "workload": self.workload.selector,
            "target": str(self.workload.target),
            "status": self.status.value,
            "ticks": self.ticks,
            "elapsed": round(self.elapsed, 3),
            "reason": self.reason,
        }


@dataclass(frozen=True)
class AggregateResult:
    """All outcomes of one coordination call plus the overall verdict."""

    outcomes: tuple[PollOutcome, ...]
    elapsed: float = 0.0

    @classmethod
    def empty(cls) -> "AggregateResult":
        """Trivial success for a wait with nothing to wait for."""
        return cls(outcomes=())

    @property
    def succeeded(self) -> bool:
        return all(outcome.succeeded for outcome in self.outcomes)

    @property
    def failures(self) -> list[PollOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.succeeded]

    @property
    def all_errored(self) -> bool:
        """Every workload failed to be queried (likely a cluster outage)."""
        return bool(self.outcomes) and all(
            outcome.status is OutcomeStatus.ERRORED for outcome in self.outcomes
        )

    def get(self, name: str) -> PollOutcome | None:
        """Outcome for the workload with the given name, if present."""
        for outcome in self.outcomes:
            if outcome.workload.name == name:
                return outcome
        return None

    def summary(self) -> str:
        if self.succeeded:
            return f"{len(self.outcomes)} workload(s) ready"
        parts = [
            f"{outcome.workload.name}={outcome.status.value}"
            + (f" ({outcome.reason})" if outcome.reason else "")
            for outcome in self.failures
        ]
        return f"{len(self.failures)}/{len(self.outcomes)} not ready: " + ", ".join(parts)

    def raise_for_status(self, message: str = "Workloads did not become ready") -> None:
        """Raise ReadinessError unless every workload succeeded."""
        if not self.succeeded:
            raise ReadinessError(message, self)

    def to_dict(self) -> dict[str, Any]:
        return {
            "succeeded": self.succeeded,
            "elapsed": round(self.elapsed, 3),
            "outcomes": [outcome.to_dict() for outcome in self.outcomes],
        }
