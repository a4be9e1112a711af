"""Readiness waits: workload model, coordinator, profiles."""

from .models import (
    AggregateResult,
    OutcomeStatus,
    PollOutcome,
    ReplicaMode,
    ReplicaStatus,
    ReplicaTarget,
    Workload,
)
from .coordinator import ReadinessCoordinator
from .loader import ProfileLoader, ReadinessProfile

__all__ = [
    "AggregateResult",
    "OutcomeStatus",
    "PollOutcome",
    "ProfileLoader",
    "ReadinessCoordinator",
    "ReadinessProfile",
    "ReplicaMode",
    "ReplicaStatus",
    "ReplicaTarget",
    "Workload",
]
