"""Syndesis QE toolkit: readiness waits and test-run plumbing for OpenShift."""

from .config import ClusterSettings, RunnerSettings
from .core import (
    CleanupError,
    ClusterUnreachableError,
    ConfigurationError,
    ProfileLoadError,
    ProjectNotCleanError,
    QeError,
    QueryFailedError,
    ReadinessError,
    ValidationError,
)
from .readiness import (
    AggregateResult,
    OutcomeStatus,
    PollOutcome,
    ReadinessCoordinator,
    ReplicaMode,
    ReplicaStatus,
    ReplicaTarget,
    Workload,
)

__all__ = [
    # Configuration
    "ClusterSettings",
    "RunnerSettings",
    # Readiness
    "AggregateResult",
    "OutcomeStatus",
    "PollOutcome",
    "ReadinessCoordinator",
    "ReplicaMode",
    "ReplicaStatus",
    "ReplicaTarget",
    "Workload",
    # Exceptions
    "QeError",
    "CleanupError",
    "ClusterUnreachableError",
    "ConfigurationError",
    "ProfileLoadError",
    "ProjectNotCleanError",
    "QueryFailedError",
    "ReadinessError",
    "ValidationError",
]
