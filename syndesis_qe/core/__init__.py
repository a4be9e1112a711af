"""Core types and exceptions."""

from .exceptions import (
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
from .types import PodSummary

__all__ = [
    # Types
    "PodSummary",
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
