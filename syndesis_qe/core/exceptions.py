"""Custom exception hierarchy for the syndesis QE toolkit.

Provides structured exceptions with error codes and recovery hints.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..readiness.models import AggregateResult


class QeError(Exception):
    """Base exception for QE toolkit errors.

    Attributes:
        message: Human-readable error message.
        code: Machine-readable error code.
        recoverable: Whether the error is potentially recoverable.
    """

    def __init__(
        self,
        message: str,
        code: str,
        recoverable: bool = True,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.recoverable = recoverable

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"

    def to_dict(self) -> dict[str, str | bool]:
        """Convert exception to dictionary for JSON serialization.

        Returns:
            Dictionary with error details.
        """
        return {
            "error": self.code,
            "message": self.message,
            "recoverable": self.recoverable,
        }


class ConfigurationError(QeError):
    """Invalid configuration.

    Raised when configuration is invalid or missing required values.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message, "CONFIG", recoverable=False)


class ValidationError(QeError):
    """Validation error for workloads or readiness profiles.

    Raised when input validation fails.
    """

    def __init__(
        self,
        field: str,
        message: str,
    ) -> None:
        full_message = f"Validation failed for '{field}': {message}"
        super().__init__(full_message, "VALIDATION", recoverable=False)
        self.field = field


class QueryFailedError(QeError):
    """A cluster API request failed.

    Raised by the cluster client on transport errors and unexpected
    HTTP responses.
    """

    def __init__(
        self,
        operation: str,
        cause: Exception | None = None,
        status_code: int | None = None,
    ) -> None:
        message = f"Cluster query '{operation}' failed"
        if status_code is not None:
            message += f" with HTTP {status_code}"
        if cause:
            message += f": {cause}"
        super().__init__(message, "QUERY_FAILED", recoverable=True)
        self.operation = operation
        self.cause = cause
        self.status_code = status_code


class ClusterUnreachableError(QeError):
    """The cluster API endpoint could not be contacted.

    Once raised for a session, later reachability checks in the same
    session fail immediately.
    """

    def __init__(self, url: str, attempts: int | None = None) -> None:
        if attempts is None:
            message = f"Previous reachability check of {url} failed, skipping"
        else:
            message = f"Unable to contact cluster at {url} after {attempts} tries"
        super().__init__(message, "CLUSTER_UNREACHABLE", recoverable=False)
        self.url = url
        self.attempts = attempts


class ReadinessError(QeError):
    """A readiness wait finished with a failed aggregate verdict."""

    def __init__(self, message: str, result: "AggregateResult") -> None:
        super().__init__(f"{message}: {result.summary()}", "NOT_READY", recoverable=True)
        self.result = result


class ProjectNotCleanError(QeError):
    """Namespace still contains workloads after the clean timeout."""

    def __init__(self, namespace: str, timeout: float, remaining: list[str]) -> None:
        message = f"Namespace {namespace} was not clean after {timeout:g}s"
        if remaining:
            message += f" (remaining: {', '.join(remaining)})"
        super().__init__(message, "NOT_CLEAN", recoverable=True)
        self.namespace = namespace
        self.timeout = timeout
        self.remaining = remaining


class CleanupError(QeError):
    """Matching records were still present after the last purge round."""

    def __init__(self, what: str, rounds: int, remaining: int) -> None:
        message = f"{remaining} {what} still present after {rounds} purge rounds"
        super().__init__(message, "CLEANUP_FAILED", recoverable=True)
        self.what = what
        self.rounds = rounds
        self.remaining = remaining


class ProfileLoadError(QeError):
    """Error loading or validating a readiness profile."""

    def __init__(self, message: str) -> None:
        super().__init__(message, "PROFILE", recoverable=False)
