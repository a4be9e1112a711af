"""Observability: logging configuration."""

from .logging import WorkloadLoggerAdapter, setup_logging

__all__ = [
    "WorkloadLoggerAdapter",
    "setup_logging",
]
