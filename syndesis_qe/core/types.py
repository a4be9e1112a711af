"""TypedDict definitions for cluster API payloads used across the toolkit."""

from typing import NotRequired, TypedDict


class PodSummary(TypedDict):
    """Condensed view of a pod, as printed in failure diagnostics."""

    name: str
    phase: str
    ready: bool
    restarts: int
    labels: dict[str, str]
    node: NotRequired[str]
