"""Cluster access: REST client, reachability gate, diagnostics."""

from .client import ClusterClient, OpenShiftClient
from .diagnostics import collect_failure_logs, log_pods
from .reachability import SessionContext, ping_cluster, wait_until_reachable

__all__ = [
    "ClusterClient",
    "OpenShiftClient",
    "SessionContext",
    "collect_failure_logs",
    "log_pods",
    "ping_cluster",
    "wait_until_reachable",
]
