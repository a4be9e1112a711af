"""Failure diagnostics: pod dumps and log collection."""

import logging

from ..core.exceptions import QueryFailedError
from ..core.types import PodSummary
from .client import ClusterClient

logger = logging.getLogger(__name__)

SERVER_POD_PREFIX = "syndesis-server"
INTEGRATION_POD_PREFIX = "i-"


def is_integration_pod(name: str) -> bool:
    """Integration runtime pods, without their deploy/build helper pods."""
    return (
        name.startswith(INTEGRATION_POD_PREFIX)
        and "deploy" not in name
        and "build" not in name
    )


def format_pods(pods: list[PodSummary]) -> str:
    lines = [f"{'NAME':<50} {'PHASE':<10} {'READY':<6} RESTARTS"]
    for pod in sorted(pods, key=lambda p: p["name"]):
        lines.append(
            f"{pod['name']:<50} {pod['phase']:<10} "
            f"{'yes' if pod['ready'] else 'no':<6} {pod['restarts']}"
        )
    return "\n".join(lines)


async def log_pods(client: ClusterClient) -> None:
    """Log the namespace's pods; used after a failed readiness wait."""
    try:
        pods = await client.list_pods()
    except QueryFailedError as e:
        logger.warning(f"Unable to list pods: {e}")
        return
    logger.info("Pods in namespace:\n" + format_pods(pods))


async def collect_failure_logs(client: ClusterClient) -> dict[str, str]:
    """Fetch the server log and every integration pod log.

    Returns:
        Mapping of pod name to its log text.
    """
    logs: dict[str, str] = {}
    pods = await client.list_pods()
    for pod in pods:
        name = pod["name"]
        if not (name.startswith(SERVER_POD_PREFIX) or is_integration_pod(name)):
            continue
        try:
            logs[name] = await client.get_pod_log(name)
        except QueryFailedError as e:
            logger.warning(f"Unable to fetch log of {name}: {e}")
    return logs
