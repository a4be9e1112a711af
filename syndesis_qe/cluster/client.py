"""Cluster API client used by readiness waits and namespace cleanup.

``ClusterClient`` is the boundary the rest of the toolkit depends on;
``OpenShiftClient`` implements it on top of the Kubernetes/OpenShift REST
API with httpx.
"""

import asyncio
import logging
from typing import Any, Protocol, runtime_checkable

import httpx

from ..config import ClusterSettings
from ..core.exceptions import ProjectNotCleanError, QueryFailedError
from ..core.types import PodSummary
from ..readiness.models import ReplicaStatus

logger = logging.getLogger(__name__)

# Namespaced collections removed on cleanup (all support deletecollection).
# Service accounts other than the product's own are kept.
CLEANUP_COLLECTIONS = (
    "/apis/apps.openshift.io/v1/namespaces/{ns}/deploymentconfigs",
    "/apis/apps/v1/namespaces/{ns}/deployments",
    "/apis/apps/v1/namespaces/{ns}/statefulsets",
    "/apis/route.openshift.io/v1/namespaces/{ns}/routes",
    "/api/v1/namespaces/{ns}/configmaps",
    "/api/v1/namespaces/{ns}/persistentvolumeclaims",
    "/api/v1/namespaces/{ns}/replicationcontrollers",
    "/api/v1/namespaces/{ns}/services",
    "/api/v1/namespaces/{ns}/pods",
    "/apis/build.openshift.io/v1/namespaces/{ns}/buildconfigs",
    "/apis/build.openshift.io/v1/namespaces/{ns}/builds",
    "/apis/image.openshift.io/v1/namespaces/{ns}/imagestreams",
    "/apis/template.openshift.io/v1/namespaces/{ns}/templates",
)

PRODUCT_SERVICE_ACCOUNTS = ("syndesis-oauth-client",)

# Workload collections that must be empty for the namespace to count as clean
WORKLOAD_COLLECTIONS = (
    "/api/v1/namespaces/{ns}/pods",
    "/apis/apps.openshift.io/v1/namespaces/{ns}/deploymentconfigs",
    "/apis/apps/v1/namespaces/{ns}/deployments",
    "/apis/apps/v1/namespaces/{ns}/statefulsets",
)


@runtime_checkable
class ClusterClient(Protocol):
    """Operations the toolkit needs from the cluster."""

    async def get_replica_status(self, label: str, value: str) -> ReplicaStatus: ...

    async def delete_resources_matching(self, selector: str | None = None) -> None: ...

    async def wait_for_project_clean(
        self,
        timeout: float | None = None,
        interval: float | None = None,
        selector: str | None = None,
    ) -> None: ...

    async def is_deployed(self, name: str) -> bool: ...

    async def delete_custom_resources(self) -> int: ...

    async def list_pods(self, selector: str | None = None) -> list[PodSummary]: ...

    async def get_pod_log(self, name: str) -> str: ...


def is_pod_ready(pod: dict[str, Any]) -> bool:
    """A pod is ready when its Ready condition is True."""
    for condition in pod.get("status", {}).get("conditions", []) or []:
        if condition.get("type") == "Ready":
            return condition.get("status") == "True"
    return False


def summarize_pod(pod: dict[str, Any]) -> PodSummary:
    """Reduce a pod manifest to the fields shown in diagnostics."""
    metadata = pod.get("metadata", {})
    status = pod.get("status", {})
    restarts = sum(
        container.get("restartCount", 0)
        for container in status.get("containerStatuses", []) or []
    )
    summary: PodSummary = {
        "name": metadata.get("name", ""),
        "phase": status.get("phase", "Unknown"),
        "ready": is_pod_ready(pod),
        "restarts": restarts,
        "labels": metadata.get("labels", {}) or {},
    }
    node = pod.get("spec", {}).get("nodeName")
    if node:
        summary["node"] = node
    return summary


class OpenShiftClient:
    """Namespace-scoped OpenShift REST client.

    Usage:
        async with OpenShiftClient(settings) as client:
            status = await client.get_replica_status("app", "todo")
    """

    def __init__(
        self,
        settings: ClusterSettings,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize client.

        Args:
            settings: Cluster settings (URL, namespace, token, TLS).
            transport: Optional httpx transport, mainly for tests.
        """
        self.settings = settings
        self.namespace = settings.namespace

        headers = {"Accept": "application/json"}
        if settings.token:
            headers["Authorization"] = f"Bearer {settings.token}"

        self._http = httpx.AsyncClient(
            base_url=settings.openshift_url.rstrip("/"),
            headers=headers,
            timeout=settings.request_timeout,
            verify=settings.verify_tls,
            transport=transport,
        )

    async def __aenter__(self) -> "OpenShiftClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    def _path(self, template: str) -> str:
        return template.format(ns=self.namespace)

    async def _request(
        self,
        method: str,
        path: str,
        operation: str,
        params: dict[str, str] | None = None,
        allow_missing: bool = False,
    ) -> httpx.Response:
        try:
            response = await self._http.request(method, path, params=params)
        except httpx.HTTPError as e:
            raise QueryFailedError(operation, cause=e) from e

        if allow_missing and response.status_code == 404:
            return response
        if response.status_code >= 400:
            raise QueryFailedError(operation, status_code=response.status_code)
        return response

    async def _list(
        self, path: str, operation: str, selector: str | None = None
    ) -> list[dict[str, Any]]:
        params = {"labelSelector": selector} if selector else None
        response = await self._request(
            "GET", path, operation, params=params, allow_missing=True
        )
        if response.status_code == 404:
            return []
        return response.json().get("items", []) or []

    async def get_replica_status(self, label: str, value: str) -> ReplicaStatus:
        """Count running and ready pods matching ``label=value``."""
        pods = await self._list(
            self._path("/api/v1/namespaces/{ns}/pods"),
            "get_replica_status",
            selector=f"{label}={value}",
        )
        running = [p for p in pods if p.get("status", {}).get("phase") == "Running"]
        ready = [p for p in running if is_pod_ready(p)]
        return ReplicaStatus(ready=len(ready), running=len(running))

    async def delete_resources_matching(self, selector: str | None = None) -> None:
        """Delete the cleanup collections' entries and the product service accounts.

        Args:
            selector: Label selector limiting the deletion. Without one every
                entry of the cleanup collections is removed.
        """
        scope = f"matching {selector}" if selector else "of every kind"
        logger.info(f"Deleting resources {scope} in {self.namespace}")

        params = {"propagationPolicy": "Background"}
        if selector:
            params["labelSelector"] = selector

        for template in CLEANUP_COLLECTIONS:
            await self._request(
                "DELETE",
                self._path(template),
                "delete_resources_matching",
                params=params,
                allow_missing=True,
            )
        for name in PRODUCT_SERVICE_ACCOUNTS:
            await self._request(
                "DELETE",
                self._path(f"/api/v1/namespaces/{{ns}}/serviceaccounts/{name}"),
                "delete_resources_matching",
                allow_missing=True,
            )

    async def _remaining_workloads(self, selector: str | None = None) -> list[str]:
        remaining: list[str] = []
        for template in WORKLOAD_COLLECTIONS:
            items = await self._list(
                self._path(template), "wait_for_project_clean", selector=selector
            )
            kind = template.rsplit("/", 1)[-1]
            remaining.extend(
                f"{kind}/{item.get('metadata', {}).get('name', '?')}" for item in items
            )
        return remaining

    async def wait_for_project_clean(
        self,
        timeout: float | None = None,
        interval: float | None = None,
        selector: str | None = None,
    ) -> None:
        """Block until the namespace holds no workloads.

        Args:
            timeout: Seconds to wait; defaults to ``project_clean_timeout``.
            interval: Seconds between checks.
            selector: Only count workloads matching this label selector.

        Raises:
            ProjectNotCleanError: If workloads remain after the timeout.
        """
        timeout = timeout if timeout is not None else self.settings.project_clean_timeout
        interval = interval if interval is not None else min(2.0, timeout)
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout

        while True:
            remaining = await self._remaining_workloads(selector)
            if not remaining:
                logger.info(f"Namespace {self.namespace} is clean")
                return
            if loop.time() + interval > deadline:
                raise ProjectNotCleanError(self.namespace, timeout, remaining)
            logger.debug(f"Waiting for {len(remaining)} resources to go away")
            await asyncio.sleep(interval)

    async def is_deployed(self, name: str) -> bool:
        """Whether a deployment config exists and is scaled above zero."""
        response = await self._request(
            "GET",
            self._path(f"/apis/apps.openshift.io/v1/namespaces/{{ns}}/deploymentconfigs/{name}"),
            "is_deployed",
            allow_missing=True,
        )
        if response.status_code == 404:
            return False
        return (response.json().get("spec", {}).get("replicas") or 0) > 0

    async def delete_custom_resources(self) -> int:
        """Delete all product custom resources; returns how many existed."""
        path = self._path(
            f"/apis/{self.settings.custom_resource_api}/namespaces/{{ns}}/"
            f"{self.settings.custom_resource_plural}"
        )
        items = await self._list(path, "delete_custom_resources")
        for item in items:
            name = item.get("metadata", {}).get("name")
            logger.info(f"Deleting custom resource {name}")
            await self._request(
                "DELETE", f"{path}/{name}", "delete_custom_resources", allow_missing=True
            )
        return len(items)

    async def list_pods(self, selector: str | None = None) -> list[PodSummary]:
        pods = await self._list(
            self._path("/api/v1/namespaces/{ns}/pods"), "list_pods", selector=selector
        )
        return [summarize_pod(pod) for pod in pods]

    async def get_pod_log(self, name: str) -> str:
        response = await self._request(
            "GET",
            self._path(f"/api/v1/namespaces/{{ns}}/pods/{name}/log"),
            "get_pod_log",
        )
        return response.text
