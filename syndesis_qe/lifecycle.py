"""Product lifecycle waits built on the readiness coordinator.

Covers the cluster-side steps of a test run: waiting for the product to be
deployed or undeployed, cleaning the namespace, and waiting for the sample
Todo application.
"""

import logging

from .cluster.client import ClusterClient
from .cluster.diagnostics import log_pods
from .cluster.reachability import SessionContext, ping_cluster, wait_until_reachable
from .config import ClusterSettings
from .core.exceptions import ConfigurationError, ProjectNotCleanError
from .readiness.coordinator import ReadinessCoordinator
from .readiness.models import AggregateResult, ReplicaMode, ReplicaTarget, Workload

logger = logging.getLogger(__name__)

TODO_LABEL = "syndesis.io/app"
TODO_VALUE = "todo"
TODO_TIMEOUT = 12 * 60.0
TODO_GLOBAL_TIMEOUT = 20 * 60.0


class ProductLifecycle:
    """Deploy/undeploy waits and namespace cleanup for one test session."""

    def __init__(
        self,
        client: ClusterClient,
        settings: ClusterSettings,
        session: SessionContext | None = None,
    ):
        """Initialize lifecycle helper.

        Args:
            client: Cluster client.
            settings: Cluster settings (components, timeouts, selectors).
            session: Session context; a fresh one is created if omitted.
        """
        self.client = client
        self.settings = settings
        self.session = session or SessionContext(cluster_url=settings.openshift_url)
        self.coordinator = ReadinessCoordinator(client)

    def component_workloads(
        self, target: ReplicaTarget, components: list[str] | None = None
    ) -> list[Workload]:
        """One workload per product component, all sharing the same target."""
        components = components or self.settings.components
        if not components:
            raise ConfigurationError("No product components configured to wait for")

        timeout = self.settings.readiness_timeout()
        return [
            Workload(
                label=self.settings.component_label,
                value=component,
                target=target,
                interval=self.settings.poll_interval,
                timeout=timeout,
            )
            for component in components
        ]

    def _global_timeout(self) -> float:
        # Per-workload deadlines expire one interval before the global one
        return self.settings.readiness_timeout() + self.settings.poll_interval

    async def ensure_reachable(self) -> None:
        """Fail fast if the cluster cannot be contacted.

        Raises:
            ClusterUnreachableError: See ``wait_until_reachable``.
        """

        async def ping(url: str) -> bool:
            return await ping_cluster(url, verify=self.settings.verify_tls)

        await wait_until_reachable(
            self.session,
            ping=ping,
            max_retries=self.settings.reachability_retries,
            retry_delay=self.settings.reachability_delay,
        )

    async def wait_for(
        self, workloads: list[Workload], global_timeout: float, what: str
    ) -> AggregateResult:
        """Run a coordinated wait and raise ReadinessError if it failed."""
        result = await self.coordinator.wait(workloads, global_timeout, session=self.session)
        if not result.succeeded:
            if result.all_errored:
                self.session.mark_unreachable()
            await log_pods(self.client)
            result.raise_for_status(f"{what} did not finish in time")
        return result

    async def wait_for_deployment(self, components: list[str] | None = None) -> AggregateResult:
        """Wait until every component has exactly one ready pod."""
        workloads = self.component_workloads(ReplicaTarget(1, ReplicaMode.READY), components)
        return await self.wait_for(workloads, self._global_timeout(), "Product deployment")

    async def wait_for_undeployment(self, components: list[str] | None = None) -> AggregateResult:
        """Wait until no component has a running pod."""
        workloads = self.component_workloads(ReplicaTarget(0, ReplicaMode.RUNNING), components)
        return await self.wait_for(workloads, self._global_timeout(), "Product undeployment")

    async def undeploy(self) -> AggregateResult:
        """Delete the product custom resources and wait for the pods to go.

        When the operator is not deployed there is nothing to wait for and
        the result is a trivial success.
        """
        deleted = await self.client.delete_custom_resources()
        logger.info(f"Deleted {deleted} custom resources")

        if not await self.client.is_deployed(self.settings.operator_name):
            logger.info(f"{self.settings.operator_name} is not deployed, skipping undeploy wait")
            return AggregateResult.empty()

        return await self.wait_for_undeployment()

    async def clean_namespace(self) -> None:
        """Undeploy the product and remove everything it left behind.

        Without a cleanup selector the whole namespace is cleared; with one,
        both the deletion and the clean check are limited to it. The clean
        check is retried once when the namespace does not empty within the
        configured timeout.
        """
        await self.undeploy()

        selector = self.settings.cleanup_selector or None
        try:
            await self.client.delete_resources_matching(selector)
            await self.client.wait_for_project_clean(selector=selector)
        except ProjectNotCleanError as e:
            logger.warning(f"{e.message}, retrying once again")
            await self.client.delete_resources_matching(selector)
            await self.client.wait_for_project_clean(selector=selector)

    async def wait_for_todo(self) -> AggregateResult:
        """Wait for the sample Todo application to have one ready pod."""
        logger.info("Waiting for Todo to get ready")
        workload = Workload(
            label=TODO_LABEL,
            value=TODO_VALUE,
            target=ReplicaTarget(1, ReplicaMode.READY),
            interval=self.settings.poll_interval,
            timeout=TODO_TIMEOUT,
        )
        return await self.wait_for([workload], TODO_GLOBAL_TIMEOUT, "Todo app")
