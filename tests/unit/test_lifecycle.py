"""Tests for product lifecycle waits in syndesis_qe/lifecycle.py.

Tests cover:
- Deploy/undeploy waits over the configured components
- Session marking after a cluster-wide failure
- Undeploy skip when the operator is absent
- Namespace cleanup with one retry
"""

from unittest.mock import AsyncMock, call

import pytest

from syndesis_qe.cluster.reachability import SessionContext
from syndesis_qe.config import ClusterSettings
from syndesis_qe.core.exceptions import (
    ClusterUnreachableError,
    ConfigurationError,
    ProjectNotCleanError,
    QueryFailedError,
    ReadinessError,
)
from syndesis_qe.lifecycle import TODO_LABEL, TODO_VALUE, ProductLifecycle
from syndesis_qe.readiness.models import OutcomeStatus, ReplicaMode, ReplicaTarget
from tests.fakes import GONE, READY, STARTING, FakeClusterClient


class TestComponentWorkloads:
    def test_one_workload_per_component(self, fast_settings: ClusterSettings) -> None:
        lifecycle = ProductLifecycle(FakeClusterClient(), fast_settings)

        workloads = lifecycle.component_workloads(ReplicaTarget(1))

        assert [w.value for w in workloads] == ["syndesis-server", "syndesis-ui"]
        assert all(w.label == "syndesis.io/component" for w in workloads)
        assert all(w.interval == 0.02 for w in workloads)
        assert all(w.timeout == pytest.approx(0.3) for w in workloads)

    def test_explicit_components(self, fast_settings: ClusterSettings) -> None:
        lifecycle = ProductLifecycle(FakeClusterClient(), fast_settings)
        workloads = lifecycle.component_workloads(ReplicaTarget(1), ["syndesis-db"])
        assert [w.value for w in workloads] == ["syndesis-db"]

    def test_no_components_is_a_configuration_error(
        self, fast_settings: ClusterSettings
    ) -> None:
        settings = fast_settings.model_copy(update={"components": []})
        lifecycle = ProductLifecycle(FakeClusterClient(), settings)

        with pytest.raises(ConfigurationError, match="No product components"):
            lifecycle.component_workloads(ReplicaTarget(1))

    def test_creates_session_when_missing(self, fast_settings: ClusterSettings) -> None:
        lifecycle = ProductLifecycle(FakeClusterClient(), fast_settings)
        assert lifecycle.session.cluster_url == fast_settings.openshift_url
        assert lifecycle.session.reachable is None


class TestDeploymentWaits:
    @pytest.mark.asyncio
    async def test_wait_for_deployment_succeeds(self, fast_settings: ClusterSettings) -> None:
        client = FakeClusterClient({"syndesis-ui": [STARTING, READY]})
        lifecycle = ProductLifecycle(client, fast_settings)

        result = await lifecycle.wait_for_deployment()

        assert result.succeeded
        assert result.get("syndesis-ui").ticks == 2
        client.list_pods.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_wait_for_deployment_failure_dumps_pods(
        self, fast_settings: ClusterSettings
    ) -> None:
        client = FakeClusterClient({"syndesis-server": [STARTING]})
        lifecycle = ProductLifecycle(client, fast_settings)

        with pytest.raises(ReadinessError) as exc_info:
            await lifecycle.wait_for_deployment()

        result = exc_info.value.result
        assert result.get("syndesis-server").status is OutcomeStatus.TIMED_OUT
        assert result.get("syndesis-ui").succeeded
        assert "Product deployment did not finish in time" in str(exc_info.value)
        client.list_pods.assert_awaited_once()
        assert lifecycle.session.reachable is None

    @pytest.mark.asyncio
    async def test_all_errored_marks_session_unreachable(
        self, fast_settings: ClusterSettings
    ) -> None:
        outage = QueryFailedError("get_replica_status", status_code=503)
        client = FakeClusterClient({"syndesis-server": [outage], "syndesis-ui": [outage]})
        lifecycle = ProductLifecycle(client, fast_settings)

        with pytest.raises(ReadinessError):
            await lifecycle.wait_for_deployment()
        assert lifecycle.session.reachable is False

        calls_before = dict(client.calls)
        with pytest.raises(ReadinessError) as exc_info:
            await lifecycle.wait_for_deployment()

        assert dict(client.calls) == calls_before
        assert exc_info.value.result.all_errored

    @pytest.mark.asyncio
    async def test_wait_for_undeployment_uses_running_target(
        self, fast_settings: ClusterSettings
    ) -> None:
        client = FakeClusterClient({"syndesis-server": [READY, GONE], "syndesis-ui": [GONE]})
        lifecycle = ProductLifecycle(client, fast_settings)

        result = await lifecycle.wait_for_undeployment()

        assert result.succeeded
        assert all(o.workload.target.mode is ReplicaMode.RUNNING for o in result.outcomes)
        assert all(o.workload.target.count == 0 for o in result.outcomes)

    @pytest.mark.asyncio
    async def test_wait_for_todo(self, fast_settings: ClusterSettings) -> None:
        client = FakeClusterClient({TODO_VALUE: [GONE, READY]})
        lifecycle = ProductLifecycle(client, fast_settings)

        result = await lifecycle.wait_for_todo()

        outcome = result.get(TODO_VALUE)
        assert outcome.succeeded
        assert outcome.workload.label == TODO_LABEL


class TestUndeploy:
    @pytest.mark.asyncio
    async def test_skips_wait_when_operator_absent(self, fast_settings: ClusterSettings) -> None:
        client = FakeClusterClient({"syndesis-server": [READY]})
        client.is_deployed.return_value = False
        lifecycle = ProductLifecycle(client, fast_settings)

        result = await lifecycle.undeploy()

        assert result.succeeded
        assert result.outcomes == ()
        client.delete_custom_resources.assert_awaited_once()
        client.is_deployed.assert_awaited_once_with("syndesis-operator")
        assert client.calls == {}

    @pytest.mark.asyncio
    async def test_waits_for_pods_to_go(self, fast_settings: ClusterSettings) -> None:
        client = FakeClusterClient({"syndesis-server": [GONE], "syndesis-ui": [STARTING, GONE]})
        lifecycle = ProductLifecycle(client, fast_settings)

        result = await lifecycle.undeploy()

        assert result.succeeded
        assert len(result.outcomes) == 2


class TestCleanNamespace:
    @pytest.mark.asyncio
    async def test_clean_namespace(self, fast_settings: ClusterSettings) -> None:
        client = FakeClusterClient()
        client.is_deployed.return_value = False
        lifecycle = ProductLifecycle(client, fast_settings)

        await lifecycle.clean_namespace()

        client.delete_resources_matching.assert_awaited_once_with(None)
        client.wait_for_project_clean.assert_awaited_once_with(selector=None)

    @pytest.mark.asyncio
    async def test_selector_scopes_delete_and_clean_check(
        self, fast_settings: ClusterSettings
    ) -> None:
        client = FakeClusterClient()
        client.is_deployed.return_value = False
        settings = fast_settings.model_copy(update={"cleanup_selector": "syndesis.io/app=syndesis"})
        lifecycle = ProductLifecycle(client, settings)

        await lifecycle.clean_namespace()

        client.delete_resources_matching.assert_awaited_once_with("syndesis.io/app=syndesis")
        client.wait_for_project_clean.assert_awaited_once_with(
            selector="syndesis.io/app=syndesis"
        )

    @pytest.mark.asyncio
    async def test_retries_once_when_not_clean(self, fast_settings: ClusterSettings) -> None:
        client = FakeClusterClient()
        client.is_deployed.return_value = False
        client.wait_for_project_clean = AsyncMock(
            side_effect=[ProjectNotCleanError("qe", 0.1, ["pods/x"]), None]
        )
        lifecycle = ProductLifecycle(client, fast_settings)

        await lifecycle.clean_namespace()

        assert client.delete_resources_matching.await_args_list == [
            call(None),
            call(None),
        ]
        assert client.wait_for_project_clean.await_count == 2

    @pytest.mark.asyncio
    async def test_second_failure_propagates(self, fast_settings: ClusterSettings) -> None:
        client = FakeClusterClient()
        client.is_deployed.return_value = False
        client.wait_for_project_clean = AsyncMock(
            side_effect=ProjectNotCleanError("qe", 0.1, ["pods/x"])
        )
        lifecycle = ProductLifecycle(client, fast_settings)

        with pytest.raises(ProjectNotCleanError):
            await lifecycle.clean_namespace()


class TestEnsureReachable:
    @pytest.mark.asyncio
    async def test_previously_unreachable_session_fails_fast(
        self, fast_settings: ClusterSettings
    ) -> None:
        session = SessionContext(fast_settings.openshift_url, reachable=False)
        lifecycle = ProductLifecycle(FakeClusterClient(), fast_settings, session=session)

        with pytest.raises(ClusterUnreachableError):
            await lifecycle.ensure_reachable()
