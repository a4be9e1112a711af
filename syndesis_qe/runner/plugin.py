"""pytest plugin loaded by ``syndesis-qe run``.

Registers the ``upgrade`` marker, skips upgrade scenarios for productized
builds, and provides session-scoped cluster fixtures.
"""

import logging
from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio

from ..cluster.client import OpenShiftClient
from ..cluster.reachability import SessionContext
from ..config import ClusterSettings
from ..lifecycle import ProductLifecycle

logger = logging.getLogger(__name__)

UPGRADE_MARKER = "upgrade"


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line(
        "markers",
        f"{UPGRADE_MARKER}: product upgrade scenario, skipped for productized builds",
    )


def pytest_collection_modifyitems(
    config: pytest.Config, items: list[pytest.Item]
) -> None:
    settings = ClusterSettings()
    if not settings.is_product_build():
        return

    # Productized upgrades are tested differently
    skip = pytest.mark.skip(reason=f"upgrade scenarios skipped for version {settings.version}")
    skipped = 0
    for item in items:
        if item.get_closest_marker(UPGRADE_MARKER):
            item.add_marker(skip)
            skipped += 1
    if skipped:
        logger.info(f"Skipping {skipped} upgrade scenarios for {settings.version}")


@pytest.fixture(scope="session")
def cluster_settings() -> ClusterSettings:
    """Cluster settings read once from the environment."""
    return ClusterSettings()


@pytest.fixture(scope="session")
def qe_session(cluster_settings: ClusterSettings) -> SessionContext:
    """Session-wide reachability state."""
    return SessionContext(cluster_url=cluster_settings.openshift_url)


@pytest_asyncio.fixture
async def cluster_client(
    cluster_settings: ClusterSettings,
) -> AsyncGenerator[OpenShiftClient, None]:
    """OpenShift client bound to the configured namespace."""
    async with OpenShiftClient(cluster_settings) as client:
        yield client


@pytest_asyncio.fixture
async def lifecycle(
    cluster_client: OpenShiftClient,
    cluster_settings: ClusterSettings,
    qe_session: SessionContext,
) -> ProductLifecycle:
    """Lifecycle helper sharing the session's reachability state."""
    return ProductLifecycle(cluster_client, cluster_settings, session=qe_session)
