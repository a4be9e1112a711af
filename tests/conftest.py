"""Shared pytest fixtures for the test suite.

Provides fast cluster settings and a factory for the scripted in-memory
cluster client, so readiness waits run in milliseconds.
"""

import os

# Add project root to path
import sys
from collections.abc import Callable
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from syndesis_qe.config import ClusterSettings  # noqa: E402
from tests.fakes import FakeClusterClient  # noqa: E402


@pytest.fixture
def fake_client() -> Callable[..., FakeClusterClient]:
    """Factory for scripted cluster clients."""
    return FakeClusterClient


@pytest.fixture
def fast_settings(monkeypatch: pytest.MonkeyPatch) -> ClusterSettings:
    """Cluster settings with millisecond polling and sub-second timeouts."""
    monkeypatch.delenv("JENKINS_HOME", raising=False)
    return ClusterSettings(
        openshift_url="https://api.test.example:6443",
        namespace="qe",
        components=["syndesis-server", "syndesis-ui"],
        poll_interval=0.02,
        local_timeout_minutes=0.005,
        ci=False,
        project_clean_timeout=0.1,
    )


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove toolkit environment variables for the duration of a test."""
    for key in list(os.environ):
        if key.startswith(("SYNDESIS_", "QE_")) or key in ("LOG_LEVEL", "LOG_JSON", "JENKINS_HOME"):
            monkeypatch.delenv(key, raising=False)
