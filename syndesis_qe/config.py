"""Centralized configuration for the syndesis QE toolkit.

Uses pydantic-settings for environment variable loading and validation.
All settings can be overridden via environment variables with appropriate prefixes.
"""

import os

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_COMPONENTS = [
    "syndesis-db",
    "syndesis-oauthproxy",
    "syndesis-prometheus",
    "syndesis-meta",
    "syndesis-server",
    "syndesis-ui",
]


class ClusterSettings(BaseSettings):
    """Settings for the target OpenShift cluster and readiness waits.

    Environment variables:
        SYNDESIS_OPENSHIFT_URL: Cluster API URL
        SYNDESIS_NAMESPACE: Namespace the product is deployed to
        SYNDESIS_TOKEN: Bearer token for the cluster API
        SYNDESIS_VERIFY_TLS: Verify the API server certificate
        SYNDESIS_VERSION: Product version under test
        SYNDESIS_CI: Running on CI (longer timeouts); JENKINS_HOME implies it
        SYNDESIS_COMPONENTS: JSON list of component label values
        SYNDESIS_POLL_INTERVAL: Seconds between readiness queries
    """

    model_config = SettingsConfigDict(
        env_prefix="SYNDESIS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Cluster access
    openshift_url: str = Field(
        default="https://localhost:8443",
        description="Cluster API URL",
    )
    namespace: str = Field(
        default="syndesis",
        description="Namespace the product is deployed to",
    )
    token: str | None = Field(
        default=None,
        description="Bearer token for the cluster API",
    )
    verify_tls: bool = Field(
        default=False,
        description="Verify the API server TLS certificate",
    )
    request_timeout: float = Field(
        default=30.0,
        description="HTTP timeout for a single cluster API request",
    )

    # Product under test
    version: str = Field(
        default="",
        description="Product version under test",
    )
    ci: bool = Field(
        default=False,
        description="Running on CI; selects the longer readiness timeout",
    )

    # Readiness waits
    component_label: str = Field(
        default="syndesis.io/component",
        description="Label key identifying product components",
    )
    components: list[str] = Field(
        default_factory=lambda: list(DEFAULT_COMPONENTS),
        description="Component label values to wait for",
    )
    operator_name: str = Field(
        default="syndesis-operator",
        description="Deployment config name of the operator",
    )
    poll_interval: float = Field(
        default=20.0,
        description="Seconds between readiness queries",
    )
    local_timeout_minutes: float = Field(
        default=12.0,
        description="Readiness timeout when running locally",
    )
    ci_timeout_minutes: float = Field(
        default=20.0,
        description="Readiness timeout when running on CI",
    )

    # Reachability gate
    reachability_retries: int = Field(
        default=30,
        description="Reachability pings before giving up",
    )
    reachability_delay: float = Field(
        default=45.0,
        description="Seconds between reachability pings",
    )

    # Namespace cleanup
    project_clean_timeout: float = Field(
        default=20.0,
        description="Seconds to wait for the namespace to become clean",
    )
    cleanup_selector: str | None = Field(
        default=None,
        description="Label selector limiting cleanup; unset cleans the whole namespace",
    )
    custom_resource_api: str = Field(
        default="syndesis.io/v1beta1",
        description="API group/version of the product custom resource",
    )
    custom_resource_plural: str = Field(
        default="syndesises",
        description="Plural resource name of the product custom resource",
    )

    @field_validator("poll_interval", "project_clean_timeout", "reachability_delay")
    @classmethod
    def validate_positive(cls, v: float) -> float:
        """Reject non-positive durations."""
        if v <= 0:
            raise ValueError("must be positive")
        return v

    def is_ci(self) -> bool:
        """Whether the CI timeouts apply."""
        return self.ci or "JENKINS_HOME" in os.environ

    def readiness_timeout(self) -> float:
        """Per-workload readiness timeout in seconds."""
        minutes = self.ci_timeout_minutes if self.is_ci() else self.local_timeout_minutes
        return minutes * 60

    def is_product_build(self) -> bool:
        """Whether the version under test is a productized build."""
        return "redhat" in self.version


class RunnerSettings(BaseSettings):
    """Settings for the CLI and the test runner.

    Environment variables:
        QE_LOG_LEVEL: Logging level
        QE_LOG_JSON: Enable JSON log format
        QE_LOG_FILE: Optional JSON log file
    """

    model_config = SettingsConfigDict(
        env_prefix="QE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )
    log_json: bool = Field(
        default=False,
        description="Enable JSON log format",
    )
    log_file: str | None = Field(
        default=None,
        description="Optional JSON log file",
    )
