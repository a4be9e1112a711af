"""Readiness profile loader - parse and validate YAML workload sets."""

import logging
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from ..core.exceptions import ProfileLoadError
from .models import ReplicaMode, ReplicaTarget, Workload

logger = logging.getLogger(__name__)


class ProfileDefaults(BaseModel):
    """Values applied to workloads that do not set their own."""

    label: str = Field("syndesis.io/component", description="Label key")
    interval: float = Field(20.0, gt=0, description="Seconds between queries")
    timeout: float = Field(720.0, gt=0, description="Per-workload timeout in seconds")


class ProfileWorkload(BaseModel):
    """One workload entry of a profile."""

    value: str = Field(..., description="Label value identifying the workload")
    label: str | None = Field(None, description="Label key (defaults apply)")
    replicas: int = Field(1, ge=0, description="Exact replica count to wait for")
    mode: Literal["ready", "running"] = Field("ready", description="Replica mode")
    interval: float | None = Field(None, gt=0)
    timeout: float | None = Field(None, gt=0)


class ReadinessProfile(BaseModel):
    """A named set of workloads waited for together."""

    name: str = Field("default", description="Profile name")
    global_timeout: float | None = Field(
        None, gt=0, description="Overall bound; defaults to the largest workload timeout"
    )
    defaults: ProfileDefaults = Field(default_factory=ProfileDefaults)
    workloads: list[ProfileWorkload] = Field(..., description="Workloads to wait for")

    @field_validator("workloads")
    @classmethod
    def validate_not_empty(cls, v: list[ProfileWorkload]) -> list[ProfileWorkload]:
        if not v:
            raise ValueError("Profile must list at least one workload")
        return v

    @model_validator(mode="after")
    def validate_unique(self) -> "ReadinessProfile":
        keys = [(w.label or self.defaults.label, w.value) for w in self.workloads]
        if len(keys) != len(set(keys)):
            raise ValueError("Workload selectors must be unique")
        return self

    def to_workloads(self) -> list[Workload]:
        return [
            Workload(
                label=entry.label or self.defaults.label,
                value=entry.value,
                target=ReplicaTarget(entry.replicas, ReplicaMode(entry.mode)),
                interval=entry.interval or self.defaults.interval,
                timeout=entry.timeout or self.defaults.timeout,
            )
            for entry in self.workloads
        ]

    def effective_global_timeout(self) -> float:
        if self.global_timeout is not None:
            return self.global_timeout
        return max(w.timeout for w in self.to_workloads())


class ProfileLoader:
    """Load and validate readiness profiles from YAML files."""

    def load(self, yaml_path: str | Path) -> ReadinessProfile:
        """Load a readiness profile.

        Args:
            yaml_path: Path to the profile YAML file

        Returns:
            Validated ReadinessProfile

        Raises:
            ProfileLoadError: If loading or validation fails
        """
        yaml_path = Path(yaml_path)

        if not yaml_path.exists():
            raise ProfileLoadError(f"Profile file not found: {yaml_path}")

        try:
            with open(yaml_path) as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ProfileLoadError(f"Invalid YAML: {e}") from e

        if not isinstance(data, dict):
            raise ProfileLoadError("Profile file must contain a dictionary")

        try:
            profile = ReadinessProfile(**data)
        except ValidationError as e:
            raise ProfileLoadError(f"Validation error:\n{e}") from e

        logger.debug(f"Loaded profile {profile.name} with {len(profile.workloads)} workloads")
        return profile
