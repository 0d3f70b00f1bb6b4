"""Models for check definitions loaded from YAML files."""

from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import ConfigDict, Field

from host_validation.models.base import Model
from host_validation.models.duration import Duration


class ProbeSpec(Model):
    """Probe kind plus the keyword configuration for that kind."""

    model_config = ConfigDict(frozen=True, extra="allow")

    kind: str = Field(..., description="Probe kind as registered by entry point")

    @property
    def params(self) -> Mapping[str, Any]:
        """Every key besides kind, validated later by the probe's config class."""
        return dict(self.model_extra or {})


class CheckDefinition(Model):
    """Single named check."""

    name: str = Field(..., description="Unique check name")
    timeout: Duration = Field(..., description="Check timeout (e.g., 3, '3s', '1m')")
    probe: ProbeSpec = Field(..., description="Probe to run")


class HarnessDefinition(Model):
    """Complete check definition loaded from a YAML file."""

    version: str = Field(..., description="Definition schema version")
    max_concurrency: int | None = Field(
        default=None, gt=0, description="Cap on probes in flight (None: unbounded)"
    )
    checks: Sequence[CheckDefinition] = Field(
        default_factory=list, description="Checks in registration order"
    )
