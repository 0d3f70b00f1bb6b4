"""Check definition: a named, time-bound probe."""

from dataclasses import dataclass

from host_validation.probes.base import Probe


@dataclass(frozen=True, kw_only=True)
class Check:
    """A probe registered under a unique name with its own timeout."""

    name: str
    timeout: float
    probe: Probe
