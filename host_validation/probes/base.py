"""Abstract base class for host probes."""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from host_validation.models.base import Model
from host_validation.models.result import Outcome


class ProbeConfig(Model):
    """Base for probe configuration."""


@dataclass(frozen=True, kw_only=True)
class Probe(ABC):
    """Abstract base for probes.

    A probe inspects one piece of host state each time it runs. It holds no
    state between runs and may be run concurrently with itself. Expected
    negative answers are returned as Outcome values; exceptions are left to
    the scheduler, which records them as errors.
    """

    @abstractmethod
    async def run(self) -> Outcome:
        """Inspect the host and return the outcome."""
