"""Probe manifest definition for the plugin system."""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

from pydantic import BaseModel

from host_validation.probes.base import Probe

ConfigT = TypeVar("ConfigT", bound=BaseModel)


@dataclass(frozen=True, kw_only=True)
class ProbeManifest(Generic[ConfigT]):
    """Manifest describing a probe plugin.

    The manifest pairs the configuration class with the factory that builds
    a probe from it, so definitions can refer to probes by kind.
    """

    config_cls: type[ConfigT]
    probe_factory: Callable[[ConfigT], Probe]
