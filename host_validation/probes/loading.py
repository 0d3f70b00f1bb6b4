"""Resolve probe kinds named in check definitions to installed probe plugins."""

from collections.abc import Sequence
from importlib.metadata import EntryPoints, entry_points
from typing import Any

from host_validation.probes.manifest import ProbeManifest
from host_validation.registry import ConfigurationError

ENTRY_POINT_GROUP = "host_validation.probes"


class ProbeNotFoundError(ConfigurationError):
    """Raised when a check definition names a probe kind nobody provides."""


def _probe_entry_points() -> EntryPoints:
    return entry_points(group=ENTRY_POINT_GROUP)


def available_probe_kinds() -> Sequence[str]:
    """Probe kinds installed in the host_validation.probes group, sorted."""
    return sorted({entry.name for entry in _probe_entry_points()})


def load_probe_manifest(kind: str) -> ProbeManifest[Any]:
    """Load the manifest for a probe kind.

    Args:
        kind: Probe kind used in a check definition (e.g., "port",
              "content-hash"), as declared in pyproject.toml

    Returns:
        The probe manifest instance

    Raises:
        ProbeNotFoundError: If no installed plugin provides the kind

    """
    matches = _probe_entry_points().select(name=kind)
    if not matches:
        raise ProbeNotFoundError(
            f"Probe kind '{kind}' not found. "
            f"Available probe kinds: {list(available_probe_kinds())}"
        )

    manifest: ProbeManifest[Any] = next(iter(matches)).load()
    return manifest
