"""Load check definitions and build the check registry from them."""

import asyncio
import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from host_validation.models.check import Check
from host_validation.models.definition import CheckDefinition, HarnessDefinition
from host_validation.probes.loading import load_probe_manifest
from host_validation.registry import CheckRegistry, ConfigurationError

log = logging.getLogger(__name__)

DEFAULT_DEFINITION_PATH = Path(__file__).parent / "defaults.yaml"


class DefinitionError(ConfigurationError):
    """Raised when a check definition cannot be read or is invalid."""


async def load_harness_definition(path: Path) -> HarnessDefinition:
    """Read and validate a YAML check definition file.

    Raises:
        DefinitionError: If the file cannot be read or does not validate

    """
    try:
        text = await asyncio.to_thread(path.read_text)
    except OSError as exc:
        raise DefinitionError(f"Cannot read check definition {path}: {exc}") from exc

    return parse_harness_definition(text, source=str(path))


def parse_harness_definition(text: str, source: str = "<string>") -> HarnessDefinition:
    """Validate YAML text as a check definition."""
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise DefinitionError(f"Invalid YAML in {source}: {exc}") from exc

    if not isinstance(data, dict):
        raise DefinitionError(f"Check definition {source} must be a mapping")

    try:
        return HarnessDefinition.model_validate(data)
    except ValidationError as exc:
        raise DefinitionError(f"Invalid check definition {source}: {exc}") from exc


def build_check(check_definition: CheckDefinition) -> Check:
    """Resolve the probe kind and build the check.

    Raises:
        ProbeNotFoundError: If the probe kind is unknown
        DefinitionError: If the probe configuration does not validate

    """
    manifest = load_probe_manifest(check_definition.probe.kind)
    try:
        config = manifest.config_cls.model_validate(check_definition.probe.params)
    except ValidationError as exc:
        raise DefinitionError(
            f"Invalid {check_definition.probe.kind} probe configuration "
            f"for check '{check_definition.name}': {exc}"
        ) from exc

    return Check(
        name=check_definition.name,
        timeout=check_definition.timeout,
        probe=manifest.probe_factory(config),
    )


def build_registry(definition: HarnessDefinition) -> CheckRegistry:
    """Build every check in definition order and register it.

    Raises:
        ConfigurationError: On the first invalid check; nothing is registered
            past it

    """
    registry = CheckRegistry()
    for check_definition in definition.checks:
        registry.register(build_check(check_definition))

    log.info("Registered %d check(s)", len(registry))
    return registry
