"""Ordered registry of checks, validated at registration time."""

import logging
from collections.abc import Iterable, Iterator, Sequence

from host_validation.models.check import Check

log = logging.getLogger(__name__)


class ConfigurationError(Exception):
    """Raised when the harness is configured incorrectly."""


class InvalidTimeoutError(ConfigurationError):
    """Raised when a check is registered with a non-positive timeout."""


class DuplicateCheckError(ConfigurationError):
    """Raised when two checks are registered under the same name."""


class CheckRegistry:
    """Checks in registration order, with unique names and positive timeouts."""

    def __init__(self, checks: Iterable[Check] = ()) -> None:
        self._checks: dict[str, Check] = {}
        for check in checks:
            self.register(check)

    def register(self, check: Check) -> None:
        """Add a check.

        Raises:
            ConfigurationError: If the name is empty
            InvalidTimeoutError: If the timeout is zero or negative
            DuplicateCheckError: If a check with this name is already registered

        """
        if not check.name:
            raise ConfigurationError("Check name must not be empty")
        if not check.timeout > 0:
            raise InvalidTimeoutError(
                f"Check '{check.name}' has invalid timeout {check.timeout!r}; "
                "timeout must be positive"
            )
        if check.name in self._checks:
            raise DuplicateCheckError(f"Check '{check.name}' is already registered")

        self._checks[check.name] = check
        log.debug("Registered check %s (timeout=%.2fs)", check.name, check.timeout)

    @property
    def checks(self) -> Sequence[Check]:
        """Registered checks in registration order."""
        return tuple(self._checks.values())

    def __iter__(self) -> Iterator[Check]:
        return iter(self.checks)

    def __len__(self) -> int:
        return len(self._checks)
