"""Aggregate report over one run of the registered checks."""

from collections import Counter
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from host_validation.models.result import CheckResult, OutcomeStatus


@dataclass(frozen=True, kw_only=True)
class Report:
    """Results of a run, in check registration order."""

    results: Sequence[CheckResult]

    @property
    def passed(self) -> bool:
        """True when every result passed (vacuously true for an empty run)."""
        return all(result.passed for result in self.results)

    @property
    def counts(self) -> Mapping[OutcomeStatus, int]:
        """Number of results per status, zero for statuses that did not occur."""
        counter = Counter(result.status for result in self.results)
        return {
            "passed": counter["passed"],
            "failed": counter["failed"],
            "timeout": counter["timeout"],
            "error": counter["error"],
        }
