"""Models for check outcomes and results."""

from dataclasses import dataclass
from typing import Literal

OutcomeStatus = Literal["passed", "failed", "timeout", "error"]


@dataclass(frozen=True, kw_only=True)
class Outcome:
    """What a probe determined about the host.

    Probes return one of four shapes: passed, failed with a reason, timed out,
    or errored with a cause. A failure means the probe got an answer and the
    answer was wrong; an error means the probe could not get an answer.
    """

    status: OutcomeStatus
    message: str | None = None

    @classmethod
    def passed(cls, message: str | None = None) -> "Outcome":
        """The inspected condition holds."""
        return cls(status="passed", message=message)

    @classmethod
    def failed(cls, reason: str) -> "Outcome":
        """The condition was determined false, for the given reason."""
        return cls(status="failed", message=reason)

    @classmethod
    def timed_out(cls, detail: str | None = None) -> "Outcome":
        """The probe gave up waiting for an answer."""
        return cls(status="timeout", message=detail)

    @classmethod
    def errored(cls, cause: str) -> "Outcome":
        """The probe could not obtain an answer at all."""
        return cls(status="error", message=cause)


@dataclass(frozen=True, kw_only=True)
class CheckResult:
    """Result of a single check execution."""

    name: str
    status: OutcomeStatus
    duration: float
    message: str | None = None

    @property
    def passed(self) -> bool:
        """True when the check passed."""
        return self.status == "passed"
