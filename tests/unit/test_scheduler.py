"""Tests for check scheduler."""

import asyncio
import time
from unittest.mock import Mock

import pytest

from host_validation.models.result import Outcome
from host_validation.probes.base import Probe
from host_validation.registry import (
    ConfigurationError,
    DuplicateCheckError,
    InvalidTimeoutError,
)
from host_validation.scheduler import CheckScheduler
from host_validation.testing.probes import RaisingProbe, StaticProbe, make_check


@pytest.fixture
def scheduler() -> CheckScheduler:
    """Create scheduler without a concurrency cap."""
    return CheckScheduler()


async def test_returns_empty_report_when_no_checks(scheduler: CheckScheduler) -> None:
    """Returns an empty, passing report when nothing is registered."""
    report = await scheduler.run_checks([])

    assert report.results == ()
    assert report.passed


async def test_runs_single_passing_check(scheduler: CheckScheduler) -> None:
    """Runs one probe and records its outcome."""
    report = await scheduler.run_checks([make_check("port-ssh")])

    assert len(report.results) == 1
    assert report.results[0].name == "port-ssh"
    assert report.results[0].status == "passed"
    assert report.results[0].duration >= 0
    assert report.passed


async def test_records_failed_outcome_with_reason(scheduler: CheckScheduler) -> None:
    """Keeps the probe's failure reason on the result."""
    probe = StaticProbe(outcome=Outcome.failed("/ is not mounted ro"))

    report = await scheduler.run_checks([make_check("root-read-only", probe)])

    assert report.results[0].status == "failed"
    assert report.results[0].message == "/ is not mounted ro"
    assert not report.passed


async def test_one_result_per_check_whatever_the_outcome(
    scheduler: CheckScheduler,
) -> None:
    """Produces exactly one result per check across every kind of outcome."""
    checks = [
        make_check("passes"),
        make_check("fails", StaticProbe(outcome=Outcome.failed("nope"))),
        make_check("hangs", StaticProbe(delay=10), timeout=0.05),
        make_check("crashes", RaisingProbe(exception=RuntimeError("boom"))),
        make_check("errors", StaticProbe(outcome=Outcome.errored("no bus"))),
    ]

    report = await scheduler.run_checks(checks)

    assert [r.name for r in report.results] == [
        "passes",
        "fails",
        "hangs",
        "crashes",
        "errors",
    ]
    assert [r.status for r in report.results] == [
        "passed",
        "failed",
        "timeout",
        "error",
        "error",
    ]


async def test_slow_probe_times_out_without_waiting(scheduler: CheckScheduler) -> None:
    """Records a timeout and returns long before the probe would finish."""
    check = make_check("docker-echo", StaticProbe(delay=30), timeout=0.05)

    started = time.monotonic()
    report = await scheduler.run_checks([check])
    elapsed = time.monotonic() - started

    assert report.results[0].status == "timeout"
    assert "0.05" in (report.results[0].message or "")
    assert elapsed < 5


async def test_timeout_never_reports_probe_outcome(scheduler: CheckScheduler) -> None:
    """A probe that would pass after its deadline is still a timeout."""
    check = make_check(
        "late", StaticProbe(outcome=Outcome.passed(), delay=0.5), timeout=0.05
    )

    report = await scheduler.run_checks([check])

    assert report.results[0].status == "timeout"
    assert not report.passed


async def test_probe_exception_does_not_stop_other_checks(
    scheduler: CheckScheduler,
) -> None:
    """Turns a raised exception into an error and still collects the rest."""
    checks = [
        make_check("crashes", RaisingProbe(exception=RuntimeError("API Error"))),
        make_check("passes", StaticProbe(delay=0.05)),
    ]

    report = await scheduler.run_checks(checks)

    assert report.results[0].status == "error"
    assert report.results[0].message == "RuntimeError: API Error"
    assert report.results[1].status == "passed"


async def test_timeout_raised_by_probe_is_an_error(scheduler: CheckScheduler) -> None:
    """A TimeoutError from inside the probe is not mistaken for the deadline."""
    probe = RaisingProbe(exception=TimeoutError("socket read timed out"))

    report = await scheduler.run_checks([make_check("http", probe, timeout=5)])

    assert report.results[0].status == "error"
    assert "socket read timed out" in (report.results[0].message or "")


async def test_non_outcome_return_is_an_error(scheduler: CheckScheduler) -> None:
    """A probe returning something other than an Outcome is recorded as an error."""
    probe = Mock(spec=Probe)
    probe.run.return_value = True

    report = await scheduler.run_checks([make_check("odd", probe)])

    assert report.results[0].status == "error"
    assert "bool" in (report.results[0].message or "")


async def test_results_follow_registration_order(scheduler: CheckScheduler) -> None:
    """Orders results by registration even when later checks finish first."""
    checks = [
        make_check("a", StaticProbe(delay=0.2), timeout=5),
        make_check("b", StaticProbe(outcome=Outcome.failed("instant")), timeout=1),
    ]

    report = await scheduler.run_checks(checks)

    assert [r.name for r in report.results] == ["a", "b"]
    assert report.results[0].duration > report.results[1].duration


async def test_runs_checks_concurrently(scheduler: CheckScheduler) -> None:
    """Runs slow probes side by side rather than one after another."""
    checks = [make_check(f"slow-{i}", StaticProbe(delay=0.3)) for i in range(5)]

    started = time.monotonic()
    report = await scheduler.run_checks(checks)
    elapsed = time.monotonic() - started

    assert report.passed
    assert elapsed < 1.2


async def test_max_concurrency_limits_probes_in_flight() -> None:
    """Never lets more probes run at once than the configured cap."""
    in_flight = 0
    peak = 0

    class CountingProbe(StaticProbe):
        async def run(self) -> Outcome:
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.05)
            in_flight -= 1
            return Outcome.passed()

    checks = [make_check(f"check-{i}", CountingProbe()) for i in range(6)]

    report = await CheckScheduler(max_concurrency=2).run_checks(checks)

    assert report.passed
    assert len(report.results) == 6
    assert peak == 2


async def test_timeout_starts_when_probe_starts() -> None:
    """Waiting for a concurrency slot does not count against a check's timeout."""
    checks = [
        make_check(f"check-{i}", StaticProbe(delay=0.1), timeout=0.3) for i in range(4)
    ]

    report = await CheckScheduler(max_concurrency=1).run_checks(checks)

    assert [r.status for r in report.results] == ["passed"] * 4


async def test_duplicate_names_fail_before_any_probe_runs(
    scheduler: CheckScheduler,
) -> None:
    """Rejects duplicate check names without executing anything."""
    probe = Mock(spec=Probe)
    probe.run.return_value = Outcome.passed()

    with pytest.raises(DuplicateCheckError):
        await scheduler.run_checks(
            [make_check("same", probe), make_check("same", probe)]
        )

    probe.run.assert_not_called()


async def test_non_positive_timeout_fails_before_any_probe_runs(
    scheduler: CheckScheduler,
) -> None:
    """Rejects a zero timeout as a configuration error."""
    probe = Mock(spec=Probe)
    probe.run.return_value = Outcome.passed()

    with pytest.raises(InvalidTimeoutError):
        await scheduler.run_checks(
            [make_check("ok", probe), make_check("zero", probe, timeout=0)]
        )

    probe.run.assert_not_called()


@pytest.mark.parametrize("max_concurrency", [0, -1])
def test_rejects_non_positive_concurrency_cap(max_concurrency: int) -> None:
    """A cap below one is refused when the scheduler is built."""
    with pytest.raises(ConfigurationError, match="max_concurrency"):
        CheckScheduler(max_concurrency=max_concurrency)
