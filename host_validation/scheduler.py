"""Check scheduler for running probes concurrently under per-check timeouts."""

import asyncio
import logging
from collections.abc import Iterable, Sequence
from contextlib import AbstractAsyncContextManager, nullcontext
from dataclasses import dataclass

from host_validation.models.check import Check
from host_validation.models.report import Report
from host_validation.models.result import CheckResult, Outcome
from host_validation.registry import CheckRegistry, ConfigurationError

log = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class CheckScheduler:
    """Runs every registered check concurrently and collects one result each.

    A failing, hanging or crashing probe only affects its own result. When
    max_concurrency is set, at most that many probes are in flight at once.
    """

    max_concurrency: int | None = None

    def __post_init__(self) -> None:
        if self.max_concurrency is not None and self.max_concurrency < 1:
            raise ConfigurationError(
                f"max_concurrency must be a positive integer, got {self.max_concurrency}"
            )

    async def run_checks(self, checks: Iterable[Check]) -> Report:
        """Run all checks and return a report in registration order.

        Args:
            checks: Checks to run; a plain iterable is validated as a registry
                before anything executes

        Returns:
            Report with exactly one result per check

        Raises:
            ConfigurationError: If the checks cannot be registered together

        """
        registry = checks if isinstance(checks, CheckRegistry) else CheckRegistry(checks)

        if not registry:
            log.info("No checks registered")
            return Report(results=())

        log.info("Running %d check(s)...", len(registry))
        limiter = (
            asyncio.Semaphore(self.max_concurrency)
            if self.max_concurrency is not None
            else nullcontext()
        )
        tasks = [self._run_check(check, limiter) for check in registry]

        results = await asyncio.gather(*tasks, return_exceptions=True)
        log.info("Check execution completed")

        return Report(results=self._process_results(registry.checks, results))

    def _process_results(
        self,
        checks: Sequence[Check],
        results: Sequence[CheckResult | BaseException],
    ) -> Sequence[CheckResult]:
        """Pair results with their checks, turning stray exceptions into errors."""
        final_results: list[CheckResult] = []

        for check, result in zip(checks, results, strict=True):
            if isinstance(result, BaseException):
                log.error("Check %s crashed: %s", check.name, result, exc_info=result)
                result = CheckResult(
                    name=check.name,
                    status="error",
                    duration=0.0,
                    message=describe_exception(result),
                )

            log.info(
                "Check completed: name=%s status=%s duration=%.2fs",
                result.name,
                result.status,
                result.duration,
            )
            final_results.append(result)

        return final_results

    async def _run_check(
        self,
        check: Check,
        limiter: AbstractAsyncContextManager[object],
    ) -> CheckResult:
        """Run one probe under its check's timeout."""
        async with limiter:
            loop = asyncio.get_running_loop()
            started = loop.time()
            outcome = await self._invoke_probe(check)
            duration = loop.time() - started

        return CheckResult(
            name=check.name,
            status=outcome.status,
            duration=duration,
            message=outcome.message,
        )

    async def _invoke_probe(self, check: Check) -> Outcome:
        """Race the probe against the timeout; never raise for probe faults."""
        deadline = asyncio.timeout(check.timeout)
        try:
            async with deadline:
                outcome = await check.probe.run()
        except TimeoutError as exc:
            if deadline.expired():
                return Outcome.timed_out(f"did not complete within {check.timeout}s")
            log.error("Check %s raised: %s", check.name, exc, exc_info=exc)
            return Outcome.errored(describe_exception(exc))
        except Exception as exc:
            log.error("Check %s raised: %s", check.name, exc, exc_info=exc)
            return Outcome.errored(describe_exception(exc))

        if not isinstance(outcome, Outcome):
            return Outcome.errored(
                f"probe returned {type(outcome).__name__} instead of an outcome"
            )
        return outcome


def describe_exception(exc: BaseException) -> str:
    """Render an exception as a one-line cause."""
    text = str(exc)
    return f"{type(exc).__name__}: {text}" if text else type(exc).__name__
