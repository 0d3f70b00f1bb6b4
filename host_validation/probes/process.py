"""Probes backed by external processes: arbitrary commands and systemd units."""

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass

from host_validation.models.duration import PositiveDuration
from host_validation.models.result import Outcome
from host_validation.probes.base import Probe, ProbeConfig
from host_validation.probes.manifest import ProbeManifest

log = logging.getLogger(__name__)

MAX_OUTPUT_IN_MESSAGE = 200


@dataclass(frozen=True, kw_only=True)
class CommandResult:
    """Exit status and decoded output of a finished process."""

    returncode: int
    stdout: str
    stderr: str


async def run_command(argv: Sequence[str], timeout: float) -> CommandResult:
    """Run a process to completion and capture its output.

    The process is killed if the timeout elapses or the caller is cancelled,
    so a timed-out check never leaves its child running.

    Raises:
        TimeoutError: If the process does not exit within the timeout
        OSError: If the executable cannot be started

    """
    process = await asyncio.create_subprocess_exec(
        *argv,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    try:
        async with asyncio.timeout(timeout):
            stdout, stderr = await process.communicate()
    except TimeoutError:
        _kill(process)
        await process.wait()
        raise
    except asyncio.CancelledError:
        _kill(process)
        raise

    return CommandResult(
        returncode=process.returncode if process.returncode is not None else -1,
        stdout=stdout.decode(errors="replace"),
        stderr=stderr.decode(errors="replace"),
    )


def _kill(process: asyncio.subprocess.Process) -> None:
    if process.returncode is None:
        log.info("Killing process %s", process.pid)
        try:
            process.kill()
        except ProcessLookupError:
            pass


def summarize_output(text: str) -> str:
    """Last line of process output, trimmed for use in a message."""
    lines = text.strip().splitlines()
    return lines[-1][:MAX_OUTPUT_IN_MESSAGE] if lines else ""


class CommandProbeConfig(ProbeConfig):
    """Configuration for the command probe."""

    command: str
    args: Sequence[str] = ()
    timeout: PositiveDuration = 3.0


@dataclass(frozen=True, kw_only=True)
class CommandProbe(Probe):
    """Passes when the command exits with status 0 within its timeout."""

    config: CommandProbeConfig

    @classmethod
    def from_config(cls, config: CommandProbeConfig) -> "CommandProbe":
        return cls(config=config)

    async def run(self) -> Outcome:
        argv = [self.config.command, *self.config.args]
        try:
            result = await run_command(argv, self.config.timeout)
        except TimeoutError:
            return Outcome.timed_out(
                f"{self.config.command} timed out after {self.config.timeout}s"
            )
        except OSError as exc:
            return Outcome.errored(f"cannot run {self.config.command}: {exc}")

        if result.returncode != 0:
            reason = f"{self.config.command} exited with status {result.returncode}"
            if detail := summarize_output(result.stderr):
                reason = f"{reason}: {detail}"
            return Outcome.failed(reason)
        return Outcome.passed()


class ServiceActiveProbeConfig(ProbeConfig):
    """Configuration for the service-active probe."""

    unit: str
    timeout: PositiveDuration = 3.0
    systemctl: str = "systemctl"


@dataclass(frozen=True, kw_only=True)
class ServiceActiveProbe(Probe):
    """Passes when `systemctl is-active` reports the unit active."""

    config: ServiceActiveProbeConfig

    @classmethod
    def from_config(cls, config: ServiceActiveProbeConfig) -> "ServiceActiveProbe":
        return cls(config=config)

    async def run(self) -> Outcome:
        argv = [self.config.systemctl, "is-active", self.config.unit]
        try:
            result = await run_command(argv, self.config.timeout)
        except TimeoutError:
            return Outcome.timed_out(
                f"querying {self.config.unit} timed out after {self.config.timeout}s"
            )
        except OSError as exc:
            return Outcome.errored(f"cannot run {self.config.systemctl}: {exc}")

        if result.returncode != 0:
            state = summarize_output(result.stdout) or "not active"
            return Outcome.failed(f"{self.config.unit} is {state}")
        return Outcome.passed()


command_manifest = ProbeManifest(
    config_cls=CommandProbeConfig,
    probe_factory=CommandProbe.from_config,
)

service_active_manifest = ProbeManifest(
    config_cls=ServiceActiveProbeConfig,
    probe_factory=ServiceActiveProbe.from_config,
)
