"""D-Bus interface presence probe, backed by dbus-send."""

from dataclasses import dataclass
from typing import Literal

from host_validation.models.duration import PositiveDuration
from host_validation.models.result import Outcome
from host_validation.probes.base import Probe, ProbeConfig
from host_validation.probes.manifest import ProbeManifest
from host_validation.probes.process import run_command, summarize_output

NOT_REGISTERED_ERRORS = (
    "org.freedesktop.DBus.Error.ServiceUnknown",
    "org.freedesktop.DBus.Error.NameHasNoOwner",
)

NO_REPLY_ERRORS = (
    "org.freedesktop.DBus.Error.NoReply",
    "org.freedesktop.DBus.Error.Timeout",
    "org.freedesktop.DBus.Error.TimedOut",
)

# Extra time for dbus-send to report its own reply timeout before we kill it.
PROCESS_GRACE_SECONDS = 1.0


class BusInterfaceProbeConfig(ProbeConfig):
    """Configuration for the bus interface probe."""

    interface: str
    bus: Literal["system", "session"] = "system"
    timeout: PositiveDuration = 20.0
    dbus_send: str = "dbus-send"


@dataclass(frozen=True, kw_only=True)
class BusInterfaceProbe(Probe):
    """Passes when the bus name is owned and answers a Peer.Ping."""

    config: BusInterfaceProbeConfig

    @classmethod
    def from_config(cls, config: BusInterfaceProbeConfig) -> "BusInterfaceProbe":
        return cls(config=config)

    def command(self) -> list[str]:
        """dbus-send invocation that pings the destination over the chosen bus."""
        reply_timeout_ms = max(1, int(self.config.timeout * 1000))
        return [
            self.config.dbus_send,
            f"--{self.config.bus}",
            "--print-reply",
            f"--reply-timeout={reply_timeout_ms}",
            f"--dest={self.config.interface}",
            "/",
            "org.freedesktop.DBus.Peer.Ping",
        ]

    async def run(self) -> Outcome:
        interface = self.config.interface
        try:
            result = await run_command(
                self.command(), self.config.timeout + PROCESS_GRACE_SECONDS
            )
        except TimeoutError:
            return Outcome.timed_out(
                f"{interface} did not answer within {self.config.timeout}s"
            )
        except OSError as exc:
            return Outcome.errored(f"cannot run {self.config.dbus_send}: {exc}")

        if result.returncode == 0:
            return Outcome.passed()

        if any(error in result.stderr for error in NOT_REGISTERED_ERRORS):
            return Outcome.failed(
                f"{interface} is not registered on the {self.config.bus} bus"
            )
        if any(error in result.stderr for error in NO_REPLY_ERRORS):
            return Outcome.timed_out(
                f"{interface} did not answer within {self.config.timeout}s"
            )
        detail = summarize_output(result.stderr) or f"status {result.returncode}"
        return Outcome.failed(f"{interface} query failed: {detail}")


bus_interface_manifest = ProbeManifest(
    config_cls=BusInterfaceProbeConfig,
    probe_factory=BusInterfaceProbe.from_config,
)
