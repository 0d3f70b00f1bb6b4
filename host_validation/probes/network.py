"""Network probes: port reachability and HTTP status."""

import asyncio
import logging
import socket
from dataclasses import dataclass
from typing import Literal, Self

import aiohttp
from pydantic import model_validator

from host_validation.models.duration import PositiveDuration
from host_validation.models.result import Outcome
from host_validation.probes.base import Probe, ProbeConfig
from host_validation.probes.manifest import ProbeManifest

log = logging.getLogger(__name__)

PROTOCOL_FAMILIES = {
    "tcp": socket.AF_UNSPEC,
    "tcp4": socket.AF_INET,
    "tcp6": socket.AF_INET6,
}


def split_host_port(address: str) -> tuple[str, int]:
    """Split "host:port" or "[v6addr]:port" into its parts.

    Raises:
        ValueError: If the address has no port, or the port is not a number
            between 1 and 65535

    """
    host, sep, port = address.rpartition(":")
    if not sep or not host:
        raise ValueError(f"Address '{address}' must be in host:port form")
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    port_number = int(port)
    if not 0 < port_number < 65536:
        raise ValueError(
            f"Port {port_number} in address '{address}' is out of range"
        )
    return host, port_number


class PortProbeConfig(ProbeConfig):
    """Configuration for the port reachability probe."""

    protocol: Literal["tcp", "tcp4", "tcp6", "unix"] = "tcp"
    address: str
    timeout: PositiveDuration = 3.0

    @model_validator(mode="after")
    def _check_address(self) -> Self:
        if self.protocol != "unix":
            split_host_port(self.address)
        return self


@dataclass(frozen=True, kw_only=True)
class PortProbe(Probe):
    """Passes when a connection to the address completes within the timeout."""

    config: PortProbeConfig

    @classmethod
    def from_config(cls, config: PortProbeConfig) -> "PortProbe":
        return cls(config=config)

    async def run(self) -> Outcome:
        address = self.config.address
        try:
            async with asyncio.timeout(self.config.timeout):
                _, writer = await self._connect()
        except TimeoutError:
            return Outcome.timed_out(
                f"connecting to {address} timed out after {self.config.timeout}s"
            )
        except OSError as exc:
            return Outcome.failed(f"cannot connect to {address}: {exc}")

        writer.close()
        try:
            await writer.wait_closed()
        except OSError as exc:
            log.debug("Error closing connection to %s: %s", address, exc)
        return Outcome.passed()

    async def _connect(self) -> tuple[asyncio.StreamReader, asyncio.StreamWriter]:
        """Open a stream to the configured socket path or host:port."""
        if self.config.protocol == "unix":
            return await asyncio.open_unix_connection(self.config.address)
        host, port = split_host_port(self.config.address)
        return await asyncio.open_connection(
            host, port, family=PROTOCOL_FAMILIES[self.config.protocol]
        )


class HttpStatusProbeConfig(ProbeConfig):
    """Configuration for the HTTP status probe."""

    url: str
    method: str = "GET"
    timeout: PositiveDuration = 3.0


@dataclass(frozen=True, kw_only=True)
class HttpStatusProbe(Probe):
    """Passes when the URL answers with a 2xx status within the timeout.

    A non-success status is a failure; a transport error (DNS, refused
    connection, TLS) is an error, since no status was observed at all.
    """

    config: HttpStatusProbeConfig

    @classmethod
    def from_config(cls, config: HttpStatusProbeConfig) -> "HttpStatusProbe":
        return cls(config=config)

    async def run(self) -> Outcome:
        url = self.config.url
        timeout = aiohttp.ClientTimeout(total=self.config.timeout)
        try:
            async with (
                aiohttp.ClientSession(timeout=timeout) as session,
                session.request(self.config.method, url) as response,
            ):
                status = response.status
        except TimeoutError:
            return Outcome.timed_out(f"{url} timed out after {self.config.timeout}s")
        except aiohttp.ClientError as exc:
            return Outcome.errored(f"request to {url} failed: {exc}")

        if not 200 <= status < 300:
            return Outcome.failed(f"{self.config.method} {url} returned {status}")
        return Outcome.passed()


port_manifest = ProbeManifest(
    config_cls=PortProbeConfig,
    probe_factory=PortProbe.from_config,
)

http_manifest = ProbeManifest(
    config_cls=HttpStatusProbeConfig,
    probe_factory=HttpStatusProbe.from_config,
)
