"""Filesystem probes: symlinks, file presence, content digests and mounts."""

import hashlib
import re
import stat
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from pydantic import field_validator

from host_validation.models.result import Outcome
from host_validation.probes.base import Probe, ProbeConfig
from host_validation.probes.blocking import run_blocking
from host_validation.probes.manifest import ProbeManifest

DEFAULT_MOUNT_TABLE = Path("/proc/self/mounts")

OCTAL_ESCAPE = re.compile(r"\\([0-7]{3})")


class SymlinkProbeConfig(ProbeConfig):
    """Configuration for the symlink probe."""

    path: Path


@dataclass(frozen=True, kw_only=True)
class SymlinkProbe(Probe):
    """Passes when the path itself is a symbolic link."""

    config: SymlinkProbeConfig

    @classmethod
    def from_config(cls, config: SymlinkProbeConfig) -> "SymlinkProbe":
        return cls(config=config)

    async def run(self) -> Outcome:
        path = self.config.path
        try:
            info = await run_blocking(path.lstat)
        except FileNotFoundError:
            return Outcome.failed(f"{path} does not exist")
        except OSError as exc:
            return Outcome.failed(f"cannot stat {path}: {exc}")

        if not stat.S_ISLNK(info.st_mode):
            return Outcome.failed(f"{path} is not a symlink")
        return Outcome.passed()


class FilePresenceProbeConfig(ProbeConfig):
    """Configuration for the file presence probe."""

    directory: Path
    filename: str


@dataclass(frozen=True, kw_only=True)
class FilePresenceProbe(Probe):
    """Passes when directory/filename exists and can be stat'ed."""

    config: FilePresenceProbeConfig

    @classmethod
    def from_config(cls, config: FilePresenceProbeConfig) -> "FilePresenceProbe":
        return cls(config=config)

    async def run(self) -> Outcome:
        path = self.config.directory / self.config.filename
        try:
            await run_blocking(path.stat)
        except FileNotFoundError:
            return Outcome.failed(f"{path} does not exist")
        except OSError as exc:
            return Outcome.failed(f"cannot stat {path}: {exc}")
        return Outcome.passed()


def file_digest(path: Path, algorithm: str) -> str:
    """Hex digest of the file's bytes."""
    with path.open("rb") as f:
        return hashlib.file_digest(f, algorithm).hexdigest()


class ContentHashProbeConfig(ProbeConfig):
    """Configuration for the content hash probe."""

    path: Path
    digest: str
    algorithm: str = "sha256"

    @field_validator("algorithm")
    @classmethod
    def _known_algorithm(cls, value: str) -> str:
        if value not in hashlib.algorithms_available:
            raise ValueError(f"Unsupported hash algorithm '{value}'")
        return value


@dataclass(frozen=True, kw_only=True)
class ContentHashProbe(Probe):
    """Passes when the file's digest equals the expected digest exactly."""

    config: ContentHashProbeConfig

    @classmethod
    def from_config(cls, config: ContentHashProbeConfig) -> "ContentHashProbe":
        return cls(config=config)

    async def run(self) -> Outcome:
        path = self.config.path
        try:
            actual = await run_blocking(file_digest, path, self.config.algorithm)
        except OSError as exc:
            return Outcome.failed(f"cannot read {path}: {exc}")

        if actual != self.config.digest:
            return Outcome.failed(
                f"{path}: {self.config.algorithm} digest {actual} "
                f"does not match expected {self.config.digest}"
            )
        return Outcome.passed()


@dataclass(frozen=True, kw_only=True)
class MountEntry:
    """One line of a mount table."""

    device: str
    mount_point: str
    fstype: str
    options: Sequence[str]


def _unescape(field: str) -> str:
    """Decode the octal escapes the kernel uses for spaces and tabs."""
    return OCTAL_ESCAPE.sub(lambda m: chr(int(m.group(1), 8)), field)


def parse_mount_table(text: str) -> Sequence[MountEntry]:
    """Parse /proc/mounts-style text; malformed lines are skipped."""
    entries: list[MountEntry] = []
    for line in text.splitlines():
        parts = line.split()
        if len(parts) < 4:
            continue
        device, mount_point, fstype, options = parts[:4]
        entries.append(
            MountEntry(
                device=_unescape(device),
                mount_point=_unescape(mount_point),
                fstype=fstype,
                options=tuple(options.split(",")),
            )
        )
    return entries


def read_mount_table(path: Path) -> Sequence[MountEntry]:
    """Read and parse the mount table at path."""
    return parse_mount_table(path.read_text())


class MountReadOnlyProbeConfig(ProbeConfig):
    """Configuration for the read-only mount probe."""

    mount_point: str = "/"
    mount_table: Path = DEFAULT_MOUNT_TABLE


@dataclass(frozen=True, kw_only=True)
class MountReadOnlyProbe(Probe):
    """Passes when the mount point's first mount option is "ro".

    When the mount point is listed more than once, the last entry is the one
    in effect, since later mounts stack on top of earlier ones.
    """

    config: MountReadOnlyProbeConfig

    @classmethod
    def from_config(cls, config: MountReadOnlyProbeConfig) -> "MountReadOnlyProbe":
        return cls(config=config)

    async def run(self) -> Outcome:
        mount_point = self.config.mount_point
        try:
            entries = await run_blocking(read_mount_table, self.config.mount_table)
        except OSError as exc:
            return Outcome.errored(
                f"cannot read mount table {self.config.mount_table}: {exc}"
            )

        options_by_mount = {entry.mount_point: entry.options for entry in entries}
        if (options := options_by_mount.get(mount_point)) is None:
            return Outcome.failed(f"could not find mount entry for {mount_point}")

        if not options or options[0] != "ro":
            return Outcome.failed(
                f"{mount_point} is not mounted ro (options: {','.join(options)})"
            )
        return Outcome.passed()


symlink_manifest = ProbeManifest(
    config_cls=SymlinkProbeConfig,
    probe_factory=SymlinkProbe.from_config,
)

file_presence_manifest = ProbeManifest(
    config_cls=FilePresenceProbeConfig,
    probe_factory=FilePresenceProbe.from_config,
)

content_hash_manifest = ProbeManifest(
    config_cls=ContentHashProbeConfig,
    probe_factory=ContentHashProbe.from_config,
)

mount_readonly_manifest = ProbeManifest(
    config_cls=MountReadOnlyProbeConfig,
    probe_factory=MountReadOnlyProbe.from_config,
)
