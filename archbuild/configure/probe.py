# SPDX-License-Identifier: MIT
"""Prerequisite discovery for archbuild.

Each prerequisite the build needs (package manager, command-line tools,
native toolchain, compiler) is described once as a Prerequisite. A
ToolProbe checks a prerequisite and returns either Found or Missing; it
never raises for an absent tool; deciding what a missing tool means is
left to the caller.

Example:
    probe = ToolProbe()
    result = probe.check(Prerequisite("cmake", install_hint="brew install cmake"))
    if isinstance(result, Found):
        print(f"cmake at {result.path}")
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Union

from archbuild.configure.platform import get_platform

logger = logging.getLogger(__name__)

PROBE_TIMEOUT = 5

HOMEBREW_INSTALL_HINT = (
    '/bin/bash -c "$(curl -fsSL '
    'https://raw.githubusercontent.com/Homebrew/install/HEAD/install.sh)"'
)


class PrerequisiteKind(str, Enum):
    PACKAGE_MANAGER = "package-manager"
    TOOL = "tool"
    TOOLCHAIN = "toolchain"
    COMPILER = "compiler"


@dataclass(frozen=True)
class Prerequisite:
    """Something that must be present on the host before building.

    Attributes:
        name: Program name looked up on PATH, or a label when check_command is set.
        kind: What sort of prerequisite this is.
        install_hint: Command that installs it, shown when it is missing.
        check_command: Command whose zero exit status proves presence.
            Its first line of output is reported as the path.
        version_flag: Flag printing a version string, queried once found.
        required: Whether absence must stop the build.
    """

    name: str
    kind: PrerequisiteKind = PrerequisiteKind.TOOL
    install_hint: str = ""
    check_command: tuple[str, ...] | None = None
    version_flag: str | None = None
    required: bool = True

    @property
    def label(self) -> str:
        if self.kind is PrerequisiteKind.PACKAGE_MANAGER:
            return "Homebrew" if self.name == "brew" else self.name
        if self.kind is PrerequisiteKind.TOOLCHAIN:
            return "Xcode Command Line Tools" if self.name == "xcode-select" else self.name
        return self.name

    @property
    def missing_message(self) -> str:
        """Error line shown above the install hint when this is absent."""
        if self.kind is PrerequisiteKind.PACKAGE_MANAGER:
            return f"{self.label} is not installed. Please install it first:"
        if self.kind is PrerequisiteKind.TOOLCHAIN:
            return f"{self.label} not found. Install with:"
        return f"{self.label} is not installed. Please install it with:"


@dataclass(frozen=True)
class Found:
    """A prerequisite that is present."""

    name: str
    path: Path
    version: str | None = None


@dataclass(frozen=True)
class Missing:
    """A prerequisite that could not be found."""

    name: str
    install_hint: str = ""


ProbeResult = Union[Found, Missing]


@dataclass(frozen=True)
class HostFacts:
    """Facts about the host that a build plan is resolved against.

    Attributes:
        detected_cores: Logical CPU count, or None if it could not be determined.
        tool_paths: Absolute paths of the tools found on PATH, by name.
        machine: Normalized host architecture, compared with the target arch.
    """

    detected_cores: int | None = None
    tool_paths: Mapping[str, Path] = field(default_factory=dict)
    machine: str = ""


def _tool(name: str) -> Prerequisite:
    return Prerequisite(name, PrerequisiteKind.TOOL, install_hint=f"brew install {name}")


REQUIRED_TOOLS: tuple[str, ...] = ("cmake", "ninja", "git", "nasm")

DEFAULT_PREREQUISITES: tuple[Prerequisite, ...] = (
    Prerequisite(
        "brew",
        PrerequisiteKind.PACKAGE_MANAGER,
        install_hint=HOMEBREW_INSTALL_HINT,
    ),
    *(_tool(name) for name in REQUIRED_TOOLS),
    Prerequisite(
        "xcode-select",
        PrerequisiteKind.TOOLCHAIN,
        install_hint="xcode-select --install",
        check_command=("xcode-select", "-p"),
    ),
    Prerequisite(
        "clang",
        PrerequisiteKind.COMPILER,
        version_flag="--version",
        required=False,
    ),
)


def _first_line(text: str) -> str | None:
    for line in text.split("\n"):
        line = line.strip()
        if line:
            return line
    return None


class ToolProbe:
    """Checks prerequisites against the host."""

    def which(self, name: str) -> Path | None:
        """Find a program in PATH using shutil.which."""
        result = shutil.which(name)
        if result:
            return Path(result)
        return None

    def check(self, prerequisite: Prerequisite) -> ProbeResult:
        """Check a single prerequisite.

        Args:
            prerequisite: What to look for.

        Returns:
            Found with the resolved path (and version, if requested),
            or Missing carrying the install hint.
        """
        if prerequisite.check_command is not None:
            output = self._run(prerequisite.check_command)
            if output is None:
                logger.debug("%s: check command failed", prerequisite.name)
                return Missing(prerequisite.name, prerequisite.install_hint)
            path = Path(_first_line(output) or prerequisite.name)
            logger.debug("%s: found at %s", prerequisite.name, path)
            return Found(prerequisite.name, path)

        path = self.which(prerequisite.name)
        if path is None:
            logger.debug("%s: not found in PATH", prerequisite.name)
            return Missing(prerequisite.name, prerequisite.install_hint)

        version = None
        if prerequisite.version_flag:
            output = self._run((str(path), prerequisite.version_flag))
            if output is not None:
                version = _first_line(output)
        logger.debug("%s: found at %s (version: %s)", prerequisite.name, path, version)
        return Found(prerequisite.name, path, version)

    def _run(self, command: tuple[str, ...]) -> str | None:
        """Run a probe command, returning stdout on success."""
        try:
            result = subprocess.run(
                list(command),
                capture_output=True,
                text=True,
                timeout=PROBE_TIMEOUT,
            )
        except (subprocess.TimeoutExpired, OSError) as e:
            logger.debug("Probe %s failed: %s", " ".join(command), e)
            return None
        if result.returncode != 0:
            return None
        return result.stdout


def detect_host_facts(
    tools: Iterable[str] = REQUIRED_TOOLS,
    *,
    probe: ToolProbe | None = None,
) -> HostFacts:
    """Collect the host facts the resolver needs.

    Only PATH lookups are performed; no process is started.

    Args:
        tools: Program names to locate.
        probe: Probe used for the lookups (default: a new ToolProbe).

    Returns:
        HostFacts with the detected core count and the tools that were found.
    """
    probe = probe or ToolProbe()
    platform = get_platform()
    tool_paths: dict[str, Path] = {}
    for name in tools:
        path = probe.which(name)
        if path is not None:
            tool_paths[name] = path
    return HostFacts(
        detected_cores=platform.cpu_count,
        tool_paths=tool_paths,
        machine=platform.arch,
    )
