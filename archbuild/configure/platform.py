# SPDX-License-Identifier: MIT
"""Host platform detection.

Provides the facts about the machine running archbuild that the build
plan depends on: operating system, CPU architecture and core count.
Architecture names are normalized so that "aarch64" and "arm64" (and
"amd64" and "x86_64") compare equal.
"""

from __future__ import annotations

import os
import platform as _platform
import sys
from dataclasses import dataclass

# Map raw machine names to the names CMake and Apple tooling use.
_ARCH_ALIASES: dict[str, str] = {
    "aarch64": "arm64",
    "arm64": "arm64",
    "amd64": "x86_64",
    "x86_64": "x86_64",
    "x64": "x86_64",
}


def normalize_arch(machine: str) -> str:
    """Return the canonical name for a machine architecture string."""
    machine = machine.strip().lower()
    return _ARCH_ALIASES.get(machine, machine)


@dataclass(frozen=True)
class Platform:
    """Description of the host platform.

    Attributes:
        os: Operating system identifier ("darwin", "linux", "win32", ...).
        arch: Normalized CPU architecture ("arm64", "x86_64", ...).
        cpu_count: Number of logical CPUs, or None if undetermined.
    """

    os: str
    arch: str
    cpu_count: int | None = None


def get_platform() -> Platform:
    """Detect the current host platform."""
    return Platform(
        os=sys.platform,
        arch=normalize_arch(_platform.machine()),
        cpu_count=os.cpu_count(),
    )
