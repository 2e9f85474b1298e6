# SPDX-License-Identifier: MIT
"""
Archbuild: configure and build a CMake project for one target architecture.

Archbuild resolves command-line flags and host facts into an immutable
BuildPlan, checks the tools the build needs, then drives CMake's configure
and build steps and reports where the artifact ended up.
"""

from __future__ import annotations

from archbuild.core.errors import (
    ArchbuildError,
    ExternalStepFailed,
    ParseError,
    ParseErrorKind,
    PrerequisiteMissing,
)
from archbuild.core.plan import (
    BuildMode,
    BuildPlan,
    BuildStep,
    HelpRequested,
    HostFacts,
    TargetConfig,
    resolve,
)

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Resolution
    "BuildMode",
    "BuildPlan",
    "BuildStep",
    "HelpRequested",
    "HostFacts",
    "TargetConfig",
    "resolve",
    # Errors
    "ArchbuildError",
    "ExternalStepFailed",
    "ParseError",
    "ParseErrorKind",
    "PrerequisiteMissing",
]
