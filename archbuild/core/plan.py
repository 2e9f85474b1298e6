# SPDX-License-Identifier: MIT
"""Build plan resolution.

The resolver turns command-line arguments and host facts into a BuildPlan:
an immutable description of one build invocation (mode, paths, bundle
flag, parallelism, and the external commands to run, in order).

Resolution is pure. It touches neither the filesystem nor any process,
so the same arguments and host facts always produce an equal plan.
Everything with side effects lives in archbuild.runner.

Parsing is a single left-to-right pass that folds tokens into an
accumulator; values are validated once, after the pass:

    --release / --debug   build mode, last one wins (default: release)
    --clean               remove the build directory first
    --bundle              produce an application bundle
    --jobs N              parallel compile jobs (default: detected cores)
    --verbose / -v        more log output (does not affect the plan)
    --help / -h           anywhere in argv: HelpRequested
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from archbuild.configure.probe import DEFAULT_PREREQUISITES, HostFacts, Prerequisite
from archbuild.core.errors import ParseError, ParseErrorKind

HELP_FLAGS = frozenset({"--help", "-h"})
VERBOSE_FLAGS = frozenset({"--verbose", "-v"})


class BuildMode(str, Enum):
    """Build type passed to CMake as CMAKE_BUILD_TYPE."""

    RELEASE = "release"
    DEBUG = "debug"


def _check_component(value: str, what: str) -> None:
    """Reject anything that is not a single relative path component."""
    if (
        not value
        or value in (".", "..")
        or "/" in value
        or "\\" in value
        or Path(value).is_absolute()
    ):
        raise ValueError(f"{what} must be a single directory name, got {value!r}")


@dataclass(frozen=True)
class TargetConfig:
    """The fixed target a build driver produces.

    Attributes:
        project_name: Name stem of the produced executable or bundle.
        arch: Target architecture, passed as CMAKE_OSX_ARCHITECTURES.
        generator: CMake generator.
        bin_dir: Directory under the source tree that receives artifacts.
        bundle_option: CMake option switched ON for bundle builds.
        build_dir_name: Build directory under the source tree
            (default: "build_<arch>").
    """

    project_name: str = "Cemu"
    arch: str = "arm64"
    generator: str = "Ninja"
    bin_dir: str = "bin"
    bundle_option: str = "MACOS_BUNDLE"
    build_dir_name: str = ""

    def __post_init__(self) -> None:
        if not self.build_dir_name:
            object.__setattr__(self, "build_dir_name", f"build_{self.arch}")
        _check_component(self.build_dir_name, "build_dir_name")
        _check_component(self.bin_dir, "bin_dir")


@dataclass(frozen=True)
class BuildStep:
    """One external command of a build.

    Attributes:
        description: Section title shown before the command runs.
        command: Program and arguments.
        success: Line reported once the command succeeds.
        note: Extra line shown before the command, if any.
    """

    description: str
    command: tuple[str, ...]
    success: str
    note: str | None = None


@dataclass(frozen=True)
class BuildPlan:
    """Immutable, validated parameters of one build invocation.

    Attributes:
        mode: Release or debug.
        clean_before_build: Remove the build directory before configuring.
        create_bundle: Request an application bundle instead of a bare executable.
        parallelism: Number of parallel compile jobs, always positive.
        auto_parallelism: True when parallelism came from core detection.
        source_dir: Absolute path of the project source tree.
        build_dir: Build directory, always directly inside source_dir.
        expected_artifact_path: Where the build output should appear.
        steps: External commands to run, in order.
        prerequisites: What must be present on the host before running steps.
        config: Target the plan was resolved for.
    """

    mode: BuildMode
    clean_before_build: bool
    create_bundle: bool
    parallelism: int
    auto_parallelism: bool
    source_dir: Path
    build_dir: Path
    expected_artifact_path: Path
    steps: tuple[BuildStep, ...]
    prerequisites: tuple[Prerequisite, ...]
    config: TargetConfig = field(default_factory=TargetConfig)


@dataclass(frozen=True)
class HelpRequested:
    """Outcome of resolve() when usage was asked for. Not an error."""

    usage: str


@dataclass
class _Options:
    """Accumulator filled in by the parsing pass."""

    mode: BuildMode = BuildMode.RELEASE
    clean: bool = False
    bundle: bool = False
    jobs: str | None = None


def format_usage(prog: str = "archbuild", config: TargetConfig | None = None) -> str:
    """Return the help text shown for --help."""
    config = config or TargetConfig()
    return "\n".join(
        [
            f"{config.project_name} {config.arch} Build Script",
            "",
            f"Usage: {prog} [options]",
            "",
            "Options:",
            "  --release     Build in release mode (default)",
            "  --debug       Build in debug mode",
            "  --clean       Clean the build directory before building",
            "  --bundle      Create a macOS application bundle",
            "  --jobs N      Number of parallel jobs (default: auto-detect)",
            "  -v, --verbose Show diagnostic log output",
            "  -h, --help    Show this help message",
            "",
            "Examples:",
            f"  {prog}                    # Standard release build",
            f"  {prog} --debug            # Debug build",
            f"  {prog} --clean --release  # Clean release build",
            f"  {prog} --bundle           # Create .app bundle",
        ]
    )


def parse_options(args: Iterable[str]) -> _Options:
    """Fold argument tokens into an options record.

    Raises:
        ParseError: On an unknown option or a --jobs without a value.
    """
    options = _Options()
    tokens = iter(args)
    for token in tokens:
        if token == "--release":
            options.mode = BuildMode.RELEASE
        elif token == "--debug":
            options.mode = BuildMode.DEBUG
        elif token == "--clean":
            options.clean = True
        elif token == "--bundle":
            options.bundle = True
        elif token == "--jobs":
            value = next(tokens, None)
            if value is None:
                raise ParseError(ParseErrorKind.MISSING_ARGUMENT, token)
            options.jobs = value
        elif token in VERBOSE_FLAGS:
            continue
        else:
            raise ParseError(ParseErrorKind.UNKNOWN_OPTION, token)
    return options


def count_verbose_flags(args: Iterable[str]) -> int:
    """Count --verbose/-v occurrences without validating anything else."""
    return sum(1 for token in args if token in VERBOSE_FLAGS)


def _parse_jobs(value: str) -> int:
    # Digits only: int() would also accept "+4", " 4" and "1_0".
    if not (value.isascii() and value.isdigit()) or int(value) < 1:
        raise ParseError(ParseErrorKind.INVALID_VALUE, value)
    return int(value)


def _artifact_path(source_dir: Path, config: TargetConfig, mode: BuildMode, bundle: bool) -> Path:
    bin_dir = source_dir / config.bin_dir
    if bundle:
        return bin_dir / f"{config.project_name}.app"
    return bin_dir / f"{config.project_name}_{mode.value}"


def _build_steps(
    *,
    mode: BuildMode,
    bundle: bool,
    parallelism: int,
    auto_parallelism: bool,
    source_dir: Path,
    build_dir: Path,
    config: TargetConfig,
    environment: HostFacts,
) -> tuple[BuildStep, ...]:
    cmake = str(environment.tool_paths.get("cmake", "cmake"))

    configure = [
        cmake,
        "-S",
        str(source_dir),
        "-B",
        str(build_dir),
        f"-DCMAKE_BUILD_TYPE={mode.value}",
        f"-DCMAKE_OSX_ARCHITECTURES={config.arch}",
        "-G",
        config.generator,
    ]
    if bundle:
        configure.append(f"-D{config.bundle_option}=ON")
    ninja = environment.tool_paths.get("ninja")
    if ninja:
        configure.append(f"-DCMAKE_MAKE_PROGRAM={ninja}")

    build = [cmake, "--build", str(build_dir), "--parallel", str(parallelism)]
    note = f"Using {parallelism} parallel jobs" if auto_parallelism else None

    return (
        BuildStep(
            f"Configuring CMake ({mode.value})",
            tuple(configure),
            "CMake configuration complete",
        ),
        BuildStep(f"Building {config.project_name}", tuple(build), "Build complete", note),
    )


def resolve(
    args: Sequence[str],
    environment: HostFacts,
    source_dir: Path | str,
    config: TargetConfig | None = None,
    *,
    prerequisites: Sequence[Prerequisite] = DEFAULT_PREREQUISITES,
    prog: str = "archbuild",
) -> BuildPlan | HelpRequested:
    """Resolve command-line arguments into a build plan.

    Args:
        args: Command-line arguments, without the program name.
        environment: Facts about the host (core count, tool paths).
        source_dir: Root of the project being built.
        config: Target to build for (default: TargetConfig()).
        prerequisites: Host requirements recorded in the plan.
        prog: Program name shown in the usage text.

    Returns:
        The BuildPlan, or HelpRequested if --help/-h appears anywhere.

    Raises:
        ParseError: If the arguments are invalid.
    """
    config = config or TargetConfig()
    args = list(args)

    if any(token in HELP_FLAGS for token in args):
        return HelpRequested(format_usage(prog, config))

    options = parse_options(args)

    if options.jobs is not None:
        parallelism = _parse_jobs(options.jobs)
        auto_parallelism = False
    else:
        parallelism = max(environment.detected_cores or 1, 1)
        auto_parallelism = True

    source = Path(source_dir).absolute()
    build_dir = source / config.build_dir_name

    return BuildPlan(
        mode=options.mode,
        clean_before_build=options.clean,
        create_bundle=options.bundle,
        parallelism=parallelism,
        auto_parallelism=auto_parallelism,
        source_dir=source,
        build_dir=build_dir,
        expected_artifact_path=_artifact_path(source, config, options.mode, options.bundle),
        steps=_build_steps(
            mode=options.mode,
            bundle=options.bundle,
            parallelism=parallelism,
            auto_parallelism=auto_parallelism,
            source_dir=source,
            build_dir=build_dir,
            config=config,
            environment=environment,
        ),
        prerequisites=tuple(prerequisites),
        config=config,
    )
