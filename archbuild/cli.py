# SPDX-License-Identifier: MIT
"""Command-line interface for archbuild."""

from __future__ import annotations

import logging
import sys
from collections.abc import Sequence
from pathlib import Path

from archbuild.configure.probe import detect_host_facts
from archbuild.core.errors import ArchbuildError, ParseError, PrerequisiteMissing
from archbuild.core.plan import HelpRequested, TargetConfig, count_verbose_flags, resolve
from archbuild.runner import InvocationRunner
from archbuild.util.console import Console

# Set up logging
logger = logging.getLogger("archbuild")


def setup_logging(verbose: bool = False, debug: bool = False) -> None:
    """Configure logging based on verbosity level."""
    if debug:
        level = logging.DEBUG
        fmt = "%(levelname)s: %(name)s: %(message)s"
    elif verbose:
        level = logging.INFO
        fmt = "%(levelname)s: %(message)s"
    else:
        level = logging.WARNING
        fmt = "%(levelname)s: %(message)s"

    logging.basicConfig(level=level, format=fmt)


def main(
    argv: Sequence[str] | None = None,
    *,
    source_dir: Path | None = None,
    config: TargetConfig | None = None,
    console: Console | None = None,
) -> int:
    """Main entry point for the archbuild CLI.

    Args:
        argv: Arguments without the program name (default: sys.argv[1:]).
        source_dir: Project root (default: current directory).
        config: Target to build for.
        console: Destination for status lines.

    Returns:
        Process exit status.
    """
    args = list(sys.argv[1:] if argv is None else argv)
    console = console or Console()

    verbosity = count_verbose_flags(args)
    setup_logging(verbose=verbosity >= 1, debug=verbosity >= 2)

    environment = detect_host_facts()
    logger.debug("Host facts: %s", environment)

    try:
        outcome = resolve(
            args,
            environment,
            source_dir or Path.cwd(),
            config,
        )
    except ParseError as e:
        console.error(e.message)
        console.info("Use --help for usage information")
        return 1

    if isinstance(outcome, HelpRequested):
        print(outcome.usage)
        return 0

    logger.info(
        "Resolved plan: mode=%s clean=%s bundle=%s jobs=%d",
        outcome.mode.value,
        outcome.clean_before_build,
        outcome.create_bundle,
        outcome.parallelism,
    )

    try:
        return InvocationRunner(outcome, environment, console=console).run()
    except PrerequisiteMissing as e:
        console.error(e.message)
        if e.install_hint:
            console.info(f"  {e.install_hint}")
        return 1
    except ArchbuildError as e:
        console.error(e.message)
        return 1


if __name__ == "__main__":
    sys.exit(main())
