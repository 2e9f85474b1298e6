# SPDX-License-Identifier: MIT
"""Execution of a resolved build plan.

The InvocationRunner performs every side effect of a build, in a fixed
order:

1. Verify prerequisites (warn when the host is not the target arch)
2. Optionally remove the build directory, then create it
3. Run each plan step (CMake configure, then CMake build)
4. Report where the artifact is

The first failure stops the run with an ArchbuildError subclass. A missing
artifact after successful steps is only a warning: the build tool's exit
status is what decides success.
"""

from __future__ import annotations

import logging
import shlex
import shutil
import subprocess

from archbuild.configure.probe import Found, HostFacts, PrerequisiteKind, ToolProbe
from archbuild.core.errors import ExternalStepFailed, PrerequisiteMissing
from archbuild.core.plan import BuildPlan, BuildStep
from archbuild.util.console import Console

logger = logging.getLogger(__name__)


class InvocationRunner:
    """Carries out a BuildPlan.

    Attributes:
        plan: The plan to execute.
        host: Facts collected about the host, for the architecture check.
        probe: Used to check the plan's prerequisites.
        console: Destination for status lines.
    """

    def __init__(
        self,
        plan: BuildPlan,
        host: HostFacts,
        *,
        probe: ToolProbe | None = None,
        console: Console | None = None,
    ) -> None:
        self.plan = plan
        self.host = host
        self.probe = probe or ToolProbe()
        self.console = console or Console()

    def run(self) -> int:
        """Run the whole build.

        Returns:
            0 on success.

        Raises:
            PrerequisiteMissing: If a required tool is absent.
            ExternalStepFailed: If a configure or build command fails.
        """
        self.check_prerequisites()
        self.prepare_build_dir()
        for step in self.plan.steps:
            self.run_step(step)
        self.report()
        return 0

    def check_prerequisites(self) -> None:
        self.console.header("Checking Prerequisites")

        arch = self.plan.config.arch
        if self.host.machine != arch:
            self.console.warning(f"This script is designed for {arch}.")
            self.console.warning(f"Current architecture: {self.host.machine}")
            self.console.warning(
                f"Continuing anyway, but you may want to use arch -{arch} to run this script."
            )

        for prerequisite in self.plan.prerequisites:
            result = self.probe.check(prerequisite)
            if isinstance(result, Found):
                if prerequisite.kind is PrerequisiteKind.COMPILER:
                    self.console.success(f"Compiler: {result.version or result.path}")
                else:
                    self.console.success(f"{prerequisite.label} found")
                continue

            if not prerequisite.required:
                self.console.warning(f"{prerequisite.label} not found")
                continue

            raise PrerequisiteMissing(
                prerequisite.label, result.install_hint, prerequisite.missing_message
            )

    def prepare_build_dir(self) -> None:
        self.console.header("Setting Up Build Environment")

        build_dir = self.plan.build_dir
        if self.plan.clean_before_build and build_dir.is_dir():
            self.console.warning(f"Cleaning build directory: {build_dir}")
            shutil.rmtree(build_dir)

        build_dir.mkdir(parents=True, exist_ok=True)
        self.console.success(f"Build directory: {build_dir}")

    def run_step(self, step: BuildStep) -> None:
        """Run one external command, streaming its output."""
        self.console.header(step.description)
        if step.note:
            self.console.info(step.note)
        self.console.info(f"Running: {shlex.join(step.command)}")

        try:
            result = subprocess.run(list(step.command))
        except OSError as e:
            logger.error("Failed to run %s: %s", step.command[0], e)
            raise ExternalStepFailed(step.description, None) from e

        logger.debug("%s exited with %d", step.command[0], result.returncode)
        if result.returncode != 0:
            raise ExternalStepFailed(step.description, result.returncode)
        self.console.success(step.success)

    def report(self) -> bool:
        """Print the build summary.

        Returns:
            True if the expected artifact exists.
        """
        self.console.header("Build Summary")

        artifact = self.plan.expected_artifact_path
        project = self.plan.config.project_name
        found = artifact.exists()
        if found:
            self.console.success("Build successful!")
            self.console.info()
            self.console.info("Executable location:")
            self.console.info(f"  {artifact}")
            self.console.info()
            self.console.info(f"To run {project}:")
            if self.plan.create_bundle:
                self.console.info(f"  open {artifact}")
            else:
                self.console.info(f"  {artifact}")
        else:
            self.console.warning("Executable not found at expected location.")
            self.console.info(f"Check the {self.plan.config.bin_dir}/ directory for output files.")

        self.console.info()
        self.console.success("Done!")
        return found
