# SPDX-License-Identifier: MIT
"""Tests for archbuild.configure.probe."""

from __future__ import annotations

import subprocess
from pathlib import Path
from unittest.mock import patch

from archbuild.configure.platform import Platform
from archbuild.configure.probe import (
    DEFAULT_PREREQUISITES,
    Found,
    HostFacts,
    Missing,
    Prerequisite,
    PrerequisiteKind,
    ToolProbe,
    detect_host_facts,
)


def completed(returncode: int = 0, stdout: str = "") -> subprocess.CompletedProcess:
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout, stderr="")


class TestDefaultPrerequisites:
    def test_order(self):
        """Test that prerequisites are checked in the documented order."""
        names = [p.name for p in DEFAULT_PREREQUISITES]
        assert names == ["brew", "cmake", "ninja", "git", "nasm", "xcode-select", "clang"]

    def test_tool_hints(self):
        tools = [p for p in DEFAULT_PREREQUISITES if p.kind is PrerequisiteKind.TOOL]
        for tool in tools:
            assert tool.install_hint == f"brew install {tool.name}"
            assert tool.required

    def test_compiler_is_optional(self):
        clang = DEFAULT_PREREQUISITES[-1]
        assert clang.kind is PrerequisiteKind.COMPILER
        assert clang.required is False
        assert clang.version_flag == "--version"

    def test_labels(self):
        labels = [p.label for p in DEFAULT_PREREQUISITES]
        assert labels[0] == "Homebrew"
        assert "Xcode Command Line Tools" in labels
        assert "cmake" in labels

    def test_missing_messages(self):
        """Test that each kind of prerequisite reports its own install prompt."""
        messages = {p.name: p.missing_message for p in DEFAULT_PREREQUISITES}
        assert messages["brew"] == "Homebrew is not installed. Please install it first:"
        assert messages["ninja"] == "ninja is not installed. Please install it with:"
        assert messages["xcode-select"] == "Xcode Command Line Tools not found. Install with:"


class TestToolProbeWhich:
    def test_found(self):
        with patch("archbuild.configure.probe.shutil.which", return_value="/opt/homebrew/bin/cmake"):
            result = ToolProbe().check(Prerequisite("cmake"))

        assert result == Found("cmake", Path("/opt/homebrew/bin/cmake"))

    def test_missing(self):
        prerequisite = Prerequisite("nasm", install_hint="brew install nasm")
        with patch("archbuild.configure.probe.shutil.which", return_value=None):
            result = ToolProbe().check(prerequisite)

        assert result == Missing("nasm", "brew install nasm")

    def test_no_process_without_version_flag(self):
        with (
            patch("archbuild.configure.probe.shutil.which", return_value="/usr/bin/git"),
            patch("archbuild.configure.probe.subprocess.run") as run,
        ):
            ToolProbe().check(Prerequisite("git"))

        run.assert_not_called()

    def test_version(self):
        output = "\nApple clang version 15.0.0\nTarget: arm64-apple-darwin23\n"
        prerequisite = Prerequisite("clang", PrerequisiteKind.COMPILER, version_flag="--version")
        with (
            patch("archbuild.configure.probe.shutil.which", return_value="/usr/bin/clang"),
            patch("archbuild.configure.probe.subprocess.run", return_value=completed(0, output)) as run,
        ):
            result = ToolProbe().check(prerequisite)

        assert isinstance(result, Found)
        assert result.version == "Apple clang version 15.0.0"
        assert run.call_args[0][0] == ["/usr/bin/clang", "--version"]

    def test_version_failure_still_found(self):
        prerequisite = Prerequisite("clang", version_flag="--version")
        with (
            patch("archbuild.configure.probe.shutil.which", return_value="/usr/bin/clang"),
            patch("archbuild.configure.probe.subprocess.run", side_effect=OSError("boom")),
        ):
            result = ToolProbe().check(prerequisite)

        assert result == Found("clang", Path("/usr/bin/clang"), None)


class TestToolProbeCheckCommand:
    prerequisite = Prerequisite(
        "xcode-select",
        PrerequisiteKind.TOOLCHAIN,
        install_hint="xcode-select --install",
        check_command=("xcode-select", "-p"),
    )

    def test_found(self):
        output = "/Library/Developer/CommandLineTools\n"
        with patch("archbuild.configure.probe.subprocess.run", return_value=completed(0, output)) as run:
            result = ToolProbe().check(self.prerequisite)

        assert result == Found("xcode-select", Path("/Library/Developer/CommandLineTools"))
        assert run.call_args[0][0] == ["xcode-select", "-p"]
        assert run.call_args[1]["timeout"] == 5

    def test_nonzero_exit(self):
        with patch("archbuild.configure.probe.subprocess.run", return_value=completed(2)):
            result = ToolProbe().check(self.prerequisite)

        assert result == Missing("xcode-select", "xcode-select --install")

    def test_not_installed(self):
        with patch("archbuild.configure.probe.subprocess.run", side_effect=FileNotFoundError()):
            assert isinstance(ToolProbe().check(self.prerequisite), Missing)

    def test_timeout(self):
        error = subprocess.TimeoutExpired(cmd="xcode-select", timeout=5)
        with patch("archbuild.configure.probe.subprocess.run", side_effect=error):
            assert isinstance(ToolProbe().check(self.prerequisite), Missing)


class TestDetectHostFacts:
    def test_collects_found_tools(self, monkeypatch):
        monkeypatch.setattr(
            "archbuild.configure.probe.get_platform",
            lambda: Platform(os="darwin", arch="arm64", cpu_count=10),
        )

        def which(name):
            return None if name == "nasm" else f"/opt/homebrew/bin/{name}"

        with (
            patch("archbuild.configure.probe.shutil.which", side_effect=which),
            patch("archbuild.configure.probe.subprocess.run") as run,
        ):
            facts = detect_host_facts(["cmake", "ninja", "nasm"])

        run.assert_not_called()
        assert facts == HostFacts(
            detected_cores=10,
            tool_paths={
                "cmake": Path("/opt/homebrew/bin/cmake"),
                "ninja": Path("/opt/homebrew/bin/ninja"),
            },
            machine="arm64",
        )
