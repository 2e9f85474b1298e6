# SPDX-License-Identifier: MIT
"""Tests for archbuild.configure.platform."""

import sys

import pytest

from archbuild.configure.platform import Platform, get_platform, normalize_arch


class TestNormalizeArch:
    @pytest.mark.parametrize(
        "machine, expected",
        [
            ("arm64", "arm64"),
            ("aarch64", "arm64"),
            ("AMD64", "x86_64"),
            ("x86_64", "x86_64"),
            ("riscv64", "riscv64"),
        ],
    )
    def test_aliases(self, machine, expected):
        assert normalize_arch(machine) == expected


class TestPlatform:
    def test_get_platform(self, monkeypatch):
        monkeypatch.setattr("archbuild.configure.platform._platform.machine", lambda: "aarch64")
        monkeypatch.setattr("archbuild.configure.platform.os.cpu_count", lambda: 8)

        assert get_platform() == Platform(os=sys.platform, arch="arm64", cpu_count=8)

    def test_get_platform_unknown_cpu_count(self, monkeypatch):
        monkeypatch.setattr("archbuild.configure.platform.os.cpu_count", lambda: None)
        assert get_platform().cpu_count is None
