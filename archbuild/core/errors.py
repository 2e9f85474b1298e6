# SPDX-License-Identifier: MIT
"""Custom exceptions for archbuild.

All archbuild exceptions inherit from ArchbuildError. Every one of them
is terminal for the process: the CLI reports the message and exits with
a non-zero status.
"""

from __future__ import annotations

from enum import Enum


class ArchbuildError(Exception):
    """Base class for all archbuild exceptions.

    Attributes:
        message: The error message.
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ParseErrorKind(str, Enum):
    """Why a command line could not be turned into a build plan."""

    UNKNOWN_OPTION = "unknown-option"
    MISSING_ARGUMENT = "missing-argument"
    INVALID_VALUE = "invalid-value"


class ParseError(ArchbuildError):
    """Command-line arguments could not be parsed.

    Attributes:
        kind: The kind of parse failure.
        token: The offending token (the option itself for a missing argument).
    """

    def __init__(self, kind: ParseErrorKind, token: str) -> None:
        self.kind = kind
        self.token = token
        super().__init__(self._describe(kind, token))

    @staticmethod
    def _describe(kind: ParseErrorKind, token: str) -> str:
        if kind is ParseErrorKind.UNKNOWN_OPTION:
            return f"Unknown option: {token}"
        if kind is ParseErrorKind.MISSING_ARGUMENT:
            return f"Option {token} requires a value"
        return f"Invalid value: {token!r} (expected a positive integer)"


class PrerequisiteMissing(ArchbuildError):
    """A required tool or toolchain was not found.

    Attributes:
        name: The name of the missing prerequisite.
        install_hint: Command or instruction that installs it.
    """

    def __init__(self, name: str, install_hint: str = "", message: str | None = None) -> None:
        self.name = name
        self.install_hint = install_hint
        super().__init__(message or f"{name} is not installed")


class ExternalStepFailed(ArchbuildError):
    """A delegated configure or compile step did not succeed.

    Attributes:
        description: Human-readable name of the step.
        returncode: Exit status of the command, or None if it never started.
    """

    def __init__(self, description: str, returncode: int | None) -> None:
        self.description = description
        self.returncode = returncode
        if returncode is None:
            detail = "could not be started"
        else:
            detail = f"failed with exit code {returncode}"
        super().__init__(f"{description} {detail}")
