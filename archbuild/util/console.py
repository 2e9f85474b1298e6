# SPDX-License-Identifier: MIT
"""Human-readable status output.

Status lines are what the person running a build watches scroll by:
section headers, check marks, warnings and errors. They are coloured
when the stream is a terminal and plain otherwise. Diagnostics belong
in logging, not here.
"""

from __future__ import annotations

import sys
from typing import TextIO

RESET = "\033[0m"
RED = "\033[0;31m"
GREEN = "\033[0;32m"
YELLOW = "\033[1;33m"
BLUE = "\033[0;34m"

RULE = "=" * 38


class Console:
    """Writes status lines to a stream.

    Args:
        stream: Destination (default: sys.stdout at write time).
        color: Force colour on or off; None means colour only on a tty.
    """

    def __init__(self, stream: TextIO | None = None, color: bool | None = None) -> None:
        self._stream = stream
        self._color = color

    @property
    def stream(self) -> TextIO:
        return self._stream if self._stream is not None else sys.stdout

    @property
    def use_color(self) -> bool:
        if self._color is not None:
            return self._color
        isatty = getattr(self.stream, "isatty", None)
        return bool(isatty and isatty())

    def _paint(self, text: str, color: str) -> str:
        if not self.use_color:
            return text
        return f"{color}{text}{RESET}"

    def _write(self, line: str = "") -> None:
        print(line, file=self.stream)

    def header(self, title: str) -> None:
        self._write(self._paint(RULE, BLUE))
        self._write(self._paint(title, BLUE))
        self._write(self._paint(RULE, BLUE))

    def success(self, message: str) -> None:
        self._write(self._paint(f"✓ {message}", GREEN))

    def warning(self, message: str) -> None:
        self._write(self._paint(f"⚠ {message}", YELLOW))

    def error(self, message: str) -> None:
        self._write(self._paint(f"✗ {message}", RED))

    def info(self, message: str = "") -> None:
        self._write(message)
