# chore/ui.py
"""
User-facing output.

Announcements ("about to run", "skipping", failures) are written straight to
a stream rather than through logging, so they appear regardless of how the
`chore` logger is configured. Diagnostic logging lives in logging_config.
"""

from __future__ import annotations

import sys
from enum import IntEnum
from typing import TextIO


class Verbosity(IntEnum):
    QUIET = 0
    NORMAL = 1
    VERBOSE = 2


class UI:
    """Writes announcements to a stream (stderr by default)."""

    prefix = "chore"

    def __init__(self, stream: TextIO | None = None, verbosity: Verbosity = Verbosity.NORMAL):
        self._stream = stream
        self.verbosity = verbosity

    @property
    def stream(self) -> TextIO:
        return self._stream if self._stream is not None else sys.stderr

    def _write(self, line: str) -> None:
        self.stream.write(line + "\n")
        self.stream.flush()

    def print_command(self, text: str) -> None:
        """Announce a command that is about to run."""
        if self.verbosity >= Verbosity.NORMAL:
            self._write(f"{self.prefix} $ {text}")

    def print_command_error(self, error: BaseException | str) -> None:
        """Announce that a command failed."""
        if self.verbosity >= Verbosity.NORMAL:
            self._write(f"{self.prefix} ✗ {error}")

    def print_task(self, name: str) -> None:
        if self.verbosity >= Verbosity.VERBOSE:
            self._write(f"{self.prefix} > task: {name}")

    def print_skipped(self, name: str, reason: str) -> None:
        if self.verbosity >= Verbosity.VERBOSE:
            self._write(f"{self.prefix} > skipping task {name}: {reason}")

    def print_error(self, error: BaseException | str) -> None:
        """Report a terminal error. Shown even when quiet."""
        self._write(f"Error: {error}")

    def __repr__(self) -> str:
        return f"UI(verbosity={self.verbosity.name.lower()})"
