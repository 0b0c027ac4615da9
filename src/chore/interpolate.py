# chore/interpolate.py
"""
${placeholder} substitution for option defaults and command text.

`$$` escapes a literal dollar sign, so `$${HOME}` reaches the shell as
`${HOME}`.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from pathlib import Path

from .exceptions import InterpolationError

_PATTERN = re.compile(r"\$\$|\$\{\s*([A-Za-z0-9_][A-Za-z0-9_.\-]*)\s*\}")

BUILTIN_ROOT = "chore.root"
BUILTIN_CWD = "chore.cwd"
BUILTIN_TASK = "chore.task"
BUILTINS = frozenset({BUILTIN_ROOT, BUILTIN_CWD, BUILTIN_TASK})


def placeholders(text: str) -> list[str]:
    """Return the placeholder names referenced by `text`, in order of appearance."""
    return [m.group(1) for m in _PATTERN.finditer(text) if m.group(1) is not None]


def builtin_values(root: str | Path, task_name: str = "", cwd: str | Path | None = None) -> dict[str, str]:
    """Values always available to interpolation."""
    return {
        BUILTIN_ROOT: str(root),
        BUILTIN_CWD: str(cwd if cwd is not None else Path.cwd()),
        BUILTIN_TASK: task_name,
    }


def interpolate(text: str, values: Mapping[str, str], *, task_name: str | None = None) -> str:
    """
    Substitute every ${name} in `text` with values[name].

    Raises:
        InterpolationError: If a placeholder has no value
    """

    def _replace(match: re.Match[str]) -> str:
        name = match.group(1)
        if name is None:
            return "$"
        try:
            return values[name]
        except KeyError:
            raise InterpolationError(name, task_name=task_name, text=text) from None

    return _PATTERN.sub(_replace, text)
