# chore/command.py
from __future__ import annotations

import logging
import os
from collections.abc import Callable, Mapping
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

from .exceptions import ConfigParseError
from .ordered_map import MapSlice, decode_fields

logger = logging.getLogger(__name__)

SHELL_ENV_VAR = "SHELL"
"""Environment variable selecting the shell used to run commands."""

DEFAULT_SHELL = "/bin/sh"
"""Shell used when SHELL is unset or empty."""


def get_shell(environ: Mapping[str, str] | None = None) -> str:
    """
    Return the shell binary to invoke.

    Reads SHELL from `environ` (os.environ by default) on every call.
    """
    if environ is None:
        environ = os.environ
    shell = environ.get(SHELL_ENV_VAR, "")
    return shell if shell else DEFAULT_SHELL


def scalar_text(value: Any) -> str:
    """Render a YAML/TOML scalar the way it was most likely written."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


TRUE_WORDS = frozenset({"true", "yes", "on", "1"})
FALSE_WORDS = frozenset({"false", "no", "off", "0"})


def parse_bool(value: Any, where: str) -> bool:
    """
    Read a yes/no field such as `private` or `required`. Null is false.

    Raises:
        ConfigParseError: If the value is not a recognised boolean word
    """
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    text = scalar_text(value).strip().lower()
    if text in TRUE_WORDS:
        return True
    if text in FALSE_WORDS:
        return False
    raise ConfigParseError(f"{where} must be true or false, got {value!r}")


@dataclass(frozen=True)
class Command:
    """
    A single shell step.

    A bare scalar in the configuration is shorthand for a Command whose
    `do` and `print` are both that scalar.
    """

    do: str
    """Shell text to execute. May contain ${placeholders}."""

    print: str = ""
    """Text shown before execution. Defaults to `do`."""

    dir: str = ""
    """Working directory, relative to the configuration file's directory. Empty inherits."""

    def __post_init__(self) -> None:
        if not self.print and self.do:
            object.__setattr__(self, "print", self.do)

    @classmethod
    def parse(cls, value: Any, where: str = "command") -> Command:
        """Decode a bare scalar or a {do, print, dir} mapping."""
        if isinstance(value, (MapSlice, Mapping)):
            fields = decode_fields(value, ("do", "print", "dir"), where)
            if "do" not in fields:
                raise ConfigParseError(f"{where} requires a 'do' field")
            for name, item in fields.items():
                if isinstance(item, (list, MapSlice, Mapping)):
                    raise ConfigParseError(f"'{name}' in {where} must be a string")
            return cls(
                do=scalar_text(fields["do"]),
                print=scalar_text(fields.get("print")),
                dir=scalar_text(fields.get("dir")),
            )
        if isinstance(value, list):
            raise ConfigParseError(f"{where} must be a string or a mapping, got a list")
        return cls(do=scalar_text(value))

    def interpolate(self, substitute: Callable[[str], str]) -> Command:
        """Return a copy with `substitute` applied to do, print and dir."""
        return replace(
            self,
            do=substitute(self.do),
            print=substitute(self.print),
            dir=substitute(self.dir),
        )

    def resolve_dir(self, root: str | Path | None = None) -> str | None:
        """
        Absolute working directory for this step, or None to inherit.

        Relative directories are resolved against `root` (the configuration
        file's directory), falling back to the process working directory.
        """
        if not self.dir:
            return None
        base = Path(root) if root is not None else Path.cwd()
        return str((base / self.dir).resolve())


CommandList = tuple[Command, ...]


def parse_command_list(value: Any, where: str = "run") -> CommandList:
    """
    Decode a list of commands.

    A single bare command (scalar or mapping) is a one-element list; null and
    [] are both an empty list.
    """
    if value is None:
        return ()
    if isinstance(value, list):
        return tuple(Command.parse(item, f"{where}[{i}]") for i, item in enumerate(value))
    return (Command.parse(value, where),)
