# chore/condition.py
"""
Run conditions ("when" clauses).

A condition is a pure predicate over a ConditionContext snapshot: resolved
option values, the environment, the platform and the configuration root.
Every clause of every condition must hold; otherwise the owning task is
skipped (or, for conditional defaults, the entry is passed over).
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .command import scalar_text
from .exceptions import ConfigParseError
from .ordered_map import MapSlice, as_map_slice, decode_fields, render_key

logger = logging.getLogger(__name__)

_OS_ALIASES = {
    "linux": "linux",
    "darwin": "darwin",
    "macos": "darwin",
    "osx": "darwin",
    "windows": "windows",
    "win32": "windows",
}

CONDITION_FIELDS = ("equal", "not-equal", "environment", "os", "exists", "not-exists")


def current_os(platform: str | None = None) -> str:
    """Normalized OS name: linux, darwin, windows, or sys.platform as-is."""
    platform = platform or sys.platform
    if platform.startswith("linux"):
        return "linux"
    return _OS_ALIASES.get(platform, platform)


@dataclass(frozen=True)
class ConditionContext:
    """Immutable snapshot a condition is evaluated against."""

    values: Mapping[str, str]
    environ: Mapping[str, str] = field(default_factory=dict)
    platform: str = field(default_factory=current_os)
    root: Path = field(default_factory=Path.cwd)


def _scalar_list(value: Any, where: str) -> tuple[str, ...]:
    if isinstance(value, list):
        items = value
    else:
        items = [value]
    for item in items:
        if isinstance(item, (list, MapSlice, Mapping)):
            raise ConfigParseError(f"{where} must be a scalar or a list of scalars")
    return tuple(scalar_text(item) for item in items)


def _keyed_lists(value: Any, where: str, *, allow_null: bool = False) -> tuple:
    pairs = []
    for key, item in as_map_slice(value, where):
        if not isinstance(key, str):
            raise ConfigParseError(f"{render_key(key)} is not a valid key name")
        if item is None and allow_null:
            pairs.append((key, None))
        else:
            pairs.append((key, _scalar_list(item, f"{where}.{key}")))
    return tuple(pairs)


@dataclass(frozen=True)
class RunCondition:
    """
    One `when` mapping. All clauses must hold.

    equal / not-equal:  option name -> accepted values
    environment:        variable -> accepted values, or None for "unset"
    os:                 accepted OS names
    exists / not-exists: paths relative to the configuration root
    """

    equal: tuple[tuple[str, tuple[str, ...]], ...] = ()
    not_equal: tuple[tuple[str, tuple[str, ...]], ...] = ()
    environment: tuple[tuple[str, tuple[str, ...] | None], ...] = ()
    os: tuple[str, ...] = ()
    exists: tuple[str, ...] = ()
    not_exists: tuple[str, ...] = ()

    @classmethod
    def parse(cls, value: Any, where: str = "when") -> RunCondition:
        fields = decode_fields(value, CONDITION_FIELDS, where)
        return cls(
            equal=_keyed_lists(fields.get("equal"), f"{where}.equal"),
            not_equal=_keyed_lists(fields.get("not-equal"), f"{where}.not-equal"),
            environment=_keyed_lists(
                fields.get("environment"), f"{where}.environment", allow_null=True
            ),
            os=tuple(current_os(o.lower()) for o in _scalar_list(fields["os"], f"{where}.os"))
            if "os" in fields
            else (),
            exists=_scalar_list(fields["exists"], f"{where}.exists") if "exists" in fields else (),
            not_exists=_scalar_list(fields["not-exists"], f"{where}.not-exists")
            if "not-exists" in fields
            else (),
        )

    @property
    def option_references(self) -> list[str]:
        """Option names this condition reads."""
        return [name for name, _ in self.equal] + [name for name, _ in self.not_equal]

    def unmet(self, ctx: ConditionContext) -> str | None:
        """Return a description of the first clause that does not hold, or None."""
        for name, accepted in self.equal:
            actual = ctx.values.get(name, "")
            if actual not in accepted:
                return f"{name}={actual!r} is not one of {list(accepted)}"

        for name, rejected in self.not_equal:
            actual = ctx.values.get(name, "")
            if actual in rejected:
                return f"{name}={actual!r} is one of {list(rejected)}"

        for var, accepted in self.environment:
            actual = ctx.environ.get(var)
            if accepted is None:
                if actual is not None:
                    return f"environment variable {var} is set"
            elif actual is None or actual not in accepted:
                return f"environment variable {var}={actual!r} is not one of {list(accepted)}"

        if self.os and ctx.platform not in self.os:
            return f"os {ctx.platform!r} is not one of {list(self.os)}"

        for path in self.exists:
            if not (ctx.root / path).exists():
                return f"path {path!r} does not exist"

        for path in self.not_exists:
            if (ctx.root / path).exists():
                return f"path {path!r} exists"

        return None

    def is_met(self, ctx: ConditionContext) -> bool:
        return self.unmet(ctx) is None


When = tuple[RunCondition, ...]


def parse_when(value: Any, where: str = "when") -> When:
    """Decode a single condition mapping or a list of them."""
    if value is None:
        return ()
    if isinstance(value, list):
        return tuple(RunCondition.parse(item, f"{where}[{i}]") for i, item in enumerate(value))
    return (RunCondition.parse(value, where),)


def first_unmet(conditions: When, ctx: ConditionContext) -> str | None:
    """Evaluate conditions in order; return the first failure description, or None."""
    for condition in conditions:
        reason = condition.unmet(ctx)
        if reason is not None:
            logger.debug(f"Condition not met: {reason}")
            return reason
    return None
