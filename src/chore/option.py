# chore/option.py
from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from .command import FALSE_WORDS, TRUE_WORDS, parse_bool, scalar_text
from .condition import ConditionContext, When, first_unmet, parse_when
from .exceptions import ConfigParseError, OptionValueError
from .interpolate import interpolate, placeholders
from .ordered_map import MapSlice, decode_fields

logger = logging.getLogger(__name__)

OPTION_FIELDS = (
    "usage",
    "short",
    "type",
    "default",
    "environment",
    "flag",
    "required",
    "private",
    "values",
)

_TYPE_ALIASES = {
    "string": "string",
    "str": "string",
    "boolean": "boolean",
    "bool": "boolean",
    "integer": "integer",
    "int": "integer",
    "float": "float",
    "number": "float",
}

_FLAG_NAME = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_\-]*$")


# ─────────────────────────────────────────────────────────────────────────────
# Default values
# ─────────────────────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class DefaultValue:
    """One candidate default. The first whose conditions hold is used."""

    value: str
    when: When = ()

    @classmethod
    def parse(cls, value: Any, where: str) -> DefaultValue:
        if isinstance(value, (MapSlice, Mapping)):
            fields = decode_fields(value, ("when", "value"), where)
            if "value" not in fields:
                raise ConfigParseError(f"{where} requires a 'value' field")
            if isinstance(fields["value"], (list, MapSlice, Mapping)):
                raise ConfigParseError(f"{where}.value must be a scalar")
            return cls(
                value=scalar_text(fields["value"]),
                when=parse_when(fields.get("when"), f"{where}.when"),
            )
        if isinstance(value, list):
            raise ConfigParseError(f"{where} must be a scalar or a {{when, value}} mapping")
        return cls(value=scalar_text(value))

    @property
    def references(self) -> list[str]:
        refs = placeholders(self.value)
        for condition in self.when:
            refs.extend(condition.option_references)
        return refs


def parse_default(value: Any, where: str) -> tuple[DefaultValue, ...]:
    if value is None:
        return ()
    if isinstance(value, list):
        return tuple(DefaultValue.parse(item, f"{where}[{i}]") for i, item in enumerate(value))
    return (DefaultValue.parse(value, where),)


# ─────────────────────────────────────────────────────────────────────────────
# Option
# ─────────────────────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class Option:
    """
    A named input to a task (or to every task, when declared globally).

    Resolution order: explicit override (CLI flag or dependency argument),
    then the bound environment variable, then the first matching default.
    """

    name: str

    usage: str = ""

    short: str = ""
    """Optional one-letter CLI alias."""

    type: str = "string"
    """One of: string, boolean, integer, float."""

    default: tuple[DefaultValue, ...] = ()

    environment: str = ""
    """Environment variable that overrides the default when set."""

    flag: str = ""
    """CLI flag name. Defaults to the option name."""

    required: bool = False

    private: bool = False
    """Private options cannot be set from the command line."""

    values: tuple[str, ...] = ()
    """If non-empty, the only accepted values."""

    def __post_init__(self) -> None:
        if not self.flag:
            object.__setattr__(self, "flag", self.name)

    @classmethod
    def parse(cls, name: str, value: Any, where: str | None = None) -> Option:
        where = where or f"option '{name}'"
        fields = decode_fields(value, OPTION_FIELDS, where)

        type_name = scalar_text(fields.get("type", "string")).lower()
        if type_name not in _TYPE_ALIASES:
            raise ConfigParseError(
                f"{where} has invalid type '{type_name}' "
                f"(valid types: {', '.join(sorted(set(_TYPE_ALIASES.values())))})"
            )

        values = fields.get("values") or []
        if not isinstance(values, list):
            raise ConfigParseError(f"{where}.values must be a list")

        option = cls(
            name=name,
            usage=scalar_text(fields.get("usage")),
            short=scalar_text(fields.get("short")),
            type=_TYPE_ALIASES[type_name],
            default=parse_default(fields.get("default"), f"{where}.default"),
            environment=scalar_text(fields.get("environment")),
            flag=scalar_text(fields.get("flag")),
            required=parse_bool(fields.get("required"), f"{where}.required"),
            private=parse_bool(fields.get("private"), f"{where}.private"),
            values=tuple(scalar_text(v) for v in values),
        )
        option.validate(where)
        return option

    def validate(self, where: str) -> None:
        if not _FLAG_NAME.match(self.name):
            raise ConfigParseError(f"invalid option name '{self.name}'")
        if not _FLAG_NAME.match(self.flag):
            raise ConfigParseError(f"{where} has invalid flag name '{self.flag}'")
        if self.short and (len(self.short) != 1 or not self.short.isalnum()):
            raise ConfigParseError(f"{where}: short name '{self.short}' must be a single letter")
        if self.required and self.default:
            raise ConfigParseError(f"{where} cannot be required and have a default")
        if self.required and self.private:
            raise ConfigParseError(f"{where} cannot be both required and private")
        for candidate in self.values:
            self.normalize(candidate)

    @property
    def is_boolean(self) -> bool:
        return self.type == "boolean"

    @property
    def references(self) -> list[str]:
        """Names referenced by the default expressions, in order."""
        refs: list[str] = []
        for candidate in self.default:
            refs.extend(candidate.references)
        return refs

    # ------------------------------------------------------------------ #
    # Resolution
    # ------------------------------------------------------------------ #
    def normalize(self, raw: str) -> str:
        """
        Validate `raw` against the option's type and allowed values.

        Booleans are normalized to "true" / "false".

        Raises:
            OptionValueError: If the value is invalid
        """
        value = raw
        if self.type == "boolean":
            lowered = raw.strip().lower()
            if lowered in TRUE_WORDS:
                value = "true"
            elif lowered in FALSE_WORDS or lowered == "":
                value = "false"
            else:
                raise OptionValueError(f"option '{self.name}' expects a boolean, got {raw!r}")
        elif self.type == "integer" and raw != "":
            try:
                int(raw)
            except ValueError:
                raise OptionValueError(f"option '{self.name}' expects an integer, got {raw!r}") from None
        elif self.type == "float" and raw != "":
            try:
                float(raw)
            except ValueError:
                raise OptionValueError(f"option '{self.name}' expects a number, got {raw!r}") from None

        if self.values and value != "" and value not in self.values:
            raise OptionValueError(
                f"value {raw!r} is not valid for option '{self.name}' "
                f"(valid values: {', '.join(self.values)})"
            )
        return value

    def compute_default(self, bindings: Mapping[str, str], ctx: ConditionContext, scope: str) -> str:
        """Interpolate the first default whose conditions hold; empty if none does."""
        for candidate in self.default:
            if first_unmet(candidate.when, ctx) is None:
                return interpolate(candidate.value, bindings, task_name=scope)
        return ""

    def resolve(
        self,
        *,
        override: str | None,
        environ: Mapping[str, str],
        bindings: Mapping[str, str],
        ctx: ConditionContext,
        scope: str,
    ) -> str:
        """
        Resolve this option's value for one task instance.

        Args:
            override: Value from a CLI flag or dependency argument, if any
            environ: Environment used for the `environment` binding
            bindings: Values of options declared earlier in scope (plus built-ins)
            ctx: Condition snapshot for conditional defaults
            scope: Task name, for error messages

        Raises:
            OptionValueError: If the value is invalid or a required option is unset
        """
        if override is not None:
            raw, source = override, "override"
        elif self.environment and self.environment in environ:
            raw, source = environ[self.environment], f"environment ${self.environment}"
        elif self.required:
            raise OptionValueError(f"option '{self.name}' is required by {scope}")
        else:
            raw, source = self.compute_default(bindings, ctx, scope), "default"

        value = self.normalize(raw)
        logger.debug(f"Option '{self.name}' in {scope} = {value!r} (from {source})")
        return value
