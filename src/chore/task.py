# chore/task.py
from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from .command import CommandList, parse_bool, parse_command_list, scalar_text
from .condition import When, parse_when
from .exceptions import ConfigParseError, DuplicateNameError
from .option import Option
from .ordered_map import (
    MapSlice,
    as_map_slice,
    decode_fields,
    load_ordered,
    parse_ordered_map,
    render_key,
)

logger = logging.getLogger(__name__)

TASK_FIELDS = (
    "usage",
    "description",
    "private",
    "options",
    "when",
    "pre",
    "run",
    "post",
    "finally",
)


def find_duplicates(names: list[str]) -> list[str]:
    seen: set[str] = set()
    dupes: list[str] = []
    for name in names:
        if name in seen and name not in dupes:
            dupes.append(name)
        seen.add(name)
    return dupes


def parse_options(value: Any, scope: str) -> tuple[Option, ...]:
    """
    Decode an ordered option map through parse_ordered_map, keeping declaration order.

    Raises:
        DuplicateNameError: If an option name repeats within the scope
    """
    options: list[Option] = []

    def assign(name: str, text: str) -> None:
        options.append(Option.parse(name, load_ordered(text), f"option '{name}' in {scope}"))

    names = parse_ordered_map(as_map_slice(value, f"options of {scope}"), assign)
    dupes = find_duplicates(names)
    if dupes:
        raise DuplicateNameError("option", dupes[0], scope)
    return tuple(options)


@dataclass(frozen=True)
class Dependency:
    """
    A reference from one task to another, optionally with option overrides.

    Override values may contain ${placeholders}; they are interpolated with the
    referring task's resolved options.
    """

    task: str
    options: tuple[tuple[str, str], ...] = ()

    @classmethod
    def parse(cls, value: Any, where: str) -> Dependency:
        if isinstance(value, (MapSlice, Mapping)):
            fields = decode_fields(value, ("task", "options"), where)
            if "task" not in fields or not isinstance(fields["task"], str):
                raise ConfigParseError(f"{where} requires a 'task' name")
            overrides = []
            for key, item in as_map_slice(fields.get("options"), f"{where}.options"):
                if not isinstance(key, str):
                    raise ConfigParseError(f"{render_key(key)} is not a valid key name")
                if isinstance(item, (list, MapSlice, Mapping)):
                    raise ConfigParseError(f"{where}.options.{key} must be a scalar")
                overrides.append((key, scalar_text(item)))
            names = [k for k, _ in overrides]
            dupes = find_duplicates(names)
            if dupes:
                raise DuplicateNameError("option", dupes[0], where)
            return cls(task=fields["task"], options=tuple(overrides))
        if not isinstance(value, str) or not value:
            raise ConfigParseError(f"{where} must be a task name or a {{task, options}} mapping")
        return cls(task=value)


def parse_dependencies(value: Any, where: str) -> tuple[Dependency, ...]:
    if value is None:
        return ()
    if isinstance(value, list):
        return tuple(Dependency.parse(item, f"{where}[{i}]") for i, item in enumerate(value))
    return (Dependency.parse(value, where),)


@dataclass(frozen=True)
class Task:
    """
    A named unit of work.

    Execution order for one instance: `pre` dependencies, this task's `run`
    commands, its `finally` commands, then `post` dependencies.
    """

    name: str
    usage: str = ""
    description: str = ""
    private: bool = False
    """Private tasks can only run as dependencies."""

    options: tuple[Option, ...] = ()
    when: When = ()
    pre: tuple[Dependency, ...] = ()
    run: CommandList = ()
    post: tuple[Dependency, ...] = ()
    finally_: CommandList = ()
    """Commands that run after `run` once it has started, even if it failed."""

    @classmethod
    def parse(cls, name: str, value: Any) -> Task:
        where = f"task '{name}'"
        fields = decode_fields(value, TASK_FIELDS, where)
        task = cls(
            name=name,
            usage=scalar_text(fields.get("usage")),
            description=scalar_text(fields.get("description")),
            private=parse_bool(fields.get("private"), f"{where}.private"),
            options=parse_options(fields.get("options"), where),
            when=parse_when(fields.get("when"), f"{where} when"),
            pre=parse_dependencies(fields.get("pre"), f"{where} pre"),
            run=parse_command_list(fields.get("run"), f"{where} run"),
            post=parse_dependencies(fields.get("post"), f"{where} post"),
            finally_=parse_command_list(fields.get("finally"), f"{where} finally"),
        )
        logger.debug(
            f"Parsed task '{name}' ({len(task.options)} options, {len(task.pre)} pre, "
            f"{len(task.run)} commands, {len(task.post)} post)"
        )
        return task

    @property
    def dependencies(self) -> tuple[Dependency, ...]:
        return self.pre + self.post

    def option(self, name: str) -> Option | None:
        for option in self.options:
            if option.name == name:
                return option
        return None
