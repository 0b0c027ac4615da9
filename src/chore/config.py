# chore/config.py
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .command import scalar_text
from .exceptions import (
    ConfigParseError,
    DuplicateNameError,
    OptionReferenceError,
    OptionValueError,
    TaskNotFoundError,
)
from .interpolate import BUILTINS
from .option import Option
from .ordered_map import as_map_slice, decode_fields, load_ordered, parse_ordered_map
from .task import Task, find_duplicates, parse_options

logger = logging.getLogger(__name__)

CONFIG_FIELDS = ("name", "usage", "options", "tasks")

_TASK_NAME = re.compile(r"^[A-Za-z0-9_][A-Za-z0-9_.:\-]*$")


@dataclass(frozen=True)
class Config:
    """
    Top-level configuration object returned by load_config() / parse_config().
    Contains everything needed to build a plan.
    """

    tasks: dict[str, Task]
    """Tasks in declaration order."""

    options: tuple[Option, ...] = ()
    """Global options, available to every task and resolved before task options."""

    name: str = ""
    usage: str = ""

    root: Path = field(default_factory=Path.cwd)
    """Directory containing the configuration file; relative `dir` values start here."""

    source: Path | None = None

    def task(self, name: str) -> Task:
        """
        Look up a task by name.

        Raises:
            TaskNotFoundError: If no task has that name
        """
        try:
            return self.tasks[name]
        except KeyError:
            raise TaskNotFoundError(name, self.public_task_names()) from None

    def public_task_names(self) -> list[str]:
        return [name for name, task in self.tasks.items() if not task.private]

    def scope(self, task: Task) -> tuple[Option, ...]:
        """All options visible to `task`, in resolution order."""
        return self.options + task.options


# ─────────────────────────────────────────────────────────────────────────────
# Parsing
# ─────────────────────────────────────────────────────────────────────────────
def parse_tasks(value: Any) -> dict[str, Task]:
    """
    Decode the task map through parse_ordered_map.

    Raises:
        DuplicateNameError: If a task name repeats
    """
    tasks: list[Task] = []

    def assign(name: str, text: str) -> None:
        if not _TASK_NAME.match(name):
            raise ConfigParseError(f"invalid task name '{name}'")
        tasks.append(Task.parse(name, load_ordered(text)))

    names = parse_ordered_map(as_map_slice(value, "tasks"), assign)
    dupes = find_duplicates(names)
    if dupes:
        raise DuplicateNameError("task", dupes[0])
    return {task.name: task for task in tasks}


def parse_config(document: Any, root: str | Path | None = None, source: Path | None = None) -> Config:
    """
    Build and validate a Config from a decoded document (MapSlice or dict).

    Raises:
        ConfigValidationError: If the configuration is invalid
    """
    fields = decode_fields(document, CONFIG_FIELDS, "configuration")

    config = Config(
        tasks=parse_tasks(fields.get("tasks")),
        options=parse_options(fields.get("options"), "global options"),
        name=scalar_text(fields.get("name")),
        usage=scalar_text(fields.get("usage")),
        root=Path(root).resolve() if root is not None else Path.cwd(),
        source=source,
    )
    validate_config(config)

    logger.debug(
        f"Loaded configuration with {len(config.tasks)} tasks and "
        f"{len(config.options)} global options (root={config.root})"
    )
    return config


# ─────────────────────────────────────────────────────────────────────────────
# Validation
# ─────────────────────────────────────────────────────────────────────────────
def _check_references(options: tuple[Option, ...], available: set[str], scope: str) -> None:
    """Each option may only reference built-ins and options declared before it."""
    known = set(available)
    for option in options:
        for ref in option.references:
            if ref not in known:
                raise OptionReferenceError(option.name, ref, scope)
        known.add(option.name)


def _check_flags(options: tuple[Option, ...], scope: str) -> None:
    flags = find_duplicates([o.flag for o in options])
    if flags:
        raise DuplicateNameError("flag", flags[0], scope)
    shorts = find_duplicates([o.short for o in options if o.short])
    if shorts:
        raise DuplicateNameError("short flag", shorts[0], scope)


def validate_config(config: Config) -> None:
    global_names = {option.name for option in config.options}

    _check_references(config.options, set(BUILTINS), "global options")
    _check_flags(config.options, "global options")

    for task in config.tasks.values():
        where = f"task '{task.name}'"

        for option in task.options:
            if option.name in global_names:
                raise DuplicateNameError("option", option.name, f"{where} (shadows a global option)")

        scope = config.scope(task)
        _check_references(task.options, set(BUILTINS) | global_names, where)
        _check_flags(scope, where)

        in_scope = {option.name for option in scope}
        for condition in task.when:
            for ref in condition.option_references:
                if ref not in in_scope:
                    raise OptionValueError(f"when clause of {where} references unknown option '{ref}'")

        for dep in task.dependencies:
            if dep.task not in config.tasks:
                raise TaskNotFoundError(dep.task)
            target_scope = {o.name for o in config.scope(config.tasks[dep.task])}
            for name, _ in dep.options:
                if name not in target_scope:
                    raise OptionValueError(
                        f"{where} passes unknown option '{name}' to task '{dep.task}'"
                    )
