# chore/plan.py
"""
Plan construction: dependency expansion, cycle detection, option resolution
and command interpolation.

Instances live in an arena (Plan.instances) and are addressed by index. An
instance's identity is its key, (task name, explicit overrides), so the same
task reached twice with identical arguments is placed once, while different
arguments produce distinct instances. Every configuration problem surfaces
here, before anything runs.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType

from .command import CommandList
from .condition import ConditionContext, current_os
from .config import Config
from .exceptions import DependencyCycleError, OptionValueError
from .interpolate import builtin_values, interpolate
from .task import Dependency, Task

logger = logging.getLogger(__name__)

InstanceKey = tuple[str, tuple[tuple[str, str], ...]]


def make_key(task_name: str, overrides: Mapping[str, str]) -> InstanceKey:
    return (task_name, tuple(sorted(overrides.items())))


@dataclass(frozen=True)
class TaskInstance:
    """One scheduled occurrence of a task, bound to its resolved option values."""

    index: int
    """Position in the plan."""

    task: Task

    overrides: tuple[tuple[str, str], ...]
    """Explicit overrides (CLI flags for the target, dependency arguments otherwise)."""

    values: Mapping[str, str]
    """Resolved option values, global options first, in declaration order."""

    run: CommandList
    """Interpolated `run` commands."""

    finally_: CommandList = ()
    """Interpolated `finally` commands."""

    requested_by: str | None = None
    """Task whose dependency edge scheduled this instance (None for the target)."""

    context: ConditionContext | None = None
    """Snapshot run conditions are evaluated against."""

    @property
    def name(self) -> str:
        return self.task.name

    @property
    def key(self) -> InstanceKey:
        return (self.task.name, self.overrides)

    def describe(self) -> str:
        if not self.overrides:
            return self.name
        args = ", ".join(f"{k}={v}" for k, v in self.overrides)
        return f"{self.name}({args})"


@dataclass
class Plan:
    """Ordered task instances for one invocation."""

    target: str
    root: Path
    instances: list[TaskInstance] = field(default_factory=list)

    def __iter__(self) -> Iterator[TaskInstance]:
        return iter(self.instances)

    def __len__(self) -> int:
        return len(self.instances)

    def __getitem__(self, index: int) -> TaskInstance:
        return self.instances[index]

    @property
    def names(self) -> list[str]:
        return [instance.name for instance in self.instances]

    def __repr__(self) -> str:
        return f"Plan(target='{self.target}', order={[i.describe() for i in self.instances]})"


class PlanBuilder:
    """
    Expands a target task into a Plan.

    Traversal is depth-first: `pre` dependencies, then the task itself, then
    `post` dependencies. A task name already on the traversal stack is a cycle.
    """

    def __init__(
        self,
        config: Config,
        flags: Mapping[str, str] | None = None,
        environ: Mapping[str, str] | None = None,
        *,
        cwd: str | Path | None = None,
        platform: str | None = None,
    ):
        self.config = config
        self.flags = dict(flags or {})
        self.environ: Mapping[str, str] = MappingProxyType(
            dict(os.environ if environ is None else environ)
        )
        self.cwd = Path(cwd) if cwd is not None else Path.cwd()
        self.platform = platform or current_os()

        self._global_names = {option.name for option in config.options}
        self._instances: list[TaskInstance] = []
        self._index: dict[InstanceKey, int] = {}

    def build(self, target: str, *, allow_private: bool = False) -> Plan:
        """
        Build the plan for `target`.

        Raises:
            TaskNotFoundError: If the target (or a dependency) does not exist
            DependencyCycleError: If dependencies form a cycle
            OptionValueError: On unknown flags or invalid option values
            InterpolationError: On an unresolved placeholder
        """
        task = self.config.task(target)
        if task.private and not allow_private:
            raise OptionValueError(f"task '{target}' is private and cannot be run directly")

        target_overrides = self._split_flags(task)
        logger.debug(f"Building plan for '{target}' (flags={self.flags})")

        self._expand(task.name, target_overrides, stack=[], requested_by=None)

        plan = Plan(target=target, root=self.config.root, instances=list(self._instances))
        logger.debug(f"Built {plan!r}")
        return plan

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #
    def _split_flags(self, task: Task) -> dict[str, str]:
        """Validate CLI flags and return those that bind the target's own options."""
        scope = {option.name: option for option in self.config.scope(task)}
        target_overrides: dict[str, str] = {}
        for name, value in self.flags.items():
            option = scope.get(name)
            if option is None:
                raise OptionValueError(f"unknown option '{name}' for task '{task.name}'")
            if option.private:
                raise OptionValueError(f"option '{name}' is private and cannot be set by a flag")
            if name not in self._global_names:
                target_overrides[name] = value
        return target_overrides

    def _expand(
        self,
        name: str,
        overrides: dict[str, str],
        stack: list[str],
        requested_by: str | None,
    ) -> int:
        if name in stack:
            cycle = stack[stack.index(name) :] + [name]
            raise DependencyCycleError(name, cycle)

        key = make_key(name, overrides)
        if key in self._index:
            logger.debug(f"Task '{name}' already scheduled with {dict(key[1])}, reusing")
            return self._index[key]

        task = self.config.task(name)
        stack.append(name)

        bindings = self._resolve_options(task, overrides)
        values = {option.name: bindings[option.name] for option in self.config.scope(task)}

        for dep in task.pre:
            self._expand(dep.task, self._edge_overrides(dep, task, bindings), stack, task.name)

        def substitute(text: str) -> str:
            return interpolate(text, bindings, task_name=task.name)

        instance = TaskInstance(
            index=len(self._instances),
            task=task,
            overrides=key[1],
            values=MappingProxyType(values),
            run=tuple(command.interpolate(substitute) for command in task.run),
            finally_=tuple(command.interpolate(substitute) for command in task.finally_),
            requested_by=requested_by,
            context=ConditionContext(
                values=MappingProxyType(dict(bindings)),
                environ=self.environ,
                platform=self.platform,
                root=self.config.root,
            ),
        )
        self._instances.append(instance)
        self._index[key] = instance.index
        logger.debug(f"Scheduled #{instance.index}: {instance.describe()}")

        for dep in task.post:
            self._expand(dep.task, self._edge_overrides(dep, task, bindings), stack, task.name)

        stack.pop()
        return instance.index

    def _resolve_options(self, task: Task, overrides: Mapping[str, str]) -> dict[str, str]:
        """
        Resolve every option in scope, in declaration order.

        Returns the interpolation bindings: built-ins plus every resolved option.
        """
        bindings = builtin_values(self.config.root, task.name, self.cwd)
        for option in self.config.scope(task):
            override = overrides.get(option.name)
            if override is None and option.name in self._global_names:
                override = self.flags.get(option.name)
            ctx = ConditionContext(
                values=MappingProxyType(dict(bindings)),
                environ=self.environ,
                platform=self.platform,
                root=self.config.root,
            )
            bindings[option.name] = option.resolve(
                override=override,
                environ=self.environ,
                bindings=bindings,
                ctx=ctx,
                scope=f"task '{task.name}'",
            )
        return bindings

    def _edge_overrides(self, dep: Dependency, task: Task, bindings: Mapping[str, str]) -> dict[str, str]:
        return {
            name: interpolate(value, bindings, task_name=task.name) for name, value in dep.options
        }


def build_plan(
    config: Config,
    target: str,
    flags: Mapping[str, str] | None = None,
    environ: Mapping[str, str] | None = None,
    *,
    cwd: str | Path | None = None,
    platform: str | None = None,
    allow_private: bool = False,
) -> Plan:
    """
    Resolve `target` into an ordered, fully interpolated Plan.

    Args:
        config: Parsed configuration
        target: Name of the task to run
        flags: Option values from the command line, keyed by option name
        environ: Environment for option bindings (os.environ by default)
        cwd: Value of ${chore.cwd} (the process working directory by default)
        platform: OS name for `os` conditions (the current OS by default)
        allow_private: Permit a private task as the target
    """
    builder = PlanBuilder(config, flags, environ, cwd=cwd, platform=platform)
    return builder.build(target, allow_private=allow_private)
