# chore/runner.py
"""
TaskRunner - walks a Plan and drives each instance's commands through a
CommandExecutor.

Per instance, in plan order:
    pending -> evaluating -> (skipped | running) -> done | failed | cancelled

The first failed instance aborts the rest of the plan (fail-fast). Skipping
because a run condition is unmet is not an error. Cancellation (Ctrl-C)
propagates out of the executor after the child has been terminated. The
interrupted instance still runs its `finally` commands, is marked cancelled,
and no further instance is scheduled.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from pathlib import Path

from .condition import ConditionContext, first_unmet
from .config import Config
from .exceptions import CommandFailedError, TaskFailedError
from .executor import CommandExecutor
from .plan import Plan, TaskInstance, build_plan
from .run_result import InstanceResult

logger = logging.getLogger(__name__)


class TaskRunner:
    """Executes plans one instance at a time."""

    def __init__(self, executor: CommandExecutor | None = None):
        self.executor = executor or CommandExecutor()
        self.ui = self.executor.ui
        self.results: list[InstanceResult] = []

    async def run(self, plan: Plan) -> list[InstanceResult]:
        """
        Run every instance of `plan` in order.

        Returns:
            One InstanceResult per instance

        Raises:
            TaskFailedError: When an instance fails; remaining instances never run.
                The results gathered so far stay available on self.results.
        """
        self.results = []
        logger.debug(f"Running {plan!r}")

        for instance in plan:
            result = InstanceResult(index=instance.index, task_name=instance.name)
            self.results.append(result)
            await self._run_instance(instance, result, plan.root)

        logger.debug(f"Plan for '{plan.target}' completed ({len(self.results)} instances)")
        return self.results

    async def _run_instance(self, instance: TaskInstance, result: InstanceResult, root: Path) -> None:
        result.mark_evaluating()
        ctx = instance.context or ConditionContext(values=instance.values, root=root)
        reason = first_unmet(instance.task.when, ctx)
        if reason is not None:
            self.ui.print_skipped(instance.describe(), reason)
            result.mark_skipped(reason)
            return

        result.mark_running()
        self.ui.print_task(instance.describe())

        failure: CommandFailedError | None = None
        try:
            for command in instance.run:
                await self.executor.execute(command, root)
                result.commands_run += 1
        except CommandFailedError as e:
            failure = e
        except asyncio.CancelledError:
            logger.debug(f"Task instance #{instance.index} ('{instance.name}') interrupted")
            try:
                await self._run_finally(instance, root)
            finally:
                result.mark_cancelled()
            raise

        try:
            finally_failure = await self._run_finally(instance, root)
        except asyncio.CancelledError:
            result.mark_cancelled()
            raise
        failure = failure or finally_failure

        if failure is not None:
            result.mark_failed(failure)
            raise TaskFailedError(instance.name, failure) from failure

        result.mark_done()

    async def _run_finally(self, instance: TaskInstance, root: Path) -> CommandFailedError | None:
        """Run `finally` commands, stopping at the first failure, which is returned."""
        for command in instance.finally_:
            try:
                await self.executor.execute(command, root)
            except CommandFailedError as e:
                logger.debug(f"finally command of '{instance.name}' failed: {e}")
                return e
        return None


async def run_task(
    config: Config,
    target: str,
    flags: Mapping[str, str] | None = None,
    *,
    executor: CommandExecutor | None = None,
    environ: Mapping[str, str] | None = None,
) -> list[InstanceResult]:
    """
    Build the plan for `target` and run it.

    Configuration errors are raised before any command runs.
    """
    plan = build_plan(config, target, flags, environ)
    return await TaskRunner(executor).run(plan)
