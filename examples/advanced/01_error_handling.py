"""
01_error_handling.py - Configuration errors vs. task failures

This example demonstrates:
- Dependency cycles are reported before anything runs
- Unresolved ${placeholders} are reported before anything runs
- A failing command stops the plan (fail-fast) but `finally` still runs
- Skipped tasks (unmet `when` conditions) are not failures

Try it:
    python examples/advanced/01_error_handling.py
"""
# ruff: noqa: T201

import asyncio
import textwrap

from chore import (
    ConfigValidationError,
    DependencyCycleError,
    TaskFailedError,
    TaskRunner,
    build_plan,
    parse_config,
)
from chore.ordered_map import load_ordered

CONFIG = textwrap.dedent(
    """
    tasks:
      a: {pre: [b]}
      b: {pre: [a]}

      typo:
        options:
          name: {default: world}
        run: echo hello ${nmae}

      flaky:
        pre: [maybe]
        run: exit 3
        finally: echo cleaning up

      maybe:
        when: {os: plan9}
        run: echo never printed
    """
)


async def main():
    config = parse_config(load_ordered(CONFIG))

    # Step 1: Cycles are found while building the plan
    try:
        build_plan(config, "a")
    except DependencyCycleError as e:
        print(f"1. {e} (path: {e.cycle_path})")

    # Step 2: So are placeholders that name no option
    try:
        build_plan(config, "typo")
    except ConfigValidationError as e:
        print(f"2. {type(e).__name__}: {e}")

    # Step 3: A failing command fails its task; the error carries the exit status
    runner = TaskRunner()
    try:
        await runner.run(build_plan(config, "flaky"))
    except TaskFailedError as e:
        print(f"3. task '{e.task_name}' failed: {e} (returncode={e.returncode})")

    for result in runner.results:
        print(f"   {result.task_name}: {result.state.value} {result.skip_reason or ''}".rstrip())


if __name__ == "__main__":
    asyncio.run(main())
