"""
01_hello_world/run.py - Minimal chore example

This is the simplest possible chore example. It demonstrates:
- Loading chore.yml with load_config()
- Building a plan for one task with build_plan()
- Running the plan with TaskRunner

The same task runs from the shell with:
    cd examples/basic/01_hello_world && chore hello -w there

Try it:
    python examples/basic/01_hello_world/run.py
"""
# ruff: noqa: T201

import asyncio
from pathlib import Path

from chore import TaskRunner, build_plan, load_config


async def main():
    """Run the 'hello' task with an explicit option value."""

    # Step 1: Load the configuration next to this script
    config = load_config(Path(__file__).parent / "chore.yml")

    # Step 2: Resolve the task into an ordered plan
    # Flags are keyed by option name, exactly as on the command line
    plan = build_plan(config, "hello", {"who": "chore"})
    print(f"Plan: {plan.names}")

    # Step 3: Run it
    results = await TaskRunner().run(plan)

    # Step 4: Check the result
    for result in results:
        print(f"{result.task_name}: {result.state.value} in {result.duration_str}")


if __name__ == "__main__":
    asyncio.run(main())
