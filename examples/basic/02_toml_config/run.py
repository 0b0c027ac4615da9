"""
02_toml_config/run.py - Loading tasks from TOML

This example demonstrates:
- Loading chore.toml (the format follows the file suffix)
- Global options shared by every task
- pre/post dependencies and the resulting plan order
- Private tasks that can only run as dependencies

Try it:
    python examples/basic/02_toml_config/run.py
    PROFILE=release python examples/basic/02_toml_config/run.py
"""
# ruff: noqa: T201

import asyncio
from pathlib import Path

from chore import UI, CommandExecutor, TaskRunner, Verbosity, build_plan, load_config


async def main():
    config = load_config(Path(__file__).parent / "chore.toml")
    print(f"Public tasks: {', '.join(config.public_task_names())}")

    plan = build_plan(config, "build")
    for instance in plan:
        print(f"  #{instance.index} {instance.describe()} (profile={instance.values['profile']})")

    # Verbose output also announces each task as it starts
    executor = CommandExecutor(UI(verbosity=Verbosity.VERBOSE))
    await TaskRunner(executor).run(plan)


if __name__ == "__main__":
    asyncio.run(main())
