"""
Example: Logging Configuration for chore

Library modules only create loggers under the `chore` namespace. This example
shows how an application opts in to console logging, file logging, custom
formats and propagation control. The CLI's --debug flag does the equivalent
of setup_logging(level="DEBUG", format="simple").
"""

import asyncio
import logging

from chore import (
    disable_logging,
    get_log_file_path,
    parse_config,
    run_task,
    setup_logging,
)
from chore.ordered_map import load_ordered

config = parse_config(load_ordered("tasks: {test: {run: echo 'Hello from chore!'}}"))


async def main():
    # Example 1: Basic console + file logging
    print("=== Example 1: Console + File Logging ===")
    setup_logging(level="DEBUG", file=True)
    await run_task(config, "test")
    print(f"Log file: {get_log_file_path()}\n")

    # Example 2: Custom format
    print("=== Example 2: Custom Format ===")
    setup_logging(level="DEBUG", format_string="[%(levelname)s] %(name)s: %(message)s")
    await run_task(config, "test")

    # Example 3: Prevent double-logging (if you have root configured)
    print("\n=== Example 3: With propagate=False ===")
    logging.basicConfig(level=logging.DEBUG, format="ROOT: %(levelname)s - %(name)s - %(message)s")
    setup_logging(level="INFO", format="detailed", propagate=False)
    await run_task(config, "test")

    # Example 4: Silence it again
    print("\n=== Example 4: Disabled ===")
    disable_logging()
    await run_task(config, "test")


if __name__ == "__main__":
    asyncio.run(main())
