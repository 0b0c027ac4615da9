# chore/cli.py
"""
Command-line entry point.

    chore [-f FILE] [-q | -v] [-n] [-l] [TASK [task options...]]

Task options are generated from the target task's scope (global options plus
its own), e.g. `chore build --target release -j 4 --no-cache`.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from collections.abc import Sequence
from typing import TextIO

from . import __version__
from .config import Config
from .exceptions import ChoreError, ConfigValidationError, ExecutionError
from .executor import CommandExecutor
from .load_config import CONFIG_FILENAMES, find_config, load_config
from .logging_config import setup_logging
from .plan import build_plan
from .runner import TaskRunner
from .ui import UI, Verbosity

logger = logging.getLogger(__name__)

EXIT_FAILURE = 1
EXIT_USAGE = 2
EXIT_INTERRUPTED = 130


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="chore",
        description="Run tasks declared in chore.yml",
    )
    parser.add_argument("-f", "--file", help="configuration file (default: search upwards for chore.yml)")
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-q", "--quiet", action="store_true", help="only print errors")
    verbosity.add_argument("-v", "--verbose", action="store_true", help="print task names and skips")
    parser.add_argument(
        "-n", "--dry-run", action="store_true", help="print commands without running them"
    )
    parser.add_argument("-l", "--list", action="store_true", help="list available tasks")
    parser.add_argument("--debug", action="store_true", help="enable debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("task", nargs="?", help="task to run")
    parser.add_argument("args", nargs=argparse.REMAINDER, help="task options")
    return parser


def build_task_parser(config: Config, task_name: str) -> argparse.ArgumentParser:
    """Parser for the options visible to one task."""
    task = config.task(task_name)
    parser = argparse.ArgumentParser(
        prog=f"chore {task_name}",
        description=task.description or task.usage or None,
    )
    for option in config.scope(task):
        if option.private:
            continue
        names = [f"--{option.flag}"]
        if option.short:
            names.insert(0, f"-{option.short}")
        if option.is_boolean:
            parser.add_argument(
                *names, dest=option.name, action="store_const", const="true", help=option.usage
            )
            parser.add_argument(
                f"--no-{option.flag}", dest=option.name, action="store_const", const="false"
            )
        else:
            parser.add_argument(*names, dest=option.name, metavar="VALUE", help=option.usage)
    parser.set_defaults(**{option.name: None for option in config.scope(task)})
    return parser


def parse_task_flags(config: Config, task_name: str, args: Sequence[str]) -> dict[str, str]:
    """Turn task arguments into {option name: value} for the options that were given."""
    namespace = build_task_parser(config, task_name).parse_args(list(args))
    return {name: value for name, value in vars(namespace).items() if value is not None}


def list_tasks(config: Config, out: TextIO) -> None:
    names = config.public_task_names()
    if not names:
        out.write("No tasks defined.\n")
        return
    width = max(len(name) for name in names)
    out.write("Tasks:\n")
    for name in names:
        usage = config.tasks[name].usage
        out.write(f"  {name.ljust(width)}  {usage}".rstrip() + "\n")


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    if args.debug:
        setup_logging(level="DEBUG", format="simple")

    if args.quiet:
        verbosity = Verbosity.QUIET
    elif args.verbose:
        verbosity = Verbosity.VERBOSE
    else:
        verbosity = Verbosity.NORMAL
    ui = UI(verbosity=verbosity)

    try:
        path = args.file or find_config()
        if path is None:
            ui.print_error(f"no configuration file found ({', '.join(CONFIG_FILENAMES)})")
            return EXIT_USAGE
        config = load_config(path)

        if args.list or not args.task:
            list_tasks(config, sys.stdout)
            return 0

        flags = parse_task_flags(config, args.task, args.args)
        plan = build_plan(config, args.task, flags)

        runner = TaskRunner(CommandExecutor(ui, dry_run=args.dry_run))
        asyncio.run(runner.run(plan))
    except ConfigValidationError as e:
        ui.print_error(e)
        return EXIT_USAGE
    except ExecutionError as e:
        logger.debug(f"Task failed: {e!r}")
        ui.print_error(e)
        return EXIT_FAILURE
    except ChoreError as e:
        ui.print_error(e)
        return EXIT_FAILURE
    except OSError as e:
        ui.print_error(e)
        return EXIT_USAGE
    except KeyboardInterrupt:
        ui.print_error("interrupted")
        return EXIT_INTERRUPTED

    return 0
