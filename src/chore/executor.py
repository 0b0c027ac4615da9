# chore/executor.py
"""
CommandExecutor - runs one resolved Command as a local shell subprocess.

Executes commands with:
- An announcement of the command's print text before it starts
- Live output (the child inherits stdout/stderr)
- Failure reporting with the process exit description ("exit status 1")
- Graceful cancellation (SIGTERM → SIGKILL) when the awaiting task is cancelled
"""

from __future__ import annotations

import asyncio
import logging
import signal
from collections.abc import Mapping
from pathlib import Path

from .command import Command, get_shell
from .exceptions import CommandFailedError
from .ui import UI

logger = logging.getLogger(__name__)


def describe_exit(returncode: int) -> str:
    """Describe a process exit the way shells and `wait` do."""
    if returncode >= 0:
        return f"exit status {returncode}"
    try:
        name = signal.Signals(-returncode).name
    except ValueError:
        name = str(-returncode)
    return f"killed by signal {name}"


class CommandExecutor:
    """
    Executes commands one at a time, blocking the caller until the child exits.

    Features:
    - Shell selection through SHELL (see get_shell)
    - Working directory resolved at invocation time
    - Dry-run mode: announce only, never spawn
    - Cancellation terminates the running child before propagating
    """

    def __init__(
        self,
        ui: UI | None = None,
        *,
        dry_run: bool = False,
        environ: Mapping[str, str] | None = None,
        cancel_grace_period: float = 3.0,
    ):
        """
        Initialize the executor.

        Args:
            ui: Output used for announcements (a default UI on stderr if omitted)
            dry_run: If True, announce commands without running them
            environ: Environment for shell selection and the child; None inherits os.environ
            cancel_grace_period: Seconds to wait for SIGTERM before SIGKILL
        """
        self.ui = ui or UI()
        self.dry_run = dry_run
        self._environ = dict(environ) if environ is not None else None
        self._cancel_grace_period = cancel_grace_period
        self._process: asyncio.subprocess.Process | None = None

        logger.debug(
            f"Initialized CommandExecutor (dry_run={dry_run}, "
            f"cancel_grace_period={cancel_grace_period}s)"
        )

    async def execute(self, command: Command, root: str | Path | None = None) -> None:
        """
        Announce and run a single command.

        Args:
            command: The fully interpolated command
            root: Directory relative `dir` values are resolved against

        Raises:
            CommandFailedError: If the child exits non-zero or cannot be started
        """
        if not command.do:
            logger.debug("Skipping command with empty 'do'")
            return

        self.ui.print_command(command.print)

        if self.dry_run:
            logger.debug(f"Dry run, not executing: {command.do}")
            return

        shell = get_shell(self._environ)
        cwd = command.resolve_dir(root)
        logger.debug(f"Launching {shell} -c {command.do!r} (cwd={cwd or '<inherited>'})")

        try:
            process = await asyncio.create_subprocess_exec(
                shell,
                "-c",
                command.do,
                cwd=cwd,
                env=self._environ,
            )
        except OSError as e:
            error = CommandFailedError(str(e))
            self.ui.print_command_error(error)
            raise error from e

        self._process = process
        try:
            returncode = await process.wait()
        except asyncio.CancelledError:
            logger.debug(f"Execution of {command.do!r} was cancelled")
            await self._terminate(process)
            raise
        finally:
            self._process = None

        if returncode != 0:
            error = CommandFailedError(describe_exit(returncode), returncode)
            logger.debug(f"Command {command.do!r} failed: {error}")
            self.ui.print_command_error(error)
            raise error

        logger.debug(f"Command {command.do!r} completed successfully")

    async def _terminate(self, process: asyncio.subprocess.Process) -> None:
        """
        Stop a child: SIGTERM, wait for the grace period, then SIGKILL.
        """
        if process.returncode is not None:
            return
        try:
            logger.debug(f"Sending SIGTERM to pid {process.pid}")
            process.terminate()
            try:
                await asyncio.wait_for(process.wait(), timeout=self._cancel_grace_period)
                return
            except asyncio.TimeoutError:
                logger.warning(f"Process {process.pid} didn't terminate, sending SIGKILL")
            process.kill()
            await process.wait()
        except ProcessLookupError:
            # Already dead
            pass

    @property
    def is_running(self) -> bool:
        return self._process is not None

    def __repr__(self) -> str:
        return (
            f"CommandExecutor(dry_run={self.dry_run}, "
            f"cancel_grace_period={self._cancel_grace_period}s)"
        )
