# tests/test_executor.py
import asyncio
import io
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from chore.command import Command
from chore.exceptions import CommandFailedError
from chore.executor import CommandExecutor, describe_exit
from chore.ui import UI


def expected_output(*calls):
    """Render what a UI writes for the given (method, arg) calls."""
    buf = io.StringIO()
    ui = UI(stream=buf)
    for method, arg in calls:
        getattr(ui, method)(arg)
    return buf.getvalue()


@pytest.mark.asyncio
async def test_execute_success_announces_command(executor, ui_stream):
    await executor.execute(Command(do="exit 0"))

    assert ui_stream.getvalue() == expected_output(("print_command", "exit 0"))


@pytest.mark.asyncio
async def test_execute_failure_announces_error(executor, ui_stream):
    with pytest.raises(CommandFailedError) as excinfo:
        await executor.execute(Command(do="exit 1"))

    assert str(excinfo.value) == "exit status 1"
    assert excinfo.value.returncode == 1
    assert ui_stream.getvalue() == expected_output(
        ("print_command", "exit 1"),
        ("print_command_error", CommandFailedError("exit status 1")),
    )


@pytest.mark.asyncio
async def test_execute_announces_print_text(executor, ui_stream):
    await executor.execute(Command(do="true", print="doing nothing"))

    assert ui_stream.getvalue() == expected_output(("print_command", "doing nothing"))


@pytest.mark.asyncio
async def test_empty_do_is_a_noop(executor, ui_stream):
    with patch("asyncio.create_subprocess_exec") as spawn:
        await executor.execute(Command(do=""))

    spawn.assert_not_called()
    assert ui_stream.getvalue() == ""


@pytest.mark.asyncio
async def test_dry_run_announces_without_spawning(ui, ui_stream):
    executor = CommandExecutor(ui, dry_run=True)

    with patch("asyncio.create_subprocess_exec") as spawn:
        await executor.execute(Command(do="rm -rf /nowhere"))

    spawn.assert_not_called()
    assert "rm -rf /nowhere" in ui_stream.getvalue()


@pytest.mark.asyncio
async def test_execute_invokes_shell_with_dir(ui, tmp_path: Path):
    executor = CommandExecutor(ui, environ={"SHELL": "/my/custom/sh"})
    proc = AsyncMock()
    proc.wait = AsyncMock(return_value=0)
    proc.returncode = 0

    with patch("asyncio.create_subprocess_exec", return_value=proc) as spawn:
        await executor.execute(Command(do="echo hello world", dir=".."), root=tmp_path / "sub")

    spawn.assert_called_once()
    args, kwargs = spawn.call_args
    assert args == ("/my/custom/sh", "-c", "echo hello world")
    assert kwargs["cwd"] == str(tmp_path.resolve())
    assert kwargs["env"] == {"SHELL": "/my/custom/sh"}


@pytest.mark.asyncio
async def test_execute_runs_in_directory(executor, tmp_path: Path):
    (tmp_path / "sub").mkdir()

    await executor.execute(Command(do="pwd > where.txt", dir="sub"), root=tmp_path)

    written = (tmp_path / "sub" / "where.txt").read_text().strip()
    assert Path(written).resolve() == (tmp_path / "sub").resolve()


@pytest.mark.asyncio
async def test_start_failure_is_reported(ui, ui_stream):
    executor = CommandExecutor(ui, environ={"SHELL": "/definitely/not/a/shell"})

    with pytest.raises(CommandFailedError) as excinfo:
        await executor.execute(Command(do="true"))

    assert excinfo.value.returncode is None
    lines = ui_stream.getvalue().splitlines()
    assert lines[0] == "chore $ true"
    assert lines[1].startswith("chore ✗ ")


@pytest.mark.asyncio
async def test_cancellation_terminates_child(executor):
    task = asyncio.create_task(executor.execute(Command(do="sleep 30")))
    for _ in range(50):
        await asyncio.sleep(0.05)
        if executor.is_running:
            break
    assert executor.is_running

    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await asyncio.wait_for(task, timeout=10)

    assert not executor.is_running


def test_describe_exit():
    assert describe_exit(0) == "exit status 0"
    assert describe_exit(2) == "exit status 2"
    assert describe_exit(-15) == "killed by signal SIGTERM"
