# tests/test_interpolate.py
from pathlib import Path

import pytest

from chore.exceptions import InterpolationError
from chore.interpolate import builtin_values, interpolate, placeholders


def test_interpolate_substitutes_values():
    assert interpolate("go build -o ${out}/${name}", {"out": "dist", "name": "app"}) == (
        "go build -o dist/app"
    )


def test_interpolate_allows_whitespace_inside_braces():
    assert interpolate("echo ${ name }", {"name": "x"}) == "echo x"


def test_double_dollar_escapes():
    assert interpolate("echo $${HOME} $$PATH", {}) == "echo ${HOME} $PATH"


def test_unresolved_placeholder_names_task_and_placeholder():
    with pytest.raises(InterpolationError) as excinfo:
        interpolate("echo ${missing}", {}, task_name="build")

    assert excinfo.value.placeholder == "missing"
    assert excinfo.value.task_name == "build"
    assert "missing" in str(excinfo.value)
    assert "build" in str(excinfo.value)


def test_text_without_placeholders_is_unchanged():
    assert interpolate("echo $HOME {not} $", {}) == "echo $HOME {not} $"


def test_placeholders_in_order():
    assert placeholders("${a} $${b} ${chore.root} ${a}") == ["a", "chore.root", "a"]


def test_builtin_values(tmp_path: Path):
    values = builtin_values(tmp_path, "lint", cwd="/work")

    assert values == {"chore.root": str(tmp_path), "chore.cwd": "/work", "chore.task": "lint"}
