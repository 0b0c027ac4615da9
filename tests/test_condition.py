# tests/test_condition.py
from pathlib import Path

import pytest

from chore.condition import ConditionContext, RunCondition, current_os, first_unmet, parse_when
from chore.exceptions import ConfigParseError
from chore.ordered_map import load_ordered


def ctx(values=None, environ=None, platform="linux", root=None):
    return ConditionContext(
        values=values or {},
        environ=environ or {},
        platform=platform,
        root=root or Path.cwd(),
    )


def test_equal_and_not_equal():
    cond = RunCondition.parse(load_ordered("{equal: {mode: [fast, faster]}, not-equal: {ci: 'true'}}"))

    assert cond.is_met(ctx({"mode": "fast", "ci": "false"}))
    assert not cond.is_met(ctx({"mode": "slow", "ci": "false"}))
    assert not cond.is_met(ctx({"mode": "fast", "ci": "true"}))
    assert cond.option_references == ["mode", "ci"]


def test_equal_compares_yaml_booleans_as_text():
    cond = RunCondition.parse(load_ordered("equal: {release: true}"))

    assert cond.is_met(ctx({"release": "true"}))
    assert not cond.is_met(ctx({"release": "false"}))


def test_environment_clause():
    cond = RunCondition.parse(load_ordered("environment: {CI: 'true', DEBUG: null}"))

    assert cond.is_met(ctx(environ={"CI": "true"}))
    assert not cond.is_met(ctx(environ={"CI": "true", "DEBUG": "1"}))
    assert not cond.is_met(ctx(environ={}))


def test_os_clause_accepts_aliases():
    cond = RunCondition.parse(load_ordered("os: [macos, linux]"))

    assert cond.os == ("darwin", "linux")
    assert cond.is_met(ctx(platform="darwin"))
    assert not cond.is_met(ctx(platform="windows"))


def test_exists_clauses(tmp_path: Path):
    (tmp_path / "go.mod").write_text("module x\n")
    present = RunCondition.parse(load_ordered("exists: go.mod"))
    absent = RunCondition.parse(load_ordered("not-exists: [dist]"))

    assert present.is_met(ctx(root=tmp_path))
    assert absent.is_met(ctx(root=tmp_path))

    (tmp_path / "dist").mkdir()
    assert not absent.is_met(ctx(root=tmp_path))


def test_first_unmet_reports_reason():
    conditions = parse_when(load_ordered("[{os: linux}, {equal: {mode: fast}}]"))

    assert first_unmet(conditions, ctx({"mode": "fast"})) is None
    reason = first_unmet(conditions, ctx({"mode": "slow"}))
    assert "mode" in reason and "slow" in reason


def test_parse_when_forms():
    assert parse_when(None) == ()
    assert len(parse_when(load_ordered("os: linux"))) == 1

    with pytest.raises(ConfigParseError, match="unknown field 'command'"):
        parse_when(load_ordered("command: test -f x"))


def test_current_os():
    assert current_os("linux2") == "linux"
    assert current_os("win32") == "windows"
    assert current_os("darwin") == "darwin"
