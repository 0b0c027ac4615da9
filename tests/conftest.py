# tests/conftest.py
import sys
import os
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'src')))

import io
import textwrap

import pytest

from chore.config import parse_config
from chore.executor import CommandExecutor
from chore.ordered_map import load_ordered
from chore.ui import UI, Verbosity


@pytest.fixture
def make_config(tmp_path):
    """
    Factory fixture: parse YAML text into a Config rooted at tmp_path.
    Use it like:
        config = make_config('''
            tasks:
              build:
                run: make
        ''')
    """
    def _make(text):
        return parse_config(load_ordered(textwrap.dedent(text)), root=tmp_path)

    return _make


@pytest.fixture
def sh_environ():
    """Process environment with the default POSIX shell selected."""
    return {**os.environ, "SHELL": "/bin/sh"}


@pytest.fixture
def ui_stream():
    return io.StringIO()


@pytest.fixture
def ui(ui_stream):
    return UI(stream=ui_stream, verbosity=Verbosity.VERBOSE)


@pytest.fixture
def executor(ui, sh_environ):
    return CommandExecutor(ui, environ=sh_environ, cancel_grace_period=1.0)
