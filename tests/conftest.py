import textwrap
from pathlib import Path

import pytest

from tinyjs.interpreter import run_program


EXAMPLES = Path(__file__).resolve().parent.parent / 'examples'


@pytest.fixture
def example_source():
    def _read(name: str) -> str:
        with open(EXAMPLES / name, 'r', encoding='utf-8') as f:
            return f.read()
    return _read


@pytest.fixture
def run_source(capsys):
    """Run a program and return the lines it printed."""
    def _run(source: str):
        run_program(textwrap.dedent(source))
        return capsys.readouterr().out.splitlines()
    return _run
