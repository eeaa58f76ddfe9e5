from __future__ import annotations

import io
import textwrap

import pytest

from sludge.interp import Interpreter
from sludge.parser import parse_program


@pytest.fixture
def run():
    """
    Execute a sludge program and return everything it printed.

    Source is dedented so tests can indent programs inline.
    """

    def _run(source: str) -> str:
        out = io.StringIO()
        Interpreter(stdout=out).run_program(parse_program(textwrap.dedent(source)))
        return out.getvalue()

    return _run
