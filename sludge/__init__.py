"""Sludge: a small scripting language with closures and list/set/dict built-ins."""

import logging

from .interp import Environment, Interpreter, run_program, run_source
from .parser import parse_expression, parse_program

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "Environment",
    "Interpreter",
    "parse_expression",
    "parse_program",
    "run_program",
    "run_source",
]
