from __future__ import annotations

import sys
from typing import TYPE_CHECKING, Sequence

from ..errors import ArityMismatch, TypeMismatch
from ..values import FunctionValue, Value

if TYPE_CHECKING:  # pragma: no cover
    from ..interp import Interpreter


class RuntimeContext:
    """What a native operation may touch: the print sink and the evaluator."""

    def __init__(self, stdout=None, interpreter: "Interpreter | None" = None) -> None:
        self.stdout = stdout or sys.stdout
        self.interpreter = interpreter

    def writeln(self, text: str) -> None:
        self.stdout.write(text + "\n")
        self.stdout.flush()

    def call_callback(self, name: str, func: FunctionValue, arg: Value) -> Value:
        if self.interpreter is None:
            raise RuntimeError(f"{name}: no interpreter bound to runtime context")
        return self.interpreter.call_function(func, [arg], construct=name)


def check_arity(name: str, args: Sequence[Value], expected: int) -> None:
    if len(args) != expected:
        raise ArityMismatch(f"{name}: expected {expected} argument(s), got {len(args)}")


def check_min_arity(name: str, args: Sequence[Value], minimum: int) -> None:
    if len(args) < minimum:
        raise ArityMismatch(f"{name}: expected at least {minimum} argument(s), got {len(args)}")


def expect_callback(name: str, args: Sequence[Value]) -> FunctionValue:
    check_arity(name, args, 1)
    func = args[0]
    if not isinstance(func, FunctionValue):
        raise TypeMismatch(f"{name}: first argument must be a function, got {func} of type {func.typename}")
    if len(func.params) != 1:
        raise ArityMismatch(f"{name}: function must accept exactly 1 parameter, got {len(func.params)}")
    return func
