from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from typing import Dict, Iterator, Optional, Sequence

from . import ast
from .errors import (
    ArityMismatch,
    EvaluationError,
    MissingReturn,
    NotCallable,
    RecursionLimitExceeded,
    UndefinedVariable,
)
from .parser import parse_program
from .runtime import RuntimeContext, bind_member, constructor_values
from .values import (
    NULL,
    BoolValue,
    BuiltinValue,
    FunctionValue,
    TupleValue,
    Value,
    binary_op,
    expect_bool,
    format_value,
    from_python,
    unary_op,
)

logger = logging.getLogger(__name__)


class ReturnSignal(Exception):
    def __init__(self, value: Value) -> None:
        self.value = value


class Environment:
    """
    One frame of the lexical scope chain.

    Frames hold a reference to their parent, never a copy, so later writes to
    an outer frame are seen by every frame (and closure) created beneath it.
    """

    def __init__(self, parent: Environment | None = None) -> None:
        self.parent = parent
        self.values: Dict[str, Value] = {}

    @classmethod
    def root(cls) -> Environment:
        env = cls()
        for name, builtin in constructor_values().items():
            env.declare(name, builtin)
        return env

    def branch(self) -> Environment:
        return Environment(parent=self)

    def declare(self, name: str, value: Value) -> Optional[Value]:
        previous = self.values.get(name)
        self.values[name] = value
        return previous

    def set(self, name: str, value: Value) -> None:
        env: Environment | None = self
        while env is not None:
            if name in env.values:
                env.values[name] = value
                return
            env = env.parent
        raise UndefinedVariable(f"undefined variable '{name}'")

    def get(self, name: str) -> Value:
        env: Environment | None = self
        while env is not None:
            if name in env.values:
                return env.values[name]
            env = env.parent
        raise UndefinedVariable(f"undefined variable '{name}'")


@contextmanager
def _top_level() -> Iterator[None]:
    try:
        yield
    except RecursionError:
        raise RecursionLimitExceeded("maximum recursion depth exceeded") from None


class Interpreter:
    def __init__(self, stdout=None, scope: Environment | None = None) -> None:
        self.stdout = stdout or sys.stdout
        self.runtime_ctx = RuntimeContext(self.stdout, self)
        self.global_env = scope if scope is not None else Environment.root()

    def run_program(self, program: ast.Program) -> Value:
        logger.debug("running program (%d statements)", len(program.statements))
        with _top_level():
            try:
                for stmt in program.statements:
                    self._exec_stmt(stmt, self.global_env)
            except ReturnSignal as signal:
                logger.debug("program returned %s at top level", format_value(signal.value))
                return signal.value
        logger.debug("program finished")
        return NULL

    def run_statement(self, stmt: ast.Stmt) -> Value:
        """Execute one statement against the live root scope."""
        with _top_level():
            try:
                return self._exec_stmt(stmt, self.global_env)
            except ReturnSignal as signal:
                return signal.value

    def evaluate(self, expr: ast.Expr, scope: Environment | None = None) -> Value:
        with _top_level():
            try:
                return self._eval_expr(expr, scope if scope is not None else self.global_env)
            except ReturnSignal as signal:
                return signal.value

    def call_function(self, func: FunctionValue, args: Sequence[Value], construct: str = "function") -> Value:
        if len(args) != len(func.params):
            raise ArityMismatch(f"{construct} expected {len(func.params)} argument(s), got {len(args)}")
        scope = func.scope.branch()
        for name, value in zip(func.params, args):
            scope.declare(name, value)
        try:
            result = self._eval_expr(func.body, scope)
        except ReturnSignal as signal:
            return signal.value
        raise MissingReturn(
            f"{construct} must `return` a value (got {format_value(result)} of type {result.typename})"
        )

    def _eval_block(self, block: ast.Block, env: Environment) -> Value:
        scope = env.branch()
        for stmt in block.statements:
            self._exec_stmt(stmt, scope)
        return NULL

    def _exec_stmt(self, stmt: ast.Stmt, env: Environment) -> Value:
        try:
            if isinstance(stmt, ast.ExprStmt):
                return self._eval_expr(stmt.value, env)
            if isinstance(stmt, ast.LetStmt):
                env.declare(stmt.name, self._eval_expr(stmt.value, env))
                return NULL
            if isinstance(stmt, ast.AssignStmt):
                env.set(stmt.name, self._eval_expr(stmt.value, env))
                return NULL
            if isinstance(stmt, ast.PrintStmt):
                parts = [format_value(self._eval_expr(value, env)) for value in stmt.values]
                self.runtime_ctx.writeln(" ".join(parts))
                return NULL
            if isinstance(stmt, ast.ReturnStmt):
                raise ReturnSignal(self._eval_expr(stmt.value, env))
            if isinstance(stmt, ast.IfStmt):
                if expect_bool(self._eval_expr(stmt.condition, env), "if condition"):
                    self._eval_block(stmt.then_block, env)
                elif stmt.else_block is not None:
                    self._eval_block(stmt.else_block, env)
                return NULL
            if isinstance(stmt, ast.WhileStmt):
                while expect_bool(self._eval_expr(stmt.condition, env), "while condition"):
                    self._eval_expr(stmt.body, env)
                return NULL
            if isinstance(stmt, ast.ForStmt):
                self._exec_for(stmt, env)
                return NULL
        except EvaluationError as err:
            if err.loc is None:
                err.loc = stmt.loc
            raise
        raise RuntimeError(f"Unsupported statement {stmt}")

    def _exec_for(self, stmt: ast.ForStmt, env: Environment) -> None:
        scope = env.branch()
        if stmt.init is not None:
            self._exec_stmt(stmt.init, scope)
        while True:
            if stmt.condition is not None:
                if not expect_bool(self._eval_expr(stmt.condition, scope), "for condition"):
                    break
            self._eval_expr(stmt.body, scope)
            if stmt.update is not None:
                self._exec_stmt(stmt.update, scope)

    def _eval_expr(self, expr: ast.Expr, env: Environment) -> Value:
        try:
            if isinstance(expr, ast.Literal):
                return from_python(expr.value)
            if isinstance(expr, ast.Name):
                return env.get(expr.ident)
            if isinstance(expr, ast.Binary):
                return self._eval_binary(expr, env)
            if isinstance(expr, ast.Call):
                func = self._eval_expr(expr.func, env)
                args = [self._eval_expr(arg, env) for arg in expr.args]
                return self._invoke(func, args)
            if isinstance(expr, ast.Attr):
                return bind_member(self._eval_expr(expr.value, env), expr.attr)
            if isinstance(expr, ast.Unary):
                return unary_op(expr.op, self._eval_expr(expr.operand, env))
            if isinstance(expr, ast.Block):
                return self._eval_block(expr, env)
            if isinstance(expr, ast.FunctionLiteral):
                return FunctionValue(params=list(expr.params), body=expr.body, scope=env)
            if isinstance(expr, ast.TupleLiteral):
                return TupleValue(tuple(self._eval_expr(elem, env) for elem in expr.elements))
        except EvaluationError as err:
            if err.loc is None:
                err.loc = expr.loc
            raise
        raise RuntimeError(f"Unsupported expression {expr}")

    def _eval_binary(self, expr: ast.Binary, env: Environment) -> Value:
        op = expr.op
        if op in ("&&", "||"):
            left = expect_bool(self._eval_expr(expr.left, env), f"left operand of '{op}'")
            if op == "&&" and not left:
                return BoolValue(False)
            if op == "||" and left:
                return BoolValue(True)
            return BoolValue(expect_bool(self._eval_expr(expr.right, env), f"right operand of '{op}'"))
        left_value = self._eval_expr(expr.left, env)
        right_value = self._eval_expr(expr.right, env)
        return binary_op(op, left_value, right_value)

    def _invoke(self, func: Value, args: Sequence[Value]) -> Value:
        if isinstance(func, FunctionValue):
            return self.call_function(func, args)
        if isinstance(func, BuiltinValue):
            return func.impl(self.runtime_ctx, func.receiver, args)
        raise NotCallable(f"call target is not callable (got type {func.typename})")


def run_program(program: ast.Program, stdout=None) -> Value:
    return Interpreter(stdout=stdout).run_program(program)


def run_source(source: str, stdout=None) -> Value:
    return run_program(parse_program(source), stdout=stdout)
