from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, ClassVar, Dict, List, Sequence, Tuple, Union

from .errors import ArithmeticFault, InvalidKey, TypeMismatch

if TYPE_CHECKING:  # pragma: no cover
    from . import ast
    from .interp import Environment
    from .runtime import RuntimeContext

INT_MIN = -(2**31)
INT_MAX = 2**31 - 1


class Value:
    typename: ClassVar[str] = "value"


@dataclass(frozen=True)
class NullValue(Value):
    typename: ClassVar[str] = "null"

    def __str__(self) -> str:
        return "NULL"


NULL = NullValue()


@dataclass(frozen=True)
class IntValue(Value):
    typename: ClassVar[str] = "int"

    value: int

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class BoolValue(Value):
    typename: ClassVar[str] = "boolean"

    value: bool

    def __str__(self) -> str:
        return "true" if self.value else "false"


TRUE = BoolValue(True)
FALSE = BoolValue(False)


@dataclass(frozen=True)
class StrValue(Value):
    typename: ClassVar[str] = "string"

    value: str

    def __str__(self) -> str:
        return self.value


# Values allowed as set members and dict keys. Their dataclass equality
# includes the class, so IntValue(1) and BoolValue(True) stay distinct.
Hashable = Union[NullValue, IntValue, BoolValue, StrValue]

HASHABLE_TYPES = (NullValue, IntValue, BoolValue, StrValue)


@dataclass(frozen=True, eq=False)
class TupleValue(Value):
    typename: ClassVar[str] = "tuple"

    elements: Tuple[Value, ...] = ()

    def __str__(self) -> str:
        return f"tuple({_join(self.elements)})"


@dataclass(eq=False)
class ListValue(Value):
    typename: ClassVar[str] = "list"

    elements: List[Value] = field(default_factory=list)

    __hash__ = None  # type: ignore[assignment]

    def __str__(self) -> str:
        return f"list({_join(self.elements)})"


@dataclass(eq=False)
class SetValue(Value):
    typename: ClassVar[str] = "set"

    # insertion ordered; only keys are meaningful
    members: Dict[Hashable, None] = field(default_factory=dict)

    __hash__ = None  # type: ignore[assignment]

    def __str__(self) -> str:
        return f"set({_join(self.members)})"


@dataclass(eq=False)
class DictValue(Value):
    typename: ClassVar[str] = "dict"

    entries: Dict[Hashable, Value] = field(default_factory=dict)

    __hash__ = None  # type: ignore[assignment]

    def __str__(self) -> str:
        pairs = ", ".join(f"({key}, {value})" for key, value in self.entries.items())
        return f"dict({pairs})"


@dataclass(eq=False)
class FunctionValue(Value):
    """A closure: parameters, body, and the scope it was defined in."""

    typename: ClassVar[str] = "function"

    params: List[str]
    body: "ast.Expr"
    scope: "Environment"

    def __str__(self) -> str:
        return f"fn({', '.join(self.params)})"


BuiltinImpl = Callable[["RuntimeContext", Value, Sequence[Value]], Value]


@dataclass(eq=False)
class BuiltinValue(Value):
    """A native operation, bound to the receiver it was looked up on."""

    typename: ClassVar[str] = "builtin"

    name: str
    receiver: Value
    impl: BuiltinImpl

    def __str__(self) -> str:
        return f"builtin({self.name})"


def _join(values) -> str:
    return ", ".join(str(value) for value in values)


def format_value(value: Value) -> str:
    return str(value)


def to_hashable(value: Value) -> Hashable:
    if isinstance(value, HASHABLE_TYPES):
        return value
    raise InvalidKey(f"value of type {value.typename} cannot be used as a key")


def from_python(value: object) -> Value:
    """Wrap a literal parsed from source (int, str, bool)."""
    if isinstance(value, bool):
        return TRUE if value else FALSE
    if isinstance(value, int):
        return IntValue(value)
    if isinstance(value, str):
        return StrValue(value)
    if value is None:
        return NULL
    raise TypeError(f"no sludge value for {type(value).__name__}")


def expect_bool(value: Value, what: str) -> bool:
    if not isinstance(value, BoolValue):
        raise TypeMismatch(f"{what} must be a boolean (got {value} of type {value.typename})")
    return value.value


def values_equal(left: Value, right: Value) -> bool:
    if isinstance(left, HASHABLE_TYPES) and isinstance(right, HASHABLE_TYPES):
        return left == right
    return False


def _checked(result: int, op: str) -> IntValue:
    if result < INT_MIN or result > INT_MAX:
        raise ArithmeticFault(f"integer overflow in '{op}'")
    return IntValue(result)


def _truncating_div(a: int, b: int) -> int:
    quotient = abs(a) // abs(b)
    if (a < 0) != (b < 0):
        quotient = -quotient
    return quotient


def _checked_pow(base: int, exp: int) -> IntValue:
    if exp < 0:
        raise ArithmeticFault("Negative exponents not supported")
    if abs(base) >= 2 and exp > 31:
        raise ArithmeticFault("integer overflow in '^'")
    return _checked(base**exp, "^")


def _type_error(op: str, left: Value, right: Value) -> TypeMismatch:
    return TypeMismatch(
        f"unsupported operand types for {op}: '{left.typename}' and '{right.typename}'"
    )


ORDERING = {
    "<": lambda a, b: a < b,
    "<=": lambda a, b: a <= b,
    ">": lambda a, b: a > b,
    ">=": lambda a, b: a >= b,
}


def binary_op(op: str, left: Value, right: Value) -> Value:
    """Apply a non-short-circuiting binary operator to two evaluated operands."""
    if op == "==":
        return BoolValue(values_equal(left, right))
    if op == "!=":
        return BoolValue(not values_equal(left, right))
    if op in ORDERING:
        if type(left) is type(right) and isinstance(left, (IntValue, BoolValue, StrValue)):
            return BoolValue(ORDERING[op](left.value, right.value))
        raise _type_error(op, left, right)
    if op == "+" and isinstance(left, StrValue) and isinstance(right, StrValue):
        return StrValue(left.value + right.value)
    if not (isinstance(left, IntValue) and isinstance(right, IntValue)):
        raise _type_error(op, left, right)
    a, b = left.value, right.value
    if op == "+":
        return _checked(a + b, op)
    if op == "-":
        return _checked(a - b, op)
    if op == "*":
        return _checked(a * b, op)
    if op == "/":
        if b == 0:
            raise ArithmeticFault("Division by zero")
        return _checked(_truncating_div(a, b), op)
    if op == "%":
        if b == 0:
            raise ArithmeticFault("Modulo by zero")
        return _checked(a - b * _truncating_div(a, b), op)
    if op == "^":
        return _checked_pow(a, b)
    raise ValueError(f"Unknown binary operator {op}")


def unary_op(op: str, operand: Value) -> Value:
    if op == "-":
        if not isinstance(operand, IntValue):
            raise TypeMismatch(f"unsupported operand type for unary -: '{operand.typename}'")
        return _checked(-operand.value, op)
    if op == "!":
        return BoolValue(not expect_bool(operand, "operand of '!'"))
    raise ValueError(f"Unknown unary operator {op}")
