from __future__ import annotations

from typing import Dict, Sequence

from ..errors import IndexOutOfRange, TypeMismatch
from ..values import (
    FALSE,
    NULL,
    TRUE,
    BuiltinImpl,
    IntValue,
    ListValue,
    StrValue,
    Value,
    binary_op,
    expect_bool,
)
from .context import RuntimeContext, check_arity, check_min_arity, expect_callback


def new_list(ctx: RuntimeContext, receiver: Value, args: Sequence[Value]) -> Value:
    return ListValue(list(args))


def _join(ctx: RuntimeContext, receiver: ListValue, args: Sequence[Value]) -> Value:
    check_arity("join", args, 1)
    separator = str(args[0])
    return StrValue(separator.join(str(value) for value in receiver.elements))


def _length(ctx: RuntimeContext, receiver: ListValue, args: Sequence[Value]) -> Value:
    check_arity("length", args, 0)
    return IntValue(len(receiver.elements))


def _at(ctx: RuntimeContext, receiver: ListValue, args: Sequence[Value]) -> Value:
    check_arity("at", args, 1)
    index = args[0]
    if not isinstance(index, IntValue):
        raise TypeMismatch(f"at: index must be int, got {index} of type {index.typename}")
    if index.value < 0:
        raise IndexOutOfRange(f"at: index must be non-negative, got {index.value}")
    if index.value >= len(receiver.elements):
        raise IndexOutOfRange(f"at: index {index.value} out of bounds (len = {len(receiver.elements)})")
    return receiver.elements[index.value]


def _pop(ctx: RuntimeContext, receiver: ListValue, args: Sequence[Value]) -> Value:
    check_arity("pop", args, 0)
    if not receiver.elements:
        raise IndexOutOfRange("pop: cannot pop from an empty list")
    return receiver.elements.pop()


def _push(ctx: RuntimeContext, receiver: ListValue, args: Sequence[Value]) -> Value:
    check_min_arity("push", args, 1)
    receiver.elements.extend(args)
    return IntValue(len(receiver.elements))


def _map(ctx: RuntimeContext, receiver: ListValue, args: Sequence[Value]) -> Value:
    func = expect_callback("map", args)
    return ListValue([ctx.call_callback("map", func, item) for item in list(receiver.elements)])


def _filter(ctx: RuntimeContext, receiver: ListValue, args: Sequence[Value]) -> Value:
    func = expect_callback("filter", args)
    kept = []
    for item in list(receiver.elements):
        result = ctx.call_callback("filter", func, item)
        if expect_bool(result, "filter: callback result"):
            kept.append(item)
    return ListValue(kept)


def _all(ctx: RuntimeContext, receiver: ListValue, args: Sequence[Value]) -> Value:
    func = expect_callback("all", args)
    for item in list(receiver.elements):
        if not expect_bool(ctx.call_callback("all", func, item), "all: callback result"):
            return FALSE
    return TRUE


def _any(ctx: RuntimeContext, receiver: ListValue, args: Sequence[Value]) -> Value:
    func = expect_callback("any", args)
    for item in list(receiver.elements):
        if expect_bool(ctx.call_callback("any", func, item), "any: callback result"):
            return TRUE
    return FALSE


def _sum(ctx: RuntimeContext, receiver: ListValue, args: Sequence[Value]) -> Value:
    check_arity("sum", args, 0)
    if not receiver.elements:
        return NULL
    total = receiver.elements[0]
    for item in receiver.elements[1:]:
        total = binary_op("+", total, item)
    return total


LIST_METHODS: Dict[str, BuiltinImpl] = {
    "join": _join,
    "length": _length,
    "at": _at,
    "pop": _pop,
    "push": _push,
    "map": _map,
    "filter": _filter,
    "all": _all,
    "any": _any,
    "sum": _sum,
}
