from __future__ import annotations

from typing import Dict, Sequence

from ..errors import TypeMismatch
from ..values import NULL, BoolValue, BuiltinImpl, IntValue, SetValue, Value, to_hashable
from .context import RuntimeContext, check_arity


def new_set(ctx: RuntimeContext, receiver: Value, args: Sequence[Value]) -> Value:
    return SetValue(dict.fromkeys(to_hashable(arg) for arg in args))


def _other_set(name: str, args: Sequence[Value]) -> SetValue:
    check_arity(name, args, 1)
    other = args[0]
    if not isinstance(other, SetValue):
        raise TypeMismatch(f"{name}: argument must be a set, got {other} of type {other.typename}")
    return other


def _has(ctx: RuntimeContext, receiver: SetValue, args: Sequence[Value]) -> Value:
    check_arity("has", args, 1)
    return BoolValue(to_hashable(args[0]) in receiver.members)


def _union(ctx: RuntimeContext, receiver: SetValue, args: Sequence[Value]) -> Value:
    other = _other_set("union", args)
    members = dict(receiver.members)
    members.update(other.members)
    return SetValue(members)


def _intersection(ctx: RuntimeContext, receiver: SetValue, args: Sequence[Value]) -> Value:
    other = _other_set("intersection", args)
    return SetValue({key: None for key in receiver.members if key in other.members})


def _difference(ctx: RuntimeContext, receiver: SetValue, args: Sequence[Value]) -> Value:
    other = _other_set("difference", args)
    return SetValue({key: None for key in receiver.members if key not in other.members})


def _add(ctx: RuntimeContext, receiver: SetValue, args: Sequence[Value]) -> Value:
    check_arity("add", args, 1)
    receiver.members[to_hashable(args[0])] = None
    return NULL


def _remove(ctx: RuntimeContext, receiver: SetValue, args: Sequence[Value]) -> Value:
    check_arity("remove", args, 1)
    receiver.members.pop(to_hashable(args[0]), None)
    return NULL


def _length(ctx: RuntimeContext, receiver: SetValue, args: Sequence[Value]) -> Value:
    check_arity("length", args, 0)
    return IntValue(len(receiver.members))


SET_METHODS: Dict[str, BuiltinImpl] = {
    "has": _has,
    "union": _union,
    "intersection": _intersection,
    "difference": _difference,
    "add": _add,
    "remove": _remove,
    "length": _length,
}
