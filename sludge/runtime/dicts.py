from __future__ import annotations

from typing import Dict, Sequence

from ..errors import TypeMismatch
from ..values import NULL, BuiltinImpl, DictValue, IntValue, ListValue, TupleValue, Value, to_hashable
from .context import RuntimeContext, check_arity


def new_dict(ctx: RuntimeContext, receiver: Value, args: Sequence[Value]) -> Value:
    entries = {}
    for arg in args:
        if not isinstance(arg, TupleValue) or len(arg.elements) != 2:
            raise TypeMismatch(f"dict: each argument must be a (key, value) tuple, got {arg} of type {arg.typename}")
        key, value = arg.elements
        entries[to_hashable(key)] = value
    return DictValue(entries)


def _get(ctx: RuntimeContext, receiver: DictValue, args: Sequence[Value]) -> Value:
    check_arity("get", args, 1)
    return receiver.entries.get(to_hashable(args[0]), NULL)


def _set(ctx: RuntimeContext, receiver: DictValue, args: Sequence[Value]) -> Value:
    check_arity("set", args, 2)
    receiver.entries[to_hashable(args[0])] = args[1]
    return NULL


def _remove(ctx: RuntimeContext, receiver: DictValue, args: Sequence[Value]) -> Value:
    check_arity("remove", args, 1)
    return receiver.entries.pop(to_hashable(args[0]), NULL)


def _items(ctx: RuntimeContext, receiver: DictValue, args: Sequence[Value]) -> Value:
    check_arity("items", args, 0)
    return ListValue([TupleValue((key, value)) for key, value in receiver.entries.items()])


def _keys(ctx: RuntimeContext, receiver: DictValue, args: Sequence[Value]) -> Value:
    check_arity("keys", args, 0)
    return ListValue(list(receiver.entries))


def _values(ctx: RuntimeContext, receiver: DictValue, args: Sequence[Value]) -> Value:
    check_arity("values", args, 0)
    return ListValue(list(receiver.entries.values()))


def _length(ctx: RuntimeContext, receiver: DictValue, args: Sequence[Value]) -> Value:
    check_arity("length", args, 0)
    return IntValue(len(receiver.entries))


DICT_METHODS: Dict[str, BuiltinImpl] = {
    "get": _get,
    "set": _set,
    "remove": _remove,
    "items": _items,
    "keys": _keys,
    "values": _values,
    "length": _length,
}
