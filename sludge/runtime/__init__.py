from __future__ import annotations

from typing import Dict, Mapping, Type

from ..errors import UndefinedMember, UnsupportedMemberAccess
from ..values import NULL, BuiltinImpl, BuiltinValue, DictValue, ListValue, SetValue, Value
from . import dicts, lists, sets
from .context import RuntimeContext, check_arity, check_min_arity, expect_callback

# receiver type -> method name -> native operation
CAPABILITIES: Mapping[Type[Value], Mapping[str, BuiltinImpl]] = {
    ListValue: lists.LIST_METHODS,
    SetValue: sets.SET_METHODS,
    DictValue: dicts.DICT_METHODS,
}

CONSTRUCTORS: Mapping[str, BuiltinImpl] = {
    "list": lists.new_list,
    "set": sets.new_set,
    "dict": dicts.new_dict,
}


def bind_member(receiver: Value, name: str) -> BuiltinValue:
    """Look `name` up in the receiver's capability table and bind it."""
    methods = CAPABILITIES.get(type(receiver))
    if methods is None:
        raise UnsupportedMemberAccess(
            f"member access not supported: type '{receiver.typename}' has no members"
        )
    impl = methods.get(name)
    if impl is None:
        raise UndefinedMember(f"unknown member '{name}' on type {receiver.typename}")
    return BuiltinValue(name=name, receiver=receiver, impl=impl)


def constructor_values() -> Dict[str, BuiltinValue]:
    return {name: BuiltinValue(name=name, receiver=NULL, impl=impl) for name, impl in CONSTRUCTORS.items()}


__all__ = [
    "RuntimeContext",
    "CAPABILITIES",
    "CONSTRUCTORS",
    "bind_member",
    "check_arity",
    "check_min_arity",
    "constructor_values",
    "expect_callback",
]
