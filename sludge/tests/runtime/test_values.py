from __future__ import annotations

import pytest

from sludge.errors import ArithmeticFault, InvalidKey, TypeMismatch
from sludge.values import (
    FALSE,
    NULL,
    TRUE,
    BoolValue,
    DictValue,
    IntValue,
    ListValue,
    SetValue,
    StrValue,
    TupleValue,
    binary_op,
    format_value,
    from_python,
    to_hashable,
    unary_op,
    values_equal,
)


def test_format_nested_values() -> None:
    value = ListValue([IntValue(1), StrValue("two"), TupleValue((TRUE, NULL)), ListValue([])])
    assert format_value(value) == "list(1, two, tuple(true, NULL), list())"
    assert format_value(DictValue({StrValue("k"): SetValue({IntValue(1): None})})) == "dict((k, set(1)))"


def test_from_python_maps_literals() -> None:
    assert from_python(True) is TRUE
    assert from_python(False) is FALSE
    assert from_python(7) == IntValue(7)
    assert from_python("s") == StrValue("s")


def test_hashable_conversion() -> None:
    for scalar in (NULL, IntValue(1), TRUE, StrValue("x")):
        assert to_hashable(scalar) is scalar
    for compound in (ListValue(), SetValue(), DictValue(), TupleValue((IntValue(1),))):
        with pytest.raises(InvalidKey):
            to_hashable(compound)


def test_int_and_bool_are_distinct_keys() -> None:
    members = {IntValue(1): None, BoolValue(True): None, IntValue(0): None, FALSE: None}
    assert len(members) == 4


def test_values_equal() -> None:
    assert values_equal(NULL, NULL)
    assert values_equal(IntValue(3), IntValue(3))
    assert not values_equal(IntValue(1), TRUE)
    shared = ListValue([IntValue(1)])
    assert not values_equal(shared, shared)


def test_compound_values_are_unhashable() -> None:
    with pytest.raises(TypeError):
        hash(ListValue())
    with pytest.raises(TypeError):
        hash(DictValue())


@pytest.mark.parametrize(
    "op, left, right, expected",
    [
        ("+", IntValue(2), IntValue(3), IntValue(5)),
        ("-", IntValue(2), IntValue(3), IntValue(-1)),
        ("*", IntValue(-4), IntValue(3), IntValue(-12)),
        ("/", IntValue(-9), IntValue(4), IntValue(-2)),
        ("%", IntValue(-9), IntValue(4), IntValue(-1)),
        ("^", IntValue(-3), IntValue(3), IntValue(-27)),
        ("+", StrValue("a"), StrValue("b"), StrValue("ab")),
        ("<", IntValue(1), IntValue(2), TRUE),
        (">=", StrValue("a"), StrValue("b"), FALSE),
        ("==", NULL, NULL, TRUE),
        ("!=", IntValue(1), StrValue("1"), TRUE),
    ],
)
def test_binary_op(op: str, left, right, expected) -> None:
    assert binary_op(op, left, right) == expected


def test_min_int_division_overflows() -> None:
    with pytest.raises(ArithmeticFault):
        binary_op("/", IntValue(-(2**31)), IntValue(-1))
    assert binary_op("%", IntValue(-(2**31)), IntValue(-1)) == IntValue(0)


def test_unary_op() -> None:
    assert unary_op("-", IntValue(5)) == IntValue(-5)
    assert unary_op("!", FALSE) == TRUE
    with pytest.raises(TypeMismatch):
        unary_op("!", NULL)
    with pytest.raises(ArithmeticFault):
        unary_op("-", IntValue(-(2**31)))
