from __future__ import annotations

import io

import pytest

from sludge.errors import TypeMismatch
from sludge.interp import Interpreter
from sludge.parser import parse_program
from sludge.values import NULL, IntValue, StrValue


def test_conditionals(run) -> None:
    out = run(
        """
        let a = 100

        if (a < 200) {
            print("1")
        }

        if (a == 1) {
            print("2")
        }

        if (a == 50) {
            print("wrong-branch")
        } else if (a == 100) {
            print("3")
        } else {
            print("also-wrong")
        }

        if (a < 200) {
            if (a > 50) {
                print("4")
            } else {
                print("wrong-nested")
            }
        }

        if (false) {
            print("wrong branch")
        } else {
            print("5")
        }
        """
    )
    assert out == "1\n3\n4\n5\n"


def test_return_short_circuits_loops_and_branches(run) -> None:
    out = run(
        """
        let f = fn() {
            for (let i = 0; i < 10; i = i + 1) {
                if (i > 3) {
                    return "should happen"
                }
                print(i)
            }
            return "should not happen"
        }

        let g = fn() {
            let i = 0
            while (i < 10) {
                print(i)
                if (i > 3) {
                    return "should happen"
                }
                i = i + 1
            }
            return "should not happen"
        }

        let isGreaterThanTen = fn(a) {
            if (a > 10) {
                return "is greater than 10"
            } else if (a == 10) {
                return "is not greater than 10, but is 10"
            } else {
                if (a == -10) {
                    return "is not greater than 10, but is -10"
                }
            }
            return "is not greater than 10"
        }

        print(f())
        print(g())
        print(isGreaterThanTen(1))
        print(isGreaterThanTen(10))
        print(isGreaterThanTen(11))
        print(isGreaterThanTen(-10))
        """
    )
    assert out.splitlines() == [
        "0",
        "1",
        "2",
        "3",
        "should happen",
        "0",
        "1",
        "2",
        "3",
        "4",
        "should happen",
        "is not greater than 10",
        "is not greater than 10, but is 10",
        "is greater than 10",
        "is not greater than 10, but is -10",
    ]


def test_while_loop(run) -> None:
    out = run(
        """
        let i = 0
        let total = 0
        while (i < 5) {
            total = total + i
            i = i + 1
        }
        print(total)
        """
    )
    assert out == "10\n"


def test_for_without_condition_runs_until_return(run) -> None:
    out = run(
        """
        let f = fn() {
            for (let i = 0; ; i = i + 1) {
                if (i == 3) {
                    return i
                }
            }
        }
        print(f())
        """
    )
    assert out == "3\n"


def test_return_skips_for_update(run) -> None:
    out = run(
        """
        let log = list()
        let f = fn() {
            for (let i = 0; i < 5; log.push(i)) {
                return "done"
            }
        }
        print(f(), log.length())
        """
    )
    assert out == "done 0\n"


def test_for_body_gets_fresh_scope_each_iteration(run) -> None:
    out = run(
        """
        let fns = list()
        for (let i = 0; i < 3; i = i + 1) {
            let captured = i
            fns.push(fn() { return captured })
        }
        print(fns.map(fn(f) { return f() }))
        """
    )
    assert out == "list(0, 1, 2)\n"


@pytest.mark.parametrize(
    "source",
    [
        "if (1) { }",
        'while ("yes") { }',
        "for (; 0; ) { }",
    ],
)
def test_conditions_must_be_boolean(run, source: str) -> None:
    with pytest.raises(TypeMismatch):
        run(source)


def test_block_expression_yields_null(run) -> None:
    assert run('let x = { print("in") }\nprint(x)') == "in\nNULL\n"


def test_top_level_return_ends_program() -> None:
    out = io.StringIO()
    result = Interpreter(stdout=out).run_program(parse_program("print(1)\nreturn 42\nprint(2)"))
    assert out.getvalue() == "1\n"
    assert result == IntValue(42)


def test_program_without_return_yields_null() -> None:
    out = io.StringIO()
    assert Interpreter(stdout=out).run_program(parse_program("let x = 1")) is NULL


def test_run_statement_against_live_scope() -> None:
    out = io.StringIO()
    interp = Interpreter(stdout=out)
    let_stmt, expr_stmt, print_stmt = parse_program('let x = "a"\nx + "b"\nprint(x)').statements
    assert interp.run_statement(let_stmt) is NULL
    assert interp.run_statement(expr_stmt) == StrValue("ab")
    assert interp.run_statement(print_stmt) is NULL
    assert out.getvalue() == "a\n"


def test_print_with_no_arguments_emits_empty_line(run) -> None:
    assert run("print()") == "\n"
