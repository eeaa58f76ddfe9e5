from __future__ import annotations

from sludge.ast import (
    AssignStmt,
    Attr,
    Binary,
    Block,
    Call,
    ExprStmt,
    ForStmt,
    IfStmt,
    LetStmt,
    Literal,
    PrintStmt,
    ReturnStmt,
    WhileStmt,
    to_dict,
)
from sludge.parser import parse_program


def test_declaration_assignment_and_print() -> None:
    prog = parse_program("let x = 1\nx = 2\nprint(x, 3)\nprint()\n")
    let_stmt, assign, show, empty = prog.statements
    assert isinstance(let_stmt, LetStmt) and let_stmt.name == "x"
    assert isinstance(assign, AssignStmt) and assign.name == "x"
    assert isinstance(show, PrintStmt) and len(show.values) == 2
    assert isinstance(empty, PrintStmt) and empty.values == []


def test_if_else_if_chain_nests_in_block() -> None:
    prog = parse_program(
        """
if (a == 1) {
    print(1)
} else if (a == 2) {
    print(2)
} else {
    print(3)
}
"""
    )
    (stmt,) = prog.statements
    assert isinstance(stmt, IfStmt)
    assert isinstance(stmt.else_block, Block)
    (nested,) = stmt.else_block.statements
    assert isinstance(nested, IfStmt)
    assert isinstance(nested.else_block, Block)
    assert isinstance(nested.else_block.statements[0], PrintStmt)


def test_if_without_else() -> None:
    (stmt,) = parse_program("if (true) { print(1) }").statements
    assert isinstance(stmt, IfStmt)
    assert stmt.else_block is None


def test_while_statement() -> None:
    (stmt,) = parse_program("while (i < 3) { i = i + 1 }").statements
    assert isinstance(stmt, WhileStmt)
    assert isinstance(stmt.condition, Binary)
    assert isinstance(stmt.body, Block)
    assert isinstance(stmt.body.statements[0], AssignStmt)


def test_for_statement_with_all_clauses() -> None:
    (stmt,) = parse_program("for (let i = 0; i < 10; i = i + 1) { print(i) }").statements
    assert isinstance(stmt, ForStmt)
    assert isinstance(stmt.init, LetStmt)
    assert isinstance(stmt.condition, Binary)
    assert isinstance(stmt.update, AssignStmt)
    assert isinstance(stmt.body, Block)


def test_for_statement_with_empty_clauses() -> None:
    (stmt,) = parse_program("for (;;) { return 1 }").statements
    assert isinstance(stmt, ForStmt)
    assert stmt.init is None
    assert stmt.condition is None
    assert stmt.update is None
    assert isinstance(stmt.body.statements[0], ReturnStmt)


def test_for_update_may_be_expression() -> None:
    (stmt,) = parse_program("for (; xs.length() < 3; xs.push(1)) { }").statements
    assert stmt.init is None
    assert isinstance(stmt.update, ExprStmt)
    assert isinstance(stmt.update.value, Call)


def test_expression_statement() -> None:
    (stmt,) = parse_program("xs.push(1)").statements
    assert isinstance(stmt, ExprStmt)
    assert isinstance(stmt.value, Call)
    assert isinstance(stmt.value.func, Attr)


def test_statement_locations() -> None:
    prog = parse_program("let x = 1\n\nprint(x)")
    assert prog.statements[0].loc.line == 1
    assert prog.statements[1].loc.line == 3


def test_to_dict_names_nodes() -> None:
    data = to_dict(parse_program("let x = 1"))
    assert data["node"] == "Program"
    let_stmt = data["statements"][0]
    assert let_stmt["node"] == "LetStmt"
    assert let_stmt["name"] == "x"
    assert let_stmt["value"] == {"node": "Literal", "loc": [1, 9], "value": 1}
    assert let_stmt["loc"] == [1, 1]


def test_literal_values() -> None:
    prog = parse_program('print(1, "s", true, false)')
    values = [v.value for v in prog.statements[0].values]
    assert all(isinstance(v, Literal) for v in prog.statements[0].values)
    assert values == [1, "s", True, False]
