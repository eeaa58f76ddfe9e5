from __future__ import annotations

from dataclasses import dataclass, field, fields, is_dataclass
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class Located:
    line: int
    column: int


class Stmt:
    loc: Located


class Expr:
    loc: Located


@dataclass
class Block(Expr):
    """Brace-delimited statements; evaluates in a fresh child scope."""

    loc: Located
    statements: List[Stmt] = field(default_factory=list)


@dataclass
class LetStmt(Stmt):
    loc: Located
    name: str
    value: Expr


@dataclass
class AssignStmt(Stmt):
    loc: Located
    name: str
    value: Expr


@dataclass
class PrintStmt(Stmt):
    loc: Located
    values: List[Expr]


@dataclass
class ReturnStmt(Stmt):
    loc: Located
    value: Expr


@dataclass
class IfStmt(Stmt):
    loc: Located
    condition: Expr
    then_block: Block
    # `else if` is stored as a block holding a single IfStmt
    else_block: Optional[Block] = None


@dataclass
class WhileStmt(Stmt):
    loc: Located
    condition: Expr
    body: Expr


@dataclass
class ForStmt(Stmt):
    loc: Located
    init: Optional[Stmt]
    condition: Optional[Expr]
    update: Optional[Stmt]
    body: Expr


@dataclass
class ExprStmt(Stmt):
    loc: Located
    value: Expr


@dataclass
class Literal(Expr):
    """Integer, string or boolean literal."""

    loc: Located
    value: object


@dataclass
class Name(Expr):
    loc: Located
    ident: str


@dataclass
class TupleLiteral(Expr):
    loc: Located
    elements: List[Expr]


@dataclass
class Attr(Expr):
    loc: Located
    value: Expr
    attr: str


@dataclass
class Call(Expr):
    loc: Located
    func: Expr
    args: List[Expr]


@dataclass
class Binary(Expr):
    loc: Located
    op: str
    left: Expr
    right: Expr


@dataclass
class Unary(Expr):
    loc: Located
    op: str
    operand: Expr


@dataclass
class FunctionLiteral(Expr):
    loc: Located
    params: List[str]
    body: Expr


@dataclass
class Program:
    statements: List[Stmt]


def to_dict(node: Any) -> Any:
    """
    Convert an AST (or any fragment of it) into JSON-serialisable data.

    Every node becomes a dict whose "node" key names its class; locations
    collapse to [line, column].
    """
    if isinstance(node, Located):
        return [node.line, node.column]
    if is_dataclass(node) and not isinstance(node, type):
        out: Dict[str, Any] = {"node": type(node).__name__}
        for f in fields(node):
            out[f.name] = to_dict(getattr(node, f.name))
        return out
    if isinstance(node, list):
        return [to_dict(item) for item in node]
    return node
