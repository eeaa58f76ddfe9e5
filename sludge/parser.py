from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from lark import Lark, Token, Tree
from lark.exceptions import UnexpectedCharacters, UnexpectedInput, UnexpectedToken

from .ast import (
    AssignStmt,
    Attr,
    Binary,
    Block,
    Call,
    Expr,
    ExprStmt,
    ForStmt,
    FunctionLiteral,
    IfStmt,
    LetStmt,
    Literal,
    Located,
    Name,
    PrintStmt,
    Program,
    ReturnStmt,
    Stmt,
    TupleLiteral,
    Unary,
    WhileStmt,
)
from .errors import ParseError

logger = logging.getLogger(__name__)

_GRAMMAR_PATH = Path(__file__).with_name("grammar.lark")
_GRAMMAR_SRC = _GRAMMAR_PATH.read_text()

INT_MIN = -(2**31)
INT_MAX = 2**31 - 1

# token type -> (binding power, right associative)
BINARY_PRECEDENCE = {
    "OR": (1, False),
    "AND": (2, False),
    "EQ": (3, False),
    "NE": (3, False),
    "LE": (4, False),
    "GE": (4, False),
    "LT": (4, False),
    "GT": (4, False),
    "PLUS": (5, False),
    "MINUS": (5, False),
    "STAR": (6, False),
    "SLASH": (6, False),
    "PERCENT": (6, False),
    "POW": (7, True),
}

PREFIX_OPS = {"BANG": "!", "MINUS": "-"}


class TerminatorInserter:
    """
    Post-lexer turning newlines and ';' into _TERMINATOR tokens.

    A newline ends a statement only after a token that can end one, and only
    when the innermost open bracket is a brace (or nothing is open). The
    terminator is held back one token so `} else`, leading-dot method
    chains and a body brace after an `if (...)` style header can continue
    on the next line.
    """

    always_accept = ("NEWLINE", "SEMI")

    TERMINABLE = {
        "NAME",
        "INT",
        "STRING",
        "TRUE",
        "FALSE",
        "RPAR",
        "RBRACE",
    }

    CONTINUATION = {"ELSE", "DOT"}

    # keywords whose parenthesised header is followed by a body block
    HEADER_KEYWORDS = {"IF", "WHILE", "FOR", "FN"}

    def __init__(self) -> None:
        self._reset()

    def _reset(self) -> None:
        self.nesting: List[str] = []
        self.can_terminate = False
        self.last_type: Optional[str] = None
        self.closed_header = False

    def process(self, stream):
        self._reset()
        pending: Optional[Token] = None
        for token in stream:
            ttype = token.type
            if ttype == "NEWLINE":
                if pending is None and self._should_emit_terminator():
                    pending = token
                continue
            if ttype == "SEMI":
                pending = None
                yield Token.new_borrow_pos("_TERMINATOR", token.value, token)
                self.can_terminate = False
                continue
            if pending is not None:
                if not self._continues(ttype):
                    yield Token.new_borrow_pos("_TERMINATOR", pending.value, pending)
                pending = None
            yield token
            self._update_nesting(ttype)
            self.can_terminate = ttype in self.TERMINABLE
            self.last_type = ttype
        if pending is not None:
            yield Token.new_borrow_pos("_TERMINATOR", pending.value, pending)

    def _continues(self, ttype: str) -> bool:
        if ttype in self.CONTINUATION:
            return True
        return ttype == "LBRACE" and self.closed_header

    def _update_nesting(self, ttype: str) -> None:
        closed = None
        if ttype == "LPAR":
            self.nesting.append("header" if self.last_type in self.HEADER_KEYWORDS else "(")
        elif ttype == "LBRACE":
            self.nesting.append("{")
        elif ttype in ("RPAR", "RBRACE") and self.nesting:
            closed = self.nesting.pop()
        self.closed_header = closed == "header"

    def _should_emit_terminator(self) -> bool:
        if not self.can_terminate:
            return False
        return not self.nesting or self.nesting[-1] == "{"


_PARSER = Lark(
    _GRAMMAR_SRC,
    parser="lalr",
    lexer="basic",
    start=["program", "expr"],
    propagate_positions=True,
    maybe_placeholders=False,
    postlex=TerminatorInserter(),
)


def parse_program(source: str) -> Program:
    tree = _parse(source, "program")
    program = _build(_build_program, tree, source)
    logger.debug("parsed program with %d top-level statements", len(program.statements))
    return program


def parse_expression(source: str) -> Expr:
    """Parse a single expression fragment such as `1 + 2 * x`."""
    text = source.strip()
    tree = _parse(text, "expr")
    return _build(_build_expr, tree, text)


def _build(builder, tree: Tree, source: str):
    try:
        return builder(tree)
    except ParseError as err:
        if err.context is None and err.loc is not None:
            err.context = _excerpt(source, err.loc)
        raise


def _excerpt(source: str, loc: Located) -> Optional[str]:
    lines = source.splitlines()
    if not 0 < loc.line <= len(lines):
        return None
    line = lines[loc.line - 1]
    before = line[: max(loc.column - 1, 0)]
    return f"{line}\n{' ' * len(before.expandtabs())}^\n"


def _parse(source: str, start: str) -> Tree:
    try:
        return _PARSER.parse(source, start=start)
    except UnexpectedInput as err:
        raise _syntax_error(err, source) from None


def _syntax_error(err: UnexpectedInput, source: str) -> ParseError:
    if isinstance(err, UnexpectedCharacters):
        message = f"unexpected character {err.char!r}"
    elif isinstance(err, UnexpectedToken):
        message = f"unexpected {_describe_token(err.token)}"
    else:
        message = "unexpected end of input"
    loc = None
    context = None
    line = getattr(err, "line", -1)
    column = getattr(err, "column", -1)
    if isinstance(line, int) and line > 0:
        loc = Located(line=line, column=column)
        context = err.get_context(source)
    return ParseError(message, loc=loc, context=context)


def _describe_token(token: Token) -> str:
    if token.type == "$END":
        return "end of input"
    if token.type == "_TERMINATOR":
        return "end of statement"
    return f"token {token.value!r}"


def _build_program(tree: Tree) -> Program:
    statements = [_build_stmt(child) for child in tree.children if isinstance(child, Tree)]
    return Program(statements=statements)


def _build_block(tree: Tree) -> Block:
    statements = [_build_stmt(child) for child in tree.children if isinstance(child, Tree)]
    return Block(loc=_loc(tree), statements=statements)


def _build_stmt(tree: Tree) -> Stmt:
    kind = _name(tree)
    if kind == "let_stmt":
        return _build_let_stmt(tree)
    if kind == "assign_stmt":
        return _build_assign_stmt(tree)
    if kind == "print_stmt":
        values = [_build_expr(child) for child in tree.children if isinstance(child, Tree)]
        return PrintStmt(loc=_loc(tree), values=values)
    if kind == "return_stmt":
        return ReturnStmt(loc=_loc(tree), value=_build_expr(_only_tree(tree)))
    if kind == "if_stmt":
        return _build_if_stmt(tree)
    if kind == "while_stmt":
        cond, body = [child for child in tree.children if isinstance(child, Tree)]
        return WhileStmt(loc=_loc(tree), condition=_build_expr(cond), body=_build_block(body))
    if kind == "for_stmt":
        return _build_for_stmt(tree)
    if kind == "expr_stmt":
        return ExprStmt(loc=_loc(tree), value=_build_expr(_only_tree(tree)))
    raise ValueError(f"Unsupported statement node: {kind}")


def _build_let_stmt(tree: Tree) -> LetStmt:
    name_token = next(child for child in tree.children if isinstance(child, Token) and child.type == "NAME")
    return LetStmt(loc=_loc(tree), name=name_token.value, value=_build_expr(_only_tree(tree)))


def _build_assign_stmt(tree: Tree) -> AssignStmt:
    name_token = next(child for child in tree.children if isinstance(child, Token) and child.type == "NAME")
    return AssignStmt(loc=_loc(tree), name=name_token.value, value=_build_expr(_only_tree(tree)))


def _build_if_stmt(tree: Tree) -> IfStmt:
    parts = [child for child in tree.children if isinstance(child, Tree)]
    condition = _build_expr(parts[0])
    then_block = _build_block(parts[1])
    else_block: Optional[Block] = None
    if len(parts) > 2:
        else_node = parts[2]
        if _name(else_node) == "if_stmt":
            nested = _build_if_stmt(else_node)
            else_block = Block(loc=nested.loc, statements=[nested])
        else:
            else_block = _build_block(else_node)
    return IfStmt(loc=_loc(tree), condition=condition, then_block=then_block, else_block=else_block)


def _build_for_stmt(tree: Tree) -> ForStmt:
    init_node, cond_node, update_node, body_node = [child for child in tree.children if isinstance(child, Tree)]
    init = _build_stmt(init_node.children[0]) if init_node.children else None
    condition = _build_expr(cond_node.children[0]) if cond_node.children else None
    update = _build_stmt(update_node.children[0]) if update_node.children else None
    return ForStmt(
        loc=_loc(tree),
        init=init,
        condition=condition,
        update=update,
        body=_build_block(body_node),
    )


def _build_expr(tree: Tree) -> Expr:
    if _name(tree) != "expr":
        raise ValueError(f"Expected expr node, got {_name(tree)}")
    items = list(tree.children)
    expr, pos = _climb(items, 0, 1)
    if pos != len(items):
        raise ValueError("dangling operator in expression")
    return expr


def _climb(items: list, pos: int, min_prec: int) -> tuple[Expr, int]:
    """
    Fold the flat `operand (op operand)*` sequence starting at `pos`.

    Consumes operators binding at least as tightly as `min_prec`; returns the
    folded expression and the index of the first unconsumed item.
    """
    left = _build_operand(items[pos])
    pos += 1
    while pos < len(items):
        op_token = items[pos]
        prec, right_assoc = BINARY_PRECEDENCE[op_token.type]
        if prec < min_prec:
            break
        next_min = prec if right_assoc else prec + 1
        right, pos = _climb(items, pos + 1, next_min)
        left = Binary(loc=_loc_from_token(op_token), op=_op_text(op_token), left=left, right=right)
    return left, pos


def _op_text(token: Token) -> str:
    if token.type == "POW":
        return "^"
    return token.value


def _build_operand(tree: Tree) -> Expr:
    prefixes: List[Token] = []
    primary: Optional[Tree] = None
    suffixes: List[Tree] = []
    for child in tree.children:
        if isinstance(child, Token):
            prefixes.append(child)
        elif primary is None:
            primary = child
        else:
            suffixes.append(child)
    if primary is None:
        raise ValueError("operand missing primary expression")
    expr = _build_primary(primary)
    for suffix in suffixes:
        expr = _apply_postfix(expr, suffix)
    for token in reversed(prefixes):
        expr = Unary(loc=_loc_from_token(token), op=PREFIX_OPS[token.type], operand=expr)
    return expr


def _apply_postfix(expr: Expr, suffix: Tree) -> Expr:
    kind = _name(suffix)
    if kind == "call_suffix":
        args = [_build_expr(child) for child in suffix.children if isinstance(child, Tree)]
        return Call(loc=_loc(suffix), func=expr, args=args)
    if kind == "member_suffix":
        attr_token = next(token for token in suffix.children if isinstance(token, Token) and token.type == "NAME")
        return Attr(loc=_loc(suffix), value=expr, attr=attr_token.value)
    raise ValueError(f"Unexpected postfix child: {kind}")


def _build_primary(node: Tree) -> Expr:
    name = _name(node)
    if name == "int_lit":
        token = node.children[0]
        value = int(token.value)
        if value > INT_MAX:
            raise ParseError(
                f"integer literal {token.value} does not fit in 32 bits",
                loc=_loc_from_token(token),
            )
        return Literal(loc=_loc(node), value=value)
    if name == "str_lit":
        raw = node.children[0].value
        return Literal(loc=_loc(node), value=raw[1:-1])
    if name == "true_lit":
        return Literal(loc=_loc(node), value=True)
    if name == "false_lit":
        return Literal(loc=_loc(node), value=False)
    if name == "var":
        return Name(loc=_loc(node), ident=node.children[0].value)
    if name == "paren":
        return _build_expr(_only_tree(node))
    if name == "tuple_lit":
        elements = [_build_expr(child) for child in node.children if isinstance(child, Tree)]
        return TupleLiteral(loc=_loc(node), elements=elements)
    if name == "fn_lit":
        return _build_function(node)
    if name == "block":
        return _build_block(node)
    raise ValueError(f"Unsupported expression node: {name}")


def _build_function(tree: Tree) -> FunctionLiteral:
    params: List[str] = []
    body: Optional[Block] = None
    for child in tree.children:
        if not isinstance(child, Tree):
            continue
        if _name(child) == "params":
            params = [token.value for token in child.children if isinstance(token, Token)]
        elif _name(child) == "block":
            body = _build_block(child)
    if body is None:
        raise ValueError("function literal missing body")
    if len(set(params)) != len(params):
        raise ParseError("duplicate parameter name in function literal", loc=_loc(tree))
    return FunctionLiteral(loc=_loc(tree), params=params, body=body)


def _only_tree(tree: Tree) -> Tree:
    return next(child for child in tree.children if isinstance(child, Tree))


def _loc(tree: Tree) -> Located:
    meta = tree.meta
    return Located(line=getattr(meta, "line", 0), column=getattr(meta, "column", 0))


def _loc_from_token(token: Token) -> Located:
    return Located(line=token.line, column=token.column)


def _name(node: Tree | Token) -> str:
    if isinstance(node, Tree):
        data = node.data
        if isinstance(data, Token):
            return data.value
        return data
    if isinstance(node, Token):
        return node.type
    return str(node)
