from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from .ast import ExprStmt, to_dict
from .errors import EvaluationError, ParseError, SludgeError
from .interp import Interpreter
from .parser import parse_program
from .values import NullValue, format_value

logger = logging.getLogger(__name__)

PROMPT = ">> "


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="sludge", description="Run sludge programs")
    sub = p.add_subparsers(dest="cmd", required=True)

    run = sub.add_parser("run", help="Parse and execute a .sludge file")
    run.add_argument(
        "file",
        type=Path,
        nargs="?",
        default=Path("main.sludge"),
        help="Program to run (default: ./main.sludge)",
    )
    run.add_argument("--dump-ast", action="store_true", help="Print the parsed AST as JSON before running")
    run.add_argument("--json", action="store_true", help="Report errors as machine-readable JSON")
    run.add_argument(
        "--recursion-limit",
        type=int,
        default=None,
        help="Raise the host recursion limit for deeply recursive programs",
    )
    run.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    repl = sub.add_parser("repl", help="Interactive read-eval-print loop")
    repl.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return p


def _report(err: SludgeError, as_json: bool) -> None:
    if as_json:
        print(json.dumps(err.to_dict(), sort_keys=True, separators=(",", ":")), file=sys.stderr)
    else:
        print(err.format_human(), file=sys.stderr)


def _run(args: argparse.Namespace) -> int:
    path: Path = args.file
    try:
        source = path.read_text()
    except OSError as err:
        print(f"error: failed to read program file '{path}': {err.strerror or err}", file=sys.stderr)
        return 2
    try:
        program = parse_program(source)
    except ParseError as err:
        _report(err, args.json)
        return 2
    if args.dump_ast:
        print(json.dumps(to_dict(program), indent=2))
    if args.recursion_limit is not None:
        sys.setrecursionlimit(args.recursion_limit)
    try:
        Interpreter(stdout=sys.stdout).run_program(program)
    except EvaluationError as err:
        _report(err, args.json)
        return 1
    return 0


def _repl() -> int:
    interpreter = Interpreter(stdout=sys.stdout)
    while True:
        sys.stdout.write(PROMPT)
        sys.stdout.flush()
        line = sys.stdin.readline()
        if not line:
            sys.stdout.write("\n")
            return 0
        if line.strip() == "exit":
            return 0
        if not line.strip():
            continue
        try:
            program = parse_program(line)
            for stmt in program.statements:
                value = interpreter.run_statement(stmt)
                if isinstance(stmt, ExprStmt) and not isinstance(value, NullValue):
                    print(format_value(value))
        except SludgeError as err:
            logger.debug("repl error: %r", err)
            print(err.format_human(), file=sys.stderr)


def main(argv: list[str] | None = None) -> int:
    p = _build_parser()
    args = p.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    if args.cmd == "run":
        return _run(args)
    if args.cmd == "repl":
        return _repl()
    p.error(f"unknown command {args.cmd}")
    return 2


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
