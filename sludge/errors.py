from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Dict, Optional

from .ast import Located


@dataclass(eq=False)
class SludgeError(Exception):
    """
    Base of every error the parser and evaluator raise.

    Each subclass pins a stable `reason_code`; `loc` is filled in by whoever
    first knows where in the source the failure happened.
    """

    reason_code: ClassVar[str] = "error"

    message: str
    loc: Optional[Located] = None

    def __str__(self) -> str:
        return self.format_human()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "reason_code": self.reason_code,
            "message": self.message,
            "line": self.loc.line if self.loc is not None else None,
            "column": self.loc.column if self.loc is not None else None,
        }

    def format_human(self) -> str:
        parts = [f"[{self.reason_code}] {self.message}"]
        if self.loc is not None:
            parts.append(f"(line {self.loc.line}, column {self.loc.column})")
        return " ".join(parts)


@dataclass(eq=False)
class ParseError(SludgeError):
    reason_code: ClassVar[str] = "syntax-error"

    # source excerpt with a caret under the offending column
    context: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        out = super().to_dict()
        out["context"] = self.context
        return out

    def format_human(self) -> str:
        text = super().format_human()
        if self.context:
            text = f"{text}\n{self.context.rstrip()}"
        return text


class EvaluationError(SludgeError):
    reason_code: ClassVar[str] = "evaluation-error"


class UndefinedVariable(EvaluationError):
    reason_code: ClassVar[str] = "undefined-variable"


class UndefinedMember(EvaluationError):
    reason_code: ClassVar[str] = "undefined-member"


class UnsupportedMemberAccess(EvaluationError):
    reason_code: ClassVar[str] = "unsupported-member-access"


class ArityMismatch(EvaluationError):
    reason_code: ClassVar[str] = "arity-mismatch"


class TypeMismatch(EvaluationError):
    reason_code: ClassVar[str] = "type-error"


class ArithmeticFault(TypeMismatch):
    """Division or modulo by zero, negative exponent, 32-bit overflow."""

    reason_code: ClassVar[str] = "arithmetic-fault"


class NotCallable(EvaluationError):
    reason_code: ClassVar[str] = "not-callable"


class MissingReturn(EvaluationError):
    reason_code: ClassVar[str] = "missing-return"


class InvalidKey(EvaluationError):
    reason_code: ClassVar[str] = "invalid-key"


class IndexOutOfRange(EvaluationError):
    reason_code: ClassVar[str] = "index-out-of-range"


class RecursionLimitExceeded(EvaluationError):
    reason_code: ClassVar[str] = "recursion-limit"


__all__ = [
    "SludgeError",
    "ParseError",
    "EvaluationError",
    "UndefinedVariable",
    "UndefinedMember",
    "UnsupportedMemberAccess",
    "ArityMismatch",
    "TypeMismatch",
    "ArithmeticFault",
    "NotCallable",
    "MissingReturn",
    "InvalidKey",
    "IndexOutOfRange",
    "RecursionLimitExceeded",
]
