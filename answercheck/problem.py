# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2018-2025 Stellan Östlund and Hampus Linander

"""
Value types passed through the answer checker.

A Problem is supplied by the storage layer, an AnswerShape is derived from it by
answercheck.shapes.classify and a ValidationResult is handed back to the caller.
None of them is mutated after construction.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union


class Reason(str, Enum):
    WRONG_SHAPE = "WRONG_SHAPE"
    ORIGINAL_RESTATED = "ORIGINAL_RESTATED"
    NOT_SIMPLIFIED = "NOT_SIMPLIFIED"
    OUT_OF_TOLERANCE = "OUT_OF_TOLERANCE"
    PARSE_ERROR = "PARSE_ERROR"


@dataclass(frozen=True)
class Scalar:
    text: str

    def display(self) -> str:
        return self.text


@dataclass(frozen=True)
class Expression:
    text: str

    def display(self) -> str:
        return self.text


Value = Union[Scalar, Expression]


@dataclass(frozen=True)
class UnorderedSet:
    values: Tuple[Value, ...]
    is_double_root: bool = False

    def display(self) -> str:
        if self.is_double_root:
            return self.values[0].display()
        return ", ".join(v.display() for v in self.values)


@dataclass(frozen=True)
class OrderedTuple:
    values: Tuple[Value, ...]

    def display(self) -> str:
        return "(" + ", ".join(v.display() for v in self.values) + ")"


AnswerShape = Union[Scalar, Expression, UnorderedSet, OrderedTuple]


def _as_tuple(value):
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    return tuple(value)


@dataclass(frozen=True)
class Problem:
    problem_type: str
    canonical_answer: Any
    original_statement: Tuple[str, ...] = ()
    direction: str = ""
    answer_lhs: Optional[str] = None
    answer_rhs: Any = None
    variables: Tuple[str, ...] = ()
    difficulty: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Problem":
        """
        Build a Problem from the camelCase record used by the application.
        The storage layer's older keys (equation, equations, answer) are accepted too.
        """
        statement = data.get("originalStatement")
        if statement is None:
            statement = data.get("equations", data.get("equation"))
        canonical = data.get("canonicalAnswer", data.get("answer"))
        return cls(
            problem_type=data.get("problemType") or "",
            canonical_answer=canonical,
            original_statement=tuple(s for s in _as_tuple(statement) if s is not None),
            direction=data.get("direction") or "",
            answer_lhs=data.get("answerLHS"),
            answer_rhs=data.get("answerRHS"),
            variables=_as_tuple(data.get("variables")),
            difficulty=data.get("difficulty"),
        )


@dataclass(frozen=True)
class ValidationResult:
    is_correct: bool
    normalized_user: str
    normalized_canonical: str
    reason: Optional[Reason] = None
    message: Any = field(default="", compare=False)

    def as_dict(self) -> Dict[str, Any]:
        ret = {
            "isCorrect": self.is_correct,
            "normalizedUser": self.normalized_user,
            "normalizedCanonical": self.normalized_canonical,
        }
        if self.reason is not None:
            ret["reason"] = self.reason.value
        if self.message:
            ret["message"] = str(self.message)
        return ret
