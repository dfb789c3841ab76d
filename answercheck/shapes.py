# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2018-2025 Stellan Östlund and Hampus Linander

"""
Shape dispatch: which AnswerShape a problem's stored answer has, and which
comparison policy applies to it.

Problem types register a shape builder with register_problem_type; types
nobody registered are classified from the structure of the stored answer.
"""

import logging
import math
import numbers

import numpy
from django.utils.translation import gettext as _

from answercheck.conf import get_config
from answercheck.exceptions import EvalError, ParseError, ShapeMismatchError
from answercheck.problem import Expression, OrderedTuple, Scalar, UnorderedSet
from answercheck.utils.expression import evaluate, parse
from answercheck.utils.normalize import index_of_matching_right, normalize, textual_form

logger = logging.getLogger(__name__)

SCALAR = "scalar"
EXPRESSION = "expression"
UNORDERED_SET = "unordered_set"
ORDERED_TUPLE = "ordered_tuple"

shape_dispatch = {}

BRACKETS = {"(": ")", "[": "]"}


class ComparisonPolicy:
    def __init__(self, kind, reject_restated=False, require_simplified=False):
        self.kind = kind
        self.reject_restated = reject_restated
        self.require_simplified = require_simplified

    def __eq__(self, other):
        return isinstance(other, ComparisonPolicy) and vars(self) == vars(other)

    def __repr__(self):
        return "ComparisonPolicy(%s, reject_restated=%s, require_simplified=%s)" % (
            self.kind,
            self.reject_restated,
            self.require_simplified,
        )


def register_problem_type(problem_type, builder):
    shape_dispatch[problem_type] = builder


def stored_answer(problem):
    # Problems stored as "x = <rhs>" keep the checkable part in answerRHS
    if problem.answer_rhs is not None:
        return problem.answer_rhs
    return problem.canonical_answer


def _is_number(item):
    return isinstance(item, numbers.Real) and not isinstance(item, bool)


def to_value(item, variables=(), config=None):
    """
    A single stored answer as Scalar or Expression. Text with variables is an
    Expression; numbers and constant text are Scalars.
    """
    config = config or get_config()
    if isinstance(item, numbers.Integral) and not isinstance(item, bool):
        return Scalar(str(item))
    if _is_number(item):
        if not math.isfinite(item):
            raise ShapeMismatchError(_("Stored answer %r is not a finite number") % (item,))
        # positional notation, 1e-05 would read as 1*e - 05
        return Scalar(numpy.format_float_positional(float(item), trim="-"))
    if not isinstance(item, str):
        raise ShapeMismatchError(_("Stored answer %r is neither a number nor text") % (item,))
    text = normalize(item)
    try:
        parsed = parse(text, variables, config)
    except ParseError as e:
        raise ShapeMismatchError(_("Stored answer %s cannot be parsed: %s") % (item, e)) from e
    if parsed.variables:
        return Expression(text)
    return Scalar(text)


def enclosed(text):
    """
    True if text is wrapped in one pair of matching parentheses or brackets.
    """
    return text[:1] in BRACKETS and index_of_matching_right(text, 0, text[0], BRACKETS[text[0]]) == len(text)


def split_sequence(item):
    """
    A stored sequence as a list of items. Text is split on commas, with one
    pair of enclosing parentheses or brackets removed first.
    """
    if isinstance(item, (list, tuple)):
        return list(item)
    if isinstance(item, str):
        text = item.strip()
        if enclosed(text) and "," in text[1:-1]:
            text = text[1:-1]
        return [s.strip() for s in text.split(",") if s.strip()]
    return [item]


def same_value(a, b, variables=(), config=None):
    config = config or get_config()
    if textual_form(a.text) == textual_form(b.text):
        return True
    if isinstance(a, Scalar) and isinstance(b, Scalar):
        try:
            va = evaluate(parse(a.text, variables, config), config=config)
            vb = evaluate(parse(b.text, variables, config), config=config)
        except (ParseError, EvalError):
            return False
        return abs(va - vb) < config["ZERO_TOLERANCE"] * max(1.0, abs(va), abs(vb))
    return False


def scalar_or_expression_shape(problem, config):
    stored = stored_answer(problem)
    if isinstance(stored, (list, tuple)):
        if len(stored) != 1:
            raise ShapeMismatchError(_("Expected a single stored answer, found %d") % len(stored))
        stored = stored[0]
    return to_value(stored, problem.variables, config)


def expression_shape(problem, config):
    value = scalar_or_expression_shape(problem, config)
    return Expression(value.text)


def unordered_set_shape(problem, config):
    stored = stored_answer(problem)
    items = split_sequence(stored)
    if not items:
        raise ShapeMismatchError(_("Problem does not have valid solutions"))
    values = [to_value(item, problem.variables, config) for item in items]
    distinct = []
    for value in values:
        if not any(same_value(value, other, problem.variables, config) for other in distinct):
            distinct.append(value)
    # A single stored value, or a repeated one, is a double root
    is_double_root = len(distinct) == 1
    return UnorderedSet(tuple(distinct), is_double_root=is_double_root)


def ordered_tuple_shape(problem, config):
    items = split_sequence(stored_answer(problem))
    if len(items) < 2:
        raise ShapeMismatchError(_("Problem does not have a valid ordered pair solution"))
    return OrderedTuple(tuple(to_value(item, problem.variables, config) for item in items))


def _structural_shape(problem, config):
    stored = stored_answer(problem)
    if isinstance(stored, (list, tuple)):
        return unordered_set_shape(problem, config)
    if isinstance(stored, str) and stored.strip().startswith("(") and enclosed(stored.strip()) and "," in stored:
        return ordered_tuple_shape(problem, config)
    if isinstance(stored, str) and "," in stored:
        return unordered_set_shape(problem, config)
    return scalar_or_expression_shape(problem, config)


def _kind(shape):
    if isinstance(shape, UnorderedSet):
        return UNORDERED_SET
    if isinstance(shape, OrderedTuple):
        return ORDERED_TUPLE
    if isinstance(shape, Expression):
        return EXPRESSION
    return SCALAR


def is_equation_solving(problem, config):
    if problem.problem_type in config["EQUATION_SOLVING_TYPES"]:
        return True
    if problem.problem_type in shape_dispatch or problem.problem_type in config["SIMPLIFICATION_TYPES"]:
        return False
    return "solve" in problem.direction.lower() or any("=" in s for s in problem.original_statement)


def classify(problem, config=None):
    """
    Returns (AnswerShape, ComparisonPolicy) for problem, or raises ShapeMismatchError.
    """
    config = config or get_config()
    if stored_answer(problem) is None:
        raise ShapeMismatchError(_("Problem has no stored answer"))
    builder = shape_dispatch.get(problem.problem_type, _structural_shape)
    shape = builder(problem, config)
    policy = ComparisonPolicy(
        _kind(shape),
        reject_restated=config["REJECT_RESTATED"] and is_equation_solving(problem, config),
        require_simplified=config["REQUIRE_SIMPLIFIED"] and problem.problem_type in config["SIMPLIFICATION_TYPES"],
    )
    logger.debug(f"CLASSIFY {problem.problem_type} -> {shape} {policy}")
    return shape, policy


register_problem_type("linear-one-variable", scalar_or_expression_shape)
register_problem_type("linear-two-variables", expression_shape)
register_problem_type("polynomial-simplification", expression_shape)
register_problem_type("quadratic-completing-square", unordered_set_shape)
register_problem_type("quadratic-factoring", unordered_set_shape)
register_problem_type("quadratic-formula", unordered_set_shape)
register_problem_type("systems-of-equations", ordered_tuple_shape)
