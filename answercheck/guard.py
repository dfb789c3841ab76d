# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2018-2025 Stellan Östlund and Hampus Linander

"""
Rejects submissions to equation solving problems that restate the problem
instead of solving it.
"""

import logging

import numpy

from answercheck.conf import get_config, sample_points
from answercheck.exceptions import EvalError, ParseError
from answercheck.problem import Expression, Scalar
from answercheck.shapes import split_sequence
from answercheck.utils.expression import evaluate_many, parse
from answercheck.utils.normalize import normalize, textual_form
from answercheck.utils.variables import sample_bindings

logger = logging.getLogger(__name__)


def split_equation(text):
    """
    (left, right) of an equation with exactly one "=", else None.
    """
    sides = text.split("=")
    if len(sides) != 2 or not sides[0].strip() or not sides[1].strip():
        return None
    return sides[0].strip(), sides[1].strip()


def _difference(sides, variables, config):
    return parse("(%s)-(%s)" % sides, variables, config)


def is_equation_variation(submitted, original, variables=(), config=None):
    """
    True if the equation submitted follows from the equation original by doing
    the same thing to both sides: moving terms across, swapping the sides and,
    with DETECT_SCALED_VARIATIONS, multiplying both sides by a nonzero number.

    Both are (left, right) pairs. Compared as left - right over the sample battery.
    """
    config = config or get_config()
    try:
        user = _difference(submitted, variables, config)
        orig = _difference(original, variables, config)
    except ParseError:
        return False
    names = sorted(user.variables | orig.variables)
    if not names:
        return False
    bindings = sample_bindings(names, sample_points(config))
    try:
        a = evaluate_many(user, bindings, config)
        b = evaluate_many(orig, bindings, config)
    except EvalError:
        return False
    defined = numpy.isfinite(a) & numpy.isfinite(b)
    if numpy.count_nonzero(defined) < config["MIN_VALID_POINTS"]:
        return False
    a = a[defined]
    b = b[defined]
    tol = config["ZERO_TOLERANCE"]
    if numpy.all(numpy.abs(b) < tol):
        return False
    if numpy.all(numpy.abs(a - b) < tol) or numpy.all(numpy.abs(a + b) < tol):
        return True
    if not config["DETECT_SCALED_VARIATIONS"]:
        return False
    nonzero = numpy.abs(b) >= tol
    if not numpy.all(numpy.abs(a[~nonzero]) < tol):
        return False
    ratio = a[nonzero] / b[nonzero]
    scale = ratio[0]
    return abs(scale) >= tol and bool(numpy.all(numpy.abs(ratio - scale) < tol * max(1.0, abs(scale))))


def variation_of(equation, statements, variables=(), config=None):
    """
    The first of statements that equation is a variation of, or None.
    """
    submitted = split_equation(equation)
    if submitted is None:
        return None
    for statement in statements:
        original = split_equation(statement)
        if original and is_equation_variation(submitted, original, variables, config):
            return statement
    return None


def looks_like_restated_problem(submission, problem, shape, config=None):
    """
    True if a normalized submission restates the problem: it is the original
    statement, it is an equation where a bare value or expression is expected,
    or each of its comma separated parts is a variation of one of the original
    equations.
    """
    config = config or get_config()
    statements = [normalize(s) for s in problem.original_statement]
    reason = None
    forms = [textual_form(s) for s in statements]
    if len(statements) > 1:
        forms.append(textual_form(",".join(statements)))
    if textual_form(submission) in forms:
        reason = "identical to the original statement"
    elif "=" in submission and isinstance(shape, (Scalar, Expression)):
        reason = "an equation where a value is expected"
    else:
        parts = split_sequence(submission) if "," in submission else [submission]
        originals = [variation_of(part, statements, problem.variables, config) for part in parts]
        if originals and all(originals):
            reason = "a variation of %s" % ", ".join(originals)
    if reason is None:
        return False
    logger.warning(f"RESTATED {problem.problem_type} answer {submission!r} is {reason}")
    return True
