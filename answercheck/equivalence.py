# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2018-2025 Stellan Östlund and Hampus Linander

"""
Equivalence tests between a normalized submission and an AnswerShape.

Single values are compared by a chain of strategies, each of which either
decides or passes on to the next:

    1. textual equality of the normalized forms
    2. numeric evaluation, when neither side has variables
    3. substitution over the sample battery, when variables are present
    4. sympy simplification of the difference (SYMBOLIC_FALLBACK)

A step that cannot decide (parse or evaluation failure, too few defined sample
points) hands over to the next one. If nothing confirms equivalence the answer
is wrong; the checker never guesses "correct".
"""

import logging
from collections import namedtuple

import numpy
from django.utils.translation import gettext_lazy as _

from answercheck.conf import get_config, sample_points
from answercheck.exceptions import EvalError, ParseError
from answercheck.problem import OrderedTuple, Reason, UnorderedSet, ValidationResult
from answercheck.shapes import split_sequence
from answercheck.utils.expression import evaluate, evaluate_many, parse, symbolic_difference_is_zero
from answercheck.utils.normalize import textual_form
from answercheck.utils.variables import extract_variables, sample_bindings

logger = logging.getLogger(__name__)

# matched is True, False or None (could not decide)
Comparison = namedtuple("Comparison", ["matched", "reason", "message"])

EQUAL = Comparison(True, None, "")


def close(a, b, config):
    tol = config["ZERO_TOLERANCE"]
    return numpy.abs(a - b) < tol * numpy.maximum(1.0, numpy.maximum(numpy.abs(a), numpy.abs(b)))


def _numeric(user, canonical, config):
    try:
        a = evaluate(user, config=config)
        b = evaluate(canonical, config=config)
    except EvalError as e:
        logger.debug(f"NUMERIC undecided: {e}")
        return None
    logger.debug(f"NUMERIC {a} vs {b}")
    return bool(close(a, b, config))


def _substitution(user, canonical, declared, config):
    variables = extract_variables(user.text, canonical.text, declared=declared)
    bindings = sample_bindings(variables, sample_points(config))
    try:
        a = evaluate_many(user, bindings, config)
        b = evaluate_many(canonical, bindings, config)
    except EvalError as e:
        logger.debug(f"SUBSTITUTION undecided: {e}")
        return None
    defined = numpy.isfinite(a) & numpy.isfinite(b)
    if numpy.count_nonzero(defined) < config["MIN_VALID_POINTS"]:
        logger.debug(f"SUBSTITUTION undecided: only {numpy.count_nonzero(defined)} defined points")
        return None
    matched = bool(numpy.all(close(a[defined], b[defined], config)))
    logger.debug(f"SUBSTITUTION over {variables} matched={matched}")
    return matched


def _symbolic(user, canonical, config):
    try:
        return symbolic_difference_is_zero(user, canonical, config)
    except EvalError as e:
        logger.debug(f"SYMBOLIC undecided: {e}")
        return None


def compare_values(user_text, canonical, variables=(), config=None):
    """
    Compare one submitted value with one canonical Scalar or Expression.
    Returns a Comparison whose matched is True or False.
    """
    config = config or get_config()
    if textual_form(user_text) == textual_form(canonical.text):
        logger.debug(f"TEXTUAL match {user_text!r}")
        return EQUAL
    try:
        user = parse(user_text, variables, config)
    except ParseError as e:
        return Comparison(False, Reason.PARSE_ERROR, e.value)
    try:
        canon = parse(canonical.text, variables, config)
    except ParseError as e:
        logger.error(f"Canonical answer {canonical.text!r} cannot be parsed: {e}")
        return Comparison(False, Reason.WRONG_SHAPE, _("The stored answer could not be read"))

    if user.variables or canon.variables:
        matched = _substitution(user, canon, variables, config)
        if matched and config["SYMBOLIC_CONFIRM"] and _symbolic(user, canon, config) is False:
            logger.debug(f"SYMBOLIC rejects substitution match of {user_text!r}")
            matched = False
    else:
        matched = _numeric(user, canon, config)
    if matched is None and config["SYMBOLIC_FALLBACK"]:
        matched = _symbolic(user, canon, config)
    if matched:
        return EQUAL
    if matched is None:
        return Comparison(False, Reason.OUT_OF_TOLERANCE, _("Your answer could not be confirmed to be correct"))
    return Comparison(False, Reason.OUT_OF_TOLERANCE, _("Your answer is not equal to the expected answer"))


def _result(submission, shape, comparison):
    return ValidationResult(
        is_correct=bool(comparison.matched),
        normalized_user=submission,
        normalized_canonical=shape.display(),
        reason=comparison.reason,
        message=comparison.message,
    )


def _first_failure(comparisons):
    # a parse error explains more than a mismatch does
    for comparison in comparisons:
        if comparison.reason == Reason.PARSE_ERROR:
            return comparison
    return next(c for c in comparisons if not c.matched)


def _compare_unordered(tokens, shape, variables, config):
    if shape.is_double_root:
        if len(tokens) not in (1, 2):
            return Comparison(
                False,
                Reason.WRONG_SHAPE,
                _("This equation has a double root: give it once, or twice as two equal values"),
            )
        comparisons = [compare_values(token, shape.values[0], variables, config) for token in tokens]
        if all(c.matched for c in comparisons):
            return EQUAL
        return _first_failure(comparisons)

    if len(tokens) != len(shape.values):
        return Comparison(
            False,
            Reason.WRONG_SHAPE,
            _("Expected %(expected)d solutions separated by commas, found %(found)d")
            % {"expected": len(shape.values), "found": len(tokens)},
        )
    unmatched = list(shape.values)
    failures = []
    for token in tokens:
        for value in unmatched:
            comparison = compare_values(token, value, variables, config)
            if comparison.matched:
                unmatched.remove(value)
                break
            failures.append(comparison)
        else:
            return _first_failure(failures)
    return EQUAL


def _compare_ordered(tokens, shape, variables, config):
    if len(tokens) != len(shape.values):
        return Comparison(
            False,
            Reason.WRONG_SHAPE,
            _("Expected %(expected)d values in order, e.g. (x, y), found %(found)d")
            % {"expected": len(shape.values), "found": len(tokens)},
        )
    comparisons = [compare_values(token, value, variables, config) for token, value in zip(tokens, shape.values)]
    if all(c.matched for c in comparisons):
        return EQUAL
    failure = _first_failure(comparisons)
    if failure.reason != Reason.PARSE_ERROR and len(tokens) == 2:
        swapped = [
            compare_values(token, value, variables, config)
            for token, value in zip(tokens, reversed(shape.values))
        ]
        if all(c.matched for c in swapped):
            return Comparison(
                False,
                Reason.OUT_OF_TOLERANCE,
                _("The order matters: the values must be given in the order of the variables, e.g. (x, y)"),
            )
    return failure


def is_equivalent(submission, shape, variables=(), config=None):
    """
    Compare a normalized submission with an AnswerShape and return a
    ValidationResult.

    Sets and tuples are entered as comma separated values; a tuple may also be
    written in parentheses, "(3, 1)".
    """
    config = config or get_config()
    if "=" in submission:
        comparison = Comparison(False, Reason.WRONG_SHAPE, _("Equality is not permitted in the answer"))
    elif isinstance(shape, UnorderedSet):
        comparison = _compare_unordered(split_sequence(submission), shape, variables, config)
    elif isinstance(shape, OrderedTuple):
        comparison = _compare_ordered(split_sequence(submission), shape, variables, config)
    elif "," in submission:
        comparison = Comparison(False, Reason.WRONG_SHAPE, _("Only one answer is expected"))
    else:
        comparison = compare_values(submission, shape, variables, config)
    return _result(submission, shape, comparison)
