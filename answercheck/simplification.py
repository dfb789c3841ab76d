# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2018-2025 Stellan Östlund and Hampus Linander

"""
Checks that an answer to a "simplify" problem is written in simplified form.

Only called once the answer is known to be equal to the expected one, so the
checks look at how the answer is written, not at its value.
"""

import ast
import logging
import math
import re

from django.utils.translation import gettext_lazy as _

from answercheck.conf import get_config
from answercheck.exceptions import ParseError
from answercheck.utils.expression import parse
from answercheck.utils.normalize import normalize, textual_form

logger = logging.getLogger(__name__)

UNIT_COEFFICIENT = re.compile(r"(?<![\d.^])1\s*\*?\s*[A-Za-z(]")
UNIT_EXPONENT = re.compile(r"\^\s*(1|\(\s*1\s*\))(?![\d.])")
NUMERIC_FRACTION = re.compile(r"(?<![\d.^])(\d+)\s*/\s*(\d+)(?![\d.])")


def _terms(node, out):
    # Flatten a chain of + and - into its terms, dropping signs
    if isinstance(node, ast.BinOp) and isinstance(node.op, (ast.Add, ast.Sub)):
        _terms(node.left, out)
        _terms(node.right, out)
    elif isinstance(node, ast.UnaryOp):
        _terms(node.operand, out)
    else:
        out.append(node)
    return out


def _factors(node, out):
    if isinstance(node, ast.BinOp) and isinstance(node.op, ast.Mult):
        _factors(node.left, out)
        _factors(node.right, out)
    elif isinstance(node, ast.BinOp) and isinstance(node.op, ast.Div) and isinstance(node.right, ast.Constant):
        _factors(node.left, out)
    elif isinstance(node, ast.UnaryOp):
        _factors(node.operand, out)
    else:
        out.append(node)
    return out


def term_signature(node):
    """
    The variable-and-power signature of a term: numeric coefficients are
    dropped, so 3x^2 and x^2/2 share a signature and 7 has the empty one.
    """
    powers = {}
    for factor in _factors(node, []):
        if isinstance(factor, ast.Constant):
            continue
        if (
            isinstance(factor, ast.BinOp)
            and isinstance(factor.op, ast.Pow)
            and isinstance(factor.right, ast.Constant)
        ):
            key, power = ast.dump(factor.left), factor.right.value
        else:
            key, power = ast.dump(factor), 1
        powers[key] = powers.get(key, 0) + power
    return tuple(sorted(powers.items()))


def _sums(node):
    # every maximal + / - chain in the tree
    if isinstance(node, ast.BinOp) and isinstance(node.op, (ast.Add, ast.Sub)):
        terms = _terms(node, [])
        yield terms
        for term in terms:
            yield from _sums(term)
    else:
        for child in ast.iter_child_nodes(node):
            yield from _sums(child)


def has_like_terms(parsed):
    for terms in _sums(parsed.body):
        signatures = [term_signature(t) for t in terms]
        if len(set(signatures)) < len(signatures):
            return True
    return False


def _is_sum(node):
    return isinstance(node, ast.BinOp) and isinstance(node.op, (ast.Add, ast.Sub))


def _variables_in(node, variables):
    return {n.id for n in ast.walk(node) if isinstance(n, ast.Name) and n.id in variables}


def has_unexpanded_product(parsed):
    """
    True for a power of a sum, (x+1)^2, or a product sharing a variable
    between a sum and another factor, x(x+1) or (x+2)(x+3). A constant
    factor, 3(x+1), does not count.
    """
    for node in ast.walk(parsed.body):
        if not isinstance(node, ast.BinOp):
            continue
        if isinstance(node.op, ast.Pow):
            power = node.right.value if isinstance(node.right, ast.Constant) else None
            if (
                _is_sum(node.left)
                and _variables_in(node.left, parsed.variables)
                and power is not None
                and power >= 2
                and power == int(power)
            ):
                return True
        elif isinstance(node.op, ast.Mult):
            factors = _factors(node, [])
            for i, factor in enumerate(factors):
                if not _is_sum(factor):
                    continue
                names = _variables_in(factor, parsed.variables)
                others = factors[:i] + factors[i + 1:]
                if any(names & _variables_in(other, parsed.variables) for other in others):
                    return True
    return False


def has_unreduced_fraction(text):
    for m in NUMERIC_FRACTION.finditer(text):
        num, den = int(m.group(1)), int(m.group(2))
        if den != 0 and (den == 1 or math.gcd(num, den) > 1):
            return True
    return False


def _expected_unexpanded(expected, variables, config):
    if expected is None:
        return False
    try:
        return has_unexpanded_product(parse(normalize(expected), variables, config))
    except ParseError:
        return False


def simplification_problems(text, original_statement=(), variables=(), config=None, expected=None):
    """
    Messages explaining why text is not simplified; empty if it is.

    A product left unexpanded is accepted when the expected answer is itself
    written that way.
    """
    config = config or get_config()
    problems = []
    if any(textual_form(text) == textual_form(s) for s in original_statement):
        problems.append(_("This is the expression you were asked to simplify"))
    try:
        parsed = parse(text, variables, config)
    except ParseError:
        parsed = None
    if parsed is not None and has_like_terms(parsed):
        problems.append(_("Your answer has like terms that can be combined"))
    if parsed is not None and has_unexpanded_product(parsed) and not _expected_unexpanded(expected, variables, config):
        problems.append(_("Your answer has a product that can be expanded"))
    if UNIT_COEFFICIENT.search(text):
        problems.append(_("A coefficient 1 need not be written out"))
    if UNIT_EXPONENT.search(text):
        problems.append(_("An exponent 1 need not be written out"))
    if has_unreduced_fraction(text):
        problems.append(_("A fraction in your answer can be reduced"))
    if problems:
        logger.debug(f"NOT SIMPLIFIED {text!r}: {[str(p) for p in problems]}")
    return problems


def is_fully_simplified(text, original_statement=(), variables=(), config=None, expected=None):
    return not simplification_problems(normalize(text), original_statement, variables, config, expected)
