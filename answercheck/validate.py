# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2018-2025 Stellan Östlund and Hampus Linander

"""
validate_answer, the single entry point of the answer checker.

The raw submission is normalized and pre-checked for syntax, the problem is
classified into an AnswerShape, the restatement guard and the equivalence
test run, and simplify problems finally get the simplification check.
validate_answer always returns a ValidationResult; every AnswerCheckError
raised on the way becomes a wrong verdict with a reason.
"""

import logging
import re

from django.utils.translation import gettext_lazy as _

from answercheck.conf import get_config
from answercheck.equivalence import is_equivalent
from answercheck.exceptions import AnswerCheckError, ParseError
from answercheck.guard import looks_like_restated_problem
from answercheck.problem import Problem, Reason, ValidationResult
from answercheck.shapes import classify
from answercheck.simplification import simplification_problems
from answercheck.utils.checks import check_for_legal_answer
from answercheck.utils.normalize import normalize

logger = logging.getLogger(__name__)


def strip_answer_lhs(submission, answer_lhs):
    """
    Drop a leading "x =" from submission when answer_lhs is "x =" (or "x").
    """
    lhs = normalize(answer_lhs).rstrip("= ").strip()
    if not lhs:
        return submission
    pattern = r"^\s*" + r"\s*".join(re.escape(c) for c in lhs.replace(" ", "")) + r"\s*=\s*"
    return re.sub(pattern, "", submission, count=1)


def _failed(user, canonical, reason, message):
    return ValidationResult(
        is_correct=False,
        normalized_user=user,
        normalized_canonical=canonical,
        reason=reason,
        message=message,
    )


def _validate(user, problem, shape, policy, config):
    canonical = shape.display()
    if not user:
        return _failed(user, canonical, Reason.PARSE_ERROR, _("Your answer is blank!"))
    check_for_legal_answer(user)
    if config["ALLOW_ANSWER_LHS"] and problem.answer_lhs:
        user = strip_answer_lhs(user, problem.answer_lhs)
    if policy.reject_restated and looks_like_restated_problem(user, problem, shape, config):
        return _failed(user, canonical, Reason.ORIGINAL_RESTATED, _("Your answer restates the problem; solve it"))
    result = is_equivalent(user, shape, problem.variables, config)
    if result.is_correct and policy.require_simplified:
        problems = simplification_problems(
            user, problem.original_statement, problem.variables, config, expected=canonical
        )
        if problems:
            return _failed(user, canonical, Reason.NOT_SIMPLIFIED, problems[0])
    return result


def validate_answer(raw, problem, config=None):
    """
    Check a raw submission against a problem.

    problem is a Problem or its dict form (see Problem.from_dict). Returns a
    ValidationResult; use its as_dict() for the camelCase form.
    """
    config = config or get_config()
    if not isinstance(problem, Problem):
        problem = Problem.from_dict(problem)
    user = normalize(raw)
    try:
        shape, policy = classify(problem, config)
    except AnswerCheckError as e:
        logger.error(f"Problem {problem.problem_type} cannot be checked: {e}")
        return _failed(user, "", Reason.WRONG_SHAPE, _("This problem cannot be checked"))
    try:
        result = _validate(user, problem, shape, policy, config)
    except ParseError as e:
        logger.debug(f"PARSE_ERROR {user!r}: {e}")
        result = _failed(user, shape.display(), Reason.PARSE_ERROR, e.value)
    except AnswerCheckError as e:
        logger.debug(f"UNDECIDED {user!r}: {e}")
        result = _failed(user, shape.display(), Reason.OUT_OF_TOLERANCE, e.value)
    logger.info(
        f"VERDICT {problem.problem_type} correct={result.is_correct} reason={result.reason and result.reason.value}"
    )
    return result
