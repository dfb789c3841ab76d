# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2018-2025 Stellan Östlund and Hampus Linander

import logging
import re

from django.utils.translation import gettext as _

from answercheck.exceptions import ParseError

logger = logging.getLogger(__name__)

INVALID_STRINGS = ["//", "++", "--", "^^", "**", "()", "..", "_", "#", "@", "&", "?", '"', ":", ";"]

INVALID_PATTERNS = {
    r"^[*/^]": "an answer cannot start with an operator",
    r"[-+*/^]$": "an answer cannot end with an operator",
    r"[-+*/^]\s*[*/^]": "two operators in a row",
    r"\d\s+\d": "two numbers without an operator between them",
    r"\(\s*[*/^]": "operator directly after a left parenthesis",
    r"[-+*/^]\s*\)": "operator directly before a right parenthesis",
}


def parens_are_balanced(expression):
    level = 0
    for c in expression:
        if c == "(":
            level = level + 1
        elif c == ")":
            level = level - 1
            if level < 0:
                return False
    return level == 0


def check_for_legal_answer(student_answer):
    """
    Reject learner text with obvious syntax errors before it is parsed.
    Raises ParseError with a message that can be shown to the learner.
    """
    for i in INVALID_STRINGS:
        if i in student_answer:
            raise ParseError(_("Answer contains invalid character or string ") + i)
    for pattern, explanation in INVALID_PATTERNS.items():
        if re.search(pattern, student_answer):
            logger.debug(f"INVALIDATED {student_answer!r} with pattern {pattern}")
            raise ParseError(_(explanation))
    if not parens_are_balanced(student_answer):
        raise ParseError(_("Unbalanced parenthesis"))
