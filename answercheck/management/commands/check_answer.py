# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2018-2025 Stellan Östlund and Hampus Linander

import json
import logging

from django.core.management.base import BaseCommand

from answercheck.problem import Problem
from answercheck.validate import validate_answer

logger = logging.getLogger(__name__)


def stored_value(text):
    # "[3, -2]" and "5" are read as JSON, anything else is kept as text
    if text is None:
        return None
    try:
        return json.loads(text)
    except ValueError:
        return text


class Command(BaseCommand):
    help = "Check one answer against a problem and print the verdict"

    def add_arguments(self, parser):
        parser.add_argument("answer", type=str)
        parser.add_argument("--type", dest="problem_type", default="", help="problem type, e.g. quadratic-factoring")
        parser.add_argument("--canonical", required=True, help='stored answer, e.g. 5, "5x" or [3, -2]')
        parser.add_argument("--rhs", default=None, help="stored answerRHS")
        parser.add_argument("--statement", action="append", default=[], help="original equation, may be repeated")
        parser.add_argument("--lhs", default=None, help='answerLHS, e.g. "x ="')
        parser.add_argument("--direction", default="")
        parser.add_argument("--variables", default="", help="comma separated variable names")
        parser.add_argument("--json", action="store_true", help="print the result as JSON")

    def handle(self, *args, **options):
        problem = Problem.from_dict(
            {
                "problemType": options["problem_type"],
                "canonicalAnswer": stored_value(options["canonical"]),
                "answerRHS": stored_value(options["rhs"]),
                "originalStatement": options["statement"],
                "answerLHS": options["lhs"],
                "direction": options["direction"],
                "variables": [v.strip() for v in options["variables"].split(",") if v.strip()],
            }
        )
        result = validate_answer(options["answer"], problem)
        if options["json"]:
            self.stdout.write(json.dumps(result.as_dict(), indent=2))
            return
        verdict = self.style.SUCCESS("CORRECT") if result.is_correct else self.style.ERROR("WRONG")
        self.stdout.write("%s  %s  (expected %s)" % (verdict, result.normalized_user, result.normalized_canonical))
        if result.reason is not None:
            self.stdout.write("%s: %s" % (result.reason.value, result.message))
