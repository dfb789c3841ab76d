# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2018-2025 Stellan Östlund and Hampus Linander

"""
Run a file of answer checking cases.

The file holds a JSON list of cases:

    [
      {
        "name": "double root",
        "problem": {"problemType": "quadratic-factoring", "canonicalAnswer": 3},
        "inputs": ["3", "3, 3", "3, 4"],
        "expected": [true, true, false]
      }
    ]

expected is one verdict per input, or a single verdict for all of them. A
verdict may also be a reason such as "ORIGINAL_RESTATED", which expects a
wrong answer with that reason.
"""

import json
import logging

from django.core.management.base import BaseCommand, CommandError

from answercheck.validate import validate_answer

logger = logging.getLogger(__name__)


def verdict_matches(result, expected):
    if isinstance(expected, bool):
        return result.is_correct == expected
    return not result.is_correct and result.reason is not None and result.reason.value == expected


class Command(BaseCommand):
    help = "Check answers from a JSON file of cases against their expected verdicts"

    def add_arguments(self, parser):
        parser.add_argument("cases", type=str, help="path to a JSON file of cases")

    def handle(self, *args, **options):
        try:
            with open(options["cases"], encoding="utf-8") as f:
                cases = json.load(f)
        except (OSError, ValueError) as e:
            raise CommandError("Cannot read %s: %s" % (options["cases"], e))
        failures = 0
        total = 0
        for case in cases:
            inputs = case.get("inputs", [])
            expected = case.get("expected", True)
            if not isinstance(expected, list):
                expected = [expected] * len(inputs)
            if len(expected) != len(inputs):
                raise CommandError(
                    "Case %s has %d inputs but %d expected verdicts" % (case.get("name"), len(inputs), len(expected))
                )
            self.stdout.write(case.get("name", ""))
            for answer, wanted in zip(inputs, expected):
                total = total + 1
                result = validate_answer(answer, case["problem"])
                reason = result.reason.value if result.reason else ""
                if verdict_matches(result, wanted):
                    status = self.style.SUCCESS("PASS")
                else:
                    status = self.style.ERROR("FAIL")
                    failures = failures + 1
                self.stdout.write(
                    "  %s  %-24s %-6s %-18s expected %s" % (status, answer, result.is_correct, reason, wanted)
                )
        self.stdout.write("%d of %d checks passed" % (total - failures, total))
        if failures:
            raise CommandError("%d checks did not give the expected verdict" % failures)
