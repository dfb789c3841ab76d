# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2018-2025 Stellan Östlund and Hampus Linander

import numpy
from django.test import SimpleTestCase

from answercheck.exceptions import ParseError
from answercheck.utils.checks import check_for_legal_answer, parens_are_balanced
from answercheck.utils.variables import extract_variables, sample_bindings

POINTS = (-2, -1, -0.5, 0, 0.5, 1, 2, 3)


class VariablesTest(SimpleTestCase):
    def test_extract_variables(self):
        self.assertEqual(extract_variables("2x + y", "pi*z"), ["x", "y", "z"])
        self.assertEqual(extract_variables("sqrt(x) + e"), ["x"])
        self.assertEqual(extract_variables("sqrt(x) + e", declared=("e",)), ["e", "x"])
        self.assertEqual(extract_variables("10/2"), [])

    def test_sample_bindings_are_staggered(self):
        bindings = sample_bindings(["y", "x"], POINTS)
        self.assertEqual(list(bindings["x"]), [float(p) for p in POINTS])
        self.assertEqual(bindings["y"][0], 0.0)
        self.assertFalse(numpy.any(bindings["x"] == bindings["y"]))


class ChecksTest(SimpleTestCase):
    def test_legal(self):
        for text in ["2x + 3", "3, -2", "(3, 1)", "2x + 5 = 13", "x^-1", "2*-3"]:
            check_for_legal_answer(text)

    def test_illegal(self):
        for text in ["2++3", "2 +* 3", "*2", "2x +", "2 3", "(2x", "x)(", "()", "x_1"]:
            with self.assertRaises(ParseError, msg=text):
                check_for_legal_answer(text)

    def test_parens(self):
        self.assertTrue(parens_are_balanced("((x)(y))"))
        self.assertFalse(parens_are_balanced(")x("))
