# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2018-2025 Stellan Östlund and Hampus Linander

from django.test import SimpleTestCase

from answercheck.utils.normalize import index_of_matching_right, normalize, textual_form


class NormalizeTest(SimpleTestCase):
    def test_whitespace(self):
        self.assertEqual(normalize("  2x   +  3 "), "2x + 3")
        self.assertEqual(normalize(None), "")
        self.assertEqual(normalize("   "), "")

    def test_fractions(self):
        self.assertEqual(normalize(r"\frac{1}{2}"), "(1)/(2)")
        self.assertEqual(normalize(r"\dfrac{x+1}{3}"), "(x+1)/(3)")
        self.assertEqual(normalize(r"\frac34"), "(3)/(4)")
        self.assertEqual(normalize(r"\frac{\frac{1}{2}}{3}"), "((1)/(2))/(3)")

    def test_roots_and_exponents(self):
        self.assertEqual(normalize(r"\sqrt{x+1}"), "sqrt(x+1)")
        self.assertEqual(normalize(r"\sqrt[3]{8}"), "((8)^(1/(3)))")
        self.assertEqual(normalize("x^{2}"), "x^2")
        self.assertEqual(normalize("x^{n+1}"), "x^(n+1)")
        self.assertEqual(normalize("x²"), "x^2")
        self.assertEqual(normalize("x**2"), "x^2")

    def test_operator_synonyms(self):
        self.assertEqual(normalize("3 × 4 − 2"), "3 * 4 - 2")
        self.assertEqual(normalize(r"6 \div 2"), "6 / 2")
        self.assertEqual(normalize(r"2 \cdot \pi"), "2 * pi")
        self.assertEqual(normalize(r"\left(x\right)"), "(x)")

    def test_signs(self):
        self.assertEqual(normalize("+3"), "3")
        self.assertEqual(normalize("2 + -3"), "2 -3")

    def test_unresolved_markup_is_returned_unchanged(self):
        self.assertEqual(normalize(r"\frac{1}{"), r"\frac{1}{")

    def test_textual_form(self):
        self.assertEqual(textual_form(" 2 X + Y "), "2x+y")

    def test_matching_right(self):
        self.assertEqual(index_of_matching_right("{a{b}}c", 0), 6)
        self.assertIsNone(index_of_matching_right("{a{b}", 0))
