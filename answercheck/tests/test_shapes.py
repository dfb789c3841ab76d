# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2018-2025 Stellan Östlund and Hampus Linander

from django.test import SimpleTestCase

from answercheck.exceptions import ShapeMismatchError
from answercheck.problem import Expression, OrderedTuple, Problem, Scalar, UnorderedSet
from answercheck.shapes import (
    EXPRESSION,
    ORDERED_TUPLE,
    SCALAR,
    UNORDERED_SET,
    classify,
    enclosed,
    split_sequence,
    to_value,
)


def problem(problem_type, canonical, **kwargs):
    data = {"problemType": problem_type, "canonicalAnswer": canonical}
    data.update(kwargs)
    return Problem.from_dict(data)


class ClassifyTest(SimpleTestCase):
    def test_linear(self):
        shape, policy = classify(problem("linear-one-variable", 4))
        self.assertEqual(shape, Scalar("4"))
        self.assertEqual(policy.kind, SCALAR)
        self.assertTrue(policy.reject_restated)
        self.assertFalse(policy.require_simplified)

    def test_linear_with_variables_is_expression(self):
        shape, policy = classify(problem("linear-one-variable", "2y + 1"))
        self.assertEqual(shape, Expression("2y + 1"))
        self.assertEqual(policy.kind, EXPRESSION)

    def test_simplification(self):
        shape, policy = classify(problem("polynomial-simplification", "5x"))
        self.assertEqual(shape, Expression("5x"))
        self.assertFalse(policy.reject_restated)
        self.assertTrue(policy.require_simplified)

    def test_answer_rhs_is_preferred(self):
        shape, _ = classify(problem("linear-one-variable", "x = 4", answerLHS="x =", answerRHS=4))
        self.assertEqual(shape, Scalar("4"))

    def test_distinct_roots(self):
        shape, policy = classify(problem("quadratic-factoring", [3, -2]))
        self.assertEqual(shape, UnorderedSet((Scalar("3"), Scalar("-2"))))
        self.assertFalse(shape.is_double_root)
        self.assertEqual(policy.kind, UNORDERED_SET)

    def test_double_root_folding(self):
        for stored in [3, [3], [3, 3], ["3", "3.0"], "3, 3"]:
            shape, _ = classify(problem("quadratic-formula", stored))
            self.assertTrue(shape.is_double_root, msg=stored)
            self.assertEqual(len(shape.values), 1)
            self.assertEqual(shape.display(), "3")

    def test_systems(self):
        for stored in [[3, 1], "(3, 1)", "3, 1"]:
            shape, policy = classify(problem("systems-of-equations", stored))
            self.assertEqual(shape, OrderedTuple((Scalar("3"), Scalar("1"))), msg=stored)
            self.assertEqual(policy.kind, ORDERED_TUPLE)
        self.assertEqual(shape.display(), "(3, 1)")

    def test_systems_need_two_values(self):
        with self.assertRaises(ShapeMismatchError):
            classify(problem("systems-of-equations", [3]))

    def test_unknown_types_are_classified_structurally(self):
        shape, policy = classify(problem("mystery", [1, 2], originalStatement=["x^2 - 3x + 2 = 0"]))
        self.assertIsInstance(shape, UnorderedSet)
        self.assertTrue(policy.reject_restated)
        shape, _ = classify(problem("mystery", "(1, 2)"))
        self.assertIsInstance(shape, OrderedTuple)
        shape, policy = classify(problem("mystery", "x + 1", direction="Simplify"))
        self.assertIsInstance(shape, Expression)
        self.assertFalse(policy.reject_restated)
        _, policy = classify(problem("mystery", 2, direction="Solve for x"))
        self.assertTrue(policy.reject_restated)

    def test_bad_canonical(self):
        for stored in [None, "2 3", {"a": 1}, [1, 2]]:
            with self.assertRaises(ShapeMismatchError, msg=stored):
                classify(problem("linear-one-variable", stored))


class SplitSequenceTest(SimpleTestCase):
    def test_split(self):
        self.assertEqual(split_sequence("3, -2"), ["3", "-2"])
        self.assertEqual(split_sequence("(3, 1)"), ["3", "1"])
        self.assertEqual(split_sequence("[3, 1]"), ["3", "1"])
        self.assertEqual(split_sequence("(x+1)"), ["(x+1)"])
        self.assertEqual(split_sequence("3,, "), ["3"])
        self.assertEqual(split_sequence([1, 2]), [1, 2])

    def test_parenthesized_items(self):
        self.assertEqual(split_sequence("(-7)/(2), (5)/(3)"), ["(-7)/(2)", "(5)/(3)"])
        self.assertEqual(split_sequence("((1)/(2), (3)/(4))"), ["(1)/(2)", "(3)/(4)"])
        self.assertEqual(split_sequence("(x+1), (x-1)"), ["(x+1)", "(x-1)"])

    def test_enclosed(self):
        self.assertTrue(enclosed("(3, 1)"))
        self.assertTrue(enclosed("[3, 1]"))
        self.assertFalse(enclosed("(-7)/(2), (5)/(3)"))
        self.assertFalse(enclosed("(3, 1]"))
        self.assertFalse(enclosed(""))


class ToValueTest(SimpleTestCase):
    def test_numbers(self):
        self.assertEqual(to_value(4), Scalar("4"))
        self.assertEqual(to_value(4.0), Scalar("4"))
        self.assertEqual(to_value(-2.5), Scalar("-2.5"))
        self.assertEqual(to_value(1e-05), Scalar("0.00001"))
        self.assertEqual(to_value(1.5e-07), Scalar("0.00000015"))

    def test_text(self):
        self.assertEqual(to_value("2x+1"), Expression("2x+1"))
        self.assertEqual(to_value("3/4"), Scalar("3/4"))

    def test_rejected(self):
        for item in [float("inf"), float("nan"), True, None]:
            with self.assertRaises(ShapeMismatchError):
                to_value(item)

    def test_structural_pair_with_fractions(self):
        shape, policy = classify(problem("unknown-type", "((1)/(2), (3)/(4))"))
        self.assertEqual(shape, OrderedTuple((Scalar("(1)/(2)"), Scalar("(3)/(4)"))))
        self.assertEqual(policy.kind, ORDERED_TUPLE)
        shape, policy = classify(problem("unknown-type", "(1)/(2), (3)/(4)"))
        self.assertEqual(policy.kind, UNORDERED_SET)
