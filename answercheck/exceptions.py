# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2018-2025 Stellan Östlund and Hampus Linander


class AnswerCheckError(Exception):
    def __init__(self, value):
        self.value = value

    def __str__(self):
        return str(self.value)


class ParseError(AnswerCheckError):
    """
    Raised when learner or canonical text is not a well formed expression.
    """


class EvalError(AnswerCheckError):
    """
    Raised when a parsed expression has no finite value for the given bindings.
    """


class ShapeMismatchError(AnswerCheckError):
    """
    Raised when problem metadata does not describe any known answer shape.
    """
