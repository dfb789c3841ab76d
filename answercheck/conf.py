# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2018-2025 Stellan Östlund and Hampus Linander

"""
Configuration of the answer checker.

Projects override any of the defaults below with a dict in settings, e.g.

    ANSWERCHECK = {"REQUIRE_SIMPLIFIED": False, "EXTRA_SAMPLE_POINTS": (0.37, 1.91)}

The flags reproduce the older validator variants: turning off REJECT_RESTATED,
REQUIRE_SIMPLIFIED and SYMBOLIC_FALLBACK gives the plain numeric checker.
"""

from django.conf import settings

DEFAULTS = {
    "ZERO_TOLERANCE": 1.0e-10,
    "SAMPLE_POINTS": (-2, -1, -0.5, 0, 0.5, 1, 2, 3),
    "EXTRA_SAMPLE_POINTS": (),
    "MIN_VALID_POINTS": 4,
    "SYMBOLIC_FALLBACK": True,
    "SYMBOLIC_CONFIRM": False,
    "REJECT_RESTATED": True,
    "DETECT_SCALED_VARIATIONS": True,
    "REQUIRE_SIMPLIFIED": True,
    "ALLOW_ANSWER_LHS": False,
    "MAX_INPUT_LENGTH": 200,
    "MAX_EXPONENT": 64,
    "MAX_DEPTH": 50,
    "SYMBOLIC_MAX_DEGREE": 10,
    "SYMBOLIC_MAX_NODES": 60,
    "SYMBOLIC_MAX_TERMS": 200,
    "EQUATION_SOLVING_TYPES": (
        "linear-one-variable",
        "linear-two-variables",
        "quadratic-completing-square",
        "quadratic-factoring",
        "quadratic-formula",
        "systems-of-equations",
    ),
    "SIMPLIFICATION_TYPES": ("polynomial-simplification",),
}


def get_config(**overrides):
    config = dict(DEFAULTS)
    if settings.configured:
        config.update(getattr(settings, "ANSWERCHECK", {}) or {})
    config.update(overrides)
    return config


def sample_points(config):
    return tuple(config["SAMPLE_POINTS"]) + tuple(config["EXTRA_SAMPLE_POINTS"])
