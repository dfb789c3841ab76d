# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2018-2025 Stellan Östlund and Hampus Linander

import re

import numpy

from .expression import CONSTANTS, FUNCTIONS

# variable j is shifted this many places along the battery
STAGGER = 3


def extract_variables(*texts, declared=()):
    """
    Single letter variable names used in any of texts, sorted.

    Runs of letters are read as products of single letter variables, with the
    function names and the constants pi and e stripped out first.
    """
    found = set()
    reserved = [w for w in sorted(list(FUNCTIONS) + list(CONSTANTS), key=len, reverse=True) if w not in declared]
    for text in texts:
        for run in re.findall(r"[A-Za-z]+", text or ""):
            for word in reserved:
                run = run.replace(word, " ")
            found.update(c for c in run if c.isalpha())
    return sorted(found)


def sample_bindings(variables, points):
    """
    Bindings for the substitution test: one numpy array per variable.

    Every variable is bound at every point. With a single variable the values
    are the points themselves; further variables read the battery at a fixed
    offset so that no two variables coincide at any point.
    """
    points = numpy.asarray(points, dtype=float)
    n = len(points)
    bindings = {}
    for j, name in enumerate(sorted(variables)):
        bindings[name] = numpy.roll(points, -((STAGGER * j) % n)) if n else points
    return bindings
