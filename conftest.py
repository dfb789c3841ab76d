# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2018-2025 Stellan Östlund and Hampus Linander

"""
Configuration used by all Pytest tests.
"""

import logging

import pytest

from answercheck.problem import Problem

logger = logging.getLogger(__name__)


@pytest.fixture
def make_problem():
    """
    Factory for Problem records in the camelCase form the application stores.
    """

    def make(problem_type="linear-one-variable", canonical=4, **kwargs):
        data = {"problemType": problem_type, "canonicalAnswer": canonical}
        data.update(kwargs)
        return Problem.from_dict(data)

    return make
