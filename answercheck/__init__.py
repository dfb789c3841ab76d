# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2018-2025 Stellan Östlund and Hampus Linander

"""
Answer equivalence checking for algebra practice problems.

    from answercheck.validate import validate_answer

    validate_answer("3, -2", {"problemType": "quadratic-factoring", "canonicalAnswer": [3, -2], ...})
"""
