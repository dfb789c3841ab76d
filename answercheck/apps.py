# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2018-2025 Stellan Östlund and Hampus Linander

from django.apps import AppConfig


class AnswerCheckConfig(AppConfig):
    name = "answercheck"
    verbose_name = "Answer checking"

    def ready(self):
        # registers the built in problem types
        import answercheck.shapes  # noqa: F401
