# SPDX-FileCopyrightText: 2025 Science Live Platform contributors
#
# SPDX-License-Identifier: GPL-3.0-or-later

from __future__ import annotations

from nptemplate.cli.command import NanopubCommand
from nptemplate.errors import NanopubError
from nptemplate.template import NanopubTemplate


class ValidateTemplateCommand(NanopubCommand):
    """Check that a template can be loaded and its fields extracted.

    template
        {source : File, URL or trusty hash of the template}
        {--q|quiet : Do not print the reason in case of an invalid template}
    """

    def __init__(self):
        super().__init__()
        self._add_options_from_schema()

    def handle(self):
        try:
            template = self._load(NanopubTemplate, self.argument("source"), self._load_config(), fetch_options=False)
        except NanopubError as e:
            if not self.option("quiet"):
                self.line(str(e))
            return 1
        if not template.statements and not self.option("quiet"):
            self.line("template has no statements")
        return 0 if template.statements else 1
