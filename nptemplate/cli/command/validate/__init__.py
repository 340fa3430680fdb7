# SPDX-FileCopyrightText: 2025 Science Live Platform contributors
#
# SPDX-License-Identifier: GPL-3.0-or-later

from nptemplate.cli.command import NanopubCommand
from nptemplate.cli.command.validate.config import ValidateConfigCommand
from nptemplate.cli.command.validate.template import ValidateTemplateCommand


class ValidateCommand(NanopubCommand):
    """Validate configuration files and templates.

    validate
    """

    commands = [
        ValidateConfigCommand(),
        ValidateTemplateCommand(),
    ]

    def handle(self):
        self.call("help", "validate")
