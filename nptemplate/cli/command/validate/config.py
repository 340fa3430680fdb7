# SPDX-FileCopyrightText: 2025 Science Live Platform contributors
#
# SPDX-License-Identifier: GPL-3.0-or-later

from __future__ import annotations

from pathlib import Path

from nptemplate.cli.command import NanopubCommand
from nptemplate.config import BASE_SCHEMA, NanopubConfigLoader, YamlFileConfigLoader
from nptemplate.errors import ConfigError


class ValidateConfigCommand(NanopubCommand):
    """Check a configuration file. Non-zero return codes indicate an error.

    config
        {file : Config file to validate}
        {--q|quiet : Do not print reasons in case of invalid config}
    """

    def handle(self):
        path = Path(self.argument("file"))
        if not path.is_file():
            raise FileNotFoundError(f"'{path}' doesn't exist or is not a file")

        try:
            NanopubConfigLoader(BASE_SCHEMA, YamlFileConfigLoader(BASE_SCHEMA, path)).load()
        except ConfigError as e:
            if not self.option("quiet"):
                for r in e.reasons:
                    self.line(r)
            return 1
        return 0
