# SPDX-FileCopyrightText: 2025 Science Live Platform contributors
#
# SPDX-License-Identifier: GPL-3.0-or-later

from __future__ import annotations

import re
from collections.abc import Mapping
from pathlib import Path

from cleo import Command
from clikit.api.args.format import Option

from nptemplate.config import (BASE_SCHEMA, CliConfigLoader, Config, NanopubConfigLoader, YamlFileConfigLoader,
                               effective_config_info, iterate_schema)
from nptemplate.log import get_child_logger
from nptemplate.store import NanopubStore

_p_option_name = re.compile(r"[^a-z0-9]")

log = get_child_logger("cli")


class NanopubCommand(Command):
    """Base of all commands, dealing with configuration and loading documents."""

    def _load_config(self) -> Config:
        cli_options = self._get_options_from_schema(BASE_SCHEMA)

        # normalize and validate config
        cli_config_loader = CliConfigLoader(BASE_SCHEMA, cli_options)
        yaml_config_loader = YamlFileConfigLoader(BASE_SCHEMA, self.option("config"))
        # the order specifies the priority of the options (CLI before file)
        config = NanopubConfigLoader(BASE_SCHEMA, cli_config_loader, yaml_config_loader).load()
        for line in effective_config_info(config):
            log.debug("config: %s", line)
        return config

    @staticmethod
    def _load(store_class: type[NanopubStore], source: str, config: Config, **kwargs) -> NanopubStore:
        """Load a document from a local file if it exists, otherwise from a URL."""
        path = Path(source)
        if path.is_file():
            return store_class.load_string(path.read_text(encoding="utf-8"), config=config, **kwargs)
        return store_class.load(source, config=config, **kwargs)

    @staticmethod
    def _normalize_option_name(name: str) -> str:
        return _p_option_name.sub("-", name)

    def _add_options_from_schema(self, schema: Mapping = BASE_SCHEMA) -> None:
        for _, rule in iterate_schema(schema):
            meta = rule.get("meta", {})
            long_name = meta.get("long_name")
            if not long_name:
                continue
            self._config.add_option(
                long_name=self._normalize_option_name(long_name),
                flags=Option.REQUIRED_VALUE,
                description=meta.get("description"),
            )

    def _get_options_from_schema(self, schema: Mapping = BASE_SCHEMA) -> Config:
        config = Config()
        for key, rule in iterate_schema(schema):
            long_name = rule.get("meta", {}).get("long_name")
            if long_name:
                config[key] = self.option(self._normalize_option_name(long_name))
        return config

    def write_raw(self, text: str) -> None:
        """Write to standard output without interpreting style tags (RDF is full of `<...>`)."""
        self.io.write_line_raw(text)
