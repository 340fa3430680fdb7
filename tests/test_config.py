# SPDX-FileCopyrightText: 2025 Science Live Platform contributors
#
# SPDX-License-Identifier: GPL-3.0-or-later

from __future__ import annotations

import tempfile
import unittest
from pathlib import Path

from nptemplate.config import (BASE_SCHEMA, DEFAULT_LICENSE, CliConfigLoader, Config, NanopubConfigLoader,
                               YamlFileConfigLoader, default_config, effective_config_info, iterate_schema)
from nptemplate.errors import ConfigError

CONFIG_YAML = """
user_agent: "  my-agent/1.0  "
fetcher:
  timeout: 5
  fetch_options: "no"
signing:
  command: "java;-jar;nanopub.jar;sign"
unknown_option: 42
"""


class TestConfig(unittest.TestCase):

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.path = Path(self._tmp.name) / "config.yml"
        self.path.write_text(CONFIG_YAML)

    def tearDown(self):
        self._tmp.cleanup()

    def test_defaults(self):
        config = default_config()
        self.assertEqual(config.fetcher.timeout, 10)
        self.assertEqual(config.fetcher.retries, 3)
        self.assertTrue(config.fetcher.fetch_options)
        self.assertEqual(config.publishing.base_uri, "https://w3id.org/np/")
        self.assertEqual(config.publishing.default_license, DEFAULT_LICENSE)
        self.assertEqual(config.signing.command, ["np", "sign"])

    def test_yaml_file(self):
        config = NanopubConfigLoader(BASE_SCHEMA, YamlFileConfigLoader(BASE_SCHEMA, self.path)).load()
        self.assertEqual(config.user_agent, "my-agent/1.0")
        self.assertEqual(config.fetcher.timeout, 5)
        self.assertFalse(config.fetcher.fetch_options)
        self.assertEqual(config.fetcher.retries, 3)
        self.assertEqual(config.signing.command, ["java", "-jar", "nanopub.jar", "sign"])
        self.assertNotIn("unknown_option", config)

    def test_cli_options_win(self):
        cli = CliConfigLoader(BASE_SCHEMA, {"fetcher": {"timeout": "20", "retries": None}})
        config = NanopubConfigLoader(BASE_SCHEMA, cli, YamlFileConfigLoader(BASE_SCHEMA, self.path)).load()
        self.assertEqual(config.fetcher.timeout, 20)
        self.assertEqual(config.fetcher.retries, 3)

    def test_invalid_value(self):
        self.path.write_text("fetcher:\n  timeout: 0\n")
        with self.assertRaises(ConfigError) as cm:
            NanopubConfigLoader(BASE_SCHEMA, YamlFileConfigLoader(BASE_SCHEMA, self.path)).load()
        self.assertTrue(any("fetcher.timeout" in r for r in cm.exception.reasons))

    def test_missing_file(self):
        with self.assertRaises(ConfigError):
            YamlFileConfigLoader(BASE_SCHEMA, Path(self._tmp.name) / "nope.yml").load()

    def test_invalid_yaml(self):
        self.path.write_text("fetcher: [timeout\n")
        with self.assertRaises(ConfigError):
            YamlFileConfigLoader(BASE_SCHEMA, self.path).load()

    def test_access(self):
        config = Config({"fetcher": {"timeout": 3}})
        self.assertEqual(config["fetcher"]["timeout"], 3)
        self.assertEqual(config[["fetcher", "timeout"]], 3)
        self.assertEqual(config.fetcher.timeout, 3)
        config[["signing", "command"]] = ["sign"]
        self.assertEqual(config.signing.command, ["sign"])
        with self.assertRaises(AttributeError):
            _ = config.nothing

    def test_long_names(self):
        long_names = {tuple(k): r["meta"].get("long_name") for k, r in iterate_schema(BASE_SCHEMA) if "meta" in r}
        self.assertEqual(long_names[("fetcher", "timeout")], "fetcher-timeout")
        self.assertEqual(long_names[("publishing", "base_uri")], "base-uri")
        self.assertIsNone(long_names[("fetcher", "fetch_options")])

    def test_effective_config_info(self):
        lines = list(effective_config_info(default_config()))
        self.assertIn("fetcher.timeout=10", lines)
        self.assertIn(f"publishing.default_license={DEFAULT_LICENSE}", lines)
        self.assertEqual(len(lines), len(list(iterate_schema(BASE_SCHEMA))))


if __name__ == '__main__':
    unittest.main()
