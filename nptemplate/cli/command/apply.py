# SPDX-FileCopyrightText: 2025 Science Live Platform contributors
#
# SPDX-License-Identifier: GPL-3.0-or-later

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from pathlib import Path

import yaml
from clikit.api.args.format import Option

from nptemplate.cli.command import NanopubCommand
from nptemplate.errors import NanopubError, SigningError
from nptemplate.form import validate_values
from nptemplate.log import get_child_logger
from nptemplate.model.publication import PublicationData
from nptemplate.template import NanopubTemplate

log = get_child_logger("apply")


class ApplyCommand(NanopubCommand):
    """Create a new nanopublication from a template and the values of its fields.

    apply
        {template : File, URL or trusty hash of the template}
        {--values= : YAML or JSON file with the values of the fields}
        {--name= : Name of the publishing person}
        {--orcid= : ORCID of the publishing person}
    """

    def __init__(self):
        super().__init__()
        self._config.add_option(
            long_name="email",
            flags=Option.REQUIRED_VALUE,
            description="E-mail address of the publishing person",
        )
        self._config.add_option(
            long_name="license",
            flags=Option.REQUIRED_VALUE,
            description="License URI of the new nanopublication",
        )
        self._config.add_option(
            long_name="timestamp",
            flags=Option.REQUIRED_VALUE,
            description="Creation time in ISO 8601 format (defaults to now)",
        )
        self._config.add_option(
            long_name="example",
            flags=Option.NO_VALUE,
            description="Mark the new nanopublication as an example",
        )
        self._config.add_option(
            long_name="key",
            short_name="k",
            flags=Option.REQUIRED_VALUE,
            description="Private key file; the nanopublication is signed if given and printed unsigned otherwise",
        )
        self._add_options_from_schema()

    @staticmethod
    def _read_values(path: str | None) -> dict:
        if not path:
            return {}
        try:
            with Path(path).open("r", encoding="utf-8") as f:
                values = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise ValueError(f"failed to read values from '{path}': {e}") from e
        if values is None:
            return {}
        if not isinstance(values, Mapping):
            raise ValueError(f"values in '{path}' must be a mapping of field names to values")
        return dict(values)

    def handle(self):
        source = self.argument("template")
        orcid = self.option("orcid")
        name = self.option("name")
        if not orcid or not name:
            raise ValueError("both '--orcid' and '--name' are required")
        timestamp = datetime.fromisoformat(self.option("timestamp")) if self.option("timestamp") else None
        values = self._read_values(self.option("values"))

        config = self._load_config()
        try:
            template = self._load(NanopubTemplate, source, config)
        except NanopubError as e:
            log.error("failed to load template '%s': %s", source, e)
            return 1

        validated, reasons = validate_values(template.fields, values, template.statements)
        if validated is None:
            for r in reasons:
                self.line(r)
            return 1
        # values of resources that are no placeholders are passed on as they are
        values = {**values, **validated}

        pub_data = PublicationData(
            orcid=orcid,
            name=name,
            email=self.option("email"),
            license=self.option("license"),
            timestamp=timestamp,
            is_example=bool(self.option("example")),
        )

        key_path = self.option("key")
        try:
            if key_path:
                private_key = Path(key_path).read_text(encoding="utf-8")
                signed = template.apply_template(values, pub_data, private_key)
                log.info("signed nanopublication %s", signed.source_uri)
                self.write_raw(signed.signed_rdf)
            else:
                dataset = template.generate_nanopublication(values, pub_data)
                self.write_raw(template.serialize_nanopublication(dataset))
        except SigningError as e:
            log.error("%s", e)
            for r in e.reasons:
                log.error("%s", r)
            return 1
        except NanopubError as e:
            log.error("failed to create nanopublication: %s", e)
            return 1
        return 0
