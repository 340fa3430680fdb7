# SPDX-FileCopyrightText: 2025 Science Live Platform contributors
#
# SPDX-License-Identifier: GPL-3.0-or-later

from __future__ import annotations

import yaml

from nptemplate.cli.command import NanopubCommand
from nptemplate.errors import NanopubError
from nptemplate.form import fields_to_schema, template_statements_to_form
from nptemplate.log import get_child_logger
from nptemplate.template import NanopubTemplate

log = get_child_logger("fields")


class FieldsCommand(NanopubCommand):
    """List the form fields of a template as YAML.

    fields
        {template : File, URL or trusty hash of the template}
        {--schema : Print the validation schema of the values instead}
        {--no-options : Do not fetch the options of choice fields}
    """

    def __init__(self):
        super().__init__()
        self._add_options_from_schema()

    def handle(self):
        source = self.argument("template")
        config = self._load_config()
        fetch_options = False if self.option("no-options") else None
        try:
            template = self._load(NanopubTemplate, source, config, fetch_options=fetch_options)
        except NanopubError as e:
            log.error("failed to load template '%s': %s", source, e)
            return 1

        if self.option("schema"):
            data = fields_to_schema(template.fields, template.statements)
        else:
            data = {
                "template": template.self_uri,
                "name": template.template_metadata.name,
                "kind": str(template.kind),
                "fields": [f.as_dict() for f in template_statements_to_form(template.fields, template.statements)],
            }
        self.write_raw(yaml.safe_dump(data, sort_keys=False, allow_unicode=True).rstrip())
        return 0
