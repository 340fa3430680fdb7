# SPDX-FileCopyrightText: 2025 Science Live Platform contributors
#
# SPDX-License-Identifier: GPL-3.0-or-later

from __future__ import annotations

import unittest

from np_fixtures import ARTICLE, CITED, CITES, EXTENDED_TEMPLATE_TRIG, TEMPLATE_TRIG, mock_fetcher
from nptemplate.form import (field_kind, fields_to_schema, template_fields_to_form, template_statements_to_form,
                             validate_values)
from nptemplate.model.form_field import FormFieldKind
from nptemplate.model.placeholder import PlaceholderType
from nptemplate.model.template_field import TemplateField
from nptemplate.template import NanopubTemplate


class TestFieldKinds(unittest.TestCase):

    def test_kinds(self):
        expected = {
            PlaceholderType.URI: FormFieldKind.URL,
            PlaceholderType.AUTO_ESCAPE_URI: FormFieldKind.URL,
            PlaceholderType.EXTERNAL_URI: FormFieldKind.URL,
            PlaceholderType.TRUSTY_URI: FormFieldKind.URL,
            PlaceholderType.GUIDED_CHOICE: FormFieldKind.COMBOBOX,
            PlaceholderType.RESTRICTED_CHOICE: FormFieldKind.COMBOBOX,
            PlaceholderType.TEXT: FormFieldKind.TEXT,
            PlaceholderType.LITERAL: FormFieldKind.TEXT,
            PlaceholderType.LONG_LITERAL: FormFieldKind.TEXTAREA,
            PlaceholderType.INTRODUCED_RESOURCE: FormFieldKind.TEXTAREA,
            PlaceholderType.REPEATABLE_STATEMENT: FormFieldKind.ARRAY,
            PlaceholderType.PLACEHOLDER: FormFieldKind.TEXT,
        }
        for placeholder_type, kind in expected.items():
            self.assertEqual(field_kind(placeholder_type), kind, placeholder_type)


class TestForm(unittest.TestCase):

    def setUp(self):
        self.template = NanopubTemplate.load_string(TEMPLATE_TRIG, fetcher=mock_fetcher())

    def test_form_fields(self):
        form = {f.name: f for f in template_fields_to_form(self.template.fields)}
        self.assertEqual(form["article"].kind, FormFieldKind.URL)
        self.assertTrue(form["article"].required)
        self.assertEqual(form["cites"].kind, FormFieldKind.COMBOBOX)
        self.assertTrue(form["cites"].searchable)
        self.assertEqual([o.label for o in form["cites"].options], ["cites", "extends"])
        self.assertEqual(form["comment"].kind, FormFieldKind.TEXT)
        self.assertFalse(form["comment"].required)

    def test_as_dict(self):
        form = {f.name: f for f in template_fields_to_form(self.template.fields)}
        data = form["cites"].as_dict()
        self.assertEqual(data["kind"], "combobox")
        self.assertEqual(data["options"][0], {"value": CITES, "label": "cites"})
        self.assertNotIn("fields", data)

    def test_statement_form(self):
        form = template_statements_to_form(self.template.fields, self.template.statements)
        self.assertEqual([f.name for f in form],
                         ["article", "cites", "cited", "article", "_const_st2_predicate", "comment"])
        static = form[4]
        self.assertEqual(static.kind, FormFieldKind.STATIC)
        self.assertEqual(static.default, "http://www.w3.org/2000/01/rdf-schema#comment")
        self.assertEqual(static.section, "Statement st2")

    def test_repeatable_statement_form(self):
        template = NanopubTemplate.load_string(EXTENDED_TEMPLATE_TRIG, fetcher=mock_fetcher(), fetch_options=False)
        form = {f.name: f for f in template_statements_to_form(template.fields, template.statements)}
        repeated = form["st2"]
        self.assertEqual(repeated.kind, FormFieldKind.ARRAY)
        self.assertEqual(repeated.item_kind, "object")
        self.assertEqual(repeated.min_items, 1)
        self.assertEqual([f.name for f in repeated.fields],
                         ["_const_st2_subject", "_const_st2_predicate", "keyword"])


class TestValidation(unittest.TestCase):

    def setUp(self):
        self.template = NanopubTemplate.load_string(TEMPLATE_TRIG, fetcher=mock_fetcher())

    def _validate(self, values):
        return validate_values(self.template.fields, values, self.template.statements)

    def test_schema(self):
        schema = fields_to_schema(self.template.fields)
        self.assertEqual(schema["article"], {"type": "string", "check_with": "url", "required": True})
        self.assertEqual(schema["cites"]["allowed"], [CITES, "http://purl.org/spar/cito/extends"])
        self.assertEqual(schema["comment"],
                         {"type": "string", "empty": False, "pattern": "^[A-Z]", "nullable": True})

    def test_valid(self):
        values, reasons = self._validate({**{"article": ARTICLE, "cites": CITES, "cited": CITED}, "unknown": "x"})
        self.assertEqual(reasons, [])
        self.assertEqual(values, {"article": ARTICLE, "cites": CITES, "cited": CITED})

    def test_missing(self):
        values, reasons = self._validate({"article": ARTICLE, "cites": CITES})
        self.assertIsNone(values)
        self.assertEqual(reasons, ["missing value 'cited'."])

    def test_invalid(self):
        values, reasons = self._validate({
            "article": "not a url",
            "cites": "http://purl.org/spar/cito/refutes",
            "cited": CITED,
            "comment": "lower case",
        })
        self.assertIsNone(values)
        self.assertEqual(len(reasons), 3)
        self.assertTrue(any(r.startswith("invalid value 'article'") for r in reasons))
        self.assertTrue(any(r.startswith("invalid value 'cites'") for r in reasons))
        self.assertTrue(any(r.startswith("invalid value 'comment'") and "pattern" in r for r in reasons))

    def test_unknown_type_is_plain_string(self):
        field = TemplateField(id="urn:x", name="x", label="x", type=PlaceholderType.PLACEHOLDER, required=False)
        self.assertEqual(fields_to_schema([field]), {"x": {"type": "string", "nullable": True}})

    def test_dynamic_list(self):
        field = TemplateField(id="urn:keywords", name="keywords", label="Keywords",
                              type=PlaceholderType.REPEATABLE_STATEMENT, required=False)
        values, reasons = validate_values([field], {"keywords": ["sea", "ice"]})
        self.assertEqual(reasons, [])
        self.assertEqual(values, {"keywords": ["sea", "ice"]})

        values, reasons = validate_values([field], {})
        self.assertEqual(values, {"keywords": []})

        values, reasons = validate_values([field], {"keywords": ["sea", 1]})
        self.assertIsNone(values)
        self.assertEqual(len(reasons), 1)

    def test_repeatable(self):
        template =NanopubTemplate.load_string(EXTENDED_TEMPLATE_TRIG, fetcher=mock_fetcher(), fetch_options=False)
        schema = fields_to_schema(template.fields, template.statements)
        self.assertNotIn("required", schema["keyword"])
        self.assertEqual(schema["st2"]["type"], "list")

        values, reasons = validate_values(template.fields, {
            "title": "Sea levels",
            "topic": "https://example.org/topic/ocean",
            "st2": [{"keyword": "https://example.org/keyword/sea"}],
        }, template.statements)
        self.assertEqual(reasons, [])
        self.assertEqual(values["st2"], [{"keyword": "https://example.org/keyword/sea"}])

        values, reasons = validate_values(template.fields, {"title": "Sea levels", "topic": "x"}, template.statements)
        self.assertEqual(reasons, [])
        self.assertEqual(values["st2"], [])


if __name__ == '__main__':
    unittest.main()
