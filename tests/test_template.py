# SPDX-FileCopyrightText: 2025 Science Live Platform contributors
#
# SPDX-License-Identifier: GPL-3.0-or-later

from __future__ import annotations

import unittest

from np_fixtures import (CITES, EXTENDED_TEMPLATE_TRIG, OPTIONS_TRIG, OPTIONS_URI, TEMPLATE_TRIG, TEMPLATE_URI,
                         mock_fetcher)
from nptemplate.model.placeholder import PlaceholderType, TemplateKind
from nptemplate.model.template_field import FieldOption
from nptemplate.template import NanopubTemplate

SUB = TEMPLATE_URI + "/"


class TestTemplateMetadata(unittest.TestCase):

    def setUp(self):
        self.template = NanopubTemplate.load_string(TEMPLATE_TRIG, fetcher=mock_fetcher())

    def test_metadata(self):
        meta = self.template.template_metadata
        self.assertEqual(meta.name, "Declaring citations with CiTO")
        self.assertEqual(meta.description, "Declare that an article cites another one.")
        self.assertEqual(meta.target_nanopub_type, CITES)
        self.assertEqual(meta.target_label_pattern, "Citations for: ${article}")
        self.assertEqual(meta.tags, ["Citation"])
        self.assertEqual(self.template.kind, TemplateKind.ASSERTION)

    def test_statements_from_both_predicates(self):
        statements = self.template.statements
        self.assertEqual(list(statements), [SUB + "st1", SUB + "st2"])
        st1, st2 = statements.values()
        self.assertEqual(st1.name, "st1")
        self.assertEqual([str(t) for t in st1.terms()], [SUB + "article", SUB + "cites", SUB + "cited"])
        self.assertFalse(st1.is_optional)
        self.assertTrue(st2.is_optional)
        self.assertFalse(st2.is_repeatable)

    def test_incomplete_statement_is_skipped(self):
        trig = TEMPLATE_TRIG.replace("rdf:object sub:comment .", "rdfs:comment \"no object\" .")
        with self.assertLogs("nptemplate", level="WARNING"):
            template = NanopubTemplate.load_string(trig, fetcher=mock_fetcher())
        self.assertEqual(list(template.statements), [SUB + "st1"])


class TestTemplateFields(unittest.TestCase):

    def setUp(self):
        self.template = NanopubTemplate.load_string(TEMPLATE_TRIG, fetcher=mock_fetcher())

    def test_fields(self):
        self.assertEqual([f.name for f in self.template.fields], ["article", "cited", "cites", "comment"])
        article = self.template.field("article")
        self.assertEqual(article.id, SUB + "article")
        self.assertEqual(article.label, "DOI of the citing article")
        self.assertEqual(article.type, PlaceholderType.EXTERNAL_URI)
        self.assertFalse(article.multiple)
        self.assertIsNone(self.template.field("nothing"))

    def test_required(self):
        # in a mandatory and an optional statement
        self.assertTrue(self.template.field("article").required)
        self.assertTrue(self.template.field("cited").required)
        # only the object of an optional statement
        self.assertFalse(self.template.field("comment").required)

    def test_placeholder_in_no_statement_is_required(self):
        trig = TEMPLATE_TRIG.replace("nt:includes sub:st2 ;", "")
        template = NanopubTemplate.load_string(trig, fetcher=mock_fetcher())
        self.assertTrue(template.field("comment").required)

    def test_inline_options(self):
        cites = self.template.field("cites")
        self.assertEqual(cites.type, PlaceholderType.RESTRICTED_CHOICE)
        self.assertEqual(cites.options, [
            FieldOption(name=CITES, description="cites", uri=CITES),
            FieldOption(name="http://purl.org/spar/cito/extends", description="extends",
                        uri="http://purl.org/spar/cito/extends"),
        ])

    def test_regex(self):
        comment = self.template.field("comment")
        self.assertEqual(comment.type, PlaceholderType.LITERAL)
        self.assertEqual(comment.regex, "^[A-Z]")

    def test_versioned_ontology_uris(self):
        latest = "http://w3id.org/np/o/ntemplate/latest/"
        trig = TEMPLATE_TRIG \
            .replace("a nt:ExternalUriPlaceholder", f"a <{latest}ExternalUriPlaceholder>") \
            .replace("a nt:OptionalStatement", f"a <{latest}OptionalStatement>")
        template = NanopubTemplate.load_string(trig, fetcher=mock_fetcher())
        self.assertEqual(template.field("article").type, PlaceholderType.EXTERNAL_URI)
        self.assertFalse(template.field("comment").required)


class TestExtendedTemplate(unittest.TestCase):

    def setUp(self):
        self.fetcher = mock_fetcher({OPTIONS_URI: OPTIONS_TRIG})
        with self.assertLogs("nptemplate", level="WARNING") as cm:
            self.template = NanopubTemplate.load_string(EXTENDED_TEMPLATE_TRIG, fetcher=self.fetcher)
        self.warnings = cm.output

    def test_kind(self):
        self.assertEqual(self.template.kind, TemplateKind.UNLISTED)

    def test_fetched_options(self):
        topic = self.template.field("topic")
        self.assertEqual(topic.type, PlaceholderType.GUIDED_CHOICE)
        self.assertEqual(topic.possible_values_from, OPTIONS_URI)
        self.assertEqual([(o.name, o.description) for o in topic.options], [
            ("https://example.org/topic/climate", "Climate"),
            ("https://example.org/topic/ocean", "Ocean"),
        ])
        self.fetcher.fetch.assert_called_once_with(OPTIONS_URI)

    def test_failed_options_fetch_degrades(self):
        with self.assertLogs("nptemplate", level="WARNING") as cm:
            template = NanopubTemplate.load_string(EXTENDED_TEMPLATE_TRIG, fetcher=mock_fetcher())
        self.assertIsNone(template.field("topic").options)
        self.assertTrue(any("possible values" in line for line in cm.output))

    def test_truncated_options_document_degrades(self):
        fetcher = mock_fetcher({OPTIONS_URI: "@prefix : <http://x/> . :a :b"})
        with self.assertLogs("nptemplate", level="WARNING") as cm:
            template = NanopubTemplate.load_string(EXTENDED_TEMPLATE_TRIG, fetcher=fetcher)
        self.assertIsNone(template.field("topic").options)
        self.assertEqual(template.field("title").type, PlaceholderType.LONG_LITERAL)
        self.assertTrue(any("possible values" in line for line in cm.output))

    def test_options_not_fetched(self):
        fetcher = mock_fetcher({OPTIONS_URI: OPTIONS_TRIG})
        with self.assertLogs("nptemplate", level="WARNING"):
            template = NanopubTemplate.load_string(EXTENDED_TEMPLATE_TRIG, fetcher=fetcher, fetch_options=False)
        fetcher.fetch.assert_not_called()
        self.assertIsNone(template.field("topic").options)

    def test_unknown_placeholder_type(self):
        rating = self.template.field("rating")
        self.assertEqual(rating.type, PlaceholderType.PLACEHOLDER)
        self.assertTrue(rating.type.is_literal())
        self.assertFalse(rating.required)
        self.assertTrue(any("FancyNewPlaceholder" in line for line in self.warnings))

    def test_repeatable(self):
        keyword = self.template.field("keyword")
        self.assertTrue(keyword.multiple)
        self.assertEqual(keyword.prefix, "https://example.org/keyword/")
        self.assertFalse(self.template.field("title").multiple)
        self.assertTrue(self.template.statements[SUB + "st2"].is_repeatable)

    def test_local_resources_are_no_fields(self):
        self.assertEqual([f.name for f in self.template.fields], ["keyword", "rating", "title", "topic"])


if __name__ == '__main__':
    unittest.main()
