# SPDX-FileCopyrightText: 2025 Science Live Platform contributors
#
# SPDX-License-Identifier: GPL-3.0-or-later

from __future__ import annotations

import unittest

from nptemplate.uri import (clean_orcid_uri, extract_dois_from_text, extract_orcid_id, extract_wikidata_entity_id,
                            get_nanopub_hash, get_nanopub_suffix, get_uri_end, get_uri_fragment, is_doi_uri,
                            is_nanopub_uri, is_orcid_uri, is_wikidata_entity_uri, parse_uri, to_platform_uri,
                            to_registry_download_url)

HASH = "RA1234567890abcdefghijABCDEFGHIJklmnopqrst_-Z"
NP_URI = "https://w3id.org/np/" + HASH


class TestUriEnd(unittest.TestCase):

    def test_fragment_wins(self):
        self.assertEqual(get_uri_end("http://example.com/page#section"), "section")

    def test_last_path_segment(self):
        self.assertEqual(get_uri_end("https://doi.org/10.1016/j.joclim.2025.100573"), "j.joclim.2025.100573")

    def test_trailing_slash(self):
        self.assertEqual(get_uri_end("https://w3id.org/np/RA123/"), "RA123")

    def test_nothing(self):
        self.assertIsNone(get_uri_end("https://example.com"))

    def test_fragment(self):
        self.assertEqual(get_uri_fragment("http://example.com/a#b#c"), "b#c")
        self.assertEqual(get_uri_fragment("http://example.com/a#"), "")
        self.assertEqual(get_uri_fragment("http://example.com/a"), "")


class TestNanopubUris(unittest.TestCase):

    def test_hash(self):
        self.assertEqual(get_nanopub_hash(NP_URI), HASH)
        self.assertEqual(get_nanopub_hash(NP_URI + "/assertion"), HASH)
        self.assertEqual(get_nanopub_hash(NP_URI, include_module_prefix=False), HASH[2:])
        self.assertIsNone(get_nanopub_hash("https://w3id.org/np/RAtooshort"))

    def test_is_nanopub_uri(self):
        self.assertTrue(is_nanopub_uri(NP_URI))
        self.assertFalse(is_nanopub_uri("https://example.org/np"))

    def test_suffix(self):
        self.assertEqual(get_nanopub_suffix(NP_URI + "#assertion"), "assertion")
        self.assertEqual(get_nanopub_suffix(NP_URI + "/pubinfo"), "pubinfo")
        self.assertIsNone(get_nanopub_suffix(NP_URI))

    def test_parse_uri(self):
        self.assertEqual(parse_uri(HASH), NP_URI)
        self.assertEqual(parse_uri(NP_URI), NP_URI)
        self.assertEqual(parse_uri(None), "")

    def test_registry_download_url(self):
        self.assertEqual(to_registry_download_url(NP_URI, "trig"),
                         "https://registry.knowledgepixels.com/np/" + HASH + ".trig")
        self.assertEqual(to_registry_download_url(NP_URI), "https://registry.knowledgepixels.com/np/" + HASH)
        self.assertIsNone(to_registry_download_url("https://example.org/"))

    def test_platform_uri(self):
        self.assertEqual(to_platform_uri(NP_URI), "/np/?uri=https%3A%2F%2Fw3id.org%2Fnp%2F" + HASH)
        self.assertTrue(to_platform_uri(NP_URI, relative=False).startswith("https://platform.sciencelive4all.org/np/"))
        self.assertEqual(to_platform_uri("https://example.org/x"), "https://example.org/x")


class TestExternalIds(unittest.TestCase):

    def test_doi(self):
        self.assertTrue(is_doi_uri("https://doi.org/10.1016/j.joclim.2025.100573"))
        self.assertFalse(is_doi_uri("https://example.org/10.1016"))
        self.assertEqual(extract_dois_from_text("see https://doi.org/10.5281/zenodo.1234567 for details"),
                         ["10.5281/zenodo.1234567"])

    def test_wikidata(self):
        self.assertTrue(is_wikidata_entity_uri("http://www.wikidata.org/entity/Q42"))
        self.assertEqual(extract_wikidata_entity_id("http://www.wikidata.org/entity/Q42"), "Q42")
        self.assertIsNone(extract_wikidata_entity_id("http://www.wikidata.org/entity/P31"))

    def test_orcid(self):
        self.assertTrue(is_orcid_uri("https://orcid.org/0000-0002-1784-2920"))
        self.assertEqual(clean_orcid_uri("0000-0002-1784-2920"), "https://orcid.org/0000-0002-1784-2920")
        self.assertEqual(clean_orcid_uri("http://orcid.org/0000-0002-1784-2920"), "https://orcid.org/0000-0002-1784-2920")
        self.assertEqual(extract_orcid_id("https://orcid.org/0000-0001-2345-678x"), "0000-0001-2345-678X")
        self.assertIsNone(extract_orcid_id("nobody"))


if __name__ == '__main__':
    unittest.main()
