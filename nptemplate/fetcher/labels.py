# SPDX-FileCopyrightText: 2025 Science Live Platform contributors
#
# SPDX-License-Identifier: GPL-3.0-or-later
"""Remote lookup of labels that can not be found inside a document,
like titles of DOIs and names of ORCID or Wikidata entities.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from rdflib import URIRef

from nptemplate.errors import FetcherError, ParseError
from nptemplate.fetcher import Fetcher
from nptemplate.labels import LabelCache
from nptemplate.log import get_child_logger
from nptemplate.rdf import NS, match, parse_trig, sort_key
from nptemplate.uri import extract_dois_from_text, extract_wikidata_entity_id, is_orcid_uri, is_wikidata_entity_uri

CROSSREF_API_URL = "https://api.crossref.org/works/"
WIKIDATA_API_URL = "https://www.wikidata.org/w/api.php"

log = get_child_logger("labels")


class RemoteLabelFetcher:
    """Looks up labels remotely and stores them in a label cache.

    Failed lookups are cached too, with the URI itself as the label,
    so every URI is only fetched once.

    Args:
        fetcher (Fetcher): Used for all the requests.
        cache (LabelCache): Where the labels are stored.
    """

    def __init__(self, fetcher: Fetcher, cache: LabelCache) -> None:
        self._fetcher = fetcher
        self._cache = cache

    def fetch_label(self, uri: str) -> str:
        cached = self._cache.get(uri)
        if cached is not None:
            return cached

        label = None
        try:
            label = self._fetch(uri)
        except (FetcherError, ParseError) as err:
            log.warning("failed to fetch label of '%s': %s", uri, err)
        label = label or uri
        self._cache.set(uri, label)
        return label

    def fetch_labels(self, uris: Iterable[str]) -> dict[str, str]:
        return {uri: self.fetch_label(uri) for uri in uris}

    def _fetch(self, uri: str) -> str | None:
        dois = extract_dois_from_text(uri)
        if dois:
            return self._fetch_doi_title(dois[0])
        if is_wikidata_entity_uri(uri):
            return self._fetch_wikidata_label(uri)
        if is_orcid_uri(uri):
            return self._fetch_orcid_name(uri)
        return self._fetch_rdf_label(uri)

    def _fetch_doi_title(self, doi: str) -> str | None:
        data = self._fetcher.fetch_json(CROSSREF_API_URL + doi)
        titles = _get(data, "message", "title") or []
        return titles[0] if titles else None

    def _fetch_wikidata_label(self, uri: str) -> str | None:
        entity_id = extract_wikidata_entity_id(uri)
        if not entity_id:
            return None
        data = self._fetcher.fetch_json(WIKIDATA_API_URL, params={
            "action": "wbgetentities",
            "ids": entity_id,
            "languages": "en",
            "props": "labels",
            "format": "json",
        })
        return _get(data, "entities", entity_id, "labels", "en", "value")

    def _fetch_orcid_name(self, uri: str) -> str | None:
        data = self._fetcher.fetch_json(f"{uri.rstrip('/')}/public-record.json")
        return _get(data, "displayName")

    def _fetch_rdf_label(self, uri: str) -> str | None:
        dataset, _ = parse_trig(self._fetcher.fetch(uri), base=uri)
        # a name of the document itself or of its assertion
        subjects = {URIRef(uri), URIRef(uri + "#assertion"), URIRef(uri + "/assertion")}
        for predicate in (NS.RDFS.label, NS.FOAF.name):
            labels = sorted((o for s, _, o, _ in match(dataset, None, predicate) if s in subjects), key=sort_key)
            if labels:
                return str(labels[0])
        return None


def _get(data: Any, *keys: str) -> Any:
    for key in keys:
        if not isinstance(data, dict):
            return None
        data = data.get(key)
    return data
