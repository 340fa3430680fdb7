# SPDX-FileCopyrightText: 2025 Science Live Platform contributors
#
# SPDX-License-Identifier: GPL-3.0-or-later
"""Human readable labels for URIs.

Labels are found without any network access, by a chain of strategies
that are tried in a fixed order. A strategy either returns a label,
returns None to pass on to the next strategy, or returns `unresolved`
to stop the chain, signalling that the label is better looked up remotely
(see `nptemplate.fetcher.labels`).
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from typing import TYPE_CHECKING, Any

from rdflib import URIRef

from nptemplate.errors import NotOverriddenError
from nptemplate.log import get_child_logger
from nptemplate.rdf import NS, match, shrink_uri, sort_key
from nptemplate.uri import (get_nanopub_suffix, get_uri_end, is_doi_uri, is_nanopub_uri, is_orcid_uri,
                            is_wikidata_entity_uri)

if TYPE_CHECKING:
    from nptemplate.store import NanopubStore

# represents a label that can only be found remotely
unresolved = type("UnresolvedType", (), {"__repr__": lambda x: "unresolved"})()

COMMON_LABELS = {
    "http://www.w3.org/1999/02/22-rdf-syntax-ns#type": "is a",
    "https://w3id.org/np/o/ntemplate/wasCreatedFromTemplate": "was created from template",
    "https://w3id.org/np/o/ntemplate/wasCreatedFromProvenanceTemplate": "was created from Provenance template",
    "https://w3id.org/np/o/ntemplate/wasCreatedFromPubinfoTemplate": "was created from Pubinfo template",
    "http://purl.org/nanopub/x/hasAlgorithm": "has signature algorithm",
    "http://purl.org/nanopub/x/hasPublicKey": "has public key",
    "http://purl.org/nanopub/x/hasSignature": "has signature",
    "http://purl.org/nanopub/x/hasSignatureTarget": "has signature target",
    "http://purl.org/nanopub/x/signedBy": "was signed by",
    "http://xmlns.com/foaf/0.1/name": "is named",
    "http://purl.org/dc/terms/creator": "was created by",
    "http://purl.org/dc/terms/created": "was created at",
    "http://purl.org/dc/terms/license": "has license",
    "http://www.w3.org/2000/01/rdf-schema#label": "is labelled",
    "http://purl.org/nanopub/x/hasNanopubType": "is a nanopub of type",
    "http://purl.org/nanopub/x/wasCreatedAt": "is a nanopub created at",
    "http://www.w3.org/2000/01/rdf-schema#comment": "has the quote or comment",
    "http://purl.org/spar/cito/includesQuotationFrom": "includes quotation from",
    "http://www.w3.org/ns/prov#wasAttributedTo": "was attributed to",
    "https://w3id.org/np/o/ntemplate/hasLabelFromApi": "has label from API",
}

COMMON_LICENSES = {
    "https://creativecommons.org/licenses/by/4.0/": "Attribution 4.0 International (CC BY 4.0)",
    "https://creativecommons.org/licenses/by-sa/4.0/": "Attribution-ShareAlike 4.0 International (CC BY-SA 4.0)",
    "https://creativecommons.org/publicdomain/zero/1.0/": "CC0 1.0 Universal (CC0 1.0) Public Domain Dedication",
}

log = get_child_logger("labels")


class LabelCache:
    """Labels of URIs, shared by all stores it is handed to.

    Entries are never invalidated; setting an existing URI overwrites it.
    """

    def __init__(self, labels: Mapping[str, str] | None = None) -> None:
        self._labels: dict[str, str] = dict(labels or {})

    def get(self, uri: str) -> str | None:
        return self._labels.get(uri)

    def set(self, uri: str, label: str) -> None:
        self._labels[uri] = label

    def update(self, labels: Mapping[str, str]) -> None:
        self._labels.update(labels)

    def __contains__(self, uri: object) -> bool:
        return uri in self._labels

    def __len__(self) -> int:
        return len(self._labels)

    def __iter__(self) -> Iterator[str]:
        return iter(self._labels)


class LabelResolver:
    """Interface for one strategy of finding a label."""

    def try_resolve(self, uri: str, store: NanopubStore) -> str | Any | None:
        """Try to find a label for a URI.

        Args:
            uri (str): The URI to label.
            store (NanopubStore): The document the URI is displayed in.

        Returns:
            The label, `unresolved` to stop trying, or None to try the next strategy.
        """
        raise NotOverriddenError()


class DocumentLabelResolver(LabelResolver):
    """A name given to the URI inside the document."""

    PREDICATES = [NS.FOAF.name, NS.NT.hasLabelFromApi]

    def try_resolve(self, uri, store):
        for predicate in self.PREDICATES:
            names = sorted((o for _, _, o, _ in match(store.dataset, URIRef(uri), predicate)), key=sort_key)
            if names:
                return str(names[0])
        return None


class CacheLabelResolver(LabelResolver):

    def try_resolve(self, uri, store):
        label = store.label_cache.get(uri)
        if label is not None:
            log.debug("label cache hit for '%s'", uri)
        return label


class CommonLabelResolver(LabelResolver):

    def __init__(self, labels: Mapping[str, str] | None = None) -> None:
        self._labels = {**COMMON_LABELS, **COMMON_LICENSES} if labels is None else labels

    def try_resolve(self, uri, store):
        return self._labels.get(uri)


class ExternalLabelResolver(LabelResolver):
    """URIs whose labels are only available from remote services."""

    def try_resolve(self, uri, store):
        if is_nanopub_uri(uri) and get_nanopub_suffix(uri) is None:
            return unresolved
        if is_doi_uri(uri) or is_orcid_uri(uri) or is_wikidata_entity_uri(uri):
            return unresolved
        return None


class SubResourceLabelResolver(LabelResolver):
    """Parts of a nanopublication, labelled by their suffix."""

    def try_resolve(self, uri, store):
        if is_nanopub_uri(uri):
            suffix = get_nanopub_suffix(uri)
            return "This assertion" if suffix == "assertion" else suffix
        for prefix in ("sub", "this"):
            base = store.prefixes.get(prefix)
            if base and uri.startswith(base):
                suffix = uri[len(base):].lstrip("/#")
                if suffix:
                    return suffix
        return None


class UriEndLabelResolver(LabelResolver):

    def try_resolve(self, uri, store):
        return get_uri_end(uri) or None


class PrefixLabelResolver(LabelResolver):

    def try_resolve(self, uri, store):
        return shrink_uri(uri, store.prefixes)


DEFAULT_RESOLVERS: list[LabelResolver] = [
    DocumentLabelResolver(),
    CacheLabelResolver(),
    CommonLabelResolver(),
    ExternalLabelResolver(),
    SubResourceLabelResolver(),
    UriEndLabelResolver(),
    PrefixLabelResolver(),
]


def resolve_label(uri: str, store: NanopubStore, resolvers: Iterable[LabelResolver] | None = None) -> str | Any | None:
    """Run the resolvers in order and return the first answer.

    Returns:
        The label, `unresolved` if the label should be fetched remotely,
        or None if no strategy found anything.
    """
    for resolver in (DEFAULT_RESOLVERS if resolvers is None else resolvers):
        label = resolver.try_resolve(uri, store)
        if label is not None:
            return label
    return None
