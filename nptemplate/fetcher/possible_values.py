# SPDX-FileCopyrightText: 2025 Science Live Platform contributors
#
# SPDX-License-Identifier: GPL-3.0-or-later
"""Resolving the option lists of choice placeholders (`nt:possibleValuesFrom`).

The source of the options is an RDF document, usually a nanopublication,
in which every labelled resource is one option.
"""

from __future__ import annotations

from rdflib import URIRef

from nptemplate.fetcher import Fetcher
from nptemplate.log import get_child_logger
from nptemplate.model.template_field import FieldOption
from nptemplate.rdf import NS, match, parse_trig, sort_key
from nptemplate.uri import parse_uri

log = get_child_logger("possible_values")


def options_from_text(text: str) -> list[FieldOption]:
    """Extract the options from a TriG document.

    Raises:
        ParseError: If the text is not valid TriG.
    """
    dataset, _ = parse_trig(text)
    labels: dict[URIRef, str] = {}
    for subject, _, label, _ in sorted(match(dataset, None, NS.RDFS.label),
                                       key=lambda q: (sort_key(q[0]), sort_key(q[2]))):
        if isinstance(subject, URIRef) and subject not in labels:
            labels[subject] = str(label)
    return [
        FieldOption(name=str(uri), description=label, uri=str(uri))
        for uri, label in labels.items()
    ]


def fetch_possible_values(source: str, fetcher: Fetcher) -> list[FieldOption]:
    """Fetch the options a choice placeholder allows.

    Args:
        source (str): URI of the document listing the options.
        fetcher (Fetcher): Used to fetch the document.

    Raises:
        FetcherError: If the document could not be fetched.
        ParseError: If the document is not valid TriG.
    """
    url = parse_uri(source)
    log.debug("fetching possible values from '%s'", url)
    options = options_from_text(fetcher.fetch(url))
    log.debug("found %d possible values in '%s'", len(options), url)
    return options
