# SPDX-FileCopyrightText: 2025 Science Live Platform contributors
#
# SPDX-License-Identifier: GPL-3.0-or-later
"""Thin helpers around rdflib for reading nanopublications.

A parsed document is kept in an `rdflib.Dataset`, which indexes every quad
by subject, predicate and object for each named graph.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterator, Mapping

from rdflib import DCTERMS, FOAF, PROV, RDF, RDFS, XSD, BNode, Dataset, Literal, Namespace, URIRef
from rdflib.graph import DATASET_DEFAULT_GRAPH_ID
from rdflib.term import Identifier, Node

from nptemplate.errors import ParseError
from nptemplate.log import get_child_logger

BASE_IRI_NP = "http://www.nanopub.org/nschema"
BASE_IRI_NPX = "http://purl.org/nanopub/x"
BASE_IRI_NTEMPLATE = "https://w3id.org/np/o/ntemplate"
BASE_IRI_ORCID = "https://orcid.org"

NP = Namespace(f"{BASE_IRI_NP}#")
NPX = Namespace(f"{BASE_IRI_NPX}/")
NT = Namespace(f"{BASE_IRI_NTEMPLATE}/")
ORCID = Namespace(f"{BASE_IRI_ORCID}/")


class NS:
    """The namespaces used when reading and writing nanopublications."""
    RDF = RDF
    RDFS = RDFS
    XSD = XSD
    NP = NP
    NPX = NPX
    NT = NT
    DCTERMS = DCTERMS
    PROV = PROV
    FOAF = FOAF
    ORCID = ORCID


# the matched value is the local name within the template ontology
_p_template_ontology = re.compile(r"^https?://w3id\.org/np/o/ntemplate/(?:latest/)?(.*)$")
# prefix declarations, skipping over string literals, IRIs and comments
_p_prefix_decl = re.compile(
    r"""(?:@prefix|\bPREFIX)\s+(?P<prefix>[A-Za-z][\w.-]*)?:\s*<(?P<namespace>[^>]*)>"""
    r'''|"""(?:[^"\\]|\\.|"(?!""))*"""'''
    r"""|'''(?:[^'\\]|\\.|'(?!''))*'''"""
    r'''|"(?:[^"\\\n]|\\.)*"'''
    r"""|'(?:[^'\\\n]|\\.)*'"""
    r"""|<[^>\s]*>"""
    r"""|#[^\n]*""",
    re.IGNORECASE | re.DOTALL,
)

# a quad is matched as (subject, predicate, object, graph)
Quad = tuple[Node, Node, Node, Node | None]
QuadFilter = Callable[[Quad], bool]

log = get_child_logger("rdf")


def parse_trig(text: str, base: str | None = None) -> tuple[Dataset, dict[str, str]]:
    """Parse a TriG document.

    Args:
        text (str): The TriG document.
        base (str, optional): Base URI used to resolve relative URIs.

    Raises:
        ParseError: If the text is not valid TriG.

    Returns:
        tuple[Dataset, dict[str, str]]: The parsed quads and all the prefixes
            declared in the document.
    """
    dataset = Dataset()
    try:
        dataset.parse(data=text, format="trig", publicID=base)
    except Exception as err:
        # besides BadSyntax, the notation3 parser fails with e.g. IndexError
        # on truncated input and AssertionError on unterminated literals
        raise ParseError(f"failed to parse TriG: {err}") from err
    # rdflib renames clashing prefixes, so the names are read from the text;
    # only namespaces the parser actually bound are accepted
    bound = {str(namespace) for _, namespace in dataset.namespaces()}
    prefixes = {}
    for m in _p_prefix_decl.finditer(text):
        namespace = m.group("namespace")
        if namespace is not None and namespace in bound:
            prefixes[m.group("prefix") or ""] = namespace
    log.debug("parsed %d quads and %d prefixes", len(dataset), len(prefixes))
    return dataset, prefixes


def match(dataset: Dataset,
          subject: Node | None = None,
          predicate: Node | None = None,
          object: Node | None = None,
          graph: Node | str | None = None) -> Iterator[Quad]:
    """Iterate over all quads matching the pattern (None matches anything).

    Quads of the default graph are yielded with None as their graph.
    """
    if graph is None:
        for s, p, o, g in dataset.quads((subject, predicate, object, None)):
            yield (s, p, o, None if g is None or g == DATASET_DEFAULT_GRAPH_ID else g)
        return
    graph = URIRef(graph) if isinstance(graph, str) and not isinstance(graph, Identifier) else graph
    for s, p, o in dataset.get_context(graph).triples((subject, predicate, object)):
        yield (s, p, o, graph)


def sort_key(term: Node | None) -> str:
    return "" if term is None else str(term)


def unique(values: list) -> list:
    """Remove duplicates, keeping the order of first occurrence."""
    return list(dict.fromkeys(values))


def is_template_ontology_uri(uri: str | Node) -> bool:
    """Whether the URI lives in the nanopub template ontology.

    Both http and https, with or without a '/latest/' segment, are accepted,
    as different versions of the ontology are in use.
    """
    return _p_template_ontology.match(str(uri)) is not None


def template_ontology_name(uri: str | Node) -> str | None:
    """Returns the local name of a template ontology URI, e.g. 'LiteralPlaceholder'."""
    m = _p_template_ontology.match(str(uri))
    return m.group(1) if m else None


def shrink_uri(uri: str, prefixes: Mapping[str, str]) -> str:
    """Shorten a URI to 'prefix:local' using the longest matching namespace."""
    best_prefix = None
    best_base = ""
    for prefix, base in prefixes.items():
        if base and uri.startswith(base) and len(base) > len(best_base):
            best_prefix = prefix
            best_base = base
    if best_prefix is not None:
        return f"{best_prefix}:{uri[len(best_base):]}"
    return uri


def term_to_display(term: Node | None, prefixes: Mapping[str, str]) -> tuple[str, str | None]:
    """Returns the display text of a term and, for URIs, the link target."""
    if term is None:
        return "", None
    if isinstance(term, URIRef):
        return shrink_uri(str(term), prefixes), str(term)
    if isinstance(term, Literal):
        if term.language:
            return f'"{term}"@{term.language}', None
        if term.datatype:
            return f'"{term}"^^{shrink_uri(str(term.datatype), prefixes)}', None
        return f'"{term}"', None
    if isinstance(term, BNode):
        return f"_:{term}", None
    return str(term), None


def extract_subject_props(dataset: Dataset,
                          subject: Node,
                          property_map: Mapping[str, list[Node]],
                          graph: Node | str | None = None) -> dict[str, Node | list[Node] | None]:
    """Read a set of properties of a subject.

    Args:
        dataset (Dataset): Quads to search.
        subject (Node): The subject whose properties are read.
        property_map (Mapping): Maps each key of the result to the predicates
            to look for, in order of preference. Keys ending with '[]' collect
            all values (sorted) instead of a single one.
        graph (Node | str, optional): Restrict the search to a named graph.

    Returns:
        dict: Keys of the property map (without '[]') and their values.
    """
    props: dict[str, Node | list[Node] | None] = {}
    for key, predicates in property_map.items():
        if key.endswith("[]"):
            values = []
            for predicate in predicates:
                values.extend(o for _, _, o, _ in match(dataset, subject, predicate, None, graph))
            props[key[:-2]] = sorted(unique(values), key=sort_key)
        else:
            props[key] = None
            for predicate in predicates:
                objects = sorted((o for _, _, o, _ in match(dataset, subject, predicate, None, graph)), key=sort_key)
                if objects:
                    props[key] = objects[0]
                    break
    return props


def extract_subjects_filtered(dataset: Dataset,
                              property_map: Mapping[str, list[Node]],
                              quad_filter: QuadFilter,
                              graph: Node | str | None = None) -> dict[Node, dict[str, Node | list[Node] | None]]:
    """Read a set of properties from every subject selected by a quad filter.

    Returns:
        dict: The selected subjects, sorted, with their properties.
    """
    subjects = unique(q[0] for q in match(dataset, graph=graph) if quad_filter(q))
    return {
        subject: extract_subject_props(dataset, subject, property_map, graph)
        for subject in sorted(subjects, key=sort_key)
    }
