# SPDX-FileCopyrightText: 2025 Science Live Platform contributors
#
# SPDX-License-Identifier: GPL-3.0-or-later
"""Loading nanopublications and reading their structure and metadata.

See https://nanopub.net/guidelines/working_draft/#well-formed-nanopublications
for the rules a well-formed nanopublication has to follow.
"""

from __future__ import annotations

from datetime import datetime

from rdflib import BNode, Dataset, Literal, URIRef
from rdflib.term import Node

from nptemplate.config import Config, default_config
from nptemplate.errors import MalformedNanopublicationError
from nptemplate.fetcher import Fetcher, RdfFetcher
from nptemplate.labels import LabelCache, LabelResolver, resolve_label, unresolved
from nptemplate.log import get_child_logger
from nptemplate.model.metadata import GraphUris, IntroducedObject, LabelledUri, Metadata
from nptemplate.rdf import NS, extract_subject_props, match, parse_trig, sort_key, unique
from nptemplate.uri import get_uri_end, is_nanopub_uri, parse_uri, to_platform_uri

CITATION_FORMATS = ["apa", "mla", "chicago", "bibtex"]

log = get_child_logger("store")


def generate_citation(metadata: Metadata | None, fmt: str = "apa") -> str:
    """Generate a citation of a nanopublication.

    Args:
        metadata (Metadata): Metadata of the nanopublication.
        fmt (str): One of `CITATION_FORMATS`, anything else falls back to 'apa'.

    Returns:
        str: The citation, or an empty string if the URI of the nanopublication is unknown.
    """
    if metadata is None or not metadata.uri:
        return ""
    uri = metadata.uri
    author = (metadata.creators[0].name if metadata.creators else None) or "Unknown Author"
    year = _year(metadata.created) or "n.d."
    title = metadata.title or "Untitled Nanopublication"
    np_id = uri.split("/")[-1]

    match fmt:
        case "mla":
            return f'{author}. "{title}." Nanopublication, {year}, {uri}.'
        case "chicago":
            return f'{author}. "{title}." Nanopublication. {year}. {uri}.'
        case "bibtex":
            return (f"@misc{{nanopub_{np_id},\n"
                    f"  author = {{{author}}},\n"
                    f"  title = {{{title}}},\n"
                    f"  year = {{{year}}},\n"
                    f"  howpublished = {{Nanopublication}},\n"
                    f"  url = {{{uri}}}\n"
                    f"}}")
        case _:
            return f"{author}. ({year}). {title} [Nanopublication]. {uri}"


def _parse_datetime(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        return None


def _year(value: str | None) -> int | None:
    created = _parse_datetime(value)
    return created.year if created else None


class NanopubStore:
    """The quads of a nanopublication, together with the URIs of its graphs
    and a summary of its metadata.

    Stores are read-only after loading.
    Stores loaded with the same `LabelCache` share the labels found in it.

    Args:
        dataset (Dataset): The parsed quads.
        prefixes (dict): The prefixes declared in the document.
        label_cache (LabelCache, optional): Cache of remotely resolved labels.
        config (Config, optional): Configuration, defaults to `default_config()`.
        fetcher (Fetcher, optional): Used for any further remote lookups.
    """

    def __init__(self,
                 dataset: Dataset,
                 prefixes: dict[str, str],
                 label_cache: LabelCache | None = None,
                 config: Config | None = None,
                 fetcher: Fetcher | None = None,
                 label_resolvers: list[LabelResolver] | None = None) -> None:
        self.dataset = dataset
        self.prefixes = prefixes
        self.label_cache = LabelCache() if label_cache is None else label_cache
        self.config = config if config is not None else default_config()
        self._fetcher = fetcher
        self._label_resolvers = label_resolvers
        self.nanopub_uri, self.graph_uris = self._extract_graph_uris()
        self.metadata = self._extract_metadata()

    @classmethod
    def load(cls, url: str, fetcher: Fetcher | None = None, config: Config | None = None, **kwargs):
        """Load a nanopublication from a URL (or the bare trusty hash of a nanopublication).

        Raises:
            FetcherError: If the document could not be fetched.
            ProtocolError: If the document is not served as TriG.
            ParseError: If the document is not valid TriG.
            MalformedNanopublicationError: If the document is not a well-formed nanopublication.
        """
        config = config if config is not None else default_config()
        fetcher = fetcher if fetcher is not None else RdfFetcher(config)
        url = parse_uri(url)
        text = fetcher.fetch(url)
        return cls.load_string(text, base=url, fetcher=fetcher, config=config, **kwargs)

    @classmethod
    def load_string(cls, text: str, base: str | None = None, **kwargs):
        """Load a nanopublication from TriG text.

        Raises:
            ParseError: If the text is not valid TriG.
            MalformedNanopublicationError: If the document is not a well-formed nanopublication.
        """
        dataset, prefixes = parse_trig(text, base=base)
        return cls(dataset, prefixes, **kwargs)

    @property
    def fetcher(self) -> Fetcher:
        if self._fetcher is None:
            self._fetcher = RdfFetcher(self.config)
        return self._fetcher

    @property
    def self_uri(self) -> str:
        """The URI the document uses for itself (its `this` prefix, else the nanopublication URI)."""
        return self.prefixes.get("this") or self.nanopub_uri

    def match_one(self, subject: Node | None = None, predicate: Node | None = None,
                  object: Node | None = None, graph: Node | str | None = None) -> tuple | None:
        """Returns one matching quad or None.

        If more than one quad matches, the first in term order is returned.
        """
        quads = sorted(match(self.dataset, subject, predicate, object, graph),
                       key=lambda q: tuple(sort_key(t) for t in q))
        return quads[0] if quads else None

    def match_predicate(self, predicate: Node, graph: Node | str | None = None) -> list[tuple]:
        """Returns all quads with the given predicate, in term order."""
        return sorted(match(self.dataset, None, predicate, None, graph),
                      key=lambda q: tuple(sort_key(t) for t in q))

    def _exactly_one(self, quads: list[tuple], what: str) -> tuple:
        if not quads:
            raise MalformedNanopublicationError(f"not a well-formed nanopublication: no {what} found")
        if len(quads) > 1:
            raise MalformedNanopublicationError(
                f"not a well-formed nanopublication: {len(quads)} {what} found, expected exactly one")
        return quads[0]

    def _extract_graph_uris(self) -> tuple[str, GraphUris]:
        # exactly one quad of the form '[N] rdf:type np:Nanopublication [H]'
        head_quads = [q for q in match(self.dataset, None, NS.RDF.type, NS.NP.Nanopublication) if q[3] is not None]
        nanopub, _, _, head = self._exactly_one(head_quads, "head graph")

        uris = {}
        for key, predicate in (("assertion", NS.NP.hasAssertion),
                               ("provenance", NS.NP.hasProvenance),
                               ("pubinfo", NS.NP.hasPublicationInfo)):
            quads = list(match(self.dataset, None, predicate, None, head))
            _, _, graph, _ = self._exactly_one(quads, f"'{predicate}' link in the head graph")
            if not isinstance(graph, URIRef):
                raise MalformedNanopublicationError(f"not a well-formed nanopublication: '{predicate}' is no URI")
            uris[key] = str(graph)
        return str(nanopub), GraphUris(head=str(head), **uris)

    def find_internal_label(self, term: Node | str) -> str | None:
        """Find a human readable label for a URI without any remote lookups.

        Returns None if nothing was found, or if the label is better looked up remotely.
        """
        uri = str(term)
        if not uri:
            return None
        label = resolve_label(uri, self, self._label_resolvers)
        if label is unresolved:
            return None
        return label

    def _labelled(self, term: Node) -> LabelledUri:
        return LabelledUri(name=self.find_internal_label(term) or str(term), href=str(term))

    def _extract_metadata(self) -> Metadata:
        pubinfo = self.graph_uris.pubinfo
        assertion = self.graph_uris.assertion
        self_uri = URIRef(self.self_uri)

        created = self.match_one(None, NS.DCTERMS.created, None, pubinfo)
        creators = [
            LabelledUri(name=self.find_internal_label(o), href=str(o))
            for o in unique([q[2] for q in self.match_predicate(NS.DCTERMS.creator, pubinfo)])
        ]

        # the types, classes and tags of this nanopublication
        type_terms = [q[2] for q in self.match_predicate(NS.RDF.type, assertion) if q[0] == URIRef(assertion)]
        type_terms += [q[2] for q in self.match_predicate(NS.NPX.hasNanopubType, pubinfo) if q[0] == self_uri]
        type_terms += [q[2] for q in self.match_predicate(NS.RDF.type, pubinfo) if q[0] == self_uri]
        types = [self._labelled(t) for t in unique(type_terms)]

        introduces = []
        for introduced in unique([q[2] for q in self.match_predicate(NS.NPX.introduces, pubinfo) if q[0] == self_uri]):
            props = extract_subject_props(self.dataset, introduced, {"types[]": [NS.RDF.type], "label": [NS.RDFS.label]})
            introduces.append(IntroducedObject(
                uri=str(introduced),
                label=str(props["label"]) if props["label"] is not None else None,
                types=[str(t) for t in props["types"]],
            ))

        title = self.match_one(None, NS.DCTERMS.title, None, pubinfo) \
            or self.match_one(self_uri, NS.RDFS.label, None, pubinfo)
        license_ = self.match_one(self_uri, NS.DCTERMS.license, None, pubinfo)
        template = self.match_one(None, NS.NT.wasCreatedFromTemplate, None, pubinfo)
        assertion_subjects = unique([str(q[0]) for q in self.match_predicate(None, assertion)])

        return Metadata(
            created=str(created[2]) if created else None,
            creators=creators,
            types=types,
            introduces=introduces,
            title=str(title[2]) if title else None,
            license=str(license_[2]) if license_ else None,
            assertion_subjects=assertion_subjects,
            uri=self.prefixes.get("this"),
            template=str(template[2]) if template else None,
        )

    def get_citation(self, fmt: str = "apa") -> str:
        return generate_citation(self.metadata, fmt)

    def _format_term_markdown(self, term: Node) -> str:
        if isinstance(term, URIRef):
            label = self.find_internal_label(term) or str(term)
            # link nanopublications to where they can be explored
            href = to_platform_uri(str(term)) if is_nanopub_uri(str(term)) else str(term)
            return f"[{label}]({href})"
        if isinstance(term, Literal):
            lang = f"@{term.language}" if term.language else ""
            return f'"{term}"{lang}'
        if isinstance(term, BNode):
            return f"_:{term}"
        return str(term)

    def to_markdown(self) -> str:
        """The nanopublication as a Markdown document."""
        meta = self.metadata
        title = meta.title or "Untitled Nanopublication"
        if meta.creators:
            creators = ", ".join(f"[{c.name or c.href}]({c.href})" for c in meta.creators)
        else:
            creators = "Unknown"
        created = _parse_datetime(meta.created)
        published = f"{created:%B} {created.day}, {created.year}" if created else "Unknown"
        type_ = meta.types[0].name if meta.types else "Unknown"
        if meta.license:
            license_label = self.find_internal_label(meta.license) or get_uri_end(meta.license) or meta.license
            license_ = f"[{license_label}]({meta.license})"
        else:
            license_ = "Unknown"
        source_uri = meta.uri or self.nanopub_uri
        explore_link = to_platform_uri(source_uri)

        assertions = [
            f"- {self._format_term_markdown(s)} {self._format_term_markdown(p)} {self._format_term_markdown(o)}"
            for s, p, o, _ in self.match_predicate(None, self.graph_uris.assertion)
        ] or ["- _No assertions found._"]

        lines = [
            f"# Nanopub: {title}",
            "",
            *assertions,
            "",
            f"**Created by:** {creators}",
            "",
            f"**Published:** {published}",
            "",
            f"**Type:** `{type_}`",
            "",
            f"**License:** {license_}",
            "",
            self.get_citation(),
            "",
            f"[Original Source]({source_uri})",
            "",
            f"**[Explore on Science Live]({explore_link})**",
        ]
        return "\n".join(lines)
