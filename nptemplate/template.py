# SPDX-FileCopyrightText: 2025 Science Live Platform contributors
#
# SPDX-License-Identifier: GPL-3.0-or-later
"""Nanopublication templates.

A template is a nanopublication whose assertion graph describes,
using the template ontology (https://w3id.org/np/o/ntemplate/),
the placeholders a user fills in and the statements a new nanopublication
is made of. This module extracts those fields and statements,
and generates new nanopublications from them.
"""

from __future__ import annotations

import re
import urllib.parse
from collections.abc import Mapping
from typing import Any

from rdflib import BNode, Dataset, Literal, Namespace, URIRef
from rdflib.term import Node

from nptemplate.errors import FetcherError, ParseError, TemplateError
from nptemplate.fetcher.possible_values import fetch_possible_values
from nptemplate.log import get_child_logger
from nptemplate.model.placeholder import PlaceholderType, TemplateKind
from nptemplate.model.publication import PublicationData
from nptemplate.model.template_field import FieldOption, Statement, TemplateField, TemplateMetadata
from nptemplate.rdf import (NS, extract_subject_props, extract_subjects_filtered, is_template_ontology_uri, match,
                            template_ontology_name)
from nptemplate.signing import NpCommandSigner, SignedNanopub, Signer
from nptemplate.store import NanopubStore
from nptemplate.uri import clean_orcid_uri, get_uri_end, is_http_uri

_p_label_token = re.compile(r"\$\{([^}]+)\}")

TEMPLATE_PROPERTIES = {
    "types[]": [NS.RDF.type],
    "name": [NS.RDFS.label],
    "description": [NS.DCTERMS.description],
    "statements[]": [NS.NT.includes, NS.NT.hasStatement],
    "target_nanopub_type": [NS.NT.hasTargetNanopubType],
    "target_label_pattern": [NS.NT.hasNanopubLabelPattern],
    "tags[]": [NS.NT.hasTag],
}

PLACEHOLDER_PROPERTIES = {
    "types[]": [NS.RDF.type],
    "label": [NS.RDFS.label],
    "description": [NS.DCTERMS.description],
    "possible_values_from[]": [NS.NT.possibleValuesFrom],
    "possible_values[]": [NS.NT.possibleValue],
    "regex": [NS.NT.hasRegex],
    "prefix": [NS.NT.hasPrefix],
    "prefix_label": [NS.NT.hasPrefixLabel],
}

STATEMENT_PROPERTIES = {
    "types[]": [NS.RDF.type],
    "subject": [NS.RDF.subject],
    "predicate": [NS.RDF.predicate],
    "object": [NS.RDF.object],
}

# prefixes of generated nanopublications, besides `this` and `sub`
OUTPUT_PREFIXES = {
    "rdfs": NS.RDFS,
    "xsd": NS.XSD,
    "np": NS.NP,
    "npx": NS.NPX,
    "dcterms": NS.DCTERMS,
    "prov": NS.PROV,
    "foaf": NS.FOAF,
    "orcid": NS.ORCID,
}

log = get_child_logger("template")


def _is_placeholder_type(quad: tuple) -> bool:
    _, predicate, object, _ = quad
    return predicate == NS.RDF.type \
        and isinstance(object, URIRef) \
        and is_template_ontology_uri(object) \
        and str(object).endswith("Placeholder")


def _str_or_none(term: Node | None) -> str | None:
    return None if term is None else str(term)


class NanopubTemplate(NanopubStore):
    """A nanopublication template, with its fields and statements extracted on load.

    Args:
        fetch_options (bool, optional): Fetch the option lists of choice placeholders.
            Defaults to the `fetcher.fetch_options` configuration.
        See `NanopubStore` for the other arguments.
    """

    def __init__(self, *args: Any, fetch_options: bool | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._fetch_options = self.config.fetcher.fetch_options if fetch_options is None else fetch_options
        self.template_metadata = self._extract_template_metadata()
        self.statements = self._extract_statements()
        self.fields = self._extract_fields()
        self._fields_by_id = {f.id: f for f in self.fields}

    @property
    def kind(self) -> TemplateKind:
        return self.template_metadata.kind

    def local_name(self, uri: str) -> str:
        """The name of a resource of this template, e.g. `article` for `sub:article`."""
        sub = self.prefixes.get("sub")
        if sub and uri.startswith(sub) and len(uri) > len(sub):
            return uri[len(sub):]
        this = self.self_uri
        if this and uri.startswith(this) and len(uri) > len(this):
            return uri[len(this):].lstrip("/#")
        return get_uri_end(uri) or uri

    def field(self, name: str) -> TemplateField | None:
        for f in self.fields:
            if f.name == name:
                return f
        return None

    def _extract_template_metadata(self) -> TemplateMetadata:
        assertion = self.graph_uris.assertion
        props = extract_subject_props(self.dataset, URIRef(assertion), TEMPLATE_PROPERTIES, assertion)
        types = [str(t) for t in props["types"]]
        return TemplateMetadata(
            description=_str_or_none(props["description"]) or "-",
            name=_str_or_none(props["name"]),
            target_nanopub_type=_str_or_none(props["target_nanopub_type"]),
            target_label_pattern=_str_or_none(props["target_label_pattern"]),
            types=types,
            tags=[str(t) for t in props["tags"]],
            kind=TemplateKind.from_types([n for n in map(template_ontology_name, types) if n]),
        )

    def _extract_statements(self) -> dict[str, Statement]:
        assertion = self.graph_uris.assertion
        props = extract_subject_props(self.dataset, URIRef(assertion), {"statements[]": TEMPLATE_PROPERTIES["statements[]"]},
                                      assertion)
        statements = {}
        for node in props["statements"]:
            st = extract_subject_props(self.dataset, node, STATEMENT_PROPERTIES, assertion)
            if st["subject"] is None or st["predicate"] is None or st["object"] is None:
                log.warning("skipping incomplete statement '%s' of template '%s'", node, self.self_uri)
                continue
            statements[str(node)] = Statement(
                id=str(node),
                name=self.local_name(str(node)),
                subject=st["subject"],
                predicate=st["predicate"],
                object=st["object"],
                types=[str(t) for t in st["types"]],
            )
        return statements

    def _placeholder_type(self, uri: str, types: list[str]) -> PlaceholderType:
        names = [template_ontology_name(t) for t in types if is_template_ontology_uri(t) and t.endswith("Placeholder")]
        for name in sorted(names):
            placeholder_type = PlaceholderType.from_name(name)
            if placeholder_type is not None:
                return placeholder_type
        log.warning("unknown placeholder type(s) %s of '%s', treating it as text", names, uri)
        return PlaceholderType.PLACEHOLDER

    def _options(self, uri: str, props: Mapping) -> list[FieldOption]:
        options = []
        for value in props["possible_values"]:
            label = self.match_one(value, NS.RDFS.label)
            options.append(FieldOption(
                name=str(value),
                description=str(label[2]) if label else (get_uri_end(str(value)) or str(value)),
                uri=str(value) if isinstance(value, URIRef) else None,
            ))
        if self._fetch_options:
            for source in props["possible_values_from"]:
                try:
                    options.extend(fetch_possible_values(str(source), self.fetcher))
                except (FetcherError, ParseError) as err:
                    log.warning("failed to fetch possible values of '%s' from '%s': %s", uri, source, err)
        unique_options = {}
        for option in options:
            unique_options.setdefault(option.name, option)
        return list(unique_options.values())

    def _extract_fields(self) -> list[TemplateField]:
        placeholders = extract_subjects_filtered(self.dataset, PLACEHOLDER_PROPERTIES, _is_placeholder_type,
                                                 self.graph_uris.assertion)
        fields = []
        for node, props in placeholders.items():
            uri = str(node)
            types = [str(t) for t in props["types"]]
            type_names = [n for n in map(template_ontology_name, types) if n]
            containing = [s for s in self.statements.values() if node in s.terms()]
            # optional only if the placeholder is the object of an optional statement,
            # and appears in no other statement
            optional = any(s.object == node and s.is_optional for s in containing) \
                and not any(not s.is_optional for s in containing)
            options = self._options(uri, props)
            name = self.local_name(uri)
            fields.append(TemplateField(
                id=uri,
                name=name,
                label=_str_or_none(props["label"]) or name,
                type=self._placeholder_type(uri, types),
                required=not optional,
                description=_str_or_none(props["description"]),
                options=options or None,
                regex=_str_or_none(props["regex"]),
                prefix=_str_or_none(props["prefix"]),
                prefix_label=_str_or_none(props["prefix_label"]),
                possible_values_from=_str_or_none(props["possible_values_from"][0]) if props["possible_values_from"] else None,
                multiple=any(s.is_repeatable for s in containing),
                introduced="IntroducedResource" in type_names,
                local="LocalResource" in type_names or "IntroducedResource" in type_names,
            ))
        return fields

    def _is_local_resource(self, term: Node) -> bool:
        return any(template_ontology_name(o) == "LocalResource"
                   for _, _, o, _ in match(self.dataset, term, NS.RDF.type, None, self.graph_uris.assertion))

    def _in_template_namespace(self, uri: str) -> bool:
        sub = self.prefixes.get("sub")
        return bool((sub and uri.startswith(sub)) or (self.self_uri and uri.startswith(self.self_uri)))

    def _field_value(self, field: TemplateField, value: str, sub: Namespace) -> Node:
        if field.type.is_literal():
            return Literal(value)
        if is_http_uri(value):
            return URIRef(value)
        if field.type == PlaceholderType.AUTO_ESCAPE_URI:
            value = urllib.parse.quote(value, safe="")
        if field.prefix:
            return URIRef(field.prefix + value)
        if field.local:
            return URIRef(sub[value])
        return URIRef(value)

    def _term(self, term: Node, values: Mapping[str, Any], sub: Namespace, position: str) -> Node:
        if isinstance(term, (Literal, BNode)):
            return term
        uri = str(term)
        field = self._fields_by_id.get(uri)
        if field is not None:
            if field.type.is_literal() and position != "object":
                raise TemplateError(f"placeholder '{uri}' is a literal placeholder but is used as a {position}")
            value = values.get(field.name)
            if isinstance(value, str) and value:
                return self._field_value(field, value, sub)
            return term
        if self._in_template_namespace(uri):
            value = values.get(self.local_name(uri))
            if isinstance(value, str) and value:
                return URIRef(value)
            if self._is_local_resource(term):
                return URIRef(sub[self.local_name(uri)])
        return term

    def _label(self, values: Mapping[str, Any]) -> str:
        pattern = self.template_metadata.target_label_pattern
        if not pattern:
            return "NP created using " + (self.metadata.title or "Nanopublication Template")

        def replace(m: re.Match) -> str:
            value = values.get(m.group(1))
            if not isinstance(value, str) or not value:
                return m.group(0)
            if value.startswith("http"):
                return get_uri_end(value) or value
            return value

        return _p_label_token.sub(replace, pattern)

    def generate_nanopublication(self, values: Mapping[str, Any], pub_data: PublicationData) -> Dataset:
        """Generate a new, unsigned nanopublication from this template.

        Placeholders without a value are left in place.
        The result only depends on the arguments (given a fixed timestamp).

        Args:
            values (Mapping): Values of the fields, by field name.
                The value of a repeatable statement, by statement name,
                may be a list of value mappings, one per repetition.
            pub_data (PublicationData): Who publishes, when and under which license.

        Raises:
            TemplateError: If a literal placeholder is used as a subject or predicate.

        Returns:
            Dataset: The head, assertion, provenance and pubinfo graphs.
        """
        publishing = self.config.publishing
        base_uri = pub_data.base_uri or publishing.base_uri
        nanopub = URIRef(base_uri + "placeholder")
        sub = Namespace(str(nanopub) + "/")

        dataset = Dataset()
        dataset.bind("this", Namespace(str(nanopub)), override=True, replace=True)
        dataset.bind("sub", sub, override=True, replace=True)
        for prefix, namespace in OUTPUT_PREFIXES.items():
            dataset.bind(prefix, namespace, override=True, replace=True)

        head = dataset.graph(sub.Head)
        assertion = dataset.graph(sub.assertion)
        provenance = dataset.graph(sub.provenance)
        pubinfo = dataset.graph(sub.pubinfo)

        # head, linking the other three graphs
        head.add((nanopub, NS.RDF.type, NS.NP.Nanopublication))
        head.add((nanopub, NS.NP.hasAssertion, assertion.identifier))
        head.add((nanopub, NS.NP.hasProvenance, provenance.identifier))
        head.add((nanopub, NS.NP.hasPublicationInfo, pubinfo.identifier))

        # assertion, from the statements of the template
        for statement in self.statements.values():
            repetitions = values.get(statement.name)
            if statement.is_repeatable and isinstance(repetitions, list):
                value_sets = [{**values, **r} for r in repetitions if isinstance(r, Mapping)]
            else:
                value_sets = [values]
            for statement_values in value_sets:
                assertion.add((
                    self._term(statement.subject, statement_values, sub, "subject"),
                    self._term(statement.predicate, statement_values, sub, "predicate"),
                    self._term(statement.object, statement_values, sub, "object"),
                ))

        orcid = URIRef(clean_orcid_uri(pub_data.orcid)) if pub_data.orcid else None

        # provenance
        if orcid is not None:
            provenance.add((assertion.identifier, NS.PROV.wasAttributedTo, orcid))

        # pubinfo
        if pub_data.is_example:
            pubinfo.add((nanopub, NS.RDF.type, NS.NPX.ExampleNanopub))
        if orcid is not None:
            if pub_data.name:
                pubinfo.add((orcid, NS.FOAF.name, Literal(pub_data.name)))
            # the rest of the signature is added when signing
            pubinfo.add((sub.sig, NS.NPX.signedBy, orcid))
            pubinfo.add((nanopub, NS.DCTERMS.creator, orcid))
        pubinfo.add((nanopub, NS.DCTERMS.created,
                     Literal(pub_data.created(), datatype=NS.XSD.dateTime, normalize=False)))
        pubinfo.add((nanopub, NS.DCTERMS.license, URIRef(pub_data.license or publishing.default_license)))
        if self.template_metadata.target_nanopub_type:
            pubinfo.add((nanopub, NS.NPX.hasNanopubType, URIRef(self.template_metadata.target_nanopub_type)))
        pubinfo.add((nanopub, NS.NPX.wasCreatedAt, URIRef(publishing.platform_url)))
        pubinfo.add((nanopub, NS.RDFS.label, Literal(self._label(values))))
        pubinfo.add((nanopub, NS.NT.wasCreatedFromTemplate, URIRef(self.self_uri)))

        log.debug("generated nanopublication with %d assertion quads", len(assertion))
        return dataset

    @staticmethod
    def serialize_nanopublication(dataset: Dataset) -> str:
        """Serialize a generated nanopublication to TriG."""
        return dataset.serialize(format="trig")

    def apply_template(self, values: Mapping[str, Any], pub_data: PublicationData, private_key: str,
                       signer: Signer | None = None) -> SignedNanopub:
        """Generate a new nanopublication from this template and sign it.

        Raises:
            TemplateError: If the nanopublication could not be generated.
            SigningError: If signing failed.
        """
        trig = self.serialize_nanopublication(self.generate_nanopublication(values, pub_data))
        signer = signer if signer is not None else NpCommandSigner(self.config)
        return signer.sign(trig, private_key, clean_orcid_uri(pub_data.orcid), pub_data.name)

