# SPDX-FileCopyrightText: 2025 Science Live Platform contributors
#
# SPDX-License-Identifier: GPL-3.0-or-later

from __future__ import annotations

from enum import StrEnum


class PlaceholderType(StrEnum):
    """The types of user fillable slots of a template,
    named by their local name in the template ontology
    (see https://w3id.org/np/o/ntemplate/)."""
    GUIDED_CHOICE = "GuidedChoicePlaceholder"
    LITERAL = "LiteralPlaceholder"
    LONG_LITERAL = "LongLiteralPlaceholder"
    RESTRICTED_CHOICE = "RestrictedChoicePlaceholder"
    SEQUENCE_ELEMENT = "SequenceElementPlaceholder"
    TRUSTY_URI = "TrustyUriPlaceholder"
    URI = "UriPlaceholder"
    VALUE = "ValuePlaceholder"
    EXTERNAL_URI = "ExternalUriPlaceholder"
    TEXT = "TextPlaceholder"
    AUTO_ESCAPE_URI = "AutoEscapeUriPlaceholder"
    REPEATABLE_STATEMENT = "RepeatableStatement"
    INTRODUCED_RESOURCE = "IntroducedResource"
    LOCAL_RESOURCE = "LocalResource"
    # the super class, used for anything not recognized
    PLACEHOLDER = "Placeholder"

    @classmethod
    def from_name(cls, name: str) -> PlaceholderType | None:
        """Map the local name of a type in the template ontology to a placeholder type.

        Names are compared longest first, so e.g. 'LongLiteralPlaceholder'
        is never mistaken for 'LiteralPlaceholder'.
        Returns None if the name is not a known type.
        """
        for member in sorted(cls, key=lambda m: len(m.value), reverse=True):
            if member is cls.PLACEHOLDER:
                continue
            if name.endswith(member.value):
                return member
        return None

    def is_literal(self) -> bool:
        """Whether values of this type are written as literals."""
        return self in _LITERAL_TYPES

    def is_uri(self) -> bool:
        return self in _URI_TYPES


_LITERAL_TYPES = frozenset([
    PlaceholderType.LITERAL,
    PlaceholderType.LONG_LITERAL,
    PlaceholderType.TEXT,
    PlaceholderType.VALUE,
    PlaceholderType.PLACEHOLDER,
])

_URI_TYPES = frozenset([
    PlaceholderType.URI,
    PlaceholderType.AUTO_ESCAPE_URI,
    PlaceholderType.EXTERNAL_URI,
    PlaceholderType.TRUSTY_URI,
])


class TemplateKind(StrEnum):
    """Which part of a nanopublication a template produces."""
    ASSERTION = "Assertion"
    PROVENANCE = "Provenance"
    PUBINFO = "Pubinfo"
    UNLISTED = "Unlisted"
    NANOPUB = "Nanopub"

    @classmethod
    def from_types(cls, type_names: list[str]) -> TemplateKind:
        """Derive the kind from the local names of a template's `rdf:type`s."""
        for name in type_names:
            if name == "ProvenanceTemplate":
                return cls.PROVENANCE
            if name == "PubinfoTemplate":
                return cls.PUBINFO
            if name == "UnlistedTemplate":
                return cls.UNLISTED
        if "AssertionTemplate" in type_names:
            return cls.ASSERTION
        return cls.NANOPUB
