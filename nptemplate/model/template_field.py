# SPDX-FileCopyrightText: 2025 Science Live Platform contributors
#
# SPDX-License-Identifier: GPL-3.0-or-later

from __future__ import annotations

from dataclasses import dataclass, field

from rdflib.term import Node

from nptemplate.model.placeholder import PlaceholderType, TemplateKind
from nptemplate.rdf import template_ontology_name


@dataclass(slots=True, frozen=True)
class FieldOption:
    """One allowed value of a choice placeholder."""

    name: str
    """The value stored when the option is chosen, usually a URI."""
    description: str
    uri: str | None = None


@dataclass(slots=True)
class TemplateField:
    """A user fillable slot of a template."""

    id: str
    """The full URI of the placeholder node."""
    name: str
    """The key of the value of this field, e.g. `article` for `sub:article`."""
    label: str
    type: PlaceholderType
    required: bool = True
    description: str | None = None
    options: list[FieldOption] | None = None
    regex: str | None = None
    prefix: str | None = None
    prefix_label: str | None = None
    possible_values_from: str | None = None
    multiple: bool = False
    """Whether the placeholder occurs in a repeatable statement."""
    introduced: bool = False
    """Whether the value becomes a resource introduced by the new nanopublication."""
    local: bool = False
    """Whether the value becomes a resource of the new nanopublication's namespace."""
    placeholder: str | None = None


@dataclass(slots=True)
class Statement:
    """A triple pattern that a template emits into the assertion graph."""

    id: str
    name: str
    subject: Node
    predicate: Node
    object: Node
    types: list[str] = field(default_factory=list)

    def type_names(self) -> list[str]:
        """The local names of the template ontology types of this statement."""
        return [name for name in map(template_ontology_name, self.types) if name]

    @property
    def is_optional(self) -> bool:
        return "OptionalStatement" in self.type_names()

    @property
    def is_repeatable(self) -> bool:
        return "RepeatableStatement" in self.type_names()

    def terms(self) -> tuple[Node, Node, Node]:
        return (self.subject, self.predicate, self.object)


@dataclass(slots=True)
class TemplateMetadata:
    """The descriptive properties of a template itself."""

    description: str = "-"
    name: str | None = None
    target_nanopub_type: str | None = None
    target_label_pattern: str | None = None
    types: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    kind: TemplateKind = TemplateKind.NANOPUB
