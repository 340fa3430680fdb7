# SPDX-FileCopyrightText: 2025 Science Live Platform contributors
#
# SPDX-License-Identifier: GPL-3.0-or-later

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(slots=True, frozen=True)
class GraphUris:
    """The four named graphs every well-formed nanopublication consists of."""

    head: str
    assertion: str
    provenance: str
    pubinfo: str


@dataclass(slots=True, frozen=True)
class LabelledUri:
    """A URI together with a human readable name."""

    name: str | None
    href: str


@dataclass(slots=True, frozen=True)
class IntroducedObject:
    """A resource introduced by a nanopublication (`npx:introduces`)."""

    uri: str
    label: str | None = None
    types: list[str] = field(default_factory=list)


@dataclass(slots=True)
class Metadata:
    """Summary of a nanopublication, derived from its quads on load."""

    created: str | None = None
    creators: list[LabelledUri] = field(default_factory=list)
    types: list[LabelledUri] = field(default_factory=list)
    introduces: list[IntroducedObject] = field(default_factory=list)
    title: str | None = None
    license: str | None = None
    assertion_subjects: list[str] = field(default_factory=list)
    uri: str | None = None
    """The URI of the document itself, as declared by its `this` prefix."""
    template: str | None = None
    """The template the nanopublication was created from, if any."""
