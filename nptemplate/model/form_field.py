# SPDX-FileCopyrightText: 2025 Science Live Platform contributors
#
# SPDX-License-Identifier: GPL-3.0-or-later

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any


class FormFieldKind(StrEnum):
    """How a form field is rendered."""
    URL = "url"
    COMBOBOX = "combobox"
    TEXT = "text"
    TEXTAREA = "textarea"
    ARRAY = "array"
    STATIC = "static"
    """A constant value, displayed but not editable."""


@dataclass(slots=True, frozen=True)
class FormOption:
    value: str
    label: str


@dataclass(slots=True)
class FormField:
    """A generic description of one input of a dynamic form."""

    name: str
    kind: FormFieldKind
    label: str | None = None
    description: str | None = None
    required: bool = False
    placeholder: str | None = None
    options: list[FormOption] | None = None
    searchable: bool = False
    item_kind: FormFieldKind | str | None = None
    """The kind of the items of an array field ('object' for nested fields)."""
    min_items: int | None = None
    default: Any = None
    section: str | None = None
    fields: list[FormField] = field(default_factory=list)
    """The nested fields of each item of an array of objects."""

    def as_dict(self) -> dict[str, Any]:
        """The field as plain data, leaving out unset attributes."""
        data: dict[str, Any] = {
            "name": self.name,
            "kind": str(self.kind),
            "required": self.required,
        }
        for key in ("label", "description", "placeholder", "min_items", "default", "section"):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        if self.options is not None:
            data["options"] = [{"value": o.value, "label": o.label} for o in self.options]
        if self.searchable:
            data["searchable"] = True
        if self.item_kind is not None:
            data["item_kind"] = str(self.item_kind)
        if self.fields:
            data["fields"] = [f.as_dict() for f in self.fields]
        return data
