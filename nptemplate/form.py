# SPDX-FileCopyrightText: 2025 Science Live Platform contributors
#
# SPDX-License-Identifier: GPL-3.0-or-later
"""Deriving dynamic forms and their validation from template fields,
so any template can be filled in without template specific code.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from copy import deepcopy
from typing import Any

import validators
from cerberus.errors import REQUIRED_FIELD

from nptemplate.config import ConfigValidator
from nptemplate.log import get_child_logger
from nptemplate.model.form_field import FormField, FormFieldKind, FormOption
from nptemplate.model.placeholder import PlaceholderType
from nptemplate.model.template_field import Statement, TemplateField

FIELD_KINDS = {
    PlaceholderType.URI: FormFieldKind.URL,
    PlaceholderType.AUTO_ESCAPE_URI: FormFieldKind.URL,
    PlaceholderType.EXTERNAL_URI: FormFieldKind.URL,
    PlaceholderType.TRUSTY_URI: FormFieldKind.URL,
    PlaceholderType.GUIDED_CHOICE: FormFieldKind.COMBOBOX,
    PlaceholderType.RESTRICTED_CHOICE: FormFieldKind.COMBOBOX,
    PlaceholderType.TEXT: FormFieldKind.TEXT,
    PlaceholderType.LITERAL: FormFieldKind.TEXT,
    PlaceholderType.LONG_LITERAL: FormFieldKind.TEXTAREA,
    PlaceholderType.INTRODUCED_RESOURCE: FormFieldKind.TEXTAREA,
    PlaceholderType.REPEATABLE_STATEMENT: FormFieldKind.ARRAY,
}

log = get_child_logger("form")


def field_kind(placeholder_type: PlaceholderType) -> FormFieldKind:
    """The kind of form field for a placeholder type; anything unknown is short text."""
    return FIELD_KINDS.get(placeholder_type, FormFieldKind.TEXT)


def _form_field(field: TemplateField, section: str | None = None) -> FormField:
    kind = field_kind(field.type)
    form_field = FormField(
        name=field.name,
        kind=kind,
        label=field.label,
        description=field.description,
        required=field.required,
        placeholder=field.placeholder,
        section=section,
    )
    match kind:
        case FormFieldKind.URL:
            form_field.placeholder = form_field.placeholder or "https://... or other URL"
        case FormFieldKind.COMBOBOX:
            form_field.options = [FormOption(value=o.name, label=o.description) for o in field.options or []]
            form_field.searchable = True
            form_field.placeholder = f"Select {field.label.lower()}..."
        case FormFieldKind.ARRAY:
            form_field.item_kind = FormFieldKind.TEXT
            form_field.min_items = 1 if field.required else 0
            form_field.default = []
        case _:
            if field.type not in FIELD_KINDS:
                log.debug("no specific form field for '%s' of type '%s'", field.id, field.type)
    return form_field


def template_fields_to_form(fields: Iterable[TemplateField]) -> list[FormField]:
    """One form field per template field."""
    return [_form_field(f) for f in fields]


def template_statements_to_form(fields: Iterable[TemplateField], statements: Mapping[str, Statement]) -> list[FormField]:
    """A form showing every statement of a template.

    Placeholders become inputs, constant terms are shown as static fields,
    and repeatable statements become arrays of the fields of one statement.
    """
    by_id = {f.id: f for f in fields}
    form = []
    for statement in statements.values():
        section = f"Statement {statement.name}"
        statement_fields = []
        for position, term in zip(("subject", "predicate", "object"), statement.terms()):
            field = by_id.get(str(term))
            if field is not None:
                statement_fields.append(_form_field(field, section))
            else:
                statement_fields.append(FormField(
                    name=f"_const_{statement.name}_{position}",
                    kind=FormFieldKind.STATIC,
                    label=position,
                    default=str(term),
                    section=section,
                ))
        if statement.is_repeatable:
            form.append(FormField(
                name=statement.name,
                kind=FormFieldKind.ARRAY,
                item_kind="object",
                min_items=1,
                default=[],
                section=section,
                fields=statement_fields,
            ))
        else:
            form.extend(statement_fields)
    return form


def _field_schema(field: TemplateField) -> dict[str, Any]:
    pattern = {"pattern": field.regex} if field.regex else {}
    match field_kind(field.type):
        case FormFieldKind.URL:
            schema = {"type": "string", "check_with": "url", **pattern}
        case FormFieldKind.COMBOBOX:
            if field.options:
                schema = {"type": "string", "allowed": [o.name for o in field.options]}
            else:
                schema = {"type": "string", **pattern}
        case FormFieldKind.TEXT | FormFieldKind.TEXTAREA if field.type in FIELD_KINDS:
            schema = {"type": "string", "empty": False, **pattern}
        case FormFieldKind.ARRAY:
            return {"type": "list", "schema": {"type": "string", **pattern}, "default": []}
        case _:
            schema = {"type": "string", **pattern}
    if field.required:
        schema["required"] = True
    else:
        schema["nullable"] = True
    return schema


def fields_to_schema(fields: Iterable[TemplateField],
                     statements: Mapping[str, Statement] | None = None) -> dict[str, dict[str, Any]]:
    """A Cerberus validation schema for the values of the fields,
    see https://docs.python-cerberus.org/en/stable/validation-rules.html

    Fields of repeatable statements are not required at the top level.
    If the statements are given, the repetitions of each repeatable statement
    are validated as a list of value mappings.
    """
    fields = list(fields)
    schema = {}
    for field in fields:
        field_schema = _field_schema(field)
        if field.multiple:
            field_schema.pop("required", None)
            field_schema["nullable"] = True
        schema[field.name] = field_schema
    for statement in (statements or {}).values():
        if not statement.is_repeatable:
            continue
        item_schema = {}
        for field in fields:
            if field.id in {str(t) for t in statement.terms()}:
                item_schema[field.name] = _field_schema(field)
        schema[statement.name] = {
            "type": "list",
            "schema": {"type": "dict", "schema": item_schema},
            "default": [],
        }
    return schema


class FormValidator(ConfigValidator):
    """Validates the values of a form, dropping any unknown values."""

    def __init__(self, *args: Any, **kwargs: Any):
        # child validators of nested schemas are created with the parent's config
        kwargs.setdefault("auto_coerce", False)
        super().__init__(*args, **kwargs)

    def _check_with_url(self, field: str, value: Any) -> None:
        if not validators.url(value):
            self._error(field, "must be a valid URL")

    def _validate_pattern(self, pattern: str, field: str, value: Any) -> None:
        """Test that the value contains a match of a regular expression.

        The rule's arguments are validated against this schema:
        {'type': 'string'}
        """
        if isinstance(value, str) and not re.search(pattern, value):
            self._error(field, f"value does not match pattern '{pattern}'")


def validate_values(fields: Iterable[TemplateField],
                    values: Mapping[str, Any],
                    statements: Mapping[str, Statement] | None = None) -> tuple[dict[str, Any] | None, list[str]]:
    """Normalize and validate the values of a filled in form.

    Returns:
        tuple(dict | None, list[str]): The normalized values, or None,
            and the reasons why the validation failed.
    """
    validator = FormValidator(fields_to_schema(fields, statements))
    if validator.validate(deepcopy(dict(values))):
        return validator.document, []
    reasons = []
    for error in validator.errors:
        path = ".".join(str(p) for p in error["path"])
        if error["code"] == REQUIRED_FIELD.code:
            reasons.append(f"missing value '{path}'.")
        else:
            reasons.append(f"invalid value '{path}': {error['msg']}")
    return None, reasons
