"""JSON-schema to field descriptor mapping."""

from __future__ import annotations

import dataclasses
import re
from typing import Any, Dict, Iterable, List, Optional

from .models import MULTIPART_CONTENT_TYPE, FieldDescriptor, FieldOption, ParsedParameter


_CAMEL_BOUNDARY = re.compile(r"([a-z])([A-Z])")


def to_display_name(name: str) -> str:
    """``firstName`` -> ``First Name``."""
    spaced = _CAMEL_BOUNDARY.sub(r"\1 \2", name)
    return spaced[:1].upper() + spaced[1:]


def schema_to_fields(
    schema: Optional[Dict[str, Any]], operation_id: str
) -> List[FieldDescriptor]:
    """
    Convert an object schema into one field descriptor per property.

    Only the top level is expanded: non-object schemas yield no fields and
    nested objects or arrays become plain string fields.
    """
    if not schema:
        return []
    if _schema_type(schema) != "object":
        return []
    properties = schema.get("properties")
    if not properties:
        return []

    required_fields = schema.get("required") or []
    return [
        _convert_property(name, prop or {}, name in required_fields, operation_id)
        for name, prop in properties.items()
    ]


def schema_to_form_fields(
    schema: Optional[Dict[str, Any]], content_type: str, operation_id: str
) -> List[FieldDescriptor]:
    fields = schema_to_fields(schema, operation_id)
    if content_type != MULTIPART_CONTENT_TYPE:
        return fields

    properties = (schema or {}).get("properties") or {}
    converted: List[FieldDescriptor] = []
    for item in fields:
        if is_binary_schema(properties.get(item.name) or {}):
            item = dataclasses.replace(
                item,
                display_name=f"{item.display_name} (Binary)",
                type="string",
                default="",
                options=(),
            )
        converted.append(item)
    return converted


def parameters_to_fields(parameters: Iterable[ParsedParameter]) -> List[FieldDescriptor]:
    fields: List[FieldDescriptor] = []
    for param in parameters:
        schema = param.schema or {}
        fields.append(
            FieldDescriptor(
                name=param.name,
                display_name=to_display_name(param.name),
                type=_field_type(schema),
                default=_default_value(schema),
                required=param.required,
                description=param.description,
                options=tuple(
                    FieldOption(name=str(value), value=value) for value in schema.get("enum") or []
                ),
            )
        )
    return fields


def is_binary_schema(schema: Dict[str, Any]) -> bool:
    return schema.get("format") in ("binary", "byte")


def _convert_property(
    name: str, schema: Dict[str, Any], required: bool, operation_id: str
) -> FieldDescriptor:
    options = tuple(
        FieldOption(name=to_display_name(str(value)), value=value)
        for value in schema.get("enum") or []
    )
    return FieldDescriptor(
        name=name,
        display_name=to_display_name(name),
        type=_field_type(schema),
        default=_default_value(schema),
        required=required,
        description=schema.get("description") or "",
        options=options,
        operation_id=operation_id,
    )


def _schema_type(schema: Dict[str, Any]) -> Optional[str]:
    schema_type = schema.get("type")
    if isinstance(schema_type, list):
        return schema_type[0] if schema_type else None
    return schema_type


def _field_type(schema: Dict[str, Any]) -> str:
    if "enum" in schema:
        return "options"
    schema_type = _schema_type(schema)
    if schema_type in ("integer", "number"):
        return "number"
    if schema_type == "boolean":
        return "boolean"
    return "string"


def _default_value(schema: Dict[str, Any]) -> Any:
    if "default" in schema:
        return schema["default"]
    schema_type = _schema_type(schema)
    if schema_type in ("integer", "number"):
        return 0
    if schema_type == "boolean":
        return False
    return ""
