"""Compile OpenAPI parameters and request bodies into field definitions.

This module is the heart of specform.  It converts schema nodes into
:class:`~specform.models.FieldDefinition` objects the host UI can render, and
attaches the :class:`~specform.models.RoutingDirective` telling the host where
the value goes in the outgoing request.

**Type mapping** (schema kind -> field kind, default when no example):

* ``boolean`` -> ``boolean``, ``True``
* ``string`` or no type -> ``string``, ``""``
* ``object`` -> ``json`` (JSON text), ``"{}"``
* ``array`` -> ``json`` (JSON text), ``"[]"``
* ``number`` / ``integer`` -> ``number``, ``0``
* any schema with a non-empty ``enum`` -> ``options``, first enum value

Only the top level of a schema becomes fields.  Nested objects and arrays are
edited as JSON text, so the compiler never recurses into a schema and
self-referential schemas need no special handling.

**Routing rules:**

* Query and header parameters are sent verbatim under their own name.
* Path parameters are substituted into the URL and are always required.
* JSON body properties are routed to ``body.<name>``; ``json`` fields are
  parsed before sending.  An array body becomes a single ``body`` field that
  replaces the whole request body.
* Multipart properties with ``format: binary`` become file inputs whose value
  names a binary payload of the host item.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Optional

from specform.exceptions import (
    MultipartSchemaMissingProperties,
    UnsupportedBodyContentType,
    UnsupportedBodySchema,
    UnsupportedParameterLocation,
)
from specform.generator.naming import start_case
from specform.models import (
    Document,
    FieldDefinition,
    FieldKind,
    FieldOption,
    ParameterLocation,
    RoutingDirective,
    RoutingTarget,
    SchemaKind,
    ValueExtraction,
)
from specform.parser.examples import MISSING, ExampleExtractor
from specform.parser.resolver import RefResolver

logger = logging.getLogger(__name__)

MULTIPART_FORM_DATA = "multipart/form-data"

_JSON_CONTENT_RE = re.compile(r"application/json")


# ---------------------------------------------------------------------------
# Kind classification
# ---------------------------------------------------------------------------

_KIND_TABLE: dict[SchemaKind, tuple[FieldKind, Any]] = {
    SchemaKind.BOOLEAN: (FieldKind.BOOLEAN, True),
    SchemaKind.STRING: (FieldKind.STRING, ""),
    SchemaKind.OBJECT: (FieldKind.JSON, "{}"),
    SchemaKind.ARRAY: (FieldKind.JSON, "[]"),
    SchemaKind.NUMBER: (FieldKind.NUMBER, 0),
    SchemaKind.INTEGER: (FieldKind.NUMBER, 0),
}

_PARAMETER_TARGETS: dict[ParameterLocation, RoutingTarget] = {
    ParameterLocation.QUERY: RoutingTarget.QUERY,
    ParameterLocation.PATH: RoutingTarget.PATH,
    ParameterLocation.HEADER: RoutingTarget.HEADER,
}


def declared_type(schema: Any) -> Optional[str]:
    """Return the schema's ``type``, or ``None`` when absent.

    OpenAPI 3.1 allows a list (``["string", "null"]``); the first non-null
    entry is used.
    """
    if not isinstance(schema, dict):
        return None
    type_value = schema.get("type")
    if isinstance(type_value, list):
        non_null = [t for t in type_value if t != "null"]
        return non_null[0] if non_null else None
    return type_value


def schema_kind(schema: Any) -> SchemaKind:
    """Classify a resolved schema into a :class:`~specform.models.SchemaKind`.

    Example::

        >>> schema_kind({"type": "string", "enum": ["a", "b"]})
        <SchemaKind.ENUM: 'enum'>
        >>> schema_kind({"properties": {"id": {"type": "integer"}}})
        <SchemaKind.OBJECT: 'object'>
        >>> schema_kind({})
        <SchemaKind.STRING: 'string'>
    """
    if not isinstance(schema, dict):
        return SchemaKind.STRING

    enum_values = schema.get("enum")
    if isinstance(enum_values, list) and enum_values:
        return SchemaKind.ENUM

    type_value = declared_type(schema)
    if type_value is None:
        if "properties" in schema:
            return SchemaKind.OBJECT
        if "items" in schema:
            return SchemaKind.ARRAY
        return SchemaKind.STRING

    try:
        kind = SchemaKind(type_value)
    except ValueError:
        logger.debug("Unknown schema type %r, treating as string", type_value)
        return SchemaKind.STRING
    # "enum" is not a JSON Schema type
    return SchemaKind.STRING if kind is SchemaKind.ENUM else kind


def _combine(*sources: dict[str, Any]) -> dict[str, Any]:
    """Merge descriptor dicts; the first source defining a key wins."""
    result: dict[str, Any] = {}
    for source in sources:
        for key, value in source.items():
            result.setdefault(key, value)
    return result


def _json_safe(value: Any) -> Any:
    """Normalise YAML-native values (dates, sets) into JSON-compatible ones."""
    return json.loads(json.dumps(value, default=str))


# ---------------------------------------------------------------------------
# Compiler
# ---------------------------------------------------------------------------


class SchemaFieldCompiler:
    """Turn schemas, parameters and request bodies of one document into fields.

    Args:
        document: The document whose ``$ref`` pointers are resolved.

    Example::

        compiler = SchemaFieldCompiler(document)
        fields = compiler.from_parameters(operation.parameters)
        fields += compiler.from_request_body(operation.request_body)
    """

    def __init__(self, document: Document) -> None:
        self._resolver = RefResolver(document)
        self._examples = ExampleExtractor(document, self._resolver)

    # -- schemas ------------------------------------------------------------

    def from_schema(self, schema: Any) -> dict[str, Any]:
        """Map a schema to the ``type``/``default``/``description``/``options`` part of a field.

        Returns a descriptor dict of :class:`~specform.models.FieldDefinition`
        keyword arguments; callers add the name and routing.
        """
        schema = self._resolver.resolve_chain(schema)
        if not isinstance(schema, dict):
            schema = {}

        kind = schema_kind(schema)
        example = self._examples.extract(schema)
        if example is not MISSING:
            example = _json_safe(example)

        descriptor: dict[str, Any] = {}
        if kind is SchemaKind.ENUM:
            values = schema["enum"]
            descriptor["type"] = FieldKind.OPTIONS
            descriptor["options"] = [
                FieldOption(name=start_case(value), value=value) for value in values
            ]
            descriptor["default"] = values[0] if example is MISSING else example
        else:
            field_kind, fallback = _KIND_TABLE[kind]
            descriptor["type"] = field_kind
            if example is MISSING:
                descriptor["default"] = fallback
            elif field_kind is FieldKind.JSON:
                descriptor["default"] = json.dumps(example, indent=2)
            else:
                descriptor["default"] = example

        if schema.get("description") is not None:
            descriptor["description"] = schema["description"]
        return descriptor

    def from_schema_property(self, name: str, schema: Any) -> FieldDefinition:
        """Build an unrouted field named *name* from a property schema."""
        return FieldDefinition(
            **_combine(
                {"display_name": start_case(name), "name": name},
                self.from_schema(schema),
            )
        )

    # -- parameters ---------------------------------------------------------

    def from_parameter(self, parameter: Any) -> FieldDefinition:
        """Compile one (possibly ``$ref``) parameter into a routed field.

        Parameter-level ``required``, ``description`` and ``example`` take
        precedence over what the schema provides.

        Raises:
            UnsupportedParameterLocation: For ``in`` values other than
                query, path and header.
        """
        parameter = self._resolver.resolve_chain(parameter)
        name = parameter.get("name", "")
        location_value = parameter.get("in")

        try:
            location = ParameterLocation(location_value)
        except ValueError:
            location = None
        target = _PARAMETER_TARGETS.get(location) if location is not None else None
        if target is None:
            raise UnsupportedParameterLocation(
                f"Unknown parameter location '{location_value}' for parameter '{name}'"
            )

        schema_part = self.from_schema(parameter.get("schema") or {})
        parameter_part: dict[str, Any] = {
            "display_name": start_case(name),
            "name": name,
            "required": bool(parameter.get("required", False)),
        }
        if parameter.get("description") is not None:
            parameter_part["description"] = parameter["description"]
        if "example" in parameter:
            example = _json_safe(parameter["example"])
            if schema_part["type"] is FieldKind.JSON and not isinstance(example, str):
                example = json.dumps(example, indent=2)
            parameter_part["default"] = example

        field = FieldDefinition(**_combine(parameter_part, schema_part))
        if target is RoutingTarget.PATH:
            field.required = True
        field.routing = RoutingDirective(target=target, key=name)
        return field

    def from_parameters(self, parameters: Optional[list[Any]]) -> list[FieldDefinition]:
        """Compile a parameter list, preserving its order."""
        if not parameters:
            return []
        return [self.from_parameter(parameter) for parameter in parameters]

    # -- request bodies -----------------------------------------------------

    def from_request_body(self, body: Any) -> list[FieldDefinition]:
        """Compile a (possibly ``$ref``) request body into routed fields.

        ``multipart/form-data`` is preferred when offered; otherwise the first
        ``application/json*`` content type is used.

        Raises:
            UnsupportedBodyContentType: If neither content type is offered.
            UnsupportedBodySchema: If the JSON schema is neither an array nor
                an object.
            MultipartSchemaMissingProperties: If the multipart schema
                declares no properties.
        """
        if body is None:
            return []
        body = self._resolver.resolve_chain(body)
        content = body.get("content") or {}

        if MULTIPART_FORM_DATA in content:
            return self._from_multipart(content[MULTIPART_FORM_DATA] or {})

        media = _find_json_content(content)
        if media is None:
            offered = ", ".join(content) or "none"
            raise UnsupportedBodyContentType(
                f"No application/json or multipart/form-data content found (offered: {offered})"
            )

        schema = self._resolver.resolve_chain(media.get("schema") or {})
        if not isinstance(schema, dict):
            schema = {}
        kind = schema_kind(schema)
        if kind is SchemaKind.ARRAY:
            return [self._whole_body_field(schema)]
        if kind is SchemaKind.OBJECT or "properties" in schema:
            return self._property_fields(schema)
        raise UnsupportedBodySchema(
            f"Request body schema type '{declared_type(schema)}' not supported"
        )

    def _whole_body_field(self, schema: dict[str, Any]) -> FieldDefinition:
        # Any present "required" keyword marks the whole array, even an empty
        # list; it is not applied per item.
        required = schema.get("required")
        descriptor = _combine(
            {
                "display_name": "Body",
                "name": "body",
                "required": required is not None and required is not False,
            },
            self.from_schema(schema),
        )
        if "description" not in descriptor:
            items = self._resolver.resolve_chain(schema.get("items") or {})
            if isinstance(items, dict) and items.get("description") is not None:
                descriptor["description"] = items["description"]

        field = FieldDefinition(**descriptor)
        field.routing = RoutingDirective(
            target=RoutingTarget.BODY,
            key=None,
            extraction=ValueExtraction.PARSE_JSON,
        )
        return field

    def _property_fields(self, schema: dict[str, Any]) -> list[FieldDefinition]:
        required_names = _required_names(schema)
        fields: list[FieldDefinition] = []
        for key, prop in (schema.get("properties") or {}).items():
            field = self.from_schema_property(key, prop)
            field.required = key in required_names
            extraction = (
                ValueExtraction.PARSE_JSON
                if field.type is FieldKind.JSON
                else ValueExtraction.VERBATIM
            )
            field.routing = RoutingDirective(
                target=RoutingTarget.BODY, key=key, extraction=extraction
            )
            fields.append(field)
        return fields

    def _from_multipart(self, media: dict[str, Any]) -> list[FieldDefinition]:
        schema = self._resolver.resolve_chain(media.get("schema") or {})
        properties = schema.get("properties") if isinstance(schema, dict) else None
        if not isinstance(properties, dict):
            raise MultipartSchemaMissingProperties(
                "Multipart form data schema must have properties"
            )

        required_names = _required_names(schema)
        fields: list[FieldDefinition] = []
        for key, prop in properties.items():
            resolved = self._resolver.resolve_chain(prop)
            field = self.from_schema_property(key, resolved)
            field.required = key in required_names

            if isinstance(resolved, dict) and resolved.get("format") == "binary":
                field.type = FieldKind.STRING
                if not isinstance(field.default, str):
                    field.default = ""
                field.type_options = {**(field.type_options or {}), "isFilePath": True}
                extraction = ValueExtraction.BINARY
            else:
                extraction = ValueExtraction.VERBATIM

            field.routing = RoutingDirective(
                target=RoutingTarget.BODY, key=key, extraction=extraction
            )
            fields.append(field)
        return fields


def _find_json_content(content: dict[str, Any]) -> Optional[dict[str, Any]]:
    """Return the media object of the first ``application/json*`` content type."""
    for content_type, media in content.items():
        if _JSON_CONTENT_RE.search(content_type):
            return media or {}
    return None


def _required_names(schema: dict[str, Any]) -> set[str]:
    required = schema.get("required")
    if isinstance(required, list):
        return set(required)
    return set()
