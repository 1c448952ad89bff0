"""Canonical Pydantic models shared across all specform modules.

This is the single source of truth for data shapes in the project. Every other
module imports from here rather than defining its own models. The models fall
into three groups:

**Document models** -- the in-memory API description walked by the compiler:
    :class:`Document`, :class:`HTTPMethod`, :class:`ParameterLocation`,
    :class:`SchemaKind`, :class:`APIOperation`, and :class:`Resource`.

**Output models** -- the compiled field definitions handed to the host UI:
    :class:`FieldKind`, :class:`RoutingTarget`, :class:`ValueExtraction`,
    :class:`RoutingDirective`, :class:`FieldOption`, :class:`RequestRouting`,
    :class:`OperationOption`, :class:`DisplayOptions`,
    :class:`FieldDefinition`, and :class:`CompiledNode`.

**Configuration** -- :class:`CompilerConfig`.

Output models serialise to the host's camelCase configuration format through
their ``to_host()`` methods; ``model_dump()`` keeps the neutral snake_case
shape.
"""

from __future__ import annotations

import enum
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


# --- Document Models ---


class HTTPMethod(str, enum.Enum):
    """HTTP methods recognised by OpenAPI 3.x path-item objects."""

    GET = "get"
    POST = "post"
    PUT = "put"
    PATCH = "patch"
    DELETE = "delete"
    HEAD = "head"
    OPTIONS = "options"
    TRACE = "trace"


class ParameterLocation(str, enum.Enum):
    """Locations where an API parameter can appear, per OpenAPI ``in`` field."""

    QUERY = "query"
    HEADER = "header"
    PATH = "path"
    COOKIE = "cookie"


class SchemaKind(str, enum.Enum):
    """Closed set of schema shapes the field compiler knows how to map.

    ``ENUM`` wins over the declared ``type`` whenever the schema carries a
    non-empty ``enum`` list.
    """

    BOOLEAN = "boolean"
    STRING = "string"
    NUMBER = "number"
    INTEGER = "integer"
    OBJECT = "object"
    ARRAY = "array"
    ENUM = "enum"


class Document(BaseModel):
    """An OpenAPI 3.x document already parsed into memory.

    Schemas, parameters and request bodies stay plain JSON-like dicts; they may
    contain ``{"$ref": "#/..."}`` pointers which
    :class:`~specform.parser.resolver.RefResolver` dereferences against
    :meth:`as_dict`.

    The model is frozen: nothing in the pipeline mutates the document.
    """

    model_config = ConfigDict(frozen=True)

    openapi: str = "3.0.0"
    info: dict[str, Any] = Field(default_factory=dict)
    paths: dict[str, Any] = Field(
        default_factory=dict, description="URI template -> path item"
    )
    components: dict[str, Any] = Field(default_factory=dict)
    tags: list[dict[str, Any]] = Field(default_factory=list)

    @classmethod
    def from_raw(cls, raw: dict[str, Any]) -> Document:
        """Build a document from a raw OpenAPI dict (as loaded from JSON/YAML)."""
        return cls(
            openapi=str(raw.get("openapi", "3.0.0")),
            info=raw.get("info") or {},
            paths=raw.get("paths") or {},
            components=raw.get("components") or {},
            tags=raw.get("tags") or [],
        )

    def tag_description(self, name: str) -> Optional[str]:
        """Return the description of the document-level tag *name*, if declared."""
        for tag in self.tags:
            if isinstance(tag, dict) and tag.get("name") == name:
                return tag.get("description")
        return None

    def as_dict(self) -> dict[str, Any]:
        """Return the document as a plain dict for JSON pointer navigation."""
        return {
            "openapi": self.openapi,
            "info": self.info,
            "paths": self.paths,
            "components": self.components,
            "tags": self.tags,
        }


class APIOperation(BaseModel):
    """A single API operation (one URL path + HTTP method pair).

    ``parameters`` already contains the path-level parameters merged in; the
    entries and ``request_body`` are raw (possibly ``$ref``) dicts that the
    field compiler resolves.
    """

    path: str
    method: HTTPMethod
    operation_id: Optional[str] = None
    summary: Optional[str] = None
    description: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    parameters: list[dict[str, Any]] = Field(default_factory=list)
    request_body: Optional[dict[str, Any]] = None
    deprecated: bool = False

    @property
    def label(self) -> str:
        """``"POST /pets (addPet)"`` -- used in log lines and error locations."""
        text = f"{self.method.value.upper()} {self.path}"
        if self.operation_id:
            text = f"{text} ({self.operation_id})"
        return text


class Resource(BaseModel):
    """A named group of operations, shown as one entry of the resource selector."""

    name: str
    description: Optional[str] = None
    operations: list[APIOperation] = Field(default_factory=list)


# --- Output Models ---


class FieldKind(str, enum.Enum):
    """Value kinds understood by the host UI."""

    BOOLEAN = "boolean"
    STRING = "string"
    NUMBER = "number"
    JSON = "json"
    OPTIONS = "options"
    NOTICE = "notice"


class RoutingTarget(str, enum.Enum):
    """Where in the outgoing request a field's value is placed."""

    QUERY = "query"
    HEADER = "header"
    PATH = "path"
    BODY = "body"


class ValueExtraction(str, enum.Enum):
    """Host expressions evaluated against the live field value."""

    VERBATIM = "={{ $value }}"
    PARSE_JSON = "={{ JSON.parse($value) }}"
    BINARY = "={{ $binary[$value] }}"


class RoutingDirective(BaseModel):
    """How a field's runtime value is injected into the outgoing request.

    ``key`` is the query/header/path parameter name or the body property
    name.  A body directive with ``key=None`` replaces the whole body.
    """

    target: RoutingTarget
    key: Optional[str] = None
    extraction: ValueExtraction = ValueExtraction.VERBATIM

    @property
    def whole_body(self) -> bool:
        return self.target == RoutingTarget.BODY and self.key is None

    def to_host(self) -> Optional[dict[str, Any]]:
        """Return the host ``routing`` block, or ``None`` for path substitution.

        Path values are interpolated by the operation URL (see
        :class:`RequestRouting`), so they need no per-field routing.
        """
        expression = self.extraction.value
        if self.target == RoutingTarget.QUERY:
            return {"request": {"qs": {self.key: expression}}}
        if self.target == RoutingTarget.HEADER:
            return {"request": {"headers": {self.key: expression}}}
        if self.target == RoutingTarget.BODY:
            if self.key is None:
                return {"request": {"body": expression}}
            return {"request": {"body": {self.key: expression}}}
        return None


class FieldOption(BaseModel):
    """One entry of an options field: a display label and the raw value."""

    name: str
    value: Any
    description: Optional[str] = None

    def to_host(self) -> dict[str, Any]:
        data: dict[str, Any] = {"name": self.name, "value": self.value}
        if self.description is not None:
            data["description"] = self.description
        return data


class RequestRouting(BaseModel):
    """Method and URL template of an operation, in host interpolation syntax."""

    method: str
    url: str

    def to_host(self) -> dict[str, Any]:
        return {"request": {"method": self.method, "url": self.url}}


class OperationOption(FieldOption):
    """An entry of the per-resource ``operation`` selector."""

    action: Optional[str] = None
    routing: RequestRouting

    def to_host(self) -> dict[str, Any]:
        data = super().to_host()
        if self.action is not None:
            data["action"] = self.action
        data["routing"] = self.routing.to_host()
        return data


class DisplayOptions(BaseModel):
    """Visibility rule: show a field only for these resources/operations."""

    resource: list[str]
    operation: Optional[list[str]] = None

    def to_host(self) -> dict[str, Any]:
        show: dict[str, list[str]] = {"resource": list(self.resource)}
        if self.operation is not None:
            show["operation"] = list(self.operation)
        return {"show": show}


class FieldDefinition(BaseModel):
    """A compiled, UI-renderable description of one input value.

    ``name`` is the stable key; it is unique among the fields of one
    operation.  ``routing`` and ``display_options`` are attached after
    construction by the compiler and the operation collector.
    """

    display_name: str
    name: str
    type: FieldKind
    default: Any = None
    description: Optional[str] = None
    required: bool = False
    options: Optional[list[Union[OperationOption, FieldOption]]] = None
    routing: Optional[RoutingDirective] = None
    display_options: Optional[DisplayOptions] = None
    type_options: Optional[dict[str, Any]] = None
    no_data_expression: bool = False

    def to_host(self) -> dict[str, Any]:
        """Serialise into the host's structured-configuration format.

        ``required`` is only emitted when true; the host treats a present
        ``required: false`` differently from an absent key.
        """
        data: dict[str, Any] = {
            "displayName": self.display_name,
            "name": self.name,
            "type": self.type.value,
        }
        if self.type_options:
            data["typeOptions"] = dict(self.type_options)
        if self.no_data_expression:
            data["noDataExpression"] = True
        if self.required:
            data["required"] = True
        if self.display_options is not None:
            data["displayOptions"] = self.display_options.to_host()
        if self.options is not None:
            data["options"] = [option.to_host() for option in self.options]
        data["default"] = self.default
        if self.description is not None:
            data["description"] = self.description
        if self.routing is not None:
            routing = self.routing.to_host()
            if routing is not None:
                data["routing"] = routing
        return data


class CompiledNode(BaseModel):
    """The full output set of one compilation run.

    See Also:
        :meth:`~specform.generator.pipeline.Pipeline.compiled`: Producer.
    """

    resource: FieldDefinition
    operations: list[FieldDefinition] = Field(default_factory=list)
    fields: list[FieldDefinition] = Field(default_factory=list)

    @property
    def properties(self) -> list[FieldDefinition]:
        """Resource selector, then operation selectors, then operation fields."""
        return [self.resource, *self.operations, *self.fields]

    def to_host(self) -> list[dict[str, Any]]:
        return [field.to_host() for field in self.properties]


# --- Configuration ---


class CompilerConfig(BaseModel):
    """Options controlling one compilation run.

    Passed explicitly into :class:`~specform.generator.pipeline.Pipeline`;
    see :func:`~specform.config.resolve_config` for how the CLI builds it.
    """

    add_uri_after_operation: bool = Field(
        default=True,
        description="Prepend a notice showing 'METHOD /uri' before each operation's inputs",
    )
