"""Visitors that accumulate the compiled output during a document walk.

Two collectors are registered with :class:`~specform.parser.walker.DocumentWalker`:

* :class:`ResourceCollector` builds the single ``resource`` selector field.
* :class:`OperationCollector` builds one ``operation`` selector per resource
  plus the flattened input fields of every operation.

**Per-operation post-processing** (in :meth:`OperationCollector.parse_fields`):

1. Parameters are compiled first, then the request body.
2. Every field is scoped to its resource + operation via display options.
3. Fields named ``session`` move to the front; everything else keeps its
   relative order.
4. Duplicate keys are renamed (``body_name``) so every key is unique within
   the operation.
5. When configured, an informational ``METHOD /uri`` notice is prepended.
   It is keyed ``notice`` unless an input already uses that key, in which
   case it yields and takes ``uri_notice``.
"""

from __future__ import annotations

import logging
from typing import Optional

from specform.exceptions import CompilationError
from specform.generator.field_compiler import SchemaFieldCompiler
from specform.generator.naming import host_url, operation_name, start_case, unique_key
from specform.models import (
    APIOperation,
    CompilerConfig,
    DisplayOptions,
    Document,
    FieldDefinition,
    FieldKind,
    FieldOption,
    OperationOption,
    RequestRouting,
    Resource,
)
from specform.parser.walker import DocumentVisitor

logger = logging.getLogger(__name__)

SESSION_FIELD = "session"
NOTICE_FIELD = "notice"


class ResourceCollector(DocumentVisitor):
    """Collect the distinct resources of a document into the ``resource`` selector."""

    def __init__(self) -> None:
        self._options: dict[str, FieldOption] = {}

    def visit_resource(self, resource: Resource) -> None:
        if resource.name in self._options:
            return
        self._options[resource.name] = FieldOption(
            name=start_case(resource.name),
            value=resource.name,
            description=resource.description,
        )

    @property
    def field(self) -> FieldDefinition:
        """The ``resource`` selector; options in first-seen order."""
        options = list(self._options.values())
        return FieldDefinition(
            display_name="Resource",
            name="resource",
            type=FieldKind.OPTIONS,
            no_data_expression=True,
            options=options,
            default=options[0].value if options else "",
        )


class OperationCollector(DocumentVisitor):
    """Compile every operation into an option of its resource's selector plus input fields.

    Args:
        document: The document being walked; used to resolve ``$ref`` pointers.
        config: Compiler options. Defaults to :class:`~specform.models.CompilerConfig`.
    """

    def __init__(self, document: Document, config: Optional[CompilerConfig] = None) -> None:
        self._compiler = SchemaFieldCompiler(document)
        self._config = config or CompilerConfig()
        self._options_by_resource: dict[str, list[OperationOption]] = {}
        self.fields: list[FieldDefinition] = []

    @property
    def operations(self) -> list[FieldDefinition]:
        """One ``operation`` selector per resource, in resource order."""
        selectors: list[FieldDefinition] = []
        for resource, options in self._options_by_resource.items():
            selectors.append(
                FieldDefinition(
                    display_name="Operation",
                    name="operation",
                    type=FieldKind.OPTIONS,
                    no_data_expression=True,
                    display_options=DisplayOptions(resource=[resource]),
                    options=list(options),
                    default=options[0].value if options else "",
                )
            )
        return selectors

    def visit_resource(self, resource: Resource) -> None:
        self._options_by_resource.setdefault(resource.name, [])

    def visit_operation(self, resource: Resource, operation: APIOperation) -> None:
        options = self._options_by_resource.setdefault(resource.name, [])
        name = self._option_value(operation, resource.name, options)

        try:
            fields = self.parse_fields(operation)
        except CompilationError as exc:
            raise exc.at(operation.label)

        display_options = DisplayOptions(resource=[resource.name], operation=[name])
        for field in fields:
            field.display_options = display_options

        options.append(
            OperationOption(
                name=name,
                value=name,
                action=operation.summary or name,
                description=operation.description or operation.summary,
                routing=RequestRouting(
                    method=operation.method.value.upper(),
                    url=host_url(operation.path),
                ),
            )
        )
        logger.debug("Compiled %d fields for %s", len(fields), operation.label)
        self.fields.extend(fields)

    def parse_fields(self, operation: APIOperation) -> list[FieldDefinition]:
        """Compile, reorder, de-duplicate, and optionally annotate one operation's fields."""
        fields = self._compiler.from_parameters(operation.parameters)
        fields.extend(self._compiler.from_request_body(operation.request_body))

        fields = deduplicate_keys(float_session_first(fields), operation.label)
        if self._config.add_uri_after_operation:
            taken = {field.name for field in fields}
            fields.insert(0, self._notice(operation, unique_key(NOTICE_FIELD, "uri", taken)))
        return fields

    def _notice(self, operation: APIOperation, key: str) -> FieldDefinition:
        return FieldDefinition(
            display_name=f"{operation.method.value.upper()} {operation.path}",
            name=key,
            type=FieldKind.NOTICE,
            type_options={"theme": "info"},
            default="",
        )

    @staticmethod
    def _option_value(
        operation: APIOperation, resource: str, options: list[OperationOption]
    ) -> str:
        """Name the operation, appending the HTTP method on a collision within the resource."""
        taken = {option.value for option in options}
        name = operation_name(operation, resource)
        if name not in taken:
            return name
        candidate = f"{name} {operation.method.value.upper()}"
        counter = 2
        while candidate in taken:
            candidate = f"{name} {operation.method.value.upper()} {counter}"
            counter += 1
        logger.warning(
            "Operation name %r already used in resource %r; using %r for %s",
            name, resource, candidate, operation.label,
        )
        return candidate


def float_session_first(fields: list[FieldDefinition]) -> list[FieldDefinition]:
    """Move fields named ``session`` to the front, keeping all other order stable."""
    sessions = [field for field in fields if field.name == SESSION_FIELD]
    others = [field for field in fields if field.name != SESSION_FIELD]
    return sessions + others


def deduplicate_keys(fields: list[FieldDefinition], where: str = "") -> list[FieldDefinition]:
    """Rename later fields whose key is already taken within one operation.

    The replacement key is qualified with the field's routing target
    (``body_name``); the first field keeps the plain name.
    """
    taken: set[str] = set()
    result: list[FieldDefinition] = []
    for field in fields:
        if field.name in taken:
            qualifier = field.routing.target.value if field.routing else field.type.value
            key = unique_key(field.name, qualifier, taken)
            logger.warning("Duplicate field key %r in %s renamed to %r", field.name, where, key)
            field = field.model_copy(update={"name": key})
        taken.add(field.name)
        result.append(field)
    return result
