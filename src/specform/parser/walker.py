"""Walk the resource/operation graph of a :class:`~specform.models.Document`.

The walker owns traversal order; visitors own accumulation.  A single
:class:`DocumentWalker` can drive any number of independent
:class:`DocumentVisitor` implementations, each receiving the same resources
and operations in the same order:

1. Operations are read path by path in document order, and within a path
   item in the order the HTTP methods are written.
2. Each operation is assigned to exactly one resource (see
   :func:`resource_name_for`); resources are ordered by first appearance.
3. For every resource the visitor's :meth:`~DocumentVisitor.visit_resource`
   hook fires, followed by :meth:`~DocumentVisitor.visit_operation` for each
   of its operations.  :meth:`~DocumentVisitor.finish` fires once at the end.

Parameter merging follows the OpenAPI specification: path-level parameters
provide defaults, and operation-level parameters override them when they share
the same ``name`` and ``in`` values.
"""

from __future__ import annotations

import logging
from typing import Any

from specform.exceptions import CompilationError
from specform.models import APIOperation, Document, HTTPMethod, Resource
from specform.parser.resolver import RefResolver

logger = logging.getLogger(__name__)

# HTTP methods recognized by OpenAPI
_HTTP_METHODS = frozenset(m.value for m in HTTPMethod)

DEFAULT_RESOURCE = "default"


class DocumentVisitor:
    """Hook interface for :class:`DocumentWalker`.

    Every hook is a no-op by default so that visitors only override what they
    need.
    """

    def visit_resource(self, resource: Resource) -> None:
        """Called once per resource, before its operations."""

    def visit_operation(self, resource: Resource, operation: APIOperation) -> None:
        """Called once per operation, grouped under its resource."""

    def finish(self) -> None:
        """Called after the last operation of the walk."""


class DocumentWalker:
    """Drive visitors over the document's resources and operations.

    Example::

        walker = DocumentWalker(document)
        walker.walk(ResourceCollector())
        walker.walk(OperationCollector(document, config))
    """

    def __init__(self, document: Document) -> None:
        self._document = document
        self._resolver = RefResolver(document)

    def walk(self, visitor: DocumentVisitor) -> None:
        """Perform one full pass over the document, dispatching to *visitor*."""
        for resource in self.resources():
            visitor.visit_resource(resource)
            for operation in resource.operations:
                visitor.visit_operation(resource, operation)
        visitor.finish()

    def resources(self) -> list[Resource]:
        """Group every operation of the document into resources, in first-seen order."""
        grouped: dict[str, Resource] = {}
        for operation in self.operations():
            name = resource_name_for(operation)
            resource = grouped.get(name)
            if resource is None:
                resource = Resource(
                    name=name,
                    description=self._document.tag_description(name),
                )
                grouped[name] = resource
            resource.operations.append(operation)
        logger.debug("Found %d resources", len(grouped))
        return list(grouped.values())

    def operations(self) -> list[APIOperation]:
        """Extract all operations from the document's ``paths`` object."""
        operations: list[APIOperation] = []
        for path, path_item in self._document.paths.items():
            try:
                operations.extend(self._path_operations(path, path_item))
            except CompilationError as exc:
                raise exc.at(path)
        return operations

    def _path_operations(self, path: str, path_item: Any) -> list[APIOperation]:
        path_item = self._resolver.resolve_chain(path_item)
        if not isinstance(path_item, dict):
            return []

        # Path-level parameters apply to all operations under this path
        path_params = path_item.get("parameters") or []
        operations: list[APIOperation] = []

        for method_str, operation in path_item.items():
            if method_str not in _HTTP_METHODS or not isinstance(operation, dict):
                continue

            op_params = operation.get("parameters") or []
            operations.append(
                APIOperation(
                    path=path,
                    method=HTTPMethod(method_str),
                    operation_id=operation.get("operationId"),
                    summary=operation.get("summary"),
                    description=operation.get("description"),
                    tags=operation.get("tags") or [],
                    parameters=self._merge_parameters(path_params, op_params),
                    request_body=operation.get("requestBody"),
                    deprecated=operation.get("deprecated", False),
                )
            )

        return operations

    def _merge_parameters(
        self,
        path_params: list[dict[str, Any]],
        op_params: list[dict[str, Any]],
    ) -> list[dict[str, Any]]:
        """Merge path-level and operation-level parameters.

        Entries are kept as written (references included); only the
        ``(name, in)`` lookup key is computed from the resolved parameter.
        """
        op_keys = {self._parameter_key(param) for param in op_params}

        merged: list[dict[str, Any]] = [
            param for param in path_params if self._parameter_key(param) not in op_keys
        ]
        merged.extend(op_params)
        return merged

    def _parameter_key(self, param: Any) -> tuple[str, str]:
        resolved = self._resolver.resolve_chain(param)
        if not isinstance(resolved, dict):
            return ("", "")
        return (resolved.get("name", ""), resolved.get("in", ""))


def resource_name_for(operation: APIOperation) -> str:
    """Return the resource an operation belongs to.

    The first tag wins; untagged operations fall back to the first static
    path segment (``/pets/{id}`` -> ``pets``), and finally to ``"default"``.

    Example::

        >>> resource_name_for(APIOperation(path="/pets/{id}", method="get"))
        'pets'
    """
    if operation.tags:
        return operation.tags[0]
    for segment in operation.path.strip("/").split("/"):
        if segment and not (segment.startswith("{") and segment.endswith("}")):
            return segment
    return DEFAULT_RESOURCE
