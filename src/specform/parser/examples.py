"""Derive representative example values from schema nodes.

The field compiler uses these examples as field defaults.  "No example" is an
ordinary outcome, not an error, and must stay distinguishable from an
explicit ``example: null``; it is signalled by the :data:`MISSING` sentinel.
"""

from __future__ import annotations

import enum
import logging
from typing import Any, Union

from specform.exceptions import BrokenReference
from specform.models import Document
from specform.parser.resolver import RefResolver, is_reference

logger = logging.getLogger(__name__)


class _Missing(enum.Enum):
    MISSING = "MISSING"

    def __repr__(self) -> str:
        return "MISSING"


MISSING = _Missing.MISSING
"""Sentinel returned when a schema has no usable example."""

Example = Union[Any, _Missing]


class ExampleExtractor:
    """Pick or synthesise an example value for a schema.

    Resolution order for a schema:

    1. Its own ``example`` (a present ``None`` is returned as-is).
    2. The first entry of an OpenAPI 3.1 ``examples`` list.
    3. For object schemas (or any schema with ``properties``): a dict built
       from each property's example, omitting properties without one.
    4. :data:`MISSING`. Array schemas without their own example never
       synthesise one from their item schema.

    Property schemas are resolved one ``$ref`` hop at a time; a
    reference already being expanded higher up the stack is skipped, so
    self-referential schemas terminate.
    """

    def __init__(self, document: Document, resolver: RefResolver | None = None) -> None:
        self._resolver = resolver or RefResolver(document)

    def extract(self, schema: Any) -> Example:
        """Return an example for *schema* (already resolved), or :data:`MISSING`."""
        return self._extract(schema, frozenset())

    def _extract(self, schema: Any, expanding: frozenset[str]) -> Example:
        if not isinstance(schema, dict):
            return MISSING

        if "example" in schema:
            return schema["example"]
        examples = schema.get("examples")
        if isinstance(examples, list) and examples:
            return examples[0]

        if schema.get("type") == "object" or "properties" in schema:
            return self._from_properties(schema, expanding)
        return MISSING

    def _from_properties(self, schema: dict[str, Any], expanding: frozenset[str]) -> Example:
        properties = schema.get("properties")
        if not isinstance(properties, dict):
            return MISSING

        result: dict[str, Any] = {}
        for name, prop in properties.items():
            value = self._child(prop, expanding)
            if value is not MISSING:
                result[name] = value
        return result if result else MISSING

    def _child(self, node: Any, expanding: frozenset[str]) -> Example:
        if is_reference(node):
            ref = node["$ref"]
            if ref in expanding:
                return MISSING
            try:
                target = self._resolver.resolve_chain(node)
            except BrokenReference as exc:
                logger.debug("No example for %s: %s", ref, exc)
                return MISSING
            return self._extract(target, expanding | {ref})
        return self._extract(node, expanding)
