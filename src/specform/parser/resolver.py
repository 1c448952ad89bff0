"""Dereference ``$ref`` JSON Reference pointers in an OpenAPI document.

OpenAPI documents commonly use ``$ref`` pointers (e.g.,
``{"$ref": "#/components/schemas/Pet"}``) to avoid repetition.  Schemas can be
self-referential (a ``Category`` with a ``parent: Category`` property), so
this module never expands a document eagerly.  :meth:`RefResolver.resolve`
performs exactly **one** hop per call and leaves deeper expansion to the
caller; the field compiler only ever looks one level into a schema, which
sidesteps cycle detection entirely.

Only **internal** references (those starting with ``#/``) are supported.
External file or URL references raise
:class:`~specform.exceptions.BrokenReference`.
"""

from __future__ import annotations

from typing import Any

from specform.exceptions import BrokenReference
from specform.models import Document


def is_reference(node: Any) -> bool:
    """Return True if *node* is a ``{"$ref": ...}`` dict."""
    return isinstance(node, dict) and "$ref" in node


class RefResolver:
    """Single-hop ``$ref`` resolver bound to one :class:`~specform.models.Document`.

    Example::

        resolver = RefResolver(document)
        schema = resolver.resolve({"$ref": "#/components/schemas/Pet"})
        # schema is the Pet schema dict; its properties may still be $refs
    """

    def __init__(self, document: Document) -> None:
        self._root = document.as_dict()

    def resolve(self, node: Any) -> Any:
        """Return the node *node* points to, or *node* itself if it is not a reference.

        Raises:
            BrokenReference: If the pointer is external or names a path that
                does not exist in the document.
        """
        if not is_reference(node):
            return node
        return self.lookup(node["$ref"])

    def resolve_chain(self, node: Any) -> Any:
        """Follow reference-to-reference aliases until a non-reference node.

        Each step is one :meth:`resolve` hop.  A chain that returns to a
        pointer it already visited can never produce a value and raises.

        Raises:
            BrokenReference: On a broken pointer or a pure reference cycle.
        """
        visited: set[str] = set()
        while is_reference(node):
            ref = node["$ref"]
            if ref in visited:
                raise BrokenReference(ref, "circular reference chain")
            visited.add(ref)
            node = self.resolve(node)
        return node

    def lookup(self, ref: str) -> Any:
        """Navigate the document along the JSON pointer *ref*.

        Handles RFC 6901 escaping (``~0`` for ``~``, ``~1`` for ``/``).
        """
        if not isinstance(ref, str) or not ref.startswith("#/"):
            raise BrokenReference(
                str(ref), "only internal references (#/...) are supported"
            )

        current: Any = self._root
        for segment in ref[2:].split("/"):
            segment = segment.replace("~1", "/").replace("~0", "~")

            if isinstance(current, dict):
                if segment not in current:
                    raise BrokenReference(ref, f"key '{segment}' not found")
                current = current[segment]
            elif isinstance(current, list):
                try:
                    current = current[int(segment)]
                except (ValueError, IndexError) as exc:
                    raise BrokenReference(
                        ref, f"invalid array index '{segment}'"
                    ) from exc
            else:
                raise BrokenReference(
                    ref, f"cannot navigate into {type(current).__name__}"
                )

        return current
