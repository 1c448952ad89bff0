"""OpenAPI document layer -- load, dereference, and walk documents.

This sub-package covers the first half of the specform pipeline: getting an
OpenAPI 3.x document into memory and exposing its resources and operations to
the field compiler.

Typical usage::

    from specform.parser import DocumentWalker, load_document

    document = load_document("openapi.yaml")
    for resource in DocumentWalker(document).resources():
        print(resource.name, len(resource.operations))

Sub-modules:

* :mod:`~specform.parser.loader` -- I/O layer (URL, file, stdin) plus format
  detection and OpenAPI version validation.
* :mod:`~specform.parser.resolver` -- Single-hop ``$ref`` dereferencing.
* :mod:`~specform.parser.examples` -- Example values for schema nodes.
* :mod:`~specform.parser.walker` -- Resource/operation traversal and the
  visitor interface.
"""

from specform.parser.examples import MISSING, ExampleExtractor
from specform.parser.loader import load_document, load_spec, validate_openapi_version
from specform.parser.resolver import RefResolver
from specform.parser.walker import DocumentVisitor, DocumentWalker

__all__ = [
    "MISSING",
    "DocumentVisitor",
    "DocumentWalker",
    "ExampleExtractor",
    "RefResolver",
    "load_document",
    "load_spec",
    "validate_openapi_version",
]
