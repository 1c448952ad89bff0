"""Field generator -- compile a document into host UI field definitions.

This sub-package is responsible for the second half of the specform
pipeline: taking a :class:`~specform.models.Document` and producing the
resource selector, one operation selector per resource, and the routed input
fields of every operation.

Typical usage::

    from specform.generator import compile_document
    from specform.models import CompilerConfig

    node = compile_document(raw_openapi_dict, CompilerConfig())
    properties = node.to_host()

Sub-modules:

* :mod:`~specform.generator.naming` -- Display names, operation names, and
  host URL templates.
* :mod:`~specform.generator.field_compiler` -- Map schemas, parameters and
  request bodies to routed fields.
* :mod:`~specform.generator.collectors` -- Walker visitors that accumulate
  selectors and fields.
* :mod:`~specform.generator.pipeline` -- Orchestrates the walker passes.
"""

from specform.generator.field_compiler import SchemaFieldCompiler
from specform.generator.pipeline import Pipeline, compile_document

__all__ = ["Pipeline", "SchemaFieldCompiler", "compile_document"]
