"""Run the collectors over a document and assemble the compiled output.

:class:`Pipeline` walks the same document twice -- once with
:class:`~specform.generator.collectors.ResourceCollector`, once with
:class:`~specform.generator.collectors.OperationCollector` -- and exposes the
resulting selectors and fields.  The output is a pure function of the
document and the configuration: running the pipeline again over the same
document yields identical fields in identical order.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Union

from specform.exceptions import ResourceNotFound
from specform.generator.collectors import OperationCollector, ResourceCollector
from specform.models import CompiledNode, CompilerConfig, Document, FieldDefinition
from specform.parser.walker import DocumentWalker

logger = logging.getLogger(__name__)


class Pipeline:
    """Compile one document into resource/operation selectors and input fields.

    Args:
        document: The document to compile.
        config: Compiler options; defaults to :class:`~specform.models.CompilerConfig`.

    Example::

        pipeline = Pipeline(document, CompilerConfig(add_uri_after_operation=False))
        pipeline.process()
        for field in pipeline.properties:
            print(field.name, field.type.value)
    """

    def __init__(self, document: Document, config: Optional[CompilerConfig] = None) -> None:
        self._document = document
        self._config = config or CompilerConfig()
        self._walker = DocumentWalker(document)

        self.resource_node: Optional[FieldDefinition] = None
        self.operations: list[FieldDefinition] = []
        self.fields: list[FieldDefinition] = []

    @property
    def config(self) -> CompilerConfig:
        return self._config

    def process(self) -> None:
        """Run both walker passes, replacing any previous output."""
        self._parse_resources()
        self._parse_operations()
        logger.debug(
            "Compiled %d operation selectors and %d fields",
            len(self.operations),
            len(self.fields),
        )

    @property
    def properties(self) -> list[FieldDefinition]:
        """Resource selector, operation selectors, then all operation fields.

        Raises:
            ResourceNotFound: If :meth:`process` has not run yet.
        """
        return self.compiled().properties

    def compiled(self) -> CompiledNode:
        """Return the output set as a :class:`~specform.models.CompiledNode`.

        Raises:
            ResourceNotFound: If :meth:`process` has not run yet.
        """
        if self.resource_node is None:
            raise ResourceNotFound("Resource node not found; call process() first")
        return CompiledNode(
            resource=self.resource_node,
            operations=self.operations,
            fields=self.fields,
        )

    def _parse_resources(self) -> None:
        collector = ResourceCollector()
        self._walker.walk(collector)
        self.resource_node = collector.field

    def _parse_operations(self) -> None:
        collector = OperationCollector(self._document, self._config)
        self._walker.walk(collector)
        self.operations = collector.operations
        self.fields = collector.fields


def compile_document(
    document: Union[Document, dict[str, Any]],
    config: Optional[CompilerConfig] = None,
) -> CompiledNode:
    """Compile *document* (a :class:`~specform.models.Document` or raw dict) in one call.

    Example::

        node = compile_document(yaml.safe_load(Path("openapi.yaml").read_text()))
        json.dumps(node.to_host(), indent=2)
    """
    if not isinstance(document, Document):
        document = Document.from_raw(document)
    pipeline = Pipeline(document, config)
    pipeline.process()
    return pipeline.compiled()
