"""specform -- Compile OpenAPI 3.x documents into host UI field definitions.

Given an OpenAPI document, specform produces the property list of a
declarative integration node: a ``resource`` selector, one ``operation``
selector per resource, and the input fields of every operation, each carrying
the routing needed to place its value in the outgoing request.

Typical workflow::

    specform resources openapi.yaml        # preview resource grouping
    specform compile openapi.yaml -o properties.json

Modules:
    app: Typer application and CLI entry point.
    models: Pydantic models shared across the entire package.
    config: Compiler option resolution and atomic output writes.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
    parser: Document loading, ``$ref`` resolution, and traversal.
    generator: Field compilation and the collector pipeline.
"""

__version__ = "0.1.0"
