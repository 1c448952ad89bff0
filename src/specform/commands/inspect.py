"""``specform resources`` and ``specform operations`` -- preview a compilation.

Both commands run the full compiler and tabulate what the host UI would show,
which makes them a quick way to check resource grouping and operation naming
before generating a node.
"""

from __future__ import annotations

from typing import Optional

import typer

from specform.commands import exit_with
from specform.exceptions import ResourceNotFound, SpecformError
from specform.models import CompiledNode, OperationOption
from specform.output import get_output, info


def _compile(spec: str) -> CompiledNode:
    from specform.config import resolve_config
    from specform.generator import compile_document
    from specform.parser import load_document

    try:
        document = load_document(spec)
        return compile_document(document, resolve_config())
    except SpecformError as exc:
        exit_with(exc)


def resources_command(
    spec: str = typer.Argument(..., help="OpenAPI 3.x document: path, URL, or '-'."),
) -> None:
    """List the resources of a document.

    Example::

        specform resources openapi.yaml
    """
    node = _compile(spec)

    counts = {
        selector.display_options.resource[0]: len(selector.options or [])
        for selector in node.operations
        if selector.display_options is not None
    }
    rows = [
        [
            str(option.value),
            option.name,
            str(counts.get(option.value, 0)),
            option.description or "-",
        ]
        for option in node.resource.options or []
    ]
    if not rows:
        info("No operations found in this document.")
        return
    get_output().print_table(
        ["Resource", "Display Name", "Operations", "Description"],
        rows,
        title=f"Resources ({len(rows)})",
    )


def operations_command(
    spec: str = typer.Argument(..., help="OpenAPI 3.x document: path, URL, or '-'."),
    resource: Optional[str] = typer.Option(
        None, "--resource", "-r", help="Only list operations of this resource."
    ),
) -> None:
    """List the operations of a document with their request routing.

    Example::

        specform operations openapi.yaml --resource pet
    """
    node = _compile(spec)

    field_counts: dict[tuple[str, str], int] = {}
    for field in node.fields:
        if field.display_options is None or not field.display_options.operation:
            continue
        key = (field.display_options.resource[0], field.display_options.operation[0])
        field_counts[key] = field_counts.get(key, 0) + 1

    rows: list[list[str]] = []
    seen_resources: set[str] = set()
    for selector in node.operations:
        if selector.display_options is None:
            continue
        owner = selector.display_options.resource[0]
        seen_resources.add(owner)
        if resource is not None and owner != resource:
            continue
        for option in selector.options or []:
            if not isinstance(option, OperationOption):
                continue
            rows.append([
                owner,
                str(option.value),
                option.routing.method,
                option.routing.url,
                str(field_counts.get((owner, str(option.value)), 0)),
            ])

    if resource is not None and resource not in seen_resources:
        exit_with(ResourceNotFound(f"Resource not found: {resource}"))

    get_output().print_table(
        ["Resource", "Operation", "Method", "URL", "Fields"],
        rows,
        title=f"Operations ({len(rows)})",
    )
