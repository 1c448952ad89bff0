"""``specform compile`` -- turn an OpenAPI document into host field definitions.

The compiled definitions are written to stdout as JSON (so they can be piped
into a node build), or atomically to a file with ``-o``.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

import typer

from specform.commands import exit_with
from specform.exceptions import InvalidUsageError, SpecformError
from specform.output import get_output, success

logger = logging.getLogger(__name__)


def compile_command(
    spec: str = typer.Argument(
        ..., help="OpenAPI 3.x document: file path, http(s) URL, or '-' for stdin."
    ),
    uri_notice: Optional[bool] = typer.Option(
        None,
        "--uri-notice/--no-uri-notice",
        help="Prepend a 'METHOD /uri' notice to each operation's fields.",
    ),
    output_file: Optional[Path] = typer.Option(
        None, "-o", "--output", help="Write the definitions to this file."
    ),
) -> None:
    """Compile an OpenAPI document into resource/operation selectors and fields.

    Example::

        specform compile openapi.yaml -o node-properties.json
        curl -s https://example.com/openapi.json | specform compile - --no-uri-notice
    """
    from specform.config import atomic_write, resolve_config
    from specform.generator import compile_document
    from specform.parser import load_document

    try:
        if output_file is not None and output_file.is_dir():
            raise InvalidUsageError(f"Output path is a directory: {output_file}")
        document = load_document(spec)
        config = resolve_config(cli_add_uri_after_operation=uri_notice)
        node = compile_document(document, config)
    except SpecformError as exc:
        exit_with(exc)

    data = node.to_host()
    logger.debug("Compiled %d properties from %s", len(data), spec)

    if output_file is None:
        get_output().print_json(data)
        return

    atomic_write(output_file, json.dumps(data, indent=2, ensure_ascii=False) + "\n")
    success(f"Wrote {len(data)} properties to {output_file}")
