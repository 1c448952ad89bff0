"""Shared test fixtures for specform.

Provides reusable fixtures for loading document fixtures, building small
inline documents, isolating configuration, managing output state, and
running CLI commands.  These fixtures are automatically discovered by pytest
and available to all test modules without explicit imports.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Callable

import pytest

from specform.models import Document
from specform.output import OutputFormat, OutputManager, reset_output, set_output


FIXTURES_DIR = Path(__file__).parent / "fixtures"


# ---------------------------------------------------------------------------
# Auto-reset global state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager and package log handlers after every test.

    Both hold references to the sys.stdout/sys.stderr streams that were
    active when the CLI callback ran.  Typer's CliRunner replaces those
    streams per invocation, so stale references would point at closed files.
    """
    yield
    reset_output()
    logger = logging.getLogger("specform")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


# ---------------------------------------------------------------------------
# Raw document fixtures (plain dicts loaded from JSON files)
# ---------------------------------------------------------------------------


@pytest.fixture
def petstore_raw() -> dict[str, Any]:
    """Load the raw petstore 3.0 document dict."""
    with open(FIXTURES_DIR / "petstore.json") as f:
        return json.load(f)


@pytest.fixture
def messaging_raw() -> dict[str, Any]:
    """Load the raw messaging 3.1 document dict."""
    with open(FIXTURES_DIR / "messaging.json") as f:
        return json.load(f)


# ---------------------------------------------------------------------------
# Document fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def petstore_document(petstore_raw: dict[str, Any]) -> Document:
    return Document.from_raw(petstore_raw)


@pytest.fixture
def messaging_document(messaging_raw: dict[str, Any]) -> Document:
    return Document.from_raw(messaging_raw)


@pytest.fixture
def make_document() -> Callable[..., Document]:
    """Factory for small inline documents.

    Example::

        document = make_document(
            paths={"/pets": {"get": {"operationId": "listPets"}}},
            schemas={"Pet": {"type": "object"}},
        )
    """

    def _make(
        paths: dict[str, Any] | None = None,
        schemas: dict[str, Any] | None = None,
        **components: Any,
    ) -> Document:
        all_components = dict(components)
        if schemas is not None:
            all_components["schemas"] = schemas
        return Document.from_raw(
            {
                "openapi": "3.0.3",
                "info": {"title": "Test", "version": "1.0.0"},
                "paths": paths or {},
                "components": all_components,
            }
        )

    return _make


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run the test from an empty temporary directory with no SPECFORM_* env vars.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.delenv("SPECFORM_ADD_URI_AFTER_OPERATION", raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def json_output() -> OutputManager:
    """Install a JSON-format OutputManager as the global output."""
    output = OutputManager(format=OutputFormat.JSON)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
