"""Compiler configuration resolution and atomic output writes.

The compiler takes a single explicit :class:`~specform.models.CompilerConfig`
value; nothing reads process-wide state during compilation.  The CLI builds
that value with :func:`resolve_config`, which layers the usual sources:

Precedence (high to low):
    1. CLI flags (``--uri-notice`` / ``--no-uri-notice``)
    2. Environment variable ``SPECFORM_ADD_URI_AFTER_OPERATION``
    3. Project config (``./specform.json``)
    4. Defaults

Compiled output files are written with :func:`atomic_write` (temp file then
rename) so a failed run never leaves a half-written node definition behind.
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from specform.exceptions import ConfigError
from specform.models import CompilerConfig

_PROJECT_CONFIG_FILENAME = "specform.json"
_ENV_ADD_URI = "SPECFORM_ADD_URI_AFTER_OPERATION"

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off"})


# --- Project-local config ---


def load_project_config(directory: Optional[Path] = None) -> Optional[dict[str, Any]]:
    """Load project-local configuration from ``specform.json``.

    Args:
        directory: Where to look; defaults to the current working directory.

    Returns:
        The parsed JSON object, or ``None`` if the file does not exist.

    Raises:
        ConfigError: If the file exists but is not a JSON object.
    """
    path = (directory or Path.cwd()) / _PROJECT_CONFIG_FILENAME
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError) as exc:
        raise ConfigError(f"Invalid project config at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid project config at {path}: expected a JSON object")
    return data


def _parse_bool(name: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ConfigError(f"Invalid boolean for {name}: {value!r}")


# --- Precedence resolution ---


def resolve_config(
    cli_add_uri_after_operation: Optional[bool] = None,
    directory: Optional[Path] = None,
) -> CompilerConfig:
    """Resolve the compiler configuration with the full precedence chain.

    Args:
        cli_add_uri_after_operation: Value of the CLI flag, or ``None`` when
            the flag was not given.
        directory: Directory holding ``specform.json``; defaults to cwd.

    Raises:
        ConfigError: If the project file or environment value is invalid.
    """
    data: dict[str, Any] = {}

    project = load_project_config(directory)
    if project is not None:
        data.update(project)

    env_value = os.environ.get(_ENV_ADD_URI)
    if env_value:
        data["add_uri_after_operation"] = _parse_bool(_ENV_ADD_URI, env_value)

    if cli_add_uri_after_operation is not None:
        data["add_uri_after_operation"] = cli_add_uri_after_operation

    try:
        return CompilerConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid compiler configuration: {exc}") from exc


# --- Atomic file writes ---


def atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is an atomic rename on POSIX systems.  On any failure the
    temp file is removed and the error propagates.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    tmp_path: Optional[str] = None
    try:
        with tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        ) as handle:
            tmp_path = handle.name
            handle.write(data)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_path, path)
    except BaseException:
        if tmp_path is not None and os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise
