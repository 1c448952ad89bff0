"""Exception hierarchy for specform.

All exceptions inherit from :class:`SpecformError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`specform.exit_codes`.
The top-level error handler in :func:`specform.app.main` catches
``SpecformError`` and exits with the appropriate code.

Errors raised while compiling a document derive from
:class:`CompilationError` and carry an optional ``location`` naming the
operation that triggered them (e.g. ``"POST /pets (addPet)"``).  The
operation collector attaches it before re-raising, so the message printed to
the user points at the offending fragment.

Subclass hierarchy::

    SpecformError (exit 1)
    +-- InvalidUsageError                     (exit 2)
    +-- SpecParseError                        (exit 3)
    +-- ConfigError                           (exit 6)
    +-- ResourceNotFound                      (exit 1)
    +-- CompilationError                      (exit 5)
        +-- BrokenReference                   (exit 4)
        +-- UnsupportedParameterLocation      (exit 5)
        +-- UnsupportedBodyContentType        (exit 5)
        +-- UnsupportedBodySchema             (exit 5)
        +-- MultipartSchemaMissingProperties  (exit 5)
"""

from __future__ import annotations

from typing import Optional

from specform.exit_codes import (
    EXIT_BROKEN_REFERENCE,
    EXIT_CONFIG_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_SPEC_PARSE_ERROR,
    EXIT_UNSUPPORTED,
)


class SpecformError(Exception):
    """Base exception for all specform errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`specform.exit_codes`.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(SpecformError):
    """Raised for invalid CLI arguments."""

    exit_code = EXIT_INVALID_USAGE


class SpecParseError(SpecformError):
    """Raised when the OpenAPI document cannot be loaded or fails version checks."""

    exit_code = EXIT_SPEC_PARSE_ERROR


class ConfigError(SpecformError):
    """Raised for configuration problems (invalid project file, bad env values)."""

    exit_code = EXIT_CONFIG_ERROR


class ResourceNotFound(SpecformError):
    """Raised when compiled output is read before a pass produced the resource selector."""


class CompilationError(SpecformError):
    """Base class for errors raised while turning a document into fields.

    Args:
        message: Description of the problem.
        location: Optional human-readable position in the document.
    """

    exit_code = EXIT_UNSUPPORTED

    def __init__(self, message: str, location: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.location = location

    def at(self, location: str) -> CompilationError:
        """Attach *location* unless a more specific one is already set."""
        if self.location is None:
            self.location = location
        return self

    def __str__(self) -> str:
        if self.location:
            return f"{self.location}: {self.message}"
        return self.message


class BrokenReference(CompilationError):
    """Raised when a ``$ref`` pointer does not resolve to an entry in the document."""

    exit_code = EXIT_BROKEN_REFERENCE

    def __init__(self, ref: str, reason: str, location: Optional[str] = None):
        super().__init__(f"Cannot resolve $ref '{ref}': {reason}", location)
        self.ref = ref


class UnsupportedParameterLocation(CompilationError):
    """Raised for a parameter whose ``in`` is not query, path or header."""


class UnsupportedBodyContentType(CompilationError):
    """Raised when a request body offers neither multipart/form-data nor application/json."""


class UnsupportedBodySchema(CompilationError):
    """Raised when a JSON request body schema is neither an array nor an object."""


class MultipartSchemaMissingProperties(CompilationError):
    """Raised when a multipart/form-data body schema declares no properties."""
