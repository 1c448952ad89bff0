"""Numeric process exit codes used by the ``specform`` command line.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~specform.exceptions.SpecformError` subclass.
Build scripts that regenerate node definitions can inspect the exit code to
tell a broken document apart from a bad invocation without parsing stderr.

Example::

    $ specform compile openapi.yaml -o node.json
    $ echo $?
    4   # EXIT_BROKEN_REFERENCE -- a $ref in the document points nowhere
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments."""

EXIT_SPEC_PARSE_ERROR = 3
"""The OpenAPI document could not be loaded or is not OpenAPI 3.x."""

EXIT_BROKEN_REFERENCE = 4
"""A ``$ref`` pointer in the document does not resolve."""

EXIT_UNSUPPORTED = 5
"""The document uses a construct the compiler cannot turn into fields."""

EXIT_CONFIG_ERROR = 6
"""The compiler configuration is invalid."""
