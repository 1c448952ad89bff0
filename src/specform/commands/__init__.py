"""Built-in CLI commands for specform.

* :mod:`~specform.commands.compile` -- compile a document into field
  definitions.
* :mod:`~specform.commands.inspect` -- list the resources and operations a
  document compiles to.

Each module exports plain callback functions that :mod:`specform.app`
registers directly on the root application.
"""

from __future__ import annotations

from typing import NoReturn

import typer

from specform.exceptions import SpecformError
from specform.output import error


def exit_with(exc: SpecformError) -> NoReturn:
    """Report *exc* on stderr and exit with its code."""
    error(str(exc))
    raise typer.Exit(code=exc.exit_code)
