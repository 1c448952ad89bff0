"""Human-readable labels and host-syntax strings derived from document names.

* :func:`start_case` -- ``petId`` -> ``Pet Id``, used for every display name
  and option label.
* :func:`operation_name` -- the label of an operation in the operation
  selector, derived from its ``operationId``.
* :func:`host_url` -- rewrite ``{param}`` placeholders of a URI template into
  the host runtime's parameter interpolation syntax.
* :func:`unique_key` -- choose a field key that does not clash with the keys
  already used by an operation.
"""

from __future__ import annotations

import re
from typing import Any, Optional

from specform.models import APIOperation

# Runs of letters and digits; everything else (including "_") separates words.
_CHUNK_RE = re.compile(r"[^\W_]+")

_PLACEHOLDER_RE = re.compile(r"\{([^}]*)\}")

_SEPARATOR_RE = re.compile(r"[\W_]")


def start_case(value: Any) -> str:
    """Split *value* into words and capitalise the first letter of each.

    Non-string values (enum members can be numbers or booleans) are converted
    with ``str()`` first.  The rest of each word keeps its case, so acronyms
    survive.  Letters outside ASCII are classified by their Unicode case;
    caseless scripts stay one word per run.

    Example::

        >>> start_case("petId")
        'Pet Id'
        >>> start_case("X-Request-ID")
        'X Request ID'
        >>> start_case("über_größe")
        'Über Größe'
    """
    words = []
    for chunk in _CHUNK_RE.findall(str(value)):
        words.extend(_split_chunk(chunk))
    return " ".join(word[0].upper() + word[1:] for word in words)


def _split_chunk(chunk: str) -> list[str]:
    # "XMLParser" -> XML, Parser; "petId2" -> pet, Id, 2
    words: list[str] = []
    start = 0
    for i in range(1, len(chunk)):
        prev, char = chunk[i - 1], chunk[i]
        if prev.isdigit() != char.isdigit():
            boundary = True
        elif char.isupper():
            following = chunk[i + 1] if i + 1 < len(chunk) else ""
            boundary = not prev.isupper() or following.islower()
        else:
            boundary = False
        if boundary:
            words.append(chunk[start:i])
            start = i
    words.append(chunk[start:])
    return words


def operation_name(operation: APIOperation, resource: Optional[str] = None) -> str:
    """Derive the display name of an operation from its ``operationId``.

    Frameworks often generate ids of the form ``<Resource>_<method>``
    (``Pets_findById``).  The leading segment is dropped only when it names
    the operation's resource, compared case-insensitively and ignoring
    punctuation; otherwise the whole id is used.  Operations without an id
    are named after method and path.

    Example::

        >>> operation_name(APIOperation(path="/pets/{id}", method="get",
        ...                             operation_id="Pets_findById"), "pets")
        'Find By Id'
        >>> operation_name(APIOperation(path="/pets", method="get",
        ...                             operation_id="listPets"))
        'List Pets'
    """
    op_id = operation.operation_id
    if not op_id:
        return start_case(f"{operation.method.value} {operation.path}")

    prefix, sep, rest = op_id.partition("_")
    if sep and rest and _is_resource_prefix(prefix, resource):
        return start_case(rest)
    return start_case(op_id)


def _is_resource_prefix(prefix: str, resource: Optional[str]) -> bool:
    if resource is None:
        return False
    return _SEPARATOR_RE.sub("", prefix.casefold()) == _SEPARATOR_RE.sub("", resource.casefold())


def host_url(path: str) -> str:
    """Rewrite a URI template into a host expression.

    Example::

        >>> host_url("/pets/{petId}")
        '=/pets/{{$parameter["petId"]}}'
    """
    return "=" + _PLACEHOLDER_RE.sub(
        lambda match: '{{$parameter["' + match.group(1) + '"]}}', path
    )


def unique_key(name: str, qualifier: str, taken: set[str]) -> str:
    """Return *name* if unused, else ``<qualifier>_<name>`` or a numbered variant.

    Example::

        >>> unique_key("name", "body", {"name"})
        'body_name'
        >>> unique_key("name", "body", {"name", "body_name"})
        'body_name_2'
    """
    if name not in taken:
        return name
    candidate = f"{qualifier}_{name}"
    counter = 2
    while candidate in taken:
        candidate = f"{qualifier}_{name}_{counter}"
        counter += 1
    return candidate
