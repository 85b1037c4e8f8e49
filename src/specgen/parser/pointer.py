"""Follow internal JSON Reference pointers without inlining them.

The pipeline needs ``$ref`` strings intact (they are schema identities), so
instead of deep-resolving the document up front, callers resolve a single
pointer at the moment they need its target.

Only **internal** references (those starting with ``#/``) are supported.
External file or URL references raise
:class:`~specgen.exceptions.SpecParseError`.
"""

from __future__ import annotations

from typing import Any

from specgen.exceptions import SpecParseError


def resolve_pointer(ref: str, root: dict[str, Any]) -> Any:
    """Resolve a single ``$ref`` string against the root document.

    Parses JSON Pointer references like ``#/components/schemas/Pet`` and
    navigates *root* to locate the referenced value. Handles RFC 6901
    escaping (``~0`` for ``~``, ``~1`` for ``/``).

    Args:
        ref: The ``$ref`` string (e.g., ``"#/components/schemas/Pet"``).
        root: The unresolved document to navigate.

    Returns:
        The value found at the referenced location.

    Raises:
        SpecParseError: If the reference is external, or if any segment in
            the pointer does not exist in the document.
    """
    if ref == "#":
        return root
    if not ref.startswith("#/"):
        raise SpecParseError(
            f"External $ref not supported: {ref}. "
            "Only internal references (#/...) are handled."
        )

    current: Any = root
    for segment in ref[2:].split("/"):
        segment = unescape_segment(segment)

        if isinstance(current, dict):
            if segment not in current:
                raise SpecParseError(
                    f"Cannot resolve $ref '{ref}': "
                    f"key '{segment}' not found at path"
                )
            current = current[segment]
        elif isinstance(current, list):
            try:
                current = current[int(segment)]
            except (ValueError, IndexError) as exc:
                raise SpecParseError(
                    f"Cannot resolve $ref '{ref}': "
                    f"invalid array index '{segment}'"
                ) from exc
        else:
            raise SpecParseError(
                f"Cannot resolve $ref '{ref}': "
                f"cannot navigate into {type(current).__name__}"
            )

    return current


def follow_refs(node: Any, root: dict[str, Any], pointer: str = "") -> tuple[Any, str]:
    """Follow a chain of ``$ref`` nodes until a concrete node is reached.

    Returns the concrete node and its location. Used for parameters,
    request bodies and responses, whose references carry no identity of
    their own. A reference cycle raises :class:`SpecParseError`.
    """
    seen: set[str] = set()
    while isinstance(node, dict) and "$ref" in node:
        ref = node["$ref"]
        if ref in seen:
            raise SpecParseError(f"Circular $ref chain through '{ref}'")
        seen.add(ref)
        node = resolve_pointer(ref, root)
        pointer = ref
    return node, pointer


def escape_segment(segment: str) -> str:
    """Escape one key for inclusion in a JSON pointer (``a/b`` -> ``a~1b``)."""
    return str(segment).replace("~", "~0").replace("/", "~1")


def unescape_segment(segment: str) -> str:
    """Reverse :func:`escape_segment`."""
    return segment.replace("~1", "/").replace("~0", "~")


def join_pointer(base: str, *segments: Any) -> str:
    """Append escaped *segments* to the pointer *base*.

    Example::

        >>> join_pointer("#/paths", "/pets/{id}", "get")
        '#/paths/~1pets~1{id}/get'
    """
    parts = [base or "#"]
    parts.extend(escape_segment(s) for s in segments)
    return "/".join(parts)
