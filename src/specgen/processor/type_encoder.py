"""Schema-to-type encoding boundary.

The pipeline treats type encoding as a black box: it hands a schema node to
a :class:`TypeEncoder` and stores whatever
:class:`~specgen.models.TypeDescriptor` comes back. Target-language
generators replace :class:`DefaultTypeEncoder` with their own encoder; the
default covers JSON Schema's structural vocabulary and is enough for
planning files and for tests.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Optional

from specgen.models import BINARY, TypeDescriptor
from specgen.parser.pointer import join_pointer, resolve_pointer

if TYPE_CHECKING:
    from specgen.processor.state import PipelineState

_PRIMITIVES = frozenset({"string", "integer", "number", "boolean"})


class TypeEncoder(ABC):
    """Maps a schema node to a type descriptor."""

    @abstractmethod
    def schema_to_type(
        self,
        state: "PipelineState",
        schema: Optional[dict[str, Any]],
        pointer: str = "",
    ) -> TypeDescriptor:
        """Return the descriptor for *schema*.

        Args:
            state: Current pipeline state. ``state.schema_names`` tells the
                encoder which identities were collected as named schemas.
            schema: The raw schema node, possibly a ``{"$ref": ...}`` node.
                ``None`` when the document gives no schema.
            pointer: JSON pointer of *schema* inside the document. Inline
                named schemas are recognised by it.
        """
        ...


class DefaultTypeEncoder(TypeEncoder):
    """Structural encoder for JSON Schema nodes.

    * ``$ref`` to a collected schema, or an inline node whose pointer was
      collected -> ``schema_ref(final_name)``.
    * ``$ref`` to anything else -> the encoding of its target.
    * ``string`` with ``format: binary`` -> :data:`~specgen.models.BINARY`.
    * other primitives -> ``primitive(type, format)``.
    * ``array`` -> ``array_of(items)``.
    * ``object`` -> ``map_of(additionalProperties)`` (``any`` values when
      unspecified).
    * ``oneOf`` / ``anyOf`` -> ``union_of(members)``; single-member
      ``allOf`` -> that member.
    * 3.0 ``nullable: true`` and 3.1 ``type: [..., "null"]`` set
      ``nullable``.
    """

    def schema_to_type(
        self,
        state: "PipelineState",
        schema: Optional[dict[str, Any]],
        pointer: str = "",
    ) -> TypeDescriptor:
        return self._encode(state, schema, pointer, frozenset())

    def _encode(
        self,
        state: "PipelineState",
        schema: Any,
        pointer: str,
        seen: frozenset[str],
    ) -> TypeDescriptor:
        if not isinstance(schema, dict):
            return TypeDescriptor.any()

        if "$ref" in schema:
            ref = schema["$ref"]
            if ref in state.schema_names:
                return TypeDescriptor.schema_ref(state.schema_names[ref])
            if ref in seen:
                # Recursive, uncollected schema.
                return TypeDescriptor.any()
            target = resolve_pointer(ref, state.spec.raw)
            return self._encode(state, target, ref, seen | {ref})

        if pointer and pointer in state.schema_names:
            return TypeDescriptor.schema_ref(state.schema_names[pointer])

        nullable = schema.get("nullable") is True
        type_value = schema.get("type")
        if isinstance(type_value, list):
            nullable = nullable or "null" in type_value
            non_null = [t for t in type_value if t != "null"]
            type_value = non_null[0] if len(non_null) == 1 else None
            if len(non_null) > 1:
                members = [
                    self._encode(state, {**schema, "type": t}, "", seen)
                    for t in non_null
                ]
                return _with_nullable(TypeDescriptor.union_of(members), nullable)

        result = self._encode_shape(state, schema, type_value, pointer, seen)
        return _with_nullable(result, nullable)

    def _encode_shape(
        self,
        state: "PipelineState",
        schema: dict[str, Any],
        type_value: Any,
        pointer: str,
        seen: frozenset[str],
    ) -> TypeDescriptor:
        for keyword in ("oneOf", "anyOf"):
            if keyword in schema and isinstance(schema[keyword], list):
                members = [
                    self._encode(state, member, join_pointer(pointer, keyword, i), seen)
                    for i, member in enumerate(schema[keyword])
                ]
                return TypeDescriptor.union_of(members)

        all_of = schema.get("allOf")
        if isinstance(all_of, list) and len(all_of) == 1:
            return self._encode(state, all_of[0], join_pointer(pointer, "allOf", 0), seen)

        if type_value == "array" or (type_value is None and "items" in schema):
            items = self._encode(
                state, schema.get("items"), join_pointer(pointer, "items"), seen
            )
            return TypeDescriptor.array_of(items)

        if type_value == "object" or (
            type_value is None and ("properties" in schema or "allOf" in schema)
        ):
            extra = schema.get("additionalProperties")
            if isinstance(extra, dict):
                values = self._encode(
                    state, extra, join_pointer(pointer, "additionalProperties"), seen
                )
                return TypeDescriptor.map_of(values)
            return TypeDescriptor.map_of(TypeDescriptor.any())

        if type_value == "string" and schema.get("format") == "binary":
            return BINARY

        if type_value in _PRIMITIVES:
            return TypeDescriptor.primitive(type_value, schema.get("format"))

        if type_value == "null":
            return TypeDescriptor.any().as_nullable()

        return TypeDescriptor.any()


def _with_nullable(descriptor: TypeDescriptor, nullable: bool) -> TypeDescriptor:
    if nullable and not descriptor.nullable and descriptor != BINARY:
        return descriptor.as_nullable()
    return descriptor
