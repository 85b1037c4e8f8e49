"""Discover, name, and deduplicate the schemas reachable from operations.

The processor is operation-first: a schema only matters once a request body
or response refers to it. :func:`discover_schemas` walks every included
operation and follows schema references transitively, and
:func:`process_schemas` then derives each collected schema's type and
fields.

**Identity.** A schema is identified by where it lives, not by what it
looks like: a ``$ref`` string for references, the JSON pointer of the node
for inline schemas. Two structurally identical schemas at different
locations are different schemas.

**Naming.** Component schemas are named after their key under
``#/components/schemas``; inline objects are named by
:meth:`~specgen.processor.base.Processor.schema_name` (their ``title`` by
default). The canonical final name is the type-cased normalised name.

**Deduplication.** The first identity discovered under a final name creates
the :class:`~specgen.models.Schema`; later identities under the same final
name are merged into it. Traversal order is fixed (paths, then methods,
then request bodies by content type, then responses and their content in
declaration order, then properties in declaration order), so the same
document always produces the same names.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import TYPE_CHECKING, Any, Iterator, Optional

from specgen.models import HTTPMethod, OperationSpec, Schema, SchemaField, TypeDescriptor
from specgen.parser.pointer import join_pointer, resolve_pointer, unescape_segment
from specgen.processor.naming import type_case

if TYPE_CHECKING:
    from specgen.processor.state import PipelineState

logger = logging.getLogger(__name__)

_COMPONENT_PREFIX = "#/components/schemas/"
_COMPOSITION_KEYWORDS = ("allOf", "anyOf", "oneOf")


def iter_operations(state: "PipelineState") -> Iterator[tuple[str, HTTPMethod, OperationSpec]]:
    """Yield ``(path, method, operation)`` for every included operation.

    Paths in document order, methods in :class:`~specgen.models.HTTPMethod`
    order.
    """
    for path, item in state.spec.paths.items():
        for method in HTTPMethod:
            operation = item.operations.get(method)
            if operation is None:
                continue
            if not state.processor.include_operation(state, operation):
                logger.debug("Ignoring %s %s", method.value.upper(), path)
                continue
            yield path, method, operation


def operation_schema_roots(operation: OperationSpec) -> list[tuple[Optional[dict[str, Any]], str]]:
    """Schema nodes referenced directly by *operation*, in traversal order."""
    roots: list[tuple[Optional[dict[str, Any]], str]] = []
    if operation.request_body is not None:
        for content_type in sorted(operation.request_body.content):
            media = operation.request_body.content[content_type]
            roots.append((media.schema_, media.schema_pointer))
    for response in operation.responses.values():
        for media in (response.content or {}).values():
            roots.append((media.schema_, media.schema_pointer))
    return roots


class _Collector:
    """Accumulates schemas during one discovery pass."""

    def __init__(self, state: "PipelineState") -> None:
        self.state = state
        self.schemas: dict[str, Schema] = dict(state.schemas)
        self.names: dict[str, str] = dict(state.schema_names)
        self.visited: set[str] = set(state.schema_names)

    def walk(self, node: Any, pointer: str) -> None:
        if not isinstance(node, dict):
            return

        if "$ref" in node:
            ref = node["$ref"]
            if ref in self.visited:
                return
            self.visited.add(ref)
            target = resolve_pointer(ref, self.state.spec.raw)
            if not isinstance(target, dict):
                return
            if ref.startswith(_COMPONENT_PREFIX):
                declared: Optional[str] = unescape_segment(ref[len(_COMPONENT_PREFIX):])
            else:
                declared = self.state.processor.schema_name(self.state, target, ref)
            if self.register(ref, declared, target):
                self.walk_children(target, ref)
            return

        if pointer:
            if pointer in self.visited:
                return
            self.visited.add(pointer)
        declared = self.state.processor.schema_name(self.state, node, pointer)
        if self.register(pointer, declared, node):
            self.walk_children(node, pointer)

    def walk_children(self, node: dict[str, Any], pointer: str) -> None:
        # An alias component: keep walking the chain it points to.
        if "$ref" in node:
            self.walk(node, pointer)
            return
        properties = node.get("properties")
        if isinstance(properties, dict):
            for name, child in properties.items():
                self.walk(child, join_pointer(pointer, "properties", name))
        if "items" in node:
            self.walk(node["items"], join_pointer(pointer, "items"))
        if isinstance(node.get("additionalProperties"), dict):
            self.walk(node["additionalProperties"], join_pointer(pointer, "additionalProperties"))
        for keyword in _COMPOSITION_KEYWORDS:
            members = node.get(keyword)
            if isinstance(members, list):
                for i, member in enumerate(members):
                    self.walk(member, join_pointer(pointer, keyword, i))
        if "not" in node:
            self.walk(node["not"], join_pointer(pointer, "not"))

    def register(self, identity: str, declared: Optional[str], node: dict[str, Any]) -> bool:
        """Record *identity* under its final name. Returns whether to descend."""
        if not declared or not identity:
            return True
        final_name = type_case(declared)
        if not final_name:
            return True

        existing = self.schemas.get(final_name)
        candidate = Schema(final_name=final_name, identities=[identity], schema=node)
        if not self.state.processor.include_schema(self.state, candidate):
            logger.debug("Schema '%s' (%s) excluded by processor", final_name, identity)
            return False

        using = list(dict.fromkeys(self.state.processor.schema_using(self.state, candidate)))
        if existing is None:
            self.schemas[final_name] = candidate.model_copy(update={"using": using})
        elif identity not in existing.identities:
            logger.debug("Merging %s into schema '%s'", identity, final_name)
            self.schemas[final_name] = existing.model_copy(
                update={
                    "identities": [*existing.identities, identity],
                    "using": list(dict.fromkeys([*existing.using, *using])),
                }
            )
        self.names[identity] = final_name
        return True


def discover_schemas(state: "PipelineState") -> "PipelineState":
    """Collect every schema reachable from the included operations.

    Args:
        state: Pipeline state holding the typed document and the policy.

    Returns:
        A new state whose ``schemas`` and ``schema_names`` include every
        named schema found, keyed and ordered by first discovery.

    Raises:
        SpecParseError: If a ``$ref`` points outside the document.
    """
    collector = _Collector(state)
    for _path, _method, operation in iter_operations(state):
        for node, pointer in operation_schema_roots(operation):
            collector.walk(node, pointer)

    logger.debug(
        "Discovered %d schemas (%d identities)", len(collector.schemas), len(collector.names)
    )
    return replace(state, schemas=collector.schemas, schema_names=collector.names)


def process_schemas(state: "PipelineState") -> "PipelineState":
    """Fill in each collected schema's type descriptor and fields.

    Must run after :func:`discover_schemas`, so that property types can
    refer to other collected schemas by final name.
    """
    processed: dict[str, Schema] = {}
    for final_name, schema in state.schemas.items():
        pointer = schema.identities[0] if schema.identities else ""
        fields = [
            SchemaField(
                name=name,
                type=state.typing.schema_to_type(state, node, node_pointer),
                required=required,
            )
            for name, node, node_pointer, required in _properties(state, schema.schema_, pointer)
        ]
        processed[final_name] = schema.model_copy(
            update={"type": TypeDescriptor.schema_ref(final_name), "fields": fields}
        )
    return replace(state, schemas=processed)


def _properties(
    state: "PipelineState",
    node: Optional[dict[str, Any]],
    pointer: str,
    seen: frozenset[str] = frozenset(),
) -> list[tuple[str, Any, str, bool]]:
    """Flatten the properties of *node*, including those contributed by ``allOf``.

    A property declared twice keeps its first position and its last
    definition.
    """
    if not isinstance(node, dict):
        return []

    if "$ref" in node:
        ref = node["$ref"]
        if ref in seen:
            return []
        return _properties(state, resolve_pointer(ref, state.spec.raw), ref, seen | {ref})

    collected: dict[str, tuple[str, Any, str, bool]] = {}
    for i, member in enumerate(node.get("allOf") or []):
        member_pointer = join_pointer(pointer, "allOf", i)
        if isinstance(member, dict) and "$ref" in member:
            member_pointer = member["$ref"]
            if member_pointer in seen:
                continue
            member = resolve_pointer(member_pointer, state.spec.raw)
        for entry in _properties(state, member, member_pointer, seen | {member_pointer}):
            collected[entry[0]] = entry

    required = set(node.get("required") or [])
    properties = node.get("properties")
    if isinstance(properties, dict):
        for name, child in properties.items():
            collected[name] = (
                name,
                child,
                join_pointer(pointer, "properties", name),
                name in required,
            )
    return list(collected.values())
