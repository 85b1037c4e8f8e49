"""Tests for specgen.parser.pointer -- JSON pointer resolution."""

from __future__ import annotations

from typing import Any

import pytest

from specgen.exceptions import SpecParseError
from specgen.parser.pointer import (
    escape_segment,
    follow_refs,
    join_pointer,
    resolve_pointer,
    unescape_segment,
)

_DOC: dict[str, Any] = {
    "components": {
        "schemas": {
            "Pet": {"type": "object"},
            "a/b": {"type": "string"},
            "c~d": {"type": "integer"},
        },
        "parameters": {
            "Alias": {"$ref": "#/components/parameters/Limit"},
            "Limit": {"name": "limit", "in": "query"},
            "LoopA": {"$ref": "#/components/parameters/LoopB"},
            "LoopB": {"$ref": "#/components/parameters/LoopA"},
        },
    },
    "tags": [{"name": "first"}, {"name": "second"}],
}


class TestResolvePointer:
    def test_simple(self) -> None:
        assert resolve_pointer("#/components/schemas/Pet", _DOC) == {"type": "object"}

    def test_root(self) -> None:
        assert resolve_pointer("#", _DOC) is _DOC

    def test_escaped_slash(self) -> None:
        assert resolve_pointer("#/components/schemas/a~1b", _DOC) == {"type": "string"}

    def test_escaped_tilde(self) -> None:
        assert resolve_pointer("#/components/schemas/c~0d", _DOC) == {"type": "integer"}

    def test_array_index(self) -> None:
        assert resolve_pointer("#/tags/1/name", _DOC) == "second"

    def test_missing_key(self) -> None:
        with pytest.raises(SpecParseError, match="key 'Dog' not found"):
            resolve_pointer("#/components/schemas/Dog", _DOC)

    def test_bad_array_index(self) -> None:
        with pytest.raises(SpecParseError, match="invalid array index"):
            resolve_pointer("#/tags/7", _DOC)

    def test_external_ref_rejected(self) -> None:
        with pytest.raises(SpecParseError, match="External \\$ref not supported"):
            resolve_pointer("other.yaml#/components/schemas/Pet", _DOC)


class TestFollowRefs:
    def test_concrete_node_unchanged(self) -> None:
        node = {"name": "q"}
        assert follow_refs(node, _DOC, "#/x") == (node, "#/x")

    def test_chain_followed(self) -> None:
        node, pointer = follow_refs({"$ref": "#/components/parameters/Alias"}, _DOC)
        assert node == {"name": "limit", "in": "query"}
        assert pointer == "#/components/parameters/Limit"

    def test_cycle_detected(self) -> None:
        with pytest.raises(SpecParseError, match="Circular"):
            follow_refs({"$ref": "#/components/parameters/LoopA"}, _DOC)


class TestPointerBuilding:
    def test_join_escapes_segments(self) -> None:
        assert join_pointer("#/paths", "/pets/{id}", "get") == "#/paths/~1pets~1{id}/get"

    def test_join_on_empty_base(self) -> None:
        assert join_pointer("", "components") == "#/components"

    def test_join_integer_segment(self) -> None:
        assert join_pointer("#/x", "parameters", 0) == "#/x/parameters/0"

    @pytest.mark.parametrize("segment", ["plain", "a/b", "c~d", "~1", "application/json"])
    def test_escape_reversible(self, segment: str) -> None:
        assert unescape_segment(escape_segment(segment)) == segment

    def test_joined_pointer_resolves(self) -> None:
        pointer = join_pointer("#/components/schemas", "a/b")
        assert resolve_pointer(pointer, _DOC) == {"type": "string"}
