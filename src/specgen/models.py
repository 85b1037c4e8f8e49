"""Canonical Pydantic models shared across all specgen modules.

This is the single source of truth for data shapes in the project. Every other
module imports from here rather than defining its own models. The models fall
into three groups:

**Configuration** -- serialised as JSON in ``specgen.json``:
    :class:`GeneratorConfig`.

**Input contract** -- produced by :mod:`specgen.parser.reader` from a raw
OpenAPI document and read (never modified) by the processor:
    :class:`HTTPMethod`, :class:`ParameterLocation`, :class:`ParameterSpec`,
    :class:`MediaSpec`, :class:`RequestBodySpec`, :class:`ResponseSpec`,
    :class:`ExternalDocs`, :class:`OperationSpec`, :class:`PathItemSpec`,
    :class:`APIInfo`, and :class:`ApiSpec`.

**Intermediate representation** -- built by :mod:`specgen.processor` and
grouped by :mod:`specgen.generator`:
    :class:`TypeDescriptor`, :class:`ModuleName`, :class:`Param`,
    :class:`Operation`, :class:`SchemaField`, :class:`Schema`, and
    :class:`FileUnit`.

Schema nodes are kept as raw dicts on purpose: a ``{"$ref": ...}`` node is
what gives a schema its identity, so nothing here inlines references.
"""

from __future__ import annotations

import enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


# --- Generator Config ---


class GeneratorConfig(BaseModel):
    """Options consumed by the IR pipeline.

    Loaded from ``specgen.json`` by :func:`~specgen.config.load_project_config`
    and layered with environment variables and CLI flags by
    :func:`~specgen.config.resolve_config`.

    Example::

        GeneratorConfig(
            base_module="GitHub",
            base_location="lib/github",
            operation_location="operations",
            schema_location="schemas",
        )
    """

    model_config = ConfigDict(extra="forbid")

    operation_use_tags: bool = Field(
        default=True, description="Home operations in one module per tag"
    )
    operation_default_module: str = Field(
        default="Operations",
        description="Module used when an operation id yields no module path",
    )
    operation_interfaces: bool = Field(
        default=False,
        description="Also plan a behaviour (interface) file per operation module",
    )
    interface_suffix: str = Field(
        default="Interface",
        description="Module segment appended to an operation module for its interface",
    )
    base_location: str = Field(default="lib", description="Root output directory")
    schema_location: str = Field(
        default="", description="Schema files directory, relative to base_location"
    )
    operation_location: str = Field(
        default="", description="Operation files directory, relative to base_location"
    )
    schema_use: Optional[str] = Field(
        default=None, description="Using directive injected into every schema file"
    )
    default_client: Optional[str] = Field(
        default=None, description="Client module injected into every operation file"
    )
    base_module: str = Field(
        default="", description="Prefix for every emitted module name"
    )
    ignore: list[str] = Field(
        default_factory=list,
        description="Operation ids, 'METHOD /path', /path prefixes, schema names or regexes to skip",
    )
    processor: Optional[str] = Field(
        default=None,
        description="Import string (module:Class) of a custom Processor policy",
    )

    @model_validator(mode="after")
    def _check_interface_key(self) -> "GeneratorConfig":
        # An empty suffix would give interface and concrete units the same key.
        if self.operation_interfaces and not self.interface_suffix.strip():
            raise ValueError(
                "operation_interfaces requires a non-empty interface_suffix; "
                "interface and concrete files cannot share a module"
            )
        return self


# --- Input Contract ---


class HTTPMethod(str, enum.Enum):
    """HTTP methods recognised by OpenAPI 3.x path-item objects.

    Declaration order is the processing order used by the pipeline.
    """

    GET = "get"
    PUT = "put"
    POST = "post"
    DELETE = "delete"
    OPTIONS = "options"
    HEAD = "head"
    PATCH = "patch"
    TRACE = "trace"


class ParameterLocation(str, enum.Enum):
    """Locations where an API parameter can appear, per OpenAPI ``in`` field."""

    QUERY = "query"
    HEADER = "header"
    PATH = "path"
    COOKIE = "cookie"


class ParameterSpec(BaseModel):
    """A single declared parameter, path-item level or operation level."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    location: ParameterLocation
    required: bool = False
    description: Optional[str] = None
    schema_: Optional[dict[str, Any]] = Field(default=None, alias="schema")
    schema_pointer: str = ""


class MediaSpec(BaseModel):
    """One content-type entry of a request body or response."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    content_type: str
    schema_: Optional[dict[str, Any]] = Field(default=None, alias="schema")
    schema_pointer: str = ""


class RequestBodySpec(BaseModel):
    """An operation's ``requestBody``, keyed by content type."""

    model_config = ConfigDict(frozen=True)

    required: bool = False
    description: Optional[str] = None
    content: dict[str, MediaSpec] = Field(default_factory=dict)


class ResponseSpec(BaseModel):
    """A response for one status code (or ``"default"``).

    ``content`` is ``None`` when the document declares no ``content`` key at
    all and an empty dict when it declares ``content: {}``. Both mean the
    response carries no body.
    """

    model_config = ConfigDict(frozen=True)

    status: str
    description: Optional[str] = None
    content: Optional[dict[str, MediaSpec]] = None


class ExternalDocs(BaseModel):
    """An OpenAPI *External Documentation Object*."""

    model_config = ConfigDict(frozen=True)

    url: str
    description: Optional[str] = None


class OperationSpec(BaseModel):
    """A single raw operation (one path + HTTP method pair).

    ``path_parameters`` holds the parameters declared on the enclosing path
    item; ``parameters`` holds the operation's own. They are merged by
    :func:`~specgen.processor.params.merge_parameters`.
    """

    model_config = ConfigDict(frozen=True)

    path: str
    method: HTTPMethod
    operation_id: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    parameters: list[ParameterSpec] = Field(default_factory=list)
    path_parameters: list[ParameterSpec] = Field(default_factory=list)
    request_body: Optional[RequestBodySpec] = None
    responses: dict[str, ResponseSpec] = Field(default_factory=dict)
    summary: Optional[str] = None
    description: Optional[str] = None
    external_docs: Optional[ExternalDocs] = None
    deprecated: bool = False


class PathItemSpec(BaseModel):
    """All operations declared under one path template."""

    model_config = ConfigDict(frozen=True)

    path: str
    parameters: list[ParameterSpec] = Field(default_factory=list)
    operations: dict[HTTPMethod, OperationSpec] = Field(default_factory=dict)


class APIInfo(BaseModel):
    """API metadata extracted from the document's *Info Object*."""

    title: str
    version: str
    description: Optional[str] = None


class ApiSpec(BaseModel):
    """Typed view of an OpenAPI document, as consumed by the pipeline.

    ``raw`` is the unresolved document. The schema collector and type
    encoder follow ``$ref`` pointers against it on demand.
    """

    info: APIInfo
    openapi_version: str
    paths: dict[str, PathItemSpec] = Field(default_factory=dict)
    raw: dict[str, Any] = Field(default_factory=dict)


# --- Intermediate Representation ---


class TypeDescriptor(BaseModel):
    """Opaque description of a target-language type.

    Produced by a :class:`~specgen.processor.type_encoder.TypeEncoder`. The
    pipeline only compares descriptors and carries them along; rendering
    them is the renderer's job.

    ``kind`` is one of ``primitive``, ``schema``, ``array``, ``map``,
    ``union``, ``any`` or ``binary``.
    """

    model_config = ConfigDict(frozen=True)

    kind: str
    name: Optional[str] = None
    format: Optional[str] = None
    items: Optional[TypeDescriptor] = None
    members: tuple[TypeDescriptor, ...] = ()
    nullable: bool = False

    @classmethod
    def primitive(cls, name: str, format: Optional[str] = None) -> TypeDescriptor:
        return cls(kind="primitive", name=name, format=format)

    @classmethod
    def schema_ref(cls, final_name: str) -> TypeDescriptor:
        return cls(kind="schema", name=final_name)

    @classmethod
    def array_of(cls, items: TypeDescriptor) -> TypeDescriptor:
        return cls(kind="array", items=items)

    @classmethod
    def map_of(cls, values: TypeDescriptor) -> TypeDescriptor:
        return cls(kind="map", items=values)

    @classmethod
    def union_of(cls, members: list[TypeDescriptor]) -> TypeDescriptor:
        return cls(kind="union", members=tuple(members))

    @classmethod
    def any(cls) -> TypeDescriptor:
        return cls(kind="any")

    def as_nullable(self) -> TypeDescriptor:
        return self.model_copy(update={"nullable": True})

    def __str__(self) -> str:
        if self.kind == "primitive":
            text = f"{self.name}:{self.format}" if self.format else str(self.name)
        elif self.kind == "schema":
            text = str(self.name)
        elif self.kind == "array":
            text = f"[{self.items}]"
        elif self.kind == "map":
            text = f"map[{self.items}]"
        elif self.kind == "union":
            text = " | ".join(str(m) for m in self.members)
        else:
            text = self.kind
        return f"{text}?" if self.nullable else text


BINARY = TypeDescriptor(kind="binary")
"""Response type used for content that is not JSON (files, text, streams)."""


class ModuleName(BaseModel):
    """Identity of a generated module.

    An ordered tuple of type-cased segments plus a ``qualified`` flag that
    records whether the configured ``base_module`` prefix has been applied.
    Instances are hashable and key the file-unit maps. They only become
    strings at the render boundary (:attr:`dotted`, or a file stem built by
    :func:`~specgen.generator.files.file_stem`).
    """

    model_config = ConfigDict(frozen=True)

    segments: tuple[str, ...]
    qualified: bool = False

    @classmethod
    def parse(cls, dotted: str) -> ModuleName:
        """Build a module name from a ``"A.B.C"`` string (empty parts dropped)."""
        return cls(segments=tuple(s for s in dotted.split(".") if s))

    def qualify(self, base_module: str) -> ModuleName:
        """Prefix *base_module* once. Already-qualified names are returned unchanged."""
        if self.qualified:
            return self
        prefix = tuple(s for s in base_module.split(".") if s)
        return ModuleName(segments=prefix + self.segments, qualified=True)

    def child(self, segment: str) -> ModuleName:
        return ModuleName(segments=self.segments + (segment,), qualified=self.qualified)

    @property
    def dotted(self) -> str:
        return ".".join(self.segments)

    def __str__(self) -> str:
        return self.dotted


class Param(BaseModel):
    """A classified path or query parameter with its resolved type."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    location: ParameterLocation
    description: Optional[str] = None
    schema_: Optional[dict[str, Any]] = Field(default=None, alias="schema")
    type: TypeDescriptor


class Operation(BaseModel):
    """One client function: an operation homed at one module.

    An operation spec with N tags (tag mode) yields N of these, identical
    except for :attr:`module` and :attr:`function_name`.
    """

    module: ModuleName
    function_name: str
    method: HTTPMethod
    path: str
    path_params: list[Param] = Field(default_factory=list)
    query_params: list[Param] = Field(default_factory=list)
    request_body: list[tuple[str, TypeDescriptor]] = Field(default_factory=list)
    responses: dict[str, Optional[TypeDescriptor]] = Field(default_factory=dict)
    docstring: str = ""
    summary: Optional[str] = None
    description: Optional[str] = None
    external_docs: Optional[ExternalDocs] = None
    deprecated: bool = False
    operation_id: Optional[str] = None


class SchemaField(BaseModel):
    """A property of a schema, in declaration order."""

    name: str
    type: TypeDescriptor
    required: bool = False


class Schema(BaseModel):
    """A deduplicated schema under its canonical final name.

    ``identities`` lists every ``$ref`` string or inline JSON pointer that
    resolved to this name, in discovery order. The first one supplied the
    raw node in ``schema_``.
    """

    model_config = ConfigDict(populate_by_name=True)

    final_name: str
    identities: list[str] = Field(default_factory=list)
    schema_: Optional[dict[str, Any]] = Field(default=None, alias="schema")
    type: Optional[TypeDescriptor] = None
    fields: list[SchemaField] = Field(default_factory=list)
    using: list[str] = Field(default_factory=list)


class FileUnit(BaseModel):
    """One prospective generated source file.

    ``name`` is the output path without an extension; the renderer picks
    the extension. ``is_behaviour`` marks interface stubs.
    """

    name: str
    module: ModuleName
    operations: list[Operation] = Field(default_factory=list)
    schemas: list[Schema] = Field(default_factory=list)
    using: list[str] = Field(default_factory=list)
    is_behaviour: bool = False


TypeDescriptor.model_rebuild()
