"""Pluggable naming and inclusion policy for the processor.

:class:`Processor` bundles every decision a generator may want to override:
which operations and schemas to include, what to call things, how to build
docstrings, which request bodies and methods to use. All methods have
default implementations, so a custom policy subclasses :class:`Processor`
and overrides only what it needs::

    class GitHubProcessor(Processor):
        def operation_function_name(self, state, operation, module, function):
            return function.removeprefix("get_")

An instance is injected into :func:`~specgen.generator.pipeline.new_state`
directly, or named in configuration as an import string (``"pkg.mod:Class"``)
and loaded with :func:`~specgen.config.load_processor`.
"""

from __future__ import annotations

import functools
import logging
import re
from typing import TYPE_CHECKING, Any, Optional

from specgen.models import HTTPMethod, MediaSpec, OperationSpec, Param, Schema
from specgen.processor import naming

if TYPE_CHECKING:
    from specgen.processor.state import PipelineState

logger = logging.getLogger(__name__)


class Processor:
    """Default policy. Subclass and override individual methods to customise."""

    # ------------------------------------------------------------------
    # Inclusion
    # ------------------------------------------------------------------

    def include_operation(self, state: "PipelineState", operation: OperationSpec) -> bool:
        """Whether to generate a client function for *operation*.

        The default excludes operations matched by a ``config.ignore`` entry:
        an operation id, a ``"METHOD /path"`` string, a ``/path`` prefix, or a
        regular expression matching either of the first two.
        """
        candidates = [f"{operation.method.value.upper()} {operation.path}"]
        if operation.operation_id:
            candidates.append(operation.operation_id)

        for entry in state.config.ignore:
            if entry.startswith("/") and _path_has_prefix(operation.path, entry):
                return False
            if any(_matches(entry, candidate) for candidate in candidates):
                return False
        return True

    def include_schema(self, state: "PipelineState", schema: Schema) -> bool:
        """Whether to collect *schema* as a named type.

        Excluded schemas are typed structurally (usually as a map) wherever
        they are referenced. The default excludes schemas whose final name
        or identity matches a ``config.ignore`` entry.
        """
        candidates = [schema.final_name, *schema.identities]
        return not any(
            _matches(entry, candidate)
            for entry in state.config.ignore
            for candidate in candidates
        )

    def schema_using(self, state: "PipelineState", schema: Schema) -> list[str]:
        """Extra using-directives needed by the file that defines *schema*.

        Called once per identity; the lists of identities merged under one
        final name are unioned in discovery order. The default needs none.
        """
        return []

    # ------------------------------------------------------------------
    # Naming
    # ------------------------------------------------------------------

    def schema_name(
        self, state: "PipelineState", schema: dict[str, Any], pointer: str
    ) -> Optional[str]:
        """Declared name for a schema that is not a component schema.

        Returning ``None`` leaves the schema anonymous. The default names
        inline objects after their ``title``.
        """
        is_object = schema.get("type") == "object" or "properties" in schema
        title = schema.get("title")
        if is_object and isinstance(title, str) and title.strip():
            return title
        return None

    def operation_names(
        self, state: "PipelineState", operation: OperationSpec
    ) -> list[tuple[list[str], str]]:
        """Module path and function name for each homing target of *operation*.

        See :func:`~specgen.processor.naming.operation_names`. Operations
        without an ``operationId``, or whose id leaves no function name
        (``"widgets/"``, ``"//"``), are named after their method and path.
        """
        fallback = naming.fallback_operation_id(operation.method.value, operation.path)
        names = naming.operation_names(operation.operation_id or fallback, list(operation.tags))
        if any(not function for _modules, function in names):
            logger.warning(
                "operationId %r of %s %s yields no function name; using %r",
                operation.operation_id,
                operation.method.value.upper(),
                operation.path,
                fallback,
            )
            names = naming.operation_names(fallback, list(operation.tags))
        return names

    def operation_function_name(
        self,
        state: "PipelineState",
        operation: OperationSpec,
        module: list[str],
        function: str,
    ) -> str:
        """Final function name for one homing target. Must be unique within *module*."""
        return function

    def operation_docstring(
        self, state: "PipelineState", operation: OperationSpec, query_params: list[Param]
    ) -> str:
        """Build the docstring for the generated client function.

        Summary, description, one ``## Options`` entry per query parameter
        and a ``## Resources`` link to external documentation.
        """
        sections: list[str] = []
        if operation.summary:
            sections.append(operation.summary.strip())
        if operation.description and operation.description != operation.summary:
            sections.append(operation.description.strip())

        if query_params:
            lines = ["## Options", ""]
            for param in query_params:
                if param.description:
                    lines.append(f"  * `{param.name}`: {param.description.strip()}")
                else:
                    lines.append(f"  * `{param.name}`")
            sections.append("\n".join(lines))

        if operation.external_docs:
            docs = operation.external_docs
            label = docs.description or "API method documentation"
            sections.append(f"## Resources\n\n  * [{label}]({docs.url})")

        return "\n\n".join(sections)

    # ------------------------------------------------------------------
    # Request shape
    # ------------------------------------------------------------------

    def operation_request_body(
        self, state: "PipelineState", operation: OperationSpec
    ) -> list[MediaSpec]:
        """Content types (with schemas) accepted as the request body."""
        if operation.request_body is None:
            return []
        return list(operation.request_body.content.values())

    def operation_request_method(
        self, state: "PipelineState", operation: OperationSpec
    ) -> HTTPMethod:
        """HTTP method of the generated request."""
        return operation.method


def _path_has_prefix(path: str, prefix: str) -> bool:
    prefix = prefix.rstrip("/")
    return path == prefix or path.startswith(prefix + "/") or not prefix


@functools.lru_cache(maxsize=256)
def _compile(entry: str) -> Optional[re.Pattern[str]]:
    try:
        return re.compile(entry)
    except re.error:
        return None


def _matches(entry: str, candidate: str) -> bool:
    """Exact match, or full regular-expression match when *entry* compiles."""
    if entry == candidate:
        return True
    pattern = _compile(entry)
    return pattern is not None and pattern.fullmatch(candidate) is not None
