"""Build Operation IR records from raw operation specs.

:func:`build_operations` turns one :class:`~specgen.models.OperationSpec`
into one :class:`~specgen.models.Operation` per homing target. The steps
are independent and individually testable:

1. :func:`request_body` -- encode every request content type and sort by
   content type, so rendering order never depends on map order.
2. :func:`responses` -- ``None`` for responses without content, the
   encoded schema for ``application/json`` content,
   :data:`~specgen.models.BINARY` for anything else.
3. :func:`~specgen.processor.params.classify_parameters` -- path
   parameters in template order and query parameters in declaration order.
4. Naming through the injected :class:`~specgen.processor.base.Processor`.
5. Assembly: every homing target shares the results of steps 1-3.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import TYPE_CHECKING, Optional

from specgen.models import (
    BINARY,
    HTTPMethod,
    ModuleName,
    Operation,
    OperationSpec,
    ResponseSpec,
    TypeDescriptor,
)
from specgen.processor.params import classify_parameters, merge_parameters
from specgen.processor.schemas import iter_operations

if TYPE_CHECKING:
    from specgen.processor.state import PipelineState

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"


def request_body(
    state: "PipelineState", operation: OperationSpec
) -> list[tuple[str, TypeDescriptor]]:
    """Resolve the request body into ``(content_type, type)`` pairs sorted by content type."""
    media = state.processor.operation_request_body(state, operation)
    body = [
        (m.content_type, state.typing.schema_to_type(state, m.schema_, m.schema_pointer))
        for m in media
    ]
    return sorted(body, key=lambda entry: entry[0])


def response_type(state: "PipelineState", response: ResponseSpec) -> Optional[TypeDescriptor]:
    """Resolve a single response.

    * No content (absent or empty) -> ``None``.
    * An ``application/json`` key -> its encoded schema, even when other
      content types sit next to it.
    * Anything else, JSON-flavoured types such as ``application/problem+json``
      included -> :data:`~specgen.models.BINARY`.
    """
    content = response.content
    if not content:
        return None

    media = content.get(JSON_CONTENT_TYPE)
    if media is None:
        return BINARY
    return state.typing.schema_to_type(state, media.schema_, media.schema_pointer)


def responses(
    state: "PipelineState", operation: OperationSpec
) -> dict[str, Optional[TypeDescriptor]]:
    """Resolve every response of *operation*, keyed by status code, in declaration order."""
    return {
        status: response_type(state, response)
        for status, response in operation.responses.items()
    }


def module_name(state: "PipelineState", modules: list[str]) -> ModuleName:
    """Module identity for a computed module path, falling back to the default module."""
    if not modules:
        return ModuleName.parse(state.config.operation_default_module)
    return ModuleName(segments=tuple(modules))


def build_operations(
    state: "PipelineState", path: str, method: HTTPMethod, operation: OperationSpec
) -> list[Operation]:
    """Build the Operation IR records for one raw operation.

    Args:
        state: Pipeline state; schemas must already be discovered.
        path: The path template the operation lives under.
        method: The path-item key the operation was found under.
        operation: The raw operation.

    Returns:
        One record per homing target: one per tag when
        ``config.operation_use_tags`` is on and the operation has tags,
        otherwise exactly one.

    Raises:
        ParameterLookupError: If a path placeholder has no declared parameter.
    """
    processor = state.processor

    body = request_body(state, operation)
    resolved_responses = responses(state, operation)
    path_params, query_params = classify_parameters(
        state,
        path,
        merge_parameters(operation.path_parameters, operation.parameters),
        operation.operation_id,
    )

    if not state.config.operation_use_tags and operation.tags:
        operation = operation.model_copy(update={"tags": []})

    docstring = processor.operation_docstring(state, operation, query_params)
    request_method = processor.operation_request_method(state, operation)

    built: list[Operation] = []
    for modules, function in processor.operation_names(state, operation):
        built.append(
            Operation(
                module=module_name(state, modules),
                function_name=processor.operation_function_name(
                    state, operation, modules, function
                ),
                method=request_method,
                path=path,
                path_params=path_params,
                query_params=query_params,
                request_body=body,
                responses=resolved_responses,
                docstring=docstring,
                summary=operation.summary,
                description=operation.description,
                external_docs=operation.external_docs,
                deprecated=operation.deprecated,
                operation_id=operation.operation_id,
            )
        )
    return built


def process_operation(
    state: "PipelineState", path: str, method: HTTPMethod, operation: OperationSpec
) -> "PipelineState":
    """Append the records for one operation to ``state.operations``."""
    built = build_operations(state, path, method, operation)
    return replace(state, operations=state.operations + tuple(built))


def process_operations(state: "PipelineState") -> "PipelineState":
    """Process every included operation, in path order then method order."""
    for path, method, operation in iter_operations(state):
        state = process_operation(state, path, method, operation)
    logger.debug("Built %d operation records", len(state.operations))
    return state
