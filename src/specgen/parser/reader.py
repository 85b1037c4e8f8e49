"""Read a raw OpenAPI document into the typed input contract.

:func:`read_spec` walks the ``paths`` object and builds an
:class:`~specgen.models.ApiSpec` of :class:`~specgen.models.PathItemSpec`
and :class:`~specgen.models.OperationSpec` records.

Unlike a full ``$ref`` resolver, this reader leaves **schema** references
in place: ``{"$ref": "#/components/schemas/Pet"}`` is what tells the
processor that two operations share one schema. References to parameters,
request bodies and responses carry no such identity and are followed
here. Every schema node is stored together with its JSON pointer, which is
the identity of inline schemas.

Path-item parameters are kept separate from operation parameters; they are
merged by :func:`~specgen.processor.params.merge_parameters`.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from specgen.models import (
    APIInfo,
    ApiSpec,
    ExternalDocs,
    HTTPMethod,
    MediaSpec,
    OperationSpec,
    ParameterLocation,
    ParameterSpec,
    PathItemSpec,
    RequestBodySpec,
    ResponseSpec,
)
from specgen.parser.pointer import follow_refs, join_pointer

logger = logging.getLogger(__name__)


def read_spec(raw: dict[str, Any], openapi_version: str) -> ApiSpec:
    """Build an :class:`~specgen.models.ApiSpec` from a raw document.

    Args:
        raw: The document as returned by :func:`~specgen.parser.loader.load_spec`.
        openapi_version: The version returned by
            :func:`~specgen.parser.loader.validate_openapi_version`.

    Returns:
        The typed document. ``raw`` is kept on it for pointer resolution.

    Raises:
        SpecParseError: If a parameter, request body or response ``$ref``
            cannot be followed.

    Example::

        raw = load_spec("petstore.yaml")
        spec = read_spec(raw, validate_openapi_version(raw))
        for path, item in spec.paths.items():
            print(path, [m.value for m in item.operations])
    """
    info = raw.get("info") or {}
    paths: dict[str, PathItemSpec] = {}

    for path, item in (raw.get("paths") or {}).items():
        item, item_pointer = follow_refs(item, raw, join_pointer("#/paths", path))
        if not isinstance(item, dict):
            continue
        paths[path] = _read_path_item(raw, path, item, item_pointer)

    return ApiSpec(
        info=APIInfo(
            title=info.get("title", "Untitled API"),
            version=str(info.get("version", "0.0.0")),
            description=info.get("description"),
        ),
        openapi_version=openapi_version,
        paths=paths,
        raw=raw,
    )


def _read_path_item(
    raw: dict[str, Any], path: str, item: dict[str, Any], pointer: str
) -> PathItemSpec:
    path_parameters = _read_parameters(
        raw, item.get("parameters") or [], join_pointer(pointer, "parameters")
    )

    operations: dict[HTTPMethod, OperationSpec] = {}
    for method in HTTPMethod:
        operation = item.get(method.value)
        if not isinstance(operation, dict):
            continue
        op_pointer = join_pointer(pointer, method.value)
        operations[method] = OperationSpec(
            path=path,
            method=method,
            operation_id=operation.get("operationId"),
            tags=[str(tag) for tag in operation.get("tags") or []],
            parameters=_read_parameters(
                raw, operation.get("parameters") or [], join_pointer(op_pointer, "parameters")
            ),
            path_parameters=path_parameters,
            request_body=_read_request_body(
                raw, operation.get("requestBody"), join_pointer(op_pointer, "requestBody")
            ),
            responses=_read_responses(
                raw, operation.get("responses") or {}, join_pointer(op_pointer, "responses")
            ),
            summary=operation.get("summary"),
            description=operation.get("description"),
            external_docs=_read_external_docs(operation.get("externalDocs")),
            deprecated=bool(operation.get("deprecated", False)),
        )

    return PathItemSpec(path=path, parameters=path_parameters, operations=operations)


def _read_parameters(
    raw: dict[str, Any], params: list[Any], pointer: str
) -> list[ParameterSpec]:
    """Read a ``parameters`` array. Entries with unknown locations are skipped."""
    result: list[ParameterSpec] = []
    for index, param in enumerate(params):
        param, param_pointer = follow_refs(param, raw, join_pointer(pointer, index))
        if not isinstance(param, dict) or "name" not in param:
            continue
        try:
            location = ParameterLocation(param.get("in", "query"))
        except ValueError:
            logger.debug("Skipping parameter %r with location %r", param.get("name"), param.get("in"))
            continue

        schema = param.get("schema")
        schema_pointer = join_pointer(param_pointer, "schema")
        if schema is None and isinstance(param.get("content"), dict) and param["content"]:
            # Content-encoded parameter: use the first media type's schema.
            content_type, media = next(iter(param["content"].items()))
            schema = media.get("schema") if isinstance(media, dict) else None
            schema_pointer = join_pointer(param_pointer, "content", content_type, "schema")

        result.append(
            ParameterSpec(
                name=str(param["name"]),
                location=location,
                required=location == ParameterLocation.PATH or bool(param.get("required", False)),
                description=param.get("description"),
                schema=schema if isinstance(schema, dict) else None,
                schema_pointer=schema_pointer,
            )
        )
    return result


def _read_content(content: Any, pointer: str) -> dict[str, MediaSpec]:
    if not isinstance(content, dict):
        return {}
    media: dict[str, MediaSpec] = {}
    for content_type, entry in content.items():
        schema = entry.get("schema") if isinstance(entry, dict) else None
        media[content_type] = MediaSpec(
            content_type=content_type,
            schema=schema if isinstance(schema, dict) else None,
            schema_pointer=join_pointer(pointer, content_type, "schema"),
        )
    return media


def _read_request_body(
    raw: dict[str, Any], body: Any, pointer: str
) -> Optional[RequestBodySpec]:
    if body is None:
        return None
    body, pointer = follow_refs(body, raw, pointer)
    if not isinstance(body, dict):
        return None
    return RequestBodySpec(
        required=bool(body.get("required", False)),
        description=body.get("description"),
        content=_read_content(body.get("content"), join_pointer(pointer, "content")),
    )


def _read_responses(
    raw: dict[str, Any], responses: dict[str, Any], pointer: str
) -> dict[str, ResponseSpec]:
    result: dict[str, ResponseSpec] = {}
    for status, response in responses.items():
        status = str(status)
        response, response_pointer = follow_refs(response, raw, join_pointer(pointer, status))
        if not isinstance(response, dict):
            continue
        content = response.get("content")
        result[status] = ResponseSpec(
            status=status,
            description=response.get("description"),
            content=(
                None
                if content is None
                else _read_content(content, join_pointer(response_pointer, "content"))
            ),
        )
    return result


def _read_external_docs(docs: Any) -> Optional[ExternalDocs]:
    if not isinstance(docs, dict) or not docs.get("url"):
        return None
    return ExternalDocs(url=docs["url"], description=docs.get("description"))
