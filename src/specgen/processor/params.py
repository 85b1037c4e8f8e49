"""Split an operation's parameters into path-bound and query-bound lists.

Path parameters are ordered by the placeholders of the literal path
template, never by declaration order: ``/users/{user_id}/posts/{post_id}``
always yields ``[user_id, post_id]``, which is the argument order of the
generated function. A parameter declared ``in: path`` that the template
does not mention is not a path parameter.

Query parameters keep their declaration order. Header and cookie
parameters are not part of the IR.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Optional

from specgen.exceptions import ParameterLookupError
from specgen.models import Param, ParameterLocation, ParameterSpec

if TYPE_CHECKING:
    from specgen.processor.state import PipelineState

logger = logging.getLogger(__name__)

_PLACEHOLDER_RE = re.compile(r"\{([^{}]+)\}")


def merge_parameters(
    path_params: list[ParameterSpec],
    op_params: list[ParameterSpec],
) -> list[ParameterSpec]:
    """Merge path-item-level and operation-level parameters.

    Operation-level parameters override path-level parameters with the same
    name and location, per the OpenAPI specification. Surviving path-level
    parameters come first, followed by all operation-level parameters.

    Args:
        path_params: Parameters declared on the path item.
        op_params: Parameters declared on the operation.

    Returns:
        The merged parameter list.
    """
    overridden = {(p.name, p.location) for p in op_params}
    merged = [p for p in path_params if (p.name, p.location) not in overridden]
    merged.extend(op_params)
    return merged


def path_placeholders(path: str) -> list[str]:
    """Return the ``{name}`` placeholders of *path* in appearance order.

    Example::

        >>> path_placeholders("/users/{user_id}/posts/{post_id}")
        ['user_id', 'post_id']
    """
    return _PLACEHOLDER_RE.findall(path)


def classify_parameters(
    state: "PipelineState",
    path: str,
    parameters: list[ParameterSpec],
    operation_id: Optional[str] = None,
) -> tuple[list[Param], list[Param]]:
    """Classify *parameters* against the path template *path*.

    Args:
        state: Current pipeline state, used for type encoding.
        path: The literal path template.
        parameters: Merged parameters (see :func:`merge_parameters`).
        operation_id: Only used to make error messages precise.

    Returns:
        A ``(path_params, query_params)`` tuple.

    Raises:
        ParameterLookupError: If a placeholder has no declared parameter.
    """
    path_params: list[Param] = []
    for name in path_placeholders(path):
        spec = _lookup(parameters, name)
        if spec is None:
            raise ParameterLookupError(path, name, operation_id)
        path_params.append(
            Param(
                name=name,
                location=ParameterLocation.PATH,
                description=spec.description,
                schema=spec.schema_,
                type=state.typing.schema_to_type(state, spec.schema_, spec.schema_pointer),
            )
        )

    bound = {p.name for p in path_params}
    query_params: list[Param] = []
    for spec in parameters:
        if spec.location == ParameterLocation.QUERY:
            query_params.append(
                Param(
                    name=spec.name,
                    location=ParameterLocation.QUERY,
                    description=spec.description,
                    schema=spec.schema_,
                    type=state.typing.schema_to_type(
                        state, spec.schema_, spec.schema_pointer
                    ),
                )
            )
        elif spec.location == ParameterLocation.PATH and spec.name not in bound:
            logger.debug("Path parameter '%s' is not used by %s", spec.name, path)
        elif spec.location in (ParameterLocation.HEADER, ParameterLocation.COOKIE):
            logger.debug("Skipping %s parameter '%s' on %s", spec.location.value, spec.name, path)

    return path_params, query_params


def _lookup(parameters: list[ParameterSpec], name: str) -> Optional[ParameterSpec]:
    """First parameter named *name*, preferring one declared ``in: path``."""
    fallback: Optional[ParameterSpec] = None
    for spec in parameters:
        if spec.name != name:
            continue
        if spec.location == ParameterLocation.PATH:
            return spec
        if fallback is None:
            fallback = spec
    return fallback
