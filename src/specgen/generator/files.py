"""Group Operation and Schema IR into output file units.

Every generated source file corresponds to one module identity
(:class:`~specgen.models.ModuleName`). Three independent maps are built
and then reconciled:

* **Schema files** -- one entry per canonical schema name, under
  ``<base_location>/<schema_location>/``.
* **Operation files** -- one entry per operation module, under
  ``<base_location>/<operation_location>/``.
* **Interface files** -- behaviour stubs per operation module, only when
  ``operation_interfaces`` is enabled.

When a schema and an operation module share a key (a ``Widget`` schema and
operations tagged ``widget``), both land in one file. Interface units have
no merge policy: one landing on an occupied key aborts the run with
:class:`~specgen.exceptions.UnsupportedMergeError`.
"""

from __future__ import annotations

import logging
import posixpath
from dataclasses import replace
from typing import TYPE_CHECKING

from specgen.exceptions import UnsupportedMergeError
from specgen.models import FileUnit, ModuleName
from specgen.processor.naming import function_case

if TYPE_CHECKING:
    from specgen.processor.state import PipelineState

logger = logging.getLogger(__name__)

INTERFACE_FILE_SUFFIX = ".interface"


def file_stem(module: ModuleName) -> str:
    """Lower-snake-cased segments joined with ``/`` (``Repos.PullRequests`` -> ``repos/pull_requests``)."""
    return "/".join(function_case(segment) for segment in module.segments)


def file_name(*locations: str, module: ModuleName) -> str:
    """Output path (without extension) for *module* under the given directories."""
    parts = [loc for loc in locations if loc]
    return posixpath.join(*parts, file_stem(module))


def collect_schema_files(state: "PipelineState") -> "PipelineState":
    """Build one file unit per schema, keyed by its final name.

    Schemas whose names map to the same module are appended to a single
    unit, and their using-directives are concatenated.
    """
    config = state.config
    files: dict[ModuleName, FileUnit] = {}

    for schema in state.schemas.values():
        module = ModuleName.parse(schema.final_name)
        using = ([config.schema_use] if config.schema_use else []) + schema.using
        existing = files.get(module)
        if existing is None:
            files[module] = FileUnit(
                name=file_name(config.base_location, config.schema_location, module=module),
                module=module,
                schemas=[schema],
                using=using,
            )
        else:
            files[module] = existing.model_copy(
                update={
                    "schemas": [*existing.schemas, schema],
                    "using": [*existing.using, *using],
                }
            )

    return replace(state, schema_files=files)


def collect_operation_files(state: "PipelineState") -> "PipelineState":
    """Build one file unit per operation module, operations in processing order."""
    config = state.config
    using = [config.default_client] if config.default_client else []
    files: dict[ModuleName, FileUnit] = {}

    for operation in state.operations:
        module = operation.module
        existing = files.get(module)
        if existing is None:
            files[module] = FileUnit(
                name=file_name(config.base_location, config.operation_location, module=module),
                module=module,
                operations=[operation],
                using=list(using),
            )
        else:
            files[module] = existing.model_copy(
                update={"operations": [*existing.operations, operation]}
            )

    return replace(state, operation_files=files)


def collect_interface_files(state: "PipelineState") -> "PipelineState":
    """Build behaviour stubs, one per operation module, when enabled in config."""
    config = state.config
    if not config.operation_interfaces:
        return replace(state, interface_files={})

    files: dict[ModuleName, FileUnit] = {}
    for operation in state.operations:
        module = operation.module.child(config.interface_suffix)
        existing = files.get(module)
        if existing is None:
            base = file_name(config.base_location, config.operation_location, module=operation.module)
            files[module] = FileUnit(
                name=base + INTERFACE_FILE_SUFFIX,
                module=module,
                operations=[operation],
                is_behaviour=True,
            )
        else:
            files[module] = existing.model_copy(
                update={"operations": [*existing.operations, operation]}
            )

    return replace(state, interface_files=files)


def merge_file_units(schema_unit: FileUnit, operation_unit: FileUnit) -> FileUnit:
    """Merge a schema-origin unit and an operation-origin unit for the same module.

    The result takes the operation unit's file name and operations, the
    schema unit's schemas, and the operation unit's using-directives
    followed by the schema unit's.
    """
    return FileUnit(
        name=operation_unit.name,
        module=operation_unit.module,
        operations=list(operation_unit.operations),
        schemas=list(schema_unit.schemas),
        using=[*operation_unit.using, *schema_unit.using],
        is_behaviour=False,
    )


def reconcile_file_maps(
    schema_files: dict[ModuleName, FileUnit],
    operation_files: dict[ModuleName, FileUnit],
    interface_files: dict[ModuleName, FileUnit],
) -> dict[ModuleName, FileUnit]:
    """Merge the three file maps into one.

    Key order: schema modules first, then operation-only modules, then
    interface modules, each in their own discovery order.

    Raises:
        UnsupportedMergeError: If an interface unit shares a key with a
            schema or operation unit. Nothing is returned in that case.
    """
    files: dict[ModuleName, FileUnit] = dict(schema_files)
    for module, operation_unit in operation_files.items():
        schema_unit = files.get(module)
        if schema_unit is None:
            files[module] = operation_unit
        else:
            logger.debug("Merging schema and operation files for %s", module)
            files[module] = merge_file_units(schema_unit, operation_unit)

    for module, interface_unit in interface_files.items():
        if module in files:
            raise UnsupportedMergeError(module)
        files[module] = interface_unit

    return files


def reconcile_files(state: "PipelineState") -> "PipelineState":
    """Reconcile the collected file maps into ``state.files``."""
    files = reconcile_file_maps(state.schema_files, state.operation_files, state.interface_files)
    return replace(state, files=files)
