"""Run the full IR pipeline and hand the result to a renderer.

The pipeline is a single synchronous fold over an immutable
:class:`~specgen.processor.state.PipelineState`::

    state = new_state(spec, config)
    state = discover_schemas(state)        # names settled first
    state = process_schemas(state)
    state = process_operations(state)
    state = collect_schema_files(state)
    state = collect_operation_files(state)
    state = collect_interface_files(state)
    state = reconcile_files(state)

A lookup or merge failure raises out of :func:`run` before any file unit is
returned, so a failed run never yields a partial file tree.

Rendering and writing are not part of this package. :class:`Renderer` is
the boundary: :func:`emit` renders every unit in memory and only returns
once all of them succeeded.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Callable, Optional

from specgen.generator.files import (
    collect_interface_files,
    collect_operation_files,
    collect_schema_files,
    reconcile_files,
)
from specgen.models import ApiSpec, FileUnit, GeneratorConfig, ModuleName
from specgen.processor.base import Processor
from specgen.processor.operation import process_operations
from specgen.processor.schemas import discover_schemas, process_schemas
from specgen.processor.state import PipelineState
from specgen.processor.type_encoder import DefaultTypeEncoder, TypeEncoder

logger = logging.getLogger(__name__)

Stage = Callable[[PipelineState], PipelineState]

STAGES: tuple[Stage, ...] = (
    discover_schemas,
    process_schemas,
    process_operations,
    collect_schema_files,
    collect_operation_files,
    collect_interface_files,
    reconcile_files,
)
"""Pipeline stages in execution order."""


def new_state(
    spec: ApiSpec,
    config: Optional[GeneratorConfig] = None,
    processor: Optional[Processor] = None,
    typing: Optional[TypeEncoder] = None,
) -> PipelineState:
    """Create the initial pipeline state.

    Args:
        spec: The typed document from :func:`~specgen.parser.read_spec`.
        config: Generator options. Defaults to :class:`GeneratorConfig()`.
        processor: Naming and inclusion policy. Defaults to :class:`Processor`.
        typing: Schema-to-type encoder. Defaults to :class:`DefaultTypeEncoder`.
    """
    return PipelineState(
        spec=spec,
        config=config or GeneratorConfig(),
        processor=processor or Processor(),
        typing=typing or DefaultTypeEncoder(),
    )


def run_state(state: PipelineState) -> PipelineState:
    """Fold *state* through every stage and return the final state."""
    for stage in STAGES:
        state = stage(state)
        logger.debug(
            "%s: %d schemas, %d operations, %d files",
            stage.__name__,
            len(state.schemas),
            len(state.operations),
            len(state.files),
        )
    return state


def run(
    spec: ApiSpec,
    config: Optional[GeneratorConfig] = None,
    processor: Optional[Processor] = None,
    typing: Optional[TypeEncoder] = None,
) -> dict[ModuleName, FileUnit]:
    """Run the pipeline and return the reconciled file units.

    Raises:
        ParameterLookupError: A path placeholder has no declared parameter.
        UnsupportedMergeError: An interface unit collided with a concrete one.
        SpecParseError: A ``$ref`` could not be followed.
    """
    return run_state(new_state(spec, config, processor, typing)).files


class Renderer(ABC):
    """Turns a file unit into source text. Implemented by target-language generators."""

    @abstractmethod
    def render(self, module: ModuleName, unit: FileUnit) -> str:
        """Render *unit*.

        Args:
            module: The fully qualified module name (``base_module`` applied).
            unit: The file unit to render.
        """
        ...


def emit(
    files: dict[ModuleName, FileUnit],
    renderer: Renderer,
    config: Optional[GeneratorConfig] = None,
) -> dict[str, str]:
    """Render every unit and return ``{file name: contents}``.

    Module names are qualified with ``config.base_module`` here, at the
    render boundary. If the renderer raises for any unit, nothing is
    returned.
    """
    config = config or GeneratorConfig()
    rendered: dict[str, str] = {}
    for module, unit in files.items():
        rendered[unit.name] = renderer.render(module.qualify(config.base_module), unit)
    return rendered


def plan_rows(
    files: dict[ModuleName, FileUnit], config: Optional[GeneratorConfig] = None
) -> list[list[str]]:
    """Flatten *files* into display rows.

    Columns: module, file, operations, schemas, using, behaviour.
    """
    config = config or GeneratorConfig()
    rows: list[list[str]] = []
    for module, unit in files.items():
        rows.append([
            module.qualify(config.base_module).dotted,
            unit.name,
            str(len(unit.operations)),
            str(len(unit.schemas)),
            ", ".join(unit.using) or "-",
            "yes" if unit.is_behaviour else "",
        ])
    return rows
