"""The immutable accumulator threaded through every pipeline stage.

Each stage takes a :class:`PipelineState` and returns a new one built with
:func:`dataclasses.replace`. Stages never mutate the state (or the
collections it holds) that they were given, so any intermediate state can
be captured in a test and fed to the next stage in isolation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from specgen.models import ApiSpec, FileUnit, GeneratorConfig, ModuleName, Operation, Schema

if TYPE_CHECKING:
    from specgen.processor.base import Processor
    from specgen.processor.type_encoder import TypeEncoder


@dataclass(frozen=True)
class PipelineState:
    """Everything the pipeline knows at a given stage.

    Attributes:
        spec: The typed input document.
        config: Effective generator configuration.
        processor: Injected naming and inclusion policy.
        typing: Injected schema-to-type encoder.
        schemas: Schema IR keyed by canonical final name, in discovery order.
        schema_names: Schema identity (``$ref`` or inline pointer) to final name.
        operations: Operation IR in processing order.
        schema_files: File units built from schemas.
        operation_files: File units built from operations.
        interface_files: Behaviour file units (empty unless enabled).
        files: The reconciled result.
    """

    spec: ApiSpec
    config: GeneratorConfig
    processor: "Processor"
    typing: "TypeEncoder"
    schemas: dict[str, Schema] = field(default_factory=dict)
    schema_names: dict[str, str] = field(default_factory=dict)
    operations: tuple[Operation, ...] = ()
    schema_files: dict[ModuleName, FileUnit] = field(default_factory=dict)
    operation_files: dict[ModuleName, FileUnit] = field(default_factory=dict)
    interface_files: dict[ModuleName, FileUnit] = field(default_factory=dict)
    files: dict[ModuleName, FileUnit] = field(default_factory=dict)
