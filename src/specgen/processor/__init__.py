"""IR processor -- turn a typed OpenAPI document into operations and schemas.

This sub-package is the heart of the specgen pipeline: it takes an
:class:`~specgen.models.ApiSpec` (produced by the parser) and builds the
intermediate representation that the generator groups into files.

Sub-modules:

* :mod:`~specgen.processor.naming` -- Identifier normalisation, type/function
  casing and the tags / no-tags operation naming modes.
* :mod:`~specgen.processor.params` -- Path and query parameter
  classification against the path template.
* :mod:`~specgen.processor.schemas` -- Transitive schema discovery,
  canonical naming and deduplication.
* :mod:`~specgen.processor.operation` -- Operation IR assembly, one record
  per homing target.
* :mod:`~specgen.processor.base` -- The overridable :class:`Processor` policy.
* :mod:`~specgen.processor.type_encoder` -- The schema-to-type boundary.
* :mod:`~specgen.processor.state` -- The immutable pipeline accumulator.
"""

from specgen.processor.base import Processor
from specgen.processor.naming import function_case, normalize, operation_names, type_case
from specgen.processor.operation import build_operations, process_operations
from specgen.processor.params import classify_parameters, merge_parameters
from specgen.processor.schemas import discover_schemas, process_schemas
from specgen.processor.state import PipelineState
from specgen.processor.type_encoder import DefaultTypeEncoder, TypeEncoder

__all__ = [
    "DefaultTypeEncoder",
    "PipelineState",
    "Processor",
    "TypeEncoder",
    "build_operations",
    "classify_parameters",
    "discover_schemas",
    "function_case",
    "merge_parameters",
    "normalize",
    "operation_names",
    "process_operations",
    "process_schemas",
    "type_case",
]
