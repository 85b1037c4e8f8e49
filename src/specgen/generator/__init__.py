"""File planning -- group the IR into output file units and run the pipeline.

This sub-package is responsible for the second half of the specgen
pipeline: taking the Operation and Schema IR built by
:mod:`specgen.processor` and deciding which file each record lands in.

Typical usage::

    from specgen.generator import run
    from specgen.parser import load_spec, read_spec, validate_openapi_version

    raw = load_spec("openapi.yaml")
    spec = read_spec(raw, validate_openapi_version(raw))
    files = run(spec, GeneratorConfig(base_module="GitHub"))
    for module, unit in files.items():
        print(module.dotted, unit.name, len(unit.operations))

Sub-modules:

* :mod:`~specgen.generator.files` -- Schema, operation and interface file
  collection and reconciliation.
* :mod:`~specgen.generator.pipeline` -- Stage ordering, the
  :class:`~specgen.generator.pipeline.Renderer` boundary and display rows.
"""

from specgen.generator.files import merge_file_units, reconcile_file_maps
from specgen.generator.pipeline import Renderer, emit, new_state, plan_rows, run, run_state

__all__ = [
    "Renderer",
    "emit",
    "merge_file_units",
    "new_state",
    "plan_rows",
    "reconcile_file_maps",
    "run",
    "run_state",
]
