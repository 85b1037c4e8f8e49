"""specgen -- Plan API client modules from OpenAPI 3.0/3.1 documents.

This package turns an OpenAPI document into a language-neutral intermediate
representation of an API client: one record per operation, one per
deduplicated schema, and a map of output file units that a target-language
renderer turns into source.

Typical workflow::

    specgen init                      # write ./specgen.json
    specgen plan openapi.yaml         # show the file units

Modules:
    app: Typer application and CLI entry point.
    models: Pydantic models for config, the input contract and the IR.
    config: Project configuration and precedence resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
    parser: Document loading and reading.
    processor: Naming, parameters, schemas and operations.
    generator: File units and the pipeline.
"""

__version__ = "0.1.0"
