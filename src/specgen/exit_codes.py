"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~specgen.exceptions.SpecgenError` subclass.
Build scripts can inspect the exit code to tell a broken document from a
broken configuration without parsing stderr.

Example::

    $ specgen plan openapi.yaml
    $ echo $?
    8   # EXIT_LOOKUP_FAILURE -- a path placeholder has no parameter
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments."""

EXIT_SPEC_PARSE_ERROR = 7
"""The OpenAPI document could not be loaded or read."""

EXIT_LOOKUP_FAILURE = 8
"""A path-template placeholder has no matching declared parameter."""

EXIT_UNSUPPORTED_MERGE = 9
"""An interface file unit collided with a concrete file unit."""
