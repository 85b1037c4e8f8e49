"""Exception hierarchy for specgen.

All exceptions inherit from :class:`SpecgenError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`specgen.exit_codes`.
The top-level error handler in :func:`specgen.app.main` catches
``SpecgenError`` and exits with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

Subclass hierarchy::

    SpecgenError (exit 1)
    +-- InvalidUsageError      (exit 2)
    +-- SpecParseError         (exit 7)
    +-- ParameterLookupError   (exit 8)
    +-- UnsupportedMergeError  (exit 9)
    +-- ConfigError            (exit 1)

Only the lookup and merge errors come out of the IR pipeline itself. Both
abort generation before any file unit reaches a renderer.
"""

from __future__ import annotations

from typing import Any

from specgen.exit_codes import (
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_LOOKUP_FAILURE,
    EXIT_SPEC_PARSE_ERROR,
    EXIT_UNSUPPORTED_MERGE,
)


class SpecgenError(Exception):
    """Base exception for all specgen errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`specgen.exit_codes`. The entry point catches
    this exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(SpecgenError):
    """Raised for invalid CLI arguments."""

    exit_code = EXIT_INVALID_USAGE


class SpecParseError(SpecgenError):
    """Raised when the OpenAPI document cannot be loaded, parsed, or followed."""

    exit_code = EXIT_SPEC_PARSE_ERROR


class ConfigError(SpecgenError):
    """Raised for configuration problems (invalid JSON, bad options, unloadable processor)."""

    exit_code = EXIT_GENERIC_FAILURE


class ParameterLookupError(SpecgenError):
    """Raised when a path-template placeholder has no declared parameter.

    Omitting the parameter would produce a client function whose path
    still contains an unbound ``{placeholder}``, so the whole run fails.

    Args:
        path: The path template being classified.
        placeholder: The placeholder name that could not be found.
        operation_id: The operation being processed, when known.
    """

    exit_code = EXIT_LOOKUP_FAILURE

    def __init__(
        self, path: str, placeholder: str, operation_id: str | None = None
    ) -> None:
        self.path = path
        self.placeholder = placeholder
        self.operation_id = operation_id
        where = f" (operation '{operation_id}')" if operation_id else ""
        super().__init__(
            f"Path '{path}' uses placeholder '{{{placeholder}}}' "
            f"but no parameter named '{placeholder}' is declared{where}"
        )


class UnsupportedMergeError(SpecgenError):
    """Raised when an interface file unit lands on an occupied module key.

    There is no merge policy between behaviour stubs and concrete files yet,
    so the collision is reported instead of resolved.

    Args:
        module: The module identity both units map to.
    """

    exit_code = EXIT_UNSUPPORTED_MERGE

    def __init__(self, module: Any) -> None:
        self.module = module
        super().__init__(
            f"Cannot merge interface file into module '{module}': "
            "a concrete file already targets the same module"
        )
