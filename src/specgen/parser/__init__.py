"""OpenAPI document loading and reading.

This sub-package produces the input the IR pipeline consumes: it turns a
raw OpenAPI 3.x document (JSON or YAML, local file or remote URL) into an
:class:`~specgen.models.ApiSpec`.

Typical usage::

    from specgen.parser import load_spec, read_spec, validate_openapi_version

    raw = load_spec("https://petstore3.swagger.io/api/v3/openapi.json")
    spec = read_spec(raw, validate_openapi_version(raw))

Sub-modules:

* :mod:`~specgen.parser.loader` -- I/O (URL, file, stdin), format
  detection and version validation.
* :mod:`~specgen.parser.pointer` -- On-demand JSON pointer resolution.
* :mod:`~specgen.parser.reader` -- Builds the typed input contract while
  keeping schema ``$ref`` identities intact.
"""

from specgen.parser.loader import load_spec, validate_openapi_version
from specgen.parser.pointer import resolve_pointer
from specgen.parser.reader import read_spec

__all__ = ["load_spec", "validate_openapi_version", "read_spec", "resolve_pointer"]
