"""Load OpenAPI documents from a URL, a local file, or stdin.

Both JSON and YAML are accepted. The format is guessed from the file
extension or the response's content type and confirmed by parsing; JSON is
tried first because it is the stricter of the two.

Public functions:

* :func:`load_spec` -- fetch and parse a document into a dict.
* :func:`validate_openapi_version` -- accept OpenAPI 3.x, reject Swagger 2.
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any

import httpx
import yaml

from specgen.exceptions import SpecParseError

logger = logging.getLogger(__name__)

_YAML_SUFFIXES = (".yaml", ".yml")


def load_spec(source: str) -> dict[str, Any]:
    """Load an OpenAPI document from *source*.

    Args:
        source: An ``http(s)://`` URL, a file path, or ``"-"`` for stdin.

    Returns:
        The document as a dictionary, with ``$ref`` pointers untouched.

    Raises:
        SpecParseError: If the source cannot be read or is not a JSON/YAML object.
    """
    if source == "-":
        text, hint = sys.stdin.read(), ""
        where = "stdin"
    elif source.startswith(("http://", "https://")):
        text, hint = _fetch(source)
        where = source
    else:
        text, hint = _read_file(Path(source))
        where = source

    if not text.strip():
        raise SpecParseError(f"Empty document: {where}")
    logger.debug("Loaded %d bytes from %s", len(text), where)
    return _parse(text, hint)


def _fetch(url: str) -> tuple[str, str]:
    try:
        response = httpx.get(url, timeout=30.0, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise SpecParseError(
            f"HTTP {exc.response.status_code} fetching spec from {url}"
        ) from exc
    except httpx.RequestError as exc:
        raise SpecParseError(f"Failed to fetch spec from {url}: {exc}") from exc

    content_type = response.headers.get("content-type", "")
    hint = "yaml" if "yaml" in content_type or "yml" in content_type else ""
    return response.text, hint


def _read_file(path: Path) -> tuple[str, str]:
    if not path.is_file():
        raise SpecParseError(f"Spec file not found: {path}")
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SpecParseError(f"Failed to read spec file {path}: {exc}") from exc
    hint = "yaml" if path.suffix.lower() in _YAML_SUFFIXES else ""
    return text, hint


def _parse(text: str, hint: str) -> dict[str, Any]:
    """Parse *text* as JSON (unless hinted YAML), then as YAML."""
    document: Any = None
    errors: list[str] = []

    if hint != "yaml":
        try:
            document = json.loads(text)
        except json.JSONDecodeError as exc:
            errors.append(f"JSON error: {exc}")

    if document is None:
        try:
            document = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            errors.append(f"YAML error: {exc}")
            raise SpecParseError(
                "Failed to parse spec as JSON or YAML\n  " + "\n  ".join(errors)
            ) from exc

    if not isinstance(document, dict):
        kind = type(document).__name__ if document is not None else "empty document"
        raise SpecParseError(f"Spec must be a JSON/YAML object (got {kind})")
    return document


def validate_openapi_version(document: dict[str, Any]) -> str:
    """Return the document's ``openapi`` version string.

    Raises:
        SpecParseError: For Swagger 2.x documents, a missing ``openapi``
            field, or a major version other than 3.
    """
    if "swagger" in document:
        raise SpecParseError(
            f"Swagger {document['swagger']} is not supported. "
            "Only OpenAPI 3.x documents can be processed."
        )

    version = document.get("openapi")
    if version is None:
        raise SpecParseError("Missing 'openapi' field. Is this an OpenAPI 3.x document?")

    version = str(version)
    if not version.startswith("3."):
        raise SpecParseError(f"Unsupported OpenAPI version: {version}")
    return version
