"""Shared test fixtures for specgen.

Provides reusable fixtures for loading document fixtures, building pipeline
state, isolating configuration from the environment, and managing output
state. These fixtures are automatically discovered by pytest and available
to all test modules without explicit imports.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Callable

import pytest

from specgen.generator import new_state
from specgen.models import ApiSpec, GeneratorConfig
from specgen.output import reset_output
from specgen.parser import read_spec, validate_openapi_version
from specgen.processor.state import PipelineState


FIXTURES_DIR = Path(__file__).parent / "fixtures"


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time. When Typer's CliRunner redirects those streams, the
    cached references go stale once the test finishes.
    """
    yield
    reset_output()


@pytest.fixture(autouse=True)
def _reset_specgen_logger() -> None:
    """Drop handlers installed by CLI runs; they hold CliRunner's closed streams."""
    yield
    logger = logging.getLogger("specgen")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep ``SPECGEN_*`` variables from the developer's shell out of tests."""
    for name in ("SPECGEN_BASE_MODULE", "SPECGEN_BASE_LOCATION", "SPECGEN_USE_TAGS"):
        monkeypatch.delenv(name, raising=False)


# ---------------------------------------------------------------------------
# Document fixtures
# ---------------------------------------------------------------------------


def read_document(raw: dict[str, Any]) -> ApiSpec:
    """Validate and read a raw document dict."""
    return read_spec(raw, validate_openapi_version(raw))


def _minimal_document(
    paths: dict[str, Any], schemas: dict[str, Any] | None = None
) -> dict[str, Any]:
    raw: dict[str, Any] = {
        "openapi": "3.0.3",
        "info": {"title": "Test API", "version": "1.0.0"},
        "paths": paths,
    }
    if schemas is not None:
        raw["components"] = {"schemas": schemas}
    return raw


@pytest.fixture
def widgets_path() -> Path:
    return FIXTURES_DIR / "widgets.json"


@pytest.fixture
def widgets_raw(widgets_path: Path) -> dict[str, Any]:
    """Load the raw widgets document."""
    with open(widgets_path) as f:
        return json.load(f)


@pytest.fixture
def widgets_spec(widgets_raw: dict[str, Any]) -> ApiSpec:
    return read_document(widgets_raw)


@pytest.fixture
def make_state() -> Callable[..., PipelineState]:
    """Factory: ``make_state(raw_or_spec, processor=None, **config_fields)``."""

    def _make(document: Any, processor: Any = None, **config: Any) -> PipelineState:
        spec = document if isinstance(document, ApiSpec) else read_document(document)
        return new_state(spec, GeneratorConfig(**config), processor)

    return _make


@pytest.fixture
def widgets_state(widgets_spec: ApiSpec, make_state: Callable[..., PipelineState]) -> PipelineState:
    """Initial pipeline state for the widgets document with default config."""
    return make_state(widgets_spec)


@pytest.fixture
def document() -> Callable[..., dict[str, Any]]:
    """Factory: wrap *paths* (and optional component *schemas*) in a valid 3.0 document."""
    return _minimal_document
