"""Configuration loading with precedence resolution and atomic writes.

This module handles all persistent configuration for specgen:

* **Project config** -- ``./specgen.json`` (or an explicit path) holding a
  :class:`~specgen.models.GeneratorConfig`, either as the whole object or
  under a ``"generator"`` key so the file can be shared with other tools.
* **Precedence resolution** -- :func:`resolve_config` layers defaults,
  the project file, ``SPECGEN_*`` environment variables and CLI flags.
* **Processor loading** -- :func:`load_processor` imports a custom
  :class:`~specgen.processor.base.Processor` from a ``module:Class``
  string.
* **Data directory** -- XDG-aware location for crash logs.

Invalid files, invalid option combinations and unloadable processors all
raise :class:`~specgen.exceptions.ConfigError`, so a bad configuration is
reported before the pipeline starts.
"""

from __future__ import annotations

import importlib
import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from specgen.exceptions import ConfigError
from specgen.models import GeneratorConfig

_APP_NAME = "specgen"
PROJECT_CONFIG_FILENAME = "specgen.json"

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off"})


# --- Data directory ---


def _is_xdg_platform() -> bool:
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/specgen/`` (default ``~/.local/share/specgen/``).
    On macOS/Windows: ``~/.specgen/``.
    """
    if _is_xdg_platform():
        base = os.environ.get("XDG_DATA_HOME") or str(Path.home() / ".local" / "share")
        path = Path(base) / _APP_NAME
    else:
        path = Path.home() / f".{_APP_NAME}"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str) -> None:
    """Write *data* to *path* via a temp file in the same directory and ``os.replace``."""
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path: Optional[str] = None
    try:
        with tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        ) as fd:
            tmp_path = fd.name
            fd.write(data)
            fd.flush()
            os.fsync(fd.fileno())
        os.replace(tmp_path, path)
    except BaseException:
        if tmp_path is not None and os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise


# --- Project config ---


def project_config_path(path: Optional[Path] = None) -> Path:
    """The explicit *path*, or ``./specgen.json``."""
    return path if path is not None else Path.cwd() / PROJECT_CONFIG_FILENAME


def _read_project_data(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigError(f"Invalid project config at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid project config at {path}: expected a JSON object")
    section = data.get("generator", data)
    if not isinstance(section, dict):
        raise ConfigError(f"Invalid project config at {path}: 'generator' must be an object")
    return section


def load_project_config(path: Optional[Path] = None) -> GeneratorConfig:
    """Load the project configuration.

    Args:
        path: Explicit config file. Defaults to ``./specgen.json``.

    Returns:
        The validated configuration, or defaults when the default file does
        not exist.

    Raises:
        ConfigError: If an explicit *path* does not exist, or the file is
            not valid JSON, or it fails validation.
    """
    config_path = project_config_path(path)
    if not config_path.is_file():
        if path is not None:
            raise ConfigError(f"Config file not found: {config_path}")
        return GeneratorConfig()
    return _validate(_read_project_data(config_path), config_path)


def save_project_config(config: GeneratorConfig, path: Optional[Path] = None) -> Path:
    """Persist *config* atomically and return the path written."""
    config_path = project_config_path(path)
    data = config.model_dump(mode="json", exclude_defaults=True)
    _atomic_write(config_path, json.dumps(data, indent=2) + "\n")
    return config_path


# --- Precedence resolution ---


def env_overrides() -> dict[str, Any]:
    """Read ``SPECGEN_*`` environment overrides.

    * ``SPECGEN_BASE_MODULE`` -> ``base_module``
    * ``SPECGEN_BASE_LOCATION`` -> ``base_location``
    * ``SPECGEN_USE_TAGS`` -> ``operation_use_tags`` (``1/true/yes/on`` or ``0/false/no/off``)

    Raises:
        ConfigError: If ``SPECGEN_USE_TAGS`` is not a recognised boolean.
    """
    overrides: dict[str, Any] = {}
    if os.environ.get("SPECGEN_BASE_MODULE"):
        overrides["base_module"] = os.environ["SPECGEN_BASE_MODULE"]
    if os.environ.get("SPECGEN_BASE_LOCATION"):
        overrides["base_location"] = os.environ["SPECGEN_BASE_LOCATION"]

    use_tags = os.environ.get("SPECGEN_USE_TAGS", "").strip().lower()
    if use_tags in _TRUE_VALUES:
        overrides["operation_use_tags"] = True
    elif use_tags in _FALSE_VALUES:
        overrides["operation_use_tags"] = False
    elif use_tags:
        raise ConfigError(f"SPECGEN_USE_TAGS must be a boolean, got '{use_tags}'")
    return overrides


def resolve_config(
    config_path: Optional[Path] = None,
    cli_overrides: Optional[dict[str, Any]] = None,
) -> GeneratorConfig:
    """Resolve the effective configuration.

    Precedence (high to low):
        1. CLI flags (*cli_overrides*, ``None`` values ignored)
        2. Environment variables (see :func:`env_overrides`)
        3. Project config file
        4. Defaults

    Raises:
        ConfigError: If any layer is invalid or the combination fails validation.
    """
    config = load_project_config(config_path)
    data = config.model_dump()
    data.update(env_overrides())
    data.update({k: v for k, v in (cli_overrides or {}).items() if v is not None})
    return _validate(data, config_path)


def _validate(data: dict[str, Any], source: Optional[Path]) -> GeneratorConfig:
    try:
        return GeneratorConfig.model_validate(data)
    except ValidationError as exc:
        where = f" at {source}" if source is not None else ""
        raise ConfigError(f"Invalid generator config{where}: {exc}") from exc


# --- Processor loading ---


def load_processor(import_string: str):  # noqa: ANN201
    """Import and instantiate a :class:`~specgen.processor.base.Processor` subclass.

    Args:
        import_string: ``"package.module:ClassName"``.

    Raises:
        ConfigError: If the string is malformed, the import fails, or the
            object is not a ``Processor`` subclass.
    """
    from specgen.processor.base import Processor

    module_name, _, attr = import_string.partition(":")
    if not module_name or not attr:
        raise ConfigError(
            f"Invalid processor '{import_string}': expected 'module:ClassName'"
        )
    try:
        module = importlib.import_module(module_name)
        processor_cls = getattr(module, attr)
    except (ImportError, AttributeError) as exc:
        raise ConfigError(f"Cannot load processor '{import_string}': {exc}") from exc

    if not isinstance(processor_cls, type) or not issubclass(processor_cls, Processor):
        raise ConfigError(f"Processor '{import_string}' is not a Processor subclass")
    return processor_cls()
