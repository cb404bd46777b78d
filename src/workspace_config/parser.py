"""Settings file parser and built-in defaults source."""

import json
import logging
from importlib.resources import files
from pathlib import Path
from typing import Any

import yaml

from .exceptions import ConfigFileError
from .models import ErrorItem
from .utils import add_to_value_tree
from .utils import to_value_tree

logger = logging.getLogger(__name__)

SCHEMA_RESOURCE = "schema.yaml"


JSON_SUFFIXES = {".json"}


def _load_json(text: str, path: Path) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise ConfigFileError(e.msg, path, e.lineno - 1, e.colno - 1) from e


def _load_yaml(text: str, path: Path) -> Any:
    try:
        return yaml.safe_load(text)
    except yaml.MarkedYAMLError as e:
        mark = e.problem_mark or e.context_mark
        line = mark.line if mark else 0
        column = mark.column if mark else 0
        raise ConfigFileError(f"{e.problem or e.context or 'invalid syntax'}", path, line, column) from e
    except yaml.YAMLError as e:
        raise ConfigFileError(str(e), path) from e


def _read_settings(path: Path) -> dict[str, Any]:
    """Read a JSON or YAML document that must be a mapping.

    ``.json`` files go through ``json``; anything else is YAML.

    Raises:
        ConfigFileError: If the file cannot be read or parsed
    """
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigFileError(f"Failed to read {path}: {e}", path) from e

    if not text.strip():
        return {}
    if path.suffix.lower() in JSON_SUFFIXES:
        data = _load_json(text, path)
    else:
        data = _load_yaml(text, path)

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigFileError(f"Expected a mapping at top level, got {type(data).__name__}", path)
    return data


def parse_file(path: Path | str | None) -> tuple[dict[str, Any], list[ErrorItem]]:
    """Parse a settings file into a value tree.

    JSON files (``.json``) are parsed as JSON, other suffixes as YAML.

    Dotted top-level keys are expanded, so ``{"a.b": 1}`` and ``{"a": {"b": 1}}``
    produce the same tree. A missing file is an empty tree.

    Args:
        path: Settings file path

    Returns:
        Tuple of (value tree, errors); the tree is empty when errors occur
    """
    if path is None:
        return {}, []
    path = Path(path)
    if not path.exists():
        return {}, []

    try:
        data = _read_settings(path)
    except ConfigFileError as e:
        logger.warning(f"Failed to parse configuration from {path}: {e}")
        return {}, [ErrorItem(path=str(path), message=str(e), line=e.line, column=e.column)]

    return to_value_tree(data, lambda message: logger.warning(f"{path}: {message}")), []


def load_default_configuration(path: Path | str | None = None) -> dict[str, Any]:
    """Build the defaults tree from a properties schema.

    The schema maps dotted keys to property descriptions; only ``default``
    is used here.

    Args:
        path: Schema file (default: bundled schema.yaml)

    Returns:
        Defaults value tree

    Raises:
        ConfigFileError: If the schema cannot be read or parsed
    """
    if path is None:
        resource = files(__package__).joinpath(SCHEMA_RESOURCE)
        try:
            schema = yaml.safe_load(resource.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as e:
            raise ConfigFileError(f"Invalid bundled schema: {e}", SCHEMA_RESOURCE) from e
    else:
        schema = _read_settings(Path(path))

    defaults: dict[str, Any] = {}
    for key, prop in (schema.get("properties") or {}).items():
        if isinstance(prop, dict) and "default" in prop:
            add_to_value_tree(defaults, key, prop["default"], lambda message: logger.error(message))
    return defaults
