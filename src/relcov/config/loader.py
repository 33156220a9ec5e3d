"""
relcov.config.loader - Configuration file discovery and loading.

Configuration lives in ``.relcov.toml``, found in the working directory
or any parent. Values are layered: defaults, then the file, then
``RELCOV_<SECTION>_<KEY>`` environment variables.
"""

from __future__ import annotations

import copy
import json
import os
from pathlib import Path
from typing import Any, Mapping

import tomlkit
from tomlkit.exceptions import TOMLKitError

from relcov.config.defaults import DEFAULT_CONFIG

CONFIG_FILENAME = ".relcov.toml"
ENV_PREFIX = "RELCOV_"
REPORT_FORMATS = ("json", "text", "markdown", "csv")


def find_config_file(start_path: Path) -> Path | None:
    """Find the configuration file in ``start_path`` or its parents.

    Args:
        start_path: Directory to start searching from.

    Returns:
        Path to ``.relcov.toml``, or None if not found.
    """
    current = start_path.resolve()
    while True:
        candidate = current / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
        if current == current.parent:
            return None
        current = current.parent


def parse_toml(content: str) -> dict[str, Any]:
    """Parse TOML content into plain Python containers.

    Raises:
        ValueError: If the content is not valid TOML.
    """
    try:
        return parse_toml_document(content).unwrap()
    except TOMLKitError as e:
        raise ValueError(f"Invalid TOML: {e}") from e


def parse_toml_document(content: str) -> tomlkit.TOMLDocument:
    """Parse TOML content, preserving formatting for round-trip edits."""
    return tomlkit.parse(content)


def merge_configs(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Deep-merge ``override`` into a copy of ``base``.

    Nested tables are merged key by key; any other value in ``override``
    replaces the base value.
    """
    merged = copy.deepcopy(dict(base))
    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), dict):
            merged[key] = merge_configs(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def _try_parse_env_value(value: str) -> Any:
    """Convert an environment variable string to a typed value.

    JSON arrays/objects, booleans, and integers are converted; anything
    else (including malformed JSON) is returned unchanged.
    """
    stripped = value.strip()
    if stripped.startswith(("[", "{")):
        try:
            return json.loads(stripped)
        except json.JSONDecodeError:
            return value
    if stripped.lower() == "true":
        return True
    if stripped.lower() == "false":
        return False
    if stripped.removeprefix("-").isdecimal():
        return int(stripped)
    return value


def _apply_env_overrides(
    config: dict[str, Any], environ: Mapping[str, str] | None = None
) -> dict[str, Any]:
    """Apply ``RELCOV_<SECTION>_<KEY>`` overrides to ``config`` in place.

    ``RELCOV_ANALYSIS_MAX_REWRITE_DEPTH=10`` sets
    ``config["analysis"]["max_rewrite_depth"] = 10``.
    """
    if environ is None:
        environ = os.environ

    for name, raw in environ.items():
        if not name.startswith(ENV_PREFIX):
            continue
        section, _, key = name[len(ENV_PREFIX):].lower().partition("_")
        if not section or not key:
            continue
        table = config.setdefault(section, {})
        if isinstance(table, dict):
            table[key] = _try_parse_env_value(raw)

    return config


def validate_config(config: Mapping[str, Any]) -> None:
    """Check configuration values the analysis depends on.

    Raises:
        ValueError: On an unknown report format or an invalid depth.
    """
    fmt = config.get("report", {}).get("format")
    if fmt not in REPORT_FORMATS:
        raise ValueError(
            f"report.format must be one of {', '.join(REPORT_FORMATS)}, got {fmt!r}"
        )

    depth = config.get("analysis", {}).get("max_rewrite_depth")
    if isinstance(depth, bool) or not isinstance(depth, int) or depth < 1:
        raise ValueError(f"analysis.max_rewrite_depth must be a positive integer, got {depth!r}")

    for key in ("fail_on_untested", "require_full"):
        if not isinstance(config.get("coverage", {}).get(key), bool):
            raise ValueError(f"coverage.{key} must be true or false")


def load_config(config_path: Path, environ: Mapping[str, str] | None = None) -> dict[str, Any]:
    """Load a configuration file merged over the defaults.

    Raises:
        OSError: If the file cannot be read.
        ValueError: If the file is not valid TOML or has invalid values.
    """
    user_config = parse_toml(config_path.read_text(encoding="utf-8"))
    config = merge_configs(DEFAULT_CONFIG, user_config)
    _apply_env_overrides(config, environ)
    validate_config(config)
    return config


def get_config(
    config_path: Path | None = None,
    start_path: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> dict[str, Any]:
    """Resolve the effective configuration.

    Uses ``config_path`` if given, otherwise searches from ``start_path``
    (default: the working directory). Falls back to defaults when no file
    exists.
    """
    if config_path is None:
        config_path = find_config_file(start_path or Path.cwd())

    if config_path is not None:
        return load_config(config_path, environ)

    config = copy.deepcopy(DEFAULT_CONFIG)
    _apply_env_overrides(config, environ)
    validate_config(config)
    return config
