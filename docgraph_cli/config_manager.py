"""Configuration manager for DocGraph CLI using TOML files."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import toml

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "config.toml"
EXPORT_FORMATS = ("json", "dot", "cytoscape")

DEFAULT_GRAPH_CONFIG: Dict[str, Any] = {
    "max_file_bytes": 1_000_000,
    "extra_skip_dirs": [],
    "default_export_format": "json",
}


def config_file() -> Path:
    from .config import BASE_DIR

    return BASE_DIR / CONFIG_FILE_NAME


def load_full_config() -> Dict[str, Any]:
    """Load the entire TOML config (all sections)."""
    path = config_file()
    if not path.exists():
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            return toml.load(f)
    except (OSError, toml.TomlDecodeError) as exc:
        logger.warning("Ignoring unreadable config file %s: %s", path, exc)
        return {}


def load_graph_config() -> Dict[str, Any]:
    """Load the ``[graph]`` section merged over the defaults.

    Values of the wrong type are dropped in favour of the default so a
    hand-edited file cannot break graph builds.
    """
    merged = {
        key: list(value) if isinstance(value, list) else value
        for key, value in DEFAULT_GRAPH_CONFIG.items()
    }
    section = load_full_config().get("graph", {})
    if not isinstance(section, dict):
        return merged

    max_bytes = section.get("max_file_bytes")
    if isinstance(max_bytes, int) and max_bytes > 0:
        merged["max_file_bytes"] = max_bytes

    skip_dirs = section.get("extra_skip_dirs")
    if isinstance(skip_dirs, list):
        merged["extra_skip_dirs"] = [str(d) for d in skip_dirs]

    fmt = section.get("default_export_format")
    if isinstance(fmt, str) and fmt.lower() in EXPORT_FORMATS:
        merged["default_export_format"] = fmt.lower()

    return merged


def _save_full_config(config: Dict[str, Any]) -> bool:
    """Write entire config dict to TOML file, preserving all sections."""
    path = config_file()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            toml.dump(config, f)
        return True
    except OSError as exc:
        logger.warning("Failed to write config file %s: %s", path, exc)
        return False


def save_graph_config(
    max_file_bytes: Optional[int] = None,
    extra_skip_dirs: Optional[List[str]] = None,
    default_export_format: Optional[str] = None,
) -> bool:
    """Update the ``[graph]`` section, leaving unspecified keys untouched.

    Returns:
        True if saved successfully, False otherwise.
    """
    if default_export_format is not None and default_export_format.lower() not in EXPORT_FORMATS:
        raise ValueError(
            f"Unknown export format '{default_export_format}'. "
            f"Supported: {', '.join(EXPORT_FORMATS)}"
        )
    if max_file_bytes is not None and max_file_bytes <= 0:
        raise ValueError("max_file_bytes must be positive")

    config = load_full_config()
    section = dict(config.get("graph", {}))
    if max_file_bytes is not None:
        section["max_file_bytes"] = max_file_bytes
    if extra_skip_dirs is not None:
        section["extra_skip_dirs"] = list(extra_skip_dirs)
    if default_export_format is not None:
        section["default_export_format"] = default_export_format.lower()
    config["graph"] = section
    return _save_full_config(config)
