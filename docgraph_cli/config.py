"""Configuration paths and graph settings for local DocGraph memory."""

from __future__ import annotations

import os
from pathlib import Path

BASE_DIR = Path(os.environ.get("DOCGRAPH_HOME", str(Path.home() / ".docgraph"))).expanduser()
MEMORY_DIR = BASE_DIR / "memory"
STATE_FILE = BASE_DIR / "state.json"
SNAPSHOT_DB_NAME = "graph.db"

SKIP_DIRS = {
    ".venv", "venv", "__pycache__", "node_modules", ".git",
    "site-packages", ".tox", ".pytest_cache", "build", "dist",
    ".mypy_cache", ".ruff_cache", "htmlcov", ".eggs",
    ".next", "coverage", ".docgraph",
}

# Graph settings from ~/.docgraph/config.toml (set via `dg config set`)
from .config_manager import load_graph_config  # noqa: E402

_graph_config = load_graph_config()

MAX_FILE_BYTES = int(_graph_config["max_file_bytes"])
EXTRA_SKIP_DIRS = set(_graph_config["extra_skip_dirs"])
EXPORT_FORMAT = _graph_config["default_export_format"]


def ensure_base_dirs() -> None:
    """Create base directories for local storage if needed."""
    MEMORY_DIR.mkdir(parents=True, exist_ok=True)
    BASE_DIR.mkdir(parents=True, exist_ok=True)
