"""Persistence layer for project registration and graph snapshots.

Architecture:
- **ProjectManager** keeps one memory directory per registered repository
  plus the "current project" pointer in ``state.json``.
- **GraphSnapshotStore** is the narrow port the graph builder writes
  through. :class:`SQLiteSnapshotStore` keeps one row per repository in the
  project's ``graph.db``; a rebuild overwrites the row (last writer wins).

Snapshots are a cache of derived data. They can be deleted at any time and
rebuilt from the source documents.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from .config import MEMORY_DIR, SNAPSHOT_DB_NAME, STATE_FILE, ensure_base_dirs
from .models import GraphSnapshot

logger = logging.getLogger(__name__)


# ===================================================================
# ProjectManager
# ===================================================================

class ProjectManager:
    """Manage project memory directories and active project state."""

    def __init__(self) -> None:
        ensure_base_dirs()

    def list_projects(self) -> List[str]:
        if not MEMORY_DIR.exists():
            return []
        return sorted([p.name for p in MEMORY_DIR.iterdir() if p.is_dir()])

    def project_dir(self, project_name: str) -> Path:
        return MEMORY_DIR / project_name

    def create_or_get_project(self, project_name: str) -> Path:
        path = self.project_dir(project_name)
        path.mkdir(parents=True, exist_ok=True)
        return path

    def snapshot_db_path(self, project_name: str) -> Path:
        return self.project_dir(project_name) / SNAPSHOT_DB_NAME

    def set_current_project(self, project_name: str) -> None:
        ensure_base_dirs()
        STATE_FILE.write_text(
            json.dumps({"current_project": project_name}, indent=2),
            encoding="utf-8",
        )

    def get_current_project(self) -> Optional[str]:
        if not STATE_FILE.exists():
            return None
        try:
            payload = json.loads(STATE_FILE.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            return None
        return payload.get("current_project")

    def unload_project(self) -> None:
        ensure_base_dirs()
        STATE_FILE.write_text(
            json.dumps({"current_project": None}, indent=2),
            encoding="utf-8",
        )

    def delete_project(self, project_name: str) -> bool:
        path = self.project_dir(project_name)
        if not path.exists():
            return False
        for child in sorted(path.glob("**/*"), reverse=True):
            if child.is_file():
                child.unlink()
            elif child.is_dir():
                child.rmdir()
        path.rmdir()
        return True

    # ------------------------------------------------------------------
    # Project metadata (project.json)
    # ------------------------------------------------------------------

    def set_metadata(self, project_name: str, payload: Dict[str, Any]) -> None:
        meta_path = self.create_or_get_project(project_name) / "project.json"
        meta_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")

    def get_metadata(self, project_name: str) -> Dict[str, Any]:
        meta_path = self.project_dir(project_name) / "project.json"
        if not meta_path.exists():
            return {}
        try:
            return json.loads(meta_path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            return {}

    def source_root(self, project_name: str) -> Optional[Path]:
        """Checkout directory recorded for *project_name* at index time."""
        source = self.get_metadata(project_name).get("source_path")
        return Path(source) if source else None


# ===================================================================
# Snapshot persistence
# ===================================================================

class GraphSnapshotStore(ABC):
    """Persistence port for the latest built graph of each repository."""

    @abstractmethod
    def upsert(self, snapshot: GraphSnapshot) -> None:
        """Insert or replace the snapshot row for ``snapshot.repository_id``."""
        ...

    @abstractmethod
    def get(self, repository_id: str) -> Optional[GraphSnapshot]:
        """Return the stored snapshot, or None if none was persisted."""
        ...

    @abstractmethod
    def delete(self, repository_id: str) -> bool:
        """Drop the stored snapshot. Returns True if a row was removed."""
        ...


class SQLiteSnapshotStore(GraphSnapshotStore):
    """Snapshot store backed by a single SQLite table."""

    def __init__(self, db_path: Path) -> None:
        self.db_path = db_path
        self.conn = sqlite3.connect(str(db_path))
        self.conn.row_factory = sqlite3.Row
        self._init_schema()

    def close(self) -> None:
        self.conn.close()

    def _init_schema(self) -> None:
        self.conn.execute("""
            CREATE TABLE IF NOT EXISTS graph_snapshots (
                repository_id TEXT PRIMARY KEY,
                node_count    INTEGER NOT NULL,
                edge_count    INTEGER NOT NULL,
                graph_data    TEXT NOT NULL,
                built_at      TEXT NOT NULL
            )
        """)
        self.conn.commit()

    def upsert(self, snapshot: GraphSnapshot) -> None:
        self.conn.execute(
            """
            INSERT INTO graph_snapshots (
                repository_id, node_count, edge_count, graph_data, built_at
            ) VALUES (?, ?, ?, ?, ?)
            ON CONFLICT(repository_id) DO UPDATE SET
                node_count = excluded.node_count,
                edge_count = excluded.edge_count,
                graph_data = excluded.graph_data,
                built_at   = excluded.built_at
            """,
            (
                snapshot.repository_id,
                snapshot.node_count,
                snapshot.edge_count,
                snapshot.graph_data,
                snapshot.built_at.isoformat(),
            ),
        )
        self.conn.commit()

    def get(self, repository_id: str) -> Optional[GraphSnapshot]:
        row = self.conn.execute(
            "SELECT * FROM graph_snapshots WHERE repository_id = ?",
            (repository_id,),
        ).fetchone()
        if row is None:
            return None
        return GraphSnapshot(
            repository_id=row["repository_id"],
            node_count=row["node_count"],
            edge_count=row["edge_count"],
            graph_data=row["graph_data"],
            built_at=datetime.fromisoformat(row["built_at"]),
        )

    def delete(self, repository_id: str) -> bool:
        cur = self.conn.execute(
            "DELETE FROM graph_snapshots WHERE repository_id = ?",
            (repository_id,),
        )
        self.conn.commit()
        return cur.rowcount > 0

    def load_graph_data(self, repository_id: str) -> Optional[Dict[str, Any]]:
        """Decoded ``{"nodes": [...], "edges": [...]}`` payload, if stored."""
        snapshot = self.get(repository_id)
        if snapshot is None:
            return None
        try:
            return json.loads(snapshot.graph_data)
        except json.JSONDecodeError:
            logger.warning("Stored graph for %s is not valid JSON", repository_id)
            return None
