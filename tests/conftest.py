"""Pytest configuration and fixtures for DocGraph CLI tests."""

import shutil
import tempfile
from pathlib import Path
from typing import Callable, Dict, Generator, Optional

import pytest

from docgraph_cli.documents import InMemoryDocumentStore
from docgraph_cli.storage import ProjectManager, SQLiteSnapshotStore


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    tmp = Path(tempfile.mkdtemp())
    yield tmp
    shutil.rmtree(tmp, ignore_errors=True)


@pytest.fixture
def sample_repo_path() -> Path:
    """Get path to the sample repository checkout."""
    return Path(__file__).parent / "fixtures" / "sample_repo"


@pytest.fixture
def temp_project_manager(temp_dir: Path, monkeypatch) -> ProjectManager:
    """Create a ProjectManager with temporary storage."""
    memory_dir = temp_dir / "memory"
    state_file = temp_dir / "state.json"

    # Patch both config AND storage modules (storage imports at module load)
    monkeypatch.setattr("docgraph_cli.config.BASE_DIR", temp_dir)
    monkeypatch.setattr("docgraph_cli.config.MEMORY_DIR", memory_dir)
    monkeypatch.setattr("docgraph_cli.config.STATE_FILE", state_file)
    monkeypatch.setattr("docgraph_cli.storage.MEMORY_DIR", memory_dir)
    monkeypatch.setattr("docgraph_cli.storage.STATE_FILE", state_file)

    return ProjectManager()


@pytest.fixture
def temp_snapshot_store(temp_dir: Path) -> Generator[SQLiteSnapshotStore, None, None]:
    """Create a SQLiteSnapshotStore in a temporary directory."""
    store = SQLiteSnapshotStore(temp_dir / "graph.db")
    yield store
    store.close()


@pytest.fixture
def make_store() -> Callable[..., InMemoryDocumentStore]:
    """Factory building an in-memory document store from ``{path: content}``."""

    def _make(files: Dict[str, Optional[str]], repository_id: str = "repo") -> InMemoryDocumentStore:
        store = InMemoryDocumentStore()
        for path, content in files.items():
            store.add(repository_id, path, content)
        return store

    return _make


@pytest.fixture
def scenario_files() -> Dict[str, str]:
    """Two docs and two code files with one link and one import."""
    return {
        "docs/a.md": "# A\n\n[see b](./b.md)\n",
        "docs/b.md": "# B\n",
        "src/x.ts": "import {y} from './y'\n\nexport const x = y;\n",
        "src/y.ts": "export const y = 1;\n",
    }


@pytest.fixture
def doc_chain_files() -> Dict[str, str]:
    """A code file documented by d1, with d2..d5 each linking the previous doc."""
    return {
        "src/core.ts": "export const core = true;\n",
        "docs/d1.md": "This page documents `src/core.ts`.\n",
        "docs/d2.md": "Builds on [d1](./d1.md).\n",
        "docs/d3.md": "Builds on [d2](./d2.md).\n",
        "docs/d4.md": "Builds on [d3](./d3.md).\n",
        "docs/d5.md": "Builds on [d4](./d4.md).\n",
    }
