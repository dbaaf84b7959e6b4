"""Document store adapters feeding raw artifacts into the graph builder.

The builder only depends on :class:`DocumentStore`. Two implementations
ship with the package:

- :class:`InMemoryDocumentStore` for callers that already hold content
  (API handlers, background jobs, tests).
- :class:`FilesystemDocumentStore` which walks a checked-out project
  directory, used by the CLI.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Set

from . import config
from .models import SourceDocument

logger = logging.getLogger(__name__)


class DocumentStore(ABC):
    """Source of the complete current document set for a repository."""

    @abstractmethod
    def list_documents(self, repository_id: str) -> List[SourceDocument]:
        """Return every document of *repository_id*; ``[]`` if unknown."""
        ...


class InMemoryDocumentStore(DocumentStore):
    """Documents held in memory, keyed by repository id."""

    def __init__(self, repositories: Optional[Mapping[str, Iterable[SourceDocument]]] = None) -> None:
        self._repositories: Dict[str, List[SourceDocument]] = {
            repo_id: list(docs) for repo_id, docs in (repositories or {}).items()
        }

    def add(self, repository_id: str, path: str, content: Optional[str], doc_id: Optional[str] = None) -> SourceDocument:
        docs = self._repositories.setdefault(repository_id, [])
        doc = SourceDocument(id=doc_id or f"{repository_id}:{path}", path=path, content=content)
        docs.append(doc)
        return doc

    def list_documents(self, repository_id: str) -> List[SourceDocument]:
        return list(self._repositories.get(repository_id, []))


class FilesystemDocumentStore(DocumentStore):
    """Reads every text file under a repository's root directory.

    Args:
        resolve_root: Maps a repository id to its checkout directory, or
            ``None`` when the repository is unknown.
        max_file_bytes: Files larger than this are skipped.
        skip_dirs: Directory names never descended into.
    """

    def __init__(
        self,
        resolve_root: Callable[[str], Optional[Path]],
        max_file_bytes: Optional[int] = None,
        skip_dirs: Optional[Set[str]] = None,
    ) -> None:
        self.resolve_root = resolve_root
        self.max_file_bytes = max_file_bytes or config.MAX_FILE_BYTES
        self.skip_dirs = skip_dirs if skip_dirs is not None else config.SKIP_DIRS | config.EXTRA_SKIP_DIRS

    @classmethod
    def for_directory(cls, repository_id: str, root: Path, **kwargs) -> "FilesystemDocumentStore":
        root = root.resolve()
        return cls(lambda repo_id: root if repo_id == repository_id else None, **kwargs)

    def list_documents(self, repository_id: str) -> List[SourceDocument]:
        root = self.resolve_root(repository_id)
        if root is None or not root.is_dir():
            logger.debug("No source directory for repository %s", repository_id)
            return []

        documents: List[SourceDocument] = []
        for file_path in sorted(root.rglob("*")):
            rel_parts = file_path.relative_to(root).parts
            if any(part in self.skip_dirs for part in rel_parts[:-1]):
                continue
            if not file_path.is_file():
                continue
            content = self._read_text(file_path)
            if content is None:
                continue
            rel_path = "/".join(rel_parts)
            documents.append(SourceDocument(id=f"file:{rel_path}", path=rel_path, content=content))

        logger.debug("Loaded %d documents for %s from %s", len(documents), repository_id, root)
        return documents

    def _read_text(self, file_path: Path) -> Optional[str]:
        try:
            if file_path.stat().st_size > self.max_file_bytes:
                logger.debug("Skipping oversized file %s", file_path)
                return None
            return file_path.read_bytes().decode("utf-8")
        except UnicodeDecodeError:
            logger.debug("Skipping non-text file %s", file_path)
            return None
        except OSError as exc:
            logger.debug("Skipping unreadable file %s: %s", file_path, exc)
            return None
