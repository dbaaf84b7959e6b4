"""Engine facade exposing graph operations to API handlers and jobs."""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from .blast_radius import compute_blast_radius
from .broken_refs import detect_broken_references
from .builder import GraphBuilder
from .documents import DocumentStore
from .graph_export import export_graph
from .models import (
    BlastRadius,
    BrokenReference,
    DependencyGraph,
    GraphExport,
    GraphNode,
    NodeDependencies,
)
from .storage import GraphSnapshotStore

logger = logging.getLogger(__name__)


def node_dependencies(graph: DependencyGraph, node_path: str) -> NodeDependencies:
    """Direct neighbours of the node at *node_path*, in edge order."""
    target = graph.node_by_path(node_path)
    if target is None:
        return NodeDependencies(depends_on=[], depended_by=[])

    depends_on: List[GraphNode] = []
    depended_by: List[GraphNode] = []
    for edge in graph.edges:
        if edge.source == target.id:
            node = graph.node_by_id(edge.target)
            if node is not None:
                depends_on.append(node)
        if edge.target == target.id:
            node = graph.node_by_id(edge.source)
            if node is not None:
                depended_by.append(node)
    return NodeDependencies(depends_on=depends_on, depended_by=depended_by)


class DocGraphEngine:
    """Stateless entry point; every call rebuilds the graph from scratch."""

    def __init__(
        self,
        document_store: DocumentStore,
        snapshot_store: Optional[GraphSnapshotStore] = None,
    ):
        self.document_store = document_store
        self.builder = GraphBuilder(document_store, snapshot_store)

    def build(self, repository_id: str) -> DependencyGraph:
        return self.builder.build(repository_id)

    def compute_blast_radius(
        self,
        repository_id: str,
        changed_files: Iterable[str],
        pr_number: Optional[int] = None,
    ) -> BlastRadius:
        changed_files = list(changed_files)
        logger.info("Computing blast radius for %s (%d files)", repository_id, len(changed_files))
        graph = self.build(repository_id)
        return compute_blast_radius(graph, changed_files, pr_number=pr_number)

    def detect_broken_references(self, repository_id: str) -> List[BrokenReference]:
        logger.info("Detecting broken references for %s", repository_id)
        return detect_broken_references(self.document_store.list_documents(repository_id))

    def export(self, repository_id: str, fmt: str = "json") -> GraphExport:
        logger.info("Exporting dependency graph for %s as %s", repository_id, fmt)
        return export_graph(self.build(repository_id), fmt)

    def get_node_dependencies(self, repository_id: str, node_path: str) -> NodeDependencies:
        logger.info("Getting node dependencies for %s in %s", node_path, repository_id)
        return node_dependencies(self.build(repository_id), node_path)
