"""Build the documentation dependency graph for one repository.

Construction is a linear pass over the document set: one node per
document, then edges for every extracted reference that lands on a known
path. Cycles between artifacts are therefore harmless here.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional, Set

from .classifier import classify
from .documents import DocumentStore
from .extractor import extract_references, match_import, match_reference
from .models import (
    DependencyGraph,
    EdgeKind,
    GraphEdge,
    GraphNode,
    GraphSnapshot,
    SourceDocument,
)
from .storage import GraphSnapshotStore

logger = logging.getLogger(__name__)

EDGE_WEIGHTS: Dict[EdgeKind, float] = {
    EdgeKind.IMPORTS: 1.0,
    EdgeKind.DOCUMENTS: 0.9,
    EdgeKind.REFERENCES: 0.8,
}


def build_graph(repository_id: str, documents: List[SourceDocument]) -> DependencyGraph:
    """Turn a document set into a :class:`DependencyGraph` (no I/O)."""
    nodes: List[GraphNode] = []
    node_map: Dict[str, GraphNode] = {}
    sources: List[SourceDocument] = []

    for doc in documents:
        if doc.path in node_map:
            logger.debug("Duplicate path %s in %s, keeping first", doc.path, repository_id)
            continue
        node = GraphNode(
            id=doc.id,
            kind=classify(doc.path),
            path=doc.path,
            label=doc.path.rsplit("/", 1)[-1] or doc.path,
        )
        nodes.append(node)
        node_map[doc.path] = node
        sources.append(doc)

    known_paths: Set[str] = set(node_map)
    ordered_paths = [node.path for node in nodes]
    edges: List[GraphEdge] = []
    annotations: Dict[str, List[str]] = {}

    for doc in sources:
        source_id = node_map[doc.path].id
        refs = extract_references(doc.path, doc.content)
        annotations[doc.path] = refs.annotations

        for target in refs.imports:
            matched = match_import(target, known_paths)
            if matched:
                edges.append(_edge(source_id, node_map[matched].id, EdgeKind.IMPORTS))

        for ref in refs.doc_references:
            matched = match_reference(ref, doc.path, known_paths, ordered_paths)
            if matched:
                edges.append(_edge(source_id, node_map[matched].id, EdgeKind.REFERENCES))

    # Explicit "documents `path`" declarations, matched exactly.
    for doc in sources:
        source_id = node_map[doc.path].id
        for target in annotations[doc.path]:
            node = node_map.get(target)
            if node is not None:
                edges.append(_edge(source_id, node.id, EdgeKind.DOCUMENTS))

    return DependencyGraph(
        repository_id=repository_id,
        nodes=nodes,
        edges=edges,
        metadata={
            "builtAt": datetime.now(timezone.utc).isoformat(),
            "nodeCount": len(nodes),
            "edgeCount": len(edges),
        },
    )


def _edge(source: str, target: str, kind: EdgeKind) -> GraphEdge:
    return GraphEdge(source=source, target=target, kind=kind, weight=EDGE_WEIGHTS[kind])


class GraphBuilder:
    """Fetches documents, builds the graph and caches a snapshot."""

    def __init__(
        self,
        document_store: DocumentStore,
        snapshot_store: Optional[GraphSnapshotStore] = None,
    ) -> None:
        self.document_store = document_store
        self.snapshot_store = snapshot_store

    def build(self, repository_id: str) -> DependencyGraph:
        logger.info("Building dependency graph for %s", repository_id)
        documents = self.document_store.list_documents(repository_id)
        graph = build_graph(repository_id, documents)
        self._persist(graph)
        logger.info(
            "Graph built for %s: %d nodes, %d edges",
            repository_id, graph.node_count, graph.edge_count,
        )
        return graph

    def _persist(self, graph: DependencyGraph) -> None:
        """Best-effort snapshot upsert; failures never reach the caller."""
        if self.snapshot_store is None:
            return
        snapshot = GraphSnapshot(
            repository_id=graph.repository_id,
            node_count=graph.node_count,
            edge_count=graph.edge_count,
            graph_data=json.dumps({
                "nodes": [node.to_dict() for node in graph.nodes],
                "edges": [edge.to_dict() for edge in graph.edges],
            }),
            built_at=datetime.fromisoformat(graph.metadata["builtAt"]),
        )
        try:
            self.snapshot_store.upsert(snapshot)
        except Exception as exc:
            logger.warning(
                "Failed to persist dependency graph for %s: %s",
                graph.repository_id, exc,
            )
