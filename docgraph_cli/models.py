"""Core data models shared by the builder, propagator, detector and exporter."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional


class NodeKind(str, Enum):
    CODE = "code"
    DOC = "doc"
    CONFIG = "config"


class EdgeKind(str, Enum):
    IMPORTS = "imports"
    REFERENCES = "references"
    DOCUMENTS = "documents"
    DEPENDS_ON = "depends-on"


class ImpactType(str, Enum):
    DIRECT = "direct"
    TRANSITIVE = "transitive"


@dataclass
class SourceDocument:
    """A raw artifact as handed over by a document store."""

    id: str
    path: str
    content: Optional[str] = ""


@dataclass
class GraphNode:
    id: str
    kind: NodeKind
    path: str
    label: str
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "id": self.id,
            "type": self.kind.value,
            "path": self.path,
            "label": self.label,
        }
        if self.metadata:
            payload["metadata"] = dict(self.metadata)
        return payload

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "GraphNode":
        return cls(
            id=payload["id"],
            kind=NodeKind(payload["type"]),
            path=payload["path"],
            label=payload.get("label", payload["path"]),
            metadata=dict(payload.get("metadata") or {}),
        )


@dataclass
class GraphEdge:
    source: str
    target: str
    kind: EdgeKind
    weight: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source": self.source,
            "target": self.target,
            "type": self.kind.value,
            "weight": self.weight,
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "GraphEdge":
        return cls(
            source=payload["source"],
            target=payload["target"],
            kind=EdgeKind(payload["type"]),
            weight=float(payload["weight"]),
        )


@dataclass
class DependencyGraph:
    """One immutable build of a repository's artifact graph.

    Nodes are looked up by ``path`` downstream, since extracted references
    are textual paths rather than storage ids.
    """

    repository_id: str
    nodes: List[GraphNode]
    edges: List[GraphEdge]
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self._by_path = {node.path: node for node in self.nodes}
        self._by_id = {node.id: node for node in self.nodes}

    @property
    def node_count(self) -> int:
        return len(self.nodes)

    @property
    def edge_count(self) -> int:
        return len(self.edges)

    def node_by_path(self, path: str) -> Optional[GraphNode]:
        return self._by_path.get(path)

    def node_by_id(self, node_id: str) -> Optional[GraphNode]:
        return self._by_id.get(node_id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "repositoryId": self.repository_id,
            "nodes": [node.to_dict() for node in self.nodes],
            "edges": [edge.to_dict() for edge in self.edges],
            "metadata": dict(self.metadata),
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "DependencyGraph":
        return cls(
            repository_id=payload.get("repositoryId", ""),
            nodes=[GraphNode.from_dict(n) for n in payload.get("nodes", [])],
            edges=[GraphEdge.from_dict(e) for e in payload.get("edges", [])],
            metadata=dict(payload.get("metadata") or {}),
        )


@dataclass
class AffectedDoc:
    path: str
    impact_type: ImpactType
    reason: str
    confidence: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": self.path,
            "impactType": self.impact_type.value,
            "reason": self.reason,
            "confidence": self.confidence,
        }


@dataclass
class BlastRadius:
    changed_files: List[str]
    affected_docs: List[AffectedDoc]
    total_impact: float
    pr_number: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "changedFiles": list(self.changed_files),
            "affectedDocs": [doc.to_dict() for doc in self.affected_docs],
            "totalImpact": self.total_impact,
        }
        if self.pr_number is not None:
            payload["prNumber"] = self.pr_number
        return payload


@dataclass
class BrokenReference:
    source: str
    target: str
    type: str

    def to_dict(self) -> Dict[str, str]:
        return {"source": self.source, "target": self.target, "type": self.type}


@dataclass
class GraphExport:
    format: str
    content: str
    node_count: int
    edge_count: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "format": self.format,
            "content": self.content,
            "nodeCount": self.node_count,
            "edgeCount": self.edge_count,
        }


@dataclass
class NodeDependencies:
    depends_on: List[GraphNode]
    depended_by: List[GraphNode]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dependsOn": [node.to_dict() for node in self.depends_on],
            "dependedBy": [node.to_dict() for node in self.depended_by],
        }


@dataclass
class GraphSnapshot:
    """Persisted form of the latest build for one repository."""

    repository_id: str
    node_count: int
    edge_count: int
    graph_data: str
    built_at: datetime
