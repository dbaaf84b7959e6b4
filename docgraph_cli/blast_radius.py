"""Blast-radius propagation from changed files to affected documentation.

Depth is counted from the change. Docs pointing straight at a changed file
are depth 1 and get a fixed confidence. Propagation then walks the same
"who points at me" direction outward from those docs, with confidence
decaying per level down to a floor. Code and config nodes carry
reachability but are never reported.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Dict, Iterable, List, Optional, Set, Tuple

from .models import (
    AffectedDoc,
    BlastRadius,
    DependencyGraph,
    EdgeKind,
    ImpactType,
    NodeKind,
)

logger = logging.getLogger(__name__)

DIRECT_CONFIDENCE = 0.95
MAX_DEPTH = 4
DECAY_BASE = 0.9
DECAY_STEP = 0.15
CONFIDENCE_FLOOR = 0.3

ReverseAdjacency = Dict[str, List[Tuple[str, EdgeKind]]]


def transitive_confidence(depth: int) -> float:
    return round(max(CONFIDENCE_FLOOR, DECAY_BASE - depth * DECAY_STEP), 2)


def build_reverse_adjacency(graph: DependencyGraph) -> ReverseAdjacency:
    """Map each node id to the ``(source id, edge kind)`` pairs pointing at it."""
    reverse: ReverseAdjacency = {}
    for edge in graph.edges:
        reverse.setdefault(edge.target, []).append((edge.source, edge.kind))
    return reverse


def compute_blast_radius(
    graph: DependencyGraph,
    changed_files: Iterable[str],
    pr_number: Optional[int] = None,
) -> BlastRadius:
    changed_files = list(changed_files)
    reverse = build_reverse_adjacency(graph)

    changed_ids: List[str] = []
    for path in changed_files:
        node = graph.node_by_path(path)
        if node is not None and node.id not in changed_ids:
            changed_ids.append(node.id)
    changed_set = set(changed_ids)

    direct: Dict[str, AffectedDoc] = {}
    for node_id in changed_ids:
        for source_id, kind in reverse.get(node_id, []):
            node = graph.node_by_id(source_id)
            if node is None or node.kind != NodeKind.DOC:
                continue
            if source_id in changed_set or source_id in direct:
                continue
            direct[source_id] = AffectedDoc(
                path=node.path,
                impact_type=ImpactType.DIRECT,
                reason=f"Directly {kind.value} changed file",
                confidence=DIRECT_CONFIDENCE,
            )

    transitive = _propagate(graph, reverse, changed_set, direct)
    affected = list(direct.values()) + transitive
    total = round(sum(doc.confidence for doc in affected), 2)

    logger.info(
        "Blast radius for %s: %d changed, %d affected (%d direct)",
        graph.repository_id, len(changed_files), len(affected), len(direct),
    )
    return BlastRadius(
        changed_files=changed_files,
        affected_docs=affected,
        total_impact=total,
        pr_number=pr_number,
    )


def _propagate(
    graph: DependencyGraph,
    reverse: ReverseAdjacency,
    changed_ids: Set[str],
    direct: Dict[str, AffectedDoc],
) -> List[AffectedDoc]:
    visited: Set[str] = set(changed_ids) | set(direct)
    queue = deque((node_id, 1) for node_id in direct)
    found: List[AffectedDoc] = []

    while queue:
        current, depth = queue.popleft()
        if depth >= MAX_DEPTH:
            continue
        for source_id, _kind in reverse.get(current, []):
            if source_id in visited:
                continue
            visited.add(source_id)
            next_depth = depth + 1
            node = graph.node_by_id(source_id)
            if node is not None and node.kind == NodeKind.DOC:
                found.append(AffectedDoc(
                    path=node.path,
                    impact_type=ImpactType.TRANSITIVE,
                    reason=f"Transitively affected (depth {next_depth})",
                    confidence=transitive_confidence(next_depth),
                ))
            queue.append((source_id, next_depth))
    return found
