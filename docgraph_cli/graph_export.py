"""Graph export helpers for Graphviz DOT, Cytoscape JSON and raw JSON.

Exports serialize the built graph as-is. Nothing is pruned or merged.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Callable, Dict

from .models import DependencyGraph, GraphExport, NodeKind

EXPORT_FORMATS = ("dot", "cytoscape", "json")


def to_dot(graph: DependencyGraph) -> str:
    lines = ["digraph DocDeps {", "  rankdir=LR;"]

    for node in graph.nodes:
        shape = "box" if node.kind == NodeKind.CODE else "note"
        lines.append(f'  "{_esc(node.id)}" [label="{_esc(node.label)}" shape={shape}];')

    for edge in graph.edges:
        lines.append(
            f'  "{_esc(edge.source)}" -> "{_esc(edge.target)}" [label="{edge.kind.value}"];'
        )

    lines.append("}")
    return "\n".join(lines)


def to_cytoscape(graph: DependencyGraph) -> str:
    payload = {
        "nodes": [
            {"data": {"id": node.id, "label": node.label, "type": node.kind.value}}
            for node in graph.nodes
        ],
        "edges": [
            {
                "data": {
                    "id": f"e{idx}",
                    "source": edge.source,
                    "target": edge.target,
                    "type": edge.kind.value,
                }
            }
            for idx, edge in enumerate(graph.edges)
        ],
    }
    return json.dumps(payload, indent=2)


def to_json(graph: DependencyGraph) -> str:
    return json.dumps(graph.to_dict(), indent=2)


_RENDERERS: Dict[str, Callable[[DependencyGraph], str]] = {
    "dot": to_dot,
    "cytoscape": to_cytoscape,
    "json": to_json,
}


def export_graph(graph: DependencyGraph, fmt: str = "json") -> GraphExport:
    """Serialize *graph*; unknown formats fall back to raw JSON."""
    renderer = _RENDERERS.get(fmt, to_json)
    return GraphExport(
        format=fmt,
        content=renderer(graph),
        node_count=graph.node_count,
        edge_count=graph.edge_count,
    )


def write_export(export: GraphExport, output_file: Path) -> None:
    output_file.parent.mkdir(parents=True, exist_ok=True)
    output_file.write_text(export.content, encoding="utf-8")


def _esc(text: str) -> str:
    return text.replace("\\", "\\\\").replace('"', '\\"')
