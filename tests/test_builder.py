"""Tests for dependency graph construction."""

import json
from typing import Optional

from docgraph_cli.builder import GraphBuilder, build_graph
from docgraph_cli.models import EdgeKind, GraphSnapshot, NodeKind, SourceDocument
from docgraph_cli.storage import GraphSnapshotStore


class _FailingSnapshotStore(GraphSnapshotStore):
    def upsert(self, snapshot: GraphSnapshot) -> None:
        raise RuntimeError("database is down")

    def get(self, repository_id: str) -> Optional[GraphSnapshot]:
        return None

    def delete(self, repository_id: str) -> bool:
        return False


def _edge_set(graph):
    by_id = {n.id: n.path for n in graph.nodes}
    return {(by_id[e.source], by_id[e.target], e.kind, e.weight) for e in graph.edges}


def test_scenario_graph(make_store, scenario_files):
    graph = GraphBuilder(make_store(scenario_files)).build("repo")

    assert graph.node_count == 4
    assert graph.edge_count == 2
    assert _edge_set(graph) == {
        ("docs/a.md", "docs/b.md", EdgeKind.REFERENCES, 0.8),
        ("src/x.ts", "src/y.ts", EdgeKind.IMPORTS, 1.0),
    }
    assert graph.metadata["nodeCount"] == 4
    assert graph.metadata["edgeCount"] == 2
    assert "builtAt" in graph.metadata


def test_nodes_are_classified_and_labelled(make_store, scenario_files):
    graph = GraphBuilder(make_store(scenario_files)).build("repo")

    a = graph.node_by_path("docs/a.md")
    assert a.kind == NodeKind.DOC
    assert a.label == "a.md"
    assert a.id == "repo:docs/a.md"
    assert graph.node_by_path("src/x.ts").kind == NodeKind.CODE


def test_documents_annotation_edges(make_store):
    store = make_store({
        "docs/server.md": "This page Documents `src/server.ts` and covers `src/missing.ts`.",
        "src/server.ts": "export {}",
    })
    graph = GraphBuilder(store).build("repo")

    assert _edge_set(graph) == {("docs/server.md", "src/server.ts", EdgeKind.DOCUMENTS, 0.9)}


def test_bare_and_see_references_match_by_suffix(make_store):
    store = make_store({
        "src/util.ts": "/** @see guide.md */ export {}",
        "docs/guide.md": "See [util](util.ts).",
    })
    graph = GraphBuilder(store).build("repo")

    assert _edge_set(graph) == {
        ("src/util.ts", "docs/guide.md", EdgeKind.REFERENCES, 0.8),
        ("docs/guide.md", "src/util.ts", EdgeKind.REFERENCES, 0.8),
    }


def test_unresolved_references_make_no_edges(make_store):
    store = make_store({
        "docs/a.md": "[gone](./gone.md) [ext](https://example.com)",
        "src/x.ts": "import React from 'react'; import z from './z';",
    })
    graph = GraphBuilder(store).build("repo")

    assert graph.node_count == 2
    assert graph.edges == []


def test_empty_content_yields_node_without_edges(make_store):
    graph = GraphBuilder(make_store({"docs/empty.md": "", "docs/none.md": None})).build("repo")

    assert graph.node_count == 2
    assert graph.edge_count == 0


def test_empty_repository_yields_empty_graph(make_store):
    graph = GraphBuilder(make_store({})).build("unknown")

    assert graph.nodes == []
    assert graph.edges == []
    assert graph.metadata["nodeCount"] == 0


def test_cycles_are_built_without_looping(make_store):
    store = make_store({
        "docs/a.md": "describes `src/b.ts`",
        "src/b.ts": "// @see docs/a.md",
    })
    graph = build_graph("repo", store.list_documents("repo"))

    assert graph.edge_count == 2


def test_every_edge_points_at_known_nodes(make_store, doc_chain_files):
    graph = GraphBuilder(make_store(doc_chain_files)).build("repo")
    ids = {n.id for n in graph.nodes}

    assert graph.edges
    for edge in graph.edges:
        assert edge.source in ids
        assert edge.target in ids
        assert 0 < edge.weight <= 1


def test_duplicate_paths_keep_first_document():
    docs = [
        SourceDocument(id="1", path="docs/a.md", content="first"),
        SourceDocument(id="2", path="docs/a.md", content="second"),
    ]
    graph = build_graph("repo", docs)

    assert [n.id for n in graph.nodes] == ["1"]


def test_rebuild_is_idempotent(make_store, doc_chain_files):
    builder = GraphBuilder(make_store(doc_chain_files))
    first = builder.build("repo")
    second = builder.build("repo")

    assert first.node_count == second.node_count
    assert first.edge_count == second.edge_count


def test_snapshot_is_persisted(make_store, scenario_files, temp_snapshot_store):
    GraphBuilder(make_store(scenario_files), temp_snapshot_store).build("repo")

    snapshot = temp_snapshot_store.get("repo")
    assert snapshot is not None
    assert snapshot.node_count == 4
    assert snapshot.edge_count == 2
    payload = json.loads(snapshot.graph_data)
    assert len(payload["nodes"]) == 4
    assert len(payload["edges"]) == 2


def test_persistence_failure_still_returns_graph(make_store, scenario_files, caplog):
    builder = GraphBuilder(make_store(scenario_files), _FailingSnapshotStore())

    with caplog.at_level("WARNING", logger="docgraph_cli.builder"):
        graph = builder.build("repo")

    assert graph.node_count == 4
    assert "Failed to persist dependency graph" in caplog.text
