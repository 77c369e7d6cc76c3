"""Tests for graph store module."""

import threading

import pytest

from lexgraph.errors import GraphConsistencyError
from lexgraph.graph.graph_store import GraphStore
from lexgraph.store.types import (
    AuthorityLevel,
    EdgeType,
    GraphNode,
    Jurisdiction,
    NodeType,
    Severity,
)


def make_node(node_id: str, document_id: str, node_type: NodeType = NodeType.DOCUMENT, **kwargs) -> GraphNode:
    return GraphNode(
        id=node_id,
        label=kwargs.pop("label", node_id),
        node_type=node_type,
        jurisdiction=kwargs.pop("jurisdiction", Jurisdiction.STATE),
        authority_level=kwargs.pop("authority_level", AuthorityLevel.STATUTE),
        document_id=document_id,
        **kwargs,
    )


@pytest.fixture
def graph():
    graph = GraphStore()
    graph.insert_node(make_node("a", "doc-a"))
    graph.insert_node(make_node("b", "doc-b"))
    graph.insert_node(make_node("a1", "doc-a", NodeType.SECTION, section_id="sec-a1", citation="§ 1"))
    return graph


class TestNodes:
    """Test suite for node operations."""

    def test_document_nodes(self, graph):
        assert [n.id for n in graph.document_nodes()] == ["a", "b"]

    def test_lookup_by_document_and_section(self, graph):
        assert graph.node_for_document("doc-a").id == "a"
        assert graph.node_for_section("sec-a1").id == "a1"
        assert graph.node_for_document("doc-z") is None

    def test_duplicate_node_id(self, graph):
        with pytest.raises(GraphConsistencyError):
            graph.insert_node(make_node("a", "doc-a"))


class TestEdges:
    """Test suite for edge operations."""

    def test_insert_edge(self, graph):
        edge = graph.insert_edge("a", "b", EdgeType.DERIVES_AUTHORITY_FROM)

        assert graph.edge_exists("a", "b")
        assert not graph.edge_exists("b", "a")
        assert graph.get_edge("a", "b") == edge

    def test_missing_endpoint(self, graph):
        with pytest.raises(GraphConsistencyError):
            graph.insert_edge("a", "nope", EdgeType.AMENDS)

    def test_duplicate_pair(self, graph):
        graph.insert_edge("a", "b", EdgeType.DERIVES_AUTHORITY_FROM)
        with pytest.raises(GraphConsistencyError):
            graph.insert_edge("a", "b", EdgeType.CONFLICTS_WITH)

    def test_insert_if_absent(self, graph):
        first = graph.insert_edge_if_absent("a", "b", EdgeType.CONFLICTS_WITH, Severity.HIGH, "why")
        second = graph.insert_edge_if_absent("a", "b", EdgeType.DERIVES_AUTHORITY_FROM)

        assert first is not None
        assert second is None
        assert len(graph.list_edges()) == 1
        assert graph.get_edge("a", "b").edge_type == EdgeType.CONFLICTS_WITH

    def test_insert_if_absent_concurrent(self, graph):
        """Concurrent inserts for one pair create exactly one edge."""
        barrier = threading.Barrier(8)

        def worker():
            barrier.wait()
            graph.insert_edge_if_absent("b", "a", EdgeType.DERIVES_AUTHORITY_FROM)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(graph.list_edges()) == 1

    def test_edges_from_and_to(self, graph):
        graph.insert_edge("a", "a1", EdgeType.AUTHORIZES)
        graph.insert_edge("b", "a", EdgeType.DERIVES_AUTHORITY_FROM)

        assert [e.target_node_id for e in graph.edges_from("a")] == ["a1"]
        assert [e.source_node_id for e in graph.edges_to("a")] == ["b"]


class TestContext:
    """Test suite for context_for_documents."""

    def test_context(self, graph):
        graph.insert_node(make_node("c", "doc-c"))
        graph.insert_edge("a", "a1", EdgeType.AUTHORIZES)
        graph.insert_edge("a", "b", EdgeType.CONFLICTS_WITH, Severity.HIGH, "Conflict.")
        graph.insert_edge("c", "b", EdgeType.DERIVES_AUTHORITY_FROM)

        context = graph.context_for_documents(["doc-a"])

        assert {n.id for n in context.nodes} == {"a", "a1", "b"}
        assert len(context.edges) == 2
        assert [e.edge_type for e in context.conflicts] == [EdgeType.CONFLICTS_WITH]

    def test_empty(self, graph):
        context = graph.context_for_documents([])
        assert context.nodes == [] and context.edges == [] and context.conflicts == []


class TestPersistence:
    """Test suite for purge and save/load."""

    def test_save_load_round_trip(self, graph, tmp_path):
        graph.insert_edge("a", "a1", EdgeType.AUTHORIZES)
        graph.insert_edge("a", "b", EdgeType.CONFLICTS_WITH, Severity.HIGH, "Conflict.")

        graph.save(tmp_path)
        loaded = GraphStore.load(tmp_path)

        assert loaded.list_nodes() == graph.list_nodes()
        assert loaded.list_edges() == graph.list_edges()
        assert loaded.edge_exists("a", "b")
        assert loaded.get_edge("a", "b").severity == Severity.HIGH

    def test_purge(self, graph):
        graph.insert_edge("a", "b", EdgeType.AMENDS)
        graph.purge()

        assert graph.list_nodes() == []
        assert graph.list_edges() == []
        assert not graph.edge_exists("a", "b")

    def test_stats(self, graph):
        graph.insert_edge("a", "a1", EdgeType.AUTHORIZES)
        stats = graph.stats()

        assert stats["nodes"] == 3
        assert stats["edges"] == 1
        assert stats["AUTHORIZES"] == 1
        assert stats["CONFLICTS_WITH"] == 0
