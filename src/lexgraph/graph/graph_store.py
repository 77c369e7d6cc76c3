"""Graph Store: in-memory adjacency model for the knowledge graph.

Nodes are keyed by id and indexed by document/section id. Edges are unique per
ordered (source_node_id, target_node_id) pair; `insert_edge_if_absent` makes
the check-then-insert atomic under the store lock.

Output: nodes.parquet, edges.parquet
"""

import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path

from ..errors import GraphConsistencyError
from ..store.tables import frame_to_records, load_table, records_to_frame, save_table
from ..store.types import (
    AuthorityLevel,
    EdgeType,
    GraphEdge,
    GraphNode,
    Jurisdiction,
    NodeType,
    Severity,
    new_id,
)

logger = logging.getLogger(__name__)

NODES_FILE = "nodes.parquet"
EDGES_FILE = "edges.parquet"

_NODE_ENUMS = {
    "node_type": NodeType,
    "jurisdiction": Jurisdiction,
    "authority_level": AuthorityLevel,
}
_EDGE_ENUMS = {"edge_type": EdgeType, "severity": Severity}


@dataclass
class GraphContext:
    """Subgraph around a set of documents, handed to the analysis layer."""
    nodes: list[GraphNode] = field(default_factory=list)
    edges: list[GraphEdge] = field(default_factory=list)
    conflicts: list[GraphEdge] = field(default_factory=list)


class GraphStore:
    """Thread-safe node/edge store with a unique (source, target) constraint."""

    def __init__(self):
        self._nodes: dict[str, GraphNode] = {}
        self._edges: dict[str, GraphEdge] = {}
        # (source_node_id, target_node_id) -> edge id
        self._pairs: dict[tuple[str, str], str] = {}
        self._lock = threading.RLock()

    # =========================================================================
    # Nodes
    # =========================================================================

    def insert_node(self, node: GraphNode) -> GraphNode:
        with self._lock:
            if node.id in self._nodes:
                raise GraphConsistencyError(f"Node already exists: {node.id}")
            self._nodes[node.id] = node
        return node

    def get_node(self, node_id: str) -> GraphNode:
        with self._lock:
            if node_id not in self._nodes:
                raise KeyError(f"Unknown node: {node_id}")
            return self._nodes[node_id]

    def list_nodes(self, node_type: NodeType | None = None) -> list[GraphNode]:
        """Nodes in creation order."""
        with self._lock:
            return [
                n for n in self._nodes.values()
                if node_type is None or n.node_type == node_type
            ]

    def document_nodes(self) -> list[GraphNode]:
        return self.list_nodes(NodeType.DOCUMENT)

    def node_for_document(self, document_id: str) -> GraphNode | None:
        with self._lock:
            for node in self._nodes.values():
                if node.node_type == NodeType.DOCUMENT and node.document_id == document_id:
                    return node
        return None

    def node_for_section(self, section_id: str) -> GraphNode | None:
        with self._lock:
            for node in self._nodes.values():
                if node.node_type == NodeType.SECTION and node.section_id == section_id:
                    return node
        return None

    # =========================================================================
    # Edges
    # =========================================================================

    def edge_exists(self, source_node_id: str, target_node_id: str) -> bool:
        with self._lock:
            return (source_node_id, target_node_id) in self._pairs

    def get_edge(self, source_node_id: str, target_node_id: str) -> GraphEdge | None:
        with self._lock:
            edge_id = self._pairs.get((source_node_id, target_node_id))
            return self._edges[edge_id] if edge_id is not None else None

    def insert_edge(
        self,
        source_node_id: str,
        target_node_id: str,
        edge_type: EdgeType,
        severity: Severity | None = None,
        rationale: str | None = None,
    ) -> GraphEdge:
        """Insert an edge. Both endpoints must exist and the pair must be new.

        Raises:
            GraphConsistencyError: Missing endpoint or duplicate pair
        """
        with self._lock:
            for node_id in (source_node_id, target_node_id):
                if node_id not in self._nodes:
                    raise GraphConsistencyError(f"Edge references unknown node: {node_id}")
            pair = (source_node_id, target_node_id)
            if pair in self._pairs:
                raise GraphConsistencyError(
                    f"Edge already exists: {source_node_id} -> {target_node_id}"
                )
            edge = GraphEdge(
                id=new_id(),
                source_node_id=source_node_id,
                target_node_id=target_node_id,
                edge_type=edge_type,
                severity=severity,
                rationale=rationale,
            )
            self._edges[edge.id] = edge
            self._pairs[pair] = edge.id
        return edge

    def insert_edge_if_absent(
        self,
        source_node_id: str,
        target_node_id: str,
        edge_type: EdgeType,
        severity: Severity | None = None,
        rationale: str | None = None,
    ) -> GraphEdge | None:
        """Insert an edge unless the ordered pair already has one.

        Returns:
            The new edge, or None if the pair was already connected
        """
        with self._lock:
            if (source_node_id, target_node_id) in self._pairs:
                return None
            return self.insert_edge(source_node_id, target_node_id, edge_type, severity, rationale)

    def list_edges(self, edge_type: EdgeType | None = None) -> list[GraphEdge]:
        """Edges in creation order."""
        with self._lock:
            return [
                e for e in self._edges.values()
                if edge_type is None or e.edge_type == edge_type
            ]

    def edges_from(self, node_id: str) -> list[GraphEdge]:
        with self._lock:
            return [e for e in self._edges.values() if e.source_node_id == node_id]

    def edges_to(self, node_id: str) -> list[GraphEdge]:
        with self._lock:
            return [e for e in self._edges.values() if e.target_node_id == node_id]

    # =========================================================================
    # Query
    # =========================================================================

    def context_for_documents(self, document_ids) -> GraphContext:
        """Nodes of the given documents plus every edge touching them.

        Edge endpoints outside those documents are included in `nodes` so the
        context is self-contained.
        """
        document_ids = set(document_ids)
        with self._lock:
            node_ids = {
                n.id for n in self._nodes.values()
                if n.document_id is not None and n.document_id in document_ids
            }
            edges = [
                e for e in self._edges.values()
                if e.source_node_id in node_ids or e.target_node_id in node_ids
            ]
            for edge in edges:
                node_ids.add(edge.source_node_id)
                node_ids.add(edge.target_node_id)
            nodes = [n for n in self._nodes.values() if n.id in node_ids]

        conflicts = [e for e in edges if e.edge_type == EdgeType.CONFLICTS_WITH]
        return GraphContext(nodes=nodes, edges=edges, conflicts=conflicts)

    def stats(self) -> dict[str, int]:
        with self._lock:
            counts = {"nodes": len(self._nodes), "edges": len(self._edges)}
            for edge_type in EdgeType:
                counts[edge_type.value] = sum(
                    1 for e in self._edges.values() if e.edge_type == edge_type
                )
        return counts

    # =========================================================================
    # Purge / Save / Load
    # =========================================================================

    def purge(self) -> None:
        """Delete all edges, then all nodes."""
        with self._lock:
            counts = (len(self._edges), len(self._nodes))
            self._edges.clear()
            self._pairs.clear()
            self._nodes.clear()
        logger.info("Purged %d edges and %d nodes", *counts)

    def save(self, output_dir: Path | str) -> None:
        """Save graph to parquet files."""
        output_dir = Path(output_dir)
        with self._lock:
            nodes_df = records_to_frame(list(self._nodes.values()), GraphNode)
            edges_df = records_to_frame(list(self._edges.values()), GraphEdge)
        save_table(nodes_df, output_dir / NODES_FILE)
        save_table(edges_df, output_dir / EDGES_FILE)

    @classmethod
    def load(cls, input_dir: Path | str) -> "GraphStore":
        """Load graph saved with `save()`. Missing files load empty."""
        input_dir = Path(input_dir)
        store = cls()

        nodes_df = load_table(input_dir / NODES_FILE)
        if nodes_df is not None:
            for node in frame_to_records(nodes_df, GraphNode, _NODE_ENUMS):
                store._nodes[node.id] = node

        edges_df = load_table(input_dir / EDGES_FILE)
        if edges_df is not None:
            for edge in frame_to_records(edges_df, GraphEdge, _EDGE_ENUMS):
                if edge.source_node_id not in store._nodes or edge.target_node_id not in store._nodes:
                    raise GraphConsistencyError(f"Saved edge {edge.id} references a missing node")
                store._edges[edge.id] = edge
                store._pairs[(edge.source_node_id, edge.target_node_id)] = edge.id
        return store
