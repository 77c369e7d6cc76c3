"""Graph Builder: nodes and edges for one newly ingested document.

Steps (progress %):
    1. document node                                              (5 -> 15)
    2. section nodes + AUTHORIZES document -> section             (-> 40)
    3. other document nodes; AMENDS for listed titles             (-> 50)
    4. DERIVES_AUTHORITY_FROM current -> higher authority         (-> 70)
    5. CONFLICTS_WITH current -> conflicting document             (-> 100)

Conflicts are matched before derivation: a pair that matches a conflict rule
gets CONFLICTS_WITH rather than DERIVES_AUTHORITY_FROM. Nodes are
get-or-create and edges are insert-if-absent, so rebuilding a document adds
nothing. Writes are not rolled back if a later step fails.
"""

import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field

from ..store.types import (
    Document,
    EdgeType,
    GraphEdge,
    GraphNode,
    NodeType,
    Section,
    new_id,
)
from .graph_store import GraphStore
from .rules import DEFAULT_CONFLICT_RULES, ConflictRule, derives_authority_from, match_conflict

logger = logging.getLogger(__name__)


@dataclass
class GraphBuildResult:
    """Nodes and edges created by one build (pre-existing ones excluded)."""
    document_node: GraphNode
    nodes: list[GraphNode] = field(default_factory=list)
    edges: list[GraphEdge] = field(default_factory=list)

    def edges_of_type(self, edge_type: EdgeType) -> list[GraphEdge]:
        return [e for e in self.edges if e.edge_type == edge_type]


class GraphBuilder:
    """Build knowledge-graph nodes and edges for documents as they arrive."""

    def __init__(
        self,
        graph: GraphStore,
        conflict_rules: Sequence[ConflictRule] = DEFAULT_CONFLICT_RULES,
        match_policy: str = "last",
    ):
        """Initialize graph builder.

        Args:
            graph: Store receiving nodes and edges
            conflict_rules: Rules evaluated in order for each document pair
            match_policy: "last" or "first" matching conflict rule wins
        """
        if match_policy not in ("last", "first"):
            raise ValueError(f"Unknown conflict match policy: {match_policy!r}")
        self.graph = graph
        self.conflict_rules = tuple(conflict_rules)
        self.match_policy = match_policy

    def build(
        self,
        document: Document,
        sections: Sequence[Section],
        amends: Iterable[str] = (),
        on_progress: Callable[[int], None] | None = None,
    ) -> GraphBuildResult:
        """Run the five build steps for one document.

        Args:
            document: Document just stored
            sections: Its sections
            amends: Titles of documents this one amends
            on_progress: Called with a percentage after each step

        Returns:
            GraphBuildResult with the newly created nodes and edges
        """
        report = on_progress or (lambda _progress: None)
        logger.info("Building knowledge graph for: %s", document.title)
        report(5)

        # Step 1: document node
        doc_node, created = self._document_node(document)
        result = GraphBuildResult(document_node=doc_node)
        if created:
            result.nodes.append(doc_node)
        report(15)

        # Step 2: section nodes and AUTHORIZES edges
        for section in sections:
            section_node, created = self._section_node(document, section)
            if created:
                result.nodes.append(section_node)
            self._add_edge(result, doc_node, section_node, EdgeType.AUTHORIZES)
        logger.debug("Document %s has %d section nodes", document.id, len(sections))
        report(40)

        # Step 3: cross-document comparison set
        other_nodes = [n for n in self.graph.document_nodes() if n.id != doc_node.id]
        logger.debug("Comparing against %d existing document nodes", len(other_nodes))

        amended_titles = set(amends)
        for other in other_nodes:
            if other.label in amended_titles:
                self._add_edge(result, doc_node, other, EdgeType.AMENDS)
        report(50)

        conflicts: dict[str, ConflictRule] = {}
        for other in other_nodes:
            rule = match_conflict(
                self.conflict_rules,
                document.title,
                document.jurisdiction,
                other.label,
                other.jurisdiction,
                policy=self.match_policy,
            )
            if rule is not None:
                conflicts[other.id] = rule

        # Step 4: authority derivation
        for other in other_nodes:
            if other.id in conflicts:
                continue
            if derives_authority_from(
                document.jurisdiction, document.authority_level,
                other.jurisdiction, other.authority_level,
            ):
                edge = self._add_edge(result, doc_node, other, EdgeType.DERIVES_AUTHORITY_FROM)
                if edge is not None:
                    logger.debug("DERIVES_AUTHORITY_FROM: %s -> %s", document.title, other.label)
        report(70)

        # Step 5: conflicts
        for other in other_nodes:
            rule = conflicts.get(other.id)
            if rule is None:
                continue
            edge = self._add_edge(
                result, doc_node, other, EdgeType.CONFLICTS_WITH,
                severity=rule.severity, rationale=rule.rationale,
            )
            if edge is not None:
                logger.info(
                    "Conflict detected (%s rule): %s <-> %s", rule.name, document.title, other.label
                )
        report(100)

        logger.info(
            "Graph build complete for %s: %d new nodes, %d new edges",
            document.title, len(result.nodes), len(result.edges),
        )
        return result

    # =========================================================================
    # Helpers
    # =========================================================================

    def _document_node(self, document: Document) -> tuple[GraphNode, bool]:
        existing = self.graph.node_for_document(document.id)
        if existing is not None:
            return existing, False
        node = GraphNode(
            id=new_id(),
            label=document.title,
            node_type=NodeType.DOCUMENT,
            jurisdiction=document.jurisdiction,
            authority_level=document.authority_level,
            effective_from=document.effective_from,
            document_id=document.id,
        )
        return self.graph.insert_node(node), True

    def _section_node(self, document: Document, section: Section) -> tuple[GraphNode, bool]:
        existing = self.graph.node_for_section(section.id)
        if existing is not None:
            return existing, False
        node = GraphNode(
            id=new_id(),
            label=section.heading,
            node_type=NodeType.SECTION,
            jurisdiction=document.jurisdiction,
            authority_level=document.authority_level,
            citation=section.citation,
            effective_from=document.effective_from,
            document_id=document.id,
            section_id=section.id,
        )
        return self.graph.insert_node(node), True

    def _add_edge(
        self,
        result: GraphBuildResult,
        source: GraphNode,
        target: GraphNode,
        edge_type: EdgeType,
        **kwargs,
    ) -> GraphEdge | None:
        edge = self.graph.insert_edge_if_absent(source.id, target.id, edge_type, **kwargs)
        if edge is not None:
            result.edges.append(edge)
        return edge
