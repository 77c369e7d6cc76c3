"""Knowledge graph of legal authority.

Modules:
- rules: jurisdiction/authority ranks, derivation predicate, conflict rules
- graph_store: nodes and edges, unique per (source, target) pair
- graph_builder: AUTHORIZES, DERIVES_AUTHORITY_FROM, CONFLICTS_WITH, AMENDS edges
"""

from .graph_builder import GraphBuilder, GraphBuildResult
from .graph_store import GraphContext, GraphStore
from .rules import (
    AUTHORITY_RANK,
    DEFAULT_CONFLICT_RULES,
    JURISDICTION_RANK,
    RENTAL_RULE,
    ZONING_RULE,
    ConflictRule,
    derives_authority_from,
    match_conflict,
)

__all__ = [
    "GraphBuilder",
    "GraphBuildResult",
    "GraphContext",
    "GraphStore",
    "AUTHORITY_RANK",
    "DEFAULT_CONFLICT_RULES",
    "JURISDICTION_RANK",
    "RENTAL_RULE",
    "ZONING_RULE",
    "ConflictRule",
    "derives_authority_from",
    "match_conflict",
]
