"""Legal authority knowledge graph ingestion.

Legal documents go through four stages (raw capture, versioned storage,
chunking + embedding, knowledge-graph construction) into stores that annotate
the authority hierarchy and flag cross-jurisdiction conflicts.
"""

from .config import PipelineConfig
from .errors import (
    DuplicateInputError,
    GraphConsistencyError,
    LexGraphError,
    ParseError,
    StageExecutionError,
)
from .ingestion.pipeline import (
    BulkIngestionSummary,
    IngestionContext,
    IngestionPipeline,
    IngestionResult,
    IngestionStatus,
    PipelineCallbacks,
    SourceItem,
)

__version__ = "0.1.0"

__all__ = [
    "PipelineConfig",
    "DuplicateInputError",
    "GraphConsistencyError",
    "LexGraphError",
    "ParseError",
    "StageExecutionError",
    "BulkIngestionSummary",
    "IngestionContext",
    "IngestionPipeline",
    "IngestionResult",
    "IngestionStatus",
    "PipelineCallbacks",
    "SourceItem",
]
