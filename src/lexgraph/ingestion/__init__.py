"""Ingestion stages: parsing, chunking, embedding and the demo corpus.

The orchestrator lives in `lexgraph.ingestion.pipeline` and is re-exported
from the top-level `lexgraph` package.
"""

from .chunker import ChunkConfig, TextChunk, chunk_text, estimate_token_count, normalize_whitespace
from .embedder import EMBEDDING_DIMENSIONS, checksum, cosine_similarity, embed, embed_many, project_to_2d
from .parser import ParsedDocument, ParsedSection, parse_document_content
from .sample_data import DEMO_DOCUMENTS

__all__ = [
    "ChunkConfig",
    "TextChunk",
    "chunk_text",
    "estimate_token_count",
    "normalize_whitespace",
    "EMBEDDING_DIMENSIONS",
    "checksum",
    "cosine_similarity",
    "embed",
    "embed_many",
    "project_to_2d",
    "ParsedDocument",
    "ParsedSection",
    "parse_document_content",
    "DEMO_DOCUMENTS",
]
