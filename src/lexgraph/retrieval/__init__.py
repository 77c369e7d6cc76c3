"""Chunk index and keyword retrieval."""

from .keywords import TOPIC_KEYWORDS, extract_keywords
from .vector_index import ChunkFilter, VectorIndex

__all__ = [
    "TOPIC_KEYWORDS",
    "extract_keywords",
    "ChunkFilter",
    "VectorIndex",
]
