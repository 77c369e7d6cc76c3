"""Record types, blob storage and the versioned document store."""

from .blob_store import BlobRef, BlobStore, FileBlobStore, InMemoryBlobStore
from .document_store import DocumentStore
from .types import (
    SCHEMA_VERSION,
    AuthorityLevel,
    Chunk,
    ChunkMetadata,
    CorpusSource,
    Document,
    DocumentVersion,
    EdgeType,
    GraphEdge,
    GraphNode,
    Jurisdiction,
    NodeType,
    Section,
    SectionVersion,
    Severity,
    SourceObject,
    to_record,
)

__all__ = [
    "BlobRef",
    "BlobStore",
    "FileBlobStore",
    "InMemoryBlobStore",
    "DocumentStore",
    "SCHEMA_VERSION",
    "AuthorityLevel",
    "Chunk",
    "ChunkMetadata",
    "CorpusSource",
    "Document",
    "DocumentVersion",
    "EdgeType",
    "GraphEdge",
    "GraphNode",
    "Jurisdiction",
    "NodeType",
    "Section",
    "SectionVersion",
    "Severity",
    "SourceObject",
    "to_record",
]
