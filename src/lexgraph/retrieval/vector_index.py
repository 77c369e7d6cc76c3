"""Vector Index: embedded chunks with denormalized metadata.

Each chunk carries jurisdiction, authority level, citation, document id and
heading, so filtering never joins back to the document store. Chunks are
append-only: re-ingesting a section version adds new rows.

Retrieval is keyword based:
- `list_chunks(filter)` for metadata/keyword filtering
- `search(query)` ranks chunks by BM25 over chunk text
- `keyword_search(query)` matches extracted topic keywords, one hit per citation
"""

import logging
import re
import threading
from dataclasses import dataclass
from pathlib import Path

import numpy as np
import pandas as pd
from rank_bm25 import BM25Okapi

from ..store.tables import load_table, save_table
from ..store.types import AuthorityLevel, Chunk, ChunkMetadata, Jurisdiction, new_id
from .keywords import extract_keywords

logger = logging.getLogger(__name__)

CHUNKS_FILE = "chunks.parquet"
EMBEDDINGS_FILE = "embeddings.npy"


@dataclass
class ChunkFilter:
    """Metadata filter for `VectorIndex.list_chunks`. None fields match anything."""
    jurisdiction: Jurisdiction | None = None
    authority_level: AuthorityLevel | None = None
    document_id: str | None = None
    citation: str | None = None
    keyword: str | None = None  # case-insensitive substring of chunk text

    def matches(self, chunk: Chunk) -> bool:
        meta = chunk.metadata
        if self.jurisdiction is not None and meta.jurisdiction != self.jurisdiction:
            return False
        if self.authority_level is not None and meta.authority_level != self.authority_level:
            return False
        if self.document_id is not None and meta.document_id != self.document_id:
            return False
        if self.citation is not None and meta.citation != self.citation:
            return False
        if self.keyword is not None and self.keyword.lower() not in chunk.text.lower():
            return False
        return True


def tokenize(text: str) -> list[str]:
    """Lowercase and split on non-alphanumeric characters."""
    return [t for t in re.split(r"\W+", text.lower()) if t]


class VectorIndex:
    """In-memory, thread-safe chunk index."""

    def __init__(self):
        self._chunks: list[Chunk] = []
        self._lock = threading.Lock()
        self._bm25: BM25Okapi | None = None
        self._tokenized_corpus: list[list[str]] = []

    def __len__(self) -> int:
        return len(self._chunks)

    def insert_chunk(
        self,
        section_version_id: str,
        chunk_index: int,
        text: str,
        token_count: int,
        embedding,
        metadata: ChunkMetadata,
    ) -> Chunk:
        """Append one chunk record."""
        chunk = Chunk(
            id=new_id(),
            section_version_id=section_version_id,
            chunk_index=chunk_index,
            text=text,
            token_count=token_count,
            embedding=[float(x) for x in embedding],
            metadata=metadata,
        )
        with self._lock:
            self._chunks.append(chunk)
            self._bm25 = None
        return chunk

    def list_chunks(self, chunk_filter: ChunkFilter | None = None) -> list[Chunk]:
        """Chunks in insertion order, optionally filtered."""
        with self._lock:
            chunks = list(self._chunks)
        if chunk_filter is None:
            return chunks
        return [c for c in chunks if chunk_filter.matches(c)]

    def chunks_for_section_version(self, section_version_id: str) -> list[Chunk]:
        with self._lock:
            chunks = [c for c in self._chunks if c.section_version_id == section_version_id]
        return sorted(chunks, key=lambda c: c.chunk_index)

    def embedding_matrix(self) -> np.ndarray:
        """All embeddings as an (N, dimensions) array in insertion order."""
        with self._lock:
            if not self._chunks:
                return np.zeros((0, 0))
            return np.asarray([c.embedding for c in self._chunks], dtype=np.float64)

    # =========================================================================
    # Retrieval
    # =========================================================================

    def _ensure_bm25(self) -> BM25Okapi | None:
        # Caller holds the lock
        if self._bm25 is None and self._chunks:
            self._tokenized_corpus = [tokenize(c.text) for c in self._chunks]
            self._bm25 = BM25Okapi(self._tokenized_corpus)
        return self._bm25

    def search(
        self,
        query: str,
        top_k: int = 10,
        chunk_filter: ChunkFilter | None = None,
    ) -> list[tuple[Chunk, float]]:
        """Rank chunks by BM25 score against the query.

        Only chunks sharing at least one token with the query are returned.

        Args:
            query: Search query string
            top_k: Number of results to return
            chunk_filter: Optional metadata filter applied before ranking

        Returns:
            (chunk, score) pairs, best first
        """
        query_tokens = tokenize(query)
        if not query_tokens or top_k <= 0:
            return []

        with self._lock:
            bm25 = self._ensure_bm25()
            if bm25 is None:
                return []
            scores = bm25.get_scores(query_tokens)
            chunks = list(self._chunks)
            corpus = list(self._tokenized_corpus)

        query_set = set(query_tokens)
        candidates = [
            (chunk, float(scores[i]))
            for i, chunk in enumerate(chunks)
            if query_set.intersection(corpus[i])
            and (chunk_filter is None or chunk_filter.matches(chunk))
        ]
        candidates.sort(key=lambda pair: pair[1], reverse=True)
        return candidates[:top_k]

    def keyword_search(self, query: str, limit: int = 10) -> list[Chunk]:
        """Chunks whose text contains any keyword extracted from the query.

        At most one chunk per citation (the first match in insertion order).
        """
        keywords = extract_keywords(query)
        logger.debug("Keyword search terms for %r: %s", query, keywords)
        if not keywords or limit <= 0:
            return []

        results: list[Chunk] = []
        seen_citations: set[str] = set()
        for chunk in self.list_chunks():
            if chunk.metadata.citation in seen_citations:
                continue
            text = chunk.text.lower()
            if any(keyword in text for keyword in keywords):
                seen_citations.add(chunk.metadata.citation)
                results.append(chunk)
                if len(results) >= limit:
                    break
        return results

    # =========================================================================
    # Purge / Save / Load
    # =========================================================================

    def purge(self) -> None:
        with self._lock:
            count = len(self._chunks)
            self._chunks.clear()
            self._bm25 = None
            self._tokenized_corpus = []
        logger.info("Purged %d chunks", count)

    def save(self, output_dir: Path | str) -> None:
        """Save chunk table (parquet) and embedding matrix (.npy)."""
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        with self._lock:
            chunks = list(self._chunks)

        rows = [
            {
                "id": c.id,
                "section_version_id": c.section_version_id,
                "chunk_index": c.chunk_index,
                "text": c.text,
                "token_count": c.token_count,
                "created_at": c.created_at,
                "jurisdiction": c.metadata.jurisdiction.value,
                "authority_level": c.metadata.authority_level.value,
                "effective_from": c.metadata.effective_from,
                "citation": c.metadata.citation,
                "document_id": c.metadata.document_id,
                "heading": c.metadata.heading,
            }
            for c in chunks
        ]
        save_table(pd.DataFrame(rows, columns=_CHUNK_COLUMNS), output_dir / CHUNKS_FILE)
        embeddings = np.asarray([c.embedding for c in chunks], dtype=np.float64)
        np.save(output_dir / EMBEDDINGS_FILE, embeddings)

    @classmethod
    def load(cls, input_dir: Path | str) -> "VectorIndex":
        """Load an index saved with `save()`. A missing table loads empty."""
        input_dir = Path(input_dir)
        index = cls()
        df = load_table(input_dir / CHUNKS_FILE)
        if df is None or df.empty:
            return index

        embeddings = np.load(input_dir / EMBEDDINGS_FILE)
        if len(embeddings) != len(df):
            raise ValueError(
                f"Embedding count {len(embeddings)} does not match chunk count {len(df)}"
            )
        for row, embedding in zip(df.to_dict(orient="records"), embeddings):
            metadata = ChunkMetadata(
                jurisdiction=Jurisdiction(row["jurisdiction"]),
                authority_level=AuthorityLevel(row["authority_level"]),
                effective_from=row["effective_from"],
                citation=row["citation"],
                document_id=row["document_id"],
                heading=row["heading"],
                chunk_index=int(row["chunk_index"]),
            )
            index._chunks.append(Chunk(
                id=row["id"],
                section_version_id=row["section_version_id"],
                chunk_index=int(row["chunk_index"]),
                text=row["text"],
                token_count=int(row["token_count"]),
                embedding=embedding.tolist(),
                metadata=metadata,
                created_at=row["created_at"],
            ))
        return index


_CHUNK_COLUMNS = [
    "id", "section_version_id", "chunk_index", "text", "token_count", "created_at",
    "jurisdiction", "authority_level", "effective_from", "citation", "document_id", "heading",
]
