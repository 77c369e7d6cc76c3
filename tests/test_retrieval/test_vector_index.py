"""Tests for vector index module."""

import numpy as np
import pytest

from lexgraph.ingestion.chunker import estimate_token_count
from lexgraph.ingestion.embedder import embed
from lexgraph.retrieval.vector_index import ChunkFilter, VectorIndex, tokenize
from lexgraph.store.types import AuthorityLevel, ChunkMetadata, Jurisdiction

CHUNK_TEXTS = [
    ("sv-1", "Tex. Prop. Code § 92.052", Jurisdiction.STATE, AuthorityLevel.STATUTE, "doc-property",
     "The landlord shall make a diligent effort to repair the condition."),
    ("sv-1", "Tex. Prop. Code § 92.052", Jurisdiction.STATE, AuthorityLevel.STATUTE, "doc-property",
     "The landlord must repair within a reasonable time after notice."),
    ("sv-2", "Austin City Code § 25-2-491", Jurisdiction.MUNICIPAL, AuthorityLevel.ORDINANCE, "doc-zoning",
     "A municipality may regulate zoning and land use."),
    ("sv-3", "Austin City Code § 25-2-788", Jurisdiction.MUNICIPAL, AuthorityLevel.ORDINANCE, "doc-rental",
     "A person may not operate a short-term rental without a license."),
]


@pytest.fixture
def index():
    index = VectorIndex()
    chunk_numbers: dict[str, int] = {}
    for section_version_id, citation, jurisdiction, authority, document_id, text in CHUNK_TEXTS:
        chunk_index = chunk_numbers.get(section_version_id, 0)
        chunk_numbers[section_version_id] = chunk_index + 1
        index.insert_chunk(
            section_version_id=section_version_id,
            chunk_index=chunk_index,
            text=text,
            token_count=estimate_token_count(text),
            embedding=embed(text, dimensions=16),
            metadata=ChunkMetadata(
                jurisdiction=jurisdiction,
                authority_level=authority,
                effective_from="2020-01-01",
                citation=citation,
                document_id=document_id,
                heading="Heading",
                chunk_index=chunk_index,
            ),
        )
    return index


class TestInsertAndList:
    """Test suite for insert_chunk and list_chunks."""

    def test_insert_order(self, index):
        chunks = index.list_chunks()

        assert len(index) == 4
        assert [c.text for c in chunks] == [t[-1] for t in CHUNK_TEXTS]

    def test_no_content_dedup(self, index):
        """Re-inserting the same content adds a new row."""
        chunk = index.list_chunks()[0]
        index.insert_chunk(
            chunk.section_version_id, chunk.chunk_index, chunk.text, chunk.token_count,
            chunk.embedding, chunk.metadata,
        )

        assert len(index) == 5
        assert index.list_chunks()[-1].id != chunk.id

    def test_filter_by_jurisdiction(self, index):
        chunks = index.list_chunks(ChunkFilter(jurisdiction=Jurisdiction.MUNICIPAL))
        assert {c.metadata.document_id for c in chunks} == {"doc-zoning", "doc-rental"}

    def test_filter_by_authority_and_citation(self, index):
        chunks = index.list_chunks(ChunkFilter(
            authority_level=AuthorityLevel.STATUTE,
            citation="Tex. Prop. Code § 92.052",
        ))
        assert len(chunks) == 2

    def test_filter_by_keyword(self, index):
        chunks = index.list_chunks(ChunkFilter(keyword="LANDLORD"))
        assert [c.metadata.document_id for c in chunks] == ["doc-property", "doc-property"]

    def test_filter_by_document(self, index):
        chunks = index.list_chunks(ChunkFilter(document_id="doc-rental"))
        assert len(chunks) == 1

    def test_chunks_for_section_version(self, index):
        chunks = index.chunks_for_section_version("sv-1")
        assert [c.chunk_index for c in chunks] == [0, 1]

    def test_embedding_matrix(self, index):
        matrix = index.embedding_matrix()

        assert matrix.shape == (4, 16)
        assert np.allclose(matrix[2], embed(CHUNK_TEXTS[2][-1], dimensions=16))


class TestSearch:
    """Test suite for BM25 search."""

    def test_tokenize(self):
        assert tokenize("Short-term Rental, § 25-2!") == ["short", "term", "rental", "25", "2"]

    def test_only_matching_chunks(self, index):
        results = index.search("zoning")

        assert len(results) == 1
        assert results[0][0].metadata.document_id == "doc-zoning"

    def test_ranked_best_first(self, index):
        results = index.search("landlord repair diligent")

        assert [c.metadata.document_id for c, _ in results] == ["doc-property", "doc-property"]
        assert "diligent" in results[0][0].text
        assert results[0][1] >= results[1][1]

    def test_top_k(self, index):
        assert len(index.search("a", top_k=2)) == 2

    def test_filter_applied(self, index):
        results = index.search("landlord zoning", chunk_filter=ChunkFilter(jurisdiction=Jurisdiction.MUNICIPAL))
        assert [c.metadata.document_id for c, _ in results] == ["doc-zoning"]

    def test_empty_query_and_index(self, index):
        assert index.search("") == []
        assert VectorIndex().search("landlord") == []

    def test_index_rebuilt_after_insert(self, index):
        assert index.search("preemption") == []
        text = "State law preemption of local ordinances."
        index.insert_chunk(
            "sv-4", 0, text, estimate_token_count(text), embed(text, dimensions=16),
            ChunkMetadata(Jurisdiction.STATE, AuthorityLevel.STATUTE, "2020-01-01", "§ 1", "doc-4", "H", 0),
        )
        assert len(index.search("preemption")) == 1


class TestKeywordSearch:
    """Test suite for keyword_search."""

    def test_topic_keywords(self, index):
        """A rental question also matches landlord text through the topic terms."""
        results = index.keyword_search("Can the city ban short-term rentals?")
        document_ids = [c.metadata.document_id for c in results]

        assert "doc-rental" in document_ids
        assert "doc-property" in document_ids
        assert "doc-zoning" not in document_ids

    def test_one_chunk_per_citation(self, index):
        results = index.keyword_search("landlord repair obligations")
        citations = [c.metadata.citation for c in results]

        assert citations.count("Tex. Prop. Code § 92.052") == 1

    def test_limit(self, index):
        assert len(index.keyword_search("landlord zoning rental", limit=1)) == 1


class TestPersistence:
    """Test suite for purge and save/load."""

    def test_save_load_round_trip(self, index, tmp_path):
        index.save(tmp_path)
        loaded = VectorIndex.load(tmp_path)

        assert loaded.list_chunks() == index.list_chunks()
        assert loaded.search("zoning")[0][0].metadata.document_id == "doc-zoning"

    def test_load_missing(self, tmp_path):
        assert len(VectorIndex.load(tmp_path / "missing")) == 0

    def test_purge(self, index):
        index.purge()

        assert len(index) == 0
        assert index.search("landlord") == []
