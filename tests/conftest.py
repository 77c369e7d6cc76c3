"""Pytest fixtures for lexgraph tests."""

import json

import pytest

from lexgraph.config import PipelineConfig
from lexgraph.ingestion.chunker import ChunkConfig
from lexgraph.ingestion.pipeline import IngestionContext, IngestionPipeline
from lexgraph.ingestion.sample_data import DEMO_DOCUMENTS
from lexgraph.store.types import AuthorityLevel, CorpusSource, Jurisdiction

SENTENCE = "The tenant shall pay rent monthly."


@pytest.fixture
def small_chunk_config():
    """Tight token bounds so short test texts split into several chunks."""
    return ChunkConfig(target_tokens=20, min_tokens=10, max_tokens=40, overlap_tokens=5)


@pytest.fixture
def repeated_sentences():
    """Ten identical 9-token sentences (60 words, well over 40 tokens)."""
    return " ".join([SENTENCE] * 10)


@pytest.fixture
def context():
    """Fresh in-memory ingestion context."""
    return IngestionContext.in_memory()


@pytest.fixture
def pipeline(context):
    """Pipeline with default configuration."""
    return IngestionPipeline(context, PipelineConfig())


@pytest.fixture
def make_document():
    """Factory for JSON source documents.

    Usage:
        content = make_document("Texas Property Code", "state", "statute")
    """

    def _make(
        title: str,
        jurisdiction: str,
        authority_level: str,
        sections: list[dict] | None = None,
        text: str | None = None,
        **extra,
    ) -> str:
        payload = {
            "title": title,
            "jurisdiction": jurisdiction,
            "authorityLevel": authority_level,
            "citation": extra.pop("citation", title),
            "effectiveFrom": extra.pop("effectiveFrom", "2020-01-01"),
            "text": text if text is not None else f"{title}. {SENTENCE}",
        }
        if sections is not None:
            payload["sections"] = sections
        payload.update(extra)
        return json.dumps(payload)

    return _make


@pytest.fixture
def ingest_document(pipeline, make_document):
    """Ingest one JSON document through the pipeline and return the result."""

    def _ingest(title: str, jurisdiction: Jurisdiction, authority_level: AuthorityLevel, **kwargs):
        content = make_document(title, jurisdiction.value, authority_level.value, **kwargs)
        filename = title.lower().replace(" ", "-") + ".json"
        return pipeline.ingest(content, CorpusSource.US_CODE, filename)

    return _ingest


@pytest.fixture
def demo_documents():
    """Built-in demo corpus entries."""
    return DEMO_DOCUMENTS
