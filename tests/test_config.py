"""Tests for pipeline configuration."""

import pytest

from lexgraph.config import INGESTION_CHUNK_CONFIG, PipelineConfig
from lexgraph.ingestion.chunker import ChunkConfig
from lexgraph.ingestion.embedder import EMBEDDING_DIMENSIONS


class TestPipelineConfig:
    """Test suite for PipelineConfig."""

    def test_defaults(self):
        config = PipelineConfig()

        assert config.chunk == INGESTION_CHUNK_CONFIG
        assert config.chunk.target_tokens == 200
        assert config.embedding_dimensions == EMBEDDING_DIMENSIONS == 384
        assert config.embed_workers == 1
        assert config.conflict_match_policy == "last"
        assert config.show_progress is False

    @pytest.mark.parametrize("kwargs", [
        {"embedding_dimensions": 0},
        {"embed_workers": 0},
        {"conflict_match_policy": "all"},
    ])
    def test_invalid_values(self, kwargs):
        with pytest.raises(ValueError):
            PipelineConfig(**kwargs)


class TestFromEnv:
    """Test suite for PipelineConfig.from_env."""

    def test_empty_environment(self):
        assert PipelineConfig.from_env({}) == PipelineConfig()

    def test_reads_variables(self):
        config = PipelineConfig.from_env({
            "LEXGRAPH_CHUNK_TARGET_TOKENS": "120",
            "LEXGRAPH_CHUNK_MIN_TOKENS": "40",
            "LEXGRAPH_CHUNK_MAX_TOKENS": "240",
            "LEXGRAPH_CHUNK_OVERLAP_TOKENS": "10",
            "LEXGRAPH_EMBEDDING_DIMENSIONS": "64",
            "LEXGRAPH_EMBED_WORKERS": "4",
            "LEXGRAPH_CONFLICT_MATCH_POLICY": " First ",
        })

        assert config.chunk == ChunkConfig(120, 40, 240, 10)
        assert config.embedding_dimensions == 64
        assert config.embed_workers == 4
        assert config.conflict_match_policy == "first"

    def test_blank_value_uses_default(self):
        config = PipelineConfig.from_env({"LEXGRAPH_EMBED_WORKERS": "  "})
        assert config.embed_workers == 1

    def test_bad_integer(self):
        with pytest.raises(ValueError, match="LEXGRAPH_EMBED_WORKERS"):
            PipelineConfig.from_env({"LEXGRAPH_EMBED_WORKERS": "many"})

    def test_overrides_win(self):
        config = PipelineConfig.from_env(
            {"LEXGRAPH_EMBED_WORKERS": "4"}, embed_workers=2, show_progress=True
        )

        assert config.embed_workers == 2
        assert config.show_progress is True

    def test_reads_os_environ(self, monkeypatch):
        monkeypatch.setenv("LEXGRAPH_EMBEDDING_DIMENSIONS", "32")
        assert PipelineConfig.from_env().embedding_dimensions == 32
