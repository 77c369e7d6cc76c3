"""Pipeline configuration.

Defaults live in module constants; `PipelineConfig` gathers the tunables and
`PipelineConfig.from_env()` applies overrides from the environment:

- LEXGRAPH_CHUNK_TARGET_TOKENS / _MIN_TOKENS / _MAX_TOKENS / _OVERLAP_TOKENS
- LEXGRAPH_EMBEDDING_DIMENSIONS
- LEXGRAPH_EMBED_WORKERS: threads used to embed chunks (1 = sequential)
- LEXGRAPH_CONFLICT_MATCH_POLICY: "last" or "first"
"""

import os
from dataclasses import dataclass, field

from .ingestion.chunker import ChunkConfig
from .ingestion.embedder import EMBEDDING_DIMENSIONS

# Chunk bounds used for legal sections during ingestion
INGESTION_CHUNK_CONFIG = ChunkConfig(
    target_tokens=200,
    min_tokens=80,
    max_tokens=400,
    overlap_tokens=30,
)

EMBED_WORKERS = 1
CONFLICT_MATCH_POLICY = "last"
MATCH_POLICIES = ("last", "first")

ENV_PREFIX = "LEXGRAPH_"


@dataclass
class PipelineConfig:
    """Tunables for one ingestion pipeline."""
    chunk: ChunkConfig = field(default_factory=lambda: INGESTION_CHUNK_CONFIG)
    embedding_dimensions: int = EMBEDDING_DIMENSIONS
    embed_workers: int = EMBED_WORKERS
    conflict_match_policy: str = CONFLICT_MATCH_POLICY
    show_progress: bool = False

    def __post_init__(self):
        if self.embedding_dimensions <= 0:
            raise ValueError(f"embedding_dimensions must be positive, got {self.embedding_dimensions}")
        if self.embed_workers < 1:
            raise ValueError(f"embed_workers must be >= 1, got {self.embed_workers}")
        if self.conflict_match_policy not in MATCH_POLICIES:
            raise ValueError(
                f"conflict_match_policy must be one of {MATCH_POLICIES}, "
                f"got {self.conflict_match_policy!r}"
            )

    @classmethod
    def from_env(cls, environ=None, **overrides) -> "PipelineConfig":
        """Build a config from LEXGRAPH_* environment variables.

        Args:
            environ: Mapping to read instead of os.environ
            **overrides: Explicit values that win over the environment
        """
        env = os.environ if environ is None else environ
        chunk = ChunkConfig(
            target_tokens=_env_int(env, "CHUNK_TARGET_TOKENS", INGESTION_CHUNK_CONFIG.target_tokens),
            min_tokens=_env_int(env, "CHUNK_MIN_TOKENS", INGESTION_CHUNK_CONFIG.min_tokens),
            max_tokens=_env_int(env, "CHUNK_MAX_TOKENS", INGESTION_CHUNK_CONFIG.max_tokens),
            overlap_tokens=_env_int(env, "CHUNK_OVERLAP_TOKENS", INGESTION_CHUNK_CONFIG.overlap_tokens),
        )
        values = {
            "chunk": chunk,
            "embedding_dimensions": _env_int(env, "EMBEDDING_DIMENSIONS", EMBEDDING_DIMENSIONS),
            "embed_workers": _env_int(env, "EMBED_WORKERS", EMBED_WORKERS),
            "conflict_match_policy": env.get(
                ENV_PREFIX + "CONFLICT_MATCH_POLICY", CONFLICT_MATCH_POLICY
            ).strip().lower(),
        }
        values.update(overrides)
        return cls(**values)


def _env_int(env, name: str, default: int) -> int:
    raw = env.get(ENV_PREFIX + name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{ENV_PREFIX}{name} must be an integer, got {raw!r}") from None
