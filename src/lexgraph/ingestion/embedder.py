"""Embedder: deterministic pseudo-embeddings for chunk text.

Stand-in for a real embedding model. The vector is a pure function of the text:
a djb2 hash of the text seeds numpy's PCG64 generator, `dimensions` values are
drawn uniformly from [-1, 1], and the result is L2-normalized. Same text, same
vector, bit for bit.
"""

import hashlib
from collections.abc import Sequence

import numpy as np

EMBEDDING_DIMENSIONS = 384
PROJECTION_SEED = 42


def djb2(text: str) -> int:
    """32-bit djb2 string hash (hash * 33 ^ char)."""
    value = 5381
    for char in text:
        value = (((value << 5) + value) ^ ord(char)) & 0xFFFFFFFF
    return value


def embed(text: str, dimensions: int = EMBEDDING_DIMENSIONS) -> np.ndarray:
    """Generate a unit-length embedding vector for text.

    Args:
        text: Text to embed
        dimensions: Vector length

    Returns:
        float64 array of shape (dimensions,); all zeros if the raw vector
        has zero magnitude
    """
    if dimensions <= 0:
        raise ValueError(f"dimensions must be positive, got {dimensions}")

    rng = np.random.default_rng(djb2(text))
    vector = rng.uniform(-1.0, 1.0, size=dimensions)

    magnitude = np.linalg.norm(vector)
    if magnitude == 0:
        return np.zeros(dimensions)
    return vector / magnitude


def embed_many(texts: Sequence[str], dimensions: int = EMBEDDING_DIMENSIONS) -> np.ndarray:
    """Embed several texts into an (N, dimensions) matrix."""
    if not texts:
        return np.zeros((0, dimensions))
    return np.vstack([embed(t, dimensions) for t in texts])


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine similarity of two equal-length vectors, in [-1, 1].

    Returns 0.0 when either vector has zero magnitude.
    """
    a = np.asarray(a, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)
    if a.shape != b.shape:
        raise ValueError(f"Vectors must have same dimensions: {a.shape} vs {b.shape}")

    denom = np.linalg.norm(a) * np.linalg.norm(b)
    if denom == 0:
        return 0.0
    return float(np.dot(a, b) / denom)


def checksum(content: str | bytes) -> str:
    """SHA-256 hex digest used for corpus-level deduplication."""
    if isinstance(content, str):
        content = content.encode("utf-8")
    return hashlib.sha256(content).hexdigest()


def project_to_2d(embeddings: Sequence[Sequence[float]], seed: int = PROJECTION_SEED) -> np.ndarray:
    """Project embeddings to 2-D with a fixed random projection.

    Not PCA or t-SNE, just deterministic coordinates for plotting the index.

    Returns:
        Array of shape (N, 2)
    """
    matrix = np.asarray(embeddings, dtype=np.float64)
    if matrix.size == 0:
        return np.zeros((0, 2))

    rng = np.random.default_rng(seed)
    projection = rng.uniform(-1.0, 1.0, size=(matrix.shape[1], 2))
    return matrix @ projection
