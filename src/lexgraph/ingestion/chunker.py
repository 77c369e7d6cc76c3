"""Chunker: token-bounded, overlapping text segmentation.

Token counts are estimated with a word/punctuation heuristic rather than a real
tokenizer, so output is fully deterministic:

    tokens = ceil(words * 1.3 + punctuation * 0.3)

Offsets refer to the whitespace-normalized text (trimmed, runs of whitespace
collapsed to one space), and every chunk's text is exactly
``normalized[start_offset:end_offset]``.
"""

import math
import re
from dataclasses import dataclass

# Library defaults (ingestion uses the tighter INGESTION_CHUNK_CONFIG in config.py)
TARGET_TOKENS = 300
MIN_TOKENS = 100
MAX_TOKENS = 600
OVERLAP_TOKENS = 50

TOKENS_PER_WORD = 1.3
TOKENS_PER_PUNCTUATION = 0.3
CHARS_PER_TOKEN = 4

_PUNCTUATION_RE = re.compile(r"[.,!?;:()\[\]{}'\"]")
_SENTENCE_BOUNDARY_RE = re.compile(r"(?<=[.!?])\s+")
_WHITESPACE_RE = re.compile(r"\s+")


@dataclass(frozen=True)
class ChunkConfig:
    """Token bounds for chunking."""
    target_tokens: int = TARGET_TOKENS
    min_tokens: int = MIN_TOKENS
    max_tokens: int = MAX_TOKENS
    overlap_tokens: int = OVERLAP_TOKENS

    def __post_init__(self):
        for name in ("target_tokens", "min_tokens", "max_tokens", "overlap_tokens"):
            value = getattr(self, name)
            if not isinstance(value, int) or value <= 0:
                raise ValueError(f"{name} must be a positive integer, got {value!r}")
        if not self.min_tokens < self.target_tokens < self.max_tokens:
            raise ValueError(
                "Expected min_tokens < target_tokens < max_tokens, got "
                f"{self.min_tokens}/{self.target_tokens}/{self.max_tokens}"
            )


@dataclass(frozen=True)
class TextChunk:
    """One chunk of normalized text."""
    text: str
    token_count: int
    start_offset: int
    end_offset: int
    chunk_index: int


def normalize_whitespace(text: str) -> str:
    """Trim and collapse whitespace runs to a single space."""
    return _WHITESPACE_RE.sub(" ", text.strip())


def estimate_token_count(text: str) -> int:
    """Estimate the token count of a text.

    Example:
        >>> estimate_token_count("hello world.")
        3
    """
    if not text or not text.strip():
        return 0
    words = len(text.split())
    punctuation = len(_PUNCTUATION_RE.findall(text))
    return math.ceil(words * TOKENS_PER_WORD + punctuation * TOKENS_PER_PUNCTUATION)


def split_segments(text: str) -> list[tuple[int, int]]:
    """Split normalized text into sentence-like (start, end) spans.

    A boundary is sentence-ending punctuation (. ! ?) followed by whitespace.
    """
    spans = []
    position = 0
    for segment in _SENTENCE_BOUNDARY_RE.split(text):
        if segment.strip():
            spans.append((position, position + len(segment)))
        position += len(segment) + 1
    return spans


def chunk_text(text: str, config: ChunkConfig | None = None) -> list[TextChunk]:
    """Chunk text into overlapping segments of roughly target size.

    Args:
        text: Raw text (whitespace is normalized first)
        config: Token bounds (uses library defaults if None)

    Returns:
        Chunks indexed 0..N-1; empty list for empty or blank input
    """
    if config is None:
        config = ChunkConfig()

    if not text or not text.strip():
        return []

    clean = normalize_whitespace(text)
    total_tokens = estimate_token_count(clean)
    if total_tokens <= config.max_tokens:
        return [TextChunk(clean, total_tokens, 0, len(clean), 0)]

    spans: list[tuple[int, int]] = []
    current: tuple[int, int] | None = None

    for seg_start, seg_end in split_segments(clean):
        segment_tokens = estimate_token_count(clean[seg_start:seg_end])

        if segment_tokens > config.max_tokens:
            # A pending chunk below min_tokens is folded into the forced split
            split_from = seg_start
            if current is not None:
                if estimate_token_count(clean[current[0]:current[1]]) >= config.min_tokens:
                    spans.append(current)
                else:
                    split_from = current[0]
                current = None
            spans.extend(_force_split(clean, split_from, seg_end, config))
            continue

        if current is None:
            current = (seg_start, seg_end)
            continue

        combined_tokens = estimate_token_count(clean[current[0]:seg_end])
        current_tokens = estimate_token_count(clean[current[0]:current[1]])
        if combined_tokens > config.max_tokens and current_tokens >= config.min_tokens:
            spans.append(current)
            overlap_start = _overlap_start(clean, current, config.overlap_tokens)
            current = (overlap_start, seg_end)
        else:
            current = (current[0], seg_end)

    if current is not None:
        spans.append(current)

    # Trailing chunk too small (accumulated or the tail of a forced split):
    # extend the previous chunk over it
    if len(spans) > 1 and estimate_token_count(clean[spans[-1][0]:spans[-1][1]]) < config.min_tokens:
        _, last_end = spans.pop()
        spans[-1] = (spans[-1][0], last_end)

    return [
        TextChunk(
            text=clean[start:end],
            token_count=estimate_token_count(clean[start:end]),
            start_offset=start,
            end_offset=end,
            chunk_index=index,
        )
        for index, (start, end) in enumerate(spans)
    ]


def _force_split(text: str, start: int, end: int, config: ChunkConfig) -> list[tuple[int, int]]:
    """Split text[start:end] into pieces of ~target_tokens * 4 characters at word boundaries."""
    target_chars = config.target_tokens * CHARS_PER_TOKEN
    pieces = []
    offset = start

    while offset < end:
        piece_end = min(offset + target_chars, end)
        if piece_end < end:
            space = text.rfind(" ", offset, piece_end + 1)
            if space > offset:
                piece_end = space
        if text[offset:piece_end].strip():
            pieces.append((offset, piece_end))
        offset = piece_end
        while offset < end and text[offset] == " ":
            offset += 1

    return pieces


def _overlap_start(text: str, span: tuple[int, int], overlap_tokens: int) -> int:
    """Start offset of the last ceil(overlap_tokens / 1.3) words of a span."""
    start, end = span
    words = text[start:end].split(" ")
    overlap_words = math.ceil(overlap_tokens / TOKENS_PER_WORD)
    # Never carry the whole chunk forward
    overlap_words = min(overlap_words, len(words) - 1)
    if overlap_words <= 0:
        return end + 1
    tail = " ".join(words[-overlap_words:])
    return end - len(tail)
