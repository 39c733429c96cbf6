"""
Data model shared by strategies, the statistics engine and the drivers.

Chunks and performance reports are value objects: they are created once
per strategy invocation and never mutated afterwards. Optional report
sections (overlap, separator usage, embedding calls) are explicit optional
fields rather than loosely-typed maybe-present keys.
"""

from dataclasses import asdict, dataclass, field
from typing import Any


@dataclass(frozen=True)
class Chunk:
    """
    A contiguous span of text produced by a chunking strategy.

    Attributes:
        content: Chunk text
        index: Ordinal position within its sequence (document order)
        token_count: Number of tokens in content
        strategy: Name of the strategy that produced the chunk
        start_index: Character offset in the source (0 if unknown)
        end_index: End character offset in the source (0 if unknown)
    """

    content: str
    index: int
    token_count: int = 0
    strategy: str = ""
    start_index: int = 0
    end_index: int = 0


@dataclass(frozen=True)
class SizeDistribution:
    """Token-size distribution across a chunk sequence."""

    min: int = 0
    max: int = 0
    median: int = 0


@dataclass(frozen=True)
class ChunkStats:
    """Sentence and word density per chunk."""

    avg_sentences_per_chunk: float = 0.0
    min_sentences_per_chunk: int = 0
    max_sentences_per_chunk: int = 0
    avg_words_per_chunk: float = 0.0
    min_words_per_chunk: int = 0
    max_words_per_chunk: int = 0


@dataclass(frozen=True)
class OverlapStats:
    """
    Overlap between adjacent chunks, in characters.

    overlap_ratio is average_overlap divided by the configured target
    chunk size of the strategy that produced the chunks.
    """

    average_overlap: float = 0.0
    min_overlap: int = 0
    max_overlap: int = 0
    overlap_ratio: float = 0.0


@dataclass(frozen=True)
class PerformanceReport:
    """
    Read-only aggregate over one chunk sequence.

    Attributes:
        total_time: Elapsed processing time in milliseconds
        chunks_created: Number of chunks
        average_chunk_size: Mean tokens per chunk
        tokens_processed: Sum of tokens across chunks
        memory_usage: Memory delta observed during processing, in bytes
        size_distribution: Min/max/median tokens per chunk
        chunk_stats: Sentence and word statistics
        overlap_stats: Present only when the strategy tracks overlap
        separator_stats: Present only for separator-driven strategies
        embedding_api_calls: Present only for embedding-backed strategies
    """

    total_time: float = 0.0
    chunks_created: int = 0
    average_chunk_size: float = 0.0
    tokens_processed: int = 0
    memory_usage: int = 0
    size_distribution: SizeDistribution = field(default_factory=SizeDistribution)
    chunk_stats: ChunkStats = field(default_factory=ChunkStats)
    overlap_stats: OverlapStats | None = None
    separator_stats: dict[str, int] | None = None
    embedding_api_calls: int | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dictionary (omits absent sections)."""
        data = asdict(self)
        for key in ("overlap_stats", "separator_stats", "embedding_api_calls"):
            if data[key] is None:
                del data[key]
        return data


@dataclass
class ChunkerResult:
    """Output of one strategy (or pipeline) invocation."""

    chunks: list[Chunk]
    report: PerformanceReport | None = None
    strategy: str = ""

    @property
    def texts(self) -> list[str]:
        """Chunk contents in order."""
        return [chunk.content for chunk in self.chunks]


@dataclass(frozen=True)
class RankedResult:
    """One row from a retrieval method: identifier, content and score."""

    id: str
    content: str
    score: float = 0.0
