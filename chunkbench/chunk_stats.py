"""
Chunk statistics engine.

Computes the content-derived part of a PerformanceReport from an ordered
chunk sequence: token-size distribution, sentence and word density, and
adjacent-chunk overlap. Timing and memory are left at zero; the strategy
that wraps the call fills them in.

Conventions:
    - median is the element at index n // 2 of the ascending-sorted token
      counts (upper median for even n, not the mean of the two middle values)
    - sentences are pieces between runs of '.', '!' or '?'
    - words are pieces between runs of whitespace
    - an empty chunk sequence gives an all-zero report
"""

import re
from typing import Callable, Sequence

from .models import ChunkStats, OverlapStats, PerformanceReport, SizeDistribution
from .overlap import adjacent_overlaps

SENTENCE_DELIMITER = re.compile(r"[.!?]+")
WORD_DELIMITER = re.compile(r"\s+")


def count_sentences(text: str) -> int:
    """Number of non-blank pieces between sentence terminators."""
    return sum(1 for piece in SENTENCE_DELIMITER.split(text) if piece.strip())


def count_words(text: str) -> int:
    """Number of non-empty pieces between whitespace runs."""
    return sum(1 for piece in WORD_DELIMITER.split(text) if piece.strip())


def upper_median(values: Sequence[int]) -> int:
    """Element at index len // 2 of the sorted values; 0 for no values."""
    if not values:
        return 0
    return sorted(values)[len(values) // 2]


def _average(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def compute_overlap_stats(chunks: Sequence[str], target_chunk_size: int) -> OverlapStats:
    """
    Overlap statistics across adjacent chunk pairs.

    Raises:
        ValueError: If target_chunk_size is not positive (overlap_ratio
            would divide by zero)
    """
    if target_chunk_size <= 0:
        raise ValueError(
            f"target_chunk_size must be positive to compute overlap ratio, "
            f"got {target_chunk_size}"
        )

    overlaps = adjacent_overlaps(list(chunks))
    if not overlaps:
        return OverlapStats()

    average = _average(overlaps)
    return OverlapStats(
        average_overlap=average,
        min_overlap=min(overlaps),
        max_overlap=max(overlaps),
        overlap_ratio=average / target_chunk_size,
    )


def compute_statistics(
    chunks: Sequence[str],
    target_chunk_size: int,
    token_counter: Callable[[str], int],
    *,
    track_overlap: bool = True,
    separator_stats: dict[str, int] | None = None,
) -> PerformanceReport:
    """
    Compute the content-derived fields of a performance report.

    Args:
        chunks: Chunk texts in document order
        target_chunk_size: Configured target size, used for overlap_ratio
        token_counter: Function returning the token count of a text
        track_overlap: Whether to include overlap statistics
        separator_stats: Separator usage counts to attach, if any

    Returns:
        PerformanceReport with total_time and memory_usage set to 0

    Raises:
        ValueError: If track_overlap is set and target_chunk_size <= 0

    Example:
        >>> report = compute_statistics(["a b.", "c d."], 10, lambda t: len(t.split()))
        >>> report.tokens_processed
        4
    """
    overlap_stats = (
        compute_overlap_stats(chunks, target_chunk_size) if track_overlap else None
    )

    token_counts = [token_counter(chunk) for chunk in chunks]
    sentence_counts = [count_sentences(chunk) for chunk in chunks]
    word_counts = [count_words(chunk) for chunk in chunks]
    total_tokens = sum(token_counts)

    if token_counts:
        distribution = SizeDistribution(
            min=min(token_counts),
            max=max(token_counts),
            median=upper_median(token_counts),
        )
        chunk_stats = ChunkStats(
            avg_sentences_per_chunk=_average(sentence_counts),
            min_sentences_per_chunk=min(sentence_counts),
            max_sentences_per_chunk=max(sentence_counts),
            avg_words_per_chunk=_average(word_counts),
            min_words_per_chunk=min(word_counts),
            max_words_per_chunk=max(word_counts),
        )
    else:
        distribution = SizeDistribution()
        chunk_stats = ChunkStats()

    return PerformanceReport(
        chunks_created=len(token_counts),
        average_chunk_size=_average(token_counts),
        tokens_processed=total_tokens,
        size_distribution=distribution,
        chunk_stats=chunk_stats,
        overlap_stats=overlap_stats,
        separator_stats=dict(separator_stats) if separator_stats is not None else None,
    )
