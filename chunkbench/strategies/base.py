"""
Base class for chunking strategies.

This module defines the abstract interface that all chunking strategies must implement.
It ensures consistent behavior across different chunking approaches: every strategy
is timed, memory-probed and measured the same way, and every failure surfaces as
a single ChunkingFailed.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import replace
from typing import Any

from ..chunk_stats import compute_statistics
from ..exceptions import ChunkingFailed, ConfigurationInvalid
from ..models import Chunk, ChunkerResult, PerformanceReport
from ..probes import Clock, MemoryProbe, perf_clock, rss_memory
from ..tokenizer import TokenCounter, count_tokens

logger = logging.getLogger(__name__)


class ChunkingStrategy(ABC):
    """
    Abstract base class for chunking strategies.

    All chunking strategies must inherit from this class and implement
    the `_split` method. `process` wraps it with timing, memory probing,
    statistics and error classification, so subclasses only decide where
    the text is cut.

    Attributes:
        name: Strategy identifier (e.g., "basic", "langchain")
        chunk_size: Target chunk size (interpretation varies by strategy)
        chunk_overlap: Overlap between consecutive chunks
        track_overlap: Whether reports include overlap statistics

    Example:
        >>> class MyChunker(ChunkingStrategy):
        ...     name = "my_chunker"
        ...
        ...     def _split(self, text):
        ...         return text.split("\\n\\n")
        >>>
        >>> chunker = MyChunker(chunk_size=512)
        >>> result = chunker.process(text)
    """

    # Class attributes - override in subclasses
    name: str = "base"
    track_overlap: bool = True

    def __init__(
        self,
        chunk_size: int = 500,
        chunk_overlap: int = 50,
        token_counter: TokenCounter | None = None,
        clock: Clock | None = None,
        memory_probe: MemoryProbe | None = None,
        **kwargs: Any,
    ):
        """
        Initialize the chunking strategy.

        Args:
            chunk_size: Target chunk size. Interpretation varies:
                - basic (character): number of characters
                - basic (word/sentence/paragraph), nlp: number of tokens
                - langchain, llamaindex: splitter's own unit
                - semantic: size of the initial pre-split
            chunk_overlap: Number of overlapping units between chunks
            token_counter: Token counting function (default: tiktoken cl100k_base)
            clock: Millisecond clock used for total_time
            memory_probe: Memory probe used for memory_usage
            **kwargs: Unrecognized options, accepted and ignored

        Raises:
            ConfigurationInvalid: If chunk_size is not positive for a strategy
                that tracks overlap
        """
        if self.track_overlap and chunk_size <= 0:
            raise ConfigurationInvalid(f"chunk_size must be positive, got {chunk_size}")

        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap
        self._count_tokens = token_counter or count_tokens
        self._clock = clock or perf_clock
        self._memory_probe = memory_probe or rss_memory
        self._extra_kwargs = kwargs

        if kwargs:
            logger.debug("%s ignoring unrecognized options: %s", self.name, sorted(kwargs))

    @property
    def display_name(self) -> str:
        """Human-readable name used in comparison tables."""
        return self.name

    @abstractmethod
    def _split(self, text: str) -> list[str]:
        """
        Split text into chunk contents, in document order.

        This method must be implemented by all subclasses. Empty input
        must yield an empty list.

        Raises:
            NotImplementedError: If not implemented by subclass
        """
        raise NotImplementedError("Subclasses must implement _split()")

    def _separator_stats(self, text: str) -> dict[str, int] | None:
        """Separator usage counts for separator-driven strategies."""
        return None

    def _finalize_report(self, report: PerformanceReport) -> PerformanceReport:
        """Hook for strategies that add their own report fields."""
        return report

    def process(self, text: str) -> ChunkerResult:
        """
        Chunk text and measure the result.

        Args:
            text: Raw input text

        Returns:
            ChunkerResult with the chunk sequence and its PerformanceReport

        Raises:
            ChunkingFailed: If the underlying splitter or the statistics raise
        """
        start_time = self._clock()
        start_memory = self._memory_probe()

        try:
            contents = self._split(text) if text else []
            report = compute_statistics(
                contents,
                self.chunk_size,
                self._count_tokens,
                track_overlap=self.track_overlap,
                separator_stats=self._separator_stats(text),
            )
        except ChunkingFailed:
            raise
        except Exception as e:
            raise ChunkingFailed(self.display_name, len(text), e) from e

        end_time = self._clock()
        end_memory = self._memory_probe()

        report = self._finalize_report(replace(
            report,
            total_time=end_time - start_time,
            memory_usage=end_memory - start_memory,
        ))

        chunks = self._build_chunks(text, contents)
        logger.debug(
            "%s produced %d chunks in %.1f ms",
            self.display_name, len(chunks), report.total_time,
        )
        return ChunkerResult(chunks=chunks, report=report, strategy=self.display_name)

    def _build_chunks(self, text: str, contents: list[str]) -> list[Chunk]:
        """
        Wrap chunk contents in Chunk objects.

        Offsets are located by searching forward in the source text; chunks
        that were rewritten by the splitter (joined segments, stripped
        whitespace) get offsets of 0.
        """
        chunks = []
        cursor = 0
        for index, content in enumerate(contents):
            start = text.find(content, cursor) if content else -1
            if start >= 0:
                end = start + len(content)
                cursor = start + 1
            else:
                start = end = 0
            chunks.append(Chunk(
                content=content,
                index=index,
                token_count=self._count_tokens(content),
                strategy=self.name,
                start_index=start,
                end_index=end,
            ))
        return chunks

    def __repr__(self) -> str:
        """String representation of the strategy."""
        return (
            f"{self.__class__.__name__}("
            f"chunk_size={self.chunk_size}, "
            f"chunk_overlap={self.chunk_overlap})"
        )
