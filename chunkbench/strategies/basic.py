"""
Separator and window based chunking strategy.

This module implements the hand-rolled baseline splitters. They do not
depend on any splitting library, which makes them the reference point
for every other strategy in a comparison.

Methods:
========
1. paragraph - split on blank lines, pack paragraphs up to chunk_size tokens
2. sentence  - split on runs of . ! ?, pack sentences up to chunk_size tokens
3. word      - split on whitespace, pack words up to chunk_size tokens
4. character - fixed windows of chunk_size characters, stepping
               chunk_size - chunk_overlap characters

Packing (paragraph / sentence / word):
    Segments are appended to the current chunk until the next one would
    push it past chunk_size tokens; the chunk is then emitted with its
    segments joined by a single space. When chunk_overlap > 0 the next
    chunk starts with the trailing segments of the previous one, up to
    chunk_overlap tokens but always at least one segment. A chunk made of
    a single segment is carried whole, so with overlap a chunk can exceed
    chunk_size (one segment over chunk_size is emitted as is either way).

Note that sentence terminators are consumed by the split, so sentence
chunks come back without their punctuation.
"""

import re
from enum import Enum
from typing import Any

from ..exceptions import ConfigurationInvalid
from .base import ChunkingStrategy


class SplitMethod(str, Enum):
    """How BasicChunker cuts the text."""

    CHARACTER = "character"
    WORD = "word"
    SENTENCE = "sentence"
    PARAGRAPH = "paragraph"


DEFAULT_SEPARATORS: dict[SplitMethod, str] = {
    SplitMethod.SENTENCE: r"[.!?]+",
    SplitMethod.PARAGRAPH: r"\n\s*\n",
    SplitMethod.WORD: r"\s+",
}

METHOD_NAMES = {
    SplitMethod.PARAGRAPH: "Paragraph Splitter",
    SplitMethod.SENTENCE: "Sentence Splitter",
    SplitMethod.WORD: "Word Splitter",
    SplitMethod.CHARACTER: "Character Splitter",
}


class BasicChunker(ChunkingStrategy):
    """
    Chunk documents with simple separators or fixed character windows.

    Attributes:
        method: SplitMethod in use
        chunk_size: Tokens per chunk (characters for the character method)
        chunk_overlap: Overlap in tokens (characters for the character method)

    Example:
        >>> chunker = BasicChunker(method="word", chunk_size=500, chunk_overlap=0)
        >>> result = chunker.process(text)
        >>> print(result.report.chunks_created)
    """

    name = "basic"

    def __init__(
        self,
        chunk_size: int = 500,
        chunk_overlap: int = 50,
        method: SplitMethod | str = SplitMethod.PARAGRAPH,
        separators: dict[str, str] | None = None,
        **kwargs: Any,
    ):
        """
        Initialize the basic chunker.

        Args:
            chunk_size: Target chunk size (tokens, or characters for "character")
            chunk_overlap: Overlap between consecutive chunks
            method: One of "character", "word", "sentence", "paragraph"
            separators: Regex overrides keyed by method name, e.g.
                {"sentence": r"[.!?;]+"}
            **kwargs: Passed to ChunkingStrategy (token_counter, clock, ...)

        Raises:
            ConfigurationInvalid: If method is unknown or the character
                window would never advance
        """
        super().__init__(chunk_size, chunk_overlap, **kwargs)

        try:
            self.method = SplitMethod(method)
        except ValueError:
            available = ", ".join(m.value for m in SplitMethod)
            raise ConfigurationInvalid(
                f"Unknown split method '{method}'. Available methods: {available}"
            ) from None

        if self.method is SplitMethod.CHARACTER and chunk_overlap >= chunk_size:
            raise ConfigurationInvalid(
                f"chunk_overlap ({chunk_overlap}) must be smaller than "
                f"chunk_size ({chunk_size}) for character splitting"
            )

        patterns = dict(DEFAULT_SEPARATORS)
        for key, pattern in (separators or {}).items():
            patterns[SplitMethod(key)] = pattern
        self._separators = {key: re.compile(pattern) for key, pattern in patterns.items()}

    @property
    def display_name(self) -> str:
        return METHOD_NAMES[self.method]

    def _split(self, text: str) -> list[str]:
        if self.method is SplitMethod.CHARACTER:
            return self._split_windows(text)

        separator = self._separators[self.method]
        segments = [s for s in separator.split(text) if s.strip()]
        return self._pack(segments)

    def _split_windows(self, text: str) -> list[str]:
        step = self.chunk_size - self.chunk_overlap
        return [text[i:i + self.chunk_size] for i in range(0, len(text), step)]

    def _pack(self, segments: list[str]) -> list[str]:
        chunks: list[str] = []
        current: list[str] = []
        current_sizes: list[int] = []

        for segment in segments:
            size = self._count_tokens(segment)

            if current and sum(current_sizes) + size > self.chunk_size:
                chunks.append(" ".join(current))
                keep = self._overlap_count(current_sizes)
                current = current[len(current) - keep:] if keep else []
                current_sizes = current_sizes[len(current_sizes) - keep:] if keep else []

            current.append(segment)
            current_sizes.append(size)

        if current:
            chunks.append(" ".join(current))

        return chunks

    def _overlap_count(self, sizes: list[int]) -> int:
        """How many trailing segments to carry into the next chunk."""
        if self.chunk_overlap <= 0:
            return 0
        keep = 1
        total = sizes[-1]
        while keep < len(sizes) and total + sizes[-keep - 1] <= self.chunk_overlap:
            keep += 1
            total += sizes[-keep]
        # a single-segment chunk is carried whole and the next chunk grows past chunk_size
        return min(keep, len(sizes) - 1) or 1

    def __repr__(self) -> str:
        return (
            f"BasicChunker(method={self.method.value}, "
            f"chunk_size={self.chunk_size}, "
            f"chunk_overlap={self.chunk_overlap})"
        )
