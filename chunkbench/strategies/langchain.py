"""
LangChain text-splitter chunking strategy.

This module wraps the splitters from langchain_text_splitters, the
INDUSTRY STANDARD family of chunkers. One strategy class covers four
splitter types:

    recursive - RecursiveCharacterTextSplitter, hierarchical separators
    token     - TokenTextSplitter, fixed token windows (cl100k_base)
    character - CharacterTextSplitter, a single separator
    markdown  - MarkdownTextSplitter, markdown-aware separators

How recursive splitting works:
==============================
The splitter uses a hierarchy of separators:
    1. "\\n\\n" - Paragraph boundaries (preferred)
    2. "\\n"   - Line breaks
    3. " "     - Word boundaries
    4. ""      - Character level (last resort)

It tries each separator in order, only falling back to the next if
the current separator doesn't produce small enough chunks.

Separator usage:
================
Reports from this strategy include separator_stats: how many times each
configured separator occurs in the input. A document with few paragraph
breaks will fall through to line and word boundaries, which usually shows
up as a wider chunk size distribution.
"""

from enum import Enum
from typing import Any

from langchain_text_splitters import (
    CharacterTextSplitter,
    MarkdownTextSplitter,
    RecursiveCharacterTextSplitter,
    TextSplitter,
    TokenTextSplitter,
)

from ..exceptions import ConfigurationInvalid
from ..tokenizer import DEFAULT_ENCODING
from .base import ChunkingStrategy


class SplitterType(str, Enum):
    """Which LangChain splitter LangchainChunker wraps."""

    RECURSIVE = "recursive"
    TOKEN = "token"
    CHARACTER = "character"
    MARKDOWN = "markdown"


class LangchainChunker(ChunkingStrategy):
    """
    Chunk documents with a LangChain text splitter.

    Attributes:
        splitter_type: SplitterType in use
        chunk_size: Target chunk size in characters (tokens for "token")
        chunk_overlap: Overlap between chunks, same unit as chunk_size
        separators: Separator hierarchy (recursive) or single separator
            (character, first entry is used)

    Example:
        >>> chunker = LangchainChunker(splitter_type="recursive", chunk_size=500)
        >>> result = chunker.process(text)
        >>> print(result.report.separator_stats)
    """

    name = "langchain"

    # Default separator hierarchy
    DEFAULT_SEPARATORS = ["\n\n", "\n", " ", ""]

    def __init__(
        self,
        chunk_size: int = 500,
        chunk_overlap: int = 50,
        splitter_type: SplitterType | str = SplitterType.RECURSIVE,
        separators: list[str] | None = None,
        keep_separator: bool = True,
        **kwargs: Any,
    ):
        """
        Initialize the LangChain chunker.

        Args:
            chunk_size: Target chunk size
            chunk_overlap: Overlap between chunks
            splitter_type: One of "recursive", "token", "character", "markdown"
            separators: Custom separator hierarchy. If None, uses default:
                ["\\n\\n", "\\n", " ", ""]
            keep_separator: Keep separators attached to chunks (recursive only)
            **kwargs: Passed to ChunkingStrategy (token_counter, clock, ...)

        Raises:
            ConfigurationInvalid: If the splitter type is unknown or LangChain
                rejects the size/overlap combination
        """
        super().__init__(chunk_size, chunk_overlap, **kwargs)

        try:
            self.splitter_type = SplitterType(splitter_type)
        except ValueError:
            available = ", ".join(t.value for t in SplitterType)
            raise ConfigurationInvalid(
                f"Unknown splitter type '{splitter_type}'. Available types: {available}"
            ) from None

        self._separators = separators or self.DEFAULT_SEPARATORS
        self._keep_separator = keep_separator

        try:
            self._splitter = self._create_splitter()
        except ValueError as e:
            raise ConfigurationInvalid(str(e)) from e

    def _create_splitter(self) -> TextSplitter:
        if self.splitter_type is SplitterType.RECURSIVE:
            return RecursiveCharacterTextSplitter(
                chunk_size=self.chunk_size,
                chunk_overlap=self.chunk_overlap,
                separators=self._separators,
                keep_separator=self._keep_separator,
            )
        if self.splitter_type is SplitterType.TOKEN:
            return TokenTextSplitter(
                encoding_name=DEFAULT_ENCODING,
                chunk_size=self.chunk_size,
                chunk_overlap=self.chunk_overlap,
            )
        if self.splitter_type is SplitterType.CHARACTER:
            return CharacterTextSplitter(
                separator=self._separators[0],
                chunk_size=self.chunk_size,
                chunk_overlap=self.chunk_overlap,
            )
        return MarkdownTextSplitter(
            chunk_size=self.chunk_size,
            chunk_overlap=self.chunk_overlap,
        )

    @property
    def display_name(self) -> str:
        return f"LangChain {self.splitter_type.value.title()}"

    def _split(self, text: str) -> list[str]:
        return self._splitter.split_text(text)

    def _separator_stats(self, text: str) -> dict[str, int] | None:
        # the empty separator is the character-level fallback, not a marker in the text
        return {sep: text.count(sep) for sep in self._separators if sep}

    def __repr__(self) -> str:
        return (
            f"LangchainChunker(splitter_type={self.splitter_type.value}, "
            f"chunk_size={self.chunk_size}, "
            f"chunk_overlap={self.chunk_overlap}, "
            f"separators={self._separators})"
        )
