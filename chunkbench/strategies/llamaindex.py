"""
Sentence-boundary respecting chunking strategy.

This module wraps LlamaIndex's SentenceSplitter, the default node parser
in LlamaIndex. It packs whole sentences into token-bounded chunks, so
chunks end at sentence boundaries where possible.

Key characteristics:
    - Respects sentence boundaries (good for semantic coherence)
    - chunk_size and chunk_overlap are measured in tokens
    - Overlap is carried at sentence granularity, so measured character
      overlap is usually lower than the configured value
    - LlamaIndex default chunking behavior
"""

from typing import Any, Callable

from llama_index.core.node_parser import SentenceSplitter

from ..exceptions import ConfigurationInvalid
from .base import ChunkingStrategy


class SentenceChunker(ChunkingStrategy):
    """
    Chunk documents by sentence boundaries with LlamaIndex.

    Attributes:
        chunk_size: Target chunk size in tokens
        chunk_overlap: Overlap between chunks in tokens

    Example:
        >>> chunker = SentenceChunker(chunk_size=500, chunk_overlap=50)
        >>> result = chunker.process(text)
        >>> # Each chunk ends at a sentence boundary where possible
    """

    name = "llamaindex"

    def __init__(
        self,
        chunk_size: int = 500,
        chunk_overlap: int = 50,
        tokenizer: Callable[[str], list] | None = None,
        **kwargs: Any,
    ):
        """
        Initialize the sentence chunker.

        Args:
            chunk_size: Target chunk size in tokens
            chunk_overlap: Number of tokens to overlap between
                consecutive chunks. Overlap occurs at sentence boundaries.
            tokenizer: Tokenizer the splitter measures chunks with. If None,
                LlamaIndex's global tokenizer is used.
            **kwargs: Passed to ChunkingStrategy (token_counter, clock, ...)

        Raises:
            ConfigurationInvalid: If LlamaIndex rejects the size/overlap pair
        """
        super().__init__(chunk_size, chunk_overlap, **kwargs)

        try:
            self._splitter = SentenceSplitter(
                chunk_size=chunk_size,
                chunk_overlap=chunk_overlap,
                tokenizer=tokenizer,
            )
        except ValueError as e:
            raise ConfigurationInvalid(str(e)) from e

    @property
    def display_name(self) -> str:
        return "LlamaIndex Sentence"

    def _split(self, text: str) -> list[str]:
        return self._splitter.split_text(text)

    def __repr__(self) -> str:
        return (
            f"SentenceChunker(chunk_size={self.chunk_size}, "
            f"chunk_overlap={self.chunk_overlap})"
        )
