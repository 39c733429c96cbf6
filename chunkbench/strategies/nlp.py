"""
NLP sentence-packing chunking strategy.

Splits the text into sentences with the Punkt sentence tokenizer that
LlamaIndex uses, then packs whole sentences into chunks of at most
max_chunk_size tokens. Unlike the regex sentence splitter in basic.py,
sentence punctuation is preserved and "3.5" or "..." inside a sentence
does not cut it.

Overlap is carried at sentence granularity: when overlap_size > 0 the
last overlap_sentences sentences of a chunk (never all of them) open the
next one.

Key characteristics:
    - Never cuts inside a sentence (a single over-long sentence becomes
      its own oversized chunk)
    - Chunk size measured in tokens
    - Deterministic
"""

from typing import Any

from llama_index.core.node_parser.text.utils import split_by_sentence_tokenizer

from .base import ChunkingStrategy


class NLPChunker(ChunkingStrategy):
    """
    Chunk documents by packing tokenizer-detected sentences.

    Attributes:
        chunk_size: Maximum tokens per chunk
        chunk_overlap: Overlap switch; any positive value carries
            overlap_sentences sentences into the next chunk
        overlap_sentences: Number of trailing sentences carried over

    Example:
        >>> chunker = NLPChunker(max_chunk_size=500)
        >>> result = chunker.process(text)
    """

    name = "nlp"

    def __init__(
        self,
        chunk_size: int = 500,
        chunk_overlap: int = 50,
        max_chunk_size: int | None = None,
        overlap_size: int | None = None,
        overlap_sentences: int = 2,
        **kwargs: Any,
    ):
        """
        Initialize the NLP chunker.

        Args:
            chunk_size: Maximum tokens per chunk
            chunk_overlap: Overlap size; 0 disables overlap
            max_chunk_size: Alias for chunk_size (takes precedence)
            overlap_size: Alias for chunk_overlap (takes precedence)
            overlap_sentences: Sentences carried into the next chunk
            **kwargs: Passed to ChunkingStrategy (token_counter, clock, ...)
        """
        if max_chunk_size is not None:
            chunk_size = max_chunk_size
        if overlap_size is not None:
            chunk_overlap = overlap_size
        super().__init__(chunk_size, chunk_overlap, **kwargs)

        self.overlap_sentences = overlap_sentences
        self._sentence_tokenizer = split_by_sentence_tokenizer()

    @property
    def display_name(self) -> str:
        return "NLP Sentence Packing"

    def _sentences(self, text: str) -> list[str]:
        return [s.strip() for s in self._sentence_tokenizer(text) if s.strip()]

    def _split(self, text: str) -> list[str]:
        chunks: list[str] = []
        current: list[str] = []
        current_tokens = 0

        for sentence in self._sentences(text):
            sentence_tokens = self._count_tokens(sentence)

            if current and current_tokens + sentence_tokens > self.chunk_size:
                chunks.append(" ".join(current))
                # never carry the whole emitted chunk into the next one
                keep = min(self._carry_count(), len(current) - 1)
                current = current[len(current) - keep:] if keep > 0 else []
                current_tokens = sum(self._count_tokens(s) for s in current)

            current.append(sentence)
            current_tokens += sentence_tokens

        if current:
            chunks.append(" ".join(current))

        return chunks

    def _carry_count(self) -> int:
        return self.overlap_sentences if self.chunk_overlap > 0 else 0

    def __repr__(self) -> str:
        return (
            f"NLPChunker(chunk_size={self.chunk_size}, "
            f"chunk_overlap={self.chunk_overlap}, "
            f"overlap_sentences={self.overlap_sentences})"
        )
