"""
Semantic embedding-based chunking strategy.

This module implements chunking that merges adjacent passages when their
embeddings are similar, so topic shifts become chunk boundaries.

How it works:
=============
1. Pre-split the document with LangChain's RecursiveCharacterTextSplitter
   (chunk_size / chunk_overlap characters)
2. Embed every pre-split chunk
3. Walk the chunks in order; when the cosine similarity between the
   running chunk and the next one is at least similarity_threshold, merge
   them and re-embed the merged text
4. Otherwise close the running chunk and start a new one

IMPORTANT: Not deterministic!
=============================
Boundaries depend on the embedding model's output, which can change
between calls and model versions. Two runs over the same text may give
different chunks. Compare this strategy on distributions, never on exact
chunk equality.

Cost consideration:
    - One embedding call per pre-split chunk, plus one per merge
    - The number of calls made is reported as embedding_api_calls
"""

import threading
from dataclasses import replace
from typing import Any

import numpy as np
from langchain_text_splitters import RecursiveCharacterTextSplitter

from ..exceptions import ConfigurationInvalid
from ..models import ChunkerResult, PerformanceReport
from .base import ChunkingStrategy


def cosine_similarity(a: list[float], b: list[float]) -> float:
    """Cosine similarity of two vectors; 0.0 if either has zero norm."""
    va = np.asarray(a, dtype=float)
    vb = np.asarray(b, dtype=float)
    denom = np.linalg.norm(va) * np.linalg.norm(vb)
    if denom == 0:
        return 0.0
    return float(np.dot(va, vb) / denom)


class SemanticChunker(ChunkingStrategy):
    """
    Chunk documents by merging semantically similar neighbours.

    Attributes:
        embed_model: LlamaIndex embedding model (get_text_embedding)
        similarity_threshold: Minimum cosine similarity for a merge
        last_embedding_api_calls: Embedding calls made by the most recent
            process() call on this instance

    Example:
        >>> from llama_index.embeddings.openai import OpenAIEmbedding
        >>> embed_model = OpenAIEmbedding(model="text-embedding-3-small")
        >>> chunker = SemanticChunker(embed_model=embed_model)
        >>> result = chunker.process(text)
        >>> print(result.report.embedding_api_calls)

    Note:
        - Requires an embedding model (higher cost than other strategies)
        - Not deterministic, see module docstring
    """

    name = "semantic"

    def __init__(
        self,
        chunk_size: int = 500,
        chunk_overlap: int = 50,
        embed_model: Any = None,
        similarity_threshold: float = 0.8,
        **kwargs: Any,
    ):
        """
        Initialize the semantic chunker.

        Args:
            chunk_size: Pre-split chunk size in characters
            chunk_overlap: Pre-split overlap in characters
            embed_model: LlamaIndex embedding model for computing similarities.
                Required - will raise error if not provided.
            similarity_threshold: Cosine similarity at or above which adjacent
                chunks are merged. Higher values = more, smaller chunks.
            **kwargs: Passed to ChunkingStrategy (token_counter, clock, ...)

        Raises:
            ConfigurationInvalid: If embed_model is not provided
        """
        super().__init__(chunk_size, chunk_overlap, **kwargs)

        if embed_model is None:
            raise ConfigurationInvalid(
                "SemanticChunker requires an embedding model. "
                "Pass embed_model parameter, e.g.:\n"
                "  from llama_index.embeddings.openai import OpenAIEmbedding\n"
                "  embed_model = OpenAIEmbedding(model='text-embedding-3-small')\n"
                "  chunker = SemanticChunker(embed_model=embed_model)"
            )

        self._embed_model = embed_model
        self.similarity_threshold = similarity_threshold
        self.last_embedding_api_calls = 0
        self._calls = threading.local()

        try:
            self._pre_splitter = RecursiveCharacterTextSplitter(
                chunk_size=chunk_size,
                chunk_overlap=chunk_overlap,
            )
        except ValueError as e:
            raise ConfigurationInvalid(str(e)) from e

    @property
    def display_name(self) -> str:
        return "Semantic Merge"

    def _embed(self, text: str) -> list[float]:
        self._calls.count += 1
        return self._embed_model.get_text_embedding(text)

    def process(self, text: str) -> ChunkerResult:
        self._calls.count = 0
        return super().process(text)

    def _split(self, text: str) -> list[str]:
        chunks = self._pre_splitter.split_text(text)
        if len(chunks) <= 1:
            return chunks

        embeddings = [self._embed(chunk) for chunk in chunks]
        merged: list[str] = []
        current_chunk = chunks[0]
        current_embedding = embeddings[0]

        for chunk, embedding in zip(chunks[1:], embeddings[1:]):
            if cosine_similarity(current_embedding, embedding) >= self.similarity_threshold:
                current_chunk = f"{current_chunk} {chunk}"
                current_embedding = self._embed(current_chunk)
            else:
                merged.append(current_chunk)
                current_chunk = chunk
                current_embedding = embedding

        merged.append(current_chunk)
        return merged

    def _finalize_report(self, report: PerformanceReport) -> PerformanceReport:
        calls = self._calls.count
        self.last_embedding_api_calls = calls
        return replace(report, embedding_api_calls=calls)

    def __repr__(self) -> str:
        return (
            f"SemanticChunker(chunk_size={self.chunk_size}, "
            f"chunk_overlap={self.chunk_overlap}, "
            f"similarity_threshold={self.similarity_threshold})"
        )
