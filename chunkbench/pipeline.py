"""
Multi-stage text pipeline.

A TextPipeline chains chunking strategies: each stage receives the
previous stage's chunks joined with a newline and re-chunks that text.
A typical pipeline normalises first and splits second:

    >>> pipeline = TextPipeline()
    >>> pipeline.add_step(TextPreprocessor())
    >>> pipeline.add_step(BasicChunker(method="sentence", chunk_size=200))
    >>> result = pipeline.execute(text)

execute_batch runs independent pipelines over many texts on a thread
pool. Stages must not share mutable state across invocations, which
holds for every strategy in chunkbench.strategies.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable

from .models import Chunk, ChunkerResult
from .strategies.base import ChunkingStrategy

logger = logging.getLogger(__name__)

STAGE_JOINER = "\n"


class TextPipeline:
    """Ordered list of chunking stages applied one after another."""

    def __init__(self, steps: Iterable[ChunkingStrategy] | None = None):
        self.steps: list[ChunkingStrategy] = list(steps or [])

    def add_step(self, step: ChunkingStrategy) -> "TextPipeline":
        """Append a stage; returns self so calls can be chained."""
        self.steps.append(step)
        return self

    def execute(self, text: str) -> ChunkerResult:
        """
        Run every stage over text.

        Args:
            text: Raw input text

        Returns:
            The last stage's ChunkerResult. With no stages, the input as a
            single chunk and no report.

        Raises:
            ChunkingFailed: If any stage fails; later stages do not run
        """
        if not self.steps:
            return ChunkerResult(chunks=[Chunk(content=text, index=0)])

        result: ChunkerResult | None = None
        current = text
        for position, step in enumerate(self.steps, 1):
            result = step.process(current)
            logger.debug(
                "stage %d/%d (%s): %d chunks",
                position, len(self.steps), step.display_name, len(result.chunks),
            )
            current = STAGE_JOINER.join(result.texts)
        return result

    def execute_batch(
        self,
        texts: Iterable[str],
        max_workers: int | None = None,
    ) -> list[ChunkerResult]:
        """
        Execute the pipeline over many texts concurrently.

        Results are returned in input order. The first failure propagates.
        """
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            return list(executor.map(self.execute, texts))

    def __len__(self) -> int:
        return len(self.steps)

    def __repr__(self) -> str:
        stages = ", ".join(step.display_name for step in self.steps)
        return f"TextPipeline([{stages}])"
