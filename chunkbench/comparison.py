"""
Side-by-side comparison of chunking strategies.

Runs several strategies over the same text, derives the headline metrics
for each one and renders them as a table followed by per-strategy detail:

    Chunker Type | Chunks | Chunks/sec | Avg Size | Memory (MB) |
    Overlap | Sentences/Chunk | Words/Chunk

Strategies run concurrently on a thread pool; rows come back in the order
the strategies were given. A strategy that raises ChunkingFailed gets a
failed row and does not stop the others.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Sequence

from rich.console import Console
from rich.table import Table

from .exceptions import ChunkingFailed
from .models import PerformanceReport
from .strategies.base import ChunkingStrategy

logger = logging.getLogger(__name__)

BYTES_PER_MB = 1024 * 1024


@dataclass
class StrategyComparison:
    """
    One row of a strategy comparison.

    Attributes:
        strategy: Display name of the strategy
        chunk_count: Number of chunks produced
        chunks_per_second: Throughput derived from total_time
        avg_chunk_size: Mean tokens per chunk
        memory_mb: Memory delta in megabytes
        overlap_ratio: Average overlap / target size (None if not tracked)
        sentences_per_chunk: Mean sentences per chunk
        words_per_chunk: Mean words per chunk
        report: Full PerformanceReport (None if the strategy failed)
        error: Failure message (None if the strategy succeeded)
    """

    strategy: str
    chunk_count: int = 0
    chunks_per_second: float = 0.0
    avg_chunk_size: float = 0.0
    memory_mb: float = 0.0
    overlap_ratio: float | None = None
    sentences_per_chunk: float = 0.0
    words_per_chunk: float = 0.0
    report: PerformanceReport | None = None
    error: str | None = None

    @property
    def failed(self) -> bool:
        return self.error is not None

    @classmethod
    def from_report(cls, strategy: str, report: PerformanceReport) -> "StrategyComparison":
        """Derive the headline metrics from a report."""
        seconds = report.total_time / 1000
        return cls(
            strategy=strategy,
            chunk_count=report.chunks_created,
            chunks_per_second=report.chunks_created / seconds if seconds > 0 else 0.0,
            avg_chunk_size=report.average_chunk_size,
            memory_mb=report.memory_usage / BYTES_PER_MB,
            overlap_ratio=report.overlap_stats.overlap_ratio if report.overlap_stats else None,
            sentences_per_chunk=report.chunk_stats.avg_sentences_per_chunk,
            words_per_chunk=report.chunk_stats.avg_words_per_chunk,
            report=report,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "strategy": self.strategy,
            "chunk_count": self.chunk_count,
            "chunks_per_second": self.chunks_per_second,
            "avg_chunk_size": self.avg_chunk_size,
            "memory_mb": self.memory_mb,
            "overlap_ratio": self.overlap_ratio,
            "sentences_per_chunk": self.sentences_per_chunk,
            "words_per_chunk": self.words_per_chunk,
            "error": self.error,
            "report": self.report.to_dict() if self.report else None,
        }


def _run_one(strategy: ChunkingStrategy, text: str) -> StrategyComparison:
    try:
        result = strategy.process(text)
    except ChunkingFailed as e:
        logger.warning("%s failed: %s", strategy.display_name, e)
        return StrategyComparison(strategy=strategy.display_name, error=str(e))
    return StrategyComparison.from_report(strategy.display_name, result.report)


def compare_strategies(
    strategies: Sequence[ChunkingStrategy],
    text: str,
    max_workers: int | None = None,
) -> list[StrategyComparison]:
    """
    Run every strategy over text and collect comparison rows.

    Args:
        strategies: Strategies to compare
        text: Input document
        max_workers: Thread pool size (default: one per strategy)

    Returns:
        One StrategyComparison per strategy, in the given order
    """
    if not strategies:
        return []

    workers = max_workers or len(strategies)
    with ThreadPoolExecutor(max_workers=workers) as executor:
        return list(executor.map(lambda s: _run_one(s, text), strategies))


def _fmt(value: float | None) -> str:
    return "N/A" if value is None else f"{value:.2f}"


def build_table(rows: Sequence[StrategyComparison], title: str | None = None) -> Table:
    """Build the summary table for a set of comparison rows."""
    table = Table(title=title, show_header=True, header_style="bold magenta")
    table.add_column("Chunker Type", style="cyan")
    table.add_column("Chunks", justify="right")
    table.add_column("Chunks/sec", justify="right")
    table.add_column("Avg Size", justify="right")
    table.add_column("Memory (MB)", justify="right")
    table.add_column("Overlap", justify="right")
    table.add_column("Sentences/Chunk", justify="right")
    table.add_column("Words/Chunk", justify="right")

    for row in rows:
        if row.failed:
            table.add_row(row.strategy, "[red]FAILED[/red]", *["-"] * 6)
            continue
        table.add_row(
            row.strategy,
            str(row.chunk_count),
            _fmt(row.chunks_per_second),
            _fmt(row.avg_chunk_size),
            _fmt(row.memory_mb),
            _fmt(row.overlap_ratio),
            _fmt(row.sentences_per_chunk),
            _fmt(row.words_per_chunk),
        )
    return table


def print_comparison(
    rows: Sequence[StrategyComparison],
    title: str | None = None,
    console: Console | None = None,
) -> None:
    """Print the summary table and detailed statistics per strategy."""
    console = console or Console()
    console.print(build_table(rows, title=title))

    console.print("\n[bold]Detailed Statistics:[/bold]")
    for row in rows:
        console.print(f"\n[cyan]{row.strategy}[/cyan] Statistics:")
        if row.failed:
            console.print(f"  [red]Error:[/red] {row.error}")
            continue

        report = row.report
        console.print(f"  Chunk Size Distribution: {report.size_distribution}")
        console.print(f"  Chunk Stats: {report.chunk_stats}")
        if report.overlap_stats is not None:
            console.print(f"  Overlap Stats: {report.overlap_stats}")
        if report.separator_stats is not None:
            console.print(f"  Separator Usage: {report.separator_stats}")
        if report.embedding_api_calls is not None:
            console.print(f"  Embedding API Calls: {report.embedding_api_calls}")
