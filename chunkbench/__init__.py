"""
Chunking Benchmark Module

A harness for comparing text-chunking strategies for retrieval-augmented
pipelines. Every strategy is measured the same way: elapsed time, memory
delta, token-size distribution, sentence and word density per chunk and
overlap between adjacent chunks. Chunk sizes can additionally be scored
end to end with an LLM judge (faithfulness and relevancy).

Key Questions:
    1. Throughput: How fast does each splitter chunk a document?
    2. Shape: How evenly sized are the chunks, and how much do they overlap?
    3. Quality: Which chunk size gives the most faithful, relevant answers?

Quick Start:
    # Run from command line
    chunkbench --list              # List comparisons and strategies
    chunkbench --compare default   # Compare strategies on test documents
    chunkbench --evaluate          # Judge chunk sizes (needs OPENAI_API_KEY)

    # Use programmatically
    from chunkbench.strategies import STRATEGIES, get_strategy
    from chunkbench.comparison import compare_strategies
    from chunkbench.runner import ComparisonRunner

Example:
    >>> from chunkbench.strategies import BasicChunker
    >>> chunker = BasicChunker(method="word", chunk_size=256, chunk_overlap=0)
    >>> result = chunker.process(text)
    >>> result.report.chunks_created
"""

__version__ = "1.0.0"

# Lazy imports to avoid pulling in every backend on import
# Users should import from submodules directly:
#   from chunkbench.strategies import STRATEGIES, BasicChunker
#   from chunkbench.pipeline import TextPipeline
#   from chunkbench.runner import ComparisonRunner
