"""
Chunking Strategy Registry

This module provides a registry of all available chunking strategies.
Each strategy implements the ChunkingStrategy interface.

Available Strategies:
    - basic: Hand-rolled character/word/sentence/paragraph splitting
    - langchain: LangChain text splitters (recursive, token, character, markdown)
    - llamaindex: Respects sentence boundaries (LlamaIndex default)
    - nlp: Tokenizer-detected sentences packed into token budgets
    - semantic: Embedding-based merging of similar neighbours
    - preprocess: Text normalisation stage (one chunk out)

Usage:
    >>> from chunkbench.strategies import STRATEGIES, get_strategy
    >>>
    >>> # Get strategy by name
    >>> chunker = get_strategy("basic", method="word", chunk_size=256)
    >>>
    >>> # Or instantiate directly
    >>> from chunkbench.strategies import LangchainChunker
    >>> chunker = LangchainChunker(splitter_type="recursive", chunk_size=1000)
    >>>
    >>> # Chunk a document
    >>> result = chunker.process(text)

Extending:
    To add a custom strategy:
    1. Create a new file in chunkbench/strategies/
    2. Implement the ChunkingStrategy interface (_split)
    3. Register it in this __init__.py:

    >>> from .my_strategy import MyCustomChunker
    >>> STRATEGIES["my_custom"] = MyCustomChunker
"""

from typing import Any

from ..exceptions import ConfigurationInvalid
from .base import ChunkingStrategy
from .basic import BasicChunker, SplitMethod
from .langchain import LangchainChunker, SplitterType
from .llamaindex import SentenceChunker
from .nlp import NLPChunker
from .preprocess import TextPreprocessor
from .semantic import SemanticChunker

# Strategy Registry
# Maps strategy name -> strategy class
STRATEGIES: dict[str, type[ChunkingStrategy]] = {
    "basic": BasicChunker,
    "langchain": LangchainChunker,
    "llamaindex": SentenceChunker,
    "nlp": NLPChunker,
    "semantic": SemanticChunker,
    "preprocess": TextPreprocessor,
}


def get_strategy(name: str, **options: Any) -> ChunkingStrategy:
    """
    Factory function to get a chunking strategy by name.

    Args:
        name: Strategy name (see STRATEGIES)
        **options: Strategy options (chunk_size, chunk_overlap, method, ...).
            Options a strategy does not know are ignored.

    Returns:
        Instantiated ChunkingStrategy

    Raises:
        ConfigurationInvalid: If strategy name is not recognized or the
            options are rejected by the strategy

    Example:
        >>> chunker = get_strategy("langchain", splitter_type="token", chunk_size=256)
        >>> result = chunker.process(text)
    """
    if name not in STRATEGIES:
        available = ", ".join(STRATEGIES.keys())
        raise ConfigurationInvalid(
            f"Unknown strategy '{name}'. Available strategies: {available}"
        )

    strategy_class = STRATEGIES[name]
    return strategy_class(**options)


def list_strategies() -> list[dict[str, str]]:
    """
    List all available chunking strategies with descriptions.

    Returns:
        List of dicts with 'name' and 'description' keys

    Example:
        >>> for s in list_strategies():
        ...     print(f"{s['name']}: {s['description']}")
    """
    return [
        {
            "name": name,
            "description": _first_doc_line(cls),
        }
        for name, cls in STRATEGIES.items()
    ]


def _first_doc_line(cls: type) -> str:
    if not cls.__doc__:
        return "No description"
    return cls.__doc__.strip().split("\n")[0]


__all__ = [
    "ChunkingStrategy",
    "BasicChunker",
    "SplitMethod",
    "LangchainChunker",
    "SplitterType",
    "SentenceChunker",
    "NLPChunker",
    "SemanticChunker",
    "TextPreprocessor",
    "STRATEGIES",
    "get_strategy",
    "list_strategies",
]
