"""
LLM-judged evaluation of chunking.

    judges             FaithfulnessEvaluator, RelevancyEvaluator
    dataset_generator  QuestionGenerator
    chunk_evaluator    ChunkingEvaluator, select_optimal
"""

from .chunk_evaluator import (
    DEFAULT_CHUNK_SIZES,
    ChunkingEvaluator,
    ChunkSizeEvaluation,
    select_optimal,
)
from .dataset_generator import QuestionGenerator
from .judges import (
    FaithfulnessEvaluator,
    JudgeResult,
    QueryResponse,
    RelevancyEvaluator,
    parse_judgement,
)

__all__ = [
    "DEFAULT_CHUNK_SIZES",
    "ChunkingEvaluator",
    "ChunkSizeEvaluation",
    "select_optimal",
    "QuestionGenerator",
    "FaithfulnessEvaluator",
    "RelevancyEvaluator",
    "JudgeResult",
    "QueryResponse",
    "parse_judgement",
]
