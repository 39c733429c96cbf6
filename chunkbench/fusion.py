"""
Reciprocal Rank Fusion (RRF).

Merges ranked result lists from independent retrieval methods (full-text
and vector search) into one ranking. Each result at zero-based rank r in a
list contributes 1 / (k + r + 1) to its identifier's fused score; scores
from different lists are summed. Raw retrieval scores are ignored, so
methods with incomparable score scales can be combined.

Ties are broken by first-seen order: the identifier that appeared first
(earlier list, then lower rank) comes first.
"""

from typing import Iterable, Sequence

from .models import RankedResult

RRF_K = 60


def reciprocal_rank_fusion(
    result_lists: Iterable[Sequence[RankedResult]],
    k: int = RRF_K,
) -> list[tuple[str, float]]:
    """
    Fuse ranked lists into (identifier, fused_score) pairs.

    Args:
        result_lists: Ranked lists, best result first in each
        k: RRF smoothing constant (60 by default)

    Returns:
        (id, score) pairs sorted by descending fused score

    Example:
        >>> a = [RankedResult("x", ""), RankedResult("y", "")]
        >>> b = [RankedResult("y", "")]
        >>> reciprocal_rank_fusion([a, b])[0][0]
        'y'
    """
    scores: dict[str, float] = {}

    for results in result_lists:
        for rank, result in enumerate(results):
            scores[result.id] = scores.get(result.id, 0.0) + 1 / (k + rank + 1)

    # sorted() is stable with reverse=True, so dict insertion order breaks ties
    return sorted(scores.items(), key=lambda item: item[1], reverse=True)
