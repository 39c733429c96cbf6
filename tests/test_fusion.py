import pytest

from chunkbench.fusion import RRF_K, reciprocal_rank_fusion
from chunkbench.models import RankedResult


def results(*ids):
    return [RankedResult(id=i, content=f"content {i}") for i in ids]


def test_tie_resolves_to_first_seen():
    fused = reciprocal_rank_fusion([results("x", "y"), results("y", "x")])

    assert [chunk_id for chunk_id, _ in fused] == ["x", "y"]
    assert fused[0][1] == pytest.approx(fused[1][1])


def test_single_list_contribution():
    fused = dict(reciprocal_rank_fusion([results("a", "b")]))

    assert fused["a"] == pytest.approx(1 / (RRF_K + 1))
    assert fused["b"] == pytest.approx(1 / (RRF_K + 2))


def test_contributions_sum_across_lists():
    fused = dict(reciprocal_rank_fusion([results("a", "b"), results("b")]))

    assert fused["b"] == pytest.approx(1 / 62 + 1 / 61)
    assert fused["a"] == pytest.approx(1 / 61)


def test_every_id_appears_sorted_by_score():
    fused = reciprocal_rank_fusion([results("a", "b", "c"), results("c", "d")])
    ids = [chunk_id for chunk_id, _ in fused]
    scores = [score for _, score in fused]

    assert set(ids) == {"a", "b", "c", "d"}
    assert ids[0] == "c"
    assert scores == sorted(scores, reverse=True)


def test_custom_k_and_empty_input():
    assert reciprocal_rank_fusion([]) == []
    assert reciprocal_rank_fusion([results("a")], k=0) == [("a", 1.0)]
