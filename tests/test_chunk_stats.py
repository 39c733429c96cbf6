import pytest

from chunkbench.chunk_stats import (
    compute_overlap_stats,
    compute_statistics,
    count_sentences,
    count_words,
    upper_median,
)
from chunkbench.models import ChunkStats, SizeDistribution


def test_empty_sequence_gives_zero_report(token_counter):
    report = compute_statistics([], 100, token_counter)

    assert report.chunks_created == 0
    assert report.tokens_processed == 0
    assert report.average_chunk_size == 0
    assert report.size_distribution == SizeDistribution(0, 0, 0)
    assert report.chunk_stats == ChunkStats()
    assert report.overlap_stats.average_overlap == 0


def test_statistics_are_idempotent(token_counter, sample_text):
    chunks = sample_text.split("\n\n")
    first = compute_statistics(chunks, 50, token_counter)
    second = compute_statistics(chunks, 50, token_counter)
    assert first == second


def test_median_is_upper_median():
    assert upper_median([1, 2, 3, 4]) == 3
    assert upper_median([4, 1, 3]) == 3
    assert upper_median([]) == 0


def test_size_distribution_uses_token_counts():
    chunks = ["a", "a b", "a b c", "a b c d"]
    report = compute_statistics(chunks, 10, lambda t: len(t.split()))

    assert report.size_distribution == SizeDistribution(min=1, max=4, median=3)
    assert report.tokens_processed == 10
    assert report.average_chunk_size == 2.5


def test_sentence_and_word_counts():
    assert count_sentences("One. Two! Three?") == 3
    assert count_sentences("Wait... what?!") == 2
    assert count_sentences("   ") == 0
    assert count_words("  spaced   out words ") == 3
    assert count_words("") == 0


def test_chunk_stats_aggregates(token_counter):
    report = compute_statistics(["One. Two.", "Three four five."], 10, token_counter)

    assert report.chunk_stats.min_sentences_per_chunk == 1
    assert report.chunk_stats.max_sentences_per_chunk == 2
    assert report.chunk_stats.avg_sentences_per_chunk == 1.5
    assert report.chunk_stats.avg_words_per_chunk == 2.5


def test_overlap_ratio_relative_to_target(token_counter):
    report = compute_statistics(["alpha beta", "beta gamma"], 8, token_counter)

    assert report.overlap_stats.max_overlap == 4
    assert report.overlap_stats.overlap_ratio == pytest.approx(0.5)


def test_overlap_not_tracked(token_counter):
    report = compute_statistics(["a", "b"], 0, token_counter, track_overlap=False)
    assert report.overlap_stats is None


@pytest.mark.parametrize("target", [0, -5])
def test_non_positive_target_raises(token_counter, target):
    with pytest.raises(ValueError, match="target_chunk_size"):
        compute_statistics(["a b", "b c"], target, token_counter)
    with pytest.raises(ValueError):
        compute_overlap_stats([], target)


def test_timing_fields_left_for_caller(token_counter):
    report = compute_statistics(["x"], 1, token_counter, separator_stats={"\n": 2})
    assert report.total_time == 0
    assert report.memory_usage == 0
    assert report.separator_stats == {"\n": 2}


def test_to_dict_omits_absent_sections(token_counter):
    data = compute_statistics(["x"], 1, token_counter, track_overlap=False).to_dict()
    assert "overlap_stats" not in data
    assert "separator_stats" not in data
    assert "embedding_api_calls" not in data
    assert data["size_distribution"] == {"min": 1, "max": 1, "median": 1}
