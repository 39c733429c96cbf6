from types import SimpleNamespace

import pytest
from llama_index.core import Document
from openai import OpenAIError

from chunkbench.evaluation import chunk_evaluator
from chunkbench.evaluation.chunk_evaluator import (
    ChunkingEvaluator,
    ChunkSizeEvaluation,
    select_optimal,
)
from chunkbench.exceptions import ExternalServiceFailed

VERDICT = '{"passing": true, "score": 0.8, "feedback": "ok"}'


class FakeQueryEngine:
    def __init__(self, fail=False):
        self.fail = fail
        self.questions = []

    def query(self, question):
        if self.fail:
            raise OpenAIError("query failed")
        self.questions.append(question)
        node = SimpleNamespace(get_content=lambda: "retrieved context")
        return SimpleNamespace(response="an answer", source_nodes=[node])


class FakeIndex:
    built = []
    fail_queries = False

    def __init__(self, transformations):
        self.transformations = transformations

    @classmethod
    def from_documents(cls, documents, embed_model=None, transformations=None):
        index = cls(transformations)
        cls.built.append(index)
        return index

    def as_query_engine(self, llm=None):
        return FakeQueryEngine(fail=self.fail_queries)


@pytest.fixture
def fake_index(monkeypatch):
    FakeIndex.built = []
    FakeIndex.fail_queries = False
    monkeypatch.setattr(chunk_evaluator, "VectorStoreIndex", FakeIndex)
    return FakeIndex


@pytest.fixture
def documents():
    return [Document(text="Chunking splits documents. Retrieval finds chunks.")]


def test_combined_score_weights():
    result = ChunkSizeEvaluation(256, average_response_time=1.0,
                                 average_faithfulness=0.9, average_relevancy=0.9)

    assert result.combined_score == pytest.approx(0.3 + 0.36 + 0.27)


def test_zero_response_time_adds_no_speed_bonus():
    result = ChunkSizeEvaluation(128, 0.0, 0.5, 0.5)

    assert result.combined_score == pytest.approx(0.35)


def test_select_optimal_picks_best_score():
    slow = ChunkSizeEvaluation(128, 2.0, 0.5, 0.5)
    fast = ChunkSizeEvaluation(256, 1.0, 0.9, 0.9)

    assert select_optimal([slow, fast]) is fast


def test_select_optimal_ties_go_to_first():
    first = ChunkSizeEvaluation(128, 1.0, 0.5, 0.5)
    second = ChunkSizeEvaluation(256, 1.0, 0.5, 0.5)

    assert select_optimal([first, second]) is first


def test_select_optimal_requires_results():
    with pytest.raises(ValueError):
        select_optimal([])


def test_evaluate_chunk_sizes(make_llm, documents, fake_index):
    evaluator = ChunkingEvaluator(
        judge_llm=make_llm(VERDICT),
        chunk_sizes=[16, 128],
        tokenizer=str.split,
    )

    results = evaluator.evaluate_chunk_sizes(documents, questions=["What is chunking?", "Why?"])

    assert [r.chunk_size for r in results] == [16, 128]
    assert all(r.average_faithfulness == pytest.approx(0.8) for r in results)
    assert all(r.average_relevancy == pytest.approx(0.8) for r in results)
    assert all(r.average_response_time >= 0 for r in results)

    splitters = [index.transformations[0] for index in fake_index.built]
    assert [s.chunk_size for s in splitters] == [16, 128]
    assert [s.chunk_overlap for s in splitters] == [8, 20]


def test_questions_generated_when_not_given(make_llm, documents, fake_index):
    evaluator = ChunkingEvaluator(judge_llm=make_llm(VERDICT), chunk_sizes=[64],
                                  num_questions=2, tokenizer=str.split)
    evaluator.question_generator.llm = make_llm('["What is chunking?", "What is retrieval?"]')

    results = evaluator.evaluate_chunk_sizes(documents)

    assert len(results) == 1
    assert results[0].average_faithfulness == pytest.approx(0.8)


def test_no_questions_gives_zero_scores(make_llm, documents, fake_index):
    evaluator = ChunkingEvaluator(judge_llm=make_llm(VERDICT), chunk_sizes=[64], tokenizer=str.split)

    results = evaluator.evaluate_chunk_sizes(documents, questions=[])

    assert results == [ChunkSizeEvaluation(64, 0.0, 0.0, 0.0)]


def test_query_failure_is_external(make_llm, documents, fake_index):
    fake_index.fail_queries = True
    evaluator = ChunkingEvaluator(judge_llm=make_llm(VERDICT), chunk_sizes=[64], tokenizer=str.split)

    with pytest.raises(ExternalServiceFailed):
        evaluator.evaluate_chunk_sizes(documents, questions=["What?"])


def test_chunk_list_scoring(make_llm):
    llm = make_llm([VERDICT, "not json"])
    evaluator = ChunkingEvaluator(judge_llm=llm)

    assert evaluator.evaluate_faithfulness(["chunk one", "chunk two"]) == pytest.approx(0.4)
    assert evaluator.evaluate_faithfulness([]) == 0.0
    assert evaluator.evaluate_relevancy([]) == 0.0


def test_relevancy_uses_generic_query(make_llm):
    llm = make_llm(VERDICT)
    evaluator = ChunkingEvaluator(judge_llm=llm)

    assert evaluator.evaluate_relevancy(["chunk one"]) == pytest.approx(0.8)
    assert chunk_evaluator.GENERIC_QUERY in llm.prompts[0]


def test_to_dict_includes_combined_score():
    data = ChunkSizeEvaluation(512, 1.0, 1.0, 1.0).to_dict()

    assert data["chunk_size"] == 512
    assert data["combined_score"] == pytest.approx(1.0)
