import logging

import pytest
from openai import OpenAIError

from chunkbench.evaluation.judges import (
    FAITHFULNESS_PARSE_ERROR,
    NO_CONTEXT,
    RELEVANCY_PARSE_ERROR,
    FaithfulnessEvaluator,
    QueryResponse,
    RelevancyEvaluator,
    parse_judgement,
)
from chunkbench.exceptions import ExternalServiceFailed, JudgeParseFailed

VERDICT = '{"passing": true, "score": 0.85, "feedback": "Supported by context"}'


class FailingLLM:
    def complete(self, prompt):
        raise OpenAIError("rate limited")


def test_parse_plain_json():
    result = parse_judgement(VERDICT)

    assert result.passing is True
    assert result.score == 0.85
    assert result.feedback == "Supported by context"


def test_parse_code_fenced_json():
    result = parse_judgement(f"```json\n{VERDICT}\n```")

    assert result.score == 0.85


@pytest.mark.parametrize("reply", [
    "The answer looks good",
    "[0.5]",
    '{"passing": true}',
    '{"score": "high"}',
    '{"passing": true, "score": 7}',
    '{"passing": true, "score": -0.2}',
    '{"passing": "false", "score": 0.5}',
    '{"passing": 1, "score": 0.5}',
])
def test_parse_rejects_bad_replies(reply):
    with pytest.raises(JudgeParseFailed):
        parse_judgement(reply)


def test_faithfulness_prompt_contains_response_and_context(make_llm):
    llm = make_llm(VERDICT)
    judge = FaithfulnessEvaluator(llm)

    result = judge.evaluate_response(QueryResponse("Paris", ["France's capital is Paris."]))

    assert result.score == 0.85
    assert "Paris" in llm.prompts[0]
    assert "France's capital is Paris." in llm.prompts[0]


def test_relevancy_prompt_contains_query(make_llm):
    llm = make_llm(VERDICT)
    judge = RelevancyEvaluator(llm)

    judge.evaluate_response(QueryResponse("Paris"), "What is the capital of France?")

    assert "What is the capital of France?" in llm.prompts[0]
    assert NO_CONTEXT in llm.prompts[0]


def test_unparseable_reply_scores_zero(make_llm, caplog):
    judge = FaithfulnessEvaluator(make_llm("I think it is fine."))

    with caplog.at_level(logging.WARNING):
        result = judge.evaluate_response(QueryResponse("answer", ["context"]))

    assert result.passing is False
    assert result.score == 0.0
    assert result.feedback == FAITHFULNESS_PARSE_ERROR
    assert "Could not parse judge response" in caplog.text


def test_relevancy_parse_feedback(make_llm):
    judge = RelevancyEvaluator(make_llm("nope"))

    result = judge.evaluate_response(QueryResponse("answer"), "query")

    assert result.feedback == RELEVANCY_PARSE_ERROR


def test_llm_errors_propagate():
    judge = FaithfulnessEvaluator(FailingLLM())

    with pytest.raises(ExternalServiceFailed) as excinfo:
        judge.evaluate_response(QueryResponse("answer"))

    assert excinfo.value.service == "OpenAI"
    assert isinstance(excinfo.value.cause, OpenAIError)


def test_out_of_range_score_falls_back_to_zero(make_llm):
    judge = RelevancyEvaluator(make_llm('{"passing": "false", "score": 7}'))

    result = judge.evaluate_response(QueryResponse("answer"), "query")

    assert result.passing is False
    assert result.score == 0.0
    assert result.feedback == RELEVANCY_PARSE_ERROR


def test_missing_passing_defaults_to_false():
    assert parse_judgement('{"score": 1}').passing is False
