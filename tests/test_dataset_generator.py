from types import SimpleNamespace

import pytest
from openai import OpenAIError

from chunkbench.evaluation.dataset_generator import QuestionGenerator
from chunkbench.exceptions import ExternalServiceFailed, QuestionGenerationFailed

DOCUMENTS = [SimpleNamespace(text="Chunks are embedded."), SimpleNamespace(text="Queries retrieve chunks.")]


def test_json_array_of_requested_length(make_llm):
    llm = make_llm('["What is embedded?", "What do queries retrieve?"]')

    questions = QuestionGenerator(llm).generate(DOCUMENTS, 2)

    assert questions == ["What is embedded?", "What do queries retrieve?"]
    assert "Chunks are embedded.\n\nQueries retrieve chunks." in llm.prompts[0]
    assert "generate 2 diverse" in llm.prompts[0]


def test_falls_back_to_question_lines(make_llm, caplog):
    reply = "Here are some questions:\n1. What is embedded?\n2. What do queries retrieve?\nThanks"

    questions = QuestionGenerator(make_llm(reply)).generate(DOCUMENTS, 5)

    assert questions == ["1. What is embedded?", "2. What do queries retrieve?"]
    assert "falling back" in caplog.text


def test_wrong_length_array_uses_fallback(make_llm):
    reply = '["What is embedded?"]'

    with pytest.raises(QuestionGenerationFailed):
        QuestionGenerator(make_llm(reply)).generate(DOCUMENTS, 3)


def test_fallback_truncates(make_llm):
    reply = "A?\nB?\nC?"

    assert QuestionGenerator(make_llm(reply)).generate(DOCUMENTS, 2) == ["A?", "B?"]


def test_no_questions_found(make_llm):
    with pytest.raises(QuestionGenerationFailed, match="Could not generate any valid questions"):
        QuestionGenerator(make_llm("I cannot help with that.")).generate(DOCUMENTS, 3)


def test_llm_failure():
    class FailingLLM:
        def complete(self, prompt):
            raise OpenAIError("timeout")

    with pytest.raises(ExternalServiceFailed):
        QuestionGenerator(FailingLLM()).generate(DOCUMENTS, 3)
