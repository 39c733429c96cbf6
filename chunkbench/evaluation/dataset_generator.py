"""Generate evaluation questions from documents with an LLM."""

import json
import logging
from typing import Any, Sequence

from openai import OpenAIError

from ..exceptions import ExternalServiceFailed, QuestionGenerationFailed

logger = logging.getLogger(__name__)

QUESTION_PROMPT = """\
Given the following text, generate {num_questions} diverse and specific questions that can \
be answered using the information provided. The questions should cover different aspects \
and topics from the text. Format your response as a JSON array of strings containing only \
the questions.

Text:
{text}

Generate {num_questions} questions:"""


class QuestionGenerator:
    """
    Ask an LLM for questions answerable from a set of documents.

    Example:
        >>> from llama_index.llms.openai import OpenAI
        >>> generator = QuestionGenerator(OpenAI(model="gpt-4", temperature=0))
        >>> questions = generator.generate(documents, num_questions=20)
    """

    def __init__(self, llm: Any):
        self.llm = llm

    def generate(self, documents: Sequence[Any], num_questions: int) -> list[str]:
        """
        Generate up to num_questions questions.

        Args:
            documents: LlamaIndex Documents (or anything with .text)
            num_questions: How many questions to ask for

        Returns:
            Questions from the JSON array in the reply; if the reply is not
            a JSON array of the requested length, lines ending in "?"

        Raises:
            QuestionGenerationFailed: If no questions could be extracted
            ExternalServiceFailed: If the LLM call fails
        """
        text = "\n\n".join(doc.text for doc in documents)
        prompt = QUESTION_PROMPT.format(num_questions=num_questions, text=text)

        try:
            reply = self.llm.complete(prompt).text
        except OpenAIError as e:
            raise ExternalServiceFailed("OpenAI", "question generation", e) from e

        questions = self._parse_json(reply, num_questions)
        if questions is not None:
            return questions

        logger.warning("Question reply was not a JSON array; falling back to line extraction")
        lines = [line.strip() for line in reply.splitlines() if line.strip().endswith("?")]
        if not lines:
            raise QuestionGenerationFailed("Could not generate any valid questions")
        return lines[:num_questions]

    @staticmethod
    def _parse_json(reply: str, num_questions: int) -> list[str] | None:
        try:
            questions = json.loads(reply)
        except json.JSONDecodeError:
            return None
        if (
            isinstance(questions, list)
            and len(questions) == num_questions
            and all(isinstance(q, str) for q in questions)
        ):
            return questions
        return None
