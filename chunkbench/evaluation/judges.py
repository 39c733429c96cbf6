"""
LLM-as-judge evaluators for faithfulness and relevancy.

Both judges send a single prompt to an LLM and expect a JSON verdict:

    {"passing": true, "score": 0.85, "feedback": "..."}

Faithfulness: does the response only contain claims supported by its
source context? (no hallucinated or unsupported statements)

Relevancy: does the response address the query, with an appropriate level
of detail and no tangents?

Parse failures:
===============
LLMs do not always return valid JSON. A response that cannot be parsed is
not an error for the caller: it is logged at WARNING and scored as a
failing verdict with score 0.0 and a fixed feedback message, so one bad
reply lowers an average instead of aborting a whole evaluation run.
Transport errors from the LLM client are a different matter and propagate
as ExternalServiceFailed.
"""

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any

from openai import OpenAIError

from ..exceptions import ExternalServiceFailed, JudgeParseFailed

logger = logging.getLogger(__name__)

NO_CONTEXT = "No source context provided"

FAITHFULNESS_PARSE_ERROR = "Failed to evaluate faithfulness due to parsing error"
RELEVANCY_PARSE_ERROR = "Failed to evaluate relevancy due to parsing error"

FAITHFULNESS_PROMPT = """\
You are evaluating the faithfulness of an AI response. A faithful response should only \
contain information that can be directly derived from or supported by the source context. \
The response should not include any hallucinated or unsupported claims.

Response to evaluate:
{response}

Source Context:
{context}

Please evaluate the faithfulness of the response by answering the following questions:
1. Does the response contain any information not supported by the source context?
2. Are there any claims or statements that go beyond what can be reasonably inferred from the context?
3. Is the response consistent with the information provided in the source context?

Provide your evaluation in the following JSON format:
{{
  "passing": boolean,
  "score": number between 0 and 1,
  "feedback": "detailed explanation of the evaluation"
}}"""

RELEVANCY_PROMPT = """\
You are evaluating the relevancy of an AI response to a given query. A relevant response \
should directly address the query and provide information that helps answer the question \
or fulfill the request.

Query:
{query}

Response to evaluate:
{response}

Source Context:
{context}

Please evaluate the relevancy of the response by answering the following questions:
1. Does the response directly address the main focus of the query?
2. Is the information provided in the response relevant to answering the question?
3. Does the response contain unnecessary or tangential information not related to the query?
4. Is the level of detail appropriate for the query?

Provide your evaluation in the following JSON format:
{{
  "passing": boolean,
  "score": number between 0 and 1,
  "feedback": "detailed explanation of the evaluation"
}}"""

_CODE_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$")


@dataclass(frozen=True)
class JudgeResult:
    """Verdict from a judge: pass/fail, a 0-1 score and an explanation."""

    passing: bool
    score: float
    feedback: str

    def to_dict(self) -> dict[str, Any]:
        return {"passing": self.passing, "score": self.score, "feedback": self.feedback}


@dataclass
class QueryResponse:
    """A response to judge, with the source texts it was generated from."""

    response: str
    source_texts: list[str] = field(default_factory=list)

    @property
    def context(self) -> str:
        return "\n\n".join(self.source_texts) or NO_CONTEXT


def parse_judgement(text: str) -> JudgeResult:
    """
    Parse an LLM judge reply.

    Accepts bare JSON or JSON wrapped in a markdown code fence.

    Raises:
        JudgeParseFailed: If the reply is not a JSON object with a score in
            [0, 1] and a boolean passing flag
    """
    cleaned = _CODE_FENCE.sub("", text.strip())
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise JudgeParseFailed(text, str(e)) from e

    if not isinstance(data, dict):
        raise JudgeParseFailed(text, "expected a JSON object")

    try:
        score = float(data["score"])
    except (KeyError, TypeError, ValueError) as e:
        raise JudgeParseFailed(text, f"missing or non-numeric score ({e})") from e
    if not 0.0 <= score <= 1.0:
        raise JudgeParseFailed(text, f"score {score} outside [0, 1]")

    passing = data.get("passing", False)
    if not isinstance(passing, bool):
        raise JudgeParseFailed(text, f"passing must be a boolean, got {passing!r}")

    return JudgeResult(
        passing=passing,
        score=score,
        feedback=str(data.get("feedback", "")),
    )


class _Judge:
    parse_error_feedback = ""

    def __init__(self, llm: Any):
        """
        Args:
            llm: LlamaIndex LLM (anything with complete(prompt).text)
        """
        self.llm = llm

    def _judge(self, prompt: str) -> JudgeResult:
        try:
            reply = self.llm.complete(prompt).text
        except OpenAIError as e:
            raise ExternalServiceFailed("OpenAI", "judge completion", e) from e

        try:
            return parse_judgement(reply)
        except JudgeParseFailed as e:
            logger.warning("%s: %s", type(self).__name__, e)
            return JudgeResult(passing=False, score=0.0, feedback=self.parse_error_feedback)


class FaithfulnessEvaluator(_Judge):
    """Judge whether a response is supported by its source context."""

    parse_error_feedback = FAITHFULNESS_PARSE_ERROR

    def evaluate_response(self, response: QueryResponse, query: str | None = None) -> JudgeResult:
        prompt = FAITHFULNESS_PROMPT.format(
            response=response.response,
            context=response.context,
        )
        return self._judge(prompt)


class RelevancyEvaluator(_Judge):
    """Judge whether a response addresses the query."""

    parse_error_feedback = RELEVANCY_PARSE_ERROR

    def evaluate_response(self, response: QueryResponse, query: str | None = None) -> JudgeResult:
        prompt = RELEVANCY_PROMPT.format(
            query=query or "",
            response=response.response,
            context=response.context,
        )
        return self._judge(prompt)
