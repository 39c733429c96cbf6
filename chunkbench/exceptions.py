"""
Exception hierarchy for chunkbench.

All errors raised by this package derive from ChunkBenchError so callers
can catch everything the harness raises with a single except clause.

Error kinds:
    - ChunkingFailed: a strategy's underlying splitter raised
    - ConfigurationInvalid: missing API key, bad option values, missing corpus
    - JudgeParseFailed: LLM judge returned something that is not valid JSON
      (recovered inside the evaluators, never propagated to callers)
    - ExternalServiceFailed: database / network / API errors
    - QuestionGenerationFailed: the question generator produced no questions
"""


class ChunkBenchError(Exception):
    """Base class for all chunkbench errors."""


class ChunkingFailed(ChunkBenchError):
    """
    A chunking strategy failed while splitting its input.

    Wraps the original exception exactly once, adding which strategy
    failed and how long the input was.

    Attributes:
        strategy: Name of the strategy that failed
        input_length: Length of the input text in characters
        cause: The original exception
    """

    def __init__(self, strategy: str, input_length: int, cause: BaseException):
        self.strategy = strategy
        self.input_length = input_length
        self.cause = cause
        super().__init__(
            f"Chunking failed in '{strategy}' "
            f"(input length {input_length}): {cause or 'Unknown error'}"
        )


class ConfigurationInvalid(ChunkBenchError, ValueError):
    """Required configuration is missing or an option has an invalid value."""


class JudgeParseFailed(ChunkBenchError):
    """The LLM judge response could not be parsed as an evaluation."""

    def __init__(self, raw_text: str, reason: str):
        self.raw_text = raw_text
        self.reason = reason
        super().__init__(f"Could not parse judge response: {reason}")


class ExternalServiceFailed(ChunkBenchError):
    """A call to an external service (database, embedding API, LLM) failed."""

    def __init__(self, service: str, operation: str, cause: BaseException):
        self.service = service
        self.operation = operation
        self.cause = cause
        super().__init__(f"{service} {operation} failed: {cause}")


class QuestionGenerationFailed(ChunkBenchError):
    """No usable evaluation questions could be extracted from the LLM."""
