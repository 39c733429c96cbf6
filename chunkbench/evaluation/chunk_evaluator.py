"""
Chunk-size evaluation with an LLM judge.

Answers the question "which chunk size gives the best answers on this
corpus?" end to end:

    Documents → Questions → for each chunk size:
                              VectorStoreIndex(SentenceSplitter(size))
                              → query engine → time each question
                              → judge faithfulness + relevancy
                            → averages per size → optimal size

The Score:
==========
select_optimal() ranks sizes by

    0.3 * (1 / average_response_time) + 0.4 * faithfulness + 0.3 * relevancy

so a faster engine wins only when answer quality is close. Response time
is in seconds. A zero response time (no questions answered) contributes
nothing to the score rather than an infinite bonus.

Cost Consideration:
==================
Per chunk size: one embedding pass over the corpus, one query-model call
per question and two judge calls per question. With the defaults (5 sizes,
20 questions) that is 100 query calls and 200 judge calls.

Standalone chunk scoring:
    evaluate_faithfulness / evaluate_relevancy judge a list of chunks
    directly (each chunk is its own response and its own context). This
    is cheaper and is what the CLI uses to score a single strategy.
"""

import logging
import time
from dataclasses import asdict, dataclass
from typing import Any, Callable, Sequence

from llama_index.core import Document, VectorStoreIndex
from llama_index.core.node_parser import SentenceSplitter
from openai import OpenAIError
from tqdm import tqdm

from ..corpus import load_corpus
from ..exceptions import ExternalServiceFailed
from .dataset_generator import QuestionGenerator
from .judges import FaithfulnessEvaluator, QueryResponse, RelevancyEvaluator

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZES = [128, 256, 512, 1024, 2048]
QUERY_CHUNK_OVERLAP = 20
GENERIC_QUERY = "What are the main points discussed in this section?"

SPEED_WEIGHT = 0.3
FAITHFULNESS_WEIGHT = 0.4
RELEVANCY_WEIGHT = 0.3


@dataclass
class ChunkSizeEvaluation:
    """Averages over all questions for one chunk size."""

    chunk_size: int
    average_response_time: float
    average_faithfulness: float
    average_relevancy: float

    @property
    def combined_score(self) -> float:
        speed = 1 / self.average_response_time if self.average_response_time > 0 else 0.0
        return (
            SPEED_WEIGHT * speed
            + FAITHFULNESS_WEIGHT * self.average_faithfulness
            + RELEVANCY_WEIGHT * self.average_relevancy
        )

    def to_dict(self) -> dict[str, Any]:
        return {**asdict(self), "combined_score": self.combined_score}


def select_optimal(results: Sequence[ChunkSizeEvaluation]) -> ChunkSizeEvaluation:
    """
    Pick the chunk size with the best combined score.

    Ties go to the earlier entry.

    Raises:
        ValueError: If results is empty
    """
    if not results:
        raise ValueError("No chunk size results to choose from")

    best = results[0]
    for result in results[1:]:
        if result.combined_score > best.combined_score:
            best = result
    return best


class ChunkingEvaluator:
    """
    Evaluate chunk sizes and chunk lists with LLM judges.

    Attributes:
        judge_llm: LLM used for judging and question generation
        query_llm: LLM the query engine answers with
        embed_model: Embedding model for the vector indexes
        data_dir: Corpus directory (used when no documents are passed)
        num_questions: Questions to generate
        num_pages: Maximum documents to load from data_dir
        chunk_sizes: Chunk sizes to evaluate
        tokenizer: Tokenizer the index splitter measures chunks with
            (default: LlamaIndex global tokenizer)

    Example:
        >>> from llama_index.llms.openai import OpenAI
        >>> from llama_index.embeddings.openai import OpenAIEmbedding
        >>> evaluator = ChunkingEvaluator(
        ...     judge_llm=OpenAI(model="gpt-4", temperature=0),
        ...     query_llm=OpenAI(model="gpt-3.5-turbo", temperature=0),
        ...     embed_model=OpenAIEmbedding(model="text-embedding-3-small"),
        ...     data_dir="data",
        ... )
        >>> results = evaluator.evaluate_chunk_sizes()
        >>> best = select_optimal(results)
    """

    def __init__(
        self,
        judge_llm: Any,
        query_llm: Any = None,
        embed_model: Any = None,
        data_dir: str = "data",
        num_questions: int = 20,
        num_pages: int = 20,
        chunk_sizes: list[int] | None = None,
        tokenizer: Callable[[str], list] | None = None,
    ):
        self.judge_llm = judge_llm
        self.query_llm = query_llm or judge_llm
        self.embed_model = embed_model
        self.data_dir = data_dir
        self.num_questions = num_questions
        self.num_pages = num_pages
        self.chunk_sizes = chunk_sizes or list(DEFAULT_CHUNK_SIZES)
        self.tokenizer = tokenizer

        self.faithfulness = FaithfulnessEvaluator(judge_llm)
        self.relevancy = RelevancyEvaluator(judge_llm)
        self.question_generator = QuestionGenerator(judge_llm)

    def evaluate_faithfulness(self, chunks: Sequence[str]) -> float:
        """Average faithfulness score of chunks judged on their own (0 for none)."""
        if not chunks:
            return 0.0
        scores = [
            self.faithfulness.evaluate_response(QueryResponse(chunk, [chunk])).score
            for chunk in chunks
        ]
        return sum(scores) / len(scores)

    def evaluate_relevancy(self, chunks: Sequence[str]) -> float:
        """Average relevancy score of chunks against a generic query (0 for none)."""
        if not chunks:
            return 0.0
        scores = [
            self.relevancy.evaluate_response(QueryResponse(chunk, [chunk]), GENERIC_QUERY).score
            for chunk in chunks
        ]
        return sum(scores) / len(scores)

    def load_documents(self) -> list[Document]:
        """Load at most num_pages documents from data_dir."""
        return load_corpus(self.data_dir)[:self.num_pages]

    def evaluate_chunk_sizes(
        self,
        documents: list[Document] | None = None,
        questions: list[str] | None = None,
    ) -> list[ChunkSizeEvaluation]:
        """
        Evaluate every configured chunk size.

        Args:
            documents: Corpus (default: load from data_dir)
            questions: Evaluation questions (default: generate from documents)

        Returns:
            One ChunkSizeEvaluation per chunk size, in configured order
        """
        if documents is None:
            documents = self.load_documents()
        if questions is None:
            questions = self.question_generator.generate(documents, self.num_questions)

        print(f"Evaluating {len(self.chunk_sizes)} chunk sizes "
              f"with {len(questions)} questions over {len(documents)} documents")

        results = []
        for chunk_size in self.chunk_sizes:
            result = self._evaluate_chunk_size(documents, questions, chunk_size)
            results.append(result)
            print(
                f"Chunk size {chunk_size} - "
                f"Average Response time: {result.average_response_time:.2f}s, "
                f"Average Faithfulness: {result.average_faithfulness:.2f}, "
                f"Average Relevancy: {result.average_relevancy:.2f}"
            )
        return results

    def _evaluate_chunk_size(
        self,
        documents: list[Document],
        questions: list[str],
        chunk_size: int,
    ) -> ChunkSizeEvaluation:
        splitter = SentenceSplitter(
            chunk_size=chunk_size,
            chunk_overlap=min(QUERY_CHUNK_OVERLAP, chunk_size // 2),
            tokenizer=self.tokenizer,
        )
        try:
            index = VectorStoreIndex.from_documents(
                documents,
                embed_model=self.embed_model,
                transformations=[splitter],
            )
        except OpenAIError as e:
            raise ExternalServiceFailed("OpenAI", "index embedding", e) from e

        query_engine = index.as_query_engine(llm=self.query_llm)

        total_time = total_faithfulness = total_relevancy = 0.0
        for question in tqdm(questions, desc=f"chunk_size={chunk_size}"):
            start = time.perf_counter()
            try:
                response = query_engine.query(question)
            except OpenAIError as e:
                raise ExternalServiceFailed("OpenAI", "query", e) from e
            total_time += time.perf_counter() - start

            answer = QueryResponse(
                response=str(response.response or ""),
                source_texts=[node.get_content() for node in response.source_nodes],
            )
            total_faithfulness += self.faithfulness.evaluate_response(answer).score
            total_relevancy += self.relevancy.evaluate_response(answer, question).score

        count = len(questions)
        if count == 0:
            logger.warning("No questions to evaluate chunk size %d", chunk_size)
            return ChunkSizeEvaluation(chunk_size, 0.0, 0.0, 0.0)

        return ChunkSizeEvaluation(
            chunk_size=chunk_size,
            average_response_time=total_time / count,
            average_faithfulness=total_faithfulness / count,
            average_relevancy=total_relevancy / count,
        )
