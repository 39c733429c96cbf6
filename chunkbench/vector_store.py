"""
Neo4j-backed chunk store with hybrid search.

Chunks are stored as (:Chunk {id, content, embedding, tfidf}) nodes. Two
retrieval methods run against them:

    search_bm25     full-text index "chunkContent" (Lucene BM25 scoring)
    search_vector   cosine similarity between the query embedding and
                    each chunk embedding (Graph Data Science library)

search_with_context runs both, fuses the rankings with Reciprocal Rank
Fusion and returns the top chunk contents as one context string.
store_local_documents chunks and stores one file or a whole corpus
directory; neo4j_driver opens a driver from the NEO4J_* settings.

Database requirements:
======================
    CREATE FULLTEXT INDEX chunkContent FOR (c:Chunk) ON EACH [c.content]

and the GDS plugin for gds.similarity.cosine. Neo4j node properties cannot
hold maps, so the per-chunk TF-IDF weights are stored as a JSON string.

Sessions:
    Every operation opens its own session in a with-block, so the
    session is closed on success and on error alike.
"""

import json
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator

from neo4j import Driver, GraphDatabase, basic_auth
from neo4j.exceptions import DriverError, Neo4jError
from sklearn.feature_extraction.text import TfidfVectorizer

from .config import Settings
from .corpus import load_corpus, read_documents
from .exceptions import ConfigurationInvalid, ExternalServiceFailed
from .fusion import reciprocal_rank_fusion
from .models import RankedResult
from .pipeline import TextPipeline
from .strategies.llamaindex import SentenceChunker
from .strategies.preprocess import TextPreprocessor

logger = logging.getLogger(__name__)

STORE_CHUNKS = """
UNWIND $documents AS doc
CREATE (c:Chunk {
    id: doc.id,
    content: doc.content,
    embedding: doc.embedding,
    tfidf: doc.tfidf
})
"""

FULLTEXT_SEARCH = """
CALL db.index.fulltext.queryNodes("chunkContent", $query)
YIELD node, score
RETURN node.id AS id, node.content AS content, score
ORDER BY score DESC
LIMIT $topK
"""

VECTOR_SEARCH = """
MATCH (c:Chunk)
WITH c, gds.similarity.cosine(c.embedding, $embedding) AS score
ORDER BY score DESC
LIMIT $topK
RETURN c.id AS id, c.content AS content, score
"""

CONTEXT_SEPARATOR = "\n\n"


@contextmanager
def neo4j_driver(settings: Settings) -> Iterator[Driver]:
    """
    Open a Neo4j driver from settings and close it on exit.

    Example:
        >>> with neo4j_driver(load_settings()) as driver:
        ...     store = Neo4jVectorStore(driver, embed_model)
    """
    try:
        driver = GraphDatabase.driver(
            settings.neo4j_uri,
            auth=basic_auth(settings.neo4j_username, settings.neo4j_password),
        )
    except ValueError as e:
        raise ConfigurationInvalid(f"Invalid NEO4J_URI '{settings.neo4j_uri}': {e}") from e
    logger.info("Opened Neo4j driver for %s", settings.neo4j_uri)
    try:
        yield driver
    finally:
        driver.close()


def default_pipeline(chunk_size: int = 500, chunk_overlap: int = 50) -> TextPipeline:
    """Preprocess, then split on sentence boundaries."""
    return TextPipeline([
        TextPreprocessor(),
        SentenceChunker(chunk_size=chunk_size, chunk_overlap=chunk_overlap),
    ])


def tfidf_weights(chunks: list[str]) -> list[dict[str, float]]:
    """Non-zero TF-IDF weight per term, one dict per chunk."""
    if not chunks:
        return []
    vectorizer = TfidfVectorizer()
    try:
        matrix = vectorizer.fit_transform(chunks)
    except ValueError:
        # every chunk was empty or stop words only
        return [{} for _ in chunks]

    terms = vectorizer.get_feature_names_out()
    weights = []
    for row in range(matrix.shape[0]):
        vector = matrix[row]
        weights.append({
            str(terms[col]): float(value)
            for col, value in zip(vector.indices, vector.data)
        })
    return weights


class Neo4jVectorStore:
    """
    Store chunks in Neo4j and retrieve them by keyword, vector or both.

    Attributes:
        driver: neo4j Driver
        embed_model: LlamaIndex embedding model
        pipeline: TextPipeline that turns documents into chunks
        query_preprocessor: Cleans queries before search
        top_k: Default number of results

    Example:
        >>> from neo4j import GraphDatabase
        >>> from llama_index.embeddings.openai import OpenAIEmbedding
        >>> driver = GraphDatabase.driver(uri, auth=(user, password))
        >>> store = Neo4jVectorStore(driver, OpenAIEmbedding(model="text-embedding-3-small"))
        >>> store.store_documents(text)
        >>> context = store.search_with_context("How are chunks scored?")
    """

    def __init__(
        self,
        driver: Driver,
        embed_model: Any,
        pipeline: TextPipeline | None = None,
        query_preprocessor: TextPreprocessor | None = None,
        top_k: int = 5,
    ):
        self.driver = driver
        self.embed_model = embed_model
        self.pipeline = pipeline or default_pipeline()
        self.query_preprocessor = query_preprocessor or TextPreprocessor()
        self.top_k = top_k

    def build_documents(self, chunks: list[str]) -> list[dict[str, Any]]:
        """Build Chunk node records with embeddings and TF-IDF weights."""
        weights = tfidf_weights(chunks)
        return [
            {
                "id": f"chunk_{i}",
                "content": chunk,
                "embedding": self.embed_model.get_text_embedding(chunk),
                "tfidf": json.dumps(weights[i]),
            }
            for i, chunk in enumerate(chunks)
        ]

    def store_documents(self, text: str) -> int:
        """
        Chunk text with the pipeline and store the chunks.

        Returns:
            Number of chunks stored

        Raises:
            ChunkingFailed: If a pipeline stage fails
            ExternalServiceFailed: If the write fails
        """
        chunks = self.pipeline.execute(text).texts
        documents = self.build_documents(chunks)
        if not documents:
            return 0

        self._run("store", STORE_CHUNKS, {"documents": documents})
        logger.info("Stored %d chunks", len(documents))
        return len(documents)

    def store_local_documents(
        self,
        directory: str | Path,
        specific_file: str | Path | None = None,
    ) -> int:
        """
        Store one file, or every document under directory.

        Documents loaded from a directory are joined with blank lines and
        chunked as one text, so chunk ids stay unique within the call.

        Returns:
            Number of chunks stored

        Raises:
            ConfigurationInvalid: If the file or directory does not exist
            ExternalServiceFailed: If the write fails
        """
        if specific_file is not None:
            text = read_documents({"document": specific_file})["document"]
        else:
            documents = load_corpus(directory)
            text = CONTEXT_SEPARATOR.join(doc.text for doc in documents)
        return self.store_documents(text)

    def search_bm25(self, query: str, top_k: int | None = None) -> list[RankedResult]:
        """Full-text search over chunk contents."""
        cleaned = self.query_preprocessor.clean(query)
        return self._run(
            "full-text search",
            FULLTEXT_SEARCH,
            {"query": cleaned, "topK": top_k or self.top_k},
        )

    def search_vector(self, query: str, top_k: int | None = None) -> list[RankedResult]:
        """Cosine-similarity search against chunk embeddings."""
        cleaned = self.query_preprocessor.clean(query)
        embedding = self.embed_model.get_query_embedding(cleaned)
        return self._run(
            "vector search",
            VECTOR_SEARCH,
            {"embedding": embedding, "topK": top_k or self.top_k},
        )

    def search_with_context(self, query: str, top_k: int | None = None) -> str:
        """
        Hybrid search: fuse full-text and vector rankings with RRF.

        Returns:
            Contents of the top_k fused results joined by blank lines
        """
        top_k = top_k or self.top_k
        bm25_results = self.search_bm25(query, top_k)
        vector_results = self.search_vector(query, top_k)

        contents: dict[str, str] = {}
        for result in bm25_results + vector_results:
            contents.setdefault(result.id, result.content)

        fused = reciprocal_rank_fusion([bm25_results, vector_results])[:top_k]
        return CONTEXT_SEPARATOR.join(
            contents[chunk_id] for chunk_id, _ in fused if contents.get(chunk_id)
        )

    def _run(self, operation: str, cypher: str, parameters: dict[str, Any]) -> list[RankedResult]:
        try:
            with self.driver.session() as session:
                result = session.run(cypher, parameters)
                return [
                    RankedResult(id=record["id"], content=record["content"], score=record["score"])
                    for record in result
                ]
        except (Neo4jError, DriverError) as e:
            raise ExternalServiceFailed("Neo4j", operation, e) from e
