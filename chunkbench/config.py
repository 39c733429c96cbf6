"""
Runtime settings read from the environment.

Values come from environment variables; a .env file in the working
directory is loaded first (python-dotenv) without overriding variables
that are already set.

    OPENAI_API_KEY      required for embeddings, judging and semantic chunking
    EMBEDDING_MODEL     default text-embedding-3-small
    EVALUATION_MODEL    judge model, default gpt-4
    QUERY_MODEL         query engine model, default gpt-3.5-turbo
    NEO4J_URI / NEO4J_USERNAME / NEO4J_PASSWORD
    CHUNKBENCH_DATA_DIR     documents directory, default data
    CHUNKBENCH_RESULTS_DIR  results directory, default results
"""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import find_dotenv, load_dotenv

from .exceptions import ConfigurationInvalid


@dataclass
class Settings:
    """Environment-derived settings for a chunkbench run."""

    openai_api_key: str | None = None
    embedding_model: str = "text-embedding-3-small"
    evaluation_model: str = "gpt-4"
    query_model: str = "gpt-3.5-turbo"
    neo4j_uri: str = "bolt://localhost:7687"
    neo4j_username: str = "neo4j"
    neo4j_password: str = "password"
    data_dir: Path = Path("data")
    results_dir: Path = Path("results")

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from the current process environment."""
        defaults = cls()
        return cls(
            openai_api_key=os.getenv("OPENAI_API_KEY") or None,
            embedding_model=os.getenv("EMBEDDING_MODEL", defaults.embedding_model),
            evaluation_model=os.getenv("EVALUATION_MODEL", defaults.evaluation_model),
            query_model=os.getenv("QUERY_MODEL", defaults.query_model),
            neo4j_uri=os.getenv("NEO4J_URI", defaults.neo4j_uri),
            neo4j_username=os.getenv("NEO4J_USERNAME", defaults.neo4j_username),
            neo4j_password=os.getenv("NEO4J_PASSWORD", defaults.neo4j_password),
            data_dir=Path(os.getenv("CHUNKBENCH_DATA_DIR", str(defaults.data_dir))),
            results_dir=Path(os.getenv("CHUNKBENCH_RESULTS_DIR", str(defaults.results_dir))),
        )

    def require_openai_key(self) -> str:
        """
        Return the OpenAI API key.

        Raises:
            ConfigurationInvalid: If OPENAI_API_KEY is not set
        """
        if not self.openai_api_key:
            raise ConfigurationInvalid(
                "OPENAI_API_KEY environment variable is not set. "
                "Export it or add it to a .env file."
            )
        return self.openai_api_key


def load_settings(dotenv_path: str | Path | None = None) -> Settings:
    """
    Load .env and return the resulting Settings.

    Without dotenv_path the .env file is searched for from the current
    working directory upward, not from the installed package.
    """
    load_dotenv(dotenv_path=dotenv_path or find_dotenv(usecwd=True))
    return Settings.from_env()
