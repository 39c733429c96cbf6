"""
YAML-driven strategy comparison runner.

This module provides the ComparisonRunner class that orchestrates a full
comparison: loading input documents, building the configured strategies,
running them side by side and saving the results.

The Comparison Pipeline:
========================

    YAML Config → Documents → Strategies → compare_strategies → Table + JSON
        ↓            ↓            ↓               ↓
    Settings    small/medium/  registry      one row per
                large.txt      lookup        strategy

Step-by-step:
1. Load YAML config defining the comparison (documents, strategies)
2. Generate the synthetic test documents if asked to
3. Build each strategy through the registry (get_strategy)
4. For each document: run every strategy concurrently, print the table
5. Save results to JSON (per-document detail + summary)

YAML Configuration:
===================
Comparisons are defined in YAML files under chunkbench/configs/:

    name: default
    description: Hand-rolled splitters against library splitters
    generate_test_data: true
    documents:
      small: small.txt          # relative to the data directory
      medium: medium.txt
    max_workers: 4
    strategies:
      - name: langchain_recursive
        strategy: langchain
        splitter_type: recursive
        chunk_size: 500
      - name: basic_paragraph
        strategy: basic
        method: paragraph
        chunk_size: 500
        chunk_overlap: 50

Every key of a strategy entry except name and strategy is passed to the
strategy constructor.

Output Structure:
=================
    results/<comparison_name>/
    ├── summary.json           # Headline metrics per document and strategy
    └── detailed/
        ├── small.json         # Full reports for each document
        └── medium.json

Example Usage:
==============
    # Run from CLI
    chunkbench --compare default

    # Or programmatically
    config = ComparisonConfig.from_yaml("chunkbench/configs/default.yaml")
    runner = ComparisonRunner(config)
    results = runner.run()
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

import yaml
from llama_index.embeddings.openai import OpenAIEmbedding
from rich.console import Console

from .comparison import StrategyComparison, compare_strategies, print_comparison
from .config import Settings, load_settings
from .corpus import generate_test_data, read_documents
from .exceptions import ConfigurationInvalid
from .strategies import ChunkingStrategy, get_strategy

logger = logging.getLogger(__name__)

CONFIGS_DIR = Path(__file__).parent / "configs"


@dataclass
class ComparisonConfig:
    """
    Configuration for a single comparison run.

    Attributes:
        name: Comparison name (e.g., "default")
        description: Human-readable description
        documents: Document name -> file path (relative to the data directory)
        strategies: Strategy entries (name, strategy, options...)
        generate_test_data: Write the synthetic documents before loading
        max_workers: Thread pool size for concurrent strategies
        output: Output settings

    Example:
        >>> config = ComparisonConfig(
        ...     name="quick",
        ...     documents={"small": "small.txt"},
        ...     strategies=[{"name": "words", "strategy": "basic", "method": "word"}],
        ... )
    """

    name: str
    description: str = ""
    documents: dict[str, str] = field(default_factory=lambda: {"small": "small.txt"})
    strategies: list[dict[str, Any]] = field(default_factory=list)
    generate_test_data: bool = True
    max_workers: int | None = None
    output: dict[str, Any] = field(default_factory=lambda: {
        "detailed": True,
        "summary": True,
    })

    @classmethod
    def from_yaml(cls, path: str | Path) -> "ComparisonConfig":
        """
        Load configuration from a YAML file.

        Raises:
            ConfigurationInvalid: If the file is missing or malformed
        """
        path = Path(path)
        if not path.is_file():
            raise ConfigurationInvalid(f"Comparison config not found: {path}")

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict) or "name" not in data:
            raise ConfigurationInvalid(f"{path}: expected a mapping with a 'name' key")
        try:
            return cls(**data)
        except TypeError as e:
            raise ConfigurationInvalid(f"{path}: {e}") from e

    @classmethod
    def named(cls, name: str) -> "ComparisonConfig":
        """Load a bundled config from chunkbench/configs/<name>.yaml."""
        return cls.from_yaml(CONFIGS_DIR / f"{name}.yaml")

    def to_yaml(self, path: str | Path) -> None:
        """Save configuration to a YAML file."""
        with open(path, "w") as f:
            yaml.dump(self.__dict__, f, default_flow_style=False)


def list_configs() -> list[str]:
    """Names of the bundled comparison configs."""
    return sorted(p.stem for p in CONFIGS_DIR.glob("*.yaml"))


@dataclass
class DocumentResult:
    """Comparison rows for one input document."""

    document: str
    characters: int
    rows: list[StrategyComparison]

    def to_dict(self) -> dict[str, Any]:
        return {
            "document": self.document,
            "characters": self.characters,
            "results": [row.to_dict() for row in self.rows],
        }


class ComparisonRunner:
    """
    Runner for YAML-defined strategy comparisons.

    Attributes:
        config: Comparison configuration
        settings: Environment settings (data and results directories, models)
        results_dir: Directory for output files
        embed_model: Embedding model handed to embedding-backed strategies

    Example:
        >>> config = ComparisonConfig.named("default")
        >>> runner = ComparisonRunner(config)
        >>> results = runner.run()
        >>> print(f"Compared {len(results)} documents")
    """

    def __init__(
        self,
        config: ComparisonConfig,
        settings: Settings | None = None,
        results_dir: str | Path | None = None,
        embed_model: Any = None,
        console: Console | None = None,
    ):
        self.config = config
        self.settings = settings or load_settings()
        self.embed_model = embed_model
        self.console = console or Console()

        if results_dir is None:
            results_dir = self.settings.results_dir / config.name
        self.results_dir = Path(results_dir)

        self.results: list[DocumentResult] = []

    def run(self) -> list[DocumentResult]:
        """
        Run the complete comparison.

        Returns:
            One DocumentResult per configured document

        Raises:
            ConfigurationInvalid: For unknown strategies, bad options,
                missing documents or a missing API key
        """
        print("=" * 70)
        print(f"Comparison: {self.config.name}")
        if self.config.description:
            print(f"Description: {self.config.description}")
        print("=" * 70)

        strategies = self.build_strategies()
        documents = self.load_documents()
        self.results_dir.mkdir(parents=True, exist_ok=True)

        for i, (doc_name, text) in enumerate(documents.items(), 1):
            print(f"\n[{i}/{len(documents)}] Testing {doc_name} document "
                  f"({len(text) / 1000:.1f}K chars)")
            print("-" * 50)

            rows = compare_strategies(strategies, text, max_workers=self.config.max_workers)
            print_comparison(rows, title=f"{doc_name}: Chunking Performance Summary",
                             console=self.console)

            result = DocumentResult(document=doc_name, characters=len(text), rows=rows)
            self.results.append(result)

            if self.config.output.get("detailed", True):
                self._save_detailed_result(result)

        if self.config.output.get("summary", True):
            self._save_summary()

        print(f"\n{'=' * 70}")
        print(f"Comparison '{self.config.name}' complete!")
        print(f"Results saved to: {self.results_dir}")
        print("=" * 70)

        return self.results

    def build_strategies(self) -> list[ChunkingStrategy]:
        """Instantiate every configured strategy through the registry."""
        if not self.config.strategies:
            raise ConfigurationInvalid(f"Comparison '{self.config.name}' has no strategies")

        strategies = []
        for entry in self.config.strategies:
            options = dict(entry)
            options.pop("name", None)
            try:
                strategy_name = options.pop("strategy")
            except KeyError:
                raise ConfigurationInvalid(f"Strategy entry without 'strategy': {entry}") from None

            if strategy_name == "semantic" and "embed_model" not in options:
                options["embed_model"] = self._get_embed_model()

            strategies.append(get_strategy(strategy_name, **options))
            logger.info("Configured %s", strategies[-1])
        return strategies

    def load_documents(self) -> dict[str, str]:
        """Read the configured documents, generating test data first if asked."""
        data_dir = self.settings.data_dir
        if self.config.generate_test_data:
            generate_test_data(data_dir)

        paths = {name: data_dir / path for name, path in self.config.documents.items()}
        return read_documents(paths)

    def _get_embed_model(self) -> Any:
        if self.embed_model is None:
            self.embed_model = OpenAIEmbedding(
                model=self.settings.embedding_model,
                api_key=self.settings.require_openai_key(),
            )
        return self.embed_model

    def _save_detailed_result(self, result: DocumentResult) -> None:
        """Save full reports for a single document."""
        detailed_dir = self.results_dir / "detailed"
        detailed_dir.mkdir(parents=True, exist_ok=True)

        path = detailed_dir / f"{result.document}.json"
        with open(path, "w") as f:
            json.dump({
                **result.to_dict(),
                "comparison": self.config.name,
                "timestamp": datetime.now().isoformat(),
            }, f, indent=2)

    def _save_summary(self) -> None:
        """Save headline metrics for all documents."""
        summary = {
            "comparison": self.config.name,
            "description": self.config.description,
            "timestamp": datetime.now().isoformat(),
            "num_documents": len(self.results),
            "results": [
                {
                    "document": result.document,
                    "characters": result.characters,
                    "strategies": [
                        {k: v for k, v in row.to_dict().items() if k != "report"}
                        for row in result.rows
                    ],
                }
                for result in self.results
            ],
        }

        path = self.results_dir / "summary.json"
        with open(path, "w") as f:
            json.dump(summary, f, indent=2)


def run_from_yaml(config_path: str | Path) -> list[DocumentResult]:
    """
    Convenience function to run a comparison from a YAML config file.

    Example:
        >>> results = run_from_yaml("chunkbench/configs/default.yaml")
    """
    config = ComparisonConfig.from_yaml(config_path)
    runner = ComparisonRunner(config)
    return runner.run()
