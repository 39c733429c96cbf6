"""
Command-line interface for chunking benchmarks.

This module provides a Click-based CLI for comparing chunking strategies,
running a single strategy, and evaluating chunk sizes with an LLM judge.

Usage:
    chunkbench --help

    chunkbench --list
    chunkbench --compare default
    chunkbench --chunker basic --file data/medium.txt --chunk-size 300
    chunkbench --evaluate --chunk-sizes 256,512,1024

Commands:
    --list, -l              List bundled comparisons and strategies
    --compare, -c NAME      Run a comparison (bundled name or YAML path)
    --all                   Run all bundled comparisons
    --chunker, -k NAME      Run one strategy over a file
    --evaluate              Evaluate chunk sizes with an LLM judge
    --generate-data         Write the synthetic test documents
    --store                 Chunk and store documents in Neo4j
    --search QUERY          Hybrid search over the stored chunks

Environment:
    OPENAI_API_KEY is required for --evaluate, --judge, --store, --search
    and semantic chunking. --store and --search connect with NEO4J_URI,
    NEO4J_USERNAME and NEO4J_PASSWORD. All of them may be placed in a .env
    file in the working directory.
"""

import logging
import sys
from pathlib import Path

import click
from llama_index.embeddings.openai import OpenAIEmbedding
from llama_index.llms.openai import OpenAI
from neo4j import Driver
from rich.console import Console
from rich.table import Table

from .config import Settings, load_settings
from .corpus import generate_test_data, read_documents
from .evaluation import ChunkingEvaluator, select_optimal
from .exceptions import ChunkBenchError
from .runner import ComparisonConfig, ComparisonRunner, list_configs
from .strategies import get_strategy, list_strategies
from .vector_store import Neo4jVectorStore, default_pipeline, neo4j_driver

logger = logging.getLogger(__name__)

SAMPLE_CHUNKS = 3


def get_config(comparison: str) -> ComparisonConfig:
    """
    Resolve a comparison by bundled name or YAML path.

    Raises:
        click.ClickException: If the comparison is not found
    """
    path = Path(comparison)
    if path.suffix in (".yaml", ".yml"):
        return ComparisonConfig.from_yaml(path)

    if comparison not in list_configs():
        available = ", ".join(list_configs())
        raise click.ClickException(
            f"Comparison '{comparison}' not found.\n"
            f"Available comparisons: {available}"
        )
    return ComparisonConfig.named(comparison)


def _parse_sizes(value: str | None) -> list[int] | None:
    if not value:
        return None
    try:
        return [int(v) for v in value.split(",") if v.strip()]
    except ValueError:
        raise click.BadParameter(f"expected comma-separated integers, got '{value}'")


@click.command()
@click.option("--compare", "-c", help="Run a comparison by name or YAML path", metavar="NAME")
@click.option("--all", "run_all", is_flag=True, help="Run all bundled comparisons")
@click.option("--chunker", "-k", help="Run a single strategy by name", metavar="NAME")
@click.option(
    "--evaluate", "-e",
    is_flag=True,
    help="Evaluate chunk sizes with an LLM judge (needs OPENAI_API_KEY)",
)
@click.option("--generate-data", is_flag=True, help="Write small/medium/large test documents")
@click.option("--list", "-l", "list_all", is_flag=True, help="List comparisons and strategies")
@click.option(
    "--store",
    is_flag=True,
    help="Chunk documents (--file or the data dir) and store them in Neo4j",
)
@click.option("--search", metavar="QUERY", help="Hybrid keyword + vector search over stored chunks")
@click.option("--top-k", type=int, default=5, show_default=True, help="Results for --search")
@click.option(
    "--file", "-f", "input_file",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Input document for --chunker or --store",
)
@click.option("--chunk-size", type=int, help="Chunk size for --chunker or --store")
@click.option("--chunk-overlap", type=int, help="Chunk overlap for --chunker or --store")
@click.option("--method", help="Split method / splitter type for --chunker")
@click.option("--judge", is_flag=True, help="Score --chunker output with the LLM judge")
@click.option("--chunk-sizes", help="Comma-separated chunk sizes for --evaluate")
@click.option("--num-questions", type=int, default=20, show_default=True,
              help="Questions generated for --evaluate")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
def main(
    compare: str | None,
    run_all: bool,
    chunker: str | None,
    evaluate: bool,
    generate_data: bool,
    list_all: bool,
    store: bool,
    search: str | None,
    top_k: int,
    input_file: Path | None,
    chunk_size: int | None,
    chunk_overlap: int | None,
    method: str | None,
    judge: bool,
    chunk_sizes: str | None,
    num_questions: int,
    verbose: bool,
) -> None:
    """
    Chunking benchmark CLI.

    Compare chunking strategies, inspect a single strategy and evaluate
    chunk sizes with an LLM judge.

    \b
    Examples:
        # List bundled comparisons and strategies
        chunkbench --list

        # Compare strategies on the synthetic documents
        chunkbench --compare default

        # Run one strategy with custom settings
        chunkbench --chunker langchain --method token --chunk-size 256

        # Find the best chunk size for the documents in ./data
        chunkbench --evaluate --chunk-sizes 256,512,1024

        # Index ./data in Neo4j and query it
        chunkbench --store
        chunkbench --search "How are chunks scored?"
    """
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Handle mutually exclusive options
    options_count = sum([
        compare is not None,
        run_all,
        chunker is not None,
        evaluate,
        generate_data,
        list_all,
        store,
        search is not None,
    ])

    if options_count == 0:
        # No options provided - show help
        ctx = click.get_current_context()
        click.echo(ctx.get_help())
        return

    if options_count > 1:
        raise click.ClickException(
            "Only one of --compare, --all, --chunker, --evaluate, --generate-data, "
            "--list, --store or --search can be specified at a time."
        )

    settings = load_settings()

    try:
        if list_all:
            _list(settings)
        elif compare:
            _run_comparison(compare, settings)
        elif run_all:
            _run_all_comparisons(settings)
        elif chunker:
            _run_chunker(
                chunker, settings, input_file,
                chunk_size=chunk_size,
                chunk_overlap=chunk_overlap,
                method=method,
                judge=judge,
            )
        elif evaluate:
            _run_evaluation(settings, _parse_sizes(chunk_sizes), num_questions)
        elif generate_data:
            paths = generate_test_data(settings.data_dir)
            for name, path in paths.items():
                click.echo(f"  {name}: {path}")
        elif store:
            _store_documents(settings, input_file, chunk_size, chunk_overlap)
        elif search is not None:
            _search(settings, search, top_k)
    except ChunkBenchError as e:
        logger.debug("command failed", exc_info=True)
        raise click.ClickException(str(e))


def _list(settings: Settings) -> None:
    """List bundled comparisons and registered strategies."""
    click.echo("\nAvailable Comparisons")
    click.echo("=" * 50)

    for name in list_configs():
        config = ComparisonConfig.named(name)
        results_dir = settings.results_dir / name
        status = "✓ completed" if (results_dir / "summary.json").exists() else "○ pending"

        click.echo(f"\n{name}")
        click.echo(f"  {config.description}")
        click.echo(f"  Status: {status}")

    click.echo("\nAvailable Strategies")
    click.echo("=" * 50)
    for strategy in list_strategies():
        click.echo(f"  {strategy['name']:<12} {strategy['description']}")

    click.echo("\n" + "=" * 50)
    click.echo("Run with: chunkbench --compare <name>")


def _embed_model(settings: Settings) -> OpenAIEmbedding:
    return OpenAIEmbedding(model=settings.embedding_model, api_key=settings.require_openai_key())


def _llm(settings: Settings, model: str) -> OpenAI:
    return OpenAI(model=model, temperature=0, api_key=settings.require_openai_key())


def _run_comparison(comparison: str, settings: Settings) -> None:
    """Run a single comparison."""
    config = get_config(comparison)

    click.echo(f"\n{'=' * 50}")
    click.echo(f"Running comparison: {config.name}")
    click.echo(f"{'=' * 50}\n")

    runner = ComparisonRunner(config, settings=settings)
    results = runner.run()

    failed = [row.strategy for result in results for row in result.rows if row.failed]
    if failed:
        click.echo(f"\nStrategies with failures: {', '.join(sorted(set(failed)))}", err=True)


def _run_all_comparisons(settings: Settings) -> None:
    """Run every bundled comparison sequentially."""
    failed = []
    succeeded = []

    for name in list_configs():
        click.echo(f"\n--- {name} ---")
        try:
            _run_comparison(name, settings)
            succeeded.append(name)
        except ChunkBenchError as e:
            click.echo(f"FAILED: {e}", err=True)
            failed.append(name)

    click.echo(f"\n{'=' * 50}")
    click.echo("All comparisons completed")
    click.echo(f"Succeeded: {len(succeeded)}")
    click.echo(f"Failed: {len(failed)}")

    if failed:
        click.echo(f"\nFailed comparisons: {', '.join(failed)}")
        sys.exit(1)


def _run_chunker(
    name: str,
    settings: Settings,
    input_file: Path | None,
    chunk_size: int | None,
    chunk_overlap: int | None,
    method: str | None,
    judge: bool,
) -> None:
    """Run one strategy over a file and print its report."""
    if input_file is None:
        input_file = settings.data_dir / "medium.txt"
        if not input_file.exists():
            generate_test_data(settings.data_dir)
    text = read_documents({"input": input_file})["input"]

    options = {}
    if chunk_size is not None:
        options["chunk_size"] = chunk_size
    if chunk_overlap is not None:
        options["chunk_overlap"] = chunk_overlap
    if method is not None:
        options["method"] = method
        options["splitter_type"] = method
    if name == "semantic":
        options["embed_model"] = _embed_model(settings)

    strategy = get_strategy(name, **options)
    click.echo(f"Testing {strategy!r} on {input_file}")
    result = strategy.process(text)

    console = Console()
    table = Table(title="Performance Metrics", show_header=True, header_style="bold magenta")
    table.add_column("Metric", style="cyan")
    table.add_column("Value")
    for key, value in result.report.to_dict().items():
        table.add_row(key, str(value))
    console.print(table)

    click.echo("\nSample Chunks:")
    for chunk in result.chunks[:SAMPLE_CHUNKS]:
        preview = chunk.content[:200] + "..." if len(chunk.content) > 200 else chunk.content
        click.echo(f"  [{chunk.index}] ({chunk.token_count} tokens) {preview!r}")

    if judge:
        evaluator = ChunkingEvaluator(judge_llm=_llm(settings, settings.evaluation_model))
        click.echo("\nJudging chunks...")
        faithfulness = evaluator.evaluate_faithfulness(result.texts)
        relevancy = evaluator.evaluate_relevancy(result.texts)
        click.echo(f"  Faithfulness: {faithfulness:.2f}")
        click.echo(f"  Relevancy: {relevancy:.2f}")


def _run_evaluation(settings: Settings, chunk_sizes: list[int] | None, num_questions: int) -> None:
    """Evaluate chunk sizes over the documents in the data directory."""
    evaluator = ChunkingEvaluator(
        judge_llm=_llm(settings, settings.evaluation_model),
        query_llm=_llm(settings, settings.query_model),
        embed_model=_embed_model(settings),
        data_dir=str(settings.data_dir),
        num_questions=num_questions,
        chunk_sizes=chunk_sizes,
    )

    click.echo("Starting chunking evaluation...")
    results = evaluator.evaluate_chunk_sizes()

    table = Table(title="Chunk Size Evaluation", show_header=True, header_style="bold magenta")
    table.add_column("Chunk Size", justify="right", style="cyan")
    table.add_column("Response Time (s)", justify="right")
    table.add_column("Faithfulness", justify="right")
    table.add_column("Relevancy", justify="right")
    for result in results:
        table.add_row(
            str(result.chunk_size),
            f"{result.average_response_time:.2f}",
            f"{result.average_faithfulness:.2f}",
            f"{result.average_relevancy:.2f}",
        )
    Console().print(table)

    optimal = select_optimal(results)
    click.echo(f"\nOptimal chunk size: {optimal.chunk_size}")
    click.echo(f"- Average Response Time: {optimal.average_response_time:.2f}s")
    click.echo(f"- Average Faithfulness: {optimal.average_faithfulness:.2f}")
    click.echo(f"- Average Relevancy: {optimal.average_relevancy:.2f}")


def _vector_store(
    driver: Driver,
    settings: Settings,
    chunk_size: int | None = None,
    chunk_overlap: int | None = None,
    top_k: int = 5,
) -> Neo4jVectorStore:
    pipeline = default_pipeline(
        chunk_size=500 if chunk_size is None else chunk_size,
        chunk_overlap=50 if chunk_overlap is None else chunk_overlap,
    )
    return Neo4jVectorStore(driver, _embed_model(settings), pipeline=pipeline, top_k=top_k)


def _store_documents(
    settings: Settings,
    input_file: Path | None,
    chunk_size: int | None,
    chunk_overlap: int | None,
) -> None:
    """Chunk one file or the whole data directory and store it in Neo4j."""
    source = input_file or settings.data_dir
    click.echo(f"Storing {source} in Neo4j at {settings.neo4j_uri}")

    with neo4j_driver(settings) as driver:
        store = _vector_store(driver, settings, chunk_size, chunk_overlap)
        count = store.store_local_documents(settings.data_dir, input_file)

    click.echo(f"Stored {count} chunks")


def _search(settings: Settings, query: str, top_k: int) -> None:
    """Run a hybrid search and print the fused context."""
    with neo4j_driver(settings) as driver:
        context = _vector_store(driver, settings, top_k=top_k).search_with_context(query)

    if not context:
        click.echo("No matching chunks found.")
        return
    click.echo(context)


if __name__ == "__main__":
    main()
