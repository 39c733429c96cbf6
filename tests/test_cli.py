from contextlib import contextmanager

import pytest
from click.testing import CliRunner

from chunkbench import cli
from chunkbench.cli import main
from chunkbench.pipeline import TextPipeline
from chunkbench.strategies import base
from chunkbench.strategies.basic import BasicChunker
from chunkbench.vector_store import STORE_CHUNKS

from conftest import word_count


@pytest.fixture
def cli_env(monkeypatch, temp_dir):
    monkeypatch.setattr(base, "count_tokens", word_count)
    monkeypatch.setenv("CHUNKBENCH_DATA_DIR", str(temp_dir / "data"))
    monkeypatch.setenv("CHUNKBENCH_RESULTS_DIR", str(temp_dir / "results"))
    monkeypatch.setenv("OPENAI_API_KEY", "temp")
    monkeypatch.delenv("OPENAI_API_KEY")
    monkeypatch.chdir(temp_dir)
    return temp_dir


@pytest.fixture
def runner():
    return CliRunner()


def test_no_options_shows_help(runner, cli_env):
    result = runner.invoke(main, [])

    assert result.exit_code == 0
    assert "Usage" in result.output


def test_options_are_exclusive(runner, cli_env):
    result = runner.invoke(main, ["--list", "--all"])

    assert result.exit_code != 0
    assert "Only one of" in result.output


def test_list(runner, cli_env):
    result = runner.invoke(main, ["--list"])

    assert result.exit_code == 0
    assert "smoke_test" in result.output
    assert "pending" in result.output
    assert "semantic" in result.output


def test_unknown_comparison(runner, cli_env):
    result = runner.invoke(main, ["--compare", "nope"])

    assert result.exit_code != 0
    assert "Comparison 'nope' not found" in result.output


def test_compare_writes_results(runner, cli_env):
    result = runner.invoke(main, ["--compare", "smoke_test"])

    assert result.exit_code == 0, result.output
    assert (cli_env / "results" / "smoke_test" / "summary.json").exists()


def test_generate_data(runner, cli_env):
    result = runner.invoke(main, ["--generate-data"])

    assert result.exit_code == 0
    assert sorted(p.name for p in (cli_env / "data").iterdir()) == ["large.txt", "medium.txt", "small.txt"]


def test_run_single_chunker(runner, cli_env):
    document = cli_env / "input.txt"
    document.write_text("one two three four five six seven")

    result = runner.invoke(main, [
        "--chunker", "basic", "--file", str(document),
        "--method", "word", "--chunk-size", "3", "--chunk-overlap", "0",
    ])

    assert result.exit_code == 0, result.output
    assert "Performance Metrics" in result.output
    assert "'one two three'" in result.output


def test_unknown_chunker(runner, cli_env):
    document = cli_env / "input.txt"
    document.write_text("text")

    result = runner.invoke(main, ["--chunker", "nope", "--file", str(document)])

    assert result.exit_code != 0
    assert "Unknown strategy" in result.output


def test_evaluate_requires_api_key(runner, cli_env):
    result = runner.invoke(main, ["--evaluate"])

    assert result.exit_code != 0
    assert "OPENAI_API_KEY" in result.output


def test_bad_chunk_sizes(runner, cli_env):
    result = runner.invoke(main, ["--evaluate", "--chunk-sizes", "128,big"])

    assert result.exit_code != 0
    assert "comma-separated integers" in result.output


def test_chunker_keeps_existing_medium_file(runner, cli_env):
    data_dir = cli_env / "data"
    data_dir.mkdir()
    medium = data_dir / "medium.txt"
    medium.write_text("red green blue cyan")

    result = runner.invoke(main, [
        "--chunker", "basic", "--method", "word", "--chunk-size", "3", "--chunk-overlap", "0",
    ])

    assert result.exit_code == 0, result.output
    assert "'red green blue'" in result.output
    assert medium.read_text() == "red green blue cyan"
    assert not (data_dir / "small.txt").exists()


@pytest.fixture
def graph(monkeypatch, cli_env, mock_neo4j_driver, fake_embed_model):
    opened = []

    @contextmanager
    def fake_driver(settings):
        opened.append(settings.neo4j_uri)
        yield mock_neo4j_driver

    def pipeline(chunk_size=500, chunk_overlap=50):
        return TextPipeline([
            BasicChunker(method="paragraph", chunk_size=chunk_size, chunk_overlap=0, token_counter=word_count)
        ])

    monkeypatch.setenv("NEO4J_URI", "bolt://graph:7687")
    monkeypatch.setattr(cli, "neo4j_driver", fake_driver)
    monkeypatch.setattr(cli, "_embed_model", lambda settings: fake_embed_model)
    monkeypatch.setattr(cli, "default_pipeline", pipeline)
    mock_neo4j_driver.opened = opened
    return mock_neo4j_driver


def test_store_file(runner, cli_env, graph):
    document = cli_env / "input.txt"
    document.write_text("apples are red\n\nbananas are yellow")

    result = runner.invoke(main, ["--store", "--file", str(document), "--chunk-size", "3"])

    assert result.exit_code == 0, result.output
    assert "bolt://graph:7687" in result.output
    assert "Stored 2 chunks" in result.output
    assert graph.opened == ["bolt://graph:7687"]
    cypher, params = graph.mock_session.run.call_args.args
    assert cypher == STORE_CHUNKS
    assert [d["content"] for d in params["documents"]] == ["apples are red", "bananas are yellow"]


def test_store_data_directory(runner, cli_env, graph):
    data_dir = cli_env / "data"
    data_dir.mkdir()
    (data_dir / "notes.txt").write_text("one two three")

    result = runner.invoke(main, ["--store", "--chunk-size", "3"])

    assert result.exit_code == 0, result.output
    assert "Stored 1 chunks" in result.output


def test_store_missing_data_directory(runner, cli_env, graph):
    result = runner.invoke(main, ["--store"])

    assert result.exit_code != 0
    assert "Corpus directory not found" in result.output


def test_search_prints_context(runner, cli_env, graph):
    graph.mock_session.run.return_value = [
        {"id": "chunk_0", "content": "apples are red", "score": 2.0},
        {"id": "chunk_1", "content": "bananas are yellow", "score": 1.0},
    ]

    result = runner.invoke(main, ["--search", "red apples", "--top-k", "1"])

    assert result.exit_code == 0, result.output
    assert "apples are red" in result.output
    assert "bananas are yellow" not in result.output


def test_search_without_results(runner, cli_env, graph):
    result = runner.invoke(main, ["--search", "anything"])

    assert result.exit_code == 0, result.output
    assert "No matching chunks found." in result.output


def test_store_and_search_are_exclusive(runner, cli_env, graph):
    result = runner.invoke(main, ["--store", "--search", "apples"])

    assert result.exit_code != 0
    assert "Only one of" in result.output
    assert graph.opened == []
