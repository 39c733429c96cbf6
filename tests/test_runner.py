import io
import json

import pytest
from rich.console import Console

from chunkbench.config import Settings
from chunkbench.exceptions import ConfigurationInvalid
from chunkbench.runner import ComparisonConfig, ComparisonRunner, list_configs
from chunkbench.strategies import SemanticChunker
from chunkbench.strategies import base

from conftest import word_count


@pytest.fixture(autouse=True)
def offline_tokens(monkeypatch):
    monkeypatch.setattr(base, "count_tokens", word_count)


@pytest.fixture
def settings(temp_dir):
    return Settings(data_dir=temp_dir / "data", results_dir=temp_dir / "results")


def make_runner(config, settings, **kwargs):
    return ComparisonRunner(config, settings=settings, console=Console(file=io.StringIO()), **kwargs)


def test_bundled_configs():
    assert list_configs() == ["default", "semantic", "smoke_test", "splitter_types"]

    config = ComparisonConfig.named("smoke_test")
    assert config.documents == {"small": "small.txt"}
    assert len(config.strategies) == 3


def test_smoke_comparison(settings):
    runner = make_runner(ComparisonConfig.named("smoke_test"), settings)

    results = runner.run()

    assert [r.document for r in results] == ["small"]
    assert len(results[0].rows) == 3
    assert not any(row.failed for row in results[0].rows)

    output_dir = settings.results_dir / "smoke_test"
    summary = json.loads((output_dir / "summary.json").read_text())
    assert summary["comparison"] == "smoke_test"
    assert summary["num_documents"] == 1
    assert "report" not in summary["results"][0]["strategies"][0]

    detailed = json.loads((output_dir / "detailed" / "small.json").read_text())
    assert detailed["results"][0]["report"]["chunks_created"] > 0


def test_outputs_can_be_disabled(settings, temp_dir):
    config = ComparisonConfig(
        name="quiet",
        strategies=[{"name": "words", "strategy": "basic", "method": "word", "chunk_size": 20, "chunk_overlap": 0}],
        output={"detailed": False, "summary": False},
    )

    make_runner(config, settings, results_dir=temp_dir / "out").run()

    assert list((temp_dir / "out").iterdir()) == []


def test_missing_document(settings):
    config = ComparisonConfig(
        name="missing",
        documents={"other": "other.txt"},
        strategies=[{"strategy": "basic"}],
        generate_test_data=False,
    )

    with pytest.raises(ConfigurationInvalid, match="not found"):
        make_runner(config, settings).run()


def test_strategy_entry_without_strategy(settings):
    config = ComparisonConfig(name="bad", strategies=[{"name": "nameless"}])

    with pytest.raises(ConfigurationInvalid, match="without 'strategy'"):
        make_runner(config, settings).build_strategies()


def test_no_strategies(settings):
    with pytest.raises(ConfigurationInvalid, match="no strategies"):
        make_runner(ComparisonConfig(name="empty"), settings).build_strategies()


def test_semantic_gets_embed_model(settings, fake_embed_model):
    config = ComparisonConfig(name="semantic", strategies=[{"strategy": "semantic"}])

    strategies = make_runner(config, settings, embed_model=fake_embed_model).build_strategies()

    assert isinstance(strategies[0], SemanticChunker)


def test_semantic_without_api_key(settings):
    config = ComparisonConfig(name="semantic", strategies=[{"strategy": "semantic"}])

    with pytest.raises(ConfigurationInvalid, match="OPENAI_API_KEY"):
        make_runner(config, settings).build_strategies()


def test_from_yaml_errors(temp_dir):
    with pytest.raises(ConfigurationInvalid, match="not found"):
        ComparisonConfig.from_yaml(temp_dir / "missing.yaml")

    no_name = temp_dir / "no_name.yaml"
    no_name.write_text("description: nameless\n")
    with pytest.raises(ConfigurationInvalid, match="'name'"):
        ComparisonConfig.from_yaml(no_name)

    unknown_key = temp_dir / "unknown.yaml"
    unknown_key.write_text("name: x\nparallel: true\n")
    with pytest.raises(ConfigurationInvalid):
        ComparisonConfig.from_yaml(unknown_key)


def test_default_results_dir(settings):
    runner = make_runner(ComparisonConfig(name="custom"), settings)

    assert runner.results_dir == settings.results_dir / "custom"
