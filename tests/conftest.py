"""Pytest configuration and fixtures for chunkbench tests."""

import itertools
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest


def word_count(text):
    """Whitespace token counter; keeps tests independent of tiktoken downloads."""
    return len(text.split())


class FakeClock:
    """Millisecond clock that advances by a fixed step on every call."""

    def __init__(self, step=10.0):
        self._ticks = itertools.count(0, step)

    def __call__(self):
        return float(next(self._ticks))


class FakeMemoryProbe:
    """Memory probe that grows by a fixed number of bytes per call."""

    def __init__(self, step=1024):
        self._ticks = itertools.count(0, step)

    def __call__(self):
        return next(self._ticks)


class FakeEmbedModel:
    """
    Embedding model keyed on the first word of the text.

    Texts starting with the same word embed to the same vector, texts
    starting with different words embed to orthogonal vectors.
    """

    def __init__(self):
        self.calls = 0
        self._axes = {}

    def _vector(self, text):
        words = text.split()
        key = words[0].lower() if words else ""
        axis = self._axes.setdefault(key, len(self._axes))
        vector = [0.0] * 16
        vector[axis % 16] = 1.0
        return vector

    def get_text_embedding(self, text):
        self.calls += 1
        return self._vector(text)

    def get_query_embedding(self, text):
        return self._vector(text)


class FakeLLM:
    """LLM that replays canned replies and records prompts."""

    def __init__(self, replies):
        self._replies = itertools.cycle(replies) if isinstance(replies, list) else itertools.repeat(replies)
        self.prompts = []

    def complete(self, prompt):
        self.prompts.append(prompt)
        return SimpleNamespace(text=next(self._replies))


@pytest.fixture
def token_counter():
    return word_count


@pytest.fixture
def probes():
    """Keyword arguments injecting a fake clock, memory probe and token counter."""
    return {
        "token_counter": word_count,
        "clock": FakeClock(),
        "memory_probe": FakeMemoryProbe(),
    }


@pytest.fixture
def fake_embed_model():
    return FakeEmbedModel()


@pytest.fixture
def make_llm():
    return FakeLLM


@pytest.fixture
def sample_text():
    """Sample text for testing."""
    return (
        "Chunking splits long documents into passages. Each passage is embedded.\n"
        "\n"
        "Retrieval finds the passages closest to a query! Good chunks keep ideas together.\n"
        "\n"
        "Overlap repeats text across boundaries? It helps when an idea spans two chunks."
    )


@pytest.fixture
def mock_neo4j_driver():
    """Mock Neo4j driver whose sessions work as context managers."""
    driver = MagicMock()
    session = MagicMock()
    driver.session.return_value.__enter__.return_value = session
    driver.session.return_value.__exit__.return_value = False
    session.run.return_value = []
    driver.mock_session = session
    return driver


@pytest.fixture
def temp_dir(tmp_path):
    return tmp_path
