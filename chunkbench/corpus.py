"""
Document loading and synthetic test data.

Two sources of input text for comparisons and evaluations:

1. load_corpus() reads a directory of documents with LlamaIndex's
   SimpleDirectoryReader (txt, md, json, pdf, docx).
2. generate_test_data() writes three synthetic documents of increasing
   size, useful for throughput comparisons without any external data:

    small.txt   two short paragraphs, repeated 2 times      (~0.5 KB)
    medium.txt  three sections with a bullet list, x50      (~25 KB)
    large.txt   three chapters, repeated 500 times          (~150 KB)
"""

import logging
from pathlib import Path

from llama_index.core import Document, SimpleDirectoryReader

from .exceptions import ConfigurationInvalid

logger = logging.getLogger(__name__)

DEFAULT_EXTENSIONS = [".txt", ".md", ".json", ".pdf", ".docx"]

SMALL_BLOCK = """
This is a small test document.
It contains a few paragraphs of text.
Perfect for quick testing.

Second paragraph with some basic content.
Testing line breaks and formatting.
"""

MEDIUM_BLOCK = """
This is a medium-sized document.
It contains multiple paragraphs and sections.

Section 1:
Detailed content about various topics.
Including technical terms and specifications.

Section 2:
More structured content with lists:
- Item 1 with description
- Item 2 with details
- Item 3 with examples

Section 3:
Concluding paragraphs with summary.
"""

LARGE_BLOCK = """
This is a large document for testing.
It contains extensive content across many sections.

Chapter 1:
Detailed technical specifications...

Chapter 2:
Implementation guidelines...

Chapter 3:
Performance considerations...
"""

TEST_DOCUMENTS = {
    "small": (SMALL_BLOCK, 2),
    "medium": (MEDIUM_BLOCK, 50),
    "large": (LARGE_BLOCK, 500),
}


def load_corpus(
    directory: str | Path,
    extensions: list[str] | None = None,
    recursive: bool = True,
    exclude_hidden: bool = True,
) -> list[Document]:
    """
    Load every matching document under a directory.

    Args:
        directory: Directory to read
        extensions: File extensions to include (default: DEFAULT_EXTENSIONS)
        recursive: Descend into subdirectories
        exclude_hidden: Skip dot-files and dot-directories

    Returns:
        LlamaIndex Document objects, one or more per file

    Raises:
        ConfigurationInvalid: If the directory does not exist or holds no
            matching files
    """
    path = Path(directory)
    if not path.is_dir():
        raise ConfigurationInvalid(f"Corpus directory not found: {path}")

    try:
        reader = SimpleDirectoryReader(
            input_dir=str(path),
            required_exts=extensions or DEFAULT_EXTENSIONS,
            recursive=recursive,
            exclude_hidden=exclude_hidden,
        )
    except ValueError as e:
        # SimpleDirectoryReader raises ValueError when no files match
        raise ConfigurationInvalid(str(e)) from e

    documents = reader.load_data()
    logger.info("Loaded %d documents from %s", len(documents), path)
    return documents


def generate_test_data(directory: str | Path) -> dict[str, Path]:
    """
    Write the synthetic small/medium/large documents.

    Existing files are overwritten.

    Returns:
        Mapping of document name ("small", "medium", "large") to file path
    """
    path = Path(directory)
    path.mkdir(parents=True, exist_ok=True)

    written = {}
    for name, (block, repeat) in TEST_DOCUMENTS.items():
        file_path = path / f"{name}.txt"
        file_path.write_text(block * repeat, encoding="utf-8")
        written[name] = file_path

    logger.info("Wrote test documents to %s", path)
    return written


def read_documents(paths: dict[str, str | Path]) -> dict[str, str]:
    """Read named text files into memory."""
    texts = {}
    for name, file_path in paths.items():
        file_path = Path(file_path)
        if not file_path.is_file():
            raise ConfigurationInvalid(f"Input document not found: {file_path}")
        texts[name] = file_path.read_text(encoding="utf-8")
    return texts
