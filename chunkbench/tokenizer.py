"""Token counting with a fixed tiktoken encoding."""

from functools import lru_cache
from typing import Callable

import tiktoken

DEFAULT_ENCODING = "cl100k_base"

TokenCounter = Callable[[str], int]


@lru_cache(maxsize=None)
def get_encoding(name: str = DEFAULT_ENCODING) -> tiktoken.Encoding:
    """Load (once) and return a tiktoken encoding."""
    return tiktoken.get_encoding(name)


def count_tokens(text: str) -> int:
    """Return the number of cl100k_base tokens in text."""
    if not text:
        return 0
    return len(get_encoding().encode(text, disallowed_special=()))
