"""
Text preprocessing stage.

Normalises raw text before chunking or querying: lower-cases, strips HTML
tags, URLs, e-mail addresses and numbers, collapses everything that is not
a letter into single spaces and drops English stop words. It implements
the ChunkingStrategy interface so it can be the first step of a
TextPipeline; it always emits a single chunk (or none for blank input).
"""

import re
from typing import Any

from sklearn.feature_extraction.text import ENGLISH_STOP_WORDS

from .base import ChunkingStrategy

HTML_TAG = re.compile(r"<[^>]*>")
URL = re.compile(r"https?://\S+")
EMAIL = re.compile(r"[\w.-]+@[\w.-]+\.\w+")
NUMBER = re.compile(r"\d+")
NON_LETTER = re.compile(r"[^a-z\s]")
WHITESPACE = re.compile(r"\s+")


class TextPreprocessor(ChunkingStrategy):
    """
    Clean text for indexing and keyword search.

    Example:
        >>> step = TextPreprocessor(remove_stop_words=False)
        >>> step.clean("Visit <b>https://example.com</b> in 2024!")
        'visit in'
    """

    name = "preprocess"
    track_overlap = False

    def __init__(
        self,
        remove_urls: bool = True,
        remove_emails: bool = True,
        remove_numbers: bool = True,
        remove_html_tags: bool = True,
        to_lower_case: bool = True,
        remove_stop_words: bool = True,
        custom_patterns: list[str] | None = None,
        **kwargs: Any,
    ):
        super().__init__(**kwargs)
        self.remove_urls = remove_urls
        self.remove_emails = remove_emails
        self.remove_numbers = remove_numbers
        self.remove_html_tags = remove_html_tags
        self.to_lower_case = to_lower_case
        self.remove_stop_words = remove_stop_words
        self._custom_patterns = [re.compile(p) for p in custom_patterns or []]

    @property
    def display_name(self) -> str:
        return "Text Preprocess"

    def clean(self, text: str) -> str:
        """Apply the configured cleaning steps to text."""
        processed = text.lower() if self.to_lower_case else text

        if self.remove_html_tags:
            processed = HTML_TAG.sub("", processed)
        if self.remove_urls:
            processed = URL.sub("", processed)
        if self.remove_emails:
            processed = EMAIL.sub("", processed)
        if self.remove_numbers:
            processed = NUMBER.sub("", processed)
        for pattern in self._custom_patterns:
            processed = pattern.sub("", processed)

        if self.to_lower_case:
            processed = NON_LETTER.sub(" ", processed)
        processed = WHITESPACE.sub(" ", processed).strip()

        if self.remove_stop_words:
            processed = " ".join(
                word for word in processed.split() if word.lower() not in ENGLISH_STOP_WORDS
            )
        return processed

    def _split(self, text: str) -> list[str]:
        processed = self.clean(text)
        return [processed] if processed else []
