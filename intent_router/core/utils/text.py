"""Text normalization shared by the matchers and the classifier."""

import re

_TOKEN_RE = re.compile(r"\b\w+\b")


def normalize_text(text: str) -> str:
    """Cache key form of a text: lowercased and trimmed."""
    return text.strip().lower()


def tokenize(text: str) -> list[str]:
    """Lowercased word tokens in order of appearance."""
    return _TOKEN_RE.findall(text.lower())
