from .lazy import Lazy
from .text import normalize_text, tokenize

__all__ = [
    "Lazy",
    "normalize_text",
    "tokenize",
]
