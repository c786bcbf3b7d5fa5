"""Deterministic offline embedding.

Each token is hashed into one of ``dimension`` buckets and contributes
``1 / (position + 1)``, so earlier tokens weigh more. The result is
L2-normalized. It keeps routing alive without the provider; it is not a
semantic model.
"""

import hashlib

import numpy as np

from intent_router.core.utils.text import tokenize

from .vector_ops import l2_normalize


def _bucket(token: str, dimension: int) -> int:
    digest = hashlib.sha256(token.encode("utf-8")).digest()
    return int.from_bytes(digest[:8], "big") % dimension


def local_embedding(text: str, dimension: int) -> list[float]:
    if dimension <= 0:
        raise ValueError("dimension must be positive")

    vector = np.zeros(dimension, dtype=np.float64)
    for position, token in enumerate(tokenize(text)):
        vector[_bucket(token, dimension)] += 1.0 / (position + 1)
    return l2_normalize(vector).tolist()
