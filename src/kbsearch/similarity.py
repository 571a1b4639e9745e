from __future__ import annotations

import math
from typing import Iterable, Optional, Sequence

from kbsearch.domain.errors import DimensionMismatchError


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """
    Full-dimension cosine similarity. Zero-norm vectors score 0.0.
    """
    if len(a) != len(b):
        raise DimensionMismatchError(f"cannot compare vectors of dimension {len(a)} and {len(b)}")
    dot_product = sum(x * y for x, y in zip(a, b))
    norm_a = sum(x * x for x in a)
    norm_b = sum(y * y for y in b)
    if norm_a == 0 or norm_b == 0:
        return 0.0
    # sqrt of the product rounds once; sqrt(a) * sqrt(b) can push parallel vectors below 1.0.
    return dot_product / math.sqrt(norm_a * norm_b)


def overlap_cosine(
    v1: Sequence[float],
    vocab1: Sequence[str],
    v2: Sequence[float],
    vocab2: Sequence[str],
) -> float:
    """
    Cosine similarity restricted to the terms both vocabularies share.

    Terms present on only one side are ignored entirely (they count neither
    toward the dot product nor toward either norm). No shared terms -> 0.0.
    """
    positions = {term: i for i, term in enumerate(vocab2)}
    dot_product = 0.0
    norm1 = 0.0
    norm2 = 0.0
    shared = 0
    for i, term in enumerate(vocab1):
        j = positions.get(term)
        if j is None:
            continue
        x, y = v1[i], v2[j]
        dot_product += x * y
        norm1 += x * x
        norm2 += y * y
        shared += 1

    if shared == 0 or norm1 == 0 or norm2 == 0:
        return 0.0
    return dot_product / math.sqrt(norm1 * norm2)


def rank(
    scores: Iterable[float],
    *,
    top_k: int,
    min_score: Optional[float] = None,
) -> list[tuple[int, float]]:
    """
    Order (position, score) pairs by descending score and keep the best top_k.

    The sort is stable, so equal scores keep their original order.
    With min_score set, anything scoring <= min_score is dropped before truncation.
    """
    if top_k <= 0:
        return []
    scored = list(enumerate(scores))
    if min_score is not None:
        scored = [(i, s) for i, s in scored if s > min_score]
    scored.sort(key=lambda pair: pair[1], reverse=True)
    return scored[:top_k]
