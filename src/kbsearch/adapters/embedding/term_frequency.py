from __future__ import annotations

import re
from collections import Counter
from dataclasses import dataclass
from typing import Optional, Sequence

from kbsearch.domain.models import Embedding
from kbsearch.similarity import overlap_cosine

_TOKEN_RE = re.compile(r"\b\w+\b")


def tokenize(text: str) -> list[str]:
    """Lowercased word-character runs; punctuation never forms a token."""
    return _TOKEN_RE.findall((text or "").lower())


@dataclass(frozen=True, slots=True)
class TermFrequencyEmbedder:
    """
    Local bag-of-words embeddings, no network.

    Each text gets its own vocabulary (distinct tokens, first-seen order) and a
    parallel vector of normalized counts, so two vectors are only comparable
    through the terms they share.
    """
    model: str = "term-frequency-v1"

    @property
    def model_name(self) -> str:
        return self.model

    @property
    def fixed_dimension(self) -> bool:
        return False

    @property
    def expected_dimension(self) -> Optional[int]:
        return None

    def embed(self, text: str) -> Embedding:
        tokens = tokenize(text)
        if not tokens:
            return Embedding(vector=(), vocabulary=())

        counts = Counter(tokens)
        total = len(tokens)
        vocabulary = tuple(counts)
        return Embedding(
            vector=tuple(counts[term] / total for term in vocabulary),
            vocabulary=vocabulary,
        )

    def similarity(self, query: Embedding, document: Embedding) -> float:
        return overlap_cosine(
            query.vector,
            query.vocabulary or (),
            document.vector,
            document.vocabulary or (),
        )

    def restore(self, text: str, vector: Sequence[float]) -> Embedding:
        # Tokenization is deterministic, so the vocabulary is rebuilt from the text.
        vocabulary = tuple(Counter(tokenize(text)))
        if len(vocabulary) != len(vector):
            raise ValueError(
                f"stored vector has {len(vector)} entries but text yields {len(vocabulary)} terms"
            )
        return Embedding(vector=tuple(vector), vocabulary=vocabulary)
