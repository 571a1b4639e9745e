from __future__ import annotations

import copy
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Optional


def _freeze(metadata: Mapping[str, Any] | None) -> Mapping[str, Any]:
    return MappingProxyType(copy.deepcopy(dict(metadata or {})))


# -------------------------
# Embeddings
# -------------------------

@dataclass(frozen=True, slots=True)
class Embedding:
    """
    Numeric representation of a piece of text.

    vocabulary is set only by term-frequency embedders; it is parallel to vector
    (vector[i] is the normalized frequency of vocabulary[i]). Dense embedders leave it None.
    """
    vector: tuple[float, ...]
    vocabulary: Optional[tuple[str, ...]] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "vector", tuple(float(x) for x in self.vector))
        if self.vocabulary is not None:
            object.__setattr__(self, "vocabulary", tuple(self.vocabulary))
            if len(self.vocabulary) != len(self.vector):
                raise ValueError(
                    f"vocabulary/vector length mismatch: {len(self.vocabulary)} != {len(self.vector)}"
                )

    @property
    def dimension(self) -> int:
        return len(self.vector)


# -------------------------
# Stored content
# -------------------------

@dataclass(frozen=True, slots=True)
class DocumentRecord:
    """
    One stored chunk of text plus its metadata and embedding.

    Records are never updated in place; metadata is exposed read-only.
    """
    text: str
    embedding: Embedding
    metadata: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "metadata", _freeze(self.metadata))

    @property
    def vector(self) -> tuple[float, ...]:
        return self.embedding.vector

    @property
    def vocabulary(self) -> Optional[tuple[str, ...]]:
        return self.embedding.vocabulary


@dataclass(frozen=True, slots=True)
class KnowledgeSegment:
    """
    A canonical knowledge-base entry, ready to be added to a store.
    """
    text: str
    metadata: Mapping[str, Any] = field(default_factory=dict)


# -------------------------
# Query results
# -------------------------

@dataclass(frozen=True, slots=True)
class SearchResult:
    """
    index: position of the record in the store's insertion order (not the rank).
    """
    text: str
    metadata: Mapping[str, Any]
    similarity: float
    index: int


@dataclass(frozen=True, slots=True)
class StoreStats:
    total_vectors: int
    total_texts: int
    average_text_length: float
    vector_dimension: int

    def as_dict(self) -> dict[str, Any]:
        return {
            "totalVectors": self.total_vectors,
            "totalTexts": self.total_texts,
            "averageTextLength": self.average_text_length,
            "vectorDimension": self.vector_dimension,
        }
