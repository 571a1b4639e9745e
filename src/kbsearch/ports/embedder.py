from __future__ import annotations

from typing import Optional, Protocol, Sequence

from kbsearch.domain.models import Embedding


class Embedder(Protocol):
    """
    Turns text into an Embedding and scores two embeddings against each other.

    The scoring rule belongs to the embedder because it depends on the vector
    shape: term-frequency vectors are compared over shared vocabulary only,
    dense vectors over every dimension.
    """

    @property
    def model_name(self) -> str: ...

    @property
    def fixed_dimension(self) -> bool:
        """True when every vector this embedder produces has the same length."""
        ...

    @property
    def expected_dimension(self) -> Optional[int]:
        """Length every vector must have, or None when it is not known up front."""
        ...

    def embed(self, text: str) -> Embedding:
        ...

    def similarity(self, query: Embedding, document: Embedding) -> float:
        ...

    def restore(self, text: str, vector: Sequence[float]) -> Embedding:
        """Rebuild a stored Embedding from its persisted text and vector."""
        ...
