from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping, Protocol

from kbsearch.domain.models import SearchResult, StoreStats


class DocumentStore(Protocol):
    """
    Stores text + metadata + embedding records and ranks them against a query.
    """

    def add(self, text: str, metadata: Mapping[str, Any] | None = None) -> int:
        ...

    def search(self, query: str, top_k: int = 5) -> list[SearchResult]:
        ...

    def stats(self) -> StoreStats:
        ...

    def count(self) -> int:
        ...

    def save(self, path: str | Path) -> Path:
        ...

    def load(self, path: str | Path) -> bool:
        ...
