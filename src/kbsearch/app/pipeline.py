from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping, Optional, Sequence

from kbsearch.adapters.ingestion.knowledge import load_knowledge
from kbsearch.app.container import Container
from kbsearch.domain.models import KnowledgeSegment, SearchResult
from kbsearch.ports import DocumentStore

logger = logging.getLogger(__name__)


def index_text(
    store: DocumentStore,
    text: str,
    *,
    metadata: Optional[Mapping[str, Any]] = None,
) -> int:
    return store.add(text, metadata)


def index_segments(store: DocumentStore, segments: Iterable[KnowledgeSegment]) -> int:
    total = 0
    for seg in segments:
        total += store.add(seg.text, seg.metadata)
    return total


def build_knowledge_store(container: Container, *, rebuild: bool = False, persist: bool = False) -> DocumentStore:
    """
    Ready the container's store for queries.

    Reuses the persisted store file when one loads (unless `rebuild`), otherwise
    ingests the configured knowledge files. Raises IngestionError when there is
    nothing to ingest, so a caller never ends up holding a silently empty store.
    """
    store = container.store
    store_path = container.settings.store.path

    if not rebuild and store_path.exists() and store.load(store_path):
        return store

    segments = load_knowledge(container.settings.knowledge.files)
    added = index_segments(store, segments)
    logger.info(f"Indexed {len(segments)} segments as {added} records ({container.strategy} strategy)")

    if persist:
        store.save(store_path)
    return store


def search(store: DocumentStore, query: str, *, top_k: int = 5) -> list[SearchResult]:
    return store.search(query, top_k)


def batch_search(
    store: DocumentStore,
    queries: Sequence[str],
    *,
    top_k: int = 3,
) -> dict[str, list[SearchResult]]:
    """Run several queries in order; duplicate queries are searched once."""
    out: dict[str, list[SearchResult]] = {}
    for q in queries:
        if q not in out:
            out[q] = store.search(q, top_k)
    return out
