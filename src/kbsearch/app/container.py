from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from kbsearch.adapters.chunking.sentence import SentenceChunker
from kbsearch.adapters.embedding.gemini_embedder import GeminiEmbedder
from kbsearch.adapters.embedding.term_frequency import TermFrequencyEmbedder
from kbsearch.adapters.vectorstores.in_memory_store import InMemoryDocumentStore
from kbsearch.domain.errors import ConfigError
from kbsearch.ports import Chunker, Embedder
from kbsearch.settings import STRATEGIES, Settings


@dataclass(frozen=True, slots=True)
class Container:
    """
    Lightweight dependency container.
    Owns the one store instance the serving code queries; pass it around instead of
    reaching for a module-level global.
    """
    settings: Settings
    strategy: str
    embedder: Embedder
    chunker: Optional[Chunker]
    store: InMemoryDocumentStore


def build_embedder(settings: Settings, strategy: str) -> Embedder:
    if strategy == "local":
        return TermFrequencyEmbedder()
    if strategy == "remote":
        emb = settings.embeddings
        return GeminiEmbedder(
            api_key=emb.api_key,
            model=emb.model,
            base_url=emb.base_url,
            timeout=emb.timeout_seconds,
            dimensions=emb.dimensions,
        )
    raise ConfigError(f"unknown strategy {strategy!r}; expected one of {STRATEGIES}")


def build_container(settings: Settings, *, strategy: Optional[str] = None) -> Container:
    strategy = strategy or settings.store.strategy
    embedder = build_embedder(settings, strategy)

    if strategy == "local":
        chunker = None
        store = InMemoryDocumentStore(embedder=embedder, min_similarity=settings.search.min_similarity)
    else:
        chunker = SentenceChunker(max_chunk_size=settings.chunking.max_chunk_size)
        store = InMemoryDocumentStore(embedder=embedder, chunker=chunker)

    return Container(
        settings=settings,
        strategy=strategy,
        embedder=embedder,
        chunker=chunker,
        store=store,
    )
