from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional

from kbsearch.adapters.chunking.sentence import SentenceChunker
from kbsearch.adapters.embedding.term_frequency import TermFrequencyEmbedder
from kbsearch.adapters.vectorstores.json_file import PersistedStore, read_store_file, write_store_file
from kbsearch.domain.errors import DimensionMismatchError, EmptyInputError, StoreLoadError
from kbsearch.domain.models import DocumentRecord, Embedding, SearchResult, StoreStats
from kbsearch.domain.schema import META_CHUNK_INDEX, META_ORIGINAL_LENGTH, META_TOTAL_CHUNKS
from kbsearch.ports import Chunker, Embedder
from kbsearch.similarity import rank

logger = logging.getLogger(__name__)

# Term-frequency matches at or below this score are noise.
LOCAL_MIN_SIMILARITY = 0.1


@dataclass(slots=True)
class InMemoryDocumentStore:
    """
    Append-only document store with linear-scan similarity search.

    The embedder decides both the vector shape and the scoring rule. With a
    chunker, each added text is split first and every chunk becomes its own
    record tagged with chunkIndex / totalChunks / originalLength. With
    min_similarity set, results scoring at or below it are dropped.
    """
    embedder: Embedder
    chunker: Optional[Chunker] = None
    min_similarity: Optional[float] = None
    _records: list[DocumentRecord] = field(default_factory=list)

    @classmethod
    def local(cls, *, min_similarity: Optional[float] = LOCAL_MIN_SIMILARITY) -> "InMemoryDocumentStore":
        return cls(embedder=TermFrequencyEmbedder(), min_similarity=min_similarity)

    @classmethod
    def remote(cls, embedder: Embedder, *, max_chunk_size: int = 1000) -> "InMemoryDocumentStore":
        return cls(embedder=embedder, chunker=SentenceChunker(max_chunk_size=max_chunk_size))

    @property
    def records(self) -> tuple[DocumentRecord, ...]:
        return tuple(self._records)

    @property
    def dimension(self) -> int:
        return self._records[0].embedding.dimension if self._records else 0

    def count(self) -> int:
        return len(self._records)

    # -------------------------
    # Writes
    # -------------------------

    def add(self, text: str, metadata: Optional[Mapping[str, Any]] = None) -> int:
        """
        Embed and append `text`; returns the number of records appended.

        Chunks are embedded one at a time in order. If one fails, it and the
        chunks after it are not stored, while earlier chunks stay committed.
        """
        if not text or not text.strip():
            raise EmptyInputError("cannot add empty or whitespace-only text")

        base = dict(metadata or {})
        if self.chunker is None:
            self._append(text, self.embedder.embed(text), base)
            return 1

        chunks = self.chunker.split(text)
        for i, chunk in enumerate(chunks):
            embedding = self.embedder.embed(chunk)
            self._append(
                chunk,
                embedding,
                {
                    **base,
                    META_CHUNK_INDEX: i,
                    META_TOTAL_CHUNKS: len(chunks),
                    META_ORIGINAL_LENGTH: len(text),
                },
            )
        logger.debug(f"Added {len(chunks)} chunks ({len(text)} chars) to store")
        return len(chunks)

    def _append(self, text: str, embedding: Embedding, metadata: Mapping[str, Any]) -> None:
        self._check_dimension(embedding)
        self._records.append(DocumentRecord(text=text, embedding=embedding, metadata=metadata))

    def _check_dimension(self, embedding: Embedding) -> None:
        if not self.embedder.fixed_dimension or not self._records:
            return
        if embedding.dimension != self.dimension:
            raise DimensionMismatchError(
                f"store holds {self.dimension}-dimensional vectors, got {embedding.dimension}"
            )

    # -------------------------
    # Reads
    # -------------------------

    def search(self, query: str, top_k: int = 5) -> list[SearchResult]:
        if not self._records or not query or not query.strip():
            return []

        query_embedding = self.embedder.embed(query)
        self._check_dimension(query_embedding)

        scores = [self.embedder.similarity(query_embedding, r.embedding) for r in self._records]
        ranked = rank(scores, top_k=top_k, min_score=self.min_similarity)
        return [
            SearchResult(
                text=self._records[i].text,
                metadata=copy.deepcopy(dict(self._records[i].metadata)),
                similarity=score,
                index=i,
            )
            for i, score in ranked
        ]

    def stats(self) -> StoreStats:
        total = len(self._records)
        average = sum(len(r.text) for r in self._records) / total if total else 0.0
        return StoreStats(
            total_vectors=total,
            total_texts=total,
            average_text_length=average,
            vector_dimension=self.dimension,
        )

    # -------------------------
    # Persistence
    # -------------------------

    def save(self, path: str | Path) -> Path:
        return write_store_file(
            Path(path),
            vectors=[r.vector for r in self._records],
            texts=[r.text for r in self._records],
            metadata=[r.metadata for r in self._records],
        )

    def load(self, path: str | Path) -> bool:
        """
        Replace the store contents with the file at `path`.

        Returns False, leaving the current records untouched, if the file is
        missing or invalid.
        """
        try:
            persisted = read_store_file(Path(path))
            records = self._restore(persisted)
        except StoreLoadError as e:
            logger.warning(f"Could not load store from {path}: {e}")
            return False

        self._records = records
        logger.info(f"Loaded {len(records)} records from {path} (saved {persisted.timestamp})")
        return True

    def _restore(self, persisted: PersistedStore) -> list[DocumentRecord]:
        records: list[DocumentRecord] = []
        for i, (text, vector, meta) in enumerate(zip(persisted.texts, persisted.vectors, persisted.metadata)):
            try:
                embedding = self.embedder.restore(text, vector)
            except ValueError as e:
                raise StoreLoadError(f"record {i}: {e}") from e
            expected = self.embedder.expected_dimension
            if self.embedder.fixed_dimension and expected is not None and embedding.dimension != expected:
                raise StoreLoadError(
                    f"record {i}: dimension {embedding.dimension} != embedder dimension {expected}"
                )
            if self.embedder.fixed_dimension and records and embedding.dimension != records[0].embedding.dimension:
                raise StoreLoadError(
                    f"record {i}: dimension {embedding.dimension} != {records[0].embedding.dimension}"
                )
            records.append(DocumentRecord(text=text, embedding=embedding, metadata=meta))
        return records
