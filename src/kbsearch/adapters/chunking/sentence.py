from __future__ import annotations

import re
from dataclasses import dataclass

_SENTENCE_END_RE = re.compile(r"[.!?]+")


def split_sentences(text: str) -> list[str]:
    """Split on runs of . ! ? and drop blank pieces (terminators are not kept)."""
    return [s.strip() for s in _SENTENCE_END_RE.split(text or "") if s.strip()]


@dataclass(frozen=True, slots=True)
class SentenceChunker:
    """
    Sentence-aware character-bounded chunker.

    Strategy:
      - split text into sentences on . ! ?
      - greedily append sentences (joined with ". ") while the chunk stays within max_chunk_size
      - when the next sentence would overflow, close the chunk and start a new one with it
      - a single sentence longer than max_chunk_size becomes its own oversized chunk
    """
    max_chunk_size: int = 1000
    separator: str = ". "
    strategy_name: str = "sentence_chars_v1"

    def __post_init__(self) -> None:
        if self.max_chunk_size <= 0:
            raise ValueError("max_chunk_size must be positive")

    def split(self, text: str) -> list[str]:
        chunks: list[str] = []
        current = ""
        for sentence in split_sentences(text):
            if not current:
                current = sentence
            elif len(current) + len(self.separator) + len(sentence) > self.max_chunk_size:
                chunks.append(current)
                current = sentence
            else:
                current = f"{current}{self.separator}{sentence}"

        if current:
            chunks.append(current)
        return chunks
