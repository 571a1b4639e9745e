from __future__ import annotations

import json
import re
from collections import Counter
from pathlib import Path
from typing import Sequence

from kbsearch.domain.models import KnowledgeSegment
from kbsearch.domain.schema import META_ID, META_KEYWORDS, META_SECTION

_HEADER_RE = re.compile(r"[A-Z\s]+:")
_NON_WORD_RE = re.compile(r"[^\w\s]")

CONTENT_CHUNK_SECTION = "Content Chunk"

STOPWORDS = frozenset(
    {
        "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for", "of", "with", "by",
        "is", "are", "was", "were", "be", "been", "being", "have", "has", "had", "do", "does", "did",
        "will", "would", "could", "should", "may", "might", "can", "must", "shall",
        "this", "that", "these", "those", "i", "you", "he", "she", "it", "we", "they",
        "me", "him", "her", "us", "them", "my", "your", "his", "its", "our", "their",
    }
)


def extract_keywords(text: str, *, limit: int = 10) -> list[str]:
    """
    Most frequent non-stopword words longer than two characters.

    Ties keep first-appearance order.
    """
    words = [
        w
        for w in _NON_WORD_RE.sub(" ", text.lower()).split()
        if len(w) > 2 and w not in STOPWORDS
    ]
    counts = Counter(words)
    ranked = sorted(counts, key=lambda w: counts[w], reverse=True)
    return ranked[:limit]


def is_section_header(line: str) -> bool:
    """An all-caps line ending in a colon, e.g. "HEALTH INSURANCE:"."""
    return len(line) > 3 and _HEADER_RE.fullmatch(line) is not None


def content_chunks(text: str, *, max_chunk_size: int = 300, min_chunk_size: int = 50) -> list[str]:
    """
    Group non-blank lines into chunks of roughly max_chunk_size characters.

    Chunks of min_chunk_size characters or fewer are dropped.
    """
    chunks: list[str] = []
    current = ""
    for line in (ln for ln in text.split("\n") if ln.strip()):
        if current and len(current) + len(line) > max_chunk_size:
            chunks.append(current.strip())
            current = line + " "
        else:
            current += line + " "

    if current.strip():
        chunks.append(current.strip())
    return [c for c in chunks if len(c) > min_chunk_size]


def convert_text_to_knowledge(text: str) -> list[KnowledgeSegment]:
    """
    Turn extracted website text into knowledge segments.

    One segment per ALL CAPS section, then one per ~300-char line group so
    small questions can match small passages. Ids run from 1 across both.
    """
    segments: list[KnowledgeSegment] = []

    def emit(section: str, content: str) -> None:
        segments.append(
            KnowledgeSegment(
                text=content,
                metadata={
                    META_ID: len(segments) + 1,
                    META_SECTION: section,
                    META_KEYWORDS: extract_keywords(content),
                },
            )
        )

    section = ""
    parts: list[str] = []
    for raw_line in text.split("\n"):
        line = raw_line.strip()
        if is_section_header(line):
            if section and parts:
                emit(section, " ".join(parts))
            section = line.replace(":", "", 1).strip()
            parts = []
        elif line and section:
            parts.append(line)

    if section and parts:
        emit(section, " ".join(parts))

    for chunk in content_chunks(text):
        emit(CONTENT_CHUNK_SECTION, chunk)

    return segments


def write_knowledge_file(segments: Sequence[KnowledgeSegment], path: Path) -> Path:
    """Write segments in the extracted ("content") shape."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    rows = [
        {
            "id": seg.metadata.get(META_ID),
            "section": seg.metadata.get(META_SECTION),
            "content": seg.text,
            "keywords": list(seg.metadata.get(META_KEYWORDS, [])),
        }
        for seg in segments
    ]
    path.write_text(json.dumps(rows, indent=2, ensure_ascii=False), encoding="utf-8")
    return path
