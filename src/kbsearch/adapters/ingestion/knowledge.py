from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional, Sequence

from kbsearch.domain.errors import IngestionError
from kbsearch.domain.models import KnowledgeSegment
from kbsearch.domain.schema import LEGACY_META_CATEGORY, META_ID, META_KEYWORDS, META_SECTION, META_SOURCE

logger = logging.getLogger(__name__)


def normalize_segment(raw: Mapping[str, Any]) -> Optional[KnowledgeSegment]:
    """
    Map one knowledge-file entry onto a KnowledgeSegment.

    Two shapes exist in the wild:
      - extracted:  {"content", "section", "keywords", "id"}
      - legacy:     {"text", "category" | "metadata", "keywords", "id"}

    "content" wins over "text"; "category" becomes "section"; keys that are
    absent or None are left out. Entries without any text return None.
    """
    content = raw.get("content")
    if isinstance(content, str) and content.strip():
        text = content
        metadata: dict[str, Any] = {}
    else:
        text = raw.get("text")
        if not isinstance(text, str) or not text.strip():
            return None
        nested = raw.get("metadata")
        metadata = dict(nested) if isinstance(nested, Mapping) else {}

    for key in (META_SECTION, LEGACY_META_CATEGORY, META_KEYWORDS, META_ID):
        if raw.get(key) is not None:
            metadata[key] = raw[key]

    if LEGACY_META_CATEGORY in metadata:
        category = metadata.pop(LEGACY_META_CATEGORY)
        metadata.setdefault(META_SECTION, category)

    return KnowledgeSegment(text=text, metadata=metadata)


def normalize_segments(items: Iterable[Any], *, source: Optional[str] = None) -> list[KnowledgeSegment]:
    out: list[KnowledgeSegment] = []
    skipped = 0
    for item in items:
        segment = normalize_segment(item) if isinstance(item, Mapping) else None
        if segment is None:
            skipped += 1
            continue
        if source is not None and META_SOURCE not in segment.metadata:
            segment = KnowledgeSegment(text=segment.text, metadata={**segment.metadata, META_SOURCE: source})
        out.append(segment)
    if skipped:
        logger.warning(f"Skipped {skipped} knowledge entries without text")
    return out


def load_knowledge_file(path: Path) -> list[KnowledgeSegment]:
    """
    Read a knowledge JSON file: either a list of entries or {"documents": [...]}.
    """
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise IngestionError(f"knowledge file not found: {path}") from e
    except (OSError, json.JSONDecodeError) as e:
        raise IngestionError(f"cannot read knowledge file {path}: {e}") from e

    if isinstance(data, Mapping):
        data = data.get("documents")
    if not isinstance(data, list):
        raise IngestionError(f"{path}: expected a list of entries or an object with 'documents'")

    return normalize_segments(data, source=path.name)


def load_knowledge(paths: Sequence[Path]) -> list[KnowledgeSegment]:
    """
    Load the first knowledge file in `paths` that reads cleanly.

    Later paths are fallbacks. Raises IngestionError if none loads or the
    loaded file holds no usable entries.
    """
    if not paths:
        raise IngestionError("no knowledge files configured")

    errors: list[str] = []
    for path in paths:
        try:
            segments = load_knowledge_file(path)
        except IngestionError as e:
            logger.info(f"Knowledge file unavailable, trying next: {e}")
            errors.append(str(e))
            continue

        if not segments:
            raise IngestionError(f"no knowledge segments found in {path}")
        logger.info(f"Loaded {len(segments)} knowledge segments from {path}")
        return segments

    raise IngestionError("no knowledge file could be loaded: " + "; ".join(errors))
