from __future__ import annotations

from typing import Final

# Metadata keys written by the store (camelCase is part of the persisted format)
META_CHUNK_INDEX: Final[str] = "chunkIndex"
META_TOTAL_CHUNKS: Final[str] = "totalChunks"
META_ORIGINAL_LENGTH: Final[str] = "originalLength"

# Canonical keys for knowledge-base segments
META_SECTION: Final[str] = "section"
META_KEYWORDS: Final[str] = "keywords"
META_ID: Final[str] = "id"
META_SOURCE: Final[str] = "source"

# Legacy spelling of META_SECTION in older knowledge files
LEGACY_META_CATEGORY: Final[str] = "category"
