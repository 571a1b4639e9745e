from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Annotated, Any, Mapping, Optional, Sequence

from pydantic import AllowInfNan, BaseModel, ConfigDict, Strict, ValidationError, model_validator

from kbsearch.domain.errors import StoreLoadError
from kbsearch.utils.json_sanitize import json_sanitize

logger = logging.getLogger(__name__)

# Strings, booleans and NaN/inf are rejected, not coerced.
StoredFloat = Annotated[float, Strict(), AllowInfNan(False)]


class PersistedStore(BaseModel):
    """
    On-disk shape of a document store: three parallel arrays plus a save time.
    """
    model_config = ConfigDict(extra="ignore")

    vectors: list[list[StoredFloat]]
    texts: list[str]
    metadata: list[dict[str, Any]]
    timestamp: datetime

    @model_validator(mode="after")
    def _parallel_arrays(self) -> "PersistedStore":
        lengths = {len(self.vectors), len(self.texts), len(self.metadata)}
        if len(lengths) != 1:
            raise ValueError(
                "vectors/texts/metadata length mismatch: "
                f"{len(self.vectors)}/{len(self.texts)}/{len(self.metadata)}"
            )
        return self


def write_store_file(
    path: Path,
    *,
    vectors: Sequence[Sequence[float]],
    texts: Sequence[str],
    metadata: Sequence[Mapping[str, Any]],
    timestamp: Optional[datetime] = None,
) -> Path:
    """
    Write the store as indented JSON.

    The file is written to a temp sibling first and moved into place, so a
    reader never sees a half-written file. There is no locking: one writer per file.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    payload = {
        "vectors": [list(v) for v in vectors],
        "texts": list(texts),
        "metadata": json_sanitize(list(metadata)),
        "timestamp": (timestamp or datetime.now(timezone.utc)).isoformat(),
    }

    tmp_file = path.with_name(path.name + ".tmp")
    with tmp_file.open("w", encoding="utf-8") as f:
        f.write(json.dumps(payload, indent=2, ensure_ascii=False))
        f.flush()

    tmp_file.replace(path)
    logger.info(f"Saved {len(payload['texts'])} records to {path}")
    return path


def read_store_file(path: Path) -> PersistedStore:
    path = Path(path)
    if not path.exists():
        raise StoreLoadError(f"store file not found: {path}")

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise StoreLoadError(f"cannot read store file {path}: {e}") from e

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise StoreLoadError(f"invalid JSON in {path}: {e}") from e

    try:
        return PersistedStore.model_validate(data)
    except ValidationError as e:
        raise StoreLoadError(f"invalid store file {path}: {e}") from e
