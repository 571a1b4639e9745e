from __future__ import annotations

import math
from datetime import date, datetime
from pathlib import Path
from typing import Any, Mapping


def json_sanitize(x: Any) -> Any:
    """
    Make record metadata safe for a strict JSON file.
    - NaN / +-inf -> None (json.dumps would otherwise emit invalid tokens)
    - datetime/date -> ISO string
    - Path -> str
    - set/frozenset -> sorted list, tuple -> list
    - mappings (including read-only proxies) -> dict with str keys
    - unknown objects -> str(x)
    """
    if x is None or isinstance(x, (str, bool, int)):
        return x

    if isinstance(x, float):
        return x if math.isfinite(x) else None

    if isinstance(x, (datetime, date)):
        return x.isoformat()

    if isinstance(x, Path):
        return str(x)

    if isinstance(x, (set, frozenset)):
        return [json_sanitize(v) for v in sorted(x, key=lambda v: str(v))]

    if isinstance(x, (list, tuple)):
        return [json_sanitize(v) for v in x]

    if isinstance(x, Mapping):
        return {str(k): json_sanitize(v) for k, v in x.items()}

    return str(x)
