from __future__ import annotations

from typing import Protocol


class Chunker(Protocol):
    """
    Splits a long text into bounded pieces, in document order.
    """

    def split(self, text: str) -> list[str]:
        ...
