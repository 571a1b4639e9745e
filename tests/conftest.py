"""Shared fakes: a keyword-axis dense embedder and a stand-in OpenAI client."""
from __future__ import annotations

from dataclasses import dataclass, field
from types import SimpleNamespace
from typing import Callable, Optional, Sequence

import pytest

from kbsearch.adapters.embedding import gemini_embedder
from kbsearch.domain.errors import EmbeddingServiceError
from kbsearch.domain.models import Embedding
from kbsearch.similarity import cosine_similarity

AXES = ("health", "auto", "life", "home")


@dataclass
class KeywordEmbedder:
    """
    Dense, fixed-dimension embeddings: one axis per keyword, value = occurrences.

    Any text containing `fail_marker` raises EmbeddingServiceError, like a failed remote call.
    """
    axes: Sequence[str] = AXES
    fail_marker: Optional[str] = None
    calls: list[str] = field(default_factory=list)

    @property
    def model_name(self) -> str:
        return "keyword-axes"

    @property
    def fixed_dimension(self) -> bool:
        return True

    @property
    def expected_dimension(self) -> Optional[int]:
        return len(self.axes)

    def embed(self, text: str) -> Embedding:
        self.calls.append(text)
        if self.fail_marker and self.fail_marker in text:
            raise EmbeddingServiceError("simulated outage")
        lowered = text.lower()
        return Embedding(vector=tuple(float(lowered.count(a)) for a in self.axes))

    def similarity(self, query: Embedding, document: Embedding) -> float:
        return cosine_similarity(query.vector, document.vector)

    def restore(self, text: str, vector: Sequence[float]) -> Embedding:
        return Embedding(vector=tuple(vector))


@pytest.fixture
def keyword_embedder() -> KeywordEmbedder:
    return KeywordEmbedder()


class FakeOpenAI:
    """Records constructor kwargs and embedding requests; replies via `responder`."""

    instances: list["FakeOpenAI"] = []

    def __init__(self, responder: Callable[[str, str], object], **kwargs):
        self.kwargs = kwargs
        self.requests: list[dict] = []
        self._responder = responder
        self.embeddings = SimpleNamespace(create=self._create)
        FakeOpenAI.instances.append(self)

    def _create(self, *, model: str, input: str):
        self.requests.append({"model": model, "input": input})
        return self._responder(model, input)


def embedding_response(vector: Sequence[float]):
    return SimpleNamespace(data=[SimpleNamespace(embedding=list(vector))])


@pytest.fixture
def fake_openai(monkeypatch):
    """
    Patch the OpenAI client used by GeminiEmbedder.

    Returns a setter: call it with responder(model, text) -> response (or raise).
    By default every text embeds to a 768-dim vector derived from its length.
    """
    FakeOpenAI.instances = []
    state = {"responder": lambda model, text: embedding_response([float(len(text) % 7 + 1)] * 768)}

    def factory(**kwargs):
        return FakeOpenAI(lambda m, t: state["responder"](m, t), **kwargs)

    monkeypatch.setattr(gemini_embedder, "OpenAI", factory)

    def set_responder(responder: Callable[[str, str], object]) -> type[FakeOpenAI]:
        state["responder"] = responder
        return FakeOpenAI

    return set_responder
