from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

# Requires: pip install openai. Gemini serves embeddings over an OpenAI-compatible API.
from openai import OpenAI, OpenAIError

from kbsearch.domain.errors import ConfigError, EmbeddingServiceError
from kbsearch.domain.models import Embedding
from kbsearch.similarity import cosine_similarity

logger = logging.getLogger(__name__)

GEMINI_OPENAI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/openai/"


@dataclass(frozen=True, slots=True)
class GeminiEmbedder:
    """
    Dense embeddings from Google's embedding service.

    Notes:
      - uses the official OpenAI Python client against Gemini's compatible endpoint
      - one request per text; no automatic retries (max_retries=0)
      - every request is bounded by `timeout` seconds; a timeout is an EmbeddingServiceError
      - when `dimensions` is set, a response of any other length is rejected
    """
    api_key: str
    model: str = "text-embedding-004"
    base_url: str = GEMINI_OPENAI_BASE_URL
    timeout: float = 30.0
    dimensions: Optional[int] = 768

    def __post_init__(self) -> None:
        if not self.api_key:
            raise ConfigError("GeminiEmbedder requires an API key")

    @property
    def model_name(self) -> str:
        return self.model

    @property
    def fixed_dimension(self) -> bool:
        return True

    @property
    def expected_dimension(self) -> Optional[int]:
        return self.dimensions

    def embed(self, text: str) -> Embedding:
        client = OpenAI(
            api_key=self.api_key,
            base_url=self.base_url,
            timeout=self.timeout,
            max_retries=0,
        )
        try:
            resp = client.embeddings.create(model=self.model, input=text)
        except OpenAIError as e:
            logger.warning(f"Embedding request to {self.model} failed: {e}")
            raise EmbeddingServiceError(f"embedding request failed: {e}") from e

        data = getattr(resp, "data", None) or []
        if not data:
            raise EmbeddingServiceError("embedding service returned no data")

        raw = getattr(data[0], "embedding", None)
        if not raw:
            raise EmbeddingServiceError("embedding service returned an empty vector")
        try:
            vector = tuple(float(x) for x in raw)
        except (TypeError, ValueError) as e:
            raise EmbeddingServiceError(f"embedding service returned a malformed vector: {e}") from e

        if self.dimensions is not None and len(vector) != self.dimensions:
            raise EmbeddingServiceError(
                f"expected {self.dimensions}-dimensional embedding, got {len(vector)}"
            )
        return Embedding(vector=vector)

    def similarity(self, query: Embedding, document: Embedding) -> float:
        return cosine_similarity(query.vector, document.vector)

    def restore(self, text: str, vector: Sequence[float]) -> Embedding:
        return Embedding(vector=tuple(vector))
