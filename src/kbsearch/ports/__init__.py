from .chunker import Chunker
from .embedder import Embedder
from .vector_store import DocumentStore

__all__ = [
    "Chunker",
    "DocumentStore",
    "Embedder",
]
