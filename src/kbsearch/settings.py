from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from kbsearch.domain.errors import ConfigError

API_KEY_ENV = "GOOGLE_AI_API_KEY"
STRATEGIES = ("local", "remote")


@dataclass(frozen=True)
class StoreSettings:
    strategy: str
    path: Path


@dataclass(frozen=True)
class ChunkingSettings:
    max_chunk_size: int


@dataclass(frozen=True)
class EmbeddingSettings:
    model: str
    base_url: str
    timeout_seconds: float
    dimensions: int
    api_key: str = field(default="", repr=False)


@dataclass(frozen=True)
class SearchSettings:
    top_k: int
    min_similarity: float


@dataclass(frozen=True)
class KnowledgeSettings:
    files: tuple[Path, ...]


@dataclass(frozen=True)
class Settings:
    store: StoreSettings
    chunking: ChunkingSettings
    embeddings: EmbeddingSettings
    search: SearchSettings
    knowledge: KnowledgeSettings


def load_settings(path: str | Path = "settings.toml", *, env_file: str | Path | None = ".env") -> Settings:
    """
    Read settings.toml; the embedding API key comes from the environment
    (GOOGLE_AI_API_KEY), optionally seeded from a .env file.

    Relative paths in the file are resolved against the file's directory.
    """
    path = Path(path)

    if not path.exists():
        raise ConfigError(f"Missing config file: {path}")

    if env_file is not None:
        load_dotenv(env_file)

    with path.open("rb") as f:
        try:
            raw = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Invalid config file {path}: {e}") from e

    base_dir = path.resolve().parent

    def expand(p: str) -> Path:
        candidate = Path(os.path.expandvars(os.path.expanduser(p)))
        return candidate if candidate.is_absolute() else (base_dir / candidate).resolve()

    try:
        strategy = str(raw["store"]["strategy"])
        if strategy not in STRATEGIES:
            raise ConfigError(f"store.strategy must be one of {STRATEGIES}, got {strategy!r}")

        return Settings(
            store=StoreSettings(
                strategy=strategy,
                path=expand(raw["store"]["path"]),
            ),
            chunking=ChunkingSettings(
                max_chunk_size=int(raw["chunking"]["max_chunk_size"]),
            ),
            embeddings=EmbeddingSettings(
                model=raw["embeddings"]["model"],
                base_url=raw["embeddings"]["base_url"],
                timeout_seconds=float(raw["embeddings"]["timeout_seconds"]),
                dimensions=int(raw["embeddings"]["dimensions"]),
                api_key=os.getenv(API_KEY_ENV, ""),
            ),
            search=SearchSettings(
                top_k=int(raw["search"]["top_k"]),
                min_similarity=float(raw["search"]["min_similarity"]),
            ),
            knowledge=KnowledgeSettings(
                files=tuple(expand(p) for p in _as_list(raw["knowledge"]["files"])),
            ),
        )
    except KeyError as e:
        raise ConfigError(f"Missing config key: {e}") from e
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid config value: {e}") from e


def _as_list(value: Any) -> list[str]:
    if isinstance(value, str):
        return [value]
    return [str(v) for v in value]
