from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from rich.console import Console
from rich.logging import RichHandler
from rich.prompt import Prompt
from rich.table import Table

from kbsearch.adapters.ingestion.knowledge import load_knowledge
from kbsearch.adapters.ingestion.text_knowledge import convert_text_to_knowledge, write_knowledge_file
from kbsearch.app.container import build_container
from kbsearch.app.pipeline import build_knowledge_store, index_segments, search
from kbsearch.domain.errors import KbSearchError
from kbsearch.domain.models import SearchResult
from kbsearch.domain.schema import META_CHUNK_INDEX, META_SECTION, META_TOTAL_CHUNKS
from kbsearch.settings import STRATEGIES, Settings, load_settings

logger = logging.getLogger("kbsearch")
console = Console()

QUIT_WORDS = ("quit", "exit")


def build_argparser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="kbsearch", description="Search the chatbot knowledge base.")
    ap.add_argument("--config", default="settings.toml", help="Settings file (default: settings.toml)")
    ap.add_argument("--strategy", choices=STRATEGIES, default=None, help="Override store.strategy")
    ap.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    sub = ap.add_subparsers(dest="command", required=True)

    p = sub.add_parser("convert", help="Turn extracted website text into a knowledge JSON file")
    p.add_argument("text_file", type=Path)
    p.add_argument("out_file", type=Path)

    p = sub.add_parser("index", help="Build the store from knowledge files and save it")
    p.add_argument("--knowledge", type=Path, nargs="+", default=None, help="Knowledge files (first loadable wins)")
    p.add_argument("--out", type=Path, default=None, help="Store file (default: store.path)")

    p = sub.add_parser("search", help="Rank stored documents against a query")
    p.add_argument("query", nargs="+")
    p.add_argument("-k", "--top-k", type=int, default=None)
    p.add_argument("--rebuild", action="store_true", help="Ignore the saved store and re-ingest")

    p = sub.add_parser("interactive", help="Prompt for queries until 'quit'")
    p.add_argument("-k", "--top-k", type=int, default=None)
    p.add_argument("--rebuild", action="store_true", help="Ignore the saved store and re-ingest")

    sub.add_parser("stats", help="Show store statistics")
    return ap


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


def _chunk_label(result: SearchResult) -> str:
    meta = result.metadata
    if META_CHUNK_INDEX in meta and META_TOTAL_CHUNKS in meta:
        return f"{meta[META_CHUNK_INDEX] + 1}/{meta[META_TOTAL_CHUNKS]}"
    return "-"


def _print_results(query: str, results: Sequence[SearchResult]) -> None:
    if not results:
        console.print(f'[yellow]No results for "{query}"[/yellow]')
        return

    table = Table(title=f'Results for "{query}"')
    table.add_column("#", justify="right")
    table.add_column("Similarity", justify="right")
    table.add_column("Section")
    table.add_column("Chunk")
    table.add_column("Text")
    for rank, r in enumerate(results, start=1):
        preview = r.text if len(r.text) <= 120 else r.text[:117] + "..."
        table.add_row(
            str(rank),
            f"{r.similarity * 100:.2f}%",
            str(r.metadata.get(META_SECTION, "")),
            _chunk_label(r),
            preview,
        )
    console.print(table)


def _top_k(args: argparse.Namespace, settings: Settings) -> int:
    return settings.search.top_k if args.top_k is None else args.top_k


def _cmd_convert(args: argparse.Namespace) -> int:
    text = args.text_file.read_text(encoding="utf-8")
    segments = convert_text_to_knowledge(text)
    write_knowledge_file(segments, args.out_file)
    logger.info(f"Wrote {len(segments)} knowledge segments to {args.out_file}")
    return 0


def _cmd_index(args: argparse.Namespace) -> int:
    settings = load_settings(args.config)
    c = build_container(settings, strategy=args.strategy)
    segments = load_knowledge(args.knowledge or settings.knowledge.files)
    added = index_segments(c.store, segments)
    out = c.store.save(args.out or settings.store.path)
    console.print(f"[bold]Indexed[/bold] {len(segments)} segments as {added} records -> {out}")
    return 0


def _cmd_search(args: argparse.Namespace) -> int:
    settings = load_settings(args.config)
    c = build_container(settings, strategy=args.strategy)
    store = build_knowledge_store(c, rebuild=args.rebuild)
    query = " ".join(args.query)
    results = search(store, query, top_k=_top_k(args, settings))
    _print_results(query, results)
    return 0


def _cmd_interactive(args: argparse.Namespace) -> int:
    settings = load_settings(args.config)
    c = build_container(settings, strategy=args.strategy)
    store = build_knowledge_store(c, rebuild=args.rebuild)
    top_k = _top_k(args, settings)
    console.print(f"[bold]{store.count()}[/bold] records loaded. Type 'quit' to exit.")

    while True:
        try:
            query = Prompt.ask("[bold cyan]Query[/bold cyan]", console=console).strip()
        except (EOFError, KeyboardInterrupt):
            break
        if query.lower() in QUIT_WORDS:
            break
        if not query:
            continue
        try:
            results = search(store, query, top_k=top_k)
        except KbSearchError as e:
            logger.error(str(e))
            continue
        _print_results(query, results)
    return 0


def _cmd_stats(args: argparse.Namespace) -> int:
    settings = load_settings(args.config)
    c = build_container(settings, strategy=args.strategy)
    store = build_knowledge_store(c)
    table = Table(title="Store statistics")
    table.add_column("Field")
    table.add_column("Value", justify="right")
    for key, value in store.stats().as_dict().items():
        table.add_row(key, f"{value:.1f}" if isinstance(value, float) else str(value))
    console.print(table)
    return 0


COMMANDS = {
    "convert": _cmd_convert,
    "index": _cmd_index,
    "search": _cmd_search,
    "interactive": _cmd_interactive,
    "stats": _cmd_stats,
}


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_argparser().parse_args(argv)
    _setup_logging(args.verbose)
    try:
        return COMMANDS[args.command](args)
    except (KbSearchError, OSError) as e:
        logger.error(str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
