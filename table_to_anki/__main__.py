"""
CLI entry point.

Usage:
    python -m table_to_anki <file>
    python -m table_to_anki <file> --deck "Spanish"
    python -m table_to_anki <file> --dry-run
    python -m table_to_anki <file> --ankiconnect-url http://127.0.0.1:8765
    python -m table_to_anki --gui
"""

import argparse
import asyncio
import sys
from pathlib import Path

from . import __version__
from .config import get_ankiconnect_url, get_model_name
from .parser import parse_document
from .records import MalformedTableError


def _print_banner(target: str, url: str, model: str, dry_run: bool) -> None:
    """Print a startup banner with run configuration."""
    print()
    print("=" * 60)
    print(f"  Obsidian Table → Anki Sync v{__version__}")
    print("=" * 60)
    print(f"  Target:          {target}")
    print(f"  AnkiConnect URL: {url}")
    print(f"  Note type:       {model}")
    if dry_run:
        print(f"  Dry run:         YES (no changes will be made)")
    print("=" * 60)
    print()


def _print_summary(document) -> None:
    """Print a summary of what was read from the note."""
    print(f"  File:   {document.file_path.name}")
    print(f"  Vault:  {document.vault_root}")
    print(f"  Deck:   {document.deck_name or '(none)'}")
    print(f"  Link:   {document.link}")
    print()


def _print_sync_summary(result) -> None:
    """Print a summary of one table's sync."""
    print()
    print("--- Sync Summary ---")
    print(f"  Deck:          {result.deck}{' (created)' if result.deck_created else ''}")
    print(f"  New:           {result.created_count}")
    print(f"  Updated:       {result.updated_count}")
    if result.failed_count:
        print(f"  Failed:        {result.failed_count}")
    if result.errors:
        for err in result.errors:
            print(f"  [error] {err}")
    print()


def run_sync(
    file_path: str,
    url: str,
    model: str,
    deck: str | None = None,
    dry_run: bool = False,
    max_concurrency: int | None = None,
) -> None:
    """Sync the tables of one markdown file to Anki via AnkiConnect."""
    from .ankiconnect import AnkiConnectClient
    from .sync import sync_document

    _print_banner(file_path, url, model, dry_run)

    try:
        document = parse_document(file_path)
    except FileNotFoundError as e:
        print(f"[error] {e}")
        sys.exit(1)

    print("--- Parse summary ---")
    _print_summary(document)

    client = AnkiConnectClient(url)
    print("[sync] Connecting to AnkiConnect...")
    if not client.ping():
        print("[error] Cannot reach AnkiConnect. Is Anki running with AnkiConnect installed?")
        sys.exit(1)
    print(f"[sync] Connected (API version {client.version()})")
    print()

    try:
        results = asyncio.run(sync_document(
            document, client,
            deck=deck,
            model=model,
            dry_run=dry_run,
            max_concurrency=max_concurrency,
        ))
    except MalformedTableError as e:
        print(f"[error] Malformed table: {e}")
        sys.exit(1)

    for result in results:
        _print_sync_summary(result)

    total = sum(r.total for r in results)
    failed = sum(r.failed_count for r in results)
    print("=" * 60)
    print(f"  Sync {total} notes to Anki!" + (f" ({failed} failed)" if failed else ""))
    print("=" * 60)


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def main():
    if "--gui" in sys.argv:
        from .gui import main as gui_main
        gui_main()
        return

    parser = argparse.ArgumentParser(
        prog="table_to_anki",
        description="Sync the vocabulary tables of an Obsidian note to Anki via AnkiConnect",
    )
    parser.add_argument(
        "path",
        help="Path to a markdown file",
    )
    parser.add_argument(
        "--deck",
        help="Target deck (default: the note's 'deck:' line, then the configured default deck)",
        default=None,
    )
    parser.add_argument(
        "--ankiconnect-url",
        help="AnkiConnect endpoint URL (default: from config or http://127.0.0.1:8765)",
        default=None,
    )
    parser.add_argument(
        "--model",
        help="Anki note type for new notes (default: from config or 'Obsidian')",
        default=None,
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Look notes up but do not create decks or write notes",
    )
    parser.add_argument(
        "--max-concurrency",
        type=int,
        default=None,
        help="Maximum number of notes synced at the same time (default: no limit)",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    args = parser.parse_args()
    target = Path(args.path)

    if not target.is_file():
        print(f"[error] '{args.path}' is not a valid file.")
        sys.exit(1)

    url = get_ankiconnect_url(args.ankiconnect_url)
    model = get_model_name(args.model)
    run_sync(
        args.path, url, model,
        deck=args.deck,
        dry_run=args.dry_run,
        max_concurrency=args.max_concurrency,
    )


if __name__ == "__main__":
    main()
