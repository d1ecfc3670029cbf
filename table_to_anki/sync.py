"""
Sync engine for pushing table rows to Anki via AnkiConnect.

Makes sure the target deck exists, then looks up every record by its ID
field and either updates the matching note or adds a new one. Lookups and
writes for different records run concurrently on one event loop; the
blocking AnkiConnect client is driven through worker threads.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from . import config
from .ankiconnect import AnkiConnectClient, AnkiConnectError
from .parser import Document, parse_document
from .records import (
    ID_FIELD,
    WORD_FIELD,
    add_related,
    build_records,
    infer_column_roles,
    word_column,
)
from .tables import extract_tables

StepCallback = Callable[[str, str, str], None]


# ---------------------------------------------------------------------------
# Data structures
# ---------------------------------------------------------------------------

class RecordAction(Enum):
    CREATED = "created"
    UPDATED = "updated"
    FAILED = "failed"


@dataclass
class CallResult:
    """Outcome of one AnkiConnect call."""
    ok: bool
    value: Any = None
    error: str = ""


@dataclass
class RecordSyncDetail:
    action: RecordAction
    key: str                 # value of the ID field
    word: str
    anki_note_id: int | None
    error: str = ""


@dataclass
class SyncResult:
    deck: str
    dry_run: bool = False
    deck_created: bool = False
    created_count: int = 0
    updated_count: int = 0
    failed_count: int = 0
    details: list[RecordSyncDetail] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.created_count + self.updated_count + self.failed_count

    def record(self, detail: RecordSyncDetail) -> None:
        self.details.append(detail)
        if detail.action is RecordAction.CREATED:
            self.created_count += 1
        elif detail.action is RecordAction.UPDATED:
            self.updated_count += 1
        else:
            self.failed_count += 1
            self.errors.append(f"{detail.key or '(no ID)'}: {detail.error}")


# ---------------------------------------------------------------------------
# Remote calls
# ---------------------------------------------------------------------------

async def _call(fn: Callable[..., Any], *args, **kwargs) -> CallResult:
    """Run a blocking client method in a worker thread, capturing AnkiConnect failures."""
    try:
        value = await asyncio.to_thread(fn, *args, **kwargs)
    except AnkiConnectError as e:
        return CallResult(ok=False, error=str(e))
    return CallResult(ok=True, value=value)


def id_query(key: str) -> str:
    """
    Anki search query matching notes whose ID field equals *key*.

    Quotes, backslashes and the ``*`` / ``_`` wildcards are escaped so the
    value matches literally.
    """
    escaped = (
        key.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("*", "\\*")
        .replace("_", "\\_")
    )
    return f'"ID:{escaped}"'


async def ensure_deck(
    client: AnkiConnectClient,
    deck: str,
    result: SyncResult,
) -> None:
    """Create *deck* unless it is already in Anki's deck list. Failures are recorded, not raised."""
    names = await _call(client.deck_names)
    if not names.ok:
        print(f"[sync] WARNING: Could not list decks: {names.error}")
        result.errors.append(f"Deck lookup failed: {names.error}")
    elif deck in names.value:
        print(f"[sync] Deck exists: {deck}")
        return

    if result.dry_run:
        print(f"[sync] Would create deck: {deck}")
        return

    created = await _call(client.create_deck, deck)
    if created.ok:
        result.deck_created = True
        print(f"[sync] Created deck: {deck}")
    else:
        print(f"[sync] WARNING: Could not create deck '{deck}': {created.error}")
        result.errors.append(f"Create deck failed: {created.error}")


# ---------------------------------------------------------------------------
# Core sync
# ---------------------------------------------------------------------------

async def _sync_record(
    client: AnkiConnectClient,
    deck: str,
    model: str,
    fields: dict[str, str],
    result: SyncResult,
    word_field: str = WORD_FIELD,
) -> None:
    """Find the note for one record, then update it or add a new one."""
    key = fields.get(ID_FIELD, "")
    word = fields.get(word_field, "")

    if not key:
        result.record(RecordSyncDetail(
            action=RecordAction.FAILED,
            key="",
            word=word,
            anki_note_id=None,
            error="missing ID",
        ))
        print(f"[sync] FAILED (missing ID): {word}")
        return

    found = await _call(client.find_notes, id_query(key))
    if not found.ok:
        print(f"[sync] WARNING: Lookup failed for ID {key}: {found.error}")
    note_id = found.value[0] if found.ok and found.value else 0

    if note_id > 0:
        if not result.dry_run:
            updated = await _call(client.update_note, note_id, fields)
            if not updated.ok:
                result.record(RecordSyncDetail(
                    action=RecordAction.FAILED,
                    key=key,
                    word=word,
                    anki_note_id=note_id,
                    error=updated.error,
                ))
                print(f"[sync] FAILED update ({note_id}): {updated.error}")
                return
        result.record(RecordSyncDetail(
            action=RecordAction.UPDATED,
            key=key,
            word=word,
            anki_note_id=note_id,
        ))
        print(f"[sync] UPDATED ({note_id}): {word}")
        return

    if result.dry_run:
        result.record(RecordSyncDetail(
            action=RecordAction.CREATED,
            key=key,
            word=word,
            anki_note_id=None,
        ))
        print(f"[sync] NEW (dry-run): {word}")
        return

    added = await _call(client.add_note, deck, model, fields)
    if not added.ok:
        result.record(RecordSyncDetail(
            action=RecordAction.FAILED,
            key=key,
            word=word,
            anki_note_id=None,
            error=added.error,
        ))
        print(f"[sync] FAILED add: {added.error}")
        return

    result.record(RecordSyncDetail(
        action=RecordAction.CREATED,
        key=key,
        word=word,
        anki_note_id=added.value,
    ))
    print(f"[sync] NEW ({added.value}): {word}")


async def sync_records(
    client: AnkiConnectClient,
    deck: str,
    records: list[dict[str, str]],
    model: str = config.DEFAULT_MODEL_NAME,
    dry_run: bool = False,
    max_concurrency: int | None = None,
    on_step: StepCallback | None = None,
    word_field: str = WORD_FIELD,
) -> SyncResult:
    """
    Sync records to *deck*.

    Steps:
    1. Make sure the deck exists (created if missing, best effort)
    2. For every record, concurrently: find by ID, then update or add
    3. Wait for all records, then report the tally

    No AnkiConnect failure is raised from here; failures end up in
    ``SyncResult.failed_count`` / ``SyncResult.errors``.
    """
    result = SyncResult(deck=deck, dry_run=dry_run)

    if on_step:
        on_step("Deck", "running", deck)
    await ensure_deck(client, deck, result)
    if on_step:
        on_step("Deck", "done", "created" if result.deck_created else "ok")

    if on_step:
        on_step("Sync", "running", f"{len(records)} notes")

    semaphore = asyncio.Semaphore(max_concurrency) if max_concurrency else None

    async def _run(fields: dict[str, str]) -> None:
        if semaphore is None:
            await _sync_record(client, deck, model, fields, result, word_field)
            return
        async with semaphore:
            await _sync_record(client, deck, model, fields, result, word_field)

    await asyncio.gather(*(_run(fields) for fields in records))

    print(f"[sync] Sync {result.total} notes to Anki! "
          f"({result.created_count} new, {result.updated_count} updated, "
          f"{result.failed_count} failed)")
    if on_step:
        status = "error" if result.failed_count else "done"
        on_step("Sync", status,
                f"{result.created_count} new, {result.updated_count} updated, "
                f"{result.failed_count} failed")

    return result


async def sync_document(
    document: Document,
    client: AnkiConnectClient,
    deck: str | None = None,
    model: str = config.DEFAULT_MODEL_NAME,
    dry_run: bool = False,
    max_concurrency: int | None = None,
    on_step: StepCallback | None = None,
    word_field: str = WORD_FIELD,
) -> list[SyncResult]:
    """
    Sync every table of *document*, one SyncResult per table.

    The deck is *deck* if given, else the note's ``deck:`` line, else the
    configured default deck. The *word_field* column is the key column that
    is carried forward and collected into "Related". Raises
    MalformedTableError for a table whose rows cannot be turned into records.
    """
    target_deck = deck or document.deck_name
    if not target_deck:
        target_deck = config.get_default_deck()
        print(f"[sync] No deck given — using: {target_deck}")

    if on_step:
        on_step("Tables", "running", "")

    results: list[SyncResult] = []
    for table in extract_tables(document.text):
        roles = infer_column_roles(table.header, word_field)
        key_column = word_column(table.header, roles)
        records, wordlist = build_records(table, document.link, roles)
        add_related(records, wordlist, key_column)
        results.append(await sync_records(
            client, target_deck, records,
            model=model,
            dry_run=dry_run,
            max_concurrency=max_concurrency,
            on_step=on_step,
            word_field=key_column,
        ))

    if not results:
        print("[sync] No tables found — nothing to sync")
    if on_step:
        on_step("Tables", "done", f"{len(results)} table(s)")

    return results


def sync_file(file_path: str | Path, client: AnkiConnectClient, **kwargs) -> list[SyncResult]:
    """Read a markdown file and sync its tables. Blocking wrapper around sync_document."""
    document = parse_document(file_path)
    return asyncio.run(sync_document(document, client, **kwargs))
