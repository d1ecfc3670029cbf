"""
Row records.

Turns a parsed table into one field mapping per row (the fields of the Anki
note), and fills in the fields derived from the whole table: "Related" (the
other words of the table) and "Logo".
"""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum

from .styles import to_plain_key, to_rich_text
from .tables import TableToken

WORD_FIELD = "Word"
ID_FIELD = "ID"
LINK_FIELD = "Obsidian"
RELATED_FIELD = "Related"
LOGO_FIELD = "Logo"

LOGO_HTML = "<img class='obsidian' src='obsidian-logo.png'>"


class MalformedTableError(ValueError):
    """Raised when a table cannot be turned into records."""


class ColumnRole(Enum):
    WORD = "word"         # plain key, carried forward when empty
    DISPLAY = "display"   # rendered as rich text


def infer_column_roles(header: Sequence[str], word_field: str = WORD_FIELD) -> list[ColumnRole]:
    """The *word_field* column is the key column; every other column is display text."""
    return [ColumnRole.WORD if name == word_field else ColumnRole.DISPLAY for name in header]


def word_column(header: Sequence[str], roles: Sequence[ColumnRole]) -> str:
    """Name of the first WORD column, or "Word" when the table has none."""
    for name, role in zip(header, roles):
        if role is ColumnRole.WORD:
            return name
    return WORD_FIELD


def build_records(
    table: TableToken,
    source_link: str,
    roles: Sequence[ColumnRole] | None = None,
) -> tuple[list[dict[str, str]], list[str]]:
    """
    Build one record per table row.

    Returns ``(records, wordlist)``. An empty WORD cell takes the previous
    row's word, so one word can span several rows; only non-empty WORD cells
    add to the wordlist. Every record gets the document link under
    "Obsidian".

    Raises MalformedTableError when a row and the header have different
    lengths, or when the first row has no word to carry forward.
    """
    header = table.header
    if roles is None:
        roles = infer_column_roles(header)
    elif len(roles) != len(header):
        raise MalformedTableError(
            f"Got {len(roles)} column role(s) for a {len(header)}-column table"
        )

    records: list[dict[str, str]] = []
    wordlist: list[str] = []

    for row_num, row in enumerate(table.rows, 1):
        if len(row) != len(header):
            raise MalformedTableError(
                f"Row {row_num} has {len(row)} cell(s), header has {len(header)}"
            )

        record: dict[str, str] = {}
        for name, role, cell in zip(header, roles, row):
            if role is ColumnRole.WORD:
                text = cell
                if text == "":
                    if not records:
                        raise MalformedTableError(
                            f"Row {row_num} has an empty '{name}' cell and no previous row to take it from"
                        )
                    text = records[-1][name]
                else:
                    wordlist.append(to_plain_key(text))
                record[name] = to_plain_key(text)
            else:
                record[name] = to_rich_text(cell)

        record[LINK_FIELD] = source_link
        records.append(record)

    print(f"[records] Built {len(records)} record(s), {len(wordlist)} word(s)")
    return records, wordlist


def add_related(
    records: list[dict[str, str]],
    wordlist: list[str],
    word_field: str = WORD_FIELD,
) -> None:
    """
    Set "Related" and "Logo" on every record, in place.

    "Related" lists every wordlist entry that differs from the record's own
    word, in wordlist order. Repeated entries stay repeated.
    """
    for record in records:
        word = record.get(word_field)
        record[RELATED_FIELD] = ", ".join(item for item in wordlist if item != word)
        record[LOGO_FIELD] = LOGO_HTML
