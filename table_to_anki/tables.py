"""
Markdown table extraction.

Tokenises a markdown document with markdown-it-py (CommonMark + GFM pipe
tables) and keeps only the tables. Each table comes out as a header row and
data rows of raw cell text; inline markup inside cells is left as written.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field

from markdown_it import MarkdownIt


@dataclass
class TableToken:
    """A markdown table: header names and rows of raw cell text."""
    header: list[str]
    rows: list[list[str]] = field(default_factory=list)


def _make_parser() -> MarkdownIt:
    return MarkdownIt("commonmark").enable("table")


def extract_tables(md_content: str) -> Iterator[TableToken]:
    """
    Yield every table in *md_content*, in document order.

    Everything that is not a table is ignored. A document without tables
    yields nothing.
    """
    tokens = _make_parser().parse(md_content)

    table: TableToken | None = None
    in_header = False
    current_row: list[str] | None = None

    for token in tokens:
        if token.type == "table_open":
            table = TableToken(header=[])
        elif table is None:
            continue
        elif token.type == "thead_open":
            in_header = True
        elif token.type == "thead_close":
            in_header = False
        elif token.type == "tr_open" and not in_header:
            current_row = []
        elif token.type == "tr_close" and current_row is not None:
            table.rows.append(current_row)
            current_row = None
        elif token.type == "inline":
            if in_header:
                table.header.append(token.content)
            elif current_row is not None:
                current_row.append(token.content)
        elif token.type == "table_close":
            print(f"[tables] Table found: {len(table.header)} column(s), {len(table.rows)} row(s)")
            yield table
            table = None
