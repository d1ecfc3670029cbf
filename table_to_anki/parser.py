"""
Document reading.

Reads an Obsidian markdown note, finds the vault it belongs to, builds the
obsidian:// link back to it, and extracts the target deck from its
``deck: <name>`` line.
"""

import re
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import quote

DECK_RE = re.compile(r'deck:\s(.*?)$', re.MULTILINE)

# Left unescaped in URI components, on top of the alphanumerics and "_.-~"
_URI_COMPONENT_SAFE = "!*'()"


@dataclass(frozen=True)
class Document:
    """A markdown note read from disk, with its link and target deck."""
    file_path: Path
    vault_root: Path
    text: str
    link: str
    deck_name: str


def find_vault_root(file_path: Path) -> Path:
    """
    Walk up from the file to find the vault root.
    The vault root is the folder containing .obsidian/.
    Falls back to the file's parent directory if not found.
    """
    current = file_path.resolve().parent
    while current != current.parent:
        if (current / ".obsidian").exists():
            print(f"[parser] Vault root found: {current}")
            return current
        current = current.parent

    fallback = file_path.resolve().parent
    print(f"[parser] No .obsidian folder found — using fallback: {fallback}")
    return fallback


def build_obsidian_link(file_path: Path, vault_root: Path) -> str:
    """Return the obsidian://open URI that opens *file_path* in its vault."""
    vault_name = vault_root.name
    rel_path = file_path.resolve().relative_to(vault_root.resolve()).as_posix()
    return (
        f"obsidian://open?vault={quote(vault_name, safe=_URI_COMPONENT_SAFE)}"
        f"&file={quote(rel_path, safe=_URI_COMPONENT_SAFE)}"
    )


def extract_deck_name(md_content: str) -> str:
    """
    Return the value of the first ``deck: <name>`` line, or "" if there is none.

    The line may sit in the frontmatter or anywhere in the body.
    """
    match = DECK_RE.search(md_content)
    if not match:
        print("[parser] Deck field not found")
        return ""
    deck = match.group(1).strip()
    print(f"[parser] Target deck: {deck}")
    return deck


def parse_document(file_path: str | Path) -> Document:
    """
    Read a markdown note and return it as a Document.

    Raises FileNotFoundError if the file does not exist.
    """
    file_path = Path(file_path).resolve()

    if not file_path.exists():
        raise FileNotFoundError(f"File not found: {file_path}")

    print(f"[parser] Reading file: {file_path.name}")

    vault_root = find_vault_root(file_path)

    with open(file_path, "r", encoding="utf-8") as f:
        content = f.read()

    print(f"[parser] File loaded ({len(content)} chars)")

    return Document(
        file_path=file_path,
        vault_root=vault_root,
        text=content,
        link=build_obsidian_link(file_path, vault_root),
        deck_name=extract_deck_name(content),
    )
