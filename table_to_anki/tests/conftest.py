"""Shared fixtures for table_to_anki tests."""

import shlex
import threading

import pytest
from unittest.mock import MagicMock

from table_to_anki.tables import TableToken


# ---------------------------------------------------------------------------
# Vault / filesystem fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def tmp_vault(tmp_path):
    """Create a minimal Obsidian vault with one vocabulary note."""
    vault = tmp_path / "vault"
    vault.mkdir()
    (vault / ".obsidian").mkdir()
    (vault / "Spanish").mkdir()

    md = vault / "Spanish" / "lesson 1.md"
    md.write_text(
        "---\ndeck: Spanish\n---\n\n"
        "# Lesson 1\n\n"
        "| Word | ID | Meaning |\n"
        "| --- | --- | --- |\n"
        "| hola | 1 | hello |\n"
        "|  | 2 | hi |\n"
        "| **adiós** | 3 | _goodbye_ |\n",
        encoding="utf-8",
    )

    return vault


# ---------------------------------------------------------------------------
# Markdown content fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def sample_table_md():
    return (
        "deck: Spanish\n\n"
        "| Word | ID | Meaning |\n"
        "| --- | --- | --- |\n"
        "| hola | 1 | hello |\n"
        "|  | 2 | goodbye |\n"
    )


@pytest.fixture
def sample_table():
    return TableToken(
        header=["Word", "ID", "Meaning"],
        rows=[
            ["hola", "1", "hello"],
            ["", "2", "goodbye"],
        ],
    )


# ---------------------------------------------------------------------------
# Mock AnkiConnect clients
# ---------------------------------------------------------------------------

@pytest.fixture
def mock_anki_client():
    """Return a MagicMock mimicking AnkiConnectClient."""
    client = MagicMock()
    client.ping.return_value = True
    client.version.return_value = 6
    client.deck_names.return_value = ["Default", "Spanish"]
    client.create_deck.return_value = 1
    client.find_notes.return_value = []
    client.add_note.return_value = 12345
    client.update_note.return_value = None
    return client


class FakeAnkiStore:
    """In-memory stand-in for AnkiConnect with deterministic note IDs."""

    def __init__(self, decks=None):
        self.decks = list(decks or ["Default"])
        self.notes: dict[int, dict] = {}
        self.calls: list[str] = []
        self._next_id = 1000
        self._lock = threading.Lock()

    def ping(self):
        return True

    def version(self):
        return 6

    def deck_names(self):
        self.calls.append("deckNames")
        return list(self.decks)

    def create_deck(self, name):
        self.calls.append("createDeck")
        if name not in self.decks:
            self.decks.append(name)
        return len(self.decks)

    def find_notes(self, query):
        self.calls.append("findNotes")
        field, _, value = shlex.split(query)[0].partition(":")
        value = value.replace("\\*", "*").replace("\\_", "_")
        return [
            nid for nid, note in sorted(self.notes.items())
            if note["fields"].get(field) == value
        ]

    def add_note(self, deck, model, fields, tags=None):
        self.calls.append("addNote")
        with self._lock:
            self._next_id += 1
            note_id = self._next_id
            self.notes[note_id] = {"deck": deck, "model": model, "fields": dict(fields)}
        return note_id

    def update_note(self, note_id, fields):
        self.calls.append("updateNoteFields")
        self.notes[note_id]["fields"] = dict(fields)


@pytest.fixture
def fake_store():
    return FakeAnkiStore()


@pytest.fixture
def make_store():
    """Factory for FakeAnkiStore with a custom deck list."""
    return FakeAnkiStore
