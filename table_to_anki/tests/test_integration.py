"""Integration tests: real parser + tables + records + sync against an in-memory store."""

import asyncio

from table_to_anki.parser import parse_document
from table_to_anki.records import LOGO_HTML
from table_to_anki.sync import sync_document


def _create_vault(tmp_path, md_name, md_content):
    """Create a vault and return (vault, md_path)."""
    vault = tmp_path / "vault"
    vault.mkdir()
    (vault / ".obsidian").mkdir()

    md = vault / md_name
    md.write_text(md_content, encoding="utf-8")
    return vault, md


SPANISH_MD = (
    "deck: Spanish\n\n"
    "| Word | ID | Meaning |\n"
    "| --- | --- | --- |\n"
    "| hola | 1 | hello |\n"
    "|  | 2 | goodbye |\n"
)


class TestSpanishScenario:
    def test_records_and_deck(self, tmp_path, fake_store):
        _, md = _create_vault(tmp_path, "spanish.md", SPANISH_MD)

        results = asyncio.run(sync_document(parse_document(md), fake_store))

        assert len(results) == 1
        assert results[0].deck == "Spanish"
        assert results[0].deck_created is True
        assert fake_store.calls.count("createDeck") == 1

        notes = sorted(fake_store.notes.values(), key=lambda n: n["fields"]["ID"])
        assert [n["fields"]["Word"] for n in notes] == ["hola", "hola"]
        assert [n["fields"]["Meaning"] for n in notes] == ["hello", "goodbye"]
        assert all(n["deck"] == "Spanish" for n in notes)
        assert all(n["model"] == "Obsidian" for n in notes)
        assert all(n["fields"]["Related"] == "" for n in notes)
        assert all(n["fields"]["Logo"] == LOGO_HTML for n in notes)
        assert all(
            n["fields"]["Obsidian"] == "obsidian://open?vault=vault&file=spanish.md"
            for n in notes
        )

    def test_existing_deck_not_recreated(self, tmp_path, make_store):
        store = make_store(decks=["Default", "Spanish"])
        _, md = _create_vault(tmp_path, "spanish.md", SPANISH_MD)

        asyncio.run(sync_document(parse_document(md), store))

        assert "createDeck" not in store.calls

    def test_resync_after_edit_updates_fields(self, tmp_path, fake_store):
        _, md = _create_vault(tmp_path, "spanish.md", SPANISH_MD)
        asyncio.run(sync_document(parse_document(md), fake_store))

        md.write_text(SPANISH_MD.replace("| hello |", "| **hello** there |"), encoding="utf-8")
        results = asyncio.run(sync_document(parse_document(md), fake_store))

        assert results[0].updated_count == 2
        assert results[0].created_count == 0
        assert len(fake_store.notes) == 2
        meanings = sorted(n["fields"]["Meaning"] for n in fake_store.notes.values())
        assert meanings == ["<b>hello</b> there", "goodbye"]

    def test_new_row_added_on_resync(self, tmp_path, fake_store):
        _, md = _create_vault(tmp_path, "spanish.md", SPANISH_MD)
        asyncio.run(sync_document(parse_document(md), fake_store))

        md.write_text(SPANISH_MD + "| gracias | 3 | thanks |\n", encoding="utf-8")
        results = asyncio.run(sync_document(parse_document(md), fake_store))

        assert results[0].updated_count == 2
        assert results[0].created_count == 1
        related = {n["fields"]["ID"]: n["fields"]["Related"] for n in fake_store.notes.values()}
        assert related == {"1": "gracias", "2": "gracias", "3": "hola"}


class TestNoTables:
    def test_nothing_sent(self, tmp_path, fake_store):
        _, md = _create_vault(tmp_path, "empty.md", "deck: Spanish\n\n# Just notes\n")
        results = asyncio.run(sync_document(parse_document(md), fake_store))
        assert results == []
        assert fake_store.calls == []
