"""
Obsidian Table to Anki
======================
Reads the vocabulary tables of an Obsidian markdown note, turns every row
into an Anki note (with a "Related" field listing the other words of the
table and a link back to the note), and syncs the notes to Anki through
AnkiConnect. Rows are matched on their ID column, so running the sync again
updates the existing notes instead of adding duplicates.
"""

__version__ = "1.0.0"
