"""
AnkiConnect HTTP client.

Minimal client using only urllib.request (no extra dependencies).
Communicates with Anki via the AnkiConnect add-on's JSON-RPC API.
"""

from __future__ import annotations

import http.client
import json
import urllib.error
import urllib.request

DEFAULT_URL = "http://127.0.0.1:8765"
API_VERSION = 6


class AnkiConnectError(Exception):
    """Raised when AnkiConnect returns an error or is unreachable."""


class AnkiConnectClient:
    """HTTP client for the AnkiConnect add-on API."""

    def __init__(self, url: str = DEFAULT_URL, timeout: int = 10):
        self.url = url
        self.timeout = timeout

    def _invoke(self, action: str, **params) -> any:
        """Send a JSON-RPC request to AnkiConnect and return the result."""
        payload = {"action": action, "version": API_VERSION}
        if params:
            payload["params"] = params

        data = json.dumps(payload).encode("utf-8")
        req = urllib.request.Request(
            self.url,
            data=data,
            headers={"Content-Type": "application/json"},
        )

        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as resp:
                body = json.loads(resp.read().decode("utf-8"))
        except urllib.error.HTTPError as e:
            raise AnkiConnectError(f"AnkiConnect returned HTTP {e.code} for {action}") from e
        except (urllib.error.URLError, ConnectionError, OSError) as e:
            raise AnkiConnectError(
                f"Cannot reach AnkiConnect at {self.url} — "
                f"is Anki running with AnkiConnect installed? ({e})"
            ) from e
        except (http.client.HTTPException, ValueError) as e:
            raise AnkiConnectError(f"AnkiConnect sent an invalid response for {action}: {e!r}") from e

        if not isinstance(body, dict):
            raise AnkiConnectError(f"AnkiConnect sent an invalid response for {action}: {body!r}")

        if body.get("error"):
            raise AnkiConnectError(f"AnkiConnect error: {body['error']}")

        return body.get("result")

    # -- Connection checks --------------------------------------------------

    def ping(self) -> bool:
        """Check connectivity. Returns True if AnkiConnect responds."""
        try:
            self._invoke("version")
            return True
        except AnkiConnectError:
            return False

    def version(self) -> int:
        """Return the AnkiConnect API version."""
        return self._invoke("version")

    # -- Decks --------------------------------------------------------------

    def deck_names(self) -> list[str]:
        """Return all deck names."""
        return self._invoke("deckNames") or []

    def create_deck(self, name: str) -> int:
        """Create a deck (no-op in Anki if it already exists). Returns the deck ID."""
        return self._invoke("createDeck", deck=name)

    # -- Note CRUD ----------------------------------------------------------

    def add_note(
        self,
        deck: str,
        model: str,
        fields: dict[str, str],
        tags: list[str] | None = None,
    ) -> int:
        """
        Add a note to Anki. Returns the new note ID.

        Raises AnkiConnectError if the note is a duplicate or invalid.
        """
        note = {
            "deckName": deck,
            "modelName": model,
            "fields": fields,
            "tags": tags or [],
            "options": {
                "allowDuplicate": True,
            },
        }
        result = self._invoke("addNote", note=note)
        if result is None:
            raise AnkiConnectError("addNote returned null — note may be invalid")
        return result

    def update_note(self, note_id: int, fields: dict[str, str]) -> None:
        """Replace the fields of an existing note."""
        self._invoke("updateNoteFields", note={"id": note_id, "fields": fields})

    def find_notes(self, query: str) -> list[int]:
        """Find note IDs matching an Anki search query."""
        return self._invoke("findNotes", query=query) or []
