"""
Configuration management.

Handles loading/saving the config.json file and resolving the AnkiConnect
URL, note type and fallback deck.
"""

import json
from pathlib import Path

# Config lives next to the package
CONFIG_FILE = Path(__file__).resolve().parent.parent / "config.json"

DEFAULT_ANKICONNECT_URL = "http://127.0.0.1:8765"
DEFAULT_MODEL_NAME = "Obsidian"
DEFAULT_DECK = "Default"


def load() -> dict:
    """Load config from config.json. Returns empty dict if not found."""
    if CONFIG_FILE.exists():
        with open(CONFIG_FILE, "r", encoding="utf-8") as f:
            return json.load(f)
    return {}


def save(config: dict) -> None:
    """Save config to config.json."""
    with open(CONFIG_FILE, "w", encoding="utf-8") as f:
        json.dump(config, f, indent=2, ensure_ascii=False)


def _resolve(key: str, label: str, default: str, cli_override: str = None) -> str:
    """
    Resolve one setting.

    Priority:
    1. CLI argument (saved to config.json for future runs)
    2. Saved config
    3. Built-in default
    """
    config = load()

    if cli_override:
        config[key] = cli_override
        save(config)
        print(f"[config] {label} set via CLI: {cli_override}")
        return cli_override

    if key in config:
        value = config[key]
        print(f"[config] Loaded {label}: {value}")
        return value

    print(f"[config] Using default {label}: {default}")
    return default


def get_ankiconnect_url(cli_override: str = None) -> str:
    """Get the AnkiConnect endpoint URL (default: http://127.0.0.1:8765)."""
    return _resolve("ankiconnect_url", "AnkiConnect URL", DEFAULT_ANKICONNECT_URL, cli_override)


def get_model_name(cli_override: str = None) -> str:
    """Get the Anki note type used for new notes (default: Obsidian)."""
    return _resolve("model_name", "note type", DEFAULT_MODEL_NAME, cli_override)


def get_default_deck() -> str:
    """Deck used when a note has no ``deck:`` line and none is given on the CLI."""
    return load().get("default_deck", DEFAULT_DECK)
