from __future__ import annotations

import json
import re
from dataclasses import dataclass
from importlib import resources
from typing import Dict

# Snapshot of gitmoji.dev's src/data/gitmojis.json. Refresh by replacing the file.
CATALOGUE_FILE = "gitmojis.json"


@dataclass(frozen=True, slots=True)
class Gitmoji:
    code: str
    emoji: str
    description: str


def load_gitmojis(raw: str | None = None) -> tuple[Gitmoji, ...]:
    """Parse a catalogue in the gitmoji.dev ``{"gitmojis": [...]}`` layout.

    Reads the bundled snapshot when ``raw`` is not given.
    """
    if raw is None:
        raw = resources.files("relay").joinpath("data").joinpath(CATALOGUE_FILE).read_text(encoding="utf-8")
    entries = json.loads(raw)["gitmojis"]
    return tuple(Gitmoji(entry["code"], entry["emoji"], entry["description"]) for entry in entries)


GITMOJIS: tuple[Gitmoji, ...] = load_gitmojis()

GITMOJI_BY_CODE: Dict[str, Gitmoji] = {gitmoji.code: gitmoji for gitmoji in GITMOJIS}

SHORTCODE_PATTERN = re.compile(r":[a-z0-9_+\-]+:")


def resolve_gitmoji_code(code: str) -> str:
    """Return the emoji for a ``:shortcode:``, or ``code`` itself when unknown."""
    gitmoji = GITMOJI_BY_CODE.get(code)
    if gitmoji is None:
        return code
    return gitmoji.emoji


def resolve_gitmoji_to_emoji(message: str) -> str:
    """Replace every known gitmoji shortcode in ``message`` with its emoji."""
    return SHORTCODE_PATTERN.sub(lambda match: resolve_gitmoji_code(match.group(0)), message)
