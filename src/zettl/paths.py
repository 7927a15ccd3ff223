"""Layout constants and note-identifier helpers."""

from __future__ import annotations

import re
from pathlib import Path, PurePath

NOTE_SUFFIX = ".md"
INDEX_STEM = "_index"
INDEX_FILE = INDEX_STEM + NOTE_SUFFIX
CONFIG_DIR = ".zettl"
CONFIG_FILE = "config.yml"
GRAPH_FILE = ".graph.json"
NOTES_DIR = "notes"
FLEETS_DIR = "fleets"

_SEPARATOR_RE = re.compile(r"[\W_]+")
# lower/digit -> Upper ("myNotes"), and acronym -> Word ("XMLFile")
_CAMEL_RE = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


def note_identifier(path: Path, root: Path) -> str:
    """Return *path* relative to *root* with ``/`` separators and no ``.md``.

    Directories are accepted too and yield their plain relative path.
    """
    rel = PurePath(path).relative_to(root).as_posix()
    if rel.endswith(NOTE_SUFFIX):
        rel = rel[: -len(NOTE_SUFFIX)]
    return rel


def is_hidden(relpath: PurePath) -> bool:
    """True when the first segment of *relpath* starts with a dot."""
    parts = relpath.parts
    return bool(parts) and parts[0].startswith(".")


def title_case(text: str) -> str:
    """``apple-pen`` -> ``Apple Pen``; ``myNotes`` -> ``My Notes``."""
    words: list[str] = []
    for chunk in _SEPARATOR_RE.split(text):
        words.extend(_CAMEL_RE.sub(" ", chunk).split())
    return " ".join(w[:1].upper() + w[1:].lower() for w in words)
