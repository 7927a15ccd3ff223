"""WikiLink scanner and YAML front-matter reader/writer."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any

import yaml

from zettl.errors import SerializationError

#: Format of the ``created`` front-matter field (local time).
CREATED_FORMAT = "%Y-%m-%d %H:%M:%S"
SEPARATOR = "---\n"

# [[target]] -- one or more characters, no square brackets inside
_WIKILINK_RE = re.compile(r"\[\[([^\[\]]+)\]\]")
# YAML front-matter block
_FRONTMATTER_RE = re.compile(r"^---[ \t]*\n(.*?)\n---[ \t]*\n", re.DOTALL)


@dataclass(frozen=True)
class FrontMatter:
    """Metadata header written at the top of every generated document."""

    title: str
    author: str
    created: datetime

    def to_dict(self) -> dict[str, str]:
        return {
            "title": self.title,
            "author": self.author,
            "created": self.created.strftime(CREATED_FORMAT),
        }


def render_frontmatter(front_matter: FrontMatter) -> str:
    """Serialize *front_matter* as a ``---``-delimited YAML block."""
    try:
        block = yaml.safe_dump(
            front_matter.to_dict(),
            explicit_start=True,
            sort_keys=False,
            allow_unicode=True,
        )
    except yaml.YAMLError as exc:
        raise SerializationError(f"Could not encode front matter for {front_matter.title!r}: {exc}") from exc
    return block + SEPARATOR


def parse_frontmatter(content: str) -> tuple[dict[str, Any], str]:
    """Split YAML front-matter from body text.

    Returns ``(metadata_dict, body)``; ``metadata_dict`` is empty when there
    is no front-matter block or when it does not hold valid YAML.
    """
    match = _FRONTMATTER_RE.match(content)
    if not match:
        return {}, content
    try:
        meta = yaml.safe_load(match.group(1)) or {}
    except yaml.YAMLError:
        meta = {}
    if not isinstance(meta, dict):
        meta = {}
    return meta, content[match.end() :]


def parse_wikilinks(text: str) -> list[str]:
    """Return every ``[[WikiLink]]`` capture in *text*, in order.

    Repeated references are kept: each occurrence counts.
    """
    return [m.group(1) for m in _WIKILINK_RE.finditer(text)]
