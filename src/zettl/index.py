"""Per-directory ``_index.md`` generation.

Every directory under the base gets an ``_index.md`` listing its notes and
links to its subdirectories' own indexes, most recently modified first::

    ---
    title: Notes Index
    author: Me
    created: '2026-10-18 09:30:00'
    ---

    # Notes Index

    - [[notes/apple/_index]]
    - [[notes/pen]]

Identifiers are always computed relative to the tree root the build started
from, so nested indexes link with full identifiers.
"""

from __future__ import annotations

import os
import stat
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from zettl.errors import FilesystemError, MissingMetadata
from zettl.parser import FrontMatter, render_frontmatter
from zettl.paths import (
    CONFIG_DIR,
    INDEX_FILE,
    INDEX_STEM,
    NOTE_SUFFIX,
    is_hidden,
    note_identifier,
    title_case,
)


# ---------------------------------------------------------------------------
# Index items
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ChildNote:
    """A note sitting directly in the indexed directory."""

    identifier: str
    path: Path


@dataclass(frozen=True)
class ChildIndex:
    """A subdirectory, listed through its own ``_index`` document."""

    identifier: str
    path: Path


IndexItem = ChildNote | ChildIndex


def index_items(root: Path, directory: Path) -> tuple[list[IndexItem], list[Path]]:
    """List the entries of *directory*, newest first.

    Returns ``(items, subdirectories)``; both follow the same recency order.
    Entries whose path relative to *root* starts with a dot are skipped, as is
    the config directory wherever it appears.
    """
    try:
        children = list(directory.iterdir())
    except OSError as exc:
        raise FilesystemError("list directory", directory, exc.strerror) from exc

    dated: list[tuple[int, IndexItem]] = []
    for path in children:
        if path.name == CONFIG_DIR or is_hidden(path.relative_to(root)):
            continue
        try:
            st = path.stat()
        except OSError as exc:
            raise FilesystemError("read metadata of", path, exc.strerror) from exc

        item: IndexItem
        if stat.S_ISDIR(st.st_mode):
            # directory names keep any ".md" suffix
            item = ChildIndex(f"{path.relative_to(root).as_posix()}/{INDEX_STEM}", path)
        elif stat.S_ISREG(st.st_mode) and path.suffix == NOTE_SUFFIX and path.stem != INDEX_STEM:
            item = ChildNote(note_identifier(path, root), path)
        else:
            continue
        dated.append((st.st_mtime_ns, item))

    # list.sort is stable: equal timestamps keep listing order
    dated.sort(key=lambda pair: pair[0], reverse=True)
    items = [item for _, item in dated]
    subdirs = [item.path for item in items if isinstance(item, ChildIndex)]
    return items, subdirs


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def index_title(directory: Path) -> str:
    name = directory.name
    if not name:
        raise MissingMetadata(f"Cannot derive an index title for {directory}: it has no base name")
    return f"{title_case(name)} Index"


def render_index(front_matter: FrontMatter, items: list[IndexItem]) -> str:
    """Compose the full text of an index document."""
    lines = [render_frontmatter(front_matter), f"\n# {front_matter.title}\n\n"]
    for item in items:
        if item.identifier.startswith("."):
            continue
        lines.append(f"- [[{item.identifier}]]\n")
    return "".join(lines)


# ---------------------------------------------------------------------------
# Build
# ---------------------------------------------------------------------------


def write_index_file(root: Path, directory: Path, author: str, now: datetime) -> list[Path]:
    """Write ``<directory>/_index.md`` and return the subdirectories to visit next."""
    items, subdirs = index_items(root, directory)
    front_matter = FrontMatter(title=index_title(directory), author=author, created=now)
    contents = render_index(front_matter, items)

    index_file = directory / INDEX_FILE
    try:
        dir_stat = directory.stat()
        with index_file.open("w", encoding="utf-8") as fh:
            fh.write(contents)
        # Creating _index.md must not move the directory up its parent's listing.
        os.utime(directory, ns=(dir_stat.st_atime_ns, dir_stat.st_mtime_ns))
    except OSError as exc:
        raise FilesystemError("write index", index_file, exc.strerror) from exc
    return subdirs


def build_indexes(base_directory: Path | str, author: str, now: datetime | None = None) -> list[Path]:
    """Regenerate ``_index.md`` in *base_directory* and every directory below it.

    Directories are processed parent first, then each subdirectory in the
    parent's listing order. Any filesystem error aborts the build; directories
    already written keep their new index. Returns the index files written.
    """
    root = Path(base_directory).resolve()
    created = now or datetime.now()

    written: list[Path] = []
    pending = [root]
    while pending:
        directory = pending.pop()
        subdirs = write_index_file(root, directory, author, created)
        written.append(directory / INDEX_FILE)
        pending.extend(reversed(subdirs))
    return written
