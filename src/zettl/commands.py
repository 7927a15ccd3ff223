"""High-level operations behind the ``zettl`` command line.

Notes live under ``notes/`` (possibly nested, e.g. ``notes/apple/pen.md``),
dated fleeting notes under ``fleets/``. Creating or opening either triggers a
rebuild of the indexes and the link graph when the config asks for it.
"""

from __future__ import annotations

import subprocess
from datetime import datetime
from pathlib import Path

from zettl.config import Config
from zettl.errors import EditorError, FilesystemError, MissingMetadata, ZettlError
from zettl.graph import build_graph
from zettl.index import build_indexes
from zettl.parser import FrontMatter, render_frontmatter
from zettl.paths import (
    CONFIG_DIR,
    CONFIG_FILE,
    FLEETS_DIR,
    INDEX_FILE,
    NOTE_SUFFIX,
    NOTES_DIR,
    title_case,
)


def write_skeleton(path: Path, front_matter: FrontMatter) -> None:
    """Create a new note: front matter followed by a level-1 heading."""
    contents = render_frontmatter(front_matter) + f"\n# {front_matter.title}\n"
    try:
        path.write_text(contents, encoding="utf-8")
    except OSError as exc:
        raise FilesystemError("write note", path, exc.strerror) from exc


def open_in_editor(cfg: Config, basedir: Path, path: Path) -> int:
    """Run the configured editor on *path* from *basedir*; return its exit code."""
    argv = [cfg.editor_cmd, *cfg.editor_args, str(path)]
    try:
        completed = subprocess.run(argv, cwd=basedir, check=False)
    except OSError as exc:
        raise EditorError(f"Could not open {path} with {cfg.editor_cmd!r}: {exc}") from exc
    return completed.returncode


def rebuild(basedir: Path, cfg: Config) -> None:
    """Regenerate indexes and the link graph, as enabled in *cfg*."""
    if cfg.indexes:
        build_indexes(basedir, cfg.author)
    if cfg.graph:
        build_graph(basedir)


def init(basedir: Path) -> Config:
    """Scaffold a new zettelkasten in *basedir* with the default config."""
    cfg_dir = basedir / CONFIG_DIR
    for directory in (cfg_dir, basedir / FLEETS_DIR, basedir / NOTES_DIR):
        try:
            directory.mkdir()
        except FileExistsError as exc:
            raise ZettlError(f"{basedir} is already initialized ({directory} exists)") from exc
        except OSError as exc:
            raise FilesystemError("create directory", directory, exc.strerror) from exc

    cfg = Config()
    cfg.save(cfg_dir / CONFIG_FILE)
    rebuild(basedir, cfg)
    return cfg


def note(basedir: Path, cfg: Config, name: str, now: datetime | None = None) -> Path:
    """Open ``notes/<name>.md``, creating it (and its directories) first if needed.

    *name* may contain slashes, e.g. ``apple/pen``.
    """
    notes_dir = (basedir / NOTES_DIR).resolve()
    note_file = (notes_dir / f"{name}{NOTE_SUFFIX}").resolve()
    if not note_file.is_relative_to(notes_dir):
        raise ZettlError(f"Note name {name!r} points outside {notes_dir}")

    if not note_file.exists():
        title = title_case(note_file.stem)
        if not title:
            raise MissingMetadata(f"Invalid note name {name!r}")
        try:
            note_file.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise FilesystemError("create directory", note_file.parent, exc.strerror) from exc
        write_skeleton(note_file, FrontMatter(title=title, author=cfg.author, created=now or datetime.now()))

    open_in_editor(cfg, basedir, note_file)
    rebuild(basedir, cfg)
    return note_file


def fleet(basedir: Path, cfg: Config, name: str | None = None, now: datetime | None = None) -> Path:
    """Open a fleeting note.

    With *name*, the note ``fleets/<name>.md`` must already exist. Without,
    today's note (``fleets/YYYY-MM-DD.md``) is opened, created if missing.
    """
    fleets_dir = basedir / FLEETS_DIR
    if name is not None:
        fleet_file = (fleets_dir / f"{name}{NOTE_SUFFIX}").resolve()
        if not fleet_file.is_relative_to(fleets_dir.resolve()):
            raise ZettlError(f"Fleeting note name {name!r} points outside {fleets_dir}")
        if not fleet_file.exists():
            raise ZettlError(f"Fleeting note {name!r} doesn't exist")
    else:
        now = now or datetime.now()
        fleet_file = fleets_dir / f"{now:%Y-%m-%d}{NOTE_SUFFIX}"
        if not fleet_file.exists():
            try:
                fleets_dir.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                raise FilesystemError("create directory", fleets_dir, exc.strerror) from exc
            write_skeleton(fleet_file, FrontMatter(title=f"{now:%A, %d %B %Y}", author=cfg.author, created=now))

    open_in_editor(cfg, basedir, fleet_file)
    rebuild(basedir, cfg)
    return fleet_file


def list_notes(basedir: Path, fleet: bool = False) -> list[str]:
    """Names of all notes (or fleeting notes), relative to their folder."""
    folder = basedir / (FLEETS_DIR if fleet else NOTES_DIR)
    names: list[str] = []
    for path in sorted(folder.glob(f"**/*{NOTE_SUFFIX}")):
        rel = path.relative_to(folder)
        if path.name == INDEX_FILE or any(part.startswith(".") for part in rel.parts):
            continue
        names.append(rel.as_posix()[: -len(NOTE_SUFFIX)])
    return names
