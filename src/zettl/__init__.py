"""zettl: plain-text notes with per-directory indexes and a link graph."""

from zettl.config import Config
from zettl.errors import (
    EditorError,
    FilesystemError,
    MissingMetadata,
    SerializationError,
    ZettlError,
)
from zettl.graph import BrokenLink, Link, LinkGraph, build_graph, load_graph
from zettl.index import ChildIndex, ChildNote, build_indexes
from zettl.parser import FrontMatter, parse_frontmatter, parse_wikilinks

__all__ = [
    "Config",
    "FrontMatter",
    "parse_frontmatter",
    "parse_wikilinks",
    "ChildNote",
    "ChildIndex",
    "build_indexes",
    "Link",
    "BrokenLink",
    "LinkGraph",
    "build_graph",
    "load_graph",
    "ZettlError",
    "FilesystemError",
    "MissingMetadata",
    "SerializationError",
    "EditorError",
]
