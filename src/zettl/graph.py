"""Link graph: which notes reference which.

The builder walks the whole tree (hidden directories included), takes every
``.md`` file as a node and every ``[[identifier]]`` occurrence that names an
existing node as a directed link. Repeated references are kept as separate
links. References to unknown identifiers are reported on stderr and left out.

The result is written to ``<base>/.graph.json``::

    {"nodes": [{"id": "notes/a"}, {"id": "notes/b"}],
     "links": [{"source": "notes/a", "target": "notes/b"}]}
"""

from __future__ import annotations

import json
import os
import sys
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

from zettl.errors import FilesystemError, SerializationError
from zettl.parser import parse_wikilinks
from zettl.paths import GRAPH_FILE, NOTE_SUFFIX, note_identifier

if TYPE_CHECKING:
    import networkx as nx


# ---------------------------------------------------------------------------
# Data model
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Link:
    source: str
    target: str


@dataclass(frozen=True)
class BrokenLink:
    source: str  # identifier of the note containing the reference
    target: str  # literal text between the brackets


@dataclass
class LinkGraph:
    """Nodes and links in encounter order."""

    nodes: list[str] = field(default_factory=list)
    links: list[Link] = field(default_factory=list)
    broken: list[BrokenLink] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "nodes": [{"id": node} for node in self.nodes],
            "links": [{"source": link.source, "target": link.target} for link in self.links],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LinkGraph":
        try:
            nodes = [str(node["id"]) for node in data["nodes"]]
            links = [Link(str(link["source"]), str(link["target"])) for link in data["links"]]
        except (KeyError, TypeError) as exc:
            raise SerializationError(f"Malformed graph document: {exc!r}") from exc
        return cls(nodes=nodes, links=links)

    def to_networkx(self) -> "nx.MultiDiGraph":
        """Return a ``MultiDiGraph`` with one edge per link occurrence."""
        import networkx as nx

        G: nx.MultiDiGraph = nx.MultiDiGraph()
        G.add_nodes_from(self.nodes)
        G.add_edges_from((link.source, link.target) for link in self.links)
        return G

    # ------------------------------------------------------------------
    # Query helpers
    # ------------------------------------------------------------------

    def backlinks(self, identifier: str) -> list[str]:
        """Notes linking to *identifier*, de-duplicated, in first-seen order."""
        seen: dict[str, None] = {}
        for link in self.links:
            if link.target == identifier:
                seen.setdefault(link.source, None)
        return list(seen)

    def orphans(self) -> list[str]:
        """Notes with neither incoming nor outgoing links."""
        G = self.to_networkx()
        return [node for node in self.nodes if G.degree(node) == 0]


# ---------------------------------------------------------------------------
# Build
# ---------------------------------------------------------------------------


def collect_notes(base_directory: Path) -> list[Path]:
    """Every ``.md`` file under *base_directory*, hidden paths and indexes included."""
    try:
        return sorted(p for p in base_directory.glob(f"**/*{NOTE_SUFFIX}") if p.is_file())
    except OSError as exc:
        raise FilesystemError("walk", base_directory, exc.strerror) from exc


def _read_note(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise FilesystemError("read note", path, exc.strerror) from exc
    except UnicodeDecodeError as exc:
        raise FilesystemError("decode note", path, exc.reason) from exc


def scan_links(base_directory: Path | str) -> LinkGraph:
    """Build the :class:`LinkGraph` for *base_directory* without writing it.

    All identifiers are collected before any note is scanned, so a reference
    resolves no matter where its target sits in the walk. An unreadable note
    aborts the scan.
    """
    root = Path(base_directory)
    files = collect_notes(root)
    identifiers = [note_identifier(path, root) for path in files]
    universe = set(identifiers)

    graph = LinkGraph(nodes=list(identifiers))
    for path, source in zip(files, identifiers):
        for target in parse_wikilinks(_read_note(path)):
            if target in universe:
                graph.links.append(Link(source, target))
            else:
                graph.broken.append(BrokenLink(source, target))
                print(f"[warn] Broken link [[{target}]] found in {source}", file=sys.stderr)
    return graph


def write_graph(graph: LinkGraph, base_directory: Path | str) -> Path:
    """Replace ``<base>/.graph.json`` with *graph* in a single rename."""
    root = Path(base_directory)
    target = root / GRAPH_FILE
    try:
        payload = json.dumps(graph.to_dict(), ensure_ascii=False)
    except (TypeError, ValueError) as exc:
        raise SerializationError(f"Could not encode link graph: {exc}") from exc

    try:
        fd, tmp_name = tempfile.mkstemp(prefix=GRAPH_FILE, suffix=".tmp", dir=root)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(payload)
            os.replace(tmp_name, target)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
    except OSError as exc:
        raise FilesystemError("write graph", target, exc.strerror) from exc
    return target


def build_graph(base_directory: Path | str) -> LinkGraph:
    """Scan *base_directory* and overwrite its graph document."""
    graph = scan_links(base_directory)
    write_graph(graph, base_directory)
    return graph


def load_graph(base_directory: Path | str) -> LinkGraph:
    """Read ``<base>/.graph.json`` back into a :class:`LinkGraph`."""
    path = Path(base_directory) / GRAPH_FILE
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise FilesystemError("read graph", path, exc.strerror) from exc
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise SerializationError(f"{path} is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise SerializationError(f"{path} does not hold a graph object")
    return LinkGraph.from_dict(data)
