"""Unit tests for zettl.graph."""

import json
import textwrap
from datetime import datetime
from pathlib import Path

import networkx as nx
import pytest

from zettl.errors import FilesystemError, SerializationError
from zettl.graph import BrokenLink, Link, LinkGraph, build_graph, load_graph, scan_links
from zettl.index import build_indexes


def _write_note(root: Path, identifier: str, content: str = "") -> Path:
    path = root / f"{identifier}.md"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(textwrap.dedent(content), encoding="utf-8")
    return path


def _document(root: Path) -> dict:
    return json.loads((root / ".graph.json").read_text(encoding="utf-8"))


@pytest.fixture()
def zettel(tmp_path: Path) -> Path:
    """Two notes, one forward link and one broken link."""
    _write_note(tmp_path, "notes/a", "see [[notes/b]] and [[missing]]\n")
    _write_note(tmp_path, "notes/b")
    return tmp_path


# ---------------------------------------------------------------------------
# Document
# ---------------------------------------------------------------------------


class TestGraphDocument:
    def test_nodes_and_links(self, zettel: Path):
        build_graph(zettel)
        assert _document(zettel) == {
            "nodes": [{"id": "notes/a"}, {"id": "notes/b"}],
            "links": [{"source": "notes/a", "target": "notes/b"}],
        }

    def test_one_warning_per_broken_reference(self, zettel: Path, capsys):
        build_graph(zettel)
        err_lines = capsys.readouterr().err.splitlines()
        assert err_lines == ["[warn] Broken link [[missing]] found in notes/a"]

    def test_repeated_broken_reference_warns_each_time(self, tmp_path: Path, capsys):
        _write_note(tmp_path, "a", "[[gone]] and again [[gone]]\n")

        graph = build_graph(tmp_path)

        warning = "[warn] Broken link [[gone]] found in a"
        assert capsys.readouterr().err.splitlines() == [warning, warning]
        assert graph.broken == [BrokenLink("a", "gone"), BrokenLink("a", "gone")]
        assert _document(tmp_path)["links"] == []

    def test_broken_links_returned(self, zettel: Path):
        graph = build_graph(zettel)
        assert graph.broken == [BrokenLink("notes/a", "missing")]

    def test_overwrites_previous_document(self, zettel: Path):
        (zettel / ".graph.json").write_text('{"nodes": [{"id": "stale"}], "links": []}', encoding="utf-8")
        build_graph(zettel)
        assert {"id": "stale"} not in _document(zettel)["nodes"]

    def test_no_temporary_files_left(self, zettel: Path):
        build_graph(zettel)
        assert [p.name for p in zettel.iterdir() if p.name.startswith(".graph")] == [".graph.json"]

    def test_empty_tree(self, tmp_path: Path):
        build_graph(tmp_path)
        assert _document(tmp_path) == {"nodes": [], "links": []}


# ---------------------------------------------------------------------------
# Link resolution
# ---------------------------------------------------------------------------


class TestLinkResolution:
    def test_repeated_references_are_separate_links(self, tmp_path: Path):
        _write_note(tmp_path, "src", "[[dst]] once, [[dst]] twice\n")
        _write_note(tmp_path, "dst")

        graph = scan_links(tmp_path)

        assert graph.links == [Link("src", "dst"), Link("src", "dst")]

    def test_link_order_follows_text(self, tmp_path: Path):
        _write_note(tmp_path, "src", "[[b]] [[c]] [[b]]\n")
        _write_note(tmp_path, "b")
        _write_note(tmp_path, "c")

        graph = scan_links(tmp_path)

        assert [link.target for link in graph.links] == ["b", "c", "b"]

    def test_forward_reference_resolves(self, tmp_path: Path):
        # "a" is scanned before "z/last"
        _write_note(tmp_path, "a", "[[z/last]]\n")
        _write_note(tmp_path, "z/last")

        assert scan_links(tmp_path).links == [Link("a", "z/last")]

    def test_match_is_case_sensitive(self, tmp_path: Path, capsys):
        _write_note(tmp_path, "notes/a", "[[Notes/B]]\n")
        _write_note(tmp_path, "notes/b")

        graph = scan_links(tmp_path)

        assert graph.links == []
        assert "[[Notes/B]]" in capsys.readouterr().err

    def test_bare_stem_does_not_match_nested_identifier(self, tmp_path: Path):
        _write_note(tmp_path, "notes/a", "[[b]]\n")
        _write_note(tmp_path, "notes/b")

        graph = scan_links(tmp_path)

        assert graph.links == []
        assert graph.broken == [BrokenLink("notes/a", "b")]

    def test_extension_in_link_does_not_match(self, tmp_path: Path):
        _write_note(tmp_path, "a", "[[b.md]]\n")
        _write_note(tmp_path, "b")

        assert scan_links(tmp_path).links == []

    def test_self_link(self, tmp_path: Path):
        _write_note(tmp_path, "loop", "I cite [[loop]].\n")

        assert scan_links(tmp_path).links == [Link("loop", "loop")]

    def test_front_matter_links_count(self, tmp_path: Path):
        _write_note(tmp_path, "a", "---\nrelated: '[[b]]'\n---\n# A\n")
        _write_note(tmp_path, "b")

        assert scan_links(tmp_path).links == [Link("a", "b")]


# ---------------------------------------------------------------------------
# Walk
# ---------------------------------------------------------------------------


class TestGraphWalk:
    def test_hidden_paths_included(self, tmp_path: Path):
        _write_note(tmp_path, ".archive/old", "[[visible]]\n")
        _write_note(tmp_path, "visible")

        graph = scan_links(tmp_path)

        assert set(graph.nodes) == {".archive/old", "visible"}
        assert graph.links == [Link(".archive/old", "visible")]

    def test_index_files_are_nodes(self, tmp_path: Path):
        _write_note(tmp_path, "notes/n")
        build_indexes(tmp_path, "Me", now=datetime(2026, 10, 18))

        graph = build_graph(tmp_path)

        assert {"_index", "notes/_index", "notes/n"} == set(graph.nodes)
        assert Link("_index", "notes/_index") in graph.links
        assert Link("notes/_index", "notes/n") in graph.links
        assert graph.broken == []

    def test_non_markdown_files_ignored(self, tmp_path: Path):
        _write_note(tmp_path, "a")
        (tmp_path / "b.txt").write_text("[[a]]", encoding="utf-8")

        assert scan_links(tmp_path).nodes == ["a"]

    def test_every_note_file_is_exactly_one_node(self, tmp_path: Path):
        for identifier in ("x", "d/y", "d/e/z", ".h/w"):
            _write_note(tmp_path, identifier)

        build_graph(tmp_path)

        ids = [node["id"] for node in _document(tmp_path)["nodes"]]
        files = {p.relative_to(tmp_path).as_posix()[:-3] for p in tmp_path.rglob("*.md")}
        assert sorted(ids) == sorted(files)
        assert len(ids) == len(set(ids))


# ---------------------------------------------------------------------------
# Failures
# ---------------------------------------------------------------------------


class TestGraphFailures:
    def test_undecodable_note_aborts(self, zettel: Path):
        (zettel / "notes" / "bad.md").write_bytes(b"\xff\xfe\xfa not utf-8")

        with pytest.raises(FilesystemError) as excinfo:
            build_graph(zettel)

        assert excinfo.value.path.name == "bad.md"

    def test_previous_document_untouched_on_failure(self, zettel: Path):
        build_graph(zettel)
        before = (zettel / ".graph.json").read_text(encoding="utf-8")
        (zettel / "notes" / "bad.md").write_bytes(b"\xff\xfe\xfa")

        with pytest.raises(FilesystemError):
            build_graph(zettel)

        assert (zettel / ".graph.json").read_text(encoding="utf-8") == before


# ---------------------------------------------------------------------------
# Loading and queries
# ---------------------------------------------------------------------------


class TestLinkGraphQueries:
    @pytest.fixture()
    def graph(self) -> LinkGraph:
        return LinkGraph(
            nodes=["a", "b", "c", "lonely"],
            links=[Link("a", "b"), Link("a", "b"), Link("c", "b"), Link("b", "a")],
        )

    def test_load_round_trip(self, zettel: Path):
        built = build_graph(zettel)
        loaded = load_graph(zettel)
        assert loaded.nodes == built.nodes
        assert loaded.links == built.links

    def test_load_missing_document(self, tmp_path: Path):
        with pytest.raises(FilesystemError):
            load_graph(tmp_path)

    def test_load_invalid_json(self, tmp_path: Path):
        (tmp_path / ".graph.json").write_text("{not json", encoding="utf-8")
        with pytest.raises(SerializationError):
            load_graph(tmp_path)

    def test_load_wrong_shape(self, tmp_path: Path):
        (tmp_path / ".graph.json").write_text('{"nodes": [{"name": "a"}], "links": []}', encoding="utf-8")
        with pytest.raises(SerializationError):
            load_graph(tmp_path)

    def test_backlinks_deduplicated_in_order(self, graph: LinkGraph):
        assert graph.backlinks("b") == ["a", "c"]

    def test_backlinks_of_unlinked_note(self, graph: LinkGraph):
        assert graph.backlinks("lonely") == []

    def test_orphans(self, graph: LinkGraph):
        assert graph.orphans() == ["lonely"]

    def test_to_networkx_keeps_multiplicity(self, graph: LinkGraph):
        G = graph.to_networkx()
        assert isinstance(G, nx.MultiDiGraph)
        assert G.number_of_edges("a", "b") == 2
        assert G.number_of_nodes() == 4
