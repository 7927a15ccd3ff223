from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import typer
from rich.console import Console

from . import commands
from .config import Config
from .errors import ZettlError
from .graph import build_graph, load_graph
from .index import build_indexes
from .paths import CONFIG_DIR, CONFIG_FILE


app = typer.Typer(add_completion=False, help="A plain-text zettelkasten with indexes and a link graph.")
console = Console()
err_console = Console(stderr=True)


@dataclass
class State:
    basedir: Path
    cfg_file: Path

    def config(self) -> Config:
        return Config.from_file(self.cfg_file)


def _fail(exc: ZettlError) -> None:
    err_console.print(f"Error: {exc}", style="red", markup=False, soft_wrap=True)
    raise typer.Exit(code=1)


@app.callback()
def main(
    ctx: typer.Context,
    basedir: Path = typer.Option(Path("~/zettel"), "--basedir", envvar="ZETTL_DIRECTORY", help="Root of the zettelkasten"),
    config_file: Path | None = typer.Option(None, "--config-file", envvar="ZETTL_CFG", help="Config file (default: <basedir>/.zettl/config.yml)"),
):
    """Create notes and keep ``_index.md`` files and ``.graph.json`` in sync."""
    base = basedir.expanduser()
    try:
        base.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        err_console.print(f"Could not create base directory {base}: {e}", style="red", markup=False)
        raise typer.Exit(code=1)
    base = base.resolve()
    ctx.obj = State(basedir=base, cfg_file=(config_file.expanduser() if config_file else base / CONFIG_DIR / CONFIG_FILE))


@app.command()
def init(ctx: typer.Context):
    """Initialize a zettelkasten in the base directory."""
    state: State = ctx.obj
    try:
        commands.init(state.basedir)
    except ZettlError as e:
        _fail(e)
    console.print(f"Initialized {state.basedir}")


@app.command()
def note(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Name of the note; may contain a path like apple/pen"),
):
    """Create (or open) a note."""
    state: State = ctx.obj
    try:
        commands.note(state.basedir, state.config(), name)
    except ZettlError as e:
        _fail(e)


@app.command()
def fleet(
    ctx: typer.Context,
    name: str | None = typer.Option(None, "--open", "-o", help="Open this existing fleeting note instead of today's"),
):
    """Open today's fleeting note, or an existing one by name."""
    state: State = ctx.obj
    try:
        commands.fleet(state.basedir, state.config(), name)
    except ZettlError as e:
        _fail(e)


@app.command("list")
def list_(
    ctx: typer.Context,
    fleet: bool = typer.Option(False, "--fleet", "-f", help="List fleeting notes instead"),
):
    """List all notes."""
    state: State = ctx.obj
    for name in commands.list_notes(state.basedir, fleet=fleet):
        console.print(name, markup=False, highlight=False)


@app.command()
def index(ctx: typer.Context):
    """Regenerate every _index.md."""
    state: State = ctx.obj
    try:
        written = build_indexes(state.basedir, state.config().author)
    except ZettlError as e:
        _fail(e)
    console.print(f"Wrote {len(written)} index file(s)")


@app.command()
def graph(ctx: typer.Context):
    """Regenerate .graph.json."""
    state: State = ctx.obj
    try:
        g = build_graph(state.basedir)
    except ZettlError as e:
        _fail(e)
    console.print(f"Graph: {len(g.nodes)} notes, {len(g.links)} links, {len(g.broken)} broken")


@app.command()
def backlinks(
    ctx: typer.Context,
    identifier: str = typer.Argument(..., help="Note identifier, e.g. notes/apple/pen"),
):
    """Show the notes linking to a note (reads .graph.json)."""
    state: State = ctx.obj
    try:
        g = load_graph(state.basedir)
    except ZettlError as e:
        _fail(e)
    for source in g.backlinks(identifier):
        console.print(source, markup=False, highlight=False)


@app.command()
def orphans(ctx: typer.Context):
    """Show notes that neither link nor are linked (reads .graph.json)."""
    state: State = ctx.obj
    try:
        g = load_graph(state.basedir)
    except ZettlError as e:
        _fail(e)
    for node in g.orphans():
        console.print(node, markup=False, highlight=False)


@app.command()
def view(
    ctx: typer.Context,
    out: Path = typer.Option(..., "--out", help="HTML file to write the chart to"),
    highlight: str | None = typer.Option(None, "--highlight", help="Note identifier to highlight"),
):
    """Render .graph.json as an interactive HTML chart."""
    from .view import build_graph_chart

    state: State = ctx.obj
    try:
        g = load_graph(state.basedir)
    except ZettlError as e:
        _fail(e)
    build_graph_chart(g, highlight=highlight).save(str(out))
    console.print(f"Wrote {out}")


if __name__ == "__main__":
    app()
