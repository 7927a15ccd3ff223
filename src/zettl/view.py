"""Altair chart of the link graph.

Node positions come from :func:`networkx.spring_layout`; node size follows
degree and a link's stroke width follows how many times the source cites the
target. The chart can be saved as standalone HTML (``chart.save("g.html")``).
"""

from __future__ import annotations

from collections import Counter
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    import altair as alt

    from zettl.graph import LinkGraph


def build_graph_chart(
    graph: "LinkGraph",
    *,
    highlight: str | None = None,
    width: int = 640,
    height: int = 480,
    seed: int = 42,
) -> "alt.LayerChart":
    """Return a layered chart (links, nodes, labels) for *graph*.

    Parameters
    ----------
    graph:
        A built or loaded :class:`~zettl.graph.LinkGraph`.
    highlight:
        Identifier of a note to draw in a distinct colour.
    width / height:
        Canvas dimensions in pixels.
    seed:
        Passed to ``networkx.spring_layout`` for reproducible positions.
    """
    import altair as alt
    import networkx as nx
    import polars as pl

    G = graph.to_networkx()
    pos: dict[str, Any] = nx.spring_layout(nx.DiGraph(G), seed=seed, k=2.0) if len(G) else {}

    node_rows = [
        {
            "id": node,
            "x": float(pos[node][0]),
            "y": float(pos[node][1]),
            "degree": int(G.degree(node)),
            "highlighted": node == highlight,
        }
        for node in G.nodes()
    ]
    nodes_df = pl.DataFrame(
        node_rows or [{"id": "", "x": 0.0, "y": 0.0, "degree": 0, "highlighted": False}]
    )

    multiplicity = Counter((link.source, link.target) for link in graph.links)
    link_rows = [
        {
            "x": float(pos[src][0]),
            "y": float(pos[src][1]),
            "x2": float(pos[tgt][0]),
            "y2": float(pos[tgt][1]),
            "source": src,
            "target": tgt,
            "count": count,
        }
        for (src, tgt), count in multiplicity.items()
    ]

    if link_rows:
        link_layer = (
            alt.Chart(pl.DataFrame(link_rows))
            .mark_rule(color="#888", opacity=0.55)
            .encode(
                x=alt.X("x:Q", axis=None),
                y=alt.Y("y:Q", axis=None),
                x2="x2:Q",
                y2="y2:Q",
                strokeWidth=alt.StrokeWidth("count:Q", scale=alt.Scale(range=[1, 5]), legend=None),
                tooltip=[
                    alt.Tooltip("source:N", title="from"),
                    alt.Tooltip("target:N", title="to"),
                    alt.Tooltip("count:Q", title="links"),
                ],
            )
        )
    else:
        link_layer = alt.Chart(
            pl.DataFrame({"x": [0.0], "y": [0.0], "x2": [0.0], "y2": [0.0]})
        ).mark_rule(opacity=0)

    node_layer = (
        alt.Chart(nodes_df)
        .mark_circle(opacity=0.9)
        .encode(
            x=alt.X("x:Q", axis=None),
            y=alt.Y("y:Q", axis=None),
            size=alt.Size("degree:Q", scale=alt.Scale(range=[80, 400]), legend=None),
            color=alt.condition(
                alt.datum["highlighted"],
                alt.value("#7C3AED"),
                alt.value("#4B90D9"),
            ),
            tooltip=[alt.Tooltip("id:N", title="note"), alt.Tooltip("degree:Q", title="degree")],
        )
    )

    label_layer = (
        alt.Chart(nodes_df)
        .mark_text(dy=-12, fontSize=11)
        .encode(
            x=alt.X("x:Q", axis=None),
            y=alt.Y("y:Q", axis=None),
            text="id:N",
            opacity=alt.condition(alt.datum["highlighted"], alt.value(1.0), alt.value(0.65)),
        )
    )

    return (
        (link_layer + node_layer + label_layer)
        .properties(width=width, height=height)
        .configure_view(strokeWidth=0)
    )
