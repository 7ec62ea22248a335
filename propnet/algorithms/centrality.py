import networkx as nx
import polars as pl

from ..adapters.networkx import to_nx


def betweenness(graph) -> pl.DataFrame:
    """Betweenness centrality of every node of ``graph``.

    For each node, sums over pairs of other nodes ``(u, v)`` the fraction of
    shortest ``u -> v`` paths that pass through it. Paths are unweighted and
    counted breadth-first from every source (Brandes); ties are split across
    all shortest paths of equal length. Scores are not normalized.

    - Directed graphs count ordered pairs; undirected graphs count each
      unordered pair once.
    - Pairs with no path between them contribute zero.
    - Self-loops and parallel edges do not change the result.
    - The current selection is ignored.

    Parameters
    ----------
    graph : propnet.Graph

    Returns
    -------
    polars.DataFrame
        Columns ``id`` (Int64) and ``betweenness`` (Float64), in node-table order.

    """
    G = to_nx(graph, with_attrs=False, warn=False)
    scores = nx.betweenness_centrality(G, normalized=False, weight=None, endpoints=False)
    ids = graph.nodes.ids
    return pl.DataFrame(
        {"id": ids, "betweenness": [float(scores.get(i, 0.0)) for i in ids]},
        schema={"id": pl.Int64, "betweenness": pl.Float64},
    )
