try:
    import networkx as nx
except ModuleNotFoundError as e:
    raise ModuleNotFoundError(
        "Dependency 'networkx' is not installed. Install with: pip install networkx"
    ) from e

import warnings
from collections import Counter


def _clean(attrs: dict) -> dict:
    # NX has no notion of a missing column value; drop nulls
    return {k: v for k, v in attrs.items() if v is not None}


def to_nx(graph, *, directed=None, with_attrs=True, warn=True):
    """Export a propnet graph to a simple NetworkX graph.

    Parameters
    ----------
    graph : propnet.Graph
        Source graph.
    directed : bool, optional
        Build a ``DiGraph`` (True) or ``Graph`` (False). Defaults to
        ``graph.directed``.
    with_attrs : bool, default True
        Copy node and edge attributes (the edge ``id`` is kept as an attribute).
    warn : bool, default True
        Emit a ``RuntimeWarning`` when parallel edges are collapsed.

    Returns
    -------
    networkx.Graph | networkx.DiGraph
        Nodes are keyed by node id. Self-loops are kept; of several parallel
        edges only the last one's attributes survive.

    """
    directed = graph.directed if directed is None else bool(directed)
    G = nx.DiGraph() if directed else nx.Graph()

    nodes = graph.nodes.df
    if with_attrs:
        for row in nodes.iter_rows(named=True):
            nid = row.pop("id")
            G.add_node(nid, **_clean(row))
    else:
        G.add_nodes_from(nodes.get_column("id").to_list())

    edges = graph.edges.df
    if with_attrs:
        for row in edges.iter_rows(named=True):
            u, v = row.pop("from"), row.pop("to")
            G.add_edge(u, v, **_clean(row))
    else:
        G.add_edges_from(edges.select("from", "to").iter_rows())

    if warn:
        pairs = edges.select("from", "to").iter_rows()
        if not directed:
            pairs = (tuple(sorted(p)) for p in pairs)
        collapsed = sum(n - 1 for n in Counter(pairs).values() if n > 1)
        if collapsed:
            warnings.warn(
                f"Graph→NX conversion is lossy: {collapsed} parallel edge(s) collapsed.",
                category=RuntimeWarning,
                stacklevel=2,
            )
    return G
