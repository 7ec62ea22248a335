import pathlib
import sys

import polars as pl  # PL (Polars)
import pytest

ROOT = pathlib.Path(__file__).resolve().parents[1]  # project root
sys.path.insert(0, str(ROOT))

from propnet import Graph


@pytest.fixture
def simple_graph():
    """Five nodes, edges 1->2 1->3 2->4 2->5 3->5, `values` on nodes and edges.

    Nodes 1-2 have type 'a', nodes 3-5 type 'b'.
    """
    G = (
        Graph()
        .add_n_nodes(2, type="a", label=["asd", "iekd"])
        .add_n_nodes(3, type="b", label=["idj", "edl", "ohd"])
        .add_edges_w_string("1->2 1->3 2->4 2->5 3->5", rel=[None, "A", "B", "C", "D"])
    )
    return G.set_node_attrs("values", [8.58, 7.22, 5.95, 6.71, 7.48]).set_edge_attrs(
        "values", [6.00, 6.11, 4.72, 6.02, 5.05]
    )


@pytest.fixture
def bare_edges_graph():
    """Same structure as `simple_graph`, but the edges carry no attributes."""
    return (
        Graph()
        .add_n_nodes(5, type="n")
        .add_edges_w_string("1->2 1->3 2->4 2->5 3->5")
        .set_node_attrs("data", [1.5, 2.5, 3.5, 4.5, 5.5])
    )


@pytest.fixture
def letters_graph():
    """Four nodes and three edges with `color` and `value` edge attributes."""
    ndf = pl.DataFrame(
        {
            "type": ["letter"] * 4,
            "color": ["red", "green", "grey", "blue"],
            "value": [3.5, 2.6, 9.4, 2.7],
        }
    )
    edf = pl.DataFrame(
        {
            "from": [1, 2, 3],
            "to": [4, 3, 1],
            "rel": ["leading_to"] * 3,
            "color": ["pink", "blue", "blue"],
            "value": [3.9, 2.5, 7.3],
        }
    )
    return Graph.from_frames(nodes=ndf, edges=edf)


@pytest.fixture
def path_graph():
    """Directed path 1->2->...->6 with an edge attribute `value`."""
    G = Graph().add_n_nodes(6).add_edges_w_string("1->2 2->3 3->4 4->5 5->6")
    return G.set_edge_attrs("value", [5.090874, 8.151559, 5.436577, 2.906929, 4.422623])
