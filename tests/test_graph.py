# test_graph.py
import polars as pl
import pytest

import propnet
from propnet import Graph
from propnet.adapters import available_backends, load_adapter
from propnet.core.errors import (
    InvalidGraph,
    LengthMismatch,
    NoActiveSelection,
    NoSuchIdentity,
    UnknownAttribute,
)


class TestConstruction:
    def test_empty_graph(self):
        G = Graph()
        assert G.node_count() == 0 and G.edge_count() == 0
        assert G.get_node_df().columns == ["id", "type", "label"]
        assert G.get_edge_df().columns == ["id", "from", "to", "rel"]
        assert G.get_selection() is None
        assert G.get_node_ids() is None

    def test_from_frames_generates_ids(self, letters_graph):
        assert letters_graph.nodes.ids == [1, 2, 3, 4]
        assert letters_graph.edges.ids == [1, 2, 3]
        assert letters_graph.get_node_df().columns[:3] == ["id", "type", "label"]
        assert letters_graph.edges.attribute_names == ["rel", "color", "value"]

    def test_from_frames_rejects_dangling_edges(self):
        edf = pl.DataFrame({"from": [1], "to": [9]})
        with pytest.raises(InvalidGraph):
            Graph.from_frames(nodes=pl.DataFrame({"id": [1, 2]}), edges=edf)
        with pytest.raises(InvalidGraph):
            Graph.from_frames(edges=pl.DataFrame({"from": [1]}))

    def test_graph_attributes(self):
        G = Graph(name="toy")
        H = G.set_graph_attribute("name", "other")
        assert G.get_graph_attribute("name") == "toy"
        assert H.get_graph_attribute("name") == "other"
        assert H.get_graph_attribute("missing", 0) == 0

    def test_repr(self, simple_graph):
        assert "nodes=5" in repr(simple_graph)
        assert "selection=none" in repr(simple_graph)

    def test_lazy_package_attributes(self):
        assert propnet.to_nx is propnet.adapters.networkx.to_nx
        assert callable(propnet.betweenness)
        with pytest.raises(AttributeError):
            propnet.does_not_exist


class TestStructure:
    def test_add_node_and_edge(self):
        G = Graph().add_node(type="person", label="ann", age=31).add_node(label="bob")
        assert G.nodes.ids == [1, 2]
        assert G.nodes.get_column("age") == [31, None]
        G = G.add_edge(1, 2, rel="knows", since=2001)
        assert G.edges.get_column("since") == [2001]
        with pytest.raises(NoSuchIdentity):
            G.add_edge(1, 3)

    def test_add_n_nodes_lengths(self):
        G = Graph().add_n_nodes(3, type=["x", "y", "z"], weight=1.5)
        assert G.nodes.get_column("type") == ["x", "y", "z"]
        assert G.nodes.get_column("weight") == [1.5, 1.5, 1.5]
        with pytest.raises(LengthMismatch):
            Graph().add_n_nodes(2, label=["only one"])
        with pytest.raises(ValueError):
            Graph().add_n_nodes(0)

    def test_add_edges_w_string(self, simple_graph):
        assert simple_graph.edges.get_column("from") == [1, 1, 2, 2, 3]
        assert simple_graph.edges.get_column("to") == [2, 3, 4, 5, 5]
        assert simple_graph.edges.get_column("rel") == [None, "A", "B", "C", "D"]
        with pytest.raises(NoSuchIdentity):
            simple_graph.add_edges_w_string("1->9")
        with pytest.raises(ValueError):
            simple_graph.add_edges_w_string("nothing here")

    def test_ids_are_never_reused(self, simple_graph):
        G = simple_graph.delete_node(5).add_node()
        assert G.nodes.ids == [1, 2, 3, 4, 6]
        G = simple_graph.delete_edge(5).add_edge(1, 4)
        assert G.edges.ids == [1, 2, 3, 4, 6]

    def test_delete_node_removes_incident_edges(self, simple_graph):
        G = simple_graph.delete_node(2)
        assert G.nodes.ids == [1, 3, 4, 5]
        assert G.edges.ids == [2, 5]
        assert G.validate()
        with pytest.raises(NoSuchIdentity):
            G.delete_node(2)
        with pytest.raises(NoSuchIdentity):
            G.delete_edge(1)

    def test_graphs_are_values(self, simple_graph):
        before = simple_graph.get_edge_df()
        simple_graph.delete_edge(1)
        simple_graph.set_edge_attrs("values", 0.0)
        assert simple_graph.get_edge_df().equals(before)


class TestAttributes:
    def test_set_node_attrs_for_subset(self, simple_graph):
        G = simple_graph.set_node_attrs("color", ["red", "blue"], nodes=[4, 2])
        assert G.nodes.get_column("color") == [None, "blue", None, "red", None]
        with pytest.raises(NoSuchIdentity):
            simple_graph.set_node_attrs("color", "red", nodes=[10])

    def test_set_edge_attrs_whole_column(self, simple_graph):
        G = simple_graph.set_edge_attrs("weight", 1)
        assert G.edges.get_column("weight") == [1, 1, 1, 1, 1]
        with pytest.raises(LengthMismatch):
            simple_graph.set_edge_attrs("weight", [1, 2])

    def test_set_attrs_with_selection(self, simple_graph):
        G = simple_graph.select_nodes("type == 'a'").set_node_attrs_ws("type", "z")
        assert G.nodes.get_column("type") == ["z", "z", "b", "b", "b"]
        G = simple_graph.select_edges_by_edge_id([2, 5]).set_edge_attrs_ws("hot", True)
        assert G.edges.get_column("hot") == [None, True, None, None, True]
        with pytest.raises(NoActiveSelection):
            simple_graph.set_node_attrs_ws("type", "z")

    def test_rename_and_drop(self, simple_graph):
        G = simple_graph.rename_node_attrs("values", "score").drop_edge_attrs("rel")
        assert "score" in G.nodes.columns
        assert "rel" not in G.edges.columns
        with pytest.raises(UnknownAttribute):
            simple_graph.drop_node_attrs("nope")
        with pytest.raises(InvalidGraph):
            simple_graph.drop_edge_attrs("from")

    def test_join_node_attrs_on_explicit_id_key(self, simple_graph):
        df = pl.DataFrame({"id": [5], "size": [50]})
        G = simple_graph.join_node_attrs(df, by="id")
        assert G.nodes.get_column("size") == [None, None, None, None, 50]
        assert "_rid" not in G.nodes.columns

    def test_join_node_attrs(self, simple_graph):
        df = pl.DataFrame({"id": [5, 1, 1], "size": [50, 10, 99]})
        G = simple_graph.join_node_attrs(df)
        assert G.nodes.get_column("size") == [10, None, None, None, 50]

    def test_join_edge_attrs_on_endpoints(self, simple_graph):
        df = pl.DataFrame({"from": [2], "to": [4], "values": [0.5], "id": [100]})
        G = simple_graph.join_edge_attrs(df)
        assert G.edges.get_column("values") == [6.00, 6.11, 0.5, 6.02, 5.05]
        # reserved columns are never overwritten by a join
        assert G.edges.ids == [1, 2, 3, 4, 5]
        with pytest.raises(InvalidGraph):
            simple_graph.join_edge_attrs(df, by="weight")


class TestIdQueries:
    def test_get_edge_ids(self, letters_graph):
        assert letters_graph.get_edge_ids() == [1, 2, 3]
        assert letters_graph.get_edge_ids("value > 3") == [1, 3]
        assert letters_graph.get_edge_ids("color == 'pink'") == [1]
        assert letters_graph.get_edge_ids(["color == 'blue'", "value > 5"]) == [3]

    def test_get_edge_ids_without_result(self, letters_graph):
        assert letters_graph.get_edge_ids("value > 100") is None
        assert Graph().add_n_nodes(2).get_edge_ids() is None

    def test_get_edge_ids_ignores_selection(self, letters_graph):
        G = letters_graph.select_edges_by_edge_id(2)
        assert G.get_edge_ids() == [1, 2, 3]

    def test_get_node_ids(self, simple_graph):
        assert simple_graph.get_node_ids() == [1, 2, 3, 4, 5]
        assert simple_graph.get_node_ids("values < 6") == [3]
        assert simple_graph.get_node_ids("type == 'c'") is None


class TestAdapters:
    def test_networkx_backend(self):
        assert available_backends()["networkx"] is True
        assert load_adapter("networkx").to_nx is propnet.to_nx
        with pytest.raises(ValueError):
            load_adapter("graph-tool")
