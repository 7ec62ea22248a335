import re

import polars as pl

from ..utils import as_id_list
from .cache import AttributeCache, extract_attribute
from .conditions import apply_conditions
from .errors import InvalidGraph, LengthMismatch, NoActiveSelection, NoSuchIdentity
from .history import ActionLog, log_mutation
from .selection import EDGE, EMPTY, NODE, Selection
from .table import EDGE_RESERVED, EDGE_SCHEMA, NODE_RESERVED, NODE_SCHEMA, AttributeTable
from .traversal import (
    BOTH,
    IN,
    OUT,
    traverse_edges_to_nodes,
    traverse_to_edges,
    traverse_to_nodes,
)

_EDGE_STRING_RE = re.compile(r"(\d+)\s*(->|--)\s*(\d+)")


class Graph:
    """Property graph with a node table, an edge table and a current selection.

    Nodes and edges live in Polars-backed :class:`AttributeTable` objects. On
    top of the structure a graph carries:

    - a :class:`Selection` of node ids *or* edge ids that selection and
      traversal operators read and replace;
    - a single-slot :class:`AttributeCache`;
    - an append-only :class:`ActionLog` with one entry per mutation.

    Graphs are values: every operator returns a new ``Graph`` and leaves the
    receiver untouched, so a failing call never leaves a half-applied change.
    Tables are immutable Polars frames, which keeps the copies shallow.

    Parameters
    ----------
    directed : bool, default True
        Whether edges are read as directed (affects centrality; traversal
        always follows the ``from``/``to`` orientation).
    history : bool, default True
        Record mutations in the action log.
    **graph_attributes
        Free-form graph-level metadata.

    See Also
    --------
    from_frames, select_nodes, trav_out, cache_node_attrs

    """

    def __init__(self, directed=True, history=True, **graph_attributes):
        self.directed = bool(directed)
        self.graph_attributes = dict(graph_attributes)

        self._nodes = AttributeTable.empty(NODE_SCHEMA, NODE_RESERVED)
        self._edges = AttributeTable.empty(EDGE_SCHEMA, EDGE_RESERVED)

        # ids are never reused, even after deletion
        self._last_node = 0
        self._last_edge = 0

        self._selection = EMPTY
        self._cache = None
        self._log = ActionLog()
        self._history_enabled = bool(history)

    @classmethod
    def from_frames(cls, nodes=None, edges=None, directed=True, history=True, **graph_attributes):
        """Build a graph from node and edge DataFrames.

        Parameters
        ----------
        nodes : polars.DataFrame, optional
            Node records. An ``id`` column is generated (``1..n``) if absent;
            ``type`` and ``label`` are added as empty text columns if absent.
        edges : polars.DataFrame, optional
            Edge records with integer ``from`` and ``to`` columns. ``id`` is
            generated if absent; ``rel`` is added if absent.

        Returns
        -------
        Graph

        Raises
        ------
        InvalidGraph
            If a table is malformed or an edge references a missing node.

        """
        G = cls(directed=directed, history=history, **graph_attributes)
        if nodes is not None:
            G._nodes = AttributeTable(_with_defaults(nodes, NODE_SCHEMA), NODE_RESERVED)
            G._last_node = max(G._nodes.ids, default=0)
        if edges is not None:
            G._edges = AttributeTable(_with_defaults(edges, EDGE_SCHEMA), EDGE_RESERVED)
            G._last_edge = max(G._edges.ids, default=0)
        G.validate()
        return G

    # Value semantics

    def _evolve(self, **changes):
        new = object.__new__(type(self))
        new.__dict__.update(self.__dict__)
        new.graph_attributes = dict(self.graph_attributes)
        for k, v in changes.items():
            setattr(new, k, v)
        return new

    def _record(self, op, ts_utc, duration):
        if not self._history_enabled:
            return self
        self._log = self._log.append(
            op, ts_utc, duration, self._nodes.height, self._edges.height
        )
        return self

    def enable_history(self, flag: bool = True):
        """Return a copy that does (or does not) record mutations."""
        return self._evolve(_history_enabled=bool(flag))

    def copy(self):
        return self._evolve()

    # Introspection

    @property
    def nodes(self) -> AttributeTable:
        return self._nodes

    @property
    def edges(self) -> AttributeTable:
        return self._edges

    @property
    def selection(self) -> Selection:
        return self._selection

    @property
    def cache(self) -> AttributeCache | None:
        return self._cache

    @property
    def log(self) -> ActionLog:
        return self._log

    def node_count(self) -> int:
        return self._nodes.height

    def edge_count(self) -> int:
        return self._edges.height

    def get_node_df(self) -> pl.DataFrame:
        return self._nodes.df

    def get_edge_df(self) -> pl.DataFrame:
        return self._edges.df

    def set_graph_attribute(self, key, value):
        G = self._evolve()
        G.graph_attributes[key] = value
        return G

    def get_graph_attribute(self, key, default=None):
        return self.graph_attributes.get(key, default)

    def __repr__(self) -> str:
        sel = "none" if self._selection.is_empty else f"{len(self._selection)} {self._selection.kind}(s)"
        return (
            f"<Graph | nodes={self.node_count()} · edges={self.edge_count()} · "
            f"directed={self.directed} · selection={sel} · version={self._log.version}>"
        )

    def validate(self):
        """Check every structural invariant.

        Raises
        ------
        InvalidGraph
            On dangling edge endpoints, a selection referring to missing ids,
            or an identity counter lagging behind the tables.

        """
        known = set(self._nodes.ids)
        for col in ("from", "to"):
            dangling = [i for i in self._edges.get_column(col) if i not in known]
            if dangling:
                raise InvalidGraph(f"Edges reference missing node(s) in '{col}': {dangling}")
        if self._selection.has_nodes and self._nodes.missing_ids(self._selection.ids):
            raise InvalidGraph("Node selection refers to missing nodes")
        if self._selection.has_edges and self._edges.missing_ids(self._selection.ids):
            raise InvalidGraph("Edge selection refers to missing edges")
        if max(known, default=0) > self._last_node or max(self._edges.ids, default=0) > self._last_edge:
            raise InvalidGraph("Identity counters are behind the tables")
        return True

    # Id lookups

    def get_node_ids(self, conditions=None):
        """Node ids, optionally filtered by conditions; ignores the selection.

        Returns
        -------
        list[int] | None
            ``None`` if the graph has no nodes or no node satisfies the conditions.

        """
        if self._nodes.height == 0:
            return None
        df = apply_conditions(self._nodes.df, conditions)
        if df.height == 0:
            return None
        return df.get_column("id").to_list()

    def get_edge_ids(self, conditions=None):
        """Edge ids, optionally filtered by conditions; ignores the selection.

        Parameters
        ----------
        conditions : str | list[str], optional
            Condition strings evaluated against the edge table. Several
            conditions are combined with AND.

        Returns
        -------
        list[int] | None
            Ids in table order. ``None`` both when the graph has no edges and when
            the conditions remove every edge; an empty result is not an error.

        Examples
        --------
        >>> G.get_edge_ids("value > 3")
        [1, 3]

        """
        if self._edges.height == 0:
            return None
        df = apply_conditions(self._edges.df, conditions)
        if df.height == 0:
            return None
        return df.get_column("id").to_list()

    def history(self, as_df: bool = False):
        """Return the action log.

        Parameters
        ----------
        as_df : bool, default False
            If True, return a Polars DF [DataFrame]; otherwise a list of dicts.

        Returns
        -------
        list[dict] or polars.DataFrame
            Each entry has 'version', 'op', 'ts_utc' (UTC ISO-8601), 'duration'
            (seconds) and the 'nodes'/'edges' counts after the mutation.

        """
        return self._log.to_df() if as_df else self._log.to_dicts()

    # Structure

    @log_mutation()
    def add_node(self, type=None, label=None, **attributes):
        """Add one node with the next free id; the new id is ``G.nodes.ids[-1]``."""
        nid = self._last_node + 1
        row = {"id": nid, "type": type, "label": label, **attributes}
        return self._evolve(_nodes=self._nodes.append_rows([row]), _last_node=nid)

    @log_mutation()
    def add_n_nodes(self, n, type=None, label=None, **attributes):
        """Add ``n`` nodes.

        ``type``, ``label`` and each attribute take either one value for all new
        nodes or a sequence of ``n`` values.
        """
        n = int(n)
        if n < 1:
            raise ValueError(f"n must be positive, got {n}")
        columns = {"type": type, "label": label, **attributes}
        for name, value in columns.items():
            if isinstance(value, (list, tuple, pl.Series)):
                if len(value) != n:
                    raise LengthMismatch(f"'{name}' needs {n} values, got {len(value)}")
            else:
                columns[name] = [value] * n
        first = self._last_node + 1
        rows = [
            {"id": first + i, **{name: values[i] for name, values in columns.items()}}
            for i in range(n)
        ]
        return self._evolve(
            _nodes=self._nodes.append_rows(rows), _last_node=self._last_node + n
        )

    @log_mutation()
    def add_edge(self, from_, to, rel=None, **attributes):
        """Add an edge ``from_ -> to``.

        Raises
        ------
        NoSuchIdentity
            If either endpoint is not a node of the graph.

        """
        missing = self._nodes.missing_ids([from_, to])
        if missing:
            raise NoSuchIdentity(f"Cannot add edge {from_}->{to}: unknown node(s) {missing}")
        eid = self._last_edge + 1
        row = {"id": eid, "from": int(from_), "to": int(to), "rel": rel, **attributes}
        return self._evolve(_edges=self._edges.append_rows([row]), _last_edge=eid)

    @log_mutation()
    def add_edges_w_string(self, edges: str, rel=None):
        """Add edges written as ``"1->2 1->3 2->4"`` (``--`` is also accepted).

        ``rel`` is one label for all edges or one per edge.
        """
        pairs = [(int(a), int(b)) for a, _, b in _EDGE_STRING_RE.findall(edges)]
        if not pairs:
            raise ValueError(f"No edges found in {edges!r}")
        if isinstance(rel, (list, tuple)):
            if len(rel) != len(pairs):
                raise LengthMismatch(f"'rel' needs {len(pairs)} values, got {len(rel)}")
            rels = list(rel)
        else:
            rels = [rel] * len(pairs)
        missing = self._nodes.missing_ids([i for pair in pairs for i in pair])
        if missing:
            raise NoSuchIdentity(f"Unknown node(s) in edge string: {sorted(set(missing))}")
        first = self._last_edge + 1
        rows = [
            {"id": first + i, "from": a, "to": b, "rel": r}
            for i, ((a, b), r) in enumerate(zip(pairs, rels))
        ]
        return self._evolve(
            _edges=self._edges.append_rows(rows), _last_edge=self._last_edge + len(rows)
        )

    @log_mutation()
    def delete_node(self, node):
        """Remove a node and every edge incident to it.

        Removed ids are pruned from the selection; a selection left empty by the
        pruning is cleared.
        """
        if self._nodes.missing_ids([node]):
            raise NoSuchIdentity(f"Node {node} not found")
        incident = self._edges.df.filter((pl.col("from") == node) | (pl.col("to") == node))
        gone_edges = incident.get_column("id").to_list()
        selection = self._selection.prune(NODE, [node]).prune(EDGE, gone_edges)
        return self._evolve(
            _nodes=self._nodes.drop_rows([node]),
            _edges=self._edges.drop_rows(gone_edges),
            _selection=selection,
        )

    @log_mutation()
    def delete_edge(self, edge):
        """Remove an edge by id, pruning it from an edge selection."""
        if self._edges.missing_ids([edge]):
            raise NoSuchIdentity(f"Edge {edge} not found")
        return self._evolve(
            _edges=self._edges.drop_rows([edge]),
            _selection=self._selection.prune(EDGE, [edge]),
        )

    # Attributes

    def _set_attrs(self, table: AttributeTable, attr, values, ids):
        if ids is None:
            if isinstance(values, (list, tuple, pl.Series)):
                return table.add_or_overwrite_column(attr, values)
            return table.set_values(attr, table.ids, values)
        ids = as_id_list(ids)
        missing = table.missing_ids(ids)
        if missing:
            raise NoSuchIdentity(f"Unknown id(s): {missing}")
        return table.set_values(attr, ids, values)

    @log_mutation()
    def set_node_attrs(self, node_attr, values, nodes=None):
        """Set a node attribute for all nodes, or for ``nodes`` only.

        ``values`` is one value, or a sequence aligned with ``nodes`` (or with
        the whole table when ``nodes`` is None).
        """
        return self._evolve(_nodes=self._set_attrs(self._nodes, node_attr, values, nodes))

    @log_mutation()
    def set_edge_attrs(self, edge_attr, values, edges=None):
        """Set an edge attribute for all edges, or for ``edges`` only."""
        return self._evolve(_edges=self._set_attrs(self._edges, edge_attr, values, edges))

    @log_mutation()
    def set_node_attrs_ws(self, node_attr, value):
        """Set a node attribute to ``value`` on every selected node."""
        ids = self._selection.require(NODE)
        return self._evolve(_nodes=self._nodes.set_values(node_attr, ids, value))

    @log_mutation()
    def set_edge_attrs_ws(self, edge_attr, value):
        """Set an edge attribute to ``value`` on every selected edge."""
        ids = self._selection.require(EDGE)
        return self._evolve(_edges=self._edges.set_values(edge_attr, ids, value))

    @log_mutation()
    def rename_node_attrs(self, from_attr, to_attr):
        return self._evolve(_nodes=self._nodes.rename_column(from_attr, to_attr))

    @log_mutation()
    def rename_edge_attrs(self, from_attr, to_attr):
        return self._evolve(_edges=self._edges.rename_column(from_attr, to_attr))

    @log_mutation()
    def drop_node_attrs(self, node_attr):
        return self._evolve(_nodes=self._nodes.drop_column(node_attr))

    @log_mutation()
    def drop_edge_attrs(self, edge_attr):
        return self._evolve(_edges=self._edges.drop_column(edge_attr))

    @log_mutation()
    def join_node_attrs(self, df: pl.DataFrame, by="id"):
        """Merge columns of ``df`` into the node table, matching on ``by``.

        Matched nodes take the first matching row of ``df``; other nodes keep
        their values (null for new columns).
        """
        return self._evolve(_nodes=_join_attrs(self._nodes, df, by))

    @log_mutation()
    def join_edge_attrs(self, df: pl.DataFrame, by=("from", "to")):
        """Merge columns of ``df`` into the edge table, matching on ``by``.

        The default matches on the endpoint pair, so parallel edges all receive
        the row's values.
        """
        return self._evolve(_edges=_join_attrs(self._edges, df, by))

    # Selection

    @log_mutation()
    def select_nodes(self, conditions=None, set_op="union", nodes=None):
        """Select nodes satisfying ``conditions`` (optionally among ``nodes``).

        The matches are combined with an existing node selection using
        ``set_op`` (``"union"``, ``"intersect"`` or ``"difference"``). An edge
        selection is discarded. A query matching nothing leaves an empty node
        selection.
        """
        df = self._nodes.df
        if nodes is not None:
            ids = as_id_list(nodes)
            missing = self._nodes.missing_ids(ids)
            if missing:
                raise NoSuchIdentity(f"Unknown node(s): {missing}")
            df = df.filter(pl.col("id").is_in(ids))
        ids = apply_conditions(df, conditions).get_column("id").to_list()
        return self._evolve(_selection=self._selection.combine(NODE, ids, set_op))

    @log_mutation()
    def select_nodes_by_id(self, nodes, set_op="union"):
        """Select nodes by id.

        Raises
        ------
        NoSuchIdentity
            If any id is not a node of the graph.

        """
        ids = as_id_list(nodes)
        missing = self._nodes.missing_ids(ids)
        if missing:
            raise NoSuchIdentity(f"Unknown node(s): {missing}")
        return self._evolve(_selection=self._selection.combine(NODE, ids, set_op))

    @log_mutation()
    def select_edges(self, conditions=None, set_op="union", from_=None, to=None, edges=None):
        """Select edges satisfying ``conditions``.

        ``from_``/``to`` restrict the candidates to edges leaving/entering the
        given nodes, ``edges`` to the given edge ids.
        """
        df = self._edges.df
        if edges is not None:
            ids = as_id_list(edges)
            missing = self._edges.missing_ids(ids)
            if missing:
                raise NoSuchIdentity(f"Unknown edge(s): {missing}")
            df = df.filter(pl.col("id").is_in(ids))
        for col, ends in (("from", from_), ("to", to)):
            if ends is not None:
                ends = as_id_list(ends)
                missing = self._nodes.missing_ids(ends)
                if missing:
                    raise NoSuchIdentity(f"Unknown node(s): {missing}")
                df = df.filter(pl.col(col).is_in(ends))
        ids = apply_conditions(df, conditions).get_column("id").to_list()
        return self._evolve(_selection=self._selection.combine(EDGE, ids, set_op))

    @log_mutation()
    def select_edges_by_edge_id(self, edges, set_op="union"):
        ids = as_id_list(edges)
        missing = self._edges.missing_ids(ids)
        if missing:
            raise NoSuchIdentity(f"Unknown edge(s): {missing}")
        return self._evolve(_selection=self._selection.combine(EDGE, ids, set_op))

    @log_mutation()
    def select_edges_by_node_id(self, nodes, set_op="union"):
        """Select every edge with at least one endpoint in ``nodes``."""
        ids = as_id_list(nodes)
        missing = self._nodes.missing_ids(ids)
        if missing:
            raise NoSuchIdentity(f"Unknown node(s): {missing}")
        df = self._edges.df.filter(pl.col("from").is_in(ids) | pl.col("to").is_in(ids))
        return self._evolve(
            _selection=self._selection.combine(EDGE, df.get_column("id").to_list(), set_op)
        )

    @log_mutation()
    def clear_selection(self):
        return self._evolve(_selection=EMPTY)

    @log_mutation()
    def invert_selection(self):
        """Select every node (or edge) that is currently not selected."""
        sel = self._selection
        if sel.is_empty:
            raise NoActiveSelection("There is no selection to invert")
        table = self._nodes if sel.has_nodes else self._edges
        chosen = set(sel.ids)
        rest = [i for i in table.ids if i not in chosen]
        return self._evolve(_selection=Selection(sel.kind, tuple(rest)))

    def get_selection(self):
        """Selected ids, or ``None`` when nothing is selected."""
        if self._selection.is_empty:
            return None
        return list(self._selection.ids)

    # Traversal

    def _hop(self, traverse, kind, direction, conditions, copy_attrs_from):
        start = self._selection.require(kind)
        hop = traverse(
            self._nodes, self._edges, start, direction, conditions, copy_attrs_from
        )
        if hop is None:
            return self
        return self._evolve(
            _nodes=hop.nodes,
            _edges=hop.edges,
            _selection=Selection(hop.kind, hop.ids),
        )

    @log_mutation()
    def trav_out(self, conditions=None, copy_attrs_from=None):
        """Move the node selection along outgoing edges to the adjacent nodes.

        Parameters
        ----------
        conditions : str | list[str], optional
            Conditions on the attributes of the nodes traversed to.
        copy_attrs_from : str, optional
            Node attribute copied from each origin node onto the node it
            reaches. With several origins the first edge in table order wins.

        Returns
        -------
        Graph
            With the reached nodes selected, or ``self`` unchanged if no node
            was reached (self-loops are never followed).

        Raises
        ------
        NoActiveSelection
            Without a non-empty node selection.
        WrongSelectionKind
            If edges are selected.

        """
        return self._hop(traverse_to_nodes, NODE, OUT, conditions, copy_attrs_from)

    @log_mutation()
    def trav_in(self, conditions=None, copy_attrs_from=None):
        """Move the node selection along incoming edges; see :meth:`trav_out`."""
        return self._hop(traverse_to_nodes, NODE, IN, conditions, copy_attrs_from)

    @log_mutation()
    def trav_both(self, conditions=None, copy_attrs_from=None):
        """Move the node selection to in- and out-neighbours; see :meth:`trav_out`."""
        return self._hop(traverse_to_nodes, NODE, BOTH, conditions, copy_attrs_from)

    @log_mutation()
    def trav_out_edge(self, conditions=None, copy_attrs_from=None):
        """Select the outgoing edges of the selected nodes.

        ``conditions`` filter on edge attributes. ``copy_attrs_from`` names a
        node attribute copied onto each edge from its origin node; the edge
        column is created (null elsewhere) if needed.
        """
        return self._hop(traverse_to_edges, NODE, OUT, conditions, copy_attrs_from)

    @log_mutation()
    def trav_in_edge(self, conditions=None, copy_attrs_from=None):
        """Select the incoming edges of the selected nodes; see :meth:`trav_out_edge`."""
        return self._hop(traverse_to_edges, NODE, IN, conditions, copy_attrs_from)

    @log_mutation()
    def trav_both_edge(self, conditions=None, copy_attrs_from=None):
        """Select all non-loop edges touching the selected nodes.

        When both endpoints are selected, an attribute copy takes the value
        of the ``from`` node.
        """
        return self._hop(traverse_to_edges, NODE, BOTH, conditions, copy_attrs_from)

    @log_mutation()
    def trav_out_node(self, conditions=None, copy_attrs_from=None):
        """Move an edge selection to the nodes the edges point to.

        ``copy_attrs_from`` names an edge attribute copied onto the reached node.
        """
        return self._hop(traverse_edges_to_nodes, EDGE, OUT, conditions, copy_attrs_from)

    @log_mutation()
    def trav_in_node(self, conditions=None, copy_attrs_from=None):
        """Move an edge selection to the nodes the edges come from."""
        return self._hop(traverse_edges_to_nodes, EDGE, IN, conditions, copy_attrs_from)

    # Cache

    @log_mutation()
    def cache_node_attrs(self, node_attr, mode=None):
        """Cache the values of ``node_attr`` for the selected nodes.

        Values are taken in node-table order. ``mode`` is ``"numeric"`` or
        ``"text"`` to coerce them (failures become None). Any previously cached
        vector is replaced.
        """
        ids = self._selection.require(NODE)
        return self._evolve(_cache=extract_attribute(self._nodes, ids, node_attr, NODE, mode))

    @log_mutation()
    def cache_edge_attrs(self, edge_attr, mode=None):
        """Cache the values of ``edge_attr`` for the selected edges.

        Parameters
        ----------
        edge_attr : str
            Edge attribute to read (not ``id``, ``from`` or ``to``).
        mode : {"numeric", "text"}, optional
            Coerce the cached values.

        Returns
        -------
        Graph

        Raises
        ------
        NoActiveSelection
            Without a non-empty edge selection.
        WrongSelectionKind
            If nodes are selected.
        UnknownAttribute
            If ``edge_attr`` is not an edge attribute.

        """
        ids = self._selection.require(EDGE)
        return self._evolve(_cache=extract_attribute(self._edges, ids, edge_attr, EDGE, mode))

    # the names used by the selection-scoped ("with selection") API
    cache_node_attrs_ws = cache_node_attrs
    cache_edge_attrs_ws = cache_edge_attrs

    def get_cache(self):
        """The cached values as a list, or ``None`` if nothing has been cached."""
        return None if self._cache is None else self._cache.to_list()

    # Algorithms

    def get_betweenness(self) -> pl.DataFrame:
        """Betweenness centrality of every node; see :func:`propnet.algorithms.betweenness`."""
        from ..algorithms.centrality import betweenness

        return betweenness(self)

    def to_nx(self):
        """Export to a NetworkX (Di)Graph; see :func:`propnet.adapters.networkx.to_nx`."""
        from ..adapters.networkx import to_nx

        return to_nx(self)


def _with_defaults(df, schema):
    if not isinstance(df, pl.DataFrame):
        raise InvalidGraph(f"Expected a polars DataFrame, got {type(df).__name__}")
    if "id" not in df.columns:
        df = df.with_row_index("id", offset=1).with_columns(pl.col("id").cast(pl.Int64))
    for name, dtype in schema.items():
        if name not in df.columns:
            if name in ("from", "to"):
                raise InvalidGraph(f"Edge table is missing the '{name}' column")
            df = df.with_columns(pl.lit(None).cast(dtype).alias(name))
    fixed = list(schema)
    return df.select([*fixed, *[c for c in df.columns if c not in fixed]])


def _join_attrs(table: AttributeTable, df: pl.DataFrame, by):
    keys = [by] if isinstance(by, str) else list(by)
    missing = [k for k in keys if k not in df.columns or k not in table.columns]
    if missing:
        raise InvalidGraph(f"Join key(s) {missing} must exist in both tables")
    values = [c for c in df.columns if c not in keys and c not in table.reserved]
    df = df.unique(subset=keys, keep="first", maintain_order=True)
    rows = {tuple(r[:len(keys)]): r[len(keys):] for r in df.select([*keys, *values]).iter_rows()}

    ids, matched = [], []
    for row in table.df.select(pl.col("id").alias("_rid"), *keys).iter_rows():
        hit = rows.get(tuple(row[1:]))
        if hit is not None:
            ids.append(row[0])
            matched.append(hit)
    for j, col in enumerate(values):
        column = pl.Series(col, [m[j] for m in matched], dtype=df.schema[col])
        table = table.set_values(col, ids, column)
    return table
