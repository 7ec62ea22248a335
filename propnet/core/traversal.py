"""One-hop traversal of a selection across edges.

Every traversal works in the same steps:

1. match the edge table against the starting ids on the relevant endpoint
   column(s), dropping self-loops for node-to-node/node-to-edge hops;
2. look up the destination rows (nodes or edges) in their attribute table;
3. filter them with the condition strings;
4. optionally copy an attribute from each destination's origin onto it.

An empty match at step 1 or 3 yields ``None``: the caller keeps its graph as
is. Attribute copies take the *first* origin in edge-table order when several
origins reach the same destination; values are not aggregated.
"""

from __future__ import annotations

from dataclasses import dataclass

import polars as pl

from .conditions import apply_conditions
from .errors import UnknownAttribute
from .selection import EDGE, NODE
from .table import AttributeTable

IN = "in"
OUT = "out"
BOTH = "both"
DIRECTIONS = (IN, OUT, BOTH)


@dataclass(frozen=True)
class Hop:
    """Outcome of a successful traversal."""

    kind: str
    ids: tuple[int, ...]
    nodes: AttributeTable
    edges: AttributeTable


def _pairs(edges_df: pl.DataFrame, start, direction: str) -> pl.DataFrame:
    """(edge, origin, dest) rows, self-loops excluded, in edge-table order.

    For ``both``, an edge joining two starting nodes appears twice: outward
    first, then inward.
    """
    start = list(start)
    base = edges_df.with_row_index("_row").filter(pl.col("from") != pl.col("to"))
    outward = base.filter(pl.col("from").is_in(start)).select(
        "_row",
        pl.lit(0, dtype=pl.UInt8).alias("_dir"),
        pl.col("id").alias("edge"),
        pl.col("from").alias("origin"),
        pl.col("to").alias("dest"),
    )
    inward = base.filter(pl.col("to").is_in(start)).select(
        "_row",
        pl.lit(1, dtype=pl.UInt8).alias("_dir"),
        pl.col("id").alias("edge"),
        pl.col("to").alias("origin"),
        pl.col("from").alias("dest"),
    )
    if direction == OUT:
        pairs = outward
    elif direction == IN:
        pairs = inward
    else:
        pairs = pl.concat([outward, inward]).sort(["_row", "_dir"])
    return pairs.drop("_row", "_dir")


def _check_copy_attr(table: AttributeTable, attr: str | None, what: str) -> None:
    if attr is None:
        return
    if attr in table.reserved or not table.has_column(attr):
        raise UnknownAttribute(f"'{attr}' is not a valid {what} attribute to copy from")


def _copy_values(
    dest_table: AttributeTable,
    source_table: AttributeTable,
    origins: dict[int, int],
    attr: str,
) -> AttributeTable:
    """Write ``source[attr]`` of each destination's origin onto the destination."""
    lookup = dict(
        zip(source_table.get_column("id"), source_table.get_column(attr), strict=True)
    )
    dests = list(origins)
    values = [lookup.get(origins[d]) for d in dests]
    if source_table.df.schema[attr] != pl.Null:
        values = pl.Series(attr, values, dtype=source_table.df.schema[attr])
    return dest_table.set_values(attr, dests, values)


def traverse_to_nodes(
    nodes: AttributeTable,
    edges: AttributeTable,
    start,
    direction: str,
    conditions=None,
    copy_attrs_from: str | None = None,
) -> Hop | None:
    """Move a node selection to adjacent nodes."""
    if direction not in DIRECTIONS:
        raise ValueError(f"direction must be one of {DIRECTIONS}, got {direction!r}")
    _check_copy_attr(nodes, copy_attrs_from, "node")

    pairs = _pairs(edges.df, start, direction)
    if pairs.height == 0:
        return None

    candidates = nodes.df.filter(pl.col("id").is_in(pairs.get_column("dest").implode()))
    candidates = apply_conditions(candidates, conditions)
    if candidates.height == 0:
        return None

    keep = set(candidates.get_column("id").to_list())
    origins: dict[int, int] = {}
    for origin, dest in pairs.select("origin", "dest").iter_rows():
        if dest in keep and dest not in origins:
            origins[dest] = origin
    ids = tuple(origins)

    if copy_attrs_from is not None:
        nodes = _copy_values(nodes, nodes, origins, copy_attrs_from)
    return Hop(NODE, ids, nodes, edges)


def traverse_to_edges(
    nodes: AttributeTable,
    edges: AttributeTable,
    start,
    direction: str,
    conditions=None,
    copy_attrs_from: str | None = None,
) -> Hop | None:
    """Move a node selection onto adjacent edges."""
    if direction not in DIRECTIONS:
        raise ValueError(f"direction must be one of {DIRECTIONS}, got {direction!r}")
    _check_copy_attr(nodes, copy_attrs_from, "node")

    pairs = _pairs(edges.df, start, direction)
    if pairs.height == 0:
        return None

    candidates = edges.df.filter(pl.col("id").is_in(pairs.get_column("edge").implode()))
    candidates = apply_conditions(candidates, conditions)
    if candidates.height == 0:
        return None

    ids = tuple(candidates.get_column("id").to_list())
    if copy_attrs_from is not None:
        keep = set(ids)
        origins: dict[int, int] = {}
        for edge, origin in pairs.select("edge", "origin").iter_rows():
            if edge in keep and edge not in origins:
                origins[edge] = origin
        edges = _copy_values(edges, nodes, origins, copy_attrs_from)
    return Hop(EDGE, ids, nodes, edges)


def traverse_edges_to_nodes(
    nodes: AttributeTable,
    edges: AttributeTable,
    start,
    direction: str,
    conditions=None,
    copy_attrs_from: str | None = None,
) -> Hop | None:
    """Move an edge selection onto the nodes at its heads (``out``) or tails (``in``)."""
    if direction not in (IN, OUT):
        raise ValueError(f"direction must be 'in' or 'out', got {direction!r}")
    _check_copy_attr(edges, copy_attrs_from, "edge")

    end = "to" if direction == OUT else "from"
    selected = edges.df.filter(pl.col("id").is_in(list(start)))
    if selected.height == 0:
        return None

    candidates = nodes.df.filter(pl.col("id").is_in(selected.get_column(end).implode()))
    candidates = apply_conditions(candidates, conditions)
    if candidates.height == 0:
        return None

    keep = set(candidates.get_column("id").to_list())
    origins: dict[int, int] = {}
    for edge, dest in selected.select("id", end).iter_rows():
        if dest in keep and dest not in origins:
            origins[dest] = edge
    ids = tuple(origins)

    if copy_attrs_from is not None:
        nodes = _copy_values(nodes, edges, origins, copy_attrs_from)
    return Hop(NODE, ids, nodes, edges)
