from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from ..utils import unique_iter
from .errors import NoActiveSelection, WrongSelectionKind

NODE = "node"
EDGE = "edge"

SET_OPS = ("union", "intersect", "difference")


@dataclass(frozen=True)
class Selection:
    """The active set of node ids *or* edge ids of a graph.

    ``kind`` is ``None`` when nothing is selected, otherwise ``"node"`` or
    ``"edge"``. ``ids`` keeps discovery order without duplicates. A selection
    with a kind and no ids is a valid (empty) selection, distinct from ``None``.
    """

    kind: str | None = None
    ids: tuple[int, ...] = ()

    def __post_init__(self):
        if self.kind not in (None, NODE, EDGE):
            raise ValueError(f"kind must be None, 'node' or 'edge', got {self.kind!r}")
        if self.kind is None and self.ids:
            raise ValueError("An empty selection cannot hold ids")
        object.__setattr__(self, "ids", tuple(unique_iter(self.ids)))

    @classmethod
    def of_nodes(cls, ids: Iterable[int]) -> Selection:
        return cls(NODE, tuple(ids))

    @classmethod
    def of_edges(cls, ids: Iterable[int]) -> Selection:
        return cls(EDGE, tuple(ids))

    @property
    def is_empty(self) -> bool:
        return self.kind is None

    @property
    def has_nodes(self) -> bool:
        return self.kind == NODE

    @property
    def has_edges(self) -> bool:
        return self.kind == EDGE

    def __len__(self) -> int:
        return len(self.ids)

    def __contains__(self, item) -> bool:
        return item in self.ids

    def require(self, kind: str) -> tuple[int, ...]:
        """Return the selected ids, insisting on a non-empty selection of ``kind``.

        Raises
        ------
        WrongSelectionKind
            If the other kind is selected.
        NoActiveSelection
            If nothing (or an empty set) is selected.

        """
        if self.kind is not None and self.kind != kind:
            raise WrongSelectionKind(f"Expected a selection of {kind}s, found {self.kind}s")
        if self.kind is None or not self.ids:
            raise NoActiveSelection(f"There is no selection of {kind}s available")
        return self.ids

    def combine(self, kind: str, ids: Iterable[int], set_op: str = "union") -> Selection:
        """Merge ``ids`` into this selection.

        A selection of the other kind is discarded first, so the result holds
        only ``kind``.
        """
        if set_op not in SET_OPS:
            raise ValueError(f"set_op must be one of {SET_OPS}, got {set_op!r}")
        ids = list(ids)
        prior = self.ids if self.kind == kind else ()
        if set_op == "union":
            merged = [*prior, *ids]
        elif set_op == "intersect":
            keep = set(ids)
            merged = [i for i in prior if i in keep]
        else:
            drop = set(ids)
            merged = [i for i in prior if i not in drop]
        return Selection(kind, tuple(merged))

    def prune(self, kind: str, removed: Iterable[int]) -> Selection:
        """Drop deleted identities; a selection emptied by pruning becomes empty."""
        if self.kind != kind:
            return self
        removed = set(removed)
        remaining = tuple(i for i in self.ids if i not in removed)
        if len(remaining) == len(self.ids):
            return self
        if not remaining:
            return EMPTY
        return Selection(kind, remaining)


EMPTY = Selection()
