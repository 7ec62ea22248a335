from __future__ import annotations

import time
from dataclasses import asdict, dataclass
from functools import wraps

import polars as pl

from ..utils import utcnow_iso


@dataclass(frozen=True)
class LogEntry:
    """One mutation of a graph.

    ``duration`` is in seconds, measured with a monotonic clock; ``nodes`` and
    ``edges`` are the table sizes after the mutation.
    """

    version: int
    op: str
    ts_utc: str
    duration: float
    nodes: int
    edges: int


class ActionLog:
    """Append-only, immutable sequence of :class:`LogEntry`.

    ``append`` returns a new log; versions are always ``1..N`` in call order.
    """

    __slots__ = ("_entries",)

    def __init__(self, entries=()):
        self._entries = tuple(entries)

    def append(self, op: str, ts_utc: str, duration: float, nodes: int, edges: int) -> ActionLog:
        entry = LogEntry(
            version=len(self._entries) + 1,
            op=op,
            ts_utc=ts_utc,
            duration=duration,
            nodes=nodes,
            edges=edges,
        )
        return ActionLog((*self._entries, entry))

    @property
    def version(self) -> int:
        return len(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self):
        return iter(self._entries)

    def __getitem__(self, i):
        return self._entries[i]

    def __repr__(self) -> str:
        return f"ActionLog(version={self.version})"

    def to_dicts(self) -> list[dict]:
        return [asdict(e) for e in self._entries]

    def to_df(self) -> pl.DataFrame:
        schema = {
            "version": pl.Int64,
            "op": pl.Utf8,
            "ts_utc": pl.Utf8,
            "duration": pl.Float64,
            "nodes": pl.Int64,
            "edges": pl.Int64,
        }
        return pl.DataFrame(self.to_dicts(), schema=schema)


def log_mutation(name=None):
    """Decorate a ``Graph`` operator so the graph it returns carries a log entry.

    The wrapped operator must return a graph. Returning the receiver itself
    means nothing changed, and nothing is logged.
    """

    def deco(fn):
        op = name or fn.__name__

        @wraps(fn)
        def wrapper(self, *args, **kwargs):
            ts = utcnow_iso()
            t0 = time.perf_counter()
            result = fn(self, *args, **kwargs)
            if result is self:
                return result
            return result._record(op, ts, time.perf_counter() - t0)

        return wrapper

    return deco
