from __future__ import annotations

from dataclasses import dataclass

import polars as pl

from .errors import UnknownAttribute
from .table import AttributeTable

MODES = {
    "numeric": pl.Float64,
    "text": pl.Utf8,
    "character": pl.Utf8,
}


@dataclass(frozen=True)
class AttributeCache:
    """Values of one attribute taken from a selection.

    Records which attribute and which kind of selection (``"node"`` or
    ``"edge"``) produced the values, and the coercion ``mode`` if any.
    """

    values: tuple
    attr: str
    kind: str
    mode: str | None = None

    def to_list(self) -> list:
        return list(self.values)

    def to_series(self) -> pl.Series:
        return pl.Series(self.attr, self.to_list(), strict=False)

    def __len__(self) -> int:
        return len(self.values)


def extract_attribute(
    table: AttributeTable, ids, attr: str, kind: str, mode: str | None = None
) -> AttributeCache:
    """Pull ``attr`` for ``ids`` out of ``table`` in table row order.

    With ``mode`` set, every value is cast; values that cannot be cast become
    None rather than raising.

    Raises
    ------
    UnknownAttribute
        If ``attr`` is a reserved column or absent from the table.
    ValueError
        For an unrecognised ``mode``.

    """
    if mode is not None and mode not in MODES:
        raise ValueError(f"mode must be one of {sorted(MODES)}, got {mode!r}")
    if attr in table.reserved or not table.has_column(attr):
        raise UnknownAttribute(f"'{attr}' is not a valid {kind} attribute")

    values = table.rows_for(ids).series(attr)
    if mode is not None:
        values = values.cast(MODES[mode], strict=False)
    return AttributeCache(tuple(values.to_list()), attr, kind, mode)
