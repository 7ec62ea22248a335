from __future__ import annotations

from collections.abc import Iterable, Sequence

import polars as pl

from .errors import InvalidGraph, LengthMismatch, NoSuchIdentity, UnknownAttribute

NODE_RESERVED = ("id",)
EDGE_RESERVED = ("id", "from", "to")

NODE_SCHEMA = {"id": pl.Int64, "type": pl.Utf8, "label": pl.Utf8}
EDGE_SCHEMA = {"id": pl.Int64, "from": pl.Int64, "to": pl.Int64, "rel": pl.Utf8}

_NUMERIC = {pl.Int64, pl.Float64}


def pl_dtype_for_value(v):
    """Infer an appropriate Polars dtype for a Python scalar.

    Returns one of ``pl.Null``, ``pl.Boolean``, ``pl.Int64``, ``pl.Float64`` or
    ``pl.Utf8``. Anything that is not a number or a boolean is stored as text.
    """
    if v is None:
        return pl.Null
    if isinstance(v, bool):
        return pl.Boolean
    if isinstance(v, int):
        return pl.Int64
    if isinstance(v, float):
        return pl.Float64
    return pl.Utf8


def dtype_for_values(values) -> pl.DataType:
    """Smallest dtype able to hold every value of ``values``."""
    if isinstance(values, pl.Series):
        return values.dtype
    seen = {pl_dtype_for_value(v) for v in values} - {pl.Null}
    if not seen:
        return pl.Null
    if len(seen) == 1:
        return seen.pop()
    if seen <= _NUMERIC:
        return pl.Float64
    return pl.Utf8


def resolve_dtype(current, incoming):
    """Common dtype for an existing column and incoming values.

    Null on either side yields the other; ints and floats meet at Float64;
    anything else that conflicts is upcast to Utf8.
    """
    if current is None or current == pl.Null:
        return incoming
    if incoming == pl.Null or incoming == current:
        return current
    if current.is_numeric() and incoming.is_numeric():
        return pl.Float64
    return pl.Utf8


def to_series(name: str, values, dtype) -> pl.Series:
    if isinstance(values, pl.Series):
        return values.cast(dtype, strict=False).alias(name)
    values = list(values)
    if dtype == pl.Utf8:
        values = [None if v is None else str(v) for v in values]
    return pl.Series(name, values, dtype=dtype, strict=False)


class AttributeTable:
    """Columnar record store for nodes or edges.

    A thin wrapper around an immutable ``polars.DataFrame``. The first columns
    are *reserved*: ``id`` for nodes, ``id``/``from``/``to`` for edges. They
    are always Int64, never null, and the ``id`` column is unique. Every other
    column is an attribute, addressed by name and kept in insertion order.

    All methods return a new table; the receiver is never modified.

    Parameters
    ----------
    df : polars.DataFrame
        Backing frame. Reserved columns are moved to the front and cast to Int64.
    reserved : tuple[str, ...]
        Names of the fixed-position integer columns.

    Raises
    ------
    InvalidGraph
        If a reserved column is missing, not integer-typed, holds nulls or
        non-positive ids, or if ``id`` has duplicates.

    """

    def __init__(self, df: pl.DataFrame, reserved: tuple[str, ...] = NODE_RESERVED):
        if not isinstance(df, pl.DataFrame):
            raise InvalidGraph(f"Expected a polars DataFrame, got {type(df).__name__}")
        missing = [c for c in reserved if c not in df.columns]
        if missing:
            raise InvalidGraph(f"Table is missing reserved column(s): {missing}")
        for c in reserved:
            dtype = df.schema[c]
            if not (dtype.is_integer() or dtype == pl.Null):
                raise InvalidGraph(f"Reserved column '{c}' must be integer-typed, got {dtype}")
            if df.get_column(c).null_count():
                raise InvalidGraph(f"Reserved column '{c}' contains missing values")
        df = df.with_columns([pl.col(c).cast(pl.Int64) for c in reserved])
        rest = [c for c in df.columns if c not in reserved]
        df = df.select([*reserved, *rest])

        ids = df.get_column("id")
        if ids.n_unique() != df.height:
            raise InvalidGraph("Identity column 'id' contains duplicates")
        if df.height and ids.min() < 1:
            raise InvalidGraph("Identities must be positive integers")

        self._df = df
        self._reserved = tuple(reserved)

    @classmethod
    def empty(cls, schema: dict, reserved: tuple[str, ...]) -> AttributeTable:
        return cls(pl.DataFrame(schema=schema), reserved)

    def _derive(self, df: pl.DataFrame) -> AttributeTable:
        # skip revalidation; callers only touch attribute columns or drop rows
        new = object.__new__(AttributeTable)
        new._df = df
        new._reserved = self._reserved
        return new

    # Introspection

    @property
    def df(self) -> pl.DataFrame:
        return self._df

    def to_frame(self) -> pl.DataFrame:
        return self._df

    @property
    def reserved(self) -> tuple[str, ...]:
        return self._reserved

    @property
    def height(self) -> int:
        return self._df.height

    @property
    def columns(self) -> list[str]:
        return list(self._df.columns)

    @property
    def attribute_names(self) -> list[str]:
        """Non-reserved column names in insertion order."""
        return [c for c in self._df.columns if c not in self._reserved]

    @property
    def ids(self) -> list[int]:
        return self._df.get_column("id").to_list()

    def has_column(self, name: str) -> bool:
        return name in self._df.columns

    def has_ids(self, ids: Iterable[int]) -> bool:
        return not self.missing_ids(ids)

    def missing_ids(self, ids: Iterable[int]) -> list[int]:
        known = set(self.ids)
        return [i for i in ids if i not in known]

    def __len__(self) -> int:
        return self._df.height

    def __repr__(self) -> str:
        return f"AttributeTable(rows={self.height}, columns={self.columns})"

    # Column access

    def series(self, name: str) -> pl.Series:
        if name not in self._df.columns:
            raise UnknownAttribute(f"Unknown attribute '{name}'")
        return self._df.get_column(name)

    def get_column(self, name: str) -> list:
        """Values of column ``name`` in row order.

        Raises
        ------
        UnknownAttribute
            If ``name`` is not a column of this table.

        """
        return self.series(name).to_list()

    # Row operations

    def filter_rows(self, predicate) -> AttributeTable:
        """Keep rows where ``predicate`` is true; row order is preserved.

        ``predicate`` may be a polars expression or a boolean mask of the same
        length as the table. Null mask entries count as false.
        """
        if isinstance(predicate, pl.Expr):
            return self._derive(self._df.filter(predicate.fill_null(False)))
        mask = predicate if isinstance(predicate, pl.Series) else pl.Series(list(predicate))
        if mask.len() != self.height:
            raise LengthMismatch(f"Mask has {mask.len()} entries for {self.height} rows")
        return self._derive(self._df.filter(mask.cast(pl.Boolean).fill_null(False)))

    def rows_for(self, ids: Iterable[int]) -> AttributeTable:
        """Rows whose id is in ``ids``, in table order."""
        return self._derive(self._df.filter(pl.col("id").is_in(list(ids))))

    def drop_rows(self, ids: Iterable[int]) -> AttributeTable:
        return self._derive(self._df.filter(~pl.col("id").is_in(list(ids))))

    def append_rows(self, rows: Sequence[dict]) -> AttributeTable:
        """Append records, widening the schema for new attribute names.

        Columns absent from a record are null; dtype conflicts are resolved
        with :func:`resolve_dtype`.
        """
        if not rows:
            return self
        names = list(self._df.columns)
        for row in rows:
            for k in row:
                if k not in names:
                    names.append(k)

        schema = self._df.schema
        columns = []
        for name in names:
            values = [row.get(name) for row in rows]
            dtype = resolve_dtype(schema.get(name), dtype_for_values(values))
            columns.append(to_series(name, values, dtype))
        incoming = pl.DataFrame(columns)

        df = self._df
        for name in names:
            target = incoming.schema[name]
            if name not in df.columns:
                df = df.with_columns(pl.lit(None).cast(target).alias(name))
            elif df.schema[name] != target:
                df = df.with_columns(pl.col(name).cast(target, strict=False))
        incoming = incoming.with_columns(
            [pl.col(c).cast(df.schema[c], strict=False) for c in names]
        )
        return AttributeTable(pl.concat([df, incoming.select(df.columns)]), self._reserved)

    # Column writes

    def add_or_overwrite_column(self, name: str, values) -> AttributeTable:
        """Set a whole column, creating it at the end if it does not exist.

        Raises
        ------
        LengthMismatch
            If ``len(values)`` differs from the number of rows.
        InvalidGraph
            If ``name`` is a reserved column.

        """
        if name in self._reserved:
            raise InvalidGraph(f"Column '{name}' is reserved and cannot be overwritten")
        if not isinstance(values, pl.Series):
            values = list(values)
        if len(values) != self.height:
            raise LengthMismatch(
                f"Column '{name}' needs {self.height} values, got {len(values)}"
            )
        series = to_series(name, values, dtype_for_values(values))
        return self._derive(self._df.with_columns(series))

    def set_values(self, name: str, ids: Sequence[int], values) -> AttributeTable:
        """Upsert values of column ``name`` for the rows identified by ``ids``.

        ``values`` is either one scalar applied to every id or a sequence aligned
        with ``ids``. Other rows keep their value; a new column is null there.

        Raises
        ------
        NoSuchIdentity
            If any id is not in the table.
        LengthMismatch
            If ``values`` is a sequence of a different length than ``ids``.

        """
        if name in self._reserved:
            raise InvalidGraph(f"Column '{name}' is reserved and cannot be overwritten")
        ids = list(ids)
        missing = self.missing_ids(ids)
        if missing:
            raise NoSuchIdentity(f"Unknown id(s): {missing}")
        if len(set(ids)) != len(ids):
            raise ValueError("Each id may receive only one value")
        if isinstance(values, (str, bytes)) or not isinstance(values, (Sequence, pl.Series)):
            values = [values] * len(ids)
        elif len(values) != len(ids):
            raise LengthMismatch(f"Got {len(values)} values for {len(ids)} ids")

        current = self._df.schema.get(name)
        target = resolve_dtype(current, dtype_for_values(values))
        new_values = to_series(name, values, target)

        df = self._df
        if current is None:
            df = df.with_columns(pl.lit(None).cast(target).alias(name))
        elif current != target:
            df = df.with_columns(pl.col(name).cast(target, strict=False))
        if not ids:
            return self._derive(df)

        key = pl.Series("id", ids, dtype=pl.Int64)
        df = df.with_columns(
            pl.when(pl.col("id").is_in(key.implode()))
            .then(pl.col("id").replace_strict(key, new_values, default=None, return_dtype=target))
            .otherwise(pl.col(name))
            .alias(name)
        )
        return self._derive(df)

    def rename_column(self, old: str, new: str) -> AttributeTable:
        if old in self._reserved or new in self._reserved:
            raise InvalidGraph("Reserved columns cannot be renamed")
        if old not in self._df.columns:
            raise UnknownAttribute(f"Unknown attribute '{old}'")
        if new in self._df.columns:
            raise InvalidGraph(f"Column '{new}' already exists")
        return self._derive(self._df.rename({old: new}))

    def drop_column(self, name: str) -> AttributeTable:
        if name in self._reserved:
            raise InvalidGraph(f"Column '{name}' is reserved and cannot be dropped")
        if name not in self._df.columns:
            raise UnknownAttribute(f"Unknown attribute '{name}'")
        return self._derive(self._df.drop(name))
