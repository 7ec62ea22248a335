# test_table.py
import warnings

import polars as pl
import pytest

from propnet.core.errors import InvalidGraph, LengthMismatch, NoSuchIdentity, UnknownAttribute
from propnet.core.table import EDGE_RESERVED, NODE_RESERVED, AttributeTable


@pytest.fixture
def table():
    df = pl.DataFrame({"id": [1, 2, 3], "type": ["a", "b", "a"], "weight": [1, 2, 3]})
    return AttributeTable(df, NODE_RESERVED)


class TestAttributeTable:
    """Tests for the Polars-backed attribute table."""

    def test_reserved_columns_first_and_int64(self):
        df = pl.DataFrame({"rel": ["x"], "to": [2], "from": [1], "id": [7]})
        t = AttributeTable(df, EDGE_RESERVED)
        assert t.columns[:3] == ["id", "from", "to"]
        assert t.df.schema["from"] == pl.Int64
        assert t.attribute_names == ["rel"]
        assert t.to_frame().columns == t.columns

    def test_rejects_malformed_tables(self):
        with pytest.raises(InvalidGraph):
            AttributeTable(pl.DataFrame({"type": ["a"]}), NODE_RESERVED)
        with pytest.raises(InvalidGraph):
            AttributeTable(pl.DataFrame({"id": ["a", "b"]}), NODE_RESERVED)
        with pytest.raises(InvalidGraph):
            AttributeTable(pl.DataFrame({"id": [1, 1]}), NODE_RESERVED)
        with pytest.raises(InvalidGraph):
            AttributeTable(pl.DataFrame({"id": [0, 1]}), NODE_RESERVED)
        with pytest.raises(InvalidGraph):
            AttributeTable({"id": [1]}, NODE_RESERVED)

    def test_get_column(self, table):
        assert table.get_column("type") == ["a", "b", "a"]
        with pytest.raises(UnknownAttribute):
            table.get_column("nope")
        # UnknownAttribute is still a KeyError for plain callers
        with pytest.raises(KeyError):
            table.get_column("nope")

    def test_filter_rows_preserves_order(self, table):
        out = table.filter_rows([True, False, True])
        assert out.ids == [1, 3]
        out = table.filter_rows(pl.col("weight") >= 2)
        assert out.ids == [2, 3]
        with pytest.raises(LengthMismatch):
            table.filter_rows([True])

    def test_add_or_overwrite_column(self, table):
        t = table.add_or_overwrite_column("score", [0.5, None, 1.5])
        assert t.columns[-1] == "score"
        assert t.get_column("score") == [0.5, None, 1.5]
        t = t.add_or_overwrite_column("type", ["z", "z", "z"])
        assert t.get_column("type") == ["z", "z", "z"]
        # receiver unchanged
        assert "score" not in table.columns
        with pytest.raises(LengthMismatch):
            table.add_or_overwrite_column("score", [1, 2])
        with pytest.raises(InvalidGraph):
            table.add_or_overwrite_column("id", [4, 5, 6])

    def test_set_values_creates_column_with_nulls(self, table):
        t = table.set_values("color", [2], ["red"])
        assert t.get_column("color") == [None, "red", None]
        assert t.columns[-1] == "color"

    def test_set_values_scalar_and_upcast(self, table):
        t = table.set_values("weight", [1, 3], 9)
        assert t.get_column("weight") == [9, 2, 9]
        t = table.set_values("weight", [2], 2.5)
        assert t.df.schema["weight"] == pl.Float64
        assert t.get_column("weight") == [1.0, 2.5, 3.0]
        t = table.set_values("weight", [1], "heavy")  # from the Int64 column
        assert t.df.schema["weight"] == pl.Utf8
        assert t.get_column("weight") == ["heavy", "2", "3"]

    def test_set_values_emits_no_deprecation_warnings(self, table):
        with warnings.catch_warnings():
            warnings.simplefilter("error", DeprecationWarning)
            t = table.set_values("weight", [3, 1], [30, 10])
        assert t.get_column("weight") == [10, 2, 30]

    def test_set_values_errors(self, table):
        with pytest.raises(NoSuchIdentity):
            table.set_values("type", [4], "c")
        with pytest.raises(LengthMismatch):
            table.set_values("type", [1, 2], ["c"])
        with pytest.raises(ValueError):
            table.set_values("type", [1, 1], ["c", "d"])

    def test_append_rows_widens_schema(self, table):
        t = table.append_rows([{"id": 4, "type": "c", "extra": True}])
        assert t.ids == [1, 2, 3, 4]
        assert t.get_column("extra") == [None, None, None, True]
        with pytest.raises(InvalidGraph):
            table.append_rows([{"id": 1}])

    def test_rename_and_drop(self, table):
        t = table.rename_column("weight", "w")
        assert "w" in t.columns and "weight" not in t.columns
        with pytest.raises(UnknownAttribute):
            table.rename_column("nope", "x")
        with pytest.raises(InvalidGraph):
            table.rename_column("type", "weight")
        assert "type" not in table.drop_column("type").columns
        with pytest.raises(InvalidGraph):
            table.drop_column("id")
