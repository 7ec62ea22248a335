# test_conditions.py
import polars as pl
import pytest

from propnet.core.conditions import (
    And,
    Column,
    Compare,
    Literal,
    Match,
    Not,
    Or,
    apply_conditions,
    condition_mask,
    parse_condition,
)
from propnet.core.errors import InvalidCondition, TypeMismatch


@pytest.fixture
def df():
    return pl.DataFrame(
        {
            "id": [1, 2, 3, 4],
            "x": [1.0, None, 3.0, 4.0],
            "name": ["alpha", "beta", "gamma", "iota"],
            "num_text": ["1", "2", "3", "x"],
            "flag": [True, False, None, True],
        }
    )


def _ids(frame):
    return frame.get_column("id").to_list()


class TestParser:
    def test_precedence_and_binds_tighter_than_or(self):
        tree = parse_condition("x > 1 | x < 0 & flag")
        assert isinstance(tree, Or)
        assert isinstance(tree.right, And)

    def test_parentheses_and_negation(self):
        tree = parse_condition("!(name == 'beta')")
        assert tree == Not(Compare("==", Column("name"), Literal("beta")))

    def test_grepl_and_keywords(self):
        assert parse_condition("grepl('^i', name)") == Match("^i", Column("name"))
        assert parse_condition("x == NA") == Compare("==", Column("x"), Literal(None))
        assert parse_condition("flag == TRUE").right == Literal(True)

    def test_backtick_names(self):
        assert parse_condition("`my col` >= 2") == Compare(">=", Column("my col"), Literal(2))

    @pytest.mark.parametrize(
        "text", ["", "x >", "x > 1 )", "(x > 1", "x $ 1", "grepl(name, 'a')"]
    )
    def test_syntax_errors(self, text):
        with pytest.raises(InvalidCondition):
            parse_condition(text)


class TestEvaluation:
    def test_numeric_comparison_skips_missing(self, df):
        assert _ids(apply_conditions(df, "x > 0")) == [1, 3, 4]
        # a missing value satisfies neither a condition nor its negation
        assert _ids(apply_conditions(df, "!(x > 0)")) == []

    def test_text_equality_and_or(self, df):
        assert _ids(apply_conditions(df, "name == 'beta' | x >= 4")) == [2, 4]
        assert _ids(apply_conditions(df, "name != 'beta'")) == [1, 3, 4]

    def test_several_conditions_are_anded(self, df):
        assert _ids(apply_conditions(df, ["x > 0", "name != 'alpha'"])) == [3, 4]

    def test_grepl(self, df):
        assert _ids(apply_conditions(df, "grepl('^i...', name)")) == [4]
        assert _ids(apply_conditions(df, "grepl('^.e', name)")) == [2]

    def test_bare_boolean_column(self, df):
        assert _ids(apply_conditions(df, "flag")) == [1, 4]
        assert _ids(apply_conditions(df, "!flag")) == [2]

    def test_no_conditions_is_identity(self, df):
        assert apply_conditions(df, None).equals(df)
        assert apply_conditions(df, []).equals(df)

    def test_result_preserves_row_order(self, df):
        reversed_df = df.reverse()
        assert _ids(apply_conditions(reversed_df, "x > 0")) == [4, 3, 1]

    def test_condition_mask(self, df):
        assert condition_mask(df, "x > 2").to_list() == [False, False, True, True]

    def test_filtering_twice_is_idempotent(self, df):
        once = apply_conditions(df, "x >= 3")
        assert apply_conditions(once, "x >= 3").equals(once)


class TestErrors:
    def test_unknown_column(self, df):
        with pytest.raises(InvalidCondition):
            apply_conditions(df, "nope > 1")
        with pytest.raises(InvalidCondition):
            apply_conditions(df, "type == b")

    def test_non_string_condition(self, df):
        with pytest.raises(InvalidCondition):
            apply_conditions(df, 5)
        with pytest.raises(InvalidCondition):
            apply_conditions(df, ["x > 1", 3])

    def test_non_boolean_condition(self, df):
        with pytest.raises(InvalidCondition):
            apply_conditions(df, "x")

    def test_numeric_text_is_coerced(self, df):
        assert _ids(apply_conditions(df.head(3), "num_text > 1")) == [2, 3]

    def test_non_numeric_text_mismatch(self, df):
        with pytest.raises(TypeMismatch):
            apply_conditions(df, "num_text > 1")
        with pytest.raises(TypeMismatch):
            apply_conditions(df, "x > 'abc'")

    def test_boolean_against_text_mismatch(self, df):
        with pytest.raises(TypeMismatch):
            apply_conditions(df, "flag == 'yes'")

    def test_errors_are_builtin_subclasses(self, df):
        with pytest.raises(ValueError):
            apply_conditions(df, "x >")
        with pytest.raises(TypeError):
            apply_conditions(df, "num_text > 1")
