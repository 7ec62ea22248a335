"""Condition strings: parsing and evaluation against attribute tables.

A condition is a small boolean expression over the columns of one table::

    value > 3
    type == 'b' | values > 6.0
    !(rel == 'A') & weight <= 2.5
    grepl('^i...', label)

Grammar
-------
::

    expr    := and (("|" | "||") and)*
    and     := unary (("&" | "&&") unary)*
    unary   := "!" unary | primary
    primary := "(" expr ")"
             | "grepl" "(" STRING "," NAME ")"
             | operand [("==" | "!=" | "<" | "<=" | ">" | ">=") operand]
    operand := NAME | `quoted name` | NUMBER | STRING | TRUE | FALSE | NA

Quoted text (single or double quotes) is a literal; an unquoted name is always
a column reference, so ``type == b`` compares the ``type`` and ``b`` columns.
A bare operand must be a boolean column or ``TRUE``/``FALSE``.

Semantics
---------
- A row whose referenced value is missing never satisfies the condition.
- Unknown columns, syntax errors and bad regular expressions raise
  :class:`~propnet.core.errors.InvalidCondition`.
- Comparing a number with text only works if the text parses as a number;
  otherwise :class:`~propnet.core.errors.TypeMismatch` is raised.
- Several conditions passed together are applied one after another, i.e.
  combined with AND.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Union

import polars as pl

from .errors import InvalidCondition, TypeMismatch
from .table import pl_dtype_for_value

# AST


@dataclass(frozen=True)
class Column:
    name: str


@dataclass(frozen=True)
class Literal:
    value: Any


@dataclass(frozen=True)
class Compare:
    op: str
    left: Union[Column, Literal]
    right: Union[Column, Literal]


@dataclass(frozen=True)
class Match:
    pattern: str
    column: Column


@dataclass(frozen=True)
class Not:
    operand: Node


@dataclass(frozen=True)
class And:
    left: Node
    right: Node


@dataclass(frozen=True)
class Or:
    left: Node
    right: Node


Node = Union[Column, Literal, Compare, Match, Not, And, Or]

_COMPARISONS = ("==", "!=", "<=", ">=", "<", ">")
_KEYWORDS = {"TRUE": True, "FALSE": False, "NA": None}

_TOKEN_RE = re.compile(
    r"""
    (?P<ws>\s+)
    |(?P<number>-?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)
    |(?P<string>'(?:[^'\\]|\\.)*'|"(?:[^"\\]|\\.)*")
    |(?P<op>==|!=|<=|>=|&&|\|\||[<>!&|(),])
    |(?P<name>`[^`]+`|[A-Za-z_.][A-Za-z0-9_.]*)
    """,
    re.VERBOSE,
)


@dataclass(frozen=True)
class _Token:
    kind: str
    text: str
    pos: int


def _unescape(quoted: str) -> str:
    body = quoted[1:-1]
    return re.sub(r"\\(.)", r"\1", body)


def tokenize(text: str) -> list[_Token]:
    tokens = []
    pos = 0
    while pos < len(text):
        m = _TOKEN_RE.match(text, pos)
        if m is None:
            raise InvalidCondition(f"Unexpected character {text[pos]!r} at {pos} in {text!r}")
        kind = m.lastgroup
        if kind != "ws":
            tokens.append(_Token(kind, m.group(kind), pos))
        pos = m.end()
    return tokens


class _Parser:
    def __init__(self, text: str):
        self.text = text
        self.tokens = tokenize(text)
        self.i = 0

    def _peek(self):
        return self.tokens[self.i] if self.i < len(self.tokens) else None

    def _error(self, msg: str):
        tok = self._peek()
        where = f"at {tok.pos}" if tok else "at end"
        return InvalidCondition(f"{msg} {where} in condition {self.text!r}")

    def _accept(self, *ops: str) -> _Token | None:
        tok = self._peek()
        if tok is not None and tok.kind == "op" and tok.text in ops:
            self.i += 1
            return tok
        return None

    def _expect(self, op: str) -> None:
        if self._accept(op) is None:
            raise self._error(f"Expected '{op}'")

    def parse(self) -> Node:
        if not self.tokens:
            raise InvalidCondition("Empty condition")
        node = self._or()
        if self._peek() is not None:
            raise self._error("Unexpected token")
        return node

    def _or(self) -> Node:
        node = self._and()
        while self._accept("|", "||"):
            node = Or(node, self._and())
        return node

    def _and(self) -> Node:
        node = self._unary()
        while self._accept("&", "&&"):
            node = And(node, self._unary())
        return node

    def _unary(self) -> Node:
        if self._accept("!"):
            return Not(self._unary())
        return self._primary()

    def _primary(self) -> Node:
        if self._accept("("):
            node = self._or()
            self._expect(")")
            return node
        tok = self._peek()
        if tok is not None and tok.kind == "name" and tok.text == "grepl":
            return self._grepl()
        left = self._operand()
        tok = self._peek()
        if tok is not None and tok.kind == "op" and tok.text in _COMPARISONS:
            self.i += 1
            return Compare(tok.text, left, self._operand())
        return left

    def _grepl(self) -> Match:
        self.i += 1
        self._expect("(")
        tok = self._peek()
        if tok is None or tok.kind != "string":
            raise self._error("grepl() expects a quoted pattern")
        self.i += 1
        pattern = _unescape(tok.text)
        self._expect(",")
        column = self._operand()
        if not isinstance(column, Column):
            raise self._error("grepl() expects a column name")
        self._expect(")")
        return Match(pattern, column)

    def _operand(self) -> Union[Column, Literal]:
        tok = self._peek()
        if tok is None:
            raise self._error("Expected a value or column name")
        self.i += 1
        if tok.kind == "number":
            text = tok.text
            is_int = re.fullmatch(r"-?\d+", text) is not None
            return Literal(int(text) if is_int else float(text))
        if tok.kind == "string":
            return Literal(_unescape(tok.text))
        if tok.kind == "name":
            if tok.text in _KEYWORDS:
                return Literal(_KEYWORDS[tok.text])
            name = tok.text[1:-1] if tok.text.startswith("`") else tok.text
            return Column(name)
        self.i -= 1
        raise self._error(f"Unexpected '{tok.text}'")


@lru_cache(maxsize=512)
def parse_condition(text: str) -> Node:
    """Parse ``text`` into an expression tree (memoized per string)."""
    if not isinstance(text, str):
        raise InvalidCondition(f"Conditions must be strings, got {type(text).__name__}")
    return _Parser(text).parse()


# Compilation to polars expressions


def _category(dtype) -> str:
    if dtype == pl.Null:
        return "null"
    if dtype == pl.Boolean:
        return "bool"
    if dtype.is_numeric():
        return "num"
    if dtype in (pl.Utf8, pl.Categorical) or dtype == pl.Enum:
        return "text"
    return "other"


class _Compiler:
    """Resolve an expression tree against one frame's schema."""

    def __init__(self, df: pl.DataFrame, text: str):
        self.df = df
        self.schema = df.schema
        self.text = text

    def _column_dtype(self, col: Column):
        if col.name not in self.schema:
            raise InvalidCondition(
                f"Unknown attribute '{col.name}' in condition {self.text!r}"
            )
        return self.schema[col.name]

    def _operand(self, node):
        if isinstance(node, Column):
            return pl.col(node.name), self._column_dtype(node)
        if node.value is None:
            return pl.lit(None), pl.Null
        return pl.lit(node.value), pl_dtype_for_value(node.value)

    def _as_number(self, node, expr):
        """Numeric view of a text operand, or TypeMismatch."""
        if isinstance(node, Literal):
            try:
                return pl.lit(float(node.value))
            except ValueError:
                raise TypeMismatch(
                    f"Cannot compare text {node.value!r} numerically in {self.text!r}"
                ) from None
        s = self.df.get_column(node.name).cast(pl.Utf8)
        coerced = s.cast(pl.Float64, strict=False)
        if coerced.null_count() > s.null_count():
            raise TypeMismatch(
                f"Attribute '{node.name}' holds text that is not numeric in {self.text!r}"
            )
        return expr.cast(pl.Utf8).cast(pl.Float64, strict=False)

    def compile(self, node) -> pl.Expr:
        if isinstance(node, Or):
            return self.compile(node.left) | self.compile(node.right)
        if isinstance(node, And):
            return self.compile(node.left) & self.compile(node.right)
        if isinstance(node, Not):
            return ~self.compile(node.operand)
        if isinstance(node, Match):
            self._column_dtype(node.column)
            return pl.col(node.column.name).cast(pl.Utf8).str.contains(node.pattern)
        if isinstance(node, Compare):
            return self._compare(node)
        # bare operand
        expr, dtype = self._operand(node)
        if isinstance(node, Literal) and isinstance(node.value, bool):
            return expr
        if isinstance(node, Column) and dtype in (pl.Boolean, pl.Null):
            return expr.cast(pl.Boolean)
        raise InvalidCondition(f"Condition {self.text!r} does not evaluate to true/false")

    def _compare(self, node: Compare) -> pl.Expr:
        left, ldt = self._operand(node.left)
        right, rdt = self._operand(node.right)
        lcat, rcat = _category(ldt), _category(rdt)

        if "null" in (lcat, rcat):
            return pl.lit(None, dtype=pl.Boolean)
        if lcat == "num" and rcat == "text":
            right = self._as_number(node.right, right)
        elif lcat == "text" and rcat == "num":
            left = self._as_number(node.left, left)
        elif lcat == "bool" and rcat == "num":
            left = left.cast(pl.Float64)
        elif lcat == "num" and rcat == "bool":
            right = right.cast(pl.Float64)
        elif {lcat, rcat} == {"bool", "text"}:
            raise TypeMismatch(f"Cannot compare true/false with text in {self.text!r}")
        elif lcat == "text" and rcat == "text":
            left, right = left.cast(pl.Utf8), right.cast(pl.Utf8)

        op = node.op
        if op == "==":
            return left == right
        if op == "!=":
            return left != right
        if op == "<":
            return left < right
        if op == "<=":
            return left <= right
        if op == ">":
            return left > right
        return left >= right


def compile_condition(df: pl.DataFrame, text: str) -> pl.Expr:
    """Compile one condition string into a polars boolean expression for ``df``."""
    return _Compiler(df, text).compile(parse_condition(text)).fill_null(False)


def normalize_conditions(conditions) -> list[str]:
    if conditions is None:
        return []
    if isinstance(conditions, str):
        return [conditions]
    if isinstance(conditions, Iterable):
        out = list(conditions)
        for c in out:
            if not isinstance(c, str):
                raise InvalidCondition(f"Conditions must be strings, got {type(c).__name__}")
        return out
    raise InvalidCondition(f"Conditions must be strings, got {type(conditions).__name__}")


def condition_mask(df: pl.DataFrame, text: str) -> pl.Series:
    """Boolean mask (one entry per row of ``df``) for a single condition."""
    expr = compile_condition(df, text)
    try:
        return df.select(expr.alias("mask")).to_series()
    except pl.exceptions.PolarsError as e:
        raise InvalidCondition(f"Cannot evaluate condition {text!r}: {e}") from e


def apply_conditions(df: pl.DataFrame, conditions) -> pl.DataFrame:
    """Filter ``df`` by each condition in turn; row order is preserved.

    Parameters
    ----------
    df : polars.DataFrame
        Frame whose columns the conditions may reference.
    conditions : str | Iterable[str] | None
        One condition, several (combined with AND), or None for no filtering.

    """
    for text in normalize_conditions(conditions):
        expr = compile_condition(df, text)
        try:
            df = df.filter(expr)
        except pl.exceptions.PolarsError as e:
            raise InvalidCondition(f"Cannot evaluate condition {text!r}: {e}") from e
    return df
