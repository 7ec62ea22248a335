"""Exception taxonomy.

Every error subclasses the builtin the rest of the package would otherwise
raise (``KeyError`` for lookups, ``ValueError`` for malformed input, ...), so
``except KeyError`` keeps working for callers that do not import these.
"""


class PropnetError(Exception):
    """Base class for all propnet errors."""


class InvalidGraph(PropnetError, ValueError):
    """Malformed or missing node/edge table."""


class NoActiveSelection(PropnetError, RuntimeError):
    """A selection-consuming operator was called without a usable selection."""


class WrongSelectionKind(PropnetError, RuntimeError):
    """The active selection holds edges where nodes are needed, or vice versa."""


class NoSuchIdentity(PropnetError, KeyError):
    """A node or edge id is not present in its table."""


class UnknownAttribute(PropnetError, KeyError):
    """An attribute name is not a column of the target table."""


class InvalidCondition(PropnetError, ValueError):
    """A condition string cannot be parsed or references unknown columns."""


class TypeMismatch(PropnetError, TypeError):
    """A numeric comparison was applied to text that cannot be coerced."""


class LengthMismatch(PropnetError, ValueError):
    """A column of values does not line up with the table rows."""


__all__ = [
    "PropnetError",
    "InvalidGraph",
    "NoActiveSelection",
    "WrongSelectionKind",
    "NoSuchIdentity",
    "UnknownAttribute",
    "InvalidCondition",
    "TypeMismatch",
    "LengthMismatch",
]
