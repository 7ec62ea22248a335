from collections.abc import Callable, Iterable
from datetime import UTC, datetime
from itertools import filterfalse
from numbers import Integral
from typing import Any, TypeVar

T = TypeVar("T")


def unique_iter(iterable: Iterable[T], key: Callable[[T], Any] | None = None) -> Iterable[T]:
    # Based on https://iteration-utilities.readthedocs.io/en/latest/generated/unique_everseen.html
    seen: set[Any] = set()
    seen_add = seen.add
    if key is None:
        for element in filterfalse(seen.__contains__, iterable):
            seen_add(element)
            yield element
    else:
        for element in iterable:
            k = key(element)
            if k not in seen:
                seen_add(k)
                yield element


def utcnow_iso() -> str:
    return datetime.now(UTC).isoformat(timespec="microseconds").replace("+00:00", "Z")


def as_id_list(ids) -> list[int]:
    """Normalize one id or an iterable of ids to a list of ints."""
    if ids is None:
        return []
    if isinstance(ids, Integral) and not isinstance(ids, bool):
        return [ids]
    out = []
    for i in ids:
        if isinstance(i, bool) or int(i) != i:
            raise TypeError(f"Identities must be integers, got {i!r}")
        out.append(int(i))
    return out
