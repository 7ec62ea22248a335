# propnet/__init__.py
"""propnet: property graphs with selections, traversals and an action log."""
from __future__ import annotations

from importlib import import_module
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _pkg_version
from typing import Any

from .core import (
    ActionLog,
    AttributeCache,
    AttributeTable,
    Graph,
    LogEntry,
    Selection,
)
from .core.errors import *  # noqa: F401,F403
from .core.errors import __all__ as _error_names

# Lazily exposed submodules (imported on first attribute access)
_lazy_submodules = {
    "adapters": "propnet.adapters",
    "algorithms": "propnet.algorithms",
    "networkx": "propnet.adapters.networkx",
}

# Curated top-level symbols (lazy). name -> (module, attribute)
_lazy_symbols: dict[str, tuple[str, str]] = {
    # NetworkX bridge
    "to_nx": ("propnet.adapters.networkx", "to_nx"),
    "betweenness": ("propnet.algorithms.centrality", "betweenness"),
}

__all__ = sorted(
    {
        "ActionLog",
        "AttributeCache",
        "AttributeTable",
        "Graph",
        "LogEntry",
        "Selection",
        *_error_names,
        *_lazy_submodules,
        *_lazy_symbols,
    }
)


def __getattr__(name: str) -> Any:  # PEP 562: lazy attribute resolution
    if name in _lazy_submodules:
        return import_module(_lazy_submodules[name])
    if name in _lazy_symbols:
        mod, attr = _lazy_symbols[name]
        return getattr(import_module(mod), attr)
    raise AttributeError(name)


def __dir__() -> list[str]:
    return sorted(list(globals().keys()) + list(__all__))


try:
    __version__ = _pkg_version("propnet")
except PackageNotFoundError:
    __version__ = "0.0.0"
