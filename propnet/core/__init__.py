from .cache import AttributeCache
from .graph import Graph
from .history import ActionLog, LogEntry
from .selection import Selection
from .table import AttributeTable

__all__ = ["ActionLog", "AttributeCache", "AttributeTable", "Graph", "LogEntry", "Selection"]
