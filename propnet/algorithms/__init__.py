from .centrality import betweenness

__all__ = ["betweenness"]
