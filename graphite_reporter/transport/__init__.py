"""Transport to the Graphite backend."""

from .connection import GraphiteConnection

__all__ = ["GraphiteConnection"]
