"""meetgraph — who-met-whom graph import, query, and rendering."""

__version__ = "0.1.0"
