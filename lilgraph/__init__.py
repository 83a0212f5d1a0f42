"""Parse, edit, topologically sort and write graphs in the lilgraph text format."""

__version__ = "0.1.0"