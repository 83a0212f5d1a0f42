"""Rendering of a graph back to the lilgraph text format."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .graph import Lilgraph


def quoteify(value: str) -> str:
    """Quote an attribute value if it holds a double quote or a newline."""
    if '"' not in value and "\n" not in value:
        return value
    return '"' + value.replace('"', '\\"') + '"'


def _type_and_attrs(typ: str, attrs: Mapping[str, str], prefix: str) -> str:
    if not typ and not attrs:
        return ""
    separator = "; " if typ and attrs else ""
    pairs = ", ".join(f"{key}={quoteify(value)}" for key, value in attrs.items())
    return f"{prefix}[{typ}{separator}{pairs}]"


def _sort_key(entry: tuple[Any, bool, int]) -> tuple[int, int]:
    offset = entry[2]
    if offset >= 0:
        return (0, offset)
    # Items without a source position go last: new nodes (-1) before new edges (-2).
    return (1, -offset)


def _in_print_order(graph: Lilgraph) -> list[tuple[Any, bool, int]]:
    """Items in original source order, with newly added nodes then edges at the end."""
    items: list[tuple[Any, bool, int]] = []
    for node in graph.nodes:
        has_edges = bool(node.edges_from or node.edges_to)
        if not node.attrs_map() and not node.type and node.decl_pos is None and has_edges:
            # Only ever mentioned in edges and has nothing to declare.
            continue
        offset = -1 if node.decl_pos is None else node.decl_pos.offset
        items.append((node, True, offset))
    for edge in graph.edges:
        offset = -2 if edge.pos is None else edge.pos.offset
        items.append((edge, False, offset))
    items.sort(key=_sort_key)
    return items


def marshal_text(graph: Lilgraph) -> str:
    """Render a graph as lilgraph text, one statement per line."""
    lines = []
    for item, is_node, _ in _in_print_order(graph):
        if is_node:
            lines.append(item.id + _type_and_attrs(item.type, item.attrs_map(), " "))
        else:
            listing = _type_and_attrs(item.type, item.attrs_map(), "")
            closer = "-" if listing else ""
            lines.append(f"{item.from_node.id} -{listing}{closer}> {item.to_node.id}")
    return "".join(line + "\n" for line in lines)