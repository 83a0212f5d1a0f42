"""In-memory directed graph of typed, attributed nodes and edges."""

from __future__ import annotations

import re
from collections.abc import Iterator, Mapping
from pathlib import Path

from .errors import (
    CyclicError,
    GrammarError,
    InvalidIdError,
    LoopError,
    ParseFailError,
    TypeChangeError,
    TypeInAttrsError,
)
from .marshal import marshal_text as _marshal_text
from .parser import parse_ast
from .syntax import Attr as _AstAttr
from .syntax import EdgeChain as _AstEdgeChain
from .syntax import Graph as _AstGraph
from .syntax import Node as _AstNode
from .tokens import Pos

# Must agree with the identifier rule of the grammar.
_ID_PATTERN = re.compile(r"[a-zA-Z_][a-zA-Z0-9_]*")


class Element:
    """Behaviour shared by nodes and edges: a type and ordered attributes."""

    def __init__(self, typ: str = "") -> None:
        self._type = typ
        self._attrs: dict[str, str] = {}

    @property
    def type(self) -> str:
        return self._type

    def set_attr(self, key: str, value: str) -> None:
        """Set an attribute, keeping its position if it already exists."""
        if key.lower() == "type":
            raise TypeInAttrsError()
        self._attrs[key] = value

    def get_attr(self, key: str) -> str | None:
        """Return an attribute's value, or None if it is not set."""
        return self._attrs.get(key)

    def delete_attr(self, key: str) -> None:
        """Remove an attribute if present."""
        self._attrs.pop(key, None)

    def attrs_map(self) -> dict[str, str]:
        """A copy of the attributes, in their order."""
        return dict(self._attrs)

    def replace_attrs(self, mapping: Mapping[str, str]) -> None:
        """Make the attributes equal to ``mapping``, keeping the order of surviving keys."""
        remaining = dict(mapping)
        replaced = {key: remaining.pop(key) for key in self._attrs if key in remaining}
        replaced.update(remaining)
        self._attrs = replaced


class Node(Element):
    """A graph node with an identifier and its incoming and outgoing edges."""

    def __init__(self, node_id: str, typ: str = "") -> None:
        super().__init__(typ)
        self.id = node_id
        self._edges_from: list[Edge] = []
        self._edges_to: list[Edge] = []
        # Where the node was first declared on its own, if it ever was.
        self.decl_pos: Pos | None = None
        # Where the node's type was first declared, if it was.
        self.type_from_pos: Pos | None = None

    @property
    def edges_from(self) -> tuple[Edge, ...]:
        return tuple(self._edges_from)

    @property
    def edges_to(self) -> tuple[Edge, ...]:
        return tuple(self._edges_to)

    def __repr__(self) -> str:
        return f"Node(id={self.id!r}, type={self.type!r})"


class Edge(Element):
    """A directed, optionally typed edge between two nodes."""

    def __init__(self, from_node: Node | None, to_node: Node | None, typ: str = "") -> None:
        super().__init__(typ)
        self.from_node = from_node
        self.to_node = to_node
        self.pos: Pos | None = None

    def __repr__(self) -> str:
        source = self.from_node.id if self.from_node else None
        target = self.to_node.id if self.to_node else None
        return f"Edge({source!r} -> {target!r}, type={self.type!r})"


class Lilgraph:
    """A graph of nodes and edges, kept in insertion order."""

    def __init__(self) -> None:
        self._nodes: list[Node] = []
        self._edges: list[Edge] = []
        self._nodes_by_id: dict[str, Node] = {}
        self._edges_by_key: dict[tuple[Node | None, Node | None, str], Edge] = {}

    @property
    def nodes(self) -> tuple[Node, ...]:
        return tuple(self._nodes)

    @property
    def edges(self) -> tuple[Edge, ...]:
        return tuple(self._edges)

    def sort_topo(self) -> None:
        """Order nodes by their depth from the apex nodes; raise CyclicError on a cycle."""
        _rank_sort(self._nodes)

    def find(self, node_id: str) -> Node | None:
        return self._nodes_by_id.get(node_id)

    def add_node(self, node_id: str, typ: str = "") -> tuple[Node, bool]:
        """Add a node or update an existing one; returns the node and whether it existed."""
        if not _ID_PATTERN.fullmatch(node_id):
            raise InvalidIdError(f"{InvalidIdError.summary} {node_id}")
        node = self._nodes_by_id.get(node_id)
        if node is not None:
            if typ:
                if node.type and node.type != typ:
                    raise TypeChangeError(
                        f"{TypeChangeError.summary}: node '{node.id}' already has type '{node.type}'"
                    )
                node._type = typ
            return node, True
        node = Node(node_id, typ)
        self._nodes.append(node)
        self._nodes_by_id[node_id] = node
        return node, False

    def find_edges(self, from_node: Node, to_node: Node) -> Iterator[Edge]:
        """Yield every edge from ``from_node`` to ``to_node``, whatever its type."""
        for edge in from_node.edges_from:
            if edge.to_node is to_node:
                yield edge

    def find_edge(self, from_node: Node, to_node: Node, edge_type: str = "") -> Edge | None:
        return self._edges_by_key.get((from_node, to_node, edge_type))

    def add_edge(self, from_node: Node, to_node: Node, edge_type: str = "") -> tuple[Edge, bool]:
        """Add an edge unless one of that type exists; returns it and whether it existed."""
        if from_node is to_node:
            raise LoopError()
        key = (from_node, to_node, edge_type)
        edge = self._edges_by_key.get(key)
        if edge is not None:
            return edge, True
        edge = Edge(from_node, to_node, edge_type)
        self._edges.append(edge)
        self._edges_by_key[key] = edge
        from_node._edges_from.append(edge)
        to_node._edges_to.append(edge)
        return edge, False

    def delete_node(self, node: Node) -> bool:
        """Remove a node and all its edges; False if it is not in the graph."""
        if not any(existing is node for existing in self._nodes):
            return False
        self._nodes.remove(node)
        self._nodes_by_id.pop(node.id, None)
        for edge in node.edges_from:
            self._remove_edge(edge, purge_from=False, purge_to=True)
            edge.from_node = None
        for edge in node.edges_to:
            self._remove_edge(edge, purge_from=True, purge_to=False)
            edge.to_node = None
        node._edges_from = []
        node._edges_to = []
        return True

    def delete_edge(self, edge: Edge) -> bool:
        """Remove an edge; False if it is not in the graph."""
        return self._remove_edge(edge, purge_from=True, purge_to=True)

    def _remove_edge(self, edge: Edge, *, purge_from: bool, purge_to: bool) -> bool:
        if not any(existing is edge for existing in self._edges):
            return False
        self._edges.remove(edge)
        self._edges_by_key.pop((edge.from_node, edge.to_node, edge.type), None)
        if purge_from and edge.from_node is not None:
            edge.from_node._edges_from = [e for e in edge.from_node._edges_from if e is not edge]
        if purge_to and edge.to_node is not None:
            edge.to_node._edges_to = [e for e in edge.to_node._edges_to if e is not edge]
        return True

    def marshal_text(self) -> str:
        """Render the graph in lilgraph text format."""
        return _marshal_text(self)


def _rank_sort(nodes: list[Node]) -> None:
    if not nodes:
        return
    ranks: dict[Node, int] = {}

    def walk(start: Node, node: Node, rank: int, path: set[Node]) -> None:
        if node in path:
            raise CyclicError(
                f"{CyclicError.summary}: node '{node.id}' already seen in "
                f"depth-first walk from '{start.id}'"
            )
        path.add(node)
        ranks[node] = max(ranks.get(node, 0), rank)
        for edge in node.edges_from:
            walk(start, edge.to_node, rank + 1, path)
        path.discard(node)

    apexes = [node for node in nodes if not node.edges_to]
    if not apexes:
        raise CyclicError(f"{CyclicError.summary}: failed to find a node without incoming edges")
    for apex in apexes:
        walk(apex, apex, 0, set())
    nodes.sort(key=lambda node: ranks.get(node, 0))


def _update_attrs(element: Element, attrs: list[_AstAttr]) -> None:
    for attr in attrs:
        try:
            element.set_attr(attr.key, attr.value)
        except TypeInAttrsError as exc:
            raise TypeInAttrsError(f"{exc} (at {attr.pos})") from exc


def _build(tree: _AstGraph) -> Lilgraph:
    graph = Lilgraph()

    def upsert(node_id: str, pos: Pos | None, typ: str) -> Node:
        node, _ = graph.add_node(node_id, typ)
        if node.decl_pos is None:
            node.decl_pos = pos
        if node.type_from_pos is None and typ:
            node.type_from_pos = pos
        return node

    for item in tree.items:
        if isinstance(item, _AstNode):
            try:
                node = upsert(item.id, item.pos, item.type)
            except TypeChangeError as exc:
                raise TypeChangeError(
                    f"{exc}: attempted re-declaration to '{item.type}' at {item.pos}"
                ) from exc
            try:
                _update_attrs(node, item.attrs)
            except TypeInAttrsError as exc:
                raise TypeInAttrsError(f"{exc}; consider using a node type decl") from exc
        elif isinstance(item, _AstEdgeChain):
            source = upsert(item.from_, None, "")
            for step in item.steps:
                target = upsert(step.to, None, "")
                try:
                    edge, existed = graph.add_edge(source, target, step.type)
                except LoopError as exc:
                    raise LoopError(
                        f"{LoopError.summary}: edge at {step.pos} forms a loop "
                        f"from '{source.id}' to itself"
                    ) from exc
                if not existed:
                    edge.pos = step.pos
                try:
                    _update_attrs(edge, step.attrs)
                except TypeInAttrsError as exc:
                    raise TypeInAttrsError(f"{exc}; consider using an edge type decl") from exc
                source = target
    return graph


def _parse(src: str | bytes | bytearray | None, source: str | None) -> Lilgraph:
    try:
        tree = parse_ast(src, source)
    except GrammarError as exc:
        raise ParseFailError(f"{ParseFailError.summary}: {exc}") from exc
    return _build(tree)


def parse(src: str | bytes | bytearray | None) -> Lilgraph:
    """Build a graph from lilgraph text."""
    return _parse(src, None)


def parse_file(path: str | Path) -> Lilgraph:
    """Build a graph from a lilgraph file; positions name the file."""
    data = Path(path).read_bytes()
    return _parse(data, str(path))