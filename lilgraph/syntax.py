"""Syntax tree produced by the parser: node declarations and edge chains."""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Union

from .tokens import Pos, Token


def _lookup(mapping: Mapping[str, Any], key: str) -> Any:
    """Fetch a JSON field, preferring an exact key, else a case-insensitive one."""
    if key in mapping:
        return mapping[key]
    folded = key.lower()
    for name, value in mapping.items():
        if name.lower() == folded:
            return value
    return None


def _string(mapping: Mapping[str, Any], key: str, what: str) -> str:
    value = _lookup(mapping, key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"expected a string for {what} field '{key}', got {type(value).__name__}")
    return value


def _int(mapping: Mapping[str, Any], key: str) -> int:
    value = _lookup(mapping, key)
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"expected an integer for position field '{key}', got {value!r}")
    return value


def _object(value: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise ValueError(f"expected a JSON object for {what}, got {type(value).__name__}")
    return value


def _list(value: Any, what: str) -> list[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(f"expected a JSON array for {what}, got {type(value).__name__}")
    return value


def _pos_to_dict(pos: Pos) -> dict[str, Any]:
    context = None if pos.source is None else {"Filepath": pos.source}
    return {"Offset": pos.offset, "Line": pos.line, "Column": pos.column, "Context": context}


def _pos_from_dict(raw: Any) -> Pos:
    if raw is None:
        return Pos()
    data = _object(raw, "position")
    source = None
    context = _lookup(data, "Context")
    if isinstance(context, Mapping):
        filepath = _lookup(context, "Filepath")
        if isinstance(filepath, str):
            source = filepath
    return Pos(
        offset=_int(data, "Offset"),
        line=_int(data, "Line"),
        column=_int(data, "Column"),
        source=source,
    )


@dataclass
class Attr:
    """One ``key=value`` attribute; ``pos`` is where its key appeared."""

    key: str
    value: str
    pos: Pos = field(default_factory=Pos, compare=False)

    def _to_dict(self) -> dict[str, Any]:
        return {"k": self.key, "v": self.value, "Pos": _pos_to_dict(self.pos)}

    @classmethod
    def _from_dict(cls, raw: Any) -> Attr:
        data = _object(raw, "attribute")
        return cls(
            key=_string(data, "k", "attribute"),
            value=_string(data, "v", "attribute"),
            pos=_pos_from_dict(_lookup(data, "Pos")),
        )


def _attrs_from(raw: Any) -> list[Attr]:
    return [Attr._from_dict(item) for item in _list(raw, "attrs")]


@dataclass
class Node:
    """A freestanding node declaration, with optional type and attributes."""

    id: str
    type: str = ""
    attrs: list[Attr] = field(default_factory=list)
    pos: Pos = field(default_factory=Pos, compare=False)

    def _to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"ast_type": "node_def", "id": self.id}
        if self.type:
            data["_type"] = self.type
        if self.attrs:
            data["attrs"] = [attr._to_dict() for attr in self.attrs]
        data["Pos"] = _pos_to_dict(self.pos)
        return data

    @classmethod
    def _from_dict(cls, data: Mapping[str, Any]) -> Node:
        return cls(
            id=_string(data, "id", "node"),
            type=_string(data, "_type", "node"),
            attrs=_attrs_from(_lookup(data, "attrs")),
            pos=_pos_from_dict(_lookup(data, "Pos")),
        )

    def to_json(self) -> str:
        """Serialise this node declaration as a JSON object."""
        return json.dumps(self._to_dict(), ensure_ascii=False)


@dataclass
class EdgeStep:
    """One arrow of an edge chain; ``pos`` is where the arrow appeared."""

    to: str
    type: str = ""
    attrs: list[Attr] = field(default_factory=list)
    pos: Pos = field(default_factory=Pos, compare=False)

    def _to_dict(self) -> dict[str, Any]:
        return {
            "To": self.to,
            "Type": self.type,
            "Attrs": [attr._to_dict() for attr in self.attrs] if self.attrs else None,
            "Pos": _pos_to_dict(self.pos),
        }

    @classmethod
    def _from_dict(cls, raw: Any) -> EdgeStep:
        data = _object(raw, "edge step")
        return cls(
            to=_string(data, "To", "edge step"),
            type=_string(data, "Type", "edge step"),
            attrs=_attrs_from(_lookup(data, "Attrs")),
            pos=_pos_from_dict(_lookup(data, "Pos")),
        )


@dataclass
class EdgeChain:
    """A chain of edges ``a -> b -> c`` starting at node ``from_``."""

    from_: str
    steps: list[EdgeStep] = field(default_factory=list)

    def extend(self, step: EdgeStep) -> EdgeChain:
        """Append another step to the chain and return the chain."""
        if not isinstance(step, EdgeStep):
            raise TypeError(
                f"expected EdgeStep to extend edge chain, but got {type(step).__name__}"
            )
        self.steps.append(step)
        return self

    def _to_dict(self) -> dict[str, Any]:
        return {
            "ast_type": "edge_chain",
            "from": self.from_,
            "steps": [step._to_dict() for step in self.steps],
        }

    @classmethod
    def _from_dict(cls, data: Mapping[str, Any]) -> EdgeChain:
        return cls(
            from_=_string(data, "from", "edge chain"),
            steps=[EdgeStep._from_dict(step) for step in _list(_lookup(data, "steps"), "steps")],
        )

    def to_json(self) -> str:
        """Serialise this edge chain as a JSON object."""
        return json.dumps(self._to_dict(), ensure_ascii=False)


TopLevel = Union[Node, EdgeChain]

_ITEM_KINDS: dict[str, type[Node] | type[EdgeChain]] = {
    "node_def": Node,
    "edge_chain": EdgeChain,
}


@dataclass
class Graph:
    """A whole document: its top-level statements in source order."""

    items: list[TopLevel] = field(default_factory=list)

    def append(self, item: TopLevel) -> Graph:
        """Add a top-level statement and return the graph."""
        if not isinstance(item, (Node, EdgeChain)):
            raise TypeError(
                "invalid top-level parser product, expected Node or EdgeChain, "
                f"but got {type(item).__name__}"
            )
        self.items.append(item)
        return self

    @classmethod
    def from_json(cls, data: str | bytes | bytearray | Mapping[str, Any]) -> Graph:
        """Build a graph from its JSON form (text or an already-decoded object)."""
        if isinstance(data, (str, bytes, bytearray)):
            data = json.loads(data)
        document = _object(data, "graph")
        graph = cls()
        for index, raw in enumerate(_list(_lookup(document, "ast_items"), "ast_items")):
            entry = _object(raw, f"'ast_items' #{index}")
            ast_type = _lookup(entry, "ast_type")
            kind = _ITEM_KINDS.get(ast_type) if isinstance(ast_type, str) else None
            if kind is None:
                raise ValueError(
                    f"can't unmarshal json 'ast_items' #{index}: unknown ast type '{ast_type or ''}'"
                )
            graph.items.append(kind._from_dict(entry))
        return graph

    def to_json(self) -> str:
        """Serialise the graph as JSON that ``from_json`` reads back."""
        return json.dumps(
            {"ast_items": [item._to_dict() for item in self.items]}, ensure_ascii=False
        )


def unquote(text: str | Token) -> str:
    """Strip the surrounding quotes of a quoted string and unescape ``\\"``."""
    literal = text.lit if isinstance(text, Token) else text
    if len(literal) < 2:
        raise ValueError(f"quoted string too short: {literal!r}")
    return literal[1:-1].replace('\\"', '"')