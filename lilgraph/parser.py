"""Table-driven LR parser that builds a syntax tree from lilgraph tokens."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import Enum, IntEnum
from pathlib import Path
from typing import Any, Protocol

from .errors import BadParseTypeError, GrammarError
from .lexer import Lexer
from .syntax import Attr, EdgeChain, EdgeStep, Graph, Node, unquote
from .tokens import Token, TokenType, token_name


class _Scanner(Protocol):
    def scan(self) -> Token: ...


class _Kind(Enum):
    SHIFT = "shift"
    REDUCE = "reduce"
    ACCEPT = "accept"


@dataclass(frozen=True)
class _Action:
    kind: _Kind
    target: int = 0

    def __str__(self) -> str:
        if self.kind is _Kind.ACCEPT:
            return "accept(0)"
        if self.kind is _Kind.SHIFT:
            return f"shift:{self.target}"
        return f"reduce:{self.target}({_PRODUCTIONS[self.target].name})"


def _s(state: int) -> _Action:
    return _Action(_Kind.SHIFT, state)


def _r(production: int) -> _Action:
    return _Action(_Kind.REDUCE, production)


_ACC = _Action(_Kind.ACCEPT)


class _NT(IntEnum):
    """Nonterminal symbols of the grammar."""

    START = 0
    WHOLE_DOC = 1
    TOP_LEVEL_DECL_LIST = 2
    OPT_SEP = 3
    NODE_DECL = 4
    EDGE_RHS = 5
    EDGE_DECL = 6
    TOP_LEVEL_STMT = 7
    ATTR_ITEMS = 8
    OPT_ATTR_SEP = 9
    ATTR = 10
    ATTR_VAL = 11


_T = TokenType

# Edge-chain continuations share the same lookahead set.
_AFTER_EDGE = (_T.EOF, _T.SEMICOLON, _T.ID, _T.EDGEARROW, _T.EDGE_ATTR_OPEN)
_AFTER_STMT = (_T.EOF, _T.SEMICOLON, _T.ID)


def _all(tokens: Sequence[TokenType], action: _Action) -> dict[TokenType, _Action]:
    return {tok: action for tok in tokens}


_ACTIONS: tuple[dict[TokenType, _Action], ...] = (
    {_T.EOF: _r(1), _T.ID: _s(5)},  # S0
    {_T.EOF: _ACC},  # S1
    {_T.EOF: _r(2), _T.ID: _s(5)},  # S2
    {_T.EOF: _r(3), _T.ID: _r(3)},  # S3
    {_T.EOF: _r(5), _T.SEMICOLON: _s(9), _T.ID: _r(5)},  # S4
    {  # S5
        **_all(_AFTER_STMT, _r(11)),
        _T.LBRACKET: _s(10),
        _T.EDGEARROW: _s(12),
        _T.EDGE_ATTR_OPEN: _s(13),
    },
    {  # S6
        _T.EOF: _r(5),
        _T.SEMICOLON: _s(9),
        _T.ID: _r(5),
        _T.EDGEARROW: _s(12),
        _T.EDGE_ATTR_OPEN: _s(13),
    },
    {_T.EOF: _r(4), _T.ID: _r(4)},  # S7
    {_T.EOF: _r(20), _T.ID: _r(20)},  # S8
    {_T.EOF: _r(6), _T.ID: _r(6)},  # S9
    {_T.ID: _s(16), _T.RBRACKET: _s(18)},  # S10
    _all(_AFTER_EDGE, _r(17)),  # S11
    {_T.ID: _s(20)},  # S12
    {_T.ID: _s(21), _T.EDGE_ATTR_CLOSE: _s(23)},  # S13
    {_T.EOF: _r(19), _T.ID: _r(19)},  # S14
    _all(_AFTER_EDGE, _r(18)),  # S15
    {_T.SEMICOLON: _s(26), _T.ID: _r(5), _T.RBRACKET: _r(5), _T.EQUALS: _s(27)},  # S16
    {_T.ID: _s(28), _T.RBRACKET: _s(29)},  # S17
    _all(_AFTER_STMT, _r(10)),  # S18
    {_T.ID: _r(21), _T.RBRACKET: _r(21)},  # S19
    _all(_AFTER_EDGE, _r(12)),  # S20
    {  # S21
        _T.SEMICOLON: _s(32),
        _T.ID: _r(5),
        _T.EDGE_ATTR_CLOSE: _r(5),
        _T.EQUALS: _s(33),
    },
    {_T.ID: _s(34), _T.EDGE_ATTR_CLOSE: _s(35)},  # S22
    {_T.ID: _s(37)},  # S23
    {_T.ID: _r(21), _T.EDGE_ATTR_CLOSE: _r(21)},  # S24
    {_T.ID: _s(28), _T.RBRACKET: _s(39)},  # S25
    {_T.ID: _r(6), _T.RBRACKET: _r(6)},  # S26
    {_T.ID: _s(40), _T.NUMERIC_LITERAL: _s(42), _T.QUOTED_STRING: _s(43)},  # S27
    {_T.EQUALS: _s(27)},  # S28
    _all(_AFTER_STMT, _r(7)),  # S29
    {_T.ID: _r(22), _T.RBRACKET: _r(22)},  # S30
    {_T.ID: _s(34), _T.EDGE_ATTR_CLOSE: _s(45)},  # S31
    {_T.ID: _r(6), _T.EDGE_ATTR_CLOSE: _r(6)},  # S32
    {_T.ID: _s(46), _T.NUMERIC_LITERAL: _s(48), _T.QUOTED_STRING: _s(49)},  # S33
    {_T.EQUALS: _s(33)},  # S34
    {_T.ID: _s(50)},  # S35
    {_T.ID: _r(22), _T.EDGE_ATTR_CLOSE: _r(22)},  # S36
    _all(_AFTER_EDGE, _r(13)),  # S37
    {_T.ID: _s(28), _T.RBRACKET: _s(51)},  # S38
    _all(_AFTER_STMT, _r(9)),  # S39
    {_T.ID: _r(26), _T.RBRACKET: _r(26), _T.COMMA: _r(26)},  # S40
    {_T.ID: _r(23), _T.RBRACKET: _r(23), _T.COMMA: _s(53)},  # S41
    {_T.ID: _r(27), _T.RBRACKET: _r(27), _T.COMMA: _r(27)},  # S42
    {_T.ID: _r(28), _T.RBRACKET: _r(28), _T.COMMA: _r(28)},  # S43
    {_T.ID: _s(34), _T.EDGE_ATTR_CLOSE: _s(54)},  # S44
    {_T.ID: _s(55)},  # S45
    {_T.ID: _r(26), _T.EDGE_ATTR_CLOSE: _r(26), _T.COMMA: _r(26)},  # S46
    {_T.ID: _r(23), _T.EDGE_ATTR_CLOSE: _r(23), _T.COMMA: _s(57)},  # S47
    {_T.ID: _r(27), _T.EDGE_ATTR_CLOSE: _r(27), _T.COMMA: _r(27)},  # S48
    {_T.ID: _r(28), _T.EDGE_ATTR_CLOSE: _r(28), _T.COMMA: _r(28)},  # S49
    _all(_AFTER_EDGE, _r(14)),  # S50
    _all(_AFTER_STMT, _r(8)),  # S51
    {_T.ID: _r(25), _T.RBRACKET: _r(25)},  # S52
    {_T.ID: _r(24), _T.RBRACKET: _r(24)},  # S53
    {_T.ID: _s(58)},  # S54
    _all(_AFTER_EDGE, _r(15)),  # S55
    {_T.ID: _r(25), _T.EDGE_ATTR_CLOSE: _r(25)},  # S56
    {_T.ID: _r(24), _T.EDGE_ATTR_CLOSE: _r(24)},  # S57
    _all(_AFTER_EDGE, _r(16)),  # S58
)

_GOTO: dict[int, dict[_NT, int]] = {
    0: {
        _NT.WHOLE_DOC: 1,
        _NT.TOP_LEVEL_DECL_LIST: 2,
        _NT.NODE_DECL: 4,
        _NT.EDGE_DECL: 6,
        _NT.TOP_LEVEL_STMT: 3,
    },
    2: {_NT.NODE_DECL: 4, _NT.EDGE_DECL: 6, _NT.TOP_LEVEL_STMT: 7},
    4: {_NT.OPT_SEP: 8},
    5: {_NT.EDGE_RHS: 11},
    6: {_NT.OPT_SEP: 14, _NT.EDGE_RHS: 15},
    10: {_NT.ATTR_ITEMS: 17, _NT.ATTR: 19},
    13: {_NT.ATTR_ITEMS: 22, _NT.ATTR: 24},
    16: {_NT.OPT_SEP: 25},
    17: {_NT.ATTR: 30},
    21: {_NT.OPT_SEP: 31},
    22: {_NT.ATTR: 36},
    25: {_NT.ATTR_ITEMS: 38, _NT.ATTR: 19},
    27: {_NT.ATTR_VAL: 41},
    31: {_NT.ATTR_ITEMS: 44, _NT.ATTR: 24},
    33: {_NT.ATTR_VAL: 47},
    38: {_NT.ATTR: 30},
    41: {_NT.OPT_ATTR_SEP: 52},
    44: {_NT.ATTR: 36},
    47: {_NT.OPT_ATTR_SEP: 56},
}


def _token(value: Any, what: str) -> Token:
    if not isinstance(value, Token):
        raise TypeError(
            f"failed getting value for {what}: expected Token, but got {type(value).__name__}"
        )
    return value


def _text(value: Any, what: str) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, Token):
        return value.lit
    raise TypeError(
        f"failed getting value for {what}: want str or Token, but got {type(value).__name__}"
    )


def _attrs(value: Any, what: str) -> list[Attr]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise TypeError(f"expected attribute list for {what} attrs, but got {type(value).__name__}")
    return value


def _node(id_tok: Any, typ: Any, attrs: Any) -> Node:
    tok = _token(id_tok, "node id")
    return Node(
        id=tok.lit,
        type=_text(typ, "node type pseudoattr"),
        attrs=_attrs(attrs, "node"),
        pos=tok.pos,
    )


def _step(arrow: Any, to_tok: Any, typ: Any, attrs: Any) -> EdgeStep:
    arrow_tok = _token(arrow, "edge arrow")
    return EdgeStep(
        to=_token(to_tok, "edge 'to'-node id").lit,
        type=_text(typ, "edge type pseudoattr"),
        attrs=_attrs(attrs, "edge"),
        pos=arrow_tok.pos,
    )


def _chain(from_tok: Any, step: Any) -> EdgeChain:
    start = _token(from_tok, "edge 'from' node id")
    if not isinstance(step, EdgeStep):
        raise TypeError(f"expected EdgeStep for edge rhs, but got {type(step).__name__}")
    return EdgeChain(from_=start.lit, steps=[step])


def _attr(key_tok: Any, value: Any) -> Attr:
    key = _token(key_tok, "attr key name")
    return Attr(key=key.lit, value=_text(value, f"attr '{key.lit}'"), pos=key.pos)


def _add_attr(attrs: Any, attr: Any) -> list[Attr]:
    if not isinstance(attrs, list) or not isinstance(attr, Attr):
        raise TypeError("can't merge attrs; expected an attribute list and an Attr")
    return [*attrs, attr]


def _new_graph(item: Any) -> Graph:
    graph = Graph()
    if item is not None:
        graph.append(item)
    return graph


def _append_item(graph: Any, item: Any) -> Graph:
    if not isinstance(graph, Graph):
        raise TypeError(f"can't append to a non-graph! got {type(graph).__name__}")
    return graph.append(item)


def _extend_chain(chain: Any, step: Any) -> EdgeChain:
    if not isinstance(chain, EdgeChain):
        raise TypeError(f"can't extend chain; expected EdgeChain, but got {type(chain).__name__}")
    return chain.extend(step)


@dataclass(frozen=True)
class _Production:
    name: str
    nonterminal: _NT
    length: int
    reduce: Callable[[list[Any]], Any]


_PRODUCTIONS: tuple[_Production, ...] = (
    _Production("S' : WholeDoc", _NT.START, 1, lambda x: x[0]),
    _Production("WholeDoc : empty", _NT.WHOLE_DOC, 0, lambda x: _new_graph(None)),
    _Production("WholeDoc : TopLevelDeclList", _NT.WHOLE_DOC, 1, lambda x: x[0]),
    _Production(
        "TopLevelDeclList : TopLevelStmt", _NT.TOP_LEVEL_DECL_LIST, 1, lambda x: _new_graph(x[0])
    ),
    _Production(
        "TopLevelDeclList : TopLevelDeclList TopLevelStmt",
        _NT.TOP_LEVEL_DECL_LIST,
        2,
        lambda x: _append_item(x[0], x[1]),
    ),
    _Production("OptSep : empty", _NT.OPT_SEP, 0, lambda x: None),
    _Production('OptSep : ";"', _NT.OPT_SEP, 1, lambda x: x[0]),
    _Production(
        'NodeDecl : id "[" AttrItems "]"', _NT.NODE_DECL, 4, lambda x: _node(x[0], "", x[2])
    ),
    _Production(
        'NodeDecl : id "[" id OptSep AttrItems "]"',
        _NT.NODE_DECL,
        6,
        lambda x: _node(x[0], x[2], x[4]),
    ),
    _Production(
        'NodeDecl : id "[" id OptSep "]"', _NT.NODE_DECL, 5, lambda x: _node(x[0], x[2], None)
    ),
    _Production('NodeDecl : id "[" "]"', _NT.NODE_DECL, 3, lambda x: _node(x[0], "", None)),
    _Production("NodeDecl : id", _NT.NODE_DECL, 1, lambda x: _node(x[0], "", None)),
    _Production(
        "EdgeRHS : edgearrow id", _NT.EDGE_RHS, 2, lambda x: _step(x[0], x[1], "", None)
    ),
    _Production(
        "EdgeRHS : edge_attr_open edge_attr_close id",
        _NT.EDGE_RHS,
        3,
        lambda x: _step(x[0], x[2], "", None),
    ),
    _Production(
        "EdgeRHS : edge_attr_open AttrItems edge_attr_close id",
        _NT.EDGE_RHS,
        4,
        lambda x: _step(x[0], x[3], "", x[1]),
    ),
    _Production(
        "EdgeRHS : edge_attr_open id OptSep edge_attr_close id",
        _NT.EDGE_RHS,
        5,
        lambda x: _step(x[0], x[4], x[1], None),
    ),
    _Production(
        "EdgeRHS : edge_attr_open id OptSep AttrItems edge_attr_close id",
        _NT.EDGE_RHS,
        6,
        lambda x: _step(x[0], x[5], x[1], x[3]),
    ),
    _Production("EdgeDecl : id EdgeRHS", _NT.EDGE_DECL, 2, lambda x: _chain(x[0], x[1])),
    _Production(
        "EdgeDecl : EdgeDecl EdgeRHS", _NT.EDGE_DECL, 2, lambda x: _extend_chain(x[0], x[1])
    ),
    _Production("TopLevelStmt : EdgeDecl OptSep", _NT.TOP_LEVEL_STMT, 2, lambda x: x[0]),
    _Production("TopLevelStmt : NodeDecl OptSep", _NT.TOP_LEVEL_STMT, 2, lambda x: x[0]),
    _Production("AttrItems : Attr", _NT.ATTR_ITEMS, 1, lambda x: [x[0]]),
    _Production(
        "AttrItems : AttrItems Attr", _NT.ATTR_ITEMS, 2, lambda x: _add_attr(x[0], x[1])
    ),
    _Production("OptAttrSep : empty", _NT.OPT_ATTR_SEP, 0, lambda x: None),
    _Production('OptAttrSep : ","', _NT.OPT_ATTR_SEP, 1, lambda x: x[0]),
    _Production(
        'Attr : id "=" AttrVal OptAttrSep', _NT.ATTR, 4, lambda x: _attr(x[0], x[2])
    ),
    _Production("AttrVal : id", _NT.ATTR_VAL, 1, lambda x: x[0]),
    _Production("AttrVal : numeric_literal", _NT.ATTR_VAL, 1, lambda x: x[0]),
    _Production("AttrVal : quoted_string", _NT.ATTR_VAL, 1, lambda x: unquote(_token(x[0], "quoted string"))),
)


def _expected_names(state: int) -> list[str]:
    return [token_name(tok) for tok in sorted(_ACTIONS[state])]


class Parser:
    """LR parser over the lilgraph grammar; each ``parse`` call starts afresh."""

    def parse(self, lexer: _Scanner) -> Any:
        """Consume tokens from ``lexer`` and return the document's syntax tree.

        Raises GrammarError when the tokens do not form a valid document.
        """
        stack: list[tuple[int, Any]] = [(0, None)]
        token = lexer.scan()
        while True:
            state = stack[-1][0]
            action = _ACTIONS[state].get(token.type)
            if action is None:
                raise GrammarError(token, _expected_names(state), stack_top=state)
            if action.kind is _Kind.ACCEPT:
                return stack.pop()[1]
            if action.kind is _Kind.SHIFT:
                stack.append((action.target, token))
                token = lexer.scan()
                continue
            production = _PRODUCTIONS[action.target]
            split = len(stack) - production.length
            symbols = [attrib for _, attrib in stack[split:]]
            del stack[split:]
            top = stack[-1][0]
            try:
                attrib = production.reduce(symbols)
            except (TypeError, ValueError) as exc:
                raise GrammarError(
                    token, _expected_names(top), cause=exc, stack_top=top
                ) from exc
            stack.append((_GOTO[top][production.nonterminal], attrib))


def parse_ast(src: str | bytes | bytearray | None, source: str | Path | None = None) -> Graph:
    """Parse lilgraph text into its syntax tree.

    A trailing newline is added when missing, so that a comment running up to
    the end of the input is accepted. ``source`` names the file in positions.
    """
    if src is None:
        src = ""
    if isinstance(src, (bytes, bytearray)):
        if not src.endswith(b"\n"):
            src = bytes(src) + b"\n"
    elif not src.endswith("\n"):
        src = src + "\n"
    lexer = Lexer(src, source=None if source is None else str(source))
    result = Parser().parse(lexer)
    if not isinstance(result, Graph):
        raise BadParseTypeError(
            f"unexpected parser result type: expected Graph, got {type(result).__name__}"
        )
    return result