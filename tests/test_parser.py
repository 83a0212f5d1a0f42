import pytest

from lilgraph.errors import GrammarError
from lilgraph.lexer import Lexer
from lilgraph.parser import Parser, parse_ast
from lilgraph.syntax import Attr, EdgeChain, EdgeStep, Graph, Node
from lilgraph.tokens import Pos


@pytest.mark.parametrize(
    "src",
    [
        None,
        b"",
        b"  \n\n\t \n \t\n\t",
        b"\n  // this page\n #intentionally\n\t/*left \nblank\n*/",
    ],
    ids=["nilbytes", "emptybytes", "whitespaces", "onlycomments"],
)
def test_parse_empty(src):
    result = Parser().parse(Lexer(src))
    assert isinstance(result, Graph)
    assert result.items == []
    assert parse_ast(src).items == []


def test_simple_nodes():
    graph = parse_ast("A\nB [sometype]\nC [] ; D [t; foo=bar, n=1.5]\n")
    assert graph.items == [
        Node("A"),
        Node("B", type="sometype"),
        Node("C"),
        Node("D", type="t", attrs=[Attr("foo", "bar"), Attr("n", "1.5")]),
    ]


def test_node_attrs_without_type_or_separator():
    graph = parse_ast("A [foo=bar]\nB [t x=-3 y=\"q\"]")
    assert graph.items == [
        Node("A", attrs=[Attr("foo", "bar")]),
        Node("B", type="t", attrs=[Attr("x", "-3"), Attr("y", "q")]),
    ]


def test_simple_edges():
    graph = parse_ast("A -> B -> C\nD -> E;")
    assert graph.items == [
        EdgeChain("A", [EdgeStep("B"), EdgeStep("C")]),
        EdgeChain("D", [EdgeStep("E")]),
    ]


def test_multiline_edges_match_single_line():
    single = parse_ast("A -> B -> C\nD -> E")
    multi = parse_ast("A\n  -> B\n  -> C\nD\n->\nE\n")
    assert multi == single


def test_edge_attrs():
    graph = parse_ast('A -[]-> B -[t]-> C -[t; k=v, n=2]-> D -[k="x y"]-> E')
    assert graph.items == [
        EdgeChain(
            "A",
            [
                EdgeStep("B"),
                EdgeStep("C", type="t"),
                EdgeStep("D", type="t", attrs=[Attr("k", "v"), Attr("n", "2")]),
                EdgeStep("E", attrs=[Attr("k", "x y")]),
            ],
        )
    ]


def test_quoted_values_are_unescaped():
    graph = parse_ast('D [foo="say \\"hi\\"", multi="line one\nline two"]')
    node = graph.items[0]
    assert node.attrs[0].value == 'say "hi"'
    assert node.attrs[1].value == "line one\nline two"


def test_positions_recorded():
    graph = parse_ast("A -> B\n\tC [k=v]")
    chain, node = graph.items
    assert chain.steps[0].pos == Pos(offset=2, line=1, column=3)
    assert node.pos == Pos(offset=8, line=2, column=5)
    assert node.attrs[0].pos == Pos(offset=11, line=2, column=8)


def test_positions_carry_source_name():
    graph = parse_ast("A", source="f.lilgraph")
    assert str(graph.items[0].pos) == "f.lilgraph:1:1"


@pytest.mark.parametrize(
    "src, expected",
    [
        ("// To check for a bug, this comment is right at EOF", []),
        ("# To check for a bug, this comment is right at EOF", []),
        ("/*To check for a bug, this comment is right at EOF*/", []),
        ("foo // To check for a bug, this comment is right at EOF", [Node("foo")]),
        ("foo # To check for a bug, this comment is right at EOF", [Node("foo")]),
        ("foo /*To check for a bug, this comment is right at EOF*/", [Node("foo")]),
        (
            "foo\n\t\tbar -> baz // To check for a bug, this comment is right at EOF",
            [Node("foo"), EdgeChain("bar", [EdgeStep("baz")])],
        ),
        (
            "foo\n\t\tbar -> baz # To check for a bug, this comment is right at EOF",
            [Node("foo"), EdgeChain("bar", [EdgeStep("baz")])],
        ),
        (
            "foo\n\t\tbar -> baz /*To check for a bug, this comment is right at EOF*/",
            [Node("foo"), EdgeChain("bar", [EdgeStep("baz")])],
        ),
    ],
)
def test_comment_at_eof(src, expected):
    assert parse_ast(src).items == expected


def test_unexpected_end_of_input():
    with pytest.raises(GrammarError) as info:
        Parser().parse(Lexer("A ->"))
    assert str(info.value) == "1:5: error: expected id; got: end-of-file"
    assert info.value.expected_tokens == ["id"]


def test_unexpected_token_lists_alternatives():
    with pytest.raises(GrammarError) as info:
        parse_ast("A = B")
    err = info.value
    assert err.expected_tokens == ["␚", ";", "id", "[", "edgearrow", "edge_attr_open"]
    assert err.stack_top == 5
    assert str(err) == (
        '1:3: error: expected one of ␚, ";", id, "[", edgearrow, or edge_attr_open; got: "="'
    )


def test_error_names_source_file():
    with pytest.raises(GrammarError) as info:
        parse_ast("A = B", source="f.lilgraph")
    assert str(info.value).startswith("f.lilgraph:1:3: error: ")


def test_invalid_character():
    with pytest.raises(GrammarError) as info:
        parse_ast("A $")
    assert str(info.value).endswith('got: unknown/invalid token "$"')


def test_parser_is_reusable():
    parser = Parser()
    first = parser.parse(Lexer("A -> B"))
    second = parser.parse(Lexer("C"))
    assert first.items == [EdgeChain("A", [EdgeStep("B")])]
    assert second.items == [Node("C")]


def test_parse_ast_accepts_bytes():
    assert parse_ast("X [k=\"もしもし 🥳\"]".encode()).items == [
        Node("X", attrs=[Attr("k", "もしもし 🥳")])
    ]