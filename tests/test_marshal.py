import pytest

from lilgraph.graph import Lilgraph, parse
from lilgraph.marshal import marshal_text, quoteify


@pytest.mark.parametrize(
    "value, expected",
    [
        ("plain", "plain"),
        ("with space", "with space"),
        ('a "b"', '"a \\"b\\""'),
        ("l1\nl2", '"l1\nl2"'),
        ("", ""),
    ],
)
def test_quoteify(value, expected):
    assert quoteify(value) == expected


@pytest.mark.parametrize(
    "src, expected",
    [
        ("A\nB [t1; x=1]\nA -> B\n", "A\nB [t1; x=1]\nA -> B\n"),
        ("A -> B", "A -> B\n"),
        ("A -> B\nA -> B\n", "A -> B\n"),
        ("A -[t; w=2]-> B\n", "A -[t; w=2]-> B\n"),
        ("A -[t]-> B\n", "A -[t]-> B\n"),
        ("A -[w=2]-> B\n", "A -[w=2]-> B\n"),
        ("A -[]-> B\n", "A -> B\n"),
        ("A -> B\nB [t]\n", "A -> B\nB [t]\n"),
        ("A; B; C\n", "A\nB\nC\n"),
        ('A [x="hello world"]\n', "A [x=hello world]\n"),
        ('A [m="l1\nl2"]\n', 'A [m="l1\nl2"]\n'),
        ('A [t; q="say \\"hi\\""]\n', 'A [t; q="say \\"hi\\""]\n'),
    ],
)
def test_marshal_canonical(src, expected):
    assert marshal_text(parse(src)) == expected


def test_marshal_empty_graph():
    assert marshal_text(Lilgraph()) == ""


def test_marshal_programmatic_graph_orders_nodes_before_edges():
    g = Lilgraph()
    a, _ = g.add_node("A")
    b, _ = g.add_node("B", "t")
    g.add_edge(a, b)
    a.set_attr("k", "v")
    assert marshal_text(g) == "A [k=v]\nB [t]\nA -> B\n"


def test_marshal_skips_undeclared_plain_nodes_with_edges():
    g = Lilgraph()
    a, _ = g.add_node("A")
    b, _ = g.add_node("B")
    g.add_node("C")
    g.add_edge(a, b)
    assert marshal_text(g) == "C\nA -> B\n"


@pytest.mark.parametrize(
    "src",
    [
        "A\nB [t1; x=1]\nA -> B\n",
        'D [sometype; foo=fooval, bar="a \\"b\\"", m="l1\nl2"]\nD -[e; w=3]-> E -> F\n',
    ],
)
def test_marshal_round_trip_is_stable(src):
    first = marshal_text(parse(src))
    assert marshal_text(parse(first)) == first