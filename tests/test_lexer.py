import pytest

from lilgraph.lexer import Lexer, lexer_from_file
from lilgraph.tokens import TokenType


def kinds(src):
    return [(tok.type, tok.lit) for tok in Lexer(src)]


def test_simple_edge():
    assert kinds("a -> b") == [
        (TokenType.ID, "a"),
        (TokenType.EDGEARROW, "->"),
        (TokenType.ID, "b"),
        (TokenType.EOF, ""),
    ]


def test_long_arrow_is_single_token():
    assert kinds("a ---> b")[1] == (TokenType.EDGEARROW, "--->")


def test_edge_with_attrs():
    assert kinds("a -[x]-> b") == [
        (TokenType.ID, "a"),
        (TokenType.EDGE_ATTR_OPEN, "-["),
        (TokenType.ID, "x"),
        (TokenType.EDGE_ATTR_CLOSE, "]->"),
        (TokenType.ID, "b"),
        (TokenType.EOF, ""),
    ]


def test_node_decl_with_attrs():
    assert kinds("n [t; k=v, j=1]") == [
        (TokenType.ID, "n"),
        (TokenType.LBRACKET, "["),
        (TokenType.ID, "t"),
        (TokenType.SEMICOLON, ";"),
        (TokenType.ID, "k"),
        (TokenType.EQUALS, "="),
        (TokenType.ID, "v"),
        (TokenType.COMMA, ","),
        (TokenType.ID, "j"),
        (TokenType.EQUALS, "="),
        (TokenType.NUMERIC_LITERAL, "1"),
        (TokenType.RBRACKET, "]"),
        (TokenType.EOF, ""),
    ]


@pytest.mark.parametrize("number", ["1", "42", "2.5", "-3", ".5", "-.25", "-1.75"])
def test_numeric_literals(number):
    assert kinds(number) == [(TokenType.NUMERIC_LITERAL, number), (TokenType.EOF, "")]


@pytest.mark.parametrize("ident", ["_a1", "abc", "A_b_C", "x9y"])
def test_identifiers(ident):
    assert kinds(ident) == [(TokenType.ID, ident), (TokenType.EOF, "")]


def test_quoted_string_with_escaped_quote_and_newline():
    src = '"say \\"hi\\"\nthere もしもし"'
    assert kinds(src) == [(TokenType.QUOTED_STRING, src), (TokenType.EOF, "")]


def test_comments_are_skipped():
    src = "a // one\nb # two\n/* three\n * more */ c\n"
    assert [tok.lit for tok in Lexer(src) if tok.type == TokenType.ID] == ["a", "b", "c"]


def test_line_comment_at_eof_without_newline_is_invalid():
    src = "// trailing"
    tokens = list(Lexer(src))
    assert tokens[0].type == TokenType.INVALID
    assert tokens[0].lit == src
    assert tokens[-1].type == TokenType.EOF


def test_line_comment_with_newline_leaves_only_eof():
    assert kinds("// trailing\n") == [(TokenType.EOF, "")]


def test_unknown_character_is_invalid():
    assert kinds("@")[0] == (TokenType.INVALID, "@")


@pytest.mark.parametrize("src", ["", "   ", "\n\t\r\n", "/* c */"])
def test_blank_input_gives_eof_at_end(src):
    tokens = list(Lexer(src))
    assert len(tokens) == 1
    assert tokens[0].type == TokenType.EOF
    assert tokens[0].pos.offset == len(src)


def test_none_source_is_empty():
    assert kinds(None) == [(TokenType.EOF, "")]


def test_offsets_locate_literals():
    src = "foo [bar; k=\"v\"]\n  x -[y]-> z ; w -> q"
    for tok in Lexer(src):
        start = tok.pos.offset
        assert src[start : start + len(tok.lit)] == tok.lit


def test_line_and_column_tracking():
    tokens = list(Lexer("a\nb"))
    assert (tokens[0].pos.line, tokens[0].pos.column) == (1, 1)
    assert (tokens[1].pos.line, tokens[1].pos.column) == (2, 1)


def test_tab_advances_column_by_four():
    tok = Lexer("\tx").scan()
    assert tok.lit == "x"
    assert tok.pos.column == 5


def test_lines_increase_monotonically():
    src = "a\nb -> c\n\nd\n"
    lines = [tok.pos.line for tok in Lexer(src)]
    assert lines == sorted(lines)
    assert lines[-1] == src.count("\n") + 1


def test_scan_after_eof_keeps_returning_eof():
    lexer = Lexer("a")
    assert lexer.scan().lit == "a"
    assert lexer.scan().type == TokenType.EOF
    assert lexer.scan().type == TokenType.EOF


def test_iteration_stops_after_single_eof():
    tokens = list(Lexer("a b c"))
    assert [tok.type for tok in tokens].count(TokenType.EOF) == 1
    assert tokens[-1].type == TokenType.EOF


def test_reset_rewinds_input():
    lexer = Lexer("first second")
    assert lexer.scan().lit == "first"
    assert lexer.scan().lit == "second"
    lexer.reset()
    assert lexer.scan().lit == "first"


def test_bytes_and_str_give_same_tokens():
    src = 'a -[k="ツ"]-> b'
    assert kinds(src.encode("utf-8")) == kinds(src)


def test_source_name_in_positions():
    tok = Lexer("a", source="graph.lilgraph").scan()
    assert tok.pos.source == "graph.lilgraph"
    assert str(tok.pos) == "graph.lilgraph:1:1"


def test_lexer_from_file(tmp_path):
    path = tmp_path / "g.lilgraph"
    path.write_text("a -> b\n", encoding="utf-8")
    tokens = list(lexer_from_file(path))
    assert [tok.lit for tok in tokens] == ["a", "->", "b", ""]
    assert all(tok.pos.source == str(path) for tok in tokens)


def test_lexer_from_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        lexer_from_file(tmp_path / "missing.lilgraph")