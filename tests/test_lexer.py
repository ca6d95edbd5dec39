import pytest

from main import lex
from tokens import TokenType


def test_lexer_recognizes_keywords_and_punctuation():
    src = "int x = 5; void main() { return; }"
    tokens = lex(src)
    types = [t.type for t in tokens]

    assert TokenType.INT_TYPE in types
    assert TokenType.VOID_TYPE in types
    assert TokenType.IDENTIFIER in types
    assert TokenType.ASSIGN in types
    assert TokenType.SEMICOLON in types
    assert TokenType.RETURN in types
    assert types[-1] == TokenType.EOF


def test_lexer_two_character_operators():
    tokens = lex("a == b != c <= d >= e && f || g ++ -- += -= *= /=")
    ops = [t.type for t in tokens if t.type != TokenType.IDENTIFIER][:-1]
    assert ops == [
        TokenType.EQ,
        TokenType.NEQ,
        TokenType.LTE,
        TokenType.GTE,
        TokenType.AND,
        TokenType.OR,
        TokenType.INCREMENT,
        TokenType.DECREMENT,
        TokenType.PLUS_ASSIGN,
        TokenType.MINUS_ASSIGN,
        TokenType.STAR_ASSIGN,
        TokenType.SLASH_ASSIGN,
    ]


def test_lexer_skips_comments_and_tracks_lines():
    src = "// leading comment\nint x; // trailing\n  x = 1;"
    tokens = lex(src)
    assert [t.type for t in tokens[:3]] == [
        TokenType.INT_TYPE,
        TokenType.IDENTIFIER,
        TokenType.SEMICOLON,
    ]
    assert tokens[0].line == 2
    assign_target = tokens[3]
    assert assign_target.value == "x"
    assert (assign_target.line, assign_target.column) == (3, 3)


def test_lexer_include_directive():
    tokens = lex("#include <microio.h>\nvoid main() { }")
    assert tokens[0].type == TokenType.INCLUDE
    assert tokens[0].value == "microio.h"
    assert tokens[1].type == TokenType.VOID_TYPE


def test_lexer_rejects_unknown_character():
    with pytest.raises(SyntaxError):
        lex("int x = 5 @ 3;")


def test_lexer_rejects_unknown_directive():
    with pytest.raises(SyntaxError):
        lex("#define X 1")


def test_lexer_pointer_operators():
    tokens = lex("int* p = &x; *p = *p * 2;")
    types = [t.type for t in tokens]
    assert types[:3] == [TokenType.INT_TYPE, TokenType.STAR, TokenType.IDENTIFIER]
    assert TokenType.AMPERSAND in types
    # `&&` is still the logical operator, not two address-of tokens
    assert [t.type for t in lex("a && b")][1] == TokenType.AND
