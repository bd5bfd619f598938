"""Tests for the MathScript lexer."""

from __future__ import annotations

import pytest

from mathscript.errors import UnexpectedSymbolError
from mathscript.lexer import Lexer, tokenize
from mathscript.tokens import TokenKind


def lex(source: str) -> list[tuple[TokenKind, float | str]]:
    """Helper: lex source and return (kind, value) pairs, excluding EOF."""
    tokens = Lexer(source).lex()
    return [(t.kind, t.value) for t in tokens if t.kind != TokenKind.EOF]


def kinds(source: str) -> list[TokenKind]:
    """Helper: lex source and return just the token kinds, excluding EOF."""
    tokens = Lexer(source).lex()
    return [t.kind for t in tokens if t.kind != TokenKind.EOF]


class TestLexerBasic:
    def test_empty_source(self):
        tokens = Lexer("").lex()
        assert len(tokens) == 1
        assert tokens[0].kind == TokenKind.EOF

    def test_whitespace_only(self):
        assert kinds(" \t\r ") == []

    def test_identifier(self):
        assert lex("alpha_2") == [(TokenKind.IDENTIFIER, "alpha_2")]

    def test_underscore_identifier(self):
        assert lex("_x") == [(TokenKind.IDENTIFIER, "_x")]

    def test_reserved_values(self):
        assert lex("true false") == [
            (TokenKind.RESERVED_VALUE, "true"),
            (TokenKind.RESERVED_VALUE, "false"),
        ]

    def test_reserved_prefix_is_identifier(self):
        assert lex("trueish") == [(TokenKind.IDENTIFIER, "trueish")]


class TestLexerNumbers:
    def test_integer(self):
        assert lex("42") == [(TokenKind.NUMBER, 42.0)]

    def test_decimal(self):
        assert lex("3.25") == [(TokenKind.NUMBER, 3.25)]

    def test_trailing_dot(self):
        assert lex("3.") == [(TokenKind.NUMBER, 3.0)]

    def test_number_then_identifier(self):
        assert lex("2cm") == [(TokenKind.NUMBER, 2.0), (TokenKind.IDENTIFIER, "cm")]


class TestLexerOperators:
    def test_multi_char_before_single(self):
        assert kinds("&& || != => == <= >=") == [
            TokenKind.AND, TokenKind.OR, TokenKind.NOT_EQUAL, TokenKind.FAT_ARROW,
            TokenKind.EQUAL, TokenKind.LESS_EQUAL, TokenKind.GREATER_EQUAL,
        ]

    def test_compound_assignment(self):
        assert kinds("+= -= *= /=") == [
            TokenKind.PLUS_ASSIGN, TokenKind.MINUS_ASSIGN,
            TokenKind.STAR_ASSIGN, TokenKind.SLASH_ASSIGN,
        ]

    def test_single_char(self):
        assert kinds("! + - * / ^ % ( ) [ ] { } < > ; , = | . & : ?") == [
            TokenKind.BANG, TokenKind.PLUS, TokenKind.MINUS, TokenKind.STAR,
            TokenKind.SLASH, TokenKind.CARET, TokenKind.PERCENT,
            TokenKind.LPAREN, TokenKind.RPAREN, TokenKind.LBRACKET,
            TokenKind.RBRACKET, TokenKind.LBRACE, TokenKind.RBRACE,
            TokenKind.LESS, TokenKind.GREATER, TokenKind.SEMICOLON,
            TokenKind.COMMA, TokenKind.ASSIGN, TokenKind.PIPE, TokenKind.DOT,
            TokenKind.AMPERSAND, TokenKind.COLON, TokenKind.QUESTION,
        ]

    def test_no_spaces_needed(self):
        assert kinds("a=-1") == [
            TokenKind.IDENTIFIER, TokenKind.ASSIGN, TokenKind.MINUS, TokenKind.NUMBER,
        ]

    def test_newline_is_a_token(self):
        assert kinds("1\n2") == [TokenKind.NUMBER, TokenKind.NEWLINE, TokenKind.NUMBER]

    def test_unexpected_symbol(self):
        with pytest.raises(UnexpectedSymbolError) as excinfo:
            Lexer("1 + $").lex()
        assert excinfo.value.symbol == "$"
        assert excinfo.value.position == 4
        assert excinfo.value.code == "E100"


class TestLexerLookahead:
    def test_peek_token_does_not_advance(self):
        lexer = Lexer("x = 1")
        assert lexer.peek_token().kind == TokenKind.IDENTIFIER
        assert lexer.peek_token().kind == TokenKind.IDENTIFIER
        assert lexer.next_token().kind == TokenKind.IDENTIFIER
        assert lexer.next_token().kind == TokenKind.ASSIGN

    def test_peek_char(self):
        lexer = Lexer("ab")
        assert lexer.peek_char(0) == "a"
        assert lexer.peek_char(1) == "b"
        assert lexer.peek_char(2) == "\0"
        assert lexer.peek_char(-1) == "\0"

    def test_peek_char_follows_cursor(self):
        lexer = Lexer("1 -2")
        lexer.next_token()
        lexer.next_token()  # '-'
        assert lexer.peek_char(0) == "2"
        assert lexer.peek_char(-2) == " "

    def test_eof_repeats(self):
        lexer = Lexer("")
        assert lexer.next_token().kind == TokenKind.EOF
        assert lexer.next_token().kind == TokenKind.EOF

    def test_tokenize_generator(self):
        toks = list(tokenize("1 + 2"))
        assert [t.kind for t in toks] == [
            TokenKind.NUMBER, TokenKind.PLUS, TokenKind.NUMBER, TokenKind.EOF,
        ]


class TestLexerSpans:
    def test_columns(self):
        toks = Lexer("ab + 12", "f.ms").lex()
        assert (toks[0].span.start_col, toks[0].span.end_col) == (1, 2)
        assert (toks[1].span.start_col, toks[1].span.end_col) == (4, 4)
        assert (toks[2].span.start_col, toks[2].span.end_col) == (6, 7)
        assert toks[0].span.file == "f.ms"

    def test_lines(self):
        toks = Lexer("1\n  x").lex()
        ident = toks[2]
        assert ident.kind == TokenKind.IDENTIFIER
        assert (ident.span.start_line, ident.span.start_col) == (2, 3)

    def test_offset(self):
        toks = Lexer("1 + x").lex()
        assert [t.offset for t in toks[:3]] == [0, 2, 4]
