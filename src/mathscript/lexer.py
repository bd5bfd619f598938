"""Lexer for the MathScript language.

Produces tokens lazily, one per call, with one-token lookahead. Newlines
are significant (they separate statements) and are never skipped.
"""

from __future__ import annotations

from collections.abc import Iterator

from mathscript.errors import UnexpectedSymbolError
from mathscript.source import Span
from mathscript.tokens import OPERATORS, RESERVED_WORDS, Token, TokenKind

_SKIPPED = frozenset(" \t\r\f\v")

_DIGITS = frozenset("0123456789")

_EOF_CHAR = "\0"


class Lexer:
    """Tokenizes MathScript source code on demand."""

    def __init__(self, source: str, filename: str = "<input>") -> None:
        self.source = source
        self.filename = filename
        self.pos = 0
        self.line = 1
        self.col = 1

    def next_token(self) -> Token:
        """Consume and return the next token."""
        return self._tokenize()

    def peek_token(self) -> Token:
        """Return the next token without advancing."""
        saved = (self.pos, self.line, self.col)
        try:
            return self._tokenize()
        finally:
            self.pos, self.line, self.col = saved

    def peek_char(self, offset: int = 0) -> str:
        """Character at cursor + offset, or ``"\\0"`` if out of bounds."""
        idx = self.pos + offset
        if 0 <= idx < len(self.source):
            return self.source[idx]
        return _EOF_CHAR

    def lex(self) -> list[Token]:
        """Tokenize the remaining source and return the token list, EOF included."""
        tokens = []
        while True:
            tok = self.next_token()
            tokens.append(tok)
            if tok.kind == TokenKind.EOF:
                return tokens

    # ── Helpers ───────────────────────────────────────────────────

    def _at_end(self) -> bool:
        return self.pos >= len(self.source)

    def _advance(self) -> str:
        ch = self.source[self.pos]
        self.pos += 1
        if ch == '\n':
            self.line += 1
            self.col = 1
        else:
            self.col += 1
        return ch

    def _make(self, kind: TokenKind, value: float | str,
              start: tuple[int, int, int]) -> Token:
        start_pos, start_line, start_col = start
        if kind == TokenKind.NEWLINE:
            end_line, end_col = start_line, start_col
        else:
            end_line, end_col = self.line, max(1, self.col - 1)
        span = Span(self.filename, start_line, start_col, end_line, end_col)
        return Token(kind, value, span, start_pos)

    def _skip_whitespace(self) -> None:
        """Skip whitespace other than newlines."""
        while not self._at_end() and self.source[self.pos] in _SKIPPED:
            self._advance()

    # ── Tokenizing ───────────────────────────────────────────────

    def _tokenize(self) -> Token:
        self._skip_whitespace()
        start = (self.pos, self.line, self.col)

        if self._at_end():
            return self._make(TokenKind.EOF, "", start)

        ch = self.source[self.pos]
        if ch in _DIGITS:
            return self._lex_number(start)
        if ch.isalpha() or ch == '_':
            return self._lex_identifier(start)
        return self._lex_operator(start)

    def _lex_number(self, start: tuple[int, int, int]) -> Token:
        text = []
        while not self._at_end() and self.source[self.pos] in _DIGITS:
            text.append(self._advance())

        if not self._at_end() and self.source[self.pos] == '.':
            text.append(self._advance())
            while not self._at_end() and self.source[self.pos] in _DIGITS:
                text.append(self._advance())

        return self._make(TokenKind.NUMBER, float(''.join(text)), start)

    def _lex_identifier(self, start: tuple[int, int, int]) -> Token:
        text = []
        while not self._at_end() and (self.source[self.pos].isalnum()
                                      or self.source[self.pos] == '_'):
            text.append(self._advance())
        word = ''.join(text)
        kind = RESERVED_WORDS.get(word, TokenKind.IDENTIFIER)
        return self._make(kind, word, start)

    def _lex_operator(self, start: tuple[int, int, int]) -> Token:
        for lexeme, kind in OPERATORS:
            if self.source.startswith(lexeme, self.pos):
                for _ in lexeme:
                    self._advance()
                return self._make(kind, lexeme, start)

        ch = self.source[self.pos]
        span = Span(self.filename, self.line, self.col, self.line, self.col)
        raise UnexpectedSymbolError(ch, self.pos, span)


def tokenize(source: str, filename: str = "<input>") -> Iterator[Token]:
    """Yield tokens one at a time, ending with EOF."""
    lexer = Lexer(source, filename)
    while True:
        tok = lexer.next_token()
        yield tok
        if tok.kind == TokenKind.EOF:
            return
