"""Token kinds, token representation and the constant lexeme tables."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from mathscript.source import Span


class TokenKind(Enum):
    # Literals and names
    NUMBER = auto()
    IDENTIFIER = auto()
    RESERVED_VALUE = auto()

    # Logical and comparison
    AND = auto()
    OR = auto()
    NOT_EQUAL = auto()
    EQUAL = auto()
    LESS_EQUAL = auto()
    GREATER_EQUAL = auto()
    LESS = auto()
    GREATER = auto()
    BANG = auto()

    # Definition and assignment
    FAT_ARROW = auto()
    ASSIGN = auto()
    PLUS_ASSIGN = auto()
    MINUS_ASSIGN = auto()
    STAR_ASSIGN = auto()
    SLASH_ASSIGN = auto()

    # Arithmetic
    PLUS = auto()
    MINUS = auto()
    STAR = auto()
    SLASH = auto()
    CARET = auto()
    PERCENT = auto()

    # Bitwise
    AMPERSAND = auto()
    PIPE = auto()

    # Punctuation
    LPAREN = auto()
    RPAREN = auto()
    LBRACKET = auto()
    RBRACKET = auto()
    LBRACE = auto()
    RBRACE = auto()
    SEMICOLON = auto()
    COMMA = auto()
    DOT = auto()
    COLON = auto()
    QUESTION = auto()

    # Statement separator
    NEWLINE = auto()

    # Special
    EOF = auto()


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    value: float | str
    span: Span
    offset: int = 0


# Ordered: the first lexeme that matches at the cursor wins, so every
# multi-character lexeme must precede its single-character prefix.
OPERATORS: tuple[tuple[str, TokenKind], ...] = (
    ("&&", TokenKind.AND),
    ("||", TokenKind.OR),
    ("!=", TokenKind.NOT_EQUAL),
    ("=>", TokenKind.FAT_ARROW),
    ("==", TokenKind.EQUAL),
    ("<=", TokenKind.LESS_EQUAL),
    (">=", TokenKind.GREATER_EQUAL),
    ("+=", TokenKind.PLUS_ASSIGN),
    ("-=", TokenKind.MINUS_ASSIGN),
    ("*=", TokenKind.STAR_ASSIGN),
    ("/=", TokenKind.SLASH_ASSIGN),
    ("!", TokenKind.BANG),
    ("+", TokenKind.PLUS),
    ("-", TokenKind.MINUS),
    ("*", TokenKind.STAR),
    ("/", TokenKind.SLASH),
    ("^", TokenKind.CARET),
    ("%", TokenKind.PERCENT),
    ("(", TokenKind.LPAREN),
    (")", TokenKind.RPAREN),
    ("[", TokenKind.LBRACKET),
    ("]", TokenKind.RBRACKET),
    ("{", TokenKind.LBRACE),
    ("}", TokenKind.RBRACE),
    ("<", TokenKind.LESS),
    (">", TokenKind.GREATER),
    (";", TokenKind.SEMICOLON),
    (",", TokenKind.COMMA),
    ("=", TokenKind.ASSIGN),
    ("|", TokenKind.PIPE),
    (".", TokenKind.DOT),
    ("\n", TokenKind.NEWLINE),
    ("&", TokenKind.AMPERSAND),
    (":", TokenKind.COLON),
    ("?", TokenKind.QUESTION),
)

RESERVED_WORDS: dict[str, TokenKind] = {
    "true": TokenKind.RESERVED_VALUE,
    "false": TokenKind.RESERVED_VALUE,
}

LEXEMES: dict[TokenKind, str] = {kind: text for text, kind in OPERATORS}
LEXEMES.update({
    TokenKind.NUMBER: "number",
    TokenKind.IDENTIFIER: "identifier",
    TokenKind.RESERVED_VALUE: "true/false",
    TokenKind.NEWLINE: "newline",
    TokenKind.EOF: "end of input",
})


def describe(kind: TokenKind) -> str:
    """Human-readable name of a token kind for error messages."""
    text = LEXEMES[kind]
    if kind in (TokenKind.NUMBER, TokenKind.IDENTIFIER, TokenKind.RESERVED_VALUE,
                TokenKind.NEWLINE, TokenKind.EOF):
        return text
    return repr(text)
