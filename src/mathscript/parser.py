"""Parser for the MathScript language.

Recursive descent over a lazy token stream. Binary operators are parsed by
precedence level, from the loosest (logical or) down to the tightest
(power), with unary operators and atoms handled in ``_parse_factor``.

Inside a matrix row, ``+`` and ``-`` are whitespace-sensitive so that
``[1 -2]`` is a row of two numbers while ``[1 - 2]`` and ``[1-2]`` are a
single element.
"""

from __future__ import annotations

from mathscript.ast_nodes import (
    Assignment,
    BinaryOp,
    Compound,
    Empty,
    FunctionCall,
    FunctionDefinition,
    Literal,
    MatrixLiteral,
    Node,
    TernaryOp,
    UnaryOp,
    Variable,
)
from mathscript.errors import ParseError
from mathscript.lexer import Lexer
from mathscript.source import Span
from mathscript.tokens import Token, TokenKind, describe
from mathscript.values import UNITS, Boolean, Number

# Precedence level per binary operator; a lower level binds tighter.
_LEVELS: dict[TokenKind, int] = {
    TokenKind.CARET: 0,
    TokenKind.PERCENT: 1,
    TokenKind.STAR: 2,
    TokenKind.SLASH: 2,
    TokenKind.PLUS: 3,
    TokenKind.MINUS: 3,
    TokenKind.AMPERSAND: 4,
    TokenKind.PIPE: 4,
    TokenKind.LESS: 5,
    TokenKind.LESS_EQUAL: 5,
    TokenKind.GREATER: 5,
    TokenKind.GREATER_EQUAL: 5,
    TokenKind.EQUAL: 5,
    TokenKind.NOT_EQUAL: 5,
    TokenKind.AND: 6,
    TokenKind.OR: 7,
}

_LOOSEST = max(_LEVELS.values())
_SPACING_LEVEL = _LEVELS[TokenKind.PLUS]

_UNARY = frozenset({TokenKind.PLUS, TokenKind.MINUS, TokenKind.BANG})

_COMPOUND_ASSIGN: dict[TokenKind, str] = {
    TokenKind.PLUS_ASSIGN: "+",
    TokenKind.MINUS_ASSIGN: "-",
    TokenKind.STAR_ASSIGN: "*",
    TokenKind.SLASH_ASSIGN: "/",
}

_BLANK = frozenset(" \t")


def _join(start: Span | None, end: Span | None) -> Span | None:
    if start is None:
        return end
    if end is None:
        return start
    return start.to(end)


class Parser:
    """Parses the token stream of a Lexer into a MathScript AST."""

    def __init__(self, lexer: Lexer) -> None:
        self.lexer = lexer
        self.filename = lexer.filename
        self.current: Token = lexer.next_token()

    # ── Token access ─────────────────────────────────────────────

    def _at(self, kind: TokenKind) -> bool:
        return self.current.kind == kind

    def _advance(self) -> Token:
        tok = self.current
        if tok.kind != TokenKind.EOF:
            self.current = self.lexer.next_token()
        return tok

    def _expect(self, kind: TokenKind) -> Token:
        if self._at(kind):
            return self._advance()
        raise ParseError(
            f"expected {describe(kind)}, got {self._describe(self.current)}",
            self.current.span,
        )

    def _skip_newlines(self) -> None:
        while self._at(TokenKind.NEWLINE):
            self._advance()

    @staticmethod
    def _describe(tok: Token) -> str:
        if tok.kind == TokenKind.NUMBER:
            return f"number {tok.value:g}"
        if tok.kind in (TokenKind.IDENTIFIER, TokenKind.RESERVED_VALUE):
            return f"'{tok.value}'"
        return describe(tok.kind)

    def _require(self, node: Node) -> Node:
        """Reject an Empty node where an operand is mandatory."""
        if isinstance(node, Empty):
            raise ParseError(
                f"expected an expression, got {self._describe(self.current)}",
                self.current.span,
            )
        return node

    def _spaced_as_binary(self) -> bool:
        """Whether the +/- just read is a binary operator inside a matrix row.

        The lexer cursor sits right after the operator: offset 0 is the
        character following it and offset -2 the one preceding it.
        """
        return (self.lexer.peek_char(0) in _BLANK
                or self.lexer.peek_char(-2) not in _BLANK)

    # ── Program and statements ───────────────────────────────────

    def parse(self) -> Compound:
        """Parse the entire source into a Compound of top-level statements."""
        start = self.current.span
        children = self._parse_statement_list()
        end = self.current.span
        if not self._at(TokenKind.EOF):
            raise ParseError(
                f"unexpected {self._describe(self.current)}", self.current.span,
            )
        return Compound(children, _join(start, end))

    def _parse_statement_list(self) -> list[Node]:
        self._skip_newlines()
        statements = self._parse_statement()
        while self._at(TokenKind.NEWLINE):
            self._skip_newlines()
            statements.extend(self._parse_statement())
        return statements

    def _parse_statement(self) -> list[Node]:
        """Parse one line: assignments, an expression, or nothing."""
        if self._at(TokenKind.IDENTIFIER):
            following = self.lexer.peek_token().kind
            if following == TokenKind.ASSIGN or following in _COMPOUND_ASSIGN:
                return self._parse_assignments()

        node = self._parse_expr()
        if isinstance(node, Empty):
            return []
        return [node]

    def _parse_assignments(self) -> list[Node]:
        assignments = [self._parse_assignment()]
        while self._at(TokenKind.COMMA):
            self._advance()
            assignments.append(self._parse_assignment())
        return assignments

    def _parse_assignment(self) -> Assignment:
        """assignment: identifier ('=' | '+=' | '-=' | '*=' | '/=') expr"""
        target = self._parse_variable()
        if self.current.kind not in _COMPOUND_ASSIGN:
            self._expect(TokenKind.ASSIGN)
            value = self._require(self._parse_expr())
            return Assignment(target, value, _join(target.span, value.span))

        op_tok = self._advance()
        value = self._require(self._parse_expr())
        span = _join(target.span, value.span)
        combined = BinaryOp(
            Variable(target.name, span=target.span),
            _COMPOUND_ASSIGN[op_tok.kind],
            value,
            span,
        )
        return Assignment(target, combined, span)

    # ── Expressions ──────────────────────────────────────────────

    def _parse_expr(self, ignore_whitespace: bool = True) -> Node:
        """expr: binary ['?' expr ':' expr]"""
        condition = self._parse_binary(_LOOSEST, ignore_whitespace)
        if not self._at(TokenKind.QUESTION):
            return condition

        self._require(condition)
        self._advance()  # ?
        then = self._require(self._parse_expr(ignore_whitespace))
        self._expect(TokenKind.COLON)
        otherwise = self._require(self._parse_expr(ignore_whitespace))
        return TernaryOp(condition, then, otherwise,
                         _join(condition.span, otherwise.span))

    def _parse_binary(self, level: int, ignore_whitespace: bool) -> Node:
        """Parse operators of ``level`` and tighter, left-associatively.

        Recurses only for right operands, one level tighter than the
        operator just read.
        """
        node = self._parse_factor()
        while True:
            op_level = _LEVELS.get(self.current.kind)
            if op_level is None or op_level > level:
                return node
            if (op_level == _SPACING_LEVEL and not ignore_whitespace
                    and not self._spaced_as_binary()):
                # A sign glued to the next element: leave it for the row.
                return node
            self._require(node)
            op_tok = self._advance()
            right = self._require(self._parse_binary(op_level - 1, ignore_whitespace))
            node = BinaryOp(node, str(op_tok.value), right,
                            _join(node.span, right.span))

    def _parse_factor(self) -> Node:
        """Parse a unary operator or an atom; Empty if nothing starts here."""
        tok = self.current

        if tok.kind in _UNARY:
            self._advance()
            operand = self._require(self._parse_factor())
            return UnaryOp(str(tok.value), operand, _join(tok.span, operand.span))

        if tok.kind == TokenKind.NUMBER:
            return self._parse_number()

        # Parentheses restore whitespace-insensitive parsing inside matrices
        if tok.kind == TokenKind.LPAREN:
            self._advance()
            node = self._require(self._parse_expr())
            self._expect(TokenKind.RPAREN)
            return node

        if tok.kind == TokenKind.LBRACKET:
            return self._parse_matrix()

        if tok.kind == TokenKind.RESERVED_VALUE:
            self._advance()
            return Literal(Boolean(tok.value == "true"), tok.span)

        if tok.kind == TokenKind.IDENTIFIER:
            if self.lexer.peek_token().kind == TokenKind.LPAREN:
                call = self._parse_call()
                if self.current.kind in (TokenKind.ASSIGN, TokenKind.FAT_ARROW):
                    return self._parse_function_definition(call)
                return call
            return self._parse_variable()

        return Empty(tok.span)

    def _parse_number(self) -> Literal:
        """NUMBER [unit], where the unit must touch the number (``3cm``)."""
        tok = self._advance()
        unit = None
        end = tok.span
        if (self._at(TokenKind.IDENTIFIER) and self.current.value in UNITS
                and self.current.span.start_line == tok.span.end_line
                and self.current.span.start_col == tok.span.end_col + 1):
            unit_tok = self._advance()
            unit = UNITS[str(unit_tok.value)]
            end = unit_tok.span
        return Literal(Number(float(tok.value), unit), _join(tok.span, end))

    def _parse_variable(self) -> Variable:
        tok = self._expect(TokenKind.IDENTIFIER)
        return Variable(str(tok.value), span=tok.span)

    # ── Functions ────────────────────────────────────────────────

    def _parse_call(self) -> FunctionCall:
        """call: identifier '(' [expr {',' expr}] ')'"""
        name_tok = self._advance()
        self._expect(TokenKind.LPAREN)
        args: list[Node] = []
        while not self._at(TokenKind.RPAREN):
            args.append(self._require(self._parse_expr()))
            if self._at(TokenKind.COMMA):
                self._advance()
            else:
                break
        end_tok = self._expect(TokenKind.RPAREN)
        return FunctionCall(str(name_tok.value), args,
                            _join(name_tok.span, end_tok.span))

    def _parse_function_definition(self, call: FunctionCall) -> FunctionDefinition:
        """Reinterpret a parsed call followed by '=' or '=>' as a definition."""
        self._advance()  # '=' or '=>'

        params: list[Variable] = []
        for arg in call.args:
            if not isinstance(arg, Variable):
                raise ParseError(
                    f"parameters of '{call.name}' must be plain variable names",
                    arg.span or call.span,
                    notes=[f"define it as {call.name}(x, y) = expression"],
                )
            if any(p.name == arg.name for p in params):
                raise ParseError(
                    f"duplicate parameter '{arg.name}' in '{call.name}'",
                    arg.span or call.span,
                )
            params.append(arg)

        if self._at(TokenKind.LBRACE):
            start = self._advance()
            statements = self._parse_statement_list()
            end = self._expect(TokenKind.RBRACE)
            body = Compound(statements, _join(start.span, end.span))
        else:
            expr = self._require(self._parse_expr())
            body = Compound([expr], expr.span)

        return FunctionDefinition(call.name, params, body,
                                  _join(call.span, body.span))

    # ── Matrices ─────────────────────────────────────────────────

    def _parse_matrix(self) -> MatrixLiteral:
        """matrix: '[' row {';' row} ']'"""
        start = self._expect(TokenKind.LBRACKET)
        rows: list[list[Node]] = []
        while not self._at(TokenKind.RBRACKET):
            rows.append(self._parse_matrix_row())
            if self._at(TokenKind.SEMICOLON):
                self._advance()
        end = self._expect(TokenKind.RBRACKET)
        span = _join(start.span, end.span)

        if not rows:
            raise ParseError("empty matrix literal", span)
        width = len(rows[0])
        for index, row in enumerate(rows[1:], start=2):
            if len(row) != width:
                raise ParseError(
                    f"matrix row {index} has {len(row)} elements, expected {width}",
                    span,
                )
        return MatrixLiteral(rows, span)

    def _parse_matrix_row(self) -> list[Node]:
        """row: expr {[','] expr}"""
        row: list[Node] = []
        while True:
            element = self._parse_expr(ignore_whitespace=False)
            if isinstance(element, Empty):
                raise ParseError(
                    f"expected a matrix element, got {self._describe(self.current)}",
                    self.current.span,
                )
            row.append(element)
            if self._at(TokenKind.SEMICOLON) or self._at(TokenKind.RBRACKET):
                return row
            if self._at(TokenKind.COMMA):
                self._advance()


def parse(source: str, filename: str = "<input>") -> Compound:
    """Lex and parse ``source`` into its program AST."""
    return Parser(Lexer(source, filename)).parse()
