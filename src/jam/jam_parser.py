"""
Jam Language Parser

Parses a stream of Jam tokens into an abstract syntax tree (AST).

This module implements a recursive-descent parser with one token of lookahead.
It reads from a `TokenSource` (see `jam_lexer`) and produces a tree of
`ASTNode` instances. A Jam program is a single expression.

Grammar
-------
    Exp     ::= 'if' Exp 'then' Exp 'else' Exp
              | 'let' Def+ 'in' Exp
              | 'map' VarList 'to' Exp
              | Term (BinOp Term)*
    Term    ::= UnOp Term | Constant | Factor ('(' Args ')')?
    Factor  ::= '(' Exp ')' | Prim | Id
    Args    ::= ε | Exp (',' Exp)*
    VarList ::= ε | Id (',' Id)*
    Def     ::= Id ':=' Exp ';'

Parser Behavior
---------------
- Binary operators share a single precedence level and associate to the left:
  `a + b * c` parses as `((a + b) * c)`.
- Each production consumes exactly the tokens it owns; no backtracking.
- The first violation raises `ParseError`; there is no recovery and no partial
  result.

Entry Points
------------
- `parse()`: Parse a whole program and require end of input.
- `Parser.from_string()`, `Parser.from_file()`, `Parser.from_tokens()`:
  build a parser over raw source, a file, or a pre-lexed token list.

Raises
------
ParseError
    Raised when an unexpected token, premature end of input, or trailing
    data is encountered.
"""

from __future__ import annotations

from collections.abc import Iterable

from jam.jam_ast import ASTNode
from jam.jam_constants import (
    BIND,
    BOOL,
    COMMA,
    ELSE,
    IDENT,
    IF,
    IN,
    INT,
    LET,
    LPAREN,
    MAP,
    NULL,
    OP,
    PRIM,
    RPAREN,
    SEMICOLON,
    THEN,
    TO,
)
from jam.jam_lexer import ParseError, Token, TokenSource, TokenStream

_LEAF_KINDS: dict[str, str] = {
    INT: "constant",
    BOOL: "constant",
    NULL: "constant",
    IDENT: "variable",
    PRIM: "primfun",
}


class Parser:
    """
    Jam Parser Class

    Drives the grammar over a single token cursor. Each Parser owns its token
    source and parses exactly one program; it must not be shared.

    Attributes
    ----------
    tokens : TokenSource
        The read/peek cursor the descent routines consume.

    Methods
    -------
    parse() -> ASTNode
        Parse a complete Jam program.
    parse_exp() -> ASTNode
        Parse one expression starting at the next token.
    parse_term(token) -> ASTNode
        Parse a term whose lead token has already been read.
    parse_factor(token) -> ASTNode
        Parse a parenthesised expression, primitive, or variable.
    parse_if() / parse_let() / parse_map() -> ASTNode
        Parse the remainder of a construct after its keyword.
    parse_exps(separator, delimiter) -> list[ASTNode]
        Parse a delimited, separated list of expressions.
    parse_args() -> list[ASTNode]
        Parse call arguments after `(`, including the closing `)`.
    parse_vars() -> list[ASTNode]
        Parse a `map` parameter list, including the closing `to`.
    parse_defs() -> list[ASTNode]
        Parse `let` definitions, including the closing `in`.
    parse_def(token) -> ASTNode
        Parse one `x := exp;` definition.

    Raises
    ------
    ParseError
        When the token stream violates the grammar.
    """

    def __init__(self, tokens: TokenSource) -> None:
        self.tokens: TokenSource = tokens

    @classmethod
    def from_string(cls, source: str) -> Parser:
        return cls(TokenStream.from_string(source))

    @classmethod
    def from_file(cls, path: str) -> Parser:
        with open(path, encoding="utf-8") as f:
            return cls.from_string(f.read())

    @classmethod
    def from_tokens(cls, tokens: Iterable[Token]) -> Parser:
        return cls(TokenStream.from_tokens(tokens))

    def read(self) -> Token | None:
        return self.tokens.read()

    def peek(self) -> Token | None:
        return self.tokens.peek()

    def expect(self, kind: str, expected: str) -> Token:
        """Reads the next token and requires it to be of `kind`."""
        tok = self.read()
        if tok is None or tok.type != kind:
            raise ParseError.unexpected(tok, expected)
        return tok

    @staticmethod
    def is_kind(tok: Token | None, kind: str) -> bool:
        return tok is not None and tok.type == kind

    def parse(self) -> ASTNode:
        """Parse a full Jam program and require that no tokens remain."""
        ast = self.parse_exp()
        tok = self.read()
        if tok is not None:
            raise ParseError(
                f"Unexpected data after expression: `{tok}'",
                found=tok,
                expected="end of input",
            )
        return ast

    def parse_exp(self) -> ASTNode:
        """Parse an expression; binary operators fold strictly left to right."""
        tok = self.read()

        if tok is not None:
            if tok.type == IF:
                return self.parse_if(tok)
            if tok.type == LET:
                return self.parse_let(tok)
            if tok.type == MAP:
                return self.parse_map(tok)

        exp = self.parse_term(tok)

        while self.is_kind(self.peek(), OP):
            op_tok = self.read()
            assert op_tok is not None  # for mypy
            op = op_tok.to_binop()
            rhs = self.parse_term(self.read())
            exp = ASTNode("binop", op, [exp, rhs], line=op_tok.line, col=op_tok.col)
        return exp

    def parse_term(self, tok: Token | None) -> ASTNode:
        """Parse a unary application, a constant, or a factor with optional call."""
        if tok is not None and tok.type == OP:
            op = tok.to_unop()
            operand = self.parse_term(self.read())
            return ASTNode("unop", op, [operand], line=tok.line, col=tok.col)

        if tok is not None and tok.is_constant():
            return self._leaf(tok)

        factor = self.parse_factor(tok)

        if self.is_kind(self.peek(), LPAREN):
            self.read()
            args = self.parse_args()
            return ASTNode("app", factor, args, line=factor.line, col=factor.col)

        return factor

    def parse_factor(self, tok: Token | None) -> ASTNode:
        if self.is_kind(tok, LPAREN):
            exp = self.parse_exp()
            self.expect(RPAREN, "')'")
            return exp

        if tok is None or tok.type not in (PRIM, IDENT):
            raise ParseError.unexpected(tok, "constant, primitive, variable, or `('")

        return self._leaf(tok)

    def parse_if(self, if_tok: Token) -> ASTNode:
        cond = self.parse_exp()
        self.expect(THEN, "'then'")
        conseq = self.parse_exp()
        self.expect(ELSE, "'else'")
        alt = self.parse_exp()
        return ASTNode(
            "if", None, [cond, conseq, alt], line=if_tok.line, col=if_tok.col
        )

    def parse_let(self, let_tok: Token) -> ASTNode:
        defs = self.parse_defs()
        body = self.parse_exp()
        return ASTNode("let", body, defs, line=let_tok.line, col=let_tok.col)

    def parse_map(self, map_tok: Token) -> ASTNode:
        params = self.parse_vars()
        body = self.parse_exp()
        return ASTNode("map", body, params, line=map_tok.line, col=map_tok.col)

    def parse_exps(self, separator: str, delimiter: str) -> list[ASTNode]:
        """Parse `exp (separator exp)* delimiter`, or a lone delimiter."""
        if self.is_kind(self.peek(), delimiter):
            self.read()
            return []

        exps: list[ASTNode] = []
        while True:
            exps.append(self.parse_exp())
            tok = self.read()
            if self.is_kind(tok, separator):
                continue
            if self.is_kind(tok, delimiter):
                return exps
            raise ParseError.unexpected(tok, "`,' or `)'")

    def parse_args(self) -> list[ASTNode]:
        return self.parse_exps(COMMA, RPAREN)

    def parse_vars(self) -> list[ASTNode]:
        """Parse a `map` parameter list up to and including `to`."""
        tok = self.read()
        if self.is_kind(tok, TO):
            return []

        params: list[ASTNode] = []
        while True:
            if tok is None or tok.type != IDENT:
                raise ParseError.unexpected(tok, "variable")
            params.append(self._leaf(tok))

            tok = self.read()
            if self.is_kind(tok, TO):
                return params
            if not self.is_kind(tok, COMMA):
                raise ParseError.unexpected(tok, "'to' or ','")
            tok = self.read()

    def parse_defs(self) -> list[ASTNode]:
        """Parse one or more definitions up to and including `in`."""
        defs: list[ASTNode] = []
        tok = self.read()
        while True:
            defs.append(self.parse_def(tok))
            tok = self.read()
            if self.is_kind(tok, IN):
                return defs

    def parse_def(self, tok: Token | None) -> ASTNode:
        if tok is None or tok.type != IDENT:
            raise ParseError.unexpected(tok, "variable")
        var = self._leaf(tok)
        self.expect(BIND, "`:='")
        rhs = self.parse_exp()
        self.expect(SEMICOLON, "`;'")
        return ASTNode("def", tok.value, [var, rhs], line=tok.line, col=tok.col)

    def _leaf(self, tok: Token) -> ASTNode:
        """Lifts a constant, primitive, or identifier token into a fresh AST leaf."""
        kind = _LEAF_KINDS[tok.type]
        if kind == "constant":
            return ASTNode(
                kind,
                tok.literal(),
                line=tok.line,
                col=tok.col,
                type_=tok.type.lower(),
            )
        return ASTNode(kind, tok.value, line=tok.line, col=tok.col)


__all__ = ["ParseError", "Parser"]
