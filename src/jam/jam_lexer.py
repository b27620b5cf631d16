"""
Lexical analyzer for the Jam language.

This module turns raw Jam source into the token stream the parser consumes:

Classes:
    ParseError: The single error kind raised for lexical and syntactic faults.
    CharacterStream: Stream abstraction for reading characters with line/column tracking.
    Token: A single token with canonical kind, source text, and location.
    Lexer: Converts a CharacterStream into a sequence of tokens.
    TokenSource: Protocol of the read/peek cursor the parser drives.
    TokenStream: The standard TokenSource, backed by a Lexer or a token list.

Features:
    - Skips whitespace, `//` line comments and `/* ... */` block comments
    - Recognizes:
        * Keywords (`if`, `then`, `else`, `let`, `in`, `map`, `to`)
        * Constants (integers, `true`, `false`, `null`)
        * Primitive functions (`cons`, `first`, `number?`, ...)
        * Identifiers (letters, digits, `_` and `?` after the first letter)
        * Operators and punctuation, longest match first (`:=`, `<=`, `!=`)
    - End of input is reported as `None`, never as a token value.

Raises:
    ParseError: If an illegal character or an unterminated comment is encountered.

Example:
    >>> stream = TokenStream.from_string("f(x) + 1")
    >>> stream.read()
    Token(IDENT, f)
"""

from collections.abc import Iterable, Iterator
from typing import Any, Protocol

from jam.jam_constants import (
    BOOL,
    CONSTANT_KINDS,
    IDENT,
    INT,
    OP,
    PRIM,
    binary_ops,
    keyword_tokens,
    literal_tokens,
    primitive_names,
    token_hashmap,
    unary_ops,
)

_DIGITS = "0123456789"
_MAX_OP_LEN = max(len(text) for text in token_hashmap)


class ParseError(SyntaxError):
    """Raised when Jam source or a token stream violates the grammar.

    Attributes:
        found (Token | None): The offending token, or None for end of input.
        expected (str | None): What the grammar required at that point.
        line (int): Source line of the offending token (0 if unknown).
        col (int): Source column of the offending token (0 if unknown).
    """

    def __init__(
        self,
        message: str,
        found: "Token | None" = None,
        expected: str | None = None,
        line: int = 0,
        col: int = 0,
    ) -> None:
        super().__init__(message)
        self.found = found
        self.expected = expected
        if found is not None:
            line, col = found.line, found.col
        self.line = line
        self.col = col
        self.lineno = line or None
        self.offset = col or None

    def __str__(self) -> str:
        return str(self.msg)

    @classmethod
    def unexpected(cls, found: "Token | None", expected: str) -> "ParseError":
        """Builds the standard "found X where Y was expected" error."""
        text = "EOF" if found is None else str(found)
        return cls(
            f"Token `{text}' appears where {expected} was expected",
            found=found,
            expected=expected,
        )


class CharacterStream:
    """
    Reads characters from a source string, tracking line and column.

    Attributes:
        source (str): The input source string.
        position (int): Current index in the source.
        line (int): Current line number (1-indexed).
        column (int): Current column number (1-indexed).
    """

    def __init__(self, source: str, position: int = 0, line: int = 1, column: int = 1):
        self.source = source
        self.position = position
        self.line = line
        self.column = column

    def next(self) -> str:
        """
        Consumes and returns the next character.

        Raises:
            EOFError: If reading past the end of the source.
        """
        if self.position >= len(self.source):
            raise EOFError(
                f"read past end of source at position=<{self.position}>, line=<{self.line}>"
            )
        char = self.source[self.position]
        if char == "\n":
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        self.position += 1
        return char

    def peek(self, offset: int = 0) -> str:
        """Returns the character `offset` places ahead, or "" when out of bounds."""
        index = self.position + offset
        if index < 0 or index >= len(self.source):
            return ""
        return self.source[index]

    def end_of_file(self) -> bool:
        return self.position >= len(self.source)


class Token:
    """A single lexical token of a Jam program.

    Tokens are read-only lexical data. The parser lifts identifier, primitive
    and constant tokens into fresh AST leaves rather than placing tokens in
    the tree.

    Attributes:
        type (str): The canonical token kind (one of `TOKEN_KINDS`).
        value (str): The token's source text.
        line (int): The 1-based line number where the token appears.
        col (int): The 1-based column number where the token starts.
    """

    def __init__(self, type_: str, value: str, line: int = 0, col: int = 0):
        self.type = type_
        self.value = value
        self.line = line
        self.col = col

    def __repr__(self) -> str:
        return f"Token({self.type}, {self.value})"

    def __str__(self) -> str:
        return self.value

    def __eq__(self, other: Any) -> bool:
        return (
            isinstance(other, Token)
            and self.type == other.type
            and self.value == other.value
            and self.line == other.line
            and self.col == other.col
        )

    def __hash__(self) -> int:
        return hash((self.type, self.value, self.line, self.col))

    def is_constant(self) -> bool:
        return self.type in CONSTANT_KINDS

    def is_unop(self) -> bool:
        """True if this is an operator token usable in prefix position."""
        return self.type == OP and self.value in unary_ops

    def is_binop(self) -> bool:
        """True if this is an operator token usable in infix position."""
        return self.type == OP and self.value in binary_ops

    def to_unop(self) -> str:
        """Returns the unary operator tag, failing if the operator has no unary form."""
        if not self.is_unop():
            raise ParseError.unexpected(self, "unary operator")
        return self.value

    def to_binop(self) -> str:
        """Returns the binary operator tag, failing if the operator has no binary form."""
        if not self.is_binop():
            raise ParseError.unexpected(self, "binary operator")
        return self.value

    def literal(self) -> int | bool | None:
        """Returns the Python value of a constant token.

        Raises:
            ValueError: If the token is not a constant.
        """
        if self.type == INT:
            return int(self.value)
        if self.type == BOOL:
            return self.value == "true"
        if self.is_constant():
            return None
        raise ValueError(f"{self!r} is not a constant token")


class Lexer:
    """Lexical analyzer for Jam.

    Attributes:
        stream (CharacterStream): The source stream to tokenize.
    """

    def __init__(self, stream: CharacterStream) -> None:
        self.stream = stream

    def peek(self, offset: int = 0) -> str:
        return self.stream.peek(offset)

    def advance(self) -> str:
        return self.stream.next()

    def skip_whitespace(self) -> None:
        """Skips whitespace and both comment forms."""
        while not self.stream.end_of_file():
            ch = self.peek()
            if ch in " \t\r\n\f":
                self.advance()
            elif ch == "/" and self.peek(1) == "/":
                self.skip_line_comment()
            elif ch == "/" and self.peek(1) == "*":
                self.skip_block_comment()
            else:
                break

    def skip_line_comment(self) -> None:
        while not self.stream.end_of_file() and self.peek() != "\n":
            self.advance()

    def skip_block_comment(self) -> None:
        line, col = self.stream.line, self.stream.column
        self.advance()
        self.advance()
        while not self.stream.end_of_file():
            if self.peek() == "*" and self.peek(1) == "/":
                self.advance()
                self.advance()
                return
            self.advance()
        raise ParseError(
            f"Unterminated comment at line {line}, col {col}", line=line, col=col
        )

    def match_operator(self) -> Token | None:
        """Matches the longest operator or punctuation at the current position."""
        line, col = self.stream.line, self.stream.column
        max_token = None
        candidate = ""

        for i in range(_MAX_OP_LEN):
            ch = self.peek(i)
            if ch == "":
                break
            candidate += ch
            if candidate in token_hashmap:
                max_token = candidate

        if max_token:
            for _ in range(len(max_token)):
                self.advance()
            return Token(token_hashmap[max_token], max_token, line, col)

        return None

    def read_word(self) -> str:
        word = ""
        while not self.stream.end_of_file() and (
            self.peek().isalnum() or self.peek() in "_?"
        ):
            word += self.advance()
        return word

    def next_token(self) -> Token | None:
        """Consumes and returns the next Token, or None at end of input.

        Raises:
            ParseError: If an illegal character or unterminated comment is found.
        """
        self.skip_whitespace()

        if self.stream.end_of_file():
            return None

        ch = self.peek()
        line, col = self.stream.line, self.stream.column

        # 1. Keyword, constant, primitive or identifier
        if ch.isalpha():
            word = self.read_word()
            if word in keyword_tokens:
                return Token(keyword_tokens[word], word, line, col)
            if word in literal_tokens:
                return Token(literal_tokens[word], word, line, col)
            if word in primitive_names:
                return Token(PRIM, word, line, col)
            return Token(IDENT, word, line, col)

        # 2. Integer
        if ch in _DIGITS:
            num = ""
            while not self.stream.end_of_file() and self.peek() in _DIGITS:
                num += self.advance()
            return Token(INT, num, line, col)

        # 3. Operator or punctuation
        token = self.match_operator()
        if token:
            return token

        raise ParseError(f"`{ch}' is not a legal token", line=line, col=col)

    def __iter__(self) -> Iterator[Token]:
        while True:
            tok = self.next_token()
            if tok is None:
                return
            yield tok


def tokenize(source: str) -> list[Token]:
    """Lexes a whole Jam source string into a list of tokens."""
    return list(Lexer(CharacterStream(source)))


class TokenSource(Protocol):
    """The cursor the parser reads from.

    Methods:
        read(): Consumes and returns the next token, or None at end of input.
        peek(): Returns the next token without consuming it, or None at end of
            input. Repeated calls with no intervening read return the same token.
    """

    def read(self) -> Token | None: ...  # pragma: no cover

    def peek(self) -> Token | None: ...  # pragma: no cover


class TokenStream:
    """One-token-lookahead cursor over a token iterator.

    Tokens are pulled lazily, so lexical errors surface at the point the
    parser first looks at the offending text.
    """

    def __init__(self, tokens: Iterable[Token]) -> None:
        self._tokens: Iterator[Token] = iter(tokens)
        self._lookahead: Token | None = None
        self._has_lookahead = False

    @classmethod
    def from_string(cls, source: str) -> "TokenStream":
        return cls(Lexer(CharacterStream(source)))

    @classmethod
    def from_tokens(cls, tokens: Iterable[Token]) -> "TokenStream":
        return cls(list(tokens))

    def peek(self) -> Token | None:
        if not self._has_lookahead:
            self._lookahead = next(self._tokens, None)
            self._has_lookahead = True
        return self._lookahead

    def read(self) -> Token | None:
        tok = self.peek()
        self._lookahead = None
        self._has_lookahead = False
        return tok


__all__ = [
    "CharacterStream",
    "Lexer",
    "ParseError",
    "Token",
    "TokenSource",
    "TokenStream",
    "tokenize",
]
