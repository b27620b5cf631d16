"""
Token tables for the Jam language.

Every token the lexer can produce has a canonical kind from `TOKEN_KINDS`.
The parser dispatches on these kinds only.

Tables:
    TOKEN_KINDS: The closed set of token kinds.
    keyword_tokens: Reserved words mapped to their keyword kind.
    literal_tokens: Reserved words that denote constants.
    primitive_names: Names of the built-in primitive functions.
    unary_ops / binary_ops: Operator text usable in prefix / infix position.
    token_hashmap: Symbolic operator and punctuation text mapped to its kind.
"""

IF = "IF"
THEN = "THEN"
ELSE = "ELSE"
LET = "LET"
IN = "IN"
MAP = "MAP"
TO = "TO"

LPAREN = "LPAREN"
RPAREN = "RPAREN"
COMMA = "COMMA"
SEMICOLON = "SEMICOLON"
BIND = "BIND"

OP = "OP"
INT = "INT"
BOOL = "BOOL"
NULL = "NULL"
IDENT = "IDENT"
PRIM = "PRIM"

TOKEN_KINDS: frozenset[str] = frozenset(
    {
        IF,
        THEN,
        ELSE,
        LET,
        IN,
        MAP,
        TO,
        LPAREN,
        RPAREN,
        COMMA,
        SEMICOLON,
        BIND,
        OP,
        INT,
        BOOL,
        NULL,
        IDENT,
        PRIM,
    }
)

CONSTANT_KINDS: frozenset[str] = frozenset({INT, BOOL, NULL})

keyword_tokens: dict[str, str] = {
    "if": IF,
    "then": THEN,
    "else": ELSE,
    "let": LET,
    "in": IN,
    "map": MAP,
    "to": TO,
}

literal_tokens: dict[str, str] = {
    "true": BOOL,
    "false": BOOL,
    "null": NULL,
}

primitive_names: frozenset[str] = frozenset(
    {
        "number?",
        "function?",
        "list?",
        "null?",
        "cons?",
        "arity",
        "cons",
        "first",
        "rest",
    }
)

unary_ops: frozenset[str] = frozenset({"+", "-", "~"})

binary_ops: frozenset[str] = frozenset(
    {"+", "-", "*", "/", "=", "!=", "<", ">", "<=", ">=", "&", "|"}
)

token_hashmap: dict[str, str] = {
    "(": LPAREN,
    ")": RPAREN,
    ",": COMMA,
    ";": SEMICOLON,
    ":=": BIND,
    **{op: OP for op in sorted(unary_ops | binary_ops)},
}
