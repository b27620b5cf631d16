"""
Defines the abstract syntax tree (AST) node structure for the Jam language.

Classes:
    ASTNode:
        A node in the syntax tree produced by the parser. Supports structural
        equality, dictionary serialisation and rendering back to Jam source.

    ASTDict:
        TypedDict representation for serializing ASTNode instances to plain Python dictionaries,
        suitable for JSON output or debugging.

Node kinds and the meaning of their fields:

    kind        value                 children                 type
    ---------   -------------------   ----------------------   -----------------
    constant    literal (int/bool/None)                        "int"/"bool"/"null"
    variable    name
    primfun     name
    unop        operator              [operand]
    binop       operator              [left, right]
    app         callee ASTNode        arguments (0 or more)
    if                                [cond, conseq, alt]
    let         body ASTNode          def nodes (1 or more)
    map         body ASTNode          variable nodes (0 or more)
    def         variable name         [variable, rhs]

Example:
    node = ASTNode("binop", "+", [ASTNode("variable", "x"), ASTNode("variable", "y")])
    str(node)  # "(x + y)"
"""

from typing import Any, TypedDict, Union

LEAF_KINDS = frozenset({"constant", "variable", "primfun"})


class ASTDict(TypedDict, total=False):
    """
    TypedDict representation of an ASTNode used for serialization.

    Fields:
        kind (str): The type of AST node (e.g., "binop", "app", "let").
        value (Any): The node's value: a name, operator, literal, or nested ASTDict.
        line (int): Line number in the source code where the node originates.
        col (int): Column number in the source code where the node originates.
        type (Optional[str]): Literal type of a constant ("int", "bool", "null").
        children (List[ASTDict]): Child nodes in the AST hierarchy.
    """

    kind: str
    value: Any
    line: int
    col: int
    type: str | None
    children: list["ASTDict"]


class ASTNode:
    """
    Represents a node in the abstract syntax tree (AST) for the Jam language.

    Args:
        kind (str): The type of node (see the module table).
        value (Union[str, int, bool, ASTNode], optional): Name, operator,
            literal value, or a nested node (callee or body).
        children (list[ASTNode], optional): Child nodes in the syntax tree.
        line (int): Source line number (default is 0).
        col (int): Source column number (default is 0).
        type_ (str, optional): Literal type of a constant.

    Methods:
        __repr__(): Returns a structured string representation for debugging.
        __eq__(other): Checks structural equality with another ASTNode.
        to_dict(): Converts the node (and all descendants) into a nested dictionary format.
        to_source(): Renders the node as Jam concrete syntax.
    """

    def __init__(
        self,
        kind: str,
        value: Union[str, int, bool, "ASTNode"] | None = None,
        children: list["ASTNode"] | None = None,
        line: int = 0,
        col: int = 0,
        type_: str | None = None,
    ):
        self.kind = kind
        self.value = value
        self.children: list["ASTNode"] = children or []
        self.line = line
        self.col = col
        self.type = type_

    def __repr__(self) -> str:
        parts = [f"{self.kind}"]
        if self.value is not None:
            parts.append(f"value={repr(self.value)}")
        if self.type is not None:
            parts.append(f"type_={self.type}")
        if self.children:
            preview = ", ".join(repr(c) for c in self.children[:3])
            if len(self.children) > 3:
                preview += ", ..."
            parts.append(f"children=[{preview}]")
        return f"ASTNode({', '.join(parts)})"

    def __str__(self) -> str:
        return self.to_source()

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, ASTNode):
            return False
        # bool is an int subclass; True must not equal the constant 1
        if type(self.value) is not type(other.value):
            return False
        return (
            self.kind == other.kind
            and self.value == other.value
            and self.line == other.line
            and self.col == other.col
            and self.type == other.type
            and self.children == other.children
        )

    def is_leaf(self) -> bool:
        return self.kind in LEAF_KINDS

    def to_dict(self) -> ASTDict:
        val: Any = self.value
        if isinstance(val, ASTNode):
            val = val.to_dict()

        return {
            "kind": self.kind,
            "value": val,
            "line": self.line,
            "col": self.col,
            "type": self.type,
            "children": [c.to_dict() for c in self.children],
        }

    def to_source(self) -> str:
        """Renders the tree as Jam source.

        Binary applications are always parenthesised, so the rendering shows
        the grouping the parser chose and parses back to an equal tree.
        """
        kind = self.kind
        if kind == "constant":
            if self.type == "bool":
                return "true" if self.value else "false"
            if self.type == "null":
                return "null"
            return str(self.value)
        if kind in ("variable", "primfun"):
            return str(self.value)
        if kind == "unop":
            return f"{self.value} {_term_source(self.children[0])}"
        if kind == "binop":
            left, right = self.children
            return f"({_term_source(left)} {self.value} {_term_source(right)})"
        if kind == "app":
            args = ", ".join(c.to_source() for c in self.children)
            return f"{_callee_source(self.value)}({args})"
        if kind == "if":
            cond, conseq, alt = self.children
            return (
                f"if {cond.to_source()} then {conseq.to_source()} "
                f"else {alt.to_source()}"
            )
        if kind == "let":
            defs = " ".join(c.to_source() for c in self.children)
            return f"let {defs} in {_source_of(self.value)}"
        if kind == "map":
            params = ", ".join(c.to_source() for c in self.children)
            head = f"map {params} to" if params else "map to"
            return f"{head} {_source_of(self.value)}"
        if kind == "def":
            var, rhs = self.children
            return f"{var.to_source()} := {rhs.to_source()};"
        raise ValueError(f"Cannot render node kind '{kind}'")


def _source_of(value: Any) -> str:
    if not isinstance(value, ASTNode):
        raise TypeError(f"Expected ASTNode, got {type(value).__name__}")
    return value.to_source()


def _term_source(node: ASTNode) -> str:
    # if/let/map only appear in operand position when parenthesised
    if node.kind in ("if", "let", "map"):
        return f"({node.to_source()})"
    return node.to_source()


def _callee_source(value: Any) -> str:
    if isinstance(value, ASTNode) and value.kind in ("variable", "primfun"):
        return value.to_source()
    return f"({_source_of(value)})"
