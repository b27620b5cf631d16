from pathlib import Path
from typing import Any

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st
from hypothesis.strategies import composite

from jam.jam_ast import ASTNode
from jam.jam_constants import binary_ops, keyword_tokens, literal_tokens, primitive_names
from jam.jam_lexer import ParseError, Token, tokenize
from jam.jam_parser import Parser

reserved_words = set(keyword_tokens) | set(literal_tokens) | primitive_names


def parse(source: str) -> ASTNode:
    return Parser.from_string(source).parse()


def prune(node: Any) -> Any:
    """Remove line/col and empty fields so trees can be compared by shape."""
    if isinstance(node, list):
        return [prune(n) for n in node]
    if isinstance(node, dict):
        return {
            k: prune(v)
            for k, v in node.items()
            if k not in ("line", "col")
            and not (k == "children" and v == [])
            and not (k in ("type", "value") and v is None)
        }
    return node


def shape(source: str) -> Any:
    return prune(parse(source).to_dict())


def v(name: str) -> dict[str, Any]:
    return {"kind": "variable", "value": name}


def n(value: int) -> dict[str, Any]:
    return {"kind": "constant", "value": value, "type": "int"}


def binop(op: str, left: Any, right: Any) -> dict[str, Any]:
    return {"kind": "binop", "value": op, "children": [left, right]}


# --- Expressions and operator chaining ---


@pytest.mark.parametrize(
    "source,expected",
    [
        ("x", "x"),
        ("42", "42"),
        ("true", "true"),
        ("null", "null"),
        ("cons", "cons"),
        ("a + b", "(a + b)"),
        ("a + b * c", "((a + b) * c)"),
        ("a * b + c", "((a * b) + c)"),
        ("a - b - c", "((a - b) - c)"),
        ("a = b & c | d", "(((a = b) & c) | d)"),
        ("(1+2)*3", "((1 + 2) * 3)"),
        ("1 + (2 * 3)", "(1 + (2 * 3))"),
        ("((x))", "x"),
        ("- x", "- x"),
        ("- - x", "- - x"),
        ("~ x & y", "(~ x & y)"),
        ("-3 + 4", "(- 3 + 4)"),
        ("a <= b", "(a <= b)"),
        ("a != -b", "(a != - b)"),
    ],
)  # type: ignore[misc]
def test_expression_rendering(source: str, expected: str) -> None:
    assert parse(source).to_source() == expected


def test_flat_left_associative_chaining() -> None:
    assert shape("a + b * c") == binop("*", binop("+", v("a"), v("b")), v("c"))


def test_explicit_parenthesization_respected() -> None:
    assert shape("(1+2)*3") == binop("*", binop("+", n(1), n(2)), n(3))


@given(ops=st.lists(st.sampled_from(sorted(binary_ops)), min_size=1, max_size=8))  # type: ignore[misc]
def test_chaining_is_left_leaning_for_any_operators(ops: list[str]) -> None:
    source = "x0 " + " ".join(f"{op} x{i + 1}" for i, op in enumerate(ops))
    tree = parse(source)
    for i, op in reversed(list(enumerate(ops))):
        assert tree.kind == "binop"
        assert tree.value == op
        rhs = tree.children[1]
        assert (rhs.kind, rhs.value) == ("variable", f"x{i + 1}")
        tree = tree.children[0]
    assert tree.kind == "variable" and tree.value == "x0"


def test_unary_application() -> None:
    assert shape("~ done?") == {"kind": "unop", "value": "~", "children": [v("done?")]}


def test_unary_binds_to_term_only() -> None:
    assert shape("- f(x) + 1") == binop(
        "+",
        {
            "kind": "unop",
            "value": "-",
            "children": [{"kind": "app", "value": v("f"), "children": [v("x")]}],
        },
        n(1),
    )


# --- Application ---


def test_application_with_arguments() -> None:
    assert shape("f(x, y)") == {"kind": "app", "value": v("f"), "children": [v("x"), v("y")]}


def test_application_without_arguments() -> None:
    assert shape("f()") == {"kind": "app", "value": v("f")}
    assert parse("f()").children == []


def test_bare_identifier_is_not_an_application() -> None:
    assert shape("f") == v("f")


def test_primitive_application() -> None:
    assert shape("cons(1, null)") == {
        "kind": "app",
        "value": {"kind": "primfun", "value": "cons"},
        "children": [n(1), {"kind": "constant", "type": "null"}],
    }


def test_arguments_are_full_expressions() -> None:
    assert parse("f(if a then b else c, map to 1, let x := 1; in x)").to_source() == (
        "f(if a then b else c, map to 1, let x := 1; in x)"
    )


def test_parenthesized_callee() -> None:
    assert parse("(map x to x)(5)").to_source() == "(map x to x)(5)"


def test_constant_is_never_applied() -> None:
    with pytest.raises(ParseError, match="Unexpected data"):
        parse("3(4)")


def test_application_result_in_operator_chain() -> None:
    assert parse("f(1) + g(2)").to_source() == "(f(1) + g(2))"


# --- if / let / map ---


def test_if_expression() -> None:
    assert shape("if x then y else z") == {
        "kind": "if",
        "children": [v("x"), v("y"), v("z")],
    }


def test_nested_if_in_else_branch() -> None:
    tree = parse("if a then 1 else if b then 2 else 3")
    assert tree.children[2].kind == "if"


def test_if_branch_absorbs_operators() -> None:
    assert parse("if a then b else c + 1").to_source() == "if a then b else (c + 1)"


def test_let_single_definition() -> None:
    assert shape("let x := 3 ; in x") == {
        "kind": "let",
        "value": v("x"),
        "children": [{"kind": "def", "value": "x", "children": [v("x"), n(3)]}],
    }


def test_let_multiple_definitions_keep_order() -> None:
    tree = parse("let a := 1; b := a + 1; c := f(b); in c")
    assert [d.value for d in tree.children] == ["a", "b", "c"]
    assert tree.children[1].children[1].to_source() == "(a + 1)"


def test_let_definition_may_bind_a_map() -> None:
    tree = parse("let f := map n to n * 2; in f(3)")
    assert tree.children[0].children[1].kind == "map"
    assert tree.to_source() == "let f := map n to (n * 2); in f(3)"


def test_map_empty_parameter_list() -> None:
    assert shape("map to x") == {"kind": "map", "value": v("x")}


def test_map_with_parameters() -> None:
    assert shape("map x, y to x+y") == {
        "kind": "map",
        "value": binop("+", v("x"), v("y")),
        "children": [v("x"), v("y")],
    }


def test_map_body_extends_to_end() -> None:
    assert parse("map x to x + 1 * 2").to_source() == "map x to ((x + 1) * 2)"


def test_juxtaposed_terms_are_trailing_data() -> None:
    with pytest.raises(ParseError, match="Unexpected data"):
        parse("(if a then b else c) d")


# --- Positions ---


def test_node_positions() -> None:
    tree = parse("let\n  x := 1 + y;\nin f(x)")
    assert (tree.line, tree.col) == (1, 1)
    d = tree.children[0]
    assert (d.line, d.col) == (2, 3)
    plus = d.children[1]
    assert (plus.line, plus.col) == (2, 10)
    body = tree.value
    assert isinstance(body, ASTNode)
    assert (body.kind, body.line, body.col) == ("app", 3, 4)


def test_leaves_are_fresh_nodes_not_tokens() -> None:
    tree = parse("f(x)")
    assert isinstance(tree.value, ASTNode)
    assert all(isinstance(c, ASTNode) for c in tree.children)


def test_constant_leaf_holds_resolved_literal() -> None:
    assert parse("12").value == 12
    assert parse("false").value is False
    assert parse("null").value is None
    assert parse("null").type == "null"


# --- Errors ---


@pytest.mark.parametrize(
    "source,message",
    [
        ("3 3", "Unexpected data after expression: `3'"),
        ("if x then y", "Token `EOF' appears where 'else' was expected"),
        ("if x else y", "Token `else' appears where 'then' was expected"),
        ("if x then y then z", "Token `then' appears where 'else' was expected"),
        ("a ~ b", "Token `~' appears where binary operator was expected"),
        ("* a", "Token `*' appears where unary operator was expected"),
        ("(a + b", "Token `EOF' appears where ')' was expected"),
        ("(a b)", "Token `b' appears where ')' was expected"),
        ("f(a b)", "Token `b' appears where `,' or `)' was expected"),
        ("f(a,", "Token `EOF' appears where constant, primitive, variable, or `(' was expected"),
        ("f(a, )", "Token `)' appears where constant, primitive, variable, or `(' was expected"),
        ("", "Token `EOF' appears where constant, primitive, variable, or `(' was expected"),
        ("then", "Token `then' appears where constant, primitive, variable, or `(' was expected"),
        ("a +", "Token `EOF' appears where constant, primitive, variable, or `(' was expected"),
        ("let in x", "Token `in' appears where variable was expected"),
        ("let x = 3; in x", "Token `=' appears where `:=' was expected"),
        ("let x := 3 in x", "Token `in' appears where `;' was expected"),
        ("let x := 3;", "Token `EOF' appears where variable was expected"),
        ("let x := 3; y in x", "Token `in' appears where `:=' was expected"),
        ("map x y to x", "Token `y' appears where 'to' or ',' was expected"),
        ("map x, to x", "Token `to' appears where variable was expected"),
        ("map 1 to x", "Token `1' appears where variable was expected"),
        ("map x, y", "Token `EOF' appears where 'to' or ',' was expected"),
    ],
)  # type: ignore[misc]
def test_parse_errors(source: str, message: str) -> None:
    with pytest.raises(ParseError) as excinfo:
        parse(source)
    assert str(excinfo.value) == message


def test_error_attributes() -> None:
    with pytest.raises(ParseError) as excinfo:
        parse("if x\nthen y\n  fi z")
    err = excinfo.value
    assert isinstance(err, SyntaxError)
    assert err.expected == "'else'"
    assert err.found == Token("IDENT", "fi", 3, 3)
    assert (err.line, err.col) == (3, 3)


def test_error_at_end_of_stream_has_no_token() -> None:
    with pytest.raises(ParseError) as excinfo:
        parse("f(")
    assert excinfo.value.found is None


def test_trailing_data_error_attributes() -> None:
    with pytest.raises(ParseError) as excinfo:
        parse("x )")
    assert excinfo.value.found == Token("RPAREN", ")", 1, 3)
    assert excinfo.value.expected == "end of input"


def test_lexical_error_propagates() -> None:
    with pytest.raises(ParseError, match="is not a legal token"):
        parse("x + $")


# --- Construction ---


def test_from_tokens() -> None:
    tokens = [
        Token("MAP", "map"),
        Token("IDENT", "x"),
        Token("TO", "to"),
        Token("IDENT", "x"),
        Token("OP", "+"),
        Token("INT", "1"),
    ]
    assert Parser.from_tokens(tokens).parse().to_source() == "map x to (x + 1)"


def test_from_file(tmp_path: Path) -> None:
    path = tmp_path / "prog.jam"
    path.write_text("// doubles\nlet d := map n to n + n; in d(21)\n", encoding="utf-8")
    tree = Parser.from_file(str(path)).parse()
    assert tree.kind == "let"


def test_custom_token_source() -> None:
    class Source:
        def __init__(self, toks: list[Token]) -> None:
            self.toks = toks

        def read(self) -> Token | None:
            return self.toks.pop(0) if self.toks else None

        def peek(self) -> Token | None:
            return self.toks[0] if self.toks else None

    source = Source(tokenize("f(1, 2)"))
    assert Parser(source).parse().to_source() == "f(1, 2)"
    assert source.toks == []


# --- Properties ---

identifiers = st.from_regex(r"[a-z][a-z0-9_]{0,6}", fullmatch=True).filter(
    lambda s: s not in reserved_words
)


@composite
def jam_expressions(draw: Any, depth: int = 3) -> str:
    if depth == 0:
        return draw(
            st.one_of(
                identifiers,
                st.integers(min_value=0, max_value=999).map(str),
                st.sampled_from(["true", "false", "null", "first", "cons?"]),
            )
        )
    sub = jam_expressions(depth=depth - 1)
    choice = draw(st.integers(min_value=0, max_value=7))
    if choice == 0:
        return f"if {draw(sub)} then {draw(sub)} else {draw(sub)}"
    if choice == 1:
        defs = draw(st.lists(st.tuples(identifiers, sub), min_size=1, max_size=3))
        body = " ".join(f"{x} := {e};" for x, e in defs)
        return f"let {body} in {draw(sub)}"
    if choice == 2:
        params = draw(st.lists(identifiers, max_size=3))
        return f"map {', '.join(params)} to {draw(sub)}"
    if choice == 3:
        op = draw(st.sampled_from(sorted(binary_ops)))
        return f"({draw(sub)}) {op} ({draw(sub)})"
    if choice == 4:
        return f"{draw(st.sampled_from(['-', '+', '~']))} ({draw(sub)})"
    if choice == 5:
        args = draw(st.lists(sub, max_size=3))
        return f"{draw(identifiers)}({', '.join(args)})"
    if choice == 6:
        return f"({draw(sub)})"
    return draw(jam_expressions(depth=0))


def strip_positions(node: ASTNode) -> Any:
    return prune(node.to_dict())


@settings(max_examples=200)  # type: ignore[misc]
@given(jam_expressions())  # type: ignore[misc]
def test_well_formed_programs_parse_and_round_trip(source: str) -> None:
    tree = parse(source)
    reparsed = parse(tree.to_source())
    assert strip_positions(reparsed) == strip_positions(tree)


@settings(max_examples=100)  # type: ignore[misc]
@given(jam_expressions(), jam_expressions(depth=0))  # type: ignore[misc]
def test_any_extra_term_is_trailing_data(source: str, extra: str) -> None:
    with pytest.raises(ParseError):
        parse(f"({source}) {extra}")
