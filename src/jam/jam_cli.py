"""
Jam CLI Entrypoint.

This module provides the command-line interface for parsing Jam programs.

Features:
    - Read source from `.jam` files or inline strings.
    - Lex and parse the program, reporting the first syntax error.
    - Print the AST as Jam source, JSON, or its debug representation.
    - Dump the token stream instead of parsing.
    - Output to console or file.
    - Launch an interactive REPL.

Example usage:
    jam program.jam
    jam -s "let x := 3; in x + 1" -f json
    jam program.jam -o program.ast.json -f json
    jam --repl

Functions:
    format_ast(ast: ASTNode, fmt: str) -> str:
        Renders a parsed program in one of the supported output formats.

    run_jam(source: str, is_string: bool = False, fmt: str = "source", out: Optional[str] = None,
            pretty: bool = False, tokens: bool = False) -> None:
        Executes the Jam pipeline (lex → parse → format → output).

    main() -> None:
        Parses CLI arguments and invokes the appropriate action (REPL or parse).
"""

import argparse
import json
import sys

from jam.jam_ast import ASTNode
from jam.jam_lexer import ParseError, tokenize
from jam.jam_parser import Parser

FORMATS = ("source", "json", "repr")


def format_ast(ast: ASTNode, fmt: str = "source") -> str:
    """Renders `ast` as Jam source, indented JSON, or its repr.

    Raises:
        ValueError: If `fmt` is not one of FORMATS.
    """
    if fmt == "source":
        return ast.to_source()
    if fmt == "json":
        return json.dumps(ast.to_dict(), indent=2)
    if fmt == "repr":
        return repr(ast)
    raise ValueError(f"Unknown output format: {fmt!r}")


def run_jam(
    source: str,
    is_string: bool = False,
    fmt: str = "source",
    out: str | None = None,
    pretty: bool = False,
    tokens: bool = False,
) -> None:
    """
    Run the Jam toolchain: lex, parse, and print or write the result.

    Args:
        source (str): The Jam source code or path to a `.jam` file.
        is_string (bool): If True, treats `source` as raw code instead of a file path. Defaults to False.
        fmt (str): Output format ('source', 'json' or 'repr'). Defaults to 'source'.
        out (str | None): Optional path to write the output. If None, prints to stdout.
        pretty (bool): If True, prints formatted banners around the output. Defaults to False.
        tokens (bool): If True, prints the token stream instead of parsing. Defaults to False.

    Raises:
        ValueError: If `is_string` is False and the source does not end with '.jam'.
        ParseError: If the program is not syntactically well formed.
    """
    if not is_string and not source.endswith(".jam"):
        raise ValueError("Only .jam files are supported.")
    # 1. Read source
    if not is_string:
        with open(source, encoding="utf-8") as f:
            source = f.read()

    # 2. Lexing only
    if tokens:
        output = "\n".join(
            f"{tok.line}:{tok.col}\t{tok.type}\t{tok.value}" for tok in tokenize(source)
        )
        title = "Tokens"
    # 3. Parsing
    else:
        ast = Parser.from_string(source).parse()
        output = format_ast(ast, fmt)
        title = "Jam AST"

    # 4. Output result
    if pretty:
        banner = "=" * 20
        print(f"{banner}\n{title}\n{banner}\n{output}\n{banner}\n")
    elif not out:
        print(output)

    # 5. Optional write to file
    if out:
        with open(out, "w", encoding="utf-8") as f:
            f.write(output + "\n")
        if pretty:
            print(f"(wrote to {out})")


def main() -> None:
    """
    Entry point for the Jam CLI.

    Launches the REPL if no arguments are passed or `--repl` is specified;
    otherwise parses the given file or string.

    Supported flags:
        - `-s`, `--string`: Interpret source as a raw string instead of a file path.
        - `-f`, `--format`: Output format ('source', 'json', 'repr'), default is 'source'.
        - `-o`, `--out`: Write output to a file.
        - `-p`, `--pretty`: Show banners around the output.
        - `-t`, `--tokens`: Print the token stream instead of the AST.
        - `--repl`: Launch the interactive REPL.

    Parse errors are reported on stderr and exit with status 1.
    """
    if len(sys.argv) == 1:
        # No args passed: open REPL instead
        from jam.jam_repl import start_repl

        start_repl()
        return
    parser = argparse.ArgumentParser(prog="jam")
    parser.add_argument("source", nargs="?", help="Filename or raw source (with -s)")
    parser.add_argument(
        "-s", "--string", action="store_true", help="Interpret source as literal string"
    )
    parser.add_argument(
        "-f",
        "--format",
        dest="fmt",
        choices=FORMATS,
        default="source",
        help="Output format (default: source)",
    )
    parser.add_argument("-o", "--out", metavar="OUTFILE", help="Output to file")
    parser.add_argument(
        "-p", "--pretty", action="store_true", help="Show output with banners"
    )
    parser.add_argument(
        "-t", "--tokens", action="store_true", help="Print tokens instead of the AST"
    )
    parser.add_argument(
        "--repl",
        action="store_true",
        help="Launch interactive REPL instead of parsing",
    )

    args = parser.parse_args()

    if args.repl or args.source is None:
        from jam.jam_repl import start_repl

        start_repl(fmt=args.fmt)
        return

    try:
        run_jam(
            source=args.source,
            is_string=args.string,
            fmt=args.fmt,
            out=args.out,
            pretty=args.pretty,
            tokens=args.tokens,
        )
    except (ParseError, ValueError, OSError) as e:
        print(f"[error] >>> {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
