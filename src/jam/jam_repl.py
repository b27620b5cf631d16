import io
import traceback

from jam.jam_cli import FORMATS, format_ast
from jam.jam_constants import LPAREN, RPAREN
from jam.jam_lexer import ParseError, tokenize
from jam.jam_parser import Parser


def print_traceback() -> None:
    buf = io.StringIO()
    traceback.print_exc(file=buf)
    print("[error] >>>")
    print(buf.getvalue())


def paren_depth(src: str) -> int:
    """Net count of open parentheses, or 0 if the text does not lex."""
    try:
        toks = tokenize(src)
    except ParseError:
        return 0
    return sum(t.type == LPAREN for t in toks) - sum(t.type == RPAREN for t in toks)


def handle_format_command(src: str, fmt: str) -> str | None:
    """Handles `format` and `format <name>`; returns the new format, or None if not a command."""
    parts = src.split()
    if parts == ["format"]:
        print(f"[mode] >>> Output format: {fmt}")
        return fmt
    if len(parts) == 2 and parts[0] == "format" and parts[1] in FORMATS:
        print(f"[mode] >>> Output format set to {parts[1]}")
        return parts[1]
    return None


def eval_line(src: str, fmt: str) -> None:
    """Parses one Jam program and prints it, or prints the parse error."""
    try:
        ast = Parser.from_string(src).parse()
    except ParseError as e:
        print(f"[error] >>> {e}")
        return
    print(format_ast(ast, fmt))


def start_repl(fmt: str = "source") -> None:
    print(f"Jam REPL [format={fmt}]. Type 'exit' or 'quit' to leave.")

    while True:
        try:
            src_lines: list[str] = []
            while True:
                prompt = ">>> " if not src_lines else "... "
                line = input(prompt)
                if line.strip() in ("exit", "quit") and not src_lines:
                    print("Exiting Jam REPL.")
                    return
                src_lines.append(line)
                if paren_depth("\n".join(src_lines)) <= 0:
                    break
            src = "\n".join(src_lines).strip()
            if not src or src.startswith("//"):
                continue
            new_fmt = handle_format_command(src, fmt)
            if new_fmt is not None:
                fmt = new_fmt
                continue
            eval_line(src, fmt)
        except (EOFError, KeyboardInterrupt):
            print("\nExiting Jam REPL.")
            return
        except Exception:
            print_traceback()
