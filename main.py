from __future__ import annotations
import argparse
import json
import logging
import sys
import traceback
from typing import List, Optional, Sequence

from lexer import Lexer
from tokens import Token
from ast_nodes import ProgramNode
from parser import Parser
from program import Program, load_program
from type_checker import TypeChecker
from ast_interpreter import ExecutionResult, Interpreter
from ast_json import ast_to_json, result_to_json
from callgraph_viz import write_and_render
from config import InterpreterConfig
from errors import InterpreterError
from pretty_printer import PrettyPrinter

logger = logging.getLogger("shadowc.main")

EXIT_OK = 0
EXIT_SYNTAX_ERROR = 1
EXIT_RUNTIME_ERROR = 2
EXIT_INTERNAL_ERROR = 3


def lex(text: str) -> List[Token]:
    """Tokenize input string."""
    lexer = Lexer(text)
    return lexer.tokenize()


def parse_tokens(tokens: List[Token]) -> ProgramNode:
    """Parse tokens into AST."""
    parser = Parser(tokens)
    return parser.parse()


def load_source(
    text: str, config: Optional[InterpreterConfig] = None, *, typecheck: bool = True
) -> Program:
    """Lex, parse, load and (optionally) type check a program."""
    config = config or InterpreterConfig()
    program = load_program(parse_tokens(lex(text)), entry_point=config.entry_point)
    if typecheck:
        TypeChecker(program, config).check_program()
    return program


def run_source(
    text: str, config: Optional[InterpreterConfig] = None, *, typecheck: bool = True
) -> ExecutionResult:
    """Run a program given as source text and return its final state."""
    config = config or InterpreterConfig()
    program = load_source(text, config, typecheck=typecheck)
    return Interpreter(program, config).run()


def process_program(
    text: str,
    *,
    config: Optional[InterpreterConfig] = None,
    print_tokens: bool = False,
    print_ast: bool = False,
    print_state: bool = True,
    typecheck: bool = True,
    dump_ast_path: Optional[str] = None,
    dump_state_path: Optional[str] = None,
    viz_path: Optional[str] = None,
    viz_format: str = "svg",
) -> int:
    """Process a single program: lex, parse, load, type check, run and report.

    Returns a process exit code. Flags control which stages are printed.
    """
    config = config or InterpreterConfig()
    try:
        tokens = lex(text)
        if print_tokens:
            print(f"Tokens ({len(tokens)}):")
            for i, token in enumerate(tokens[:50]):
                print(f"  {i:3}: {token}")
            if len(tokens) > 50:
                print(f"  ... and {len(tokens) - 50} more")

        ast = parse_tokens(tokens)
        if print_ast:
            print("\nAST:")
            print(PrettyPrinter.print_ast(ast))

        if dump_ast_path:
            with open(dump_ast_path, "w", encoding="utf-8") as fh:
                json.dump(ast_to_json(ast), fh, indent=2)
            print(f"Wrote AST JSON to {dump_ast_path}")
    except SyntaxError as e:
        print(f"Syntax Error: {e}", file=sys.stderr)
        return EXIT_SYNTAX_ERROR
    except RecursionError:
        print("Syntax Error: program is nested too deeply", file=sys.stderr)
        return EXIT_SYNTAX_ERROR

    program = None
    try:
        program = load_program(ast, entry_point=config.entry_point)
        if typecheck:
            TypeChecker(program, config).check_program()
            logger.info("type check passed")
        result = Interpreter(program, config).run()
    except (InterpreterError, RecursionError) as e:
        print(f"{type(e).__name__}: {e}", file=sys.stderr)
        # A failed run still has a call graph worth looking at
        if viz_path and program is not None:
            _render_calls(program, viz_path, viz_format, None)
        return EXIT_RUNTIME_ERROR
    except Exception as e:
        print(f"Unexpected error: {e}", file=sys.stderr)
        traceback.print_exc()
        return EXIT_INTERNAL_ERROR

    if print_state:
        print(PrettyPrinter.print_slots(result.slots))
        if result.return_value is not None:
            print(f"return: {result.return_value}")
        for value in result.output:
            print(f"output: {value}")

    if dump_state_path:
        with open(dump_state_path, "w", encoding="utf-8") as fh:
            json.dump(result_to_json(result), fh, indent=2)
        print(f"Wrote final state JSON to {dump_state_path}")

    if viz_path:
        _render_calls(program, viz_path, viz_format, result.slots)

    return EXIT_OK


def _render_calls(program: Program, viz_path: str, viz_format: str, slots) -> None:
    try:
        write_and_render(program, viz_path, slots=slots, fmt=viz_format)
        print(f"Wrote call graph visualization to {viz_path}.{viz_format}")
    except Exception as e:
        # graphviz raises ExecutableNotFound when the `dot` binary is missing
        logger.warning("Failed to render call graph to %s: %s", viz_path, e)


def interactive_mode(
    config: Optional[InterpreterConfig] = None,
    print_tokens: bool = False,
    print_ast: bool = False,
    typecheck: bool = True,
) -> None:
    """Run an interactive REPL reading whole programs (one per line) from stdin."""
    print("\nInteractive Interpreter Mode (type 'quit' to exit)")
    print("=" * 80)

    while True:
        try:
            text = input("\nEnter program: ").strip()
            if text.lower() in ("quit", "exit", "q"):
                print("Goodbye!")
                break

            if not text:
                continue

            process_program(
                text,
                config=config,
                print_tokens=print_tokens,
                print_ast=print_ast,
                typecheck=typecheck,
            )

        except (KeyboardInterrupt, EOFError):
            print("\n\nExiting...")
            break


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="shadowc",
        description="Run a shadow-variable C program from a file or interactively from stdin",
    )
    group = parser.add_mutually_exclusive_group()
    group.add_argument(
        "--file", "-f", dest="file", help="Path to source file to run"
    )
    group.add_argument(
        "--interactive",
        "-i",
        dest="interactive",
        action="store_true",
        help="Start interactive REPL mode",
    )
    # printing/verbosity options
    parser.add_argument(
        "--print-tokens", dest="print_tokens", action="store_true", help="Print tokens"
    )
    parser.add_argument(
        "--print-ast", dest="print_ast", action="store_true", help="Print the AST"
    )
    parser.add_argument(
        "--no-state",
        dest="print_state",
        action="store_false",
        help="Do not print the final slot values",
    )
    parser.add_argument(
        "--no-typecheck",
        dest="typecheck",
        action="store_false",
        help="Skip the static type check before running",
    )
    # interpreter configuration
    parser.add_argument(
        "--word-size",
        dest="word_size",
        type=int,
        help="Integer width in bits (default 32; 8 emulates the byte machine)",
    )
    parser.add_argument(
        "--max-steps",
        dest="max_steps",
        type=int,
        help="Abort after executing this many statements",
    )
    parser.add_argument(
        "--entry",
        dest="entry_point",
        help="Name of the entry function (default main)",
    )
    parser.add_argument(
        "--allow-print",
        dest="allow_print",
        action="store_true",
        default=None,
        help="Enable the print builtin without #include <microio.h>",
    )
    # outputs
    parser.add_argument(
        "--dump-ast", dest="dump_ast", help="Path to write the AST as JSON"
    )
    parser.add_argument(
        "--dump-state", dest="dump_state", help="Path to write the final state as JSON"
    )
    parser.add_argument(
        "--viz-calls",
        dest="viz_calls",
        help="Path (without extension) to write a Graphviz call graph",
    )
    parser.add_argument(
        "--viz-format",
        dest="viz_format",
        default="svg",
        help="Format for Graphviz output (svg, png, pdf, etc)",
    )
    # logging
    parser.add_argument(
        "--verbose", "-v", dest="verbose", action="store_true", help="Log at DEBUG level"
    )
    parser.add_argument(
        "--log-level",
        dest="log_level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default WARNING)",
    )
    return parser


def cli(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else getattr(logging, args.log_level),
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        config = InterpreterConfig.from_mapping(
            {
                "word_size": args.word_size,
                "max_steps": args.max_steps,
                "entry_point": args.entry_point,
                "allow_print": args.allow_print,
            }
        )
    except ValueError as e:
        parser.error(str(e))

    if args.interactive:
        interactive_mode(
            config=config,
            print_tokens=args.print_tokens,
            print_ast=args.print_ast,
            typecheck=args.typecheck,
        )
        return EXIT_OK

    if not args.file:
        parser.print_help()
        return EXIT_OK

    try:
        with open(args.file, "r", encoding="utf-8") as fh:
            text = fh.read()
    except OSError as e:
        print(f"Failed to read file {args.file}: {e}", file=sys.stderr)
        return EXIT_SYNTAX_ERROR

    return process_program(
        text,
        config=config,
        print_tokens=args.print_tokens,
        print_ast=args.print_ast,
        print_state=args.print_state,
        typecheck=args.typecheck,
        dump_ast_path=args.dump_ast,
        dump_state_path=args.dump_state,
        viz_path=args.viz_calls,
        viz_format=args.viz_format,
    )


if __name__ == "__main__":
    sys.exit(cli())
