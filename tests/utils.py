import os

from lexer import Lexer
from parser import Parser
from program import load_program
from ast_interpreter import interpret_program
from config import InterpreterConfig

EXAMPLES_DIR = os.path.join(os.path.dirname(os.path.dirname(__file__)), "examples")


def lex(text: str):
    """Return a list of tokens for the given source text."""
    return Lexer(text).tokenize()


def parse_tokens(tokens):
    """Parse a list of tokens into an AST node."""
    return Parser(tokens).parse()


def parse_text(text: str):
    """Convenience: lex+parse a source text into an AST."""
    return Parser(Lexer(text).tokenize()).parse()


def load_text(text: str):
    """Lex, parse and load a source text into a Program."""
    return load_program(parse_text(text))


def run_text(text: str, **config):
    """Run a source text and return the ExecutionResult."""
    return interpret_program(parse_text(text), InterpreterConfig(**config))


def read_example(name: str) -> str:
    with open(os.path.join(EXAMPLES_DIR, name), encoding="utf-8") as fh:
        return fh.read()
