"""
Lexer for the shadow-variable C subset.

Overview:
- This module implements a small hand-written lexical analyzer (scanner) that
    transforms an input source string into a stream of `Token` objects defined
    in `tokens.py`.
- It recognizes keywords (`int`, `void`, `return`, `if`, `else`, `while`,
    `true`, `false`), identifiers, integer literals, one- and two-character
    operators (e.g. `==`, `>=`, `&&`, `+=`, `++`, `&`), punctuation, and
    `#include <header>` directives. Whitespace and single-line `//` comments
    are skipped.

Examples:
    Input:  "int my_decrement(int x) { x = x - 1; return x; }"
    Tokens: [INT_TYPE, IDENTIFIER('my_decrement'), LPAREN, INT_TYPE, ...]

Implementation notes:
- The lexer is a simple stateful scanner using `self.pos` and `self.current_char`.
- Two-character operators are looked up first in `TWO_CHAR_TOKENS` so that
    `==` is not split into two `=` tokens.
- Every token records the line/column where it started so later phases can
    report positions.
"""

from __future__ import annotations
from typing import Optional, List
from tokens import Token, TokenType


TWO_CHAR_TOKENS = {
    "==": TokenType.EQ,
    "!=": TokenType.NEQ,
    "<=": TokenType.LTE,
    ">=": TokenType.GTE,
    "&&": TokenType.AND,
    "||": TokenType.OR,
    "++": TokenType.INCREMENT,
    "--": TokenType.DECREMENT,
    "+=": TokenType.PLUS_ASSIGN,
    "-=": TokenType.MINUS_ASSIGN,
    "*=": TokenType.STAR_ASSIGN,
    "/=": TokenType.SLASH_ASSIGN,
}

SINGLE_CHAR_TOKENS = {
    "+": TokenType.PLUS,
    "-": TokenType.MINUS,
    "*": TokenType.STAR,
    "%": TokenType.MOD,
    "/": TokenType.SLASH,
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    "{": TokenType.LBRACE,
    "}": TokenType.RBRACE,
    ",": TokenType.COMMA,
    ";": TokenType.SEMICOLON,
    "=": TokenType.ASSIGN,
    "<": TokenType.LT,
    ">": TokenType.GT,
    "!": TokenType.NOT,
    "&": TokenType.AMPERSAND,
}


class Lexer:
    def __init__(self, text: str):
        self.text = text
        self.pos = 0
        self.line = 1
        self.column = 1
        self.current_char = self.text[self.pos] if self.text else None

        self.keywords = {
            "while": TokenType.WHILE,
            "if": TokenType.IF,
            "else": TokenType.ELSE,
            "return": TokenType.RETURN,
            "void": TokenType.VOID_TYPE,
            "int": TokenType.INT_TYPE,
            "true": TokenType.TRUE,
            "false": TokenType.FALSE,
        }

    def error(self, message: str = "") -> SyntaxError:
        msg = f"Lexical error at line {self.line}, column {self.column}: {message}"
        return SyntaxError(msg)

    def advance(self) -> None:
        """Advance to next character."""
        # Newlines reset the column and increment the line number.
        if self.current_char == "\n":
            self.line += 1
            self.column = 1
        else:
            self.column += 1

        self.pos += 1
        if self.pos < len(self.text):
            self.current_char = self.text[self.pos]
        else:
            self.current_char = None

    def peek_char(self) -> Optional[str]:
        """Look at next character without consuming it."""
        next_pos = self.pos + 1
        if next_pos < len(self.text):
            return self.text[next_pos]
        return None

    def skip_whitespace(self) -> None:
        """Skip whitespace characters."""
        while self.current_char is not None and self.current_char.isspace():
            self.advance()

    def skip_comment(self) -> None:
        """Skip single-line comments (// ...)."""
        while self.current_char is not None and self.current_char != "\n":
            self.advance()

        if self.current_char == "\n":
            self.advance()

    def integer(self) -> int:
        """Parse a multi-digit integer."""
        result = []

        while self.current_char is not None and self.current_char.isdigit():
            result.append(self.current_char)
            self.advance()

        if not result:
            raise self.error("Expected integer")

        return int("".join(result))

    def identifier(self) -> str:
        """Parse an identifier or keyword."""
        result = []

        # First character must be a letter or underscore (C-like rule)
        if self.current_char is not None and (
            self.current_char.isalpha() or self.current_char == "_"
        ):
            result.append(self.current_char)
            self.advance()
        else:
            raise self.error("Expected identifier")

        while self.current_char is not None and (
            self.current_char.isalnum() or self.current_char == "_"
        ):
            result.append(self.current_char)
            self.advance()

        return "".join(result)

    def directive(self) -> str:
        """Parse `#include <header>` and return the header name."""
        self.advance()  # consume '#'
        word = self.identifier()
        if word != "include":
            raise self.error(f"Unsupported directive '#{word}'")

        while self.current_char in (" ", "\t"):
            self.advance()
        if self.current_char != "<":
            raise self.error("Expected '<' after #include")
        self.advance()

        header = []
        while self.current_char is not None and self.current_char not in (">", "\n"):
            header.append(self.current_char)
            self.advance()
        if self.current_char != ">":
            raise self.error("Unterminated #include")
        self.advance()
        return "".join(header).strip()

    def get_next_token(self) -> Token:
        """Lexical analyzer that returns tokens one at a time."""
        while self.current_char is not None:
            if self.current_char.isspace():
                self.skip_whitespace()
                continue

            if self.current_char == "/" and self.peek_char() == "/":
                self.skip_comment()
                continue

            line, column = self.line, self.column

            pair = self.current_char + (self.peek_char() or "")
            if pair in TWO_CHAR_TOKENS:
                self.advance()
                self.advance()
                return Token(TWO_CHAR_TOKENS[pair], pair, line, column)

            if self.current_char in SINGLE_CHAR_TOKENS:
                char = self.current_char
                self.advance()
                return Token(SINGLE_CHAR_TOKENS[char], char, line, column)

            if self.current_char == "#":
                header = self.directive()
                return Token(TokenType.INCLUDE, header, line, column)

            if self.current_char.isdigit():
                value = self.integer()
                return Token(TokenType.INTEGER, value, line, column)

            # Identifiers and keywords: scan an identifier and map to a
            # keyword token if present in `self.keywords`.
            if self.current_char.isalpha() or self.current_char == "_":
                ident = self.identifier()
                token_type = self.keywords.get(ident, TokenType.IDENTIFIER)
                return Token(token_type, ident, line, column)

            raise self.error(f"Unexpected character '{self.current_char}'")

        return Token(TokenType.EOF, None, self.line, self.column)

    def tokenize(self) -> List[Token]:
        """Return all tokens from the input string."""
        tokens = []
        while True:
            token = self.get_next_token()
            tokens.append(token)
            if token.type == TokenType.EOF:
                break
        return tokens
