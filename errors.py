"""Runtime and load-time errors raised by the interpreter.

Every error is fatal to the current run: the interpreter never recovers or
returns a partial result once one of these is raised. All of them derive from
`InterpreterError` so a caller can tell an execution failure apart from a
lexing/parsing `SyntaxError` or an unrelated Python exception.

Attributes shared by all errors:
    line: 1-based source line of the offending node, or 0 when unknown.
"""

from __future__ import annotations


class InterpreterError(Exception):
    """Base class for all execution failures."""

    def __init__(self, message: str, *, line: int = 0):
        super().__init__(message)
        self.message = message
        self.line = line

    def __str__(self) -> str:
        if self.line:
            return f"{self.message} (line {self.line})"
        return self.message


class UnboundVariable(InterpreterError):
    """Read or write of a name that has no declared or bound slot."""

    def __init__(self, name: str, *, line: int = 0):
        super().__init__(f"Unbound variable '{name}'", line=line)
        self.name = name


class UnsupportedOperator(InterpreterError):
    def __init__(self, operator: str, *, line: int = 0):
        super().__init__(f"Unsupported operator: {operator}", line=line)
        self.operator = operator


class UnsupportedStatement(InterpreterError):
    pass


class MissingReturn(InterpreterError):
    def __init__(self, function: str, *, line: int = 0):
        super().__init__(
            f"Function '{function}' finished without returning a value", line=line
        )
        self.function = function


class ReentrantCall(InterpreterError):
    """A function was called while an earlier call to it is still active.

    Parameters and locals live in one slot per function, so a nested call
    would overwrite the outer call's state.
    """

    def __init__(self, function: str, chain: list[str], *, line: int = 0):
        path = " -> ".join(chain + [function])
        super().__init__(
            f"Re-entrant call to '{function}' (call chain: {path})", line=line
        )
        self.function = function
        self.chain = list(chain)


class UnknownFunction(InterpreterError):
    def __init__(self, function: str, hint: str = "", *, line: int = 0):
        message = f"Undefined function '{function}'"
        if hint:
            message = f"{message}. {hint}"
        super().__init__(message, line=line)
        self.function = function


class ArityMismatch(InterpreterError):
    def __init__(self, function: str, expected: int, got: int, *, line: int = 0):
        super().__init__(
            f"Function '{function}' expects {expected} args, got {got}", line=line
        )
        self.function = function
        self.expected = expected
        self.got = got


class TypeMismatch(InterpreterError):
    pass


class NullDereference(InterpreterError):
    """`*p` where the pointer slot `p` was never given an address."""

    def __init__(self, pointer: str, *, line: int = 0):
        super().__init__(f"Dereference of null pointer '{pointer}'", line=line)
        self.pointer = pointer


class ProgramError(InterpreterError):
    """The parsed program cannot be loaded (missing entry point, stray code...)."""


class StepLimitExceeded(InterpreterError):
    def __init__(self, limit: int, *, line: int = 0):
        super().__init__(f"Step limit of {limit} exceeded", line=line)
        self.limit = limit
