"""Program loader: turn a parsed `ProgramNode` into an executable `Program`.

The loader collects function definitions into an immutable table, checks the
structural rules the interpreter relies on and records which headers were
included:

- every top-level statement must be a function declaration (prototypes are
  allowed and dropped once a definition exists);
- a function may be defined only once;
- the entry function (`main` by default) must exist and take no parameters;
- `#include <microio.h>` is the only supported header.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from ast_nodes import (
    ASTNode,
    BlockNode,
    FunctionCallNode,
    FunctionDeclarationNode,
    ProgramNode,
    VariableDeclarationNode,
)
from config import MICROIO_HEADER
from errors import ProgramError
from symbols import SymbolType

logger = logging.getLogger("shadowc.program")
logger.addHandler(logging.NullHandler())

SUPPORTED_HEADERS = (MICROIO_HEADER,)


@dataclass(frozen=True)
class FunctionDefinition:
    name: str
    params: Tuple[str, ...]
    body: BlockNode
    return_type: SymbolType = SymbolType.INT
    line: int = 0
    param_types: Tuple[SymbolType, ...] = ()

    @property
    def returns_value(self) -> bool:
        return self.return_type != SymbolType.VOID

    def signature(self) -> str:
        params = ", ".join(f"{t} {p}" for t, p in zip(self.param_types, self.params))
        return f"{self.return_type} {self.name}({params})"


@dataclass(frozen=True)
class Program:
    functions: Mapping[str, FunctionDefinition]
    entry_point: str = "main"
    includes: Tuple[str, ...] = ()
    prototypes: Tuple[str, ...] = field(default=())

    @property
    def entry(self) -> FunctionDefinition:
        return self.functions[self.entry_point]

    def has_include(self, header: str) -> bool:
        return header in self.includes


def load_program(node: ProgramNode, entry_point: str = "main") -> Program:
    """Validate `node` and build the function table."""
    lines = node.include_lines or [node.line] * len(node.includes)
    for header, line in zip(node.includes, lines):
        if header not in SUPPORTED_HEADERS:
            raise ProgramError(f"Unsupported header file: {header}", line=line)

    functions: Dict[str, FunctionDefinition] = {}
    prototypes: List[str] = []
    for stmt in node.statements:
        if not isinstance(stmt, FunctionDeclarationNode):
            raise ProgramError(
                "Top-level code outside of a function is not supported",
                line=stmt.line,
            )
        if stmt.body is None:
            prototypes.append(stmt.func_name)
            continue
        if stmt.func_name in functions:
            raise ProgramError(
                f"Function '{stmt.func_name}' is defined more than once",
                line=stmt.line,
            )
        functions[stmt.func_name] = FunctionDefinition(
            name=stmt.func_name,
            params=tuple(stmt.arg_names),
            body=stmt.body,
            return_type=stmt.return_type,
            line=stmt.line,
            param_types=tuple(stmt.arg_types),
        )

    entry = functions.get(entry_point)
    if entry is None:
        raise ProgramError(f"Error: '{entry_point}' function not found.")
    if entry.params:
        raise ProgramError(
            f"Entry function '{entry_point}' must not take parameters", line=entry.line
        )

    logger.debug(
        "loaded %d function(s): %s", len(functions), ", ".join(functions)
    )
    return Program(
        functions=MappingProxyType(functions),
        entry_point=entry_point,
        includes=tuple(node.includes),
        prototypes=tuple(p for p in prototypes if p not in functions),
    )


def _walk(node: Optional[ASTNode]) -> Iterable[ASTNode]:
    """Yield `node` and every AST node below it, depth first."""
    if node is None:
        return
    yield node
    for value in vars(node).values():
        if isinstance(value, ASTNode):
            yield from _walk(value)
        elif isinstance(value, list):
            for item in value:
                if isinstance(item, ASTNode):
                    yield from _walk(item)


def declared_slots(function: FunctionDefinition) -> List[str]:
    """Unmangled names that get a shadow slot in `function`: params then locals."""
    names = list(function.params)
    for node in _walk(function.body):
        if isinstance(node, VariableDeclarationNode) and node.var_name not in names:
            names.append(node.var_name)
    return names


def slot_types(function: FunctionDefinition) -> Dict[str, SymbolType]:
    """Declared type of every name in `declared_slots(function)`."""
    types = dict(zip(function.params, function.param_types))
    for node in _walk(function.body):
        if isinstance(node, VariableDeclarationNode):
            types.setdefault(node.var_name, node.var_type)
    return types


def first_calls(function: FunctionDefinition) -> Dict[str, FunctionCallNode]:
    """Callee name -> first call expression reaching it from `function`'s body.

    Keys are in first-call order.
    """
    calls: Dict[str, FunctionCallNode] = {}
    for node in _walk(function.body):
        if isinstance(node, FunctionCallNode):
            calls.setdefault(node.function.name, node)
    return calls
