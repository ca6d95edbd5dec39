"""Static type checking for loaded programs.

This module provides a `TypeChecker` that walks every function of a `Program`
before it runs and verifies the types of expressions and statements. It
catches mistakes in branches the interpreter may never take, e.g. an integer
used as an `if` condition inside an `else` that is never reached.

Responsibilities:
- Determine and validate expression types (literals, binary/unary ops,
  address-of and dereference, function calls). Variables are `int` or `int*`
  as declared; comparisons and logical operators produce `bool`.
- Validate statements: declarations and assignments match the target's type,
  `if` and `while` conditions are booleans, and `return` matches the
  enclosing function's return type.
- Check calls against the function table (existence, arity and parameter
  types).

The type checker raises the same errors the interpreter would raise at run
time (`TypeMismatch`, `UnsupportedOperator`, `UnknownFunction`,
`ArityMismatch`).
"""

from __future__ import annotations
from typing import Dict, List, Optional
from ast_nodes import *
from config import InterpreterConfig, MICROIO_HEADER
from errors import (
    ArityMismatch,
    TypeMismatch,
    UnknownFunction,
    UnsupportedOperator,
    UnsupportedStatement,
)
from program import FunctionDefinition, Program, slot_types
from symbols import SymbolType


class TypeChecker:
    def __init__(self, program: Program, config: Optional[InterpreterConfig] = None):
        self.program = program
        self.config = config or InterpreterConfig()
        self.function: Optional[FunctionDefinition] = None
        self.var_types: Dict[str, SymbolType] = {}

    def check_program(self) -> None:
        for function in self.program.functions.values():
            self.check_statement(function.body, function)

    def _print_enabled(self) -> bool:
        return self.config.allow_print or self.program.has_include(MICROIO_HEADER)

    def _enter(self, function: FunctionDefinition) -> None:
        self.function = function
        self.var_types = slot_types(function)

    def _type_of(self, name: str) -> SymbolType:
        # Undeclared names are reported by the interpreter as UnboundVariable
        return self.var_types.get(name, SymbolType.INT)

    def check_expression(self, node: ASTNode) -> SymbolType:
        """Check type of expression and return its type."""
        match node:
            case BoolLiteralNode():
                return SymbolType.BOOL
            case IntLiteralNode():
                return SymbolType.INT
            case IdentifierNode(name=name):
                return self._type_of(name)
            case AddressOfNode(name=name):
                if self._type_of(name) != SymbolType.INT:
                    raise TypeMismatch(
                        f"Cannot take the address of '{name}' of type {self._type_of(name)}",
                        line=node.line,
                    )
                return SymbolType.INT_PTR
            case DereferenceNode(pointer=pointer):
                pointer_type = self.check_expression(pointer)
                if pointer_type != SymbolType.INT_PTR:
                    raise TypeMismatch(
                        f"Cannot dereference type '{pointer_type}'", line=node.line
                    )
                return SymbolType.INT
            case BinaryOpNode(left=left, operator=op, right=right):
                left_type = self.check_expression(left)
                right_type = self.check_expression(right)

                if op in ("+", "-", "*"):
                    if left_type == SymbolType.INT and right_type == SymbolType.INT:
                        return SymbolType.INT
                    raise TypeMismatch(
                        f"Cannot apply '{op}' to types '{left_type}' and '{right_type}'",
                        line=node.line,
                    )

                if op in ("<", ">", "<=", ">="):
                    if left_type == SymbolType.INT and right_type == SymbolType.INT:
                        return SymbolType.BOOL
                    raise TypeMismatch(
                        f"Cannot compare types '{left_type}' and '{right_type}'",
                        line=node.line,
                    )

                if op in ("==", "!="):
                    if left_type == right_type and left_type != SymbolType.VOID:
                        return SymbolType.BOOL
                    raise TypeMismatch(
                        f"Cannot compare types '{left_type}' and '{right_type}'",
                        line=node.line,
                    )

                if op in ("&&", "||"):
                    if left_type == SymbolType.BOOL and right_type == SymbolType.BOOL:
                        return SymbolType.BOOL
                    raise TypeMismatch(
                        f"Cannot apply logical '{op}' to non-boolean types",
                        line=node.line,
                    )

                raise UnsupportedOperator(op, line=node.line)

            case UnaryOpNode(operator=op, right=right):
                expr_type = self.check_expression(right)

                if op == "-" and expr_type == SymbolType.INT:
                    return SymbolType.INT
                if op == "!" and expr_type == SymbolType.BOOL:
                    return SymbolType.BOOL
                if op not in ("-", "!"):
                    raise UnsupportedOperator(op, line=node.line)

                raise TypeMismatch(
                    f"Cannot apply unary '{op}' to type '{expr_type}'", line=node.line
                )

            case FunctionCallNode(function=IdentifierNode(name=name), arguments=args):
                function = self.program.functions.get(name)
                param_types: List[SymbolType]
                if function is None:
                    if name == "print" and self._print_enabled():
                        param_types = [SymbolType.INT]
                        ret_type = SymbolType.INT
                    elif name == "print":
                        raise UnknownFunction(
                            name,
                            f"Did you forget to #include <{MICROIO_HEADER}>?",
                            line=node.line,
                        )
                    else:
                        raise UnknownFunction(name, line=node.line)
                else:
                    param_types = list(function.param_types)
                    ret_type = function.return_type

                if len(param_types) != len(args):
                    raise ArityMismatch(name, len(param_types), len(args), line=node.line)

                for i, (arg, expected) in enumerate(zip(args, param_types)):
                    arg_type = self.check_expression(arg)
                    if arg_type != expected:
                        raise TypeMismatch(
                            f"Function '{name}' argument {i + 1} must be {expected}, got {arg_type}",
                            line=arg.line,
                        )
                return ret_type

            case _:
                raise UnsupportedStatement(
                    f"Cannot type check node type: {type(node).__name__}", line=node.line
                )

    def _expect(self, node: ASTNode, expected: SymbolType, context: str) -> None:
        found = self.check_expression(node)
        if found != expected:
            raise TypeMismatch(f"{context}: expected {expected}, got {found}", line=node.line)

    def _expect_bool(self, node: ASTNode, context: str) -> None:
        found = self.check_expression(node)
        if found != SymbolType.BOOL:
            raise TypeMismatch(f"{context} must be boolean, got {found}", line=node.line)

    def check_statement(self, node: ASTNode, function: FunctionDefinition) -> None:
        """Check type correctness of a statement inside `function`."""
        if function is not self.function:
            self._enter(function)

        match node:
            case VariableDeclarationNode(var_name=name, var_type=var_type, init_value=init):
                if init is not None:
                    self._expect(init, var_type, f"Initialization of '{name}'")

            case AssignmentNode(left=IdentifierNode(name=name), right=right):
                self._expect(right, self._type_of(name), f"Assignment to '{name}'")

            case AssignmentNode(left=DereferenceNode() as target, right=right):
                self.check_expression(target)
                self._expect(right, SymbolType.INT, "Assignment through pointer")

            case IfStatementNode(condition=cond, then_block=then_block, else_block=else_block):
                self._expect_bool(cond, "If condition")
                self.check_statement(then_block, function)
                if else_block is not None:
                    self.check_statement(else_block, function)

            case WhileStatementNode(condition=cond, body=body):
                self._expect_bool(cond, "While condition")
                self.check_statement(body, function)

            case BlockNode(statements=stmts):
                for stmt in stmts:
                    self.check_statement(stmt, function)

            case ExpressionStatementNode(expression=expr):
                self.check_expression(expr)

            case ReturnStatementNode(expression=None):
                if function.returns_value and function.name != self.program.entry_point:
                    raise TypeMismatch(
                        f"Return without value in function returning {function.return_type}",
                        line=node.line,
                    )

            case ReturnStatementNode(expression=expr):
                if not function.returns_value:
                    raise TypeMismatch(
                        f"Void function '{function.name}' cannot return a value",
                        line=node.line,
                    )
                self._expect(expr, SymbolType.INT, "Return value")

            case _:
                raise UnsupportedStatement(
                    f"Unsupported statement: {type(node).__name__}", line=node.line
                )
