"""Interpreter for programs with shadow-variable (per-function) storage.

Every identifier used inside function `f` resolves to the slot `f.<name>` in
one `SymbolTable` that lives for the whole run. Calling a function binds its
parameters by writing the argument values into its own slots, so a second call
to the same function reuses and overwrites them; nothing is pushed or popped.
Because of that a call to a function that is already running would clobber the
outer call's state, and is rejected with `ReentrantCall`.

`return` is threaded back up through the executor as an `Outcome` value rather
than raised, so enclosing `if`/`while` bodies stop without exceptions being
used for control flow.

Supported nodes: `VariableDeclarationNode`, `AssignmentNode`,
`ExpressionStatementNode`, `ReturnStatementNode`, `IfStatementNode`,
`WhileStatementNode`, `BlockNode` and the expressions `IntLiteralNode`,
`BoolLiteralNode`, `IdentifierNode`, `BinaryOpNode`, `UnaryOpNode`,
`AddressOfNode`, `DereferenceNode` and `FunctionCallNode`.

A pointer is a `SlotRef` to a mangled slot. Slots are never freed, so a
pointer into another function's slots stays valid for the whole run and
always sees the value left there by that function's most recent call.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union

from ast_nodes import *
from config import InterpreterConfig, MICROIO_HEADER
from errors import (
    ArityMismatch,
    MissingReturn,
    NullDereference,
    ReentrantCall,
    StepLimitExceeded,
    TypeMismatch,
    UnboundVariable,
    UnknownFunction,
    UnsupportedOperator,
    UnsupportedStatement,
)
from program import Program, load_program
from symbols import SlotRef, SymbolTable, SymbolType, mangle

logger = logging.getLogger("shadowc.interpreter")
logger.addHandler(logging.NullHandler())

Value = Union[int, bool, SlotRef, None]

PRINT_BUILTIN = "print"

ARITHMETIC_OPERATORS = ("+", "-", "*")
ORDERING_OPERATORS = ("<", ">", "<=", ">=")
EQUALITY_OPERATORS = ("==", "!=")
LOGICAL_OPERATORS = ("&&", "||")


@dataclass(frozen=True)
class Outcome:
    """Result of executing a statement: either keep going or the function returned."""

    returned: bool = False
    value: Optional[int] = None


CONTINUE = Outcome()


@dataclass
class ExecutionResult:
    slots: Dict[str, int]
    return_value: Optional[int] = None
    output: List[int] = field(default_factory=list)
    steps: int = 0
    entry_point: str = "main"

    def variables(self, qualifier: Optional[str] = None) -> Dict[str, int]:
        """Final values of one function's slots keyed by their source names."""
        prefix = f"{qualifier or self.entry_point}."
        return {
            name[len(prefix):]: value
            for name, value in self.slots.items()
            if name.startswith(prefix)
        }

    def get(self, name: str, qualifier: Optional[str] = None, default=None):
        return self.slots.get(mangle(qualifier or self.entry_point, name), default)

    def __getitem__(self, mangled_name: str) -> int:
        return self.slots[mangled_name]


class Interpreter:
    def __init__(self, program: Program, config: Optional[InterpreterConfig] = None):
        self.program = program
        self.config = config or InterpreterConfig()
        self.symbols = SymbolTable()
        self.call_chain: List[str] = []
        self.output: List[int] = []
        self.steps = 0

    # ------------------------------------------------------------------
    # Driver
    # ------------------------------------------------------------------

    def run(self) -> ExecutionResult:
        """Execute the entry function from a clean state and return the final slots."""
        self.symbols = SymbolTable()
        self.call_chain = []
        self.output = []
        self.steps = 0

        entry = self.program.entry
        logger.debug("running %s", entry.name)
        self.call_chain.append(entry.name)
        try:
            outcome = self.exec_block(entry.body.statements, entry.name)
        finally:
            self.call_chain.pop()

        return ExecutionResult(
            slots=self.symbols.snapshot(),
            return_value=outcome.value if outcome.returned else None,
            output=list(self.output),
            steps=self.steps,
            entry_point=entry.name,
        )

    # ------------------------------------------------------------------
    # Value helpers
    # ------------------------------------------------------------------

    def _as_int(self, value: Value, node: ASTNode, context: str) -> int:
        if value is None:
            raise TypeMismatch(f"{context} has no value", line=node.line)
        if isinstance(value, bool):
            raise TypeMismatch(f"{context} must be an integer, got a boolean", line=node.line)
        if isinstance(value, SlotRef):
            raise TypeMismatch(f"{context} must be an integer, got a pointer", line=node.line)
        return value

    def _coerce(self, value: Value, slot_type: SymbolType, node: ASTNode, context: str) -> Value:
        """Check that `value` may be stored in a slot of type `slot_type`."""
        if slot_type == SymbolType.INT_PTR:
            if not isinstance(value, SlotRef):
                raise TypeMismatch(f"{context} must be a pointer", line=node.line)
            return value
        return self._as_int(value, node, context)

    def _deref(self, node: DereferenceNode, qualifier: str) -> SlotRef:
        """Evaluate the operand of `*` to the slot it points at."""
        value = self.eval_expr(node.pointer, qualifier)
        if isinstance(value, SlotRef):
            return value
        if value is None and isinstance(node.pointer, IdentifierNode):
            raise NullDereference(mangle(qualifier, node.pointer.name), line=node.line)
        raise TypeMismatch("Operand of '*' must be a pointer", line=node.line)

    def _as_bool(self, value: Value, node: ASTNode, context: str) -> bool:
        if not isinstance(value, bool):
            raise TypeMismatch(f"{context} must be a boolean condition", line=node.line)
        return value

    def _tick(self, node: ASTNode) -> None:
        self.steps += 1
        limit = self.config.max_steps
        if limit is not None and self.steps > limit:
            raise StepLimitExceeded(limit, line=node.line)

    # ------------------------------------------------------------------
    # Expressions
    # ------------------------------------------------------------------

    def eval_expr(self, node: ASTNode, qualifier: str) -> Value:
        match node:
            case BoolLiteralNode(value=v):
                return bool(v)
            case IntLiteralNode(value=v):
                return self.config.wrap(v)
            case IdentifierNode(name=n):
                try:
                    return self.symbols.read(mangle(qualifier, n))
                except UnboundVariable as exc:
                    exc.line = node.line
                    raise
            case AddressOfNode(name=n):
                slot = mangle(qualifier, n)
                if not self.symbols.exists(slot):
                    raise UnboundVariable(slot, line=node.line)
                return SlotRef(slot)
            case DereferenceNode():
                return self.symbols.read(self._deref(node, qualifier).name)
            case BinaryOpNode():
                return self._eval_binary(node, qualifier)
            case UnaryOpNode(operator=op, right=right):
                match op:
                    case "-":
                        val = self._as_int(self.eval_expr(right, qualifier), node, "Operand of '-'")
                        return self.config.wrap(-val)
                    case "!":
                        return not self._as_bool(self.eval_expr(right, qualifier), node, "Operand of '!'")
                    case _:
                        raise UnsupportedOperator(op, line=node.line)
            case FunctionCallNode(function=IdentifierNode(name=fname), arguments=args):
                return self.call_function(fname, args, qualifier, line=node.line)
            case _:
                raise UnsupportedStatement(
                    f"Unhandled expression node type: {type(node).__name__}",
                    line=node.line,
                )

    def _eval_binary(self, node: BinaryOpNode, qualifier: str) -> Value:
        op = node.operator

        if op in LOGICAL_OPERATORS:
            # Short-circuit: the right side is only evaluated when needed
            lv = self._as_bool(self.eval_expr(node.left, qualifier), node, f"Left operand of '{op}'")
            if op == "&&" and not lv:
                return False
            if op == "||" and lv:
                return True
            return self._as_bool(self.eval_expr(node.right, qualifier), node, f"Right operand of '{op}'")

        if op not in ARITHMETIC_OPERATORS + ORDERING_OPERATORS + EQUALITY_OPERATORS:
            raise UnsupportedOperator(op, line=node.line)

        lv = self.eval_expr(node.left, qualifier)
        rv = self.eval_expr(node.right, qualifier)

        if op in EQUALITY_OPERATORS and isinstance(lv, bool) and isinstance(rv, bool):
            return lv == rv if op == "==" else lv != rv
        if op in EQUALITY_OPERATORS and isinstance(lv, SlotRef) and isinstance(rv, SlotRef):
            return lv == rv if op == "==" else lv != rv

        lv = self._as_int(lv, node, f"Left operand of '{op}'")
        rv = self._as_int(rv, node, f"Right operand of '{op}'")
        match op:
            case "+":
                return self.config.wrap(lv + rv)
            case "-":
                return self.config.wrap(lv - rv)
            case "*":
                return self.config.wrap(lv * rv)
            case "==":
                return lv == rv
            case "!=":
                return lv != rv
            case "<":
                return lv < rv
            case ">":
                return lv > rv
            case "<=":
                return lv <= rv
            case ">=":
                return lv >= rv

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------

    def exec_stmt(self, stmt: ASTNode, qualifier: str) -> Outcome:
        self._tick(stmt)
        match stmt:
            case VariableDeclarationNode(var_name=name, var_type=var_type, init_value=init):
                slot = mangle(qualifier, name)
                self.symbols.declare(slot, var_type)
                if init is not None:
                    value = self._coerce(
                        self.eval_expr(init, qualifier),
                        self.symbols.type_of(slot),
                        stmt,
                        f"Initializer of '{name}'",
                    )
                    self.symbols.write(slot, value)
                return CONTINUE
            case AssignmentNode(left=IdentifierNode(name=n), right=right):
                slot = mangle(qualifier, n)
                value = self.eval_expr(right, qualifier)
                try:
                    slot_type = self.symbols.type_of(slot)
                except UnboundVariable as exc:
                    exc.line = stmt.line
                    raise
                value = self._coerce(value, slot_type, stmt, f"Value assigned to '{n}'")
                self.symbols.write(slot, value)
                return CONTINUE
            case AssignmentNode(left=DereferenceNode() as target, right=right):
                value = self.eval_expr(right, qualifier)
                ref = self._deref(target, qualifier)
                value = self._coerce(
                    value, self.symbols.type_of(ref.name), stmt, f"Value assigned to '*{ref.name}'"
                )
                self.symbols.write(ref.name, value)
                return CONTINUE
            case ExpressionStatementNode(expression=expr):
                self.eval_expr(expr, qualifier)
                return CONTINUE
            case ReturnStatementNode(expression=None):
                return Outcome(returned=True)
            case ReturnStatementNode(expression=expr):
                value = self._as_int(self.eval_expr(expr, qualifier), stmt, "Return value")
                return Outcome(returned=True, value=value)
            case IfStatementNode(
                condition=cond, then_block=then_block, else_block=else_block
            ):
                if self._as_bool(self.eval_expr(cond, qualifier), cond, "If condition"):
                    return self.exec_stmt(then_block, qualifier)
                if else_block is not None:
                    return self.exec_stmt(else_block, qualifier)
                return CONTINUE
            case WhileStatementNode(condition=cond, body=body):
                while self._as_bool(self.eval_expr(cond, qualifier), cond, "While condition"):
                    outcome = self.exec_stmt(body, qualifier)
                    if outcome.returned:
                        return outcome
                return CONTINUE
            case BlockNode(statements=stmts):
                return self.exec_block(stmts, qualifier)
            case _:
                raise UnsupportedStatement(
                    f"Unsupported statement: {type(stmt).__name__}", line=stmt.line
                )

    def exec_block(self, statements: List[ASTNode], qualifier: str) -> Outcome:
        for s in statements:
            outcome = self.exec_stmt(s, qualifier)
            if outcome.returned:
                return outcome
        return CONTINUE

    # ------------------------------------------------------------------
    # Calls
    # ------------------------------------------------------------------

    def _print_enabled(self) -> bool:
        return self.config.allow_print or self.program.has_include(MICROIO_HEADER)

    def _builtin_print(self, args: List[ASTNode], qualifier: str, line: int) -> int:
        if len(args) != 1:
            raise ArityMismatch(PRINT_BUILTIN, 1, len(args), line=line)
        value = self._as_int(self.eval_expr(args[0], qualifier), args[0], "Argument of print")
        self.output.append(value)
        logger.debug("print -> %d", value)
        return value

    def call_function(
        self, name: str, args: List[ASTNode], qualifier: str, line: int = 0
    ) -> Optional[int]:
        """Evaluate `args` in the caller's scope, bind them to `name`'s shadow slots and run it."""
        function = self.program.functions.get(name)
        if function is None:
            if name == PRINT_BUILTIN and self._print_enabled():
                return self._builtin_print(args, qualifier, line)
            hint = ""
            if name == PRINT_BUILTIN:
                hint = f"Did you forget to #include <{MICROIO_HEADER}>?"
            elif name in self.program.prototypes:
                hint = "It is declared but never defined."
            raise UnknownFunction(name, hint, line=line)

        if name in self.call_chain:
            raise ReentrantCall(name, self.call_chain, line=line)
        if len(args) != len(function.params):
            raise ArityMismatch(name, len(function.params), len(args), line=line)

        values = [
            self._coerce(
                self.eval_expr(arg, qualifier),
                param_type,
                arg,
                f"Argument {i + 1} of '{name}'",
            )
            for i, (arg, param_type) in enumerate(zip(args, function.param_types))
        ]
        for param, param_type, value in zip(function.params, function.param_types, values):
            slot = mangle(name, param)
            self.symbols.declare(slot, param_type)
            self.symbols.write(slot, value)

        logger.debug("call %s(%s) from %s", name, ", ".join(map(str, values)), qualifier)
        self.call_chain.append(name)
        try:
            outcome = self.exec_block(function.body.statements, name)
        finally:
            self.call_chain.pop()

        if not function.returns_value:
            return None
        if not outcome.returned or outcome.value is None:
            raise MissingReturn(name, line=function.line)
        logger.debug("%s returned %d", name, outcome.value)
        return outcome.value


def interpret_program(
    prog: Union[Program, ProgramNode], config: Optional[InterpreterConfig] = None
) -> ExecutionResult:
    """Run a program (loading it first when given a `ProgramNode`) and return its final state."""
    config = config or InterpreterConfig()
    if isinstance(prog, ProgramNode):
        prog = load_program(prog, entry_point=config.entry_point)
    return Interpreter(prog, config).run()
