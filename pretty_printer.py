"""Pretty-printer for the AST and for final interpreter state.

Provides `PrettyPrinter.print_ast(node, indent, prefix)` which renders an
AST into a readable multi-line string, `print_surface(node)` for a compact
one-line C-like rendering (used for call-graph edge labels), and
`print_slots(slots)` which lays out a final slot mapping grouped by owning
function. The printer is intended for
debugging, tests and the CLI rather than for producing final source code.

Examples:
    PrettyPrinter.print_ast(program_node)
    PrettyPrinter.print_slots(result.slots)
"""

from __future__ import annotations
from typing import Dict
from ast_nodes import *
from symbols import split_mangled


class PrettyPrinter:
    @staticmethod
    def print_ast(node: ASTNode, indent: int = 0, prefix: str = "") -> str:
        """Pretty print AST and return as string."""
        lines = []
        indent_str = " " * indent

        if not isinstance(node, ASTNode):
            lines.append(f"{indent_str}{prefix}{node}")
            return "\n".join(lines)

        match node:
            case BoolLiteralNode(value=v):
                lines.append(f"{indent_str}{prefix}BoolLiteral({v})")

            case IntLiteralNode(value=v):
                lines.append(f"{indent_str}{prefix}IntLiteral({v})")

            case IdentifierNode(name=n):
                lines.append(f"{indent_str}{prefix}Identifier({n})")

            case BinaryOpNode(left=left, operator=op, right=right):
                lines.append(f"{indent_str}{prefix}BinaryOp({op})")
                lines.append(PrettyPrinter.print_ast(left, indent + 2, "left: "))
                lines.append(PrettyPrinter.print_ast(right, indent + 2, "right: "))

            case UnaryOpNode(operator=op, right=right):
                lines.append(f"{indent_str}{prefix}UnaryOp({op})")
                lines.append(PrettyPrinter.print_ast(right, indent + 2))

            case AddressOfNode(name=n):
                lines.append(f"{indent_str}{prefix}AddressOf({n})")

            case DereferenceNode(pointer=pointer):
                lines.append(f"{indent_str}{prefix}Dereference")
                lines.append(PrettyPrinter.print_ast(pointer, indent + 2))

            case FunctionCallNode(function=func, arguments=args):
                lines.append(f"{indent_str}{prefix}FunctionCall({func.name})")
                for i, arg in enumerate(args):
                    lines.append(PrettyPrinter.print_ast(arg, indent + 4, f"arg[{i}]: "))

            case FunctionDeclarationNode(func_name=name, arg_names=anames, arg_types=atypes, body=body):
                args = ", ".join(f"{n}: {t}" for n, t in zip(anames, atypes))
                lines.append(f"{indent_str}{prefix}FunctionDecl({name} -> {node.return_type}, params=[{args}])")
                if body:
                    lines.append(PrettyPrinter.print_ast(body, indent + 4, "body: "))

            case ReturnStatementNode(expression=expr):
                lines.append(f"{indent_str}{prefix}Return")
                if expr:
                    lines.append(PrettyPrinter.print_ast(expr, indent + 2, "expr: "))

            case AssignmentNode(left=left, right=right):
                lines.append(f"{indent_str}{prefix}Assignment")
                lines.append(PrettyPrinter.print_ast(left, indent + 2, "left: "))
                lines.append(PrettyPrinter.print_ast(right, indent + 2, "right: "))

            case ExpressionStatementNode(expression=expr):
                lines.append(f"{indent_str}{prefix}ExpressionStatement")
                lines.append(PrettyPrinter.print_ast(expr, indent + 2))

            case WhileStatementNode(condition=cond, body=body):
                lines.append(f"{indent_str}{prefix}WhileStatement")
                lines.append(PrettyPrinter.print_ast(cond, indent + 4, "condition: "))
                lines.append(PrettyPrinter.print_ast(body, indent + 4, "body: "))

            case IfStatementNode(condition=cond, then_block=then_b, else_block=else_b):
                lines.append(f"{indent_str}{prefix}IfStatement")
                lines.append(PrettyPrinter.print_ast(cond, indent + 4, "condition: "))
                lines.append(PrettyPrinter.print_ast(then_b, indent + 4, "then: "))
                if else_b:
                    lines.append(PrettyPrinter.print_ast(else_b, indent + 4, "else: "))

            case BlockNode(statements=stmts):
                lines.append(f"{indent_str}{prefix}Block")
                for i, stmt in enumerate(stmts):
                    lines.append(PrettyPrinter.print_ast(stmt, indent + 4, f"stmt[{i}]: "))

            case VariableDeclarationNode(var_name=vname, var_type=vtype, init_value=init):
                init_str = f" = ..." if init else ""
                lines.append(f"{indent_str}{prefix}VarDecl({vname}: {vtype}{init_str})")
                if init:
                    lines.append(PrettyPrinter.print_ast(init, indent + 2, "init: "))

            case ProgramNode(statements=stmts, includes=includes):
                lines.append(f"{indent_str}{prefix}Program")
                for header in includes:
                    lines.append(f"{indent_str}    include <{header}>")
                for i, stmt in enumerate(stmts):
                    lines.append(PrettyPrinter.print_ast(stmt, indent + 4, f"stmt[{i}]: "))

            case _:
                lines.append(f"{indent_str}{prefix}Unknown node type: {type(node)}")

        return "\n".join(line for line in lines if line)

    @staticmethod
    def print_surface(node: ASTNode) -> str:
        """Return a compact, surface-syntax-like one-line representation of an AST node.

        Used for the call-site labels on call-graph edges (e.g. `my_decrement(x)`).
        """
        if node is None:
            return ""

        def _p(n: ASTNode) -> str:
            return PrettyPrinter.print_surface(n) if isinstance(n, ASTNode) else str(n)

        match node:
            case BoolLiteralNode(value=v):
                return "true" if v else "false"
            case IntLiteralNode(value=v):
                return str(v)
            case IdentifierNode(name=n):
                return n
            case BinaryOpNode(left=l, operator=op, right=r):
                return f"{_p(l)} {op} {_p(r)}"
            case UnaryOpNode(operator=op, right=right):
                return f"{op}{_p(right)}"
            case AddressOfNode(name=n):
                return f"&{n}"
            case DereferenceNode(pointer=pointer):
                return f"*{_p(pointer)}"
            case FunctionCallNode(function=func, arguments=args):
                args_s = ", ".join(_p(a) for a in args)
                return f"{func.name}({args_s})"
            case AssignmentNode(left=left, right=right):
                return f"{_p(left)} = {_p(right)}"
            case ExpressionStatementNode(expression=expr):
                return _p(expr)
            case ReturnStatementNode(expression=expr):
                if expr:
                    return f"return {_p(expr)}"
                return "return"
            case VariableDeclarationNode(var_type=vt, var_name=vn, init_value=init):
                if init:
                    return f"{vt} {vn} = {_p(init)}"
                return f"{vt} {vn}"
            case WhileStatementNode(condition=cond):
                return f"while ({_p(cond)})"
            case IfStatementNode(condition=cond):
                return f"if ({_p(cond)})"
            case FunctionDeclarationNode(func_name=fn, arg_names=an, arg_types=at, return_type=rt):
                args = ", ".join(f"{t} {a}" for t, a in zip(at, an))
                return f"{rt} {fn}({args})"
            case BlockNode():
                return "{...}"
            case ProgramNode():
                return "<program>"
            case _:
                s = PrettyPrinter.print_ast(node)
                return " ".join(line.strip() for line in s.splitlines())

    @staticmethod
    def print_slots(slots: Dict[str, int]) -> str:
        """Render a mangled slot mapping grouped by owning function.

        Pointer slots print as `&owner.name`, or `NULL` when never assigned.
        """
        groups: Dict[str, list] = {}
        for mangled, value in slots.items():
            owner, name = split_mangled(mangled)
            groups.setdefault(owner, []).append((name, value))

        lines = []
        for owner, entries in groups.items():
            lines.append(f"{owner}:")
            width = max(len(name) for name, _ in entries)
            for name, value in entries:
                shown = "NULL" if value is None else value
                lines.append(f"  {name:<{width}} = {shown}")
        return "\n".join(lines)
