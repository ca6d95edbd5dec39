"""Convert AST nodes and execution results into JSON-serializable structures.

This module provides `ast_to_json(node)` which returns a nested structure
of dicts/lists/primitives describing the AST node, and `result_to_json(result)`
for the final interpreter state. Both encode only the key fields.
"""

from typing import Any, Dict, Optional
from ast_nodes import *
from symbols import SlotRef


def ast_to_json(node: Optional[ASTNode]) -> Any:
    if node is None:
        return None

    match node:
        # literals
        case BoolLiteralNode(value=v):
            return {"node_type": "BoolLiteral", "value": bool(v)}
        case IntLiteralNode(value=v):
            return {"node_type": "IntLiteral", "value": v}
        case IdentifierNode(name=n):
            return {"node_type": "Identifier", "name": n}
        # expressions
        case BinaryOpNode():
            return {
                "node_type": "BinaryOp",
                "operator": node.operator,
                "left": ast_to_json(node.left),
                "right": ast_to_json(node.right),
            }
        case UnaryOpNode():
            return {
                "node_type": "UnaryOp",
                "operator": node.operator,
                "right": ast_to_json(node.right),
            }
        case AddressOfNode(name=n):
            return {"node_type": "AddressOf", "name": n}
        case DereferenceNode():
            return {"node_type": "Dereference", "pointer": ast_to_json(node.pointer)}
        case FunctionCallNode():
            return {
                "node_type": "FunctionCall",
                "function": node.function.name,
                "arguments": [ast_to_json(a) for a in node.arguments],
            }
        # statements and higher-level nodes
        case AssignmentNode(left=IdentifierNode(name=n)):
            return {
                "node_type": "Assignment",
                "target": n,
                "value": ast_to_json(node.right),
            }
        case AssignmentNode():
            return {
                "node_type": "Assignment",
                "target": ast_to_json(node.left),
                "value": ast_to_json(node.right),
            }
        case ExpressionStatementNode():
            return {"node_type": "ExprStmt", "expression": ast_to_json(node.expression)}
        case VariableDeclarationNode():
            return {
                "node_type": "VarDecl",
                "var_name": node.var_name,
                "var_type": str(node.var_type),
                "init_value": ast_to_json(node.init_value),
            }
        case ReturnStatementNode():
            return {"node_type": "Return", "expression": ast_to_json(node.expression)}
        case IfStatementNode():
            return {
                "node_type": "If",
                "condition": ast_to_json(node.condition),
                "then": ast_to_json(node.then_block),
                "else": ast_to_json(node.else_block),
            }
        case WhileStatementNode():
            return {
                "node_type": "While",
                "condition": ast_to_json(node.condition),
                "body": ast_to_json(node.body),
            }
        case BlockNode():
            return {
                "node_type": "Block",
                "statements": [ast_to_json(s) for s in node.statements],
            }
        case FunctionDeclarationNode():
            return {
                "node_type": "FunctionDecl",
                "func_name": node.func_name,
                "return_type": str(node.return_type),
                "arg_names": list(node.arg_names),
                "arg_types": [str(t) for t in node.arg_types],
                "body": ast_to_json(node.body),
            }
        case ProgramNode():
            return {
                "node_type": "Program",
                "includes": list(node.includes),
                "statements": [ast_to_json(s) for s in node.statements],
            }

    raise TypeError(f"Cannot serialize node type: {type(node).__name__}")


def result_to_json(result) -> Dict[str, Any]:
    """Serializable view of an `ExecutionResult`."""
    return {
        "entry_point": result.entry_point,
        # pointer slots hold a SlotRef (or None when null)
        "slots": {
            name: str(value) if isinstance(value, SlotRef) else value
            for name, value in result.slots.items()
        },
        "return_value": result.return_value,
        "output": list(result.output),
        "steps": result.steps,
    }
