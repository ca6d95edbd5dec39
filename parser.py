"""
Parser for the shadow-variable C subset.

Overview and approach:
- This parser implements a small, hand-written recursive/Pratt-style parser
    for statements and expressions. Expressions use a Pratt-like approach with
    a precedence table stored in `self.precedence`.

Key points:
- Expression parsing:
    - `parse_primary()` recognizes literals, identifiers, parenthesized
        expressions and prefix operators (`-`, `!`, `&name`, `*ptr`).
    - `parse_postfix()` handles function calls (highest precedence).
    - `parse_binary_expression()` implements the Pratt loop: while the next
        token has precedence >= the current minimum, bind that operator and
        parse the right-hand side using a higher minimum precedence, which
        makes every binary operator left-associative.

- Statement parsing:
    - `parse_statement()` recognizes declarations (`int`, `int*`), control flow
        (`if`/`else`, `while`), blocks, `return`, assignments and expression
        statements.
    - Assignment is a statement, not an expression. `x += e`, `x -= e`,
        `x *= e`, `x /= e`, `x++` and `x--` are desugared here into a plain
        `AssignmentNode` so later phases only ever see `x = <expr>` or
        `*p = <expr>`.

- Functions and prototypes:
    - A function declaration is recognized by lookahead when a type token is
        followed by an identifier and a left parenthesis: `type ident(`.
    - Prototypes (declarations without bodies) end with `;`.

- Preprocessor:
    - `#include <header>` tokens are collected into `ProgramNode.includes`;
        the program loader decides which headers are supported.

Name resolution is deliberately left to run time: the interpreter resolves
identifiers against the enclosing function's shadow slots and reports
`UnboundVariable` for names that were never declared there.
"""

from __future__ import annotations
import copy
from typing import List, Optional, Dict
from tokens import Token, TokenType
from ast_nodes import *
from symbols import SymbolType


# Compound assignment token -> binary operator it desugars to
COMPOUND_OPERATORS: Dict[TokenType, str] = {
    TokenType.PLUS_ASSIGN: "+",
    TokenType.MINUS_ASSIGN: "-",
    TokenType.STAR_ASSIGN: "*",
    TokenType.SLASH_ASSIGN: "/",
    TokenType.INCREMENT: "+",
    TokenType.DECREMENT: "-",
}

VALUE_TYPES = (SymbolType.INT, SymbolType.INT_PTR)

BINARY_TOKENS = (
    TokenType.PLUS,
    TokenType.MINUS,
    TokenType.STAR,
    TokenType.SLASH,
    TokenType.MOD,
    TokenType.EQ,
    TokenType.NEQ,
    TokenType.LT,
    TokenType.GT,
    TokenType.LTE,
    TokenType.GTE,
    TokenType.AND,
    TokenType.OR,
)


class Parser:
    def __init__(self, tokens: List[Token]):
        self.tokens = tokens
        self.pos = 0
        self.current = tokens[0] if tokens else Token(TokenType.EOF, None)

        # Operator precedence table (higher = tighter binding)
        self.precedence: Dict[TokenType, int] = {
            TokenType.OR: 1,
            TokenType.AND: 2,
            TokenType.EQ: 3,
            TokenType.NEQ: 3,
            TokenType.LT: 4,
            TokenType.GT: 4,
            TokenType.LTE: 4,
            TokenType.GTE: 4,
            TokenType.PLUS: 5,
            TokenType.MINUS: 5,
            TokenType.STAR: 6,
            TokenType.SLASH: 6,
            TokenType.MOD: 6,
        }

    def error(self, message: str, token: Optional[Token] = None) -> SyntaxError:
        token = token or self.current
        if token.line:
            message = f"{message} at line {token.line}, column {token.column}"
        return SyntaxError(message)

    def peek(self, offset: int = 1) -> Token:
        """Return a token ahead of the current one without consuming anything."""
        idx = self.pos + offset
        return self.tokens[idx] if idx < len(self.tokens) else Token(TokenType.EOF, None)

    def advance(self) -> Token:
        """Move to next token."""
        self.pos += 1
        if self.pos < len(self.tokens):
            self.current = self.tokens[self.pos]
        else:
            self.current = Token(TokenType.EOF, None)
        return self.current

    def expect(self, expected_type: TokenType, message: Optional[str] = None) -> Token:
        """Expect and consume token of given type."""
        if self.current.type == expected_type:
            token = self.current
            self.advance()
            return token

        msg = message or f"Expected {expected_type}, got {self.current.type}"
        raise self.error(msg)

    def match(self, token_type: TokenType) -> bool:
        """Check if current token matches type, consume if true."""
        if self.current.type == token_type:
            self.advance()
            return True
        return False

    def get_precedence(self, token_type: TokenType) -> int:
        """Get precedence for operator token type (-1 for non-operators)."""
        return self.precedence.get(token_type, -1)

    def parse_type(self) -> SymbolType:
        """Parse a type: int, int* or void."""
        match self.current.type:
            case TokenType.INT_TYPE:
                self.advance()
                if self.match(TokenType.STAR):
                    return SymbolType.INT_PTR
                return SymbolType.INT
            case TokenType.VOID_TYPE:
                self.advance()
                return SymbolType.VOID
            case _:
                raise self.error(f"Expected type, got {self.current.type}")

    def parse_primary(self) -> ASTNode:
        """Parse primary expressions (literals, identifiers, parenthesized, prefix)."""
        token = self.current

        match token.type:
            case TokenType.INTEGER:
                self.advance()
                return IntLiteralNode(value=token.value, line=token.line, column=token.column)

            case TokenType.TRUE:
                self.advance()
                return BoolLiteralNode(value=True, line=token.line, column=token.column)

            case TokenType.FALSE:
                self.advance()
                return BoolLiteralNode(value=False, line=token.line, column=token.column)

            case TokenType.IDENTIFIER:
                self.advance()
                return IdentifierNode(name=token.value, line=token.line, column=token.column)

            case TokenType.LPAREN:
                self.advance()
                expr = self.parse_expression()
                self.expect(TokenType.RPAREN)
                return expr

            case TokenType.MINUS | TokenType.NOT:
                self.advance()
                right = self.parse_postfix(self.parse_primary())
                return UnaryOpNode(
                    operator=token.value, right=right, line=token.line, column=token.column
                )

            case TokenType.AMPERSAND:
                self.advance()
                name_token = self.expect(
                    TokenType.IDENTIFIER, "Expected variable name after '&'"
                )
                return AddressOfNode(
                    name=name_token.value, line=token.line, column=token.column
                )

            case TokenType.STAR:
                self.advance()
                pointer = self.parse_postfix(self.parse_primary())
                return DereferenceNode(
                    pointer=pointer, line=token.line, column=token.column
                )

            case _:
                raise self.error(f"Unexpected token: {token}", token)

    def parse_postfix(self, left: ASTNode) -> ASTNode:
        """Parse postfix expressions (function calls)."""
        while self.current.type == TokenType.LPAREN:
            if not isinstance(left, IdentifierNode):
                raise self.error("Only named functions can be called")

            self.advance()
            args: List[ASTNode] = []

            if self.current.type != TokenType.RPAREN:
                args.append(self.parse_expression())
                while self.current.type == TokenType.COMMA:
                    self.advance()
                    args.append(self.parse_expression())

            self.expect(TokenType.RPAREN)
            left = FunctionCallNode(
                function=left, arguments=args, line=left.line, column=left.column
            )

        return left

    def parse_operand(self) -> ASTNode:
        return self.parse_postfix(self.parse_primary())

    def parse_binary_expression(
        self, left: ASTNode, min_precedence: int = 0
    ) -> ASTNode:
        """Parse binary expressions using Pratt parsing."""
        while True:
            token = self.current
            if token.type not in BINARY_TOKENS:
                break

            precedence = self.get_precedence(token.type)
            if precedence < min_precedence:
                break

            self.advance()
            # Parse right operand with higher precedence (left-associative)
            right = self.parse_binary_expression(self.parse_operand(), precedence + 1)
            left = BinaryOpNode(
                left=left,
                operator=token.value,
                right=right,
                line=token.line,
                column=token.column,
            )

        return left

    def parse_expression(self) -> ASTNode:
        """Parse an expression."""
        return self.parse_binary_expression(self.parse_operand())

    def parse_block(self) -> BlockNode:
        """Parse a block of statements: { statement* }"""
        start = self.expect(TokenType.LBRACE)
        statements: List[ASTNode] = []

        while (
            self.current.type != TokenType.RBRACE and self.current.type != TokenType.EOF
        ):
            statements.append(self.parse_statement())

        self.expect(TokenType.RBRACE, "Missing closing '}'")
        return BlockNode(statements=statements, line=start.line, column=start.column)

    def parse_variable_declaration(self) -> VariableDeclarationNode:
        """Parse variable declaration: int identifier (= expression)? ;"""
        start = self.current
        var_type = self.parse_type()
        if var_type not in VALUE_TYPES:
            raise self.error("Variables must be declared as int or int*", start)

        var_name_token = self.expect(TokenType.IDENTIFIER, "Expected variable name")

        init_value = None
        if self.match(TokenType.ASSIGN):
            init_value = self.parse_expression()

        self.expect(TokenType.SEMICOLON, "Expected semicolon after declaration")

        return VariableDeclarationNode(
            var_name=var_name_token.value,
            var_type=var_type,
            init_value=init_value,
            line=start.line,
            column=start.column,
        )

    def parse_function_declaration(self) -> FunctionDeclarationNode:
        """Parse function declaration/definition: type ident '(' params ')' ('{' body '}' | ';')"""
        start = self.current
        return_type = self.parse_type()
        if return_type == SymbolType.INT_PTR:
            raise self.error("Functions must return int or void", start)

        name_token = self.expect(TokenType.IDENTIFIER, "Expected function name")
        func_name = name_token.value

        self.expect(TokenType.LPAREN)
        arg_types: List[SymbolType] = []
        arg_names: List[str] = []

        if self.current.type == TokenType.VOID_TYPE and self.peek().type == TokenType.RPAREN:
            # `int f(void)` is an explicit empty parameter list
            self.advance()
        elif self.current.type != TokenType.RPAREN:
            while True:
                param_type = self.parse_type()
                if param_type not in VALUE_TYPES:
                    raise self.error("Parameters must be declared as int or int*")
                param_name_token = self.expect(
                    TokenType.IDENTIFIER, "Expected parameter name"
                )
                arg_types.append(param_type)
                arg_names.append(param_name_token.value)

                if self.match(TokenType.COMMA):
                    continue
                break

        self.expect(TokenType.RPAREN)

        body = None
        if not self.match(TokenType.SEMICOLON):
            body = self.parse_block()

        return FunctionDeclarationNode(
            func_name=func_name,
            return_type=return_type,
            arg_types=arg_types,
            arg_names=arg_names,
            body=body,
            line=start.line,
            column=start.column,
        )

    def parse_return_statement(self) -> ReturnStatementNode:
        """Parse return statement: return expr? ;"""
        start = self.expect(TokenType.RETURN)
        expr = None
        if self.current.type != TokenType.SEMICOLON:
            expr = self.parse_expression()
        self.expect(TokenType.SEMICOLON, "Expected semicolon after return")
        return ReturnStatementNode(expression=expr, line=start.line, column=start.column)

    def parse_if_statement(self) -> IfStatementNode:
        """Parse if statement: if (expr) stmt (else stmt)?"""
        start = self.expect(TokenType.IF)
        self.expect(TokenType.LPAREN)
        condition = self.parse_expression()
        self.expect(TokenType.RPAREN)

        then_block = self.parse_statement()

        else_block = None
        if self.match(TokenType.ELSE):
            else_block = self.parse_statement()

        return IfStatementNode(
            condition=condition,
            then_block=then_block,
            else_block=else_block,
            line=start.line,
            column=start.column,
        )

    def parse_while_statement(self) -> WhileStatementNode:
        """Parse while statement: while (expr) stmt"""
        start = self.expect(TokenType.WHILE)
        self.expect(TokenType.LPAREN)
        condition = self.parse_expression()
        self.expect(TokenType.RPAREN)

        body = self.parse_statement()

        return WhileStatementNode(
            condition=condition, body=body, line=start.line, column=start.column
        )

    def parse_assignment(self) -> AssignmentNode:
        """Parse `x = e;`, `*p = e;`, `x op= e;`, `x++;` or `x--;` into an AssignmentNode."""
        start = self.current
        if start.type == TokenType.STAR:
            target = self.parse_primary()
        else:
            name_token = self.expect(TokenType.IDENTIFIER)
            target = IdentifierNode(
                name=name_token.value, line=name_token.line, column=name_token.column
            )

        op_token = self.current
        if op_token.type != TokenType.ASSIGN and op_token.type not in COMPOUND_OPERATORS:
            raise self.error(f"Expected assignment operator, got {op_token.type}")
        self.advance()

        match op_token.type:
            case TokenType.ASSIGN:
                value = self.parse_expression()
            case TokenType.INCREMENT | TokenType.DECREMENT:
                value = BinaryOpNode(
                    left=copy.deepcopy(target),
                    operator=COMPOUND_OPERATORS[op_token.type],
                    right=IntLiteralNode(value=1, line=op_token.line, column=op_token.column),
                    line=op_token.line,
                    column=op_token.column,
                )
            case _:
                value = BinaryOpNode(
                    left=copy.deepcopy(target),
                    operator=COMPOUND_OPERATORS[op_token.type],
                    right=self.parse_expression(),
                    line=op_token.line,
                    column=op_token.column,
                )

        self.expect(TokenType.SEMICOLON, "Expected semicolon after assignment")
        return AssignmentNode(
            left=target, right=value, line=start.line, column=start.column
        )

    def parse_statement(self) -> ASTNode:
        """Parse a statement."""
        match self.current.type:
            case TokenType.INT_TYPE | TokenType.VOID_TYPE:
                # Lookahead: if pattern is 'type ident (' it's a function declaration
                offset = 2 if self.peek(1).type == TokenType.STAR else 1
                if (
                    self.peek(offset).type == TokenType.IDENTIFIER
                    and self.peek(offset + 1).type == TokenType.LPAREN
                ):
                    return self.parse_function_declaration()
                return self.parse_variable_declaration()

            case TokenType.STAR:
                return self.parse_assignment()

            case TokenType.IF:
                return self.parse_if_statement()

            case TokenType.WHILE:
                return self.parse_while_statement()

            case TokenType.LBRACE:
                return self.parse_block()

            case TokenType.RETURN:
                return self.parse_return_statement()

            case TokenType.IDENTIFIER if (
                self.peek().type == TokenType.ASSIGN or self.peek().type in COMPOUND_OPERATORS
            ):
                return self.parse_assignment()

            case TokenType.INCLUDE:
                raise self.error("#include is only allowed at the top level")

            case _:
                start = self.current
                expr = self.parse_expression()
                self.expect(TokenType.SEMICOLON, "Expected semicolon after expression")
                return ExpressionStatementNode(
                    expression=expr, line=start.line, column=start.column
                )

    def parse_program(self) -> ProgramNode:
        """Parse a complete program (includes, functions and stray statements)."""
        statements: List[ASTNode] = []
        includes: List[str] = []
        include_lines: List[int] = []

        while self.current.type != TokenType.EOF:
            if self.current.type == TokenType.INCLUDE:
                includes.append(self.current.value)
                include_lines.append(self.current.line)
                self.advance()
                continue
            statements.append(self.parse_statement())

        return ProgramNode(
            statements=statements,
            includes=includes,
            include_lines=include_lines,
            line=1,
            column=1,
        )

    def parse(self) -> ProgramNode:
        """Parse the complete token stream."""
        return self.parse_program()
