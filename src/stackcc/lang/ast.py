"""
Mini Abstract Syntax Tree (AST) Definitions
===========================================

This module defines the AST node types produced by the Mini parser and
consumed by the code generator.

Node Hierarchy
--------------
ASTNode (base)
├── Statements
│   ├── LetBinding - let name = value;
│   ├── Assignment - name = value;
│   ├── ExpressionStatement - expression used as a statement
│   ├── Block - { statement* }
│   ├── IfStatement - if (cond) stmt [else stmt]
│   └── WhileStatement - while (cond) stmt
└── Expressions
    ├── NumberLiteral - integer constant
    ├── Identifier - variable reference
    └── BinaryOp - left op right

Design Notes
------------
- All nodes are dataclasses; each stores its source location
- Both families are closed: the generator and printer handle every
  variant and reject anything else
- A parent owns its children outright; the tree has no sharing
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from stackcc.errors import SourceLocation


# =============================================================================
# AST Node Base Classes
# =============================================================================

@dataclass
class ASTNode:
    """
    Base class for all AST nodes.

    Attributes:
        location: Source location of the node's first token
    """
    location: SourceLocation

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}@{self.location.line}:{self.location.column}"


@dataclass
class Expression(ASTNode):
    """Base class for nodes that leave one value on the evaluation stack."""
    pass


@dataclass
class Statement(ASTNode):
    """Base class for nodes that leave the evaluation stack unchanged."""
    pass


# =============================================================================
# Expression Nodes
# =============================================================================

class BinaryOperator(Enum):
    """Binary operators, valued by their source spelling."""
    ADD = "+"
    SUBTRACT = "-"
    MULTIPLY = "*"
    DIVIDE = "/"
    EQUAL = "=="
    LESS = "<"
    GREATER = ">"


@dataclass
class NumberLiteral(Expression):
    """
    Integer literal expression.

    Attributes:
        value: The integer value
    """
    value: int = 0


@dataclass
class Identifier(Expression):
    """
    Variable reference expression.

    Attributes:
        name: The variable name
    """
    name: str = ""


@dataclass
class BinaryOp(Expression):
    """
    Binary operation expression (left op right).

    Attributes:
        operator: The binary operator
        left: Left operand expression
        right: Right operand expression
    """
    operator: BinaryOperator = None
    left: Expression = None
    right: Expression = None


# =============================================================================
# Statement Nodes
# =============================================================================

@dataclass
class LetBinding(Statement):
    """
    Binding statement: let name = value;

    Binding a name that already exists reuses its slot, so a second
    `let` of the same name behaves as assignment.
    """
    name: str = ""
    value: Expression = None


@dataclass
class Assignment(Statement):
    """
    Re-assignment of an existing binding: name = value;

    Unlike LetBinding this never introduces a name.
    """
    name: str = ""
    value: Expression = None


@dataclass
class ExpressionStatement(Statement):
    """
    Expression evaluated for its effect; the value is discarded.

    Attributes:
        expression: The expression
    """
    expression: Expression = None


@dataclass
class Block(Statement):
    """
    Brace-delimited statement list. Introduces no scope.

    Attributes:
        statements: Statements in source order
    """
    statements: list[Statement] = field(default_factory=list)


@dataclass
class IfStatement(Statement):
    """
    If statement with optional else clause.

    Attributes:
        condition: The condition expression (zero is false)
        then_branch: Statement executed if condition is non-zero
        else_branch: Optional statement executed otherwise
    """
    condition: Expression = None
    then_branch: Statement = None
    else_branch: Optional[Statement] = None


@dataclass
class WhileStatement(Statement):
    """
    Pre-test loop.

    Attributes:
        condition: Loop condition
        body: Loop body statement
    """
    condition: Expression = None
    body: Statement = None


# =============================================================================
# AST Visitor Pattern
# =============================================================================

class ASTVisitor:
    """
    Base class for AST visitors.

    Dispatches on the node class name to a visit_<ClassName> method.
    Subclasses override the methods for the node types they care about.

    Usage:
        class NameCollector(ASTVisitor):
            def __init__(self):
                self.names = []

            def visit_Identifier(self, node):
                self.names.append(node.name)

        collector = NameCollector()
        for stmt in statements:
            collector.visit(stmt)
    """

    def visit(self, node: ASTNode):
        method_name = f"visit_{node.__class__.__name__}"
        visitor = getattr(self, method_name, self.generic_visit)
        return visitor(node)

    def generic_visit(self, node: ASTNode) -> None:
        """Visit every child node of a node."""
        for field_value in node.__dict__.values():
            if isinstance(field_value, ASTNode):
                self.visit(field_value)
            elif isinstance(field_value, list):
                for item in field_value:
                    if isinstance(item, ASTNode):
                        self.visit(item)


# =============================================================================
# AST Pretty Printer
# =============================================================================

class ASTPrinter(ASTVisitor):
    """
    Pretty printer for AST debugging (used by `minicc --ast`).

    Usage:
        printer = ASTPrinter()
        print(printer.print(statements))
    """

    def __init__(self):
        self.output: list[str] = []
        self.indent_level = 0

    def print(self, statements: list[Statement]) -> str:
        """Print a program (list of top-level statements) and return it."""
        self.output = []
        self.indent_level = 0
        self._emit("Program")
        self._indent()
        for stmt in statements:
            self.visit(stmt)
        self._dedent()
        return "\n".join(self.output)

    def _emit(self, text: str) -> None:
        indent = "  " * self.indent_level
        self.output.append(f"{indent}{text}")

    def _indent(self) -> None:
        self.indent_level += 1

    def _dedent(self) -> None:
        self.indent_level = max(0, self.indent_level - 1)

    def generic_visit(self, node: ASTNode) -> None:
        raise TypeError(f"cannot print node {node!r}")

    def visit_LetBinding(self, node: LetBinding):
        self._emit(f"Let {node.name} = {self._expr_str(node.value)}")

    def visit_Assignment(self, node: Assignment):
        self._emit(f"Assign {node.name} = {self._expr_str(node.value)}")

    def visit_ExpressionStatement(self, node: ExpressionStatement):
        self._emit(f"Expr: {self._expr_str(node.expression)}")

    def visit_Block(self, node: Block):
        self._emit("Block")
        self._indent()
        for stmt in node.statements:
            self.visit(stmt)
        self._dedent()

    def visit_IfStatement(self, node: IfStatement):
        self._emit(f"If ({self._expr_str(node.condition)})")
        self._indent()
        self._emit("Then:")
        self._indent()
        self.visit(node.then_branch)
        self._dedent()
        if node.else_branch is not None:
            self._emit("Else:")
            self._indent()
            self.visit(node.else_branch)
            self._dedent()
        self._dedent()

    def visit_WhileStatement(self, node: WhileStatement):
        self._emit(f"While ({self._expr_str(node.condition)})")
        self._indent()
        self.visit(node.body)
        self._dedent()

    def _expr_str(self, expr: Expression) -> str:
        """Convert an expression to a fully parenthesized string."""
        if isinstance(expr, NumberLiteral):
            return str(expr.value)
        if isinstance(expr, Identifier):
            return expr.name
        if isinstance(expr, BinaryOp):
            # Iterate down the left operands; only right operands recurse
            spine = []
            while isinstance(expr, BinaryOp):
                spine.append(expr)
                expr = expr.left
            text = self._expr_str(expr)
            for node in reversed(spine):
                op_str = getattr(node.operator, "value", "?")
                text = f"({text} {op_str} {self._expr_str(node.right)})"
            return text
        return f"<{type(expr).__name__}>"
