"""
x86-64 Code Generator for Mini
==============================

This module lowers the Mini AST to NASM assembly for x86-64 Linux.

Code Generation Strategy
------------------------
The generator uses a pure stack-machine model on top of the hardware
stack:

1. Every expression pushes exactly one 64-bit value
2. Binary operations pop right into RBX, then left into RAX, compute
   in RAX and push the result
3. Every statement leaves the stack exactly as it found it
4. Variables live in fixed slots of the single stack frame, addressed
   as [rbp - 8*slot]; slot numbers start at 1 and belong to one name

Register Usage
--------------
| Register | Usage                                    |
|----------|------------------------------------------|
| RAX      | Left operand / result, condition tests   |
| RBX      | Right operand                            |
| RDX      | High half of the dividend (via CQO)      |
| RBP      | Frame pointer, base of the slot area     |
| RSP      | Top of the evaluation stack              |

Stack Frame Layout
------------------

    +----------------+ <- RBP (saved RBP just above)
    | slot 1         |  [rbp - 8]
    | slot 2         |  [rbp - 16]
    | ...            |
    +----------------+ <- RSP after prologue (16-byte aligned reserve)
    | temp values    |  (expression evaluation)
    +----------------+

Labels
------
Control flow labels are L0, L1, ... from one counter per compilation.
Each if/while allocates two, so a program with N such statements has
exactly 2N labels, each defined once and jumped to once.

Usage
-----
>>> from stackcc.lang.parser import parse_source
>>> from stackcc.lang.codegen import CodeGenerator
>>> asm = CodeGenerator().generate(parse_source('let x = 42;'))
"""

from typing import Optional

from stackcc.lang.ast import (
    Statement,
    Expression,
    LetBinding,
    Assignment,
    ExpressionStatement,
    Block,
    IfStatement,
    WhileStatement,
    BinaryOp,
    BinaryOperator,
    Identifier,
    NumberLiteral,
)
from stackcc.lang.errors import (
    LangCodeGenError,
    UndefinedVariableError,
    UnsupportedOperatorError,
)


# Bytes per variable slot (one machine word)
SLOT_SIZE = 8

# Range of immediates `push` accepts (sign-extended imm32)
IMM32_MIN = -(2**31)
IMM32_MAX = 2**31 - 1

# Arithmetic operators lowered to a single two-operand instruction
ARITHMETIC_INSTRUCTIONS = {
    BinaryOperator.ADD: "add",
    BinaryOperator.SUBTRACT: "sub",
    BinaryOperator.MULTIPLY: "imul",
}

# Comparison operators lowered to cmp + setcc
COMPARISON_SETCC = {
    BinaryOperator.EQUAL: "sete",
    BinaryOperator.LESS: "setl",
    BinaryOperator.GREATER: "setg",
}


class CodeGenerator:
    """
    Generates x86-64 NASM assembly from a Mini AST.

    One instance may be reused; each call to generate() starts from an
    empty variable table, a zeroed label counter and an empty output.

    Attributes:
        variables: Name to slot table of the last generation
        label_count: Number of labels allocated by the last generation
    """

    def __init__(self, source_lines: Optional[list[str]] = None):
        """
        Args:
            source_lines: Original source lines, used only to add context
                          to error messages
        """
        self._source_lines = source_lines or []

        self._output: list[str] = []
        self._variables: dict[str, int] = {}
        self._label_counter: int = 0

    @property
    def variables(self) -> dict[str, int]:
        return dict(self._variables)

    @property
    def label_count(self) -> int:
        return self._label_counter

    def generate(self, program: list[Statement]) -> str:
        """
        Generate assembly for a whole program.

        Args:
            program: Top-level statements in source order

        Returns:
            Newline-terminated assembly text

        Raises:
            UndefinedVariableError: A name is used before it is bound
            UnsupportedOperatorError: A BinaryOp carries an unknown operator
        """
        self._output = []
        self._variables = {}
        self._label_counter = 0

        for stmt in program:
            self._generate_statement(stmt)

        body = self._output
        self._output = []
        self._emit_prologue()
        prologue = self._output
        self._output = []
        self._emit_epilogue()

        return "\n".join(prologue + body + self._output) + "\n"

    # =========================================================================
    # Assembly Output Methods
    # =========================================================================

    def _emit(self, line: str) -> None:
        self._output.append(line)

    def _emit_label(self, label: str) -> None:
        self._emit(f"{label}:")

    def _emit_instruction(self, mnemonic: str, operand: str = "") -> None:
        if operand:
            self._emit(f"    {mnemonic} {operand}")
        else:
            self._emit(f"    {mnemonic}")

    def _new_label(self) -> str:
        label = f"L{self._label_counter}"
        self._label_counter += 1
        return label

    def _frame_size(self) -> int:
        """Bytes reserved for variable slots, rounded up to 16 for alignment."""
        size = len(self._variables) * SLOT_SIZE
        return (size + 15) // 16 * 16

    @staticmethod
    def _slot_operand(slot: int) -> str:
        return f"QWORD [rbp - {slot * SLOT_SIZE}]"

    def _source_line(self, line: int) -> Optional[str]:
        if 0 < line <= len(self._source_lines):
            return self._source_lines[line - 1]
        return None

    # =========================================================================
    # Prologue and Epilogue
    # =========================================================================

    def _emit_prologue(self) -> None:
        """Entry point and frame setup."""
        self._emit("section .text")
        self._emit("global _start")
        self._emit_label("_start")
        self._emit_instruction("push", "rbp")
        self._emit_instruction("mov", "rbp, rsp")
        self._emit_instruction("sub", f"rsp, {self._frame_size()}")

    def _emit_epilogue(self) -> None:
        """Frame teardown and exit(0) via the Linux syscall."""
        self._emit_instruction("mov", "rsp, rbp")
        self._emit_instruction("pop", "rbp")
        self._emit_instruction("mov", "rax, 60")
        self._emit_instruction("xor", "rdi, rdi")
        self._emit_instruction("syscall")

    # =========================================================================
    # Statement Generation
    # =========================================================================

    def _generate_statement(self, stmt: Statement) -> None:
        if isinstance(stmt, LetBinding):
            self._generate_let(stmt)
        elif isinstance(stmt, Assignment):
            self._generate_assignment(stmt)
        elif isinstance(stmt, ExpressionStatement):
            self._generate_expression(stmt.expression)
            self._emit_instruction("pop", "rax")
        elif isinstance(stmt, Block):
            for inner in stmt.statements:
                self._generate_statement(inner)
        elif isinstance(stmt, IfStatement):
            self._generate_if(stmt)
        elif isinstance(stmt, WhileStatement):
            self._generate_while(stmt)
        else:
            raise LangCodeGenError(
                f"cannot generate code for {type(stmt).__name__}",
                getattr(stmt, "location", None),
            )

    def _generate_let(self, stmt: LetBinding) -> None:
        """Bind a name; a name bound before keeps its slot."""
        self._generate_expression(stmt.value)

        slot = self._variables.get(stmt.name)
        if slot is None:
            slot = len(self._variables) + 1
            self._variables[stmt.name] = slot

        self._emit_instruction("pop", self._slot_operand(slot))

    def _generate_assignment(self, stmt: Assignment) -> None:
        self._generate_expression(stmt.value)
        slot = self._lookup(stmt.name, stmt)
        self._emit_instruction("pop", self._slot_operand(slot))

    def _generate_if(self, stmt: IfStatement) -> None:
        else_label = self._new_label()
        end_label = self._new_label()

        self._generate_condition(stmt.condition, else_label)

        self._generate_statement(stmt.then_branch)
        self._emit_instruction("jmp", end_label)

        self._emit_label(else_label)
        if stmt.else_branch is not None:
            self._generate_statement(stmt.else_branch)

        self._emit_label(end_label)

    def _generate_while(self, stmt: WhileStatement) -> None:
        start_label = self._new_label()
        end_label = self._new_label()

        self._emit_label(start_label)
        self._generate_condition(stmt.condition, end_label)

        self._generate_statement(stmt.body)
        self._emit_instruction("jmp", start_label)

        self._emit_label(end_label)

    def _generate_condition(self, condition: Expression, false_label: str) -> None:
        """Evaluate a condition and jump to false_label when it is zero."""
        self._generate_expression(condition)
        self._emit_instruction("pop", "rax")
        self._emit_instruction("test", "rax, rax")
        self._emit_instruction("jz", false_label)

    # =========================================================================
    # Expression Generation
    # =========================================================================

    def _generate_expression(self, expr: Expression) -> None:
        """Generate code that pushes the value of expr."""
        if isinstance(expr, NumberLiteral):
            self._generate_number(expr)
        elif isinstance(expr, Identifier):
            slot = self._lookup(expr.name, expr)
            self._emit_instruction("push", self._slot_operand(slot))
        elif isinstance(expr, BinaryOp):
            self._generate_binary(expr)
        else:
            raise LangCodeGenError(
                f"cannot generate code for {type(expr).__name__}",
                getattr(expr, "location", None),
            )

    def _generate_number(self, expr: NumberLiteral) -> None:
        if IMM32_MIN <= expr.value <= IMM32_MAX:
            self._emit_instruction("push", str(expr.value))
        else:
            # push only takes a sign-extended 32-bit immediate
            self._emit_instruction("mov", f"rax, {expr.value}")
            self._emit_instruction("push", "rax")

    def _generate_binary(self, expr: BinaryOp) -> None:
        # Left operands form the spine of a chain; walk it iteratively
        spine = []
        node = expr
        while isinstance(node, BinaryOp):
            spine.append(node)
            node = node.left

        self._generate_expression(node)
        for binary in reversed(spine):
            self._generate_expression(binary.right)
            self._generate_operation(binary)

    def _generate_operation(self, expr: BinaryOp) -> None:
        """Combine the two operands on top of the stack into one value."""
        op = expr.operator

        self._emit_instruction("pop", "rbx")
        self._emit_instruction("pop", "rax")

        if op in ARITHMETIC_INSTRUCTIONS:
            self._emit_instruction(ARITHMETIC_INSTRUCTIONS[op], "rax, rbx")
        elif op == BinaryOperator.DIVIDE:
            # Sign-extend RAX into RDX:RAX; idiv truncates toward zero
            self._emit_instruction("cqo")
            self._emit_instruction("idiv", "rbx")
        elif op in COMPARISON_SETCC:
            self._emit_instruction("cmp", "rax, rbx")
            self._emit_instruction(COMPARISON_SETCC[op], "al")
            self._emit_instruction("movzx", "rax, al")
        else:
            raise UnsupportedOperatorError(op, expr.location)

        self._emit_instruction("push", "rax")

    def _lookup(self, name: str, node) -> int:
        """Return the slot of a bound name."""
        slot = self._variables.get(name)
        if slot is None:
            location = node.location
            raise UndefinedVariableError(
                name,
                location,
                self._source_line(location.line) if location else None,
            )
        return slot
