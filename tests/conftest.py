"""
Shared test configuration.

Provides a small interpreter for the subset of x86-64 NASM the code
generator emits, so tests can check what generated programs compute
without needing nasm, ld or an x86 host.
"""

import re

import pytest

from stackcc.lang import Compiler


MASK64 = 2**64 - 1
MEMORY_OPERAND = re.compile(r"^QWORD \[rbp - (\d+)\]$")


def to_signed(value: int) -> int:
    value &= MASK64
    return value - 2**64 if value >= 2**63 else value


class StackSimulator:
    """
    Executes generated assembly text.

    Memory is a dict of 8-byte cells keyed by address. The simulated
    stack starts at INITIAL_RSP and grows down, like the real one.
    """

    INITIAL_RSP = 0x10000

    def __init__(self, assembly: str, max_steps: int = 100_000):
        self.lines = [line.strip() for line in assembly.splitlines()]
        self.labels = {
            line[:-1]: index for index, line in enumerate(self.lines) if line.endswith(":")
        }
        self.max_steps = max_steps
        self.regs = {"rax": 0, "rbx": 0, "rdx": 0, "rdi": 0, "rbp": 0, "rsp": self.INITIAL_RSP}
        self.memory: dict[int, int] = {}
        self.zero_flag = False
        self.compared = (0, 0)
        self.frame_base = None
        self.exited = False

    # Operand handling

    def _read(self, operand: str) -> int:
        if operand in self.regs:
            return self.regs[operand]
        match = MEMORY_OPERAND.match(operand)
        if match:
            return self.memory.get(self.regs["rbp"] - int(match.group(1)), 0)
        return int(operand)

    def _write(self, operand: str, value: int) -> None:
        value = to_signed(value)
        if operand in self.regs:
            self.regs[operand] = value
            return
        match = MEMORY_OPERAND.match(operand)
        if not match:
            raise AssertionError(f"cannot write to {operand!r}")
        self.memory[self.regs["rbp"] - int(match.group(1))] = value

    def _push(self, value: int) -> None:
        self.regs["rsp"] -= 8
        self.memory[self.regs["rsp"]] = to_signed(value)

    def _pop(self) -> int:
        value = self.memory[self.regs["rsp"]]
        self.regs["rsp"] += 8
        return value

    # Execution

    def run(self) -> "StackSimulator":
        pc = 0
        steps = 0
        while pc < len(self.lines) and not self.exited:
            steps += 1
            if steps > self.max_steps:
                raise AssertionError("program did not terminate")
            pc = self._step(pc)
        return self

    def _step(self, pc: int) -> int:
        line = self.lines[pc]
        if not line or line.endswith(":") or line.startswith(("section", "global")):
            return pc + 1

        mnemonic, _, rest = line.partition(" ")
        operands = [op.strip() for op in rest.split(",")] if rest else []

        if mnemonic == "push":
            self._push(self._read(operands[0]))
        elif mnemonic == "pop":
            self._write(operands[0], self._pop())
        elif mnemonic == "mov":
            self._write(operands[0], self._read(operands[1]))
            if operands == ["rbp", "rsp"]:
                self.frame_base = self.regs["rbp"]
        elif mnemonic == "add":
            self._write(operands[0], self._read(operands[0]) + self._read(operands[1]))
        elif mnemonic == "sub":
            self._write(operands[0], self._read(operands[0]) - self._read(operands[1]))
        elif mnemonic == "imul":
            self._write(operands[0], self._read(operands[0]) * self._read(operands[1]))
        elif mnemonic == "xor":
            self._write(operands[0], self._read(operands[0]) ^ self._read(operands[1]))
        elif mnemonic == "cqo":
            self.regs["rdx"] = -1 if self.regs["rax"] < 0 else 0
        elif mnemonic == "idiv":
            dividend, divisor = self.regs["rax"], self._read(operands[0])
            if divisor == 0:
                raise ZeroDivisionError("idiv by zero")
            quotient = abs(dividend) // abs(divisor)
            if (dividend < 0) != (divisor < 0):
                quotient = -quotient
            self.regs["rdx"] = dividend - quotient * divisor
            self.regs["rax"] = to_signed(quotient)
        elif mnemonic == "cmp":
            self.compared = (self._read(operands[0]), self._read(operands[1]))
        elif mnemonic in ("sete", "setl", "setg"):
            left, right = self.compared
            flag = {"sete": left == right, "setl": left < right, "setg": left > right}[mnemonic]
            self.regs["rax"] = (self.regs["rax"] & ~0xFF) | int(flag)
        elif mnemonic == "movzx":
            self.regs["rax"] = self.regs["rax"] & 0xFF
        elif mnemonic == "test":
            self.zero_flag = (self._read(operands[0]) & self._read(operands[1])) == 0
        elif mnemonic == "jz":
            if self.zero_flag:
                return self.labels[operands[0]]
        elif mnemonic == "jmp":
            return self.labels[operands[0]]
        elif mnemonic == "syscall":
            self.exited = True
        else:
            raise AssertionError(f"unknown instruction {line!r}")
        return pc + 1

    def slot(self, slot: int) -> int:
        """Value of a variable slot in the (now torn down) frame."""
        return self.memory.get(self.frame_base - 8 * slot, 0)


@pytest.fixture
def run_program():
    """
    Compile and execute a Mini program.

    Returns a function mapping source text to a dict of final variable
    values by name.
    """
    def _run(source: str) -> dict:
        result = Compiler().compile_source(source)
        sim = StackSimulator(result.assembly).run()
        assert sim.exited, "program must end with the exit syscall"
        assert sim.regs["rsp"] == StackSimulator.INITIAL_RSP, "stack not balanced at exit"
        return {name: sim.slot(slot) for name, slot in result.variables.items()}

    return _run
