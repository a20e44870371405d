"""
Reference Stack Machine
=======================

Executes a compiled `Program`. The compiler never needs this module; it
exists to pin down what emitted code actually computes, most notably the
unary minus encoding, which subtracts its operand from whatever lies
beneath it on the stack.

Machine Model
-------------
There is one operand stack of signed 32-bit integers. Declarations leave
exactly one value each, so the bottom of the stack doubles as variable
storage: slot n is stack cell n.

    LIT v   push v
    LOD n   push stack[n]
    STO n   stack[n] = pop()
    ADD     b = pop(); a = pop(); push(a + b)    (likewise SUB MUL DIV)
    WRT     write pop()

Arithmetic wraps around on overflow. DIV truncates toward zero, as
32-bit machine division does.

Example
-------
>>> from miniplc0.compiler import compile_source
>>> StackMachine(compile_source("begin const a = 6; print(a / 4); end")).run()
[1]
"""

import logging
from typing import Callable, Optional

from miniplc0.errors import (
    DivisionByZeroError,
    IllegalInstructionError,
    InvalidSlotError,
    MachineHaltedError,
    StackUnderflowError,
)
from miniplc0.instructions import Instruction, Opcode, Program

logger = logging.getLogger(__name__)


def wrap_int32(value: int) -> int:
    """Reduce value to the signed 32-bit range, two's complement style."""
    return (value + 2**31) % 2**32 - 2**31


def _divide(a: int, b: int) -> int:
    quotient = abs(a) // abs(b)
    return -quotient if (a < 0) != (b < 0) else quotient


ARITHMETIC: dict[Opcode, Callable[[int, int], int]] = {
    Opcode.ADD: lambda a, b: a + b,
    Opcode.SUB: lambda a, b: a - b,
    Opcode.MUL: lambda a, b: a * b,
    Opcode.DIV: _divide,
}


class StackMachine:
    """
    Interpreter for miniplc0 programs.

    Usage:
        machine = StackMachine(program)
        values = machine.run()

    Attributes:
        program: The instructions being executed
        stack: The operand stack; its bottom cells are the variable slots
        pc: Index of the next instruction
        written: Every value produced by WRT so far
    """

    def __init__(
        self,
        program: Program | list[Instruction],
        output: Optional[Callable[[int], None]] = None,
    ):
        self.program = list(program)
        self.output = output
        self.stack: list[int] = []
        self.pc = 0
        self.written: list[int] = []

    @property
    def halted(self) -> bool:
        return self.pc >= len(self.program)

    def run(self) -> list[int]:
        """
        Execute until the last instruction has run.

        Returns:
            The values written, in order

        Raises:
            MachineError: On the first fault
        """
        while not self.halted:
            self.step()
        logger.debug(f"halted after {self.pc} instructions, {len(self.stack)} cells on stack")
        return self.written

    def step(self) -> None:
        """
        Execute one instruction.

        Raises:
            MachineHaltedError: If the program has already finished
        """
        if self.halted:
            raise MachineHaltedError("program has halted", self.pc)
        instruction = self.program[self.pc]
        opcode = instruction.opcode

        if opcode is Opcode.LIT:
            self.stack.append(wrap_int32(instruction.operand))
        elif opcode is Opcode.LOD:
            self._check_slot(instruction.operand)
            self.stack.append(self.stack[instruction.operand])
        elif opcode is Opcode.STO:
            value = self._pop()
            self._check_slot(instruction.operand)
            self.stack[instruction.operand] = value
        elif opcode in ARITHMETIC:
            b = self._pop()
            a = self._pop()
            if opcode is Opcode.DIV and b == 0:
                raise DivisionByZeroError("division by zero", self.pc)
            self.stack.append(wrap_int32(ARITHMETIC[opcode](a, b)))
        elif opcode is Opcode.WRT:
            value = self._pop()
            self.written.append(value)
            if self.output is not None:
                self.output(value)
        else:
            raise IllegalInstructionError(f"illegal instruction {opcode.name}", self.pc)

        self.pc += 1

    def _pop(self) -> int:
        if not self.stack:
            opcode = self.program[self.pc].opcode
            raise StackUnderflowError(f"{opcode.name} on empty stack", self.pc)
        return self.stack.pop()

    def _check_slot(self, slot: int) -> None:
        if not 0 <= slot < len(self.stack):
            raise InvalidSlotError(
                f"slot {slot} outside stack of depth {len(self.stack)}", self.pc
            )


def execute(program: Program, output: Optional[Callable[[int], None]] = None) -> list[int]:
    """Run a program on a fresh machine and return the values it writes."""
    return StackMachine(program, output).run()
