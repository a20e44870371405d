"""
Stack Machine Instructions
==========================

The compiler's output is a `Program`: a flat list of instructions for an
operand-stack machine with no jumps, so execution order is emission order.

Instruction Set
---------------
| Opcode | Operand | Effect                                     |
|--------|---------|--------------------------------------------|
| LIT    | value   | push value                                 |
| LOD    | slot    | push a copy of slot                        |
| STO    | slot    | pop into slot                              |
| ADD    |         | pop b, pop a, push a + b                   |
| SUB    |         | pop b, pop a, push a - b                   |
| MUL    |         | pop b, pop a, push a * b                   |
| DIV    |         | pop b, pop a, push a / b                   |
| WRT    |         | pop and print                              |

ILL (illegal) exists only as the zero opcode and is never emitted.

Listing Format
--------------
One instruction per line: `LIT 1`, `LOD 0`, `STO 1`, or a bare `ADD`.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Iterator

from miniplc0.errors import InternalCompilerError


class Opcode(IntEnum):
    """Operation codes, numbered as the machine encodes them."""
    ILL = 0
    LIT = 1
    LOD = 2
    STO = 3
    ADD = 4
    SUB = 5
    MUL = 6
    DIV = 7
    WRT = 8

    @property
    def takes_operand(self) -> bool:
        return self in (Opcode.LIT, Opcode.LOD, Opcode.STO)


@dataclass(frozen=True)
class Instruction:
    """
    One machine instruction.

    Zero-operand opcodes always carry operand 0; use the constructors
    below rather than building instances by hand.
    """
    opcode: Opcode
    operand: int = 0

    def __post_init__(self):
        if not self.opcode.takes_operand and self.operand != 0:
            raise InternalCompilerError(f"{self.opcode.name} takes no operand, got {self.operand}")

    @classmethod
    def lit(cls, value: int) -> "Instruction":
        return cls(Opcode.LIT, value)

    @classmethod
    def lod(cls, slot: int) -> "Instruction":
        return cls(Opcode.LOD, slot)

    @classmethod
    def sto(cls, slot: int) -> "Instruction":
        return cls(Opcode.STO, slot)

    @classmethod
    def plain(cls, opcode: Opcode) -> "Instruction":
        """Build a zero-operand instruction."""
        if opcode.takes_operand:
            raise InternalCompilerError(f"{opcode.name} requires an operand")
        return cls(opcode)

    def __str__(self) -> str:
        if self.opcode.takes_operand:
            return f"{self.opcode.name} {self.operand}"
        return self.opcode.name


ADD = Instruction(Opcode.ADD)
SUB = Instruction(Opcode.SUB)
MUL = Instruction(Opcode.MUL)
DIV = Instruction(Opcode.DIV)
WRT = Instruction(Opcode.WRT)


class Program:
    """
    Ordered instruction list built by the analyzer.

    Example:
        program = Program()
        program.emit(Instruction.lit(1))
        program.emit(WRT)
        print(program.listing())
    """

    def __init__(self) -> None:
        self._instructions: list[Instruction] = []

    def emit(self, instruction: Instruction) -> None:
        """
        Append an instruction.

        Raises:
            InternalCompilerError: On an attempt to emit ILL
        """
        if instruction.opcode is Opcode.ILL:
            raise InternalCompilerError("attempted to emit ILL")
        self._instructions.append(instruction)

    def listing(self) -> str:
        """Render the program, one instruction per line."""
        return "".join(f"{instruction}\n" for instruction in self._instructions)

    def __len__(self) -> int:
        return len(self._instructions)

    def __iter__(self) -> Iterator[Instruction]:
        return iter(self._instructions)

    def __getitem__(self, index):
        return self._instructions[index]

    def __eq__(self, other) -> bool:
        if isinstance(other, Program):
            return self._instructions == other._instructions
        if isinstance(other, list):
            return self._instructions == other
        return NotImplemented

    def __repr__(self) -> str:
        return f"Program({len(self._instructions)} instructions)"
