# =============================================================================
# test_instructions.py - Instruction and Program Tests
# =============================================================================

import pytest
from miniplc0.errors import InternalCompilerError
from miniplc0.instructions import ADD, WRT, Instruction, Opcode, Program


class TestInstruction:

    def test_operand_forms(self):
        assert str(Instruction.lit(-5)) == "LIT -5"
        assert str(Instruction.lod(0)) == "LOD 0"
        assert str(Instruction.sto(3)) == "STO 3"
        assert str(ADD) == "ADD"

    def test_opcode_numbering(self):
        assert [op.value for op in Opcode] == list(range(9))
        assert Opcode.LIT.takes_operand
        assert not Opcode.WRT.takes_operand

    def test_zero_operand_opcode_rejects_operand(self):
        with pytest.raises(InternalCompilerError):
            Instruction(Opcode.ADD, 1)

    def test_plain_rejects_operand_opcode(self):
        with pytest.raises(InternalCompilerError):
            Instruction.plain(Opcode.LIT)
        assert Instruction.plain(Opcode.MUL) == Instruction(Opcode.MUL)


class TestProgram:

    def test_listing(self):
        program = Program()
        program.emit(Instruction.lit(1))
        program.emit(Instruction.lit(2))
        program.emit(ADD)
        program.emit(WRT)
        assert program.listing() == "LIT 1\nLIT 2\nADD\nWRT\n"
        assert len(program) == 4
        assert program[2] == ADD

    def test_empty_listing(self):
        assert Program().listing() == ""

    def test_ill_is_never_emitted(self):
        program = Program()
        with pytest.raises(InternalCompilerError):
            program.emit(Instruction(Opcode.ILL))
        assert len(program) == 0

    def test_compares_with_list(self):
        program = Program()
        program.emit(WRT)
        assert program == [WRT]
        assert program != [ADD]
