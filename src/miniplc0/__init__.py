"""
miniplc0 - Single-Pass Compiler for a Minimal Teaching Language
================================================================

This package compiles miniplc0 source, a tiny imperative language with
constants, variables, integer arithmetic and a print statement, into a
linear program for an operand-stack machine.

Main Components
---------------
- **lexer**: finite-state tokenizer with position tracking
- **analyzer**: recursive descent parser that resolves names and emits
  instructions in the same pass
- **symbols**: single-scope symbol table with stable slot numbering
- **instructions**: opcodes, instructions and the output Program
- **vm**: reference interpreter for compiled programs
- **compiler**: pipeline driver and configuration

Language
--------
    begin
        const limit = 10;
        var x;
        var y = limit * 2;
        x = y - limit;
        print(x);
    end

Quick Start
-----------
    >>> from miniplc0 import compile_source
    >>> print(compile_source("begin print(-(1)); end").listing(), end="")
    LIT 1
    SUB
    WRT

Or use the command-line tool:
    $ plc0c -l -i prog.plc0 -o prog.out
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================

from miniplc0.source import Position, SourceBuffer
from miniplc0.errors import (
    Plc0Error,
    ErrorCode,
    CompilationError,
    LexicalError,
    InvalidCharacterError,
    IntegerLiteralError,
    StructuralError,
    MissingTokenError,
    SemanticError,
    UndeclaredIdentifierError,
    DuplicateDeclarationError,
    AssignToConstantError,
    UninitializedReadError,
    IntegerOverflowError,
    MachineError,
    StackUnderflowError,
    InvalidSlotError,
    DivisionByZeroError,
    IllegalInstructionError,
    MachineHaltedError,
    InternalCompilerError,
)
from miniplc0.lexer import TokenType, Token, IntegerToken, SymbolToken, Tokenizer, tokenize
from miniplc0.symbols import SymbolKind, Symbol, SymbolTable
from miniplc0.instructions import Opcode, Instruction, Program
from miniplc0.analyzer import AnalysisContext, Analyzer, analyze
from miniplc0.vm import StackMachine, execute
from miniplc0.compiler import (
    CompilerOptions,
    CompilerResult,
    Plc0Compiler,
    compile_source,
    compile_file,
    tokenize_file,
)

__all__ = [
    "__version__",
    # Source positions
    "Position",
    "SourceBuffer",
    # Errors
    "Plc0Error",
    "ErrorCode",
    "CompilationError",
    "LexicalError",
    "InvalidCharacterError",
    "IntegerLiteralError",
    "StructuralError",
    "MissingTokenError",
    "SemanticError",
    "UndeclaredIdentifierError",
    "DuplicateDeclarationError",
    "AssignToConstantError",
    "UninitializedReadError",
    "IntegerOverflowError",
    "MachineError",
    "StackUnderflowError",
    "InvalidSlotError",
    "DivisionByZeroError",
    "IllegalInstructionError",
    "MachineHaltedError",
    "InternalCompilerError",
    # Lexer
    "TokenType",
    "Token",
    "IntegerToken",
    "SymbolToken",
    "Tokenizer",
    "tokenize",
    # Symbols
    "SymbolKind",
    "Symbol",
    "SymbolTable",
    # Instructions
    "Opcode",
    "Instruction",
    "Program",
    # Analyzer
    "AnalysisContext",
    "Analyzer",
    "analyze",
    # Machine
    "StackMachine",
    "execute",
    # Compiler
    "CompilerOptions",
    "CompilerResult",
    "Plc0Compiler",
    "compile_source",
    "compile_file",
    "tokenize_file",
]
