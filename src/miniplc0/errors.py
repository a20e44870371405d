"""
miniplc0 Error Hierarchy
========================

This module defines the exception hierarchy for the whole compiler.
All exceptions inherit from Plc0Error, allowing callers to catch every
compiler-related error with a single except clause if desired.

Exception Hierarchy
-------------------
Plc0Error (base)
├── CompilationError (carries an ErrorCode and a source Position)
│   ├── LexicalError - the tokenizer rejected the input
│   │   ├── InvalidCharacterError - character outside the alphabet
│   │   └── IntegerLiteralError - literal not representable
│   ├── StructuralError - the token sequence does not fit the grammar
│   │   └── MissingTokenError - a required token is absent
│   └── SemanticError - well-formed but meaningless program
│       ├── UndeclaredIdentifierError
│       ├── DuplicateDeclarationError
│       ├── AssignToConstantError
│       ├── UninitializedReadError
│       └── IntegerOverflowError
├── MachineError (reference stack machine faults)
│   ├── StackUnderflowError
│   ├── InvalidSlotError
│   ├── DivisionByZeroError
│   ├── IllegalInstructionError
│   └── MachineHaltedError
└── InternalCompilerError - a compiler invariant was broken

Compilation is fail-fast: the first error raised aborts the pass and
propagates unchanged to the caller. There is no error collection or
recovery.

Error messages follow this format:
    filename:line:column: error: description
        source_line_text
        ^ (pointer to error location)
    hint: suggestion for fixing (when available)
"""

from enum import Enum
from typing import Optional

from miniplc0.source import Position


# =============================================================================
# Error Codes
# =============================================================================

class ErrorCode(Enum):
    """Machine-readable reason attached to every CompilationError."""

    INVALID_INPUT = "ErrInvalidInput"
    INVALID_IDENTIFIER = "ErrInvalidIdentifier"
    INTEGER_OVERFLOW = "ErrIntegerOverflow"
    NO_BEGIN = "ErrNoBegin"
    NO_END = "ErrNoEnd"
    NEED_IDENTIFIER = "ErrNeedIdentifier"
    CONSTANT_NEED_VALUE = "ErrConstantNeedValue"
    NO_SEMICOLON = "ErrNoSemicolon"
    INCOMPLETE_EXPRESSION = "ErrIncompleteExpression"
    NOT_DECLARED = "ErrNotDeclared"
    ASSIGN_TO_CONSTANT = "ErrAssignToConstant"
    DUPLICATE_DECLARATION = "ErrDuplicateDeclaration"
    NOT_INITIALIZED = "ErrNotInitialized"
    INVALID_ASSIGNMENT = "ErrInvalidAssignment"
    INVALID_PRINT = "ErrInvalidPrint"


# =============================================================================
# Base Exception Class
# =============================================================================

class Plc0Error(Exception):
    """
    Base exception for all miniplc0 errors.

        try:
            compile_source(text)
        except Plc0Error as e:
            print(f"Error: {e}")
    """
    pass


class InternalCompilerError(Plc0Error):
    """A compiler invariant was violated. Always a bug, never bad input."""
    pass


# =============================================================================
# Compilation Errors
# =============================================================================

class CompilationError(Plc0Error):
    """
    Base exception for errors found while compiling a source unit.

    Attributes:
        message: The error description
        code: The ErrorCode classifying the failure
        position: Where in the source the error was detected
        filename: Source name for the message prefix
        hint: A suggestion for fixing the error (optional)
        source_line: The source text of the offending line (optional)
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode,
        position: Position,
        filename: str = "<input>",
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.message = message
        self.code = code
        self.position = position
        self.filename = filename
        self.hint = hint
        self.source_line = source_line
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """
        Format the error message with location, source context, and hint.

        Example output:
            prog.plc0:3:11: error: undeclared identifier 'y'
                print(y);
                      ^
        """
        parts = [f"{self.filename}:{self.position}: error: {self.message}"]

        if self.source_line is not None:
            parts.append(f"    {self.source_line}")
            parts.append(" " * (4 + self.position.column) + "^")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)


class LexicalError(CompilationError):
    """
    The tokenizer could not turn the input into a token.

    Examples:
        - A character outside the language alphabet
        - An integer literal too large to represent
    """
    pass


class InvalidCharacterError(LexicalError):
    """A character that cannot start any token."""

    def __init__(
        self,
        char: str,
        position: Position,
        filename: str = "<input>",
        source_line: Optional[str] = None,
    ):
        self.char = char
        super().__init__(
            f"invalid character {char!r} (0x{ord(char):02X})",
            ErrorCode.INVALID_INPUT,
            position,
            filename,
            source_line=source_line,
        )


class IntegerLiteralError(LexicalError):
    """An unsigned literal whose digits do not fit in 32 bits."""

    def __init__(
        self,
        digits: str,
        position: Position,
        filename: str = "<input>",
        source_line: Optional[str] = None,
    ):
        self.digits = digits
        super().__init__(
            f"integer literal '{digits}' is out of range",
            ErrorCode.INVALID_IDENTIFIER,
            position,
            filename,
            hint="unsigned literals must not exceed 4294967295",
            source_line=source_line,
        )


class StructuralError(CompilationError):
    """
    The token sequence does not match the grammar.

    Examples:
        - Missing 'begin' or 'end'
        - Missing ';'
        - Incomplete expression
    """
    pass


class MissingTokenError(StructuralError):
    """A required token was not found where the grammar demands it."""

    def __init__(
        self,
        expected: str,
        code: ErrorCode,
        position: Position,
        filename: str = "<input>",
        found: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.expected = expected
        self.found = found
        message = f"expected {expected}"
        if found is not None:
            message += f", found '{found}'"
        else:
            message += " before end of input"
        super().__init__(message, code, position, filename, source_line=source_line)


class SemanticError(CompilationError):
    """
    The program is well-formed but violates the declaration rules.

    Examples:
        - Using an undeclared name
        - Declaring a name twice
        - Assigning to a constant
        - Reading a variable before it is assigned
    """
    pass


class UndeclaredIdentifierError(SemanticError):
    """Reference to a name with no declaration."""

    def __init__(
        self,
        identifier: str,
        position: Position,
        filename: str = "<input>",
        source_line: Optional[str] = None,
    ):
        self.identifier = identifier
        super().__init__(
            f"undeclared identifier '{identifier}'",
            ErrorCode.NOT_DECLARED,
            position,
            filename,
            hint=f"declare '{identifier}' with 'const' or 'var' before the first statement",
            source_line=source_line,
        )


class DuplicateDeclarationError(SemanticError):
    """A name declared more than once."""

    def __init__(
        self,
        identifier: str,
        position: Position,
        original_position: Optional[Position] = None,
        filename: str = "<input>",
        source_line: Optional[str] = None,
    ):
        self.identifier = identifier
        self.original_position = original_position

        hint = None
        if original_position is not None:
            hint = f"'{identifier}' was first declared at {original_position}"

        super().__init__(
            f"redeclaration of '{identifier}'",
            ErrorCode.DUPLICATE_DECLARATION,
            position,
            filename,
            hint=hint,
            source_line=source_line,
        )


class AssignToConstantError(SemanticError):
    """Assignment whose target was declared with 'const'."""

    def __init__(
        self,
        identifier: str,
        position: Position,
        filename: str = "<input>",
        source_line: Optional[str] = None,
    ):
        self.identifier = identifier
        super().__init__(
            f"cannot assign to constant '{identifier}'",
            ErrorCode.ASSIGN_TO_CONSTANT,
            position,
            filename,
            source_line=source_line,
        )


class UninitializedReadError(SemanticError):
    """Read of a variable that has not been assigned yet."""

    def __init__(
        self,
        identifier: str,
        position: Position,
        filename: str = "<input>",
        source_line: Optional[str] = None,
    ):
        self.identifier = identifier
        super().__init__(
            f"variable '{identifier}' is used before it is initialized",
            ErrorCode.NOT_INITIALIZED,
            position,
            filename,
            hint=f"assign a value to '{identifier}' first",
            source_line=source_line,
        )


class IntegerOverflowError(SemanticError):
    """A literal value outside the signed 32-bit range of the machine."""

    def __init__(
        self,
        value: int,
        position: Position,
        filename: str = "<input>",
        source_line: Optional[str] = None,
    ):
        self.value = value
        super().__init__(
            f"value {value} does not fit in a 32-bit signed integer",
            ErrorCode.INTEGER_OVERFLOW,
            position,
            filename,
            source_line=source_line,
        )


# =============================================================================
# Stack Machine Errors
# =============================================================================

class MachineError(Plc0Error):
    """
    Fault raised while executing a program on the reference machine.

    Attributes:
        pc: Index of the faulting instruction
    """

    def __init__(self, message: str, pc: int):
        self.pc = pc
        super().__init__(f"at instruction {pc}: {message}")


class StackUnderflowError(MachineError):
    """An instruction needed more operands than the stack holds."""
    pass


class InvalidSlotError(MachineError):
    """LOD or STO addressed a slot beyond the top of the stack."""
    pass


class DivisionByZeroError(MachineError):
    """DIV with a zero divisor."""
    pass


class IllegalInstructionError(MachineError):
    """ILL reached execution."""
    pass


class MachineHaltedError(MachineError):
    """step() called after the last instruction has run."""
    pass
