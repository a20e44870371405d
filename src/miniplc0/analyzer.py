"""
miniplc0 Recursive Descent Analyzer
===================================

This module parses a token sequence and, in the same single pass,
resolves names against the symbol table and emits stack-machine
instructions. There is no syntax tree: each production appends its code
to the program as soon as it has recognised enough input to do so.

Grammar (EBNF)
--------------
program         ::= 'begin' main 'end'
main            ::= const_decls var_decls statements
const_decls     ::= { 'const' IDENTIFIER '=' const_expr ';' }
var_decls       ::= { 'var' IDENTIFIER [ '=' expr ] ';' }
statements      ::= { assignment | print_stmt | ';' }
assignment      ::= IDENTIFIER '=' expr ';'
print_stmt      ::= 'print' '(' expr ')' ';'
const_expr      ::= [ '+' | '-' ] UNSIGNED_INTEGER
expr            ::= term { ( '+' | '-' ) term }
term            ::= factor { ( '*' | '/' ) factor }
factor          ::= [ '+' | '-' ] ( IDENTIFIER | UNSIGNED_INTEGER | '(' expr ')' )

Precedence comes from the nesting of expr/term/factor; every binary
operator is emitted right after its right operand, which makes all
chains left-associative.

Code Shape
----------
Declarations occupy the bottom of the operand stack, one cell per name:

    const a = 1;    LIT 1          slot 0
    var b;          LIT 0          slot 1
    var c = a * 2;  LOD 0 LIT 2 MUL   slot 2

A leading '-' on a factor is emitted as the factor's code followed by
SUB, subtracting the factor from the value beneath it on the stack.

Example Usage
-------------
>>> from miniplc0.lexer import tokenize
>>> from miniplc0.analyzer import analyze
>>> program = analyze(tokenize("begin var x = 2; print(x * 3); end"))
>>> print(program.listing(), end="")
LIT 2
LOD 0
LIT 3
MUL
WRT
"""

import logging
from typing import Iterable, Optional

from miniplc0.errors import (
    AssignToConstantError,
    ErrorCode,
    IntegerOverflowError,
    InternalCompilerError,
    MissingTokenError,
    StructuralError,
    UndeclaredIdentifierError,
    UninitializedReadError,
)
from miniplc0.instructions import ADD, DIV, MUL, SUB, WRT, Instruction, Program
from miniplc0.lexer import IntegerToken, Token, TokenType
from miniplc0.source import ORIGIN, Position, SourceBuffer
from miniplc0.symbols import SymbolKind, SymbolTable

logger = logging.getLogger(__name__)

INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1

ADDITIVE = {
    TokenType.PLUS_SIGN: ADD,
    TokenType.MINUS_SIGN: SUB,
}

MULTIPLICATIVE = {
    TokenType.MULTIPLICATION_SIGN: MUL,
    TokenType.DIVISION_SIGN: DIV,
}


# =============================================================================
# Analysis Context
# =============================================================================

class AnalysisContext:
    """
    All mutable state of one analysis pass.

    Tokens are pulled from the source iterable on demand and kept, so a
    consumed token can always be stepped back over with unread_token().

    Attributes:
        filename: Source name for diagnostics
        buffer: The source text, if available, for diagnostic context
        symbols: Names declared so far
        program: Instructions emitted so far
    """

    def __init__(
        self,
        tokens: Iterable[Token],
        filename: str = "<input>",
        buffer: Optional[SourceBuffer] = None,
    ):
        self.filename = buffer.filename if buffer is not None else filename
        self.buffer = buffer
        self.symbols = SymbolTable(self.filename)
        self.program = Program()

        self._source = iter(tokens)
        self._tokens: list[Token] = []
        self._offset = 0

    def next_token(self) -> Optional[Token]:
        """Consume the next token, or return None at end of input."""
        if self._offset == len(self._tokens):
            token = next(self._source, None)
            if token is None:
                return None
            self._tokens.append(token)
        token = self._tokens[self._offset]
        self._offset += 1
        return token

    def unread_token(self) -> None:
        """Step back over the last consumed token."""
        if self._offset == 0:
            raise InternalCompilerError("unread before the first token")
        self._offset -= 1

    def accept(self, *types: TokenType) -> Optional[Token]:
        """
        Consume the next token if it is one of types.

        Returns:
            The consumed token, or None (nothing consumed)
        """
        token = self.next_token()
        if token is None:
            return None
        if token.type in types:
            return token
        self.unread_token()
        return None

    def position_of(self, token: Optional[Token]) -> Position:
        """
        Where a mismatch at token is reported.

        At end of input that is the end of the last token read.
        """
        if token is not None:
            return token.start
        if self._tokens:
            return self._tokens[-1].end
        return ORIGIN

    def source_line(self, position: Position) -> Optional[str]:
        if self.buffer is None:
            return None
        return self.buffer.line(position.line)

    @property
    def tokens_consumed(self) -> int:
        return self._offset


# =============================================================================
# Analyzer
# =============================================================================

class Analyzer:
    """
    Single-pass parser and code generator for miniplc0.

    The analyzer holds no state of its own; every production receives the
    AnalysisContext of the pass it belongs to.

    Usage:
        program = Analyzer().analyze(tokens)
    """

    def analyze(
        self,
        tokens: Iterable[Token],
        filename: str = "<input>",
        buffer: Optional[SourceBuffer] = None,
    ) -> Program:
        """
        Analyze a whole program.

        Args:
            tokens: Token sequence, either a list or a lazy iterator
            filename: Source name for diagnostics
            buffer: Source text for diagnostic context

        Returns:
            The emitted Program

        Raises:
            CompilationError: At the first error found
        """
        ctx = AnalysisContext(tokens, filename, buffer)
        self.analyze_program(ctx)
        logger.debug(
            f"{ctx.filename}: {len(ctx.symbols)} declarations, "
            f"{len(ctx.program)} instructions from {ctx.tokens_consumed} tokens"
        )
        return ctx.program

    # =========================================================================
    # Program Structure
    # =========================================================================

    def analyze_program(self, ctx: AnalysisContext) -> None:
        """program ::= 'begin' main 'end'"""
        self._require(ctx, TokenType.BEGIN, ErrorCode.NO_BEGIN, "'begin'")
        self.analyze_main(ctx)
        self._require(ctx, TokenType.END, ErrorCode.NO_END, "'end'")

        trailing = ctx.next_token()
        if trailing is not None:
            raise StructuralError(
                f"unexpected '{trailing.text}' after 'end'",
                ErrorCode.INVALID_INPUT,
                trailing.start,
                ctx.filename,
                source_line=ctx.source_line(trailing.start),
            )

    def analyze_main(self, ctx: AnalysisContext) -> None:
        """main ::= const_decls var_decls statements"""
        self.analyze_constant_declarations(ctx)
        self.analyze_variable_declarations(ctx)
        self.analyze_statements(ctx)

    # =========================================================================
    # Declarations
    # =========================================================================

    def analyze_constant_declarations(self, ctx: AnalysisContext) -> None:
        """const_decls ::= { 'const' IDENTIFIER '=' const_expr ';' }"""
        while ctx.accept(TokenType.CONST):
            ident = self._require(ctx, TokenType.IDENTIFIER, ErrorCode.NEED_IDENTIFIER, "identifier")
            ctx.symbols.check_undeclared(ident.text, ident.start, ctx.source_line(ident.start))
            self._require(ctx, TokenType.EQUAL_SIGN, ErrorCode.CONSTANT_NEED_VALUE, "'='")
            value = self.analyze_constant_expression(ctx)
            self._require(ctx, TokenType.SEMICOLON, ErrorCode.NO_SEMICOLON, "';'")

            ctx.symbols.declare(ident.text, SymbolKind.CONSTANT, ident.start)
            ctx.program.emit(Instruction.lit(value))

    def analyze_variable_declarations(self, ctx: AnalysisContext) -> None:
        """var_decls ::= { 'var' IDENTIFIER [ '=' expr ] ';' }"""
        while ctx.accept(TokenType.VAR):
            ident = self._require(ctx, TokenType.IDENTIFIER, ErrorCode.NEED_IDENTIFIER, "identifier")
            ctx.symbols.check_undeclared(ident.text, ident.start, ctx.source_line(ident.start))

            if ctx.accept(TokenType.EQUAL_SIGN):
                # The initializer's value becomes the slot's contents
                self.analyze_expression(ctx)
                self._require(ctx, TokenType.SEMICOLON, ErrorCode.NO_SEMICOLON, "';'")
                ctx.symbols.declare(ident.text, SymbolKind.INITIALIZED, ident.start)
            else:
                self._require(ctx, TokenType.SEMICOLON, ErrorCode.NO_SEMICOLON, "';'")
                ctx.symbols.declare(ident.text, SymbolKind.UNINITIALIZED, ident.start)
                ctx.program.emit(Instruction.lit(0))

    def analyze_constant_expression(self, ctx: AnalysisContext) -> int:
        """const_expr ::= [ '+' | '-' ] UNSIGNED_INTEGER"""
        sign = ctx.accept(TokenType.PLUS_SIGN, TokenType.MINUS_SIGN)
        literal = self._require(
            ctx, TokenType.UNSIGNED_INTEGER, ErrorCode.INCOMPLETE_EXPRESSION, "integer"
        )
        value = literal.value
        if sign is not None and sign.type is TokenType.MINUS_SIGN:
            value = -value

        if not INT32_MIN <= value <= INT32_MAX:
            start = sign.start if sign is not None else literal.start
            raise IntegerOverflowError(value, start, ctx.filename, ctx.source_line(start))
        return value

    # =========================================================================
    # Statements
    # =========================================================================

    def analyze_statements(self, ctx: AnalysisContext) -> None:
        """statements ::= { assignment | print_stmt | ';' }"""
        while True:
            token = ctx.next_token()
            if token is None:
                return
            if token.type is TokenType.SEMICOLON:
                continue

            ctx.unread_token()
            if token.type is TokenType.IDENTIFIER:
                self.analyze_assignment(ctx)
            elif token.type is TokenType.PRINT:
                self.analyze_print(ctx)
            else:
                return

    def analyze_assignment(self, ctx: AnalysisContext) -> None:
        """assignment ::= IDENTIFIER '=' expr ';'"""
        ident = self._require(ctx, TokenType.IDENTIFIER, ErrorCode.NEED_IDENTIFIER, "identifier")
        symbol = ctx.symbols.lookup(ident.text)
        if symbol is None:
            raise UndeclaredIdentifierError(
                ident.text, ident.start, ctx.filename, ctx.source_line(ident.start)
            )
        if symbol.is_constant:
            raise AssignToConstantError(
                ident.text, ident.start, ctx.filename, ctx.source_line(ident.start)
            )

        self._require(ctx, TokenType.EQUAL_SIGN, ErrorCode.INVALID_ASSIGNMENT, "'='")
        self.analyze_expression(ctx)
        self._require(ctx, TokenType.SEMICOLON, ErrorCode.NO_SEMICOLON, "';'")

        ctx.program.emit(Instruction.sto(symbol.slot))
        if symbol.kind is SymbolKind.UNINITIALIZED:
            ctx.symbols.promote(ident.text)

    def analyze_print(self, ctx: AnalysisContext) -> None:
        """print_stmt ::= 'print' '(' expr ')' ';'"""
        self._require(ctx, TokenType.PRINT, ErrorCode.INVALID_PRINT, "'print'")
        self._require(ctx, TokenType.LEFT_BRACKET, ErrorCode.INVALID_PRINT, "'('")
        self.analyze_expression(ctx)
        self._require(ctx, TokenType.RIGHT_BRACKET, ErrorCode.INVALID_PRINT, "')'")
        self._require(ctx, TokenType.SEMICOLON, ErrorCode.NO_SEMICOLON, "';'")
        ctx.program.emit(WRT)

    # =========================================================================
    # Expressions
    # =========================================================================

    def analyze_expression(self, ctx: AnalysisContext) -> None:
        """expr ::= term { ( '+' | '-' ) term }"""
        self.analyze_term(ctx)
        while operator := ctx.accept(*ADDITIVE):
            self.analyze_term(ctx)
            ctx.program.emit(ADDITIVE[operator.type])

    def analyze_term(self, ctx: AnalysisContext) -> None:
        """term ::= factor { ( '*' | '/' ) factor }"""
        self.analyze_factor(ctx)
        while operator := ctx.accept(*MULTIPLICATIVE):
            self.analyze_factor(ctx)
            ctx.program.emit(MULTIPLICATIVE[operator.type])

    def analyze_factor(self, ctx: AnalysisContext) -> None:
        """factor ::= [ '+' | '-' ] ( IDENTIFIER | UNSIGNED_INTEGER | '(' expr ')' )"""
        sign = ctx.accept(TokenType.PLUS_SIGN, TokenType.MINUS_SIGN)
        token = ctx.next_token()

        if token is None:
            raise self._missing(ctx, None, "expression", ErrorCode.INCOMPLETE_EXPRESSION)

        if token.type is TokenType.IDENTIFIER:
            symbol = ctx.symbols.lookup(token.text)
            if symbol is None:
                raise UndeclaredIdentifierError(
                    token.text, token.start, ctx.filename, ctx.source_line(token.start)
                )
            if not symbol.is_readable:
                raise UninitializedReadError(
                    token.text, token.start, ctx.filename, ctx.source_line(token.start)
                )
            ctx.program.emit(Instruction.lod(symbol.slot))

        elif isinstance(token, IntegerToken):
            if token.value > INT32_MAX:
                raise IntegerOverflowError(
                    token.value, token.start, ctx.filename, ctx.source_line(token.start)
                )
            ctx.program.emit(Instruction.lit(token.value))

        elif token.type is TokenType.LEFT_BRACKET:
            self.analyze_expression(ctx)
            self._require(ctx, TokenType.RIGHT_BRACKET, ErrorCode.INVALID_INPUT, "')'")

        else:
            raise self._missing(ctx, token, "expression", ErrorCode.INCOMPLETE_EXPRESSION)

        if sign is not None and sign.type is TokenType.MINUS_SIGN:
            ctx.program.emit(SUB)

    # =========================================================================
    # Token Matching
    # =========================================================================

    def _require(
        self,
        ctx: AnalysisContext,
        token_type: TokenType,
        code: ErrorCode,
        expected: str,
    ) -> Token:
        """
        Consume a token of the given type.

        Raises:
            MissingTokenError: Carrying code, if the next token differs
        """
        token = ctx.next_token()
        if token is None or token.type is not token_type:
            raise self._missing(ctx, token, expected, code)
        return token

    def _missing(
        self,
        ctx: AnalysisContext,
        token: Optional[Token],
        expected: str,
        code: ErrorCode,
    ) -> MissingTokenError:
        position = ctx.position_of(token)
        return MissingTokenError(
            expected,
            code,
            position,
            ctx.filename,
            found=token.text if token is not None else None,
            source_line=ctx.source_line(position),
        )


# =============================================================================
# Convenience Functions
# =============================================================================

def analyze(
    tokens: Iterable[Token],
    filename: str = "<input>",
    buffer: Optional[SourceBuffer] = None,
) -> Program:
    """
    Compile a token sequence into a Program.

    Raises:
        CompilationError: At the first error found
    """
    return Analyzer().analyze(tokens, filename, buffer)
