"""
miniplc0 Lexer (Tokenizer)
==========================

This module implements the tokenizer for the miniplc0 teaching language.
It converts source text into a sequence of tokens for the analyzer.

Token Categories
----------------
- Keywords: begin, end, const, var, print
- Identifiers: a letter followed by letters and digits
- Unsigned integers: decimal digits, value at most 4294967295
- Symbols: = - + * / ( ) ;

There are no comments, no string literals and no multi-character
operators, so every token is recognised with at most one character of
lookahead past its last character.

Scanning Model
--------------
The scanner is a deterministic finite-state machine run over a
`SourceBuffer`. A single cursor index moves forward through the buffer;
`_unread()` steps it back by one character, which is the only
backtracking the machine ever needs.

    INITIAL --whitespace--> INITIAL
    INITIAL --digit-------> UNSIGNED_INTEGER --non-digit--> (token)
    INITIAL --letter------> IDENTIFIER --non-alnum--> (token)
    INITIAL --symbol------> <symbol state> --> (token)

A token starts at the character that moved the machine out of INITIAL
and ends (exclusive) at the cursor after its last character. End of
input inside an accumulating state simply finishes the token.

Example Usage
-------------
>>> from miniplc0.lexer import Tokenizer
>>> for token in Tokenizer("begin print(1); end"):
...     print(repr(token))
Token(BEGIN, 'begin', 1:1-1:6)
Token(PRINT, 'print', 1:7-1:12)
Token(LEFT_BRACKET, '(', 1:12-1:13)
Token(UNSIGNED_INTEGER, 1, 1:13-1:14)
Token(RIGHT_BRACKET, ')', 1:14-1:15)
Token(SEMICOLON, ';', 1:15-1:16)
Token(END, 'end', 1:17-1:20)
"""

import logging
import string
from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator, Optional, Union

from miniplc0.errors import IntegerLiteralError, InvalidCharacterError
from miniplc0.source import Position, SourceBuffer

logger = logging.getLogger(__name__)

# Largest value an unsigned literal may carry
MAX_UNSIGNED_LITERAL = 2**32 - 1

# Unicode White_Space. str.isspace() also accepts the separators \x1c-\x1f,
# which are control characters here.
WHITESPACE = frozenset(
    "\t\n\x0b\x0c\r \x85\xa0\u1680"
    "\u2000\u2001\u2002\u2003\u2004\u2005\u2006\u2007\u2008\u2009\u200a"
    "\u2028\u2029\u202f\u205f\u3000"
)


# =============================================================================
# Token Type Enumeration
# =============================================================================

class TokenType(Enum):
    """Kinds of lexical element in miniplc0 source."""

    # === Identifiers and Literals ===
    IDENTIFIER = auto()
    UNSIGNED_INTEGER = auto()

    # === Keywords ===
    BEGIN = auto()
    END = auto()
    CONST = auto()
    VAR = auto()
    PRINT = auto()

    # === Symbols ===
    PLUS_SIGN = auto()          # +
    MINUS_SIGN = auto()         # -
    MULTIPLICATION_SIGN = auto()  # *
    DIVISION_SIGN = auto()      # /
    EQUAL_SIGN = auto()         # =
    SEMICOLON = auto()          # ;
    LEFT_BRACKET = auto()       # (
    RIGHT_BRACKET = auto()      # )

    def symbol_text(self) -> str:
        """
        Return the canonical one-character text of a symbol kind.

        Raises:
            ValueError: If this kind is not a single-character symbol
        """
        try:
            return SYMBOL_TEXT[self]
        except KeyError:
            raise ValueError(f"{self.name} has no canonical symbol text") from None

    @classmethod
    def from_symbol(cls, char: str) -> "TokenType":
        """Return the symbol kind spelled by char."""
        try:
            return SYMBOLS[char]
        except KeyError:
            raise ValueError(f"{char!r} is not a symbol") from None

    @property
    def is_keyword(self) -> bool:
        return self in KEYWORDS.values()

    @property
    def is_symbol(self) -> bool:
        return self in SYMBOL_TEXT


# Map keyword spellings to their token types
KEYWORDS: dict[str, TokenType] = {
    "begin": TokenType.BEGIN,
    "end": TokenType.END,
    "const": TokenType.CONST,
    "var": TokenType.VAR,
    "print": TokenType.PRINT,
}

# Map single-character symbols to their token types
SYMBOLS: dict[str, TokenType] = {
    "+": TokenType.PLUS_SIGN,
    "-": TokenType.MINUS_SIGN,
    "*": TokenType.MULTIPLICATION_SIGN,
    "/": TokenType.DIVISION_SIGN,
    "=": TokenType.EQUAL_SIGN,
    ";": TokenType.SEMICOLON,
    "(": TokenType.LEFT_BRACKET,
    ")": TokenType.RIGHT_BRACKET,
}

SYMBOL_TEXT: dict[TokenType, str] = {kind: text for text, kind in SYMBOLS.items()}


# =============================================================================
# Token Data Classes
# =============================================================================

@dataclass(frozen=True)
class IntegerToken:
    """
    An unsigned integer literal.

    Attributes:
        value: The literal's numeric value
        start: Position of its first digit
        end: Position just past its last digit
    """
    value: int
    start: Position
    end: Position

    @property
    def type(self) -> TokenType:
        return TokenType.UNSIGNED_INTEGER

    @property
    def text(self) -> str:
        return str(self.value)

    @property
    def span(self) -> tuple[Position, Position]:
        return self.start, self.end

    def __str__(self) -> str:
        return self.text

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.value}, {self.start}-{self.end})"


@dataclass(frozen=True)
class SymbolToken:
    """
    An identifier, keyword or symbol, carrying its exact source spelling.

    Attributes:
        type: The TokenType classification
        text: The token text as written
        start: Position of its first character
        end: Position just past its last character
    """
    type: TokenType
    text: str
    start: Position
    end: Position

    @property
    def span(self) -> tuple[Position, Position]:
        return self.start, self.end

    def __str__(self) -> str:
        return self.text

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.text!r}, {self.start}-{self.end})"


Token = Union[IntegerToken, SymbolToken]


# =============================================================================
# Scanner States
# =============================================================================

class LexState(Enum):
    """States of the scanning automaton."""
    INITIAL = auto()
    UNSIGNED_INTEGER = auto()
    IDENTIFIER = auto()
    PLUS_SIGN = auto()
    MINUS_SIGN = auto()
    MULTIPLICATION_SIGN = auto()
    DIVISION_SIGN = auto()
    EQUAL_SIGN = auto()
    SEMICOLON = auto()
    LEFT_BRACKET = auto()
    RIGHT_BRACKET = auto()


# Transition from INITIAL on each symbol character
SYMBOL_STATES: dict[str, LexState] = {
    "+": LexState.PLUS_SIGN,
    "-": LexState.MINUS_SIGN,
    "*": LexState.MULTIPLICATION_SIGN,
    "/": LexState.DIVISION_SIGN,
    "=": LexState.EQUAL_SIGN,
    ";": LexState.SEMICOLON,
    "(": LexState.LEFT_BRACKET,
    ")": LexState.RIGHT_BRACKET,
}

# Token produced by each terminal symbol state
TERMINAL_STATES: dict[LexState, TokenType] = {
    state: SYMBOLS[char] for char, state in SYMBOL_STATES.items()
}


# =============================================================================
# Tokenizer Implementation
# =============================================================================

class Tokenizer:
    """
    Tokenizes miniplc0 source code.

    Usage:
        tokenizer = Tokenizer(source_text, "prog.plc0")
        tokens = tokenizer.tokenize()

    Tokens can also be pulled one at a time with next_token(), or lazily
    by iterating over the tokenizer.

    Attributes:
        buffer: The SourceBuffer being scanned
        filename: Name of the source (for error reporting)
    """

    DIGITS = string.digits
    LETTERS = string.ascii_letters
    ALNUM = string.ascii_letters + string.digits

    def __init__(self, source: SourceBuffer | str, filename: str = "<input>"):
        if isinstance(source, SourceBuffer):
            self.buffer = source
        else:
            self.buffer = SourceBuffer(source, filename)
        self.filename = self.buffer.filename

        # Offset of the next unread character
        self._cursor = 0

    # =========================================================================
    # Public Interface
    # =========================================================================

    def next_token(self) -> Optional[Token]:
        """
        Scan the next token.

        Returns:
            The next token, or None once the input is exhausted

        Raises:
            LexicalError: At the first character that cannot be scanned
        """
        state = LexState.INITIAL
        chars: list[str] = []
        start = 0

        while True:
            if state is LexState.INITIAL:
                char = self._next_char()
                if char is None:
                    return None
                if char in WHITESPACE:
                    continue

                start = self._cursor - 1
                if char in self.DIGITS:
                    state = LexState.UNSIGNED_INTEGER
                elif char in self.LETTERS:
                    state = LexState.IDENTIFIER
                elif char in SYMBOL_STATES:
                    state = SYMBOL_STATES[char]
                else:
                    # Non-graphic, or graphic but outside the alphabet
                    self._unread()
                    raise self._invalid_character(char, start)
                chars.append(char)

            elif state is LexState.UNSIGNED_INTEGER:
                char = self._next_char()
                if char is not None and char in self.DIGITS:
                    chars.append(char)
                    continue
                if char is not None:
                    self._unread()
                return self._make_integer("".join(chars), start)

            elif state is LexState.IDENTIFIER:
                char = self._next_char()
                if char is not None and char in self.ALNUM:
                    chars.append(char)
                    continue
                if char is not None:
                    self._unread()
                return self._make_word("".join(chars), start)

            else:
                return self._make_symbol(TERMINAL_STATES[state], start)

    def tokenize(self) -> list[Token]:
        """
        Scan the remaining input into a list.

        Raises:
            LexicalError: At the first character that cannot be scanned
        """
        tokens = list(self)
        logger.debug(f"{self.filename}: scanned {len(tokens)} tokens")
        return tokens

    def __iter__(self) -> Iterator[Token]:
        while (token := self.next_token()) is not None:
            yield token

    @property
    def position(self) -> Position:
        """Position of the cursor."""
        return self.buffer.position(self._cursor)

    # =========================================================================
    # Cursor Movement
    # =========================================================================

    def _next_char(self) -> Optional[str]:
        """Consume and return the next character, or None at end."""
        char = self.buffer.char_at(self._cursor)
        if char is not None:
            self._cursor += 1
        return char

    def _unread(self) -> None:
        """Step back over the last consumed character."""
        if self._cursor == 0:
            raise IndexError("unread before start of input")
        self._cursor -= 1

    # =========================================================================
    # Token Creation
    # =========================================================================

    def _make_integer(self, digits: str, start: int) -> IntegerToken:
        value = int(digits)
        if value > MAX_UNSIGNED_LITERAL:
            position = self.buffer.position(start)
            raise IntegerLiteralError(
                digits,
                position,
                self.filename,
                self.buffer.line(position.line),
            )
        return IntegerToken(value, self.buffer.position(start), self.position)

    def _make_word(self, word: str, start: int) -> SymbolToken:
        """Classify an accumulated word as keyword or identifier."""
        token_type = KEYWORDS.get(word, TokenType.IDENTIFIER)
        return SymbolToken(token_type, word, self.buffer.position(start), self.position)

    def _make_symbol(self, token_type: TokenType, start: int) -> SymbolToken:
        return SymbolToken(
            token_type,
            token_type.symbol_text(),
            self.buffer.position(start),
            self.position,
        )

    def _invalid_character(self, char: str, offset: int) -> InvalidCharacterError:
        position = self.buffer.position(offset)
        return InvalidCharacterError(
            char,
            position,
            self.filename,
            self.buffer.line(position.line),
        )


# =============================================================================
# Convenience Functions
# =============================================================================

def tokenize(source: str, filename: str = "<input>") -> list[Token]:
    """
    Tokenize miniplc0 source text.

    Raises:
        LexicalError: At the first character that cannot be scanned
    """
    return Tokenizer(source, filename).tokenize()
