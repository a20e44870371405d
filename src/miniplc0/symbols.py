"""
Symbol Table
============

Tracks every name declared in a source unit together with its storage
slot and declaration kind.

A miniplc0 program has a single scope. Each declaration takes the next
slot index, counting from zero across constants and variables alike, and
that index never changes afterwards: it is the operand of every LOD and
STO that refers to the name.

Kinds
-----
CONSTANT       declared with 'const'; readable, never assignable
INITIALIZED    a variable that holds a value; readable and assignable
UNINITIALIZED  a variable declared without a value; assignable only

The only transition is UNINITIALIZED -> INITIALIZED, made by `promote()`
at the variable's first assignment.
"""

import logging
from dataclasses import dataclass, replace
from enum import Enum, auto
from typing import Iterator, Optional

from miniplc0.errors import DuplicateDeclarationError, InternalCompilerError
from miniplc0.source import Position

logger = logging.getLogger(__name__)


class SymbolKind(Enum):
    """Declaration status of a name."""
    CONSTANT = auto()
    INITIALIZED = auto()
    UNINITIALIZED = auto()


@dataclass(frozen=True)
class Symbol:
    """
    A declared name.

    Attributes:
        name: The identifier
        slot: Storage slot index, unique within the program
        kind: Current declaration status
        declared_at: Position of the identifier in its declaration
    """
    name: str
    slot: int
    kind: SymbolKind
    declared_at: Position

    @property
    def is_constant(self) -> bool:
        return self.kind is SymbolKind.CONSTANT

    @property
    def is_readable(self) -> bool:
        """Constants and initialized variables may appear in expressions."""
        return self.kind is not SymbolKind.UNINITIALIZED


class SymbolTable:
    """
    Name -> Symbol mapping with monotonic slot allocation.

    Example:
        table = SymbolTable()
        table.declare("a", SymbolKind.CONSTANT, Position(0, 12))
        table.declare("b", SymbolKind.UNINITIALIZED, Position(0, 24))
        table.promote("b")
        assert table.slot_of("b") == 1
    """

    def __init__(self, filename: str = "<input>"):
        self.filename = filename
        self._symbols: dict[str, Symbol] = {}
        self._next_slot = 0

    def declare(
        self,
        name: str,
        kind: SymbolKind,
        position: Position,
        source_line: Optional[str] = None,
    ) -> Symbol:
        """
        Declare a name in the next free slot.

        Raises:
            DuplicateDeclarationError: If the name is already declared
        """
        self.check_undeclared(name, position, source_line)
        symbol = Symbol(name, self._next_slot, kind, position)
        self._symbols[name] = symbol
        self._next_slot += 1
        logger.debug(f"declared {kind.name.lower()} '{name}' in slot {symbol.slot}")
        return symbol

    def check_undeclared(
        self,
        name: str,
        position: Position,
        source_line: Optional[str] = None,
    ) -> None:
        """
        Raises:
            DuplicateDeclarationError: If the name is already declared
        """
        existing = self._symbols.get(name)
        if existing is not None:
            raise DuplicateDeclarationError(
                name,
                position,
                existing.declared_at,
                self.filename,
                source_line,
            )

    def promote(self, name: str) -> Symbol:
        """
        Mark an uninitialized variable as initialized, keeping its slot.

        Raises:
            InternalCompilerError: If name is not an uninitialized variable
        """
        symbol = self._symbols.get(name)
        if symbol is None or symbol.kind is not SymbolKind.UNINITIALIZED:
            raise InternalCompilerError(f"cannot promote '{name}': not an uninitialized variable")
        promoted = replace(symbol, kind=SymbolKind.INITIALIZED)
        self._symbols[name] = promoted
        logger.debug(f"variable '{name}' initialized (slot {promoted.slot})")
        return promoted

    # =========================================================================
    # Queries
    # =========================================================================

    def lookup(self, name: str) -> Optional[Symbol]:
        return self._symbols.get(name)

    def is_declared(self, name: str) -> bool:
        return name in self._symbols

    def is_constant(self, name: str) -> bool:
        return self._kind_of(name) is SymbolKind.CONSTANT

    def is_initialized(self, name: str) -> bool:
        return self._kind_of(name) is SymbolKind.INITIALIZED

    def is_uninitialized(self, name: str) -> bool:
        return self._kind_of(name) is SymbolKind.UNINITIALIZED

    def slot_of(self, name: str) -> int:
        """
        Raises:
            KeyError: If the name is not declared
        """
        return self._symbols[name].slot

    def _kind_of(self, name: str) -> Optional[SymbolKind]:
        symbol = self._symbols.get(name)
        return symbol.kind if symbol else None

    def __contains__(self, name: str) -> bool:
        return name in self._symbols

    def __len__(self) -> int:
        return len(self._symbols)

    def __iter__(self) -> Iterator[Symbol]:
        """Symbols in slot order."""
        return iter(sorted(self._symbols.values(), key=lambda s: s.slot))
