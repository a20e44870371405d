"""
miniplc0 Compiler Main Module
=============================

This module provides the main compiler interface. It runs the two stages
of the front end over one source unit:

    Source → SourceBuffer → Tokenizer → Analyzer → Program

Usage
-----
Command line:
    $ plc0c -l -i prog.plc0 -o prog.out

Programmatic:
    >>> from miniplc0.compiler import compile_source
    >>> program = compile_source("begin print(1 + 2); end")
    >>> print(program.listing(), end="")
    LIT 1
    LIT 2
    ADD
    WRT

Error Handling
--------------
Compilation stops at the first error, which propagates unchanged to the
caller as a CompilationError subclass. No partial program is returned.

Configuration
-------------
CompilerOptions can be built directly or from the environment:

    MINIPLC0_ENCODING      source file encoding (default utf-8)
    MINIPLC0_LAZY_TOKENS   "1"/"true"/"yes" to pull tokens on demand
                           instead of tokenizing the whole file first
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from miniplc0.analyzer import AnalysisContext, Analyzer
from miniplc0.instructions import Program
from miniplc0.lexer import Token, Tokenizer
from miniplc0.source import SourceBuffer

logger = logging.getLogger(__name__)

TRUE_VALUES = ("1", "true", "yes", "on")


@dataclass
class CompilerOptions:
    """
    Compiler configuration options.

    Attributes:
        filename: Name reported in diagnostics for in-memory sources
        encoding: Encoding used to read source files
        lazy_tokens: Let the analyzer pull tokens from the tokenizer one
                     at a time rather than tokenizing everything first.
                     Output and diagnostics are identical either way.
    """
    filename: str = "<input>"
    encoding: str = "utf-8"
    lazy_tokens: bool = False

    @classmethod
    def from_env(cls, **overrides) -> "CompilerOptions":
        """
        Create options from MINIPLC0_* environment variables.

        Keyword arguments take precedence over the environment.
        """
        options = cls()
        if encoding := os.environ.get("MINIPLC0_ENCODING"):
            options.encoding = encoding
        if lazy := os.environ.get("MINIPLC0_LAZY_TOKENS"):
            options.lazy_tokens = lazy.strip().lower() in TRUE_VALUES
        for name, value in overrides.items():
            setattr(options, name, value)
        return options


@dataclass
class CompilerResult:
    """
    Result of a successful compilation.

    Attributes:
        filename: Source filename
        program: The emitted instructions
        token_count: Number of tokens the analyzer consumed
        symbol_count: Number of declared names (one slot each)
    """
    filename: str
    program: Program = field(default_factory=Program)
    token_count: int = 0
    symbol_count: int = 0


class Plc0Compiler:
    """
    Front end for miniplc0 source units.

    Example:
        compiler = Plc0Compiler()
        result = compiler.compile_file("prog.plc0")
        print(result.program.listing())

    Attributes:
        options: Compiler configuration options
    """

    def __init__(self, options: Optional[CompilerOptions] = None):
        self.options = options or CompilerOptions()
        self._analyzer = Analyzer()

    def load(self, source: str, filename: Optional[str] = None) -> SourceBuffer:
        return SourceBuffer(source, filename or self.options.filename)

    def load_file(self, filepath: str | Path) -> SourceBuffer:
        """
        Raises:
            FileNotFoundError: If the source file does not exist
        """
        path = Path(filepath)
        if not path.exists():
            raise FileNotFoundError(f"Source file not found: {filepath}")
        return SourceBuffer.from_file(path, self.options.encoding)

    def tokenize(self, buffer: SourceBuffer) -> list[Token]:
        """
        Tokenize a whole buffer.

        Raises:
            LexicalError: At the first invalid character
        """
        return Tokenizer(buffer).tokenize()

    def compile(self, buffer: SourceBuffer) -> CompilerResult:
        """
        Compile a loaded buffer.

        Raises:
            CompilationError: At the first error found
        """
        logger.debug(f"compiling {buffer.filename} ({len(buffer)} characters)")

        if self.options.lazy_tokens:
            tokens = iter(Tokenizer(buffer))
        else:
            tokens = self.tokenize(buffer)

        ctx = AnalysisContext(tokens, buffer=buffer)
        self._analyzer.analyze_program(ctx)

        logger.debug(f"{buffer.filename}: emitted {len(ctx.program)} instructions")
        return CompilerResult(
            filename=buffer.filename,
            program=ctx.program,
            token_count=ctx.tokens_consumed,
            symbol_count=len(ctx.symbols),
        )

    def compile_source(self, source: str, filename: Optional[str] = None) -> CompilerResult:
        """Compile source text."""
        return self.compile(self.load(source, filename))

    def compile_file(self, filepath: str | Path) -> CompilerResult:
        """Compile a source file."""
        return self.compile(self.load_file(filepath))


# =============================================================================
# Convenience Functions
# =============================================================================

def compile_source(source: str, filename: str = "<input>") -> Program:
    """
    Compile miniplc0 source text to a Program.

    Raises:
        CompilationError: At the first error found
    """
    return Plc0Compiler(CompilerOptions(filename=filename)).compile_source(source).program


def compile_file(filepath: str | Path, output_path: Optional[str | Path] = None) -> Program:
    """
    Compile a source file, optionally writing its listing.

    The listing is only written when compilation succeeds.

    Raises:
        CompilationError: At the first error found
        FileNotFoundError: If the source file does not exist
    """
    program = Plc0Compiler(CompilerOptions.from_env()).compile_file(filepath).program
    if output_path:
        Path(output_path).write_text(program.listing(), encoding="utf-8")
    return program


def tokenize_file(filepath: str | Path, encoding: str = "utf-8") -> list[Token]:
    """
    Tokenize a source file.

    Raises:
        LexicalError: At the first invalid character
        FileNotFoundError: If the source file does not exist
    """
    compiler = Plc0Compiler(CompilerOptions(encoding=encoding))
    return compiler.tokenize(compiler.load_file(filepath))
