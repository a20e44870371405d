# =============================================================================
# test_compiler.py - Compiler Driver Tests
# =============================================================================
# Tests for the pipeline driver, its configuration, file handling and
# diagnostic formatting.
# =============================================================================

import pytest
from miniplc0.compiler import (
    CompilerOptions,
    Plc0Compiler,
    compile_file,
    compile_source,
    tokenize_file,
)
from miniplc0.errors import (
    InvalidCharacterError,
    Plc0Error,
    UndeclaredIdentifierError,
)
from miniplc0.lexer import TokenType
from miniplc0.source import Position

EXAMPLE = "begin const a=1; var b; b=a+1; print(b); end"
EXAMPLE_LISTING = "LIT 1\nLIT 0\nLOD 0\nLIT 1\nADD\nSTO 1\nLOD 1\nWRT\n"


# =============================================================================
# Configuration
# =============================================================================

class TestCompilerOptions:

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("MINIPLC0_ENCODING", raising=False)
        monkeypatch.delenv("MINIPLC0_LAZY_TOKENS", raising=False)
        options = CompilerOptions.from_env()
        assert options.encoding == "utf-8"
        assert options.lazy_tokens is False
        assert options.filename == "<input>"

    def test_environment(self, monkeypatch):
        monkeypatch.setenv("MINIPLC0_ENCODING", "latin-1")
        monkeypatch.setenv("MINIPLC0_LAZY_TOKENS", " Yes ")
        options = CompilerOptions.from_env()
        assert options.encoding == "latin-1"
        assert options.lazy_tokens is True

    def test_false_value(self, monkeypatch):
        monkeypatch.setenv("MINIPLC0_LAZY_TOKENS", "0")
        assert CompilerOptions.from_env().lazy_tokens is False

    def test_overrides_win(self, monkeypatch):
        monkeypatch.setenv("MINIPLC0_LAZY_TOKENS", "1")
        options = CompilerOptions.from_env(lazy_tokens=False, filename="x.plc0")
        assert options.lazy_tokens is False
        assert options.filename == "x.plc0"


# =============================================================================
# Compilation
# =============================================================================

class TestPlc0Compiler:

    def test_compile_source(self):
        assert compile_source(EXAMPLE).listing() == EXAMPLE_LISTING

    def test_result_statistics(self):
        result = Plc0Compiler().compile_source("begin const a = 1; var b; end")
        assert result.token_count == 10
        assert result.symbol_count == 2
        assert len(result.program) == 2

    @pytest.mark.parametrize("lazy", [False, True])
    def test_lazy_and_eager_agree(self, lazy):
        compiler = Plc0Compiler(CompilerOptions(lazy_tokens=lazy))
        assert compiler.compile_source(EXAMPLE).program.listing() == EXAMPLE_LISTING

    def test_lazy_reports_first_error_in_source_order(self):
        source = "begin print(y); # end"
        with pytest.raises(UndeclaredIdentifierError):
            Plc0Compiler(CompilerOptions(lazy_tokens=True)).compile_source(source)
        with pytest.raises(InvalidCharacterError):
            Plc0Compiler(CompilerOptions(lazy_tokens=False)).compile_source(source)

    def test_all_errors_share_base_class(self):
        with pytest.raises(Plc0Error):
            compile_source("begin print(1) end")


# =============================================================================
# Diagnostics
# =============================================================================

class TestDiagnostics:

    def test_message_shows_location_and_caret(self):
        source = "begin\n  print(y);\nend\n"
        with pytest.raises(UndeclaredIdentifierError) as exc_info:
            compile_source(source, "prog.plc0")
        error = exc_info.value
        assert error.position == Position(1, 8)

        lines = str(error).splitlines()
        assert lines[0] == "prog.plc0:2:9: error: undeclared identifier 'y'"
        assert lines[1] == "      print(y);"
        assert lines[2] == " " * 12 + "^"
        assert lines[3].startswith("hint: declare 'y'")

    def test_source_line_ignores_other_line_breaks(self):
        with pytest.raises(UndeclaredIdentifierError) as exc_info:
            compile_source("begin\x0cvar x;\nprint(y);\nend")
        error = exc_info.value
        assert error.position == Position(1, 6)
        assert error.source_line == "print(y);"

    def test_message_without_source_line(self):
        error = UndeclaredIdentifierError("q", Position(0, 0))
        assert str(error).splitlines()[0] == "<input>:1:1: error: undeclared identifier 'q'"


# =============================================================================
# Files
# =============================================================================

class TestFiles:

    def test_compile_file_writes_listing(self, tmp_path):
        source = tmp_path / "prog.plc0"
        source.write_text(EXAMPLE, encoding="utf-8")
        output = tmp_path / "prog.out"

        program = compile_file(source, output)
        assert len(program) == 8
        assert output.read_text(encoding="utf-8") == EXAMPLE_LISTING

    def test_failed_compile_writes_nothing(self, tmp_path):
        source = tmp_path / "bad.plc0"
        source.write_text("begin print(x); end", encoding="utf-8")
        output = tmp_path / "bad.out"

        with pytest.raises(UndeclaredIdentifierError) as exc_info:
            compile_file(source, output)
        assert exc_info.value.filename == str(source)
        assert not output.exists()

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            compile_file(tmp_path / "missing.plc0")

    def test_tokenize_file(self, tmp_path):
        source = tmp_path / "prog.plc0"
        source.write_text("begin\nend\n", encoding="utf-8")
        tokens = tokenize_file(source)
        assert [t.type for t in tokens] == [TokenType.BEGIN, TokenType.END]
