# =============================================================================
# test_cli.py - plc0c Command-Line Tests
# =============================================================================

import pytest
from click.testing import CliRunner

from miniplc0 import __version__
from miniplc0.cli.errors import ExitCode
from miniplc0.cli.plc0c import main

EXAMPLE = "begin const a=1; var b; b=a+1; print(b); end"
EXAMPLE_LISTING = "LIT 1\nLIT 0\nLOD 0\nLIT 1\nADD\nSTO 1\nLOD 1\nWRT\n"


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def source_file(tmp_path):
    path = tmp_path / "prog.plc0"
    path.write_text(EXAMPLE, encoding="utf-8")
    return path


class TestPlc0cBasics:

    def test_help(self, runner):
        result = runner.invoke(main, ["--help"])
        assert result.exit_code == 0
        assert "--tokenize" in result.output
        assert "--analyze" in result.output

    def test_version(self, runner):
        result = runner.invoke(main, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_no_mode_prints_help(self, runner, source_file):
        result = runner.invoke(main, ["-i", str(source_file)])
        assert result.exit_code == 0
        assert "Usage" in result.output

    def test_missing_input_file(self, runner, tmp_path):
        result = runner.invoke(main, ["-l", "-i", str(tmp_path / "nope.plc0")])
        assert result.exit_code == ExitCode.INVALID_ARGS


class TestPlc0cModes:

    def test_tokenize_to_file(self, runner, tmp_path):
        source = tmp_path / "prog.plc0"
        source.write_text("begin\n  print(12);\nend\n", encoding="utf-8")
        output = tmp_path / "prog.tokens"

        result = runner.invoke(main, ["-t", "-i", str(source), "-o", str(output)])
        assert result.exit_code == 0
        assert output.read_text(encoding="utf-8") == "begin\nprint\n(\n12\n)\n;\nend\n"

    def test_analyze_to_file(self, runner, source_file, tmp_path):
        output = tmp_path / "prog.out"
        result = runner.invoke(main, ["-l", "-i", str(source_file), "-o", str(output)])
        assert result.exit_code == 0
        assert output.read_text(encoding="utf-8") == EXAMPLE_LISTING

    def test_default_output_file(self, runner, source_file):
        with runner.isolated_filesystem():
            result = runner.invoke(main, ["--analyze", "--input", str(source_file)])
            assert result.exit_code == 0
            with open("a.out", encoding="utf-8") as f:
                assert f.read() == EXAMPLE_LISTING

    def test_stdin_to_stdout(self, runner):
        result = runner.invoke(main, ["-l", "-o", "-"], input="begin print(1); end")
        assert result.exit_code == 0
        assert result.output == "LIT 1\nWRT\n"

    def test_last_mode_wins(self, runner):
        result = runner.invoke(main, ["-l", "-t", "-o", "-"], input="begin end")
        assert result.exit_code == 0
        assert result.output == "begin\nend\n"

    def test_run(self, runner):
        result = runner.invoke(main, ["-r", "-o", "-"], input="begin print(6 * 7); end")
        assert result.exit_code == 0
        assert result.output == "LIT 6\nLIT 7\nMUL\nWRT\n42\n"


class TestPlc0cErrors:

    def test_compile_error_writes_nothing(self, runner, tmp_path):
        source = tmp_path / "bad.plc0"
        source.write_text("begin\n  print(y);\nend\n", encoding="utf-8")
        output = tmp_path / "bad.out"

        result = runner.invoke(main, ["-l", "-i", str(source), "-o", str(output)])
        assert result.exit_code == ExitCode.BUILD_ERROR
        assert "2:9: error: undeclared identifier 'y'" in result.output
        assert not output.exists()

    def test_lexical_error_in_tokenize_mode(self, runner, tmp_path):
        output = tmp_path / "bad.tokens"
        result = runner.invoke(main, ["-t", "-o", str(output)], input="begin @ end")
        assert result.exit_code == ExitCode.BUILD_ERROR
        assert "invalid character '@'" in result.output
        assert not output.exists()

    def test_runtime_error(self, runner):
        result = runner.invoke(main, ["-r", "-o", "-"], input="begin print(-1); end")
        assert result.exit_code == ExitCode.BUILD_ERROR
        assert "Runtime error" in result.output

    def test_verbose_reports_statistics(self, runner, source_file, tmp_path):
        output = tmp_path / "prog.out"
        result = runner.invoke(main, ["-v", "-l", "-i", str(source_file), "-o", str(output)])
        assert result.exit_code == 0
        assert "2 slots, 8 instructions" in result.output
