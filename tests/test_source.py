# =============================================================================
# test_source.py - Source Buffer Tests
# =============================================================================
# Tests for offset to line/column conversion in the SourceBuffer.
# =============================================================================

import pytest
from miniplc0.source import ORIGIN, Position, SourceBuffer


class TestPosition:
    """Position ordering and display."""

    def test_display_is_one_based(self):
        assert str(Position(0, 0)) == "1:1"
        assert str(Position(2, 4)) == "3:5"

    def test_ordering_follows_source_order(self):
        assert Position(0, 9) < Position(1, 0)
        assert Position(1, 2) < Position(1, 3)
        assert ORIGIN == Position(0, 0)


class TestSourceBuffer:
    """Offset arithmetic over a loaded buffer."""

    def test_position_on_second_line(self):
        buf = SourceBuffer("begin\n  end")
        assert buf.position(8) == Position(1, 2)

    def test_position_at_line_start(self):
        buf = SourceBuffer("a\nb\nc")
        assert buf.position(0) == Position(0, 0)
        assert buf.position(2) == Position(1, 0)
        assert buf.position(4) == Position(2, 0)

    def test_newline_belongs_to_its_line(self):
        buf = SourceBuffer("ab\ncd")
        assert buf.position(2) == Position(0, 2)

    def test_trailing_newline_opens_no_line(self):
        buf = SourceBuffer("end\n")
        assert buf.end == Position(0, 4)
        assert buf.lines == ["end"]

    def test_end_of_empty_buffer(self):
        assert SourceBuffer("").end == ORIGIN

    def test_offset_out_of_range(self):
        buf = SourceBuffer("abc")
        with pytest.raises(IndexError):
            buf.position(-1)
        with pytest.raises(IndexError):
            buf.position(4)

    def test_char_at(self):
        buf = SourceBuffer("ab")
        assert buf.char_at(1) == "b"
        assert buf.char_at(2) is None

    def test_line_lookup(self):
        buf = SourceBuffer("begin\n  print(1);\nend")
        assert buf.line(1) == "  print(1);"
        assert buf.line(3) is None
        assert len(buf) == 21

    def test_from_file(self, tmp_path):
        path = tmp_path / "prog.plc0"
        path.write_text("begin end", encoding="utf-8")
        buf = SourceBuffer.from_file(path)
        assert buf.text == "begin end"
        assert buf.filename == str(path)

    def test_only_newline_ends_a_line(self):
        buf = SourceBuffer("begin\x0cvar x;\x1c\nprint(y);\rz\nend")
        assert buf.lines == ["begin\x0cvar x;\x1c", "print(y);\rz", "end"]
        assert buf.position(14) == Position(1, 0)
        assert buf.line(buf.position(14).line) == "print(y);\rz"

    def test_crlf_line_text(self):
        buf = SourceBuffer("begin\r\n  end\r\n")
        assert buf.lines == ["begin", "  end"]
        assert buf.position(9) == Position(1, 2)

    def test_lines_of_empty_buffer(self):
        assert SourceBuffer("").lines == []
        assert SourceBuffer("").line(0) is None
