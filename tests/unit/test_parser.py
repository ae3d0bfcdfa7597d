"""Tests for main parser functionality."""

import io
from pathlib import Path

import pytest

from streamcsv.core.parser import (
    Dialect,
    ParserError,
    ReaderIOError,
    parse_bytes,
    parse_file,
    parse_stream,
)


class TestParseFile:
    """Tests for parse_file function."""

    def test_parse_simple_file(self, simple_lf: Path) -> None:
        """Test parsing a small LF-terminated file."""
        result = parse_file(simple_lf)

        assert result.source == str(simple_lf)
        assert result.encoding == "utf-8"
        assert [r.fields for r in result.records] == [
            ["name", "age"],
            ["alice", "30"],
            ["bob", "25"],
        ]

    def test_records_can_be_iterated_twice(self, quoted_crlf: Path) -> None:
        """Every access to .records starts from the beginning."""
        result = parse_file(quoted_crlf)

        first = list(result.records)
        second = list(result.records)

        assert first == second
        assert len(first) == 3

    def test_line_numbers(self, quoted_crlf: Path) -> None:
        result = parse_file(quoted_crlf)
        assert [r.line_no for r in result.records] == [1, 3, 4]

    def test_file_not_found(self) -> None:
        """Test that a missing file raises ReaderIOError."""
        with pytest.raises(ReaderIOError) as exc_info:
            parse_file("nonexistent_file.csv")
        assert exc_info.value.code == "CSV-IO-001"

    def test_directory_is_not_a_file(self, tmp_path: Path) -> None:
        with pytest.raises(ReaderIOError):
            parse_file(tmp_path)

    def test_semicolon_dialect(self, windows1252: Path) -> None:
        """Test a semicolon-separated Windows-1252 file."""
        result = parse_file(windows1252, dialect=Dialect(delimiter=";"), encoding="windows-1252")

        assert result.dialect.delimiter == ";"
        assert [r.fields for r in result.records] == [
            ["Name", "Straße"],
            ["Müller", "Hauptstraße 1"],
        ]

    def test_materialize_collects_warnings(self, unterminated_quote: Path) -> None:
        """Warnings are available once the records were read."""
        result = parse_file(unterminated_quote)

        records, warnings = result.materialize()

        assert len(records) == 2
        assert result.has_warnings
        assert len(warnings) == 1
        assert isinstance(warnings[0], ParserError)
        assert warnings[0].code == "CSV-QUOTE-001"

    def test_warnings_not_duplicated(self, unterminated_quote: Path) -> None:
        result = parse_file(unterminated_quote)
        list(result.records)
        list(result.records)
        assert len(result.warnings) == 1

    def test_empty_file(self, empty_file: Path) -> None:
        result = parse_file(empty_file)
        assert list(result.records) == []
        assert not result.has_warnings


class TestParseBytes:
    """Tests for parse_bytes function."""

    def test_minimal_data(self) -> None:
        """Test parsing minimal CSV data."""
        result = parse_bytes(b'"Umsatz";"Konto"\n"100,00";"1200"\n', dialect=Dialect(delimiter=";"))

        assert result.source == "<bytes>"
        assert [r.fields for r in result.records] == [["Umsatz", "Konto"], ["100,00", "1200"]]

    def test_source_name(self) -> None:
        result = parse_bytes(b"a\n", "<test>")
        assert result.source == "<test>"

    def test_utf8_bom(self) -> None:
        """The BOM is not part of the first field."""
        result = parse_bytes(b"\xef\xbb\xbfid,name\n1,x\n")

        assert result.encoding == "utf-8-sig"
        first = next(iter(result.records))
        assert first.fields == ["id", "name"]

    def test_replace_policy(self) -> None:
        result = parse_bytes(b"ok\nbad\xff\n", encoding="utf-8", errors="replace")
        assert [r.fields for r in result.records] == [["ok"], ["bad�"]]

    def test_leading_zeros_preserved(self) -> None:
        """Field values are never converted."""
        result = parse_bytes(b"0001,007.50\n")
        assert next(iter(result.records)).fields == ["0001", "007.50"]


class TestParseStream:
    """Tests for parse_stream function."""

    def test_stream(self) -> None:
        stream = io.BytesIO(b"a|b\r\nc|d\r\n")
        result = parse_stream(stream, "upload.csv", dialect=Dialect(delimiter="|"))

        assert result.source == "upload.csv"
        assert [r.fields for r in result.records] == [["a", "b"], ["c", "d"]]
        # seekable streams are rewound for a second pass
        assert [r.fields for r in result.records] == [["a", "b"], ["c", "d"]]

    def test_small_buffer(self) -> None:
        stream = io.BytesIO('"multi\r\nline",ü\r\n'.encode())
        result = parse_stream(stream, encoding="utf-8", buffer_size=1)
        assert [r.fields for r in result.records] == [["multi\nline", "ü"]]
