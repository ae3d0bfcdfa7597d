"""Tests for parser error models and exceptions."""

import pytest

from streamcsv.core.parser.errors import (
    PARSER_ERROR_CODES,
    Location,
    ParserError,
    ProtocolViolation,
    ReaderDecodeError,
    ReaderIOError,
    Severity,
    get_error_description,
)


class TestToParserError:
    """Tests for converting exceptions into ParserError values."""

    def test_decode_error_is_fatal(self) -> None:
        error = ReaderDecodeError(
            "Line 2 is not valid utf-8", encoding="utf-8", source="a.csv", line_no=2
        ).to_parser_error()

        assert error.code == "CSV-ENC-001"
        assert error.severity is Severity.FATAL
        assert error.title == "Invalid byte sequence for configured encoding"
        assert error.location == Location(file="a.csv", line_no=2)
        assert error.context == {"encoding": "utf-8"}

    def test_protocol_violation_is_error(self) -> None:
        error = ProtocolViolation("Tokenizer fault", line_no=7).to_parser_error()

        assert error.code == "CSV-STATE-001"
        assert error.severity is Severity.ERROR
        assert error.title == get_error_description("CSV-STATE-001")

    @pytest.mark.parametrize("code", ["CSV-IO-001", "CSV-IO-002", "CSV-IO-003"])
    def test_io_error_title_follows_code(self, code: str) -> None:
        error = ReaderIOError("failed", code=code).to_parser_error()

        assert error.code == code
        assert error.severity is Severity.FATAL
        assert error.title == PARSER_ERROR_CODES[code]

    def test_str_contains_code_and_title(self) -> None:
        text = str(ReaderIOError("Cannot open x.csv", source="x.csv").to_parser_error())
        assert text == "[CSV-IO-001] FATAL: Source could not be opened - Cannot open x.csv"


class TestRegistry:
    """Tests for the error code registry."""

    def test_known_code(self) -> None:
        assert get_error_description("CSV-QUOTE-001") == "Unexpected end of file in quoted field"

    def test_unknown_code(self) -> None:
        assert get_error_description("CSV-XYZ-999") is None

    def test_codes_match_taxonomy_pattern(self) -> None:
        for code in PARSER_ERROR_CODES:
            ParserError.warn(code=code, title="t", message="m")

    def test_invalid_code_rejected(self) -> None:
        with pytest.raises(ValueError):
            ParserError.fatal(code="E42", title="t", message="m")


def test_location_str() -> None:
    assert str(Location(file="a.csv", line_no=3)) == "a.csv, line 3"
    assert str(Location()) == "<unknown>"
