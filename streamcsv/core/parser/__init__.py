"""
CSV Parser Core.

Public API for streaming CSV parsing.

Usage:
    from streamcsv.core.parser import parse_file

    result = parse_file("cities.csv", dialect=Dialect(delimiter=";"))
    for record in result.records:
        print(record.line_no, record.fields)

Push-style reading with notifications:
    reader = CSVReader("cities.csv", handler)
    reader.start_reader(";")

API Functions:
    parse_file(path) -> ParseResult
    parse_bytes(data, source) -> ParseResult
    parse_stream(stream, source) -> ParseResult
    detect_encoding(data) -> str
    tokenize_line(line, dialect) -> list[str]
    tokenize_text(text, dialect) -> Iterator[(fields, start_line, end_line)]
"""

from __future__ import annotations

import io
from pathlib import Path
from typing import TYPE_CHECKING, BinaryIO

if TYPE_CHECKING:
    from collections.abc import Iterator

from .encoding import detect_encoding
from .errors import (
    Location,
    ParserError,
    ProtocolViolation,
    ReaderDecodeError,
    ReaderIOError,
    Severity,
    StreamCsvError,
)
from .models import Dialect, ParseResult, ParseSummary, Record
from .reader import CSVReader, RecordCollector, RecordHandler, detect_source_encoding
from .segmenter import DEFAULT_BUFFER_SIZE, LineSegmenter, split_lines
from .tokenizer import (
    LineResult,
    ParserState,
    RecordTokenizer,
    tokenize_line,
    tokenize_lines,
    tokenize_text,
)


def parse_file(
    path: Path | str,
    *,
    dialect: Dialect | None = None,
    encoding: str | None = None,
    errors: str = "strict",
    buffer_size: int = DEFAULT_BUFFER_SIZE,
) -> ParseResult:
    """
    Parse a CSV file.

    Args:
        path: Path to the CSV file
        dialect: Delimiter and quote character (defaults to , and ")
        encoding: Codec name; None detects it from the first 8KB
        errors: Decode error policy, "strict" or "replace"

    Returns:
        ParseResult with a streaming record iterator

    Raises:
        ReaderIOError: If the file does not exist or cannot be opened
    """
    path = Path(path)

    if not path.is_file():
        raise ReaderIOError(f"File not found: {path}", source=str(path))

    reader = CSVReader(path, encoding=encoding, errors=errors, buffer_size=buffer_size)
    return _create_result(reader, dialect or Dialect())


def parse_bytes(
    data: bytes,
    source: str = "<bytes>",
    *,
    dialect: Dialect | None = None,
    encoding: str | None = None,
    errors: str = "strict",
    buffer_size: int = DEFAULT_BUFFER_SIZE,
) -> ParseResult:
    """
    Parse CSV data from bytes.

    Args:
        data: Raw content
        source: Name used in error locations

    Returns:
        ParseResult with a streaming record iterator
    """
    return parse_stream(
        io.BytesIO(data),
        source,
        dialect=dialect,
        encoding=encoding,
        errors=errors,
        buffer_size=buffer_size,
    )


def parse_stream(
    stream: BinaryIO,
    source: str = "<stream>",
    *,
    dialect: Dialect | None = None,
    encoding: str | None = None,
    errors: str = "strict",
    buffer_size: int = DEFAULT_BUFFER_SIZE,
) -> ParseResult:
    """
    Parse CSV data from a binary stream.

    Iterating result.records more than once requires a seekable stream.

    Args:
        stream: Binary file-like object
        source: Name used in error locations

    Returns:
        ParseResult with a streaming record iterator
    """
    reader = CSVReader(stream, encoding=encoding, errors=errors, buffer_size=buffer_size)
    reader.name = source
    return _create_result(reader, dialect or Dialect())


def _create_result(reader: CSVReader, dialect: Dialect) -> ParseResult:
    # Resolve the encoding up front so the result can report it
    if reader.encoding is None:
        reader.encoding = detect_source_encoding(reader.source)

    def record_factory(warnings: list[ParserError]) -> Iterator[Record]:
        """Create an iterator over records."""
        warnings.clear()
        records = reader.iter_records(dialect.delimiter, dialect.quotechar)
        yield from records
        warnings.extend(reader.warnings)

    return ParseResult(
        source=reader.name,
        encoding=reader.encoding,
        dialect=dialect,
        record_factory_fn=record_factory,
    )


# =============================================================================
# Public API Exports
# =============================================================================

__all__ = [
    "DEFAULT_BUFFER_SIZE",
    "CSVReader",
    # Models
    "Dialect",
    "LineResult",
    "LineSegmenter",
    "Location",
    "ParseResult",
    "ParseSummary",
    "ParserError",
    # Enums
    "ParserState",
    # Errors
    "ProtocolViolation",
    "ReaderDecodeError",
    "ReaderIOError",
    "Record",
    "RecordCollector",
    "RecordHandler",
    "RecordTokenizer",
    "Severity",
    "StreamCsvError",
    "detect_encoding",
    "detect_source_encoding",
    # Main functions
    "parse_bytes",
    "parse_file",
    "parse_stream",
    "split_lines",
    "tokenize_line",
    "tokenize_lines",
    "tokenize_text",
]
