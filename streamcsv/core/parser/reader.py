"""
Reader loop.

Pulls logical lines from a LineSegmenter, feeds them to a RecordTokenizer
and forwards every completed record to a RecordHandler:

    did_start_document   exactly once, before any record
    did_read_record      once per record, in order
    did_end_document     exactly once, after the last record

did_end_document is only sent when the source was read to the end. I/O,
decode and tokenizer faults propagate as exceptions and stop the loop.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, BinaryIO, Protocol

from .encoding import DETECTION_SAMPLE_SIZE, detect_encoding
from .errors import Location, ParserError, ProtocolViolation
from .models import Dialect, ParseSummary, Record, source_name
from .segmenter import DEFAULT_BUFFER_SIZE, LineSegmenter
from .tokenizer import LineResult, RecordTokenizer

if TYPE_CHECKING:
    from collections.abc import Generator

logger = logging.getLogger(__name__)


class RecordHandler(Protocol):
    """Receives reader notifications."""

    def did_start_document(self, reader: CSVReader) -> None: ...

    def did_read_record(self, reader: CSVReader, record: Record) -> None: ...

    def did_end_document(self, reader: CSVReader) -> None: ...


class RecordCollector:
    """RecordHandler that keeps every record in memory."""

    def __init__(self) -> None:
        self.records: list[Record] = []
        self.started = 0
        self.ended = 0

    def did_start_document(self, reader: CSVReader) -> None:
        self.started += 1

    def did_read_record(self, reader: CSVReader, record: Record) -> None:
        self.records.append(record)

    def did_end_document(self, reader: CSVReader) -> None:
        self.ended += 1

    @property
    def rows(self) -> list[list[str]]:
        """Field lists without line numbers."""
        return [record.fields for record in self.records]


class CSVReader:
    """
    Streaming CSV reader.

    Args:
        source: Path to a file, or a binary file object
        handler: Notification receiver for start_reader()
        encoding: Codec name; None detects it from the first bytes
        buffer_size: Bytes per read from the source
        errors: "strict" raises ReaderDecodeError on invalid bytes,
            "replace" substitutes U+FFFD

    A reader owns its segmenter buffer and tokenizer state; do not share an
    instance between threads.
    """

    def __init__(
        self,
        source: Path | str | BinaryIO,
        handler: RecordHandler | None = None,
        *,
        encoding: str | None = None,
        buffer_size: int = DEFAULT_BUFFER_SIZE,
        errors: str = "strict",
    ) -> None:
        self.source = source
        self.handler = handler
        self.name = source_name(source)
        self.encoding = encoding
        self.buffer_size = buffer_size
        self.errors = errors

        self.dialect = Dialect()
        self.line_count = 0
        self.record_count = 0
        self.warnings: list[ParserError] = []
        self._consumed = False

    # =========================================================================
    # Source handling
    # =========================================================================

    def _open_segmenter(self) -> LineSegmenter:
        encoding = self.encoding or detect_source_encoding(self.source)
        if isinstance(self.source, (str, Path)):
            segmenter = LineSegmenter.open(
                self.source,
                encoding,
                buffer_size=self.buffer_size,
                errors=self.errors,
            )
        else:
            segmenter = LineSegmenter(
                self.source,
                encoding,
                buffer_size=self.buffer_size,
                errors=self.errors,
                name=self.name,
            )
        self.encoding = encoding
        return segmenter

    def _owns_source(self) -> bool:
        return isinstance(self.source, (str, Path))

    # =========================================================================
    # Pull interface
    # =========================================================================

    def iter_records(
        self, delimiter: str = ",", quote: str = '"'
    ) -> Generator[Record, None, None]:
        """
        Yield records lazily.

        The dialect is validated immediately; the source is opened on the
        first next(). Each call starts from the beginning of the source
        (file objects that were read before are rewound).
        """
        dialect = Dialect(delimiter=delimiter, quotechar=quote)
        return self._records(dialect, None)

    def _records(
        self, dialect: Dialect, segmenter: LineSegmenter | None
    ) -> Generator[Record, None, None]:
        if segmenter is None:
            segmenter = self._open_segmenter()

        self.dialect = dialect
        self.line_count = 0
        self.record_count = 0
        self.warnings = []

        tokenizer = RecordTokenizer(dialect)
        record_start_line = 1

        try:
            if not self._owns_source():
                if self._consumed:
                    segmenter.rewind()
                self._consumed = True

            for line in segmenter:
                self.line_count = segmenter.line_count
                if not tokenizer.pending:
                    record_start_line = self.line_count

                result = tokenizer.feed_line(line)
                if result is LineResult.RECORD_COMPLETE:
                    self.record_count += 1
                    yield Record(
                        line_no=self.line_count,
                        start_line=record_start_line,
                        fields=tokenizer.take_record(),
                    )
                elif result is LineResult.FAULT:
                    raise ProtocolViolation(
                        f"Tokenizer fault in state {tokenizer.state.name}",
                        source=self.name,
                        line_no=self.line_count,
                        context={"state": tokenizer.state.name},
                    )

            fields = tokenizer.finish()
            if fields is not None:
                warning = ParserError.warn(
                    code="CSV-QUOTE-001",
                    title="Unterminated quoted field",
                    message=(
                        f"Quoted field opened on line {record_start_line} "
                        "is still open at end of file"
                    ),
                    location=Location(file=self.name, line_no=record_start_line),
                    context={"end_line": self.line_count},
                )
                logger.warning("%s", warning)
                self.warnings.append(warning)
                self.record_count += 1
                yield Record(
                    line_no=max(self.line_count, 1),
                    start_line=record_start_line,
                    fields=fields,
                )
        finally:
            if self._owns_source():
                segmenter.close()

    # =========================================================================
    # Push interface
    # =========================================================================

    def start_reader(self, delimiter: str = ",", quote: str = '"') -> ParseSummary:
        """
        Read the whole source, notifying the handler.

        Returns:
            ParseSummary with line/record counts and warnings

        Raises:
            ReaderIOError: Source cannot be opened or read
            ReaderDecodeError: Invalid bytes for the encoding (errors="strict")
            ProtocolViolation: Internal tokenizer fault
        """
        handler = self.handler
        dialect = Dialect(delimiter=delimiter, quotechar=quote)
        segmenter = self._open_segmenter()

        logger.debug("Start document %s", self.name)
        try:
            if handler is not None:
                handler.did_start_document(self)

            for record in self._records(dialect, segmenter):
                if handler is not None:
                    handler.did_read_record(self, record)
        finally:
            if self._owns_source():
                segmenter.close()

        logger.debug(
            "End document %s: %d lines, %d records",
            self.name,
            self.line_count,
            self.record_count,
        )
        if handler is not None:
            handler.did_end_document(self)

        return self.summary()

    def summary(self) -> ParseSummary:
        """Counts for the most recent read."""
        return ParseSummary(
            source=self.name,
            encoding=self.encoding or "<unknown>",
            dialect=self.dialect,
            line_count=self.line_count,
            record_count=self.record_count,
            warnings=list(self.warnings),
        )


def _detect_file_encoding(path: Path) -> str:
    try:
        with path.open("rb") as f:
            sample = f.read(DETECTION_SAMPLE_SIZE)
    except OSError:
        # LineSegmenter.open reports the failure as ReaderIOError
        return "utf-8"
    return detect_encoding(sample)


def _detect_stream_encoding(stream: BinaryIO) -> str:
    seekable = getattr(stream, "seekable", None)
    if seekable is None or not seekable():
        return "utf-8"
    position = stream.tell()
    sample = stream.read(DETECTION_SAMPLE_SIZE)
    stream.seek(position)
    return detect_encoding(sample)


def detect_source_encoding(source: Path | str | BinaryIO) -> str:
    """Detect the encoding of a path or file object from its first bytes."""
    if isinstance(source, (str, Path)):
        return _detect_file_encoding(Path(source))
    return _detect_stream_encoding(source)
