"""
CSV record tokenizer.

A character-level state machine that consumes one logical line at a time
and assembles records. Quoting rules:
- A field is quoted if its first non-whitespace character is the quote
- Inside a quoted field, a doubled quote is a literal quote
- A quote inside an unquoted field is kept as literal data (lenient)
- Whitespace between a closing quote and the delimiter is dropped, and so
  is whitespace before an opening quote
- A quoted field left open at the end of a line continues on the next
  line, joined with "\\n"

A quote's meaning is only known once the next character has been seen, so
FIELD_MIGHT_HAVE_ENDED carries that single character of ambiguity as state.
"""

from __future__ import annotations

from enum import Enum, auto
from typing import TYPE_CHECKING

from .errors import ProtocolViolation
from .models import Dialect
from .segmenter import split_lines

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator


class ParserState(Enum):
    """State of the tokenizer state machine."""

    ROW_NOT_BEGUN = auto()  # At start of a record
    FIELD_NOT_BEGUN = auto()  # Between fields, nothing committed yet
    FIELD_BEGUN = auto()  # Inside a field (quoted or unquoted)
    FIELD_MIGHT_HAVE_ENDED = auto()  # Just saw a quote; closer or escape?
    FIELD_CONTINUES_NEXT_LINE = auto()  # Quoted field spans a line terminator


class LineResult(Enum):
    """Outcome of feeding one logical line."""

    RECORD_COMPLETE = auto()
    NEED_MORE_INPUT = auto()
    FAULT = auto()


class RecordTokenizer:
    """
    Assemble records from logical lines.

    Usage:
        tokenizer = RecordTokenizer(Dialect(delimiter=";"))
        for line in lines:
            if tokenizer.feed_line(line) is LineResult.RECORD_COMPLETE:
                handle(tokenizer.take_record())

    Not thread-safe: one tokenizer per parse.
    """

    def __init__(self, dialect: Dialect | None = None) -> None:
        if dialect is None:
            dialect = Dialect()
        self.dialect = dialect
        self.delimiter = dialect.delimiter
        self.quotechar = dialect.quotechar
        self.whitespace = dialect.whitespace

        self.state = ParserState.ROW_NOT_BEGUN
        self.current_field: list[str] = []
        self.current_record: list[str] = []
        self.quoted = False
        self.trailing_whitespace = 0

    @property
    def pending(self) -> bool:
        """True while a quoted field is open across a line boundary."""
        return self.state is ParserState.FIELD_CONTINUES_NEXT_LINE

    def reset(self) -> None:
        """Drop any partial record."""
        self.current_record = []
        self._clear_field()
        self.state = ParserState.ROW_NOT_BEGUN

    def _clear_field(self) -> None:
        self.current_field = []
        self.quoted = False
        self.trailing_whitespace = 0

    def _submit_field(self, trim: int = 0) -> None:
        if trim:
            del self.current_field[-trim:]
        self.current_record.append("".join(self.current_field))
        self._clear_field()

    # =========================================================================
    # State machine
    # =========================================================================

    def feed_line(self, line: str) -> LineResult:
        """
        Consume one logical line (without its terminator).

        Returns:
            RECORD_COMPLETE if a record is ready for take_record(),
            NEED_MORE_INPUT if a quoted field continues on the next line,
            FAULT if the machine ended up in a state it cannot resolve
        """
        delimiter = self.delimiter
        quotechar = self.quotechar
        whitespace = self.whitespace
        field = self.current_field

        self.trailing_whitespace = 0

        if self.state is ParserState.FIELD_CONTINUES_NEXT_LINE:
            field.append("\n")
            self.state = ParserState.FIELD_BEGUN

        for char in line:
            state = self.state

            if state is ParserState.ROW_NOT_BEGUN or state is ParserState.FIELD_NOT_BEGUN:
                if char in whitespace:
                    # Not begun until the first non-whitespace character
                    field.append(char)
                    self.trailing_whitespace += 1
                elif char == delimiter:
                    self._submit_field()
                    field = self.current_field
                    self.state = ParserState.FIELD_NOT_BEGUN
                elif char == quotechar:
                    # Leading whitespace lies outside the quotes
                    field.clear()
                    self.quoted = True
                    self.trailing_whitespace = 0
                    self.state = ParserState.FIELD_BEGUN
                else:
                    field.append(char)
                    self.quoted = False
                    self.trailing_whitespace = 0
                    self.state = ParserState.FIELD_BEGUN

            elif state is ParserState.FIELD_BEGUN:
                if char == quotechar:
                    field.append(char)
                    if not self.quoted:
                        self.trailing_whitespace = 0
                    self.state = ParserState.FIELD_MIGHT_HAVE_ENDED
                elif char == delimiter:
                    if self.quoted:
                        field.append(char)
                    else:
                        self._submit_field()
                        field = self.current_field
                        self.state = ParserState.FIELD_NOT_BEGUN
                elif char in whitespace and not self.quoted:
                    field.append(char)
                    self.trailing_whitespace += 1
                else:
                    field.append(char)
                    self.trailing_whitespace = 0

            elif state is ParserState.FIELD_MIGHT_HAVE_ENDED:
                if char == delimiter:
                    # The quote closed the field; drop it and the whitespace after it
                    self._submit_field(trim=self.trailing_whitespace + 1)
                    field = self.current_field
                    self.state = ParserState.FIELD_NOT_BEGUN
                elif char in whitespace:
                    field.append(char)
                    self.trailing_whitespace += 1
                elif char == quotechar:
                    # Doubled quote: the one already appended stands as data
                    self.state = ParserState.FIELD_BEGUN
                else:
                    field.append(char)
                    self.quoted = False
                    self.trailing_whitespace = 0
                    self.state = ParserState.FIELD_BEGUN

            else:
                return LineResult.FAULT

        return self._end_of_line()

    def _end_of_line(self) -> LineResult:
        state = self.state

        if state is ParserState.FIELD_BEGUN:
            if self.quoted:
                self.state = ParserState.FIELD_CONTINUES_NEXT_LINE
                return LineResult.NEED_MORE_INPUT
            self._submit_field()

        elif state is ParserState.FIELD_MIGHT_HAVE_ENDED:
            if not self.current_field:
                return LineResult.FAULT
            self._submit_field(trim=self.trailing_whitespace + 1)

        elif state is ParserState.ROW_NOT_BEGUN or state is ParserState.FIELD_NOT_BEGUN:
            # Blank line, trailing delimiter or whitespace-only field
            self._submit_field()

        else:
            return LineResult.FAULT

        self.state = ParserState.ROW_NOT_BEGUN
        return LineResult.RECORD_COMPLETE

    def take_record(self) -> list[str]:
        """Return the completed record and start a new one."""
        record = self.current_record
        self.current_record = []
        self._clear_field()
        self.state = ParserState.ROW_NOT_BEGUN
        return record

    def finish(self) -> list[str] | None:
        """
        Flush at end of stream.

        Returns the partial record if a quoted field was never closed
        (the field is committed as read so far), else None.
        """
        if not self.pending:
            return None
        self._submit_field()
        return self.take_record()


def tokenize_line(
    line: str,
    dialect: Dialect | None = None,
) -> list[str]:
    """
    Tokenize a single line into fields.

    A quoted field left open at the end of the line is returned as read so
    far. For multi-line records, use tokenize_lines() or tokenize_text().

    Args:
        line: The line to tokenize (without line terminator)
        dialect: CSV dialect (defaults to comma and double quote)

    Returns:
        List of field values (unquoted and unescaped)
    """
    tokenizer = RecordTokenizer(dialect)
    result = tokenizer.feed_line(line)
    if result is LineResult.NEED_MORE_INPUT:
        record = tokenizer.finish()
        return record if record is not None else []
    return tokenizer.take_record()


def tokenize_lines(
    lines: Iterable[str],
    dialect: Dialect | None = None,
) -> Iterator[tuple[list[str], int, int]]:
    """
    Tokenize logical lines into records.

    Args:
        lines: Logical lines, terminators already stripped
        dialect: CSV dialect

    Yields:
        Tuples of (fields, start_line, end_line)
        start_line and end_line are 1-indexed line numbers
    """
    tokenizer = RecordTokenizer(dialect)
    record_start_line = 1
    line_no = 0

    for line_no, line in enumerate(lines, start=1):
        if not tokenizer.pending:
            record_start_line = line_no

        result = tokenizer.feed_line(line)
        if result is LineResult.RECORD_COMPLETE:
            yield tokenizer.take_record(), record_start_line, line_no
        elif result is LineResult.FAULT:
            raise ProtocolViolation(
                f"Tokenizer fault in state {tokenizer.state.name}",
                line_no=line_no,
                context={"state": tokenizer.state.name},
            )

    record = tokenizer.finish()
    if record is not None:
        yield record, record_start_line, line_no


def tokenize_text(
    text: str,
    dialect: Dialect | None = None,
) -> Iterator[tuple[list[str], int, int]]:
    """
    Tokenize already-decoded text into records.

    Supports CR, LF and CRLF line endings.

    Yields:
        Tuples of (fields, start_line, end_line)
    """
    yield from tokenize_lines(split_lines(text), dialect)
