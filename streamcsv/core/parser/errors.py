"""
Parser error models.

This module defines structured errors for the CSV reader.
All parser errors use error codes from the CSV-XXX-NNN taxonomy.

Two layers live here:
- ParserError: an immutable pydantic value describing a problem (used for
  warnings collected in a ParseSummary and for CLI output)
- StreamCsvError and subclasses: exceptions raised when parsing cannot go on
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class Severity(Enum):
    """Error severity levels."""

    FATAL = "fatal"  # Cannot continue parsing
    ERROR = "error"  # Internal fault
    WARN = "warn"  # Parsed, but the input was suspicious


class Location(BaseModel, frozen=True):
    """Error location in file."""

    file: str | None = None
    line_no: int | None = None

    def __str__(self) -> str:
        """Format location for display."""
        parts = []
        if self.file:
            parts.append(self.file)
        if self.line_no is not None:
            parts.append(f"line {self.line_no}")
        return ", ".join(parts) if parts else "<unknown>"


class ParserError(BaseModel, frozen=True):
    """
    Structured parser error.

    Uses error codes from the Error Taxonomy (CSV-XXX-NNN).
    Error domains:
    - CSV-IO-*: Opening and reading the byte source
    - CSV-ENC-*: Decoding errors
    - CSV-QUOTE-*: Quoting anomalies (never fatal)
    - CSV-STATE-*: Tokenizer consistency faults
    """

    code: str = Field(
        pattern=r"^CSV-[A-Z]{2,5}-\d{3}$",
        description="Error code, e.g., 'CSV-ENC-001'",
    )
    severity: Severity
    title: str = Field(description="Short error title")
    message: str = Field(description="Detailed error message")
    location: Location = Field(
        default_factory=Location,
        description="Where the error occurred",
    )
    context: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional context (encoding, state, etc.)",
    )

    @classmethod
    def fatal(
        cls,
        code: str,
        title: str,
        message: str,
        *,
        location: Location | None = None,
        context: dict[str, Any] | None = None,
    ) -> ParserError:
        """Create a FATAL severity error."""
        return cls(
            code=code,
            severity=Severity.FATAL,
            title=title,
            message=message,
            location=location or Location(),
            context=context or {},
        )

    @classmethod
    def error(
        cls,
        code: str,
        title: str,
        message: str,
        *,
        location: Location | None = None,
        context: dict[str, Any] | None = None,
    ) -> ParserError:
        """Create an ERROR severity error."""
        return cls(
            code=code,
            severity=Severity.ERROR,
            title=title,
            message=message,
            location=location or Location(),
            context=context or {},
        )

    @classmethod
    def warn(
        cls,
        code: str,
        title: str,
        message: str,
        *,
        location: Location | None = None,
        context: dict[str, Any] | None = None,
    ) -> ParserError:
        """Create a WARN severity error."""
        return cls(
            code=code,
            severity=Severity.WARN,
            title=title,
            message=message,
            location=location or Location(),
            context=context or {},
        )

    def __str__(self) -> str:
        """Format error for display."""
        return f"[{self.code}] {self.severity.value.upper()}: {self.title} - {self.message}"


# =============================================================================
# Exceptions
# =============================================================================


class StreamCsvError(Exception):
    """Base class for errors that abort a parse."""

    code = "CSV-IO-001"
    severity = Severity.FATAL

    def __init__(
        self,
        message: str,
        *,
        source: str | None = None,
        line_no: int | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.source = source
        self.line_no = line_no
        self.context = context or {}
        super().__init__(message)

    def to_parser_error(self) -> ParserError:
        """Convert to a structured ParserError titled from the error code registry."""
        factory = ParserError.error if self.severity is Severity.ERROR else ParserError.fatal
        return factory(
            code=self.code,
            title=self.title,
            message=self.message,
            location=Location(file=self.source, line_no=self.line_no),
            context=self.context,
        )

    @property
    def title(self) -> str:
        return get_error_description(self.code) or "Parse failed"


class ReaderIOError(StreamCsvError):
    """The byte source could not be opened, read or rewound."""

    def __init__(self, message: str, *, code: str = "CSV-IO-001", **kwargs: Any) -> None:
        self.code = code
        super().__init__(message, **kwargs)


class ReaderDecodeError(StreamCsvError):
    """A line contains bytes that are invalid for the configured encoding."""

    code = "CSV-ENC-001"

    def __init__(self, message: str, *, encoding: str, **kwargs: Any) -> None:
        self.encoding = encoding
        super().__init__(message, **kwargs)
        self.context.setdefault("encoding", encoding)


class ProtocolViolation(StreamCsvError):
    """The tokenizer reached a state that well-formed transitions never produce."""

    code = "CSV-STATE-001"
    severity = Severity.ERROR


# =============================================================================
# Error Codes Registry
# =============================================================================

PARSER_ERROR_CODES: dict[str, str] = {
    # I/O errors
    "CSV-IO-001": "Source could not be opened",
    "CSV-IO-002": "Read from source failed",
    "CSV-IO-003": "Source cannot be rewound (not seekable)",
    # Encoding errors
    "CSV-ENC-001": "Invalid byte sequence for configured encoding",
    # Quoting anomalies
    "CSV-QUOTE-001": "Unexpected end of file in quoted field",
    # Internal faults
    "CSV-STATE-001": "Tokenizer reached an unreachable state",
}


def get_error_description(code: str) -> str | None:
    """Get the description for an error code."""
    return PARSER_ERROR_CODES.get(code)
