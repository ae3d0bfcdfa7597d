"""
Parser data models.

Core data models for CSV parsing.

DESIGN DECISIONS:
- Field values are ALWAYS strings; an empty unquoted field is "", never None
- Dialect, Record and ParseSummary are frozen (immutable)
- ParseResult hands out a fresh lazy iterator on every access to .records
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, Field, field_validator, model_validator

if TYPE_CHECKING:
    from collections.abc import Iterator

# Characters that are trimmed around quoted fields unless configured as
# the delimiter or the quote character.
DEFAULT_WHITESPACE = frozenset({" ", "\t"})

LINE_TERMINATORS = frozenset({"\r", "\n"})


# =============================================================================
# Basic Models
# =============================================================================


class Dialect(BaseModel, frozen=True):
    """CSV dialect settings."""

    delimiter: str = ","
    quotechar: str = '"'

    model_config = {"frozen": True}

    @field_validator("delimiter", "quotechar")
    @classmethod
    def _single_character(cls, value: str) -> str:
        if len(value) != 1:
            raise ValueError(f"must be a single character, got {value!r}")
        if value in LINE_TERMINATORS:
            raise ValueError("line terminators cannot be used as delimiter or quote")
        return value

    @model_validator(mode="after")
    def _distinct(self) -> Dialect:
        if self.delimiter == self.quotechar:
            raise ValueError("delimiter and quotechar must differ")
        return self

    @property
    def whitespace(self) -> frozenset[str]:
        """Whitespace characters that get special treatment around fields."""
        return DEFAULT_WHITESPACE - {self.delimiter, self.quotechar}


class Record(BaseModel, frozen=True):
    """A single parsed record."""

    line_no: int = Field(
        ge=1,
        description="Logical line on which the record completed (1-indexed)",
    )
    start_line: int = Field(
        ge=1,
        description="Logical line on which the record started",
    )
    fields: list[str] = Field(
        description="Field values in order",
    )

    model_config = {"frozen": True}

    @property
    def line_span(self) -> tuple[int, int]:
        """(start_line, end_line) for multi-line records."""
        return self.start_line, self.line_no


class ParseSummary(BaseModel, frozen=True):
    """Totals reported once a document has been read to the end."""

    source: str
    encoding: str
    dialect: Dialect
    line_count: int = 0
    record_count: int = 0
    # ParserError values; typed loosely to avoid a circular import
    warnings: list[Any] = Field(default_factory=list)

    model_config = {"frozen": True}

    @property
    def has_warnings(self) -> bool:
        return bool(self.warnings)


# =============================================================================
# Parse Result Model
# =============================================================================


class ParseResult(BaseModel):
    """
    Result of opening a CSV source.

    The records are provided as a lazy iterator to support streaming.
    Call list(result.records) to materialize all records.
    """

    source: str
    encoding: str
    dialect: Dialect

    # Factory function that creates a new record iterator each time
    record_factory_fn: Any = Field(
        exclude=True,
        repr=False,
        description="Factory function for creating record iterator",
    )

    # Filled in by the record iterator as it reaches end of stream
    warnings: list[Any] = Field(default_factory=list)

    model_config = {"arbitrary_types_allowed": True}

    @property
    def records(self) -> Iterator[Record]:
        """
        Iterate over records.

        IMPORTANT: This is a streaming iterator. Each record is parsed on-demand
        and every access starts again from the beginning of the source.
        """
        return self.record_factory_fn(self.warnings)  # type: ignore[no-any-return]

    def materialize(self) -> tuple[list[Record], list[Any]]:
        """
        Materialize all records into memory.

        WARNING: May use significant memory for large files.
        Returns (records, warnings) tuple.
        """
        records = list(self.records)
        return records, list(self.warnings)

    @property
    def has_warnings(self) -> bool:
        return bool(self.warnings)


def source_name(source: Path | str | Any) -> str:
    """Human-readable name for a path or file object."""
    if isinstance(source, (str, Path)):
        return str(source)
    return str(getattr(source, "name", "<stream>"))
