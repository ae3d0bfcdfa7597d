"""
Output adapter base classes.

Every adapter is a RecordHandler: the reader pushes notifications into it
and the adapter writes to its stream as records arrive.
"""

from __future__ import annotations

import sys
from abc import ABC, abstractmethod
from enum import Enum
from typing import TYPE_CHECKING, TextIO

if TYPE_CHECKING:
    from streamcsv.core.parser.models import ParseSummary, Record
    from streamcsv.core.parser.reader import CSVReader


class OutputFormat(Enum):
    """Supported output formats."""

    TERMINAL = "terminal"
    JSON = "json"
    JSONL = "jsonl"


class OutputAdapter(ABC):
    """Base class for output adapters."""

    format: OutputFormat

    def __init__(self, stream: TextIO | None = None, color: bool = True):
        self.stream = stream or sys.stdout
        self.color = color

    @abstractmethod
    def render_record(self, record: Record) -> str | None:
        """Render one record, or None to defer output to the summary."""
        pass

    @abstractmethod
    def render_summary(self, summary: ParseSummary) -> str:
        """Render the end-of-document summary."""
        pass

    def render_start(self, source: str) -> str | None:
        """Render the start-of-document banner. Override in subclasses that use one."""
        return None

    def write(self, content: str) -> None:
        """Write content to stream."""
        self.stream.write(content)
        if not content.endswith("\n"):
            self.stream.write("\n")
        self.stream.flush()

    # RecordHandler protocol

    def did_start_document(self, reader: CSVReader) -> None:
        rendered = self.render_start(reader.name)
        if rendered is not None:
            self.write(rendered)

    def did_read_record(self, reader: CSVReader, record: Record) -> None:
        rendered = self.render_record(record)
        if rendered is not None:
            self.write(rendered)

    def did_end_document(self, reader: CSVReader) -> None:
        rendered = self.render_summary(reader.summary())
        if rendered:
            self.write(rendered)


def get_output_adapter(
    format: OutputFormat | str,
    stream: TextIO | None = None,
    color: bool = True,
) -> OutputAdapter:
    """Get an output adapter by format."""
    if isinstance(format, str):
        format = OutputFormat(format)

    if format == OutputFormat.TERMINAL:
        from streamcsv.cli.output.terminal import TerminalOutput

        return TerminalOutput(stream=stream, color=color)
    elif format == OutputFormat.JSON:
        from streamcsv.cli.output.json import JsonOutput

        return JsonOutput(stream=stream, color=color)
    elif format == OutputFormat.JSONL:
        from streamcsv.cli.output.json import JsonLinesOutput

        return JsonLinesOutput(stream=stream, color=color)
    else:
        raise ValueError(f"Unknown output format: {format}")
