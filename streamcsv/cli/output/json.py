"""
JSON output adapters.

JsonOutput renders one document once the source is exhausted;
JsonLinesOutput writes one object per record as it is read.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any, TextIO

from streamcsv.cli.output.base import OutputAdapter, OutputFormat

if TYPE_CHECKING:
    from streamcsv.core.parser.models import ParseSummary, Record


def record_to_dict(record: Record) -> dict[str, Any]:
    return {
        "line_no": record.line_no,
        "start_line": record.start_line,
        "fields": record.fields,
    }


def summary_to_dict(summary: ParseSummary) -> dict[str, Any]:
    return {
        "source": summary.source,
        "encoding": summary.encoding,
        "delimiter": summary.dialect.delimiter,
        "quotechar": summary.dialect.quotechar,
        "line_count": summary.line_count,
        "record_count": summary.record_count,
        "warnings": [w.model_dump(mode="json") for w in summary.warnings],
    }


class JsonOutput(OutputAdapter):
    """JSON output adapter."""

    format = OutputFormat.JSON

    def __init__(self, stream: TextIO | None = None, color: bool = False, indent: int = 2):
        super().__init__(stream=stream, color=False)  # Never colorize JSON
        self.indent = indent
        self._records: list[dict[str, Any]] = []

    def render_start(self, source: str) -> str | None:
        self._records = []
        return None

    def render_record(self, record: Record) -> str | None:
        self._records.append(record_to_dict(record))
        return None

    def render_summary(self, summary: ParseSummary) -> str:
        """Render all collected records and the summary as one JSON document."""
        output = {
            "records": self._records,
            "summary": summary_to_dict(summary),
        }
        return json.dumps(output, indent=self.indent, ensure_ascii=False, default=str)


class JsonLinesOutput(OutputAdapter):
    """One JSON object per line, streamed."""

    format = OutputFormat.JSONL

    def __init__(self, stream: TextIO | None = None, color: bool = False):
        super().__init__(stream=stream, color=False)

    def render_record(self, record: Record) -> str | None:
        return json.dumps(record_to_dict(record), ensure_ascii=False)

    def render_summary(self, summary: ParseSummary) -> str:
        """Summary goes out as a final object tagged with "summary"."""
        return json.dumps({"summary": summary_to_dict(summary)}, ensure_ascii=False, default=str)
