"""
Terminal output adapter.

Renders each record as a header line followed by one |field| per line,
with ANSI colors when writing to a TTY.
"""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING, TextIO

from streamcsv.cli.output.base import OutputAdapter, OutputFormat

if TYPE_CHECKING:
    from streamcsv.core.parser.models import ParseSummary, Record


# Check if Unicode is supported
def _supports_unicode() -> bool:
    """Check if terminal supports Unicode."""
    try:
        "✓↵".encode(sys.stdout.encoding or "utf-8")
        return True
    except (UnicodeEncodeError, LookupError):
        return False


SUCCESS_SYMBOL_UNICODE = "✓"
SUCCESS_SYMBOL_ASCII = "OK"
WARN_SYMBOL_UNICODE = "⚠"
WARN_SYMBOL_ASCII = "!"

# Shown in place of an embedded newline so each field stays on one line
NEWLINE_MARK_UNICODE = "↵"
NEWLINE_MARK_ASCII = "\\n"


class TerminalOutput(OutputAdapter):
    """Terminal output with ANSI colors."""

    format = OutputFormat.TERMINAL

    def __init__(self, stream: TextIO | None = None, color: bool = True):
        super().__init__(stream=stream, color=color)
        self._use_color = color and self._is_tty()
        self._use_unicode = _supports_unicode()
        self._success_symbol = SUCCESS_SYMBOL_UNICODE if self._use_unicode else SUCCESS_SYMBOL_ASCII
        self._warn_symbol = WARN_SYMBOL_UNICODE if self._use_unicode else WARN_SYMBOL_ASCII
        self._newline_mark = NEWLINE_MARK_UNICODE if self._use_unicode else NEWLINE_MARK_ASCII

    def _is_tty(self) -> bool:
        """Check if output is a TTY."""
        return hasattr(self.stream, "isatty") and self.stream.isatty()

    def render_start(self, source: str) -> str | None:
        return self._style(f"Did start document: {source}", "bold")

    def render_record(self, record: Record) -> str | None:
        """Render a record header and its fields."""
        count = len(record.fields)
        noun = "field" if count == 1 else "fields"
        if record.start_line != record.line_no:
            where = f"lines {record.start_line}-{record.line_no}"
        else:
            where = f"line {record.line_no}"

        lines = [self._style(f"{where}, {count} {noun}", "dim")]
        for field in record.fields:
            value = field.replace("\n", self._newline_mark)
            lines.append(f"|{value}|")
        return "\n".join(lines)

    def render_summary(self, summary: ParseSummary) -> str:
        """Format summary and warnings."""
        lines: list[str] = []

        for warning in summary.warnings:
            lines.append(
                self._style(f"{self._warn_symbol} {warning.location}: {warning.message}", "yellow")
                + f" [{self._style(warning.code, 'dim')}]"
            )

        noun = "record" if summary.record_count == 1 else "records"
        lines.append(
            self._style(
                f"{self._success_symbol} Did end document: {summary.record_count} {noun}, "
                f"{summary.line_count} lines read ({summary.encoding})",
                "green" if not summary.warnings else "yellow",
            )
        )
        return "\n".join(lines)

    def _style(self, text: str, style: str) -> str:
        """Apply style to text if colors are enabled."""
        if not self._use_color:
            return text

        # ANSI color codes
        codes = {
            "bold": "\033[1m",
            "dim": "\033[2m",
            "green": "\033[32m",
            "yellow": "\033[33m",
        }
        reset = "\033[0m"

        code = codes.get(style, "")
        if code:
            return f"{code}{text}{reset}"
        return text
