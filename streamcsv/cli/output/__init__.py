"""
Output adapters for CLI.

Provides different output formats: terminal, JSON, JSON lines.
"""

from streamcsv.cli.output.base import OutputAdapter, OutputFormat, get_output_adapter
from streamcsv.cli.output.json import JsonLinesOutput, JsonOutput
from streamcsv.cli.output.terminal import TerminalOutput

__all__ = [
    "JsonLinesOutput",
    "JsonOutput",
    "OutputAdapter",
    "OutputFormat",
    "TerminalOutput",
    "get_output_adapter",
]
