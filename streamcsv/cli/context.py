"""
CLI context and configuration.

Manages CLI state, exit codes, option parsing helpers and logging setup.
"""

from __future__ import annotations

import logging
import sys
from enum import IntEnum
from pathlib import Path  # noqa: TC003

from pydantic import BaseModel, Field

from streamcsv.core.parser.segmenter import DEFAULT_BUFFER_SIZE

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# Spellings accepted for characters that are awkward to pass on a command line
CHARACTER_ALIASES = {
    "\\t": "\t",
    "tab": "\t",
    "space": " ",
    "comma": ",",
    "semicolon": ";",
    "pipe": "|",
}


class ExitCode(IntEnum):
    """CLI exit codes following Unix conventions."""

    SUCCESS = 0  # Parsed without warnings
    WARNING = 1  # Parsed, warnings present and --strict given
    FATAL = 2  # I/O, decode or tokenizer failure
    USAGE = 64  # Command line usage error


class CliContext(BaseModel):
    """Shared context for CLI commands."""

    # Dialect and decoding
    delimiter: str = Field(default=",")
    quote: str = Field(default='"')
    encoding: str | None = Field(default=None)
    errors: str = Field(default="strict")  # strict, replace
    buffer_size: int = Field(default=DEFAULT_BUFFER_SIZE, ge=1)

    # Output settings
    format: str = Field(default="terminal")
    output_file: Path | None = Field(default=None)
    color: bool = Field(default=True)
    limit: int | None = Field(default=None, ge=0)

    # Runtime
    strict: bool = Field(default=False)

    model_config = {"frozen": False}


def resolve_character(value: str) -> str:
    """Translate a command line alias such as 'tab' into the character."""
    return CHARACTER_ALIASES.get(value.lower(), value)


def get_exit_code(has_warnings: bool, strict: bool) -> ExitCode:
    """Determine exit code for a completed parse."""
    if has_warnings and strict:
        return ExitCode.WARNING
    return ExitCode.SUCCESS


def configure_logging(verbose: bool) -> None:
    """Send library logging to stderr; DEBUG when verbose, else WARNING."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=LOG_FORMAT,
        stream=sys.stderr,
        force=True,
    )
