"""
Main CLI application.

Entry point for the streamcsv command.
"""

from __future__ import annotations

import contextlib
import itertools
import logging
import os
import time
from pathlib import Path  # noqa: TC003
from typing import TYPE_CHECKING, Annotated

import typer

import streamcsv
from streamcsv.cli.context import (
    CliContext,
    ExitCode,
    configure_logging,
    get_exit_code,
    resolve_character,
)
from streamcsv.cli.output import OutputFormat, get_output_adapter
from streamcsv.core.parser.segmenter import DEFAULT_BUFFER_SIZE

if TYPE_CHECKING:
    from streamcsv.core.parser import CSVReader

logger = logging.getLogger(__name__)


def _usage_error(message: str) -> typer.Exit:
    typer.echo(f"Invalid option: {message}", err=True)
    return typer.Exit(ExitCode.USAGE)


def _resolve_buffer_size(buffer_size: int | None) -> int:
    if buffer_size is not None:
        if buffer_size <= 0:
            raise _usage_error("--buffer-size must be positive")
        return buffer_size

    env_value = os.environ.get("STREAMCSV_BUFFER_SIZE")
    if env_value:
        try:
            parsed = int(env_value)
        except ValueError:
            raise _usage_error("STREAMCSV_BUFFER_SIZE must be an integer") from None
        if parsed <= 0:
            raise _usage_error("STREAMCSV_BUFFER_SIZE must be positive")
        return parsed

    return DEFAULT_BUFFER_SIZE


# Create main app
app = typer.Typer(
    name="streamcsv",
    help="Streaming CSV reader",
    add_completion=False,
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"streamcsv {streamcsv.__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Log progress to stderr"),
    ] = False,
) -> None:
    """Streaming CSV reader."""
    configure_logging(verbose)


# Shared option types
DelimiterOption = Annotated[
    str,
    typer.Option("--delimiter", "-d", help="Field delimiter; 'tab' or '\\t' for TAB"),
]
QuoteOption = Annotated[
    str,
    typer.Option("--quote", "-q", help="Quote character"),
]
EncodingOption = Annotated[
    str | None,
    typer.Option("--encoding", "-e", help="Text encoding (default: detect)"),
]
ErrorsOption = Annotated[
    str,
    typer.Option("--errors", help="Invalid byte handling: strict, replace"),
]
BufferSizeOption = Annotated[
    int | None,
    typer.Option(
        "--buffer-size",
        help="Read buffer size in bytes. Defaults to STREAMCSV_BUFFER_SIZE or 4096.",
    ),
]


def _make_reader(file: Path, ctx: CliContext) -> CSVReader:
    from streamcsv.core.parser import CSVReader

    return CSVReader(
        file,
        encoding=ctx.encoding,
        buffer_size=ctx.buffer_size,
        errors=ctx.errors,
    )


def _build_context(**options: object) -> CliContext:
    try:
        return CliContext(**options)  # type: ignore[arg-type]
    except ValueError as e:
        raise _usage_error(str(e)) from None


# =============================================================================
# Parse Command
# =============================================================================


@app.command()
def parse(
    file: Annotated[Path, typer.Argument(help="CSV file to read", exists=True, dir_okay=False)],
    delimiter: DelimiterOption = ",",
    quote: QuoteOption = '"',
    encoding: EncodingOption = None,
    errors: ErrorsOption = "strict",
    buffer_size: BufferSizeOption = None,
    format: Annotated[
        str,
        typer.Option("--format", "-f", help="Output format: terminal, json, jsonl"),
    ] = "terminal",
    output: Annotated[
        Path | None,
        typer.Option("--out", "-o", help="Write output to file"),
    ] = None,
    limit: Annotated[
        int | None,
        typer.Option("--limit", "-n", help="Stop after this many records"),
    ] = None,
    color: Annotated[
        bool,
        typer.Option("--color/--no-color", help="Enable/disable colored output"),
    ] = True,
    strict: Annotated[
        bool,
        typer.Option("--strict", help="Exit with status 1 when warnings were reported"),
    ] = False,
) -> None:
    """Read a CSV file and print its records."""
    from streamcsv.core.parser import StreamCsvError

    ctx = _build_context(
        delimiter=resolve_character(delimiter),
        quote=resolve_character(quote),
        encoding=encoding,
        errors=errors,
        buffer_size=_resolve_buffer_size(buffer_size),
        format=format,
        output_file=output,
        color=color,
        limit=limit,
        strict=strict,
    )

    try:
        output_format = OutputFormat(ctx.format)
    except ValueError:
        typer.echo(f"Unknown format: {ctx.format}", err=True)
        typer.echo("Available formats: terminal, json, jsonl", err=True)
        raise typer.Exit(ExitCode.USAGE) from None

    reader = _make_reader(file, ctx)

    out_stream = ctx.output_file.open("w", encoding="utf-8") if ctx.output_file else None
    try:
        adapter = get_output_adapter(
            output_format,
            stream=out_stream,
            color=ctx.color and out_stream is None,
        )
        reader.handler = adapter

        if ctx.limit is None:
            summary = reader.start_reader(ctx.delimiter, ctx.quote)
        else:
            # Stop pulling once enough records were read
            with contextlib.closing(reader.iter_records(ctx.delimiter, ctx.quote)) as records:
                adapter.did_start_document(reader)
                for record in itertools.islice(records, ctx.limit):
                    adapter.did_read_record(reader, record)
            adapter.did_end_document(reader)
            summary = reader.summary()
    except StreamCsvError as e:
        typer.echo(str(e.to_parser_error()), err=True)
        raise typer.Exit(ExitCode.FATAL) from None
    except (ValueError, LookupError) as e:
        raise _usage_error(str(e)) from None
    finally:
        if out_stream is not None:
            out_stream.close()

    if ctx.output_file:
        typer.echo(f"Output written to {ctx.output_file}", err=True)

    raise typer.Exit(get_exit_code(summary.has_warnings, ctx.strict))


# =============================================================================
# Count Command
# =============================================================================


@app.command()
def count(
    file: Annotated[Path, typer.Argument(help="CSV file to read", exists=True, dir_okay=False)],
    delimiter: DelimiterOption = ",",
    quote: QuoteOption = '"',
    encoding: EncodingOption = None,
    errors: ErrorsOption = "strict",
    buffer_size: BufferSizeOption = None,
) -> None:
    """Count records and lines, and time the read."""
    from streamcsv.core.parser import StreamCsvError

    ctx = _build_context(
        delimiter=resolve_character(delimiter),
        quote=resolve_character(quote),
        encoding=encoding,
        errors=errors,
        buffer_size=_resolve_buffer_size(buffer_size),
    )
    reader = _make_reader(file, ctx)

    started = time.perf_counter()
    try:
        summary = reader.start_reader(ctx.delimiter, ctx.quote)
    except StreamCsvError as e:
        typer.echo(str(e.to_parser_error()), err=True)
        raise typer.Exit(ExitCode.FATAL) from None
    except (ValueError, LookupError) as e:
        raise _usage_error(str(e)) from None
    elapsed = time.perf_counter() - started

    logger.debug("Read %s in %.3fs", file, elapsed)
    typer.echo(f"{summary.record_count} records, {summary.line_count} lines read.")
    typer.echo(f"Finish time: {elapsed:.3f}s")
    for warning in summary.warnings:
        typer.echo(str(warning), err=True)


# =============================================================================
# CLI Entry Point
# =============================================================================


def run() -> None:
    """Run the CLI application."""
    app()


if __name__ == "__main__":
    run()
