"""
Line segmentation for CSV byte streams.

Turns a byte stream into decoded logical lines. A logical line is the text
between two line terminators, where a terminator is any of:
- CR (\\r)
- LF (\\n)
- CRLF (\\r\\n), counted as a single terminator

The terminator is never part of the returned line. A blank line is returned
as "" and is distinct from end of stream, which is signalled with None.

Bytes are read through a fixed-size buffer. The bytes of a whole line are
collected before decoding, so multi-byte characters that straddle a buffer
refill decode correctly.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import TYPE_CHECKING, BinaryIO

from .encoding import UTF8_BOM, is_ascii_compatible, normalize_encoding
from .errors import ReaderDecodeError, ReaderIOError
from .models import source_name

if TYPE_CHECKING:
    from collections.abc import Iterator

logger = logging.getLogger(__name__)

DEFAULT_BUFFER_SIZE = 4096

CR = 0x0D
LF = 0x0A

_TERMINATOR_BYTES = re.compile(rb"[\r\n]")
_TERMINATOR_TEXT = re.compile(r"\r\n|\r|\n")

DECODE_ERROR_POLICIES = ("strict", "replace")


class LineSegmenter:
    """
    Read logical lines from a binary stream.

    Usage:
        with LineSegmenter.open("data.csv") as lines:
            for line in lines:
                ...
    """

    def __init__(
        self,
        source: BinaryIO,
        encoding: str = "utf-8",
        *,
        buffer_size: int = DEFAULT_BUFFER_SIZE,
        errors: str = "strict",
        name: str | None = None,
    ) -> None:
        if buffer_size < 1:
            raise ValueError(f"buffer_size must be positive, got {buffer_size}")
        if errors not in DECODE_ERROR_POLICIES:
            raise ValueError(f"errors must be one of {DECODE_ERROR_POLICIES}, got {errors!r}")

        codec = normalize_encoding(encoding)
        if not is_ascii_compatible(codec):
            raise ValueError(f"Encoding {encoding!r} is not ASCII-compatible")

        self.source = source
        self.name = name or source_name(source)
        self.buffer_size = buffer_size
        self.errors = errors
        self.encoding = codec
        # BOM is handled once at stream start; lines are decoded as plain UTF-8
        self._skip_bom = codec == "utf-8-sig"
        self._decode_as = "utf-8" if self._skip_bom else codec

        self._reset()

    @classmethod
    def open(
        cls,
        path: Path | str,
        encoding: str = "utf-8",
        *,
        buffer_size: int = DEFAULT_BUFFER_SIZE,
        errors: str = "strict",
    ) -> LineSegmenter:
        """
        Open a file for line segmentation.

        Raises:
            ReaderIOError: If the file cannot be opened
        """
        path = Path(path)
        try:
            handle = path.open("rb")
        except OSError as e:
            raise ReaderIOError(
                f"Cannot open {path}: {e.strerror or e}",
                code="CSV-IO-001",
                source=str(path),
            ) from e

        try:
            return cls(handle, encoding, buffer_size=buffer_size, errors=errors, name=str(path))
        except Exception:
            handle.close()
            raise

    def _reset(self) -> None:
        self._buffer = b""
        self._pos = 0
        self._at_eof = False
        self._cr_was_seen = False
        self._at_start = True
        self.line_count = 0

    # =========================================================================
    # Reading
    # =========================================================================

    def _read(self) -> bytes:
        try:
            return self.source.read(self.buffer_size)
        except OSError as e:
            raise ReaderIOError(
                f"Read from {self.name} failed: {e}",
                code="CSV-IO-002",
                source=self.name,
                line_no=self.line_count + 1,
            ) from e

    def _fill(self) -> bool:
        """Refill the buffer. Returns False at end of stream."""
        data = self._read()

        if self._at_start:
            self._at_start = False
            if self._skip_bom:
                # The BOM may be spread over several reads with a small buffer
                while data and len(data) < len(UTF8_BOM) and UTF8_BOM.startswith(data):
                    more = self._read()
                    if not more:
                        break
                    data += more
                if data.startswith(UTF8_BOM):
                    data = data[len(UTF8_BOM) :]
                    if not data:
                        return self._fill()

        if not data:
            self._at_eof = True
            self._buffer = b""
            self._pos = 0
            return False

        self._buffer = data
        self._pos = 0
        return True

    def next_line(self) -> str | None:
        """
        Return the next logical line, or None at end of stream.

        Raises:
            ReaderIOError: If reading from the source fails
            ReaderDecodeError: If the line is invalid for the encoding
                (only with errors="strict")
        """
        if self._at_eof:
            return None

        chunks: list[bytes] = []

        while True:
            if self._pos >= len(self._buffer) and not self._fill():
                break

            # LF directly after CR belongs to the previous terminator,
            # even when the CR ended the previous buffer.
            if self._cr_was_seen:
                self._cr_was_seen = False
                if self._buffer[self._pos] == LF:
                    self._pos += 1
                    continue

            match = _TERMINATOR_BYTES.search(self._buffer, self._pos)
            if match is None:
                chunks.append(self._buffer[self._pos :])
                self._pos = len(self._buffer)
                continue

            end = match.start()
            chunks.append(self._buffer[self._pos : end])
            self._cr_was_seen = self._buffer[end] == CR
            self._pos = end + 1
            return self._decode(b"".join(chunks))

        # End of stream: a trailing line without terminator is returned once
        data = b"".join(chunks)
        if data:
            return self._decode(data)
        return None

    def _decode(self, data: bytes) -> str:
        self.line_count += 1
        try:
            return data.decode(self._decode_as, errors=self.errors)
        except UnicodeDecodeError as e:
            raise ReaderDecodeError(
                f"Line {self.line_count} is not valid {self.encoding}: {e.reason} "
                f"at byte {e.start}",
                encoding=self.encoding,
                source=self.name,
                line_no=self.line_count,
                context={"byte_offset": e.start},
            ) from e

    def __iter__(self) -> Iterator[str]:
        while True:
            line = self.next_line()
            if line is None:
                return
            yield line

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def rewind(self) -> None:
        """
        Reposition to the beginning of the stream.

        Raises:
            ReaderIOError: If the source is not seekable
        """
        try:
            self.source.seek(0)
        except (OSError, AttributeError, ValueError) as e:
            raise ReaderIOError(
                f"Cannot rewind {self.name}: source is not seekable",
                code="CSV-IO-003",
                source=self.name,
            ) from e
        logger.debug("Rewound %s", self.name)
        self._reset()

    def close(self) -> None:
        """Close the underlying source."""
        self.source.close()

    def __enter__(self) -> LineSegmenter:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def split_lines(text: str) -> Iterator[str]:
    """
    Split already-decoded text into logical lines.

    Uses the same rules as LineSegmenter: CR, LF and CRLF terminate a line,
    a trailing terminator does not start an extra line, and "" yields nothing.
    """
    if not text:
        return
    lines = _TERMINATOR_TEXT.split(text)
    if lines[-1] == "":
        lines.pop()
    yield from lines
