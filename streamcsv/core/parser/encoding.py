"""
Encoding detection for CSV files.

The line segmenter splits on single CR/LF bytes before decoding, so only
ASCII-compatible encodings can be read:
- UTF-8 with BOM
- UTF-8 without BOM
- single-byte code pages (Windows-1252, Latin-1, ...)
- ASCII-compatible multi-byte encodings (Shift_JIS, EUC-KR, GB18030, ...)

This module provides encoding detection using charset-normalizer.
"""

from __future__ import annotations

import codecs

from charset_normalizer import from_bytes

# Size of data to use for encoding detection (8KB is usually sufficient)
DETECTION_SAMPLE_SIZE = 8192

UTF8_BOM = codecs.BOM_UTF8


def detect_encoding(data: bytes) -> str:
    """
    Detect encoding of CSV file data.

    Detection priority:
    1. UTF-8 BOM (explicit marker)
    2. charset-normalizer detection, restricted to ASCII-compatible results
    3. Fallback to UTF-8 if the sample decodes, else Windows-1252

    Args:
        data: First ~8KB of file content (or full file if smaller)

    Returns:
        Python codec name, e.g. "utf-8-sig", "utf-8" or "windows-1252"
    """
    if data.startswith(UTF8_BOM):
        return "utf-8-sig"

    sample = data[:DETECTION_SAMPLE_SIZE]

    results = from_bytes(sample)

    if results:
        best = results.best()
        if best is not None:
            encoding = best.encoding.lower()

            # Normalize encoding names
            if encoding in ("ascii", "utf-8", "utf8", "utf_8"):
                return "utf-8"

            if encoding in ("cp1252", "windows-1252", "latin-1", "latin_1", "iso-8859-1"):
                return "windows-1252"

            if is_ascii_compatible(encoding):
                return encoding

    try:
        sample.decode("utf-8")
        return "utf-8"
    except UnicodeDecodeError:
        return "windows-1252"


def is_ascii_compatible(encoding: str) -> bool:
    """
    Check that CR and LF encode to the single bytes 0x0D and 0x0A.

    Returns False for unknown codec names.
    """
    try:
        encoded = "\r\n".encode(encoding)
    except LookupError:
        return False
    # utf-8-sig prepends a BOM on the first encode
    if encoded.startswith(UTF8_BOM):
        encoded = encoded[len(UTF8_BOM) :]
    return encoded == b"\r\n"


def normalize_encoding(encoding: str) -> str:
    """
    Return the canonical codec name.

    Raises:
        LookupError: If Python does not know the codec
    """
    return codecs.lookup(encoding).name
