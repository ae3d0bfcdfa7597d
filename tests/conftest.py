"""
Pytest configuration and fixtures for streamcsv tests.

Provides fixtures for:
- Sample CSV files covering LF, CRLF and CR line endings, unusual
  delimiters, non-Latin text and quoted fields spanning lines
- Large file generation for streaming checks
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import pytest

if TYPE_CHECKING:
    from collections.abc import Iterator

# =============================================================================
# Sample File Fixtures
# =============================================================================


@pytest.fixture
def samples_dir(tmp_path: Path) -> Path:
    """Directory that holds the generated sample files."""
    path = tmp_path / "samples"
    path.mkdir()
    return path


def _write(directory: Path, name: str, content: bytes) -> Path:
    path = directory / name
    path.write_bytes(content)
    return path


@pytest.fixture
def simple_lf(samples_dir: Path) -> Path:
    """Simple CSV file using LF line termination."""
    return _write(samples_dir, "simple_lf.csv", b"name,age\nalice,30\nbob,25\n")


@pytest.fixture
def emoji_delimited(samples_dir: Path) -> Path:
    """Unusual separator character, missing the LF on the last line."""
    content = "a\U0001f600b\U0001f600c\n1\U0001f6002\U0001f6003"
    return _write(samples_dir, "emoji_delimited.csv", content.encode("utf-8"))


@pytest.fixture
def cjk_crlf(samples_dir: Path) -> Path:
    """Korean, Japanese and Chinese text using CRLF line termination."""
    content = "이름,名前,名字\r\n김민수,山田太郎,王小明\r\n"
    return _write(samples_dir, "cjk_crlf.csv", content.encode("utf-8"))


@pytest.fixture
def quoted_crlf(samples_dir: Path) -> Path:
    """CRLF file with a quoted field containing a CRLF."""
    content = b'id,note\r\n1,"first\r\nsecond"\r\n2,plain\r\n'
    return _write(samples_dir, "quoted_crlf.csv", content)


@pytest.fixture
def spaces_and_quotes(samples_dir: Path) -> Path:
    """Field combinations with spaces and quotes."""
    content = b'  "  first  "  , second ,"third",  "fourth"  \n'
    return _write(samples_dir, "spaces_and_quotes.csv", content)


@pytest.fixture
def tab_crlf(samples_dir: Path) -> Path:
    """Cars for sale with a TAB separator and CRLF line termination."""
    content = b'make\tmodel\tprice\r\nFord\t"F-150, XL"\t27000\r\nVolvo\t"V70 ""R"""\t\r\n'
    return _write(samples_dir, "tab_crlf.csv", content)


@pytest.fixture
def cr_only(samples_dir: Path) -> Path:
    """Classic Mac line endings."""
    return _write(samples_dir, "cr_only.csv", b"a,b\rc,d\r")


@pytest.fixture
def unterminated_quote(samples_dir: Path) -> Path:
    """Quoted field that is still open at end of file."""
    return _write(samples_dir, "unterminated_quote.csv", b'a,b\n1,"never\nclosed\n')


@pytest.fixture
def windows1252(samples_dir: Path) -> Path:
    """Windows-1252 encoded file with Umlaute."""
    content = "Name;Straße\nMüller;Hauptstraße 1\n"
    return _write(samples_dir, "windows1252.csv", content.encode("windows-1252"))


@pytest.fixture
def invalid_utf8(samples_dir: Path) -> Path:
    """UTF-8 file with an invalid byte on line 2."""
    return _write(samples_dir, "invalid_utf8.csv", b"ok,fine\nbad\xff,x\n")


@pytest.fixture
def empty_file(samples_dir: Path) -> Path:
    """Zero-byte file."""
    return _write(samples_dir, "empty.csv", b"")


# =============================================================================
# Large File Fixtures
# =============================================================================


@pytest.fixture(scope="session")
def large_file_20k(tmp_path_factory: pytest.TempPathFactory) -> Iterator[Path]:
    """Generate a 20k record file, every 100th record spanning two lines."""
    tmp_dir = tmp_path_factory.mktemp("large")
    file_path = tmp_dir / "large_20k.csv"

    _generate_large_file(file_path, num_rows=20_000)

    yield file_path


def _generate_large_file(path: Path, num_rows: int) -> None:
    lines = ["id,name,comment"]
    for i in range(1, num_rows + 1):
        comment = f'"multi\nline {i}"' if i % 100 == 0 else f'"say ""{i}"""'
        lines.append(f"{i},name {i},{comment}")

    content = "\r\n".join(lines) + "\r\n"
    path.write_bytes(content.encode("utf-8"))
