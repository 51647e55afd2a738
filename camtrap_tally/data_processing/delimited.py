from __future__ import annotations

import csv
import io
import logging
import re
from datetime import date, datetime
from pathlib import Path
from typing import Iterator, List, Optional, Tuple, Union

from camtrap_tally.data_processing.errors import FieldFormatError, SourceIOError

log = logging.getLogger(__name__)

# Spreadsheet exports: Excel quoting with ';' between fields
DELIMITER = ";"
LINE_TERMINATOR = "\r\n"
UTF8_BOM = "\ufeff"

TIMESTAMP_RE = re.compile(r"^(\d{4})\.(\d{2})\.(\d{1,2}) (\d{1,2}):(\d{2})$")
DATE_RE = re.compile(r"^(\d{4})\.(\d{2})\.(\d{2})$")
NON_NUMERIC_RE = re.compile(r"[^0-9.]")


def read_source(path: Union[str, Path]) -> str:
    """Read a whole input file as UTF-8, dropping a leading byte-order mark."""
    path = Path(path)
    try:
        with path.open("r", encoding="utf-8-sig", newline="") as f:
            return f.read()
    except (OSError, UnicodeDecodeError) as e:
        log.error("Couldn't open file: %s", path.name)
        raise SourceIOError(path.name, e) from e


def write_output(path: Union[str, Path], text: str) -> None:
    path = Path(path)
    try:
        with path.open("w", encoding="utf-8", newline="") as f:
            f.write(text)
    except OSError as e:
        log.error("Couldn't write file: %s", path.name)
        raise SourceIOError(path.name, e) from e


def iter_rows(text: str) -> Iterator[Tuple[int, List[str]]]:
    """
    Yields (1-based record number, fields) for every record.
    A blank line in the middle of the text is an empty record; quoted fields
    may contain the delimiter or line breaks.
    """
    if text.startswith(UTF8_BOM):
        text = text[1:]
    reader = csv.reader(io.StringIO(text, newline=""), delimiter=DELIMITER)
    for number, row in enumerate(reader, start=1):
        yield number, row


def _format_error(field: str, raw: str, row: Optional[int], source: Optional[str]) -> FieldFormatError:
    log.error("File %s line %s: cannot parse %s %r", source or "<text>", row, field, raw)
    return FieldFormatError(field, raw, row, source)


def parse_camera_id(raw: str, row: Optional[int] = None, source: Optional[str] = None) -> int:
    # Exports sometimes leave a BOM or stray letters in front of the number
    cleaned = NON_NUMERIC_RE.sub("", raw)
    try:
        return int(cleaned)
    except ValueError:
        raise _format_error("camera number", raw, row, source) from None


def parse_timestamp(raw: str, row: Optional[int] = None, source: Optional[str] = None) -> datetime:
    m = TIMESTAMP_RE.match(raw.strip())
    if not m:
        raise _format_error("date and time", raw, row, source)
    year, month, day, hour, minute = (int(g) for g in m.groups())
    try:
        return datetime(year, month, day, hour, minute)
    except ValueError:
        raise _format_error("date and time", raw, row, source) from None


def parse_date(raw: str, row: Optional[int] = None, source: Optional[str] = None) -> date:
    m = DATE_RE.match(raw.strip())
    if not m:
        raise _format_error("date", raw, row, source)
    year, month, day = (int(g) for g in m.groups())
    try:
        return date(year, month, day)
    except ValueError:
        raise _format_error("date", raw, row, source) from None


def format_timestamp(moment: datetime) -> str:
    # Zero-padded month, bare day and hour: 2021.03.7 9:05
    return f"{moment.year:04d}.{moment.month:02d}.{moment.day} {moment.hour}:{moment.minute:02d}"
