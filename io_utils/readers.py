import csv
import io
import logging
import warnings
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List

import pandas as pd

from config import ALLOWED_EXTENSIONS, MAX_UPLOAD_BYTES
from matching.normalize import clean_cell, normalize_header

logger = logging.getLogger(__name__)

INVALID_FILE = "Please upload a valid CSV file."
TOO_LARGE = f"File is too large (max {MAX_UPLOAD_BYTES // (1024 * 1024)} MB)."
EMPTY_FILE = "The CSV file is empty."
UNREADABLE = "An error occurred while reading the CSV file."

_UTF16_BOMS = (b"\xff\xfe", b"\xfe\xff")


class FileRejected(ValueError):
    """A whole file was refused before any of its rows were processed."""

    def __init__(self, name: str, message: str):
        super().__init__(message)
        self.name = name
        self.message = message


@dataclass
class CsvUpload:
    name: str
    data: bytes

    @classmethod
    def from_path(cls, path) -> "CsvUpload":
        path = Path(path)
        return cls(name=path.name, data=path.read_bytes())


@dataclass
class ParsedCsv:
    name: str
    headers: List[str] = field(default_factory=list)
    rows: List[Dict[str, str]] = field(default_factory=list)


def _decode(data: bytes) -> str:
    if data.startswith(_UTF16_BOMS):
        text = data.decode("utf-16", errors="replace")
    else:
        text = data.decode("utf-8-sig", errors="replace")
    return text.replace("\x00", "")


def _header_width(text: str) -> int:
    """Width of the first non-blank record. Reads the whole text strictly so
    an unterminated quote raises csv.Error instead of eating the rest."""
    width = 0
    for fields in csv.reader(io.StringIO(text), strict=True):
        if not width and (len(fields) > 1 or (fields and fields[0].strip())):
            width = len(fields)
    return width


def _build_row(columns: List[str], values) -> Dict[str, str]:
    row: Dict[str, str] = {}
    for header, raw in zip(columns, values):
        value = clean_cell(raw)
        if header not in row or (value and not row[header]):
            row[header] = value
    return row


def read_upload(upload: CsvUpload) -> ParsedCsv:
    """
    Validate and parse one uploaded CSV into normalized rows.
    Raises FileRejected for wrong extension, oversize, empty or unreadable files.
    """
    name = upload.name or ""
    if not name.lower().endswith(ALLOWED_EXTENSIONS):
        raise FileRejected(name, INVALID_FILE)
    if len(upload.data) > MAX_UPLOAD_BYTES:
        raise FileRejected(name, TOO_LARGE)

    text = _decode(upload.data)
    if not text.strip():
        raise FileRejected(name, EMPTY_FILE)

    try:
        width = _header_width(text)
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", category=pd.errors.ParserWarning)
            df = pd.read_csv(
                io.StringIO(text),
                header=None,
                dtype=str,
                keep_default_na=False,
                skip_blank_lines=True,
                engine="python",
                on_bad_lines=lambda fields: fields[:width],
            )
    except pd.errors.EmptyDataError:
        raise FileRejected(name, EMPTY_FILE)
    except (pd.errors.ParserError, UnicodeError, csv.Error) as e:
        logger.warning("Could not parse %s: %s", name, e)
        raise FileRejected(name, UNREADABLE)

    df = df.fillna("")
    headers = [normalize_header(clean_cell(c)) for c in df.iloc[0]]
    rows = []
    for values in df.iloc[1:].itertuples(index=False, name=None):
        row = _build_row(headers, values)
        if any(row.values()):
            rows.append(row)
    return ParsedCsv(name=name, headers=headers, rows=rows)
