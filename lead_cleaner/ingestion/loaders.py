"""Utilities for loading lead rows from CSV exports and spreadsheets."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, MutableMapping, Optional, Tuple, Union

import pandas as pd

from .models import ParsedCsv

LOGGER = logging.getLogger(__name__)

PathLike = Union[str, Path]

_CSV_SUFFIXES = {".csv", ".txt"}
_EXCEL_SUFFIXES = {".xls", ".xlsx", ".xlsm"}
_TEXT_ENCODINGS: Tuple[str, ...] = ("utf-8-sig", "cp1252")


class UnsupportedFileTypeError(ValueError):
    """Raised when an unsupported file format is passed to the loader."""


def parse_csv_row(line: str, delimiter: str = ",") -> List[str]:
    """Split ``line`` on ``delimiter``, ignoring delimiters inside double quotes.

    Quote characters only toggle the quoted state and are dropped; escaped
    quotes (``""``) are not supported.
    """

    cells: List[str] = []
    cell: List[str] = []
    in_quotes = False
    for char in line:
        if char == '"':
            in_quotes = not in_quotes
        elif char == delimiter and not in_quotes:
            cells.append("".join(cell))
            cell = []
        else:
            cell.append(char)
    cells.append("".join(cell))
    return cells


def parse_csv_text(text: str, delimiter: str = ",") -> ParsedCsv:
    """Parse a lead export held in memory.

    The first non-blank line is the header. Blank lines are ignored and rows
    whose field count differs from the header are dropped and counted in
    :attr:`ParsedCsv.skipped`.
    """

    lines = [line for line in text.lstrip("\ufeff").splitlines() if line.strip()]
    if not lines:
        return ParsedCsv()

    headers = [header.strip() for header in parse_csv_row(lines[0], delimiter)]
    parsed = ParsedCsv(headers=headers)
    for number, line in enumerate(lines[1:], start=2):
        values = parse_csv_row(line, delimiter)
        if len(values) != len(headers):
            LOGGER.debug("Skipping line %s: expected %s fields, found %s", number, len(headers), len(values))
            parsed.skipped += 1
            continue
        parsed.rows.append(dict(zip(headers, values)))

    if parsed.skipped:
        LOGGER.warning("Skipped %s malformed rows", parsed.skipped)
    return parsed


def load_rows(
    path: PathLike,
    *,
    sheet_name: Union[str, int] = 0,
    loader_kwargs: Optional[MutableMapping[str, Any]] = None,
) -> ParsedCsv:
    """Load lead rows from a CSV export or an Excel workbook.

    Parameters
    ----------
    path:
        Path to the CSV/XLSX file to be loaded.
    sheet_name:
        Sheet selector passed to :func:`pandas.read_excel`. Ignored for CSV files.
    loader_kwargs:
        Extra keyword arguments forwarded to :func:`pandas.read_excel`.
    """

    path_obj = Path(path)
    suffix = path_obj.suffix.lower()

    if suffix in _CSV_SUFFIXES:
        text, encoding = _read_text(path_obj)
        parsed = parse_csv_text(text)
        parsed.encoding = encoding
    elif suffix in _EXCEL_SUFFIXES:
        parsed = _read_workbook(path_obj, sheet_name=sheet_name, loader_kwargs=loader_kwargs)
    else:
        raise UnsupportedFileTypeError(f"Unsupported file extension: {path_obj.suffix}")

    LOGGER.info("Loaded %s rows with %s columns from %s", len(parsed.rows), len(parsed.headers), path_obj.name)
    return parsed


def _read_text(path: Path) -> Tuple[str, str]:
    payload = path.read_bytes()
    for encoding in _TEXT_ENCODINGS:
        try:
            return payload.decode(encoding), encoding
        except UnicodeDecodeError:
            LOGGER.debug("%s is not valid %s", path.name, encoding)
    return payload.decode("latin-1"), "latin-1"


def _read_workbook(
    path: Path,
    *,
    sheet_name: Union[str, int],
    loader_kwargs: Optional[MutableMapping[str, Any]],
) -> ParsedCsv:
    loader_kwargs = dict(loader_kwargs or {})
    engine = loader_kwargs.pop("engine", None)
    if engine is None and path.suffix.lower() != ".xls":
        engine = "openpyxl"

    dataframe = pd.read_excel(
        path,
        sheet_name=sheet_name,
        engine=engine,
        dtype=str,
        keep_default_na=False,
        **loader_kwargs,
    ).fillna("")

    headers = [str(column).strip() for column in dataframe.columns]
    rows: List[Dict[str, str]] = []
    for values in dataframe.itertuples(index=False, name=None):
        record = {header: _clean_cell(value) for header, value in zip(headers, values)}
        if _row_is_empty(record.values()):
            continue
        rows.append(record)
    return ParsedCsv(headers=headers, rows=rows)


def _clean_cell(value: Any) -> str:
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return ""
    return str(value)


def _row_is_empty(values: Iterable[str]) -> bool:
    return all(not value.strip() for value in values)


__all__ = ["load_rows", "parse_csv_row", "parse_csv_text", "UnsupportedFileTypeError"]
