"""Export utilities for cleaned lead numbers and filtered rows."""
from __future__ import annotations

import codecs
import csv
import io
import logging
from pathlib import Path
from typing import Any, Iterable, List, MutableMapping, Optional, Sequence, Union

import pandas as pd

from ..exceptions import ExportError
from ..models import DEFAULT_PLACEHOLDER_NAME, ExportRecord, ExportSettings, Row
from .loaders import UnsupportedFileTypeError

LOGGER = logging.getLogger(__name__)

PathLike = Union[str, Path]

SMS_MAX_LENGTH = 160

OMNICHAT_NUMBER_HEADER = "fullNumber"
ZENVIA_NUMBER_HEADER = "celular"
ZENVIA_SMS_HEADER = "sms"
NAME_HEADER = "Nome"


def derive_first_name(name: Optional[str], placeholder: str = DEFAULT_PLACEHOLDER_NAME) -> str:
    """Return the capitalised first word of ``name``, or ``placeholder`` when blank."""

    parts = (name or "").split()
    if not parts:
        return placeholder
    return parts[0].capitalize()


def _as_records(records: Iterable[Union[ExportRecord, str]]) -> List[ExportRecord]:
    return [record if isinstance(record, ExportRecord) else ExportRecord(number=record) for record in records]


def _render(rows: Iterable[Sequence[str]], delimiter: str) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, delimiter=delimiter, lineterminator="\n")
    writer.writerows(rows)
    return buffer.getvalue()


def format_omnichat(
    records: Iterable[Union[ExportRecord, str]],
    *,
    include_names: bool = False,
    placeholder: str = DEFAULT_PLACEHOLDER_NAME,
) -> str:
    """Render numbers in the Omnichat bulk-import layout (``fullNumber[,Nome]``)."""

    header = [OMNICHAT_NUMBER_HEADER]
    if include_names:
        header.append(NAME_HEADER)

    lines: List[List[str]] = [header]
    for record in _as_records(records):
        line = [record.number]
        if include_names:
            line.append(derive_first_name(record.name, placeholder))
        lines.append(line)
    return _render(lines, ",")


def validate_sms_text(sms_text: str) -> str:
    text = (sms_text or "").strip()
    if not text:
        raise ExportError("Zenvia exports require an SMS text")
    if len(text) > SMS_MAX_LENGTH:
        raise ExportError(f"SMS text has {len(text)} characters; the limit is {SMS_MAX_LENGTH}")
    return text


def format_zenvia(
    records: Iterable[Union[ExportRecord, str]],
    sms_text: str,
    *,
    include_names: bool = False,
    placeholder: str = DEFAULT_PLACEHOLDER_NAME,
) -> str:
    """Render numbers in the Zenvia bulk-SMS layout (``celular;sms[;Nome]``)."""

    message = validate_sms_text(sms_text)
    header = [ZENVIA_NUMBER_HEADER, ZENVIA_SMS_HEADER]
    if include_names:
        header.append(NAME_HEADER)

    lines: List[List[str]] = [header]
    for record in _as_records(records):
        line = [record.number, message]
        if include_names:
            line.append(derive_first_name(record.name, placeholder))
        lines.append(line)
    return _render(lines, ";")


def format_number_list(records: Iterable[Union[ExportRecord, str]]) -> str:
    """Plain newline-separated list of numbers."""

    numbers = [record.number for record in _as_records(records)]
    return "\n".join(numbers) + ("\n" if numbers else "")


def render_export(records: Iterable[Union[ExportRecord, str]], settings: ExportSettings) -> str:
    """Serialise ``records`` according to ``settings.format``."""

    if settings.format == "omnichat":
        return format_omnichat(
            records, include_names=settings.include_names, placeholder=settings.placeholder_name
        )
    if settings.format == "zenvia":
        return format_zenvia(
            records,
            settings.sms_text,
            include_names=settings.include_names,
            placeholder=settings.placeholder_name,
        )
    if settings.format == "txt":
        return format_number_list(records)
    raise ExportError(f"Unsupported number export format '{settings.format}'")


def encode_export(text: str, encoding: str = "utf-8") -> bytes:
    """Encode export text; characters the target encoding lacks become ``?``."""

    try:
        codecs.lookup(encoding)
    except LookupError as exc:
        raise ExportError(f"Unknown export encoding '{encoding}'") from exc
    return text.encode(encoding, errors="replace")


def write_export(path: PathLike, text: str, *, encoding: str = "utf-8") -> Path:
    """Write encoded export text to ``path``, creating parent folders."""

    destination = Path(path)
    destination.parent.mkdir(parents=True, exist_ok=True)
    destination.write_bytes(encode_export(text, encoding))
    LOGGER.info("Wrote %s (%s)", destination, encoding)
    return destination


def rows_to_dataframe(rows: Sequence[Row], headers: Optional[Sequence[str]] = None) -> pd.DataFrame:
    """Convert filtered rows into a :class:`pandas.DataFrame` keeping column order."""

    columns: List[str] = list(headers or [])
    for row in rows:
        for column in row:
            if column not in columns:
                columns.append(column)
    return pd.DataFrame([dict(row) for row in rows], columns=columns).fillna("")


def export_rows(
    rows: Sequence[Row],
    path: PathLike,
    *,
    headers: Optional[Sequence[str]] = None,
    sheet_name: str = "Leads",
    exporter_kwargs: Optional[MutableMapping[str, Any]] = None,
) -> Path:
    """Write the filtered table to a CSV, TSV or Excel file."""

    dataframe = rows_to_dataframe(rows, headers)
    output_path = Path(path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    _write_dataframe(dataframe, output_path, sheet_name=sheet_name, exporter_kwargs=exporter_kwargs)
    LOGGER.info("Wrote %s rows to %s", len(dataframe), output_path)
    return output_path


def _write_dataframe(
    dataframe: pd.DataFrame,
    path: Path,
    *,
    sheet_name: str,
    exporter_kwargs: Optional[MutableMapping[str, Any]],
) -> None:
    exporter_kwargs = dict(exporter_kwargs or {})
    suffix = path.suffix.lower()

    if suffix in {".csv", ".tsv"}:
        if suffix == ".tsv":
            exporter_kwargs.setdefault("sep", "\t")
        exporter_kwargs.setdefault("encoding", "utf-8")
        dataframe.to_csv(path, index=False, **exporter_kwargs)
        return

    if suffix in {".xlsx", ".xlsm"}:
        engine = exporter_kwargs.pop("engine", None) or "openpyxl"
        dataframe.to_excel(path, index=False, sheet_name=sheet_name, engine=engine, **exporter_kwargs)
        return

    raise UnsupportedFileTypeError(f"Unsupported export file extension: {suffix}")


__all__ = [
    "SMS_MAX_LENGTH",
    "derive_first_name",
    "encode_export",
    "export_rows",
    "format_number_list",
    "format_omnichat",
    "format_zenvia",
    "render_export",
    "rows_to_dataframe",
    "validate_sms_text",
    "write_export",
]
