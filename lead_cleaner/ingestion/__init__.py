"""Utilities for importing lead exports and exporting cleaned numbers."""

from .exporters import (
    derive_first_name,
    encode_export,
    export_rows,
    format_number_list,
    format_omnichat,
    format_zenvia,
    render_export,
    write_export,
)
from .loaders import UnsupportedFileTypeError, load_rows, parse_csv_row, parse_csv_text
from .models import ParsedCsv

__all__ = [
    "ParsedCsv",
    "UnsupportedFileTypeError",
    "derive_first_name",
    "encode_export",
    "export_rows",
    "format_number_list",
    "format_omnichat",
    "format_zenvia",
    "load_rows",
    "parse_csv_row",
    "parse_csv_text",
    "render_export",
    "write_export",
]
