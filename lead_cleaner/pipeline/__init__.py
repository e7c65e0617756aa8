"""Filtering of lead rows and derivation of the phone export set."""

from .chunks import DEFAULT_CHUNK_SIZE, filter_in_chunks, iter_chunks, process_in_chunks
from .dates import parse_conversion_date, parse_date_bound
from .extraction import extract_export_records, extract_phone_numbers
from .service import LeadFilterPipeline, compile_identifier_patterns

__all__ = [
    "DEFAULT_CHUNK_SIZE",
    "LeadFilterPipeline",
    "compile_identifier_patterns",
    "extract_export_records",
    "extract_phone_numbers",
    "filter_in_chunks",
    "iter_chunks",
    "parse_conversion_date",
    "parse_date_bound",
    "process_in_chunks",
]
