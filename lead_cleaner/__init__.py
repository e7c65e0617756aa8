"""Top-level package for the Brazilian lead list cleaner."""

from . import ingestion, models  # noqa: F401
from .exceptions import EmptyResultWarning, ExportError, InputParseError
from .models import (
    DateRange,
    ExportRecord,
    ExportSettings,
    FilterOptions,
    FilterResult,
    FilterStats,
    PhoneValidationIssue,
    effective_phone,
    identifier,
)
from .phone import (
    clean_digits,
    format_phone_number,
    format_phone_number_for_display,
    get_state_from_phone_number,
    is_valid_brazilian_number,
    validate_brazilian_phone_number,
)
from .pipeline import LeadFilterPipeline, extract_phone_numbers

__all__ = [
    "DateRange",
    "EmptyResultWarning",
    "ExportError",
    "ExportRecord",
    "ExportSettings",
    "FilterOptions",
    "FilterResult",
    "FilterStats",
    "InputParseError",
    "LeadFilterPipeline",
    "PhoneValidationIssue",
    "clean_digits",
    "effective_phone",
    "extract_phone_numbers",
    "format_phone_number",
    "format_phone_number_for_display",
    "get_state_from_phone_number",
    "identifier",
    "is_valid_brazilian_number",
    "validate_brazilian_phone_number",
    "ingestion",
    "pipeline",
]
