"""Lead filter pipeline that narrows a row set and collects phone statistics."""
from __future__ import annotations

import logging
import re
from typing import Dict, Iterable, List, Optional, Pattern, Sequence, Tuple

from ..exceptions import EmptyResultWarning, InputParseError
from ..models import (
    DateRange,
    FilterOptions,
    FilterResult,
    FilterStats,
    Row,
    conversion_date,
    effective_phone,
    has_phone,
    identifier,
    with_formatted_phone,
)
from ..phone import count_valid_numbers, format_phone_number, is_valid_brazilian_number
from .chunks import DEFAULT_CHUNK_SIZE, ProgressCallback, filter_in_chunks, process_in_chunks
from .dates import in_date_range, parse_conversion_date
from .extraction import extract_export_records

LOGGER = logging.getLogger(__name__)


def compile_identifier_patterns(regex_filter: str) -> List[Pattern[str]]:
    """Compile every ``|``-separated segment of ``regex_filter`` case-insensitively."""

    patterns: List[Pattern[str]] = []
    for segment in regex_filter.split("|"):
        try:
            patterns.append(re.compile(segment, re.IGNORECASE))
        except re.error as exc:
            raise InputParseError(
                f"Invalid identifier pattern {segment!r}: {exc}",
                stage="regex",
                value=regex_filter,
            ) from exc
    return patterns


class LeadFilterPipeline:
    """Applies the date, identifier and phone filters to a collection of rows.

    Every stage walks its input in chunks of ``chunk_size`` rows and reports
    ``(processed, total)`` to the progress callback after each chunk. Input rows
    are never modified; formatting a number yields a new row.
    """

    def __init__(
        self,
        *,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> None:
        if chunk_size <= 0:
            raise ValueError(f"Chunk size must be positive, got {chunk_size}")
        self._chunk_size = chunk_size
        self._progress_callback = progress_callback

    @property
    def chunk_size(self) -> int:
        return self._chunk_size

    def apply(
        self,
        rows: Iterable[Row],
        options: FilterOptions,
        *,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> FilterResult:
        """Run one complete filter pass over ``rows``."""

        callback = progress_callback or self._progress_callback
        source: List[Row] = list(rows)
        result = FilterResult(stats=FilterStats(total_records=len(source)))
        current: List[Row] = source

        if options.date_range.is_active:
            current = self._filter_by_date(current, options.date_range, callback)

        if options.regex_filter.strip():
            current = self._filter_by_identifier(current, options.regex_filter.strip(), result, callback)

        if options.remove_empty:
            current = filter_in_chunks(
                current, has_phone, chunk_size=self._chunk_size, progress_callback=callback
            )
            LOGGER.debug("%s rows left after removing empty phones", len(current))

        if options.processes_phones:
            current, seen = self._process_phones(current, options, result.stats, callback)
            result.stats.valid_phone_numbers = len(seen)
        else:
            result.stats.valid_phone_numbers = count_valid_numbers(effective_phone(row) for row in current)

        result.rows = current
        result.stats.filtered_records = len(current)
        result.export_records = extract_export_records(current)
        self._check_empty(result)

        LOGGER.info(
            "Filtered %s of %s rows (%s invalid, %s duplicate, %s valid numbers)",
            result.stats.filtered_records,
            result.stats.total_records,
            result.stats.invalid_numbers,
            result.stats.duplicate_numbers,
            result.stats.valid_phone_numbers,
        )
        return result

    def _filter_by_date(
        self,
        rows: Sequence[Row],
        date_range: DateRange,
        callback: Optional[ProgressCallback],
    ) -> List[Row]:
        kept = filter_in_chunks(
            rows,
            lambda row: in_date_range(parse_conversion_date(conversion_date(row)), date_range),
            chunk_size=self._chunk_size,
            progress_callback=callback,
        )
        LOGGER.debug("%s rows left after date range %s..%s", len(kept), date_range.start, date_range.end)
        return kept

    def _filter_by_identifier(
        self,
        rows: Sequence[Row],
        regex_filter: str,
        result: FilterResult,
        callback: Optional[ProgressCallback],
    ) -> List[Row]:
        try:
            patterns = compile_identifier_patterns(regex_filter)
        except InputParseError as exc:
            LOGGER.warning("Skipping identifier filter: %s", exc)
            result.errors.append(exc)
            return list(rows)

        kept = filter_in_chunks(
            rows,
            lambda row: any(pattern.search(identifier(row)) for pattern in patterns),
            chunk_size=self._chunk_size,
            progress_callback=callback,
        )
        LOGGER.debug("%s rows left after identifier filter %r", len(kept), regex_filter)
        return kept

    def _process_phones(
        self,
        rows: Sequence[Row],
        options: FilterOptions,
        stats: FilterStats,
        callback: Optional[ProgressCallback],
    ) -> Tuple[List[Row], Dict[str, None]]:
        seen: Dict[str, None] = {}

        def handle(row: Row) -> Optional[Row]:
            phone = effective_phone(row)
            if not phone:
                return row

            number = phone
            if options.format_numbers:
                number = format_phone_number(phone)
                row = with_formatted_phone(row, number)

            if not is_valid_brazilian_number(number):
                stats.invalid_numbers += 1
                return None if options.remove_invalid else row

            if number in seen:
                stats.duplicate_numbers += 1
                return None if options.remove_duplicates else row

            seen[number] = None
            return row

        kept = process_in_chunks(rows, handle, chunk_size=self._chunk_size, progress_callback=callback)
        return kept, seen

    @staticmethod
    def _check_empty(result: FilterResult) -> None:
        if not result.rows:
            message = "No rows left after filtering"
        elif not result.export_records:
            message = "No valid phone numbers left to export"
        else:
            return
        LOGGER.warning(message)
        result.warnings.append(EmptyResultWarning(message))


__all__ = ["LeadFilterPipeline", "compile_identifier_patterns"]
