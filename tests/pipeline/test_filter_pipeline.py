from __future__ import annotations

import copy
from datetime import date, datetime

import pytest

from lead_cleaner.exceptions import EmptyResultWarning, InputParseError
from lead_cleaner.models import DateRange, FilterOptions
from lead_cleaner.pipeline import LeadFilterPipeline, compile_identifier_patterns


def _names(rows):
    return [row["Nome"] for row in rows]


def test_no_options_keeps_every_row(lead_rows) -> None:
    result = LeadFilterPipeline().apply(lead_rows, FilterOptions())

    assert result.rows == lead_rows
    assert result.ok
    assert result.stats.as_dict() == {
        "total_records": 5,
        "filtered_records": 5,
        "invalid_numbers": 0,
        "duplicate_numbers": 0,
        "valid_phone_numbers": 3,
    }
    assert result.phone_numbers == ["5511987654321", "5562982221100"]
    assert result.warnings == []


def test_full_cleaning_pass(lead_rows) -> None:
    options = FilterOptions(
        remove_duplicates=True,
        format_numbers=True,
        remove_invalid=True,
        remove_empty=True,
    )

    result = LeadFilterPipeline().apply(lead_rows, options)

    assert _names(result.rows) == ["Maria da Silva", "JOÃO PEREIRA"]
    assert [row["Celular"] for row in result.rows] == ["5511987654321", "5562982221100"]
    assert [row["Telefone"] for row in result.rows] == ["", ""]
    assert result.stats.total_records == 5
    assert result.stats.filtered_records == 2
    assert result.stats.invalid_numbers == 1
    assert result.stats.duplicate_numbers == 1
    assert result.stats.valid_phone_numbers == 2


def test_duplicate_detection_after_formatting() -> None:
    rows = [{"Celular": "5511987654321"}, {"Celular": "11987654321"}]
    options = FilterOptions(format_numbers=True, remove_duplicates=True)

    result = LeadFilterPipeline().apply(rows, options)

    assert len(result.rows) == 1
    assert result.stats.duplicate_numbers == 1
    assert result.stats.valid_phone_numbers == 1


def test_formatting_without_removal_only_counts(lead_rows) -> None:
    result = LeadFilterPipeline().apply(lead_rows, FilterOptions(format_numbers=True))

    assert len(result.rows) == 5
    assert result.stats.invalid_numbers == 1
    assert result.stats.duplicate_numbers == 1
    assert result.stats.valid_phone_numbers == 2
    assert result.rows[3]["Celular"] == "5500000000000"
    assert result.rows[4] is lead_rows[4]


def test_input_rows_are_not_modified(lead_rows) -> None:
    snapshot = copy.deepcopy(lead_rows)
    options = FilterOptions(format_numbers=True, remove_duplicates=True, remove_invalid=True)
    pipeline = LeadFilterPipeline()

    first = pipeline.apply(lead_rows, options)
    second = pipeline.apply(lead_rows, options)

    assert lead_rows == snapshot
    assert first.rows == second.rows
    assert first.stats == second.stats


def test_without_formatting_duplicates_compare_raw_values() -> None:
    rows = [
        {"Celular": "11987654321"},
        {"Celular": "(11) 98765-4321"},
        {"Celular": "11987654321"},
    ]

    result = LeadFilterPipeline().apply(rows, FilterOptions(remove_duplicates=True))

    assert result.rows == rows[:2]
    assert result.stats.duplicate_numbers == 1


def test_invalid_numbers_skip_duplicate_tracking() -> None:
    rows = [{"Celular": "123"}, {"Celular": "123"}, {"Celular": "11987654321"}]

    result = LeadFilterPipeline().apply(rows, FilterOptions(remove_duplicates=True))

    assert len(result.rows) == 3
    assert result.stats.invalid_numbers == 2
    assert result.stats.duplicate_numbers == 0
    assert result.stats.valid_phone_numbers == 1


def test_landline_formatting_is_counted_as_invalid() -> None:
    rows = [{"Celular": "", "Telefone": "(11) 3456-7890"}]

    result = LeadFilterPipeline().apply(rows, FilterOptions(format_numbers=True, remove_invalid=True))

    assert result.rows == []
    assert result.stats.invalid_numbers == 1


def test_remove_empty_drops_rows_without_any_phone(lead_rows) -> None:
    result = LeadFilterPipeline().apply(lead_rows, FilterOptions(remove_empty=True))

    assert "Sem Telefone" not in _names(result.rows)
    assert result.stats.filtered_records == 4


def test_identifier_regex_is_case_insensitive_alternation(lead_rows) -> None:
    result = LeadFilterPipeline().apply(lead_rows, FilterOptions(regex_filter="form|site"))

    assert [row["Identificador"] for row in result.rows] == [
        "formulario-home",
        "site-contato",
        "Formulario-Blog",
        "site-landing",
    ]


def test_identifier_regex_example() -> None:
    patterns = compile_identifier_patterns("form|site")

    assert any(pattern.search("formulario-home") for pattern in patterns)
    assert not any(pattern.search("organico") for pattern in patterns)


def test_invalid_regex_is_reported_once_and_skipped(lead_rows) -> None:
    options = FilterOptions(regex_filter="form|(", remove_empty=True)

    result = LeadFilterPipeline().apply(lead_rows, options)

    assert len(result.errors) == 1
    assert isinstance(result.errors[0], InputParseError)
    assert result.errors[0].stage == "regex"
    assert not result.ok
    assert result.stats.filtered_records == 4


def test_compile_identifier_patterns_raises_for_bad_segment() -> None:
    with pytest.raises(InputParseError):
        compile_identifier_patterns("[abc")


@pytest.mark.parametrize(
    "date_range, expected",
    [
        (DateRange(start=date(2024, 1, 1), end=date(2024, 1, 31)), ["Maria da Silva", "JOÃO PEREIRA"]),
        (DateRange(start=date(2024, 1, 16)), ["JOÃO PEREIRA", "Ana"]),
        (DateRange(end=date(2024, 1, 15)), ["Maria da Silva"]),
        (DateRange(start=datetime(2024, 1, 15, 11, 0)), ["JOÃO PEREIRA", "Ana"]),
        (DateRange(start=date(2025, 1, 1)), []),
    ],
)
def test_date_range_filter(lead_rows, date_range, expected) -> None:
    result = LeadFilterPipeline().apply(lead_rows, FilterOptions(date_range=date_range))

    assert _names(result.rows) == expected


def test_date_range_reads_day_first_conversion_dates() -> None:
    rows = [
        {"Nome": "Bia", "Celular": "11987654321", "Data da Conversão": "05/01/2024 10:00"},
        {"Nome": "Caio", "Celular": "11912345678", "Data da Conversão": "01/05/2024 10:00"},
        {"Nome": "Davi", "Celular": "11998887777", "Data da Conversão": "now"},
    ]
    window = DateRange(start=date(2024, 1, 1), end=date(2024, 1, 31))

    result = LeadFilterPipeline().apply(rows, FilterOptions(date_range=window))

    assert _names(result.rows) == ["Bia"]


def test_stages_run_in_order(lead_rows) -> None:
    options = FilterOptions(
        date_range=DateRange(start=date(2024, 1, 1), end=date(2024, 12, 31)),
        regex_filter="organico|site",
        format_numbers=True,
        remove_duplicates=True,
    )

    result = LeadFilterPipeline().apply(lead_rows, options)

    assert _names(result.rows) == ["JOÃO PEREIRA", "Ana"]
    assert result.stats.duplicate_numbers == 0


def test_progress_callback_reports_each_chunk(lead_rows) -> None:
    events = []
    pipeline = LeadFilterPipeline(chunk_size=2, progress_callback=lambda done, total: events.append((done, total)))

    pipeline.apply(lead_rows, FilterOptions(regex_filter="form|site", remove_empty=True))

    assert events == [(2, 5), (4, 5), (5, 5), (2, 4), (4, 4)]


def test_progress_callback_per_call_overrides_default(lead_rows) -> None:
    default_events = []
    call_events = []
    pipeline = LeadFilterPipeline(chunk_size=10, progress_callback=lambda *event: default_events.append(event))

    pipeline.apply(lead_rows, FilterOptions(remove_empty=True), progress_callback=lambda *e: call_events.append(e))

    assert default_events == []
    assert call_events == [(5, 5)]


def test_chunking_preserves_row_order(lead_rows) -> None:
    options = FilterOptions(format_numbers=True)

    small = LeadFilterPipeline(chunk_size=1).apply(lead_rows, options)
    large = LeadFilterPipeline(chunk_size=1000).apply(lead_rows, options)

    assert small.rows == large.rows
    assert _names(small.rows) == _names(lead_rows)


def test_empty_result_warning(lead_rows) -> None:
    result = LeadFilterPipeline().apply(lead_rows, FilterOptions(regex_filter="nada-disso"))

    assert result.rows == []
    assert len(result.warnings) == 1
    assert isinstance(result.warnings[0], EmptyResultWarning)


def test_warning_when_no_number_is_exportable(lead_rows) -> None:
    result = LeadFilterPipeline().apply(lead_rows, FilterOptions(regex_filter="blog"))

    assert len(result.rows) == 1
    assert result.phone_numbers == []
    assert "No valid phone numbers" in str(result.warnings[0])


def test_empty_input_reports_zero_progress() -> None:
    events = []

    result = LeadFilterPipeline(progress_callback=lambda *event: events.append(event)).apply(
        [], FilterOptions(remove_empty=True)
    )

    assert events == [(0, 0)]
    assert result.stats.total_records == 0
    assert result.warnings


def test_invalid_chunk_size() -> None:
    with pytest.raises(ValueError):
        LeadFilterPipeline(chunk_size=0)


def test_filter_options_updated_returns_new_instance() -> None:
    options = FilterOptions()
    updated = options.updated(remove_invalid=True)

    assert updated.remove_invalid
    assert not options.remove_invalid
    assert updated.processes_phones
