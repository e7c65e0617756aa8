"""Derive the deduplicated export set from a collection of lead rows."""
from __future__ import annotations

from typing import Dict, Iterable, List

from ..models import ExportRecord, Row, effective_phone, lead_name
from ..phone import format_phone_number, is_valid_brazilian_number


def extract_export_records(rows: Iterable[Row]) -> List[ExportRecord]:
    """Return one record per distinct valid number, in first-seen order.

    Each row contributes its ``Celular`` (falling back to ``Telefone``). The
    number is formatted before validation, and the record keeps the ``Nome``
    of the first row that produced it.
    """

    records: Dict[str, ExportRecord] = {}
    for row in rows:
        phone = effective_phone(row)
        if not phone:
            continue
        number = format_phone_number(phone)
        if not number or number in records or not is_valid_brazilian_number(number):
            continue
        records[number] = ExportRecord(number=number, name=lead_name(row).strip() or None)
    return list(records.values())


def extract_phone_numbers(rows: Iterable[Row]) -> List[str]:
    """Return the distinct valid formatted numbers found in ``rows``."""

    return [record.number for record in extract_export_records(rows)]


__all__ = ["extract_export_records", "extract_phone_numbers"]
