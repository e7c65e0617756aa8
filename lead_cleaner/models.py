"""Data models shared by the phone engine, the filter pipeline and the exporters."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field, replace
from datetime import date
from typing import Dict, List, Mapping, Optional, Union

from .exceptions import EmptyResultWarning, InputParseError

Row = Mapping[str, str]

MOBILE_COLUMN = "Celular"
LANDLINE_COLUMN = "Telefone"
CONVERSION_DATE_COLUMN = "Data da Conversão"
IDENTIFIER_COLUMN = "Identificador"
NAME_COLUMN = "Nome"

DEFAULT_PLACEHOLDER_NAME = "Futuro Aluno UniBF"


# --- Row accessors ---

def _field(row: Row, column: str) -> str:
    value = row.get(column)
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def effective_phone(row: Row) -> str:
    """Return ``Celular`` when it is not blank, otherwise ``Telefone``, otherwise ``""``."""

    mobile = _field(row, MOBILE_COLUMN)
    if mobile.strip():
        return mobile
    landline = _field(row, LANDLINE_COLUMN)
    if landline.strip():
        return landline
    return ""


def has_phone(row: Row) -> bool:
    return bool(effective_phone(row))


def identifier(row: Row) -> str:
    return _field(row, IDENTIFIER_COLUMN)


def conversion_date(row: Row) -> str:
    return _field(row, CONVERSION_DATE_COLUMN).strip()


def lead_name(row: Row) -> str:
    return _field(row, NAME_COLUMN)


def with_formatted_phone(row: Row, number: str) -> Dict[str, str]:
    """Return a copy of ``row`` carrying ``number`` as its only phone."""

    updated = dict(row)
    updated[MOBILE_COLUMN] = number
    updated[LANDLINE_COLUMN] = ""
    return updated


# --- Validation ---

class PhoneValidationIssue(enum.Enum):
    """Outcome of validating a canonical Brazilian phone number."""

    NONE = "Válido"
    EMPTY = "Número vazio"
    WRONG_LENGTH = "Tamanho incorreto"
    INVALID_DDD = "DDD inválido"
    INVALID_MOBILE_PREFIX = "Prefixo móvel inválido"
    SEQUENTIAL_PATTERN = "Padrão sequencial"
    REPEATED_PATTERN = "Padrão repetido"

    @property
    def label(self) -> str:
        return self.value

    @property
    def is_valid(self) -> bool:
        return self is PhoneValidationIssue.NONE


@dataclass(frozen=True)
class PhoneDiagnosis:
    """Everything the phone engine can say about a single input."""

    raw: str
    digits: str
    formatted: str
    display: str
    state: Optional[str]
    is_valid: bool
    issue: PhoneValidationIssue


# --- Filter configuration and results ---

DateBound = Optional[date]


@dataclass(frozen=True)
class DateRange:
    """Inclusive conversion date window. Either bound may be omitted."""

    start: DateBound = None
    end: DateBound = None

    @property
    def is_active(self) -> bool:
        return self.start is not None or self.end is not None


@dataclass(frozen=True)
class FilterOptions:
    """Settings for a single filter pass."""

    remove_duplicates: bool = False
    format_numbers: bool = False
    remove_invalid: bool = False
    remove_empty: bool = False
    date_range: DateRange = field(default_factory=DateRange)
    regex_filter: str = ""

    @property
    def processes_phones(self) -> bool:
        return self.format_numbers or self.remove_duplicates or self.remove_invalid

    def updated(self, **changes: Union[bool, str, DateRange]) -> "FilterOptions":
        """Return a copy with ``changes`` applied, for use between passes."""

        return replace(self, **changes)


@dataclass
class FilterStats:
    """Aggregate counters recomputed on every pass."""

    total_records: int = 0
    filtered_records: int = 0
    invalid_numbers: int = 0
    duplicate_numbers: int = 0
    valid_phone_numbers: int = 0

    def as_dict(self) -> Dict[str, int]:
        return {
            "total_records": self.total_records,
            "filtered_records": self.filtered_records,
            "invalid_numbers": self.invalid_numbers,
            "duplicate_numbers": self.duplicate_numbers,
            "valid_phone_numbers": self.valid_phone_numbers,
        }


@dataclass
class FilterResult:
    """Rows that survived a pass, plus statistics and non-fatal problems."""

    rows: List[Row] = field(default_factory=list)
    stats: FilterStats = field(default_factory=FilterStats)
    errors: List[InputParseError] = field(default_factory=list)
    warnings: List[EmptyResultWarning] = field(default_factory=list)
    export_records: List[ExportRecord] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    @property
    def phone_numbers(self) -> List[str]:
        return [record.number for record in self.export_records]


# --- Export models ---

@dataclass(frozen=True)
class ExportRecord:
    """A deduplicated export number with the name of the first lead that carried it."""

    number: str
    name: Optional[str] = None


EXPORT_FORMATS = ("omnichat", "zenvia", "txt", "rows")


@dataclass(frozen=True)
class ExportSettings:
    """How the cleaned numbers should be serialised."""

    format: str = "omnichat"
    sms_text: str = ""
    include_names: bool = False
    placeholder_name: str = DEFAULT_PLACEHOLDER_NAME
    encoding: str = "utf-8"


__all__ = [
    "Row",
    "MOBILE_COLUMN",
    "LANDLINE_COLUMN",
    "CONVERSION_DATE_COLUMN",
    "IDENTIFIER_COLUMN",
    "NAME_COLUMN",
    "DEFAULT_PLACEHOLDER_NAME",
    "effective_phone",
    "has_phone",
    "identifier",
    "conversion_date",
    "lead_name",
    "with_formatted_phone",
    "PhoneValidationIssue",
    "PhoneDiagnosis",
    "DateRange",
    "FilterOptions",
    "FilterStats",
    "FilterResult",
    "ExportRecord",
    "EXPORT_FORMATS",
    "ExportSettings",
]
