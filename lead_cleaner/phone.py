"""Brazilian phone number cleaning, formatting and validation.

Every function here is pure: it accepts a raw string (``None`` is treated as
empty) and never raises on malformed input.
"""
from __future__ import annotations

import logging
import re
from types import MappingProxyType
from typing import FrozenSet, Iterable, Mapping, Optional, Tuple

from .models import PhoneDiagnosis, PhoneValidationIssue

LOGGER = logging.getLogger(__name__)

COUNTRY_CODE = "55"
CANONICAL_LENGTH = 13

_NON_DIGITS = re.compile(r"\D", re.ASCII)

_DDDS_BY_STATE: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("SP", ("11", "12", "13", "14", "15", "16", "17", "18", "19")),
    ("RJ", ("21", "22", "24")),
    ("ES", ("27", "28")),
    ("MG", ("31", "32", "33", "34", "35", "37", "38")),
    ("PR", ("41", "42", "43", "44", "45", "46")),
    ("SC", ("47", "48", "49")),
    ("RS", ("51", "53", "54", "55")),
    ("DF/GO", ("61",)),
    ("GO", ("62", "64")),
    ("TO", ("63",)),
    ("MT", ("65", "66")),
    ("MS", ("67",)),
    ("AC", ("68",)),
    ("RO", ("69",)),
    ("BA", ("71", "73", "74", "75", "77")),
    ("SE", ("79",)),
    ("PE", ("81", "87")),
    ("AL", ("82",)),
    ("PB", ("83",)),
    ("RN", ("84",)),
    ("CE", ("85", "88")),
    ("PI", ("86", "89")),
    ("PA", ("91", "93", "94")),
    ("AM", ("92", "97")),
    ("RR", ("95",)),
    ("AP", ("96",)),
    ("MA", ("98", "99")),
)

DDD_TO_STATE: Mapping[str, str] = MappingProxyType(
    {ddd: state for state, codes in _DDDS_BY_STATE for ddd in codes}
)
VALID_DDDS: FrozenSet[str] = frozenset(DDD_TO_STATE)

_SEQUENTIAL_SUBSCRIBERS: FrozenSet[str] = frozenset(
    {"0123456789", "1234567890", "9876543210", "0987654321"}
)


def clean_digits(raw: Optional[str]) -> str:
    """Strip every non-digit character from ``raw``."""

    if not raw:
        return ""
    return _NON_DIGITS.sub("", str(raw))


def format_phone_number(raw: Optional[str]) -> str:
    """Normalise ``raw`` towards ``55`` + DDD + subscriber number.

    The branches are evaluated in order and only the first one that applies
    fires. Nine digit inputs carry no DDD and are returned untouched; anything
    longer than 13 digits is truncated.
    """

    digits = clean_digits(raw)
    if not digits:
        return ""

    length = len(digits)
    if length == 11 and not digits.startswith(COUNTRY_CODE):
        digits = COUNTRY_CODE + digits
    elif length == 9:
        return digits
    elif length == 10 and not digits.startswith(COUNTRY_CODE):
        digits = COUNTRY_CODE + digits
    elif not digits.startswith(COUNTRY_CODE) and length >= 10:
        digits = COUNTRY_CODE + digits

    return digits[:CANONICAL_LENGTH]


def _is_repeated(subscriber: str) -> bool:
    return len(set(subscriber)) == 1


def _is_sequential(subscriber: str) -> bool:
    return subscriber in _SEQUENTIAL_SUBSCRIBERS


def is_valid_brazilian_number(value: Optional[str]) -> bool:
    """Return whether ``value`` looks like a dialable Brazilian number.

    Accepts the canonical 13 digit form (``55`` + DDD + subscriber) as well as
    the 11 digit DDD + mobile and 10 digit DDD + landline shorthands.
    """

    digits = clean_digits(value)
    length = len(digits)

    if length == CANONICAL_LENGTH and digits.startswith(COUNTRY_CODE):
        ddd, subscriber = digits[2:4], digits[4:]
        if ddd not in VALID_DDDS:
            return False
        if len(subscriber) == 9 and not subscriber.startswith("9"):
            return False
        if _is_repeated(subscriber) or _is_sequential(subscriber):
            return False
        return True

    if length == 11:
        return digits[:2] in VALID_DDDS and digits[2] == "9"

    if length == 10:
        return digits[:2] in VALID_DDDS

    return False


def validate_brazilian_phone_number(value: Optional[str]) -> PhoneValidationIssue:
    """Report the first problem with ``value`` as a canonical 13 digit number.

    Unlike :func:`is_valid_brazilian_number` the 10 and 11 digit shorthands
    are rejected with ``WRONG_LENGTH``.
    """

    if not value or not value.strip():
        return PhoneValidationIssue.EMPTY

    digits = clean_digits(value)
    if len(digits) != CANONICAL_LENGTH or not digits.startswith(COUNTRY_CODE):
        return PhoneValidationIssue.WRONG_LENGTH

    ddd, subscriber = digits[2:4], digits[4:]
    if ddd not in VALID_DDDS:
        return PhoneValidationIssue.INVALID_DDD
    if _is_repeated(subscriber):
        return PhoneValidationIssue.REPEATED_PATTERN
    if _is_sequential(subscriber):
        return PhoneValidationIssue.SEQUENTIAL_PATTERN
    if len(subscriber) == 9 and not subscriber.startswith("9"):
        return PhoneValidationIssue.INVALID_MOBILE_PREFIX
    return PhoneValidationIssue.NONE


def format_phone_number_for_display(value: Optional[str]) -> str:
    """Render ``5511987654321`` as ``+55 (11) 98765-4321``."""

    try:
        digits = clean_digits(value)
        if not digits:
            return value or ""

        length = len(digits)
        if length == CANONICAL_LENGTH and digits.startswith(COUNTRY_CODE):
            return f"+{digits[:2]} ({digits[2:4]}) {digits[4:9]}-{digits[9:]}"
        if length == 11:
            return f"({digits[:2]}) {digits[2:7]}-{digits[7:]}"
        if length == 9:
            return f"{digits[:5]}-{digits[5:]}"
        return digits
    except (TypeError, ValueError):  # pragma: no cover
        LOGGER.debug("Could not format %r for display", value)
        return value if isinstance(value, str) else ""


def get_state_from_phone_number(value: Optional[str]) -> Optional[str]:
    """Return the state abbreviation for a ``55``-prefixed number, if known."""

    digits = clean_digits(value)
    if len(digits) >= 4 and digits.startswith(COUNTRY_CODE):
        return DDD_TO_STATE.get(digits[2:4])
    return None


def describe_phone_number(value: Optional[str]) -> PhoneDiagnosis:
    """Run every engine function over ``value`` and collect the answers."""

    raw = value or ""
    formatted = format_phone_number(raw)
    return PhoneDiagnosis(
        raw=raw,
        digits=clean_digits(raw),
        formatted=formatted,
        display=format_phone_number_for_display(formatted or raw),
        state=get_state_from_phone_number(formatted),
        is_valid=bool(formatted) and is_valid_brazilian_number(formatted),
        issue=validate_brazilian_phone_number(formatted or raw),
    )


def count_valid_numbers(values: Iterable[Optional[str]]) -> int:
    return sum(1 for value in values if value and is_valid_brazilian_number(value))


__all__ = [
    "COUNTRY_CODE",
    "CANONICAL_LENGTH",
    "DDD_TO_STATE",
    "VALID_DDDS",
    "clean_digits",
    "format_phone_number",
    "is_valid_brazilian_number",
    "validate_brazilian_phone_number",
    "format_phone_number_for_display",
    "get_state_from_phone_number",
    "describe_phone_number",
    "count_valid_numbers",
]
