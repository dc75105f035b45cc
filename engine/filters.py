"""Filter input canonicalization and display.

A FilterInput is what the user types: size values with units, a MIME
choice and calendar dates. canonicalize() turns it into a byte-denominated
Filter the QueryBuilder can send; to_display() turns a Filter back into
the largest whole-ish unit for redisplay.
"""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Optional, Tuple

from common.constants import DEFAULT_SIZE_UNIT, MIME_TYPE_ALL, SIZE_UNITS
from engine.errors import InvalidFilterError


@dataclass(frozen=True)
class Filter:
    """
    Canonical, server-ready filter. Absent bounds are None, never 0.
    Dates are ISO-8601 calendar dates (YYYY-MM-DD) or full datetimes.
    """
    min_size: Optional[int] = None
    max_size: Optional[int] = None
    mime_type: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None

    def is_empty(self) -> bool:
        return self == EMPTY_FILTER


EMPTY_FILTER = Filter()


@dataclass(frozen=True)
class FilterInput:
    """User-facing filter form state."""
    min_size_value: str = ""
    min_size_unit: str = DEFAULT_SIZE_UNIT
    max_size_value: str = ""
    max_size_unit: str = DEFAULT_SIZE_UNIT
    mime_type: str = ""
    start_date: str = ""
    end_date: str = ""


def size_to_bytes(value: str, unit: str) -> Optional[int]:
    """
    Convert a value/unit pair to bytes, rounding half up.

    Args:
        value: Number as typed by the user ("" for no bound)
        unit: One of Bytes, KB, MB, GB

    Returns:
        Byte count, or None when value is empty

    Raises:
        InvalidFilterError: If value is not a finite number or unit is unknown
    """
    value = value.strip()
    if not value:
        return None
    if unit not in SIZE_UNITS:
        raise InvalidFilterError(f"Unknown size unit: {unit!r}")

    try:
        amount = Decimal(value)
    except InvalidOperation:
        raise InvalidFilterError(f"Size must be a number, got {value!r}")
    if not amount.is_finite():
        raise InvalidFilterError(f"Size must be a number, got {value!r}")

    return int((amount * SIZE_UNITS[unit]).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def bytes_to_size(size: Optional[int]) -> Tuple[str, str]:
    """
    Render a byte bound as (value, unit) for redisplay.

    Picks the largest of GB, MB, KB the value reaches, formats to two
    decimals and drops a trailing ".00". Below 1 KB the unit is Bytes.
    No bound (or 0) renders as an empty value in the default unit.
    """
    if not size:
        return "", DEFAULT_SIZE_UNIT

    for unit in ("GB", "MB", "KB"):
        limit = SIZE_UNITS[unit]
        if size >= limit:
            text = f"{size / limit:.2f}"
            if text.endswith(".00"):
                text = text[:-3]
            return text, unit

    return str(size), "Bytes"


def _normalize_date(value: str, field: str) -> Optional[str]:
    value = value.strip()
    if not value:
        return None
    try:
        if "T" in value:
            datetime.fromisoformat(value.replace("Z", "+00:00"))
        else:
            date.fromisoformat(value)
    except ValueError:
        raise InvalidFilterError(f"{field} must be an ISO date (YYYY-MM-DD), got {value!r}")
    return value


def canonicalize(filter_input: FilterInput) -> Filter:
    """
    Turn form state into a canonical Filter.

    Raises:
        InvalidFilterError: On non-numeric sizes, unknown units or bad dates
    """
    mime_type = filter_input.mime_type.strip()
    if mime_type == MIME_TYPE_ALL:
        mime_type = ""

    return Filter(
        min_size=size_to_bytes(filter_input.min_size_value, filter_input.min_size_unit),
        max_size=size_to_bytes(filter_input.max_size_value, filter_input.max_size_unit),
        mime_type=mime_type or None,
        start_date=_normalize_date(filter_input.start_date, "start date"),
        end_date=_normalize_date(filter_input.end_date, "end date"),
    )


def to_display(filter_: Filter) -> FilterInput:
    """Inverse of canonicalize up to unit choice and rounding."""
    min_value, min_unit = bytes_to_size(filter_.min_size)
    max_value, max_unit = bytes_to_size(filter_.max_size)
    return FilterInput(
        min_size_value=min_value,
        min_size_unit=min_unit,
        max_size_value=max_value,
        max_size_unit=max_unit,
        mime_type=filter_.mime_type or "",
        start_date=filter_.start_date or "",
        end_date=filter_.end_date or "",
    )
