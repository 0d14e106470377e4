"""Locale-aware number and timestamp normalization.

Scalable Capital exports mix European ("1.234,56") and US ("1,234.56")
number formats depending on the account locale, and split every timestamp
into separate date and time columns. The helpers here turn those strings
into ``Decimal`` values and target-specific timestamp strings.
"""

import logging
from decimal import Decimal, InvalidOperation
from enum import Enum

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


class TimestampStyle(str, Enum):
    """Timestamp layouts required by the target import formats."""

    TRADINGVIEW = "tradingview"  # 2024-01-15 14:30:00
    ISO_UTC = "iso_utc"  # 2024-01-15T14:30:00.000Z


def parse_locale_number(value: str | None) -> Decimal:
    """Parse a number that may use either European or US separators.

    Precedence:
    1. Empty input is zero.
    2. A comma after the last dot is the decimal point ("1.234,56").
    3. A dot after the last comma is the decimal point ("1,234.56").
    4. A single comma without dots is the decimal point ("25,50").
    5. Dots only: when every group after the first has exactly three
       digits the dots are thousands separators ("1.000"), otherwise the
       rightmost dot is the decimal point.
    6. Anything that still is not numeric is zero.
    """
    if not value or not value.strip():
        return ZERO

    normalized = value.strip()
    comma_count = normalized.count(",")
    dot_count = normalized.count(".")
    last_comma = normalized.rfind(",")
    last_dot = normalized.rfind(".")

    if last_comma > last_dot:
        integer_part, fraction = normalized.replace(".", "").rsplit(",", 1)
        normalized = f"{integer_part.replace(',', '')}.{fraction}"
    elif last_dot > last_comma and comma_count > 0:
        normalized = normalized.replace(",", "")
    elif comma_count == 1 and dot_count == 0:
        normalized = normalized.replace(",", ".")
    elif dot_count > 0 and comma_count == 0:
        parts = normalized.split(".")
        if all(len(part) == 3 for part in parts[1:]):
            normalized = "".join(parts)
        else:
            normalized = f"{''.join(parts[:-1])}.{parts[-1]}"

    try:
        result = Decimal(normalized)
    except InvalidOperation:
        logger.debug(f"Could not parse number: {value!r}")
        return ZERO

    if not result.is_finite():
        return ZERO
    return result


def format_timestamp(date: str, time: str | None, style: TimestampStyle) -> str:
    """Join split date/time columns into the layout of a target format.

    No timezone conversion happens: the broker's local time is written as-is
    (and labelled UTC for the ISO layout).
    """
    if not date or not date.strip():
        return ""

    date_part = date.strip()
    time_part = (time or "").strip() or "00:00:00"
    if len(time_part.split(":")) == 2:
        time_part += ":00"

    if style == TimestampStyle.ISO_UTC:
        return f"{date_part}T{time_part}.000Z"
    return f"{date_part} {time_part}"


def format_decimal(value: Decimal) -> str:
    """Render a Decimal without exponent or trailing zeros (25.50 -> "25.5")."""
    if value == ZERO:
        return "0"
    return format(value.normalize(), "f")
