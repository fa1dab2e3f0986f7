"""
Utilities Module

Shared helpers for the lunch tracker.

Features:
    - Sequential record IDs (P001, O001, S001, ...)
    - Input validation for names, dates and amounts
    - Currency formatting for display

Functions:
    generate_next_id: Next sequential ID for a prefix, given existing IDs.
    validate_date: Validate a YYYY-MM-DD date string.
    validate_non_empty_string: Validate a non-empty string field.
    validate_amount: Validate a positive whole-number amount.
    format_currency: Format an amount with thousands dots and a currency symbol.
    today: Today's date as a YYYY-MM-DD string.
"""

import re
from datetime import date, datetime
from typing import Iterable, Optional

from lunch_tracker.config import get_settings
from lunch_tracker.exceptions import ValidationError


def generate_next_id(existing_ids: Iterable[str], prefix: str) -> str:
    """
    Generate the next sequential ID for a collection.

    Format: {prefix}001, {prefix}002, ...

    Logic:
        1. Extract the numeric suffix from IDs matching {prefix}### (e.g. P007 -> 7)
        2. Find the highest existing number
        3. Return the next number with a zero-padded 3-digit suffix

    IDs that do not follow the format (e.g. data imported from older exports)
    are ignored, so numbering starts at 001 if none match.

    Args:
        existing_ids: IDs already used in the collection.
        prefix: Single-letter prefix ("P", "O", "S").

    Returns:
        str: Next ID, e.g. "P004".
    """
    max_num = 0
    pattern = re.compile(rf"^{re.escape(prefix)}(\d+)$")

    for existing_id in existing_ids:
        match = pattern.match(existing_id or "")
        if match:
            num = int(match.group(1))
            if num > max_num:
                max_num = num

    return f"{prefix}{max_num + 1:03d}"


def validate_date(date_str: str, field_name: str) -> bool:
    """
    Validate date string format (YYYY-MM-DD).

    Args:
        date_str: Date string to validate.
        field_name: Name of the field for error messages.

    Returns:
        bool: True if valid.

    Raises:
        ValidationError: If date format is invalid.
    """
    try:
        datetime.strptime(date_str, "%Y-%m-%d")
        return True
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be in YYYY-MM-DD format, got: {date_str}")


def validate_non_empty_string(value: str, field_name: str) -> bool:
    """
    Validate that a string is non-empty.

    Raises:
        ValidationError: If string is empty or not a string.
    """
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field_name} must be a non-empty string")
    return True


def validate_amount(value, field_name: str) -> bool:
    """
    Validate that a value is a positive whole number of currency units.

    bool is rejected even though it is an int subclass.

    Raises:
        ValidationError: If the value is not a positive int.
    """
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValidationError(f"{field_name} must be a positive whole number, got: {value}")
    return True


def format_currency(amount: int, symbol: Optional[str] = None) -> str:
    """
    Format a whole-unit amount for display.

    Uses dots as thousands separators and no decimals, e.g. "40.000 ₫".

    Args:
        amount: The amount to format.
        symbol: Currency symbol (default: settings.CURRENCY_SYMBOL).

    Returns:
        str: Formatted string.
    """
    if symbol is None:
        symbol = get_settings().CURRENCY_SYMBOL
    sign = "-" if amount < 0 else ""
    grouped = f"{abs(round(amount)):,}".replace(",", ".")
    return f"{sign}{grouped} {symbol}"


def today() -> str:
    """Return today's date as YYYY-MM-DD."""
    return date.today().isoformat()
