"""
Input validation functions for the Stock Tracker application.

This module provides the per-field rules applied to raw form text:
- Name (required; must or must not already be in stock)
- Quantity (whole number from 0 up to MAX_QUANTITY)
- Price (number from 0 up to MAX_PRICE with at most two decimal places)

Each validate_* function is pure: it looks only at the text (and, for the
name, at a lookup callable) and returns (is_valid, error_message). They never
raise for malformed input.
"""

from decimal import Decimal, InvalidOperation
from typing import Callable, Optional, Tuple

from .constants import (
    DECIMAL_SEPARATORS,
    ERROR_NAME_REQUIRED,
    ERROR_PRICE_FORMAT,
    ERROR_PRICE_NEGATIVE,
    ERROR_PRICE_REQUIRED,
    ERROR_PRICE_TOO_LARGE,
    ERROR_PRODUCT_EXISTS,
    ERROR_PRODUCT_NOT_FOUND,
    ERROR_QUANTITY_INVALID,
    ERROR_QUANTITY_NEGATIVE,
    ERROR_QUANTITY_NOT_INTEGER,
    ERROR_QUANTITY_REQUIRED,
    MAX_PRICE,
    MAX_QUANTITY,
    MAX_QUANTITY_DIGITS,
    PRICE_PATTERN,
    QUANTITY_PATTERN,
    SIGNED_INTEGER_PATTERN,
    SIGNED_NUMBER_PATTERN,
)


def sanitize_string(value: Optional[str]) -> Optional[str]:
    """
    Sanitize a string value by stripping whitespace and converting empty strings to None.

    Args:
        value: The string value to sanitize

    Returns:
        Sanitized string or None
    """
    if value is None:
        return None
    stripped = value.strip()
    return stripped if stripped else None


def normalize_key(name: Optional[str]) -> str:
    """
    Fold a product name into its lookup key.

    Args:
        name: Product name as typed

    Returns:
        Trimmed, case-folded name ("" for None or blank input)

    Example:
        >>> normalize_key("  Porca Sextavada ")
        'porca sextavada'
    """
    if name is None:
        return ""
    return name.strip().casefold()


def validate_name_text(
    text: Optional[str], name_exists: Callable[[str], bool], must_exist: bool
) -> Tuple[bool, str]:
    """
    Validate the product name field.

    Args:
        text: Raw field text
        name_exists: Returns True when a product with this name is stored
        must_exist: True for forms acting on an existing product (update,
            remove); False for forms creating one (add)

    Returns:
        Tuple of (is_valid, error_message)
    """
    name = sanitize_string(text)
    if name is None:
        return False, ERROR_NAME_REQUIRED

    exists = name_exists(name)
    if must_exist and not exists:
        return False, ERROR_PRODUCT_NOT_FOUND
    if not must_exist and exists:
        return False, ERROR_PRODUCT_EXISTS
    return True, ""


def validate_quantity_text(text: Optional[str]) -> Tuple[bool, str]:
    """
    Validate the quantity field: digits only, zero up to MAX_QUANTITY.

    Args:
        text: Raw field text

    Returns:
        Tuple of (is_valid, error_message)
    """
    quantity = (text or "").strip()
    if not quantity:
        return False, ERROR_QUANTITY_REQUIRED

    if SIGNED_INTEGER_PATTERN.match(quantity) and quantity.startswith("-") and quantity.strip("-0"):
        return False, ERROR_QUANTITY_NEGATIVE

    if not QUANTITY_PATTERN.match(quantity):
        return False, ERROR_QUANTITY_NOT_INTEGER

    # Length first: int() refuses very long digit strings
    digits = quantity.lstrip("0")
    if len(digits) > MAX_QUANTITY_DIGITS or int(digits or "0") > MAX_QUANTITY:
        return False, ERROR_QUANTITY_INVALID

    return True, ""


def validate_price_text(text: Optional[str]) -> Tuple[bool, str]:
    """
    Validate the price field: 99, 99.9 or 99,99 style, zero up to MAX_PRICE.

    Args:
        text: Raw field text

    Returns:
        Tuple of (is_valid, error_message)
    """
    price = (text or "").strip()
    if not price:
        return False, ERROR_PRICE_REQUIRED

    if SIGNED_NUMBER_PATTERN.match(price) and _to_decimal(price) < 0:
        return False, ERROR_PRICE_NEGATIVE

    if not PRICE_PATTERN.match(price):
        return False, ERROR_PRICE_FORMAT

    if _to_decimal(price) > MAX_PRICE:
        return False, ERROR_PRICE_TOO_LARGE

    return True, ""


def parse_quantity(text: str) -> int:
    """
    Parse quantity text that passed validate_quantity_text.

    Raises:
        ValueError: If the text is not a valid quantity
    """
    is_valid, error = validate_quantity_text(text)
    if not is_valid:
        raise ValueError(error)
    return int(text.strip())


def parse_price(text: str) -> Decimal:
    """
    Parse price text that passed validate_price_text.

    Both '.' and ',' are accepted as the decimal separator.

    Raises:
        ValueError: If the text is not a valid price

    Example:
        >>> parse_price("12,5")
        Decimal('12.5')
    """
    is_valid, error = validate_price_text(text)
    if not is_valid:
        raise ValueError(error)
    return _to_decimal(text.strip())


def parse_min_quantity(text: Optional[str]) -> int:
    """
    Parse the minimum-quantity list filter.

    Blank or unreadable text means no minimum, so it becomes 0 instead of
    raising.

    Example:
        >>> parse_min_quantity("abc")
        0
    """
    value = (text or "").strip()
    if not SIGNED_INTEGER_PATTERN.match(value) or len(value.lstrip("+-").lstrip("0")) > MAX_QUANTITY_DIGITS:
        return 0
    return int(value)


def _to_decimal(text: str) -> Decimal:
    for separator in DECIMAL_SEPARATORS:
        text = text.replace(separator, ".")
    try:
        return Decimal(text)
    except InvalidOperation as e:
        raise ValueError(f"Not a number: {text!r}") from e
