"""
Input validation functions for the Recipe Costing Engine.

This module provides validation functions for numeric inputs handed to the
engine by its callers:
- Decimal coercion (int, float, str, Decimal)
- Positive / non-negative checks
- Density and quantity range checks

Validators return ``(is_valid, error_message)`` tuples; ``require_decimal``
raises ``ValidationError`` for use in value-object constructors.
"""

from decimal import Decimal, InvalidOperation
from typing import Any, Optional, Tuple

from src.services.exceptions import ValidationError

from .constants import (
    ERROR_INVALID_NON_NEGATIVE,
    ERROR_INVALID_NUMBER,
    ERROR_INVALID_POSITIVE,
    ERROR_TOO_LARGE,
    MAX_DENSITY,
    MAX_QUANTITY,
)


def parse_decimal(value: Any) -> Optional[Decimal]:
    """
    Convert a numeric value to Decimal without binary float noise.

    Args:
        value: int, float, str or Decimal

    Returns:
        Decimal value, or None if the value is not a finite number
    """
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            return None
    if not result.is_finite():
        return None
    return result


def require_decimal(value: Any, field_name: str = "Field") -> Decimal:
    """
    Convert a value to Decimal or raise.

    Raises:
        ValidationError: If the value is not a finite number
    """
    result = parse_decimal(value)
    if result is None:
        raise ValidationError([f"{field_name}: {ERROR_INVALID_NUMBER}"])
    return result


def validate_positive_number(value: Any, field_name: str = "Field") -> Tuple[bool, str]:
    """
    Validate that a value is a positive number (> 0).

    Args:
        value: The value to validate
        field_name: Name of the field for error messages

    Returns:
        Tuple of (is_valid, error_message)
    """
    num_value = parse_decimal(value)
    if num_value is None:
        return False, f"{field_name}: {ERROR_INVALID_NUMBER}"
    if num_value <= 0:
        return False, f"{field_name}: {ERROR_INVALID_POSITIVE}"
    return True, ""


def validate_non_negative_number(value: Any, field_name: str = "Field") -> Tuple[bool, str]:
    """
    Validate that a value is a non-negative number (>= 0).

    Args:
        value: The value to validate
        field_name: Name of the field for error messages

    Returns:
        Tuple of (is_valid, error_message)
    """
    num_value = parse_decimal(value)
    if num_value is None:
        return False, f"{field_name}: {ERROR_INVALID_NUMBER}"
    if num_value < 0:
        return False, f"{field_name}: {ERROR_INVALID_NON_NEGATIVE}"
    return True, ""


def validate_quantity(
    quantity: Any, allow_zero: bool = True, field_name: str = "Quantity"
) -> Tuple[bool, str]:
    """
    Validate a usage or pack quantity.

    Args:
        quantity: Value to validate
        allow_zero: Whether to allow zero values
        field_name: Name of the field for error messages

    Returns:
        Tuple of (is_valid, error_message)
    """
    if allow_zero:
        is_valid, error = validate_non_negative_number(quantity, field_name)
    else:
        is_valid, error = validate_positive_number(quantity, field_name)
    if not is_valid:
        return is_valid, error

    if parse_decimal(quantity) > Decimal(str(MAX_QUANTITY)):
        return False, f"{field_name}: {ERROR_TOO_LARGE}"

    return True, ""


def validate_density(density: Any, field_name: str = "Density") -> Tuple[bool, str]:
    """
    Validate a density in grams per milliliter.

    Returns:
        Tuple of (is_valid, error_message)
    """
    is_valid, error = validate_positive_number(density, field_name)
    if not is_valid:
        return is_valid, error

    if parse_decimal(density) > Decimal(str(MAX_DENSITY)):
        return False, f"{field_name}: {ERROR_TOO_LARGE}"

    return True, ""
