"""Field validators shared across the inventory domain."""

from __future__ import annotations

import re
from typing import Any, Iterable
from urllib.parse import urlparse

from zanobia.errors import BadRequestError, ErrorDetails, ValidationError

_ALPHANUMERIC_NAME = re.compile(r"[A-Za-z0-9_\- ]+", re.ASCII)


def validate_string_length(
    value: str, field: str, min_length: int, max_length: int
) -> ErrorDetails:
    """Check that ``value`` has between ``min_length`` and ``max_length`` characters."""
    if min_length <= len(value) <= max_length:
        return ErrorDetails()
    return ErrorDetails(
        message=f"{field} must be between {min_length} and {max_length} characters",
        field=field,
    )


def validate_id(value: int, field: str) -> ErrorDetails:
    """Check that an identifier is a positive number."""
    if value > 0:
        return ErrorDetails()
    return ErrorDetails(message=f"{field} must be a valid id", field=field)


def validate_id_ptr(value: int | None, field: str) -> ErrorDetails:
    """Check that an optional identifier is present and positive."""
    if value is None:
        return ErrorDetails(message=f"{field} is required", field=field)
    return validate_id(value, field)


def validate_not_zero(value: float, field: str) -> ErrorDetails:
    """Check that a number is not zero."""
    if value != 0:
        return ErrorDetails()
    return ErrorDetails(message=f"{field} cannot be zero", field=field)


def validate_amount_positive(value: float, field: str) -> ErrorDetails:
    """Check that an amount is greater than zero."""
    if value > 0:
        return ErrorDetails()
    return ErrorDetails(message=f"{field} must be positive", field=field)


def validate_alphanumeric_name(value: str, field: str) -> ErrorDetails:
    """Check that a name holds only letters, digits, spaces, '_' and '-'."""
    if _ALPHANUMERIC_NAME.fullmatch(value):
        return ErrorDetails()
    return ErrorDetails(
        message=f"{field} must contain only alphanumeric characters", field=field
    )


def validate_url(value: str | None, field: str) -> ErrorDetails:
    """Check that ``value`` is an absolute http or https URL."""
    if value:
        parsed = urlparse(value)
        if parsed.scheme in ("http", "https") and parsed.netloc:
            return ErrorDetails()
    return ErrorDetails(message=f"{field} must be a valid url", field=field)


def raise_if_invalid(message: str, results: Iterable[ErrorDetails]) -> None:
    """Raise a ValidationError carrying every failed result, if any failed."""
    errors = [result for result in results if result]
    if errors:
        raise ValidationError(message, errors)


def validate_unit(unit: Any) -> None:
    """Validate a unit's name and symbol."""
    raise_if_invalid(
        "invalid unit input",
        [
            validate_string_length(unit.name, "name", 3, 50),
            validate_string_length(unit.symbol, "symbol", 1, 10),
        ],
    )


def validate_unit_conversion(conversion: Any) -> None:
    """Validate that a conversion joins two different units with a positive factor."""
    if conversion.to_unit_id == conversion.from_unit_id:
        raise BadRequestError("Unit and conversion unit cannot be the same")
    if conversion.conversion_factor <= 0:
        raise BadRequestError("Conversion factor must be greater than 0")