"""
Validation functions for configuration values.

Each validator returns the normalized value or raises ValidationError with
the offending field name attached.
"""

from typing import Any, Dict, List, Optional

from .exceptions import ValidationError


def validate_positive_float(
    value: Any,
    min_value: float = 0.0,
    max_value: Optional[float] = None,
    field_name: str = "value"
) -> float:
    """
    Validate that a value is a positive float.

    Args:
        value: Value to validate
        min_value: Minimum allowed value (inclusive)
        max_value: Maximum allowed value (inclusive), None for no limit
        field_name: Name of the field being validated

    Returns:
        Validated float value

    Raises:
        ValidationError: If validation fails
    """
    if isinstance(value, bool):
        raise ValidationError(
            f"{field_name} must be a valid number, got {value}",
            field_name=field_name,
            value=value
        )
    try:
        float_value = float(value)
    except (ValueError, TypeError):
        raise ValidationError(
            f"{field_name} must be a valid number, got {value}",
            field_name=field_name,
            value=value
        )
    if float_value < min_value:
        raise ValidationError(
            f"{field_name} must be >= {min_value}, got {float_value}",
            field_name=field_name,
            value=value
        )
    if max_value is not None and float_value > max_value:
        raise ValidationError(
            f"{field_name} must be <= {max_value}, got {float_value}",
            field_name=field_name,
            value=value
        )
    return float_value


def validate_non_empty_string(value: Any, field_name: str = "value") -> str:
    """Validate that a value is a string with visible content."""
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(
            f"{field_name} must be a non-empty string",
            field_name=field_name,
            value=value
        )
    return value


def validate_string_list(value: Any, field_name: str = "value") -> List[str]:
    """
    Validate a list of strings. A bare string is accepted as a one-item list.
    """
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ValidationError(
            f"{field_name} must be a list of strings, got {value!r}",
            field_name=field_name,
            value=value
        )
    return list(value)


def validate_string_mapping(value: Any, field_name: str = "value") -> Dict[str, str]:
    """Validate a table whose keys and values are all strings."""
    if not isinstance(value, dict):
        raise ValidationError(
            f"{field_name} must be a table, got {type(value).__name__}",
            field_name=field_name,
            value=value
        )
    for key, item in value.items():
        if not isinstance(item, str):
            raise ValidationError(
                f"{field_name}.{key} must be a string, got {item!r}",
                field_name=f"{field_name}.{key}",
                value=item
            )
    return dict(value)


def validate_enum_choice(
    value: Any,
    valid_choices: List[str],
    field_name: str = "value",
) -> str:
    """
    Validate that a value is one of the allowed choices.

    Args:
        value: Value to validate
        valid_choices: List of allowed choices
        field_name: Name of the field being validated

    Returns:
        The validated choice as a string

    Raises:
        ValidationError: If value is not in choices
    """
    str_value = str(value)

    if str_value not in valid_choices:
        raise ValidationError(
            f"{field_name} must be one of {valid_choices}, got {value}",
            field_name=field_name,
            value=value
        )
    return str_value
