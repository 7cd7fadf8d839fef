"""Date parsing utilities."""

import re
from datetime import date

from sentiment_api.domain.exceptions import InvalidArgumentError

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def validate_date(value: str, field: str = "date") -> str:
    """Validate a YYYY-MM-DD date string.

    Args:
        value: Date string
        field: Field name used in the error

    Returns:
        The unchanged date string

    Raises:
        InvalidArgumentError: If the string is not a real YYYY-MM-DD date
    """
    if not isinstance(value, str) or not _ISO_DATE.match(value):
        raise InvalidArgumentError(
            f"Invalid {field} format: {value!r}. Use YYYY-MM-DD", field=field, value=value
        )
    try:
        date.fromisoformat(value)
    except ValueError as e:
        raise InvalidArgumentError(f"Invalid {field}: {e}", field=field, value=value) from e
    return value


def validate_date_range(start_date: str, end_date: str) -> tuple[str, str]:
    """Validate an inclusive date range.

    Raises:
        InvalidArgumentError: On malformed dates or start_date > end_date
    """
    validate_date(start_date, "start_date")
    validate_date(end_date, "end_date")
    if start_date > end_date:
        raise InvalidArgumentError(
            "start_date must be before or equal to end_date",
            field="start_date",
            value=start_date,
        )
    return start_date, end_date
