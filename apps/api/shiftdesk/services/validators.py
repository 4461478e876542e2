from datetime import date, time
from typing import Any, Optional

from shiftdesk.core.errors import ValidationError


def parse_id(value: Any, field: str = "id") -> int:
    """Accept ints and numeric strings; anything else is a ValidationError."""
    if isinstance(value, bool):
        raise ValidationError(f"Invalid {field}", field=field)
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid {field}", field=field)


def parse_date(value: Any, field: str) -> date:
    if value is None or value == "":
        raise ValidationError(f"{field} is required", field=field)
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError:
        raise ValidationError(f"Invalid {field}. Use YYYY-MM-DD", field=field)


def parse_optional_date(value: Any, field: str) -> Optional[date]:
    if value is None or value == "":
        return None
    return parse_date(value, field)


def parse_time(value: Any, field: str) -> time:
    if value is None or value == "":
        raise ValidationError(f"{field} is required", field=field)
    if isinstance(value, time):
        return value
    try:
        return time.fromisoformat(str(value).strip())
    except ValueError:
        raise ValidationError(f"Invalid {field}. Use HH:MM or HH:MM:SS", field=field)


def validate_date_range(start: date, end: date) -> None:
    # single-day ranges are rejected: start must be strictly before end
    if start >= end:
        raise ValidationError(
            "End date must be after start date",
            field="end_date",
            details={"start_date": start.isoformat(), "end_date": end.isoformat()},
        )


def format_time(t: time) -> str:
    return t.strftime("%H:%M:%S")
