"""Request validation helpers shared by the pydantic schemas."""

import re
from datetime import date, time
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

TIME_OF_DAY_PATTERN = re.compile(r"^([01]?[0-9]|2[0-3]):[0-5][0-9]$")
PHONE_PATTERN = re.compile(r"^\+[1-9]\d{1,14}$")
LICENSE_PATTERN = re.compile(r"^[A-Za-z0-9]+$")
PASSWORD_PATTERN = re.compile(
    r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[@$!%*?&])[A-Za-z\d@$!%*?&]{8,}$"
)


def parse_time_of_day(value, field_name: str = "time") -> time:
    """
    Parse an "HH:mm" string into a time of day.

    Args:
        value: "HH:mm" string (a time instance is passed through)
        field_name: Name of field for error messages

    Returns:
        time: Parsed time of day

    Raises:
        ValueError: If the value is not a valid HH:mm string
    """
    if isinstance(value, time):
        return value
    if not isinstance(value, str) or not TIME_OF_DAY_PATTERN.match(value.strip()):
        raise ValueError(f"{field_name} must be in HH:mm format")
    hours, minutes = value.strip().split(":")
    return time(int(hours), int(minutes))


def validate_timezone(value: str) -> str:
    """Reject names the IANA database does not know."""
    if not value or not value.strip():
        raise ValueError("Timezone is required")
    try:
        ZoneInfo(value.strip())
    except (ZoneInfoNotFoundError, ValueError):
        raise ValueError(f"Unknown timezone: {value}")
    return value.strip()


def validate_phone_number(phone: str) -> str:
    """Phone numbers are stored in international (E.164) format."""
    if not PHONE_PATTERN.match(phone or ""):
        raise ValueError("Phone number must be in international format")
    return phone


def validate_license_number(value: str) -> str:
    if not LICENSE_PATTERN.match(value or ""):
        raise ValueError("License number must be alphanumeric")
    return value.upper()


def validate_password_strength(password: str) -> str:
    if not PASSWORD_PATTERN.match(password or ""):
        raise ValueError(
            "Password must contain at least 8 characters, one uppercase letter, "
            "one lowercase letter, one number, and one special character"
        )
    return password


def age_on(date_of_birth: date, today: Optional[date] = None) -> int:
    """Full years between date_of_birth and today."""
    today = today or date.today()
    years = today.year - date_of_birth.year
    if (today.month, today.day) < (date_of_birth.month, date_of_birth.day):
        years -= 1
    return years
