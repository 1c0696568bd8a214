"""
Timezone utility functions for SandLogix.
Handles conversion between UTC and the display timezone (configurable, default Africa/Conakry).
"""

from datetime import datetime, date, timezone
import pytz
from flask import current_app, has_app_context
from typing import Optional, Union

DEFAULT_DISPLAY_TIMEZONE = "Africa/Conakry"


def get_display_timezone() -> str:
    """
    Get the configured display timezone.
    Reads DISPLAY_TIMEZONE from the app config when an app context is active.
    """
    if has_app_context():
        return current_app.config.get('DISPLAY_TIMEZONE', DEFAULT_DISPLAY_TIMEZONE)
    return DEFAULT_DISPLAY_TIMEZONE


def utc_now() -> datetime:
    """
    Get current time in UTC.

    Returns:
        Current datetime in UTC
    """
    return datetime.now(timezone.utc)


def convert_utc_to_display(utc_dt: Union[datetime, str]) -> datetime:
    """
    Convert a UTC datetime to the configured display timezone.

    Args:
        utc_dt: UTC datetime object or ISO string

    Returns:
        Datetime object in the display timezone
    """
    if isinstance(utc_dt, str):
        if utc_dt.endswith('Z'):
            utc_dt = utc_dt[:-1]
        parsed_dt = datetime.fromisoformat(utc_dt)
        if parsed_dt.tzinfo is None:
            parsed_dt = parsed_dt.replace(tzinfo=timezone.utc)
        utc_dt = parsed_dt
    elif utc_dt.tzinfo is None:
        utc_dt = utc_dt.replace(tzinfo=timezone.utc)

    display_tz = pytz.timezone(get_display_timezone())
    return utc_dt.astimezone(display_tz)


def today_in_display_timezone() -> date:
    """Calendar date of 'now' in the display timezone; default for new deliveries and payments."""
    return convert_utc_to_display(utc_now()).date()


def parse_date_string(value: Optional[str]) -> Optional[date]:
    """
    Parse a calendar date as entered on the delivery and payment forms.

    Args:
        value: 'YYYY-MM-DD' (ISO, optionally with a time part), 'DD/MM/YYYY' or 'DD-MM-YYYY'

    Returns:
        date or None for empty input

    Raises:
        ValueError: if the string matches no known format
    """
    if not value:
        return None
    value = value.strip()
    try:
        return datetime.fromisoformat(value.replace('Z', '+00:00')).date()
    except ValueError:
        for fmt in ('%d/%m/%Y', '%d-%m-%Y', '%Y/%m/%d'):
            try:
                return datetime.strptime(value, fmt).date()
            except ValueError:
                continue
    raise ValueError(f"Unable to parse date string: {value}")


def format_datetime_for_display(utc_dt: datetime, fmt: str = "%d/%m/%Y %H:%M") -> str:
    """
    Format a UTC datetime for display in the configured timezone.

    Args:
        utc_dt: UTC datetime object
        fmt: Output format string

    Returns:
        Formatted datetime string in display timezone
    """
    if utc_dt is None:
        return ""
    return convert_utc_to_display(utc_dt).strftime(fmt)
