"""
Timezone utilities for bucketing UTC timestamps by local hour and day.

Supports auto-detection of system timezone and manual timezone selection.
Entries keep UTC timestamps; conversion happens only when bucketing.
"""
import os
from datetime import datetime, tzinfo
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


def _is_valid_tz(tz_name: str) -> bool:
    """Check if timezone name is valid."""
    try:
        ZoneInfo(tz_name)
        return True
    except (ZoneInfoNotFoundError, ValueError):
        return False


def get_system_timezone() -> str:
    """
    Get the system's timezone name.

    Returns:
        IANA timezone name (e.g., 'Asia/Seoul', 'America/New_York'), 'UTC' as last resort
    """
    tz_env = os.environ.get("TZ")
    if tz_env and _is_valid_tz(tz_env):
        return tz_env

    # Debian-style systems
    try:
        with open("/etc/timezone", "r") as f:
            tz_file = f.read().strip()
            if tz_file and _is_valid_tz(tz_file):
                return tz_file
    except OSError:
        pass

    local_tz = datetime.now().astimezone().tzinfo
    if local_tz is not None and hasattr(local_tz, "key"):
        return local_tz.key

    tz_str = str(local_tz)
    if _is_valid_tz(tz_str):
        return tz_str

    return "UTC"


def get_user_timezone() -> str:
    """
    Get the user's configured timezone.

    Returns:
        IANA timezone name; 'auto' resolves to the system timezone
    """
    from termlytic.config.user_config import get_timezone_setting

    tz_setting = get_timezone_setting()
    if tz_setting == "auto" or not _is_valid_tz(tz_setting):
        return get_system_timezone()
    return tz_setting


def resolve_timezone(tz_name: Optional[str] = None) -> tzinfo:
    """
    Turn a timezone name into a tzinfo.

    Args:
        tz_name: IANA name, 'auto', or None for the user's configured timezone

    Returns:
        ZoneInfo instance
    """
    if tz_name is None:
        tz_name = get_user_timezone()
    elif tz_name == "auto":
        tz_name = get_system_timezone()

    try:
        return ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError):
        return ZoneInfo("UTC")


def convert_to_local(utc_datetime: datetime, tz: tzinfo) -> datetime:
    """
    Convert a UTC datetime to the given timezone.

    Naive datetimes are assumed to be UTC.

    Args:
        utc_datetime: Datetime in UTC (timezone-aware or naive)
        tz: Target timezone

    Returns:
        Datetime in the target timezone
    """
    if utc_datetime.tzinfo is None:
        utc_datetime = utc_datetime.replace(tzinfo=ZoneInfo("UTC"))
    return utc_datetime.astimezone(tz)


def validate_timezone(tz_name: str) -> bool:
    """
    Check if a timezone name is valid.

    Args:
        tz_name: IANA timezone name to validate

    Returns:
        True if valid (or 'auto'), False otherwise
    """
    if tz_name == "auto":
        return True
    return _is_valid_tz(tz_name)
