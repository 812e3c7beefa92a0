"""Timestamp helpers in the display timezone (Pacific by default)"""
from datetime import datetime
from typing import Optional
from zoneinfo import ZoneInfo

from vendor_intake.config import get_settings

PACIFIC_TZ = "America/Los_Angeles"


def _zone(tz_name: Optional[str] = None) -> ZoneInfo:
    return ZoneInfo(tz_name or get_settings().display_timezone or PACIFIC_TZ)


def now_local(tz_name: Optional[str] = None) -> datetime:
    """Current time in the display timezone, DST handled by zoneinfo"""
    return datetime.now(_zone(tz_name))


def format_timestamp(moment: datetime, tz_name: Optional[str] = None) -> str:
    """Example: "2025-10-07 17:30:45 PDT" """
    return moment.astimezone(_zone(tz_name)).strftime("%Y-%m-%d %H:%M:%S %Z")


def format_readable(moment: datetime, tz_name: Optional[str] = None) -> str:
    """Example: "October 7, 2025 5:30:45 PM PDT" """
    local = moment.astimezone(_zone(tz_name))
    return f"{local.strftime('%B')} {local.day}, {local.year} {local.strftime('%I:%M:%S %p %Z').lstrip('0')}"


def local_timestamp(tz_name: Optional[str] = None) -> str:
    return format_timestamp(now_local(tz_name), tz_name)


def local_readable(tz_name: Optional[str] = None) -> str:
    return format_readable(now_local(tz_name), tz_name)
