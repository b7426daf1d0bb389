from datetime import date, datetime
from typing import Optional
from zoneinfo import ZoneInfo

from app.core.config import settings


def local_today(tz_name: Optional[str] = None) -> date:
    """
    Calendar date used for every "today" boundary (follow-ups, expiry, progress).
    Falls back to the server's local date when no timezone is configured.
    """
    tz_name = tz_name or settings.APP_TIMEZONE
    if tz_name:
        return datetime.now(ZoneInfo(tz_name)).date()
    return date.today()
