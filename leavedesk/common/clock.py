"""Organization-local calendar date."""

from datetime import date, datetime
from zoneinfo import ZoneInfo

from leavedesk.config import settings


def today() -> date:
    """Current date in ``settings.TIMEZONE``."""
    return datetime.now(ZoneInfo(settings.TIMEZONE)).date()
