"""Wall-clock helpers in the configured timezone."""

from __future__ import annotations

from datetime import datetime
from zoneinfo import ZoneInfo

from app.config import settings


def current_year(tz_name: str | None = None) -> int:
    """Calendar year right now in ``tz_name`` (default: settings.default_tz)."""
    return datetime.now(ZoneInfo(tz_name or settings.default_tz)).year
