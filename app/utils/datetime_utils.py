"""시간 처리 유틸리티 모듈.

Datetime helpers. All timestamps are stored as timezone-aware UTC;
SQLite hands them back naive, so readers normalise through `as_utc`.
"""

from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """naive datetime은 UTC로 간주합니다 (Treat naive datetimes as UTC)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def week_start(value: datetime, tz: ZoneInfo) -> date:
    """주어진 시각이 속한 주의 월요일 날짜 (Monday of the week containing `value` in `tz`)."""
    local_day: date = as_utc(value).astimezone(tz).date()
    return local_day - timedelta(days=local_day.weekday())
